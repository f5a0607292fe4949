"""Assignment worker with at-least-once delivery and retry logic.

Consumes plan assignment events from a Redis list:
1. Moves the oldest event to a processing list with `LMOVE` (atomic claim)
2. Runs the grocery list agent for (plan_id, customer_id)
3. Removes the event from the processing list on success
4. On failure re-queues with attempts + 1, or dead-letters after MAX_ATTEMPTS

Events found in the processing list at startup were claimed by a worker that
died mid-flight and are put back on the queue. Replays are harmless because
generation is idempotent per (plan, customer).

Usage:
    python -m grocerygen.worker
"""

import json
import logging
import sys
import time
import uuid
from datetime import datetime, timezone
from typing import Optional

from redis import Redis
from redis.exceptions import RedisError

from .agents.grocery_agent import GenerationResult, GroceryListAgent
from .db import init_engine, session_scope
from .infra.grocery_store import SqlGroceryListGateway
from .infra.redis_client import get_sync_redis
from .services.feature_flags import RedisFeatureFlags
from .services.meal_plans import MealPlanRepository
from .settings import settings

logger = logging.getLogger("grocerygen.worker")

WORKER_ID = f"worker-{uuid.uuid4().hex[:8]}"
MAX_ATTEMPTS = settings.worker_max_attempts
POLL_INTERVAL = settings.worker_poll_interval


def processing_key(queue_key: str) -> str:
    return f"{queue_key}:processing"


def dead_letter_key(queue_key: str) -> str:
    return f"{queue_key}:dead"


def enqueue_assignment(
    redis: Redis,
    plan_id: str,
    customer_id: str,
    *,
    attempts: int = 0,
    queue_key: Optional[str] = None,
) -> dict:
    """Push an assignment event. Newest on the left, consumed from the right."""
    event = {
        "plan_id": plan_id,
        "customer_id": customer_id,
        "enqueued_at": datetime.now(timezone.utc).isoformat(),
        "attempts": attempts,
    }
    redis.lpush(queue_key or settings.assignment_queue_key, json.dumps(event))
    return event


def claim_event(redis: Redis, queue_key: Optional[str] = None) -> Optional[str]:
    queue_key = queue_key or settings.assignment_queue_key
    return redis.lmove(queue_key, processing_key(queue_key), "RIGHT", "LEFT")


def requeue_stale(redis: Redis, queue_key: Optional[str] = None) -> int:
    """Return every event left in the processing list to the queue."""
    queue_key = queue_key or settings.assignment_queue_key
    moved = 0
    while redis.lmove(processing_key(queue_key), queue_key, "RIGHT", "RIGHT") is not None:
        moved += 1
    if moved:
        logger.warning(f"[{WORKER_ID}] Re-queued {moved} unfinished assignment event(s)")
    return moved


def build_agent(db, redis: Redis) -> GroceryListAgent:
    plans = MealPlanRepository(db)
    agent = GroceryListAgent(RedisFeatureFlags(redis), plans, SqlGroceryListGateway(db))
    agent.register()
    return agent


def process_event(raw: str, redis: Redis, session_factory=None) -> GenerationResult:
    event = json.loads(raw)
    with session_scope(session_factory) as db:
        agent = build_agent(db, redis)
        return agent.on_assignment(event["plan_id"], event["customer_id"])


def handle_failure(redis: Redis, raw: str, error: Exception, queue_key: Optional[str] = None) -> None:
    queue_key = queue_key or settings.assignment_queue_key
    try:
        event = json.loads(raw)
    except ValueError:
        logger.error(f"[{WORKER_ID}] Dead-lettering malformed event {raw!r}")
        pipe = redis.pipeline()
        pipe.lpush(dead_letter_key(queue_key), raw)
        pipe.lrem(processing_key(queue_key), 1, raw)
        pipe.execute()
        return

    event["attempts"] = int(event.get("attempts", 0)) + 1
    event["last_error"] = str(error)
    target = queue_key
    if event["attempts"] >= MAX_ATTEMPTS:
        target = dead_letter_key(queue_key)
        logger.error(
            f"[{WORKER_ID}] Max attempts reached for plan {event.get('plan_id')} / "
            f"customer {event.get('customer_id')}, dead-lettered"
        )
    else:
        logger.warning(
            f"[{WORKER_ID}] Retrying plan {event.get('plan_id')} / customer {event.get('customer_id')} "
            f"(attempt {event['attempts']} of {MAX_ATTEMPTS})"
        )

    # Claim release and re-push in one round trip
    pipe = redis.pipeline()
    pipe.lpush(target, json.dumps(event))
    pipe.lrem(processing_key(queue_key), 1, raw)
    pipe.execute()


def run_once(redis: Redis, session_factory=None, queue_key: Optional[str] = None) -> bool:
    """Process one event. Returns False when the queue is empty."""
    queue_key = queue_key or settings.assignment_queue_key
    raw = claim_event(redis, queue_key)
    if raw is None:
        return False

    try:
        result = process_event(raw, redis, session_factory)
    except Exception as e:
        logger.exception(f"[{WORKER_ID}] Assignment event failed: {e}")
        handle_failure(redis, raw, e, queue_key)
        return True

    redis.lrem(processing_key(queue_key), 1, raw)
    logger.info(f"[{WORKER_ID}] Assignment processed: {result.action.value}")
    return True


def main():
    """Main worker loop."""
    logging.basicConfig(
        level=settings.log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    logger.info(f"[{WORKER_ID}] Starting (Poll: {POLL_INTERVAL}s)")

    init_engine()
    redis = get_sync_redis()
    requeue_stale(redis)

    while True:
        try:
            # Keep claiming until queue empty
            while run_once(redis):
                pass
        except RedisError as e:
            logger.error(f"[{WORKER_ID}] Queue unavailable: {e}")
            time.sleep(1)

        time.sleep(POLL_INTERVAL)


if __name__ == "__main__":
    main()
