import json
from unittest.mock import patch

import pytest

from grocerygen import worker
from grocerygen.models import GroceryList
from grocerygen.settings import settings

QUEUE = settings.assignment_queue_key


@pytest.fixture
def plan(make_recipe, make_plan):
    oats = make_recipe("Overnight Oats", [
        ("1/2", "cup", "rolled oats"),
        ("1", "cup", "milk"),
        ("1", "", "banana"),
    ])
    return make_plan("Breakfasts", days=[[oats], [oats]])


def lists(session_factory):
    db = session_factory()
    try:
        return db.query(GroceryList).all()
    finally:
        db.close()


def test_enqueue_then_process(plan, mock_redis, session_factory):
    event = worker.enqueue_assignment(mock_redis, plan.id, "customer-1")
    assert event["attempts"] == 0
    assert mock_redis.llen(QUEUE) == 1

    assert worker.run_once(mock_redis, session_factory) is True

    assert mock_redis.llen(QUEUE) == 0
    assert mock_redis.llen(worker.processing_key(QUEUE)) == 0
    [grocery_list] = lists(session_factory)
    assert grocery_list.meal_plan_id == plan.id
    assert grocery_list.customer_id == "customer-1"

    # Queue drained
    assert worker.run_once(mock_redis, session_factory) is False


def test_events_are_processed_in_order(plan, mock_redis, session_factory):
    worker.enqueue_assignment(mock_redis, plan.id, "customer-1")
    worker.enqueue_assignment(mock_redis, plan.id, "customer-2")

    first = json.loads(worker.claim_event(mock_redis))
    assert first["customer_id"] == "customer-1"
    assert mock_redis.llen(worker.processing_key(QUEUE)) == 1


def test_replayed_event_does_not_duplicate(plan, mock_redis, session_factory):
    raw = json.dumps({"plan_id": plan.id, "customer_id": "customer-1", "attempts": 0})

    assert worker.process_event(raw, mock_redis, session_factory).action.value == "created"
    assert worker.process_event(raw, mock_redis, session_factory).action.value == "updated"
    assert len(lists(session_factory)) == 1


def test_failed_event_is_retried_then_dead_lettered(plan, mock_redis, session_factory, monkeypatch):
    monkeypatch.setattr(worker, "MAX_ATTEMPTS", 2)
    worker.enqueue_assignment(mock_redis, plan.id, "customer-1")

    with patch("grocerygen.worker.process_event", side_effect=RuntimeError("database down")):
        worker.run_once(mock_redis, session_factory)

        retried = json.loads(mock_redis.lindex(QUEUE, 0))
        assert retried["attempts"] == 1
        assert retried["last_error"] == "database down"
        assert mock_redis.llen(worker.processing_key(QUEUE)) == 0

        worker.run_once(mock_redis, session_factory)

    assert mock_redis.llen(QUEUE) == 0
    dead = json.loads(mock_redis.lindex(worker.dead_letter_key(QUEUE), 0))
    assert dead["attempts"] == 2
    assert dead["plan_id"] == plan.id
    assert lists(session_factory) == []


def test_malformed_event_is_dead_lettered(mock_redis, session_factory):
    mock_redis.lpush(QUEUE, "not json")

    assert worker.run_once(mock_redis, session_factory) is True

    assert mock_redis.lrange(worker.dead_letter_key(QUEUE), 0, -1) == ["not json"]
    assert mock_redis.llen(worker.processing_key(QUEUE)) == 0


def test_stale_claims_are_requeued(plan, mock_redis, session_factory):
    worker.enqueue_assignment(mock_redis, plan.id, "customer-1")
    worker.claim_event(mock_redis)  # claimed by a worker that then died
    assert mock_redis.llen(QUEUE) == 0

    assert worker.requeue_stale(mock_redis) == 1
    assert mock_redis.llen(worker.processing_key(QUEUE)) == 0

    assert worker.run_once(mock_redis, session_factory) is True
    assert len(lists(session_factory)) == 1
