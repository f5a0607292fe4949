import asyncio
import logging

from fastapi import APIRouter, Depends
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db import get_db
from ..infra.redis_client import get_redis

logger = logging.getLogger("grocerygen.ready")

router = APIRouter()


def check_db(db: Session) -> bool:
    try:
        db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.warning(f"Database not ready: {e}")
        return False


@router.get("/ready")
async def ready(db: Session = Depends(get_db)):
    redis_ok = False
    try:
        r = await get_redis()
        await r.ping()
        redis_ok = True
    except (RedisError, OSError) as e:
        logger.warning(f"Redis not ready: {e}")

    # Blocking driver call; keep it off the event loop
    db_ok = await asyncio.to_thread(check_db, db)

    return {"ok": True, "redis_ok": redis_ok, "db_ok": db_ok}
