from celery import Celery

from ..config import settings
from ..database import get_sessionmaker
from ..services.leaderboard import record_points
from ..utils.logging import logger

celery = Celery("stockpile", broker=settings.REDIS_URL, backend=settings.REDIS_URL)

celery.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    broker_connection_retry_on_startup=True,
    worker_prefetch_multiplier=1,
)

# ---------- Celery task ----------
@celery.task(name="record_points_async", autoretry_for=(Exception,), retry_backoff=True, max_retries=5)
def record_points_async(actor_id: str, points: int, resource_id: str, action_type: str):
    SessionLocal = get_sessionmaker()
    with SessionLocal() as db:
        try:
            row = record_points(db, actor_id, points)
            db.commit()
        except Exception:
            db.rollback()
            raise
        total = row.total_points

    logger.info("Leaderboard: %s +%s (%s on %s), total=%s", actor_id, points, action_type, resource_id, total)
    return {"ok": True, "actor_id": actor_id, "total_points": total}
