# services/leaderboard.py
from typing import List, Protocol
from sqlalchemy import select, desc
from sqlalchemy.orm import Session

from ..models import LeaderboardEntry, utcnow
from ..utils.logging import logger
from .scoring import PointsCalculation

def record_points(db: Session, actor_id: str, points: int) -> LeaderboardEntry:
    """Add an award to the actor's running total. Caller commits."""
    row = db.execute(
        select(LeaderboardEntry).where(LeaderboardEntry.actor_id == actor_id).with_for_update()
    ).scalar_one_or_none()
    if row:
        row.total_points += points
        row.actions_count += 1
        row.updated_at = utcnow()
    else:
        row = LeaderboardEntry(actor_id=actor_id, total_points=points, actions_count=1)
        db.add(row)
    return row

def top_actors(db: Session, limit: int = 10) -> List[LeaderboardEntry]:
    stmt = (
        select(LeaderboardEntry)
        .order_by(desc(LeaderboardEntry.total_points), LeaderboardEntry.actor_id)
        .limit(limit)
    )
    return list(db.execute(stmt).scalars().all())

# ----------------------------
# Sinks for committed awards
# ----------------------------
class PointsSink(Protocol):
    def publish(self, calc: PointsCalculation) -> None: ...

class CeleryPointsSink:
    """Hands awards to the worker so the update request never waits on the leaderboard."""

    def publish(self, calc: PointsCalculation) -> None:
        from ..workers.tasks import record_points_async
        record_points_async.delay(calc.actor_id, calc.final_points, calc.resource_id, calc.action_type)
        logger.info("Queued %s points for %s (%s on %s)",
                    calc.final_points, calc.actor_id, calc.action_type, calc.resource_id)
