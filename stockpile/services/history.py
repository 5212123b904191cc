# services/history.py
from typing import Iterator, Optional
from sqlalchemy import select, delete, desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ..errors import PersistenceError
from ..models import ResourceHistory

class HistoryLedger:
    """
    Append-only store of quantity changes, bound to the caller's session.

    Nothing here commits: records become visible together with the quantity
    change that produced them, or not at all.
    """

    def __init__(self, db: Session):
        self.db = db

    def append(self, record: ResourceHistory) -> ResourceHistory:
        try:
            self.db.add(record)
            self.db.flush()
        except StaleDataError:
            raise
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to append history record") from e
        return record

    def list_by_resource(self, resource_id: str, limit: Optional[int] = None) -> Iterator[ResourceHistory]:
        stmt = (
            select(ResourceHistory)
            .where(ResourceHistory.resource_id == resource_id)
            .order_by(desc(ResourceHistory.created_at), desc(ResourceHistory.id))
            .execution_options(yield_per=100)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        yield from self.db.scalars(stmt)

    def delete_all_for_resource(self, resource_id: str) -> int:
        try:
            result = self.db.execute(
                delete(ResourceHistory).where(ResourceHistory.resource_id == resource_id)
            )
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to delete history records") from e
        return result.rowcount or 0
