# services/catalog.py
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..errors import NotFound
from ..models import Resource

def get_resource(db: Session, resource_id: str) -> Resource:
    row = db.get(Resource, resource_id)
    if row is None:
        raise NotFound(resource_id)
    return row

def list_resources(db: Session, category: Optional[str] = None) -> List[Resource]:
    stmt = select(Resource).order_by(Resource.category, Resource.name)
    if category:
        stmt = stmt.where(Resource.category == category)
    return list(db.execute(stmt).scalars().all())
