from typing import List, Optional, Union
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ..auth.permissions import Actor, get_actor, require, can_edit_quantity, can_edit_target, can_administer
from ..config import settings
from ..database import get_db
from ..schemas import (
    ResourceUpdate, ResourceOut, HistoryOut, PointsCalculationOut,
    QuantityUpdateResponse, MetadataUpdateResponse, DeleteResponse,
)
from ..services.catalog import get_resource, list_resources
from ..services.history import HistoryLedger
from ..services.leaderboard import CeleryPointsSink, PointsSink
from ..services.scoring import ScoringEngine
from ..services.transactions import update_resource, delete_resource

router = APIRouter(prefix="/v1/resources", tags=["resources"])

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, max-age=0, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}

def get_scoring_engine() -> ScoringEngine:
    return ScoringEngine(
        tier_weights=settings.SCORING_TIER_WEIGHTS,
        action_rates=settings.SCORING_ACTION_RATES,
    )

def get_points_sink() -> PointsSink:
    return CeleryPointsSink()

@router.get("", response_model=List[ResourceOut])
def list_all(category: Optional[str] = Query(None), db: Session = Depends(get_db)):
    return [ResourceOut.from_model(r) for r in list_resources(db, category)]

@router.get("/{resource_id}", response_model=ResourceOut)
def read_one(resource_id: str, db: Session = Depends(get_db)):
    return ResourceOut.from_model(get_resource(db, resource_id))

@router.get("/{resource_id}/history", response_model=List[HistoryOut])
def read_history(resource_id: str,
                 limit: int = Query(50, ge=1, le=settings.HISTORY_PAGE_LIMIT),
                 db: Session = Depends(get_db)):
    get_resource(db, resource_id)
    return [HistoryOut.model_validate(h) for h in HistoryLedger(db).list_by_resource(resource_id, limit=limit)]

@router.put("/{resource_id}", response_model=Union[QuantityUpdateResponse, MetadataUpdateResponse])
def update(resource_id: str,
           payload: ResourceUpdate,
           actor: Actor = Depends(get_actor),
           db: Session = Depends(get_db),
           engine: ScoringEngine = Depends(get_scoring_engine),
           sink: PointsSink = Depends(get_points_sink)):
    if payload.is_quantity_change:
        require(actor, can_edit_quantity, "Resource access required")
    else:
        require(actor, can_edit_target, "Target edit access required")

    result = update_resource(db, resource_id, payload, actor, engine=engine, sink=sink)
    resource = ResourceOut.from_model(result.resource)
    if not result.is_quantity_change:
        return MetadataUpdateResponse(resource=resource)

    calc = result.points_calculation
    return QuantityUpdateResponse(
        resource=resource,
        points_earned=result.points_earned,
        points_calculation=PointsCalculationOut.model_validate(calc) if calc else None,
    )

@router.delete("/{resource_id}", response_model=DeleteResponse)
def remove(resource_id: str,
           response: Response,
           actor: Actor = Depends(get_actor),
           db: Session = Depends(get_db)):
    require(actor, can_administer, "Admin access required")
    removed = delete_resource(db, resource_id, actor)
    response.headers.update(NO_CACHE_HEADERS)
    return DeleteResponse(message="Resource and its history deleted successfully", history_deleted=removed)
