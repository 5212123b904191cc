"""
Resource update transaction.

One update request is one unit of work:

    load (row lock) -> dispatch -> metadata merge | quantity change -> commit

The quantity path writes the new quantity and its history record in the same
database transaction, so an audit entry exists for exactly the quantity
changes that were committed. The resource row is locked for the whole
read-modify-write (``SELECT ... FOR UPDATE`` on Postgres, ``BEGIN IMMEDIATE``
on SQLite) and the mapper's version counter rejects any write that still
races past the lock.

Points are computed inside the transaction from the pre-update status, and
only handed to the leaderboard sink after commit. A sink failure is logged
and never undoes the committed update.
"""
from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ..auth.permissions import Actor
from ..errors import InvalidUpdateRequest, NotFound, PersistenceError
from ..models import Resource, ResourceHistory, utcnow
from ..schemas import METADATA_FIELDS, ResourceUpdate
from ..utils.logging import logger
from .changes import MAX_QUANTITY, compute_change
from .history import HistoryLedger
from .leaderboard import PointsSink
from .scoring import PointsCalculation, ScoringContext, ScoringEngine, action_type_for
from .status import classify

NON_NULLABLE_METADATA = ("name", "multiplier")


@dataclass
class UpdateResult:
    resource: Resource
    history: Optional[ResourceHistory] = None
    points_calculation: Optional[PointsCalculation] = None

    @property
    def is_quantity_change(self) -> bool:
        return self.history is not None

    @property
    def points_earned(self) -> int:
        return self.points_calculation.final_points if self.points_calculation else 0


def _load_for_update(db: Session, resource_id: str) -> Resource:
    stmt = (
        select(Resource)
        .where(Resource.id == resource_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    try:
        resource = db.execute(stmt).scalar_one_or_none()
    except SQLAlchemyError as e:
        raise PersistenceError("Failed to load resource") from e
    if resource is None:
        raise NotFound(resource_id)
    return resource


def _apply_metadata(resource: Resource, request: ResourceUpdate, actor: Actor) -> UpdateResult:
    changes = request.metadata_changes()
    if not changes:
        raise InvalidUpdateRequest("Update body has no recognised fields.")
    for field in NON_NULLABLE_METADATA:
        if field in changes and changes[field] is None:
            raise InvalidUpdateRequest(f"{field} cannot be null.")
    if "multiplier" in changes and not (math.isfinite(changes["multiplier"]) and changes["multiplier"] > 0):
        raise InvalidUpdateRequest("multiplier must be a positive finite number.")
    target = changes.get("target_quantity")
    if target is not None and abs(target) > MAX_QUANTITY:
        raise InvalidUpdateRequest(f"targetQuantity must be between -{MAX_QUANTITY} and {MAX_QUANTITY}.")

    for field, value in changes.items():
        setattr(resource, field, value)
    resource.last_updated_by = actor.actor_id
    resource.updated_at = utcnow()
    return UpdateResult(resource=resource)


def _apply_quantity_change(
    db: Session,
    resource: Resource,
    request: ResourceUpdate,
    actor: Actor,
    engine: ScoringEngine,
) -> UpdateResult:
    change = compute_change(
        resource.quantity,
        requested_quantity=request.quantity,
        update_type=request.update_type,
        relative_value=request.value,
    )
    # status the contribution was made against
    status = classify(resource.quantity, resource.target_quantity)

    now = utcnow()
    resource.quantity = change.new_quantity
    resource.last_updated_by = actor.actor_id
    resource.updated_at = now

    record = HistoryLedger(db).append(ResourceHistory(
        resource_id=resource.id,
        previous_quantity=change.previous_quantity,
        new_quantity=change.new_quantity,
        change_amount=change.change_amount,
        change_type=change.update_type,
        updated_by=actor.actor_id,
        reason=request.reason,
        created_at=now,
    ))

    calc = None
    if change.change_amount != 0:
        calc = engine.award_points(
            actor.actor_id,
            resource.id,
            action_type_for(change.update_type, change.change_amount),
            abs(change.change_amount),
            ScoringContext(
                name=resource.name,
                category=resource.category,
                status=status,
                multiplier=resource.multiplier,
            ),
        )
    return UpdateResult(resource=resource, history=record, points_calculation=calc)


def update_resource(
    db: Session,
    resource_id: str,
    request: ResourceUpdate,
    actor: Actor,
    *,
    engine: Optional[ScoringEngine] = None,
    sink: Optional[PointsSink] = None,
) -> UpdateResult:
    """
    Apply one update request to a resource. The caller has already checked
    that ``actor`` may perform it.

    Raises NotFound, InvalidUpdateRequest or PersistenceError; on any of them
    nothing has been written.
    """
    try:
        resource = _load_for_update(db, resource_id)
        if request.is_quantity_change:
            mixed = sorted(request.provided & METADATA_FIELDS)
            if mixed:
                raise InvalidUpdateRequest(
                    f"Quantity updates cannot also change {', '.join(mixed)}."
                )
            result = _apply_quantity_change(db, resource, request, actor, engine or ScoringEngine())
        else:
            result = _apply_metadata(resource, request, actor)
        db.commit()
    except StaleDataError as e:
        db.rollback()
        logger.warning("Concurrent update conflict on resource %s", resource_id)
        raise PersistenceError("Resource was modified concurrently", conflict=True) from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Storage failure updating resource %s: %s", resource_id, e.__class__.__name__)
        raise PersistenceError("Failed to commit resource update") from e
    except InvalidUpdateRequest as e:
        db.rollback()
        logger.warning("Rejected update on resource %s by %s: %s", resource_id, actor.actor_id, e)
        raise
    except Exception:
        db.rollback()
        raise

    if result.is_quantity_change:
        h = result.history
        logger.info(
            "Resource %s quantity %s -> %s (%s %+d) by %s, points=%s",
            resource_id, h.previous_quantity, h.new_quantity, h.change_type,
            h.change_amount, actor.actor_id, result.points_earned,
        )
    else:
        logger.info("Resource %s metadata updated by %s", resource_id, actor.actor_id)

    if result.points_calculation is not None and sink is not None:
        try:
            sink.publish(result.points_calculation)
        except Exception:
            logger.exception("Points publish failed for resource %s", resource_id)

    return result


def delete_resource(db: Session, resource_id: str, actor: Actor) -> int:
    """
    Remove a resource and its whole history in one transaction, children
    first. Returns the number of history records removed.
    """
    try:
        resource = _load_for_update(db, resource_id)
        removed = HistoryLedger(db).delete_all_for_resource(resource_id)
        db.delete(resource)
        db.commit()
    except StaleDataError as e:
        db.rollback()
        raise PersistenceError("Resource was modified concurrently", conflict=True) from e
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError("Failed to delete resource") from e
    except Exception:
        db.rollback()
        raise

    logger.info("Resource %s deleted by %s (%s history records)", resource_id, actor.actor_id, removed)
    return removed
