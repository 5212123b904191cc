from pydantic import BaseModel, ConfigDict, FiniteFloat, StrictInt
from pydantic.alias_generators import to_camel
from typing import Any, Dict, FrozenSet, List, Literal, Optional
from datetime import datetime

from .services.status import classify

QUANTITY_FIELDS: FrozenSet[str] = frozenset({"quantity", "update_type", "value", "reason"})
METADATA_FIELDS: FrozenSet[str] = frozenset(
    {"name", "image_url", "category", "description", "target_quantity", "multiplier"}
)

class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

# ----------------------------
# Requests
# ----------------------------
class ResourceUpdate(_CamelModel):
    """
    PUT body. Which fields were sent matters as much as their values:
    ``provided`` is the update mask, so ``description=""`` is applied while an
    absent ``description`` is left alone.
    """
    model_config = ConfigDict(extra="forbid")

    # quantity path
    quantity: Optional[StrictInt] = None
    update_type: Optional[Literal["absolute", "relative"]] = None
    value: Optional[StrictInt] = None
    reason: Optional[str] = None

    # metadata path
    name: Optional[str] = None
    image_url: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    target_quantity: Optional[StrictInt] = None
    multiplier: Optional[FiniteFloat] = None

    @property
    def provided(self) -> FrozenSet[str]:
        return frozenset(self.model_fields_set)

    @property
    def is_quantity_change(self) -> bool:
        return bool(self.provided & QUANTITY_FIELDS)

    def metadata_changes(self) -> Dict[str, Any]:
        return {k: getattr(self, k) for k in sorted(self.provided & METADATA_FIELDS)}

# ----------------------------
# Responses
# ----------------------------
class ResourceOut(_CamelModel):
    id: str
    name: str
    category: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    quantity: int
    target_quantity: Optional[int] = None
    multiplier: float
    status: str
    last_updated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, r) -> "ResourceOut":
        return cls(
            id=r.id, name=r.name, category=r.category, description=r.description,
            image_url=r.image_url, quantity=r.quantity, target_quantity=r.target_quantity,
            multiplier=r.multiplier, status=classify(r.quantity, r.target_quantity).value,
            last_updated_by=r.last_updated_by, created_at=r.created_at, updated_at=r.updated_at,
        )

class HistoryOut(_CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    resource_id: str
    previous_quantity: int
    new_quantity: int
    change_amount: int
    change_type: str
    updated_by: str
    reason: Optional[str] = None
    created_at: datetime

class PointsCalculationOut(_CamelModel):
    model_config = ConfigDict(from_attributes=True)

    action_type: str
    magnitude: int
    status: str
    tier_weight: float
    action_rate: float
    base_points: float
    multiplier: float
    final_points: int

class QuantityUpdateResponse(_CamelModel):
    resource: ResourceOut
    points_earned: int
    points_calculation: Optional[PointsCalculationOut] = None

class MetadataUpdateResponse(_CamelModel):
    resource: ResourceOut

class DeleteResponse(_CamelModel):
    message: str
    history_deleted: int

class LeaderboardRow(_CamelModel):
    model_config = ConfigDict(from_attributes=True)

    actor_id: str
    total_points: int
    actions_count: int

class LeaderboardResponse(_CamelModel):
    entries: List[LeaderboardRow]
