# scoring.py
from __future__ import annotations
import math
from dataclasses import dataclass, asdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Mapping, Optional, Any

from .changes import ABSOLUTE, RELATIVE
from .status import ResourceStatus

# -----------------------------
# Tunables (defaults; settings can override)
# -----------------------------
ADD = "ADD"
SET = "SET"
REMOVE = "REMOVE"

DEFAULT_TIER_WEIGHTS: Dict[str, float] = {
    ResourceStatus.CRITICAL.value: 2.0,
    ResourceStatus.BELOW_TARGET.value: 1.5,
    ResourceStatus.AT_TARGET.value: 1.0,
    ResourceStatus.ABOVE_TARGET.value: 0.5,
}

DEFAULT_ACTION_RATES: Dict[str, float] = {
    ADD: 1.0,
    SET: 0.5,
    REMOVE: 0.25,
}

DEFAULT_MULTIPLIER = 1.0

# -----------------------------
# Helpers
# -----------------------------
def action_type_for(update_type: str, change_amount: int) -> str:
    if update_type == ABSOLUTE:
        return SET
    if update_type == RELATIVE and change_amount > 0:
        return ADD
    if update_type == RELATIVE and change_amount < 0:
        return REMOVE
    raise ValueError(f"No action type for {update_type!r} with change {change_amount}")

def effective_multiplier(multiplier: Optional[float]) -> float:
    if multiplier is None or not math.isfinite(multiplier) or multiplier <= 0:
        return DEFAULT_MULTIPLIER
    return float(multiplier)

def round_points(v: float) -> int:
    # half-up; Python's round() is half-even
    return int(Decimal(repr(v)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

# -----------------------------
# Result
# -----------------------------
@dataclass(frozen=True)
class ScoringContext:
    name: str
    category: Optional[str]
    status: ResourceStatus
    multiplier: Optional[float] = None

@dataclass(frozen=True)
class PointsCalculation:
    actor_id: str
    resource_id: str
    resource_name: str
    category: Optional[str]
    action_type: str
    magnitude: int
    status: str
    tier_weight: float
    action_rate: float
    base_points: float
    multiplier: float
    final_points: int

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)

# -----------------------------
# Main entry
# -----------------------------
class ScoringEngine:
    """
    Turns one quantity change into a points award.

    base_points  = magnitude * action_rate[action_type] * tier_weight[status]
    final_points = round_half_up(base_points * multiplier)

    The engine is pure: the same inputs always give the same calculation.
    Publishing the award to a leaderboard is the caller's job.
    """

    def __init__(
        self,
        tier_weights: Optional[Mapping[str, float]] = None,
        action_rates: Optional[Mapping[str, float]] = None,
    ):
        self.tier_weights = dict(tier_weights or DEFAULT_TIER_WEIGHTS)
        self.action_rates = dict(action_rates or DEFAULT_ACTION_RATES)
        missing = [s.value for s in ResourceStatus if s.value not in self.tier_weights]
        if missing:
            raise ValueError(f"tier_weights missing tiers: {missing}")

    def award_points(
        self,
        actor_id: str,
        resource_id: str,
        action_type: str,
        magnitude: int,
        context: ScoringContext,
    ) -> PointsCalculation:
        if action_type not in self.action_rates:
            raise ValueError(f"Unknown action type: {action_type!r}")
        magnitude = abs(magnitude)
        status = ResourceStatus(context.status).value
        tier_weight = float(self.tier_weights[status])
        action_rate = float(self.action_rates[action_type])
        multiplier = effective_multiplier(context.multiplier)

        base_points = magnitude * action_rate * tier_weight
        final_points = round_points(base_points * multiplier)

        return PointsCalculation(
            actor_id=actor_id,
            resource_id=resource_id,
            resource_name=context.name,
            category=context.category,
            action_type=action_type,
            magnitude=magnitude,
            status=status,
            tier_weight=tier_weight,
            action_rate=action_rate,
            base_points=base_points,
            multiplier=multiplier,
            final_points=final_points,
        )
