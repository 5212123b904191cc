# services/status.py
from __future__ import annotations
from enum import Enum
from typing import Optional

# -----------------------------
# Tier thresholds (percent of target, inclusive lower bounds)
# -----------------------------
ABOVE_TARGET_PCT = 150
AT_TARGET_PCT = 100
BELOW_TARGET_PCT = 50


class ResourceStatus(str, Enum):
    ABOVE_TARGET = "above_target"
    AT_TARGET = "at_target"
    BELOW_TARGET = "below_target"
    CRITICAL = "critical"


def classify(quantity: int, target: Optional[int]) -> ResourceStatus:
    """Health tier of a resource; a missing or non-positive target is neutral."""
    if not target or target <= 0:
        return ResourceStatus.AT_TARGET
    percentage = quantity / target * 100
    if percentage >= ABOVE_TARGET_PCT:
        return ResourceStatus.ABOVE_TARGET
    if percentage >= AT_TARGET_PCT:
        return ResourceStatus.AT_TARGET
    if percentage >= BELOW_TARGET_PCT:
        return ResourceStatus.BELOW_TARGET
    return ResourceStatus.CRITICAL
