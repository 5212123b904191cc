# services/changes.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Optional

from ..errors import InvalidUpdateRequest

ABSOLUTE = "absolute"
RELATIVE = "relative"
UPDATE_TYPES = (ABSOLUTE, RELATIVE)

# quantities are stored as 32-bit signed integers
MAX_QUANTITY = 2**31 - 1


@dataclass(frozen=True)
class Change:
    previous_quantity: int
    new_quantity: int
    change_amount: int
    update_type: str


def _is_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def compute_change(
    previous_quantity: int,
    requested_quantity: Optional[int] = None,
    update_type: Optional[str] = None,
    relative_value: Optional[int] = None,
) -> Change:
    """
    Absolute mode takes the resulting quantity from ``requested_quantity``;
    relative mode takes a signed delta from ``relative_value``.
    """
    update_type = update_type or ABSOLUTE
    if update_type not in UPDATE_TYPES:
        raise InvalidUpdateRequest(f"updateType must be one of {', '.join(UPDATE_TYPES)}.")

    if update_type == ABSOLUTE:
        if requested_quantity is None:
            raise InvalidUpdateRequest("quantity is required for an absolute update.")
        if not _is_int(requested_quantity):
            raise InvalidUpdateRequest("quantity must be an integer.")
        new_quantity = requested_quantity
        if requested_quantity > MAX_QUANTITY:
            raise InvalidUpdateRequest(f"quantity must not exceed {MAX_QUANTITY}.")
        change_amount = new_quantity - previous_quantity
    else:
        if relative_value is None:
            raise InvalidUpdateRequest("value is required for a relative update.")
        if not _is_int(relative_value):
            raise InvalidUpdateRequest("value must be an integer.")
        if abs(relative_value) > MAX_QUANTITY:
            raise InvalidUpdateRequest(f"value must be between -{MAX_QUANTITY} and {MAX_QUANTITY}.")
        change_amount = relative_value
        new_quantity = previous_quantity + relative_value

    if new_quantity < 0:
        raise InvalidUpdateRequest(
            f"Resulting quantity {new_quantity} would be negative."
        )
    if new_quantity > MAX_QUANTITY:
        raise InvalidUpdateRequest(
            f"Resulting quantity would exceed {MAX_QUANTITY}."
        )

    return Change(
        previous_quantity=previous_quantity,
        new_quantity=new_quantity,
        change_amount=change_amount,
        update_type=update_type,
    )
