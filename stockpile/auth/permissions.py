# stockpile/auth/permissions.py
from dataclasses import dataclass, field
from typing import FrozenSet, Optional
from fastapi import Header, HTTPException

from ..config import settings

QUANTITY_EDIT = "quantity:edit"
TARGET_EDIT = "target:edit"
ADMINISTER = "resources:admin"

@dataclass(frozen=True)
class Actor:
    """Who is calling and what they may do; passed explicitly into every transaction."""
    actor_id: str
    permissions: FrozenSet[str] = field(default_factory=frozenset)

def permissions_for_roles(roles) -> FrozenSet[str]:
    roles = {r.strip().lower() for r in roles if r and r.strip()}
    perms = set()
    if roles & {r.lower() for r in settings.QUANTITY_EDITOR_ROLES}:
        perms.add(QUANTITY_EDIT)
    if roles & {r.lower() for r in settings.TARGET_EDITOR_ROLES}:
        perms.add(TARGET_EDIT)
    if roles & {r.lower() for r in settings.ADMIN_ROLES}:
        perms.update({QUANTITY_EDIT, TARGET_EDIT, ADMINISTER})
    return frozenset(perms)

def can_edit_quantity(actor: Actor) -> bool:
    return QUANTITY_EDIT in actor.permissions

def can_edit_target(actor: Actor) -> bool:
    return TARGET_EDIT in actor.permissions

def can_administer(actor: Actor) -> bool:
    return ADMINISTER in actor.permissions

def get_actor(
    x_actor_id: Optional[str] = Header(None),
    x_actor_roles: Optional[str] = Header(None),
) -> Actor:
    """
    Identity is established by the upstream auth gateway, which forwards it
    as X-Actor-Id / X-Actor-Roles (comma separated).
    """
    if not x_actor_id or not x_actor_id.strip():
        raise HTTPException(status_code=401, detail="Unauthorized")
    roles = (x_actor_roles or "").split(",")
    return Actor(actor_id=x_actor_id.strip(), permissions=permissions_for_roles(roles))

def require(actor: Actor, predicate, detail: str = "Forbidden") -> None:
    if not predicate(actor):
        raise HTTPException(status_code=403, detail=detail)
