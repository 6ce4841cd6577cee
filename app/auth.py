"""
Caller identity supplied by the authenticating gateway.

Tokens are verified upstream; this service only reads the forwarded
``X-User-Id`` and ``X-User-Role`` headers and gates routes by role.
"""
from typing import Optional
from fastapi import Header, HTTPException, Depends
from pydantic import BaseModel

ADMIN = "admin"
INVENTORY = "inventory"


class Identity(BaseModel):
    user_id: str
    role: str


async def get_current_identity(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> Identity:
    if not x_user_id or not x_user_role:
        raise HTTPException(status_code=401, detail="Authentication required")
    return Identity(user_id=x_user_id, role=x_user_role.strip().lower())


def require_roles(*roles: str):
    """Dependency that admits only callers whose role is in ``roles``."""

    async def checker(identity: Identity = Depends(get_current_identity)) -> Identity:
        if identity.role not in roles:
            raise HTTPException(status_code=403, detail="Access denied. Insufficient permissions.")
        return identity

    return checker
