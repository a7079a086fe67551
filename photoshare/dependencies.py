"""Shared FastAPI dependencies."""
from typing import Optional

from fastapi import Request, HTTPException

from .models import Principal


def get_principal(request: Request) -> Optional[Principal]:
    """Get current principal from request state (None when anonymous)."""
    return getattr(request.state, "principal", None)


def require_principal(request: Request) -> Principal:
    """Require authenticated principal, raise 401 if not authenticated."""
    principal = get_principal(request)
    if principal is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return principal


def require_admin(request: Request) -> Principal:
    """Require an administrator. Raises 401/403."""
    principal = require_principal(request)
    if not principal.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return principal
