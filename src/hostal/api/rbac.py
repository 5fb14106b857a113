"""Role-based access control.

Role hierarchy: housekeeping < recepcion < superadmin. A route declares the
lowest role it accepts; any higher role passes too.
"""

from __future__ import annotations

from typing import Callable

from fastapi import Depends, HTTPException

from hostal.api.auth import CurrentUser, get_current_user

# Lower index = less privilege
ROLE_HIERARCHY = ["housekeeping", "recepcion", "superadmin"]


def _role_level(role: str | None) -> int:
    try:
        return ROLE_HIERARCHY.index(role)
    except ValueError:
        return -1


def require_role(min_role: str) -> Callable[..., CurrentUser]:
    """Create a dependency that requires at least min_role.

    Usage:
        @router.get("/daybook")
        def daybook(user: CurrentUser = Depends(require_role("recepcion"))):
            ...

    Raises:
        ValueError: If min_role is not a known role (at import time).
    """
    min_level = _role_level(min_role)
    if min_level < 0:
        raise ValueError(f"Invalid role: {min_role}")

    def dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if _role_level(user.role) < min_level:
            raise HTTPException(status_code=403, detail="Insufficient role")
        return user

    return dependency
