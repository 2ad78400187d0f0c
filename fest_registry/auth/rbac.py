from fastapi import Depends, HTTPException, status

from fest_registry.auth.dependencies import get_current_user
from fest_registry.auth.schemas import CurrentUser


def require_roles(*allowed_roles: str):
    """
    Dependency factory restricting an endpoint to the given roles.

    Example:
        Depends(require_roles("MANAGER", "PRINCIPAL"))
    """
    if not allowed_roles:
        raise ValueError("require_roles: at least one role is required")
    allowed = {str(getattr(r, "value", r)) for r in allowed_roles}

    async def _checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Unauthorized: Required role not found",
            )
        return current_user

    return _checker


def college_of(current_user: CurrentUser) -> int:
    """College the caller acts on; college-scoped endpoints need one."""
    if current_user.college_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="College ID not found in user profile",
        )
    return current_user.college_id
