import logging

from fastapi import Depends, HTTPException, status

from feeledger.auth.dependencies import get_current_user
from feeledger.auth.schemas import CurrentUser

logger = logging.getLogger(__name__)

UNRESTRICTED_ROLES = ("SUPER_ADMIN",)


def has_permission(user: CurrentUser, module: str, action: str) -> bool:
    if user.role in UNRESTRICTED_ROLES:
        return True
    return bool((user.permissions or {}).get(module, {}).get(action, False))


def check_permission(module: str, action: str):
    """
    Route dependency: the caller's role must grant `action` on `module`.

    Example:
        Depends(check_permission("fees", "delete"))
    """

    async def _checker(current_user: CurrentUser = Depends(get_current_user)) -> None:
        if not has_permission(current_user, module, action):
            logger.warning(
                "User %s (%s) denied %s.%s", current_user.id, current_user.role, module, action
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )

    return _checker
