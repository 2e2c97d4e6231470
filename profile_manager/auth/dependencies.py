"""
Authentication dependencies for FastAPI endpoints.

Requests identify themselves with ``Authorization: Bearer <username>``. The
username only has to name a known account; there is no token or signature.
"""

from fastapi import Depends, Header, HTTPException, status

from profile_manager.schemas.auth import UserRecord
from profile_manager.storage import StorageFacade, get_storage


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={
            "error": {
                "code": "UNAUTHORIZED",
                "message": message,
            }
        },
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    authorization: str | None = Header(default=None),
    storage: StorageFacade = Depends(get_storage),
) -> UserRecord:
    """
    Resolve the user named in the Authorization header.

    Raises:
        HTTPException: 401 if the header is missing, malformed, or names no user
    """
    if not authorization:
        raise _unauthorized("Authentication required")

    scheme, _, username = authorization.partition(" ")
    username = username.strip()
    if scheme.lower() != "bearer" or not username:
        raise _unauthorized("Invalid authorization header format")

    user = await storage.get_user(username)
    if user is None:
        raise _unauthorized("Unknown user")

    return user


async def require_admin(
    user: UserRecord = Depends(get_current_user),
) -> UserRecord:
    """
    Require the authenticated user to have the admin role.

    Raises:
        HTTPException: 403 if the user is not an admin
    """
    if user.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "error": {
                    "code": "FORBIDDEN",
                    "message": "Admin access required",
                }
            },
        )

    return user
