"""Authentication router for login and the current user."""

from fastapi import APIRouter, Depends, HTTPException, Request, status

from profile_manager.auth.dependencies import get_current_user
from profile_manager.config import settings
from profile_manager.logging_config import get_logger
from profile_manager.middleware.rate_limit import limiter
from profile_manager.schemas.auth import LoginRequest, LoginResponse, UserInfo, UserRecord
from profile_manager.storage import StorageFacade, get_storage

router = APIRouter(prefix="/api/v1/auth", tags=["Auth"])

logger = get_logger("routers.auth")


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
)
@limiter.limit(settings.login_rate_limit)
async def login(
    request: Request,
    data: LoginRequest,
    storage: StorageFacade = Depends(get_storage),
) -> LoginResponse:
    """
    Check a username and password.

    The returned username is what clients send back as the bearer value.
    """
    user = await storage.authenticate(data.username, data.password)
    if user is None:
        logger.info("Failed login for %s", data.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": {
                    "code": "UNAUTHORIZED",
                    "message": "Invalid username or password",
                }
            },
        )

    return LoginResponse(user=UserInfo(id=user.id, username=user.username, role=user.role))


@router.get(
    "/me",
    response_model=UserInfo,
    status_code=status.HTTP_200_OK,
)
async def get_me(
    user: UserRecord = Depends(get_current_user),
) -> UserInfo:
    """Return the user named by the Authorization header."""
    return UserInfo(id=user.id, username=user.username, role=user.role)
