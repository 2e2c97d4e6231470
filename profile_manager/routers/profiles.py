"""Profiles router for CRUD, search, and pagination."""

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from profile_manager.auth.dependencies import require_admin
from profile_manager.schemas.auth import UserRecord
from profile_manager.schemas.profile import Profile, ProfileInsert, ProfilePage
from profile_manager.storage import StorageFacade, get_storage

router = APIRouter(prefix="/api/v1/profiles", tags=["Profiles"])

DEFAULT_PAGE_SIZE = 6
MAX_PAGE_SIZE = 50


def _not_found(profile_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={
            "error": {
                "code": "NOT_FOUND",
                "message": f"Profile {profile_id} not found",
            }
        },
    )


# --- List Profiles ---


@router.get(
    "",
    response_model=ProfilePage,
    status_code=status.HTTP_200_OK,
)
async def list_profiles(
    storage: StorageFacade = Depends(get_storage),
    query: str | None = Query(default=None, description="Case-insensitive search on name, profileId, searchId"),
    page: int = Query(default=1, ge=1, description="1-based page number"),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Items per page"),
) -> ProfilePage:
    """
    List profiles with offset pagination.

    Returns profiles ordered by id descending, plus the total number of
    matches so callers can compute the page count.
    """
    return await storage.get_profiles(query, page, limit)


# --- Get Profile ---


@router.get(
    "/{profile_id}",
    response_model=Profile,
    status_code=status.HTTP_200_OK,
)
async def get_profile(
    profile_id: int,
    storage: StorageFacade = Depends(get_storage),
) -> Profile:
    """Get a single profile by id."""
    profile = await storage.get_profile(profile_id)
    if profile is None:
        raise _not_found(profile_id)
    return profile


# --- Create Profile ---


@router.post(
    "",
    response_model=Profile,
    status_code=status.HTTP_201_CREATED,
)
async def create_profile(
    data: ProfileInsert,
    storage: StorageFacade = Depends(get_storage),
    user: UserRecord = Depends(require_admin),
) -> Profile:
    """
    Create a new profile.

    If profileId is not provided, one will be generated.
    """
    return await storage.create_profile(data)


# --- Update Profile ---


@router.put(
    "/{profile_id}",
    response_model=Profile,
    status_code=status.HTTP_200_OK,
)
async def update_profile(
    profile_id: int,
    data: ProfileInsert,
    storage: StorageFacade = Depends(get_storage),
    user: UserRecord = Depends(require_admin),
) -> Profile:
    """
    Replace a profile.

    This is a full replace: optional fields missing from the body are reset.
    """
    profile = await storage.update_profile(profile_id, data)
    if profile is None:
        raise _not_found(profile_id)
    return profile


# --- Delete Profile ---


@router.delete(
    "/{profile_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def delete_profile(
    profile_id: int,
    storage: StorageFacade = Depends(get_storage),
    user: UserRecord = Depends(require_admin),
) -> Response:
    """Delete a profile."""
    if not await storage.delete_profile(profile_id):
        raise _not_found(profile_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
