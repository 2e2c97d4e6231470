"""Preferences router for the global settings record."""

from fastapi import APIRouter, Depends, status

from profile_manager.auth.dependencies import get_current_user
from profile_manager.schemas.auth import UserRecord
from profile_manager.schemas.preferences import PreferencesUpdate, UserPreferences
from profile_manager.storage import StorageFacade, get_storage

router = APIRouter(prefix="/api/v1/preferences", tags=["Preferences"])


@router.get(
    "",
    response_model=UserPreferences,
    status_code=status.HTTP_200_OK,
)
async def get_preferences(
    storage: StorageFacade = Depends(get_storage),
) -> UserPreferences:
    """Get the preferences, with defaults for anything never saved."""
    return await storage.get_global_preferences()


@router.put(
    "",
    response_model=UserPreferences,
    status_code=status.HTTP_200_OK,
)
async def save_preferences(
    data: PreferencesUpdate,
    storage: StorageFacade = Depends(get_storage),
    user: UserRecord = Depends(get_current_user),
) -> UserPreferences:
    """
    Merge the given keys into the stored preferences.

    Keys left out of the body keep their current values.
    """
    await storage.save_global_preferences(data)
    return await storage.get_global_preferences()
