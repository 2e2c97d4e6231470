"""Pydantic schemas for request/response validation."""

from profile_manager.schemas.auth import LoginRequest, LoginResponse, UserInfo, UserRecord
from profile_manager.schemas.preferences import (
    PreferencesUpdate,
    UserPreferences,
    merge_preferences,
    validate_preferences,
)
from profile_manager.schemas.profile import (
    Document,
    Profile,
    ProfileInsert,
    ProfilePage,
    validate_insert,
)

__all__ = [
    "Document",
    "Profile",
    "ProfileInsert",
    "ProfilePage",
    "validate_insert",
    "UserPreferences",
    "PreferencesUpdate",
    "merge_preferences",
    "validate_preferences",
    "LoginRequest",
    "LoginResponse",
    "UserInfo",
    "UserRecord",
]
