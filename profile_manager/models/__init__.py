"""Database models for the Profile Manager API."""

from profile_manager.models.profile import Profile, Setting
from profile_manager.models.user import User

__all__ = [
    "Profile",
    "Setting",
    "User",
]
