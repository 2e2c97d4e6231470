"""
Storage facade: one operation surface over a primary and a fallback store.

Backend selection is explicit. ``check_health`` pings the primary and latches
the result in ``primary_available``. While the primary is unavailable every
call goes to the fallback. While it is available, a call that fails with
anything other than a domain error is logged and re-executed once against
the fallback; the primary is not retried for that call. The two stores are
never reconciled, so data written to one is invisible through the other.
"""

import hmac
from typing import Any

from profile_manager.errors import DOMAIN_ERRORS, InternalError
from profile_manager.logging_config import get_logger
from profile_manager.schemas.auth import Role, UserRecord
from profile_manager.schemas.preferences import (
    PreferencesUpdate,
    UserPreferences,
    merge_preferences,
    validate_preferences,
)
from profile_manager.schemas.profile import Profile, ProfileInsert, ProfilePage, validate_insert
from profile_manager.storage.base import ProfileBackend, normalize_query

logger = get_logger("storage.facade")


class StorageFacade:
    """Routes profile, preference and user operations to the right backend."""

    def __init__(self, fallback: ProfileBackend, primary: ProfileBackend | None = None):
        self.primary = primary
        self.fallback = fallback
        self.primary_available = False
        # Name of the backend that served the most recent call
        self.last_served_by: str | None = None

    @property
    def active_backend(self) -> ProfileBackend:
        """The backend new calls are routed to first."""
        if self.primary is not None and self.primary_available:
            return self.primary
        return self.fallback

    async def check_health(self) -> bool:
        """Ping the primary and latch whether it should serve requests."""
        self.primary_available = self.primary is not None and await self.primary.ping()
        logger.info("Serving storage requests from the %s backend", self.active_backend.name)
        return self.primary_available

    async def close(self) -> None:
        if self.primary is not None:
            await self.primary.close()
        await self.fallback.close()

    async def _call(self, operation: str, *args: Any) -> Any:
        if self.primary is not None and self.primary_available:
            try:
                result = await getattr(self.primary, operation)(*args)
            except DOMAIN_ERRORS:
                raise
            except Exception as exc:
                logger.warning(
                    "Primary backend failed during %s, serving from %s: %s",
                    operation,
                    self.fallback.name,
                    exc,
                )
            else:
                self.last_served_by = self.primary.name
                return result

        try:
            result = await getattr(self.fallback, operation)(*args)
        except DOMAIN_ERRORS:
            raise
        except Exception as exc:
            logger.exception("%s backend failed during %s", self.fallback.name, operation)
            raise InternalError(f"Storage operation '{operation}' failed") from exc

        self.last_served_by = self.fallback.name
        return result

    # --- Profiles ---

    async def get_profiles(self, query: str | None = None, page: int = 1, limit: int = 6) -> ProfilePage:
        """
        Return one page of profiles, newest first.

        With a query, only profiles whose name, profileId or searchId contain
        it (case-insensitively) are returned. ``total`` counts every match,
        not just the page.
        """
        return await self._call("get_profiles", normalize_query(query), page, limit)

    async def get_profile(self, profile_id: int) -> Profile | None:
        return await self._call("get_profile", profile_id)

    async def create_profile(self, data: ProfileInsert | dict[str, Any]) -> Profile:
        """
        Create a profile. Generates a profileId when none is given.

        Raises:
            ValidationError: if data is not a valid profile payload
            ConflictError: if the profileId is taken (database store only)
        """
        return await self._call("create_profile", validate_insert(data))

    async def update_profile(self, profile_id: int, data: ProfileInsert | dict[str, Any]) -> Profile | None:
        """Fully replace a profile. Returns None if it does not exist."""
        return await self._call("update_profile", profile_id, validate_insert(data))

    async def delete_profile(self, profile_id: int) -> bool:
        return await self._call("delete_profile", profile_id)

    # --- Preferences ---

    async def get_global_preferences(self) -> UserPreferences:
        stored = await self._call("get_preferences")
        return merge_preferences(stored)

    async def save_global_preferences(self, partial: PreferencesUpdate | dict[str, Any]) -> None:
        """Merge the given keys into the stored preferences."""
        values = validate_preferences(partial).to_settings()
        if values:
            await self._call("save_preferences", values)

    # --- Users ---

    async def get_user(self, username: str) -> UserRecord | None:
        return await self._call("get_user", username)

    async def authenticate(self, username: str, password: str) -> UserRecord | None:
        """Return the user if the plain-text password matches."""
        user = await self.get_user(username)
        if user is None or not hmac.compare_digest(user.password.encode(), password.encode()):
            return None
        return user

    async def seed_user(self, username: str, password: str, role: Role) -> None:
        """
        Make sure an account exists in every store that may serve logins.

        The fallback is always seeded so that logins keep working after a
        substitution; a primary failure here is logged, not raised.
        """
        await self.fallback.ensure_user(username, password, role)
        if self.primary is not None and self.primary_available:
            try:
                await self.primary.ensure_user(username, password, role)
            except Exception as exc:
                logger.warning("Could not seed user %s in the primary backend: %s", username, exc)
