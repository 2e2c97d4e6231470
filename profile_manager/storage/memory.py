"""In-process store used when the database is unreachable."""

from typing import Any

from profile_manager.schemas.auth import Role, UserRecord
from profile_manager.schemas.profile import Profile, ProfileInsert, ProfilePage
from profile_manager.storage.base import ProfileBackend, build_profile, page_of


class InMemoryUsers:
    """User accounts kept in a plain dict, keyed by username."""

    def __init__(self) -> None:
        self._users: dict[str, UserRecord] = {}
        self._next_user_id = 1

    async def get_user(self, username: str) -> UserRecord | None:
        return self._users.get(username)

    async def ensure_user(self, username: str, password: str, role: Role) -> UserRecord:
        existing = self._users.get(username)
        if existing is not None:
            return existing
        user = UserRecord(id=self._next_user_id, username=username, password=password, role=role)
        self._next_user_id += 1
        self._users[username] = user
        return user


class MemoryBackend(InMemoryUsers, ProfileBackend):
    """
    Keyed-map store with the same contract as the database store.

    Data lives only as long as the process and is never synchronized with the
    database. Unlike the database, this store does not enforce profileId
    uniqueness: degraded-mode writes are accepted rather than rejected.
    """

    name = "fallback"

    def __init__(self) -> None:
        super().__init__()
        self._profiles: dict[int, Profile] = {}
        self._settings: dict[str, Any] = {}
        self.current_id = 1

    async def get_profiles(self, query: str | None = None, page: int = 1, limit: int = 6) -> ProfilePage:
        return page_of(self._profiles.values(), query, page, limit)

    async def get_profile(self, profile_id: int) -> Profile | None:
        profile = self._profiles.get(profile_id)
        return profile.model_copy(deep=True) if profile else None

    async def create_profile(self, data: ProfileInsert) -> Profile:
        # No await between reading and bumping the counter
        new_id = self.current_id
        self.current_id += 1
        profile = build_profile(new_id, data)
        self._profiles[new_id] = profile
        return profile.model_copy(deep=True)

    async def update_profile(self, profile_id: int, data: ProfileInsert) -> Profile | None:
        current = self._profiles.get(profile_id)
        if current is None:
            return None
        profile = build_profile(profile_id, data, current.profile_id)
        self._profiles[profile_id] = profile
        return profile.model_copy(deep=True)

    async def delete_profile(self, profile_id: int) -> bool:
        return self._profiles.pop(profile_id, None) is not None

    async def get_preferences(self) -> dict[str, Any]:
        return dict(self._settings)

    async def save_preferences(self, values: dict[str, Any]) -> None:
        self._settings.update(values)
