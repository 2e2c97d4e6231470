"""Common contract shared by every profile store."""

import secrets
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

from profile_manager.schemas.auth import Role, UserRecord
from profile_manager.schemas.profile import Profile, ProfileInsert, ProfilePage


class ProfileBackend(ABC):
    """
    A store for profiles, settings and users.

    Implementations must behave identically from the caller's point of view;
    the storage facade swaps one for another when the primary store fails.
    """

    #: Label reported by the health endpoint and in fallback log lines
    name: str = "backend"

    async def ping(self) -> bool:
        """Return True if the store can serve requests."""
        return True

    async def close(self) -> None:
        """Release any resources held by the store."""

    @abstractmethod
    async def get_profiles(self, query: str | None = None, page: int = 1, limit: int = 6) -> ProfilePage:
        """Return one page of profiles matching query, newest first."""

    @abstractmethod
    async def get_profile(self, profile_id: int) -> Profile | None:
        """Return the profile with the given id, or None."""

    @abstractmethod
    async def create_profile(self, data: ProfileInsert) -> Profile:
        """Persist a new profile and return it with its assigned id."""

    @abstractmethod
    async def update_profile(self, profile_id: int, data: ProfileInsert) -> Profile | None:
        """Replace the profile with the given id, or return None if it does not exist."""

    @abstractmethod
    async def delete_profile(self, profile_id: int) -> bool:
        """Delete the profile with the given id. Returns whether it existed."""

    @abstractmethod
    async def get_preferences(self) -> dict[str, Any]:
        """Return the stored preference values keyed by setting name."""

    @abstractmethod
    async def save_preferences(self, values: dict[str, Any]) -> None:
        """Upsert each preference value, leaving other keys untouched."""

    @abstractmethod
    async def get_user(self, username: str) -> UserRecord | None:
        """Return the user with the given username, or None."""

    @abstractmethod
    async def ensure_user(self, username: str, password: str, role: Role) -> UserRecord:
        """Create the user if no user with that username exists yet."""


def generate_profile_id() -> str:
    """Generate a profileId for callers that did not supply one."""
    return secrets.token_hex(6)


def normalize_query(query: str | None) -> str | None:
    """Strip surrounding whitespace; a blank query means no filter."""
    if query is None:
        return None
    return query.strip() or None


def matches_query(profile: Profile, query: str | None) -> bool:
    """Case-insensitive substring match on name, profileId and searchId."""
    query = normalize_query(query)
    if query is None:
        return True
    needle = query.lower()
    return any(
        value is not None and needle in value.lower()
        for value in (profile.name, profile.profile_id, profile.search_id)
    )


def page_of(profiles: Iterable[Profile], query: str | None, page: int, limit: int) -> ProfilePage:
    """Filter, order by id descending and slice a collection of profiles."""
    matching = sorted(
        (p for p in profiles if matches_query(p, query)),
        key=lambda p: p.id,
        reverse=True,
    )
    offset = (page - 1) * limit
    return ProfilePage(
        profiles=[p.model_copy(deep=True) for p in matching[offset : offset + limit]],
        total=len(matching),
    )


def build_profile(profile_id: int, data: ProfileInsert, current_profile_id: str | None = None) -> Profile:
    """
    Materialize an insert payload as a stored profile.

    An update that leaves profileId unset keeps current_profile_id.
    """
    return Profile(
        id=profile_id,
        profile_id=data.profile_id or current_profile_id or generate_profile_id(),
        name=data.name,
        description=data.description,
        search_id=data.search_id,
        photo_url=data.photo_url,
        documents=[doc.model_copy() for doc in data.documents],
    )
