"""
Client-side data access for the Profile Manager.

``ProfileApiClient`` talks to a running API and caches list results per
query until the next successful mutation. ``LocalProfileClient`` offers the
same calls against a local JSON store for deployments without a server.
``paginate`` and ``filter_profiles`` reproduce the paging and search rules
clients apply to lists they already hold.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx

from profile_manager.schemas.auth import UserInfo
from profile_manager.schemas.preferences import UserPreferences, merge_preferences, validate_preferences
from profile_manager.schemas.profile import Profile, ProfileInsert, ProfilePage, validate_insert
from profile_manager.storage.base import matches_query, normalize_query
from profile_manager.storage.local import LocalBackend

DEFAULT_PAGE_SIZE = 6


class ApiError(Exception):
    """A non-2xx response from the API."""

    def __init__(self, status_code: int, message: str, code: str | None = None):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.code = code


@dataclass
class PageSlice:
    """One page of an in-memory list."""

    items: list[Profile]
    current_page: int
    total_pages: int


def paginate(items: Sequence[Profile], page: int = 1, per_page: int = DEFAULT_PAGE_SIZE) -> PageSlice:
    """Slice items into a page, clamping page to the valid range."""
    if per_page < 1:
        raise ValueError(f"per_page must be at least 1, got {per_page}")
    total_pages = max(1, math.ceil(len(items) / per_page))
    current = min(max(page, 1), total_pages)
    start = (current - 1) * per_page
    return PageSlice(items=list(items[start : start + per_page]), current_page=current, total_pages=total_pages)


def filter_profiles(profiles: Sequence[Profile], query: str | None) -> list[Profile]:
    """Case-insensitive search on name, profileId and searchId; a blank query keeps everything."""
    query = normalize_query(query)
    if query is None:
        return list(profiles)
    return [p for p in profiles if matches_query(p, query)]


def _payload(data: ProfileInsert | dict[str, Any]) -> dict[str, Any]:
    return validate_insert(data).model_dump(by_alias=True, mode="json")


class ProfileApiClient:
    """Async HTTP client for the Profile Manager API."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        username: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._client = http_client or httpx.AsyncClient(base_url=base_url)
        self.username = username
        self._list_cache: dict[tuple[str | None, int, int], ProfilePage] = {}

    async def __aenter__(self) -> "ProfileApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.username}"} if self.username else {}

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        response = await self._client.request(method, f"/api/v1{path}", headers=self._headers(), **kwargs)
        if response.is_error:
            try:
                error = response.json().get("error", {})
            except ValueError:
                error = {}
            if not isinstance(error, dict):
                error = {"message": str(error)}
            raise ApiError(response.status_code, error.get("message", response.reason_phrase), error.get("code"))
        return response

    def invalidate(self) -> None:
        """Drop every cached list result."""
        self._list_cache.clear()

    async def login(self, username: str, password: str) -> UserInfo:
        """Log in and use the account for later mutations."""
        response = await self._request("POST", "/auth/login", json={"username": username, "password": password})
        user = UserInfo.model_validate(response.json()["user"])
        self.username = user.username
        return user

    def logout(self) -> None:
        self.username = None

    async def list_profiles(
        self, query: str | None = None, page: int = 1, limit: int = DEFAULT_PAGE_SIZE
    ) -> ProfilePage:
        query = normalize_query(query)
        key = (query, page, limit)
        if key not in self._list_cache:
            params: dict[str, Any] = {"page": page, "limit": limit}
            if query:
                params["query"] = query
            response = await self._request("GET", "/profiles", params=params)
            self._list_cache[key] = ProfilePage.model_validate(response.json())
        return self._list_cache[key]

    async def get_profile(self, profile_id: int) -> Profile | None:
        try:
            response = await self._request("GET", f"/profiles/{profile_id}")
        except ApiError as exc:
            if exc.status_code == 404:
                return None
            raise
        return Profile.model_validate(response.json())

    async def create_profile(self, data: ProfileInsert | dict[str, Any]) -> Profile:
        response = await self._request("POST", "/profiles", json=_payload(data))
        self.invalidate()
        return Profile.model_validate(response.json())

    async def update_profile(self, profile_id: int, data: ProfileInsert | dict[str, Any]) -> Profile | None:
        try:
            response = await self._request("PUT", f"/profiles/{profile_id}", json=_payload(data))
        except ApiError as exc:
            if exc.status_code == 404:
                return None
            raise
        self.invalidate()
        return Profile.model_validate(response.json())

    async def delete_profile(self, profile_id: int) -> bool:
        try:
            await self._request("DELETE", f"/profiles/{profile_id}")
        except ApiError as exc:
            if exc.status_code == 404:
                return False
            raise
        self.invalidate()
        return True

    async def get_preferences(self) -> UserPreferences:
        response = await self._request("GET", "/preferences")
        return UserPreferences.model_validate(response.json())

    async def save_preferences(self, partial: dict[str, Any]) -> UserPreferences:
        body = validate_preferences(partial).to_settings()
        response = await self._request("PUT", "/preferences", json=body)
        return UserPreferences.model_validate(response.json())


class LocalProfileClient:
    """The same operations, served from a local JSON file with no server."""

    def __init__(self, path: str | Path):
        self.store = LocalBackend(path)

    async def list_profiles(
        self, query: str | None = None, page: int = 1, limit: int = DEFAULT_PAGE_SIZE
    ) -> ProfilePage:
        return await self.store.get_profiles(normalize_query(query), page, limit)

    async def get_profile(self, profile_id: int) -> Profile | None:
        return await self.store.get_profile(profile_id)

    async def create_profile(self, data: ProfileInsert | dict[str, Any]) -> Profile:
        return await self.store.create_profile(validate_insert(data))

    async def update_profile(self, profile_id: int, data: ProfileInsert | dict[str, Any]) -> Profile | None:
        return await self.store.update_profile(profile_id, validate_insert(data))

    async def delete_profile(self, profile_id: int) -> bool:
        return await self.store.delete_profile(profile_id)

    async def get_preferences(self) -> UserPreferences:
        return merge_preferences(await self.store.get_preferences())

    async def save_preferences(self, partial: dict[str, Any]) -> UserPreferences:
        values = validate_preferences(partial).to_settings()
        if values:
            await self.store.save_preferences(values)
        return await self.get_preferences()
