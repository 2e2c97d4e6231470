"""
JSON-document store for serverless deployments.

The document holds two namespaces under fixed keys: the full profile list
and the preferences object. Both are read and written wholesale on every
operation, so a mutation either lands completely or not at all.
"""

import asyncio
import json
import os
from pathlib import Path
from typing import Any

from profile_manager.logging_config import get_logger
from profile_manager.schemas.profile import Profile, ProfileInsert, ProfilePage
from profile_manager.storage.base import ProfileBackend, build_profile, page_of
from profile_manager.storage.memory import InMemoryUsers

logger = get_logger("storage.local")

PROFILES_KEY = "profile-manager-profiles"
PREFERENCES_KEY = "profile-manager-preferences"


class LocalBackend(InMemoryUsers, ProfileBackend):
    """Profiles and preferences persisted to a local JSON file."""

    name = "local"

    def __init__(self, path: str | Path):
        super().__init__()
        self.path = Path(path)
        self._lock = asyncio.Lock()
        # Highest id handed out by this instance, so deleting the newest
        # profile never frees its id for reuse.
        self._last_id = 0

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.exception("Could not read local store %s; starting empty", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        os.replace(tmp_path, self.path)

    async def _load(self) -> dict[str, Any]:
        return await asyncio.to_thread(self._read)

    async def _save(self, data: dict[str, Any]) -> None:
        await asyncio.to_thread(self._write, data)

    @staticmethod
    def _profiles(data: dict[str, Any]) -> list[Profile]:
        return [Profile.model_validate(item) for item in data.get(PROFILES_KEY, [])]

    @staticmethod
    def _store_profiles(data: dict[str, Any], profiles: list[Profile]) -> None:
        data[PROFILES_KEY] = [p.model_dump(by_alias=True) for p in profiles]

    async def get_profiles(self, query: str | None = None, page: int = 1, limit: int = 6) -> ProfilePage:
        data = await self._load()
        return page_of(self._profiles(data), query, page, limit)

    async def get_profile(self, profile_id: int) -> Profile | None:
        data = await self._load()
        return next((p for p in self._profiles(data) if p.id == profile_id), None)

    async def create_profile(self, data: ProfileInsert) -> Profile:
        async with self._lock:
            document = await self._load()
            profiles = self._profiles(document)
            new_id = max([p.id for p in profiles] + [self._last_id]) + 1
            self._last_id = new_id

            profile = build_profile(new_id, data)
            profiles.append(profile)
            self._store_profiles(document, profiles)
            await self._save(document)
            return profile

    async def update_profile(self, profile_id: int, data: ProfileInsert) -> Profile | None:
        async with self._lock:
            document = await self._load()
            profiles = self._profiles(document)
            for index, current in enumerate(profiles):
                if current.id == profile_id:
                    break
            else:
                return None

            profile = build_profile(profile_id, data, current.profile_id)
            profiles[index] = profile
            self._store_profiles(document, profiles)
            await self._save(document)
            return profile

    async def delete_profile(self, profile_id: int) -> bool:
        async with self._lock:
            document = await self._load()
            profiles = self._profiles(document)
            remaining = [p for p in profiles if p.id != profile_id]
            if len(remaining) == len(profiles):
                return False

            self._store_profiles(document, remaining)
            await self._save(document)
            return True

    async def get_preferences(self) -> dict[str, Any]:
        data = await self._load()
        preferences = data.get(PREFERENCES_KEY)
        return dict(preferences) if isinstance(preferences, dict) else {}

    async def save_preferences(self, values: dict[str, Any]) -> None:
        async with self._lock:
            document = await self._load()
            preferences = document.get(PREFERENCES_KEY)
            merged = dict(preferences) if isinstance(preferences, dict) else {}
            merged.update(values)
            document[PREFERENCES_KEY] = merged
            await self._save(document)
