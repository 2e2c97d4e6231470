"""Relational store backed by SQLAlchemy's async ORM."""

import asyncio
import functools
from typing import Any

from sqlalchemy import delete, func, or_, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from profile_manager.database import create_sessionmaker
from profile_manager.errors import BackendUnavailableError, ConflictError
from profile_manager.logging_config import get_logger
from profile_manager.models.profile import Profile as ProfileRow
from profile_manager.models.profile import Setting
from profile_manager.models.user import User
from profile_manager.schemas.auth import Role, UserRecord
from profile_manager.schemas.profile import Profile, ProfileInsert, ProfilePage
from profile_manager.storage.base import ProfileBackend, generate_profile_id

logger = get_logger("storage.sql")

# Errors that mean the database, not the request, is at fault
INFRASTRUCTURE_ERRORS = (SQLAlchemyError, OSError, asyncio.TimeoutError)

# OFFSET is a signed 64-bit integer in PostgreSQL and SQLite
MAX_OFFSET = 2**63 - 1


def translate_errors(method):
    """Re-raise driver and connection failures as BackendUnavailableError."""

    @functools.wraps(method)
    async def wrapper(self, *args, **kwargs):
        try:
            return await method(self, *args, **kwargs)
        except INFRASTRUCTURE_ERRORS as exc:
            raise BackendUnavailableError(f"{method.__name__} failed: {exc}") from exc

    return wrapper


def _to_profile(row: ProfileRow) -> Profile:
    return Profile(
        id=row.id,
        profile_id=row.profile_id,
        name=row.name,
        description=row.description,
        search_id=row.search_id,
        photo_url=row.photo_url,
        documents=row.documents or [],
    )


def _to_user(row: User) -> UserRecord:
    return UserRecord(id=row.id, username=row.username, password=row.password, role=row.role)


def _documents(data: ProfileInsert) -> list[dict[str, Any]]:
    return [doc.model_dump(by_alias=True) for doc in data.documents]


class SqlBackend(ProfileBackend):
    """
    Primary store: PostgreSQL in production, any async SQLAlchemy dialect in tests.

    Each call runs in its own session and commits or rolls back before
    returning. profileId uniqueness is enforced by the table's unique
    constraint and reported as ConflictError.
    """

    name = "primary"

    def __init__(self, engine: AsyncEngine, connect_timeout: float = 5.0):
        self.engine = engine
        self.connect_timeout = connect_timeout
        self._sessionmaker = create_sessionmaker(engine)

    async def ping(self) -> bool:
        try:
            async with asyncio.timeout(self.connect_timeout):
                async with self.engine.connect() as conn:
                    await conn.execute(text("SELECT 1"))
        except INFRASTRUCTURE_ERRORS as exc:
            logger.warning("Database health check failed: %s", exc)
            return False
        return True

    async def close(self) -> None:
        await self.engine.dispose()

    @translate_errors
    async def get_profiles(self, query: str | None = None, page: int = 1, limit: int = 6) -> ProfilePage:
        stmt = select(ProfileRow)
        if query:
            stmt = stmt.where(
                or_(
                    ProfileRow.name.icontains(query, autoescape=True),
                    ProfileRow.profile_id.icontains(query, autoescape=True),
                    ProfileRow.search_id.icontains(query, autoescape=True),
                )
            )

        offset = (page - 1) * limit
        async with self._sessionmaker() as session:
            total = await session.scalar(select(func.count()).select_from(stmt.subquery()))
            if offset > MAX_OFFSET:
                return ProfilePage(profiles=[], total=total or 0)
            result = await session.scalars(stmt.order_by(ProfileRow.id.desc()).offset(offset).limit(limit))
            profiles = [_to_profile(row) for row in result]

        return ProfilePage(profiles=profiles, total=total or 0)

    @translate_errors
    async def get_profile(self, profile_id: int) -> Profile | None:
        async with self._sessionmaker() as session:
            row = await session.get(ProfileRow, profile_id)
            return _to_profile(row) if row else None

    @translate_errors
    async def create_profile(self, data: ProfileInsert) -> Profile:
        row = ProfileRow(
            profile_id=data.profile_id or generate_profile_id(),
            name=data.name,
            description=data.description,
            search_id=data.search_id,
            photo_url=data.photo_url,
            documents=_documents(data),
        )

        async with self._sessionmaker() as session:
            existing = await session.scalar(
                select(ProfileRow.id).where(ProfileRow.profile_id == row.profile_id)
            )
            if existing is not None:
                raise ConflictError(f"Profile with profileId '{row.profile_id}' already exists")

            session.add(row)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise ConflictError(f"Profile with profileId '{row.profile_id}' already exists") from exc

            return _to_profile(row)

    @translate_errors
    async def update_profile(self, profile_id: int, data: ProfileInsert) -> Profile | None:
        async with self._sessionmaker() as session:
            row = await session.get(ProfileRow, profile_id)
            if row is None:
                return None

            new_profile_id = data.profile_id or row.profile_id
            if new_profile_id != row.profile_id:
                clash = await session.scalar(
                    select(ProfileRow.id).where(ProfileRow.profile_id == new_profile_id)
                )
                if clash is not None:
                    raise ConflictError(f"Profile with profileId '{new_profile_id}' already exists")

            row.profile_id = new_profile_id
            row.name = data.name
            row.description = data.description
            row.search_id = data.search_id
            row.photo_url = data.photo_url
            row.documents = _documents(data)

            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise ConflictError(f"Profile with profileId '{new_profile_id}' already exists") from exc

            return _to_profile(row)

    @translate_errors
    async def delete_profile(self, profile_id: int) -> bool:
        async with self._sessionmaker() as session:
            result = await session.execute(delete(ProfileRow).where(ProfileRow.id == profile_id))
            await session.commit()
            return result.rowcount > 0

    @translate_errors
    async def get_preferences(self) -> dict[str, Any]:
        async with self._sessionmaker() as session:
            result = await session.scalars(select(Setting))
            return {setting.key: setting.value for setting in result}

    @translate_errors
    async def save_preferences(self, values: dict[str, Any]) -> None:
        async with self._sessionmaker() as session:
            for key, value in values.items():
                await session.merge(Setting(key=key, value=value))
            await session.commit()

    @translate_errors
    async def get_user(self, username: str) -> UserRecord | None:
        async with self._sessionmaker() as session:
            row = await session.scalar(select(User).where(User.username == username))
            return _to_user(row) if row else None

    @translate_errors
    async def ensure_user(self, username: str, password: str, role: Role) -> UserRecord:
        async with self._sessionmaker() as session:
            row = await session.scalar(select(User).where(User.username == username))
            if row is not None:
                return _to_user(row)

            row = User(username=username, password=password, role=role)
            session.add(row)
            try:
                await session.commit()
            except IntegrityError:
                # Seeded concurrently by another worker
                await session.rollback()
                row = await session.scalar(select(User).where(User.username == username))
            return _to_user(row)
