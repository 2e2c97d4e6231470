"""Process-lifetime owner of the storage backends."""

from pathlib import Path

from fastapi import Request

from profile_manager.config import Settings
from profile_manager.database import create_engine, migrate_db
from profile_manager.logging_config import get_logger
from profile_manager.storage.facade import StorageFacade
from profile_manager.storage.local import LocalBackend
from profile_manager.storage.memory import MemoryBackend
from profile_manager.storage.sql import SqlBackend

logger = get_logger("storage.context")


class StorageContext:
    """
    Builds the storage facade for the configured mode and tears it down.

    Created once in the application lifespan and kept on ``app.state``.
    """

    def __init__(self, facade: StorageFacade):
        self.facade = facade

    @classmethod
    async def create(cls, config: Settings) -> "StorageContext":
        if config.storage_mode == "local":
            facade = StorageFacade(fallback=LocalBackend(Path(config.local_store_path)))
        elif config.database_url:
            engine = create_engine(config.database_url, config.db_connect_timeout)
            primary = SqlBackend(engine, connect_timeout=config.db_connect_timeout)
            facade = StorageFacade(fallback=MemoryBackend(), primary=primary)
        else:
            logger.warning("DATABASE_URL is not set; profiles are kept in memory only")
            facade = StorageFacade(fallback=MemoryBackend())

        await facade.check_health()

        if facade.primary_available and config.auto_migrate:
            try:
                await migrate_db(config.database_url)
            except Exception:
                logger.exception("Database migration failed; falling back to the in-memory store")
                facade.primary_available = False

        context = cls(facade)
        await context.seed_users(config)
        return context

    async def seed_users(self, config: Settings) -> None:
        await self.facade.seed_user(config.admin_username, config.admin_password, "admin")
        if config.viewer_username and config.viewer_password:
            await self.facade.seed_user(config.viewer_username, config.viewer_password, "viewer")

    async def close(self) -> None:
        await self.facade.close()


def get_storage(request: Request) -> StorageFacade:
    """Dependency that provides the storage facade for the running app."""
    return request.app.state.storage.facade
