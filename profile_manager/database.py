"""Database engine construction and schema management."""

import asyncio
from pathlib import Path

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from alembic.command import downgrade, upgrade
from alembic.config import Config

Base = declarative_base()


def create_engine(database_url: str, connect_timeout: float = 5.0) -> AsyncEngine:
    """Create an async engine whose connection attempts give up after connect_timeout seconds."""
    connect_args = {}
    if make_url(database_url).get_backend_name() == "postgresql":
        connect_args["timeout"] = connect_timeout
    return create_async_engine(
        database_url,
        echo=False,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def _alembic_config(db_url: str | None = None) -> Config:
    root = Path(__file__).resolve().parents[1]
    config = Config(str(root / "alembic.ini"))
    config.set_main_option("script_location", str(root / "alembic"))
    if db_url:
        config.set_main_option("sqlalchemy.url", db_url)
        config.attributes["url_from_caller"] = True
    return config


def run_migrations(revision: str = "head", db_url: str | None = None) -> None:
    """Run Alembic migrations to a target revision."""
    config = _alembic_config(db_url)
    if revision == "base":
        downgrade(config, revision)
    else:
        upgrade(config, revision)


async def migrate_db(db_url: str, revision: str = "head") -> None:
    """Async wrapper to run migrations without blocking the event loop."""
    await asyncio.to_thread(run_migrations, revision, db_url)


async def create_tables(engine: AsyncEngine) -> None:
    """Create all tables straight from the models, bypassing migrations."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
