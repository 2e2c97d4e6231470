"""Profile model."""

from sqlalchemy import JSON, Column, Integer, Text, text
from sqlalchemy.dialects.postgresql import JSONB

from profile_manager.database import Base

JSONType = JSON().with_variant(JSONB(), "postgresql")


class Profile(Base):
    """
    A managed profile record.

    Documents are embedded as a JSON array; they have no lifecycle of their own.
    """

    __tablename__ = "profiles"
    # Keep ids monotonic on SQLite too; Postgres serials never reuse values.
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    profile_id = Column(Text, unique=True, nullable=False)
    name = Column(Text, nullable=False)
    search_id = Column(Text)
    description = Column(Text, nullable=False)
    photo_url = Column(Text)
    documents = Column(JSONType, nullable=False, default=list, server_default=text("'[]'"))


class Setting(Base):
    """A single global preference value keyed by its setting name."""

    __tablename__ = "settings"

    key = Column(Text, primary_key=True)
    value = Column(JSONType, nullable=False)
