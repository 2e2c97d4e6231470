"""User model."""

from sqlalchemy import TIMESTAMP, CheckConstraint, Column, Integer, String, Text, func, text

from profile_manager.database import Base


class User(Base):
    """User account model. Passwords are stored in plain text."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String, unique=True, nullable=False)
    password = Column(Text, nullable=False)
    role = Column(Text, nullable=False, server_default=text("'viewer'"))
    created_at = Column(TIMESTAMP, server_default=func.now())

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'viewer')", name="ck_users_role"),
    )
