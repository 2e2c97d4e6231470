"""Authentication schemas for request/response validation."""

from typing import Literal

from pydantic import BaseModel, Field

Role = Literal["admin", "viewer"]


class UserRecord(BaseModel):
    """A stored user account. The password is kept in plain text."""

    id: int
    username: str
    password: str
    role: Role = "viewer"


class UserInfo(BaseModel):
    """Public user information."""

    id: int
    username: str
    role: Role


class LoginRequest(BaseModel):
    """User login request schema."""

    username: str = Field(min_length=1)
    password: str


class LoginResponse(BaseModel):
    """User login response schema."""

    user: UserInfo
