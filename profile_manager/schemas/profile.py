"""Profile-related Pydantic schemas and payload validation."""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from profile_manager.errors import ValidationError


class CamelModel(BaseModel):
    """Base model exposing camelCase field names on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Document(CamelModel):
    """A document attached to a profile."""

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    type: str = ""
    url: str
    date_added: str


class ProfileInsert(CamelModel):
    """
    Payload for creating or fully replacing a profile.

    Updates submit the whole object: omitted optional fields are reset to
    their defaults rather than left unchanged.
    """

    profile_id: str | None = Field(default=None, min_length=1)
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    search_id: str | None = None
    photo_url: str | None = None
    documents: list[Document] = Field(default_factory=list)

    @field_validator("name", "description")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject whitespace-only values."""
        if not v.strip():
            raise ValueError("Value cannot be blank")
        return v

    @field_validator("search_id", "photo_url")
    @classmethod
    def empty_to_none(cls, v: str | None) -> str | None:
        """Coerce empty optional strings to None."""
        return v or None

    @model_validator(mode="after")
    def validate_document_ids(self) -> "ProfileInsert":
        """Document ids must be unique within a profile."""
        seen: set[str] = set()
        for doc in self.documents:
            if doc.id in seen:
                raise ValueError(f"Duplicate document id '{doc.id}'")
            seen.add(doc.id)
        return self


class Profile(CamelModel):
    """A stored profile."""

    id: int
    profile_id: str
    name: str
    description: str
    search_id: str | None = None
    photo_url: str | None = None
    documents: list[Document] = Field(default_factory=list)


class ProfilePage(BaseModel):
    """One page of profiles plus the total number of matches."""

    profiles: list[Profile]
    total: int


def format_errors(errors: list[Mapping[str, Any]]) -> list[str]:
    """Render pydantic error dicts as ``field: message`` strings."""
    messages = []
    for error in errors:
        field = ".".join(str(loc) for loc in error.get("loc", ()))
        msg = error.get("msg", "Invalid value")
        messages.append(f"{field}: {msg}" if field else msg)
    return messages


def validate_insert(payload: Any) -> ProfileInsert:
    """
    Validate a raw profile payload.

    Raises:
        ValidationError: listing every violated field constraint
    """
    if isinstance(payload, ProfileInsert):
        return payload
    try:
        return ProfileInsert.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(format_errors(exc.errors())) from exc
