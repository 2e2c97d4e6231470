"""Preference schemas for the global settings record."""

from typing import Any, Literal

from pydantic import ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from profile_manager.errors import ValidationError
from profile_manager.schemas.profile import CamelModel, format_errors

Theme = Literal["light", "dark", "system"]
Language = Literal["en", "es", "fr", "de", "ja"]


class UserPreferences(CamelModel):
    """Global user preferences with defaults applied."""

    theme: Theme = "system"
    language: Language = "en"
    cards_per_page: int = Field(default=6, ge=3, le=12)
    notifications_enabled: bool = True
    compact_view: bool = False
    accent_color: str = "#0284c7"


class PreferencesUpdate(CamelModel):
    """Partial preferences; only the keys that are set get written."""

    model_config = ConfigDict(extra="forbid")

    theme: Theme | None = None
    language: Language | None = None
    cards_per_page: int | None = Field(default=None, ge=3, le=12)
    notifications_enabled: bool | None = None
    compact_view: bool | None = None
    accent_color: str | None = Field(default=None, min_length=1)

    def to_settings(self) -> dict[str, Any]:
        """Settings rows to upsert, keyed by their wire name."""
        return self.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)


def validate_preferences(payload: Any) -> PreferencesUpdate:
    """
    Validate a partial preferences payload.

    Raises:
        ValidationError: listing every invalid or unknown key
    """
    if isinstance(payload, PreferencesUpdate):
        return payload
    try:
        return PreferencesUpdate.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(format_errors(exc.errors())) from exc


def merge_preferences(stored: dict[str, Any]) -> UserPreferences:
    """Apply defaults to whatever keys have been stored, ignoring unknown ones."""
    known = {
        field.alias or name: stored[field.alias or name]
        for name, field in UserPreferences.model_fields.items()
        if (field.alias or name) in stored
    }
    return UserPreferences.model_validate(known)
