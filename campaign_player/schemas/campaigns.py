from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from campaign_player.schemas.validators import (
    coerce_form_bool,
    optional_text,
    require_http_url,
    require_text,
)


class CampaignSettings(BaseModel):
    autoplay: bool = False
    loop: bool = False
    controls: bool = False
    muted: bool = False

    @field_validator("autoplay", "loop", "controls", "muted", mode="before")
    @classmethod
    def coerce_flags(cls, value: Any) -> Any:
        if value is None:
            return False
        return coerce_form_bool(value)


def _settings_or_default(value: Any) -> Any:
    # The platform API serializes an empty settings map as [] or null.
    if not isinstance(value, dict):
        return {}
    return value


class Campaign(BaseModel):
    id: int
    user_id: int | None = None
    name: str
    slug: str = ""
    description: str | None = None
    cta_text: str | None = None
    cta_url: str | None = None
    thumbnail_path: str | None = None
    thumbnail_url: str | None = None
    is_active: bool = True
    settings: CampaignSettings = Field(default_factory=CampaignSettings)
    created_at: datetime | None = None
    updated_at: datetime | None = None
    videos_count: int | None = None
    total_views: int | None = None
    total_cta_clicks: int | None = None

    @field_validator("settings", mode="before")
    @classmethod
    def normalize_settings(cls, value: Any) -> Any:
        return _settings_or_default(value)


class CampaignForm(BaseModel):
    name: str
    cta_text: str
    cta_url: str
    description: str | None = None
    is_active: bool | None = None
    settings: CampaignSettings | None = None

    @field_validator("name", "cta_text", mode="before")
    @classmethod
    def validate_required_text(cls, value: Any) -> str:
        return require_text(value)

    @field_validator("cta_url", mode="before")
    @classmethod
    def validate_cta_url(cls, value: Any) -> str:
        return require_http_url(value)

    @field_validator("description", mode="before")
    @classmethod
    def normalize_description(cls, value: Any) -> str | None:
        return optional_text(value)

    @field_validator("is_active", mode="before")
    @classmethod
    def coerce_is_active(cls, value: Any) -> Any:
        return coerce_form_bool(value)

    def to_form_fields(self) -> dict[str, str]:
        fields = {
            "name": self.name,
            "cta_text": self.cta_text,
            "cta_url": self.cta_url,
        }
        if self.description:
            fields["description"] = self.description
        if self.is_active is not None:
            fields["is_active"] = "1" if self.is_active else "0"
        if self.settings is not None:
            for key, enabled in self.settings.model_dump().items():
                fields[f"settings[{key}]"] = "1" if enabled else "0"
        return fields
