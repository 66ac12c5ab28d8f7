from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from campaign_player.enums import VariantEnum, VideoStatusEnum
from campaign_player.schemas.campaigns import Campaign
from campaign_player.schemas.validators import (
    coerce_form_bool,
    optional_http_url,
    optional_text,
    require_text,
)


class Video(BaseModel):
    id: int
    campaign_id: int | None = None
    title: str = ""
    slug: str = ""
    description: str | None = None
    file_path: str | None = None
    file_url: str | None = None
    thumbnail_path: str | None = None
    thumbnail_url: str | None = None
    file_size: int | None = None
    duration: float | None = None
    mime_type: str | None = None
    status: VideoStatusEnum = VideoStatusEnum.active
    views: int | None = None
    variant: VariantEnum | None = None
    cta_text: str | None = None
    cta_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    campaign: Campaign | None = None

    @field_validator("title", mode="before")
    @classmethod
    def coerce_title(cls, value: Any) -> Any:
        return "" if value is None else value


class VideoForm(BaseModel):
    campaign_id: int
    title: str
    description: str | None = None
    cta_text: str | None = None
    cta_url: str | None = None
    variant: VariantEnum | None = None
    status: VideoStatusEnum | None = None
    duration: float | None = Field(default=None, ge=0)
    is_active: bool | None = None

    @field_validator("campaign_id", mode="before")
    @classmethod
    def validate_campaign_id(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValueError("Please select a campaign.")
        return value

    @field_validator("title", mode="before")
    @classmethod
    def validate_title(cls, value: Any) -> str:
        return require_text(value)

    @field_validator("description", "cta_text", mode="before")
    @classmethod
    def normalize_optional_text(cls, value: Any) -> str | None:
        return optional_text(value)

    @field_validator("cta_url", mode="before")
    @classmethod
    def validate_cta_url(cls, value: Any) -> str | None:
        return optional_http_url(value)

    @field_validator("variant", "status", "duration", mode="before")
    @classmethod
    def blank_as_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("is_active", mode="before")
    @classmethod
    def coerce_is_active(cls, value: Any) -> Any:
        return coerce_form_bool(value)

    def to_form_fields(self, *, for_update: bool = False) -> dict[str, str]:
        # The platform API names the video title "name".
        fields = {
            "campaign_id": str(self.campaign_id),
            "name": self.title,
        }
        if for_update:
            fields["description"] = self.description or ""
            fields["cta_text"] = self.cta_text or ""
            fields["cta_url"] = self.cta_url or ""
            fields["is_active"] = "0" if self.is_active is False else "1"
        else:
            if self.description:
                fields["description"] = self.description
            if self.cta_text:
                fields["cta_text"] = self.cta_text
            if self.cta_url:
                fields["cta_url"] = self.cta_url
            if self.is_active is not None:
                fields["is_active"] = "1" if self.is_active else "0"
        if self.variant is not None:
            fields["variant"] = self.variant.value
        if self.status is not None:
            fields["status"] = self.status.value
        if self.duration:
            fields["duration"] = f"{self.duration:g}"
        return fields
