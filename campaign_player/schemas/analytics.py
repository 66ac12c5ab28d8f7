from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from campaign_player.enums import AnalyticsEventTypeEnum

AdditionalValue = str | int | float | bool | None


class TrackEventPayload(BaseModel):
    event_type: AnalyticsEventTypeEnum
    campaign_id: int | None = None
    video_id: int | None = None
    additional_data: dict[str, AdditionalValue] = Field(default_factory=dict)

    @property
    def variant(self) -> str | None:
        value = self.additional_data.get("variant")
        return value if isinstance(value, str) else None


class AnalyticsEvent(BaseModel):
    id: int
    campaign_id: int | None = None
    video_id: int | None = None
    event_type: AnalyticsEventTypeEnum
    device_type: str | None = None
    browser: str | None = None
    os: str | None = None
    country: str | None = None
    referrer: str | None = None
    additional_data: dict[str, AdditionalValue] | None = None
    created_at: datetime | None = None


class CountryCount(BaseModel):
    country: str
    count: int


class DeviceCount(BaseModel):
    device_type: str
    count: int


class DailyStat(BaseModel):
    date: str
    views: int = 0
    clicks: int = 0


class AnalyticsSummary(BaseModel):
    total_views: int = 0
    total_cta_clicks: int = 0
    unique_visitors: int = 0
    conversion_rate: float = 0.0
    engagement_rate: float = 0.0
    top_countries: list[CountryCount] = Field(default_factory=list)
    device_breakdown: list[DeviceCount] = Field(default_factory=list)
    daily_stats: list[DailyStat] = Field(default_factory=list)


class AnalyticsFilters(BaseModel):
    campaign_id: int | None = None
    video_id: int | None = None
    event_type: AnalyticsEventTypeEnum | None = None
    date_from: str | None = None
    date_to: str | None = None
    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=10, ge=1, le=100)


ExportFormat = Literal["csv", "xlsx"]


class RealTimeAnalytics(BaseModel):
    active_viewers: int = 0
    recent_events: list[AnalyticsEvent] = Field(default_factory=list)


class AnalyticsExport(BaseModel):
    filename: str
    content_type: str
    content: bytes
