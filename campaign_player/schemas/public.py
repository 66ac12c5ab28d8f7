from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from campaign_player.enums import CtaRevealPolicyEnum, PageStatusEnum, VariantEnum
from campaign_player.schemas.campaigns import CampaignSettings
from campaign_player.schemas.videos import Video


class PublicCampaign(BaseModel):
    id: int
    name: str
    slug: str = ""
    description: str | None = None
    settings: CampaignSettings = Field(default_factory=CampaignSettings)

    @field_validator("settings", mode="before")
    @classmethod
    def normalize_settings(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return {}
        return value


class PublicVideo(BaseModel):
    id: int
    campaign_id: int | None = None
    title: str = ""
    slug: str = ""
    description: str | None = None
    file_path: str | None = None
    file_url: str | None = None
    thumbnail_path: str | None = None
    thumbnail_url: str | None = None
    mime_type: str | None = None
    duration: float | None = None
    views: int | None = None
    cta_text: str | None = None
    cta_url: str | None = None
    variant: VariantEnum | None = None


class CampaignVideoData(BaseModel):
    campaign: PublicCampaign
    video: PublicVideo
    # Server-owned round-robin cursor; display only.
    total_videos: int = 0
    current_index: int = 0


class NamedVideoData(BaseModel):
    campaign: PublicCampaign
    video: PublicVideo


class VariantVideoData(BaseModel):
    video: Video
    variant: VariantEnum = VariantEnum.A

    @field_validator("variant", mode="before")
    @classmethod
    def default_variant(cls, value: Any) -> Any:
        if value is None or value == "":
            return VariantEnum.A
        return value


class PopularVideo(BaseModel):
    slug: str
    title: str = ""
    description: str | None = None
    thumbnail: str | None = None
    views: int = 0
    campaign_name: str | None = None


class MediaSource(BaseModel):
    src: str
    poster: str | None = None
    mime_type: str = "video/mp4"
    autoplay: bool = False
    loop: bool = False
    controls: bool = False
    muted: bool = False


class CtaButton(BaseModel):
    text: str
    url: str
    css_class: str
    visible: bool = False


class PlayerState(BaseModel):
    is_playing: bool = False
    is_muted: bool = False
    is_fullscreen: bool = False
    has_started: bool = False
    video_ended: bool = False
    show_cta: bool = False
    current_time: float = 0.0
    duration: float = 0.0
    progress: float = 0.0


class RoundRobinInfo(BaseModel):
    total_videos: int
    current_index: int


class WatchPage(BaseModel):
    mount_id: str
    status: PageStatusEnum
    message: str | None = None
    title: str | None = None
    description: str | None = None
    campaign_name: str | None = None
    variant: VariantEnum | None = None
    reveal_policy: CtaRevealPolicyEnum = CtaRevealPolicyEnum.on_end
    media: MediaSource | None = None
    cta: CtaButton | None = None
    player: PlayerState | None = None
    round_robin: RoundRobinInfo | None = None
    meta: dict[str, str] = Field(default_factory=dict)


MediaEventType = Literal[
    "loadedmetadata",
    "timeupdate",
    "play",
    "pause",
    "ended",
    "volumechange",
    "fullscreenchange",
]


class MediaEventRequest(BaseModel):
    type: MediaEventType
    current_time: float | None = Field(default=None, ge=0)
    duration: float | None = Field(default=None, ge=0)
    muted: bool | None = None
    fullscreen: bool | None = None


PlayerCommand = Literal["toggle_play", "toggle_mute", "toggle_fullscreen", "replay", "seek"]


class PlayerCommandRequest(BaseModel):
    command: PlayerCommand
    fraction: float | None = None


class MediaInstruction(BaseModel):
    action: Literal[
        "play",
        "pause",
        "set_muted",
        "set_current_time",
        "request_fullscreen",
        "exit_fullscreen",
    ]
    value: float | bool | None = None


class PlayerCommandResponse(BaseModel):
    instructions: list[MediaInstruction] = Field(default_factory=list)
    player: PlayerState


class CtaOpenResponse(BaseModel):
    url: str
    target: str = "_blank"
    features: str = "noopener,noreferrer"
