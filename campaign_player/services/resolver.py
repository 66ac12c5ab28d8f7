from __future__ import annotations

import logging
from dataclasses import dataclass

from pydantic import ValidationError

from campaign_player.api_client import CampaignApiClient, CampaignApiError
from campaign_player.config import settings
from campaign_player.enums import VariantEnum
from campaign_player.schemas.public import (
    CampaignVideoData,
    NamedVideoData,
    PopularVideo,
    PublicCampaign,
    PublicVideo,
    RoundRobinInfo,
    VariantVideoData,
)

logger = logging.getLogger(__name__)


class PageNotFound(Exception):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class PageLoadFailed(Exception):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


@dataclass
class ResolvedVideo:
    campaign: PublicCampaign
    video: PublicVideo
    variant: VariantEnum | None = None
    round_robin: RoundRobinInfo | None = None


def media_url(video: PublicVideo) -> str | None:
    if video.file_url:
        return video.file_url
    if video.file_path:
        return f"{settings.media_storage_base_url}/{video.file_path.lstrip('/')}"
    return None


def poster_url(video: PublicVideo) -> str | None:
    if video.thumbnail_url:
        return video.thumbnail_url
    if video.thumbnail_path:
        return f"{settings.media_storage_base_url}/{video.thumbnail_path.lstrip('/')}"
    return None


class CampaignResolver:
    """
    Single-attempt lookups of the video to serve on a public page.

    Which video a campaign serves next is decided by the platform API; the cursor it returns is
    passed through for display and never cached or recomputed here.
    """

    def __init__(self, client: CampaignApiClient) -> None:
        self._client = client

    async def resolve_campaign_video(self, *, brand_username: str, campaign_name: str) -> ResolvedVideo:
        try:
            envelope = await self._client.get_campaign_video(
                brand_username=brand_username,
                campaign_name=campaign_name,
            )
        except CampaignApiError as exc:
            logger.warning(
                "Campaign video fetch failed",
                extra={"brand_username": brand_username, "campaign_name": campaign_name, "error": str(exc)},
            )
            raise PageLoadFailed("Failed to load campaign") from exc

        if not envelope.get("success"):
            raise PageNotFound(str(envelope.get("message") or "Campaign not found"))
        try:
            data = CampaignVideoData.model_validate(envelope.get("data"))
        except ValidationError as exc:
            raise PageLoadFailed("Failed to load campaign") from exc

        return ResolvedVideo(
            campaign=data.campaign,
            video=data.video,
            variant=data.video.variant,
            round_robin=RoundRobinInfo(total_videos=data.total_videos, current_index=data.current_index),
        )

    async def resolve_named_video(
        self,
        *,
        brand_username: str,
        campaign_name: str,
        video_name: str,
    ) -> ResolvedVideo:
        try:
            envelope = await self._client.get_named_video(
                brand_username=brand_username,
                campaign_name=campaign_name,
                video_name=video_name,
            )
        except CampaignApiError as exc:
            raise PageLoadFailed("Failed to load video") from exc

        if not envelope.get("success"):
            raise PageNotFound(str(envelope.get("message") or "Video not found"))
        try:
            data = NamedVideoData.model_validate(envelope.get("data"))
        except ValidationError as exc:
            raise PageLoadFailed("Failed to load video") from exc
        return ResolvedVideo(campaign=data.campaign, video=data.video, variant=data.video.variant)

    async def resolve_variant_video(self, *, slug: str) -> ResolvedVideo:
        try:
            raw = await self._client.get_variant_video(slug=slug)
        except CampaignApiError as exc:
            if exc.status_code == 404:
                raise PageNotFound("The video you're looking for doesn't exist.") from exc
            raise PageLoadFailed("Failed to load video") from exc

        try:
            data = VariantVideoData.model_validate(raw)
        except ValidationError as exc:
            raise PageLoadFailed("Failed to load video") from exc
        if data.video.campaign is None:
            raise PageLoadFailed("Failed to load video")

        video_fields = data.video.model_dump(exclude={"campaign", "status", "created_at", "updated_at"})
        return ResolvedVideo(
            campaign=PublicCampaign.model_validate(data.video.campaign.model_dump()),
            video=PublicVideo.model_validate(video_fields),
            variant=data.variant,
        )

    async def list_popular_videos(self, *, limit: int) -> list[PopularVideo]:
        try:
            items = await self._client.list_popular_videos(limit=limit)
        except CampaignApiError as exc:
            raise PageLoadFailed("Failed to load popular videos") from exc
        try:
            return [PopularVideo.model_validate(item) for item in items]
        except ValidationError as exc:
            raise PageLoadFailed("Failed to load popular videos") from exc
