from __future__ import annotations

import asyncio

import pytest

from campaign_player.api_client import CampaignApiError, CampaignApiValidationError
from campaign_player.enums import VariantEnum
from campaign_player.services.resolver import CampaignResolver, PageLoadFailed, PageNotFound


def _campaign_envelope(*, current_index: int = 0) -> dict:
    return {
        "success": True,
        "data": {
            "campaign": {"id": 4, "name": "Summer", "slug": "summer", "settings": []},
            "video": {
                "id": 11,
                "campaign_id": 4,
                "title": "Beach",
                "file_url": "https://cdn.test/beach.mp4",
                "cta_text": "Shop",
                "cta_url": "https://shop.test",
            },
            "total_videos": 3,
            "current_index": current_index,
        },
    }


class FakePlatform:
    def __init__(self, **responses) -> None:
        self.responses = responses
        self.calls: list[tuple[str, dict]] = []

    def _respond(self, name: str, kwargs: dict):
        self.calls.append((name, kwargs))
        response = self.responses[name]
        if isinstance(response, Exception):
            raise response
        return response

    async def get_campaign_video(self, **kwargs):
        return self._respond("get_campaign_video", kwargs)

    async def get_named_video(self, **kwargs):
        return self._respond("get_named_video", kwargs)

    async def get_variant_video(self, **kwargs):
        return self._respond("get_variant_video", kwargs)

    async def list_popular_videos(self, **kwargs):
        return self._respond("list_popular_videos", kwargs)


def test_campaign_video_passes_round_robin_cursor_through():
    platform = FakePlatform(get_campaign_video=_campaign_envelope(current_index=2))
    resolver = CampaignResolver(platform)

    resolved = asyncio.run(resolver.resolve_campaign_video(brand_username="acme", campaign_name="summer"))

    assert resolved.video.id == 11
    assert resolved.campaign.settings.autoplay is False
    assert resolved.round_robin.total_videos == 3
    assert resolved.round_robin.current_index == 2
    assert platform.calls == [("get_campaign_video", {"brand_username": "acme", "campaign_name": "summer"})]


def test_campaign_video_success_false_is_not_found():
    resolver = CampaignResolver(FakePlatform(get_campaign_video={"success": False}))

    with pytest.raises(PageNotFound) as excinfo:
        asyncio.run(resolver.resolve_campaign_video(brand_username="acme", campaign_name="winter"))

    assert excinfo.value.message == "Campaign not found"


def test_campaign_video_not_found_keeps_platform_message():
    resolver = CampaignResolver(
        FakePlatform(get_campaign_video={"success": False, "message": "No active videos in this campaign"})
    )

    with pytest.raises(PageNotFound, match="No active videos in this campaign"):
        asyncio.run(resolver.resolve_campaign_video(brand_username="acme", campaign_name="summer"))


def test_campaign_video_api_error_is_generic_failure():
    resolver = CampaignResolver(FakePlatform(get_campaign_video=CampaignApiError(message="boom")))

    with pytest.raises(PageLoadFailed) as excinfo:
        asyncio.run(resolver.resolve_campaign_video(brand_username="acme", campaign_name="summer"))

    assert excinfo.value.message == "Failed to load campaign"


def test_named_video_messages():
    resolver = CampaignResolver(FakePlatform(get_named_video={"success": False}))
    with pytest.raises(PageNotFound, match="Video not found"):
        asyncio.run(
            resolver.resolve_named_video(brand_username="acme", campaign_name="summer", video_name="beach")
        )

    resolver = CampaignResolver(FakePlatform(get_named_video=CampaignApiError(message="timeout")))
    with pytest.raises(PageLoadFailed, match="Failed to load video"):
        asyncio.run(
            resolver.resolve_named_video(brand_username="acme", campaign_name="summer", video_name="beach")
        )


def test_variant_video_defaults_missing_variant_to_a():
    platform = FakePlatform(
        get_variant_video={
            "video": {
                "id": 5,
                "title": "Demo",
                "slug": "demo-video",
                "file_path": "videos/demo.mp4",
                "campaign": {"id": 2, "name": "Launch", "settings": {"autoplay": "1"}},
            },
            "variant": "",
        }
    )

    resolved = asyncio.run(CampaignResolver(platform).resolve_variant_video(slug="demo-video"))

    assert resolved.variant == VariantEnum.A
    assert resolved.campaign.name == "Launch"
    assert resolved.campaign.settings.autoplay is True
    assert resolved.video.slug == "demo-video"


def test_variant_video_404_is_not_found():
    platform = FakePlatform(get_variant_video=CampaignApiError(message="missing", status_code=404))

    with pytest.raises(PageNotFound, match="doesn't exist"):
        asyncio.run(CampaignResolver(platform).resolve_variant_video(slug="nope"))


def test_variant_video_without_campaign_fails():
    platform = FakePlatform(get_variant_video={"video": {"id": 5, "title": "Orphan"}, "variant": "B"})

    with pytest.raises(PageLoadFailed):
        asyncio.run(CampaignResolver(platform).resolve_variant_video(slug="orphan"))


def test_popular_videos_wraps_failures():
    platform = FakePlatform(list_popular_videos=[{"slug": "demo-video", "title": "Demo", "views": 10}])
    videos = asyncio.run(CampaignResolver(platform).list_popular_videos(limit=6))
    assert [video.slug for video in videos] == ["demo-video"]

    platform = FakePlatform(list_popular_videos=CampaignApiValidationError(message="bad", errors={}))
    with pytest.raises(PageLoadFailed, match="Failed to load popular videos"):
        asyncio.run(CampaignResolver(platform).list_popular_videos(limit=6))
