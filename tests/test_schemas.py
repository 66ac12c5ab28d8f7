from campaign_player.enums import VariantEnum
from campaign_player.schemas.analytics import TrackEventPayload
from campaign_player.schemas.campaigns import Campaign
from campaign_player.schemas.common import Paginated
from campaign_player.schemas.public import PublicCampaign, VariantVideoData
from campaign_player.schemas.videos import Video


def test_campaign_settings_tolerate_list_and_string_flags():
    assert Campaign.model_validate({"id": 1, "name": "A", "settings": []}).settings.autoplay is False

    campaign = Campaign.model_validate(
        {"id": 1, "name": "A", "settings": {"autoplay": "true", "loop": "0", "muted": None}}
    )

    assert campaign.settings.autoplay is True
    assert campaign.settings.loop is False
    assert campaign.settings.muted is False


def test_public_campaign_null_settings_default():
    assert PublicCampaign.model_validate({"id": 1, "name": "A", "settings": None}).settings.controls is False


def test_variant_defaults_to_a():
    data = VariantVideoData.model_validate({"video": {"id": 2, "title": None}, "variant": None})

    assert data.variant == VariantEnum.A
    assert data.video.title == ""


def test_paginated_videos_parse_nested_campaign():
    page = Paginated[Video].model_validate(
        {
            "data": [{"id": 3, "title": "Beach", "status": "draft", "campaign": {"id": 4, "name": "Summer"}}],
            "current_page": 2,
            "last_page": 5,
            "per_page": 1,
            "total": 5,
        }
    )

    assert page.data[0].campaign.name == "Summer"
    assert page.data[0].status.value == "draft"
    assert page.current_page == 2


def test_track_event_variant_property():
    payload = TrackEventPayload(event_type="video_play", additional_data={"variant": "B"})

    assert payload.variant == "B"
    assert TrackEventPayload(event_type="video_play").variant is None
