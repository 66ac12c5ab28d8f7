from __future__ import annotations

import asyncio

import httpx
import pytest

from campaign_player.api_client import CampaignApiClient, CampaignApiError, CampaignApiValidationError


def _install_send(client: CampaignApiClient, response: httpx.Response, sink: list[dict] | None = None) -> None:
    async def fake_send(method, path, **kwargs):
        if sink is not None:
            sink.append({"method": method, "path": path, **kwargs})
        return response

    client._send = fake_send  # type: ignore[method-assign]


def test_campaign_miss_returns_envelope_despite_404_status():
    client = CampaignApiClient(base_url="https://platform.test/api")
    _install_send(client, httpx.Response(404, json={"success": False, "message": "Campaign not found"}))

    envelope = asyncio.run(client.get_campaign_video(brand_username="acme", campaign_name="winter"))

    assert envelope == {"success": False, "message": "Campaign not found"}


def test_public_paths_escape_segments():
    client = CampaignApiClient(base_url="https://platform.test/api")
    calls: list[dict] = []
    _install_send(client, httpx.Response(200, json={"success": True, "data": {}}), calls)

    asyncio.run(client.get_named_video(brand_username="acme", campaign_name="summer sale", video_name="a/b"))

    assert calls[0]["path"] == "/public/acme/summer%20sale/a%2Fb"


def test_validation_errors_are_normalized():
    client = CampaignApiClient(base_url="https://platform.test/api")
    _install_send(
        client,
        httpx.Response(
            422,
            json={"message": "The given data was invalid.", "errors": {"name": "Taken.", "cta_url": ["Bad URL."]}},
        ),
    )

    with pytest.raises(CampaignApiValidationError) as excinfo:
        asyncio.run(client.post_form("/campaigns", token="tok", fields={"name": "x"}))

    assert excinfo.value.status_code == 422
    assert excinfo.value.errors == {"name": ["Taken."], "cta_url": ["Bad URL."]}


def test_auth_errors_keep_status_and_server_errors_become_502():
    client = CampaignApiClient(base_url="https://platform.test/api")
    _install_send(client, httpx.Response(403, json={"message": "This action is unauthorized."}))

    with pytest.raises(CampaignApiError) as excinfo:
        asyncio.run(client.get("/users", token="tok"))
    assert excinfo.value.status_code == 403
    assert str(excinfo.value) == "This action is unauthorized."

    _install_send(client, httpx.Response(500, text="oops"))
    with pytest.raises(CampaignApiError) as excinfo:
        asyncio.run(client.get("/users", token="tok"))
    assert excinfo.value.status_code == 502


def test_post_form_tunnels_put_and_empty_body_is_empty_dict():
    client = CampaignApiClient(base_url="https://platform.test/api")
    calls: list[dict] = []
    _install_send(client, httpx.Response(204), calls)

    body = asyncio.run(
        client.post_form(
            "/videos/3",
            token="tok",
            fields={"name": "Beach"},
            files={"thumbnail": ("t.png", b"png", "image/png")},
            method_override="PUT",
        )
    )

    assert body == {}
    assert calls[0]["method"] == "POST"
    assert calls[0]["form_fields"] == {"name": "Beach", "_method": "PUT"}
    assert calls[0]["files"] == {"thumbnail": ("t.png", b"png", "image/png")}


def test_login_requires_user_and_token():
    client = CampaignApiClient(base_url="https://platform.test/api")
    _install_send(client, httpx.Response(200, json={"data": {"token": "abc"}}))

    with pytest.raises(CampaignApiError, match="missing user or token"):
        asyncio.run(client.login(email="ada@example.com", password="secret"))


def test_variant_video_requires_video_payload():
    client = CampaignApiClient(base_url="https://platform.test/api")
    _install_send(client, httpx.Response(200, json={"data": {"variant": "A"}}))

    with pytest.raises(CampaignApiError, match="missing data.video"):
        asyncio.run(client.get_variant_video(slug="demo-video"))


def test_network_errors_become_api_errors(monkeypatch):
    class FailingAsyncClient:
        def __init__(self, *args, **kwargs):
            pass

        async def __aenter__(self):
            return self

        async def __aexit__(self, *exc_info):
            return False

        async def request(self, method, url, **kwargs):
            raise httpx.ConnectError("connection refused")

    monkeypatch.setattr(httpx, "AsyncClient", FailingAsyncClient)
    client = CampaignApiClient(base_url="https://platform.test/api")

    with pytest.raises(CampaignApiError, match="Network error"):
        asyncio.run(client.track_event(payload={"event_type": "page_view"}))


def test_download_returns_raw_body_and_content_type():
    client = CampaignApiClient(base_url="https://platform.test/api")
    calls: list[dict] = []
    _install_send(
        client,
        httpx.Response(200, content=b"id,event_type\n1,page_view\n", headers={"content-type": "text/csv"}),
        calls,
    )

    content, content_type = asyncio.run(
        client.download("/analytics/export", token="tok", params={"format": "csv", "campaign_id": 4})
    )

    assert content == b"id,event_type\n1,page_view\n"
    assert content_type == "text/csv"
    assert calls[0]["params"] == {"format": "csv", "campaign_id": 4}


def test_download_maps_error_statuses():
    client = CampaignApiClient(base_url="https://platform.test/api")
    _install_send(client, httpx.Response(500, text="export crashed"))

    with pytest.raises(CampaignApiError) as excinfo:
        asyncio.run(client.download("/analytics/export", token="tok"))

    assert excinfo.value.status_code == 502
