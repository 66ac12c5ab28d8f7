from __future__ import annotations

import pytest

from campaign_player import deps
from campaign_player.api_client import CampaignApiError, CampaignApiValidationError
from campaign_player.enums import UserRoleEnum


def _flush_telemetry(api_client) -> None:
    api_client.portal.call(deps.telemetry.flush)


def _summer_envelope(current_index: int) -> dict:
    return {
        "success": True,
        "data": {
            "campaign": {"id": 4, "name": "Summer", "settings": {"autoplay": True, "muted": True}},
            "video": {
                "id": 11 + current_index,
                "campaign_id": 4,
                "title": f"Beach {current_index}",
                "file_path": f"videos/beach-{current_index}.mp4",
                "cta_text": "Shop",
                "cta_url": "https://shop.test",
            },
            "total_videos": 2,
            "current_index": current_index,
        },
    }


def _demo_variant_payload() -> dict:
    return {
        "video": {
            "id": 7,
            "campaign_id": 1,
            "title": "Demo video",
            "slug": "demo-video",
            "file_url": "https://cdn.test/demo.mp4",
            "cta_text": "Buy Now",
            "cta_url": "https://x.test",
            "campaign": {"id": 1, "name": "Launch", "settings": None},
        },
        "variant": "B",
    }


def test_health(api_client):
    response = api_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_campaign_page_mounts_server_selected_video(api_client, tracked_events, monkeypatch):
    served = iter([0, 1])

    async def fake_get_campaign_video(*, brand_username: str, campaign_name: str):
        assert (brand_username, campaign_name) == ("acme", "summer")
        return _summer_envelope(next(served))

    monkeypatch.setattr(deps.api_client, "get_campaign_video", fake_get_campaign_video)

    first = api_client.get("/public/acme/summer", headers={"user-agent": "pytest-browser"})
    second = api_client.get("/public/acme/summer")

    assert first.status_code == 200
    assert second.status_code == 200
    page = first.json()
    assert page["status"] == "ready"
    assert page["media"]["src"] == "https://platform.test/storage/videos/beach-0.mp4"
    assert page["media"]["autoplay"] is True
    assert page["media"]["muted"] is True
    assert page["cta"]["visible"] is False
    assert page["round_robin"]["total_videos"] == 2
    assert page["reveal_policy"] == "on_end"
    assert deps.mount_registry.get(page["mount_id"]) is not None

    _flush_telemetry(api_client)
    page_views = [event for event in tracked_events if event["event_type"] == "page_view"]
    assert len(page_views) == 2
    assert page_views[0]["additional_data"]["variant"] == "A"
    assert page_views[0]["additional_data"]["user_agent"] == "pytest-browser"


def test_campaign_page_not_found(api_client, tracked_events, monkeypatch):
    async def fake_get_campaign_video(**kwargs):
        return {"success": False, "message": "Campaign not found"}

    monkeypatch.setattr(deps.api_client, "get_campaign_video", fake_get_campaign_video)

    response = api_client.get("/public/acme/summer")

    assert response.status_code == 404
    body = response.json()
    assert body["status"] == "not_found"
    assert body["message"] == "Campaign not found"
    assert body["media"] is None
    assert len(deps.mount_registry) == 0
    _flush_telemetry(api_client)
    assert tracked_events == []


def test_campaign_page_api_failure_is_generic(api_client, monkeypatch):
    async def fake_get_campaign_video(**kwargs):
        raise CampaignApiError(message="Platform API call failed (500): stack trace")

    monkeypatch.setattr(deps.api_client, "get_campaign_video", fake_get_campaign_video)

    response = api_client.get("/public/acme/summer")

    assert response.status_code == 502
    assert response.json()["message"] == "Failed to load campaign"


def test_named_video_page_reveals_cta_after_delay(api_client, monkeypatch):
    async def fake_get_named_video(**kwargs):
        envelope = _summer_envelope(0)
        return {"success": True, "data": {"campaign": envelope["data"]["campaign"], "video": envelope["data"]["video"]}}

    monkeypatch.setattr(deps.api_client, "get_named_video", fake_get_named_video)

    response = api_client.get("/public/acme/summer/beach-0")

    assert response.status_code == 200
    assert response.json()["reveal_policy"] == "after_delay"
    assert response.json()["round_robin"] is None


def test_demo_video_watch_flow(api_client, tracked_events, monkeypatch):
    async def fake_get_variant_video(*, slug: str):
        assert slug == "demo-video"
        return _demo_variant_payload()

    monkeypatch.setattr(deps.api_client, "get_variant_video", fake_get_variant_video)

    page = api_client.get("/watch/demo-video").json()
    mount_id = page["mount_id"]
    assert page["variant"] == "B"
    assert page["cta"]["text"] == "Buy Now"

    for event in [
        {"type": "loadedmetadata", "duration": 20},
        {"type": "play", "current_time": 0},
        {"type": "pause", "current_time": 5},
        {"type": "play", "current_time": 5},
    ]:
        assert api_client.post(f"/player/{mount_id}/media-events", json=event).status_code == 200
    ended = api_client.post(f"/player/{mount_id}/media-events", json={"type": "ended", "current_time": 20})
    assert ended.json()["show_cta"] is True

    player = api_client.get(f"/player/{mount_id}").json()
    assert "bg-green-600" in player["cta"]["css_class"]
    assert player["cta"]["visible"] is True

    opened = api_client.post(f"/player/{mount_id}/cta")
    assert opened.status_code == 200
    assert opened.json() == {"url": "https://x.test", "target": "_blank", "features": "noopener,noreferrer"}

    _flush_telemetry(api_client)
    event_types = [event["event_type"] for event in tracked_events]
    assert event_types.count("video_play") == 1
    click = next(event for event in tracked_events if event["event_type"] == "cta_click")
    assert click["additional_data"]["variant"] == "B"
    assert click["video_id"] == 7


def test_cta_click_succeeds_when_tracking_fails(api_client, monkeypatch):
    async def fake_get_variant_video(**kwargs):
        return _demo_variant_payload()

    async def failing_track_event(*, payload: dict):
        raise CampaignApiError(message="analytics down")

    monkeypatch.setattr(deps.api_client, "get_variant_video", fake_get_variant_video)
    monkeypatch.setattr(deps.api_client, "track_event", failing_track_event)

    mount_id = api_client.get("/watch/demo-video").json()["mount_id"]
    response = api_client.post(f"/player/{mount_id}/cta")
    _flush_telemetry(api_client)

    assert response.status_code == 200
    assert response.json()["url"] == "https://x.test"


def test_player_commands_return_browser_instructions(api_client, monkeypatch):
    async def fake_get_variant_video(**kwargs):
        return _demo_variant_payload()

    monkeypatch.setattr(deps.api_client, "get_variant_video", fake_get_variant_video)
    mount_id = api_client.get("/watch/demo-video").json()["mount_id"]

    muted = api_client.post(f"/player/{mount_id}/commands", json={"command": "toggle_mute"}).json()
    unmuted = api_client.post(f"/player/{mount_id}/commands", json={"command": "toggle_mute"}).json()
    seek = api_client.post(f"/player/{mount_id}/commands", json={"command": "seek"})

    assert muted["instructions"] == [{"action": "set_muted", "value": True}]
    assert muted["player"]["is_muted"] is True
    assert unmuted["player"]["is_muted"] is False
    assert seek.status_code == 409


def test_unmounted_player_is_gone(api_client, monkeypatch):
    async def fake_get_variant_video(**kwargs):
        return _demo_variant_payload()

    monkeypatch.setattr(deps.api_client, "get_variant_video", fake_get_variant_video)
    mount_id = api_client.get("/watch/demo-video").json()["mount_id"]

    assert api_client.delete(f"/player/{mount_id}").status_code == 204
    assert api_client.get(f"/player/{mount_id}").status_code == 404
    assert api_client.post(f"/player/{mount_id}/cta").status_code == 404


def test_variant_watch_page_missing_video(api_client, monkeypatch):
    async def fake_get_variant_video(**kwargs):
        raise CampaignApiError(message="No query results", status_code=404)

    monkeypatch.setattr(deps.api_client, "get_variant_video", fake_get_variant_video)

    response = api_client.get("/watch/missing")

    assert response.status_code == 404
    assert response.json()["message"] == "The video you're looking for doesn't exist."


def test_popular_videos_limit_is_clamped(api_client, monkeypatch):
    limits: list[int] = []

    async def fake_list_popular_videos(*, limit: int):
        limits.append(limit)
        return [{"slug": "demo-video", "title": "Demo", "views": 3}]

    monkeypatch.setattr(deps.api_client, "list_popular_videos", fake_list_popular_videos)

    default = api_client.get("/watch/popular")
    clamped = api_client.get("/watch/popular", params={"limit": 500})

    assert default.status_code == 200
    assert default.json()[0]["slug"] == "demo-video"
    assert clamped.status_code == 200
    assert limits == [6, 50]


def test_session_login_lookup_and_logout(api_client, monkeypatch):
    logouts: list[str] = []

    async def fake_login(*, email: str, password: str):
        return {
            "token": "platform-token",
            "user": {"id": 9, "name": "Ada", "email": email, "username": "ada", "role": "agency"},
        }

    async def fake_logout(*, token: str):
        logouts.append(token)

    monkeypatch.setattr(deps.api_client, "login", fake_login)
    monkeypatch.setattr(deps.api_client, "logout", fake_logout)

    login = api_client.post("/session", json={"email": "ada@example.com", "password": "secret123"})
    assert login.status_code == 200
    headers = {"Authorization": f"Bearer {login.json()['token']}"}

    current = api_client.get("/session", headers=headers)
    assert current.json()["user"]["role"] == "agency"
    assert current.json()["assignable_roles"] == ["brand"]

    assert api_client.delete("/session", headers=headers).status_code == 204
    assert logouts == ["platform-token"]
    assert api_client.get("/session", headers=headers).status_code == 401


def test_session_login_rejected_by_platform(api_client, monkeypatch):
    async def fake_login(**kwargs):
        raise CampaignApiError(message="Invalid credentials", status_code=401)

    monkeypatch.setattr(deps.api_client, "login", fake_login)

    response = api_client.post("/session", json={"email": "ada@example.com", "password": "wrong"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


def test_dashboard_requires_bearer_token(api_client):
    response = api_client.get("/dashboard/campaigns")

    assert response.status_code == 401


def test_campaign_create_with_invalid_url_makes_no_calls(api_client, sign_in, monkeypatch):
    calls: list[str] = []

    async def fake_post_form(*args, **kwargs):
        calls.append("post_form")
        return {}

    monkeypatch.setattr(deps.api_client, "post_form", fake_post_form)

    response = api_client.post(
        "/dashboard/campaigns",
        data={"name": "Summer", "cta_text": "Shop", "cta_url": "not-a-url"},
        headers=sign_in(),
    )

    assert response.status_code == 422
    body = response.json()
    assert body["phase"] == "error"
    assert body["errors"] == {"cta_url": ["Please enter a valid URL (including http:// or https://)."]}
    assert calls == []


def test_campaign_create_uploads_thumbnail(api_client, sign_in, monkeypatch):
    captured: dict = {}

    async def fake_post_form(path, *, token, fields, files=None, method_override=None):
        captured.update(path=path, token=token, fields=fields, files=files)
        return {"data": {"id": 21, "name": fields["name"], "settings": []}}

    monkeypatch.setattr(deps.api_client, "post_form", fake_post_form)

    response = api_client.post(
        "/dashboard/campaigns",
        data={
            "name": "Summer",
            "cta_text": "Shop",
            "cta_url": "https://shop.test",
            "settings[autoplay]": "1",
        },
        files={"thumbnail": ("thumb.png", b"png-bytes", "image/png")},
        headers=sign_in(),
    )

    assert response.status_code == 201
    assert response.json()["phase"] == "success"
    assert response.json()["data"]["id"] == 21
    assert captured["token"] == "token-admin"
    assert captured["fields"]["settings[autoplay]"] == "1"
    assert captured["files"] == {"thumbnail": ("thumb.png", b"png-bytes", "image/png")}


def test_campaign_update_echoes_server_field_errors(api_client, sign_in, monkeypatch):
    async def fake_post_form(path, *, token, fields, files=None, method_override=None):
        assert method_override == "PUT"
        raise CampaignApiValidationError(
            message="The given data was invalid.",
            errors={"name": ["The name has already been taken."]},
        )

    monkeypatch.setattr(deps.api_client, "post_form", fake_post_form)

    response = api_client.post(
        "/dashboard/campaigns/3",
        data={"_method": "PUT", "name": "Summer", "cta_text": "Shop", "cta_url": "https://shop.test"},
        headers=sign_in(),
    )

    assert response.status_code == 422
    assert response.json()["errors"] == {"name": ["The name has already been taken."]}


def test_campaign_edit_page_is_populated(api_client, sign_in, monkeypatch):
    async def fake_get(path, *, token, params=None):
        assert path == "/campaigns/3"
        return {"data": {"id": 3, "name": "Summer", "cta_url": "https://shop.test", "settings": {"loop": 1}}}

    monkeypatch.setattr(deps.api_client, "get", fake_get)

    response = api_client.get("/dashboard/campaigns/3/edit", headers=sign_in())

    assert response.status_code == 200
    body = response.json()
    assert body["phase"] == "populated"
    assert body["values"]["name"] == "Summer"
    assert body["values"]["settings"]["loop"] is True


def test_video_create_requires_file(api_client, sign_in, monkeypatch):
    calls: list[str] = []

    async def fake_post_form(*args, **kwargs):
        calls.append("post_form")
        return {}

    monkeypatch.setattr(deps.api_client, "post_form", fake_post_form)

    response = api_client.post(
        "/dashboard/videos",
        data={"campaign_id": "4", "title": "Beach"},
        headers=sign_in(),
    )

    assert response.status_code == 422
    assert response.json()["errors"] == {"video_file": ["Please select a video file."]}
    assert calls == []


def test_backups_are_admin_only(api_client, sign_in, make_user):
    headers = sign_in(token="token-brand", user=make_user(user_id=3, role=UserRoleEnum.brand, name="Bea"))

    response = api_client.get("/dashboard/admin/backups", headers=headers)

    assert response.status_code == 403
    assert response.json()["detail"] == "Access Denied"


def test_backup_restore_by_scope(api_client, sign_in, monkeypatch):
    paths: list[str] = []

    async def fake_post_json(path, *, token, payload=None):
        paths.append(path)
        return {"success": True, "message": "Code restored"}

    monkeypatch.setattr(deps.api_client, "post_json", fake_post_json)

    response = api_client.post(
        "/dashboard/admin/backups/backup-1.zip/restore",
        json={"scope": "code"},
        headers=sign_in(),
    )

    assert response.status_code == 200
    assert response.json() == {"message": "Code restored", "scope": "code"}
    assert paths == ["/admin/backups/backup-1.zip/restore-code"]


def test_agency_cannot_create_admin_users(api_client, sign_in, make_user, monkeypatch):
    calls: list[str] = []

    async def fake_post_json(*args, **kwargs):
        calls.append("post_json")
        return {}

    monkeypatch.setattr(deps.api_client, "post_json", fake_post_json)
    headers = sign_in(token="token-agency", user=make_user(user_id=2, role=UserRoleEnum.agency, name="Ann"))

    response = api_client.post(
        "/dashboard/users",
        json={
            "name": "Eve",
            "username": "eve",
            "email": "eve@example.com",
            "role": "admin",
            "password": "longenough",
            "password_confirmation": "longenough",
        },
        headers=headers,
    )

    assert response.status_code == 403
    assert calls == []


def test_brand_cannot_list_users(api_client, sign_in, make_user):
    headers = sign_in(token="token-brand", user=make_user(user_id=3, role=UserRoleEnum.brand, name="Bea"))

    assert api_client.get("/dashboard/users", headers=headers).status_code == 403


def test_admin_cannot_change_own_role(api_client, sign_in, monkeypatch):
    async def fake_get(path, *, token, params=None):
        return {"data": {"id": 1, "name": "Ada", "email": "ada@example.com", "username": "ada", "role": "admin"}}

    monkeypatch.setattr(deps.api_client, "get", fake_get)

    response = api_client.put(
        "/dashboard/users/1",
        json={"name": "Ada", "username": "ada", "email": "ada@example.com", "role": "brand"},
        headers=sign_in(),
    )

    assert response.status_code == 403


def test_analytics_summary_passes_filters(api_client, sign_in, monkeypatch):
    seen: list[tuple] = []

    async def fake_get(path, *, token, params=None):
        seen.append((path, params))
        return {"data": {"total_views": 10, "total_cta_clicks": 2, "daily_stats": [{"date": "2024-05-01", "views": 10}]}}

    monkeypatch.setattr(deps.api_client, "get", fake_get)

    response = api_client.get(
        "/dashboard/analytics/summary",
        params={"campaign_id": 4, "date_from": "2024-05-01", "event_type": "cta_click"},
        headers=sign_in(),
    )

    assert response.status_code == 200
    assert response.json()["total_views"] == 10
    assert seen == [("/analytics/summary", {"campaign_id": 4, "date_from": "2024-05-01"})]


def test_session_login_rejects_invalid_email_locally(api_client, monkeypatch):
    attempts: list[str] = []

    async def fake_login(*, email: str, password: str):
        attempts.append(email)
        return {}

    monkeypatch.setattr(deps.api_client, "login", fake_login)

    response = api_client.post("/session", json={"email": "not-an-email", "password": "x"})

    assert response.status_code == 422
    body = response.json()
    assert "detail" not in body
    assert body["errors"] == {"email": ["Please enter a valid email address."]}
    assert attempts == []


def test_session_login_reports_missing_fields(api_client):
    response = api_client.post("/session", json={"email": ""})

    assert response.status_code == 422
    assert response.json()["errors"] == {
        "email": ["This field is required."],
        "password": ["This field is required."],
    }


@pytest.mark.parametrize(
    ("route", "platform_path", "body", "message"),
    [
        ("/dashboard/campaigns", "/campaigns", {"data": [{"id": 1}]}, "Failed to load campaigns"),
        ("/dashboard/campaigns/1", "/campaigns/1", {"data": {"id": 1}}, "Failed to load campaign"),
        ("/dashboard/videos", "/videos", {"data": [{"title": "Beach"}]}, "Failed to load videos"),
        ("/dashboard/videos/1", "/videos/1", {"data": {"title": "Beach"}}, "Failed to load video"),
        ("/dashboard/users", "/users", {"data": [{"id": 1}]}, "Failed to load users"),
        ("/dashboard/users/2", "/users/2", {"data": {"id": 2}}, "Failed to load user"),
        ("/dashboard/profile", "/profile", {"data": {"id": 1}}, "Failed to load profile"),
        ("/dashboard/analytics", "/analytics", {"data": [{"id": 1}]}, "Failed to load analytics"),
        (
            "/dashboard/analytics/summary",
            "/analytics/summary",
            {"data": {"total_views": "many"}},
            "Failed to load analytics summary",
        ),
        (
            "/dashboard/analytics/real-time",
            "/analytics/real-time",
            {"data": {"recent_events": "none"}},
            "Failed to load real-time analytics",
        ),
        ("/dashboard/admin/backups", "/admin/backups", {"backups": [{"size": "1 MB"}]}, "Failed to fetch backups"),
    ],
)
def test_malformed_platform_payload_is_bad_gateway(
    api_client, sign_in, monkeypatch, route, platform_path, body, message
):
    async def fake_get(path, *, token, params=None):
        assert path == platform_path
        return body

    monkeypatch.setattr(deps.api_client, "get", fake_get)

    response = api_client.get(route, headers=sign_in())

    assert response.status_code == 502
    assert response.json()["detail"] == message


def test_analytics_event_list_does_not_forward_dates(api_client, sign_in, monkeypatch):
    seen: list[tuple] = []

    async def fake_get(path, *, token, params=None):
        seen.append((path, params))
        return {"data": [], "current_page": 1, "last_page": 1, "per_page": 10, "total": 0}

    monkeypatch.setattr(deps.api_client, "get", fake_get)

    response = api_client.get(
        "/dashboard/analytics",
        params={"event_type": "cta_click", "date_from": "2024-05-01", "date_to": "2024-05-31"},
        headers=sign_in(),
    )

    assert response.status_code == 200
    assert seen == [("/analytics", {"event_type": "cta_click", "page": 1, "per_page": 10})]


def test_analytics_real_time(api_client, sign_in, monkeypatch):
    seen: list[tuple] = []

    async def fake_get(path, *, token, params=None):
        seen.append((path, params))
        return {"data": {"active_viewers": 12, "recent_events": [{"id": 3, "event_type": "page_view"}]}}

    monkeypatch.setattr(deps.api_client, "get", fake_get)

    response = api_client.get("/dashboard/analytics/real-time", params={"campaign_id": 4}, headers=sign_in())

    assert response.status_code == 200
    body = response.json()
    assert body["active_viewers"] == 12
    assert body["recent_events"][0]["event_type"] == "page_view"
    assert seen == [("/analytics/real-time", {"campaign_id": 4})]


def test_analytics_export_streams_file(api_client, sign_in, monkeypatch):
    seen: list[tuple] = []

    async def fake_download(path, *, token, params=None):
        seen.append((path, params))
        return b"id,event_type\n1,page_view\n", "text/csv; charset=utf-8"

    monkeypatch.setattr(deps.api_client, "download", fake_download)

    response = api_client.get(
        "/dashboard/analytics/export",
        params={"format": "csv", "campaign_id": 4, "date_to": "2024-05-31", "event_type": "cta_click"},
        headers=sign_in(),
    )

    assert response.status_code == 200
    assert response.content == b"id,event_type\n1,page_view\n"
    assert response.headers["content-type"].startswith("text/csv")
    assert response.headers["content-disposition"] == 'attachment; filename="analytics-export.csv"'
    assert seen == [("/analytics/export", {"campaign_id": 4, "date_to": "2024-05-31", "format": "csv"})]


def test_analytics_export_rejects_unknown_format(api_client, sign_in):
    response = api_client.get("/dashboard/analytics/export", params={"format": "pdf"}, headers=sign_in())

    assert response.status_code == 422


def test_analytics_export_failure_is_bad_gateway(api_client, sign_in, monkeypatch):
    async def fake_download(path, *, token, params=None):
        raise CampaignApiError(message="Platform API call failed (500): boom")

    monkeypatch.setattr(deps.api_client, "download", fake_download)

    response = api_client.get("/dashboard/analytics/export", headers=sign_in())

    assert response.status_code == 502


def test_profile_view_and_update_refreshes_session(api_client, sign_in, monkeypatch):
    stored = {"id": 1, "name": "Ada", "email": "ada@example.com", "username": "ada", "role": "admin"}
    writes: list[tuple] = []

    async def fake_get(path, *, token, params=None):
        assert path == "/profile"
        return {"data": stored}

    async def fake_put_json(path, *, token, payload):
        writes.append((path, payload))
        stored.update(payload)
        return {"data": stored}

    monkeypatch.setattr(deps.api_client, "get", fake_get)
    monkeypatch.setattr(deps.api_client, "put_json", fake_put_json)
    headers = sign_in()

    assert api_client.get("/dashboard/profile", headers=headers).json()["name"] == "Ada"

    response = api_client.put(
        "/dashboard/profile",
        json={"name": "Ada Lovelace", "username": "ada", "email": "ada@example.com", "password": ""},
        headers=headers,
    )

    assert response.status_code == 200
    assert response.json()["phase"] == "success"
    assert writes == [("/profile", {"name": "Ada Lovelace", "username": "ada", "email": "ada@example.com"})]
    assert api_client.get("/session", headers=headers).json()["user"]["name"] == "Ada Lovelace"
    assert api_client.get("/dashboard/profile", headers=headers).json()["name"] == "Ada Lovelace"


def test_profile_update_validates_before_saving(api_client, sign_in, monkeypatch):
    writes: list[dict] = []

    async def fake_put_json(path, *, token, payload):
        writes.append(payload)
        return {}

    monkeypatch.setattr(deps.api_client, "put_json", fake_put_json)

    response = api_client.put(
        "/dashboard/profile",
        json={
            "name": "Ada",
            "username": "ada",
            "email": "ada@example.com",
            "password": "longenough",
            "password_confirmation": "different",
        },
        headers=sign_in(),
    )
    invalid_email = api_client.put(
        "/dashboard/profile",
        json={"name": "Ada", "username": "ada", "email": "ada@example"},
        headers=sign_in(),
    )

    assert response.status_code == 422
    assert response.json()["errors"] == {"password_confirmation": ["Passwords do not match."]}
    assert invalid_email.status_code == 422
    assert invalid_email.json()["errors"] == {"email": ["Please enter a valid email address."]}
    assert writes == []


def test_variant_watch_page_without_cta_text_has_no_button(api_client, monkeypatch):
    payload = _demo_variant_payload()
    payload["video"]["cta_text"] = None

    async def fake_get_variant_video(**kwargs):
        return payload

    monkeypatch.setattr(deps.api_client, "get_variant_video", fake_get_variant_video)

    page = api_client.get("/watch/demo-video").json()

    assert page["status"] == "ready"
    assert page["cta"] is None


def test_campaign_page_falls_back_to_default_cta_text(api_client, monkeypatch):
    envelope = _summer_envelope(0)
    envelope["data"]["video"]["cta_text"] = None

    async def fake_get_campaign_video(**kwargs):
        return envelope

    monkeypatch.setattr(deps.api_client, "get_campaign_video", fake_get_campaign_video)

    page = api_client.get("/public/acme/summer").json()

    assert page["cta"]["text"] == "Start Choosing"
    assert page["cta"]["url"] == "https://shop.test"
