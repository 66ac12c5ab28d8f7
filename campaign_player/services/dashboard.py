from __future__ import annotations

import logging
from typing import Any, TypeVar
from urllib.parse import quote

from pydantic import BaseModel, ValidationError

from campaign_player.api_client import CampaignApiClient, CampaignApiError, UploadTuple
from campaign_player.auth.session import AuthSession
from campaign_player.schemas.analytics import (
    AnalyticsEvent,
    AnalyticsExport,
    AnalyticsFilters,
    AnalyticsSummary,
    ExportFormat,
    RealTimeAnalytics,
)
from campaign_player.schemas.backups import Backup, BackupCreated, RestoreScope
from campaign_player.schemas.campaigns import Campaign, CampaignForm
from campaign_player.schemas.common import Paginated
from campaign_player.schemas.users import ProfileUpdateForm, User, UserCreateForm, UserUpdateForm
from campaign_player.schemas.videos import Video, VideoForm
from campaign_player.services.query_cache import QueryCache

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_RESTORE_PATHS: dict[str, str] = {
    "full": "restore",
    "code": "restore-code",
    "database": "restore-database",
}


def _unwrap(body: dict[str, Any]) -> dict[str, Any]:
    """Single resources arrive either bare or wrapped as {"data": {...}}."""
    data = body.get("data")
    if isinstance(data, dict):
        return data
    return body


def _parse(model: type[ModelT], data: Any, *, message: str) -> ModelT:
    """Validate a platform payload; a shape we cannot read is an upstream failure, not ours."""
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        logger.warning(
            "Unexpected platform payload",
            extra={"model": model.__name__, "error_count": exc.error_count(), "failure": message},
        )
        raise CampaignApiError(message=message) from exc


class CampaignsService:
    def __init__(self, client: CampaignApiClient, cache: QueryCache) -> None:
        self._client = client
        self._cache = cache

    async def list(self, session: AuthSession, *, page: int = 1, per_page: int = 10) -> Paginated[Campaign]:
        async def load() -> Paginated[Campaign]:
            body = await self._client.get(
                "/campaigns",
                token=session.token,
                params={"page": page, "per_page": per_page},
            )
            return _parse(Paginated[Campaign], body, message="Failed to load campaigns")

        return await self._cache.fetch(("campaigns", session.cache_scope, page, per_page), load)

    async def get(self, session: AuthSession, campaign_id: int) -> Campaign:
        async def load() -> Campaign:
            body = await self._client.get(f"/campaigns/{campaign_id}", token=session.token)
            return _parse(Campaign, _unwrap(body), message="Failed to load campaign")

        return await self._cache.fetch(("campaign", campaign_id, session.cache_scope), load)

    async def create(
        self,
        session: AuthSession,
        form: CampaignForm,
        *,
        thumbnail: UploadTuple | None = None,
    ) -> Campaign:
        files = {"thumbnail": thumbnail} if thumbnail else None
        body = await self._client.post_form(
            "/campaigns",
            token=session.token,
            fields=form.to_form_fields(),
            files=files,
        )
        campaign = _parse(Campaign, _unwrap(body), message="Failed to save campaign")
        self._cache.invalidate("campaigns")
        logger.info("Campaign created", extra={"campaign_id": campaign.id, "user_id": session.user.id})
        return campaign

    async def update(
        self,
        session: AuthSession,
        campaign_id: int,
        form: CampaignForm,
        *,
        thumbnail: UploadTuple | None = None,
    ) -> Campaign:
        files = {"thumbnail": thumbnail} if thumbnail else None
        body = await self._client.post_form(
            f"/campaigns/{campaign_id}",
            token=session.token,
            fields=form.to_form_fields(),
            files=files,
            method_override="PUT",
        )
        campaign = _parse(Campaign, _unwrap(body), message="Failed to save campaign")
        self._cache.invalidate("campaigns")
        self._cache.invalidate("campaign", campaign_id)
        logger.info("Campaign updated", extra={"campaign_id": campaign_id, "user_id": session.user.id})
        return campaign

    async def delete(self, session: AuthSession, campaign_id: int) -> None:
        await self._client.delete(f"/campaigns/{campaign_id}", token=session.token)
        self._cache.invalidate("campaigns")
        self._cache.invalidate("campaign", campaign_id)
        # Videos of a deleted campaign are removed server-side.
        self._cache.invalidate("videos")
        logger.info("Campaign deleted", extra={"campaign_id": campaign_id, "user_id": session.user.id})


class VideosService:
    def __init__(self, client: CampaignApiClient, cache: QueryCache) -> None:
        self._client = client
        self._cache = cache

    async def list(
        self,
        session: AuthSession,
        *,
        campaign_id: int | None = None,
        page: int = 1,
        per_page: int = 10,
    ) -> Paginated[Video]:
        async def load() -> Paginated[Video]:
            body = await self._client.get(
                "/videos",
                token=session.token,
                params={"page": page, "per_page": per_page, "campaign_id": campaign_id},
            )
            return _parse(Paginated[Video], body, message="Failed to load videos")

        return await self._cache.fetch(("videos", campaign_id, session.cache_scope, page, per_page), load)

    async def get(self, session: AuthSession, video_id: int) -> Video:
        async def load() -> Video:
            body = await self._client.get(f"/videos/{video_id}", token=session.token)
            return _parse(Video, _unwrap(body), message="Failed to load video")

        return await self._cache.fetch(("video", video_id, session.cache_scope), load)

    async def create(
        self,
        session: AuthSession,
        form: VideoForm,
        *,
        video_file: UploadTuple,
        thumbnail: UploadTuple | None = None,
    ) -> Video:
        files: dict[str, UploadTuple] = {"video_file": video_file}
        if thumbnail:
            files["thumbnail"] = thumbnail
        body = await self._client.post_form(
            "/videos",
            token=session.token,
            fields=form.to_form_fields(),
            files=files,
        )
        video = _parse(Video, _unwrap(body), message="Failed to save video")
        self._cache.invalidate("videos")
        logger.info("Video created", extra={"video_id": video.id, "campaign_id": form.campaign_id})
        return video

    async def update(
        self,
        session: AuthSession,
        video_id: int,
        form: VideoForm,
        *,
        video_file: UploadTuple | None = None,
        thumbnail: UploadTuple | None = None,
    ) -> Video:
        files: dict[str, UploadTuple] = {}
        if video_file:
            files["video_file"] = video_file
        if thumbnail:
            files["thumbnail"] = thumbnail
        body = await self._client.post_form(
            f"/videos/{video_id}",
            token=session.token,
            fields=form.to_form_fields(for_update=True),
            files=files,
            method_override="PUT",
        )
        video = _parse(Video, _unwrap(body), message="Failed to save video")
        self._cache.invalidate("videos")
        self._cache.invalidate("video", video_id)
        logger.info("Video updated", extra={"video_id": video_id})
        return video

    async def delete(self, session: AuthSession, video_id: int) -> None:
        await self._client.delete(f"/videos/{video_id}", token=session.token)
        self._cache.invalidate("videos")
        self._cache.invalidate("video", video_id)
        logger.info("Video deleted", extra={"video_id": video_id})


class UsersService:
    def __init__(self, client: CampaignApiClient, cache: QueryCache) -> None:
        self._client = client
        self._cache = cache

    async def list(
        self,
        session: AuthSession,
        *,
        search: str | None = None,
        role: str | None = None,
        is_active: str | None = None,
        page: int = 1,
        per_page: int = 10,
    ) -> Paginated[User]:
        params = {
            "search": search or None,
            "role": role or None,
            "is_active": is_active or None,
            "page": page,
            "per_page": per_page,
        }

        async def load() -> Paginated[User]:
            body = await self._client.get("/users", token=session.token, params=params)
            return _parse(Paginated[User], body, message="Failed to load users")

        key = ("users", session.cache_scope, *sorted((k, v) for k, v in params.items() if v is not None))
        return await self._cache.fetch(key, load)

    async def get(self, session: AuthSession, user_id: int) -> User:
        async def load() -> User:
            body = await self._client.get(f"/users/{user_id}", token=session.token)
            return _parse(User, _unwrap(body), message="Failed to load user")

        return await self._cache.fetch(("users", session.cache_scope, "id", user_id), load)

    async def create(self, session: AuthSession, form: UserCreateForm) -> User:
        body = await self._client.post_json("/users", token=session.token, payload=form.model_dump(mode="json"))
        user = _parse(User, _unwrap(body), message="Failed to save user")
        self._cache.invalidate("users")
        logger.info("User created", extra={"user_id": user.id, "role": user.role.value})
        return user

    async def update(self, session: AuthSession, user_id: int, form: UserUpdateForm) -> User:
        body = await self._client.put_json(f"/users/{user_id}", token=session.token, payload=form.to_payload())
        user = _parse(User, _unwrap(body), message="Failed to save user")
        self._cache.invalidate("users")
        logger.info("User updated", extra={"user_id": user_id})
        return user

    async def delete(self, session: AuthSession, user_id: int) -> None:
        await self._client.delete(f"/users/{user_id}", token=session.token)
        self._cache.invalidate("users")
        logger.info("User deleted", extra={"user_id": user_id})

    async def profile(self, session: AuthSession) -> User:
        async def load() -> User:
            body = await self._client.get("/profile", token=session.token)
            return _parse(User, _unwrap(body), message="Failed to load profile")

        return await self._cache.fetch(("profile", session.cache_scope), load)

    async def update_profile(self, session: AuthSession, form: ProfileUpdateForm) -> User:
        body = await self._client.put_json("/profile", token=session.token, payload=form.to_payload())
        user = _parse(User, _unwrap(body), message="Failed to save profile")
        # The signed-in user also shows up in user lists.
        self._cache.invalidate("profile")
        self._cache.invalidate("users")
        logger.info("Profile updated", extra={"user_id": user.id})
        return user


class AnalyticsService:
    def __init__(self, client: CampaignApiClient, cache: QueryCache) -> None:
        self._client = client
        self._cache = cache

    async def list(self, session: AuthSession, filters: AnalyticsFilters) -> Paginated[AnalyticsEvent]:
        params = filters.model_dump(mode="json", exclude={"date_from", "date_to"}, exclude_none=True)

        async def load() -> Paginated[AnalyticsEvent]:
            body = await self._client.get("/analytics", token=session.token, params=params)
            return _parse(Paginated[AnalyticsEvent], body, message="Failed to load analytics")

        key = ("analytics", session.cache_scope, *sorted(params.items()))
        return await self._cache.fetch(key, load)

    async def summary(self, session: AuthSession, filters: AnalyticsFilters) -> AnalyticsSummary:
        params = filters.model_dump(
            mode="json",
            include={"campaign_id", "video_id", "date_from", "date_to"},
            exclude_none=True,
        )

        async def load() -> AnalyticsSummary:
            body = await self._client.get("/analytics/summary", token=session.token, params=params)
            return _parse(AnalyticsSummary, _unwrap(body), message="Failed to load analytics summary")

        key = ("analytics-summary", session.cache_scope, *sorted(params.items()))
        return await self._cache.fetch(key, load)

    async def real_time(self, session: AuthSession, *, campaign_id: int | None = None) -> RealTimeAnalytics:
        """Live viewer count; never cached."""
        body = await self._client.get(
            "/analytics/real-time",
            token=session.token,
            params={"campaign_id": campaign_id},
        )
        return _parse(RealTimeAnalytics, _unwrap(body), message="Failed to load real-time analytics")

    async def export(self, session: AuthSession, filters: AnalyticsFilters, *, fmt: ExportFormat) -> AnalyticsExport:
        params = filters.model_dump(
            mode="json",
            include={"campaign_id", "video_id", "date_from", "date_to"},
            exclude_none=True,
        )
        params["format"] = fmt
        content, content_type = await self._client.download("/analytics/export", token=session.token, params=params)
        logger.info("Analytics exported", extra={"export_format": fmt, "user_id": session.user.id})
        return AnalyticsExport(filename=f"analytics-export.{fmt}", content_type=content_type, content=content)


class BackupsService:
    """Admin backup operations; every call goes straight to the platform API."""

    def __init__(self, client: CampaignApiClient) -> None:
        self._client = client

    async def list(self, session: AuthSession) -> list[Backup]:
        body = await self._client.get("/admin/backups", token=session.token)
        if body.get("success") is False:
            raise CampaignApiError(message=str(body.get("message") or "Failed to fetch backups"))
        items = body.get("backups") or []
        if not isinstance(items, list):
            raise CampaignApiError(message="Failed to fetch backups")
        return [_parse(Backup, item, message="Failed to fetch backups") for item in items]

    async def create(self, session: AuthSession) -> BackupCreated:
        body = await self._client.post_json("/admin/backups", token=session.token)
        if not body.get("success") or not body.get("filename"):
            raise CampaignApiError(message=str(body.get("message") or "Failed to create backup"))
        logger.info("Backup created", extra={"backup_filename": body["filename"], "user_id": session.user.id})
        return BackupCreated(filename=str(body["filename"]), message=body.get("message"))

    async def restore(self, session: AuthSession, filename: str, *, scope: RestoreScope) -> str:
        path = f"/admin/backups/{quote(filename, safe='')}/{_RESTORE_PATHS[scope]}"
        body = await self._client.post_json(path, token=session.token)
        if body.get("success") is False:
            raise CampaignApiError(message=str(body.get("message") or "Failed to restore backup"))
        logger.info("Backup restored", extra={"backup_filename": filename, "scope": scope, "user_id": session.user.id})
        return str(body.get("message") or f"Backup {filename} restored")

    async def delete(self, session: AuthSession, filename: str) -> None:
        body = await self._client.delete(f"/admin/backups/{quote(filename, safe='')}", token=session.token)
        if body.get("success") is False:
            raise CampaignApiError(message=str(body.get("message") or "Failed to delete backup"))
        logger.info("Backup deleted", extra={"backup_filename": filename, "user_id": session.user.id})
