from __future__ import annotations

from campaign_player.api_client import CampaignApiClient
from campaign_player.auth.session import SessionStore
from campaign_player.config import settings
from campaign_player.services.dashboard import (
    AnalyticsService,
    BackupsService,
    CampaignsService,
    UsersService,
    VideosService,
)
from campaign_player.services.player_mounts import PlayerMountRegistry
from campaign_player.services.query_cache import QueryCache
from campaign_player.services.resolver import CampaignResolver
from campaign_player.services.telemetry import TelemetryDispatcher

api_client = CampaignApiClient()
telemetry = TelemetryDispatcher(api_client)
mount_registry = PlayerMountRegistry(
    max_mounts=settings.PLAYER_MAX_MOUNTS,
    idle_ttl_seconds=settings.PLAYER_IDLE_TTL_SECONDS,
)
session_store = SessionStore()
query_cache = QueryCache(ttl_seconds=settings.QUERY_CACHE_TTL_SECONDS)


def get_api_client() -> CampaignApiClient:
    return api_client


def get_resolver() -> CampaignResolver:
    return CampaignResolver(api_client)


def get_telemetry() -> TelemetryDispatcher:
    return telemetry


def get_mount_registry() -> PlayerMountRegistry:
    return mount_registry


def get_session_store() -> SessionStore:
    return session_store


def get_campaigns_service() -> CampaignsService:
    return CampaignsService(api_client, query_cache)


def get_videos_service() -> VideosService:
    return VideosService(api_client, query_cache)


def get_users_service() -> UsersService:
    return UsersService(api_client, query_cache)


def get_analytics_service() -> AnalyticsService:
    return AnalyticsService(api_client, query_cache)


def get_backups_service() -> BackupsService:
    return BackupsService(api_client)
