from __future__ import annotations

from collections.abc import Awaitable

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import ORJSONResponse

from campaign_player.config import settings
from campaign_player.deps import get_mount_registry, get_resolver, get_telemetry
from campaign_player.enums import CtaRevealPolicyEnum, PageStatusEnum
from campaign_player.schemas.public import PopularVideo
from campaign_player.services.player_mounts import DEFAULT_CTA_TEXT, PlayerMountRegistry
from campaign_player.services.resolver import CampaignResolver, PageLoadFailed, ResolvedVideo
from campaign_player.services.telemetry import TelemetryDispatcher

router = APIRouter(tags=["public"])

_PAGE_STATUS_CODES = {
    PageStatusEnum.ready: status.HTTP_200_OK,
    PageStatusEnum.not_found: status.HTTP_404_NOT_FOUND,
    PageStatusEnum.failed: status.HTTP_502_BAD_GATEWAY,
}


def _tracking_context(request: Request) -> dict[str, str]:
    return {
        "user_agent": request.headers.get("user-agent", ""),
        "referrer": request.headers.get("referer", ""),
    }


async def _mount_page(
    *,
    request: Request,
    registry: PlayerMountRegistry,
    dispatcher: TelemetryDispatcher,
    reveal_policy: CtaRevealPolicyEnum,
    loader: Awaitable[ResolvedVideo],
    default_cta_text: str | None = None,
) -> ORJSONResponse:
    mount = registry.create(
        dispatcher=dispatcher,
        reveal_policy=reveal_policy,
        reveal_delay_seconds=settings.CTA_REVEAL_DELAY_SECONDS,
        tracking_context=_tracking_context(request),
        default_cta_text=default_cta_text,
    )
    await mount.load(loader)
    page = mount.to_page()
    if mount.status != PageStatusEnum.ready:
        # Nothing to interact with on a miss; the page model still carries the id it was served under.
        registry.remove(mount.mount_id)
    status_code = _PAGE_STATUS_CODES.get(page.status, status.HTTP_409_CONFLICT)
    return ORJSONResponse(status_code=status_code, content=page.model_dump(mode="json"))


@router.get("/public/{brand_username}/{campaign_name}")
async def campaign_player_page(
    brand_username: str,
    campaign_name: str,
    request: Request,
    resolver: CampaignResolver = Depends(get_resolver),
    registry: PlayerMountRegistry = Depends(get_mount_registry),
    dispatcher: TelemetryDispatcher = Depends(get_telemetry),
):
    """Round-robin campaign page: every load asks the platform which video to serve next."""
    return await _mount_page(
        request=request,
        registry=registry,
        dispatcher=dispatcher,
        reveal_policy=CtaRevealPolicyEnum.on_end,
        default_cta_text=DEFAULT_CTA_TEXT,
        loader=resolver.resolve_campaign_video(
            brand_username=brand_username,
            campaign_name=campaign_name,
        ),
    )


@router.get("/public/{brand_username}/{campaign_name}/{video_name}")
async def named_video_page(
    brand_username: str,
    campaign_name: str,
    video_name: str,
    request: Request,
    resolver: CampaignResolver = Depends(get_resolver),
    registry: PlayerMountRegistry = Depends(get_mount_registry),
    dispatcher: TelemetryDispatcher = Depends(get_telemetry),
):
    return await _mount_page(
        request=request,
        registry=registry,
        dispatcher=dispatcher,
        reveal_policy=CtaRevealPolicyEnum.after_delay,
        default_cta_text=DEFAULT_CTA_TEXT,
        loader=resolver.resolve_named_video(
            brand_username=brand_username,
            campaign_name=campaign_name,
            video_name=video_name,
        ),
    )


@router.get("/watch/popular", response_model=list[PopularVideo])
async def popular_videos(
    limit: int | None = Query(default=None, ge=1),
    resolver: CampaignResolver = Depends(get_resolver),
):
    effective_limit = min(limit or settings.POPULAR_VIDEOS_DEFAULT_LIMIT, settings.POPULAR_VIDEOS_MAX_LIMIT)
    try:
        return await resolver.list_popular_videos(limit=effective_limit)
    except PageLoadFailed as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.message) from exc


@router.get("/watch/{slug}")
async def variant_watch_page(
    slug: str,
    request: Request,
    resolver: CampaignResolver = Depends(get_resolver),
    registry: PlayerMountRegistry = Depends(get_mount_registry),
    dispatcher: TelemetryDispatcher = Depends(get_telemetry),
):
    return await _mount_page(
        request=request,
        registry=registry,
        dispatcher=dispatcher,
        reveal_policy=CtaRevealPolicyEnum.on_end,
        loader=resolver.resolve_variant_video(slug=slug),
    )
