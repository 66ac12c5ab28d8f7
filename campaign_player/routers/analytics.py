from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse

from campaign_player.api_client import CampaignApiError
from campaign_player.auth.dependencies import get_auth_session
from campaign_player.auth.session import AuthSession
from campaign_player.deps import get_analytics_service
from campaign_player.enums import AnalyticsEventTypeEnum
from campaign_player.schemas.analytics import (
    AnalyticsEvent,
    AnalyticsFilters,
    AnalyticsSummary,
    ExportFormat,
    RealTimeAnalytics,
)
from campaign_player.schemas.common import Paginated
from campaign_player.services.dashboard import AnalyticsService

router = APIRouter(prefix="/dashboard/analytics", tags=["analytics"])


def event_filters(
    campaign_id: int | None = Query(default=None),
    video_id: int | None = Query(default=None),
    event_type: AnalyticsEventTypeEnum | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=10, ge=1, le=100),
) -> AnalyticsFilters:
    """Event list filters; the platform's event listing has no date range."""
    return AnalyticsFilters(
        campaign_id=campaign_id,
        video_id=video_id,
        event_type=event_type,
        page=page,
        per_page=per_page,
    )


def range_filters(
    campaign_id: int | None = Query(default=None),
    video_id: int | None = Query(default=None),
    date_from: str | None = Query(default=None),
    date_to: str | None = Query(default=None),
) -> AnalyticsFilters:
    return AnalyticsFilters(
        campaign_id=campaign_id,
        video_id=video_id,
        date_from=date_from,
        date_to=date_to,
    )


@router.get("", response_model=Paginated[AnalyticsEvent])
async def list_events(
    filters: AnalyticsFilters = Depends(event_filters),
    session: AuthSession = Depends(get_auth_session),
    service: AnalyticsService = Depends(get_analytics_service),
):
    try:
        return await service.list(session, filters)
    except CampaignApiError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.get("/summary", response_model=AnalyticsSummary)
async def analytics_summary(
    filters: AnalyticsFilters = Depends(range_filters),
    session: AuthSession = Depends(get_auth_session),
    service: AnalyticsService = Depends(get_analytics_service),
):
    try:
        return await service.summary(session, filters)
    except CampaignApiError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.get("/real-time", response_model=RealTimeAnalytics)
async def real_time_analytics(
    campaign_id: int | None = Query(default=None),
    session: AuthSession = Depends(get_auth_session),
    service: AnalyticsService = Depends(get_analytics_service),
):
    try:
        return await service.real_time(session, campaign_id=campaign_id)
    except CampaignApiError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.get("/export")
async def export_analytics(
    export_format: ExportFormat = Query(default="csv", alias="format"),
    filters: AnalyticsFilters = Depends(range_filters),
    session: AuthSession = Depends(get_auth_session),
    service: AnalyticsService = Depends(get_analytics_service),
):
    try:
        export = await service.export(session, filters, fmt=export_format)
    except CampaignApiError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    return StreamingResponse(
        iter([export.content]),
        media_type=export.content_type,
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )
