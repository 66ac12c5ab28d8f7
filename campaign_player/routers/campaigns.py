from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from campaign_player.api_client import CampaignApiError
from campaign_player.auth.dependencies import get_auth_session
from campaign_player.auth.session import AuthSession
from campaign_player.deps import get_campaigns_service
from campaign_player.routers.form_requests import (
    edit_page_payload,
    form_error_response,
    read_multipart,
    submit_edit_page,
)
from campaign_player.schemas.campaigns import Campaign, CampaignForm
from campaign_player.schemas.common import Paginated
from campaign_player.services.dashboard import CampaignsService
from campaign_player.services.forms import EditPage

router = APIRouter(prefix="/dashboard/campaigns", tags=["campaigns"])


@router.get("", response_model=Paginated[Campaign])
async def list_campaigns(
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=10, ge=1, le=100),
    session: AuthSession = Depends(get_auth_session),
    service: CampaignsService = Depends(get_campaigns_service),
):
    try:
        return await service.list(session, page=page, per_page=per_page)
    except CampaignApiError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_campaign(
    request: Request,
    session: AuthSession = Depends(get_auth_session),
    service: CampaignsService = Depends(get_campaigns_service),
):
    values, files = await read_multipart(request)
    page = EditPage(values)
    form = page.validate(CampaignForm)
    if form is None:
        return form_error_response(page)
    return await submit_edit_page(
        page,
        lambda: service.create(session, form, thumbnail=files.get("thumbnail")),
        status_code=status.HTTP_201_CREATED,
    )


@router.get("/{campaign_id}", response_model=Campaign)
async def get_campaign(
    campaign_id: int,
    session: AuthSession = Depends(get_auth_session),
    service: CampaignsService = Depends(get_campaigns_service),
):
    try:
        return await service.get(session, campaign_id)
    except CampaignApiError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.get("/{campaign_id}/edit")
async def edit_campaign(
    campaign_id: int,
    session: AuthSession = Depends(get_auth_session),
    service: CampaignsService = Depends(get_campaigns_service),
):
    page = EditPage()
    try:
        campaign = await service.get(session, campaign_id)
    except CampaignApiError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    page.populate(campaign.model_dump(mode="json"))
    return edit_page_payload(page)


@router.put("/{campaign_id}")
@router.post("/{campaign_id}")
async def update_campaign(
    campaign_id: int,
    request: Request,
    session: AuthSession = Depends(get_auth_session),
    service: CampaignsService = Depends(get_campaigns_service),
):
    """Accepts PUT, or POST with _method=PUT as browsers submit file forms."""
    values, files = await read_multipart(request)
    values.pop("_method", None)
    page = EditPage(values)
    form = page.validate(CampaignForm)
    if form is None:
        return form_error_response(page)
    return await submit_edit_page(
        page,
        lambda: service.update(session, campaign_id, form, thumbnail=files.get("thumbnail")),
    )


@router.delete("/{campaign_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_campaign(
    campaign_id: int,
    session: AuthSession = Depends(get_auth_session),
    service: CampaignsService = Depends(get_campaigns_service),
):
    try:
        await service.delete(session, campaign_id)
    except CampaignApiError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
