from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from campaign_player.api_client import CampaignApiError
from campaign_player.auth.dependencies import get_auth_session
from campaign_player.auth.session import AuthSession
from campaign_player.deps import get_videos_service
from campaign_player.routers.form_requests import (
    edit_page_payload,
    form_error_response,
    read_multipart,
    submit_edit_page,
)
from campaign_player.schemas.common import Paginated
from campaign_player.schemas.videos import Video, VideoForm
from campaign_player.services.dashboard import VideosService
from campaign_player.services.forms import EditPage

router = APIRouter(prefix="/dashboard/videos", tags=["videos"])

VIDEO_FILE_REQUIRED = "Please select a video file."


@router.get("", response_model=Paginated[Video])
async def list_videos(
    campaign_id: int | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=10, ge=1, le=100),
    session: AuthSession = Depends(get_auth_session),
    service: VideosService = Depends(get_videos_service),
):
    try:
        return await service.list(session, campaign_id=campaign_id, page=page, per_page=per_page)
    except CampaignApiError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_video(
    request: Request,
    session: AuthSession = Depends(get_auth_session),
    service: VideosService = Depends(get_videos_service),
):
    values, files = await read_multipart(request)
    page = EditPage(values)
    form = page.validate(VideoForm)
    video_file = files.get("video_file")
    if form is not None and video_file is None:
        page.fail({"video_file": [VIDEO_FILE_REQUIRED]}, "The given data was invalid.")
    if form is None or video_file is None:
        return form_error_response(page)
    return await submit_edit_page(
        page,
        lambda: service.create(session, form, video_file=video_file, thumbnail=files.get("thumbnail")),
        status_code=status.HTTP_201_CREATED,
    )


@router.get("/{video_id}", response_model=Video)
async def get_video(
    video_id: int,
    session: AuthSession = Depends(get_auth_session),
    service: VideosService = Depends(get_videos_service),
):
    try:
        return await service.get(session, video_id)
    except CampaignApiError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.get("/{video_id}/edit")
async def edit_video(
    video_id: int,
    session: AuthSession = Depends(get_auth_session),
    service: VideosService = Depends(get_videos_service),
):
    page = EditPage()
    try:
        video = await service.get(session, video_id)
    except CampaignApiError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    page.populate(video.model_dump(mode="json", exclude={"campaign"}))
    return edit_page_payload(page)


@router.put("/{video_id}")
@router.post("/{video_id}")
async def update_video(
    video_id: int,
    request: Request,
    session: AuthSession = Depends(get_auth_session),
    service: VideosService = Depends(get_videos_service),
):
    values, files = await read_multipart(request)
    values.pop("_method", None)
    page = EditPage(values)
    form = page.validate(VideoForm)
    if form is None:
        return form_error_response(page)
    return await submit_edit_page(
        page,
        lambda: service.update(
            session,
            video_id,
            form,
            video_file=files.get("video_file"),
            thumbnail=files.get("thumbnail"),
        ),
    )


@router.delete("/{video_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_video(
    video_id: int,
    session: AuthSession = Depends(get_auth_session),
    service: VideosService = Depends(get_videos_service),
):
    try:
        await service.delete(session, video_id)
    except CampaignApiError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
