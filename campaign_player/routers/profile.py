from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException

from campaign_player.api_client import CampaignApiError
from campaign_player.auth.dependencies import get_auth_session
from campaign_player.auth.session import AuthSession, SessionStore
from campaign_player.deps import get_session_store, get_users_service
from campaign_player.routers.form_requests import form_error_response, submit_edit_page
from campaign_player.schemas.users import ProfileUpdateForm, User
from campaign_player.services.dashboard import UsersService
from campaign_player.services.forms import EditPage

router = APIRouter(prefix="/dashboard/profile", tags=["profile"])


@router.get("", response_model=User)
async def get_profile(
    session: AuthSession = Depends(get_auth_session),
    service: UsersService = Depends(get_users_service),
):
    try:
        return await service.profile(session)
    except CampaignApiError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.put("")
async def update_profile(
    payload: dict[str, Any] = Body(...),
    session: AuthSession = Depends(get_auth_session),
    service: UsersService = Depends(get_users_service),
    store: SessionStore = Depends(get_session_store),
):
    page = EditPage(payload)
    form = page.validate(ProfileUpdateForm)
    if form is None:
        return form_error_response(page)

    async def save() -> User:
        user = await service.update_profile(session, form)
        # Keep the signed-in copy current so later role checks and greetings see the new values.
        store.save(AuthSession(token=session.token, user=user))
        return user

    return await submit_edit_page(page, save)
