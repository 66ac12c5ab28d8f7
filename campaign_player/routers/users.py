from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status

from campaign_player.api_client import CampaignApiError
from campaign_player.auth.dependencies import get_auth_session, require_roles
from campaign_player.auth.permissions import assignable_roles, can_change_role, can_edit_user
from campaign_player.auth.session import AuthSession
from campaign_player.deps import get_users_service
from campaign_player.enums import UserRoleEnum
from campaign_player.routers.form_requests import edit_page_payload, form_error_response, submit_edit_page
from campaign_player.schemas.common import Paginated
from campaign_player.schemas.users import User, UserCreateForm, UserUpdateForm
from campaign_player.services.dashboard import UsersService
from campaign_player.services.forms import EditPage

router = APIRouter(prefix="/dashboard/users", tags=["users"])
logger = logging.getLogger(__name__)

require_user_manager = require_roles(UserRoleEnum.admin, UserRoleEnum.agency)


def _access_denied() -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access Denied")


async def _load_editable_user(session: AuthSession, service: UsersService, user_id: int) -> User:
    try:
        target = await service.get(session, user_id)
    except CampaignApiError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    if not can_edit_user(session.user, target):
        logger.info("User edit denied", extra={"user_id": session.user.id, "target_user_id": user_id})
        raise _access_denied()
    return target


@router.get("", response_model=Paginated[User])
async def list_users(
    search: str | None = Query(default=None),
    role: UserRoleEnum | None = Query(default=None),
    is_active: str | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=10, ge=1, le=100),
    session: AuthSession = Depends(require_user_manager),
    service: UsersService = Depends(get_users_service),
):
    try:
        return await service.list(
            session,
            search=search,
            role=role.value if role else None,
            is_active=is_active,
            page=page,
            per_page=per_page,
        )
    except CampaignApiError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: dict[str, Any] = Body(...),
    session: AuthSession = Depends(require_user_manager),
    service: UsersService = Depends(get_users_service),
):
    page = EditPage(payload)
    form = page.validate(UserCreateForm)
    if form is None:
        return form_error_response(page)
    if form.role not in assignable_roles(session.user):
        raise _access_denied()
    return await submit_edit_page(
        page,
        lambda: service.create(session, form),
        status_code=status.HTTP_201_CREATED,
    )


@router.get("/{user_id}", response_model=User)
async def get_user(
    user_id: int,
    session: AuthSession = Depends(get_auth_session),
    service: UsersService = Depends(get_users_service),
):
    return await _load_editable_user(session, service, user_id)


@router.get("/{user_id}/edit")
async def edit_user(
    user_id: int,
    session: AuthSession = Depends(get_auth_session),
    service: UsersService = Depends(get_users_service),
):
    page = EditPage()
    target = await _load_editable_user(session, service, user_id)
    page.populate(target.model_dump(mode="json", include={"name", "username", "email", "role", "is_active"}))
    return {
        **edit_page_payload(page),
        "can_change_role": can_change_role(session.user, target),
        "assignable_roles": [role.value for role in assignable_roles(session.user)],
    }


@router.put("/{user_id}")
async def update_user(
    user_id: int,
    payload: dict[str, Any] = Body(...),
    session: AuthSession = Depends(get_auth_session),
    service: UsersService = Depends(get_users_service),
):
    page = EditPage(payload)
    form = page.validate(UserUpdateForm)
    if form is None:
        return form_error_response(page)
    target = await _load_editable_user(session, service, user_id)
    if form.role != target.role and not (
        can_change_role(session.user, target) and form.role in assignable_roles(session.user)
    ):
        raise _access_denied()
    return await submit_edit_page(page, lambda: service.update(session, user_id, form))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    session: AuthSession = Depends(require_user_manager),
    service: UsersService = Depends(get_users_service),
):
    if user_id == session.user.id:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="You cannot delete your own account")
    await _load_editable_user(session, service, user_id)
    try:
        await service.delete(session, user_id)
    except CampaignApiError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
