from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from fastapi.responses import ORJSONResponse
from pydantic import ValidationError

from campaign_player.api_client import CampaignApiClient, CampaignApiError, CampaignApiValidationError
from campaign_player.auth.dependencies import get_auth_session
from campaign_player.auth.permissions import assignable_roles
from campaign_player.auth.session import AuthSession, SessionStore
from campaign_player.deps import get_api_client, get_session_store
from campaign_player.schemas.users import AuthResponse, LoginRequest, User
from campaign_player.services.forms import FormValidationError, parse_form

router = APIRouter(prefix="/session", tags=["session"])
logger = logging.getLogger(__name__)


@router.post("", response_model=AuthResponse)
async def login(
    payload: dict[str, Any] = Body(...),
    client: CampaignApiClient = Depends(get_api_client),
    store: SessionStore = Depends(get_session_store),
):
    try:
        credentials = parse_form(LoginRequest, payload)
    except FormValidationError as exc:
        return ORJSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"message": exc.message, "errors": exc.errors},
        )
    try:
        data = await client.login(email=credentials.email, password=credentials.password)
    except CampaignApiValidationError as exc:
        return ORJSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"message": str(exc), "errors": exc.errors},
        )
    except CampaignApiError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc

    try:
        user = User.model_validate(data["user"])
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Login response is missing user or token",
        ) from exc
    session = store.save(AuthSession(token=str(data["token"]), user=user))
    logger.info("Signed in", extra={"user_id": session.user.id, "role": session.role.value})
    return AuthResponse(user=session.user, token=session.token)


@router.get("")
def current_session(session: AuthSession = Depends(get_auth_session)):
    return {
        "user": session.user.model_dump(mode="json"),
        "assignable_roles": [role.value for role in assignable_roles(session.user)],
    }


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    session: AuthSession = Depends(get_auth_session),
    client: CampaignApiClient = Depends(get_api_client),
    store: SessionStore = Depends(get_session_store),
):
    try:
        await client.logout(token=session.token)
    except CampaignApiError as exc:
        # The local session is discarded regardless of what the platform says.
        logger.warning("Remote logout failed", extra={"user_id": session.user.id, "error": str(exc)})
    store.discard(session.token)
