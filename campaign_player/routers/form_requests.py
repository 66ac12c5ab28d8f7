from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.responses import ORJSONResponse
from pydantic import BaseModel
from starlette.datastructures import UploadFile

from campaign_player.api_client import CampaignApiError, UploadTuple
from campaign_player.services.forms import EditPage, unflatten_form_fields


async def read_multipart(request: Request) -> tuple[dict[str, Any], dict[str, UploadTuple]]:
    """Split a dashboard form into plain values and uploaded files; empty file inputs are dropped."""
    form = await request.form()
    fields: list[tuple[str, Any]] = []
    files: dict[str, UploadTuple] = {}
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            if value.filename:
                content = await value.read()
                files[key] = (value.filename, content, value.content_type or "application/octet-stream")
            continue
        fields.append((key, value))
    return unflatten_form_fields(fields), files


def form_error_response(page: EditPage) -> ORJSONResponse:
    return ORJSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"phase": page.phase.value, "message": page.message, "errors": page.errors},
    )


async def submit_edit_page(
    page: EditPage,
    action: Callable[[], Awaitable[BaseModel]],
    *,
    status_code: int = status.HTTP_200_OK,
) -> ORJSONResponse:
    try:
        result = await page.submit(action)
    except CampaignApiError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    if result is None:
        return form_error_response(page)
    return ORJSONResponse(
        status_code=status_code,
        content={"phase": page.phase.value, "data": result.model_dump(mode="json")},
    )


def edit_page_payload(page: EditPage) -> dict[str, Any]:
    return {"phase": page.phase.value, "values": page.values, "errors": page.errors}
