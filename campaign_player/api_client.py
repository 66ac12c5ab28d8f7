from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from campaign_player.config import settings
from campaign_player.schemas.common import FieldErrors

logger = logging.getLogger(__name__)

# (filename, content, content_type) as accepted by httpx multipart uploads.
UploadTuple = tuple[str, bytes, str]


class CampaignApiError(RuntimeError):
    def __init__(self, *, message: str, status_code: int = 502) -> None:
        super().__init__(message)
        self.status_code = status_code


class CampaignApiValidationError(CampaignApiError):
    def __init__(self, *, message: str, errors: FieldErrors) -> None:
        super().__init__(message=message, status_code=422)
        self.errors = errors


def _segment(value: str) -> str:
    return quote(value.strip(), safe="")


def _normalize_field_errors(raw: Any) -> FieldErrors:
    if not isinstance(raw, dict):
        return {}
    errors: FieldErrors = {}
    for field, messages in raw.items():
        if isinstance(messages, str):
            errors[str(field)] = [messages]
        elif isinstance(messages, list):
            errors[str(field)] = [str(message) for message in messages]
    return errors


class CampaignApiClient:
    """Async client for the platform API that owns campaigns, videos, users and analytics."""

    def __init__(self, *, base_url: str | None = None, timeout: float | None = None) -> None:
        self._base_url = (base_url or settings.api_base_url).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.API_REQUEST_TIMEOUT_SECONDS

    # Public (unauthenticated) endpoints

    async def get_campaign_video(self, *, brand_username: str, campaign_name: str) -> dict[str, Any]:
        """Next video for a campaign, chosen by the platform's round-robin policy."""
        path = f"/public/{_segment(brand_username)}/{_segment(campaign_name)}"
        return await self._get_envelope(path=path)

    async def get_named_video(
        self,
        *,
        brand_username: str,
        campaign_name: str,
        video_name: str,
    ) -> dict[str, Any]:
        path = f"/public/{_segment(brand_username)}/{_segment(campaign_name)}/{_segment(video_name)}"
        return await self._get_envelope(path=path)

    async def get_variant_video(self, *, slug: str) -> dict[str, Any]:
        body = await self._request("GET", f"/public/videos/{_segment(slug)}")
        data = body.get("data", body)
        if not isinstance(data, dict) or not isinstance(data.get("video"), dict):
            raise CampaignApiError(message="Public video response is missing data.video")
        return data

    async def list_popular_videos(self, *, limit: int) -> list[dict[str, Any]]:
        body = await self._request("GET", "/public/videos/popular", params={"limit": limit})
        data = body.get("data", [])
        if not isinstance(data, list):
            raise CampaignApiError(message="Popular videos response must contain a data list")
        return [item for item in data if isinstance(item, dict)]

    async def track_event(self, *, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/analytics", json_body=payload)

    # Session endpoints

    async def login(self, *, email: str, password: str) -> dict[str, Any]:
        body = await self._request("POST", "/login", json_body={"email": email, "password": password})
        data = body.get("data", body)
        if not isinstance(data, dict) or not data.get("token") or not isinstance(data.get("user"), dict):
            raise CampaignApiError(message="Login response is missing user or token", status_code=502)
        return data

    async def logout(self, *, token: str) -> None:
        await self._request("POST", "/logout", token=token)

    # Authenticated resource endpoints

    async def get(self, path: str, *, token: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        return await self._request("GET", path, token=token, params=params)

    async def post_json(self, path: str, *, token: str, payload: dict[str, Any] | None = None) -> dict[str, Any]:
        return await self._request("POST", path, token=token, json_body=payload or {})

    async def put_json(self, path: str, *, token: str, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request("PUT", path, token=token, json_body=payload)

    async def post_form(
        self,
        path: str,
        *,
        token: str,
        fields: dict[str, str],
        files: dict[str, UploadTuple] | None = None,
        method_override: str | None = None,
    ) -> dict[str, Any]:
        data = dict(fields)
        if method_override:
            # The platform API only parses multipart bodies on POST; PUT is tunneled via _method.
            data["_method"] = method_override
        return await self._request("POST", path, token=token, form_fields=data, files=files or {})

    async def delete(self, path: str, *, token: str) -> dict[str, Any]:
        return await self._request("DELETE", path, token=token)

    async def download(
        self,
        path: str,
        *,
        token: str,
        params: dict[str, Any] | None = None,
    ) -> tuple[bytes, str]:
        """Raw file body and its content type, for export endpoints that do not answer in JSON."""
        response = await self._send("GET", path, token=token, params=params)
        self._raise_for_status(response)
        return response.content, response.headers.get("content-type", "application/octet-stream")

    async def _get_envelope(self, *, path: str) -> dict[str, Any]:
        """
        The public campaign routes answer misses with a {success: false} body and a 4xx status,
        so the body is read before the status code is considered.
        """

        response = await self._send("GET", path)
        body = self._decode(response)
        if "success" in body:
            return body
        if response.status_code >= 400:
            raise CampaignApiError(
                message=f"Platform API call failed ({response.status_code}): {response.text}",
                status_code=502,
            )
        raise CampaignApiError(message="Platform API response is missing the success flag")

    async def _request(
        self,
        method: str,
        path: str,
        *,
        token: str | None = None,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
        form_fields: dict[str, str] | None = None,
        files: dict[str, UploadTuple] | None = None,
    ) -> dict[str, Any]:
        response = await self._send(
            method,
            path,
            token=token,
            params=params,
            json_body=json_body,
            form_fields=form_fields,
            files=files,
        )
        self._raise_for_status(response)
        if response.status_code == 204 or not response.content:
            return {}
        return self._decode(response)

    def _raise_for_status(self, response: httpx.Response) -> None:
        if response.status_code == 422:
            body = self._decode(response)
            raise CampaignApiValidationError(
                message=str(body.get("message") or "The given data was invalid."),
                errors=_normalize_field_errors(body.get("errors")),
            )
        if response.status_code in (401, 403, 404):
            raise CampaignApiError(
                message=self._error_message(response),
                status_code=response.status_code,
            )
        if response.status_code >= 400:
            raise CampaignApiError(
                message=f"Platform API call failed ({response.status_code}): {response.text}",
                status_code=502,
            )

    async def _send(
        self,
        method: str,
        path: str,
        *,
        token: str | None = None,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
        form_fields: dict[str, str] | None = None,
        files: dict[str, UploadTuple] | None = None,
    ) -> httpx.Response:
        url = f"{self._base_url}{path}"
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        request_kwargs: dict[str, Any] = {"headers": headers}
        if params:
            request_kwargs["params"] = {key: value for key, value in params.items() if value is not None}
        if json_body is not None:
            request_kwargs["json"] = json_body
        if form_fields is not None:
            request_kwargs["data"] = form_fields
            if files:
                request_kwargs["files"] = files
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.request(method, url, **request_kwargs)
        except httpx.RequestError as exc:
            logger.warning("Platform API request failed", extra={"method": method, "path": path, "error": str(exc)})
            raise CampaignApiError(message=f"Network error while calling the platform API: {exc}") from exc
        logger.debug(
            "Platform API response",
            extra={"method": method, "path": path, "status_code": response.status_code},
        )
        return response

    @staticmethod
    def _decode(response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError as exc:
            raise CampaignApiError(message="Platform API returned invalid JSON") from exc
        if not isinstance(body, dict):
            raise CampaignApiError(message="Platform API response must be a JSON object")
        return body

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and isinstance(body.get("message"), str) and body["message"]:
            return body["message"]
        return f"Platform API call failed ({response.status_code})"
