from __future__ import annotations

import re
from typing import Any
from urllib.parse import urlparse

REQUIRED_MESSAGE = "This field is required."

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_TRUE_VALUES = {"1", "true", "on", "yes"}
_FALSE_VALUES = {"0", "false", "off", "no", ""}


def require_text(value: Any) -> str:
    text = value.strip() if isinstance(value, str) else ""
    if not text:
        raise ValueError(REQUIRED_MESSAGE)
    return text


def optional_text(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    text = value.strip()
    return text or None


def is_valid_http_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def require_http_url(value: Any) -> str:
    text = require_text(value)
    if not is_valid_http_url(text):
        raise ValueError("Please enter a valid URL (including http:// or https://).")
    return text


def optional_http_url(value: Any) -> str | None:
    text = optional_text(value)
    if text is None:
        return None
    if not is_valid_http_url(text):
        raise ValueError("Please enter a valid URL (including http:// or https://).")
    return text


def require_email(value: Any) -> str:
    text = require_text(value)
    if not _EMAIL_RE.fullmatch(text):
        raise ValueError("Please enter a valid email address.")
    return text


def coerce_form_bool(value: Any) -> Any:
    """Multipart checkboxes arrive as strings; map them onto real booleans."""
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in _TRUE_VALUES:
            return True
        if normalized in _FALSE_VALUES:
            return False
    return value
