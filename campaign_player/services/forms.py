from __future__ import annotations

import re
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from campaign_player.api_client import CampaignApiError, CampaignApiValidationError
from campaign_player.enums import EditPhaseEnum
from campaign_player.schemas.common import FieldErrors
from campaign_player.schemas.validators import REQUIRED_MESSAGE

FormT = TypeVar("FormT", bound=BaseModel)
ResultT = TypeVar("ResultT")

_NESTED_KEY_RE = re.compile(r"^(?P<parent>[A-Za-z_][A-Za-z0-9_]*)\[(?P<child>[A-Za-z0-9_]+)\]$")
_VALUE_ERROR_PREFIX = "Value error, "
# Model-level errors that belong to a specific form field.
_MODEL_ERROR_FIELDS = {"password_mismatch": "password_confirmation"}


class FormValidationError(Exception):
    def __init__(self, errors: FieldErrors, message: str = "The given data was invalid.") -> None:
        super().__init__(message)
        self.errors = errors
        self.message = message


def unflatten_form_fields(items: Iterable[tuple[str, Any]]) -> dict[str, Any]:
    """Turn multipart keys such as settings[autoplay] into nested dicts."""
    values: dict[str, Any] = {}
    for key, value in items:
        match = _NESTED_KEY_RE.match(key)
        if match:
            nested = values.setdefault(match.group("parent"), {})
            if isinstance(nested, dict):
                nested[match.group("child")] = value
            continue
        values[key] = value
    return values


def form_errors_from_validation(exc: ValidationError) -> FieldErrors:
    errors: FieldErrors = {}
    for error in exc.errors():
        loc = error.get("loc") or ()
        error_type = error.get("type", "")
        if loc:
            field = str(loc[0])
        else:
            field = _MODEL_ERROR_FIELDS.get(error_type, "__all__")
        if error_type == "missing":
            message = REQUIRED_MESSAGE
        else:
            message = str(error.get("msg", "Invalid value."))
            if message.startswith(_VALUE_ERROR_PREFIX):
                message = message[len(_VALUE_ERROR_PREFIX):]
        bucket = errors.setdefault(field, [])
        if message not in bucket:
            bucket.append(message)
    return errors


def merge_field_errors(*sources: FieldErrors) -> FieldErrors:
    merged: FieldErrors = {}
    for source in sources:
        for field, messages in source.items():
            bucket = merged.setdefault(field, [])
            for message in messages:
                if message not in bucket:
                    bucket.append(message)
    return merged


def parse_form(model: type[FormT], data: Mapping[str, Any]) -> FormT:
    try:
        return model.model_validate(dict(data))
    except ValidationError as exc:
        raise FormValidationError(form_errors_from_validation(exc)) from exc


class EditPage:
    """
    Entity edit flow: loading -> populated -> submitting -> success | error.

    An error returns to populated so the same values can be corrected and resubmitted.
    """

    _TRANSITIONS = {
        EditPhaseEnum.loading: {EditPhaseEnum.populated},
        EditPhaseEnum.populated: {EditPhaseEnum.submitting, EditPhaseEnum.error},
        EditPhaseEnum.submitting: {EditPhaseEnum.success, EditPhaseEnum.error},
        EditPhaseEnum.error: {EditPhaseEnum.populated},
        EditPhaseEnum.success: set(),
    }

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self.phase = EditPhaseEnum.loading
        self.values: dict[str, Any] = {}
        self.errors: FieldErrors = {}
        self.message: str | None = None
        if values is not None:
            self.populate(values)

    def _move(self, target: EditPhaseEnum) -> None:
        if target not in self._TRANSITIONS[self.phase]:
            raise RuntimeError(f"Cannot move edit page from {self.phase.value} to {target.value}")
        self.phase = target

    def populate(self, values: Mapping[str, Any]) -> None:
        self._move(EditPhaseEnum.populated)
        self.values = dict(values)

    def resume(self) -> None:
        self._move(EditPhaseEnum.populated)

    def fail(self, errors: FieldErrors, message: str) -> None:
        self.errors = merge_field_errors(self.errors, errors)
        self.message = message
        self._move(EditPhaseEnum.error)

    def validate(self, model: type[FormT]) -> FormT | None:
        """Local validation before any network call; failures land in error with the values kept."""
        if self.phase == EditPhaseEnum.error:
            self.resume()
        self.errors = {}
        self.message = None
        try:
            return parse_form(model, self.values)
        except FormValidationError as exc:
            self.fail(exc.errors, exc.message)
            return None

    async def submit(self, action: Callable[[], Awaitable[ResultT]]) -> ResultT | None:
        if self.phase == EditPhaseEnum.error:
            self.resume()
        self._move(EditPhaseEnum.submitting)
        try:
            result = await action()
        except CampaignApiValidationError as exc:
            self.fail(exc.errors, str(exc))
            return None
        except CampaignApiError as exc:
            self.fail({}, str(exc))
            raise
        self._move(EditPhaseEnum.success)
        return result
