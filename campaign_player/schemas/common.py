from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

ItemT = TypeVar("ItemT")

# Field name -> messages, shared by client-side validation and server-echoed errors.
FieldErrors = dict[str, list[str]]


class Paginated(BaseModel, Generic[ItemT]):
    data: list[ItemT] = Field(default_factory=list)
    current_page: int = 1
    last_page: int = 1
    per_page: int = 10
    total: int = 0
