from __future__ import annotations

from collections.abc import Awaitable
from typing import TypeVar

ResultT = TypeVar("ResultT")


class NavigationCancelled(Exception):
    pass


class NavigationToken:
    """
    Liveness flag for one page mount. The request it guards keeps running after cancel(), but its
    result (or error) is discarded instead of being applied to a page that is gone.
    """

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    async def guard(self, awaitable: Awaitable[ResultT]) -> ResultT:
        try:
            result = await awaitable
        except Exception as exc:
            if self._cancelled:
                raise NavigationCancelled() from exc
            raise
        if self._cancelled:
            raise NavigationCancelled()
        return result
