"""Shared protocol definitions."""

from typing import Any, Protocol


class RequestLogger(Protocol):
    """Protocol for relay logging (Dashboard)."""

    def log_relay(
        self,
        method: str,
        path: str,
        status: int,
        *,
        hints: int = 0,
    ) -> None: ...
    def log_prefetch(self, url: str, status: int | None) -> None: ...
    def log_error(self, route: str, status: int, message: str) -> None: ...
    def log_debug(self, message: str, **extra: Any) -> None: ...
