"""Shared protocol definitions."""

from typing import Protocol


class RequestLogger(Protocol):
    """Protocol for request logging (Dashboard)."""

    def log_route(
        self,
        route: str,
        method: str,
        path: str,
        *,
        shape: str | None = None,
    ) -> None: ...
    def log_redirect(self, source: str, location: str, *, followed: bool) -> None: ...
    def log_error(self, route: str, status: int, message: str) -> None: ...
