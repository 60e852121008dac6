"""Shared protocol definitions."""

from typing import Protocol


class RequestLogger(Protocol):
    """Protocol for request logging (Dashboard or headless file log).

    `request_id` ties the response or error of a forwarded request back to
    its `log_request` entry.
    """

    def log_request(
        self, request_id: str, api: str, method: str, path: str, target_url: str
    ) -> None: ...
    def log_response(self, request_id: str, api: str, status: int, hops: int) -> None: ...
    def log_error(
        self, route: str, status: int, message: str, *, request_id: str | None = None
    ) -> None: ...
