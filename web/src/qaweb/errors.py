from __future__ import annotations


class Unauthorized(Exception):
    """A protected action ran without a session."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)
        self.message = message


class PageLoadError(Exception):
    """A page could not be built from upstream data."""

    def __init__(self, message: str, *, status_code: int = 502) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class UpstreamUnavailable(Exception):
    """The API could not be reached (or answered garbage) during a form action."""

    status_code = 502

    def __init__(self, message: str = "Could not reach the API") -> None:
        super().__init__(message)
        self.message = message
