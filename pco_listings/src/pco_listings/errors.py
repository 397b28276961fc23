"""
Exceptions raised while talking to the Planning Center API.
"""

from typing import Optional


class PlanningCenterError(Exception):
    """Base class for Planning Center fetch failures."""

    code = "planning_center_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class MissingCredentialsError(PlanningCenterError):
    """Application ID or secret is not configured."""

    code = "missing_credentials"

    def __init__(self, message: str = "Missing Planning Center API credentials."):
        super().__init__(message)


class PlanningCenterRequestError(PlanningCenterError):
    """The HTTP request could not be completed (DNS, connect, timeout...)."""

    code = "request_failed"


class BadResponseError(PlanningCenterError):
    """Planning Center answered with a non-2xx status."""

    code = "bad_response"

    def __init__(
        self,
        status_code: int,
        message: str = "Invalid response from Planning Center.",
    ):
        super().__init__(message)
        self.status_code = status_code

    def __str__(self) -> str:
        return f"{self.code}: {self.message} (HTTP {self.status_code})"


class InvalidPayloadError(PlanningCenterError):
    """Response body was not a JSON object carrying a `data` array."""

    code = "invalid_payload"

    def __init__(
        self,
        message: str = "Unexpected Planning Center response.",
        body_preview: Optional[str] = None,
    ):
        super().__init__(message)
        self.body_preview = body_preview
