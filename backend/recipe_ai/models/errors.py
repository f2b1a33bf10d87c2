"""Error types for Recipe AI.

``AppError``/``ErrorCode`` are the wire-level error envelope returned to the
UI. ``UpstreamError`` and ``MalformedResponseError`` are raised by the recipe
generators and consumed by the retry wrapper and the orchestrator.
"""

from enum import Enum

from pydantic import BaseModel, Field

# Upstream status codes worth retrying: rate limited, internal error, unavailable.
RETRYABLE_STATUS_CODES = frozenset({429, 500, 503})


class ErrorCode(str, Enum):
    """Error codes surfaced in API responses."""

    INVALID_INPUT = "INVALID_INPUT"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    GENERATION_FAILED = "GENERATION_FAILED"
    API_ERROR = "API_ERROR"


class AppError(BaseModel):
    """Structured error returned to the client."""

    code: ErrorCode = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Technical error message")
    user_message: str = Field(..., description="Message safe to show the user")


class UpstreamError(Exception):
    """An AI provider answered with an error status."""

    def __init__(self, status_code: int | None, message: str, provider: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.provider = provider

    @property
    def retryable(self) -> bool:
        return self.status_code in RETRYABLE_STATUS_CODES

    def __str__(self) -> str:
        prefix = f"[{self.provider}] " if self.provider else ""
        return f"{prefix}{self.status_code}: {self.args[0]}"


class MalformedResponseError(Exception):
    """The provider replied, but the text could not be parsed into recipes."""
