"""Error taxonomy for analysis and configuration generation."""

from __future__ import annotations

from typing import Optional


class PipegenError(RuntimeError):
    """Base class for failures surfaced to the user as a message."""

    default_message = "Unexpected pipegen failure"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(PipegenError):
    """Raised when required input is missing before any network call."""

    default_message = "Please provide both owner and repository name"


class RequestTimeoutError(PipegenError):
    """Raised when a remote call exceeds its wait bound or the gateway timed out."""

    default_message = "The request timed out. Please try again later."


class NotFoundError(PipegenError):
    """Raised when the remote side reports HTTP 404."""

    default_message = "Resource not found."


class AccessDeniedError(PipegenError):
    """Raised when the remote side reports HTTP 403."""

    default_message = "Access denied."


class RemoteError(PipegenError):
    """Raised when a remote failure response carries a structured message."""


class UnknownError(PipegenError):
    """Raised for failures that fit no other category."""


class MissingAnalysisError(PipegenError):
    """Raised when generation is attempted without a usable analysis."""

    default_message = "Please analyze a repository first"


class EmptyWorkflowError(PipegenError):
    """Raised when the graph cannot be serialized into a workflow."""

    default_message = "Failed to generate workflow JSON"


__all__ = [
    "AccessDeniedError",
    "EmptyWorkflowError",
    "MissingAnalysisError",
    "NotFoundError",
    "PipegenError",
    "RemoteError",
    "RequestTimeoutError",
    "UnknownError",
    "ValidationError",
]
