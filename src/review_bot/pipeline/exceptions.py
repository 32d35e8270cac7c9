"""Exceptions for review pipeline components."""

from enum import Enum


class PipelineError(Exception):
    """Base exception for all pipeline component failures."""


class ConfigurationError(PipelineError):
    """Raised when required configuration is missing or invalid."""


class DiffDiscoveryError(PipelineError):
    """Raised when the changed-file set cannot be determined."""


class DiffRetrievalError(PipelineError):
    """Raised when the diff for a single file cannot be read."""


class ServiceRequestError(PipelineError):
    """Raised when an HTTP call fails or returns an unusable response."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ServiceConnectionError(ServiceRequestError):
    """Raised for DNS, refused-connection and timeout failures."""


class GenerationErrorKind(str, Enum):
    INVALID_PROMPT = "invalid_prompt"
    TRANSPORT = "transport"
    SERVICE_ERROR = "service_error"
    MALFORMED = "malformed"
    EMPTY = "empty"


class GenerationError(PipelineError):
    """Raised when the generation service does not produce usable text."""

    def __init__(self, message: str, kind: GenerationErrorKind = GenerationErrorKind.TRANSPORT):
        super().__init__(message)
        self.kind = kind


class InvalidPromptError(GenerationError):
    """Raised when the prompt is empty. Never retried."""

    def __init__(self, message: str = "Empty or invalid prompt provided to AI generation"):
        super().__init__(message, kind=GenerationErrorKind.INVALID_PROMPT)


class PublishError(PipelineError):
    """Raised when a review comment cannot be published."""
