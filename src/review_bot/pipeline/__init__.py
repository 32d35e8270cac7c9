"""Review pipeline components: diff collection, generation and publishing."""

from review_bot.pipeline.exceptions import (
    ConfigurationError,
    DiffDiscoveryError,
    DiffRetrievalError,
    GenerationError,
    GenerationErrorKind,
    InvalidPromptError,
    PipelineError,
    PublishError,
    ServiceConnectionError,
    ServiceRequestError,
)
from review_bot.pipeline.comment_publisher import CommentPublisher, format_review_comment
from review_bot.pipeline.diff_collector import DiffCollector
from review_bot.pipeline.generation_client import GenerationClient

__all__ = [
    "CommentPublisher",
    "ConfigurationError",
    "DiffCollector",
    "DiffDiscoveryError",
    "DiffRetrievalError",
    "GenerationClient",
    "GenerationError",
    "GenerationErrorKind",
    "InvalidPromptError",
    "PipelineError",
    "PublishError",
    "ServiceConnectionError",
    "ServiceRequestError",
    "format_review_comment",
]
