"""Data models for the review bot."""

from review_bot.models.config_models import ReviewConfig
from review_bot.models.diff_models import DiffItem
from review_bot.models.generation_models import (
    GenerationOptions,
    GenerationRequest,
    GenerationResult,
)
from review_bot.models.report_models import (
    LOCAL_LOG_ID,
    FileReviewOutcome,
    PublishResult,
    ReviewStatus,
    RunOutcome,
    RunStatus,
)

__all__ = [
    "LOCAL_LOG_ID",
    "DiffItem",
    "FileReviewOutcome",
    "GenerationOptions",
    "GenerationRequest",
    "GenerationResult",
    "PublishResult",
    "ReviewConfig",
    "ReviewStatus",
    "RunOutcome",
    "RunStatus",
]
