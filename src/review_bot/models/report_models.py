"""Models for publish results and per-run review outcomes."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

LOCAL_LOG_ID = "local-log"


class PublishResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str  # Remote comment id, or LOCAL_LOG_ID for the logging fallback
    success: bool = True


class ReviewStatus(str, Enum):
    """Result of the generate-then-publish pipeline for one file."""

    SUCCESS = "success"
    FAILED = "failed"


class FileReviewOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    status: ReviewStatus
    comment_id: str | None = None  # Set when status is SUCCESS
    error: str | None = None  # Set when status is FAILED
    connectivity_failure: bool = False  # FAILED because the service was unreachable

    @property
    def succeeded(self) -> bool:
        return self.status == ReviewStatus.SUCCESS


class RunStatus(str, Enum):
    """Terminal classification of a review run."""

    SUCCESS = "success"
    PARTIAL_FAILURE = "partial_failure"
    TOTAL_FAILURE = "total_failure"


class RunOutcome(BaseModel):
    """Aggregate counters for one review run.

    ``success_count + error_count == total_count`` always holds, and
    ``failed_paths`` lists every failed file exactly once, in review order.
    """

    model_config = ConfigDict(frozen=True)

    success_count: int = 0
    error_count: int = 0
    total_count: int = 0
    failed_paths: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_counts(self) -> "RunOutcome":
        if self.success_count + self.error_count != self.total_count:
            raise ValueError(
                f"success_count ({self.success_count}) + error_count "
                f"({self.error_count}) != total_count ({self.total_count})"
            )
        if len(self.failed_paths) != self.error_count:
            raise ValueError("failed_paths must hold one entry per error")
        return self

    @property
    def status(self) -> RunStatus:
        if self.error_count == 0:
            return RunStatus.SUCCESS
        if self.success_count == 0:
            return RunStatus.TOTAL_FAILURE
        return RunStatus.PARTIAL_FAILURE
