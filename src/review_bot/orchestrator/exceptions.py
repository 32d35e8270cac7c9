"""Exceptions for orchestrator operations."""

from review_bot.models import RunOutcome


class OrchestratorError(Exception):
    """Base exception for all orchestrator operations."""


class GraphBuildError(OrchestratorError):
    """Raised when graph construction fails."""


class ReviewRunError(OrchestratorError):
    """Raised when every collected file failed to be reviewed.

    ``connectivity_failure`` is True when every failure was caused by an
    unreachable or timed-out service.
    """

    def __init__(self, message: str, outcome: RunOutcome, connectivity_failure: bool = False):
        super().__init__(message)
        self.outcome = outcome
        self.connectivity_failure = connectivity_failure
