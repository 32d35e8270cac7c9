"""State definition for the LangGraph review pipeline."""

import operator
from typing import Annotated, TypedDict

from review_bot.models import DiffItem, FileReviewOutcome, RunOutcome


class ReviewState(TypedDict):
    """State for the LangGraph review orchestrator.

    Fields with Annotated[list, operator.add] reducers accumulate across nodes.
    All other fields use default overwrite semantics.
    """

    # Collecting
    items: list[DiffItem]

    # Reviewing (accumulating reducer)
    outcomes: Annotated[list[FileReviewOutcome], operator.add]

    # Summarizing
    run_outcome: RunOutcome | None
    connection_ms: float | None


def make_initial_state() -> ReviewState:
    """Create the initial state for a review run."""
    return {
        "items": [],
        "outcomes": [],
        "run_outcome": None,
        "connection_ms": None,
    }
