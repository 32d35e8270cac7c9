"""LangGraph orchestrator package for the review pipeline."""

from review_bot.orchestrator.exceptions import (
    GraphBuildError,
    OrchestratorError,
    ReviewRunError,
)
from review_bot.orchestrator.graph import build_graph
from review_bot.orchestrator.runner import ReviewOrchestrator, create_components
from review_bot.orchestrator.state import ReviewState, make_initial_state
from review_bot.orchestrator.steps import review_item, summarize_outcomes

__all__ = [
    "GraphBuildError",
    "OrchestratorError",
    "ReviewOrchestrator",
    "ReviewRunError",
    "ReviewState",
    "build_graph",
    "create_components",
    "make_initial_state",
    "review_item",
    "summarize_outcomes",
]
