"""LangGraph orchestrator graph for the review pipeline.

Wires the GenerationClient, DiffCollector and CommentPublisher into a
StateGraph: validate -> collect -> review -> summarize.
"""

import logging
import time
from typing import Callable

from langgraph.graph import END, START, StateGraph

from review_bot.models import ReviewConfig
from review_bot.orchestrator.exceptions import GraphBuildError
from review_bot.orchestrator.state import ReviewState
from review_bot.orchestrator.steps import review_item, summarize_outcomes
from review_bot.pipeline.comment_publisher import CommentPublisher
from review_bot.pipeline.diff_collector import DiffCollector
from review_bot.pipeline.generation_client import GenerationClient

logger = logging.getLogger(__name__)


def make_validate_node(client: GenerationClient) -> Callable[[ReviewState], dict]:
    """Factory: returns a node closure that probes the generation service.

    Failure is fatal: the ServiceConnectionError propagates out of the graph.
    """

    def validate_node(state: ReviewState) -> dict:
        return {"connection_ms": client.check_connection()}

    return validate_node


def make_collect_node(collector: DiffCollector) -> Callable[[ReviewState], dict]:
    """Factory: returns a node closure that collects the DiffItems.

    DiffDiscoveryError propagates out of the graph.
    """

    def collect_node(state: ReviewState) -> dict:
        return {"items": collector.collect()}

    return collect_node


def make_review_node(
    client: GenerationClient,
    publisher: CommentPublisher,
    config: ReviewConfig,
    sleep: Callable[[float], None] = time.sleep,
) -> Callable[[ReviewState], dict]:
    """Factory: returns a node closure that reviews every item in order.

    Items are processed one at a time; a pause of
    ``config.inter_item_delay_seconds`` precedes every item after the first.
    Always returns one outcome per item.
    """

    def review_node(state: ReviewState) -> dict:
        items = state["items"]
        logger.info("Starting review of %d files", len(items))
        outcomes = []
        for index, item in enumerate(items):
            if index > 0 and config.inter_item_delay_seconds > 0:
                logger.info("Waiting %.1fs before next request", config.inter_item_delay_seconds)
                sleep(config.inter_item_delay_seconds)
            logger.info("Processing file %d/%d: %s", index + 1, len(items), item.path)
            outcomes.append(review_item(item, client, publisher, config))
        return {"outcomes": outcomes}

    return review_node


def summarize_node(state: ReviewState) -> dict:
    """Aggregate per-file outcomes into the RunOutcome."""
    return {"run_outcome": summarize_outcomes(state["outcomes"])}


def has_items(state: ReviewState) -> str:
    """Router: "review" when there is anything to review, "empty" otherwise."""
    if state["items"]:
        return "review"
    logger.info("No files to review")
    return "empty"


def build_graph(
    client: GenerationClient,
    collector: DiffCollector,
    publisher: CommentPublisher,
    config: ReviewConfig,
    sleep: Callable[[float], None] = time.sleep,
):
    """Build and compile the orchestrator StateGraph.

    Edge topology:
      START -> validate_node -> collect_node
      collect_node -> conditional(has_items) -> {review_node, summarize_node}
      review_node -> summarize_node -> END

    Args:
        client: Generation client (also used for the connectivity probe).
        collector: Diff collector.
        publisher: Comment publisher.
        config: Run configuration.
        sleep: Sleep function for the pause between files.

    Returns:
        CompiledStateGraph ready to invoke.

    Raises:
        GraphBuildError: If graph construction fails.
    """
    try:
        graph = StateGraph(ReviewState)

        graph.add_node("validate_node", make_validate_node(client))
        graph.add_node("collect_node", make_collect_node(collector))
        graph.add_node("review_node", make_review_node(client, publisher, config, sleep))
        graph.add_node("summarize_node", summarize_node)

        graph.add_edge(START, "validate_node")
        graph.add_edge("validate_node", "collect_node")
        graph.add_conditional_edges(
            "collect_node",
            has_items,
            {
                "review": "review_node",
                "empty": "summarize_node",
            },
        )
        graph.add_edge("review_node", "summarize_node")
        graph.add_edge("summarize_node", END)

        return graph.compile()

    except Exception as exc:
        raise GraphBuildError(f"Failed to build review graph: {exc}") from exc
