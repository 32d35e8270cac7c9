"""Top-level review run: builds the components, runs the graph, classifies."""

import logging
import time
from typing import Callable

from review_bot.models import ReviewConfig, RunOutcome, RunStatus
from review_bot.orchestrator.exceptions import ReviewRunError
from review_bot.orchestrator.graph import build_graph
from review_bot.orchestrator.state import make_initial_state
from review_bot.pipeline.comment_publisher import CommentPublisher
from review_bot.pipeline.diff_collector import DiffCollector
from review_bot.pipeline.generation_client import GenerationClient

logger = logging.getLogger(__name__)


def create_components(
    config: ReviewConfig,
    sleep: Callable[[float], None] = time.sleep,
) -> dict:
    """Create the pipeline components described by ``config``.

    Returns:
        Dict with keys: client, collector, publisher.

    Raises:
        ConfigurationError: If the publishing target is incomplete.
    """
    client = GenerationClient(
        host=config.host,
        model=config.model,
        token=config.ai_token,
        system_prompt=config.system_prompt,
        language=config.language,
        timeout=config.generation_timeout_seconds,
        connection_timeout=config.connection_timeout_seconds,
        max_attempts=config.generation_max_attempts,
        retry_delay=config.retry_delay_seconds,
        max_prompt_chars=config.max_prompt_chars,
        sleep=sleep,
    )
    collector = DiffCollector(
        repo_path=config.repo_path,
        review_pull_request=config.review_pull_request,
        base_ref=config.base_ref,
        include_patterns=config.include_patterns,
        exclude_patterns=config.exclude_patterns,
        max_diff_chars=config.max_diff_chars,
        sleep=sleep,
    )
    publisher = CommentPublisher(
        pull_request_number=config.pull_request_number,
        repository=config.repository,
        token=config.github_token,
        api_base_url=config.api_base_url,
        timeout=config.publish_timeout_seconds,
        max_attempts=config.max_attempts,
        retry_delay=config.retry_delay_seconds,
        sleep=sleep,
    )
    return {"client": client, "collector": collector, "publisher": publisher}


def log_summary(outcome: RunOutcome) -> None:
    logger.info("Review summary:")
    logger.info("  Successfully reviewed: %d files", outcome.success_count)
    logger.info("  Failed to review: %d files", outcome.error_count)
    logger.info("  Total files processed: %d", outcome.total_count)
    if outcome.failed_paths:
        logger.info("  Failed files: %s", ", ".join(outcome.failed_paths))


class ReviewOrchestrator:
    """Runs one review of the configured diff."""

    def __init__(
        self,
        config: ReviewConfig,
        client: GenerationClient | None = None,
        collector: DiffCollector | None = None,
        publisher: CommentPublisher | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        if client is None or collector is None or publisher is None:
            defaults = create_components(config, sleep=sleep)
            client = client or defaults["client"]
            collector = collector or defaults["collector"]
            publisher = publisher or defaults["publisher"]
        self.client = client
        self.collector = collector
        self.publisher = publisher
        self._sleep = sleep

    def run(self) -> RunOutcome:
        """Run validate, collect, review and summarize.

        Returns:
            The RunOutcome for a successful or partially failed run.

        Raises:
            ServiceConnectionError: If the generation service is unreachable.
            DiffDiscoveryError: If the changed files cannot be listed.
            ReviewRunError: If every collected file failed.
        """
        mode = "Pull Request" if self.config.review_pull_request else "HEAD commit"
        logger.info("Starting AI code review (mode: %s)", mode)

        graph = build_graph(
            self.client,
            self.collector,
            self.publisher,
            self.config,
            sleep=self._sleep,
        )
        result = graph.invoke(make_initial_state())
        outcome = result.get("run_outcome") or RunOutcome()

        if outcome.total_count == 0:
            logger.info("No files to review")
            return outcome

        log_summary(outcome)

        if outcome.status == RunStatus.TOTAL_FAILURE:
            failures = [o for o in result.get("outcomes", []) if not o.succeeded]
            unreachable = bool(failures) and all(o.connectivity_failure for o in failures)
            raise ReviewRunError(
                f"All {outcome.total_count} files failed to be reviewed. "
                "Please check the generation service and configuration.",
                outcome,
                connectivity_failure=unreachable,
            )
        if outcome.status == RunStatus.PARTIAL_FAILURE:
            logger.warning(
                "Partial success: %d files reviewed, %d files failed (%s)",
                outcome.success_count,
                outcome.error_count,
                ", ".join(outcome.failed_paths),
            )
        return outcome
