"""Per-file review step and outcome aggregation.

Both functions are independent of the graph so the per-item failure
handling and the aggregation pass can be tested on their own.
"""

import logging

from review_bot.models import (
    DiffItem,
    FileReviewOutcome,
    ReviewConfig,
    ReviewStatus,
    RunOutcome,
)
from review_bot.pipeline.comment_publisher import (
    CommentPublisher,
    build_file_url,
    format_review_comment,
)
from review_bot.pipeline.exceptions import ServiceConnectionError
from review_bot.pipeline.generation_client import GenerationClient

logger = logging.getLogger(__name__)


def is_connectivity_failure(exc: BaseException) -> bool:
    """True if ``exc`` or any exception it was raised from is a ServiceConnectionError."""
    seen = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, ServiceConnectionError):
            return True
        seen.add(id(current))
        current = current.__cause__
    return False


def review_item(
    item: DiffItem,
    client: GenerationClient,
    publisher: CommentPublisher,
    config: ReviewConfig,
) -> FileReviewOutcome:
    """Generate, format and publish the review for one file.

    Any exception is caught and returned as a FAILED outcome so the caller
    can move on to the next file.
    """
    try:
        result = client.generate(item.context, system_prompt=config.review_prompt)
        file_url = build_file_url(config.server_url, config.repository, config.commit_sha, item.path)
        comment = format_review_comment(
            path=item.path,
            review_text=result.text,
            model=config.model,
            file_url=file_url,
        )
        published = publisher.publish(comment)
    except Exception as exc:
        logger.error("Failed to process file %s: %s", item.path, exc)
        return FileReviewOutcome(
            path=item.path,
            status=ReviewStatus.FAILED,
            error=str(exc),
            connectivity_failure=is_connectivity_failure(exc),
        )

    logger.info("Posted review comment for %s (ID: %s)", item.path, published.id)
    return FileReviewOutcome(
        path=item.path,
        status=ReviewStatus.SUCCESS,
        comment_id=published.id,
    )


def summarize_outcomes(outcomes: list[FileReviewOutcome]) -> RunOutcome:
    """Fold per-file outcomes into the run counters."""
    failed_paths = [outcome.path for outcome in outcomes if not outcome.succeeded]
    return RunOutcome(
        success_count=len(outcomes) - len(failed_paths),
        error_count=len(failed_paths),
        total_count=len(outcomes),
        failed_paths=failed_paths,
    )
