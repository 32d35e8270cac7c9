"""Formats review comments and posts them to an issue-comment endpoint."""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable

import requests

from review_bot.models import LOCAL_LOG_ID, PublishResult
from review_bot.pipeline.exceptions import ConfigurationError, PublishError, ServiceRequestError
from review_bot.pipeline.http_client import post_json
from review_bot.utils.retry import with_retry

logger = logging.getLogger(__name__)

REVIEW_TITLE = "🤖 AI Code Review"
DISCLAIMER = (
    "*This review was generated automatically by AI. "
    "Please review the suggestions carefully before implementing.*"
)
DEFAULT_API_BASE_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 15.0
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY = 5.0
LOG_RULE = "─" * 50


def build_file_url(server_url: str, repository: str | None, commit_sha: str | None, path: str) -> str:
    """Link to ``path`` at the reviewed commit."""
    return f"{server_url.rstrip('/')}/{repository or ''}/commit/{commit_sha or ''}/{path}"


def format_review_comment(
    path: str,
    review_text: str,
    model: str,
    file_url: str,
    reviewed_at: datetime | None = None,
) -> str:
    """Render the Markdown comment body for one reviewed file."""
    timestamp = (reviewed_at or datetime.now(timezone.utc)).isoformat()
    return (
        f"# {REVIEW_TITLE}\n"
        f"**File:** [{path}]({file_url})\n"
        f"**Model:** {model}\n"
        f"**Reviewed at:** {timestamp}\n"
        "\n"
        f"{review_text.strip()}\n"
        "\n"
        "---\n"
        f"{DISCLAIMER}"
    )


def is_gitea_api(api_base_url: str) -> bool:
    return "/api/v1" in api_base_url or "gitea" in api_base_url.lower()


class CommentPublisher:
    """Posts comments to ``{api_base}/repos/{repo}/issues/{number}/comments``.

    Without a pull-request number nothing is sent: the comment is logged and
    the local-log result is returned.
    """

    def __init__(
        self,
        pull_request_number: str | None = None,
        repository: str | None = None,
        token: str | None = None,
        api_base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the publisher.

        Raises:
            ConfigurationError: If a pull-request number is given without a
                repository or token.
        """
        self.pull_request_number = (pull_request_number or "").strip() or None
        self.repository = repository
        self.token = token
        self.api_base_url = (api_base_url or DEFAULT_API_BASE_URL).rstrip("/")
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.session = session or requests.Session()
        self._sleep = sleep

        if self.pull_request_number and not (self.repository and self.token):
            raise ConfigurationError(
                "Missing required configuration for publishing: repository or token"
            )

    @property
    def is_local(self) -> bool:
        return self.pull_request_number is None

    @property
    def endpoint(self) -> str:
        return (
            f"{self.api_base_url}/repos/{self.repository}"
            f"/issues/{self.pull_request_number}/comments"
        )

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"token {self.token}",
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "AI-Review-Bot",
        }

    def _post(self, body: str) -> Any:
        try:
            return post_json(
                self.session,
                self.endpoint,
                {"body": body},
                headers=self._headers(),
                timeout=self.timeout,
            )
        except ServiceRequestError as exc:
            raise PublishError(f"Failed to post comment: {exc}") from exc

    def publish(self, rendered_comment: str) -> PublishResult:
        """Publish one comment.

        Returns:
            ``PublishResult`` with the remote comment id, or ``LOCAL_LOG_ID``
            when no pull-request number is configured.

        Raises:
            PublishError: If every attempt fails or the response has no id.
        """
        if self.is_local:
            logger.info(
                "No pull request number provided, logging comment instead:\n%s\n%s\n%s",
                LOG_RULE,
                rendered_comment,
                LOG_RULE,
            )
            return PublishResult(id=LOCAL_LOG_ID, success=True)

        logger.info(
            "Posting comment to PR #%s in %s (endpoint %s, gitea=%s)",
            self.pull_request_number,
            self.repository,
            self.endpoint,
            is_gitea_api(self.api_base_url),
        )
        response = with_retry(
            lambda: self._post(rendered_comment),
            "push comment",
            max_attempts=self.max_attempts,
            base_delay=self.retry_delay,
            sleep=self._sleep,
        )

        comment_id = response.get("id") if isinstance(response, dict) else None
        if comment_id is None or comment_id == "":
            raise PublishError("Failed to post comment - no response ID received")
        return PublishResult(id=str(comment_id), success=True)
