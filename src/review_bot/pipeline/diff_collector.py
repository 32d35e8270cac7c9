"""Diff collector: discovers changed files and reads their per-file diffs."""

import logging
import subprocess
import time
from typing import Callable

from review_bot.models import DiffItem
from review_bot.pipeline.exceptions import DiffDiscoveryError, DiffRetrievalError
from review_bot.utils.pattern_filter import is_in_scope
from review_bot.utils.retry import with_retry

logger = logging.getLogger(__name__)

DEFAULT_MAX_DIFF_CHARS = 10000
TRUNCATION_MARKER = "\n... [diff truncated for length]"
FETCH_MAX_ATTEMPTS = 3
FETCH_RETRY_DELAY = 2.0


def truncate_diff(diff_text: str, max_chars: int = DEFAULT_MAX_DIFF_CHARS) -> str:
    """Cap ``diff_text`` at ``max_chars`` characters plus a truncation marker.

    Text at or under the cap is returned unchanged; truncating an already
    truncated diff gives the same result.
    """
    if len(diff_text) <= max_chars:
        return diff_text
    return diff_text[:max_chars] + TRUNCATION_MARKER


class DiffCollector:
    """Collects the ordered list of in-scope ``DiffItem`` objects for a run.

    Two selection modes:
      - pull-request mode: ``origin/<base_ref>...HEAD`` after fetching the base
      - single-commit mode: ``HEAD^`` against the working tree's HEAD
    """

    def __init__(
        self,
        repo_path: str = ".",
        review_pull_request: bool = False,
        base_ref: str = "main",
        include_patterns: list[str] | tuple[str, ...] = (),
        exclude_patterns: list[str] | tuple[str, ...] = (),
        max_diff_chars: int = DEFAULT_MAX_DIFF_CHARS,
        fetch_max_attempts: int = FETCH_MAX_ATTEMPTS,
        fetch_retry_delay: float = FETCH_RETRY_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.repo_path = repo_path
        self.review_pull_request = review_pull_request
        self.base_ref = base_ref or "main"
        self.include_patterns = tuple(include_patterns)
        self.exclude_patterns = tuple(exclude_patterns)
        self.max_diff_chars = max_diff_chars
        self.fetch_max_attempts = fetch_max_attempts
        self.fetch_retry_delay = fetch_retry_delay
        self._sleep = sleep

    # ========== Git plumbing ==========

    def _run_git(self, args: list[str]) -> str:
        """Run ``git <args>`` in the repository and return stdout.

        Output is read as bytes and decoded as UTF-8 with replacement, so
        non-UTF-8 file content never fails decoding and CRLF line endings
        are kept. Paths are reported unquoted (``core.quotePath=false``).

        Raises:
            subprocess.CalledProcessError: On a non-zero exit status.
            OSError: If git cannot be started.
        """
        result = subprocess.run(
            ["git", "-c", "core.quotePath=false", *args],
            cwd=self.repo_path,
            capture_output=True,
            check=True,
        )
        return result.stdout.decode("utf-8", errors="replace")

    @staticmethod
    def _describe_git_failure(exc: Exception) -> str:
        if isinstance(exc, subprocess.CalledProcessError):
            stderr = exc.stderr or ""
            if isinstance(stderr, bytes):
                stderr = stderr.decode("utf-8", errors="replace")
            stderr = stderr.strip()
            return f"{exc}" + (f" Stderr: {stderr}" if stderr else "")
        return str(exc)

    def _revision_range(self) -> list[str]:
        if self.review_pull_request:
            return [f"origin/{self.base_ref}...HEAD"]
        return ["HEAD^"]

    def _fetch_base(self) -> None:
        logger.info("Fetching origin/%s", self.base_ref)
        with_retry(
            lambda: self._run_git(["fetch", "origin", self.base_ref]),
            f"git fetch origin {self.base_ref}",
            max_attempts=self.fetch_max_attempts,
            base_delay=self.fetch_retry_delay,
            sleep=self._sleep,
        )

    # ========== Public API ==========

    def list_changed_files(self) -> list[str]:
        """Return changed paths in the order git reports them.

        Raises:
            DiffDiscoveryError: If the base fetch or the name-only diff fails.
        """
        try:
            if self.review_pull_request:
                self._fetch_base()
            output = self._run_git(["diff", "--name-only", *self._revision_range()])
        except (subprocess.CalledProcessError, OSError) as exc:
            raise DiffDiscoveryError(
                f"Failed to list changed files: {self._describe_git_failure(exc)}"
            ) from exc

        return [line.strip() for line in output.splitlines() if line.strip()]

    def file_diff(self, path: str) -> str:
        """Return the raw unified diff for a single path.

        Raises:
            DiffRetrievalError: If git fails for this path or its output
                cannot be decoded.
        """
        try:
            return self._run_git(["diff", *self._revision_range(), "--", path])
        except (subprocess.CalledProcessError, OSError, ValueError) as exc:
            raise DiffRetrievalError(
                f"Failed to get diff for {path}: {self._describe_git_failure(exc)}"
            ) from exc

    def collect(self) -> list[DiffItem]:
        """Collect in-scope, non-empty, size-capped diffs.

        Per-file retrieval failures are logged and skipped; only discovery
        failures abort the collection.

        Returns:
            DiffItems in git's reporting order. May be empty.

        Raises:
            DiffDiscoveryError: If the changed-file list cannot be obtained.
        """
        mode = f"pull request against {self.base_ref}" if self.review_pull_request else "HEAD commit"
        logger.info("Collecting diff context (%s)", mode)

        files = self.list_changed_files()
        logger.info("Found %d changed files", len(files))

        items: list[DiffItem] = []
        for path in files:
            if self.include_patterns and not is_in_scope(path, self.include_patterns, ()):
                logger.info("Skipping %s (not in include patterns)", path)
                continue
            if not is_in_scope(path, (), self.exclude_patterns):
                logger.info("Skipping %s (matches exclude patterns)", path)
                continue

            try:
                diff_text = self.file_diff(path)
            except DiffRetrievalError as exc:
                logger.error("%s", exc)
                continue

            if not diff_text.strip():
                logger.info("No diff content for %s", path)
                continue

            context = truncate_diff(diff_text, self.max_diff_chars)
            if len(context) != len(diff_text):
                logger.info("Truncated diff for %s (%d characters)", path, len(diff_text))
            items.append(DiffItem(path=path, context=context))
            logger.info("Added diff context for %s (%d characters)", path, len(context))

        logger.info("Collected %d files for review", len(items))
        return items
