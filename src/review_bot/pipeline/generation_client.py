"""Client for an Ollama-compatible text-generation service."""

import json
import logging
import time
from typing import Any, Callable

import requests

from review_bot.models import GenerationOptions, GenerationRequest, GenerationResult
from review_bot.pipeline.exceptions import (
    GenerationError,
    GenerationErrorKind,
    InvalidPromptError,
    ServiceConnectionError,
    ServiceRequestError,
)
from review_bot.pipeline.http_client import get_json, post_json
from review_bot.utils.prompts import build_system_prompt
from review_bot.utils.retry import with_retry

logger = logging.getLogger(__name__)

GENERATE_ROUTE = "/api/generate"
TAGS_ROUTE = "/api/tags"

DEFAULT_TIMEOUT = 180.0
DEFAULT_CONNECTION_TIMEOUT = 10.0
DEFAULT_MAX_ATTEMPTS = 2
DEFAULT_RETRY_DELAY = 5.0
DEFAULT_MAX_PROMPT_CHARS = 8000

CODE_FENCE_OPEN = "```markdown"
CODE_FENCE_CLOSE = "```"

_KEEP_EDGE_LINES = 5
_MIN_LINES_FOR_EDGE_TRUNCATION = 10
_HARD_CUT_RESERVE = 50


def truncate_prompt(prompt: str, max_chars: int = DEFAULT_MAX_PROMPT_CHARS) -> str:
    """Shorten an over-long prompt.

    Keeps the first and last five lines around a marker when the prompt has
    more than ten lines and the result fits; otherwise cuts the text hard.
    """
    if len(prompt) <= max_chars:
        return prompt

    logger.info("Prompt too long (%d chars), truncating to %d chars", len(prompt), max_chars)

    lines = prompt.split("\n")
    if len(lines) > _MIN_LINES_FOR_EDGE_TRUNCATION:
        header = "\n".join(lines[:_KEEP_EDGE_LINES])
        footer = "\n".join(lines[-_KEEP_EDGE_LINES:])
        truncated = f"{header}\n\n[... content truncated for length ...]\n\n{footer}"
        if len(truncated) <= max_chars:
            return truncated

    return prompt[: max_chars - _HARD_CUT_RESERVE] + "\n\n[... truncated for length ...]"


def strip_code_fence(text: str) -> str:
    """Remove a wrapping ```markdown ... ``` fence if the model added one."""
    if text.startswith(CODE_FENCE_OPEN):
        text = text[len(CODE_FENCE_OPEN):]
        if text.endswith(CODE_FENCE_CLOSE):
            text = text[: -len(CODE_FENCE_CLOSE)]
    return text


def parse_generation_response(body: Any) -> GenerationResult:
    """Validate a ``/api/generate`` response body.

    Raises:
        GenerationError: If the body is absent, carries an ``error`` or
            ``detail`` field, or has no non-empty ``response`` text.
    """
    if not body:
        raise GenerationError(
            "Received empty response from AI service", kind=GenerationErrorKind.MALFORMED
        )
    if not isinstance(body, dict):
        raise GenerationError(
            f"Unexpected response type from AI service: {type(body).__name__}",
            kind=GenerationErrorKind.MALFORMED,
        )
    if body.get("error"):
        raise GenerationError(
            f"AI service error: {body['error']}", kind=GenerationErrorKind.SERVICE_ERROR
        )
    if body.get("detail"):
        raise GenerationError(
            f"AI service detail error: {json.dumps(body['detail'], default=str)}",
            kind=GenerationErrorKind.SERVICE_ERROR,
        )

    text = body.get("response")
    if isinstance(text, str):
        text = strip_code_fence(text)
    if not isinstance(text, str) or not text.strip():
        raise GenerationError(
            "AI service returned no response content", kind=GenerationErrorKind.EMPTY
        )

    return GenerationResult(
        text=text,
        model=body.get("model"),
        total_duration=body.get("total_duration"),
    )


class GenerationClient:
    """Sends per-file diffs to the generation service and validates replies."""

    def __init__(
        self,
        host: str,
        model: str,
        token: str | None = None,
        system_prompt: str | None = None,
        language: str | None = None,
        options: GenerationOptions | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        connection_timeout: float = DEFAULT_CONNECTION_TIMEOUT,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        max_prompt_chars: int = DEFAULT_MAX_PROMPT_CHARS,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the client.

        Args:
            host: Base URL of the service, e.g. "http://localhost:11434".
            model: Model name sent with every request.
            token: Optional bearer token.
            system_prompt: Replaces the default role prompt for every request.
            language: Review language for the default role prompt.
            options: Sampling options; defaults to ``GenerationOptions()``.
            timeout: Timeout in seconds for generate calls.
            connection_timeout: Timeout in seconds for the connectivity probe.
            max_attempts: Attempts per generate call.
            retry_delay: Base delay for exponential backoff.
            max_prompt_chars: Prompts above this size are truncated.
            session: HTTP session; a new one is created when omitted.
            sleep: Sleep function used between retries.
        """
        self.host = host.rstrip("/")
        self.model = model
        self.token = token
        self.system_prompt = system_prompt or build_system_prompt(language)
        self.options = options or GenerationOptions()
        self.timeout = timeout
        self.connection_timeout = connection_timeout
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.max_prompt_chars = max_prompt_chars
        self.session = session or requests.Session()
        self._sleep = sleep

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def check_connection(self) -> float:
        """Probe ``GET /api/tags`` and return the round trip in milliseconds.

        Raises:
            ServiceConnectionError: If the service cannot be reached.
        """
        logger.info("Testing connectivity to %s", self.host)
        start = time.monotonic()
        try:
            get_json(
                self.session,
                f"{self.host}{TAGS_ROUTE}",
                headers=self._headers(),
                timeout=self.connection_timeout,
            )
        except ServiceRequestError as exc:
            raise ServiceConnectionError(
                f"Generation service connectivity test failed: {exc}",
                status_code=exc.status_code,
            ) from exc
        elapsed_ms = (time.monotonic() - start) * 1000
        logger.info("Generation service reachable (%.0fms)", elapsed_ms)
        return elapsed_ms

    def build_request(self, diff_text: str, system_prompt: str | None = None) -> GenerationRequest:
        """Build the request for one diff.

        Raises:
            InvalidPromptError: If ``diff_text`` is empty after trimming.
        """
        if not diff_text or not diff_text.strip():
            raise InvalidPromptError()
        return GenerationRequest(
            prompt=truncate_prompt(diff_text.strip(), self.max_prompt_chars),
            model=self.model,
            system=system_prompt or self.system_prompt,
            options=self.options,
        )

    def _generate_once(self, request: GenerationRequest) -> GenerationResult:
        try:
            body = post_json(
                self.session,
                f"{self.host}{GENERATE_ROUTE}",
                request.to_payload(),
                headers=self._headers(),
                timeout=self.timeout,
            )
        except ServiceRequestError as exc:
            raise GenerationError(str(exc), kind=GenerationErrorKind.TRANSPORT) from exc

        result = parse_generation_response(body)
        logger.info("AI response received (%d chars)", len(result.text))
        return result

    def generate(self, diff_text: str, system_prompt: str | None = None) -> GenerationResult:
        """Generate a review for ``diff_text``.

        Args:
            diff_text: Unified diff used as the prompt.
            system_prompt: Per-request system prompt override.

        Returns:
            Validated ``GenerationResult`` with any code fence removed.

        Raises:
            InvalidPromptError: If the diff is empty (not retried).
            GenerationError: If every attempt fails.
        """
        request = self.build_request(diff_text, system_prompt)
        logger.info(
            "Generating AI review with model %s (prompt %d chars, timeout %gs)",
            self.model,
            len(request.prompt),
            self.timeout,
        )
        return with_retry(
            lambda: self._generate_once(request),
            "AI generation",
            max_attempts=self.max_attempts,
            use_exponential_backoff=True,
            base_delay=self.retry_delay,
            sleep=self._sleep,
        )
