"""Immutable run configuration for the review bot."""

from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_BASE_REF = "main"
DEFAULT_API_BASE_URL = "https://api.github.com"
DEFAULT_SERVER_URL = "https://github.com"

# Keys safe to print in logs and --dry-run output (no secrets)
_SAFE_CONFIG_KEYS = (
    "host",
    "model",
    "review_pull_request",
    "include_patterns",
    "exclude_patterns",
    "base_ref",
    "repository",
    "pull_request_number",
    "api_base_url",
    "language",
    "max_attempts",
    "generation_max_attempts",
    "retry_delay_seconds",
    "generation_timeout_seconds",
    "publish_timeout_seconds",
    "max_diff_chars",
    "max_prompt_chars",
    "inter_item_delay_seconds",
    "repo_path",
)


class ReviewConfig(BaseModel):
    """Configuration for one review run. Read-only after construction."""

    model_config = ConfigDict(frozen=True)

    # Generation service
    host: str
    model: str
    ai_token: str | None = None
    system_prompt: str | None = None  # Replaces the default role prompt
    review_prompt: str | None = None  # Per-request override, wins over system_prompt
    language: str = "English"

    # Diff selection
    repo_path: str = "."
    review_pull_request: bool = False
    base_ref: str = DEFAULT_BASE_REF
    include_patterns: tuple[str, ...] = ()
    exclude_patterns: tuple[str, ...] = ()

    # Comment target
    repository: str | None = None
    pull_request_number: str | None = None
    github_token: str | None = None
    api_base_url: str = DEFAULT_API_BASE_URL
    server_url: str = DEFAULT_SERVER_URL
    commit_sha: str | None = None

    # Tunables
    max_attempts: int = Field(default=3, ge=1)
    generation_max_attempts: int = Field(default=2, ge=1)
    retry_delay_seconds: float = Field(default=5.0, ge=0)
    generation_timeout_seconds: float = Field(default=180.0, gt=0)
    publish_timeout_seconds: float = Field(default=15.0, gt=0)
    connection_timeout_seconds: float = Field(default=10.0, gt=0)
    max_diff_chars: int = Field(default=10000, gt=0)
    max_prompt_chars: int = Field(default=8000, gt=100)
    inter_item_delay_seconds: float = Field(default=2.0, ge=0)

    @field_validator("host")
    @classmethod
    def _validate_host(cls, value: str) -> str:
        value = value.strip()
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Invalid URL format for host: {value!r}")
        return value.rstrip("/")

    @field_validator("model")
    @classmethod
    def _validate_model(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("model name must not be empty")
        return value

    @field_validator("api_base_url", "server_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.strip().rstrip("/")

    @model_validator(mode="after")
    def _check_comment_target(self) -> "ReviewConfig":
        if self.pull_request_number and not (self.repository and self.github_token):
            raise ValueError(
                "repository and github_token are required when "
                "pull_request_number is set"
            )
        return self

    def safe_summary(self) -> dict:
        """Return non-secret settings for logging."""
        summary = {key: getattr(self, key) for key in _SAFE_CONFIG_KEYS}
        summary["has_ai_token"] = bool(self.ai_token)
        summary["has_github_token"] = bool(self.github_token)
        return summary
