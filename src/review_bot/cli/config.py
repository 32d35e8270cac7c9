"""Build a ReviewConfig from GitHub-Action style environment variables."""

import os
from typing import Any, Mapping

from pydantic import ValidationError

from review_bot.models import ReviewConfig
from review_bot.pipeline.exceptions import ConfigurationError
from review_bot.utils.pattern_filter import split_patterns

# ReviewConfig field -> environment variable
ENV_VARS = {
    "host": "INPUT_HOST",
    "model": "INPUT_MODEL",
    "ai_token": "INPUT_AI_TOKEN",
    "system_prompt": "INPUT_REVIEWERS_PROMPT",
    "review_prompt": "INPUT_REVIEW_PROMPT",
    "language": "INPUT_LANGUAGE",
    "base_ref": "INPUT_BASE_REF",
    "repository": "INPUT_REPOSITORY",
    "pull_request_number": "INPUT_PULL_REQUEST_NUMBER",
    "github_token": "INPUT_TOKEN",
    "api_base_url": "GITHUB_API_URL",
    "server_url": "GITHUB_SERVER_URL",
    "commit_sha": "GITHUB_SHA",
}
INCLUDE_VAR = "INPUT_INCLUDE_FILES"
EXCLUDE_VAR = "INPUT_EXCLUDE_FILES"
REVIEW_PR_VAR = "INPUT_REVIEW_PULL_REQUEST"

_REQUIRED = {"host": "INPUT_HOST", "model": "INPUT_MODEL"}


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _format_validation_error(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "config"
        problems.append(f"{location}: {error.get('msg')}")
    return "; ".join(problems)


def load_config(environ: Mapping[str, str] | None = None, **overrides: Any) -> ReviewConfig:
    """Create the immutable run configuration.

    Args:
        environ: Environment mapping (defaults to ``os.environ``).
        **overrides: Field values that win over the environment, e.g. from
            CLI flags. ``None`` values are ignored.

    Returns:
        Validated ``ReviewConfig``.

    Raises:
        ConfigurationError: If a required value is missing or invalid.
    """
    env = os.environ if environ is None else environ

    values: dict[str, Any] = {}
    for field_name, var in ENV_VARS.items():
        value = _clean(env.get(var))
        if value is not None:
            values[field_name] = value

    values["review_pull_request"] = (env.get(REVIEW_PR_VAR) or "").strip().lower() == "true"
    values["include_patterns"] = tuple(split_patterns(env.get(INCLUDE_VAR, "")))
    values["exclude_patterns"] = tuple(split_patterns(env.get(EXCLUDE_VAR, "")))

    values.update({key: value for key, value in overrides.items() if value is not None})

    for field_name, var in _REQUIRED.items():
        if not values.get(field_name):
            raise ConfigurationError(
                f"{field_name.upper()} input is required but not provided (set {var})"
            )

    try:
        return ReviewConfig(**values)
    except ValidationError as exc:
        raise ConfigurationError(
            f"Invalid configuration: {_format_validation_error(exc)}"
        ) from exc
