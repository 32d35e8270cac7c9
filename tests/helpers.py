"""Shared builders for tests."""

import json
from unittest.mock import MagicMock

from review_bot.models import ReviewConfig


def make_config(**overrides) -> ReviewConfig:
    """Build a ReviewConfig with test-friendly defaults (no waiting)."""
    values = {
        "host": "http://ollama.test:11434",
        "model": "codellama",
        "retry_delay_seconds": 0.0,
        "inter_item_delay_seconds": 0.0,
        "repository": "octo/widgets",
        "commit_sha": "abc123",
    }
    values.update(overrides)
    return ReviewConfig(**values)


def make_response(status_code: int = 200, json_body=None, text: str | None = None, reason: str = "OK"):
    """Build a MagicMock shaped like requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.reason = reason
    if text is None:
        text = json.dumps(json_body) if json_body is not None else ""
    response.text = text
    if json_body is not None:
        response.json.return_value = json_body
    else:
        response.json.side_effect = ValueError("Expecting value: line 1 column 1 (char 0)")
    return response


