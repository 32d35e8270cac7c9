from unittest.mock import MagicMock

import pytest

from helpers import make_config
from review_bot.models import DiffItem, ReviewConfig


@pytest.fixture
def config() -> ReviewConfig:
    return make_config()


@pytest.fixture
def no_sleep():
    """Sleep replacement that records the requested delays."""
    return MagicMock(name="sleep")


@pytest.fixture
def mock_session():
    return MagicMock(name="session")


@pytest.fixture
def diff_items() -> list[DiffItem]:
    return [
        DiffItem(path="src/app.py", context="diff --git a/src/app.py b/src/app.py\n+print('hi')\n"),
        DiffItem(path="src/util.py", context="diff --git a/src/util.py b/src/util.py\n+x = 1\n"),
        DiffItem(path="README.md", context="diff --git a/README.md b/README.md\n+docs\n"),
    ]
