"""Utilities for the review bot."""

from review_bot.utils.pattern_filter import is_in_scope, matches_any, split_patterns
from review_bot.utils.prompts import build_system_prompt
from review_bot.utils.retry import compute_delay, with_retry

__all__ = [
    "build_system_prompt",
    "compute_delay",
    "is_in_scope",
    "matches_any",
    "split_patterns",
    "with_retry",
]
