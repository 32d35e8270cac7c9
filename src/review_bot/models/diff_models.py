"""Models for representing collected file diffs."""

from pydantic import BaseModel, ConfigDict, field_validator


class DiffItem(BaseModel):
    """One changed file's unified diff, scoped for review."""

    model_config = ConfigDict(frozen=True)

    path: str  # Relative path as reported by git
    context: str  # Unified diff text, possibly truncated

    @field_validator("context")
    @classmethod
    def _context_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("diff context must not be empty")
        return value
