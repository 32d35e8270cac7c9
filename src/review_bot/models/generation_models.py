"""Request and response models for the text-generation service."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GenerationOptions(BaseModel):
    """Sampling options sent under the ``options`` key of a generate call."""

    model_config = ConfigDict(frozen=True)

    temperature: float = 0.7
    top_p: float = 0.8
    top_k: int = 30
    tfs_z: float = 1.5  # tail-free sampling
    num_ctx: int = 8192  # context window in tokens
    num_predict: int = 2048  # output cap in tokens


class GenerationRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    prompt: str
    model: str
    system: str
    stream: bool = False
    options: GenerationOptions = Field(default_factory=GenerationOptions)

    def to_payload(self) -> dict:
        """Serialize to the JSON body expected by ``POST /api/generate``."""
        return self.model_dump()


class GenerationResult(BaseModel):
    """Validated generation output. ``text`` is never empty."""

    model_config = ConfigDict(frozen=True)

    text: str
    model: str | None = None
    total_duration: int | None = None  # nanoseconds, when reported

    @field_validator("text")
    @classmethod
    def _text_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("generated text must not be empty")
        return value
