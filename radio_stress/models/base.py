"""Base model configuration for configuration objects."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Base model, immutable once validated."""

    model_config = ConfigDict(frozen=True, extra="forbid")
