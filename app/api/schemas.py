from __future__ import annotations

from pydantic import BaseModel, Field


class HealthOut(BaseModel):
    """Health check response."""

    status: str = Field(
        description="Service status indicator. `ok` means the API process is up and responding.",
        examples=["ok"],
    )


class ErrorOut(BaseModel):
    """Failure envelope shared by every non-2xx care plan response."""

    success: bool = Field(default=False, examples=[False])
    error: str = Field(
        description="Fixed, caller-safe message. Never contains upstream error bodies.",
        examples=["Patient conditions are required"],
    )
