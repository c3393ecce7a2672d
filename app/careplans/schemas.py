from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.api.schemas import ErrorOut


class CarePlanIn(BaseModel):
    """Care plan generation request body."""

    model_config = ConfigDict(extra="ignore")

    # Any JSON value is accepted here: a present non-string value is a generation
    # failure rather than a missing field, so the service must see it as sent.
    conditions: Any = Field(
        default=None,
        json_schema_extra={"type": "string"},
        description=(
            "Free-text list of the patient's chronic conditions. Required; must not be "
            "empty or whitespace-only. Angle brackets are stripped before use."
        ),
        examples=["Type 2 Diabetes, Hypertension, Osteoarthritis of the knee"],
    )


class CarePlanOut(BaseModel):
    """Successful care plan generation response."""

    success: bool = Field(default=True, examples=[True])
    care_plan: str = Field(
        serialization_alias="carePlan",
        description="Model-generated GPCCMP tables as free text (Markdown).",
    )
    timestamp: str = Field(
        description="ISO-8601 UTC time at which the response was produced.",
        examples=["2025-07-01T09:30:00.000Z"],
    )


__all__ = ["CarePlanIn", "CarePlanOut", "ErrorOut"]
