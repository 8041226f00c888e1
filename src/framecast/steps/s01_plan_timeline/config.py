"""Configuration for Step 01: Timeline planning."""

from typing import Literal

from pydantic import BaseModel, Field

from framecast.core.contracts import MAX_TOTAL_SECONDS


class PlanTimelineConfig(BaseModel):
    max_total_seconds: float = Field(MAX_TOTAL_SECONDS, gt=0, description="Ceiling on summed durations")
    rounding: Literal["half_away_from_zero", "half_even"] = Field(
        "half_away_from_zero", description="Tie rule for round(duration * fps)"
    )
