"""I/O contracts for Step 01: Timeline planning."""

from pydantic import BaseModel, Field

from framecast.core.contracts import FrameRange


class PlanTimelineInput(BaseModel):
    durations: list[float] = Field(..., description="Seconds per segment, in display order")
    fps: float = Field(..., gt=0, description="Frames per second")


class PlanTimelineOutput(BaseModel):
    frame_ranges: list[FrameRange] = Field(..., description="One contiguous range per segment")
    total_frames: int = Field(..., ge=0, description="Sum of all frame counts")
    fps: float = Field(..., description="Frame rate the plan was computed for")
    duration_seconds: float = Field(..., description="Planned video length (total_frames / fps)")
    frame_pattern: str = Field(..., description="printf-style frame filename pattern")
