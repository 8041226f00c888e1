"""I/O contracts for Step 02: Frame capture."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from framecast.core.contracts import FrameRange


class CaptureFramesInput(BaseModel):
    content: str = Field(..., description="HTML markup or URL to render")
    content_type: Literal["html", "url"] = Field("html", description="How to load content")
    frame_ranges: list[FrameRange] = Field(..., description="Planned ranges from plan_timeline")
    total_frames: int = Field(..., ge=0, description="Sum of planned frame counts")
    fps: float = Field(..., gt=0, description="Frames per second")
    frame_pattern: str = Field("frame_%06d.png", description="printf-style frame filename pattern")
    width: int | None = Field(None, description="Frame width override")
    height: int | None = Field(None, description="Frame height override")
    preset: str | None = Field(None, description="Frame size preset override")


class CaptureFramesOutput(BaseModel):
    frames_dir: Path = Field(..., description="Directory of numbered still images")
    frame_count: int = Field(..., description="Number of frames written")
    frame_pattern: str = Field(..., description="printf-style frame filename pattern")
    frame_list: list[str] = Field(default_factory=list, description="Frame filenames in order")
    width: int = Field(..., description="Captured frame width")
    height: int = Field(..., description="Captured frame height")
    segments_found: int | None = Field(None, description="Segments discovered in the page")
