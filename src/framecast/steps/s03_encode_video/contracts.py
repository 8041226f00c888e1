"""I/O contracts for Step 03: Video encoding."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field


class EncodeVideoInput(BaseModel):
    frames_dir: Path = Field(..., description="Directory of numbered still images")
    fps: float = Field(..., gt=0, description="Input and output frame rate")
    total_frames: int = Field(..., ge=1, description="Exact number of frames in the output")
    frame_pattern: str = Field("frame_%06d.png", description="printf-style frame filename pattern")
    audio_path: Path | None = Field(None, description="Optional audio track")
    output_path: Path | None = Field(None, description="Output file (None = job dir / output_name)")


class EncodeVideoOutput(BaseModel):
    video_path: Path = Field(..., description="Encoded video file")
    fps: float = Field(..., description="Constant output frame rate")
    frame_count: int = Field(..., description="Frame count read back from the file, else the planned count")
    duration_seconds: float | None = Field(None, description="Container duration from ffprobe")
    has_audio: bool = Field(False, description="Whether an audio stream was muxed")
    width: int | None = Field(None, description="Video width from ffprobe")
    height: int | None = Field(None, description="Video height from ffprobe")


class EncodeEvent(BaseModel):
    """Advisory telemetry from a running encode; only complete/error matter."""

    kind: Literal["start", "progress", "complete", "error"]
    frame: int = 0
    percent: float = 0.0
    message: str = ""
