"""Common Pydantic models shared across pipeline steps."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

# Ceiling on the summed segment durations of one job (seconds)
MAX_TOTAL_SECONDS = 300.0
MAX_FPS = 120.0
MIN_DIMENSION = 16
MAX_DIMENSION = 7680

URL_PREFIXES = ("http://", "https://", "file://")


class FrameRange(BaseModel):
    """Contiguous span of global frame indices assigned to one segment.

    An empty range (``frame_count == 0``) has ``end_frame == start_frame - 1``.
    """

    segment_index: int = Field(..., ge=0)
    start_frame: int = Field(..., ge=0)
    end_frame: int = Field(..., ge=-1)
    frame_count: int = Field(..., ge=0)
    duration: float = Field(..., ge=0.0, description="Requested segment duration in seconds")

    @model_validator(mode="after")
    def _check_span(self) -> FrameRange:
        if self.end_frame - self.start_frame + 1 != self.frame_count:
            raise ValueError(
                f"Range {self.start_frame}..{self.end_frame} does not hold {self.frame_count} frames"
            )
        return self

    @property
    def is_empty(self) -> bool:
        return self.frame_count == 0

    def frame_indices(self) -> range:
        return range(self.start_frame, self.end_frame + 1)


class RenderRequest(BaseModel):
    """Inbound "render content to video" request, validated before any work."""

    content: str = Field(..., min_length=1, description="HTML markup or a URL")
    content_type: Literal["html", "url", "auto"] = Field("auto", description="How to load content")
    durations: list[float] = Field(..., min_length=1, description="Seconds per segment, in order")
    fps: float = Field(2.0, gt=0.0, le=MAX_FPS, description="Capture and output frame rate")
    width: int | None = Field(None, description="Frame width (None = preset)")
    height: int | None = Field(None, description="Frame height (None = preset)")
    preset: str | None = Field(None, description="Frame size preset: youtube|instagram|tiktok|custom")
    audio_path: Path | None = Field(None, description="Optional audio track to mux")
    output_path: Path | None = Field(None, description="Final video path (None = inside job dir)")

    @field_validator("durations")
    @classmethod
    def _positive_durations(cls, value: list[float]) -> list[float]:
        for i, d in enumerate(value):
            if not math.isfinite(d) or d <= 0:
                raise ValueError(f"Duration #{i} must be a positive number of seconds, got {d}")
        total = sum(value)
        if total > MAX_TOTAL_SECONDS:
            raise ValueError(
                f"Total duration {total:g}s exceeds the {MAX_TOTAL_SECONDS:g}s limit"
            )
        return value

    @field_validator("width", "height")
    @classmethod
    def _even_dimension(cls, value: int | None) -> int | None:
        if value is None:
            return value
        if not MIN_DIMENSION <= value <= MAX_DIMENSION:
            raise ValueError(f"Dimension must be within {MIN_DIMENSION}..{MAX_DIMENSION}, got {value}")
        if value % 2:
            raise ValueError(f"Dimension must be even for yuv420p output, got {value}")
        return value

    @field_validator("audio_path")
    @classmethod
    def _audio_exists(cls, value: Path | None) -> Path | None:
        if value is not None and not value.is_file():
            raise ValueError(f"Audio file not found: {value}")
        return value

    @model_validator(mode="after")
    def _resolve_content_type(self) -> RenderRequest:
        if self.content_type == "auto":
            is_url = self.content.strip().lower().startswith(URL_PREFIXES)
            self.content_type = "url" if is_url else "html"
        return self

    @property
    def total_seconds(self) -> float:
        return sum(self.durations)


class RenderResult(BaseModel):
    """What a successful render job reports back."""

    job_id: str
    video_path: Path
    total_frames: int
    frame_ranges: list[FrameRange] = Field(default_factory=list)
    duration_seconds: float | None = None
    fps: float
    width: int
    height: int
    has_audio: bool = False


class StepEntry(BaseModel):
    """One entry in the pipeline step list."""

    name: str
    module: str
    config_file: str | None = None
    depends_on: list[str] = Field(default_factory=list)
    enabled: bool = True
    overrides: dict[str, Any] = Field(default_factory=dict)


class PipelineConfig(BaseModel):
    """Top-level pipeline configuration loaded from pipeline.yaml."""

    project_name: str = "framecast"
    data_root: Path = Path("./jobs")
    steps: list[StepEntry] = Field(default_factory=list)
