"""Configuration for Step 02: Frame capture."""

from typing import Literal

from pydantic import BaseModel, Field

FRAME_EXTENSIONS: dict[str, str] = {"png": "png", "jpeg": "jpg"}

PRESET_DIMENSIONS: dict[str, tuple[int, int]] = {
    "youtube": (1920, 1080),
    "instagram": (1080, 1080),
    "tiktok": (1080, 1920),
    "custom": (1920, 1080),
}


def preset_dimensions(preset: str | None) -> tuple[int, int]:
    """Frame size for a named preset; unknown names fall back to youtube."""
    return PRESET_DIMENSIONS.get((preset or "youtube").lower(), PRESET_DIMENSIONS["youtube"])


class CaptureFramesConfig(BaseModel):
    preset: str = Field("youtube", description="Frame size preset: youtube|instagram|tiktok|custom")
    width: int | None = Field(None, description="Frame width (None = preset)")
    height: int | None = Field(None, description="Frame height (None = preset)")
    stabilize_ms: int = Field(1000, ge=0, description="Wait after init, before the first capture")
    settle_ms: int = Field(800, ge=0, description="Wait after each segment switch")
    load_timeout_ms: int = Field(120_000, gt=0, description="Content load / navigation timeout")
    wait_until: Literal["load", "domcontentloaded", "networkidle", "commit"] = Field(
        "networkidle", description="Navigation readiness event for URL content"
    )
    short_timer_threshold_ms: int = Field(
        1000, gt=0, description="setTimeout delays below this run; longer ones never fire"
    )
    segment_attribute: str = Field("data-slide", description="Marker attribute that flags a segment")
    legacy_selectors: bool = Field(True, description="Fall back to .slide/section/class heuristics")
    active_class: str = Field("active", description="Class toggled on the visible segment")
    strict_segments: bool = Field(
        False, description="Fail the job when a segment cannot be selected instead of warning"
    )
    image_format: Literal["png", "jpeg"] = Field("png", description="Still image format")
    headless: bool = Field(True, description="Run Chromium headless")
    browser_args: list[str] = Field(
        default_factory=lambda: ["--no-sandbox", "--disable-setuid-sandbox"],
        description="Extra Chromium command-line flags",
    )
