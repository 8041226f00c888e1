"""Step 02: Drive the page segment by segment and capture still frames."""

from __future__ import annotations

import logging
from typing import Callable, ClassVar

from framecast.core.step_base import BaseStep
from framecast.steps.s01_plan_timeline._planner import frame_pattern
from ._capture import capture_frames
from ._control_script import (
    CONTROL_GLOBAL,
    build_control_script,
    inject_control_script,
    inject_early_script,
)
from ._suppressor import CLOCK_GLOBAL, build_clock_script
from ._surface import PlaywrightSurface, RenderSurface
from .config import FRAME_EXTENSIONS, CaptureFramesConfig, preset_dimensions
from .contracts import CaptureFramesInput, CaptureFramesOutput

logger = logging.getLogger(__name__)

SurfaceFactory = Callable[[CaptureFramesConfig], RenderSurface]


def playwright_surface(config: CaptureFramesConfig) -> RenderSurface:
    return PlaywrightSurface(
        headless=config.headless,
        browser_args=config.browser_args,
        timeout_ms=config.load_timeout_ms,
        wait_until=config.wait_until,
        image_type=config.image_format,
    )


class CaptureFramesStep(BaseStep[CaptureFramesInput, CaptureFramesOutput, CaptureFramesConfig]):
    name: ClassVar[str] = "capture_frames"
    input_type: ClassVar = CaptureFramesInput
    output_type: ClassVar = CaptureFramesOutput
    config_type: ClassVar = CaptureFramesConfig

    def __init__(self, config, data_root, surface_factory: SurfaceFactory | None = None):
        super().__init__(config, data_root)
        self.surface_factory = surface_factory or playwright_surface

    def validate_inputs(self, inputs: CaptureFramesInput) -> bool:
        if not inputs.content.strip():
            logger.error("Nothing to render: content is empty")
            return False
        planned = sum(r.frame_count for r in inputs.frame_ranges)
        if planned != inputs.total_frames:
            logger.error(f"Frame ranges hold {planned} frames, plan says {inputs.total_frames}")
            return False
        if len(inputs.frame_pattern % 0) != len(inputs.frame_pattern % max(inputs.total_frames - 1, 0)):
            logger.error(f"Pattern {inputs.frame_pattern} is too narrow for {inputs.total_frames} frames")
            return False
        return True

    def resolve_size(self, inputs: CaptureFramesInput) -> tuple[int, int]:
        """Request override, then step config, then preset."""
        preset_w, preset_h = preset_dimensions(inputs.preset or self.config.preset)
        width = inputs.width or self.config.width or preset_w
        height = inputs.height or self.config.height or preset_h
        return width, height

    def run(self, inputs: CaptureFramesInput) -> CaptureFramesOutput:
        frames_dir = self.data_root / "frames"
        frames_dir.mkdir(parents=True, exist_ok=True)
        width, height = self.resolve_size(inputs)
        # ffmpeg picks the image decoder from the file extension
        pattern = frame_pattern(inputs.total_frames, FRAME_EXTENSIONS[self.config.image_format])

        clock_script = build_clock_script(self.config.short_timer_threshold_ms)
        control_script = build_control_script(
            attribute=self.config.segment_attribute,
            legacy_selectors=self.config.legacy_selectors,
            active_class=self.config.active_class,
        )

        surface = self.surface_factory(self.config)
        try:
            surface.open(width, height)
            # Registered before any content so page scripts see the clock first
            surface.add_init_script(clock_script)

            if inputs.content_type == "url":
                surface.add_init_script(control_script)
                logger.info(f"Navigating to {inputs.content}")
                surface.navigate(inputs.content)
            else:
                html = inject_early_script(inputs.content, clock_script)
                html = inject_control_script(html, control_script)
                surface.load_html(html)

            # Documents the init script did not reach get the clock now
            if not surface.evaluate(f"() => Boolean(window.{CLOCK_GLOBAL})"):
                surface.evaluate(f"() => {{ {clock_script} }}")
            frozen = surface.evaluate(f"() => window.{CLOCK_GLOBAL}.freezeMedia()")
            if frozen:
                logger.info(f"Paused and rewound {frozen} media elements")

            frame_list = capture_frames(
                surface,
                inputs.frame_ranges,
                frames_dir,
                frame_pattern=pattern,
                stabilize_ms=self.config.stabilize_ms,
                settle_ms=self.config.settle_ms,
                strict=self.config.strict_segments,
            )
            segments_found = surface.evaluate(
                f"() => window.{CONTROL_GLOBAL} ? window.{CONTROL_GLOBAL}.getTotalSlides() : null"
            )
            stats = surface.evaluate(f"() => window.{CLOCK_GLOBAL}.stats()")
            logger.debug(f"Clock stats: {stats}")
        finally:
            surface.close()

        return CaptureFramesOutput(
            frames_dir=frames_dir,
            frame_count=len(frame_list),
            frame_pattern=pattern,
            frame_list=frame_list,
            width=width,
            height=height,
            segments_found=segments_found,
        )
