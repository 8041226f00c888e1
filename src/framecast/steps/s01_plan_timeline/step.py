"""Step 01: Plan per-segment frame ranges from durations and fps."""

from __future__ import annotations

import logging
from typing import ClassVar

from framecast.core.step_base import BaseStep
from ._planner import frame_pattern, plan_timeline, total_frames
from .config import PlanTimelineConfig
from .contracts import PlanTimelineInput, PlanTimelineOutput

logger = logging.getLogger(__name__)


class PlanTimelineStep(BaseStep[PlanTimelineInput, PlanTimelineOutput, PlanTimelineConfig]):
    name: ClassVar[str] = "plan_timeline"
    input_type: ClassVar = PlanTimelineInput
    output_type: ClassVar = PlanTimelineOutput
    config_type: ClassVar = PlanTimelineConfig

    def validate_inputs(self, inputs: PlanTimelineInput) -> bool:
        if not inputs.durations:
            logger.error("No segment durations given")
            return False
        if any(d < 0 for d in inputs.durations):
            logger.error(f"Negative segment duration in {inputs.durations}")
            return False
        total = sum(inputs.durations)
        if total > self.config.max_total_seconds:
            logger.error(
                f"Total duration {total:g}s exceeds {self.config.max_total_seconds:g}s"
            )
            return False
        return True

    def run(self, inputs: PlanTimelineInput) -> PlanTimelineOutput:
        ranges = plan_timeline(inputs.durations, inputs.fps, self.config.rounding)
        total = total_frames(ranges)

        empty = [r.segment_index for r in ranges if r.is_empty]
        if empty:
            logger.warning(f"Segments {empty} are shorter than half a frame and will not appear")
        logger.info(f"Planned {len(ranges)} segments, {total} frames @ {inputs.fps:g} fps")

        return PlanTimelineOutput(
            frame_ranges=ranges,
            total_frames=total,
            fps=inputs.fps,
            duration_seconds=total / inputs.fps,
            frame_pattern=frame_pattern(total),
        )
