"""Frame capture loop: walk the planned ranges, one still per frame index."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from framecast.core.contracts import FrameRange
from framecast.core.errors import CaptureError, SurfaceError
from ._control_script import CONTROL_GLOBAL
from ._surface import RenderSurface

logger = logging.getLogger(__name__)

INIT_EXPRESSION = f"() => window.{CONTROL_GLOBAL} ? window.{CONTROL_GLOBAL}.initSlides() : null"
SELECT_EXPRESSION = f"i => window.{CONTROL_GLOBAL} ? window.{CONTROL_GLOBAL}.setSlide(i) : null"


def select_segment(surface: RenderSurface, index: int, strict: bool = False) -> bool:
    """Show one segment. Returns False (or raises when strict) if it could not be."""
    result = surface.evaluate(SELECT_EXPRESSION, index)
    if result is None:
        message = "Segment control protocol is not present in the page"
    elif not result.get("ok"):
        message = f"Segment {index} not found ({result.get('total', 0)} segments discovered)"
    else:
        return True

    if strict:
        raise SurfaceError(message)
    logger.warning(f"{message}; capturing the page as it is")
    return False


def capture_frames(
    surface: RenderSurface,
    frame_ranges: Sequence[FrameRange],
    frames_dir: Path,
    frame_pattern: str = "frame_%06d.png",
    stabilize_ms: int = 1000,
    settle_ms: int = 800,
    strict: bool = False,
) -> list[str]:
    """Capture exactly one image per planned global frame index.

    The surface must already hold the loaded content. Runs strictly in
    order; a failed screenshot raises CaptureError and nothing after it is
    captured.

    Returns:
        Frame filenames in index order.
    """
    frames_dir.mkdir(parents=True, exist_ok=True)

    found = surface.evaluate(INIT_EXPRESSION)
    if found is None:
        logger.warning("Segment control protocol is not present in the page")
    else:
        logger.info(f"Discovered {found} segments for {len(frame_ranges)} planned")
    surface.settle(stabilize_ms)

    written: list[str] = []
    for frame_range in frame_ranges:
        if frame_range.is_empty:
            logger.info(f"Segment {frame_range.segment_index} has no frames, skipping")
            continue

        logger.info(
            f"Segment {frame_range.segment_index}: frames "
            f"{frame_range.start_frame}-{frame_range.end_frame}"
        )
        select_segment(surface, frame_range.segment_index, strict=strict)
        surface.settle(settle_ms)

        for index in frame_range.frame_indices():
            fname = frame_pattern % index
            path = frames_dir / fname
            try:
                surface.screenshot(path)
            except Exception as exc:
                raise CaptureError(f"Failed to capture frame {index}: {exc}") from exc
            if not path.is_file():
                raise CaptureError(f"Frame {index} was not written to {path}")
            written.append(fname)

    logger.info(f"Captured {len(written)} frames into {frames_dir}")
    return written
