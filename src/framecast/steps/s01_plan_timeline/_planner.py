"""Pure timeline planning: segment durations + fps -> frame ranges.

No I/O and no state. The output of ``plan_timeline`` is the only place
where segment timing is decided; capture and encode just walk it.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_EVEN, ROUND_HALF_UP, Decimal
from typing import Iterable, Literal, Sequence

from framecast.core.contracts import FrameRange

RoundingMode = Literal["half_away_from_zero", "half_even"]

# Frame files are named frame_000000.png .. frame_999999.png at minimum
MIN_INDEX_WIDTH = 6

_DECIMAL_ROUNDING = {
    # Decimal's ROUND_HALF_UP rounds ties away from zero
    "half_away_from_zero": ROUND_HALF_UP,
    "half_even": ROUND_HALF_EVEN,
}


def round_frames(value: float, rounding: RoundingMode = "half_away_from_zero") -> int:
    """Round a frame count using an explicit tie rule.

    ``Decimal(value)`` is the exact binary value of the float, so a product
    such as ``0.15 * 10`` that lands just under ``1.5`` rounds down under
    either rule. Only exact ties are affected by the choice.
    """
    if rounding not in _DECIMAL_ROUNDING:
        raise ValueError(f"Unknown rounding mode: {rounding}")
    return int(Decimal(value).quantize(Decimal(1), rounding=_DECIMAL_ROUNDING[rounding]))


def plan_timeline(
    durations: Sequence[float],
    fps: float,
    rounding: RoundingMode = "half_away_from_zero",
) -> list[FrameRange]:
    """Map per-segment durations onto contiguous global frame ranges.

    Args:
        durations: Seconds per segment, in display order. Zero is allowed and
            yields an empty range (the segment never appears in the video).
        fps: Frame rate shared by capture and encode.
        rounding: Tie rule for ``duration * fps``.

    Returns:
        One FrameRange per duration. Ranges start at frame 0 and satisfy
        ``start[i + 1] == end[i] + 1``.
    """
    if not math.isfinite(fps) or fps <= 0:
        raise ValueError(f"fps must be a positive number, got {fps}")

    ranges: list[FrameRange] = []
    cursor = 0
    for i, duration in enumerate(durations):
        if not math.isfinite(duration) or duration < 0:
            raise ValueError(f"Duration #{i} must be a non-negative number, got {duration}")
        count = round_frames(duration * fps, rounding)
        ranges.append(
            FrameRange(
                segment_index=i,
                start_frame=cursor,
                end_frame=cursor + count - 1,
                frame_count=count,
                duration=float(duration),
            )
        )
        cursor += count
    return ranges


def total_frames(ranges: Iterable[FrameRange]) -> int:
    return sum(r.frame_count for r in ranges)


def frame_index_width(total: int) -> int:
    """Zero-pad width that keeps lexical order equal to numeric order."""
    return max(MIN_INDEX_WIDTH, len(str(max(total - 1, 0))))


def frame_pattern(total: int, extension: str = "png") -> str:
    """printf-style file pattern (as understood by ffmpeg's image2 demuxer)."""
    return f"frame_%0{frame_index_width(total)}d.{extension}"


def frame_filename(index: int, total: int, extension: str = "png") -> str:
    return frame_pattern(total, extension) % index
