"""ffprobe summary of an encoded file."""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path

from pydantic import BaseModel

from framecast.utils.subprocess_utils import run_command

logger = logging.getLogger(__name__)


class VideoProbe(BaseModel):
    duration_seconds: float | None = None
    frame_count: int | None = None
    fps: float | None = None
    width: int | None = None
    height: int | None = None
    has_video: bool = False
    has_audio: bool = False


def _parse_rate(rate: str | None) -> float | None:
    if not rate or rate == "0/0":
        return None
    num, _, den = rate.partition("/")
    try:
        return float(num) / float(den or 1)
    except (ValueError, ZeroDivisionError):
        return None


def parse_probe(data: dict) -> VideoProbe:
    """Reduce ``ffprobe -show_format -show_streams -of json`` output."""
    probe = VideoProbe()
    duration = data.get("format", {}).get("duration")
    if duration is not None:
        probe.duration_seconds = float(duration)

    for stream in data.get("streams", []):
        kind = stream.get("codec_type")
        if kind == "audio":
            probe.has_audio = True
        elif kind == "video" and not probe.has_video:
            probe.has_video = True
            probe.width = stream.get("width")
            probe.height = stream.get("height")
            probe.fps = _parse_rate(stream.get("avg_frame_rate") or stream.get("r_frame_rate"))
            nb_frames = stream.get("nb_read_frames") or stream.get("nb_frames")
            if nb_frames and str(nb_frames).isdigit():
                probe.frame_count = int(nb_frames)
    return probe


def probe_video(path: Path, ffprobe_bin: str = "ffprobe", count_frames: bool = False) -> VideoProbe:
    """Run ffprobe on ``path``. Raises CalledProcessError if ffprobe fails."""
    cmd = [
        ffprobe_bin,
        "-v", "error",
        "-show_format",
        "-show_streams",
        "-of", "json",
    ]
    if count_frames:
        cmd.append("-count_frames")
    cmd.append(str(path))

    result = run_command(cmd, timeout=120)
    try:
        data = json.loads(result.stdout or "{}")
    except json.JSONDecodeError as exc:
        raise subprocess.CalledProcessError(
            result.returncode, " ".join(cmd), result.stdout, "unparseable ffprobe output"
        ) from exc
    return parse_probe(data)
