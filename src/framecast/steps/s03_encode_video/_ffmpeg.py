"""ffmpeg command construction and a progress-reporting encode runner."""

from __future__ import annotations

import logging
import subprocess
import threading
from pathlib import Path
from typing import Callable, Iterable

from framecast.core.errors import EncodeError
from framecast.utils.subprocess_utils import tail_file
from .config import EncodeVideoConfig
from .contracts import EncodeEvent

logger = logging.getLogger(__name__)

EventCallback = Callable[[EncodeEvent], None]


def _fmt_rate(fps: float) -> str:
    return f"{fps:g}"


def build_encode_command(
    frames_dir: Path,
    frame_pattern: str,
    fps: float,
    total_frames: int,
    output_path: Path,
    config: EncodeVideoConfig,
    audio_path: Path | None = None,
    ffmpeg_bin: str | None = None,
) -> list[str]:
    """Image sequence (+ optional audio) -> one constant-frame-rate file.

    ``-frames:v`` caps the output at the planned count, so stray files in
    the frames directory can never lengthen the video. With audio, the
    output stops at the shorter of the two streams.
    """
    rate = _fmt_rate(fps)
    cmd = [
        ffmpeg_bin or config.ffmpeg_bin,
        "-y",
        "-hide_banner",
        "-loglevel", "error",
        "-framerate", rate,
        "-start_number", "0",
        "-i", str(frames_dir / frame_pattern),
    ]
    if audio_path is not None:
        cmd.extend(["-i", str(audio_path)])

    cmd.extend(["-map", "0:v:0"])
    if audio_path is not None:
        cmd.extend(["-map", "1:a:0"])

    cmd.extend([
        "-frames:v", str(total_frames),
        "-c:v", config.video_codec,
        "-preset", config.preset,
        "-crf", str(config.crf),
        "-pix_fmt", config.pixel_format,
        "-r", rate,
    ])

    if audio_path is not None:
        cmd.extend([
            "-c:a", config.audio_codec,
            "-b:a", config.audio_bitrate,
            "-shortest",
        ])
    else:
        cmd.append("-an")

    cmd.extend([
        "-movflags", "+faststart",
        "-progress", "pipe:1",
        "-nostats",
        str(output_path),
    ])
    return cmd


def parse_progress(lines: Iterable[str]) -> Iterable[tuple[str, str]]:
    """Key/value pairs from ffmpeg's ``-progress`` output."""
    for line in lines:
        key, sep, value = line.strip().partition("=")
        if sep:
            yield key, value


def run_encode(
    cmd: list[str],
    total_frames: int,
    log_path: Path,
    on_event: EventCallback | None = None,
    timeout: float | None = None,
) -> None:
    """Run one encode, reporting start/progress/complete/error events.

    Progress is telemetry only. The encode has failed when ffmpeg exits
    non-zero, cannot be started, or runs past ``timeout``; ffmpeg's stderr
    is kept in ``log_path`` for inspection.
    """

    def emit(event: EncodeEvent) -> None:
        if on_event is not None:
            on_event(event)

    logger.info(f"Running: {' '.join(cmd)}")
    log_path.parent.mkdir(parents=True, exist_ok=True)

    with open(log_path, "w", encoding="utf-8") as log_file:
        try:
            proc = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=log_file,
                text=True,
            )
        except FileNotFoundError as exc:
            emit(EncodeEvent(kind="error", message=f"ffmpeg not found: {cmd[0]}"))
            raise EncodeError(f"ffmpeg not found: {cmd[0]}") from exc

        emit(EncodeEvent(kind="start", message=" ".join(cmd)))

        timed_out = threading.Event()

        def kill() -> None:
            timed_out.set()
            proc.kill()

        timer = threading.Timer(timeout, kill) if timeout else None
        if timer is not None:
            timer.start()
        try:
            last_percent = -1.0
            for key, value in parse_progress(proc.stdout):
                if key != "frame" or not value.isdigit():
                    continue
                frame = int(value)
                percent = min(100.0, 100.0 * frame / total_frames) if total_frames else 100.0
                if percent != last_percent:
                    last_percent = percent
                    logger.debug(f"Encoding: {percent:.0f}% ({frame}/{total_frames})")
                    emit(EncodeEvent(kind="progress", frame=frame, percent=percent))
            returncode = proc.wait()
        finally:
            if timer is not None:
                timer.cancel()
            if proc.poll() is None:
                proc.kill()
                proc.wait()
            if proc.stdout is not None:
                proc.stdout.close()

    if timed_out.is_set():
        message = f"ffmpeg timed out after {timeout:g}s"
    elif returncode != 0:
        message = f"ffmpeg exited with code {returncode}: {tail_file(log_path)}"
    else:
        emit(EncodeEvent(kind="complete", frame=total_frames, percent=100.0))
        return

    logger.error(message)
    emit(EncodeEvent(kind="error", message=message))
    raise EncodeError(message)
