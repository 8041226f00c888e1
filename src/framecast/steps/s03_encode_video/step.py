"""Step 03: Encode the captured frames (and optional audio) into one video."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import ClassVar

from framecast.core.errors import EncodeError
from framecast.core.step_base import BaseStep
from framecast.utils.subprocess_utils import find_binary
from ._ffmpeg import EventCallback, build_encode_command, run_encode
from ._probe import VideoProbe, probe_video
from .config import EncodeVideoConfig
from .contracts import EncodeVideoInput, EncodeVideoOutput

logger = logging.getLogger(__name__)


class EncodeVideoStep(BaseStep[EncodeVideoInput, EncodeVideoOutput, EncodeVideoConfig]):
    name: ClassVar[str] = "encode_video"
    input_type: ClassVar = EncodeVideoInput
    output_type: ClassVar = EncodeVideoOutput
    config_type: ClassVar = EncodeVideoConfig

    def __init__(self, config, data_root, on_event: EventCallback | None = None):
        super().__init__(config, data_root)
        self.on_event = on_event

    def validate_inputs(self, inputs: EncodeVideoInput) -> bool:
        if not inputs.frames_dir.is_dir():
            logger.error(f"Frames directory not found: {inputs.frames_dir}")
            return False
        missing = [
            i for i in (0, inputs.total_frames - 1)
            if not (inputs.frames_dir / (inputs.frame_pattern % i)).is_file()
        ]
        if missing:
            logger.error(f"Frames {missing} missing from {inputs.frames_dir}")
            return False
        if inputs.audio_path is not None and not inputs.audio_path.is_file():
            logger.error(f"Audio file not found: {inputs.audio_path}")
            return False
        return True

    def run(self, inputs: EncodeVideoInput) -> EncodeVideoOutput:
        ffmpeg_bin = find_binary(self.config.ffmpeg_bin)
        if ffmpeg_bin is None:
            raise EncodeError(f"{self.config.ffmpeg_bin} not found on PATH")

        output_path = inputs.output_path or self.data_root / self.config.output_name
        output_path.parent.mkdir(parents=True, exist_ok=True)

        cmd = build_encode_command(
            frames_dir=inputs.frames_dir,
            frame_pattern=inputs.frame_pattern,
            fps=inputs.fps,
            total_frames=inputs.total_frames,
            output_path=output_path,
            config=self.config,
            audio_path=inputs.audio_path,
            ffmpeg_bin=ffmpeg_bin,
        )
        # Frames stay on disk if this raises
        run_encode(
            cmd,
            total_frames=inputs.total_frames,
            log_path=self.data_root / "encode.log",
            on_event=self.on_event,
            timeout=self.config.timeout,
        )
        logger.info(f"Encoded {inputs.total_frames} frames @ {inputs.fps:g} fps -> {output_path}")

        probe = self._verify(output_path, inputs.total_frames, inputs.audio_path is not None)

        if not self.config.keep_frames:
            shutil.rmtree(inputs.frames_dir, ignore_errors=True)
            logger.info(f"Removed frames directory {inputs.frames_dir}")

        return EncodeVideoOutput(
            video_path=output_path,
            fps=inputs.fps,
            frame_count=probe.frame_count if probe and probe.frame_count is not None else inputs.total_frames,
            duration_seconds=probe.duration_seconds if probe else None,
            has_audio=probe.has_audio if probe else inputs.audio_path is not None,
            width=probe.width if probe else None,
            height=probe.height if probe else None,
        )

    def _verify(self, output_path: Path, total_frames: int, with_audio: bool) -> VideoProbe | None:
        """Read the encoded file back and check it holds the planned frames.

        With audio, ``-shortest`` may cut the video to the audio length, so
        only an excess of frames is an error there.
        """
        if not self.config.verify_output:
            return None
        ffprobe_bin = find_binary(self.config.ffprobe_bin)
        if ffprobe_bin is None:
            logger.warning(f"{self.config.ffprobe_bin} not found, skipping output verification")
            return None
        try:
            probe = probe_video(output_path, ffprobe_bin)
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired) as exc:
            raise EncodeError(f"Encoded file could not be read back: {exc}") from exc
        if not probe.has_video:
            raise EncodeError(f"Encoded file {output_path} has no video stream")

        if probe.frame_count is not None:
            too_many = probe.frame_count > total_frames
            if too_many or (not with_audio and probe.frame_count != total_frames):
                raise EncodeError(
                    f"Encoded file has {probe.frame_count} frames, expected {total_frames}"
                )
        elif not with_audio and probe.duration_seconds and probe.fps:
            estimated = round(probe.duration_seconds * probe.fps)
            if abs(estimated - total_frames) > 1:
                raise EncodeError(
                    f"Encoded file lasts {probe.duration_seconds:.3f}s, "
                    f"about {estimated} frames, expected {total_frames}"
                )
        logger.info(
            f"Output: {probe.width}x{probe.height}, {probe.duration_seconds}s, "
            f"audio={'yes' if probe.has_audio else 'no'}"
        )
        return probe
