"""Configuration for Step 03: Video encoding."""

from pydantic import BaseModel, Field


class EncodeVideoConfig(BaseModel):
    ffmpeg_bin: str = Field("ffmpeg", description="ffmpeg executable name or path")
    ffprobe_bin: str = Field("ffprobe", description="ffprobe executable name or path")
    video_codec: str = Field("libx264", description="Output video codec")
    pixel_format: str = Field("yuv420p", description="Output pixel format")
    preset: str = Field("medium", description="Encoder speed preset")
    crf: int = Field(18, ge=0, le=51, description="Constant rate factor (0 = lossless x264)")
    audio_codec: str = Field("aac", description="Audio codec when an audio track is muxed")
    audio_bitrate: str = Field("192k", description="Audio bitrate")
    output_name: str = Field("output.mp4", description="Video filename inside the job directory")
    keep_frames: bool = Field(False, description="Keep the frames directory after a successful encode")
    verify_output: bool = Field(True, description="Probe the result with ffprobe when available")
    timeout: float | None = Field(None, gt=0, description="Seconds before the encode is killed")
