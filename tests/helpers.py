"""Test doubles and builders shared across the framecast test modules."""

from __future__ import annotations

import functools
import shutil
from pathlib import Path
from typing import Any

import pytest

from framecast.core.contracts import FrameRange


def make_ranges(counts: list[int], fps: float = 10.0) -> list[FrameRange]:
    ranges = []
    cursor = 0
    for i, n in enumerate(counts):
        ranges.append(FrameRange(
            segment_index=i, start_frame=cursor, end_frame=cursor + n - 1,
            frame_count=n, duration=n / fps,
        ))
        cursor += n
    return ranges


class FakeSurface:
    """In-memory stand-in for a browser page.

    Answers the control protocol and clock queries the capture code issues,
    and records every call in ``calls``.
    """

    def __init__(self, segments: int = 3, has_protocol: bool = True, fail_at_frame: int | None = None):
        self.segments = segments
        self.has_protocol = has_protocol
        self.fail_at_frame = fail_at_frame
        self.current = 0
        self.calls: list[tuple[str, Any]] = []
        self.init_scripts: list[str] = []
        self.loaded_html: str | None = None
        self.closed = False

    def open(self, width: int, height: int) -> None:
        self.calls.append(("open", (width, height)))

    def add_init_script(self, script: str) -> None:
        self.init_scripts.append(script)

    def load_html(self, html: str) -> None:
        self.calls.append(("load_html", len(html)))
        self.loaded_html = html

    def navigate(self, url: str) -> None:
        self.calls.append(("navigate", url))

    def evaluate(self, expression: str, arg: Any = None) -> Any:
        self.calls.append(("evaluate", expression))
        if "Boolean(window.__framecastClock)" in expression:
            return True
        if "freezeMedia" in expression:
            return 0
        if "stats()" in expression:
            return {}
        if not self.has_protocol:
            return None
        if "initSlides" in expression:
            self.current = 0
            return self.segments
        if "setSlide" in expression:
            self.calls.append(("set_slide", arg))
            if 0 <= arg < self.segments:
                self.current = arg
                return {"ok": True, "index": arg, "total": self.segments}
            return {"ok": False, "index": arg, "total": self.segments}
        if "getTotalSlides" in expression:
            return self.segments
        return None

    def settle(self, ms: int) -> None:
        self.calls.append(("settle", ms))

    def screenshot(self, path: Path) -> None:
        index = int(Path(path).stem.split("_")[-1])
        if self.fail_at_frame is not None and index == self.fail_at_frame:
            raise OSError("disk full")
        Path(path).write_text(f"segment={self.current}")
        self.calls.append(("screenshot", Path(path).name))

    def close(self) -> None:
        self.closed = True
        self.calls.append(("close", None))

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]


def has_ffmpeg() -> bool:
    return shutil.which("ffmpeg") is not None and shutil.which("ffprobe") is not None


needs_ffmpeg = pytest.mark.skipif(not has_ffmpeg(), reason="ffmpeg/ffprobe not installed")


@functools.lru_cache(maxsize=1)
def chromium_error() -> str | None:
    """None if headless Chromium can be launched, else the reason it cannot."""
    try:
        from playwright.sync_api import Error as PlaywrightError
        from playwright.sync_api import sync_playwright
    except ImportError:
        return "playwright not installed"
    try:
        with sync_playwright() as p:
            browser = p.chromium.launch(headless=True, args=["--no-sandbox"])
            browser.close()
    except PlaywrightError as exc:
        return f"Chromium not available: {exc}"
    return None


def write_frames(
    frames_dir: Path, count: int, size: tuple[int, int] = (64, 36), extension: str = "png"
) -> list[Path]:
    """Numbered solid-colour images named like captured frames.

    Pillow picks the encoder from ``extension`` (``png`` or ``jpg``).
    """
    Image = pytest.importorskip("PIL.Image")
    frames_dir.mkdir(parents=True, exist_ok=True)
    paths = []
    for i in range(count):
        shade = (i * 37) % 256
        path = frames_dir / f"frame_{i:06d}.{extension}"
        Image.new("RGB", size, (shade, 255 - shade, 128)).save(path)
        paths.append(path)
    return paths
