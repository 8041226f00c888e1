"""Tests for S02: Frame capture."""

import time
from pathlib import Path

import pytest

from helpers import FakeSurface, make_ranges
from framecast.core.errors import CaptureError, SurfaceError
from framecast.steps.s01_plan_timeline._planner import plan_timeline
from framecast.steps.s02_capture_frames._capture import capture_frames, select_segment
from framecast.steps.s02_capture_frames._control_script import (
    build_control_script,
    inject_control_script,
    inject_early_script,
)
from framecast.steps.s02_capture_frames._suppressor import build_clock_script
from framecast.steps.s02_capture_frames.config import CaptureFramesConfig, preset_dimensions
from framecast.steps.s02_capture_frames.contracts import CaptureFramesInput
from framecast.steps.s02_capture_frames.step import CaptureFramesStep


SLIDES_HTML = """<!DOCTYPE html>
<html><head><title>deck</title></head>
<body>
  <div data-slide>one</div>
  <div data-slide>two</div>
</body></html>"""


def _step(data_root: Path, surface: FakeSurface, **config) -> CaptureFramesStep:
    return CaptureFramesStep(
        config=CaptureFramesConfig(stabilize_ms=0, settle_ms=0, **config),
        data_root=data_root,
        surface_factory=lambda cfg: surface,
    )


def _input(durations, fps, content=SLIDES_HTML, **kwargs) -> CaptureFramesInput:
    ranges = plan_timeline(durations, fps)
    return CaptureFramesInput(
        content=content,
        frame_ranges=ranges,
        total_frames=sum(r.frame_count for r in ranges),
        fps=fps,
        **kwargs,
    )


class TestCaptureLoop:
    def test_one_file_per_frame_index(self, tmp_path: Path, fake_surface: FakeSurface):
        written = capture_frames(fake_surface, make_ranges([20, 30]), tmp_path)
        assert written == [f"frame_{i:06d}.png" for i in range(50)]
        assert sorted(p.name for p in tmp_path.iterdir()) == written

    def test_frames_show_their_segment(self, tmp_path: Path, fake_surface: FakeSurface):
        capture_frames(fake_surface, make_ranges([2, 3]), tmp_path)
        assert (tmp_path / "frame_000001.png").read_text() == "segment=0"
        assert (tmp_path / "frame_000002.png").read_text() == "segment=1"
        assert (tmp_path / "frame_000004.png").read_text() == "segment=1"

    def test_select_then_settle_before_capture(self, tmp_path: Path, fake_surface: FakeSurface):
        capture_frames(fake_surface, make_ranges([1, 1]), tmp_path, stabilize_ms=50, settle_ms=7)
        seq = [c for c in fake_surface.calls if c[0] in ("set_slide", "settle", "screenshot")]
        assert seq == [
            ("settle", 50),
            ("set_slide", 0), ("settle", 7), ("screenshot", "frame_000000.png"),
            ("set_slide", 1), ("settle", 7), ("screenshot", "frame_000001.png"),
        ]

    def test_empty_ranges_are_skipped(self, tmp_path: Path, fake_surface: FakeSurface):
        written = capture_frames(fake_surface, make_ranges([2, 0, 2]), tmp_path)
        selected = [arg for name, arg in fake_surface.calls if name == "set_slide"]
        assert selected == [0, 2]
        assert written == [f"frame_{i:06d}.png" for i in range(4)]

    def test_screenshot_failure_stops_capture(self, tmp_path: Path):
        surface = FakeSurface(fail_at_frame=3)
        with pytest.raises(CaptureError, match="frame 3"):
            capture_frames(surface, make_ranges([2, 3]), tmp_path)
        assert sorted(p.name for p in tmp_path.iterdir()) == [
            "frame_000000.png", "frame_000001.png", "frame_000002.png",
        ]

    def test_missing_segment_warns_and_keeps_capturing(self, tmp_path: Path, caplog):
        surface = FakeSurface(segments=1)
        written = capture_frames(surface, make_ranges([1, 2]), tmp_path)
        assert len(written) == 3
        assert "Segment 1 not found" in caplog.text

    def test_missing_segment_strict(self, tmp_path: Path):
        surface = FakeSurface(segments=1)
        with pytest.raises(SurfaceError, match="Segment 1 not found"):
            capture_frames(surface, make_ranges([1, 2]), tmp_path, strict=True)

    def test_no_protocol(self, caplog):
        surface = FakeSurface(has_protocol=False)
        assert select_segment(surface, 0) is False
        assert "not present" in caplog.text
        with pytest.raises(SurfaceError):
            select_segment(surface, 0, strict=True)


class TestCaptureFramesStep:
    def test_scenario_fifty_frames(self, data_root: Path, fake_surface: FakeSurface):
        step = _step(data_root, fake_surface)
        output = step.execute(_input([2, 3], 10))
        assert output.frame_count == 50
        assert output.frame_list[0] == "frame_000000.png"
        assert output.frame_list[-1] == "frame_000049.png"
        assert output.frames_dir == data_root / "frames"
        assert output.segments_found == 3
        assert (output.width, output.height) == (1920, 1080)
        assert fake_surface.closed

    def test_html_gets_clock_and_control(self, data_root: Path, fake_surface: FakeSurface):
        _step(data_root, fake_surface).execute(_input([1], 2))
        html = fake_surface.loaded_html
        assert html.startswith("<!DOCTYPE html>")
        assert html.index("data-framecast-clock") < html.index("<title>")
        assert html.index("data-framecast-control") < html.index("</body>")
        assert any("__framecastClock" in s for s in fake_surface.init_scripts)

    def test_url_navigates(self, data_root: Path, fake_surface: FakeSurface):
        _step(data_root, fake_surface).execute(
            _input([1], 2, content="https://example.com/deck", content_type="url")
        )
        assert ("navigate", "https://example.com/deck") in fake_surface.calls
        assert fake_surface.loaded_html is None
        assert any("__framecast =" in s for s in fake_surface.init_scripts)

    def test_surface_closed_on_failure(self, data_root: Path):
        surface = FakeSurface(fail_at_frame=0)
        with pytest.raises(CaptureError):
            _step(data_root, surface).execute(_input([1], 2))
        assert surface.closed

    def test_open_before_load(self, data_root: Path, fake_surface: FakeSurface):
        _step(data_root, fake_surface).execute(_input([1], 2))
        names = fake_surface.names()
        assert names.index("open") < names.index("load_html") < names.index("screenshot")
        assert names[-1] == "close"

    def test_size_resolution(self, data_root: Path, fake_surface: FakeSurface):
        step = _step(data_root, fake_surface, preset="tiktok")
        assert step.resolve_size(_input([1], 2)) == (1080, 1920)
        assert step.resolve_size(_input([1], 2, preset="instagram")) == (1080, 1080)
        assert step.resolve_size(_input([1], 2, width=640, height=360)) == (640, 360)

    def test_plan_mismatch_rejected(self, data_root: Path, fake_surface: FakeSurface):
        inp = _input([1], 2).model_copy(update={"total_frames": 5})
        with pytest.raises(ValueError, match="Input validation failed"):
            _step(data_root, fake_surface).execute(inp)
        assert fake_surface.calls == []

    def test_jpeg_frames_named_for_their_format(self, data_root: Path, fake_surface: FakeSurface):
        output = _step(data_root, fake_surface, image_format="jpeg").execute(_input([1], 4))
        assert output.frame_pattern == "frame_%06d.jpg"
        assert output.frame_list == [f"frame_{i:06d}.jpg" for i in range(4)]
        assert sorted(p.name for p in output.frames_dir.iterdir()) == output.frame_list

    def test_presets(self):
        assert preset_dimensions("youtube") == (1920, 1080)
        assert preset_dimensions("TikTok") == (1080, 1920)
        assert preset_dimensions(None) == (1920, 1080)
        assert preset_dimensions("unknown") == (1920, 1080)


class TestInjection:
    def test_control_before_last_body_close(self):
        html = "<html><body>a</body><!-- </body> -->x</body></html>"
        out = inject_control_script(html, "X")
        assert out.endswith("X</script></body></html>")

    def test_control_falls_back_to_head_then_prepend(self):
        assert inject_control_script("<head></head><p>", "X").startswith("<head><script")
        assert inject_control_script("<p>hi</p>", "X").startswith("<script")

    def test_early_script_after_head(self):
        out = inject_early_script('<!doctype html><html lang="en"><head><script>a()</script>', "X")
        assert out.index("X</script>") < out.index("a()")
        assert out.startswith("<!doctype html>")

    def test_early_script_without_head(self):
        assert inject_early_script("<p>", "X").startswith("<script")
        out = inject_early_script("<!DOCTYPE html><p>", "X")
        assert out.startswith("<!DOCTYPE html><script")

    def test_scripts_carry_options(self):
        assert '"attribute": "data-page"' in build_control_script(attribute="data-page")
        assert "const threshold = 250;" in build_clock_script(250)


def _deck(body: str) -> str:
    html = f"<!DOCTYPE html><html><head></head><body>{body}</body></html>"
    html = inject_early_script(html, build_clock_script())
    return inject_control_script(html, build_control_script())


class TestInPageScripts:
    """Run the injected scripts in real headless Chromium."""

    def test_short_timers_fire_long_timers_never(self, page):
        page.set_content(_deck("""
            <div data-slide>a</div>
            <script>
              window.fired = [];
              setTimeout(() => fired.push('short'), 200);
              setTimeout(() => fired.push('long'), 2000);
              setInterval(() => fired.push('interval'), 50);
              requestAnimationFrame(() => fired.push('raf'));
            </script>
        """))
        page.wait_for_timeout(2600)
        assert page.evaluate("() => window.fired") == ["short"]
        stats = page.evaluate("() => window.__framecastClock.stats()")
        assert stats["allowedTimeouts"] >= 1
        assert stats["suppressedTimeouts"] == 1
        assert stats["suppressedIntervals"] == 1
        assert stats["suppressedAnimationFrames"] == 1

    def test_set_slide_shows_exactly_one(self, page):
        page.set_content(_deck('<div data-slide id="s0">a</div><div data-slide id="s1">b</div>'
                               '<div data-slide id="s2">c</div>'))
        assert page.evaluate("() => window.__framecast.getTotalSlides()") == 3
        assert page.is_visible("#s0") and not page.is_visible("#s1")
        result = page.evaluate("i => window.__framecast.setSlide(i)", 2)
        assert result == {"ok": True, "index": 2, "total": 3}
        assert [page.is_visible(f"#s{i}") for i in range(3)] == [False, False, True]
        assert page.evaluate("() => window.__framecast.getCurrentSlide()") == 2
        assert "active" in page.get_attribute("#s2", "class")

    def test_out_of_range_is_a_no_op(self, page):
        page.set_content(_deck('<div data-slide id="s0">a</div><div data-slide id="s1">b</div>'))
        result = page.evaluate("i => window.__framecast.setSlide(i)", 5)
        assert result == {"ok": False, "index": 5, "total": 2}
        assert page.is_visible("#s0") and not page.is_visible("#s1")

    def test_legacy_sections(self, page):
        page.set_content(_deck(
            '<div class="slideshow"><section id="a">a</section><section id="b">b</section></div>'
        ))
        assert page.evaluate("() => window.__framecast.getTotalSlides()") == 2
        page.evaluate("i => window.__framecast.setSlide(i)", 1)
        assert page.is_visible("#b") and not page.is_visible("#a")

    def test_settle_uses_native_timer(self, page):
        page.set_content(_deck("<div data-slide>a</div>"))
        started = time.monotonic()
        page.evaluate("ms => window.__framecastClock.settle(ms)", 1500)
        assert time.monotonic() - started >= 1.45

    def test_freeze_media_pauses_and_rewinds(self, page):
        page.set_content(_deck("""
            <div data-slide>a</div>
            <audio id="a" muted loop></audio>
            <video id="v" muted autoplay loop></video>
        """))
        page.evaluate("""() => {
            for (const el of document.querySelectorAll("audio, video")) {
                el.currentTime = 3;
                el.play().catch(() => {});
            }
        }""")
        before = page.evaluate("() => [...document.querySelectorAll('audio, video')].map(el => el.currentTime)")
        assert before == [3, 3]
        assert page.evaluate("() => window.__framecastClock.freezeMedia()") == 2
        state = page.evaluate("""() => [...document.querySelectorAll("audio, video")].map(
            el => ({paused: el.paused, time: el.currentTime, autoplay: el.autoplay}))""")
        assert state == [
            {"paused": True, "time": 0, "autoplay": False},
            {"paused": True, "time": 0, "autoplay": False},
        ]
