"""Deterministic clock installed into the page before any content script.

``window.__framecastClock`` takes over the page's scheduling entry points:

- ``setTimeout`` below the threshold (1 s by default) runs normally; the
  control protocol and short transition helpers rely on it. Longer delays
  are recorded and never invoked.
- ``setInterval`` and ``requestAnimationFrame`` are never invoked.
- CSS transitions and animations are left alone; they are what makes
  segment-to-segment transitions visible in the captured frames.

It also exposes the only waiting primitive the capture loop uses,
``settle(ms)``, plus ``freezeMedia()`` (pause and rewind every audio/video
element) and ``stats()``. This is a best-effort sandbox: content that
schedules work through other channels (workers, message events, promises
chains) is not intercepted.
"""

from __future__ import annotations

CLOCK_GLOBAL = "__framecastClock"

_CLOCK_TEMPLATE = r"""
(() => {
  if (window.__framecastClock) {
    return;
  }
  const threshold = __THRESHOLD__;
  const nativeSetTimeout = window.setTimeout.bind(window);
  const stats = {
    allowedTimeouts: 0,
    suppressedTimeouts: 0,
    suppressedIntervals: 0,
    suppressedAnimationFrames: 0,
    frozenMedia: 0,
  };
  // Negative ids never collide with ids handed out by the browser
  let lastFakeId = 0;
  const fakeId = () => {
    lastFakeId -= 1;
    return lastFakeId;
  };

  window.setTimeout = function (handler, delay, ...args) {
    const ms = Number(delay) || 0;
    if (ms < threshold) {
      stats.allowedTimeouts += 1;
      return nativeSetTimeout(handler, ms, ...args);
    }
    stats.suppressedTimeouts += 1;
    return fakeId();
  };

  window.setInterval = function () {
    stats.suppressedIntervals += 1;
    return fakeId();
  };

  window.requestAnimationFrame = function () {
    stats.suppressedAnimationFrames += 1;
    return fakeId();
  };

  const freezeMedia = () => {
    const media = Array.from(document.querySelectorAll('audio, video'));
    media.forEach((el) => {
      el.autoplay = false;
      el.pause();
      el.currentTime = 0;
    });
    stats.frozenMedia += media.length;
    return media.length;
  };

  window.__framecastClock = {
    threshold,
    settle: (ms) => new Promise((resolve) => nativeSetTimeout(resolve, ms)),
    freezeMedia,
    stats: () => Object.assign({}, stats),
  };
})();
"""


def build_clock_script(short_timer_threshold_ms: int = 1000) -> str:
    return _CLOCK_TEMPLATE.replace("__THRESHOLD__", str(int(short_timer_threshold_ms)))
