"""In-page segment control protocol and its injection into markup.

The script defines ``window.__framecast`` with four operations:

- ``initSlides()``      discover segments, show the first, hide the rest
- ``setSlide(i)``       show exactly segment ``i`` and hide every other one
- ``getTotalSlides()``  number of discovered segments
- ``getCurrentSlide()`` index of the visible segment

Segments are the elements carrying the marker attribute (``data-slide`` by
default), in document order. When no element carries it and legacy
selectors are enabled, the first non-empty group of: elements with class
``slide``, ``<section>`` tags, elements whose class contains "slide" is used
instead (innermost matches only).
"""

from __future__ import annotations

import json
import re

CONTROL_GLOBAL = "__framecast"

_CONTROL_TEMPLATE = r"""
(() => {
  if (window.__framecast) {
    return;
  }
  const options = __OPTIONS__;
  const state = { currentSlideIndex: 0, slides: [] };
  const LEGACY_SELECTORS = ['.slide', 'section', '[class*="slide"]'];

  const discover = () => {
    const marked = Array.from(document.querySelectorAll(`[${options.attribute}]`));
    if (marked.length || !options.legacySelectors) {
      return marked;
    }
    for (const selector of LEGACY_SELECTORS) {
      const found = Array.from(document.querySelectorAll(selector));
      // Innermost matches only, so a ".slideshow" wrapper is never a segment
      const leaves = found.filter((el) => !found.some((other) => other !== el && el.contains(other)));
      if (leaves.length) {
        return leaves;
      }
    }
    return [];
  };

  const hide = (el) => {
    if (!el.hasAttribute('data-framecast-display')) {
      el.setAttribute('data-framecast-display', el.style.display || '');
    }
    el.classList.remove(options.activeClass);
    el.style.opacity = '0';
    el.style.visibility = 'hidden';
    el.style.display = 'none';
  };

  const show = (el) => {
    const saved = el.getAttribute('data-framecast-display');
    el.style.display = saved && saved !== 'none' ? saved : '';
    if (getComputedStyle(el).display === 'none') {
      el.style.display = 'block';
    }
    el.style.visibility = 'visible';
    // Reflow between display and opacity so CSS transitions start from 0
    void el.offsetWidth;
    el.style.opacity = '1';
    el.classList.add(options.activeClass);
  };

  const setSlide = (index) => {
    if (!state.slides.length) {
      state.slides = discover();
    }
    const total = state.slides.length;
    if (!Number.isInteger(index) || index < 0 || index >= total) {
      return { ok: false, index, total };
    }
    state.slides.forEach((el, i) => {
      if (i !== index) {
        hide(el);
      }
    });
    show(state.slides[index]);
    state.currentSlideIndex = index;
    return { ok: true, index, total };
  };

  const initSlides = () => {
    state.slides = discover();
    state.currentSlideIndex = 0;
    if (state.slides.length) {
      setSlide(0);
    }
    return state.slides.length;
  };

  window.__framecast = {
    initSlides,
    setSlide,
    getTotalSlides: () => state.slides.length,
    getCurrentSlide: () => state.currentSlideIndex,
  };

  if (document.readyState === 'loading') {
    document.addEventListener('DOMContentLoaded', initSlides, { once: true });
  } else {
    initSlides();
  }
})();
"""

_BODY_CLOSE = re.compile(r"</body\s*>", re.IGNORECASE)
_HEAD_CLOSE = re.compile(r"</head\s*>", re.IGNORECASE)
_HEAD_OPEN = re.compile(r"<head(\s[^>]*)?>", re.IGNORECASE)
_HTML_OPEN = re.compile(r"<html(\s[^>]*)?>", re.IGNORECASE)
_DOCTYPE = re.compile(r"<!doctype[^>]*>", re.IGNORECASE)


def build_control_script(
    attribute: str = "data-slide",
    legacy_selectors: bool = True,
    active_class: str = "active",
) -> str:
    options = {
        "attribute": attribute,
        "legacySelectors": legacy_selectors,
        "activeClass": active_class,
    }
    return _CONTROL_TEMPLATE.replace("__OPTIONS__", json.dumps(options))


def script_tag(script: str, marker: str) -> str:
    return f"<script {marker}>{script}</script>"


def inject_control_script(html: str, script: str) -> str:
    """Append the control script where it is guaranteed to load.

    Before the last ``</body>`` if there is one, else before ``</head>``,
    else in front of the whole document.
    """
    tag = script_tag(script, "data-framecast-control")
    body_matches = list(_BODY_CLOSE.finditer(html))
    if body_matches:
        pos = body_matches[-1].start()
        return html[:pos] + tag + html[pos:]
    head = _HEAD_CLOSE.search(html)
    if head:
        return html[: head.start()] + tag + html[head.start():]
    return tag + html


def inject_early_script(html: str, script: str) -> str:
    """Insert a script ahead of every page script.

    Goes right after ``<head>``, else after ``<html>``, else after the
    doctype, else in front of the document. The doctype stays first so the
    page is not pushed into quirks mode.
    """
    tag = script_tag(script, "data-framecast-clock")
    for pattern in (_HEAD_OPEN, _HTML_OPEN, _DOCTYPE):
        match = pattern.search(html)
        if match:
            return html[: match.end()] + tag + html[match.end():]
    return tag + html
