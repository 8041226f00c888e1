"""Rendering surface: the capability set the capture loop drives.

Any engine offering these operations can stand in for the browser; tests
use an in-memory fake.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol

from framecast.core.errors import SurfaceError
from ._suppressor import CLOCK_GLOBAL

logger = logging.getLogger(__name__)


class RenderSurface(Protocol):
    def open(self, width: int, height: int) -> None: ...

    def add_init_script(self, script: str) -> None: ...

    def load_html(self, html: str) -> None: ...

    def navigate(self, url: str) -> None: ...

    def evaluate(self, expression: str, arg: Any = None) -> Any: ...

    def settle(self, ms: int) -> None: ...

    def screenshot(self, path: Path) -> None: ...

    def close(self) -> None: ...


class PlaywrightSurface:
    """Headless Chromium page driven through the Playwright sync API."""

    def __init__(
        self,
        headless: bool = True,
        browser_args: list[str] | None = None,
        timeout_ms: int = 120_000,
        wait_until: str = "networkidle",
        image_type: str = "png",
    ):
        self.headless = headless
        self.browser_args = list(browser_args or [])
        self.timeout_ms = timeout_ms
        self.wait_until = wait_until
        self.image_type = image_type
        self._playwright = None
        self._browser = None
        self._context = None
        self._page = None

    @property
    def page(self):
        if self._page is None:
            raise SurfaceError("Surface is not open")
        return self._page

    def open(self, width: int, height: int) -> None:
        from playwright.sync_api import Error as PlaywrightError
        from playwright.sync_api import sync_playwright

        try:
            self._playwright = sync_playwright().start()
            self._browser = self._playwright.chromium.launch(
                headless=self.headless, args=self.browser_args
            )
            self._context = self._browser.new_context(
                viewport={"width": width, "height": height},
                device_scale_factor=1,
            )
            self._page = self._context.new_page()
            self._page.set_default_timeout(self.timeout_ms)
        except PlaywrightError as exc:
            self.close()
            raise SurfaceError(f"Could not launch browser: {exc}") from exc
        logger.info(f"Browser surface open at {width}x{height}")

    def add_init_script(self, script: str) -> None:
        self.page.add_init_script(script=script)

    def load_html(self, html: str) -> None:
        from playwright.sync_api import Error as PlaywrightError

        try:
            self.page.set_content(html, wait_until="load", timeout=self.timeout_ms)
        except PlaywrightError as exc:
            raise SurfaceError(f"Could not load HTML content: {exc}") from exc

    def navigate(self, url: str) -> None:
        from playwright.sync_api import Error as PlaywrightError

        try:
            self.page.goto(url, wait_until=self.wait_until, timeout=self.timeout_ms)
        except PlaywrightError as exc:
            raise SurfaceError(f"Could not navigate to {url}: {exc}") from exc

    def evaluate(self, expression: str, arg: Any = None) -> Any:
        from playwright.sync_api import Error as PlaywrightError

        try:
            return self.page.evaluate(expression, arg)
        except PlaywrightError as exc:
            raise SurfaceError(f"Script evaluation failed: {exc}") from exc

    def settle(self, ms: int) -> None:
        """Wait on the page's own clock, falling back to a plain timeout."""
        if ms <= 0:
            return
        has_clock = self.evaluate(f"() => Boolean(window.{CLOCK_GLOBAL})")
        if has_clock:
            self.evaluate(f"ms => window.{CLOCK_GLOBAL}.settle(ms)", ms)
        else:
            self.page.wait_for_timeout(ms)

    def screenshot(self, path: Path) -> None:
        self.page.screenshot(path=str(path), full_page=False, type=self.image_type)

    def close(self) -> None:
        """Tear everything down; safe to call more than once."""
        for name in ("_page", "_context", "_browser"):
            handle = getattr(self, name)
            if handle is None:
                continue
            try:
                handle.close()
            except Exception as exc:  # noqa: BLE001
                logger.warning(f"Failed to close {name.strip('_')}: {exc}")
            setattr(self, name, None)
        if self._playwright is not None:
            try:
                self._playwright.stop()
            except Exception as exc:  # noqa: BLE001
                logger.warning(f"Failed to stop Playwright: {exc}")
            self._playwright = None
