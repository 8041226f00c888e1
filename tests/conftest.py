"""Shared pytest fixtures for framecast tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from helpers import FakeSurface, chromium_error


@pytest.fixture
def data_root(tmp_path: Path) -> Path:
    """A job working directory."""
    root = tmp_path / "job"
    root.mkdir()
    return root


@pytest.fixture
def fake_surface() -> FakeSurface:
    return FakeSurface()


@pytest.fixture
def require_chromium() -> None:
    reason = chromium_error()
    if reason:
        pytest.skip(reason)


@pytest.fixture
def page(require_chromium):
    """A fresh headless Chromium page, closed after the test."""
    from playwright.sync_api import sync_playwright

    with sync_playwright() as p:
        browser = p.chromium.launch(headless=True, args=["--no-sandbox"])
        page = browser.new_page(viewport={"width": 320, "height": 180})
        try:
            yield page
        finally:
            browser.close()
