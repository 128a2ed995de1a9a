"""Thin wrapper around Playwright to keep browser concerns isolated."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from playwright.sync_api import (
    Browser,
    BrowserContext,
    Page,
    Playwright,
    sync_playwright,
)


@dataclass(slots=True)
class BrowserConfig:
    headless: bool = True
    slow_mo: float = 0
    navigation_timeout_ms: int = 45000
    viewport_width: int = 1280
    viewport_height: int = 720


class BrowserSession:
    """Context manager that owns a Playwright browser/page pair."""

    def __init__(self, config: Optional[BrowserConfig] = None) -> None:
        self.config = config or BrowserConfig()
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    def __enter__(self) -> "BrowserSession":
        try:
            self._playwright = sync_playwright().start()
            self._browser = self._playwright.chromium.launch(
                headless=self.config.headless, slow_mo=self.config.slow_mo
            )
            self._context = self._browser.new_context(
                viewport={
                    "width": self.config.viewport_width,
                    "height": self.config.viewport_height,
                }
            )
            self._page = self._context.new_page()
        except BaseException:
            self.close()
            raise
        self._page.set_default_timeout(self.config.navigation_timeout_ms)
        self._page.set_default_navigation_timeout(self.config.navigation_timeout_ms)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def page(self) -> Page:
        if not self._page:
            raise RuntimeError("BrowserSession is not started")
        return self._page

    def close(self) -> None:
        self._page = None
        context, self._context = self._context, None
        browser, self._browser = self._browser, None
        playwright, self._playwright = self._playwright, None
        try:
            if context:
                context.close()
        finally:
            try:
                if browser:
                    browser.close()
            finally:
                if playwright:
                    playwright.stop()


@contextmanager
def open_session(config: Optional[BrowserConfig] = None) -> Iterator[Page]:
    """Yield a fresh page; the browser is released on every exit path."""
    with BrowserSession(config) as session:
        yield session.page


__all__ = ["BrowserConfig", "BrowserSession", "open_session"]
