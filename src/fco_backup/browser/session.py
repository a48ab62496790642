"""Headless Chrome sessions driven through Playwright.

Long sweeps over every country occasionally wedge the browser, so callers
hold a ``RestartableBrowser`` and restart it between retries instead of
holding a page directly.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from ..config.settings import Settings
from ..core.exceptions import BrowserError
from ..utils.retry import retry

logger = logging.getLogger("fco_backup.browser")

CHROME_ARGS = ["--no-sandbox"]


@dataclass
class BrowserSession:
    """A launched browser and the single page the scraper drives."""

    page: Any
    browser: Any = None
    playwright: Any = None

    def close(self) -> None:
        if self.browser is not None:
            self.browser.close()
        if self.playwright is not None:
            self.playwright.stop()


class PlaywrightSessionFactory:
    """Launch Chromium (or a configured Chrome binary) and open a page."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def __call__(self) -> BrowserSession:
        pw = sync_playwright().start()
        try:
            browser = pw.chromium.launch(
                headless=self.settings.headless,
                executable_path=self.settings.chrome_executable,
                args=CHROME_ARGS,
            )
            page = browser.new_page()
            page.set_default_navigation_timeout(self.settings.navigation_timeout_ms)
        except PlaywrightError as exc:
            pw.stop()
            raise BrowserError(f"Error starting browser: {exc}") from exc

        logger.info("Started browser (headless=%s)", self.settings.headless)
        return BrowserSession(page=page, browser=browser, playwright=pw)


class RestartableBrowser:
    """Lazily started browser session that can be torn down and rebuilt.

    The outcome of the last start attempt is cached: a failed start is
    re-raised by ``get()`` until ``restart()`` is called.
    """

    def __init__(self, factory: Callable[[], BrowserSession], attempts: int = 3):
        self._factory = factory
        self._attempts = attempts
        self._lock = threading.Lock()
        self._session: Optional[Union[BrowserSession, Exception]] = None

    def get(self) -> Any:
        """Return the current page, starting the browser if needed."""
        with self._lock:
            if self._session is None:
                self._session = self._build()
            session = self._session
        if isinstance(session, Exception):
            raise session
        return session.page

    def restart(self) -> None:
        logger.info("Restarting browser")
        with self._lock:
            self._discard()
            self._session = self._build()

    def close(self) -> None:
        with self._lock:
            self._discard()

    def _build(self) -> Union[BrowserSession, Exception]:
        try:
            return retry(self._factory, attempts=self._attempts)
        except Exception as exc:
            logger.error("Could not start browser: %s", exc)
            return exc

    def _discard(self) -> None:
        session, self._session = self._session, None
        if isinstance(session, BrowserSession):
            try:
                session.close()
            except Exception:
                logger.warning("Error closing browser session", exc_info=True)

    def __enter__(self) -> "RestartableBrowser":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
