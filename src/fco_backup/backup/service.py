"""Mirror travel advice into the backup repository.

Three ways to update the mirror:
- ``fetch_all``: refetch every country in one commit.
- ``poll_feed``: refetch only countries announced on the Atom feed since the
  last commit, one commit per announcement.
- ``discover_unannounced``: catch up with the feed, then sweep every country
  to find changes that were never announced.
"""

from __future__ import annotations

import logging
import shutil
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Tuple

from ..browser.scraper import fetch_country, list_countries
from ..browser.session import RestartableBrowser
from ..config.settings import Settings
from ..core.exceptions import FeedError, ScrapeError
from ..core.models import Country, Page
from ..feed.atom import FeedEntry, fetch_feed, has_duplicates, new_entries, summary_text
from ..git.repository import GitRepository
from ..utils.retry import retry

logger = logging.getLogger("fco_backup.backup")

INITIAL_IMPORT_MESSAGE = "Initial import"
CATCH_UP_MESSAGE = "Missed some updates as they happened, catching up"
NO_UNANNOUNCED_MESSAGE = "No unannounced changes discovered"
UNANNOUNCED_MESSAGE = "Changes discovered which weren't announced on the atom feed"

FeedFetcher = Callable[[str, float], List[FeedEntry]]


class BackupService:
    """Fetches travel advice into ``repo`` and records it in git."""

    def __init__(
        self,
        repo: GitRepository,
        browser: RestartableBrowser,
        settings: Settings,
        feed_fetcher: FeedFetcher = fetch_feed,
    ):
        self.repo = repo
        self.browser = browser
        self.settings = settings
        self._fetch_feed = feed_fetcher

    @property
    def countries_root(self) -> Path:
        return self.repo.countries_root

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    def list_countries(self) -> List[Country]:
        return retry(
            lambda: list_countries(self.browser.get(), self.settings.index_url),
            on_error=self.browser.restart,
            attempts=self.settings.retry_attempts,
        )

    def fetch_country_dir(self, country: Country) -> Path:
        """Replace ``country``'s directory with freshly fetched pages."""
        logger.info("Fetching country %s", country.name)
        pages: List[Page] = retry(
            lambda: fetch_country(self.browser.get(), country.url),
            on_error=self.browser.restart,
            attempts=self.settings.retry_attempts,
        )

        directory = self.countries_root / country.dir_name()
        if directory.exists():
            shutil.rmtree(directory)
        directory.mkdir(parents=True, exist_ok=True)
        for page in pages:
            file_name = page.file_name()
            if not file_name:
                raise ScrapeError(
                    "Page has no title", context={"country": country.name, "url": country.url}
                )
            (directory / file_name).write_text(page.content, encoding="utf-8")
        return directory

    @contextmanager
    def _rollback_on_error(self) -> Iterator[None]:
        """Leave nothing staged or half written behind when an update fails."""
        try:
            yield
        except BaseException:
            logger.warning("Update failed, discarding uncommitted changes")
            self.repo.discard_changes(self.countries_root)
            raise

    def _fetch_every_country(self) -> None:
        if self.countries_root.exists():
            self.repo.rm(self.countries_root)
        for country in self.list_countries():
            self.repo.add(self.fetch_country_dir(country))

    # ------------------------------------------------------------------
    # Feed
    # ------------------------------------------------------------------

    def get_new_entries(self) -> Tuple[List[FeedEntry], bool]:
        """Feed entries newer than the last fetched-at marker, oldest first."""
        entries = retry(
            lambda: self._fetch_feed(self.settings.feed_url, self.settings.request_timeout),
            attempts=self.settings.retry_attempts,
        )
        return new_entries(entries, self.repo.last_fetched_at())

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def fetch_all(self, reason: str = INITIAL_IMPORT_MESSAGE) -> None:
        """Refetch every country and record the result in a single commit."""
        with self._rollback_on_error():
            self._fetch_every_country()
            self.repo.commit(reason)
        self.repo.push()

    def poll_feed(self) -> None:
        """Refetch the countries announced on the feed since the last commit."""
        fresh, all_are_new = self.get_new_entries()
        if not fresh:
            logger.info("No new feed entries")
            return

        if all_are_new or has_duplicates(fresh):
            self.fetch_all(CATCH_UP_MESSAGE)
            return

        for entry in fresh:
            self._apply_entry(entry)
        self.repo.push()

    def _apply_entry(self, entry: FeedEntry) -> None:
        url = entry.html_url
        if url is None:
            raise FeedError(
                "Feed entry has no text/html link", context={"title": entry.title}
            )
        country = Country(name=entry.title, url=url)
        country_root = self.countries_root / country.dir_name()
        with self._rollback_on_error():
            if country_root.exists():
                self.repo.rm(country_root)
            self.repo.add(self.fetch_country_dir(country))
            self.repo.commit(f"{country.name}: {summary_text(entry)}")

    def discover_unannounced(self) -> None:
        """Sweep every country and commit whatever the feed never announced."""
        self.poll_feed()
        with self._rollback_on_error():
            self._fetch_every_country()

            fresh, _ = self.get_new_entries()
            if fresh:
                logger.error("Changes were published while discovering unannounced changes")

            message = UNANNOUNCED_MESSAGE if self.repo.staged_files() else NO_UNANNOUNCED_MESSAGE
            self.repo.commit(message)
        self.repo.push()

    def poll_continuously(
        self,
        interval: Optional[float] = None,
        stop: Optional[threading.Event] = None,
    ) -> None:
        """Poll the feed now and then every ``interval`` seconds until ``stop`` is set."""
        interval = interval if interval is not None else self.settings.poll_interval_seconds
        stop = stop or threading.Event()

        self.poll_feed()
        while not stop.wait(interval):
            self.poll_feed()
