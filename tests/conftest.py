"""Shared fixtures for fco-backup tests.

Git tests run the real ``git`` binary against a bare "remote" repository and a
working copy, both created under ``tmp_path``. The browser and the gov.uk site
are replaced by an in-memory ``FakeSite``.
"""

import shutil
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from fco_backup.backup import service as service_module
from fco_backup.backup.service import BackupService
from fco_backup.browser.session import BrowserSession, RestartableBrowser
from fco_backup.config.settings import Settings
from fco_backup.core.models import Country, Page
from fco_backup.feed.atom import FeedEntry, FeedLink
from fco_backup.git.repository import GitRepository, run_git

INDEX_URL = "https://www.gov.uk/foreign-travel-advice"

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def country_url(slug: str) -> str:
    return f"{INDEX_URL}/{slug}"


def make_entry(
    title: str,
    slug: str,
    updated: datetime,
    summary: Optional[str] = None,
) -> FeedEntry:
    return FeedEntry(
        title=title,
        updated=updated,
        summary=summary,
        links=(
            FeedLink(href=f"{country_url(slug)}.atom", mime_type="application/atom+xml"),
            FeedLink(href=country_url(slug), mime_type="text/html"),
        ),
    )


class FakeSite:
    """Stands in for gov.uk: countries on the index and their pages."""

    def __init__(self) -> None:
        self.countries: Dict[str, str] = {}
        self.pages: Dict[str, List[Page]] = {}
        self.fetched: List[str] = []

    def add_country(self, name: str, slug: str, pages: Dict[str, str]) -> None:
        url = country_url(slug)
        self.countries[name] = url
        self.set_pages(slug, pages)

    def set_pages(self, slug: str, pages: Dict[str, str]) -> None:
        self.pages[country_url(slug)] = [
            Page(title=title, content=f"{content}\n") for title, content in pages.items()
        ]

    def list_countries(self, page, index_url: str) -> List[Country]:
        return [Country(name=name, url=url) for name, url in self.countries.items()]

    def fetch_country(self, page, url: str) -> List[Page]:
        self.fetched.append(url)
        return list(self.pages[url])


class FakeFeed:
    def __init__(self) -> None:
        self.responses: List[List[FeedEntry]] = []
        self.calls = 0

    def __call__(self, url: str, timeout: float) -> List[FeedEntry]:
        self.calls += 1
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0] if self.responses else []


@pytest.fixture
def remote(tmp_path: Path) -> Path:
    """Bare repository playing the part of the GitHub remote."""
    path = tmp_path / "remote.git"
    run_git("init", ["--bare", path], cwd=tmp_path)
    run_git("symbolic-ref", ["HEAD", "refs/heads/master"], cwd=path)
    return path


@pytest.fixture
def settings(remote: Path) -> Settings:
    return Settings(
        remote_url=str(remote),
        index_url=INDEX_URL,
        feed_url=f"{INDEX_URL}.atom",
        retry_attempts=2,
        poll_interval_seconds=0.01,
    )


@pytest.fixture
def fetched_at() -> datetime:
    return datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def repo(tmp_path: Path, settings: Settings, fetched_at: datetime) -> GitRepository:
    """Working copy cloned from ``remote`` with one marker commit pushed."""
    repo = GitRepository.open_or_clone(tmp_path / "work", settings)
    repo.run("symbolic-ref", "HEAD", "refs/heads/master")
    repo.commit("Initial commit", now=fetched_at)
    repo.push()
    return repo


@pytest.fixture
def site(monkeypatch: pytest.MonkeyPatch) -> FakeSite:
    site = FakeSite()
    site.add_country("France", "france", {"Summary": "Bonjour", "Safety and security": "Safe"})
    site.add_country("Spain", "spain", {"Summary": "Hola"})
    monkeypatch.setattr(service_module, "list_countries", site.list_countries)
    monkeypatch.setattr(service_module, "fetch_country", site.fetch_country)
    return site


@pytest.fixture
def feed() -> FakeFeed:
    return FakeFeed()


@pytest.fixture
def browser() -> RestartableBrowser:
    return RestartableBrowser(lambda: BrowserSession(page=object()), attempts=1)


@pytest.fixture
def service(repo, browser, settings, feed, site) -> BackupService:
    return BackupService(repo, browser, settings, feed_fetcher=feed)


def last_message(repo: GitRepository) -> str:
    return repo.run("log", "--format=%B", "-n1", "HEAD").decode("utf-8").strip()


def remote_head(remote: Path) -> str:
    return run_git("rev-parse", ["master"], cwd=remote).decode("utf-8").strip()


def local_head(repo: GitRepository) -> str:
    return repo.run("rev-parse", "HEAD").decode("utf-8").strip()


def after(moment: datetime, minutes: int) -> datetime:
    return moment + timedelta(minutes=minutes)
