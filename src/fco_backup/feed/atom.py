"""gov.uk travel advice Atom feed.

Each feed entry announces an update to one country's travel advice. The
poller compares entry timestamps with the fetched-at marker of the last
commit to decide which countries to refetch.

Usage:
    entries = fetch_feed("https://www.gov.uk/foreign-travel-advice.atom")
    fresh, all_are_new = new_entries(entries, repo.last_fetched_at())
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, Tuple, Union

import requests
from bs4 import BeautifulSoup, Tag

from ..core.exceptions import FeedError
from ..utils.dates import parse_rfc3339

logger = logging.getLogger("fco_backup.feed")

HTML_MIME_TYPE = "text/html"
NO_SUMMARY = "[No summary]"

# Request timeout in seconds
REQUEST_TIMEOUT = 30


@dataclass(frozen=True)
class FeedLink:
    href: str
    mime_type: Optional[str] = None


@dataclass(frozen=True)
class FeedEntry:
    """One announced travel advice update."""

    title: str
    updated: datetime
    summary: Optional[str] = None
    links: Tuple[FeedLink, ...] = field(default_factory=tuple)

    @property
    def html_url(self) -> Optional[str]:
        for link in self.links:
            if link.mime_type == HTML_MIME_TYPE:
                return link.href
        return None


def fetch_feed(url: str, timeout: float = REQUEST_TIMEOUT) -> List[FeedEntry]:
    """Download and parse the Atom feed at ``url``.

    Raises:
        FeedError: on network failure, a non-2xx status or an unparseable feed.
    """
    try:
        response = requests.get(url, timeout=timeout)
    except requests.exceptions.RequestException as exc:
        raise FeedError(f"Error fetching atom feed: {exc}", context={"url": url}) from exc

    if not response.ok:
        raise FeedError(
            f"Got status {response.status_code} ({response.reason}) for atom feed",
            context={"url": url},
        )

    entries = parse_feed(response.content)
    logger.debug("Fetched %d feed entries from %s", len(entries), url)
    return entries


def parse_feed(document: Union[str, bytes]) -> List[FeedEntry]:
    """Parse an Atom document into entries, in feed order (newest first)."""
    soup = BeautifulSoup(document, "lxml-xml")
    feed = soup.find("feed")
    if feed is None:
        raise FeedError("Error parsing atom feed: no <feed> element")

    entries: List[FeedEntry] = []
    for node in feed.find_all("entry", recursive=False):
        entries.append(_parse_entry(node))
    return entries


def _parse_entry(node: Tag) -> FeedEntry:
    title = _child_text(node, "title")
    updated_text = _child_text(node, "updated")
    try:
        updated = parse_rfc3339(updated_text)
    except ValueError as exc:
        raise FeedError(
            f"Error parsing date ({updated_text}) from feed: {exc}",
            context={"title": title},
        ) from exc

    links = tuple(
        FeedLink(href=link.get("href", ""), mime_type=link.get("type"))
        for link in node.find_all("link", recursive=False)
    )
    return FeedEntry(
        title=title,
        updated=updated,
        summary=_summary_markup(node.find("summary", recursive=False)),
        links=links,
    )


def _child_text(node: Tag, name: str) -> str:
    child = node.find(name, recursive=False)
    if child is None:
        raise FeedError(f"Error parsing atom feed: entry without <{name}>")
    return child.get_text().strip()


def _summary_markup(summary: Optional[Tag]) -> Optional[str]:
    if summary is None:
        return None
    # type="xhtml" summaries carry child elements, type="html"/"text" carry text.
    if summary.find(True) is not None:
        return summary.decode_contents().strip()
    return summary.get_text().strip()


def new_entries(
    entries: Sequence[FeedEntry], since: datetime
) -> Tuple[List[FeedEntry], bool]:
    """Entries updated strictly after ``since``, oldest first.

    The flag is true when every entry in the feed is new, meaning older
    updates may have dropped off the end of the feed.
    """
    fresh = [entry for entry in reversed(entries) if entry.updated > since]
    return fresh, len(fresh) == len(entries)


def has_duplicates(entries: Sequence[FeedEntry]) -> bool:
    """True when two entries point at the same country page."""
    urls = {entry.html_url for entry in entries if entry.html_url is not None}
    return len(urls) < len(entries)


def summary_text(entry: FeedEntry) -> str:
    """One-line description of an update for the commit message.

    gov.uk summaries look like ``<div><p>Latest update: ...</p></div>``; the
    first paragraph's text is used. Anything else is returned verbatim.
    """
    if entry.summary is None:
        return NO_SUMMARY

    soup = BeautifulSoup(entry.summary, "lxml-xml")
    root = soup.find(True)
    if root is not None and root.name == "div":
        paragraph = root.find("p", recursive=False)
        if paragraph is not None:
            return paragraph.get_text()
    return entry.summary
