"""Scrape the travel advice index and per-country advice pages.

A country's advice is split over several pages. Each page carries a
"Travel advice pages" navigation list in which the current page is plain
text and every other page is a link.
"""

from __future__ import annotations

import logging
from typing import Any, List

from playwright.sync_api import Error as PlaywrightError

from ..core.exceptions import ScrapeError
from ..core.models import Country, Page

logger = logging.getLogger("fco_backup.browser")

COUNTRY_LINKS = ".countries-list a"
PAGES_NAV_ITEMS = 'nav[aria-label="Travel advice pages"] li'
PAGE_TITLE = ".part-title"
PAGE_BODY = ".govuk-govspeak"

# Resolved (absolute) URL rather than the raw attribute value.
HREF_SCRIPT = "el => el.href"


def _goto(page: Any, url: str) -> None:
    try:
        page.goto(url)
    except PlaywrightError as exc:
        raise ScrapeError(f"Error getting url {url}: {exc}", context={"url": url}) from exc


def list_countries(page: Any, index_url: str) -> List[Country]:
    """All countries linked from the travel advice index."""
    _goto(page, index_url)
    try:
        links = page.query_selector_all(COUNTRY_LINKS)
        countries = [
            Country(name=link.inner_text().strip(), url=link.evaluate(HREF_SCRIPT))
            for link in links
        ]
    except PlaywrightError as exc:
        raise ScrapeError(f"Error getting links in country list: {exc}") from exc

    logger.info("Found %d countries", len(countries))
    return countries


def fetch_country(page: Any, url: str) -> List[Page]:
    """Every advice page for the country at ``url``, in navigation order.

    The landing page is captured where it appears in the navigation list;
    linked pages follow, in the order they were listed.
    """
    _goto(page, url)

    pages: List[Page] = []
    links_to_follow: List[str] = []
    try:
        items = page.query_selector_all(PAGES_NAV_ITEMS)
        for item in items:
            links = item.query_selector_all("a")
            if not links:
                pages.append(fetch_page(page))
                continue
            if len(links) > 1:
                logger.warning(
                    "Found more than one link in a table of contents, picking first."
                )
            links_to_follow.append(links[0].evaluate(HREF_SCRIPT))
    except PlaywrightError as exc:
        raise ScrapeError(
            f"Error finding travel advice pages on page {url}: {exc}",
            context={"url": url},
        ) from exc

    for link in links_to_follow:
        _goto(page, link)
        pages.append(fetch_page(page))

    return pages


def fetch_page(page: Any) -> Page:
    """Title and body text of the page currently loaded."""
    title = _text_of(page, PAGE_TITLE)
    if not title.strip():
        raise ScrapeError(
            f"Error getting text: {PAGE_TITLE} is empty", context={"url": page.url}
        )
    return Page(
        title=title,
        content=f"{_text_of(page, PAGE_BODY)}\n",
    )


def _text_of(page: Any, selector: str) -> str:
    try:
        element = page.query_selector(selector)
        if element is None:
            raise ScrapeError(
                f"Error getting text: no element matches {selector}",
                context={"url": page.url},
            )
        return element.inner_text()
    except PlaywrightError as exc:
        raise ScrapeError(f"Error getting text of {selector}: {exc}") from exc
