from .scraper import fetch_country, fetch_page, list_countries
from .session import BrowserSession, PlaywrightSessionFactory, RestartableBrowser

__all__ = [
    "BrowserSession",
    "PlaywrightSessionFactory",
    "RestartableBrowser",
    "fetch_country",
    "fetch_page",
    "list_countries",
]
