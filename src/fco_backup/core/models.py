"""Domain records: countries and their travel advice pages."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .exceptions import InvalidPathError

_SEPARATORS = {"/", os.sep} | ({os.altsep} if os.altsep else set())


@dataclass(frozen=True)
class Country:
    """A country listed on the travel advice index."""

    name: str
    url: str

    def dir_name(self) -> str:
        """Directory name for the country: the last segment of its URL."""
        name = self.url.split("/")[-1]
        if name in {"", ".", ".."} or any(sep in name for sep in _SEPARATORS):
            raise InvalidPathError(
                f"Bad path: {name}", context={"country": self.name, "url": self.url}
            )
        return name


@dataclass(frozen=True)
class Page:
    """One rendered travel advice page (e.g. "Safety and security")."""

    title: str
    content: str

    def file_name(self) -> str:
        words = self.title.lower().split()
        return "-".join(word.replace(".", "_").replace("/", "_") for word in words)
