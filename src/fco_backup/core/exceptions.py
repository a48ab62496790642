"""Custom exception hierarchy for fco-backup."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class FCOBackupError(Exception):
    """Base exception type for all fco-backup errors."""

    message: str
    context: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        if not self.context:
            return self.message
        return f"{self.message} | context={self.context}"


class ConfigurationError(FCOBackupError):
    """Raised when configuration is missing or invalid."""


@dataclass
class GitCommandError(FCOBackupError):
    """Raised when a git subprocess cannot be started or exits non-zero."""

    command: str = ""
    returncode: Optional[int] = None
    stderr: str = ""

    def __str__(self) -> str:
        text = super().__str__()
        if self.stderr:
            text = f"{text}\n{self.stderr.strip()}"
        return text


class UnknownTimestampError(FCOBackupError):
    """Raised when HEAD has no parseable fetched-at marker."""


class FeedError(FCOBackupError):
    """Raised when the Atom feed cannot be fetched or parsed."""


class BrowserError(FCOBackupError):
    """Raised when the browser cannot be started or driven."""


class ScrapeError(BrowserError):
    """Raised when an expected element is missing from a page."""


class InvalidPathError(FCOBackupError):
    """Raised when a URL segment is unsafe to use as a directory name."""


@dataclass
class RetryError(FCOBackupError):
    """Raised when an operation keeps failing after every attempt."""

    errors: List[BaseException] = field(default_factory=list)

    def __str__(self) -> str:
        details = "; ".join(repr(err) for err in self.errors)
        return f"{self.message}: [{details}]"
