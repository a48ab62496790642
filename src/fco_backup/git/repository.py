"""Thin wrapper around the git CLI for the backup repository.

Every snapshot commit message ends with a ``Fetched at: <timestamp>`` line;
``last_fetched_at`` reads it back so the feed poller knows which updates
are already mirrored.
"""

from __future__ import annotations

import logging
import os
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Union

from ..config.settings import Settings
from ..core.exceptions import GitCommandError, UnknownTimestampError
from ..utils.dates import format_fetched_at, parse_rfc3339

logger = logging.getLogger("fco_backup.git")

FETCHED_AT_PREFIX = "Fetched at: "

PathLike = Union[str, "os.PathLike[str]"]


def run_git(
    command: str,
    args: Iterable[PathLike] = (),
    cwd: PathLike = ".",
    config: Iterable[str] = (),
) -> bytes:
    """Run ``git [-c key=value ...] <command> <args>`` and return stdout.

    Raises:
        GitCommandError: if git cannot be started or exits non-zero.
    """
    argv: List[str] = ["git"]
    for item in config:
        argv.extend(["-c", item])
    argv.append(command)
    argv.extend(os.fspath(arg) for arg in args)

    logger.debug("Running %s in %s", argv, cwd)
    try:
        completed = subprocess.run(argv, cwd=cwd, capture_output=True, check=False)
    except OSError as exc:
        raise GitCommandError(
            f"Error running git {command}: {exc}", command=command
        ) from exc

    if completed.returncode != 0:
        raise GitCommandError(
            f"Error running git {command}: Bad exit code {completed.returncode}",
            command=command,
            returncode=completed.returncode,
            stderr=completed.stderr.decode("utf-8", errors="replace"),
        )
    return completed.stdout


class GitRepository:
    """A working copy of the backup repository."""

    def __init__(self, path: PathLike, settings: Settings):
        self.path = Path(path).resolve()
        self.settings = settings

    @classmethod
    def open_or_clone(cls, path: PathLike, settings: Settings) -> "GitRepository":
        """Open ``path``, cloning ``settings.remote_url`` into it if missing."""
        path = Path(path)
        if not path.exists():
            logger.info("Cloning %s into %s", settings.remote_url, path)
            run_git("clone", [settings.remote_url, path.resolve()], cwd=Path("/"))
        return cls(path, settings)

    @property
    def countries_root(self) -> Path:
        return self.path / self.settings.countries_dir

    def _user_config(self) -> List[str]:
        return [
            f"user.name={self.settings.author_name}",
            f"user.email={self.settings.author_email}",
        ]

    def run(self, command: str, *args: PathLike, config: Iterable[str] = ()) -> bytes:
        return run_git(command, args, cwd=self.path, config=config)

    def add(self, path: PathLike) -> None:
        self.run("add", path)

    def rm(self, path: PathLike) -> None:
        self.run("rm", "-r", path)

    def commit(self, message: str, now: Optional[datetime] = None) -> None:
        full_message = f"{message}\n\n{FETCHED_AT_PREFIX}{format_fetched_at(now)}"
        self.run(
            "commit",
            f"--author={self.settings.author}",
            "--allow-empty",
            "-m",
            full_message,
            config=self._user_config(),
        )
        logger.info("Committed: %s", message.splitlines()[0] if message else "")

    def push(self) -> None:
        self.run(
            "push",
            self.settings.remote,
            self.settings.branch,
            config=self._user_config(),
        )
        logger.info("Pushed to %s/%s", self.settings.remote, self.settings.branch)

    def discard_changes(self, path: PathLike) -> None:
        """Drop staged and working tree changes, and untracked files under ``path``."""
        self.run("reset", "--hard", "HEAD")
        self.run("clean", "-fdq", "--", path)

    def staged_files(self) -> List[str]:
        output = self.run("diff", "--name-only", "--cached")
        return [line for line in output.decode("utf-8").splitlines() if line]

    def last_fetched_at(self) -> datetime:
        """Timestamp recorded in the most recent commit message."""
        try:
            output = self.run("log", "--format=%B", "-n1", "HEAD")
        except GitCommandError as exc:
            raise UnknownTimestampError(
                "Error reading last commit message", context={"stderr": exc.stderr}
            ) from exc

        try:
            message = output.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise UnknownTimestampError(f"Commit message was not utf8: {exc}") from exc

        for line in reversed(message.split("\n")):
            if not line.startswith(FETCHED_AT_PREFIX):
                continue
            try:
                return parse_rfc3339(line[len(FETCHED_AT_PREFIX):])
            except ValueError:
                continue
        raise UnknownTimestampError("Unknown timestamp", context={"repo": str(self.path)})
