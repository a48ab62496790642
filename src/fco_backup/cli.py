"""CLI entrypoint: ``fco-backup-fetcher --git-repo PATH <command>``."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

from . import __version__
from .backup.service import BackupService
from .browser.session import PlaywrightSessionFactory, RestartableBrowser
from .config.settings import Settings, get_settings
from .core.exceptions import FCOBackupError
from .git.repository import GitRepository
from .logging_utils import setup_logging

logger = logging.getLogger("fco_backup.cli")

COMMANDS: Dict[str, Callable[[BackupService], None]] = {
    "initial_import": lambda service: service.fetch_all(),
    "discover_unannounced": lambda service: service.discover_unannounced(),
    "poll_feed_once": lambda service: service.poll_feed(),
    "poll_feed_continuous": lambda service: service.poll_continuously(),
}

COMMAND_HELP = {
    "initial_import": "Fetch every country and commit them in one go",
    "discover_unannounced": "Catch up with the feed, then sweep every country for unannounced changes",
    "poll_feed_once": "Fetch the countries announced on the Atom feed since the last commit",
    "poll_feed_continuous": "Poll the Atom feed forever",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fco-backup-fetcher",
        description="Back up FCO foreign travel advice into a git repository",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--git-repo",
        required=True,
        type=Path,
        help="Working copy of the backup repository (cloned if missing)",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    for name in COMMANDS:
        subparsers.add_parser(name, help=COMMAND_HELP[name])
    return parser


def build_service(
    git_repo: Path,
    settings: Settings,
    browser: RestartableBrowser,
) -> BackupService:
    repo = GitRepository.open_or_clone(git_repo, settings)
    return BackupService(repo, browser, settings)


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        print()
        sys.exit(1)

    setup_logging()
    try:
        settings = get_settings()
    except FCOBackupError as exc:
        logger.error("%s", exc)
        sys.exit(1)

    browser = RestartableBrowser(
        PlaywrightSessionFactory(settings), attempts=settings.retry_attempts
    )
    try:
        service = build_service(args.git_repo, settings, browser)
        COMMANDS[args.command](service)
    except FCOBackupError as exc:
        logger.error("%s failed: %s", args.command, exc)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted")
        sys.exit(130)
    finally:
        browser.close()


if __name__ == "__main__":
    main()
