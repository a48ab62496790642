"""Tests for the fco-backup-fetcher command line."""

from unittest.mock import MagicMock, patch

import pytest

from fco_backup import cli
from fco_backup.core.exceptions import RetryError


@pytest.fixture
def fake_service():
    service = MagicMock()
    browser = MagicMock()
    with patch.object(cli, "build_service", return_value=service) as build, patch.object(
        cli, "RestartableBrowser", return_value=browser
    ), patch.object(cli, "PlaywrightSessionFactory"), patch.object(cli, "setup_logging"):
        yield service, browser, build


def test_no_command_prints_help_and_fails(capsys, tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--git-repo", str(tmp_path)])
    assert excinfo.value.code == 1
    assert "initial_import" in capsys.readouterr().out


def test_git_repo_is_required(capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["poll_feed_once"])
    assert excinfo.value.code == 2


def test_version(capsys):
    with pytest.raises(SystemExit):
        cli.main(["--version"])
    assert "0.1.0" in capsys.readouterr().out


@pytest.mark.parametrize(
    "command,method",
    [
        ("initial_import", "fetch_all"),
        ("discover_unannounced", "discover_unannounced"),
        ("poll_feed_once", "poll_feed"),
        ("poll_feed_continuous", "poll_continuously"),
    ],
)
def test_dispatches_command(fake_service, tmp_path, command, method):
    service, browser, build = fake_service

    cli.main(["--git-repo", str(tmp_path / "repo"), command])

    getattr(service, method).assert_called_once_with()
    assert build.call_args.args[0] == tmp_path / "repo"
    browser.close.assert_called_once()


def test_domain_error_exits_non_zero_and_closes_browser(fake_service, tmp_path, caplog):
    service, browser, _ = fake_service
    service.poll_feed.side_effect = RetryError("Giving up after 3 attempts")

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--git-repo", str(tmp_path), "poll_feed_once"])

    assert excinfo.value.code == 1
    assert "poll_feed_once failed" in caplog.text
    browser.close.assert_called_once()
