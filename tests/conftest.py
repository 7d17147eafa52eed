"""Shared fixtures."""
import pytest
from pathlib import Path
from unittest.mock import MagicMock

from hostprov.accounts import Account
from hostprov.config import Settings
from hostprov.runner import CommandResult, CommandRunner


def ok(command=("true",), stdout=""):
    return CommandResult(tuple(str(part) for part in command), 0, stdout, "")


def failed(command=("false",), exit_code=1, stderr="failed"):
    return CommandResult(tuple(str(part) for part in command), exit_code, "", stderr)


@pytest.fixture
def settings(tmp_path):
    """Settings pointing every shared path into a temp dir."""
    shells = tmp_path / "etc" / "shells"
    shells.parent.mkdir(parents=True)
    shells.write_text("/bin/sh\n/bin/bash\n")
    return Settings(
        target_users=("root", "alice"),
        global_custom_dir=tmp_path / "etc" / "zsh" / "custom",
        global_p10k_config=tmp_path / "etc" / "zsh" / ".p10k.zsh",
        shells_file=shells,
    )


@pytest.fixture
def make_account(tmp_path):
    """Build an account whose home exists under the temp dir."""
    def _make(name, uid=1001, shell="/bin/bash", create_home=True):
        home = tmp_path / "home" / name
        if create_home:
            home.mkdir(parents=True, exist_ok=True)
        return Account(name=name, uid=uid, gid=uid, home=home, shell=shell)
    return _make


@pytest.fixture
def runner():
    """A runner double where every command succeeds."""
    mock_runner = MagicMock(spec=CommandRunner)
    mock_runner.dry_run = False
    mock_runner.as_root = True
    mock_runner.run.side_effect = lambda command, **kwargs: ok(command)
    mock_runner.run_as.side_effect = lambda user, script, **kwargs: ok(("su", user, "-c", script))
    return mock_runner


def commands(mock_runner):
    """Every argv passed to runner.run, as lists of strings."""
    return [[str(part) for part in call.args[0]] for call in mock_runner.run.call_args_list]


def scripts(mock_runner):
    """Every (user, script) passed to runner.run_as."""
    return [(call.args[0], call.args[1]) for call in mock_runner.run_as.call_args_list]


def install_framework_marker(settings: Settings, account: Account) -> Path:
    marker = settings.framework_marker(account.home)
    marker.parent.mkdir(parents=True, exist_ok=True)
    marker.write_text("# oh-my-zsh\n")
    return marker
