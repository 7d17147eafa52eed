"""Read-only checks deciding whether a resource is already in place.

Every mutating step is preceded by one of these so the whole workflow can
be re-run after a partial failure.
"""
import os
from pathlib import Path
from typing import Optional

from hostprov.accounts import Account
from hostprov.runner import CommandRunner

INSTALLED_STATUS = "install ok installed"


def package_installed(runner: CommandRunner, name: str) -> bool:
    """Check the dpkg database for an installed package by exact name."""
    result = runner.run(["dpkg-query", "-W", "--showformat=${Status}", name], mutating=False)
    return result.ok and INSTALLED_STATUS in result.stdout


def repo_cloned(dest: Path) -> bool:
    """A repository counts as cloned when its .git directory exists."""
    return (Path(dest) / ".git").is_dir()


def framework_installed(marker: Path) -> bool:
    """Check for the framework's marker file.

    The install directory alone is not enough: a failed install can leave
    it behind without the marker, and that must be treated as missing.
    """
    return Path(marker).is_file()


def file_present(path: Path) -> bool:
    return Path(path).is_file()


def shell_assigned(account: Account, shell_path: Optional[str]) -> bool:
    """Compare the account's login shell with the target shell binary."""
    return shell_path is not None and account.shell == shell_path


def shell_registered(shells_file: Path, shell_path: str) -> bool:
    """Check whether a shell is listed in /etc/shells."""
    try:
        lines = Path(shells_file).read_text().splitlines()
    except FileNotFoundError:
        return False
    return shell_path in (line.strip() for line in lines)


def theme_linked(link: Path, target: Path) -> bool:
    """Check that ``link`` is a symlink pointing at ``target``."""
    link = Path(link)
    return link.is_symlink() and os.readlink(link) == str(target)
