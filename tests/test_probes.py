"""Tests for the idempotency probes."""
import os
from unittest.mock import MagicMock

from hostprov import probes
from hostprov.runner import CommandRunner
from conftest import failed, ok


class TestPackageInstalled:

    def test_installed(self):
        runner = MagicMock(spec=CommandRunner)
        runner.run.return_value = ok(stdout="install ok installed")

        assert probes.package_installed(runner, "zsh") is True
        runner.run.assert_called_once_with(["dpkg-query", "-W", "--showformat=${Status}", "zsh"], mutating=False)

    def test_deinstalled_package_is_not_installed(self):
        runner = MagicMock(spec=CommandRunner)
        runner.run.return_value = ok(stdout="deinstall ok config-files")

        assert probes.package_installed(runner, "zsh") is False

    def test_unknown_package(self):
        runner = MagicMock(spec=CommandRunner)
        runner.run.return_value = failed(stderr="dpkg-query: no packages found matching jq")

        assert probes.package_installed(runner, "jq") is False


def test_repo_cloned(tmp_path):
    dest = tmp_path / "powerlevel10k"
    assert probes.repo_cloned(dest) is False

    dest.mkdir()
    assert probes.repo_cloned(dest) is False

    (dest / ".git").mkdir()
    assert probes.repo_cloned(dest) is True


class TestFrameworkInstalled:

    def test_marker_file_present(self, tmp_path):
        marker = tmp_path / ".oh-my-zsh" / "oh-my-zsh.sh"
        marker.parent.mkdir()
        marker.write_text("")

        assert probes.framework_installed(marker) is True

    def test_directory_without_marker_is_broken_install(self, tmp_path):
        """A leftover directory from a failed install counts as not installed."""
        marker = tmp_path / ".oh-my-zsh" / "oh-my-zsh.sh"
        marker.parent.mkdir()
        (marker.parent / "lib").mkdir()

        assert probes.framework_installed(marker) is False

    def test_marker_must_be_a_file(self, tmp_path):
        marker = tmp_path / ".oh-my-zsh" / "oh-my-zsh.sh"
        marker.mkdir(parents=True)

        assert probes.framework_installed(marker) is False


class TestShellProbes:

    def test_shell_assigned(self, make_account):
        account = make_account("alice", shell="/usr/bin/zsh")

        assert probes.shell_assigned(account, "/usr/bin/zsh") is True
        assert probes.shell_assigned(account, "/bin/zsh") is False
        assert probes.shell_assigned(account, None) is False

    def test_shell_registered(self, tmp_path):
        shells = tmp_path / "shells"
        shells.write_text("# /etc/shells: valid login shells\n/bin/sh\n/usr/bin/zsh\n")

        assert probes.shell_registered(shells, "/usr/bin/zsh") is True
        assert probes.shell_registered(shells, "/bin/zsh") is False

    def test_shell_registered_missing_file(self, tmp_path):
        assert probes.shell_registered(tmp_path / "missing", "/usr/bin/zsh") is False


class TestThemeLinked:

    def test_link_to_target(self, tmp_path):
        target = tmp_path / "custom" / "powerlevel10k"
        target.mkdir(parents=True)
        link = tmp_path / "themes" / "powerlevel10k"
        link.parent.mkdir()
        os.symlink(target, link)

        assert probes.theme_linked(link, target) is True

    def test_link_to_other_target(self, tmp_path):
        link = tmp_path / "powerlevel10k"
        os.symlink(tmp_path / "elsewhere", link)

        assert probes.theme_linked(link, tmp_path / "custom" / "powerlevel10k") is False

    def test_plain_directory_is_not_a_link(self, tmp_path):
        link = tmp_path / "powerlevel10k"
        link.mkdir()

        assert probes.theme_linked(link, tmp_path / "custom" / "powerlevel10k") is False


def test_file_present(tmp_path):
    path = tmp_path / ".p10k.zsh"
    assert probes.file_present(path) is False
    path.write_text("")
    assert probes.file_present(path) is True
