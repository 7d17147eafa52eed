"""Tests for account lookup and target selection."""
import pwd
import pytest
from pathlib import Path
from unittest.mock import patch

from hostprov.accounts import Account, TargetSet, list_accounts, lookup_account, select_targets
from hostprov.config import Settings
from hostprov.errors import AccountError


def passwd_entry(name, uid, home, shell="/bin/bash"):
    return pwd.struct_passwd((name, "x", uid, uid, "", str(home), shell))


class TestLookup:
    """Tests for identity database reads."""

    @patch('hostprov.accounts.pwd.getpwnam')
    def test_lookup_account(self, mock_getpwnam):
        mock_getpwnam.return_value = passwd_entry("alice", 1001, "/home/alice", "/usr/bin/zsh")

        account = lookup_account("alice")

        assert account == Account("alice", 1001, 1001, Path("/home/alice"), "/usr/bin/zsh")
        assert account.owner == "alice:1001"
        assert account.is_superuser is False

    @patch('hostprov.accounts.pwd.getpwnam', side_effect=KeyError("getpwnam(): name not found: 'ghost'"))
    def test_lookup_unknown_account(self, mock_getpwnam):
        with pytest.raises(AccountError, match="No passwd entry for ghost"):
            lookup_account("ghost")

    @patch('hostprov.accounts.pwd.getpwall')
    def test_list_accounts_keeps_database_order(self, mock_getpwall):
        mock_getpwall.return_value = [
            passwd_entry("root", 0, "/root"),
            passwd_entry("bob", 1002, "/home/bob"),
            passwd_entry("alice", 1001, "/home/alice"),
        ]

        assert [account.name for account in list_accounts()] == ["root", "bob", "alice"]

    def test_root_is_superuser(self):
        assert Account("root", 0, 0, Path("/root"), "/bin/bash").is_superuser is True


class TestSelectTargets:
    """Tests for resolving the ordered TargetSet."""

    @pytest.fixture
    def homes(self, tmp_path):
        paths = {}
        for name in ("root", "alice", "bob", "carol"):
            paths[name] = tmp_path / name
            paths[name].mkdir()
        return paths

    @pytest.fixture
    def database(self, homes, tmp_path):
        return {
            "root": Account("root", 0, 0, homes["root"], "/bin/bash"),
            "daemon": Account("daemon", 1, 1, Path("/usr/sbin"), "/usr/sbin/nologin"),
            "carol": Account("carol", 1003, 1003, homes["carol"], "/bin/bash"),
            "alice": Account("alice", 1001, 1001, homes["alice"], "/bin/bash"),
            "nobody": Account("nobody", 65534, 65534, tmp_path / "nonexistent", "/usr/sbin/nologin"),
            "bob": Account("bob", 1002, 1002, homes["bob"], "/bin/bash"),
        }

    def select(self, database, target_users, min_uid=1000):
        settings = Settings(target_users=target_users, min_uid=min_uid)

        def lookup(name):
            if name not in database:
                raise AccountError(f"No passwd entry for {name}")
            return database[name]

        with patch('hostprov.accounts.lookup_account', side_effect=lookup):
            return select_targets(settings, candidates=list(database.values()))

    def test_explicit_names_come_first(self, database):
        targets = self.select(database, ("root", "bob"))

        assert targets.names == ["root", "bob", "carol", "alice"]

    def test_explicit_account_is_never_processed_twice(self, database):
        targets = self.select(database, ("alice", "alice"))

        assert targets.names.count("alice") == 1
        assert targets.names == ["alice", "carol", "bob"]

    def test_auto_discovery_respects_min_uid(self, database):
        targets = self.select(database, (), min_uid=1002)

        assert targets.names == ["carol", "bob"]

    @patch('hostprov.accounts.log_warn')
    def test_auto_discovered_account_without_home_is_skipped(self, mock_log_warn, database):
        targets = self.select(database, ())

        assert "nobody" not in targets.names
        assert targets.skipped == (("nobody", "Invalid home directory for nobody"),)
        mock_log_warn.assert_called_once_with("Invalid home directory for nobody - skipping")

    def test_unknown_explicit_name_is_skipped(self, database):
        targets = self.select(database, ("root", "ghost"))

        assert "ghost" not in targets.names
        assert targets.skipped[0] == ("ghost", "No passwd entry for ghost")
        assert [name for name, _ in targets.skipped] == ["ghost", "nobody"]

    def test_explicit_name_without_home_is_skipped(self, database):
        targets = self.select(database, ("nobody",))

        assert "nobody" not in targets.names
        assert targets.skipped[0][0] == "nobody"
        assert "Invalid home directory" in targets.skipped[0][1]
        assert len(targets.skipped) == 1

    def test_empty_names_are_ignored(self, database):
        targets = self.select(database, ("", "root"))

        assert targets.names[0] == "root"
        assert [name for name, _ in targets.skipped] == ["nobody"]

    def test_target_set_is_iterable(self, database):
        targets = self.select(database, ("root",))

        assert isinstance(targets, TargetSet)
        assert len(targets) == 4
        assert [account.name for account in targets] == targets.names
