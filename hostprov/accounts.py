"""Account lookup and target selection."""
import pwd
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from hostprov.config import Settings
from hostprov.errors import AccountError
from hostprov.utils import log_warn


@dataclass(frozen=True)
class Account:
    """Snapshot of one entry of the identity database."""

    name: str
    uid: int
    gid: int
    home: Path
    shell: str

    @property
    def is_superuser(self) -> bool:
        return self.uid == 0

    @property
    def owner(self) -> str:
        """chown spec for files that belong to this account."""
        return f"{self.name}:{self.gid}"

    @classmethod
    def from_passwd(cls, entry: pwd.struct_passwd) -> "Account":
        return cls(
            name=entry.pw_name,
            uid=entry.pw_uid,
            gid=entry.pw_gid,
            home=Path(entry.pw_dir),
            shell=entry.pw_shell,
        )


@dataclass(frozen=True)
class TargetSet:
    """Ordered accounts to provision plus explicit names that were skipped."""

    accounts: Tuple[Account, ...]
    skipped: Tuple[Tuple[str, str], ...] = ()

    @property
    def names(self) -> List[str]:
        return [account.name for account in self.accounts]

    def __iter__(self):
        return iter(self.accounts)

    def __len__(self):
        return len(self.accounts)


def lookup_account(name: str) -> Account:
    """Read a single account from the identity database."""
    try:
        return Account.from_passwd(pwd.getpwnam(name))
    except KeyError:
        raise AccountError(f"No passwd entry for {name}") from None


def list_accounts() -> List[Account]:
    """All accounts, in identity database enumeration order."""
    return [Account.from_passwd(entry) for entry in pwd.getpwall()]


def _has_home(account: Account) -> bool:
    return bool(str(account.home)) and account.home.is_dir()


def _resolve_explicit(name: str) -> Tuple[Optional[Account], Optional[str]]:
    try:
        account = lookup_account(name)
    except AccountError as e:
        return None, str(e)
    if not _has_home(account):
        return None, f"Invalid home directory for {name}"
    return account, None


def select_targets(settings: Settings, candidates: Optional[Iterable[Account]] = None) -> TargetSet:
    """Resolve the accounts to provision.

    Explicit names come first in listed order. The database is then
    scanned once and accounts with uid >= ``min_uid`` are appended. An
    account without a usable home directory is skipped and recorded in
    ``skipped``. No account appears twice.
    """
    selected: List[Account] = []
    skipped: List[Tuple[str, str]] = []
    seen = set()

    for name in settings.target_users:
        if not name or name in seen:
            continue
        seen.add(name)
        account, reason = _resolve_explicit(name)
        if account is None:
            log_warn(f"{reason} - skipping")
            skipped.append((name, reason))
            continue
        selected.append(account)

    if candidates is None:
        candidates = list_accounts()
    for account in candidates:
        if not account.name or account.name in seen:
            continue
        if account.uid < settings.min_uid:
            continue
        seen.add(account.name)
        if not _has_home(account):
            reason = f"Invalid home directory for {account.name}"
            log_warn(f"{reason} - skipping")
            skipped.append((account.name, reason))
            continue
        selected.append(account)

    return TargetSet(accounts=tuple(selected), skipped=tuple(skipped))
