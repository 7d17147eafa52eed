"""Outcome records for a provisioning run."""
from dataclasses import dataclass, field
from enum import Enum
from typing import List


class AccountStatus(Enum):
    SUCCESS = "success"
    PARTIAL_FAILURE = "partial-failure"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class AccountResult:
    """What happened to one account."""

    name: str
    status: AccountStatus = AccountStatus.SUCCESS
    failed_steps: List[str] = field(default_factory=list)
    messages: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status is AccountStatus.SUCCESS

    def record_warning(self, step: str, message: str) -> None:
        self.failed_steps.append(step)
        self.messages.append(message)
        if self.status is AccountStatus.SUCCESS:
            self.status = AccountStatus.PARTIAL_FAILURE

    def record_abort(self, step: str, message: str) -> None:
        self.failed_steps.append(step)
        self.messages.append(message)
        self.status = AccountStatus.FAILED


@dataclass
class RunResult:
    """Per-account results in processing order."""

    accounts: List[AccountResult] = field(default_factory=list)

    def add(self, result: AccountResult) -> None:
        self.accounts.append(result)

    def skip(self, name: str, reason: str) -> None:
        self.add(AccountResult(name=name, status=AccountStatus.SKIPPED, messages=[reason]))

    @property
    def any_error(self) -> bool:
        return any(not result.ok for result in self.accounts)

    @property
    def failures(self) -> List[AccountResult]:
        return [result for result in self.accounts if not result.ok]

    def get(self, name: str) -> AccountResult:
        for result in self.accounts:
            if result.name == name:
                return result
        raise KeyError(name)
