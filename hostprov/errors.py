"""Exceptions raised by the provisioning workflows."""
from typing import Sequence, Tuple


class ProvisionError(Exception):
    """Base class for provisioning failures."""


class CommandError(ProvisionError):
    """A command exited with a non-zero status."""

    def __init__(self, result):
        self.result = result
        message = f"Command failed with exit code {result.exit_code}: {result.display}"
        stderr = result.stderr.strip()
        if stderr:
            message = f"{message}\n{stderr}"
        super().__init__(message)


class CloneError(ProvisionError):
    """One or more shared repositories could not be cloned."""

    def __init__(self, failures: Sequence[Tuple[str, Exception]]):
        self.failures = list(failures)
        names = ", ".join(name for name, _ in self.failures)
        super().__init__(f"Failed to clone shared repositories: {names}")


class TemplateError(ProvisionError):
    """A config template does not match its expected placeholders."""


class AccountError(ProvisionError):
    """An account could not be resolved from the identity database."""
