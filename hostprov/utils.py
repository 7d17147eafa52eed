"""Utility functions for the provisioning tool."""
import os
import sys
import shutil
from typing import Optional

_verbose = False


def command_exists(command: str) -> bool:
    """Check if a command exists in the system PATH."""
    return shutil.which(command) is not None


def resolve_command(command: str) -> Optional[str]:
    """Return the absolute path of a command, or None if it is not on PATH."""
    return shutil.which(command)


def is_root() -> bool:
    """Check if the script is running as root."""
    return os.geteuid() == 0


def get_real_home() -> str:
    """Get the real user's home directory (handles sudo)."""
    sudo_user = os.environ.get('SUDO_USER')
    if sudo_user:
        return os.path.expanduser(f'~{sudo_user}')
    return os.environ.get('HOME', '')


def log_info(message: str) -> None:
    """Log an informational message."""
    print(f"[INFO] {message}")


def log_action(message: str) -> None:
    """Log an action being performed."""
    print(f"  -> {message}")


def log_warn(message: str) -> None:
    """Log a warning."""
    print(f"[WARN] {message}")


def log_error(message: str) -> None:
    """Log an error to stderr."""
    print(f"[ERROR] {message}", file=sys.stderr)


def log_debug(message: str) -> None:
    """Log a debug message, only in verbose mode."""
    if _verbose:
        print(f"[DEBUG] {message}")


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration."""
    global _verbose
    _verbose = verbose
