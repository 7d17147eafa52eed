"""SSH reachability checks and remote command execution."""
import time

from hostprov.config import SSHSettings
from hostprov.errors import ProvisionError
from hostprov.runner import CommandRunner
from hostprov.utils import log_action, log_info, log_warn


def check_ssh_connection(
    runner: CommandRunner,
    host: str,
    user: str,
    settings: SSHSettings = SSHSettings(),
) -> int:
    """Try to open a batch-mode SSH session, retrying with a fixed delay.

    Returns the attempt number that succeeded.
    """
    for attempt in range(1, settings.retries + 1):
        log_info(f"Attempting SSH connection to {host} (Attempt {attempt})...")
        result = runner.run(
            ["ssh", "-q", "-o", "BatchMode=yes", "-o", f"ConnectTimeout={settings.connect_timeout}",
             f"{user}@{host}", "true"],
            mutating=False,
        )
        if result.ok:
            log_info("SSH connection successful!")
            return attempt
        if attempt < settings.retries:
            log_warn("Retrying SSH connection...")
            time.sleep(settings.retry_delay)

    raise ProvisionError(
        f"Unable to connect to {host} via SSH after {settings.retries} attempts. "
        "Check network or credentials."
    )


def execute_remote_command(runner: CommandRunner, host: str, user: str, command: str) -> str:
    """Run a command on a remote host under ``set -euo pipefail``."""
    log_action(f"Executing command on {host}: {command}")
    script = f"set -euo pipefail\n{command}\n"
    result = runner.run(
        ["ssh", "-o", "StrictHostKeyChecking=no", f"{user}@{host}", "bash -s"], input=script
    )
    if not result.ok:
        raise ProvisionError(f"Failed to execute command on {host}.")
    log_info(f"Command executed successfully on {host}.")
    return result.stdout
