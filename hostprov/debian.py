"""Debian/APT-specific provisioning functions."""
from typing import Iterable

from hostprov.config import OnePasswordSettings
from hostprov.errors import ProvisionError
from hostprov.probes import package_installed
from hostprov.runner import CommandRunner
from hostprov.utils import command_exists, is_root, log_action, log_info

APT_ENV = ("env", "DEBIAN_FRONTEND=noninteractive")


def refresh_package_index(runner: CommandRunner, quiet: bool = True) -> None:
    """Update the APT package index."""
    log_info("Updating package index...")
    command = [*APT_ENV, "apt-get", "update"]
    if quiet:
        command.append("-qq")
    runner.run(command, privileged=True, check=True)


def install_package(runner: CommandRunner, name: str) -> None:
    """Install a package unless dpkg already reports it installed."""
    if package_installed(runner, name):
        log_info(f"{name} already installed")
        return

    log_action(f"Installing {name}...")
    runner.run([*APT_ENV, "apt-get", "install", "-yqq", name], privileged=True, check=True)


def install_packages(runner: CommandRunner, names: Iterable[str]) -> None:
    """Refresh the index once, then install every missing package."""
    refresh_package_index(runner)
    for name in names:
        install_package(runner, name)


def get_architecture(runner: CommandRunner) -> str:
    """Get the dpkg architecture name of this host, e.g. amd64."""
    result = runner.run(["dpkg", "--print-architecture"], mutating=False, check=True)
    return result.stdout.strip()


def ensure_command(runner: CommandRunner, command: str, package: str) -> None:
    """Install ``package`` if ``command`` is not on PATH."""
    if command_exists(command):
        return
    log_action(f"{command} is not installed. Installing {package}...")
    refresh_package_index(runner, quiet=False)
    runner.run([*APT_ENV, "apt-get", "install", "-y", package], privileged=True, check=True)


def install_op_cli(runner: CommandRunner, settings: OnePasswordSettings = OnePasswordSettings()) -> str:
    """Install the 1Password CLI from the official APT repository.

    Returns the installed ``op`` version.
    """
    if not is_root():
        raise ProvisionError("This command must be run as root. Please use 'sudo'.")

    ensure_command(runner, "curl", "curl")
    ensure_command(runner, "gpg", "gpg")

    log_info("Adding 1Password APT repository GPG key...")
    key = runner.run(["curl", "-fsSL", settings.key_url], check=True, mutating=False)
    runner.run(
        ["gpg", "--batch", "--yes", "--dearmor", "--output", settings.keyring_path],
        privileged=True, input=key.stdout, check=True,
    )
    runner.run(["chmod", "644", settings.keyring_path], privileged=True, check=True)

    log_info("Adding the 1Password APT repository...")
    arch = get_architecture(runner)
    source = (
        f"deb [arch={arch} signed-by={settings.keyring_path}] "
        f"{settings.repo_url}/{arch} stable main\n"
    )
    runner.run(["tee", settings.sources_list], privileged=True, input=source, check=True)

    refresh_package_index(runner, quiet=False)
    log_action(f"Installing {settings.package}...")
    runner.run([*APT_ENV, "apt-get", "install", "-y", settings.package], privileged=True, check=True)

    log_info("Verifying installation...")
    if runner.dry_run:
        return "dry-run"
    if not command_exists("op"):
        raise ProvisionError("Installation failed. The 'op' command could not be found.")
    version = runner.run(["op", "--version"], mutating=False).stdout.strip()
    log_info(f"1Password CLI {version} installed. Run 'op signin' to get started.")
    return version
