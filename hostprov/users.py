"""Creating SSH-only, sudo-enabled login users."""
from pathlib import Path
from typing import Optional

from hostprov.accounts import lookup_account
from hostprov.errors import AccountError
from hostprov.runner import CommandRunner
from hostprov.utils import get_real_home, log_action, log_info, log_warn

DEFAULT_USER = "dev"
SUDOERS_DIR = Path("/etc/sudoers.d")


def user_exists(name: str) -> bool:
    try:
        lookup_account(name)
    except AccountError:
        return False
    return True


def ensure_user(runner: CommandRunner, name: str) -> None:
    """Create the user with a home dir, bash and the sudo group."""
    if user_exists(name):
        log_info(f"User '{name}' already exists.")
        return
    log_action(f"Creating user '{name}'...")
    runner.run(["useradd", "-m", "-s", "/bin/bash", "-G", "sudo", name], privileged=True, check=True)


def copy_authorized_keys(runner: CommandRunner, name: str, home: Path, source: Path) -> bool:
    """Copy an authorized_keys file into the user's ~/.ssh."""
    if not source.is_file():
        log_warn(f"No {source} found. Skipping SSH key copy.")
        return False

    log_action("Copying SSH authorized_keys...")
    ssh_dir = home / ".ssh"
    dest = ssh_dir / "authorized_keys"
    runner.run(["mkdir", "-p", ssh_dir], privileged=True, check=True)
    runner.run(["cp", "-f", source, dest], privileged=True, check=True)
    runner.run(["chown", "-R", f"{name}:{name}", ssh_dir], privileged=True, check=True)
    runner.run(["chmod", "700", ssh_dir], privileged=True, check=True)
    runner.run(["chmod", "600", dest], privileged=True, check=True)
    return True


def configure_sudoers(runner: CommandRunner, name: str) -> Path:
    """Grant passwordless sudo through a drop-in file."""
    log_action("Configuring passwordless sudo...")
    path = SUDOERS_DIR / name
    runner.run(["mkdir", "-p", SUDOERS_DIR], privileged=True, check=True)
    runner.run(["tee", path], privileged=True, input=f"{name} ALL=(ALL) NOPASSWD:ALL\n", check=True)
    runner.run(["chmod", "440", path], privileged=True, check=True)
    return path


def create_user(
    runner: CommandRunner,
    name: str = DEFAULT_USER,
    authorized_keys: Optional[Path] = None,
) -> None:
    """Create or reconfigure a development user with SSH access and sudo."""
    log_info(f"Setting up user: {name}")
    ensure_user(runner, name)

    # SSH-only login
    result = runner.run(["passwd", "-d", name], privileged=True)
    if not result.ok:
        log_warn(f"Could not remove password for {name}")

    if authorized_keys is None:
        authorized_keys = Path(get_real_home()) / ".ssh" / "authorized_keys"
    if runner.dry_run and not user_exists(name):
        home = Path("/home") / name
    else:
        home = lookup_account(name).home
    copy_authorized_keys(runner, name, home, authorized_keys)

    configure_sudoers(runner, name)
    log_info(f"Setup complete for user '{name}'")
