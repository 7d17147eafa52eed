"""SSH keys and Git identity from 1Password.

Secrets are read with ``op read`` from the ``dev`` vault:
``sshkey_<id>`` holds the key pair and ``github_<id>`` the Git identity.
"""
import os
from dataclasses import dataclass
from pathlib import Path

from hostprov.config import OnePasswordSettings
from hostprov.errors import ProvisionError
from hostprov.runner import CommandRunner
from hostprov.template import CONFIGS_DIR
from hostprov.utils import command_exists, log_action, log_info, log_warn

SSH_AGENT_SNIPPET = "ssh-agent.zsh"


@dataclass(frozen=True)
class SecretRefs:
    public_key: str
    private_key: str
    git_name: str
    git_email: str

    @classmethod
    def for_id(cls, key_id: str, vault: str = "dev") -> "SecretRefs":
        return cls(
            public_key=f"op://{vault}/sshkey_{key_id}/public key",
            private_key=f"op://{vault}/sshkey_{key_id}/private key",
            git_name=f"op://{vault}/github_{key_id}/display_name",
            git_email=f"op://{vault}/github_{key_id}/email",
        )


def read_secret(runner: CommandRunner, ref: str) -> str:
    """Read one secret reference through the 1Password CLI."""
    return runner.run(["op", "read", ref], check=True, mutating=False).stdout


def write_private_file(runner: CommandRunner, path: Path, content: str, mode: str) -> None:
    runner.run(["tee", path], input=content, check=True)
    runner.run(["chmod", mode, path], check=True)


def fetch_ssh_keys(runner: CommandRunner, refs: SecretRefs, ssh_dir: Path, key_id: str) -> Path:
    """Write the key pair to ~/.ssh and return the private key path."""
    runner.run(["mkdir", "-p", ssh_dir], check=True)
    runner.run(["chmod", "700", ssh_dir], check=True)

    pubkey_file = ssh_dir / f"{key_id}.pub"
    privkey_file = ssh_dir / key_id

    log_action("Fetching public key...")
    write_private_file(runner, pubkey_file, read_secret(runner, refs.public_key), "644")
    log_info(f"Public key saved to {pubkey_file}")

    log_action("Fetching private key...")
    write_private_file(runner, privkey_file, read_secret(runner, refs.private_key), "600")
    log_info(f"Private key saved to {privkey_file}")
    return privkey_file


def ensure_ssh_agent_config(runner: CommandRunner, zshrc: Path) -> bool:
    """Append the ssh-agent block to .zshrc unless it is already there."""
    snippet = (CONFIGS_DIR / SSH_AGENT_SNIPPET).read_text(encoding="utf-8")
    marker = snippet.splitlines()[0]
    existing = zshrc.read_text().splitlines() if zshrc.is_file() else []
    if marker in existing:
        log_info(f"ssh-agent already configured in {zshrc}. Skipping addition.")
        return False

    log_action(f"Adding ssh-agent configuration to {zshrc}...")
    runner.run(["tee", "-a", zshrc], input=f"\n{snippet}", check=True)
    return True


def add_key_to_agent(runner: CommandRunner, privkey_file: Path) -> None:
    """Load the key into a running agent, if there is one."""
    if not os.environ.get("SSH_AUTH_SOCK") or not command_exists("ssh-add"):
        log_warn("ssh-agent not running or ssh-add missing. Will activate automatically on next shell session.")
        return
    log_action("Adding key to currently running ssh-agent...")
    if not runner.run(["ssh-add", privkey_file]).ok:
        log_warn("Failed to add key to ssh-agent (may require manual ssh-add later)")


def configure_git(runner: CommandRunner, refs: SecretRefs, default_branch: str) -> None:
    """Set the global Git identity from 1Password."""
    log_action("Configuring global Git settings...")
    name = read_secret(runner, refs.git_name).strip()
    email = read_secret(runner, refs.git_email).strip()
    if not runner.dry_run and (not name or not email):
        raise ProvisionError("Failed to retrieve Git user.name or user.email from 1Password.")

    runner.run(["git", "config", "--global", "user.name", name], check=True)
    runner.run(["git", "config", "--global", "user.email", email], check=True)
    runner.run(["git", "config", "--global", "init.defaultBranch", default_branch], check=True)
    log_info(f"Git user.name set to: {name}")
    log_info(f"Git user.email set to: {email}")
    log_info(f"Git default branch set to: {default_branch}")


def ssh_host_alias(key_id: str, privkey_file: Path) -> str:
    """SSH config entry for using this key with github.com."""
    return (
        f"Host github.com-{key_id}\n"
        "  HostName github.com\n"
        "  User git\n"
        f"  IdentityFile {privkey_file}\n"
        "  IdentitiesOnly yes\n"
    )


def setup_git_identity(
    runner: CommandRunner,
    key_id: str,
    home: Path,
    settings: OnePasswordSettings = OnePasswordSettings(),
) -> Path:
    """Fetch keys, wire up ssh-agent and configure Git for the current user."""
    if not key_id:
        raise ProvisionError("A key id is required.")

    log_info(f"Starting Git and SSH setup for ID '{key_id}'...")
    refs = SecretRefs.for_id(key_id, settings.vault)
    privkey_file = fetch_ssh_keys(runner, refs, home / ".ssh", key_id)
    ensure_ssh_agent_config(runner, home / ".zshrc")
    add_key_to_agent(runner, privkey_file)
    configure_git(runner, refs, settings.git_default_branch)

    log_info("Setup complete! Remember to add the public key to GitHub or GitLab.")
    log_info("If using a custom SSH config, you can add:")
    print(ssh_host_alias(key_id, privkey_file))
    return privkey_file
