"""CLI interface for the provisioning tool."""
from pathlib import Path
from typing import Optional

import typer
from . import utils
from . import steps
from . import users
from . import debian
from . import git_setup
from . import remote
from .errors import ProvisionError
from .runner import CommandRunner

STRICT_EXIT_CODE = 2

app = typer.Typer(
    name="hostprov",
    help="A clean, modular host provisioning tool.",
    add_completion=False,
    no_args_is_help=True,
)


def _require_root() -> None:
    if not utils.is_root():
        typer.echo("❗ System operations require root. Run with sudo.")
        raise typer.Exit(1)


def _fail(error: ProvisionError) -> None:
    typer.echo(f"❗ {error}")
    raise typer.Exit(1)


def _runner(ctx: typer.Context) -> CommandRunner:
    return CommandRunner(dry_run=ctx.obj["dry_run"])


@app.callback()
def main(
    ctx: typer.Context,
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview changes without applying them"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
):
    """Provision shells, users, SSH keys and tooling on Debian hosts."""
    utils.setup_logging(verbose)
    ctx.obj = {"dry_run": dry_run}


@app.command()
def zsh(
    ctx: typer.Context,
    strict: bool = typer.Option(False, "--strict", help="Exit with code 2 if any account failed"),
):
    """Install Zsh, Oh My Zsh and Powerlevel10k for every target user."""
    _require_root()
    try:
        result = steps.provision_shells(ctx.obj["dry_run"])
    except ProvisionError as e:
        _fail(e)

    if result.any_error:
        typer.echo("⚠️  Zsh setup finished with non-critical failures.")
        if strict:
            raise typer.Exit(STRICT_EXIT_CODE)
    typer.echo("✅ Zsh setup complete!")


@app.command("create-user")
def create_user(
    ctx: typer.Context,
    user: str = typer.Option(users.DEFAULT_USER, "--user", "-u", help="Name of the user to create"),
    authorized_keys: Optional[Path] = typer.Option(
        None, "--authorized-keys", help="authorized_keys file to copy (default: the invoking user's)"
    ),
):
    """Create a sudo-enabled user that logs in with SSH keys only."""
    _require_root()
    try:
        users.create_user(_runner(ctx), user, authorized_keys)
    except ProvisionError as e:
        _fail(e)
    typer.echo(f"✅ Setup complete for user '{user}'")


@app.command("install-op")
def install_op(ctx: typer.Context):
    """Install the 1Password CLI from the official APT repository."""
    _require_root()
    try:
        debian.install_op_cli(_runner(ctx))
    except ProvisionError as e:
        _fail(e)
    typer.echo("✅ 1Password CLI installed!")


@app.command("git-setup")
def git_setup_command(
    ctx: typer.Context,
    key_id: str = typer.Option(..., "--id", help="Identifier of the sshkey_<id> and github_<id> items"),
):
    """Fetch SSH keys and Git identity from 1Password for the current user."""
    try:
        git_setup.setup_git_identity(_runner(ctx), key_id, Path.home())
    except ProvisionError as e:
        _fail(e)
    typer.echo("✅ SSH keys and Git global config are ready.")


@app.command("check-ssh")
def check_ssh(
    ctx: typer.Context,
    host: str = typer.Argument(..., help="Host name or IP address"),
    user: str = typer.Option(..., "--user", "-u", help="Remote user"),
    command: Optional[str] = typer.Option(None, "--command", "-c", help="Command to run once connected"),
):
    """Check SSH connectivity to a host, optionally running a command there."""
    runner = _runner(ctx)
    try:
        remote.check_ssh_connection(runner, host, user)
        if command:
            output = remote.execute_remote_command(runner, host, user, command)
            if output:
                typer.echo(output.rstrip("\n"))
    except ProvisionError as e:
        _fail(e)
    typer.echo(f"✅ {host} is reachable over SSH.")


if __name__ == "__main__":
    app()
