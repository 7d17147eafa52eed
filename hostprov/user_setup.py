"""Per-account zsh provisioning pipeline.

Each account goes through a fixed sequence of steps. What a failed step
means for the rest of the pipeline is declared in ``PIPELINE``:

- ABORT: stop this account and mark it failed (other accounts continue)
- WARN: record the failure and carry on with the next step
- IGNORE: log it, never record it
"""
import shlex
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Tuple

from hostprov.accounts import Account
from hostprov.config import Settings
from hostprov.errors import ProvisionError
from hostprov.probes import (
    file_present, framework_installed, shell_assigned, shell_registered, theme_linked,
)
from hostprov.results import AccountResult
from hostprov.runner import CommandRunner
from hostprov.template import ConfigTemplate, drop_line
from hostprov.utils import log_action, log_error, log_info, log_warn, resolve_command


class OnFailure(Enum):
    """What a failed step means for the rest of the account's pipeline."""

    ABORT = "abort"
    WARN = "warn"
    IGNORE = "ignore"


@dataclass(frozen=True)
class UserContext:
    """Everything a step needs, passed explicitly."""

    runner: CommandRunner
    settings: Settings
    account: Account
    template: ConfigTemplate


def install_framework(ctx: UserContext) -> None:
    """Install Oh My Zsh as the account unless its marker file exists.

    A leftover directory without oh-my-zsh.sh is reinstalled.
    """
    account, settings = ctx.account, ctx.settings
    if framework_installed(settings.framework_marker(account.home)):
        log_info(f"Oh My Zsh already installed for {account.name}")
        return

    log_action(f"Installing/Repairing Oh My Zsh for {account.name}...")
    framework_dir = shlex.quote(str(settings.framework_dir(account.home)))
    installer_url = shlex.quote(settings.ohmyzsh_install_url)
    script = (
        f"ZSH={framework_dir} RUNZSH=no CHSH=no "
        f"sh -c \"$(curl -fsSL {installer_url})\" \"\" --unattended"
    )
    ctx.runner.run_as(account.name, script, check=True)


def link_theme(ctx: UserContext) -> None:
    """Symlink the shared theme into the account's custom themes dir."""
    account, settings = ctx.account, ctx.settings
    theme_dir = settings.theme_dir(account.home)
    target = settings.global_custom_dir / settings.theme_repo
    link = theme_dir / settings.theme_repo
    if theme_linked(link, target):
        log_info(f"Powerlevel10k theme already linked for {account.name}")
        return

    ctx.runner.run_as(account.name, f"mkdir -p {shlex.quote(str(theme_dir))}", check=True)
    ctx.runner.run_as(
        account.name, f"ln -sfn {shlex.quote(str(target))} {shlex.quote(str(link))}", check=True
    )
    log_info(f"Linked Powerlevel10k theme for {account.name}")


def render_zshrc(settings: Settings, account: Account, template: ConfigTemplate) -> str:
    """Render the managed .zshrc for one account."""
    text = template.render({
        "GLOBAL_P10K": settings.global_p10k_config,
        "GLOBAL_CUSTOM": settings.global_custom_dir,
    })
    # root needs no sudo wrapper
    if account.is_superuser:
        text = drop_line(text, settings.superuser_only_alias)
    return text


def write_config(ctx: UserContext) -> None:
    """Regenerate .zshrc. The file is fully managed, so it is always rewritten."""
    account = ctx.account
    zshrc = ctx.settings.zshrc_path(account.home)
    text = render_zshrc(ctx.settings, account, ctx.template)
    ctx.runner.run(["tee", zshrc], privileged=True, input=text, check=True)
    ctx.runner.run(["chown", account.owner, zshrc], privileged=True, check=True)
    log_info(f"Wrote .zshrc for {account.name}")


def change_shell(ctx: UserContext) -> None:
    """Make zsh the account's login shell, registering it in /etc/shells first."""
    account, settings = ctx.account, ctx.settings
    zsh_path = resolve_command(settings.shell_command)
    if zsh_path is None:
        raise ProvisionError(f"{settings.shell_command} binary not found")

    if shell_assigned(account, zsh_path):
        log_info(f"Shell already zsh for {account.name}")
        return

    if not shell_registered(settings.shells_file, zsh_path):
        log_action(f"Adding {zsh_path} to {settings.shells_file}...")
        ctx.runner.run(["tee", "-a", settings.shells_file], privileged=True, input=f"{zsh_path}\n", check=True)

    log_action(f"Changing shell to zsh for {account.name}...")
    ctx.runner.run(["chsh", "-s", zsh_path, account.name], privileged=True, check=True)


def fix_ownership(ctx: UserContext) -> None:
    """Hand the framework dir and generated files back to the account."""
    account, settings = ctx.account, ctx.settings
    chowns = [
        ["chown", "-R", account.owner,
         settings.framework_dir(account.home), settings.zshrc_path(account.home)],
    ]
    p10k = settings.user_p10k_path(account.home)
    if file_present(p10k):
        chowns.append(["chown", account.owner, p10k])

    # each chown is attempted even if an earlier one failed
    failures = []
    for command in chowns:
        result = ctx.runner.run(command, privileged=True)
        if not result.ok:
            failures.append(f"{result.display}: {result.stderr.strip()}")
    if failures:
        raise ProvisionError("Could not fix ownership (" + "; ".join(failures) + ")")
    log_info(f"Ownership corrected for {account.name}")


@dataclass(frozen=True)
class Transition:
    """One named step of the pipeline and its failure policy."""

    name: str
    action: Callable[[UserContext], None]
    on_failure: OnFailure


PIPELINE: Tuple[Transition, ...] = (
    Transition("install_framework", install_framework, OnFailure.ABORT),
    Transition("link_theme", link_theme, OnFailure.WARN),
    Transition("write_config", write_config, OnFailure.WARN),
    Transition("change_shell", change_shell, OnFailure.WARN),
    Transition("fix_ownership", fix_ownership, OnFailure.IGNORE),
)


def provision_account(
    runner: CommandRunner,
    settings: Settings,
    account: Account,
    template: ConfigTemplate,
    pipeline: Tuple[Transition, ...] = PIPELINE,
) -> AccountResult:
    """Run the pipeline for one account.

    Command failures and filesystem errors inside a step are handled by
    that step's policy and never escape, so other accounts still run.
    """
    log_info(f"Processing user: {account.name} (uid={account.uid}, home={account.home})")
    ctx = UserContext(runner=runner, settings=settings, account=account, template=template)
    result = AccountResult(name=account.name)

    for transition in pipeline:
        try:
            transition.action(ctx)
        except (ProvisionError, OSError) as e:
            message = f"{transition.name} failed for {account.name}: {e}"
            if transition.on_failure is OnFailure.ABORT:
                log_error(message)
                log_warn(f"Cannot proceed with setup for {account.name}.")
                result.record_abort(transition.name, message)
                break
            log_warn(message)
            if transition.on_failure is OnFailure.WARN:
                result.record_warning(transition.name, message)

    return result
