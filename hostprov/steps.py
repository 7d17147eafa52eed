"""Provisioning workflow steps."""
import platform
from typing import Optional

from hostprov.accounts import TargetSet, select_targets
from hostprov.assets import install_global_assets
from hostprov.config import Settings
from hostprov.results import RunResult
from hostprov.runner import CommandRunner
from hostprov.template import zshrc_template
from hostprov.user_setup import provision_account
from hostprov.utils import log_info, log_warn


def run_user_setup(runner: CommandRunner, settings: Settings, targets: TargetSet) -> RunResult:
    """Provision every selected account, one at a time."""
    template = zshrc_template()
    result = RunResult()
    for name, reason in targets.skipped:
        result.skip(name, reason)
    for account in targets:
        result.add(provision_account(runner, settings, account, template))
    return result


def provision_shells(
    dry_run: bool = False,
    settings: Optional[Settings] = None,
    runner: Optional[CommandRunner] = None,
) -> RunResult:
    """Main zsh workflow: shared assets once, then every target account."""
    current_platform = platform.system()
    if current_platform != 'Linux':
        raise NotImplementedError(f"Platform {current_platform} is not supported")

    settings = settings or Settings()
    runner = runner or CommandRunner(dry_run=dry_run)

    log_info("Starting Zsh + Powerlevel10k setup...")

    # Phase 1: shared assets, failures abort the run
    install_global_assets(runner, settings)

    # Phase 2: accounts
    targets = select_targets(settings)
    result = run_user_setup(runner, settings, targets)

    log_info("Zsh setup completed successfully!")
    if result.any_error:
        names = ", ".join(failure.name for failure in result.failures)
        log_warn(f"Some non-critical steps failed (see above): {names}")
    return result
