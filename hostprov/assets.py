"""Machine-wide dependencies and shared zsh assets.

Everything here runs once per host before any account is touched. Failures
are not caught: without these assets no account can be provisioned.
"""
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, List, Tuple

from hostprov.config import Settings
from hostprov.debian import install_packages
from hostprov.errors import CloneError
from hostprov.probes import file_present, repo_cloned
from hostprov.runner import CommandRunner
from hostprov.utils import log_action, log_info


def prepare_global_dir(runner: CommandRunner, settings: Settings) -> None:
    """Create the shared custom directory with mode 755."""
    log_info(f"Creating global custom directory: {settings.global_custom_dir}")
    runner.run(["mkdir", "-p", settings.global_custom_dir], privileged=True, check=True)
    runner.run(["chmod", "755", settings.global_custom_dir], privileged=True, check=True)


def clone_global_repo(runner: CommandRunner, name: str, url: str, dest: Path) -> bool:
    """Clone one shared repository. Returns False if it was already there."""
    if repo_cloned(dest):
        log_info(f"{name} already cloned")
        return False
    log_action(f"Cloning {name}...")
    runner.run(["git", "clone", "--quiet", "--depth", "1", url, dest], privileged=True, check=True)
    return True


def install_global_plugins(runner: CommandRunner, settings: Settings) -> Dict[str, bool]:
    """Clone the shared plugin and theme repositories concurrently.

    Waits for every clone. If any of them failed, a single ``CloneError``
    lists all failures.
    """
    log_info("Cloning global plugins and theme...")
    repos = settings.shared_repos
    if not repos:
        return {}

    with ThreadPoolExecutor(max_workers=len(repos)) as executor:
        futures = []
        for name, url in repos.items():
            dest = settings.global_custom_dir / name
            futures.append((name, executor.submit(clone_global_repo, runner, name, url, dest)))
        cloned: Dict[str, bool] = {}
        failures: List[Tuple[str, Exception]] = []
        for name, future in futures:
            try:
                cloned[name] = future.result()
            except Exception as e:
                failures.append((name, e))

    if failures:
        raise CloneError(failures)
    return cloned


def download_p10k_config(runner: CommandRunner, settings: Settings) -> None:
    """Fetch the shared Powerlevel10k config unless it is already present."""
    if file_present(settings.global_p10k_config):
        log_info("Global Powerlevel10k config already present")
        return
    log_action("Downloading global Powerlevel10k configuration...")
    runner.run(
        ["curl", "-fsSL", settings.p10k_remote_url, "-o", settings.global_p10k_config],
        privileged=True, check=True,
    )
    runner.run(["chmod", "644", settings.global_p10k_config], privileged=True, check=True)


def install_global_assets(runner: CommandRunner, settings: Settings) -> None:
    """Install packages and shared assets, in order."""
    install_packages(runner, settings.packages)
    prepare_global_dir(runner, settings)
    install_global_plugins(runner, settings)
    download_p10k_config(runner, settings)
