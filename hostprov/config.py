"""Static configuration for the provisioning workflows.

Edit the defaults here to match the users and assets of your hosts. A
``Settings`` instance is passed explicitly to every component so nothing
reads ambient process state.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Tuple

OHMYZSH_INSTALL_URL = "https://raw.githubusercontent.com/ohmyzsh/ohmyzsh/master/tools/install.sh"
P10K_REMOTE_URL = "https://raw.githubusercontent.com/nexhosts/public/main/.p10k.zsh"

SHARED_REPOS = {
    "zsh-autosuggestions": "https://github.com/zsh-users/zsh-autosuggestions",
    "zsh-syntax-highlighting": "https://github.com/zsh-users/zsh-syntax-highlighting",
    "powerlevel10k": "https://github.com/romkatv/powerlevel10k",
}


@dataclass(frozen=True)
class Settings:
    """Everything the zsh workflow needs to know about the host."""

    target_users: Tuple[str, ...] = ("root", "debian", "ubuntu", "dev")
    min_uid: int = 1000
    global_custom_dir: Path = Path("/etc/zsh/custom")
    global_p10k_config: Path = Path("/etc/zsh/.p10k.zsh")
    p10k_remote_url: str = P10K_REMOTE_URL
    ohmyzsh_install_url: str = OHMYZSH_INSTALL_URL
    packages: Tuple[str, ...] = ("zsh", "git", "curl", "ca-certificates", "jq")
    shared_repos: Dict[str, str] = field(default_factory=lambda: dict(SHARED_REPOS))
    theme_repo: str = "powerlevel10k"
    shells_file: Path = Path("/etc/shells")
    shell_command: str = "zsh"
    superuser_only_alias: str = "alias apt='sudo apt'"

    def framework_dir(self, home: Path) -> Path:
        return Path(home) / ".oh-my-zsh"

    def framework_marker(self, home: Path) -> Path:
        return self.framework_dir(home) / "oh-my-zsh.sh"

    def theme_dir(self, home: Path) -> Path:
        return self.framework_dir(home) / "custom" / "themes"

    def zshrc_path(self, home: Path) -> Path:
        return Path(home) / ".zshrc"

    def user_p10k_path(self, home: Path) -> Path:
        return Path(home) / ".p10k.zsh"


@dataclass(frozen=True)
class OnePasswordSettings:
    """Where the 1Password CLI comes from and where its secrets live."""

    key_url: str = "https://downloads.1password.com/linux/keys/1password.asc"
    keyring_path: Path = Path("/usr/share/keyrings/1password-archive-keyring.gpg")
    sources_list: Path = Path("/etc/apt/sources.list.d/1password.list")
    repo_url: str = "https://downloads.1password.com/linux/debian"
    package: str = "1password-cli"
    vault: str = "dev"
    git_default_branch: str = "main"


@dataclass(frozen=True)
class SSHSettings:
    retries: int = 3
    connect_timeout: int = 5
    retry_delay: float = 2.0
