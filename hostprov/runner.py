"""Run commands as root, through sudo, or as another account."""
import shlex
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

import sh

from hostprov import utils
from hostprov.errors import CommandError
from hostprov.utils import log_action, log_debug

NOT_FOUND_EXIT_CODE = 127


@dataclass(frozen=True)
class CommandResult:
    """Exit status and captured output of one command."""

    command: Tuple[str, ...]
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        """True when the command exited with status 0."""
        return self.exit_code == 0

    @property
    def display(self) -> str:
        """The command as a shell-quoted string."""
        return shlex.join(self.command)


def _decode(output: Union[bytes, str, None]) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return str(output)


class CommandRunner:
    """Executes commands with the right identity.

    ``privileged`` commands go through sudo unless we are already root.
    In dry-run mode mutating commands are only logged; read-only probes
    (``mutating=False``) still run so the preview reflects the real host.
    """

    def __init__(self, dry_run: bool = False, as_root: Optional[bool] = None):
        self.dry_run = dry_run
        self.as_root = utils.is_root() if as_root is None else as_root

    def run(
        self,
        command: Sequence[object],
        privileged: bool = False,
        input: Optional[str] = None,
        check: bool = False,
        mutating: bool = True,
    ) -> CommandResult:
        """Run a command and return its result.

        A non-zero exit status is returned to the caller, or raised as
        ``CommandError`` when ``check`` is set.
        """
        argv = [str(part) for part in command]
        if privileged and not self.as_root:
            argv = ["sudo", *argv]

        if self.dry_run and mutating:
            log_action(f"[DRY RUN] Would run: {shlex.join(argv)}")
            return CommandResult(tuple(argv), 0)

        log_debug(f"Running: {shlex.join(argv)}")
        result = self._execute(argv, input)
        if not result.ok:
            log_debug(f"Exit code {result.exit_code}: {result.display}")
        if check and not result.ok:
            raise CommandError(result)
        return result

    def run_as(self, user: str, script: str, check: bool = False, mutating: bool = True) -> CommandResult:
        """Run a shell snippet in the login environment of ``user``."""
        if self.as_root:
            argv = ["su", "-s", "/bin/sh", "-", user, "-c", script]
        else:
            argv = ["sudo", "-u", user, "/bin/sh", "-c", script]
        return self.run(argv, check=check, mutating=mutating)

    def _execute(self, argv, input):
        try:
            command = sh.Command(argv[0])
        except sh.CommandNotFound:
            return CommandResult(tuple(argv), NOT_FOUND_EXIT_CODE, "", f"{argv[0]}: command not found")

        kwargs = {"_return_cmd": True, "_tty_out": False}
        if input is not None:
            kwargs["_in"] = input
        try:
            proc = command(*argv[1:], **kwargs)
        except sh.ErrorReturnCode as e:
            return CommandResult(tuple(argv), e.exit_code, _decode(e.stdout), _decode(e.stderr))
        return CommandResult(tuple(argv), proc.exit_code, _decode(proc.stdout), _decode(proc.stderr))
