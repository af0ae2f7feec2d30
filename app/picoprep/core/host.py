"""Handle on the machine being provisioned.

Every stage talks to the outside world (commands, the process environment,
privileged file writes) through a Host. Tests build a Host around a fake
runner and a temporary directory instead of touching the real system.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable, Sequence
from pathlib import Path

from picoprep.core.errors import CommandFailedError
from picoprep.utils.shell import CommandResult, run_command

logger = logging.getLogger(__name__)

# Signature-compatible with picoprep.utils.shell.run_command
CommandRunner = Callable[..., CommandResult]

# Exit code shells use for "command not found"
_NOT_FOUND = 127


class Host:
    """Command execution and environment for one provisioning run.

    Attributes:
        env: Environment passed to every child process. Stages update it
            (PATH prepends, SDK hints) so later commands see earlier installs.
        user: Login name that receives group memberships.
        jobs: Parallel job count handed to build tools.
    """

    def __init__(
        self,
        runner: CommandRunner = run_command,
        *,
        env: dict[str, str] | None = None,
        user: str | None = None,
        jobs: int | None = None,
        privileged_prefix: Sequence[str] | None = None,
    ) -> None:
        """Initialize the host handle.

        Args:
            runner: Callable used to execute commands.
            env: Child process environment. Defaults to a copy of os.environ.
            user: Login name. Defaults to $USER from env.
            jobs: Build parallelism. Defaults to the CPU count.
            privileged_prefix: Prepended to privileged commands. Defaults to
                ("sudo",), or nothing when already running as root.
        """
        self._runner = runner
        self.env: dict[str, str] = dict(os.environ) if env is None else dict(env)
        self.user = user or self.env.get("USER") or self.env.get("LOGNAME", "")
        self.jobs = jobs or os.cpu_count() or 1
        if privileged_prefix is None:
            privileged_prefix = () if os.geteuid() == 0 else ("sudo",)
        self._privileged_prefix = tuple(privileged_prefix)

    def _invoke(
        self,
        args: list[str],
        *,
        cwd: Path | None,
        input: str | None,
    ) -> CommandResult:
        try:
            return self._runner(
                args,
                cwd=str(cwd) if cwd is not None else None,
                env=self.env,
                input=input,
            )
        except FileNotFoundError:
            return CommandResult(
                stdout="", stderr=f"{args[0]}: command not found", returncode=_NOT_FOUND
            )

    def run(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        privileged: bool = False,
        input: str | None = None,
    ) -> CommandResult:
        """Run a command, raising if it fails.

        Args:
            args: Command and arguments.
            cwd: Working directory.
            privileged: Run through the privileged prefix (sudo).
            input: Text written to the command's stdin.

        Returns:
            CommandResult of the successful command.

        Raises:
            CommandFailedError: If the command is missing or exits non-zero.
        """
        full_args = [*self._privileged_prefix, *args] if privileged else list(args)
        logger.info("Running: %s%s", " ".join(full_args), f" (in {cwd})" if cwd else "")
        result = self._invoke(full_args, cwd=cwd, input=input)
        if result.stdout:
            logger.debug("stdout: %s", result.stdout.rstrip())
        if not result.success:
            raise CommandFailedError(full_args, result.returncode, result.stderr)
        return result

    def probe(self, args: Sequence[str], *, cwd: Path | None = None) -> CommandResult:
        """Run a command whose failure is an answer, not an error.

        Args:
            args: Command and arguments.
            cwd: Working directory.

        Returns:
            CommandResult, with returncode 127 if the executable is missing.
        """
        logger.debug("Probing: %s", " ".join(args))
        return self._invoke(list(args), cwd=cwd, input=None)

    def which(self, name: str) -> str | None:
        """Resolve an executable on this host's PATH."""
        return shutil.which(name, path=self.env.get("PATH"))

    def prepend_path(self, directory: Path) -> None:
        """Put a directory first on PATH for every later command."""
        current = self.env.get("PATH", "")
        self.env["PATH"] = f"{directory}:{current}" if current else str(directory)

    def setenv(self, name: str, value: str | Path) -> None:
        self.env[name] = str(value)

    def write_file(self, path: Path, content: str, *, privileged: bool = False) -> None:
        """Replace a file's content.

        Privileged writes go through ``tee`` under the privileged prefix so
        they work for root-owned directories like /etc/udev/rules.d.
        """
        if privileged:
            self.run(["tee", str(path)], privileged=True, input=content)
            return
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
