"""Subprocess helpers.

run_command is the only place picoprep starts a process. It never raises
for a non-zero exit; callers decide what a failure means.
"""

import shutil
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Captured outcome of one command.

    Attributes:
        stdout: Standard output, decoded as text.
        stderr: Standard error, decoded as text.
        returncode: Exit status.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def first_line(self) -> str:
        """First non-blank line of stdout, or an empty string."""
        return next((line.strip() for line in self.stdout.splitlines() if line.strip()), "")


def run_command(
    args: list[str],
    *,
    cwd: str | None = None,
    env: Mapping[str, str] | None = None,
    input: str | None = None,
    timeout: float | None = None,
) -> CommandResult:
    """Run a command to completion and capture its output.

    Args:
        args: Command and arguments; no shell is involved.
        cwd: Working directory, or the current one if None.
        env: Complete child environment, or ours if None.
        input: Text fed to stdin.
        timeout: Seconds before the command is killed. Builds and downloads
            run unbounded by default.

    Returns:
        CommandResult for the finished process.

    Raises:
        FileNotFoundError: If the executable does not exist.
        subprocess.TimeoutExpired: If the timeout elapses.
    """
    completed = subprocess.run(
        args,
        capture_output=True,
        text=True,
        timeout=timeout,
        cwd=cwd,
        env=dict(env) if env is not None else None,
        input=input,
    )
    return CommandResult(completed.stdout, completed.stderr, completed.returncode)


def command_exists(name: str, path: str | None = None) -> bool:
    """Check whether an executable resolves on ``path`` (default: our PATH)."""
    return shutil.which(name, path=path) is not None
