"""Exceptions raised while provisioning.

Any ProvisionError escaping a stage aborts the run.
"""

from collections.abc import Sequence


class ProvisionError(Exception):
    """Base exception for provisioning failures."""


class CommandFailedError(ProvisionError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, args: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.command = list(args)
        self.returncode = returncode
        self.stderr = stderr.strip()
        message = f"Command failed with exit code {returncode}: {' '.join(self.command)}"
        if self.stderr:
            message = f"{message}\n{self.stderr}"
        super().__init__(message)


class PreconditionError(ProvisionError):
    """Raised when an executable an earlier step should have provided is missing."""

    def __init__(self, executable: str) -> None:
        self.executable = executable
        super().__init__(f"{executable} not found")
