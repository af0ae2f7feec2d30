"""Abstract base class for operators.

This module defines the Operator interface that every wrapper around an
external tool (apt-get, git, cmake, udevadm, ...) implements.
"""

from abc import ABC, abstractmethod

from picoprep.core.errors import PreconditionError
from picoprep.core.host import Host
from picoprep.utils.shell import command_exists


class Operator(ABC):
    """Abstract base class for all operators.

    Operators translate one concern (packages, source control, builds,
    device rules, groups) into commands run on a Host. They never catch
    command failures: a failing command aborts the stage that called it.

    Example:
        >>> operator = AptOperator(Host())
        >>> operator.require()
        >>> operator.install(["cmake", "ninja-build"])
    """

    def __init__(self, host: Host) -> None:
        """Initialize the operator.

        Args:
            host: Host the operator's commands run on.
        """
        self._host = host

    @property
    @abstractmethod
    def command(self) -> str:
        """Return the executable this operator drives."""

    def is_available(self) -> bool:
        """Check if the operator's executable is on the host's PATH."""
        return command_exists(self.command, path=self._host.env.get("PATH"))

    def require(self) -> None:
        """Fail fast when the operator's executable is missing.

        Raises:
            PreconditionError: If the executable cannot be resolved.
        """
        if not self.is_available():
            raise PreconditionError(self.command)
