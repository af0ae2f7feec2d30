"""APT package operator implementation.

Refreshes package indexes and installs packages using apt-get.
"""

import logging

from picoprep.operators.base import Operator

logger = logging.getLogger(__name__)


class AptOperator(Operator):
    """Operator for APT/dpkg packages.

    Uses apt-get under sudo. Installing an already-installed package is a
    no-op for apt-get, so install() is idempotent as-is.
    """

    @property
    def command(self) -> str:
        return "apt-get"

    def update(self) -> None:
        """Refresh the package indexes."""
        self._host.run(["apt-get", "update", "-y"], privileged=True)

    def install(self, packages: list[str]) -> None:
        """Install packages using apt-get install.

        Args:
            packages: List of package names to install.

        Raises:
            CommandFailedError: If apt-get fails. apt-get treats the
                package list as one transaction, so nothing is reported
                per package.
        """
        if not packages:
            return

        logger.info("Installing APT packages: %s", ", ".join(packages))
        self._host.run(["apt-get", "install", "-y", *packages], privileged=True)
