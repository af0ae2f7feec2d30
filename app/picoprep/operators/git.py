"""Git operator implementation."""

import logging

from picoprep.core.steps import ensure_present
from picoprep.models.resources import RepositoryCheckout
from picoprep.operators.base import Operator

logger = logging.getLogger(__name__)


class GitOperator(Operator):
    """Clones and fast-forwards repository checkouts.

    Dirty trees and diverged branches are not handled: git's own error
    propagates and aborts the run.
    """

    @property
    def command(self) -> str:
        return "git"

    def clone(self, checkout: RepositoryCheckout) -> None:
        checkout.path.parent.mkdir(parents=True, exist_ok=True)
        self._host.run(["git", "clone", checkout.url, str(checkout.path)])

    def update(self, checkout: RepositoryCheckout) -> None:
        """Fetch tags, fast-forward, and sync submodules recursively.

        Raises:
            CommandFailedError: If any git command fails, including a
                pull that cannot fast-forward.
        """
        logger.info("Updating %s", checkout.path)
        self._host.run(["git", "fetch", "--tags"], cwd=checkout.path)
        self._host.run(["git", "pull", "--ff-only"], cwd=checkout.path)
        self._host.run(
            ["git", "submodule", "update", "--init", "--recursive"],
            cwd=checkout.path,
        )

    def acquire(self, checkout: RepositoryCheckout) -> bool:
        """Clone the checkout if it is absent, then update it either way.

        Returns:
            True if the repository was freshly cloned.
        """
        cloned = ensure_present(
            checkout.path, lambda: self.clone(checkout), present=checkout.exists
        )
        self.update(checkout)
        return cloned
