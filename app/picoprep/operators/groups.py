"""POSIX group membership operator."""

import logging

from picoprep.operators.base import Operator

logger = logging.getLogger(__name__)


class GroupOperator(Operator):
    """Creates groups and grants the provisioning user membership.

    ``usermod -aG`` is additive, so granting an existing membership again
    changes nothing. New memberships only apply to new login sessions.
    """

    @property
    def command(self) -> str:
        return "usermod"

    def group_exists(self, group: str) -> bool:
        return self._host.probe(["getent", "group", group]).success

    def ensure_group(self, group: str) -> bool:
        """Create a group if it does not exist.

        Returns:
            True if the group was created.
        """
        if self.group_exists(group):
            return False
        logger.info("Creating group %s", group)
        self._host.run(["groupadd", group], privileged=True)
        return True

    def add_user(self, group: str, user: str | None = None) -> None:
        """Grant a user membership in a group.

        Args:
            group: Group name.
            user: Login name. Defaults to the host's user.

        Raises:
            ValueError: If no user is known.
            CommandFailedError: If usermod fails.
        """
        user = user or self._host.user
        if not user:
            msg = "Cannot determine the user to add to groups (USER is unset)"
            raise ValueError(msg)
        self._host.run(["usermod", "-aG", group, user], privileged=True)
