"""udev rule operator implementation."""

import logging
from pathlib import Path

from picoprep.core.host import Host
from picoprep.models.resources import DeviceAccessRule
from picoprep.operators.base import Operator

logger = logging.getLogger(__name__)


class UdevOperator(Operator):
    """Installs udev rule files and reloads the rule database.

    Attributes:
        rules_dir: Directory udev reads rules from.
    """

    def __init__(self, host: Host, rules_dir: Path = Path("/etc/udev/rules.d")) -> None:
        super().__init__(host)
        self.rules_dir = rules_dir

    @property
    def command(self) -> str:
        return "udevadm"

    def rule_path(self, rule: DeviceAccessRule) -> Path:
        return self.rules_dir / rule.filename

    def install_rule(self, rule: DeviceAccessRule) -> Path:
        """Overwrite a rule file with the rule's fixed content."""
        path = self.rule_path(rule)
        logger.info("Writing udev rule %s", path)
        self._host.write_file(path, rule.content, privileged=True)
        return path

    def copy_rule_file(self, source: Path) -> Path:
        """Copy a rule file shipped by another project into the rules dir."""
        self._host.run(["cp", str(source), f"{self.rules_dir}/"], privileged=True)
        return self.rules_dir / source.name

    def reload(self) -> None:
        """Reload rules and replay device events so they apply without a reboot."""
        self._host.run(["udevadm", "control", "--reload-rules"], privileged=True)
        self._host.run(["udevadm", "trigger"], privileged=True)
