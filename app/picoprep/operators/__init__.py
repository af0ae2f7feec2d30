"""Operators wrapping the external tools picoprep drives.

This module provides the abstract Operator and one concrete operator per
collaborator (apt-get, git, cmake/make, udevadm, usermod).
"""

from picoprep.operators.apt import AptOperator
from picoprep.operators.base import Operator
from picoprep.operators.build import AutotoolsBuilder, CMakeBuilder
from picoprep.operators.git import GitOperator
from picoprep.operators.groups import GroupOperator
from picoprep.operators.udev import UdevOperator

__all__ = [
    "AptOperator",
    "AutotoolsBuilder",
    "CMakeBuilder",
    "GitOperator",
    "GroupOperator",
    "Operator",
    "UdevOperator",
]
