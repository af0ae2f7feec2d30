"""Data models for picoprep.

This module exports the core data structures used throughout the application.
"""

from picoprep.models.resources import (
    BuildArtifact,
    DeviceAccessRule,
    GeneratedConfigFile,
    RepositoryCheckout,
    ShellEnvironmentEntry,
    TargetVariant,
    ToolchainInstallation,
)
from picoprep.models.step import ProvisionReport, StageResult, StepStatus

__all__ = [
    "BuildArtifact",
    "DeviceAccessRule",
    "GeneratedConfigFile",
    "ProvisionReport",
    "RepositoryCheckout",
    "ShellEnvironmentEntry",
    "StageResult",
    "StepStatus",
    "TargetVariant",
    "ToolchainInstallation",
]
