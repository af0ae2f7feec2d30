"""Stage result models.

This module defines the data structures the provisioner uses to report
the outcome of each stage and of the whole run.
"""

from dataclasses import dataclass, field
from enum import Enum


class StepStatus(Enum):
    """Outcome of a single stage.

    Attributes:
        OK: The stage reached its end-state.
        WARNING: The stage completed but reported soft warnings.
        FAILED: The stage aborted; no later stage runs.
    """

    OK = "ok"
    WARNING = "warning"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class StageResult:
    """Result of running one provisioning stage.

    Attributes:
        name: Stable stage identifier.
        title: Human-readable banner title.
        success: Whether the stage completed.
        message: Optional short description of what happened.
        error: Error message if the stage failed.
        warnings: Soft warnings raised while the stage ran.
    """

    name: str
    title: str
    success: bool
    message: str | None = None
    error: str | None = None
    warnings: tuple[str, ...] = ()

    @property
    def failed(self) -> bool:
        """Check if the stage failed."""
        return not self.success

    @property
    def status(self) -> StepStatus:
        if self.failed:
            return StepStatus.FAILED
        if self.warnings:
            return StepStatus.WARNING
        return StepStatus.OK


@dataclass(slots=True)
class ProvisionReport:
    """Ordered results of one provisioner run.

    Results are appended as stages complete. A failed result is always
    the last one: the provisioner stops at the first failure.

    Attributes:
        results: Stage results in execution order.
        summary: (label, value) pairs collected by the summary stage.
    """

    results: list[StageResult] = field(default_factory=list)
    summary: list[tuple[str, str]] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return all(r.success for r in self.results)

    @property
    def failure(self) -> StageResult | None:
        """The stage that aborted the run, if any."""
        for result in self.results:
            if result.failed:
                return result
        return None

    @property
    def warnings(self) -> list[str]:
        return [w for r in self.results for w in r.warnings]

    @property
    def stage_names(self) -> list[str]:
        return [r.name for r in self.results]
