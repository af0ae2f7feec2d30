"""Sequential, fail-fast provisioning.

The Provisioner runs stages strictly in order. The first stage that raises
ends the run: its failure is recorded and no later stage executes. Partial
work is left as is; running again converges because every stage is
idempotent.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from picoprep.core.config import ProvisionConfig
from picoprep.core.errors import ProvisionError
from picoprep.core.host import Host
from picoprep.core.stages import STAGES, ProvisionContext, Stage
from picoprep.models.step import ProvisionReport, StageResult
from picoprep.utils.formatting import print_banner, print_info, print_warning

logger = logging.getLogger(__name__)


class Provisioner:
    """Runs the provisioning stages against one host.

    Attributes:
        config: Settings for the run.
        host: Handle on the machine being provisioned.
        stages: Stages to run, in order.
    """

    def __init__(
        self,
        config: ProvisionConfig,
        host: Host | None = None,
        stages: Sequence[Stage] = STAGES,
    ) -> None:
        self.config = config
        self.host = host or Host(jobs=config.jobs, user=config.user)
        self.stages = tuple(stages)

    def run(self) -> ProvisionReport:
        """Run every stage until one fails.

        Returns:
            ProvisionReport with one result per executed stage. If a stage
            failed, its result is the last one.
        """
        context = ProvisionContext(config=self.config, host=self.host)
        report = ProvisionReport()

        for stage in self.stages:
            print_banner(stage.title)
            warnings_before = len(context.warnings)
            notes_before = len(context.notes)

            try:
                message = stage.run(context)
            except (ProvisionError, OSError, ValueError) as e:
                logger.error("Stage %s failed: %s", stage.name, e)
                report.results.append(
                    StageResult(
                        name=stage.name,
                        title=stage.title,
                        success=False,
                        error=str(e),
                        warnings=tuple(context.warnings[warnings_before:]),
                    )
                )
                break

            new_warnings = tuple(context.warnings[warnings_before:])
            for warning in new_warnings:
                print_warning(warning)
            for note in context.notes[notes_before:]:
                print_info(note)

            logger.debug("Stage %s finished: %s", stage.name, message)
            report.results.append(
                StageResult(
                    name=stage.name,
                    title=stage.title,
                    success=True,
                    message=message,
                    warnings=new_warnings,
                )
            )

        report.summary = list(context.summary)
        logger.info("Stages run: %s", ", ".join(report.stage_names))
        return report
