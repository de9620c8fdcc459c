"""Gate controller: decides continue vs. halt after every pipeline step.

One ``gate`` call per completed step:

    validate output -> record step -> notify agent_complete
        -> [notify question] -> critical?  notify critical_stop, halt
                                           : notify auto_continue, continue

Only a CRITICAL validation outcome halts the pipeline.  Warnings and
questions are routed to the notifier for asynchronous attention.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from stepgate.core.validator import OutputValidator
from stepgate.models.config import GateConfig
from stepgate.models.events import (
    DEFAULT_REPORT_FILE,
    AgentCompleteEvent,
    AutoContinueEvent,
    CriticalStopEvent,
    PipelineCompleteEvent,
    QuestionEvent,
)
from stepgate.models.validation import StepRecord, ValidationPolicy, ValidationResult
from stepgate.routing.notifier import NotificationSink, PostCallback

if TYPE_CHECKING:
    from stepgate.config import GateSettings

logger = logging.getLogger(__name__)

CriticalStopHook = Callable[[int, ValidationResult], None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _aware(moment: datetime) -> datetime:
    # naive datetimes are local wall-clock time, as datetime.now() returns
    if moment.tzinfo is None:
        return moment.astimezone()
    return moment


def _elapsed_ms(start: datetime, end: datetime) -> int:
    return max(0, int((_aware(end) - _aware(start)).total_seconds() * 1000))


class GateController:
    """Runs the inter-step gate and keeps the record of completed steps.

    Parameters
    ----------
    project_root:
        Directory that output paths are resolved against.
    output_map:
        Step number -> output path relative to *project_root*.
    notifier:
        Where pipeline events go.  A log-only ``NotificationSink`` is
        created when omitted.
    on_critical_stop:
        Called synchronously with ``(step, result)`` once per halt.
    final_step:
        Last step of the pipeline; no auto_continue is emitted after it.
    policy:
        Validation thresholds and per-step exceptions.
    report_file:
        Name of the final report announced on pipeline completion.
    clock:
        Returns the current UTC time.
    """

    def __init__(
        self,
        project_root: Path | str,
        output_map: Mapping[int, str],
        notifier: NotificationSink | None = None,
        on_critical_stop: CriticalStopHook | None = None,
        *,
        final_step: int = 7,
        policy: ValidationPolicy | None = None,
        report_file: str = DEFAULT_REPORT_FILE,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.project_root = Path(project_root)
        self.output_map = dict(output_map)
        self.notifier = notifier or NotificationSink()
        self.on_critical_stop = on_critical_stop
        self.final_step = final_step
        self.report_file = report_file
        self._validator = OutputValidator(policy)
        self._clock = clock or _utcnow
        self._results: list[StepRecord] = []

    @classmethod
    def from_config(
        cls,
        config: GateConfig,
        notifier: NotificationSink | None = None,
        on_critical_stop: CriticalStopHook | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> GateController:
        """Build a controller from a ``GateConfig``."""
        return cls(
            config.project_root,
            config.output_map,
            notifier,
            on_critical_stop,
            final_step=config.final_step,
            policy=config.policy,
            report_file=config.report_file,
            clock=clock,
        )

    @classmethod
    def from_settings(
        cls,
        settings: GateSettings,
        post_callback: PostCallback | None = None,
        on_critical_stop: CriticalStopHook | None = None,
        *,
        output_map: Mapping[int, str] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> GateController:
        """Build a controller and its notifier from ``GateSettings``.

        Without *post_callback* (or without a configured channel) events
        are only logged locally.
        """
        return cls.from_config(
            settings.to_gate_config(dict(output_map) if output_map is not None else None),
            settings.to_notifier(post_callback, clock=clock),
            on_critical_stop,
            clock=clock,
        )

    # ------------------------------------------------------------------
    # Gate
    # ------------------------------------------------------------------

    async def gate(
        self,
        step: int,
        step_start_time: datetime,
        critical_question: str | None = None,
    ) -> bool:
        """Validate *step*'s output and decide whether the pipeline continues.

        Returns True to continue and False on a critical stop.  A naive
        *step_start_time* is read as local time.
        """
        duration_ms = _elapsed_ms(step_start_time, self._clock())

        result = self._validator.validate(step, self.project_root, self.output_map)
        self._results.append(
            StepRecord(step=step, validation=result, duration_ms=duration_ms)
        )
        logger.info(
            "Step %d gated: %s in %dms", step, result.severity.value, duration_ms
        )

        await self.notifier.notify(
            AgentCompleteEvent(
                step=step,
                duration_ms=duration_ms,
                output_file=self.output_map.get(step),
            )
        )

        if critical_question:
            await self.notifier.notify(
                QuestionEvent(step=step, question=critical_question)
            )

        if not result.can_continue:
            logger.warning(
                "Critical stop at step %d: %s", step, "; ".join(result.issues)
            )
            await self.notifier.notify(
                CriticalStopEvent(step=step, issues=tuple(result.issues))
            )
            if self.on_critical_stop is not None:
                self.on_critical_stop(step, result)
            return False

        if step < self.final_step:
            await self.notifier.notify(
                AutoContinueEvent(next_step=step + 1, warnings=tuple(result.warnings))
            )

        return True

    async def complete(
        self, start_step: int, end_step: int, run_start_time: datetime
    ) -> None:
        """Announce that steps *start_step*..*end_step* all passed."""
        total_ms = _elapsed_ms(run_start_time, self._clock())
        logger.info(
            "Pipeline complete: steps %d->%d in %dms", start_step, end_step, total_ms
        )
        await self.notifier.notify(
            PipelineCompleteEvent(
                start_step=start_step,
                end_step=end_step,
                total_ms=total_ms,
                report_file=self.report_file,
            )
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_results(self) -> tuple[StepRecord, ...]:
        """Return a snapshot of the step records, in call order."""
        return tuple(self._results)
