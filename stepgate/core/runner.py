"""Sequential pipeline driver built on the gate controller.

Runs agents strictly in step order, awaiting each agent and then its
gate before the next step starts.  The run ends HALTED at the first
critical stop, or COMPLETE once every requested step has passed.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict

from stepgate.core.controller import GateController
from stepgate.models.validation import StepRecord

logger = logging.getLogger(__name__)

# An agent receives its step number and may return a question for the operator.
AgentCallable = Callable[[int], Awaitable[str | None]]


class RunState(str, Enum):
    """Driver state of one pipeline run."""

    RUNNING = "running"
    COMPLETE = "complete"
    HALTED = "halted"


VALID_RUN_TRANSITIONS: dict[RunState, set[RunState]] = {
    RunState.RUNNING: {RunState.RUNNING, RunState.COMPLETE, RunState.HALTED},
    RunState.COMPLETE: set(),  # terminal
    RunState.HALTED: set(),  # terminal
}


class MissingAgentError(RuntimeError):
    """Raised when a requested step has no registered agent."""


class AgentExecutionError(RuntimeError):
    """Raised when an agent fails before its output can be gated."""


class InvalidRunStateError(RuntimeError):
    """Raised on a run-state transition outside VALID_RUN_TRANSITIONS."""


class RunOutcome(BaseModel):
    """Summary of a finished run."""

    model_config = ConfigDict(frozen=True)

    state: RunState
    start_step: int
    end_step: int
    halted_at: int | None = None
    records: tuple[StepRecord, ...] = ()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PipelineRunner:
    """Drives agents through the gate controller one step at a time.

    Parameters
    ----------
    controller:
        Gate controller used after every step.  A runner performs a single
        run; a halted pipeline needs a new controller and runner.
    agents:
        Step number -> async agent callable.
    clock:
        Returns the current UTC time.
    """

    def __init__(
        self,
        controller: GateController,
        agents: Mapping[int, AgentCallable] | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.controller = controller
        self._agents = dict(agents or {})
        self._clock = clock or _utcnow
        self._state = RunState.RUNNING
        self._started = False

    @property
    def state(self) -> RunState:
        return self._state

    def _transition(self, target: RunState) -> None:
        if target not in VALID_RUN_TRANSITIONS[self._state]:
            raise InvalidRunStateError(
                f"Cannot transition run from {self._state.value} to {target.value}"
            )
        self._state = target

    async def run(
        self, start_step: int, end_step: int, *, validate_only: bool = False
    ) -> RunOutcome:
        """Run steps *start_step*..*end_step* inclusive.

        With ``validate_only`` no agent is invoked; the existing outputs
        are gated in order, which is how a run is checked or resumed by hand.
        """
        if self._started:
            raise InvalidRunStateError("A PipelineRunner performs a single run")
        if end_step < start_step:
            raise ValueError(f"end_step {end_step} is before start_step {start_step}")

        steps = list(range(start_step, end_step + 1))
        if not validate_only:
            missing = [step for step in steps if step not in self._agents]
            if missing:
                raise MissingAgentError(f"No agent registered for steps {missing}")

        self._started = True
        run_start = self._clock()
        logger.info("Pipeline run started: steps %d->%d", start_step, end_step)

        for step in steps:
            step_start = self._clock()
            question = None
            if not validate_only:
                question = await self._run_agent(step)

            if not await self.controller.gate(step, step_start, question):
                self._transition(RunState.HALTED)
                logger.warning("Pipeline halted at step %d", step)
                return self._outcome(start_step, end_step, halted_at=step)
            self._transition(RunState.RUNNING)

        await self.controller.complete(start_step, end_step, run_start)
        self._transition(RunState.COMPLETE)
        return self._outcome(start_step, end_step)

    async def _run_agent(self, step: int) -> str | None:
        agent = self._agents[step]
        try:
            return await agent(step)
        except Exception as exc:
            raise AgentExecutionError(f"Agent for step {step} failed: {exc}") from exc

    def _outcome(
        self, start_step: int, end_step: int, halted_at: int | None = None
    ) -> RunOutcome:
        return RunOutcome(
            state=self._state,
            start_step=start_step,
            end_step=end_step,
            halted_at=halted_at,
            records=self.controller.get_results(),
        )
