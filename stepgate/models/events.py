"""Pipeline notification events.

The event family is closed: every event is a frozen Pydantic model whose
``event_type`` identifies its variant.  ``EVENT_TYPE_MAP`` rebuilds an
event from its serialized form.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_REPORT_FILE = "trust-debt-report.html"


class EventType(str, Enum):
    """The five pipeline event variants."""

    AGENT_COMPLETE = "agent_complete"
    AUTO_CONTINUE = "auto_continue"
    CRITICAL_STOP = "critical_stop"
    QUESTION = "question"
    PIPELINE_COMPLETE = "pipeline_complete"


class PipelineEvent(BaseModel):
    """Base for every event routed through the notification sink."""

    model_config = ConfigDict(frozen=True)

    event_type: EventType


class AgentCompleteEvent(PipelineEvent):
    """A step finished and its output was validated."""

    event_type: EventType = EventType.AGENT_COMPLETE
    step: int
    duration_ms: int
    output_file: str | None = None


class AutoContinueEvent(PipelineEvent):
    """The gate passed and the pipeline proceeds to the next step."""

    event_type: EventType = EventType.AUTO_CONTINUE
    next_step: int
    warnings: tuple[str, ...] = ()


class CriticalStopEvent(PipelineEvent):
    """The gate halted the pipeline."""

    event_type: EventType = EventType.CRITICAL_STOP
    step: int
    issues: tuple[str, ...] = ()


class QuestionEvent(PipelineEvent):
    """A step raised a question for asynchronous human attention."""

    event_type: EventType = EventType.QUESTION
    step: int
    question: str


class PipelineCompleteEvent(PipelineEvent):
    """Every requested step passed its gate."""

    event_type: EventType = EventType.PIPELINE_COMPLETE
    start_step: int
    end_step: int
    total_ms: int
    report_file: str = DEFAULT_REPORT_FILE


EVENT_TYPE_MAP: dict[EventType, type[PipelineEvent]] = {
    EventType.AGENT_COMPLETE: AgentCompleteEvent,
    EventType.AUTO_CONTINUE: AutoContinueEvent,
    EventType.CRITICAL_STOP: CriticalStopEvent,
    EventType.QUESTION: QuestionEvent,
    EventType.PIPELINE_COMPLETE: PipelineCompleteEvent,
}


def parse_event(data: dict[str, Any]) -> PipelineEvent:
    """Rebuild a typed event from its ``model_dump`` form.

    Raises
    ------
    ValueError
        If ``event_type`` is absent or not a known variant.
    """
    try:
        event_type = EventType(data["event_type"])
    except KeyError:
        raise ValueError("Event data has no 'event_type'") from None
    return EVENT_TYPE_MAP[event_type].model_validate(data)


class QueueEntry(BaseModel):
    """One notified event, kept regardless of delivery outcome."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    event: Any
    message: str
    timestamp_utc: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    delivered: bool = False
