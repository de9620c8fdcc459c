"""Stepgate data models: all Pydantic v2, all frozen (immutable)."""

from stepgate.models.config import DEFAULT_OUTPUT_MAP, GateConfig
from stepgate.models.events import (
    DEFAULT_REPORT_FILE,
    EVENT_TYPE_MAP,
    AgentCompleteEvent,
    AutoContinueEvent,
    CriticalStopEvent,
    EventType,
    PipelineCompleteEvent,
    PipelineEvent,
    QuestionEvent,
    QueueEntry,
    parse_event,
)
from stepgate.models.severity import Issue, IssueKind, Severity
from stepgate.models.validation import StepRecord, ValidationPolicy, ValidationResult

__all__ = [
    # severity
    "Severity",
    "IssueKind",
    "Issue",
    # validation
    "ValidationPolicy",
    "ValidationResult",
    "StepRecord",
    # events
    "EventType",
    "PipelineEvent",
    "AgentCompleteEvent",
    "AutoContinueEvent",
    "CriticalStopEvent",
    "QuestionEvent",
    "PipelineCompleteEvent",
    "QueueEntry",
    "EVENT_TYPE_MAP",
    "DEFAULT_REPORT_FILE",
    "parse_event",
    # config
    "GateConfig",
    "DEFAULT_OUTPUT_MAP",
]
