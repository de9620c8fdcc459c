"""Event-to-text formatting for pipeline notifications.

``format_event`` is total: every known event variant has a dedicated
formatter, and anything else is serialized verbatim so that unknown or
future event shapes are never dropped.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel

from stepgate.models.events import (
    EVENT_TYPE_MAP,
    AgentCompleteEvent,
    AutoContinueEvent,
    CriticalStopEvent,
    EventType,
    PipelineCompleteEvent,
    QuestionEvent,
)


def _format_agent_complete(event: AgentCompleteEvent) -> str:
    output = event.output_file or "N/A"
    return (
        f"**Agent {event.step}** completed ({event.duration_ms}ms)\n"
        f"Output: `{output}`"
    )


def _format_auto_continue(event: AutoContinueEvent) -> str:
    text = f"Auto-continuing to **Agent {event.next_step}**"
    if event.warnings:
        text += f"\nWarnings: {', '.join(event.warnings)}"
    return text


def _format_critical_stop(event: CriticalStopEvent) -> str:
    issue_lines = "\n".join(f"- {issue}" for issue in event.issues)
    return (
        f"**PIPELINE STOPPED** at Agent {event.step}\n"
        f"**Critical issues:**\n{issue_lines}\n\n"
        "@admin: pipeline requires manual intervention"
    )


def _format_question(event: QuestionEvent) -> str:
    return (
        f"**Agent {event.step} asks:** {event.question}\n"
        "_(non-blocking: pipeline continued)_"
    )


def _format_pipeline_complete(event: PipelineCompleteEvent) -> str:
    return (
        f"**Pipeline complete** (Agents {event.start_step}->{event.end_step})\n"
        f"Total: {event.total_ms}ms | Report: `{event.report_file}`"
    )


_FORMATTERS: dict[EventType, Callable[[Any], str]] = {
    EventType.AGENT_COMPLETE: _format_agent_complete,
    EventType.AUTO_CONTINUE: _format_auto_continue,
    EventType.CRITICAL_STOP: _format_critical_stop,
    EventType.QUESTION: _format_question,
    EventType.PIPELINE_COMPLETE: _format_pipeline_complete,
}

def serialize_event(event: Any) -> str:
    """Serialize an arbitrary event shape to text without raising."""
    try:
        if isinstance(event, BaseModel):
            return event.model_dump_json()
        return json.dumps(event, default=str, sort_keys=True)
    except (TypeError, ValueError):
        # Circular or otherwise unserializable structures.
        return repr(event)


def format_event(event: Any) -> str:
    """Render *event* as a human-readable chat message."""
    event_type = getattr(event, "event_type", None)
    formatter = _FORMATTERS.get(event_type) if isinstance(event_type, EventType) else None
    if formatter is not None and isinstance(event, EVENT_TYPE_MAP[event_type]):
        return formatter(event)
    return f"Pipeline event: {serialize_event(event)}"
