"""End-to-end gate scenarios: validator, controller, and notifier working together."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

from stepgate.core.controller import GateController
from stepgate.core.runner import PipelineRunner, RunState
from stepgate.models.config import DEFAULT_OUTPUT_MAP
from stepgate.models.events import EventType
from stepgate.models.severity import Severity
from stepgate.routing.notifier import NotificationSink


class _ChatChannel:
    """Stands in for a chat transport; fails on demand."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.messages: list[str] = []

    async def post(self, channel_id: str, message: str) -> None:
        if self.fail:
            raise ConnectionError("gateway 502")
        self.messages.append(message)


class TestEndToEndScenarios:
    def test_missing_output_halts_pipeline(self, project_root: Path, notifier, clock):
        stops: list[tuple[int, Severity]] = []
        controller = GateController(
            project_root,
            {1: "out1.json"},
            notifier,
            lambda step, result: stops.append((step, result.severity)),
            clock=clock,
        )

        assert asyncio.run(controller.gate(1, clock.now)) is False
        assert stops == [(1, Severity.CRITICAL)]

    def test_empty_object_blocks(self, project_root: Path, write_output, notifier, clock):
        write_output("out1.json", "{}")
        controller = GateController(project_root, {1: "out1.json"}, notifier, clock=clock)

        assert asyncio.run(controller.gate(1, clock.now)) is False
        result = controller.get_results()[0].validation
        assert result.can_continue is False
        assert any("0 keys/items" in issue for issue in result.issues)

    def test_small_output_continues_with_warning(self, project_root: Path, write_output, notifier, clock):
        write_output("out1.json", '{"a":1}')
        controller = GateController(project_root, {1: "out1.json"}, notifier, clock=clock)

        assert asyncio.run(controller.gate(1, clock.now)) is True
        result = controller.get_results()[0].validation
        assert result.can_continue is True
        assert result.severity == Severity.WARNING
        assert len(result.issues) == 1

        auto = [e.event for e in notifier.get_queue() if e.event.event_type == EventType.AUTO_CONTINUE]
        assert len(auto) == 1
        assert auto[0].warnings == tuple(result.issues)
        assert "very small" in notifier.get_queue()[-1].message

    def test_valid_output_auto_continues(self, project_root: Path, write_output, notifier, clock):
        write_output("out2.json", json.dumps({"categories": ["a", "b", "c"], "balanced": True}))
        controller = GateController(project_root, {2: "out2.json"}, notifier, clock=clock)

        assert asyncio.run(controller.gate(2, clock.now)) is True
        types = [e.event.event_type for e in notifier.get_queue()]
        assert types == [EventType.AGENT_COMPLETE, EventType.AUTO_CONTINUE]


class TestFullPipeline:
    def test_standard_pipeline_with_flaky_channel(self, project_root: Path, write_output, clock, recording_log):
        """A full 0->7 run completes even when every chat post fails."""
        channel = _ChatChannel(fail=True)
        notifier = NotificationSink("pipeline-public", channel.post, recording_log, clock=clock)
        controller = GateController(project_root, DEFAULT_OUTPUT_MAP, notifier, clock=clock)

        async def _agent(step: int) -> str | None:
            clock.advance(100)
            relative = DEFAULT_OUTPUT_MAP[step]
            if relative.endswith(".html"):
                write_output(relative, "<html><head></head><body>" + "<div>row</div>" * 20 + "</body></html>")
            else:
                write_output(relative, json.dumps({"step": step, "items": list(range(20))}))
            return "Confirm category naming?" if step == 2 else None

        runner = PipelineRunner(controller, {step: _agent for step in DEFAULT_OUTPUT_MAP}, clock=clock)
        outcome = asyncio.run(runner.run(0, 7))

        assert outcome.state == RunState.COMPLETE
        assert [r.step for r in outcome.records] == list(range(8))
        assert all(r.validation.severity == Severity.OK for r in outcome.records)

        queue = notifier.get_queue()
        types = [e.event.event_type for e in queue]
        assert types.count(EventType.AGENT_COMPLETE) == 8
        assert types.count(EventType.AUTO_CONTINUE) == 7
        assert types.count(EventType.QUESTION) == 1
        assert types[-1] == EventType.PIPELINE_COMPLETE
        assert queue[-1].event.total_ms == 800
        assert not any(e.delivered for e in queue)
        assert len(recording_log.warnings) == len(queue)
        assert channel.messages == []

    def test_delivered_messages_reach_channel_in_order(self, project_root: Path, write_output, clock, recording_log):
        channel = _ChatChannel()
        notifier = NotificationSink("pipeline-public", channel.post, recording_log, clock=clock)
        write_output("a.json", json.dumps({"k": list(range(30))}))
        controller = GateController(
            project_root, {1: "a.json", 2: "b.json"}, notifier, final_step=2, clock=clock
        )

        outcome = asyncio.run(PipelineRunner(controller, clock=clock).run(1, 2, validate_only=True))

        assert outcome.state == RunState.HALTED
        assert outcome.halted_at == 2
        assert len(channel.messages) == 4
        assert "Agent 1" in channel.messages[0]
        assert "Auto-continuing to **Agent 2**" in channel.messages[1]
        assert channel.messages[3].startswith("**PIPELINE STOPPED** at Agent 2")
        assert "Output file missing: b.json" in channel.messages[3]
        assert recording_log.warnings == []
