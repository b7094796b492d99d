"""Tests for the sequential orchestrator."""
import pytest

from sk_gov_labs.errors import OrchestrationError
from sk_gov_labs.orchestration import SequentialOrchestrator, build_step_input
from sk_gov_labs.thread import ConversationThread

from .conftest import FakeAgent


def test_build_step_input():
    assert build_step_input("task") == "task"
    assert build_step_input("task", "Writer", "draft") == "Task: task\n\nOutput from Writer:\ndraft"


class TestSequentialOrchestrator:
    def test_needs_agents(self) -> None:
        with pytest.raises(OrchestrationError):
            SequentialOrchestrator([])

    async def test_empty_task(self) -> None:
        with pytest.raises(OrchestrationError):
            await SequentialOrchestrator([FakeAgent("A")]).run("  ")

    async def test_output_flows_to_next_agent(self) -> None:
        writer = FakeAgent("Writer", "a tagline")
        reviewer = FakeAgent("Reviewer", lambda msg: "review of " + msg.splitlines()[-1])
        thread = ConversationThread()

        result = await SequentialOrchestrator([writer, reviewer]).run("Write a tagline", thread=thread)

        assert writer.received == ["Write a tagline"]
        assert "Output from Writer:\na tagline" in reviewer.received[0]
        assert result.success
        assert result.final_output == "review of a tagline"
        assert [s.agent_name for s in result.steps] == ["Writer", "Reviewer"]
        assert all(s.finished_at is not None for s in result.steps)
        assert [m.author for m in thread] == ["User", "Writer", "Reviewer"]
        assert result.finished_at is not None

    async def test_stops_on_failure(self) -> None:
        failing = FakeAgent("Writer", error=RuntimeError("429 Too Many Requests"))
        reviewer = FakeAgent("Reviewer")

        result = await SequentialOrchestrator([failing, reviewer]).run("task")

        assert not result.success
        assert len(result.steps) == 1
        assert "429" in result.steps[0].error
        assert reviewer.received == []
        assert result.final_output == ""

    async def test_continue_after_failure(self) -> None:
        writer = FakeAgent("Writer", "draft")
        broken = FakeAgent("Editor", error=RuntimeError("boom"))
        reviewer = FakeAgent("Reviewer", "looks good")

        result = await SequentialOrchestrator([writer, broken, reviewer], stop_on_failure=False).run("task")

        assert not result.success
        assert [s.success for s in result.steps] == [True, False, True]
        assert "Output from Writer:\ndraft" in reviewer.received[0]
        assert result.final_output == "looks good"
        assert [s.agent_name for s in result.failed_steps] == ["Editor"]

    async def test_timeout_is_a_failed_step(self) -> None:
        slow = FakeAgent("Slow", "late", delay=0.5)

        result = await SequentialOrchestrator([slow], timeout=0.05).run("task")

        assert not result.success
        assert "timed out" in result.steps[0].error

    async def test_on_step_callback(self) -> None:
        seen = []
        orchestrator = SequentialOrchestrator(
            [FakeAgent("A", "1"), FakeAgent("B", "2")], on_step=lambda s: seen.append(s.agent_name)
        )

        await orchestrator.run("task")

        assert seen == ["A", "B"]
