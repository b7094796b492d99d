"""Tests for the plain run records."""
from datetime import timedelta

from sk_gov_labs.models import ChatMessage, OrchestrationResult, OrchestrationStep


def test_chat_message_to_dict():
    msg = ChatMessage(author="Writer", content="hello")
    data = msg.to_dict()

    assert data["author"] == "Writer"
    assert data["role"] == "assistant"
    assert data["timestamp"].endswith("+00:00")
    assert len(data["id"]) == 12


def test_ids_are_unique():
    assert ChatMessage("a", "b").id != ChatMessage("a", "b").id


def test_step_finish_success():
    step = OrchestrationStep(agent_name="Writer", input="task")
    assert step.duration_seconds is None

    step.finish(output="draft")

    assert step.success
    assert step.output == "draft"
    assert step.duration_seconds >= 0


def test_step_finish_error():
    step = OrchestrationStep(agent_name="Writer", input="task").finish(error="boom")

    assert not step.success
    assert step.error == "boom"


def test_step_duration():
    step = OrchestrationStep(agent_name="A", input="x")
    step.finished_at = step.started_at + timedelta(seconds=2.5)

    assert step.duration_seconds == 2.5


def test_result_failed_steps_and_dict():
    ok = OrchestrationStep(agent_name="A", input="x").finish(output="y")
    bad = OrchestrationStep(agent_name="B", input="y").finish(error="nope")
    result = OrchestrationResult(task="x", steps=[ok, bad])

    assert result.failed_steps == [bad]
    data = result.to_dict()
    assert [s["agent_name"] for s in data["steps"]] == ["A", "B"]
    assert data["finished_at"] is None
