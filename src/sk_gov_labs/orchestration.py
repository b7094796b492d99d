"""
Orchestration labs.

`SequentialOrchestrator` is a small hand-written pipeline: each agent receives
the task plus the previous agent's output. `run_group_chat` hands the
conversation to Semantic Kernel's `GroupChatOrchestration` and only records
what happens.
"""
import asyncio
import contextlib
from typing import Any, Callable, List, Optional, Sequence

from semantic_kernel.agents import GroupChatOrchestration
from semantic_kernel.agents.orchestration.group_chat import GroupChatManager
from semantic_kernel.agents.runtime import InProcessRuntime
from semantic_kernel.contents import ChatMessageContent

from .agents import agent_name, get_response
from .console import log_info, log_section, log_warning
from .errors import AgentInvocationError, LabError, OrchestrationError
from .models import OrchestrationResult, OrchestrationStep, utc_now
from .thread import ConversationThread

StepCallback = Callable[[OrchestrationStep], None]


def build_step_input(task: str, previous_agent: Optional[str] = None, previous_output: Optional[str] = None) -> str:
    if not previous_agent:
        return task
    return f"Task: {task}\n\nOutput from {previous_agent}:\n{previous_output}"


class SequentialOrchestrator:
    def __init__(
        self,
        agents: Sequence[Any],
        *,
        timeout: float = 60.0,
        stop_on_failure: bool = True,
        on_step: Optional[StepCallback] = None,
    ):
        if not agents:
            raise OrchestrationError("SequentialOrchestrator needs at least one agent.")
        self.agents = list(agents)
        self.timeout = timeout
        self.stop_on_failure = stop_on_failure
        self.on_step = on_step

    async def _run_step(self, agent: Any, step: OrchestrationStep) -> None:
        try:
            output = await asyncio.wait_for(get_response(agent, step.input), timeout=self.timeout)
        except asyncio.TimeoutError:
            step.finish(error=f"timed out after {self.timeout:g}s")
        except AgentInvocationError as e:
            step.finish(error=str(e))
        else:
            step.finish(output=output)

    async def run(self, task: str, thread: Optional[ConversationThread] = None) -> OrchestrationResult:
        if not task or not task.strip():
            raise OrchestrationError("Task must not be empty.")
        thread = thread if thread is not None else ConversationThread()
        thread.add_user(task)
        result = OrchestrationResult(task=task)

        previous_agent: Optional[str] = None
        previous_output: Optional[str] = None
        for agent in self.agents:
            name = agent_name(agent)
            step = OrchestrationStep(agent_name=name, input=build_step_input(task, previous_agent, previous_output))
            log_info(f"▶️ {name} is working…")
            await self._run_step(agent, step)
            result.steps.append(step)
            if self.on_step is not None:
                self.on_step(step)

            if step.success:
                thread.add_agent(name, step.output)
                log_section(f"🤖 {name}", step.output, markdown=True, border="agent")
                previous_agent, previous_output = name, step.output
            else:
                log_warning(f"{name} failed: {step.error}")
                if self.stop_on_failure:
                    break

        result.final_output = previous_output or ""
        result.success = bool(result.steps) and not result.failed_steps and len(result.steps) == len(self.agents)
        result.finished_at = utc_now()
        return result


async def run_group_chat(
    agents: Sequence[Any],
    manager: GroupChatManager,
    task: str,
    *,
    timeout: float = 120.0,
    thread: Optional[ConversationThread] = None,
) -> OrchestrationResult:
    """Run SK's group chat orchestration and record every agent response.

    Each agent response becomes a successful `OrchestrationStep`; the step
    input is the message that preceded it in the thread.
    """
    if not agents:
        raise OrchestrationError("Group chat needs at least one agent.")
    thread = thread if thread is not None else ConversationThread()
    thread.add_user(task)
    result = OrchestrationResult(task=task)

    def record(message: ChatMessageContent) -> None:
        name = message.name or "Assistant"
        content = message.content or ""
        previous = thread.last()
        step = OrchestrationStep(agent_name=name, input=previous.content if previous else task)
        result.steps.append(step.finish(output=content))
        thread.add_agent(name, content)
        log_section(f"🤖 {name}", content, markdown=True, border="agent")

    async def on_response(message) -> None:
        messages: List[ChatMessageContent] = message if isinstance(message, list) else [message]
        for m in messages:
            record(m)

    orchestration = GroupChatOrchestration(
        members=list(agents),
        manager=manager,
        agent_response_callback=on_response,
    )

    runtime = InProcessRuntime()
    runtime.start()
    try:
        invocation = await orchestration.invoke(task=task, runtime=runtime)
        try:
            final = await invocation.get(timeout=timeout)
        except asyncio.TimeoutError as e:
            # get() only stops waiting; the chat keeps running until cancelled
            with contextlib.suppress(RuntimeError):
                invocation.cancel()
            raise OrchestrationError(f"Group chat did not finish within {timeout:g}s") from e
    except LabError:
        await runtime.stop()
        raise
    except Exception as e:
        await runtime.stop()
        raise OrchestrationError(f"Group chat failed: {e}") from e
    await runtime.stop_when_idle()

    if isinstance(final, ChatMessageContent):
        result.final_output = final.content or ""
    else:
        result.final_output = str(final) if final is not None else ""
    result.success = bool(result.final_output)
    result.finished_at = utc_now()
    return result
