"""
Lab agents and the helper that talks to them.

All agents are plain `ChatCompletionAgent`s: a name, a description used by the
group chat manager, a system prompt, and a kernel carrying the Azure OpenAI
chat service (plus plugins where the agent needs them).
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from semantic_kernel import Kernel
from semantic_kernel.agents import ChatCompletionAgent

from .errors import AgentInvocationError

APPROVAL_KEYWORD = "APPROVED"

RESEARCHER_INSTRUCTIONS = (
    "You are a research agent. Collect concise, factual background for the task. "
    "Use the available tools when current information is needed and cite sources. "
    "Keep your answer short and scannable. Always respond in English."
)

WRITER_INSTRUCTIONS = (
    "You are a writer. Turn the task and any notes in the conversation into a clear, "
    "well-structured draft. When a reviewer gives feedback, revise the whole draft. "
    "Always respond in English."
)

REVIEWER_INSTRUCTIONS = (
    "You are a reviewer. Check the latest draft for accuracy, clarity and completeness. "
    "If it needs changes, list them briefly. "
    f"If it is ready, reply with the single word {APPROVAL_KEYWORD} and nothing else."
)


def agent_name(agent: Any) -> str:
    return getattr(agent, "name", None) or type(agent).__name__


async def get_response(agent: Any, message: Any, thread: Any = None) -> str:
    """Aggregate the full response from `agent.invoke` into one string.

    Raises `AgentInvocationError` when the call fails or produces no text.
    """
    parts: List[str] = []
    try:
        async for resp in agent.invoke(messages=message, thread=thread):
            if resp and getattr(resp, "content", None):
                parts.append(str(resp.content))
    except AgentInvocationError:
        raise
    except Exception as e:
        raise AgentInvocationError(agent_name(agent), f"invocation failed: {e}") from e

    text = "".join(parts).strip()
    if not text:
        raise AgentInvocationError(agent_name(agent), "returned an empty response")
    return text


def agent_kernel(kernel: Kernel) -> Kernel:
    """Copy of `kernel` sharing its services, plugins and filters.

    Agents register their own plugins on the kernel they are given, so each
    agent needs its own copy to keep those plugins private.
    """
    return Kernel(
        services=dict(kernel.services),
        plugins=dict(kernel.plugins),
        function_invocation_filters=list(kernel.function_invocation_filters),
    )


def build_lab_agents(kernel: Kernel, research_plugins: Optional[List[Any]] = None) -> Dict[str, ChatCompletionAgent]:
    """Researcher, Writer and Reviewer, each on its own copy of `kernel`.

    `research_plugins` (for example the Tavily `SearchOnline` plugin) are only
    given to the Researcher.
    """
    today = datetime.now().strftime("%Y-%m-%d")

    researcher = ChatCompletionAgent(
        kernel=agent_kernel(kernel),
        name="Researcher",
        description="Collects background facts and sources for the task.",
        instructions=f"{RESEARCHER_INSTRUCTIONS} Current date: {today}.",
        plugins=research_plugins or None,
    )
    writer = ChatCompletionAgent(
        kernel=agent_kernel(kernel),
        name="Writer",
        description="Drafts and revises the deliverable.",
        instructions=WRITER_INSTRUCTIONS,
    )
    reviewer = ChatCompletionAgent(
        kernel=agent_kernel(kernel),
        name="Reviewer",
        description=f"Reviews drafts and answers {APPROVAL_KEYWORD} when they are ready.",
        instructions=REVIEWER_INSTRUCTIONS,
    )
    return {"researcher": researcher, "writer": writer, "reviewer": reviewer}


def build_chat_agent(kernel: Kernel) -> ChatCompletionAgent:
    """Single assistant for the interactive chat lab; uses the kernel's plugins."""
    return ChatCompletionAgent(
        kernel=kernel,
        name="Assistant",
        description="General lab assistant.",
        instructions=(
            "You are a helpful assistant running in Azure Government. "
            "Use the time, math, search and memory tools when they help. "
            "Answer concisely. Always respond in English."
        ),
    )
