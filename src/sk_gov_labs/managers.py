"""
Sample group chat managers for the multi-agent lab.

Both managers subclass Semantic Kernel's `GroupChatManager`, which drives the
actual conversation. They only decide who speaks next, when to stop, and which
message is returned as the result.
"""
from typing import List, Optional

from semantic_kernel.agents.orchestration.group_chat import (
    BooleanResult,
    GroupChatManager,
    MessageResult,
    StringResult,
)
from semantic_kernel.contents import AuthorRole, ChatHistory, ChatMessageContent

from .agents import APPROVAL_KEYWORD
from .errors import OrchestrationError


def agent_messages(chat_history: ChatHistory) -> List[ChatMessageContent]:
    return [m for m in chat_history.messages if m.role == AuthorRole.ASSISTANT]


class SequentialTurnManager(GroupChatManager):
    """Participants speak in the order they were registered.

    The chat ends once `max_responses` agent messages have been produced, or
    when the base class round cap (`max_rounds`) is hit.
    """

    max_responses: int = 6
    turn_index: int = 0

    def reset(self) -> None:
        self.turn_index = 0
        self.current_round = 0

    async def should_request_user_input(self, chat_history: ChatHistory) -> BooleanResult:
        return BooleanResult(result=False, reason="This lab runs without user input.")

    async def should_terminate(self, chat_history: ChatHistory) -> BooleanResult:
        base = await super().should_terminate(chat_history)
        if base.result:
            return base
        count = len(agent_messages(chat_history))
        if count >= self.max_responses:
            return BooleanResult(result=True, reason=f"Reached {count} agent responses.")
        return BooleanResult(result=False, reason=f"{count} of {self.max_responses} responses so far.")

    async def select_next_agent(self, chat_history: ChatHistory, participant_descriptions: dict) -> StringResult:
        participants = list(participant_descriptions.keys())
        if not participants:
            raise OrchestrationError("Group chat has no participants.")
        name = participants[self.turn_index % len(participants)]
        self.turn_index += 1
        return StringResult(result=name, reason=f"Turn {self.turn_index}: {name} is next in order.")

    async def filter_results(self, chat_history: ChatHistory) -> MessageResult:
        messages = agent_messages(chat_history)
        if not messages:
            raise OrchestrationError("No agent produced a message.")
        return MessageResult(result=messages[-1], reason="Last agent message.")


class KeywordTerminationManager(SequentialTurnManager):
    """Sequential turns that stop when an agent says the magic keyword.

    The keyword is matched against the most recent agent message only. The
    result is the last message that is not an approval, which is normally the
    draft being approved.
    """

    keyword: str = APPROVAL_KEYWORD
    case_sensitive: bool = False
    max_responses: int = 10

    def contains_keyword(self, content: Optional[str]) -> bool:
        if not content:
            return False
        if self.case_sensitive:
            return self.keyword in content
        return self.keyword.lower() in content.lower()

    async def should_terminate(self, chat_history: ChatHistory) -> BooleanResult:
        messages = agent_messages(chat_history)
        if messages and self.contains_keyword(messages[-1].content):
            self.current_round += 1
            name = messages[-1].name or "an agent"
            return BooleanResult(result=True, reason=f"{name} said {self.keyword}.")
        return await super().should_terminate(chat_history)

    async def filter_results(self, chat_history: ChatHistory) -> MessageResult:
        messages = agent_messages(chat_history)
        if not messages:
            raise OrchestrationError("No agent produced a message.")
        for m in reversed(messages):
            if not self.contains_keyword(m.content):
                return MessageResult(result=m, reason="Last message before approval.")
        return MessageResult(result=messages[-1], reason="Only approvals were found.")
