"""In-memory conversation thread shared by the orchestration labs."""
from typing import Iterable, List, Optional

from semantic_kernel.contents import AuthorRole, ChatHistory, ChatMessageContent

from .models import ThreadMessage

USER = "user"
ASSISTANT = "assistant"


class ConversationThread:
    """Ordered list of messages for a single run.

    `max_messages` caps the thread; the oldest messages are dropped first.
    Sequence numbers keep increasing so dropped messages leave a gap.
    """

    def __init__(self, max_messages: Optional[int] = None):
        if max_messages is not None and max_messages < 1:
            raise ValueError("max_messages must be at least 1")
        self.max_messages = max_messages
        self._messages: List[ThreadMessage] = []
        self._next_sequence = 1

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self):
        return iter(list(self._messages))

    @property
    def messages(self) -> List[ThreadMessage]:
        return list(self._messages)

    def add(self, author: str, content: str, role: str = ASSISTANT) -> ThreadMessage:
        msg = ThreadMessage(author=author, content=content or "", role=role, sequence=self._next_sequence)
        self._next_sequence += 1
        self._messages.append(msg)
        if self.max_messages is not None and len(self._messages) > self.max_messages:
            del self._messages[: len(self._messages) - self.max_messages]
        return msg

    def add_user(self, content: str, author: str = "User") -> ThreadMessage:
        return self.add(author, content, role=USER)

    def add_agent(self, agent_name: str, content: str) -> ThreadMessage:
        return self.add(agent_name, content, role=ASSISTANT)

    def last(self, author: Optional[str] = None) -> Optional[ThreadMessage]:
        for msg in reversed(self._messages):
            if author is None or msg.author == author:
                return msg
        return None

    def by_author(self, author: str) -> List[ThreadMessage]:
        return [m for m in self._messages if m.author == author]

    def transcript(self) -> str:
        return "\n".join(f"{m.author}: {m.content}" for m in self._messages)

    def clear(self) -> None:
        self._messages.clear()

    def to_chat_history(self, system_message: Optional[str] = None) -> ChatHistory:
        history = ChatHistory(system_message=system_message) if system_message else ChatHistory()
        for m in self._messages:
            role = AuthorRole.USER if m.role == USER else AuthorRole.ASSISTANT
            history.add_message(ChatMessageContent(role=role, content=m.content, name=m.author))
        return history

    @classmethod
    def from_chat_history(cls, history: Iterable[ChatMessageContent], max_messages: Optional[int] = None) -> "ConversationThread":
        thread = cls(max_messages=max_messages)
        messages = history.messages if isinstance(history, ChatHistory) else history
        for m in messages:
            if m.role == AuthorRole.SYSTEM:
                continue
            role = USER if m.role == AuthorRole.USER else ASSISTANT
            author = m.name or ("User" if role == USER else "Assistant")
            thread.add(author, m.content or "", role=role)
        return thread
