"""Package init for `sk_gov_labs`.

Runnable lab programs built on Semantic Kernel and Azure OpenAI in Azure
Government: plugins, invocation filters, semantic memory, sample group chat
managers and a sequential orchestrator. The CLI lives in `main.py`.
"""
from .errors import (
    AgentInvocationError,
    ConfigurationError,
    FunctionBlockedError,
    LabError,
    MemoryStoreError,
    OrchestrationError,
)
from .models import ChatMessage, OrchestrationResult, OrchestrationStep, ThreadMessage
from .thread import ConversationThread

__version__ = "0.1.0"

__all__ = [
    "AgentInvocationError",
    "ChatMessage",
    "ConfigurationError",
    "ConversationThread",
    "FunctionBlockedError",
    "LabError",
    "MemoryStoreError",
    "OrchestrationError",
    "OrchestrationResult",
    "OrchestrationStep",
    "ThreadMessage",
]
