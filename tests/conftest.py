"""Shared fakes for the lab tests. Nothing here talks to Azure."""
import asyncio
from types import SimpleNamespace
from typing import Callable, Dict, List, Optional, Sequence, Union

import pytest

from sk_gov_labs.config import LabSettings


class FakeAgent:
    """Stands in for a `ChatCompletionAgent`: records inputs, yields a reply."""

    def __init__(
        self,
        name: str,
        reply: Union[str, Callable[[str], str], None] = "ok",
        *,
        chunks: Optional[List[str]] = None,
        delay: float = 0.0,
        error: Optional[Exception] = None,
    ):
        self.name = name
        self._reply = reply
        self._chunks = chunks
        self._delay = delay
        self._error = error
        self.received: List[str] = []
        self.threads: List[object] = []

    async def invoke(self, messages, thread=None):
        self.received.append(messages)
        self.threads.append(thread)
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error is not None:
            raise self._error
        if self._chunks is not None:
            for chunk in self._chunks:
                yield SimpleNamespace(content=chunk)
            return
        text = self._reply(messages) if callable(self._reply) else self._reply
        yield SimpleNamespace(content=text)


class FakeEmbeddingService:
    """Embeds text as keyword counts over a fixed vocabulary."""

    def __init__(self, vocabulary: Sequence[str] = ("azure", "kernel", "memory", "agent")):
        self.vocabulary = list(vocabulary)
        self.calls: List[List[str]] = []

    async def generate_embeddings(self, texts: List[str]) -> List[List[float]]:
        self.calls.append(list(texts))
        vectors = []
        for text in texts:
            words = text.lower().replace(".", " ").replace("?", " ").split()
            vec = [float(words.count(term)) for term in self.vocabulary]
            vec.append(0.01)
            vectors.append(vec)
        return vectors


class BrokenEmbeddingService:
    """Embedding service whose every call fails, like an expired key."""

    def __init__(self, error: Exception = RuntimeError("401 Unauthorized")):
        self.error = error

    async def generate_embeddings(self, texts: List[str]) -> List[List[float]]:
        raise self.error


@pytest.fixture
def settings(tmp_path) -> LabSettings:
    return LabSettings(
        endpoint="https://lab-resource.openai.azure.us/",
        api_key="test-key-123456",
        output_dir=str(tmp_path / "out"),
        timeout_seconds=5.0,
    )


@pytest.fixture
def embedding_service() -> FakeEmbeddingService:
    return FakeEmbeddingService()


@pytest.fixture
def env() -> Dict[str, str]:
    return {
        "AZURE_OPENAI_ENDPOINT": "https://lab-resource.openai.azure.us/",
        "AZURE_OPENAI_KEY": "secret-key-value",
    }
