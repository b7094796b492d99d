"""Tests for the sample plugins."""
import time
from datetime import datetime

from sk_gov_labs.memory import SemanticMemoryStore
from sk_gov_labs.plugins import MathPlugin, MemoryPlugin, SearchOnline, TimePlugin, default_plugins

from .conftest import BrokenEmbeddingService


class FixedClock:
    def __call__(self) -> datetime:
        return datetime(2024, 3, 1, 9, 30, 0)


class TestTimePlugin:
    def test_today_and_now(self) -> None:
        plugin = TimePlugin(clock=FixedClock())

        assert plugin.today() == "2024-03-01"
        assert plugin.now() == "2024-03-01 09:30:00"

    def test_days_until(self) -> None:
        plugin = TimePlugin(clock=FixedClock())

        assert plugin.days_until("2024-03-11") == "10"
        assert plugin.days_until("2024-02-29") == "-1"

    def test_days_until_invalid(self) -> None:
        assert "not a valid date" in TimePlugin().days_until("next week")


class TestMathPlugin:
    def test_operations(self) -> None:
        math = MathPlugin()

        assert math.add(2, 3) == 5
        assert math.subtract(2, 3) == -1
        assert math.multiply(2, 3) == 6
        assert math.divide(3, 2) == "1.5"

    def test_divide_by_zero(self) -> None:
        assert MathPlugin().divide(1, 0) == "Cannot divide by zero."


class FakeTavily:
    def __init__(self, response=None, error=None, delay=0.0):
        self.response = response or {}
        self.error = error
        self.delay = delay
        self.queries = []

    def search(self, query, max_results, search_depth):
        self.queries.append(query)
        if self.delay:
            time.sleep(self.delay)
        if self.error:
            raise self.error
        return self.response


class TestSearchOnline:
    async def test_formats_results(self) -> None:
        client = FakeTavily(
            {"results": [{"title": "Azure Gov", "url": "https://example.gov", "content": "Isolated cloud."}]}
        )

        out = await SearchOnline(client).search_online("azure government")

        assert "**Azure Gov**" in out
        assert "Source: https://example.gov" in out
        assert client.queries == ["azure government"]

    async def test_no_results(self) -> None:
        out = await SearchOnline(FakeTavily({"results": []})).search_online("x")

        assert out == "No results were found for the search."

    async def test_error_is_reported_as_text(self) -> None:
        out = await SearchOnline(FakeTavily(error=RuntimeError("down"))).search_online("x")

        assert out == "Could not retrieve online information at this time."

    async def test_timeout(self) -> None:
        out = await SearchOnline(FakeTavily(delay=0.3), timeout=0.05).search_online("x")

        assert out == "The search service took too long to respond."


class TestMemoryPlugin:
    async def test_save_and_recall(self, embedding_service) -> None:
        plugin = MemoryPlugin(SemanticMemoryStore(embedding_service), min_relevance=0.5)

        assert await plugin.save_memory("azure is the cloud") == "OK: fact stored"
        assert await plugin.save_memory("kernel runs plugins") == "OK: fact stored"
        recalled = await plugin.recall("azure")

        assert "azure is the cloud" in recalled
        assert "kernel runs plugins" not in recalled

    async def test_empty_fact(self, embedding_service) -> None:
        plugin = MemoryPlugin(SemanticMemoryStore(embedding_service))

        assert await plugin.save_memory("  ") == "Ignored: empty fact."

    async def test_nothing_stored(self, embedding_service) -> None:
        plugin = MemoryPlugin(SemanticMemoryStore(embedding_service))

        assert await plugin.recall("azure") == "Nothing relevant is stored in memory."

    async def test_save_reports_service_failure(self) -> None:
        plugin = MemoryPlugin(SemanticMemoryStore(BrokenEmbeddingService()))

        assert await plugin.save_memory("azure is the cloud") == "Could not save that fact."

    async def test_recall_reports_service_failure(self, embedding_service) -> None:
        store = SemanticMemoryStore(embedding_service)
        plugin = MemoryPlugin(store)
        assert await plugin.save_memory("azure is the cloud") == "OK: fact stored"
        store._embedding_service = BrokenEmbeddingService(RuntimeError("429 Too Many Requests"))

        assert await plugin.recall("azure") == "Memory is unavailable right now."


def test_default_plugins(embedding_service) -> None:
    plugins = default_plugins(store=SemanticMemoryStore(embedding_service))

    assert set(plugins) == {"time", "math", "memory"}
