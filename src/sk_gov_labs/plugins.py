"""
Sample plugins exposed to the agents.

Plugin functions never raise into the model: failures are logged and turned
into a short sentence the model can relay to the user.
"""
import asyncio
from datetime import date, datetime
from typing import Annotated, Any, Callable, Dict, Optional

from semantic_kernel.functions import kernel_function
from tavily import TavilyClient

from .console import log_error, log_info, log_section, log_warning
from .errors import MemoryStoreError
from .memory import SemanticMemoryStore


# =========================
# Time
# =========================
class TimePlugin:
    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._clock = clock

    @kernel_function(description="Returns today's date in ISO format (YYYY-MM-DD).")
    def today(self) -> str:
        return self._clock().date().isoformat()

    @kernel_function(description="Returns the current local date and time.")
    def now(self) -> str:
        return self._clock().strftime("%Y-%m-%d %H:%M:%S")

    @kernel_function(description="Counts the days from today until the given date.")
    def days_until(self, target: Annotated[str, "Date in YYYY-MM-DD format"]) -> str:
        try:
            when = date.fromisoformat(target.strip())
        except ValueError:
            return f"'{target}' is not a valid date; use YYYY-MM-DD."
        delta = (when - self._clock().date()).days
        return str(delta)


# =========================
# Math
# =========================
class MathPlugin:
    @kernel_function(description="Adds two numbers.")
    def add(self, a: Annotated[float, "First number"], b: Annotated[float, "Second number"]) -> float:
        return a + b

    @kernel_function(description="Subtracts b from a.")
    def subtract(self, a: Annotated[float, "Minuend"], b: Annotated[float, "Subtrahend"]) -> float:
        return a - b

    @kernel_function(description="Multiplies two numbers.")
    def multiply(self, a: Annotated[float, "First factor"], b: Annotated[float, "Second factor"]) -> float:
        return a * b

    @kernel_function(description="Divides a by b.")
    def divide(self, a: Annotated[float, "Dividend"], b: Annotated[float, "Divisor"]) -> str:
        if b == 0:
            return "Cannot divide by zero."
        return str(a / b)


# =========================
# Web search (Tavily)
# =========================
async def tavily_search_async(client: TavilyClient, *, query: str, max_results: int = 3, timeout: float = 12.0) -> Dict[str, Any]:
    """Runs Tavily.search in a worker thread with a timeout."""

    def _call():
        return client.search(query=query, max_results=max_results, search_depth="advanced")

    return await asyncio.wait_for(asyncio.to_thread(_call), timeout=timeout)


class SearchOnline:
    def __init__(self, tavily_client: TavilyClient, *, max_results: int = 3, timeout: float = 12.0):
        self._client = tavily_client
        self._max_results = max_results
        self._timeout = timeout

    @kernel_function(description="Searches the web for current information.")
    async def search_online(self, query: Annotated[str, "Search query"]) -> str:
        log_info(f"🔎 Searching online for: {query}")
        try:
            response = await tavily_search_async(
                self._client, query=query, max_results=self._max_results, timeout=self._timeout
            )
        except asyncio.TimeoutError:
            log_warning("⏱️ SearchOnline timed out.")
            return "The search service took too long to respond."
        except Exception as e:
            log_error(f"SearchOnline error: {e}")
            return "Could not retrieve online information at this time."

        results = response.get("results") or []
        if not isinstance(results, list) or not results:
            log_warning("SearchOnline did not find useful results.")
            return "No results were found for the search."

        bullets = []
        for item in results:
            title = item.get("title") or "Untitled"
            url = item.get("url") or ""
            content = item.get("content") or ""
            bullets.append(f"- **{title}**\n {content}\n Source: {url}".strip())
        output = "\n\n".join(bullets)
        log_section("🔎 SearchOnline Results", output, markdown=True)
        return output


# =========================
# Memory
# =========================
class MemoryPlugin:
    """Lets an agent save and recall facts in a `SemanticMemoryStore`."""

    def __init__(self, store: SemanticMemoryStore, collection: str = "facts", limit: int = 3, min_relevance: float = 0.7):
        self._store = store
        self._collection = collection
        self._limit = limit
        self._min_relevance = min_relevance

    @kernel_function(description="Saves a fact to long-term memory.")
    async def save_memory(self, text: Annotated[str, "Fact to remember"]) -> str:
        if not (text or "").strip():
            return "Ignored: empty fact."
        try:
            await self._store.save(self._collection, text)
        except MemoryStoreError as e:
            log_error(f"Memory save failed: {e}")
            return "Could not save that fact."
        return "OK: fact stored"

    @kernel_function(description="Recalls stored facts related to a query.")
    async def recall(self, query: Annotated[str, "What to look up"]) -> str:
        try:
            matches = await self._store.search(
                self._collection, query, limit=self._limit, min_relevance=self._min_relevance
            )
        except MemoryStoreError as e:
            log_error(f"Memory search failed: {e}")
            return "Memory is unavailable right now."
        if not matches:
            return "Nothing relevant is stored in memory."
        return "\n".join(f"- {m.record.text} (relevance {m.relevance:.2f})" for m in matches)


def default_plugins(tavily_api_key: Optional[str] = None, store: Optional[SemanticMemoryStore] = None) -> Dict[str, Any]:
    """Plugins registered on the chat lab kernel, keyed by plugin name."""
    plugins: Dict[str, Any] = {"time": TimePlugin(), "math": MathPlugin()}
    if tavily_api_key:
        plugins["search"] = SearchOnline(TavilyClient(api_key=tavily_api_key))
    if store is not None:
        plugins["memory"] = MemoryPlugin(store)
    return plugins
