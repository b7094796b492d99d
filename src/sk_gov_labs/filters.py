"""
Function-invocation filters used in the filters lab.

Each filter is an async callable taking `(context, next)`, which is the shape
Semantic Kernel expects for `FilterTypes.FUNCTION_INVOCATION`. A filter that
does not await `next` short-circuits the call.
"""
import time
from collections import defaultdict
from typing import Awaitable, Callable, Dict, Iterable, List, Optional

from semantic_kernel import Kernel
from semantic_kernel.filters import FilterTypes, FunctionInvocationContext
from semantic_kernel.functions import FunctionResult

from .console import log_note, log_warning
from .errors import FunctionBlockedError

NextFilter = Callable[[FunctionInvocationContext], Awaitable[None]]


def qualified_name(context: FunctionInvocationContext) -> str:
    fn = context.function
    plugin = getattr(fn, "plugin_name", None)
    return f"{plugin}.{fn.name}" if plugin else fn.name


class LoggingFilter:
    """Logs every function call and its (truncated) result."""

    def __init__(self, max_chars: int = 200):
        self.max_chars = max_chars

    async def __call__(self, context: FunctionInvocationContext, next: NextFilter) -> None:
        name = qualified_name(context)
        log_note(f"🔧 Calling {name}")
        try:
            await next(context)
        except Exception as e:
            log_warning(f"{name} failed: {e}")
            raise
        value = getattr(context.result, "value", None) if context.result is not None else None
        text = str(value) if value is not None else ""
        if len(text) > self.max_chars:
            text = text[: self.max_chars] + "…"
        log_note(f"🔧 {name} returned: {text}")


class TimingFilter:
    """Records how long each function takes, keyed by qualified name."""

    def __init__(self, clock: Callable[[], float] = time.perf_counter):
        self._clock = clock
        self.timings: Dict[str, List[float]] = defaultdict(list)

    async def __call__(self, context: FunctionInvocationContext, next: NextFilter) -> None:
        start = self._clock()
        try:
            await next(context)
        finally:
            self.timings[qualified_name(context)].append(self._clock() - start)

    def summary(self) -> Dict[str, Dict[str, float]]:
        out = {}
        for name, values in self.timings.items():
            out[name] = {
                "count": len(values),
                "avg": sum(values) / len(values),
                "max": max(values),
            }
        return out


class BlockedFunctionFilter:
    """Refuses calls to functions listed as `plugin.function` (or bare name)."""

    refusal = "This function is disabled in the current lab."

    def __init__(self, blocked: Iterable[str], *, raise_on_block: bool = True):
        self.blocked = {b.strip() for b in blocked if b and b.strip()}
        self.raise_on_block = raise_on_block
        self.refused: List[str] = []

    def is_blocked(self, context: FunctionInvocationContext) -> bool:
        return qualified_name(context) in self.blocked or context.function.name in self.blocked

    async def __call__(self, context: FunctionInvocationContext, next: NextFilter) -> None:
        if not self.is_blocked(context):
            await next(context)
            return

        name = qualified_name(context)
        self.refused.append(name)
        log_warning(f"Blocked call to {name}")
        if self.raise_on_block:
            raise FunctionBlockedError(name)
        context.result = FunctionResult(function=context.function.metadata, value=self.refusal)


def register_filters(kernel: Kernel, *filters: Optional[Callable]) -> Kernel:
    for f in filters:
        if f is not None:
            kernel.add_filter(FilterTypes.FUNCTION_INVOCATION, f)
    return kernel
