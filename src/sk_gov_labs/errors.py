"""Exception hierarchy for the lab programs."""


class LabError(Exception):
    """Base class for every error raised by the labs."""


class ConfigurationError(LabError):
    """Required settings are missing or malformed."""

    def __init__(self, message: str, missing=None):
        super().__init__(message)
        self.missing = list(missing or [])


class AgentInvocationError(LabError):
    """An agent call failed or returned nothing usable."""

    def __init__(self, agent_name: str, message: str):
        super().__init__(f"{agent_name}: {message}")
        self.agent_name = agent_name


class OrchestrationError(LabError):
    """An orchestration could not be started or did not finish."""


class MemoryStoreError(LabError):
    """Invalid operation on the semantic memory store."""


class FunctionBlockedError(LabError):
    """A kernel function call was refused by a filter."""

    def __init__(self, function_name: str):
        super().__init__(f"Function '{function_name}' is blocked in this lab.")
        self.function_name = function_name
