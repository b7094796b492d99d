"""Plain records passed around by the lab programs.

These are intentionally simple: they live in memory for the duration of one
run and are only persisted through the report writers.
"""
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex[:12]


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class ChatMessage:
    author: str
    content: str
    role: str = "assistant"
    id: str = field(default_factory=new_id)
    timestamp: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = _iso(self.timestamp)
        return data


@dataclass
class ThreadMessage:
    author: str
    content: str
    role: str = "assistant"
    sequence: int = 0
    id: str = field(default_factory=new_id)
    timestamp: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = _iso(self.timestamp)
        return data


@dataclass
class OrchestrationStep:
    agent_name: str
    input: str
    output: str = ""
    success: bool = False
    error: Optional[str] = None
    started_at: datetime = field(default_factory=utc_now)
    finished_at: Optional[datetime] = None

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()

    def finish(self, *, output: str = "", error: Optional[str] = None) -> "OrchestrationStep":
        self.output = output
        self.error = error
        self.success = error is None
        self.finished_at = utc_now()
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "agent_name": self.agent_name,
            "input": self.input,
            "output": self.output,
            "success": self.success,
            "error": self.error,
            "started_at": _iso(self.started_at),
            "finished_at": _iso(self.finished_at),
            "duration_seconds": self.duration_seconds,
        }


@dataclass
class OrchestrationResult:
    task: str
    steps: List[OrchestrationStep] = field(default_factory=list)
    final_output: str = ""
    success: bool = False
    id: str = field(default_factory=new_id)
    started_at: datetime = field(default_factory=utc_now)
    finished_at: Optional[datetime] = None

    @property
    def failed_steps(self) -> List[OrchestrationStep]:
        return [s for s in self.steps if not s.success]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "task": self.task,
            "success": self.success,
            "final_output": self.final_output,
            "started_at": _iso(self.started_at),
            "finished_at": _iso(self.finished_at),
            "steps": [s.to_dict() for s in self.steps],
        }
