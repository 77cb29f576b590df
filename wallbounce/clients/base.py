"""
Model client interface and data structures.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Protocol, Sequence, runtime_checkable


class Role(Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass
class Message:
    role: Role
    content: str

    def to_dict(self) -> dict[str, Any]:
        return {"role": self.role.value, "content": self.content}


@dataclass(frozen=True)
class QueryOptions:
    timeout_ms: int
    session_id: str
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0


@dataclass(frozen=True)
class ModelOutput:
    text: str
    tokens_used: int = 0
    cost_estimate: float = 0.0
    latency_ms: float = 0.0


@runtime_checkable
class ModelClient(Protocol):
    """
    One LLM provider behind a single call shape.

    `query` either returns a ModelOutput or raises ProviderError. Retries, if
    any, happen inside the implementation. The call must honor
    `options.timeout_ms` and stay cancellable.
    """

    model: str

    async def query(
        self,
        prompt: str,
        context: Sequence[str],
        options: QueryOptions,
    ) -> ModelOutput:
        ...
