"""
Append-only record of provider interactions within one collaboration.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from ..clients.base import ModelOutput
from ..errors import ProviderError


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class StepError:
    kind: str
    message: str
    retryable: bool

    @classmethod
    def from_provider_error(cls, error: ProviderError) -> "StepError":
        return cls(kind=error.kind.value, message=error.message, retryable=error.retryable)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message, "retryable": self.retryable}


@dataclass(frozen=True)
class CollaborationStep:
    step_number: int
    actor: str
    role: str
    output: str
    timestamp: str
    error: Optional[StepError] = None
    tokens_used: int = 0
    cost_estimate: float = 0.0
    latency_ms: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def preview(self, limit: int = 200) -> str:
        if len(self.output) <= limit:
            return self.output
        return self.output[:limit] + "..."

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "stepNumber": self.step_number,
            "actor": self.actor,
            "role": self.role,
            "output": self.output,
            "timestamp": self.timestamp,
            "tokensUsed": self.tokens_used,
            "costEstimate": self.cost_estimate,
            "latencyMs": self.latency_ms,
        }
        if self.error:
            data["error"] = self.error.to_dict()
        return data


class StepRecorder:
    """Owns the ordered step list of a single request; steps are never mutated."""

    def __init__(self):
        self._steps: list[CollaborationStep] = []

    def __len__(self) -> int:
        return len(self._steps)

    @property
    def next_step_number(self) -> int:
        return len(self._steps) + 1

    def record_success(self, actor: str, role: str, output: ModelOutput) -> CollaborationStep:
        step = CollaborationStep(
            step_number=self.next_step_number,
            actor=actor,
            role=role,
            output=output.text,
            timestamp=utc_now(),
            tokens_used=output.tokens_used,
            cost_estimate=output.cost_estimate,
            latency_ms=output.latency_ms,
        )
        self._steps.append(step)
        return step

    def record_failure(
        self,
        actor: str,
        role: str,
        error: ProviderError,
        latency_ms: float = 0.0,
    ) -> CollaborationStep:
        step = CollaborationStep(
            step_number=self.next_step_number,
            actor=actor,
            role=role,
            output="",
            timestamp=utc_now(),
            error=StepError.from_provider_error(error),
            latency_ms=latency_ms,
        )
        self._steps.append(step)
        return step

    def steps(self) -> tuple[CollaborationStep, ...]:
        return tuple(self._steps)

    def successful_outputs(self) -> list[str]:
        return [s.output for s in self._steps if s.succeeded]
