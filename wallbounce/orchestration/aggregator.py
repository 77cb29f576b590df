"""
Result aggregator: turns a completed step history into a CollaborationResult.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, Sequence

from ..errors import CollaborationSystemError
from .history import CollaborationStep, utc_now
from .request import CollaborationRequest

TOTAL_FAILURE_SENTINEL = "[wall-bounce] All models failed; no verified response is available."


@dataclass(frozen=True)
class ResultMetadata:
    timestamp: str
    processing_time_ms: float
    successful_models: frozenset[str]
    failed_models: frozenset[str]
    total_tokens: int = 0
    total_cost: float = 0.0
    strategy: str = ""


@dataclass(frozen=True)
class CollaborationResult:
    original_query: str
    session_id: str
    task_type: str
    final_response: str
    wall_bounce_count: int
    collaboration_history: tuple[CollaborationStep, ...]
    metadata: ResultMetadata
    models: tuple[str, ...] = ()
    related_topics: tuple[str, ...] = ()
    suggested_followups: tuple[str, ...] = ()

    @property
    def all_failed(self) -> bool:
        return not self.metadata.successful_models

    def to_dict(self) -> dict[str, Any]:
        # Sets are emitted in request order so the wire shape is stable.
        order = {m: i for i, m in enumerate(self.models)}
        return {
            "originalQuery": self.original_query,
            "sessionId": self.session_id,
            "taskType": self.task_type,
            "finalResponse": self.final_response,
            "wallBounceCount": self.wall_bounce_count,
            "collaborationHistory": [s.to_dict() for s in self.collaboration_history],
            "metadata": {
                "timestamp": self.metadata.timestamp,
                "processingTimeMs": self.metadata.processing_time_ms,
                "successfulModels": sorted(self.metadata.successful_models, key=lambda m: order.get(m, len(order))),
                "failedModels": sorted(self.metadata.failed_models, key=lambda m: order.get(m, len(order))),
                "totalTokens": self.metadata.total_tokens,
                "totalCost": self.metadata.total_cost,
                "strategy": self.metadata.strategy,
            },
            "relatedTopics": list(self.related_topics),
            "suggestedFollowups": list(self.suggested_followups),
        }


class SynthesisStrategy(Protocol):
    name: str

    def synthesize(self, request: CollaborationRequest, steps: Sequence[CollaborationStep]) -> str:
        ...


class LastSuccessfulOutput:
    """Promotes the output of the last successful step as the verified answer."""

    name = "last_successful"

    def synthesize(self, request: CollaborationRequest, steps: Sequence[CollaborationStep]) -> str:
        for step in reversed(steps):
            if step.succeeded:
                return step.output
        return TOTAL_FAILURE_SENTINEL


class StepDigest:
    """
    Markdown report of the whole chain: every step's excerpt or failure,
    a verification summary, then the last successful output in full.
    """

    name = "digest"

    def __init__(self, excerpt_chars: int = 200):
        self.excerpt_chars = excerpt_chars

    def synthesize(self, request: CollaborationRequest, steps: Sequence[CollaborationStep]) -> str:
        successful = [s for s in steps if s.succeeded]
        failed = [s for s in steps if not s.succeeded]
        if not successful:
            return TOTAL_FAILURE_SENTINEL

        lines = [
            "# Wall-bounce verification result",
            "",
            "## Original query",
            request.query,
            "",
            "## Step summary",
        ]
        for step in steps:
            if step.succeeded:
                lines.append(f"### Step {step.step_number}: {step.actor} ({step.role})")
                lines.append(step.preview(self.excerpt_chars))
            else:
                lines.append(f"### Step {step.step_number}: {step.actor} - failed")
                lines.append(f"**Error**: {step.error.kind}: {step.error.message}")
                lines.append("*Skipped; the collaboration continued with the remaining models.*")
            lines.append("")

        lines.append("## Verdict")
        lines.append(f"Combined the analysis of {len(successful)} model(s).")
        if failed:
            lines.append(
                f"**Note**: {len(failed)} model(s) failed ({', '.join(s.actor for s in failed)}) "
                "and were excluded from the forwarded context."
            )
        lines.append("")
        lines.append("## Final answer")
        lines.append(successful[-1].output)
        lines.append("")
        lines.append(f"---\n**Verification complete**: {len(steps)} wall bounce(s) attempted.")
        return "\n".join(lines)


STRATEGIES = {
    LastSuccessfulOutput.name: LastSuccessfulOutput,
    StepDigest.name: StepDigest,
}


def get_strategy(name: str) -> SynthesisStrategy:
    try:
        return STRATEGIES[name]()
    except KeyError:
        raise ValueError(f"unknown synthesis strategy '{name}'") from None


class ResultAggregator:
    def __init__(self, strategy: Optional[SynthesisStrategy] = None):
        self.strategy = strategy or LastSuccessfulOutput()

    def aggregate(
        self,
        request: CollaborationRequest,
        steps: Sequence[CollaborationStep],
        started_at: float,
    ) -> CollaborationResult:
        """`started_at` is a time.monotonic() reading taken when the sequencer started."""
        self._check_invariants(request, steps)

        successful = frozenset(s.actor for s in steps if s.succeeded)
        failed = frozenset(request.models) - successful

        if successful:
            final_response = self.strategy.synthesize(request, steps)
        else:
            final_response = TOTAL_FAILURE_SENTINEL

        metadata = ResultMetadata(
            timestamp=utc_now(),
            processing_time_ms=(time.monotonic() - started_at) * 1000,
            successful_models=successful,
            failed_models=failed,
            total_tokens=sum(s.tokens_used for s in steps),
            total_cost=sum(s.cost_estimate for s in steps),
            strategy=self.strategy.name,
        )

        return CollaborationResult(
            original_query=request.query,
            session_id=request.session_id,
            task_type=request.task_type.value,
            final_response=final_response,
            wall_bounce_count=len(steps),
            collaboration_history=tuple(steps),
            metadata=metadata,
            models=request.models,
        )

    def _check_invariants(self, request: CollaborationRequest, steps: Sequence[CollaborationStep]) -> None:
        if len(steps) != len(request.models):
            raise CollaborationSystemError(
                f"history has {len(steps)} step(s) for {len(request.models)} model(s)"
            )
        for expected, step in enumerate(steps, start=1):
            if step.step_number != expected:
                raise CollaborationSystemError(
                    f"step numbers out of order: expected {expected}, got {step.step_number}"
                )
            if step.actor != request.models[expected - 1]:
                raise CollaborationSystemError(
                    f"step {expected} actor {step.actor} does not match requested model {request.models[expected - 1]}"
                )
