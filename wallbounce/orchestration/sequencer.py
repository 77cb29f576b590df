"""
Wall-bounce sequencer.

Drives one request through its models strictly in order. Each model sees the
original query plus the outputs of every earlier successful step; failed
steps are recorded and never forwarded. One provider failure never aborts
the sequence.
"""

import asyncio
import dataclasses
import logging
import time
from enum import Enum
from typing import Mapping, Optional

from ..clients.base import ModelClient, ModelOutput, QueryOptions
from ..clients.errors import classify_exception
from ..errors import CollaborationSystemError, ProviderError, ProviderErrorKind
from .aggregator import CollaborationResult, ResultAggregator
from .history import CollaborationStep, StepRecorder
from .request import CollaborationRequest
from .roles import RoleDefinition, get_role_definition

logger = logging.getLogger(__name__)


class SequencerState(Enum):
    PENDING = "pending"
    RUNNING = "running"
    AGGREGATING = "aggregating"
    DONE = "done"
    FAILED = "failed"


def cap_context(outputs: list[str], max_chars: int) -> list[str]:
    """
    Keep the newest outputs whose combined length fits in `max_chars`.
    If even the newest one is too long, keep its tail. 0 means no cap.
    """
    if max_chars <= 0:
        return list(outputs)

    kept: list[str] = []
    total = 0
    for output in reversed(outputs):
        if total + len(output) > max_chars:
            if not kept:
                kept.append(output[-max_chars:])
            break
        kept.append(output)
        total += len(output)
    kept.reverse()
    return kept


class Sequencer:
    def __init__(
        self,
        request: CollaborationRequest,
        clients: Mapping[str, ModelClient],
        aggregator: Optional[ResultAggregator] = None,
        call_timeout_ms: int = 30000,
        max_context_chars: int = 0,
        query_preamble: str = "",
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ):
        self.request = request
        self.clients = clients
        self.aggregator = aggregator or ResultAggregator()
        self.call_timeout_ms = call_timeout_ms
        self.max_context_chars = max_context_chars
        self.query_preamble = query_preamble
        self.max_tokens = max_tokens
        self.temperature = temperature

        self.state = SequencerState.PENDING
        self.model_index = 0
        self.recorder = StepRecorder()

    async def run(self) -> CollaborationResult:
        if self.state is not SequencerState.PENDING:
            raise CollaborationSystemError(f"sequencer cannot run from state {self.state.value}")

        started_at = time.monotonic()

        missing = [m for m in self.request.models if m not in self.clients]
        if missing:
            self.state = SequencerState.FAILED
            raise CollaborationSystemError(f"no model client bound for: {', '.join(missing)}")

        self.state = SequencerState.RUNNING
        logger.info(
            "session %s: wall-bounce over %s (%s)",
            self.request.session_id, ", ".join(self.request.models), self.request.task_type.value,
        )

        try:
            for index, model in enumerate(self.request.models):
                self.model_index = index
                await self._run_step(index, model)
            self.model_index = len(self.request.models)

            self.state = SequencerState.AGGREGATING
            result = self.aggregator.aggregate(self.request, self.recorder.steps(), started_at)
        except BaseException:
            self.state = SequencerState.FAILED
            raise

        self.state = SequencerState.DONE
        logger.info(
            "session %s: done in %.0fms, %d/%d models succeeded",
            self.request.session_id,
            result.metadata.processing_time_ms,
            len(result.metadata.successful_models),
            result.wall_bounce_count,
        )
        return result

    async def _run_step(self, index: int, model: str) -> CollaborationStep:
        total = len(self.request.models)
        role = get_role_definition(self.request.task_type, index, total)
        context = self.forwarded_context()
        prompt = self.build_prompt(role, index, context)

        options = QueryOptions(
            timeout_ms=self.call_timeout_ms,
            session_id=self.request.session_id,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )

        logger.info("step %d/%d: %s as %s (%d chars)", index + 1, total, model, role.label, len(prompt))

        client = self.clients[model]
        start = time.monotonic()
        try:
            output = await asyncio.wait_for(
                client.query(prompt, tuple(context), options),
                timeout=options.timeout_seconds,
            )
        except asyncio.TimeoutError:
            error = ProviderError(
                ProviderErrorKind.TIMEOUT,
                f"no response within {self.call_timeout_ms}ms",
                retryable=True,
                model=model,
            )
        except ProviderError as e:
            error = e
        except Exception as e:
            error = classify_exception(e, model)
        else:
            if not isinstance(output, ModelOutput):
                error = ProviderError(
                    ProviderErrorKind.MALFORMED_RESPONSE,
                    f"client returned {type(output).__name__} instead of ModelOutput",
                    model=model,
                )
                return self._record_failure(model, role, error, start)

            if not output.latency_ms:
                output = dataclasses.replace(output, latency_ms=(time.monotonic() - start) * 1000)
            step = self.recorder.record_success(model, role.label, output)
            logger.info("step %d: %s answered (%d chars)", step.step_number, model, len(step.output))
            return step

        return self._record_failure(model, role, error, start)

    def _record_failure(
        self,
        model: str,
        role: RoleDefinition,
        error: ProviderError,
        start: float,
    ) -> CollaborationStep:
        latency_ms = (time.monotonic() - start) * 1000
        step = self.recorder.record_failure(model, role.label, error, latency_ms)
        logger.warning(
            "step %d: %s failed with %s (retryable=%s): %s",
            step.step_number, model, error.kind.value, error.retryable, error.message,
        )
        return step

    def forwarded_context(self) -> list[str]:
        return cap_context(self.recorder.successful_outputs(), self.max_context_chars)

    def build_prompt(self, role: RoleDefinition, index: int, context: list[str]) -> str:
        total = len(self.request.models)
        parts = [
            f"# Wall-bounce step {index + 1} of {total}: {role.label}",
            role.instruction,
            "",
        ]

        if self.query_preamble:
            parts.append(self.query_preamble)
            parts.append("")

        parts.append("## Original query")
        parts.append(self.request.query)

        if context:
            parts.append("")
            parts.append("## Previous contributions (oldest first)")
            for i, output in enumerate(context, start=1):
                parts.append(f"### Contribution {i}")
                parts.append(output)

        return "\n".join(parts)
