import asyncio
from dataclasses import dataclass, field
from typing import Optional, Sequence

import pytest

from wallbounce.clients.base import ModelOutput, QueryOptions
from wallbounce.orchestration import CollaborationService

CATALOG = ["gpt-5", "gemini-2.5-pro", "o3-mini", "gpt-4.1"]


@dataclass
class RecordedCall:
    prompt: str
    context: tuple[str, ...]
    options: QueryOptions


@dataclass
class ScriptedClient:
    """ModelClient double: returns `reply`, raises `error`, or sleeps past its deadline."""

    model: str
    reply: Optional[str] = None
    error: Optional[BaseException] = None
    delay: float = 0.0
    tokens: int = 10
    cost: float = 0.001
    events: Optional[list] = None
    calls: list[RecordedCall] = field(default_factory=list)
    cancelled: bool = False

    async def query(self, prompt: str, context: Sequence[str], options: QueryOptions) -> ModelOutput:
        self.calls.append(RecordedCall(prompt, tuple(context), options))
        if self.events is not None:
            self.events.append(f"start:{self.model}")
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        finally:
            if self.events is not None:
                self.events.append(f"end:{self.model}")
        if self.error is not None:
            raise self.error
        text = self.reply if self.reply is not None else f"answer from {self.model}"
        return ModelOutput(text=text, tokens_used=self.tokens, cost_estimate=self.cost, latency_ms=5.0)


def make_clients(*clients: ScriptedClient) -> dict[str, ScriptedClient]:
    return {c.model: c for c in clients}


@pytest.fixture
def three_clients():
    return make_clients(
        ScriptedClient("gpt-5", reply="GPT5 analysis: the index is missing."),
        ScriptedClient("gemini-2.5-pro", reply="GEMINI review: also check the TPU settings."),
        ScriptedClient("o3-mini", reply="O3 verdict: add the index and tune the TPU."),
    )


@pytest.fixture
def service_factory():
    def build(clients, **kwargs):
        kwargs.setdefault("catalog", CATALOG)
        kwargs.setdefault("call_timeout_ms", 1000)
        kwargs.setdefault("deadline_ms", 5000)
        return CollaborationService(clients, **kwargs)
    return build
