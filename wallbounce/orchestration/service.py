"""
Public entry point: validates a request, runs the wall-bounce sequence and
hands back a complete CollaborationResult or a single terminal error.
"""

import asyncio
import dataclasses
import logging
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from ..clients.base import ModelClient
from ..clients.openai_compatible import create_client
from ..config import Config
from ..errors import AllModelsFailedError, CollaborationSystemError, ValidationError
from .aggregator import CollaborationResult, ResultAggregator, SynthesisStrategy, get_strategy
from .insights import extract_related_topics, suggest_followups
from .request import CollaborationRequest, RequestValidator
from .sequencer import Sequencer
from .session import SessionEntry, SessionStore

logger = logging.getLogger(__name__)

Callback = Callable[[Any], Union[None, Awaitable[None]]]


async def _deliver(callback: Callback, payload: Any) -> None:
    outcome = callback(payload)
    if asyncio.iscoroutine(outcome):
        await outcome


class CollaborationService:
    def __init__(
        self,
        clients: Mapping[str, ModelClient],
        catalog: Optional[list[str]] = None,
        default_models: Optional[list[str]] = None,
        call_timeout_ms: int = 30000,
        deadline_ms: Optional[int] = 60000,
        max_context_chars: int = 0,
        strategy: Optional[SynthesisStrategy] = None,
        session_store: Optional[SessionStore] = None,
        use_session_memory: bool = False,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ):
        self.clients = dict(clients)
        self.validator = RequestValidator(
            catalog if catalog is not None else list(self.clients),
            default_models or (),
        )
        self.call_timeout_ms = call_timeout_ms
        self.deadline_ms = deadline_ms
        self.max_context_chars = max_context_chars
        self.strategy = strategy
        self.sessions = session_store if session_store is not None else SessionStore()
        self.use_session_memory = use_session_memory
        self.temperature = temperature
        self.max_tokens = max_tokens

    @classmethod
    def from_config(cls, config: Config) -> "CollaborationService":
        clients: dict[str, ModelClient] = {}
        for name in config.get_bound_models():
            clients[name] = create_client(config.get_model_config(name))

        logger.debug("bound clients: %s", ", ".join(clients) or "none")

        return cls(
            clients=clients,
            catalog=config.catalog(),
            default_models=config.default_models,
            call_timeout_ms=config.call_timeout_ms,
            deadline_ms=config.deadline_ms,
            max_context_chars=config.max_context_chars,
            strategy=get_strategy(config.synthesis),
            session_store=SessionStore(
                max_entries=config.max_session_history,
                max_sessions=config.max_sessions,
            ),
            use_session_memory=config.use_session_memory,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
        )

    def validate(self, raw_request: Mapping[str, Any], session_id: Optional[str] = None) -> CollaborationRequest:
        return self.validator.validate(raw_request, session_id=session_id)

    def _require_clients(self) -> None:
        if not self.clients:
            raise CollaborationSystemError("no model providers are configured")

    async def process_collaborative_query(
        self,
        raw_request: Mapping[str, Any],
        session_id: Optional[str] = None,
    ) -> CollaborationResult:
        self._require_clients()
        return await self.run(self.validate(raw_request, session_id=session_id))

    async def run(self, request: CollaborationRequest) -> CollaborationResult:
        """Runs an already validated request."""
        self._require_clients()

        preamble = ""
        if self.use_session_memory:
            preamble = self.sessions.build_preamble(request.session_id, request.query, request.task_type.value)

        sequencer = Sequencer(
            request,
            self.clients,
            aggregator=ResultAggregator(self.strategy),
            call_timeout_ms=self.call_timeout_ms,
            max_context_chars=self.max_context_chars,
            query_preamble=preamble,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

        if self.deadline_ms:
            try:
                result = await asyncio.wait_for(sequencer.run(), timeout=self.deadline_ms / 1000)
            except asyncio.TimeoutError:
                logger.error(
                    "session %s: deadline of %dms exceeded at step %d",
                    request.session_id, self.deadline_ms, sequencer.model_index + 1,
                )
                raise CollaborationSystemError(
                    f"collaboration exceeded its deadline of {self.deadline_ms}ms"
                ) from None
        else:
            result = await sequencer.run()

        if result.all_failed:
            raise AllModelsFailedError(
                f"all {result.wall_bounce_count} models failed for session {request.session_id}",
                result,
            )

        result = dataclasses.replace(
            result,
            related_topics=tuple(extract_related_topics(request.query)),
            suggested_followups=tuple(
                suggest_followups(request.query, len(result.metadata.successful_models))
            ),
        )
        self.sessions.record(request.session_id, SessionEntry.from_result(result))
        return result

    async def start_collaboration(
        self,
        raw_request: Mapping[str, Any],
        on_complete: Callback,
        on_error: Callback,
    ) -> Optional[CollaborationResult]:
        """
        Transport-facing variant: delivers the result or a `{error, sessionId}`
        payload through callbacks. Cancellation propagates without delivery.
        """
        session_id = None
        if isinstance(raw_request, Mapping):
            session_id = raw_request.get("sessionId") or raw_request.get("session_id")

        try:
            self._require_clients()
            request = self.validate(raw_request)
            # Report errors under the id the request actually ran with.
            session_id = request.session_id
            result = await self.run(request)
        except (ValidationError, CollaborationSystemError) as e:
            logger.warning("collaboration for session %s failed: %s", session_id, e)
            await _deliver(on_error, {"error": str(e), "sessionId": session_id})
            return None

        await _deliver(on_complete, result)
        return result

    def get_session_history(self, session_id: str, limit: Optional[int] = None) -> list[SessionEntry]:
        return self.sessions.history(session_id, limit)

    def reset_session(self, session_id: str) -> bool:
        return self.sessions.reset(session_id)

    async def aclose(self) -> None:
        for client in self.clients.values():
            close = getattr(client, "aclose", None)
            if close is not None:
                await close()
