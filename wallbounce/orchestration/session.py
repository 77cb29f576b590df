"""
Bounded per-session collaboration history.

Only summaries of finished collaborations are kept; steps stay with the
result that owns them.
"""

from collections import OrderedDict, deque
from dataclasses import dataclass, field
from typing import Deque, Optional

from .aggregator import CollaborationResult
from .history import utc_now
from .insights import extract_key_insights, is_topic_relevant

PREAMBLE_CANDIDATES = 3


@dataclass(frozen=True)
class SessionEntry:
    timestamp: str
    query: str
    task_type: str
    final_response: str
    wall_bounce_count: int
    successful_models: tuple[str, ...]
    related_topics: tuple[str, ...] = ()

    @classmethod
    def from_result(cls, result: CollaborationResult) -> "SessionEntry":
        return cls(
            timestamp=utc_now(),
            query=result.original_query,
            task_type=result.task_type,
            final_response=result.final_response,
            wall_bounce_count=result.wall_bounce_count,
            successful_models=tuple(m for m in result.models if m in result.metadata.successful_models),
            related_topics=result.related_topics,
        )


@dataclass
class SessionStore:
    max_entries: int = 50
    max_sessions: int = 1000
    _sessions: "OrderedDict[str, Deque[SessionEntry]]" = field(default_factory=OrderedDict)

    def __len__(self) -> int:
        return len(self._sessions)

    def record(self, session_id: str, entry: SessionEntry) -> None:
        history = self._sessions.get(session_id)
        if history is None:
            history = deque(maxlen=self.max_entries)
            self._sessions[session_id] = history
        history.append(entry)
        self._sessions.move_to_end(session_id)

        while len(self._sessions) > self.max_sessions:
            self._sessions.popitem(last=False)

    def history(self, session_id: str, limit: Optional[int] = None) -> list[SessionEntry]:
        """Newest first."""
        entries = list(reversed(self._sessions.get(session_id, ())))
        return entries[:limit] if limit is not None else entries

    def reset(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def build_preamble(self, session_id: str, query: str, task_type: str) -> str:
        recent = list(self._sessions.get(session_id, ()))[-PREAMBLE_CANDIDATES:]
        relevant = [
            e for e in recent
            if is_topic_relevant(e.query, query) or e.task_type == task_type
        ]
        if not relevant:
            return ""

        lines = ["## Earlier in this session"]
        for i, entry in enumerate(relevant, start=1):
            insights = extract_key_insights(entry.final_response)[:2]
            lines.append(f"### {i}. {entry.query[:100]}")
            lines.append(f"**Conclusion**: {'; '.join(insights) if insights else entry.final_response[:200]}")
        return "\n".join(lines)
