"""
Collaboration requests and their validation.
"""

import itertools
import secrets
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping, Optional

from ..errors import ValidationError

MIN_MODELS = 2


class TaskType(Enum):
    GENERAL = "general"
    CODING = "coding"
    ANALYSIS = "analysis"
    ARCHITECTURE = "architecture"


@dataclass(frozen=True)
class CollaborationRequest:
    query: str
    task_type: TaskType
    models: tuple[str, ...]
    session_id: str


_session_counter = itertools.count(1)


def generate_session_id() -> str:
    """Time-based id with a process-wide counter, so it never repeats within a process."""
    millis = int(time.time() * 1000)
    return f"wb-{millis}-{next(_session_counter)}-{secrets.token_hex(4)}"


def _first_present(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


class RequestValidator:
    def __init__(self, catalog: Iterable[str], default_models: Iterable[str] = ()):
        self.catalog = frozenset(catalog)
        self.default_models = tuple(default_models)

    def validate(
        self,
        raw: Mapping[str, Any],
        session_id: Optional[str] = None,
    ) -> CollaborationRequest:
        if not isinstance(raw, Mapping):
            raise ValidationError("request must be a mapping")

        query = raw.get("query")
        if not isinstance(query, str) or not query.strip():
            raise ValidationError("query must be a non-empty string")

        task_type = self._validate_task_type(_first_present(raw, "taskType", "task_type"))
        models = self._validate_models(raw.get("models"))

        sid = _first_present(raw, "sessionId", "session_id") or session_id
        if sid is not None and not isinstance(sid, str):
            raise ValidationError("sessionId must be a string")
        if not sid or not sid.strip():
            sid = generate_session_id()

        return CollaborationRequest(
            query=query,
            task_type=task_type,
            models=models,
            session_id=sid.strip(),
        )

    def _validate_task_type(self, value: Any) -> TaskType:
        if value is None:
            return TaskType.GENERAL
        if isinstance(value, TaskType):
            return value
        try:
            return TaskType(str(value).lower())
        except ValueError:
            allowed = ", ".join(t.value for t in TaskType)
            raise ValidationError(f"unknown taskType '{value}' (expected one of: {allowed})") from None

    def _validate_models(self, value: Any) -> tuple[str, ...]:
        if value is None:
            value = self.default_models
        if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
            raise ValidationError("models must be a list of model identifiers")

        models: list[str] = []
        for item in value:
            if not isinstance(item, str) or not item.strip():
                raise ValidationError(f"invalid model identifier: {item!r}")
            name = item.strip()
            if name not in models:
                models.append(name)

        if len(models) < MIN_MODELS:
            raise ValidationError(
                f"at least {MIN_MODELS} distinct models are required, got {len(models)}"
            )

        unknown = [m for m in models if m not in self.catalog]
        if unknown:
            raise ValidationError(f"unknown model(s): {', '.join(unknown)}")

        return tuple(models)
