"""
Exception hierarchy for the Wall-Bounce orchestrator.
"""

from enum import Enum
from typing import Any, Optional


class WallBounceError(Exception):
    """Base class for every error raised by wallbounce."""
    pass


class ConfigError(WallBounceError):
    """Configuration file is unreadable or invalid."""
    pass


class ValidationError(WallBounceError):
    """A collaboration request was rejected before any provider was contacted."""
    pass


class ProviderErrorKind(Enum):
    AUTH = "AUTH"
    RATE_LIMIT = "RATE_LIMIT"
    TIMEOUT = "TIMEOUT"
    UPSTREAM_5XX = "UPSTREAM_5XX"
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"
    BAD_REQUEST = "BAD_REQUEST"


RETRYABLE_KINDS = frozenset({
    ProviderErrorKind.RATE_LIMIT,
    ProviderErrorKind.TIMEOUT,
    ProviderErrorKind.UPSTREAM_5XX,
})


class ProviderError(WallBounceError):
    """A single model call failed. Contained by the sequencer, never surfaced."""

    def __init__(
        self,
        kind: ProviderErrorKind,
        message: str,
        retryable: Optional[bool] = None,
        model: Optional[str] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.retryable = kind in RETRYABLE_KINDS if retryable is None else retryable
        self.model = model

    def __str__(self) -> str:
        prefix = f"[{self.model}] " if self.model else ""
        return f"{prefix}{self.kind.value}: {self.message}"


class CollaborationSystemError(WallBounceError):
    """Orchestrator-level fault. No result is produced."""
    pass


class AllModelsFailedError(CollaborationSystemError):
    """Every requested model failed; carries the sentinel result for inspection."""

    def __init__(self, message: str, result: Any):
        super().__init__(message)
        self.result = result
