"""
Wall-Bounce - sequential multi-model collaborative query orchestrator.
"""

__version__ = "0.1.0"

from .errors import (
    AllModelsFailedError,
    CollaborationSystemError,
    ProviderError,
    ProviderErrorKind,
    ValidationError,
    WallBounceError,
)
from .orchestration import CollaborationResult, CollaborationService

__all__ = [
    "AllModelsFailedError",
    "CollaborationSystemError",
    "ProviderError",
    "ProviderErrorKind",
    "ValidationError",
    "WallBounceError",
    "CollaborationResult",
    "CollaborationService",
    "__version__",
]
