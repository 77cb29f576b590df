"""
Wall-bounce orchestration.
Validates requests, drives models sequentially and aggregates their history.
"""

from .aggregator import (
    TOTAL_FAILURE_SENTINEL,
    CollaborationResult,
    LastSuccessfulOutput,
    ResultAggregator,
    ResultMetadata,
    StepDigest,
    SynthesisStrategy,
    get_strategy,
)
from .history import CollaborationStep, StepError, StepRecorder
from .request import CollaborationRequest, RequestValidator, TaskType, generate_session_id
from .roles import RoleDefinition, StepPosition, get_role_definition
from .sequencer import Sequencer, SequencerState, cap_context
from .service import CollaborationService
from .session import SessionEntry, SessionStore

__all__ = [
    "TOTAL_FAILURE_SENTINEL",
    "CollaborationResult",
    "LastSuccessfulOutput",
    "ResultAggregator",
    "ResultMetadata",
    "StepDigest",
    "SynthesisStrategy",
    "get_strategy",
    "CollaborationStep",
    "StepError",
    "StepRecorder",
    "CollaborationRequest",
    "RequestValidator",
    "TaskType",
    "generate_session_id",
    "RoleDefinition",
    "StepPosition",
    "get_role_definition",
    "Sequencer",
    "SequencerState",
    "cap_context",
    "CollaborationService",
    "SessionEntry",
    "SessionStore",
]
