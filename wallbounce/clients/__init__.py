"""
Model clients for different providers.
All shipped adapters use the OpenAI-compatible API format.
"""

from .base import Message, ModelClient, ModelOutput, QueryOptions, Role
from .errors import classify_exception
from .openai_compatible import OpenAICompatibleClient, create_client

__all__ = [
    "Message",
    "ModelClient",
    "ModelOutput",
    "QueryOptions",
    "Role",
    "classify_exception",
    "OpenAICompatibleClient",
    "create_client",
]
