"""
Maps SDK, httpx and asyncio exceptions onto ProviderError kinds.
"""

import asyncio
import json
from typing import Optional

import httpx
import openai

from ..errors import ProviderError, ProviderErrorKind


def _status_code(exc: BaseException) -> Optional[int]:
    status = getattr(exc, "status_code", None)
    if isinstance(status, int):
        return status
    response = getattr(exc, "response", None)
    if response is not None:
        status = getattr(response, "status_code", None)
        if isinstance(status, int):
            return status
    return None


def kind_for_status(status: int) -> ProviderErrorKind:
    if status in (401, 403):
        return ProviderErrorKind.AUTH
    if status == 429:
        return ProviderErrorKind.RATE_LIMIT
    if status in (408, 504):
        return ProviderErrorKind.TIMEOUT
    if status >= 500:
        return ProviderErrorKind.UPSTREAM_5XX
    return ProviderErrorKind.BAD_REQUEST


def classify_exception(exc: BaseException, model: Optional[str] = None) -> ProviderError:
    if isinstance(exc, ProviderError):
        if model and not exc.model:
            exc.model = model
        return exc

    # APITimeoutError subclasses APIConnectionError, so it goes first.
    if isinstance(exc, (asyncio.TimeoutError, openai.APITimeoutError, httpx.TimeoutException)):
        return ProviderError(ProviderErrorKind.TIMEOUT, str(exc) or "request timed out", model=model)

    if isinstance(exc, (openai.APIConnectionError, httpx.TransportError)):
        return ProviderError(ProviderErrorKind.UPSTREAM_5XX, str(exc) or "connection failed", model=model)

    if isinstance(exc, openai.APIResponseValidationError):
        return ProviderError(ProviderErrorKind.MALFORMED_RESPONSE, str(exc), model=model)

    status = _status_code(exc)
    if status is not None and status >= 400:
        return ProviderError(kind_for_status(status), f"HTTP {status}: {exc}", model=model)

    if isinstance(exc, (json.JSONDecodeError, KeyError, IndexError, TypeError, ValueError)):
        return ProviderError(ProviderErrorKind.MALFORMED_RESPONSE, f"{type(exc).__name__}: {exc}", model=model)

    return ProviderError(
        ProviderErrorKind.MALFORMED_RESPONSE,
        f"unexpected {type(exc).__name__}: {exc}",
        model=model,
    )
