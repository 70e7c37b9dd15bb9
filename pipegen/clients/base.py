"""Shared HTTP plumbing and failure classification for backend clients."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import httpx

from ..errors import (
    AccessDeniedError,
    NotFoundError,
    PipegenError,
    RemoteError,
    RequestTimeoutError,
    UnknownError,
)
from ..logging import get_logger

logger = get_logger("clients")


@dataclass(frozen=True)
class FailureMessages:
    """User-facing copy for each failure category of one endpoint."""

    timeout: str
    not_found: str
    access_denied: str
    unknown: str


def classify_failure(exc: BaseException, messages: FailureMessages) -> PipegenError:
    """Map a transport or HTTP failure onto the error taxonomy.

    Priority: transport timeout, gateway timeout (504), 404, 403, any other
    HTTP error carrying ``{"error": "..."}``, then everything else.
    """
    if isinstance(exc, (httpx.TimeoutException, asyncio.TimeoutError)):
        return RequestTimeoutError(messages.timeout)
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        if status == 504:
            return RequestTimeoutError(messages.timeout)
        if status == 404:
            return NotFoundError(messages.not_found)
        if status == 403:
            return AccessDeniedError(messages.access_denied)
        detail = error_detail(exc.response)
        if detail:
            return RemoteError(detail)
    return UnknownError(messages.unknown)


def error_detail(response: httpx.Response) -> Optional[str]:
    """Return the ``error`` message of a JSON failure body, if any."""
    try:
        payload = response.json()
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    message = payload.get("error")
    if isinstance(message, str) and message.strip():
        return message.strip()
    return None


class BackendClient:
    """Issues one bounded JSON request per call against a backend base URL."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float,
        messages: FailureMessages,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.messages = messages
        self._transport = transport

    async def request_json(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        json: Any = None,
    ) -> Any:
        """Send the request and return the decoded JSON body.

        Raises a ``PipegenError`` subclass for every failure; the wait bound
        covers the whole exchange, not just individual socket operations.
        """
        try:
            return await asyncio.wait_for(
                self._send(method, path, params=params, json=json),
                timeout=self.timeout,
            )
        except (httpx.HTTPError, asyncio.TimeoutError) as exc:
            error = classify_failure(exc, self.messages)
            logger.debug("%s %s failed: %r", method, path, exc)
            raise error from exc
        except ValueError as exc:
            logger.debug("%s %s returned a body that is not JSON: %s", method, path, exc)
            raise UnknownError(self.messages.unknown) from exc

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None,
        json: Any,
    ) -> Any:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            response = await client.request(method, path, params=params, json=json)
            response.raise_for_status()
            return response.json()


__all__ = ["BackendClient", "FailureMessages", "classify_failure", "error_detail"]
