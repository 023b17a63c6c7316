"""Request/response capability used to reach hosted inference endpoints.

The classifier only ever sees ``InferenceTransport.post()``: a JSON payload
goes in, a status code and (on success, unless decode=False) a decoded body
come out.  Tests swap in scripted fakes; production uses ``HttpxTransport``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import httpx

logger = logging.getLogger(__name__)

HTTP_GONE = 410


@dataclass(frozen=True)
class InferenceResponse:
    status_code: int
    body: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def gone(self) -> bool:
        """Model removed or deprecated upstream — retrying it is pointless."""
        return self.status_code == HTTP_GONE


@runtime_checkable
class InferenceTransport(Protocol):
    """Anything that can POST a JSON payload with a bearer credential."""

    async def post(
        self, url: str, payload: dict[str, Any], credential: str, decode: bool = True
    ) -> InferenceResponse:
        """Send payload and return the response.

        With decode=False only the status code is reported and the body is
        left unread.

        Raises:
            httpx.HTTPError (or any exception): on network-level failure.
            ValueError: if decode is set and a success body is not valid JSON.
        """
        ...


class HttpxTransport:
    """InferenceTransport backed by a single long-lived ``httpx.AsyncClient``.

    Usage::

        async with HttpxTransport(timeout=30.0) as transport:
            classifier = RemoteClassifier(transport)
            ...
    """

    def __init__(
        self,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> HttpxTransport:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def post(
        self, url: str, payload: dict[str, Any], credential: str, decode: bool = True
    ) -> InferenceResponse:
        resp = await self._client.post(
            url,
            json=payload,
            headers={
                "Authorization": f"Bearer {credential}",
                "Content-Type": "application/json",
            },
        )
        if not resp.is_success:
            logger.debug("POST %s → HTTP %d", url, resp.status_code)
        if not (resp.is_success and decode):
            return InferenceResponse(status_code=resp.status_code)
        return InferenceResponse(status_code=resp.status_code, body=resp.json())
