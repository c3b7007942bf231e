"""HTTP transport for the OpenProof registry.

A :class:`Transport` issues exactly one request per call against the
configured origin, reads the whole (streamed) body and hands back a
:class:`Response` whose ``data`` is the decoded JSON body, or the raw text
when the body is not JSON.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from .config import ClientConfig
from .errors import RemoteRejectedError, RequestTimeoutError, TransportError

logger = logging.getLogger(__name__)


@dataclass
class Response:
    """A completed 2xx response.

    Attributes:
        status_code: The HTTP status.
        text: The raw body.
        data: ``json.loads(text)`` if that succeeds, else ``text``.
    """

    status_code: int
    text: str
    data: Any


def decode_body(text: str) -> Any:
    """Parse *text* as JSON, falling back to the text itself."""
    try:
        return json.loads(text)
    except ValueError:
        return text


def encode_body(body: Any) -> bytes | None:
    if body is None:
        return None
    if isinstance(body, str):
        return body.encode("utf-8")
    return json.dumps(body).encode("utf-8")


class Transport:
    """Single-attempt HTTP client bound to one registry origin.

    Usage::

        async with Transport(ClientConfig()) as transport:
            response = await transport.request("GET", "/documents")
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or ClientConfig()
        self._client = httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.http_timeout,
            headers={"User-Agent": self._config.user_agent},
            transport=http_transport,
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    async def __aenter__(self) -> Transport:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def request(
        self,
        method: str,
        endpoint: str,
        body: Any = None,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
    ) -> Response:
        """Send one request and return the parsed response.

        Args:
            method: HTTP method (GET, POST, etc.).
            endpoint: Path appended to the configured base URL.
            body: ``str`` bodies are sent verbatim, anything else is
                serialised to JSON.  ``None`` sends no body.
            headers: Merged over the default ``User-Agent`` header.
            params: Query parameters, URL-encoded by httpx.

        Raises:
            RemoteRejectedError: On a status outside ``[200, 300)``.
            RequestTimeoutError: If the deadline expires first.
            TransportError: If no response was received at all.
        """
        timeout = self._config.http_timeout
        try:
            status_code, text = await asyncio.wait_for(
                self._send(method, endpoint, encode_body(body), headers, params),
                timeout=timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            logger.debug("%s %s timed out after %ss", method, endpoint, timeout)
            raise RequestTimeoutError(timeout) from exc
        except httpx.HTTPError as exc:
            logger.debug("%s %s failed: %r", method, endpoint, exc)
            raise TransportError(exc) from exc

        logger.debug("%s %s -> %d (%d bytes)", method, endpoint, status_code, len(text))
        if not 200 <= status_code < 300:
            raise RemoteRejectedError(status_code, text)
        return Response(status_code=status_code, text=text, data=decode_body(text))

    async def _send(
        self,
        method: str,
        endpoint: str,
        content: bytes | None,
        headers: dict[str, str] | None,
        params: dict[str, str] | None,
    ) -> tuple[int, str]:
        async with self._client.stream(
            method, endpoint, content=content, headers=headers, params=params
        ) as response:
            chunks = [chunk async for chunk in response.aiter_bytes()]
            encoding = response.encoding or "utf-8"
            return response.status_code, b"".join(chunks).decode(encoding, errors="replace")
