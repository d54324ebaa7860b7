"""
http.py – Async HTTP client built on *aiohttp* with failures surfaced as
          :class:`~core.errors.TransportError`.

No retries and no back-off: the first failed request aborts the caller.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import aiohttp

from ..errors import TransportError

logger = logging.getLogger(__name__)


class HttpClient:
    """
    Thin wrapper over *aiohttp.ClientSession* adding:

    * a lazily created session with a total request timeout
    * non-2xx responses turned into ``TransportError`` carrying status + body
    * async context-manager support
    """

    def __init__(self, *, timeout: float = 30.0) -> None:
        self._timeout = timeout
        self._own_session: Optional[aiohttp.ClientSession] = None

    # ---------------------------------------------- #
    # Async context-manager
    async def __aenter__(self) -> "HttpClient":  # noqa: D401
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: D401
        await self.close()

    # ---------------------------------------------- #
    # Session management
    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._own_session is None or self._own_session.closed:
            timeout = aiohttp.ClientTimeout(total=self._timeout)
            self._own_session = aiohttp.ClientSession(timeout=timeout)
        return self._own_session

    async def close(self) -> None:
        if self._own_session and not self._own_session.closed:
            await self._own_session.close()
            self._own_session = None

    # ---------------------------------------------- #
    # Public helpers
    async def post_json(self, url: str, data: Any, **kwargs) -> Any:
        """POST ``data`` as JSON and return the decoded JSON response."""
        session = await self._ensure_session()

        try:
            async with session.post(url, json=data, **kwargs) as resp:
                body = await resp.text()
                if resp.status < 200 or resp.status >= 300:
                    logger.error("HTTP POST %s returned %d", url, resp.status)
                    raise TransportError(
                        f"HTTP {resp.status}: {body}", status=resp.status, body=body
                    )
                try:
                    return await resp.json(content_type=None)
                except ValueError as e:
                    raise TransportError(
                        f"Invalid JSON in response (HTTP {resp.status}): {body[:200]}",
                        status=resp.status,
                        body=body,
                    ) from e
        except aiohttp.ClientError as e:
            logger.error("HTTP POST %s failed: %s", url, e)
            raise TransportError(f"Request to {url} failed: {e}") from e
        except asyncio.TimeoutError as e:
            logger.error("HTTP POST %s timed out", url)
            raise TransportError(f"Request to {url} timed out") from e
