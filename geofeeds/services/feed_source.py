# geofeeds/services/feed_source.py
"""
HTTP GET → decoded JSON for every provider endpoint.

The pipeline only depends on `FeedSource.get_json`; `HttpxFeedSource` is the
production implementation. Transport problems and non-2xx answers become
FetchError, undecodable bodies become ParseError.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol

import httpx
import orjson

from geofeeds.core.errors import FetchError, ParseError
from geofeeds.core.settings import settings

logger = logging.getLogger(__name__)


class FeedSource(Protocol):
    async def get_json(self, url: str, params: Optional[Dict[str, str]] = None) -> Any: ...


def decode_json(body: bytes, *, url: str = "") -> Any:
    try:
        return orjson.loads(body)
    except orjson.JSONDecodeError as exc:
        raise ParseError(f"response from {url[:80]} is not valid JSON: {exc}") from exc


class HttpxFeedSource:
    """Shared AsyncClient; closed by the owner on shutdown."""

    def __init__(
        self,
        *,
        timeout_s: float | None = None,
        user_agent: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            timeout=float(timeout_s or settings.feeds_timeout_s),
            follow_redirects=True,
            transport=transport or httpx.AsyncHTTPTransport(retries=1),
            headers={
                "Accept": "application/json",
                "User-Agent": user_agent or settings.feeds_user_agent,
            },
        )

    async def get_json(self, url: str, params: Optional[Dict[str, str]] = None) -> Any:
        try:
            resp = await self._client.get(url, params=params)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.warning("feed_http_error status=%d url=%s", status, url[:120])
            raise FetchError(f"HTTP {status} from {url}", url=url, status_code=status) from exc
        except httpx.HTTPError as exc:
            logger.warning("feed_network_error url=%s err=%s", url[:120], exc)
            raise FetchError(f"network error fetching {url}: {exc}", url=url) from exc

        return decode_json(resp.content, url=url)

    async def aclose(self) -> None:
        await self._client.aclose()
