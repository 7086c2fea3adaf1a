"""httpx-based HTTP client used by probes.

Returns the status code and body for any response; only transport
problems (connect errors, timeouts) raise ``HttpProbeError``. Whether a
status code is acceptable is for the probe to decide.
"""

from __future__ import annotations

import json as _json
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class HttpProbeError(Exception):
    """Raised when a request could not be completed."""

    def __init__(self, detail: str, status_code: int | None = None, url: str | None = None) -> None:
        self.status_code = status_code
        self.detail = detail
        self.url = url
        super().__init__(detail)

    @property
    def details(self) -> dict[str, Any]:
        """Recorded on the failed outcome; no statusCode means unreachable."""
        data: dict[str, Any] = {}
        if self.url:
            data["url"] = self.url
        if self.status_code is not None:
            data["statusCode"] = self.status_code
        return data


@dataclass
class HttpResult:
    status_code: int
    text: str = ""
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        try:
            return _json.loads(self.text)
        except ValueError as e:
            raise HttpProbeError(f"Invalid JSON body: {e}", self.status_code) from e


class HttpClient:
    """Async HTTP client with a per-call timeout.

    ``transport`` is only set by tests (``httpx.MockTransport``).
    """

    def __init__(
        self,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport

    async def request(
        self,
        url: str,
        method: str = "GET",
        headers: dict[str, str] | None = None,
        json: Any = None,
        timeout: float | None = None,
        follow_redirects: bool = True,
    ) -> HttpResult:
        try:
            async with httpx.AsyncClient(
                timeout=timeout or self._timeout,
                follow_redirects=follow_redirects,
                transport=self._transport,
            ) as client:
                resp = await client.request(method, url, headers=headers, json=json)
        except httpx.TimeoutException:
            raise HttpProbeError(f"Request to {url} timed out", url=url)
        except httpx.ConnectError as e:
            raise HttpProbeError(f"Connection error: {e}", url=url)
        except httpx.HTTPError as e:
            raise HttpProbeError(f"{type(e).__name__}: {e}", url=url)

        logger.debug("%s %s -> %d", method, url, resp.status_code)
        return HttpResult(
            status_code=resp.status_code,
            text=resp.text,
            headers=dict(resp.headers),
        )

    async def get(self, url: str, **kwargs: Any) -> HttpResult:
        return await self.request(url, "GET", **kwargs)

    async def post(self, url: str, **kwargs: Any) -> HttpResult:
        return await self.request(url, "POST", **kwargs)
