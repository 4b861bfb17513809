"""Generic HTTP client used by every route provider."""

import logging
from dataclasses import dataclass, field
from typing import Optional, Union

import httpx

from routewatch.exceptions import TransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


@dataclass
class APIResponse:
    """Raw provider response. Non-2xx statuses are not errors at this level."""

    status_code: int
    body: bytes
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class APIClient:
    """Thin wrapper around httpx.AsyncClient with a bounded timeout per call."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self._transport = transport

    async def execute(
        self,
        method: str,
        url: str,
        body: Optional[Union[bytes, str]] = None,
        headers: Optional[dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> APIResponse:
        """Send one request and return the raw response.

        Raises:
            TransportError: connection, timeout or read failure
        """
        request_headers = {"Accept": "application/json"}
        if body is not None:
            request_headers["Content-Type"] = "application/json"
        if headers:
            request_headers.update(headers)

        try:
            async with httpx.AsyncClient(
                timeout=timeout or self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method.upper(),
                    url,
                    content=body,
                    headers=request_headers,
                )
        except httpx.TimeoutException as e:
            raise TransportError(f"Request to {url} timed out: {e}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"{type(e).__name__}: {e}") from e

        logger.debug(f"{method.upper()} {url} -> {response.status_code}")
        return APIResponse(
            status_code=response.status_code,
            body=response.content,
            headers=dict(response.headers),
        )

    async def get(self, url: str, headers: Optional[dict[str, str]] = None, **kwargs) -> APIResponse:
        return await self.execute("GET", url, headers=headers, **kwargs)
