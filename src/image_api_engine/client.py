"""HTTP client wrapper around httpx.

Every network call in the engine goes through HttpClient, so tests can
swap the transport for an httpx.MockTransport.
"""

import json
import logging
from typing import Any

import httpx
from pydantic import BaseModel

from image_api_engine.errors import TransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
USER_AGENT = "image-api-engine/0.1"


class FetchedResponse(BaseModel):
    """The parts of an HTTP response the engine consumes."""

    url: str
    status: int
    headers: dict[str, str]
    content: bytes

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")


class HttpClient:
    """Thin async wrapper for HTTP calls via httpx."""

    def __init__(
        self,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout or DEFAULT_TIMEOUT
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
            transport=self.transport,
        )

    async def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        content: str | bytes | None = None,
    ) -> FetchedResponse:
        """Send a request and return the response.

        Raises TransportError on network failure or a non-2xx status.
        """
        logger.debug("%s %s", method, url)
        try:
            async with self._client() as client:
                response = await client.request(method, url, headers=headers, content=content)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(url, reason=str(exc) or type(exc).__name__) from exc

        if not response.is_success:
            raise TransportError(url, status=response.status_code)

        return FetchedResponse(
            url=str(response.url),
            status=response.status_code,
            headers={key.lower(): value for key, value in response.headers.items()},
            content=response.content,
        )

    async def get_text(self, url: str, headers: dict[str, str] | None = None) -> str:
        response = await self.request("GET", url, headers=headers)
        return response.content.decode("utf-8", errors="replace")

    async def get_json(self, url: str, headers: dict[str, str] | None = None) -> Any:
        """GET a URL and parse the body as JSON.

        Raises TransportError on failure, ValueError on a non-JSON body.
        """
        text = await self.get_text(url, headers=headers)
        return json.loads(text)
