"""
Reverse-proxy forwarding to the monitoring backends.
"""
import logging
from typing import AsyncIterator, List, Tuple

import httpx
from fastapi import Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response, StreamingResponse
from starlette.background import BackgroundTask

logger = logging.getLogger(__name__)

# Every backend exposes its monitoring API under this sub-path.
API_ROOT = "/api"

PROXY_METHODS = ("GET", "HEAD", "POST", "PUT", "DELETE")


def build_target_url(base_url: str, remainder: str, query_string: str = "") -> str:
    """Build '{base_url}/api{remainder}{query_string}'."""
    return f"{base_url}{API_ROOT}{remainder}{query_string}"


def parse_target_url(target_url: str) -> httpx.URL:
    """Parse an outbound URL, raising httpx.InvalidURL unless it is absolute http(s)."""
    url = httpx.URL(target_url)
    if url.scheme not in ("http", "https") or not url.host:
        raise httpx.InvalidURL(f"Not an absolute http(s) URL: {target_url}")
    return url


def forwarded_headers(request: Request) -> List[Tuple[bytes, bytes]]:
    """Inbound headers minus Host, which must name the backend instead."""
    return [(key, value) for key, value in request.headers.raw if key.lower() != b"host"]


def has_body(request: Request) -> bool:
    return "content-length" in request.headers or "transfer-encoding" in request.headers


def service_unavailable(cause: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=502,
        content={"error": "Service unavailable", "details": str(cause) or cause.__class__.__name__}
    )


class ProxyForwarder:
    """
    Forward one inbound request to a backend and relay its answer.

    Each inbound request produces at most one outbound attempt; there are
    no retries. The client is shared by every request and owns its own
    connection pool.
    """

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def forward(self, base_url: str, remainder: str, query_string: str,
                      request: Request) -> Response:
        """Proxy ``request`` to ``{base_url}/api{remainder}{query_string}``."""
        target_url = build_target_url(base_url, remainder, query_string)

        try:
            url = parse_target_url(target_url)
        except httpx.InvalidURL as e:
            logger.warning(f"Invalid proxy target {target_url}: {e}")
            return PlainTextResponse("Invalid target URL", status_code=400)

        try:
            outbound = httpx.Request(
                request.method,
                url,
                headers=forwarded_headers(request),
                content=request.stream() if has_body(request) else None
            )
        except (ValueError, TypeError) as e:
            logger.error(f"Failed to build proxy request to {target_url}: {e}")
            return PlainTextResponse("Failed to build proxy request", status_code=500)

        logger.debug(f"Proxying {request.method} {target_url}")

        try:
            upstream = await self.client.send(outbound, stream=True)
        except httpx.LocalProtocolError as e:
            logger.error(f"Failed to send proxy request to {target_url}: {e}")
            return PlainTextResponse("Failed to build proxy request", status_code=500)
        except httpx.TransportError as e:
            logger.warning(f"Proxy error to {target_url}: {e}")
            return service_unavailable(e)

        return relay(upstream)


async def raw_body(upstream: httpx.Response) -> AsyncIterator[bytes]:
    try:
        async for chunk in upstream.aiter_raw():
            yield chunk
    finally:
        await upstream.aclose()


def relay(upstream: httpx.Response) -> StreamingResponse:
    """Stream an upstream response back unchanged: status, headers and raw body."""
    response = StreamingResponse(
        raw_body(upstream),
        status_code=upstream.status_code,
        background=BackgroundTask(upstream.aclose)
    )
    response.raw_headers = [(key.lower(), value) for key, value in upstream.headers.raw]
    return response
