"""
Cross-origin middleware.
"""
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

ALLOW_ORIGIN = "access-control-allow-origin"


class AllowAnyOriginMiddleware(BaseHTTPMiddleware):
    """
    Stamp ``Access-Control-Allow-Origin: *`` on every response.

    Starlette's CORSMiddleware only answers requests that carry an Origin
    header; this covers the rest so no response goes out without it.
    """

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        if ALLOW_ORIGIN not in response.headers:
            response.headers[ALLOW_ORIGIN] = "*"
        return response
