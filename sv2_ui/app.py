"""
FastAPI application setup: the SV2 UI gateway.
"""
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Optional
from urllib.parse import unquote

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from sv2_ui.assets import AssetStore
from sv2_ui.classifier import HealthCheck, Proxy, classify
from sv2_ui.config import Settings, settings
from sv2_ui.middleware import AllowAnyOriginMiddleware
from sv2_ui.proxy import PROXY_METHODS, ProxyForwarder
from sv2_ui.registry import BackendRegistry
from sv2_ui.static import serve_static

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

HEALTH_METHODS = ("GET", "HEAD")


def configure_logging(log_level: str = "INFO") -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=LOG_FORMAT
    )


@dataclass(frozen=True)
class GatewayState:
    """Process-wide state shared read-only by every request."""

    registry: BackendRegistry
    assets: AssetStore
    forwarder: ProxyForwarder


def raw_request_path(request: Request) -> str:
    """The request path as sent, still percent-encoded."""
    raw_path = request.scope.get("raw_path")
    if not raw_path:
        return request.url.path
    return raw_path.decode("latin-1").split("?", 1)[0]


def method_not_allowed(allowed) -> PlainTextResponse:
    return PlainTextResponse(
        "Method Not Allowed",
        status_code=405,
        headers={"Allow": ", ".join(allowed)}
    )


async def dispatch(request: Request) -> Response:
    """Route a request through the classifier."""
    gateway: GatewayState = request.app.state.gateway
    target = classify(raw_request_path(request), gateway.registry)

    if isinstance(target, HealthCheck):
        if request.method not in HEALTH_METHODS:
            return method_not_allowed(HEALTH_METHODS)
        return PlainTextResponse("ok")

    if isinstance(target, Proxy):
        if request.method not in PROXY_METHODS:
            return method_not_allowed(PROXY_METHODS)
        query = request.url.query
        return await gateway.forwarder.forward(
            target.route.base_url,
            target.remainder,
            f"?{query}" if query else "",
            request
        )

    return serve_static(unquote(target.path), gateway.assets)


def build_client(app_settings: Settings) -> httpx.AsyncClient:
    """Pooled outbound client shared by every proxied request."""
    return httpx.AsyncClient(
        timeout=app_settings.PROXY_TIMEOUT,
        limits=httpx.Limits(
            max_connections=app_settings.PROXY_MAX_CONNECTIONS,
            max_keepalive_connections=app_settings.PROXY_MAX_KEEPALIVE
        )
    )


def create_app(app_settings: Optional[Settings] = None,
               assets: Optional[AssetStore] = None,
               client: Optional[httpx.AsyncClient] = None) -> FastAPI:
    """
    Build the gateway application.

    The backend registry is validated here so a bad configuration fails
    before anything is served. When ``client`` is given the caller owns it;
    otherwise one pooled client is opened for the application lifespan.
    """
    app_settings = app_settings or settings
    configure_logging(app_settings.LOG_LEVEL)

    registry = BackendRegistry.from_mapping(app_settings.backend_urls())
    if assets is None:
        assets = AssetStore.from_directory(app_settings.assets_path)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        logger.info("Starting SV2 UI gateway...")
        for route in registry:
            logger.info(f"{route.prefix} URL: {route.base_url}")

        if client is not None:
            yield
        else:
            async with build_client(app_settings) as owned_client:
                app.state.gateway = GatewayState(registry, assets, ProxyForwarder(owned_client))
                yield

        logger.info("Shutting down SV2 UI gateway...")

    app = FastAPI(
        title="SV2 UI",
        description="Serves the Stratum V2 monitoring dashboard",
        version="0.1.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan
    )

    if client is not None:
        app.state.gateway = GatewayState(registry, assets, ProxyForwarder(client))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(AllowAnyOriginMiddleware)

    # Every method on every path reaches the classifier, like a router fallback.
    not_found = app.router.default

    async def fallback(scope, receive, send):
        if scope["type"] != "http":
            await not_found(scope, receive, send)
            return
        response = await dispatch(Request(scope, receive))
        await response(scope, receive, send)

    app.router.default = fallback

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"},
            headers={"Access-Control-Allow-Origin": "*"}
        )

    return app
