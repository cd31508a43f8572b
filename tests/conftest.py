"""
Pytest fixtures for the SV2 UI gateway tests
"""
from typing import Callable, Dict, List

import httpx
import pytest
from fastapi.testclient import TestClient

from sv2_ui.app import create_app
from sv2_ui.assets import AssetStore
from sv2_ui.config import Settings

TRANSLATOR_URL = "http://translator.test:9092"
JDC_URL = "http://jdc.test:9091"

INDEX_HTML = b"<!doctype html><html><body><div id=\"root\"></div></body></html>"


def upstream_response(status_code: int = 200, body: bytes = b"", headers: Dict[str, str] = None) -> httpx.Response:
    """Build a mock backend response whose body is still unread, like a real one."""
    headers = dict(headers or {})
    headers.setdefault("content-length", str(len(body)))
    return httpx.Response(status_code, headers=headers, stream=httpx.ByteStream(body))


@pytest.fixture
def app_settings() -> Settings:
    return Settings(
        TRANSLATOR_URL=TRANSLATOR_URL + "/",
        JDC_URL=JDC_URL,
        LOG_LEVEL="DEBUG",
        _env_file=None,
    )


@pytest.fixture
def assets() -> AssetStore:
    return AssetStore.from_files({
        "index.html": INDEX_HTML,
        "assets/style.css": b"body { margin: 0; }",
        "assets/app.js": b"console.log('sv2');",
        "logo.svg": b"<svg></svg>",
        "blob.sv2bin": b"\x00\x01\x02",
    })


@pytest.fixture
def upstream_requests() -> List[httpx.Request]:
    return []


@pytest.fixture
def make_client(app_settings, assets, upstream_requests) -> Callable[..., TestClient]:
    """Gateway test client whose backends are answered by ``handler``."""

    def factory(handler=None, store: AssetStore = None, **client_kwargs) -> TestClient:
        def record(request: httpx.Request):
            upstream_requests.append(request)
            if handler is None:
                return upstream_response(200, b"{}", {"content-type": "application/json"})
            return handler(request)

        upstream = httpx.AsyncClient(transport=httpx.MockTransport(record))
        app = create_app(app_settings, assets=assets if store is None else store, client=upstream)
        return TestClient(app, **client_kwargs)

    return factory
