"""
Static asset serving with single-page-application fallback.
"""
import logging

from fastapi.responses import PlainTextResponse, Response

from sv2_ui.assets import AssetStore

logger = logging.getLogger(__name__)


def serve_static(path: str, assets: AssetStore) -> Response:
    """
    Serve a bundled file, or the SPA shell for client-side routes.

    Only an empty or broken bundle (no index.html at all) is a 404.
    """
    path = path[1:] if path.startswith("/") else path

    entry = assets.get(path)
    if entry is not None:
        return Response(content=entry.data, status_code=200, media_type=entry.mime_type)

    shell = assets.entry_document
    if shell is not None:
        return Response(content=shell.data, status_code=200, media_type="text/html")

    logger.debug(f"No UI asset for /{path} and no entry document")
    return PlainTextResponse("UI assets not found", status_code=404)
