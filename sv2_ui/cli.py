"""
Command line interface for the SV2 UI gateway.
"""
import asyncio
import logging
import webbrowser
from typing import Optional

import typer
import uvicorn

from sv2_ui.app import configure_logging, create_app
from sv2_ui.assets import AssetStore
from sv2_ui.config import Settings, settings
from sv2_ui.reachability import BackendChecker
from sv2_ui.registry import BackendRegistry, ConfigurationError

logger = logging.getLogger(__name__)

app = typer.Typer(help="Serves the Stratum V2 monitoring dashboard")


def resolve_settings(**overrides) -> Settings:
    """Apply command line options on top of environment settings."""
    update = {key.upper(): value for key, value in overrides.items() if value is not None}
    return settings.model_copy(update=update)


def open_browser(port: int) -> None:
    url = f"http://localhost:{port}"
    logger.info(f"Opening browser at {url}")
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error as e:
        logger.warning(f"Failed to open browser: {e}")
        return
    if not opened:
        logger.warning("Failed to open browser: no usable browser found")


@app.command()
def serve(
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to listen on"),
    host: Optional[str] = typer.Option(None, help="Host to bind to"),
    translator_url: Optional[str] = typer.Option(None, help="Translator Proxy monitoring URL"),
    jdc_url: Optional[str] = typer.Option(None, help="JDC monitoring URL"),
    no_open: bool = typer.Option(False, "--no-open", help="Don't automatically open the browser"),
    assets_dir: Optional[str] = typer.Option(None, help="Directory with the built UI"),
    log_level: Optional[str] = typer.Option(None, help="Log level"),
):
    """Run the gateway."""
    app_settings = resolve_settings(
        port=port,
        host=host,
        translator_url=translator_url,
        jdc_url=jdc_url,
        assets_dir=assets_dir,
        log_level=log_level,
    )

    try:
        gateway = create_app(app_settings)
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=1)

    logger.info(f"Starting SV2 UI server on http://{app_settings.HOST}:{app_settings.PORT}")

    if not (no_open or app_settings.NO_OPEN):
        open_browser(app_settings.PORT)

    uvicorn.run(
        gateway,
        host=app_settings.HOST,
        port=app_settings.PORT,
        log_level=app_settings.LOG_LEVEL.lower()
    )


@app.command()
def check(
    translator_url: Optional[str] = typer.Option(None, help="Translator Proxy monitoring URL"),
    jdc_url: Optional[str] = typer.Option(None, help="JDC monitoring URL"),
):
    """Check that every backend answers its health endpoint."""
    app_settings = resolve_settings(translator_url=translator_url, jdc_url=jdc_url)
    configure_logging(app_settings.LOG_LEVEL)

    try:
        registry = BackendRegistry.from_mapping(app_settings.backend_urls())
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=1)

    checker = BackendChecker(timeout=app_settings.CHECK_TIMEOUT)
    results = asyncio.run(checker.check_all(registry))

    for result in results:
        state = "ok" if result.reachable else "unreachable"
        typer.echo(f"{result.prefix}: {state} ({result.url}) - {result.detail}")

    if not all(result.reachable for result in results):
        raise typer.Exit(code=1)


@app.command()
def assets(
    assets_dir: Optional[str] = typer.Option(None, help="Directory with the built UI"),
):
    """List the bundled UI assets."""
    app_settings = resolve_settings(assets_dir=assets_dir)
    store = AssetStore.from_directory(app_settings.assets_path)

    if store.entry_document is None:
        typer.echo(f"No index.html in {app_settings.assets_path}", err=True)

    for path in store.paths():
        typer.echo(f"{path}\t{store.get(path).mime_type}")


if __name__ == "__main__":
    app()
