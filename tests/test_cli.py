"""
Tests for the command line interface
"""
import pytest
from fastapi import FastAPI
from typer.testing import CliRunner

from sv2_ui import cli
from sv2_ui.reachability import CheckResult

runner = CliRunner()


@pytest.fixture
def uvicorn_calls(monkeypatch):
    calls = []
    monkeypatch.setattr(cli.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))
    return calls


@pytest.fixture
def opened(monkeypatch):
    urls = []

    def fake_open(url):
        urls.append(url)
        return True

    monkeypatch.setattr(cli.webbrowser, "open", fake_open)
    return urls


def test_serve_uses_options(uvicorn_calls, opened):
    result = runner.invoke(cli.app, [
        "serve", "--port", "8080", "--host", "0.0.0.0",
        "--translator-url", "http://10.0.0.5:9092/", "--no-open",
    ])

    assert result.exit_code == 0, result.output
    app, kwargs = uvicorn_calls[0]
    assert kwargs["host"] == "0.0.0.0"
    assert kwargs["port"] == 8080
    assert isinstance(app, FastAPI)
    assert opened == []


def test_serve_opens_browser(uvicorn_calls, opened):
    result = runner.invoke(cli.app, ["serve", "-p", "3100"])

    assert result.exit_code == 0, result.output
    assert opened == ["http://localhost:3100"]
    assert len(uvicorn_calls) == 1


def test_serve_browser_failure_is_not_fatal(uvicorn_calls, monkeypatch):
    monkeypatch.setattr(cli.webbrowser, "open", lambda url: False)

    result = runner.invoke(cli.app, ["serve"])

    assert result.exit_code == 0, result.output
    assert len(uvicorn_calls) == 1


def test_serve_rejects_bad_backend_url(uvicorn_calls):
    result = runner.invoke(cli.app, ["serve", "--jdc-url", "ftp://nowhere", "--no-open"])

    assert result.exit_code == 1
    assert "Configuration error" in result.output
    assert uvicorn_calls == []


def test_resolve_settings_keeps_unset_values():
    resolved = cli.resolve_settings(port=9000, host=None)

    assert resolved.PORT == 9000
    assert resolved.HOST == cli.settings.HOST


class FakeChecker:
    results = []

    def __init__(self, timeout=None):
        self.timeout = timeout

    async def check_all(self, registry):
        return self.results


def test_check_all_reachable(monkeypatch):
    FakeChecker.results = [
        CheckResult("translator", "http://t/api/v1/health", True, 200, "Connection successful"),
        CheckResult("jdc", "http://j/api/v1/health", True, 200, "Connection successful"),
    ]
    monkeypatch.setattr(cli, "BackendChecker", FakeChecker)

    result = runner.invoke(cli.app, ["check"])

    assert result.exit_code == 0
    assert "translator: ok" in result.output
    assert "jdc: ok" in result.output


def test_check_unreachable_exits_nonzero(monkeypatch):
    FakeChecker.results = [
        CheckResult("translator", "http://t/api/v1/health", True, 200, "Connection successful"),
        CheckResult("jdc", "http://j/api/v1/health", False, None, "Connection refused"),
    ]
    monkeypatch.setattr(cli, "BackendChecker", FakeChecker)

    result = runner.invoke(cli.app, ["check"])

    assert result.exit_code == 1
    assert "jdc: unreachable" in result.output


def test_assets_lists_bundle(tmp_path):
    (tmp_path / "assets").mkdir()
    (tmp_path / "index.html").write_bytes(b"<html></html>")
    (tmp_path / "assets" / "style.css").write_bytes(b"body{}")

    result = runner.invoke(cli.app, ["assets", "--assets-dir", str(tmp_path)])

    assert result.exit_code == 0
    assert "assets/style.css\ttext/css" in result.output
    assert "index.html\ttext/html" in result.output


def test_main_script_runs_cli(uvicorn_calls, opened):
    import main

    assert main.app is cli.app

    result = runner.invoke(main.app, ["serve", "--jdc-url", "ftp://nowhere"])

    assert result.exit_code == 1
    assert "Configuration error" in result.output
    assert uvicorn_calls == []
