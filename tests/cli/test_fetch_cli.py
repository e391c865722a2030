"""Tests for the fetch and baseline CLI commands."""

import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from ospo_crawler import __version__
from ospo_crawler.cli.app import app
from tests.fixtures import URL_HOST, ScriptedTransport, make_error, make_page, make_response

runner = CliRunner()


class FakeTransport(ScriptedTransport):
    """ScriptedTransport usable as an async context manager."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        return None


@pytest.fixture(autouse=True)
def _no_logging_setup():
    """Keep the CLI callback from reconfiguring loguru sinks."""
    with patch("ospo_crawler.cli.app.setup_logging"):
        yield


@pytest.fixture
def patch_transport(monkeypatch):
    """Replace GitHubKitTransport in the CLI with a scripted one."""

    def _start(outcomes):
        transport = FakeTransport(outcomes)
        monkeypatch.setattr("ospo_crawler.cli.fetch.GitHubKitTransport", lambda: transport)
        return transport

    return _start


class TestApp:
    """Tests for global options."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestFetchCommand:
    """Tests for `ospo-crawler fetch`."""

    def test_fetch_json_output(self, patch_transport):
        patch_transport([make_response("bummer", 500), make_response({"id": 1})])

        result = runner.invoke(
            app, ["fetch", f"{URL_HOST}/thing", "--retry-delay", "1", "--format", "json"]
        )

        assert result.exit_code == 0, result.stdout
        document = json.loads(result.stdout)
        assert document["result"] == {"id": 1}
        assert document["activity"][0]["attempts"] == 2
        assert document["activity"][0]["delays"] == [{"retry": 1}]
        assert document["rate_limit"]["core"]["remaining"] == 4000

    def test_fetch_all_text_output(self, patch_transport):
        target = "paged?per_page=100"
        transport = patch_transport(
            [
                make_page(target, [{"page": 1}], next_page=2),
                make_page(target, [{"page": 2}], previous=1),
            ]
        )

        result = runner.invoke(app, ["fetch", "--all", f"{URL_HOST}/paged"])

        assert result.exit_code == 0, result.stdout
        assert "2 item(s)" in result.stdout
        assert "Activity" in result.stdout
        assert len(transport.requested) == 2

    def test_fetch_failure_exits_nonzero(self, patch_transport):
        patch_transport([make_error(), make_error()])

        result = runner.invoke(
            app,
            ["fetch", f"{URL_HOST}/down", "--max-attempts", "2", "--retry-delay", "0"],
        )

        assert result.exit_code == 1
        assert "Fetch failed" in result.stdout


class TestBaselineCommand:
    """Tests for `ospo-crawler baseline`."""

    def test_baseline(self, patch_transport):
        from ospo_crawler.github import TransportResponse

        patch_transport([TransportResponse(status_code=200, elapsed_ms=42.0)])

        result = runner.invoke(app, ["baseline", "--samples", "1"])

        assert result.exit_code == 0, result.stdout
        assert "42" in result.stdout
