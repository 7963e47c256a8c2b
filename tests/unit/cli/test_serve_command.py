"""Tests for the serve command."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from coursehub.cli import app
from coursehub.config import get_settings

runner = CliRunner()


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    monkeypatch.chdir("/")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestServe:
    def test_invalid_configuration_exits(self, monkeypatch) -> None:
        """Missing connection strings refuse startup."""
        for name in ("MONGODB_URI", "MONGODB_DB_NAME", "REDIS_URI"):
            monkeypatch.delenv(name, raising=False)

        with patch("uvicorn.run") as run:
            result = runner.invoke(app, ["serve"])

        assert result.exit_code == 1
        run.assert_not_called()

    def test_runs_factory_on_configured_port(self, monkeypatch) -> None:
        monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017")
        monkeypatch.setenv("MONGODB_DB_NAME", "coursehub")
        monkeypatch.setenv("REDIS_URI", "redis://localhost:6379")
        monkeypatch.setenv("PORT", "4000")

        with patch("uvicorn.run") as run:
            result = runner.invoke(app, ["serve"])

        assert result.exit_code == 0
        kwargs = run.call_args.kwargs
        assert kwargs["app"] == "coursehub.api.app:create_app"
        assert kwargs["factory"] is True
        assert kwargs["port"] == 4000

    def test_port_option_overrides_settings(self, monkeypatch) -> None:
        monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017")
        monkeypatch.setenv("MONGODB_DB_NAME", "coursehub")
        monkeypatch.setenv("REDIS_URI", "redis://localhost:6379")

        with patch("uvicorn.run") as run:
            result = runner.invoke(app, ["serve", "--port", "9000"])

        assert result.exit_code == 0
        assert run.call_args.kwargs["port"] == 9000
