"""Tests for the snitch command line interface."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import httpx
import pytest
from typer.testing import CliRunner

from snitch.cli import _mask_token, app
from snitch.issues.registry import resolve_issue_apis

runner = CliRunner()


@pytest.fixture
def cli_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate the CLI from the real home directory and environment."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("COLUMNS", "200")
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    monkeypatch.setenv("GITLAB_PERSONAL_TOKEN", "gitea.example.com:abcdef123456")
    return home


def _with_transport(transport: httpx.BaseTransport):
    """Patch the CLI so resolved clients talk to ``transport``."""
    return patch(
        "snitch.cli.resolve_issue_apis",
        side_effect=lambda env, config: resolve_issue_apis(env, config, transport=transport),
    )


class TestMaskToken:
    """Tests for token masking in listings."""

    def test_long_token_shows_last_four(self) -> None:
        assert _mask_token("abcdef123456") == "****3456"

    def test_short_token_fully_masked(self) -> None:
        assert _mask_token("abc") == "****"

    def test_empty_token(self) -> None:
        assert "none" in _mask_token("")


class TestHostsCommand:
    """Tests for `snitch hosts`."""

    def test_lists_credentials_masked(self, cli_env: Path) -> None:
        result = runner.invoke(app, ["hosts"])

        assert result.exit_code == 0
        assert "gitea.example.com" in result.output
        assert "****3456" in result.output
        assert "abcdef123456" not in result.output

    def test_marks_shadowed_duplicates(self, cli_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITLAB_PERSONAL_TOKEN", "gitea.example.com:first1,gitea.example.com:second")

        result = runner.invoke(app, ["hosts"])

        assert result.exit_code == 0
        assert "active" in result.output
        assert "shadowed" in result.output

    def test_no_credentials(self, cli_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GITLAB_PERSONAL_TOKEN")

        result = runner.invoke(app, ["hosts"])

        assert result.exit_code == 0
        assert "No credentials found" in result.output

    def test_home_failure_exits(self, cli_env: Path) -> None:
        with patch.object(Path, "home", side_effect=RuntimeError("Could not determine home directory.")):
            result = runner.invoke(app, ["hosts"])

        assert result.exit_code == 1
        assert "home directory" in result.output


class TestCreateIssueCommand:
    """Tests for `snitch create-issue`."""

    def test_creates_issue(self, cli_env: Path) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(201, json={"iid": 42})

        with _with_transport(httpx.MockTransport(handler)):
            result = runner.invoke(
                app,
                ["create-issue", "owner/project", "fix bug", "--body", "details", "--host", "gitea.example.com"],
            )

        assert result.exit_code == 0, result.output
        assert "#42" in result.output
        assert requests[0].url.params["title"] == "fix bug"
        assert requests[0].headers["TOKEN"] == "abcdef123456"

    def test_unknown_host_exits(self, cli_env: Path) -> None:
        result = runner.invoke(app, ["create-issue", "proj", "fix bug", "--host", "other.example.com"])

        assert result.exit_code == 1
        assert "No credentials found for host other.example.com" in result.output

    def test_default_host_from_config(self, cli_env: Path, tmp_path: Path) -> None:
        (tmp_path / ".snitch").mkdir()
        (tmp_path / ".snitch" / "config.yaml").write_text("default_host: gitea.example.com\n")
        transport = httpx.MockTransport(lambda request: httpx.Response(201, json={"iid": 3}))

        with _with_transport(transport):
            result = runner.invoke(app, ["create-issue", "proj", "fix bug"])

        assert result.exit_code == 0, result.output
        assert "#3" in result.output

    def test_api_error_exits(self, cli_env: Path) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(500, text="boom"))

        with _with_transport(transport):
            result = runner.invoke(app, ["create-issue", "proj", "fix bug", "--host", "gitea.example.com"])

        assert result.exit_code == 1
        assert "Failed to create issue" in result.output

    def test_invalid_config_exits(self, cli_env: Path, tmp_path: Path) -> None:
        config_path = tmp_path / "bad.yaml"
        config_path.write_text("scheme: ftp\n")

        result = runner.invoke(app, ["--config", str(config_path), "hosts"])

        assert result.exit_code == 1
        assert "Invalid config file" in result.output


class TestGetIssueCommand:
    """Tests for `snitch get-issue`."""

    def test_prints_issue(self, cli_env: Path) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"iid": 42, "title": "fix bug", "state": "opened"})

        with _with_transport(httpx.MockTransport(handler)):
            result = runner.invoke(app, ["get-issue", "proj", "42", "--host", "gitea.example.com"])

        assert result.exit_code == 0, result.output
        assert "fix bug" in result.output
        assert "opened" in result.output
        assert requests[0].url.path.endswith("/issues/42")

    def test_json_output(self, cli_env: Path) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"iid": 7, "title": "t"}))

        with _with_transport(transport):
            result = runner.invoke(app, ["get-issue", "proj", "#7", "--host", "gitea.example.com", "--json"])

        assert result.exit_code == 0, result.output
        assert '"iid": 7' in result.output

    def test_invalid_reference_exits(self, cli_env: Path) -> None:
        result = runner.invoke(app, ["get-issue", "proj", "abc", "--host", "gitea.example.com"])

        assert result.exit_code == 1
        assert "Expected an issue reference" in result.output


class TestVersionCommand:
    """Tests for `snitch version`."""

    def test_prints_version(self, cli_env: Path) -> None:
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "snitch" in result.output
