"""Tests for the dotenv auto-loader."""

from __future__ import annotations

import os

from portflow_mcp.dotenv import load_dotenv, parse_dotenv


class TestParseDotenv:
    """Unit tests for the .env file parser."""

    def test_basic_key_value(self, tmp_path):
        env = tmp_path / ".env"
        env.write_text("FOO=bar\n")
        assert parse_dotenv(env) == {"FOO": "bar"}

    def test_quoted_values(self, tmp_path):
        env = tmp_path / ".env"
        env.write_text("A=\"double\"\nB='single'\n")
        assert parse_dotenv(env) == {"A": "double", "B": "single"}

    def test_comments_blanks_and_malformed_lines(self, tmp_path):
        env = tmp_path / ".env"
        env.write_text("# comment\n\nNO_EQUALS\nKEY=val\n")
        assert parse_dotenv(env) == {"KEY": "val"}

    def test_export_prefix_and_equals_in_value(self, tmp_path):
        env = tmp_path / ".env"
        env.write_text("export URL=https://host?a=1&b=2\n")
        assert parse_dotenv(env) == {"URL": "https://host?a=1&b=2"}

    def test_missing_file(self, tmp_path):
        assert parse_dotenv(tmp_path / "nonexistent") == {}


class TestLoadDotenv:
    def test_injects_into_environ(self, tmp_path, monkeypatch):
        monkeypatch.setenv("_TEST_DOTENV_VAR", "")
        env = tmp_path / ".env"
        env.write_text("_TEST_DOTENV_VAR=hello\n")

        injected = load_dotenv(env)

        assert os.environ["_TEST_DOTENV_VAR"] == "hello"
        assert injected == {"_TEST_DOTENV_VAR": "hello"}

    def test_does_not_override_existing(self, tmp_path, monkeypatch):
        monkeypatch.setenv("_TEST_EXISTING", "original")
        env = tmp_path / ".env"
        env.write_text("_TEST_EXISTING=overridden\n")

        assert load_dotenv(env) == {}
        assert os.environ["_TEST_EXISTING"] == "original"

    def test_overrides_self_placeholder(self, tmp_path, monkeypatch):
        """MCP hosts pass ``${VAR}`` through literally when VAR is unset."""
        monkeypatch.setenv("GEMINI_API_KEY", "${GEMINI_API_KEY}")
        env = tmp_path / ".env"
        env.write_text("GEMINI_API_KEY=from-config\n")

        injected = load_dotenv(env)

        assert os.environ["GEMINI_API_KEY"] == "from-config"
        assert injected == {"GEMINI_API_KEY": "from-config"}


class TestConfigIntegration:
    """get_config() loads credentials from the .env file."""

    def test_config_loads_from_dotenv(self, tmp_path, monkeypatch, clean_config):
        env = tmp_path / ".env"
        env.write_text("PORTFLOW_ANALYSIS_SERVICE_URL=https://analysis.example.com\n")
        monkeypatch.setenv("PORTFLOW_ANALYSIS_SERVICE_URL", "")
        monkeypatch.setattr("portflow_mcp.dotenv.DEFAULT_ENV_PATH", env)

        from portflow_mcp.config import get_config

        assert get_config().analysis_service_url == "https://analysis.example.com"

    def test_env_var_takes_precedence(self, tmp_path, monkeypatch, clean_config):
        env = tmp_path / ".env"
        env.write_text("GEMINI_API_KEY=from-file\n")
        monkeypatch.setenv("GEMINI_API_KEY", "from-env")
        monkeypatch.setattr("portflow_mcp.dotenv.DEFAULT_ENV_PATH", env)

        from portflow_mcp.config import get_config

        assert get_config().gemini_api_key == "from-env"
