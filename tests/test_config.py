"""Tests for settings resolution."""

import pytest

from flights_cli.config import (
    API_KEY_ENV_VAR,
    REQUEST_TIMEOUT_SECONDS,
    SERPAPI_URL,
    Settings,
    load_settings,
)
from flights_cli.exceptions import ConfigurationError, MissingApiKeyError


class TestSettings:
    """Tests for the Settings value object."""

    def test_defaults(self) -> None:
        settings = Settings(api_key="abc")

        assert settings.base_url == SERPAPI_URL == "https://serpapi.com/search.json"
        assert settings.timeout_seconds == REQUEST_TIMEOUT_SECONDS == 30.0

    def test_empty_key_rejected(self) -> None:
        with pytest.raises(MissingApiKeyError):
            Settings(api_key="")

    def test_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="timeout_seconds"):
            Settings(api_key="abc", timeout_seconds=0)

    def test_repr_hides_key(self) -> None:
        assert "super-secret" not in repr(Settings(api_key="super-secret"))


class TestLoadSettings:
    """Tests for load_settings."""

    def test_explicit_key_wins(self) -> None:
        settings = load_settings("from-flag", env={API_KEY_ENV_VAR: "from-env"})

        assert settings.api_key == "from-flag"

    def test_falls_back_to_env(self) -> None:
        settings = load_settings(None, env={API_KEY_ENV_VAR: "from-env"})

        assert settings.api_key == "from-env"

    def test_empty_flag_falls_back_to_env(self) -> None:
        settings = load_settings("", env={API_KEY_ENV_VAR: "from-env"})

        assert settings.api_key == "from-env"

    @pytest.mark.parametrize("env", [{}, {API_KEY_ENV_VAR: ""}])
    def test_missing_key(self, env) -> None:
        with pytest.raises(MissingApiKeyError) as exc_info:
            load_settings(None, env=env)

        assert str(exc_info.value) == "Missing SerpAPI key. Use --api-key or set SERPAPI_KEY."
        assert isinstance(exc_info.value, ConfigurationError)

    def test_reads_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(API_KEY_ENV_VAR, "process-env")

        assert load_settings().api_key == "process-env"
