"""
Configuration module for flights_cli.

Resolves the SerpAPI credential and request settings once, at the
command-line boundary, and hands them to the provider client as an
explicit value. Nothing below the CLI reads the process environment.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from flights_cli.exceptions import MissingApiKeyError

API_KEY_ENV_VAR = "SERPAPI_KEY"
SERPAPI_URL = "https://serpapi.com/search.json"
REQUEST_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class Settings:
    """
    Immutable provider settings.

    Attributes:
        api_key: SerpAPI key sent with every request.
        base_url: SerpAPI search endpoint.
        timeout_seconds: Hard limit for the single outbound request.
    """

    api_key: str
    base_url: str = SERPAPI_URL
    timeout_seconds: float = REQUEST_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        if not self.api_key:
            raise MissingApiKeyError(API_KEY_ENV_VAR)
        if self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {self.timeout_seconds}")

    def __repr__(self) -> str:
        return (
            f"Settings(api_key='***', base_url={self.base_url!r}, "
            f"timeout_seconds={self.timeout_seconds!r})"
        )


def load_settings(
    api_key: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    Build Settings from an explicit key or the environment.

    An explicit key always wins. Otherwise SERPAPI_KEY is read from `env`
    (defaults to os.environ, after loading a local .env file).

    Args:
        api_key: Key passed on the command line, if any.
        env: Mapping to read the fallback key from. Intended for tests.

    Returns:
        Validated Settings.

    Raises:
        MissingApiKeyError: If neither source provides a key.
    """
    if not api_key:
        if env is None:
            load_dotenv()
            env = os.environ
        api_key = env.get(API_KEY_ENV_VAR, "")

    return Settings(api_key=api_key)
