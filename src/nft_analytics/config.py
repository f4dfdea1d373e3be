"""Environment configuration. Read at call time so tests can monkeypatch."""

from __future__ import annotations

import os

from .core.errors import ConfigurationError

DEFAULT_TRANSPORT = "stdio"
DEFAULT_HTTP_PORT = 3001


def get_api_key() -> str:
    key = os.environ.get("UNLEASH_API_KEY") or os.environ.get("UNLEASH_NFTS_API_KEY", "")
    if not key:
        raise ConfigurationError(
            "UNLEASH_API_KEY environment variable is required. Get a key at https://unleashnfts.com"
        )
    return key


def get_transport() -> str:
    return os.environ.get("MCP_TRANSPORT", DEFAULT_TRANSPORT)


def get_http_port() -> int:
    return int(os.environ.get("MCP_HTTP_PORT", str(DEFAULT_HTTP_PORT)))
