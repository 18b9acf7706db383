"""Environment-driven configuration for the credential broker and server."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple

from crm_proxy.utils.logging import get_logger

logger = get_logger("config")

DEFAULT_INSTANCE_URL = "https://login.salesforce.com"
DEFAULT_CONNECT_TIMEOUT = 10
DEFAULT_PORT = 3001
PORT_ATTEMPTS = 10

_TRUTHY = {"1", "true", "yes", "on"}


def get_api_timeout() -> Tuple[int, int]:
    """Return the (connect, read) timeout tuple for Salesforce HTTP calls."""
    read_timeout = int(os.getenv("SF_API_TIMEOUT", "30"))
    return DEFAULT_CONNECT_TIMEOUT, read_timeout


def _env(name: str) -> str:
    return (os.getenv(name) or "").strip()


def _load_private_key() -> str:
    """Return PEM key material from ``SF_PRIVATE_KEY`` or ``SF_PRIVATE_KEY_PATH``."""
    inline = os.getenv("SF_PRIVATE_KEY") or ""
    if inline.strip():
        # .env files usually carry the PEM on one line with literal "\n".
        return inline.replace("\\n", "\n").strip()

    key_path = _env("SF_PRIVATE_KEY_PATH")
    if not key_path:
        return ""
    try:
        return Path(key_path).expanduser().read_text(encoding="utf-8").strip()
    except OSError as exc:
        logger.warning("Could not read private key file %s: %s", key_path, exc.strerror)
        return ""


@dataclass(frozen=True)
class BrokerConfig:
    """Immutable Salesforce credentials, loaded once at process start.

    Every field is optional; which strategies the broker attempts depends on
    which fields are non-empty.
    """

    instance_url: str = DEFAULT_INSTANCE_URL
    client_id: str = ""
    client_secret: str = field(default="", repr=False)
    username: str = ""
    password: str = field(default="", repr=False)
    security_token: str = field(default="", repr=False)
    jwt_private_key: str = field(default="", repr=False)
    session_token: str = field(default="", repr=False)
    cli_enabled: bool = True
    cli_command: str = "sf"
    cli_target_org: str = ""
    cli_timeout: int = 30

    @property
    def token_url(self) -> str:
        return f"{self.instance_url.rstrip('/')}/services/oauth2/token"

    @classmethod
    def from_env(cls) -> "BrokerConfig":
        return cls(
            instance_url=_env("SF_INSTANCE_URL") or DEFAULT_INSTANCE_URL,
            client_id=_env("SF_CLIENT_ID"),
            client_secret=_env("SF_CLIENT_SECRET"),
            username=_env("SF_USERNAME"),
            password=os.getenv("SF_PASSWORD") or "",
            security_token=_env("SF_SECURITY_TOKEN"),
            jwt_private_key=_load_private_key(),
            session_token=_env("SF_SESSION_TOKEN"),
            cli_enabled=(os.getenv("SF_CLI_FALLBACK", "true").strip().lower() in _TRUTHY),
            cli_command=_env("SF_CLI_COMMAND") or "sf",
            cli_target_org=_env("SF_TARGET_ORG"),
            cli_timeout=int(os.getenv("SF_CLI_TIMEOUT", "30")),
        )


@dataclass(frozen=True)
class ServerSettings:
    """Listening address and browser-facing options for the HTTP server."""

    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    port_attempts: int = PORT_ATTEMPTS
    cors_allow_origins: Tuple[str, ...] = ("*",)

    @classmethod
    def from_env(cls) -> "ServerSettings":
        origins = tuple(
            origin.strip()
            for origin in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",")
            if origin.strip()
        )
        return cls(
            host=_env("HOST") or "0.0.0.0",
            port=int(os.getenv("PORT", str(DEFAULT_PORT))),
            cors_allow_origins=origins or ("*",),
        )

