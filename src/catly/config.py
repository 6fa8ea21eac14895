"""Catly runtime configuration.

All settings are read from environment variables and can be overridden by
CLI flags. The core only ever sees them as constructor parameters.

Environment Variables:
    CATLY_DOMAIN: Public scheme and host for returned URLs (default: http://127.0.0.1)
    CATLY_HTTP_PORT: Port of the read API (default: 8080)
    CATLY_UPLOAD_PORT: Port of the upload API (default: 8000)
    CATLY_HOST: Bind address for both listeners (default: 0.0.0.0)
    CATLY_STORAGE_PATH: ":memory:" or a directory for file storage (default: ":memory:")
    CATLY_MAX_REQUEST_SIZE: Maximum accepted request body in bytes (default: 8MB)
    CATLY_LOG_LEVEL: Root log level (default: INFO)
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

CATLY_DOMAIN_ENV = "CATLY_DOMAIN"
CATLY_HTTP_PORT_ENV = "CATLY_HTTP_PORT"
CATLY_UPLOAD_PORT_ENV = "CATLY_UPLOAD_PORT"
CATLY_HOST_ENV = "CATLY_HOST"
CATLY_STORAGE_PATH_ENV = "CATLY_STORAGE_PATH"
CATLY_MAX_REQUEST_SIZE_ENV = "CATLY_MAX_REQUEST_SIZE"
CATLY_LOG_LEVEL_ENV = "CATLY_LOG_LEVEL"

DEFAULT_DOMAIN = "http://127.0.0.1"
DEFAULT_HTTP_PORT = 8080
DEFAULT_UPLOAD_PORT = 8000
DEFAULT_HOST = "0.0.0.0"
MEMORY_STORAGE_PATH = ":memory:"
DEFAULT_MAX_REQUEST_SIZE = 1 << 23
DEFAULT_LOG_LEVEL = "INFO"


class ConfigError(Exception):
    """Raised when an environment variable holds an unusable value."""


def get_env_str(key: str, default: str = "", environ: Mapping[str, str] | None = None) -> str:
    """Get string from environment variable, falling back when unset or blank."""
    env = os.environ if environ is None else environ
    val = env.get(key, "").strip()
    return val or default


def get_env_bool(key: str, default: bool = False, environ: Mapping[str, str] | None = None) -> bool:
    """Get boolean from environment variable."""
    val = get_env_str(key, "", environ).lower()
    if val in ("1", "true", "yes"):
        return True
    if val in ("0", "false", "no"):
        return False
    return default


def get_env_int(key: str, default: int, environ: Mapping[str, str] | None = None) -> int:
    """Get integer from environment variable.

    Raises:
        ConfigError: If the variable is set but is not an integer.
    """
    val = get_env_str(key, "", environ)
    if not val:
        return default
    try:
        return int(val)
    except ValueError as e:
        raise ConfigError(f"failed to read integer environment variable '{key}': {val!r}") from e


@dataclass(frozen=True)
class Settings:
    """Deployment settings for a catly process.

    Attributes:
        domain: Public scheme and host used to build object URLs.
        http_port: Port of the read API; part of every returned URL.
        upload_port: Port of the upload API.
        host: Bind address for both listeners.
        storage_path: ":memory:" or a base directory for file storage.
        max_request_size: Transport-level body limit in bytes.
        log_level: Root log level name.
    """

    domain: str = DEFAULT_DOMAIN
    http_port: int = DEFAULT_HTTP_PORT
    upload_port: int = DEFAULT_UPLOAD_PORT
    host: str = DEFAULT_HOST
    storage_path: str = MEMORY_STORAGE_PATH
    max_request_size: int = DEFAULT_MAX_REQUEST_SIZE
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def public_base_url(self) -> str:
        """Base address that object names are appended to."""
        return f"{self.domain}:{self.http_port}/"

    @property
    def storage_backend(self) -> str:
        """Name of the storage backend selected by storage_path."""
        return "memory" if self.storage_path == MEMORY_STORAGE_PATH else "filesystem"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from environment variables.

        Raises:
            ConfigError: If a numeric variable is malformed or out of range.
        """
        settings = cls(
            domain=get_env_str(CATLY_DOMAIN_ENV, DEFAULT_DOMAIN, environ).rstrip("/"),
            http_port=get_env_int(CATLY_HTTP_PORT_ENV, DEFAULT_HTTP_PORT, environ),
            upload_port=get_env_int(CATLY_UPLOAD_PORT_ENV, DEFAULT_UPLOAD_PORT, environ),
            host=get_env_str(CATLY_HOST_ENV, DEFAULT_HOST, environ),
            storage_path=get_env_str(CATLY_STORAGE_PATH_ENV, MEMORY_STORAGE_PATH, environ),
            max_request_size=get_env_int(
                CATLY_MAX_REQUEST_SIZE_ENV, DEFAULT_MAX_REQUEST_SIZE, environ
            ),
            log_level=get_env_str(CATLY_LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL, environ).upper(),
        )
        settings.check()
        return settings

    def check(self) -> None:
        """Validate numeric ranges and the log level name.

        Raises:
            ConfigError: If a port or the request size limit is out of range,
                or the log level is unknown.
        """
        for label, port in (("http_port", self.http_port), ("upload_port", self.upload_port)):
            if not 0 < port < 65536:
                raise ConfigError(f"{label} must be between 1 and 65535, got {port}")
        if self.max_request_size < 1:
            raise ConfigError(f"max_request_size must be positive, got {self.max_request_size}")
        if self.log_level not in logging.getLevelNamesMapping():
            raise ConfigError(f"unknown log level: {self.log_level!r}")
