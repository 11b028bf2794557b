"""
Build a ServiceConfig from environment variables.

The environment is read exactly once, here; everything downstream works on the
resulting ``ServiceConfig``. Pass an explicit mapping to keep callers (and
tests) independent of the process environment.

Supported env vars:
    TIKA_VERSION          - server version (default 1.20)
    TIKA_SERVER_JAR       - explicit server archive path
    TIKA_PATH             - storage directory for downloads (default: temp dir)
    TIKA_TRANSLATOR       - lingo24, google, or a full translator class name
    TIKA_VERBOSE          - 1/true/yes/on to show sidecar output
    TIKA_SERVER_ENDPOINT  - use an existing remote service instead of a sidecar
    TIKA_SERVER_ADDRESS   - bind address of the managed sidecar (default 127.0.0.1:9998)
    TIKA_JAVA             - runtime interpreter for archives (default java)
    TIKA_STARTUP_TIMEOUT  - readiness timeout in seconds, 0 waits forever (default 60)
    TIKA_REQUEST_TIMEOUT  - HTTP timeout in seconds (default 30)
"""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from tikaclient.core.config.models import (
    DEFAULT_BIND_ADDRESS,
    DEFAULT_VERSION,
    ServiceConfig,
)
from tikaclient.core.exceptions import ConfigurationError
from tikaclient.core.server.models import ManagedLocal, RemoteOnly, Verbosity
from tikaclient.core.server.resolver import resolve_artifact
from tikaclient.core.web.translate import Translator

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off", "")


def parse_bool(name: str, value: str) -> bool:
    """
    Parse a boolean env value.

    Raises:
        ConfigurationError: If the value is not a recognised boolean
    """
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ConfigurationError(f"Invalid {name} value '{value}', expected a boolean", variable=name)


def parse_seconds(name: str, value: str) -> float | None:
    """
    Parse a non-negative number of seconds; ``0`` means no limit.

    Raises:
        ConfigurationError: If the value is not a non-negative number
    """
    try:
        seconds = float(value)
    except ValueError as e:
        raise ConfigurationError(
            f"Invalid {name} value '{value}', expected seconds", variable=name
        ) from e
    if seconds < 0:
        raise ConfigurationError(f"{name} cannot be negative", variable=name)
    return seconds or None


def load_config(environ: Mapping[str, str] | None = None, **overrides: Any) -> ServiceConfig:
    """
    Build a ServiceConfig from ``environ`` (defaults to ``os.environ``).

    Keyword overrides take precedence over the environment and are passed
    straight to ``ServiceConfig``.

    Raises:
        ConfigurationError: On undecodable or malformed values
        UrlParseError: If TIKA_SERVER_ENDPOINT is not a valid URL
        AddressParseError: If TIKA_SERVER_ADDRESS is not a valid ip:port
    """
    env = os.environ if environ is None else environ
    values: dict[str, Any] = {}

    version = env.get("TIKA_VERSION") or DEFAULT_VERSION
    values["version"] = version

    if storage := env.get("TIKA_PATH"):
        values["storage_dir"] = Path(storage)

    if translator := env.get("TIKA_TRANSLATOR"):
        values["translator"] = Translator.from_name(translator)

    if verbose := env.get("TIKA_VERBOSE"):
        is_verbose = parse_bool("TIKA_VERBOSE", verbose)
        values["verbosity"] = Verbosity.VERBOSE if is_verbose else Verbosity.SILENT

    if java := env.get("TIKA_JAVA"):
        values["java"] = java

    if startup := env.get("TIKA_STARTUP_TIMEOUT"):
        values["startup_timeout"] = parse_seconds("TIKA_STARTUP_TIMEOUT", startup)

    if request_timeout := env.get("TIKA_REQUEST_TIMEOUT"):
        seconds = parse_seconds("TIKA_REQUEST_TIMEOUT", request_timeout)
        if seconds is None:
            raise ConfigurationError("TIKA_REQUEST_TIMEOUT must be positive")
        values["request_timeout"] = seconds

    if endpoint := env.get("TIKA_SERVER_ENDPOINT"):
        values["mode"] = RemoteOnly(endpoint_url=endpoint)
    else:
        address = env.get("TIKA_SERVER_ADDRESS") or DEFAULT_BIND_ADDRESS
        values["mode"] = ManagedLocal(bind_address=address)

    values.update(overrides)

    if "artifact" not in values:
        values["artifact"] = resolve_artifact(
            artifact_override=env.get("TIKA_SERVER_JAR"),
            version=values["version"],
            search_path=env.get("PATH", ""),
        )

    return ServiceConfig.build(**values)


__all__ = ["load_config", "parse_bool", "parse_seconds"]
