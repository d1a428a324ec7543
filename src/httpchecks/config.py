# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for http-checks."""

import os
from dataclasses import dataclass, field

from .version import __version__

DEFAULT_USER_AGENT = f"http-checks/{__version__}"
DEFAULT_URL = "http://localhost:80/"
DEFAULT_EVENTS_API = "http://localhost:3031/events"
DEFAULT_TIMEOUT = 15


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class HttpSettings:
    """HTTP client defaults."""

    user_agent: str = DEFAULT_USER_AGENT
    max_body_bytes: int = 16 * 1024 * 1024

    @classmethod
    def from_env(cls) -> "HttpSettings":
        """Create settings from environment variables (evaluated at call time)."""
        max_body_bytes = _int_env("HTTP_CHECKS_MAX_BODY_BYTES", cls.max_body_bytes)
        if max_body_bytes <= 0:
            max_body_bytes = cls.max_body_bytes
        return cls(
            user_agent=os.getenv("HTTP_CHECKS_USER_AGENT", cls.user_agent),
            max_body_bytes=max_body_bytes,
        )


def load_http_settings() -> HttpSettings:
    """Load HTTP settings from environment with sensible defaults."""
    return HttpSettings.from_env()


@dataclass(frozen=True)
class EndpointDefaults:
    """
    Global per-endpoint defaults.

    Every field that an endpoint descriptor omits is taken from here when the
    endpoint list is resolved.
    """

    url: str = DEFAULT_URL
    headers: tuple[str, ...] = ()
    search_string: str = ""
    redirect_ok: bool = False
    timeout: int = DEFAULT_TIMEOUT
    mtls_key_file: str = ""
    mtls_cert_file: str = ""
    trusted_ca: str = ""
    insecure_skip_verify: bool = False
    create_event: bool = False
    event_entity_name: str = ""
    event_check_name: str = ""
    event_handlers: tuple[str, ...] = ()
    events_api: str = DEFAULT_EVENTS_API

    @classmethod
    def from_env(cls, **overrides) -> "EndpointDefaults":
        """Build defaults honoring CHECK_URL / CHECK_SEARCH_STRING, then apply explicit overrides."""
        values = {
            "url": os.getenv("CHECK_URL", cls.url),
            "search_string": os.getenv("CHECK_SEARCH_STRING", cls.search_string),
            "insecure_skip_verify": _bool_env("HTTP_CHECKS_INSECURE_SKIP_VERIFY", cls.insecure_skip_verify),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        for key in ("headers", "event_handlers"):
            if key in values:
                values[key] = tuple(values[key])
        return cls(**values)


@dataclass(frozen=True)
class CheckConfig:
    """Immutable configuration for one multi-endpoint run."""

    defaults: EndpointDefaults = field(default_factory=EndpointDefaults)
    endpoints: str = ""
    endpoints_file: str = ""
    dry_run: bool = False
    suppress_ok_output: bool = False


__all__ = [
    "CheckConfig",
    "DEFAULT_EVENTS_API",
    "DEFAULT_TIMEOUT",
    "DEFAULT_URL",
    "DEFAULT_USER_AGENT",
    "EndpointDefaults",
    "HttpSettings",
    "load_http_settings",
]
