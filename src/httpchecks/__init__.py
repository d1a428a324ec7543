# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
http-checks package entrypoint.

A family of HTTP monitoring checks. Each check probes one or more URLs,
judges the responses, and reports an OK / WARNING / CRITICAL / UNKNOWN
severity. The multi-endpoint check can additionally hand individual results
to an events API. HTTP behavior is abstracted behind an injectable client
interface, and domain objects are modeled with typed dataclasses.
"""

from .config import CheckConfig, EndpointDefaults, HttpSettings, load_http_settings
from .models import AggregateReport, EndpointResult, EndpointSpec, Severity
from .http import (
    HttpClient,
    HttpRequest,
    HttpResponse,
    HttpxClient,
    StubHttpClient,
    create_default_http_client,
)
from .checks import resolve_endpoints, run_http_check, run_http_get, run_http_json, run_http_perf
from .log import setup_logging
from .runtime import HttpEndpointsCheck
from .version import __version__

__all__ = [
    "AggregateReport",
    "CheckConfig",
    "EndpointDefaults",
    "EndpointResult",
    "EndpointSpec",
    "HttpClient",
    "HttpEndpointsCheck",
    "HttpRequest",
    "HttpResponse",
    "HttpSettings",
    "HttpxClient",
    "Severity",
    "StubHttpClient",
    "create_default_http_client",
    "load_http_settings",
    "resolve_endpoints",
    "run_http_check",
    "run_http_get",
    "run_http_json",
    "run_http_perf",
    "setup_logging",
    "__version__",
]
