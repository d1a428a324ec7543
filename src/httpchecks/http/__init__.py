# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP client exports."""

from .adapters import StubHttpClient
from .client import HttpClient, create_default_http_client
from .headers import build_request_headers, header_value, split_header
from .httpx_client import HttpxClient
from .models import Headers, HttpRequest, HttpResponse
from .tls import TlsPolicy, build_ssl_context

__all__ = [
    "Headers",
    "HttpClient",
    "HttpxClient",
    "HttpRequest",
    "HttpResponse",
    "StubHttpClient",
    "TlsPolicy",
    "build_request_headers",
    "build_ssl_context",
    "create_default_http_client",
    "header_value",
    "split_header",
]
