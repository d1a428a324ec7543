# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import socket
import ssl as ssl_module
from collections.abc import Iterable
from enum import Enum

import httpx

from .models.severity import Severity


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    INVALID_URL = "INVALID_URL"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    NONE = "NONE"


def _root_causes(exc: BaseException) -> Iterable[BaseException]:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def categorize_exception(exc: Exception) -> ErrorCategory:
    """
    Map Python/httpx exceptions to ErrorCategory.

    httpx wraps the underlying socket/ssl errors, so the exception chain is
    walked before falling back to the httpx class itself.
    """
    if isinstance(exc, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, (httpx.InvalidURL, httpx.UnsupportedProtocol)):
        return ErrorCategory.INVALID_URL

    for cause in _root_causes(exc):
        if isinstance(cause, (ssl_module.SSLError, ssl_module.CertificateError)):
            return ErrorCategory.SSL_ERROR
        if isinstance(cause, (socket.gaierror, socket.herror)):
            return ErrorCategory.DNS_ERROR

    if isinstance(exc, (httpx.ConnectError, httpx.RemoteProtocolError, httpx.NetworkError, httpx.ProxyError)):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ConnectionError, ConnectionRefusedError, ConnectionResetError)):
        return ErrorCategory.CONNECTION_ERROR

    return ErrorCategory.UNKNOWN_ERROR


def error_category_to_reason(category: ErrorCategory | None) -> str:
    """User-facing reason string."""
    mapping = {
        ErrorCategory.TIMEOUT: "request timed out",
        ErrorCategory.SSL_ERROR: "TLS/certificate issue",
        ErrorCategory.CONNECTION_ERROR: "network connectivity issue",
        ErrorCategory.DNS_ERROR: "DNS resolution failure",
        ErrorCategory.INVALID_URL: "invalid URL",
        ErrorCategory.UNKNOWN_ERROR: "network error",
        ErrorCategory.NONE: "",
        None: "",
    }
    return mapping.get(category, "network error")


class HttpChecksError(Exception):
    """Base class for errors raised by http-checks."""


class ConfigurationError(HttpChecksError):
    """Invalid or unparseable check configuration, detected before any request is sent."""

    def __init__(self, message: str, severity: Severity = Severity.WARNING):
        super().__init__(message)
        self.message = message
        self.severity = severity


class EventDeliveryError(HttpChecksError):
    """Posting a generated event to the events API failed."""

    def __init__(self, events_api: str, reason: str):
        super().__init__(f"event delivery to {events_api} failed: {reason}")
        self.events_api = events_api
        self.reason = reason


class CombinedError(HttpChecksError):
    """Several non-fatal errors collected over one run."""

    def __init__(self, errors: Iterable[BaseException]):
        self.errors = tuple(errors)
        super().__init__(self._format())

    def _format(self) -> str:
        if len(self.errors) == 1:
            return f"1 error occurred:\n\t* {self.errors[0]}"
        bullets = "\n".join(f"\t* {error}" for error in self.errors)
        return f"{len(self.errors)} errors occurred:\n{bullets}"


def combine_errors(errors: Iterable[BaseException]) -> CombinedError | None:
    """Return a CombinedError for ``errors``, or None when there are none."""
    collected = [error for error in errors if error is not None]
    if not collected:
        return None
    return CombinedError(collected)


__all__ = [
    "CombinedError",
    "ConfigurationError",
    "ErrorCategory",
    "EventDeliveryError",
    "HttpChecksError",
    "categorize_exception",
    "combine_errors",
    "error_category_to_reason",
]
