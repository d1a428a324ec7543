# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP request/response data models used across http-checks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .tls import TlsPolicy

Headers = dict[str, str]

# Transport failure phases, in the order a request goes through them.
PHASE_PARSE = "parse"
PHASE_CREATE = "create"
PHASE_SEND = "send"
PHASE_READ = "read"


@dataclass
class HttpRequest:
    """Normalized request representation consumed by HttpClient implementations."""

    url: str
    method: str = "GET"
    headers: Headers | None = None
    body: bytes | str | None = None
    timeout: float | None = None
    allow_redirects: bool = True
    host: str | None = None
    tls: TlsPolicy | None = None


@dataclass
class HttpResponse:
    """Normalized HTTP response, or a transport failure when ``ok`` is False."""

    ok: bool
    status_code: int | None = None
    headers: Headers = field(default_factory=dict)
    text: str = ""
    content: bytes = b""
    url: str | None = None
    error_message: str | None = None
    error_type: str | None = None
    error_phase: str | None = None
    meta: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def failure(cls, phase: str, exc: BaseException, **meta: Any) -> HttpResponse:
        return cls(
            ok=False,
            error_message=str(exc) or type(exc).__name__,
            error_type=type(exc).__name__,
            error_phase=phase,
            meta=dict(meta),
        )


__all__ = [
    "Headers",
    "HttpRequest",
    "HttpResponse",
    "PHASE_CREATE",
    "PHASE_PARSE",
    "PHASE_READ",
    "PHASE_SEND",
]
