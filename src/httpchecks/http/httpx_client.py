# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed HttpClient implementation."""

from __future__ import annotations

import logging
import socket
import threading
import time
from collections.abc import Callable
from contextlib import suppress
from typing import Any

import httpx

from ..config import HttpSettings, load_http_settings
from ..errors import categorize_exception
from .client import HttpClient
from .models import PHASE_CREATE, PHASE_PARSE, PHASE_READ, PHASE_SEND, HttpRequest, HttpResponse
from .tls import build_ssl_context

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 15.0

# httpcore trace event prefixes -> timing keys recorded in HttpResponse.meta["timings"].
_TRACE_PHASES = {
    "connection.connect_tcp": "connect",
    "connection.start_tls": "tls_handshake",
    "http11.receive_response_headers": "first_byte",
    "http2.receive_response_headers": "first_byte",
}

# Trace events whose return value is a network stream opened for the request.
_STREAM_EVENTS = ("connection.connect_tcp.complete", "connection.start_tls.complete")


class _Watchdog:
    """
    Wall-clock limit for one request, redirects included.

    httpx timeouts apply to each connect/read/write separately, so a server
    that trickles bytes never trips them. When the deadline passes, every
    socket opened for the request is shut down, which unblocks whatever read
    or write is pending and makes the request fail.
    """

    def __init__(self, timeout: float):
        self.expired = False
        self._sockets: list[socket.socket] = []
        self._lock = threading.Lock()
        self._timer = threading.Timer(timeout, self._expire)
        self._timer.daemon = True

    def watch(self, stream: Any) -> None:
        get_extra_info = getattr(stream, "get_extra_info", None)
        sock = get_extra_info("socket") if get_extra_info is not None else None
        if sock is None:
            return
        with self._lock:
            self._sockets.append(sock)
            expired = self.expired
        if expired:
            _shutdown(sock)

    def _expire(self) -> None:
        with self._lock:
            self.expired = True
            sockets = list(self._sockets)
        for sock in sockets:
            _shutdown(sock)

    def __enter__(self) -> _Watchdog:
        self._timer.start()
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self._timer.cancel()


def _shutdown(sock: socket.socket) -> None:
    with suppress(OSError):
        sock.shutdown(socket.SHUT_RDWR)


class _TraceRecorder:
    """Collects per-phase durations from httpcore's ``trace`` request extension."""

    def __init__(self, start: float, watchdog: _Watchdog | None = None):
        self.start = start
        self.watchdog = watchdog
        self._started: dict[str, float] = {}
        self.durations: dict[str, float] = {}

    def __call__(self, event_name: str, info: dict[str, Any]) -> None:
        if self.watchdog is not None and event_name in _STREAM_EVENTS:
            self.watchdog.watch(info.get("return_value"))

        prefix, _, state = event_name.rpartition(".")
        key = _TRACE_PHASES.get(prefix)
        if key is None:
            return
        now = time.perf_counter()
        if state == "started":
            self._started[key] = now
        elif state == "complete":
            if key == "first_byte":
                self.durations[key] = now - self.start
            elif key in self._started:
                self.durations[key] = now - self._started[key]


def _parse_url(raw: str) -> httpx.URL:
    url = httpx.URL(raw)
    if url.scheme not in ("http", "https") or not url.host:
        raise httpx.InvalidURL(f"unsupported or relative URL: {raw!r}")
    return url


def _timeout_failure(phase: str, timeout: float, **meta: Any) -> HttpResponse:
    exc = httpx.TimeoutException(f"request timed out after {timeout:g}s")
    return HttpResponse.failure(phase, exc, error_category=categorize_exception(exc).value, **meta)


class HttpxClient(HttpClient):
    """
    Synchronous httpx client wrapper.

    A new ``httpx.Client`` is created for every request so that TLS trust,
    client certificates and redirect policy come from that request alone.
    ``HttpRequest.timeout`` bounds the whole request: connecting, the TLS
    handshake, every redirect hop and reading the body.
    """

    def __init__(
        self,
        settings: HttpSettings | None = None,
        client_factory: Callable[..., httpx.Client] | None = None,
    ):
        self.settings = settings or load_http_settings()
        self._client_factory = client_factory or httpx.Client

    def _build_client(self, request: HttpRequest, url: httpx.URL, timeout: float) -> httpx.Client:
        kwargs: dict[str, Any] = {
            "follow_redirects": request.allow_redirects,
            "timeout": httpx.Timeout(timeout),
        }
        if url.scheme == "https":
            kwargs["verify"] = build_ssl_context(request.tls)
        return self._client_factory(**kwargs)

    def request(self, request: HttpRequest) -> HttpResponse:
        timeout = request.timeout if request.timeout and request.timeout > 0 else DEFAULT_REQUEST_TIMEOUT

        try:
            url = _parse_url(request.url)
        except Exception as exc:  # noqa: BLE001
            logger.debug("URL parse failed for %s: %s", request.url, exc)
            return HttpResponse.failure(PHASE_PARSE, exc, error_category=categorize_exception(exc).value)

        headers = dict(request.headers or {})
        if not any(name.lower() == "user-agent" for name in headers):
            headers["User-Agent"] = self.settings.user_agent
        if request.host:
            headers = {name: value for name, value in headers.items() if name.lower() != "host"}
            headers["Host"] = request.host

        try:
            client = self._build_client(request, url, timeout)
        except Exception as exc:  # noqa: BLE001
            logger.debug("Client construction failed for %s: %s", request.url, exc)
            return HttpResponse.failure(PHASE_CREATE, exc, error_category=categorize_exception(exc).value)

        start = time.perf_counter()
        deadline = time.monotonic() + timeout
        watchdog = _Watchdog(timeout)
        trace = _TraceRecorder(start, watchdog)

        with client, watchdog:
            try:
                http_request = client.build_request(
                    request.method,
                    url,
                    headers=headers,
                    content=request.body,
                    extensions={"trace": trace},
                )
            except Exception as exc:  # noqa: BLE001
                logger.debug("Request construction failed for %s: %s", request.url, exc)
                return HttpResponse.failure(PHASE_CREATE, exc, error_category=categorize_exception(exc).value)

            try:
                resp = client.send(http_request, stream=True, follow_redirects=request.allow_redirects)
            except Exception as exc:  # noqa: BLE001
                if watchdog.expired:
                    logger.debug("Request to %s exceeded %ss", request.url, timeout)
                    return _timeout_failure(PHASE_SEND, timeout)
                category = categorize_exception(exc)
                logger.debug("Request to %s failed (%s): %s", request.url, category.value, exc)
                return HttpResponse.failure(PHASE_SEND, exc, error_category=category.value)

            headers_elapsed = time.perf_counter() - start
            try:
                if time.monotonic() > deadline:
                    logger.debug("Response headers from %s arrived after %ss", request.url, timeout)
                    return _timeout_failure(PHASE_SEND, timeout)
                content, truncated = self._read_body(resp, deadline)
            except Exception as exc:  # noqa: BLE001
                if watchdog.expired:
                    logger.debug("Reading body from %s exceeded %ss", request.url, timeout)
                    return _timeout_failure(PHASE_READ, timeout, status_code=resp.status_code)
                category = categorize_exception(exc)
                logger.debug("Reading body from %s failed (%s): %s", request.url, category.value, exc)
                return HttpResponse.failure(
                    PHASE_READ,
                    exc,
                    error_category=category.value,
                    status_code=resp.status_code,
                )
            finally:
                resp.close()

        if time.monotonic() > deadline:
            logger.debug("Reading body from %s exceeded %ss", request.url, timeout)
            return _timeout_failure(PHASE_READ, timeout, status_code=resp.status_code)

        elapsed = time.perf_counter() - start
        encoding = resp.encoding or "utf-8"
        try:
            text = content.decode(encoding, errors="replace")
        except LookupError:
            text = content.decode("utf-8", errors="replace")

        timings = dict(trace.durations)
        timings.setdefault("first_byte", headers_elapsed)
        timings["headers"] = headers_elapsed
        timings["total"] = elapsed

        return HttpResponse(
            ok=True,
            status_code=resp.status_code,
            headers=dict(resp.headers),
            text=text,
            content=content,
            url=str(resp.url),
            meta={
                "body_truncated": truncated,
                "body_bytes_read": len(content),
                "body_bytes_limit": self.settings.max_body_bytes,
                "redirect_chain": [str(previous.url) for previous in resp.history],
                "timings": timings,
            },
        )

    def _read_body(self, resp: httpx.Response, deadline: float) -> tuple[bytes, bool]:
        max_body_bytes = self.settings.max_body_bytes
        if max_body_bytes <= 0:
            max_body_bytes = 16 * 1024 * 1024

        content = bytearray()
        truncated = False
        for chunk in resp.iter_bytes():
            if time.monotonic() > deadline:
                raise httpx.ReadTimeout("request timeout exceeded while reading body")
            if not chunk:
                continue
            remaining = max_body_bytes - len(content)
            if len(chunk) >= remaining:
                content.extend(chunk[:remaining])
                truncated = len(chunk) > remaining
                if truncated:
                    break
                continue
            content.extend(chunk)
        return bytes(content), truncated

    def close(self) -> None:
        return None
