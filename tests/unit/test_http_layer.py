# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import socket
import ssl
import threading
import time

import certifi
import httpx
import pytest

from httpchecks.config import HttpSettings
from httpchecks.http import StubHttpClient
from httpchecks.http.headers import build_request_headers, header_value, split_header
from httpchecks.http.httpx_client import HttpxClient
from httpchecks.http.models import HttpRequest, HttpResponse
from httpchecks.http.tls import TlsPolicy, build_ssl_context
from httpchecks.http.url import same_url, url_host


def mock_client(handler, created=None):
    """HttpxClient whose per-request httpx.Client is backed by a MockTransport."""

    def factory(**kwargs):
        if created is not None:
            created.append(kwargs)
        return httpx.Client(transport=httpx.MockTransport(handler), **kwargs)

    return HttpxClient(HttpSettings(user_agent="UA/1.0"), client_factory=factory)


def test_split_header_trims_and_splits_on_first_colon():
    assert split_header("X-Test:  a:b ") == ("X-Test", "a:b")
    with pytest.raises(ValueError):
        split_header("no colon here")


def test_build_request_headers_last_write_wins_and_host_override():
    headers, host = build_request_headers(["X-One: 1", "x-one: 2", "Host: virtual.example", "Accept: text/plain"])
    assert headers == {"x-one": "2", "Accept": "text/plain"}
    assert host == "virtual.example"


def test_header_value_is_case_insensitive():
    headers = {"location": "https://elsewhere/", "X-Custom": " v "}
    assert header_value(headers, "Location") == "https://elsewhere/"
    assert header_value(headers, "x-custom") == "v"
    assert header_value(headers, "missing", "fallback") == "fallback"
    assert header_value(None, "Location") == ""


def test_url_helpers():
    assert url_host("https://user:pw@example.com:8443/path") == "example.com:8443"
    assert url_host("http://example.com/") == "example.com"
    assert same_url("http://example.com/a", "http://example.com/a")
    assert not same_url("http://example.com/a", "http://example.com/b")


def test_build_ssl_context_policies():
    default = build_ssl_context(None)
    assert default.verify_mode == ssl.CERT_REQUIRED
    assert default.check_hostname is True

    insecure = build_ssl_context(TlsPolicy(insecure_skip_verify=True))
    assert insecure.verify_mode == ssl.CERT_NONE
    assert insecure.check_hostname is False

    with_bundle = build_ssl_context(TlsPolicy(trusted_ca=certifi.where()))
    assert with_bundle.cert_store_stats()["x509_ca"] > 0

    with pytest.raises(OSError):
        build_ssl_context(TlsPolicy(trusted_ca="/nonexistent/ca.pem"))


def test_httpx_client_success_sends_headers_and_host():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["host"] = request.headers.get("host")
        seen["user_agent"] = request.headers.get("user-agent")
        seen["x_test"] = request.headers.get("x-test")
        return httpx.Response(200, headers={"Content-Type": "text/plain"}, text="SUCCESS")

    client = mock_client(handler)
    resp = client.request(
        HttpRequest(url="http://example.com/", headers={"X-Test": "1"}, host="virtual.example", timeout=2)
    )
    assert resp.ok is True
    assert resp.status_code == 200
    assert resp.text == "SUCCESS"
    assert resp.content == b"SUCCESS"
    assert resp.url == "http://example.com/"
    assert seen == {"method": "GET", "host": "virtual.example", "user_agent": "UA/1.0", "x_test": "1"}
    assert resp.meta["redirect_chain"] == []
    assert resp.meta["timings"]["total"] >= resp.meta["timings"]["headers"] >= 0


def test_httpx_client_stops_at_redirect_when_not_following():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/":
            return httpx.Response(301, headers={"Location": "http://example.com/new"})
        return httpx.Response(200, text="moved here")

    resp = mock_client(handler).request(HttpRequest(url="http://example.com/", allow_redirects=False))
    assert resp.status_code == 301
    assert header_value(resp.headers, "Location") == "http://example.com/new"
    assert resp.url == "http://example.com/"


def test_httpx_client_follows_redirects_and_reports_final_url():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/":
            return httpx.Response(302, headers={"Location": "http://example.com/new"})
        return httpx.Response(200, text="moved here")

    created = []
    resp = mock_client(handler, created).request(HttpRequest(url="http://example.com/", allow_redirects=True))
    assert resp.status_code == 200
    assert resp.url == "http://example.com/new"
    assert resp.meta["redirect_chain"] == ["http://example.com/"]
    assert created[0]["follow_redirects"] is True
    assert "verify" not in created[0]


def test_httpx_client_builds_tls_context_for_https():
    created = []
    client = mock_client(lambda request: httpx.Response(204), created)
    resp = client.request(HttpRequest(url="https://secure.example/", tls=TlsPolicy(insecure_skip_verify=True)))
    assert resp.ok is True
    assert isinstance(created[0]["verify"], ssl.SSLContext)
    assert created[0]["verify"].verify_mode == ssl.CERT_NONE


def test_httpx_client_posts_body():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["body"] = request.content
        return httpx.Response(201)

    resp = mock_client(handler).request(HttpRequest(url="http://example.com/events", method="POST", body=b'{"a":1}'))
    assert resp.status_code == 201
    assert seen == {"method": "POST", "body": b'{"a":1}'}


@pytest.mark.parametrize("url", ["not a url", "ftp://example.com/file", ""])
def test_httpx_client_parse_failures(url):
    resp = mock_client(lambda request: httpx.Response(200)).request(HttpRequest(url=url))
    assert resp.ok is False
    assert resp.error_phase == "parse"
    assert resp.meta["error_category"] == "INVALID_URL"


def test_httpx_client_send_failure_is_returned_not_raised():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    resp = mock_client(handler).request(HttpRequest(url="http://unreachable.example/"))
    assert resp.ok is False
    assert resp.status_code is None
    assert resp.error_phase == "send"
    assert resp.error_type == "ConnectError"
    assert resp.error_message == "connection refused"
    assert resp.meta["error_category"] == "CONNECTION_ERROR"


def test_httpx_client_create_failure_for_unloadable_tls():
    client = mock_client(lambda request: httpx.Response(200))
    resp = client.request(HttpRequest(url="https://secure.example/", tls=TlsPolicy(trusted_ca="/nonexistent/ca.pem")))
    assert resp.ok is False
    assert resp.error_phase == "create"


def test_httpx_client_truncates_large_bodies():
    client = HttpxClient(
        HttpSettings(max_body_bytes=4),
        client_factory=lambda **kwargs: httpx.Client(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, content=b"0123456789")),
            **kwargs,
        ),
    )
    resp = client.request(HttpRequest(url="http://example.com/"))
    assert resp.content == b"0123"
    assert resp.meta["body_truncated"] is True


def test_stub_http_client_records_requests():
    stub = StubHttpClient({"http://a/": HttpResponse(ok=True, status_code=200)})
    assert stub.request(HttpRequest(url="http://a/")).status_code == 200
    missing = stub.request(HttpRequest(url="http://b/"))
    assert missing.ok is False
    assert missing.error_phase == "send"
    assert [r.url for r in stub.requests] == ["http://a/", "http://b/"]

    stub.add("http://boom/", RuntimeError("boom"))
    with pytest.raises(RuntimeError):
        stub.request(HttpRequest(url="http://boom/"))
    stub.close()
    assert stub.closed is True


def test_httpx_client_deadline_covers_slow_response_headers():
    def handler(request: httpx.Request) -> httpx.Response:
        time.sleep(0.3)
        return httpx.Response(200)

    resp = mock_client(handler).request(HttpRequest(url="http://slow.example/", timeout=0.1))
    assert resp.ok is False
    assert resp.error_phase == "send"
    assert resp.error_type == "TimeoutException"
    assert resp.meta["error_category"] == "TIMEOUT"


@pytest.fixture
def trickling_server():
    """Local HTTP server that dribbles one response header line every 0.6s."""
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    listener.bind(("127.0.0.1", 0))
    listener.listen(1)
    port = listener.getsockname()[1]

    def serve():
        try:
            conn, _ = listener.accept()
        except OSError:
            return
        with conn:
            try:
                conn.recv(65536)
                conn.sendall(b"HTTP/1.1 200 OK\r\n")
                for index in range(5):
                    time.sleep(0.6)
                    conn.sendall(f"X-Slow-{index}: 1\r\n".encode())
                conn.sendall(b"Content-Length: 0\r\n\r\n")
            except OSError:
                pass

    thread = threading.Thread(target=serve, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{port}/"
    listener.close()
    thread.join(timeout=5)


def test_httpx_client_deadline_interrupts_trickled_headers(trickling_server, monkeypatch):
    for name in ("HTTP_PROXY", "http_proxy", "ALL_PROXY", "all_proxy"):
        monkeypatch.delenv(name, raising=False)
    client = HttpxClient(HttpSettings())
    started = time.monotonic()
    resp = client.request(HttpRequest(url=trickling_server, timeout=1))
    elapsed = time.monotonic() - started

    assert resp.ok is False
    assert resp.error_phase == "send"
    assert resp.meta["error_category"] == "TIMEOUT"
    assert elapsed < 2.5
