# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import pytest

from httpchecks.checks.single import (
    evaluate_expression,
    parse_duration,
    run_http_check,
    run_http_get,
    run_http_json,
    run_http_perf,
)
from httpchecks.config import EndpointDefaults
from httpchecks.http import StubHttpClient
from httpchecks.http.models import HttpResponse
from httpchecks.models import Severity

URL = "http://example.com/"
DEFAULTS = EndpointDefaults(url=URL)


def timed_response(headers_seconds, **timings):
    timings["headers"] = headers_seconds
    return HttpResponse(ok=True, status_code=200, url=URL, meta={"timings": timings})


@pytest.mark.parametrize(
    ("text", "seconds"),
    [("1s", 1.0), ("500ms", 0.5), ("1.5s", 1.5), ("1m30s", 90.0), ("250us", 0.00025), ("0", 0.0)],
)
def test_parse_duration(text, seconds):
    assert parse_duration(text) == pytest.approx(seconds)


@pytest.mark.parametrize("text", ["", "1", "fast", "1s fast", "-1s", "1d"])
def test_parse_duration_rejects_garbage(text):
    with pytest.raises(ValueError):
        parse_duration(text)


def test_http_check_posts_data():
    stub = StubHttpClient({URL: HttpResponse(ok=True, status_code=200, url=URL)})
    report = run_http_check(stub, DEFAULTS, method="post", post_data="a=1")
    assert report.severity is Severity.OK
    (request,) = stub.requests
    assert request.method == "POST"
    assert request.body == "a=1"


@pytest.mark.parametrize(("method", "data"), [("GET", "a=1"), ("POST", "")])
def test_http_check_rejects_inconsistent_method_and_data(method, data):
    stub = StubHttpClient()
    report = run_http_check(stub, DEFAULTS, method=method, post_data=data)
    assert report.severity is Severity.WARNING
    assert report.lines == ("error validating input: malformed POST parameters",)
    assert stub.requests == []


def test_http_check_requires_url():
    report = run_http_check(StubHttpClient(), EndpointDefaults(url=""))
    assert report.severity is Severity.WARNING
    assert "CHECK_URL" in report.lines[0]


@pytest.mark.parametrize(
    ("elapsed", "expected"),
    [(0.2, Severity.OK), (1.2, Severity.WARNING), (2.5, Severity.CRITICAL)],
)
def test_http_perf_thresholds(elapsed, expected):
    stub = StubHttpClient({URL: timed_response(elapsed)})
    report = run_http_perf(stub, DEFAULTS, warning="1s", critical="2s")
    assert report.severity is expected
    assert report.lines[0].startswith(f"http-perf {expected.name}: {elapsed:0.6f}s | ")
    assert stub.requests[0].allow_redirects is False


def test_http_perf_perfdata_in_milliseconds():
    stub = StubHttpClient({URL: timed_response(0.25, connect=0.01, tls_handshake=0.02, first_byte=0.2)})
    report = run_http_perf(stub, DEFAULTS, output_in_ms=True)
    assert report.lines == (
        "http-perf OK: 250ms | connect_duration=10, tls_handshake_duration=20, "
        "first_byte_duration=200, total_request_duration=250",
    )


def test_http_perf_invalid_threshold_is_critical():
    stub = StubHttpClient()
    report = run_http_perf(stub, DEFAULTS, warning="soon")
    assert report.severity is Severity.CRITICAL
    assert stub.requests == []


def test_http_perf_transport_failure_is_critical():
    report = run_http_perf(StubHttpClient(), DEFAULTS)
    assert report.severity is Severity.CRITICAL
    assert report.lines == ("http-perf CRITICAL: error making request (No stubbed response configured)",)


def test_http_get_returns_body():
    stub = StubHttpClient({URL: HttpResponse(ok=True, status_code=200, text="hello", url=URL)})
    report = run_http_get(stub, DEFAULTS)
    assert report.severity is Severity.OK
    assert report.lines == ("hello",)


def test_http_get_failure():
    report = run_http_get(StubHttpClient(), DEFAULTS)
    assert report.severity is Severity.CRITICAL
    assert report.lines[0].startswith("http-get CRITICAL: error making request")


JSON_BODY = '{"text": "testing", "number": 10, "items": [{"id": 1}, {"id": 2}], "flag": true}'


def json_stub(text=JSON_BODY):
    return StubHttpClient({URL: HttpResponse(ok=True, status_code=200, text=text, url=URL)})


@pytest.mark.parametrize(
    ("query", "expression", "expected"),
    [
        (".text", '== "testing"', Severity.OK),
        (".text", '== "notfound"', Severity.CRITICAL),
        (".number", "== 10", Severity.OK),
        (".number", "== 11", Severity.CRITICAL),
        (".number", ">= 10", Severity.OK),
        (".number", "> 9", Severity.OK),
        (".number", ">= 11", Severity.CRITICAL),
        (".number", "> 12", Severity.CRITICAL),
        (".number", "<= 10", Severity.OK),
        (".number", "< 11", Severity.OK),
        (".number", "<= 9", Severity.CRITICAL),
        (".number", "< 8", Severity.CRITICAL),
        (".items | length", "== 2", Severity.OK),
        (".items[].id", "== 2", Severity.OK),
    ],
)
def test_http_json_query_and_expression(query, expression, expected):
    stub = json_stub()
    report = run_http_json(stub, DEFAULTS, query=query, expression=expression)
    assert report.severity is expected
    (request,) = stub.requests
    assert request.method == "GET"
    assert request.headers["Accept"] == "application/json"
    assert request.allow_redirects is True


def test_http_json_messages():
    report = run_http_json(json_stub(), DEFAULTS, query=".number", expression=">= 10")
    assert report.lines == (
        'http-json OK:  The value 10 found at .number matched with expression ">= 10" and returned true',
    )
    report = run_http_json(json_stub(), DEFAULTS, query=".flag", expression="== False")
    assert report.lines == (
        'http-json CRITICAL: The value true found at .flag did not match with expression "== False" '
        "and returned false",
    )


@pytest.mark.parametrize(
    ("query", "expression", "message"),
    [("", "== 1", "--query is required"), (".number", "", "--expression is required")],
)
def test_http_json_requires_query_and_expression(query, expression, message):
    stub = json_stub()
    report = run_http_json(stub, DEFAULTS, query=query, expression=expression)
    assert report.severity is Severity.WARNING
    assert report.lines == (f"error validating input: {message}",)
    assert stub.requests == []


def test_http_json_missing_value_is_critical():
    report = run_http_json(json_stub(), DEFAULTS, query=".missing", expression="== 1")
    assert report.severity is Severity.CRITICAL
    assert report.lines == ('http-json CRITICAL: No value was returned for query ".missing"',)


@pytest.mark.parametrize(
    ("body", "query", "expression", "fragment"),
    [
        (JSON_BODY, ".number |||", "== 1", "Failed to parse query"),
        ("<html>not json</html>", ".number", "== 1", "Could not unmarshal response body into JSON"),
        (JSON_BODY, ".number", "== ", "error evaluating expression"),
        (JSON_BODY, ".number", "+ 1", "error evaluating expression"),
    ],
)
def test_http_json_errors_are_critical(body, query, expression, fragment):
    report = run_http_json(json_stub(body), DEFAULTS, query=query, expression=expression)
    assert report.severity is Severity.CRITICAL
    assert fragment in report.lines[0]


def test_http_json_transport_failure():
    report = run_http_json(StubHttpClient(), DEFAULTS, query=".a", expression="== 1")
    assert report.severity is Severity.CRITICAL
    assert report.lines[0].startswith("http-json CRITICAL: error making request")


def test_evaluate_expression_requires_boolean():
    assert evaluate_expression(10, ">= 10") is True
    assert evaluate_expression("testing", '== "testing"') is True
    with pytest.raises(ValueError):
        evaluate_expression(10, "+ 1")
