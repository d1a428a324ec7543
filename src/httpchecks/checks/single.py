# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Single-URL checks: status/string check, response-time check, JSON query check and GET passthrough.

Each is the one-endpoint case of the endpoint pipeline: the endpoint is
merged from defaults and validated by the resolver, probed once, and judged
without aggregation or events.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import replace
from typing import Any

import jq
from simpleeval import simple_eval

from ..config import EndpointDefaults
from ..errors import ConfigurationError
from ..http.client import HttpClient
from ..models import AggregateReport, EndpointResult, EndpointSpec, RawEndpoint, Severity
from .policy import DEFAULT_CHECK_NAME, PHASE_DESCRIPTIONS, evaluate
from .probe import probe_endpoint
from .report import configuration_error_report
from .resolver import merge_endpoint, validate_endpoint

logger = logging.getLogger(__name__)

PERF_CHECK_NAME = "http-perf"
GET_CHECK_NAME = "http-get"
JSON_CHECK_NAME = "http-json"

_DURATION_PART_RE = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(text: str) -> float:
    """Parse ``1s``, ``500ms``, ``1.5s`` or ``1m30s`` into seconds."""
    raw = str(text or "").strip()
    if raw == "0":
        return 0.0
    parts = _DURATION_PART_RE.findall(raw)
    if not parts or "".join(number + unit for number, unit in parts) != raw:
        raise ValueError(f"invalid duration {text!r}")
    return sum(float(number) * _DURATION_UNITS[unit] for number, unit in parts)


def _single_endpoint(defaults: EndpointDefaults, **overrides) -> EndpointSpec:
    return replace(merge_endpoint(RawEndpoint(), defaults), **overrides)


def _single_report(result: EndpointResult) -> AggregateReport:
    return AggregateReport(severity=result.severity, lines=(result.message,), results=(result,))


def _validate_method(method: str, post_data: str) -> None:
    if (method == "GET" and post_data) or (method == "POST" and not post_data):
        raise ConfigurationError("malformed POST parameters")


def run_http_check(
    client: HttpClient,
    defaults: EndpointDefaults,
    *,
    method: str = "GET",
    post_data: str = "",
) -> AggregateReport:
    """Status/string check of a single URL."""
    method = (method or "GET").upper()
    endpoint = _single_endpoint(defaults, method=method, post_data=post_data)
    try:
        validate_endpoint(endpoint)
        _validate_method(method, post_data)
    except ConfigurationError as exc:
        return configuration_error_report(exc)

    outcome = probe_endpoint(client, endpoint)
    severity, message = evaluate(endpoint, outcome, check_name=DEFAULT_CHECK_NAME)
    return _single_report(EndpointResult(severity=severity, message=message, endpoint=endpoint))


def _format_perf(timings: dict[str, float], total: float, in_ms: bool) -> tuple[str, str]:
    names = ("connect", "tls_handshake", "first_byte")
    if in_ms:
        output = f"{int(total * 1000)}ms"
        values = [f"{name}_duration={int(timings.get(name, 0.0) * 1000)}" for name in names]
        values.append(f"total_request_duration={int(total * 1000)}")
    else:
        output = f"{total:0.6f}s"
        values = [f"{name}_duration={timings.get(name, 0.0):0.6f}" for name in names]
        values.append(f"total_request_duration={total:0.6f}")
    return output, ", ".join(values)


def run_http_perf(
    client: HttpClient,
    defaults: EndpointDefaults,
    *,
    warning: str = "1s",
    critical: str = "2s",
    output_in_ms: bool = False,
    method: str = "GET",
    post_data: str = "",
) -> AggregateReport:
    """Response-time threshold check of a single URL; redirects are not followed."""
    method = (method or "GET").upper()
    endpoint = _single_endpoint(defaults, method=method, post_data=post_data, redirect_ok=False, search_string="")
    try:
        warning_seconds = parse_duration(warning)
        critical_seconds = parse_duration(critical)
    except ValueError as exc:
        return configuration_error_report(ConfigurationError(str(exc), Severity.CRITICAL))
    try:
        validate_endpoint(endpoint)
        _validate_method(method, post_data)
    except ConfigurationError as exc:
        return configuration_error_report(exc)

    outcome = probe_endpoint(client, endpoint)
    if not outcome.ok:
        description = PHASE_DESCRIPTIONS.get(outcome.error_phase or "", "error making request")
        message = f"{PERF_CHECK_NAME} CRITICAL: {description} ({outcome.error_message})"
        return _single_report(EndpointResult(Severity.CRITICAL, message, endpoint))

    timings = dict(outcome.response.meta.get("timings") or {})
    total = float(timings.get("headers", timings.get("total", 0.0)))
    output, perfdata = _format_perf(timings, total, output_in_ms)

    if total > critical_seconds:
        severity = Severity.CRITICAL
    elif total > warning_seconds:
        severity = Severity.WARNING
    else:
        severity = Severity.OK
    message = f"{PERF_CHECK_NAME} {severity.name}: {output} | {perfdata}"
    return _single_report(EndpointResult(severity, message, endpoint))


def run_http_get(client: HttpClient, defaults: EndpointDefaults) -> AggregateReport:
    """Fetch a single URL and pass its body through as the check output."""
    endpoint = _single_endpoint(defaults, method="GET", post_data="", redirect_ok=True, search_string="")
    try:
        validate_endpoint(endpoint)
    except ConfigurationError as exc:
        return configuration_error_report(exc)

    outcome = probe_endpoint(client, endpoint)
    if not outcome.ok:
        description = PHASE_DESCRIPTIONS.get(outcome.error_phase or "", "error making request")
        message = f"{GET_CHECK_NAME} CRITICAL: {description} ({outcome.error_message})"
        return _single_report(EndpointResult(Severity.CRITICAL, message, endpoint))
    return _single_report(EndpointResult(Severity.OK, outcome.body, endpoint))


def query_value(program: Any, document: Any) -> Any:
    """Last value a compiled jq program yields for ``document``; None when it yields nothing."""
    value = None
    try:
        for value in program.input_value(document):
            pass
    except ValueError as exc:
        logger.debug("jq query stopped with an error: %s", exc)
    return value


def evaluate_expression(value: Any, expression: str) -> bool:
    """Evaluate ``value <expression>`` (e.g. ``value >= 10``) and require a boolean result."""
    result = simple_eval(f"value {expression}", names={"value": value})
    if not isinstance(result, bool):
        raise ValueError(f"expression {expression!r} returned {type(result).__name__}, not a boolean")
    return result


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def run_http_json(
    client: HttpClient,
    defaults: EndpointDefaults,
    *,
    query: str = "",
    expression: str = "",
    method: str = "GET",
    post_data: str = "",
) -> AggregateReport:
    """
    Query a JSON response with jq and compare the result against an expression.

    The last value produced by ``query`` is bound to ``value`` and
    ``value <expression>`` must evaluate to True for the check to pass.
    Redirects are followed.
    """
    method = (method or "GET").upper()
    endpoint = _single_endpoint(defaults, method=method, post_data=post_data, redirect_ok=True, search_string="")
    try:
        validate_endpoint(endpoint)
        if not query:
            raise ConfigurationError("--query is required")
        if not expression:
            raise ConfigurationError("--expression is required")
        _validate_method(method, post_data)
    except ConfigurationError as exc:
        return configuration_error_report(exc)

    def critical(message: str) -> AggregateReport:
        return _single_report(EndpointResult(Severity.CRITICAL, f"{JSON_CHECK_NAME} CRITICAL: {message}", endpoint))

    outcome = probe_endpoint(client, endpoint, extra_headers={"Accept": "application/json"})
    if not outcome.ok:
        description = PHASE_DESCRIPTIONS.get(outcome.error_phase or "", "error making request")
        return critical(f"{description} ({outcome.error_message})")

    try:
        program = jq.compile(query)
    except ValueError as exc:
        return critical(f'Failed to parse query "{query}", error: {exc}')
    try:
        document = json.loads(outcome.body)
    except ValueError as exc:
        return critical(f"Could not unmarshal response body into JSON: {exc}")

    value = query_value(program, document)
    if value is None:
        return critical(f'No value was returned for query "{query}"')

    try:
        found = evaluate_expression(value, expression)
    except Exception as exc:  # noqa: BLE001
        return critical(f"error evaluating expression: {exc}")

    shown = _format_value(value)
    if found:
        message = (
            f'{JSON_CHECK_NAME} OK:  The value {shown} found at {query} matched with expression "{expression}" '
            "and returned true"
        )
        return _single_report(EndpointResult(Severity.OK, message, endpoint))
    return critical(
        f'The value {shown} found at {query} did not match with expression "{expression}" and returned false'
    )


__all__ = [
    "evaluate_expression",
    "parse_duration",
    "query_value",
    "run_http_check",
    "run_http_get",
    "run_http_json",
    "run_http_perf",
]
