# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Endpoint resolution, probing, evaluation and reporting."""

from .policy import DEFAULT_CHECK_NAME, RULES, Rule, evaluate
from .probe import build_probe_request, probe_endpoint
from .report import build_report, configuration_error_report, overall_severity
from .resolver import (
    default_check_name,
    default_entity_name,
    merge_endpoint,
    parse_descriptor,
    resolve_endpoints,
    validate_endpoint,
)
from .runner import EndpointRunner
from .single import parse_duration, run_http_check, run_http_get, run_http_json, run_http_perf

__all__ = [
    "DEFAULT_CHECK_NAME",
    "EndpointRunner",
    "RULES",
    "Rule",
    "build_probe_request",
    "build_report",
    "configuration_error_report",
    "default_check_name",
    "default_entity_name",
    "evaluate",
    "merge_endpoint",
    "overall_severity",
    "parse_descriptor",
    "parse_duration",
    "probe_endpoint",
    "resolve_endpoints",
    "run_http_check",
    "run_http_get",
    "run_http_json",
    "run_http_perf",
    "validate_endpoint",
]
