# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Evaluation policy: turn a probe outcome into a severity and message.

The decision is an ordered list of rules. The first rule whose predicate
matches produces the verdict, so a search-string check never reaches the
status-code rules, and a followed redirect is reported as OK before the
stopped-redirect WARNING rule is considered.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from ..errors import ErrorCategory, error_category_to_reason
from ..http.models import PHASE_CREATE, PHASE_PARSE, PHASE_READ, PHASE_SEND
from ..http.url import same_url
from ..models import NO_RESPONSE_STATUS, EndpointSpec, ProbeOutcome, Severity

DEFAULT_CHECK_NAME = "http-check"

PHASE_DESCRIPTIONS = {
    PHASE_PARSE: "error parsing URL",
    PHASE_CREATE: "error creating request",
    PHASE_SEND: "error making request",
    PHASE_READ: "error reading body",
}

Verdict = tuple[Severity, str]
Predicate = Callable[[EndpointSpec, ProbeOutcome], bool]
Outcome = Callable[[EndpointSpec, ProbeOutcome, str], Verdict]


def _category_reason(outcome: ProbeOutcome) -> str:
    category = outcome.response.meta.get("error_category")
    try:
        return error_category_to_reason(ErrorCategory(category)) if category else ""
    except ValueError:
        return ""


@dataclass(frozen=True)
class Rule:
    name: str
    applies: Predicate
    verdict: Outcome


def _transport_failure(endpoint: EndpointSpec, outcome: ProbeOutcome, name: str) -> Verdict:
    description = PHASE_DESCRIPTIONS.get(outcome.error_phase or "", "error making request")
    reason = outcome.error_message or _category_reason(outcome)
    detail = f" ({reason})" if reason else ""
    return Severity.CRITICAL, f"{name} CRITICAL: {description}{detail}"


def _search_string(endpoint: EndpointSpec, outcome: ProbeOutcome, name: str) -> Verdict:
    if endpoint.search_string in outcome.body:
        return Severity.OK, f'{name} OK: found "{endpoint.search_string}" at {outcome.final_url}'
    return Severity.CRITICAL, f'{name} CRITICAL: "{endpoint.search_string}" not found at {outcome.final_url}'


def _http_error(endpoint: EndpointSpec, outcome: ProbeOutcome, name: str) -> Verdict:
    return Severity.CRITICAL, f"{name} CRITICAL: HTTP Status {outcome.status_code} for {endpoint.url}"


def _followed_redirect(endpoint: EndpointSpec, outcome: ProbeOutcome, name: str) -> Verdict:
    return (
        Severity.OK,
        f"{name} OK: HTTP Status {outcome.status_code} for {outcome.final_url} (redirect from {endpoint.url})",
    )


def _stopped_redirect(endpoint: EndpointSpec, outcome: ProbeOutcome, name: str) -> Verdict:
    location = outcome.header("Location")
    extra = f" (redirects to {location})" if location else ""
    return Severity.WARNING, f"{name} WARNING: HTTP Status {outcome.status_code} for {endpoint.url}{extra}"


def _no_response(endpoint: EndpointSpec, outcome: ProbeOutcome, name: str) -> Verdict:
    return Severity.UNKNOWN, f"{name} UNKNOWN: HTTP Status {outcome.status_code} for {endpoint.url}"


def _status_ok(endpoint: EndpointSpec, outcome: ProbeOutcome, name: str) -> Verdict:
    return Severity.OK, f"{name} OK: HTTP Status {outcome.status_code} for {endpoint.url}"


RULES: tuple[Rule, ...] = (
    Rule("transport-failure", lambda e, o: not o.ok, _transport_failure),
    Rule("search-string", lambda e, o: bool(e.search_string), _search_string),
    Rule("http-error", lambda e, o: o.status_code >= 400, _http_error),
    Rule(
        "followed-redirect",
        lambda e, o: e.redirect_ok and not same_url(o.final_url, e.url),
        _followed_redirect,
    ),
    Rule("stopped-redirect", lambda e, o: not e.redirect_ok and 300 <= o.status_code <= 399, _stopped_redirect),
    Rule("no-response", lambda e, o: o.status_code == NO_RESPONSE_STATUS, _no_response),
    Rule("status-ok", lambda e, o: True, _status_ok),
)


def evaluate(
    endpoint: EndpointSpec,
    outcome: ProbeOutcome,
    *,
    check_name: str = DEFAULT_CHECK_NAME,
    rules: Sequence[Rule] = RULES,
) -> Verdict:
    """Return the verdict of the first matching rule."""
    for rule in rules:
        if rule.applies(endpoint, outcome):
            return rule.verdict(endpoint, outcome, check_name)
    return Severity.UNKNOWN, f"{check_name} UNKNOWN: no evaluation rule matched for {endpoint.url}"


def matching_rule(endpoint: EndpointSpec, outcome: ProbeOutcome, rules: Sequence[Rule] = RULES) -> str | None:
    """Name of the rule that decides ``outcome`` (useful for logging and tests)."""
    for rule in rules:
        if rule.applies(endpoint, outcome):
            return rule.name
    return None


__all__ = ["DEFAULT_CHECK_NAME", "RULES", "Rule", "evaluate", "matching_rule"]
