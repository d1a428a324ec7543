# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Aggregate endpoint results into one report."""

from __future__ import annotations

from collections.abc import Sequence

from ..errors import ConfigurationError
from ..events import Emission
from ..models import AggregateReport, EndpointResult, Severity

DRY_RUN_EVENTS_HEADER = "Dry-run:: Events requested:"
DRY_RUN_OUTPUT_HEADER = "Dry-run:: Normal Output:"


def overall_severity(results: Sequence[EndpointResult]) -> Severity:
    """Worst severity among endpoints that did not hand their outcome to an event."""
    return Severity.worst(result.severity for result in results if not result.endpoint.create_event)


def build_report(
    results: Sequence[EndpointResult],
    emissions: Sequence[Emission] = (),
    *,
    suppress_ok_output: bool = False,
    dry_run: bool = False,
) -> AggregateReport:
    lines: list[str] = []
    if dry_run:
        lines.append(DRY_RUN_EVENTS_HEADER)
        for emission in emissions:
            lines.extend(emission.lines)
        lines.append(DRY_RUN_OUTPUT_HEADER)

    for result in results:
        if suppress_ok_output and result.severity == Severity.OK:
            continue
        lines.append(result.render())

    errors = tuple(emission.error for emission in emissions if emission.error is not None)
    return AggregateReport(
        severity=overall_severity(results),
        lines=tuple(lines),
        errors=errors,
        results=tuple(results),
    )


def configuration_error_report(error: ConfigurationError) -> AggregateReport:
    """Report for a run aborted during resolution, before any request was sent."""
    return AggregateReport(severity=error.severity, lines=(f"error validating input: {error.message}",), errors=(error,))


__all__ = [
    "DRY_RUN_EVENTS_HEADER",
    "DRY_RUN_OUTPUT_HEADER",
    "build_report",
    "configuration_error_report",
    "overall_severity",
]
