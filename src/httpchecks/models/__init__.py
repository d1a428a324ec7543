# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Dataclass exports for http-checks."""

from .severity import Severity
from .endpoint import EndpointSpec, RawEndpoint
from .event import CheckEvent
from .probe import NO_RESPONSE_STATUS, ProbeOutcome
from .result import AggregateReport, EndpointResult

__all__ = [
    "AggregateReport",
    "CheckEvent",
    "EndpointResult",
    "EndpointSpec",
    "NO_RESPONSE_STATUS",
    "ProbeOutcome",
    "RawEndpoint",
    "Severity",
]
