# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Fan-out runner: probe and evaluate every resolved endpoint in order."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ..http.client import HttpClient
from ..models import EndpointResult, EndpointSpec, Severity
from .policy import DEFAULT_CHECK_NAME, evaluate
from .probe import probe_endpoint

logger = logging.getLogger(__name__)


class EndpointRunner:
    """
    Probes endpoints one at a time, in list order.

    A failure on one endpoint is recorded as a CRITICAL result for that
    endpoint and never stops the remaining endpoints from being checked.
    """

    def __init__(self, http_client: HttpClient, *, check_name: str = DEFAULT_CHECK_NAME):
        self.http_client = http_client
        self.check_name = check_name

    def run_one(self, endpoint: EndpointSpec) -> EndpointResult:
        try:
            outcome = probe_endpoint(self.http_client, endpoint)
            severity, message = evaluate(endpoint, outcome, check_name=self.check_name)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error while checking %s", endpoint.url)
            severity = Severity.CRITICAL
            message = f"{self.check_name} CRITICAL: error checking {endpoint.url} ({exc})"
        logger.debug("%s -> %s", endpoint.url, severity.name)
        return EndpointResult(severity=severity, message=message, endpoint=endpoint)

    def run(self, endpoints: Sequence[EndpointSpec]) -> list[EndpointResult]:
        return [self.run_one(endpoint) for endpoint in endpoints]


__all__ = ["EndpointRunner"]
