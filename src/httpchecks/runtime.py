# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""High-level facade wiring resolution, probing, events and reporting."""

from __future__ import annotations

import logging
from contextlib import suppress

from .checks.report import build_report, configuration_error_report
from .checks.resolver import resolve_endpoints
from .checks.runner import EndpointRunner
from .config import CheckConfig, load_http_settings
from .errors import ConfigurationError
from .events import EventEmitter
from .http.client import HttpClient, create_default_http_client
from .models import AggregateReport

logger = logging.getLogger(__name__)


class HttpEndpointsCheck:
    """
    Multi-endpoint check: resolve every endpoint, probe them in order, emit
    events for the endpoints that ask for one, and aggregate the rest.

    One HttpClient is shared by the probes and the event deliveries.
    """

    def __init__(self, config: CheckConfig | None = None, http_client: HttpClient | None = None):
        self.config = config or CheckConfig()
        self.http_settings = load_http_settings()
        self.http_client = http_client or create_default_http_client(self.http_settings)
        self.runner = EndpointRunner(self.http_client)
        self.emitter = EventEmitter(self.http_client, dry_run=self.config.dry_run)

    def run(self) -> AggregateReport:
        try:
            endpoints = resolve_endpoints(self.config)
        except ConfigurationError as exc:
            logger.debug("Configuration rejected: %s", exc.message)
            return configuration_error_report(exc)

        results = self.runner.run(endpoints)
        emissions = [self.emitter.emit(result) for result in results if result.endpoint.create_event]
        return build_report(
            results,
            emissions,
            suppress_ok_output=self.config.suppress_ok_output,
            dry_run=self.config.dry_run,
        )

    def close(self) -> None:
        with suppress(Exception):
            if hasattr(self.http_client, "close"):
                self.http_client.close()

    def __enter__(self) -> HttpEndpointsCheck:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.close()


__all__ = ["HttpEndpointsCheck"]
