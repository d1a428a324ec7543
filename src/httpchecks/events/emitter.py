# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Build monitoring events for endpoint results and deliver them to an events API."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..errors import EventDeliveryError
from ..http.client import HttpClient
from ..http.models import HttpRequest
from ..models import CheckEvent, EndpointResult

logger = logging.getLogger(__name__)

EVENT_POST_TIMEOUT = 15.0


def build_event(result: EndpointResult) -> CheckEvent:
    endpoint = result.endpoint
    return CheckEvent(
        entity_name=endpoint.event_entity_name,
        check_name=endpoint.event_check_name,
        status=int(result.severity),
        output=result.message,
        handlers=tuple(endpoint.event_handlers),
    )


@dataclass
class Emission:
    """What happened to one event: rendered dry-run lines and/or a delivery error."""

    event: CheckEvent
    lines: list[str] = field(default_factory=list)
    error: EventDeliveryError | None = None


class EventEmitter:
    """
    Sends one event per result.

    In dry-run mode nothing is sent; the event and its destination are
    rendered instead. Delivery failures are returned, not raised, so one
    broken events API never blocks the other emissions.
    """

    def __init__(self, http_client: HttpClient, *, dry_run: bool = False):
        self.http_client = http_client
        self.dry_run = dry_run

    def emit(self, result: EndpointResult) -> Emission:
        event = build_event(result)
        payload = event.to_json()
        events_api = result.endpoint.events_api

        if self.dry_run:
            return Emission(
                event=event,
                lines=[
                    f"URL: {result.endpoint.url}",
                    f"  Entity Name: {event.entity_name}",
                    f"  Check Name: {event.check_name}",
                    f"  Check Status: {event.status}",
                    f"  Check Output: {event.output}",
                    f"  Event API: {events_api}",
                    f"  Event Data: {payload}",
                ],
            )

        response = self.http_client.request(
            HttpRequest(
                url=events_api,
                method="POST",
                headers={"Content-Type": "application/json"},
                body=payload.encode("utf-8"),
                timeout=EVENT_POST_TIMEOUT,
                allow_redirects=False,
            )
        )
        if not response.ok:
            reason = response.error_message or "request failed"
            logger.warning("Creating event for %s failed: %s", result.endpoint.url, reason)
            return Emission(event=event, error=EventDeliveryError(events_api, reason))
        if response.status_code is not None and response.status_code >= 400:
            reason = f"HTTP Status {response.status_code}"
            logger.warning("Creating event for %s failed: %s", result.endpoint.url, reason)
            return Emission(event=event, error=EventDeliveryError(events_api, reason))

        logger.debug("Created event %s/%s via %s", event.entity_name, event.check_name, events_api)
        return Emission(event=event)


__all__ = ["Emission", "EventEmitter", "build_event"]
