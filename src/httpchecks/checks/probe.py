# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Issue the single HTTP request behind an endpoint check."""

from __future__ import annotations

import logging

from ..http.client import HttpClient
from ..http.headers import build_request_headers
from ..http.models import PHASE_CREATE, HttpRequest, HttpResponse
from ..models import EndpointSpec, ProbeOutcome

logger = logging.getLogger(__name__)


def build_probe_request(endpoint: EndpointSpec, *, extra_headers: dict[str, str] | None = None) -> HttpRequest:
    """Translate an EndpointSpec into an HttpRequest (headers, virtual host, TLS, redirects)."""
    headers: dict[str, str] = dict(extra_headers or {})
    parsed, host = build_request_headers(endpoint.headers)
    for name in parsed:
        for existing in [key for key in headers if key.lower() == name.lower()]:
            del headers[existing]
    headers.update(parsed)
    body = endpoint.post_data if endpoint.post_data else None
    return HttpRequest(
        url=endpoint.url,
        method=endpoint.method or "GET",
        headers=headers,
        body=body,
        timeout=float(endpoint.timeout),
        allow_redirects=endpoint.redirect_ok,
        host=host,
        tls=endpoint.tls_policy,
    )


def probe_endpoint(
    client: HttpClient,
    endpoint: EndpointSpec,
    *,
    extra_headers: dict[str, str] | None = None,
) -> ProbeOutcome:
    """Probe ``endpoint`` once. Failures are reported in the outcome, never raised."""
    try:
        request = build_probe_request(endpoint, extra_headers=extra_headers)
    except ValueError as exc:
        return ProbeOutcome(endpoint.url, HttpResponse.failure(PHASE_CREATE, exc))

    response = client.request(request)
    if not response.ok:
        logger.debug("Probe of %s failed during %s: %s", endpoint.url, response.error_phase, response.error_message)
    return ProbeOutcome(endpoint.url, response)


__all__ = ["build_probe_request", "probe_endpoint"]
