# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""In-process HttpClient implementations."""

from __future__ import annotations

from .client import HttpClient
from .models import PHASE_SEND, HttpRequest, HttpResponse


class StubHttpClient(HttpClient):
    """
    Deterministic, programmable HttpClient for tests and dry runs.

    A stubbed value may be an ``HttpResponse`` or an exception instance, which
    is raised to simulate a misbehaving client.
    """

    def __init__(self, responses: dict[str, HttpResponse | Exception] | None = None):
        self._responses = responses or {}
        self.requests: list[HttpRequest] = []
        self.closed = False

    def add(self, url: str, response: HttpResponse | Exception) -> None:
        self._responses[url] = response

    def request(self, request: HttpRequest) -> HttpResponse:
        self.requests.append(request)
        stubbed = self._responses.get(request.url)
        if isinstance(stubbed, Exception):
            raise stubbed
        if stubbed is not None:
            return stubbed
        return HttpResponse(
            ok=False,
            error_message="No stubbed response configured",
            error_type="ConnectError",
            error_phase=PHASE_SEND,
        )

    def close(self) -> None:
        self.closed = True


__all__ = ["StubHttpClient"]
