# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Probe outcome model."""

from __future__ import annotations

from dataclasses import dataclass

from ..http.headers import header_value
from ..http.models import HttpResponse

# Status reported when a response carries no usable status code.
NO_RESPONSE_STATUS = -1


@dataclass
class ProbeOutcome:
    """The result of probing one endpoint: a final response or a transport failure."""

    requested_url: str
    response: HttpResponse

    @property
    def ok(self) -> bool:
        return self.response.ok

    @property
    def status_code(self) -> int:
        status = self.response.status_code
        return NO_RESPONSE_STATUS if status is None else status

    @property
    def final_url(self) -> str:
        return self.response.url or self.requested_url

    @property
    def body(self) -> str:
        return self.response.text

    @property
    def error_phase(self) -> str | None:
        return self.response.error_phase

    @property
    def error_message(self) -> str | None:
        return self.response.error_message

    def header(self, name: str) -> str:
        return header_value(self.response.headers, name)


__all__ = ["NO_RESPONSE_STATUS", "ProbeOutcome"]
