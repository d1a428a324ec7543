# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Per-endpoint results and the aggregate run report."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .endpoint import EndpointSpec
from .severity import Severity


@dataclass
class EndpointResult:
    severity: Severity
    message: str
    endpoint: EndpointSpec

    @property
    def url(self) -> str:
        return self.endpoint.url

    def render(self) -> str:
        return f"URL: {self.endpoint.url} Status: {int(self.severity)} Output: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.endpoint.url,
            "status": int(self.severity),
            "output": self.message,
            "create_event": self.endpoint.create_event,
        }


@dataclass(frozen=True)
class AggregateReport:
    """Final outcome of a run: overall severity, rendered output and non-fatal errors."""

    severity: Severity
    lines: tuple[str, ...] = ()
    errors: tuple[BaseException, ...] = ()
    results: tuple[EndpointResult, ...] = field(default=(), compare=False)

    @property
    def exit_code(self) -> int:
        return int(self.severity)

    @property
    def error(self) -> BaseException | None:
        """All accumulated errors combined into one value (None when the run had none)."""
        from ..errors import combine_errors

        return combine_errors(self.errors)

    def render(self) -> str:
        return "\n".join(self.lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": int(self.severity),
            "results": [result.to_dict() for result in self.results],
            "errors": [str(error) for error in self.errors],
        }


__all__ = ["AggregateReport", "EndpointResult"]
