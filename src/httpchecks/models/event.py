# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Monitoring event model posted to the events API."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CheckEvent:
    entity_name: str
    check_name: str
    status: int
    output: str
    handlers: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "entity": {"metadata": {"name": self.entity_name}},
            "check": {
                "metadata": {"name": self.check_name},
                "status": self.status,
                "output": self.output,
                "handlers": list(self.handlers),
            },
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))


__all__ = ["CheckEvent"]
