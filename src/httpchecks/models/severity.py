# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Check severity codes shared by every check in the collection."""

from enum import IntEnum


class Severity(IntEnum):
    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3

    @classmethod
    def worst(cls, severities) -> "Severity":
        """Return the highest severity in ``severities`` (OK when empty)."""
        return cls(max(severities, default=cls.OK))


__all__ = ["Severity"]
