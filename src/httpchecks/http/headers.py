# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header parsing and lookup utilities.

Check headers are given as ``"Name: Value"`` strings. HTTP header field names
are case-insensitive (RFC 9110), so both merging and lookups ignore case.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping


def split_header(raw: str) -> tuple[str, str]:
    """Split ``"Name: Value"`` on the first colon and trim both halves."""
    name, sep, value = str(raw).partition(":")
    if not sep:
        raise ValueError(f"--header {raw!r} value malformed should be \"Header-Name: Header Value\"")
    return name.strip(), value.strip()


def build_request_headers(header_args: Iterable[str]) -> tuple[dict[str, str], str | None]:
    """
    Turn header arguments into a request header dict plus an optional virtual host.

    Later entries replace earlier ones with the same (case-insensitive) name.
    A ``Host`` entry is returned separately instead of being kept as a header.
    """
    headers: dict[str, str] = {}
    host: str | None = None
    for raw in header_args:
        name, value = split_header(raw)
        if name.lower() == "host":
            host = value
            continue
        for existing in [key for key in headers if key.lower() == name.lower()]:
            del headers[existing]
        headers[name] = value
    return headers, host


def header_value(headers: Mapping[str, str] | None, name: str, default: str = "") -> str:
    """Return a header value using case-insensitive key matching."""
    if not headers or not name:
        return default

    lower = name.lower()
    for key in (name, lower, lower.title()):
        if key in headers:
            value = headers.get(key)
            return default if value is None else str(value).strip()

    for key, value in headers.items():
        if key is not None and str(key).lower() == lower:
            return default if value is None else str(value).strip()

    return default


__all__ = ["build_request_headers", "header_value", "split_header"]
