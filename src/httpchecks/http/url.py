# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""URL helpers shared across checks."""

from __future__ import annotations

from urllib.parse import urlsplit

import httpx


def same_url(a: str | None, b: str | None) -> bool:
    """Return True when both URLs are equal after httpx normalization."""
    if a is None or b is None:
        return a == b
    try:
        return httpx.URL(a) == httpx.URL(b)
    except httpx.InvalidURL:
        return str(a) == str(b)


def url_host(url: str) -> str:
    """Return ``host[:port]`` for ``url`` (empty when it has no authority)."""
    netloc = urlsplit(str(url or "")).netloc
    return netloc.rpartition("@")[2]


def url_path(url: str) -> str:
    return urlsplit(str(url or "")).path


__all__ = ["same_url", "url_host", "url_path"]
