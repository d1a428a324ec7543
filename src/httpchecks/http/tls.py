# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""TLS policy for a single probe.

The policy is plain data; ``build_ssl_context`` turns it into a fresh
``ssl.SSLContext`` every time it is called, so each endpoint's trust settings
are derived from its own configuration right before its request is sent.
"""

from __future__ import annotations

import ssl
from dataclasses import dataclass

import certifi


@dataclass(frozen=True)
class TlsPolicy:
    trusted_ca: str = ""
    insecure_skip_verify: bool = False
    cert_file: str = ""
    key_file: str = ""

    @property
    def has_client_certificate(self) -> bool:
        return bool(self.cert_file and self.key_file)


def default_ssl_context() -> ssl.SSLContext:
    """Return a verifying context seeded with the certifi trust store."""
    return ssl.create_default_context(cafile=certifi.where())


def load_ca_bundle(path: str, context: ssl.SSLContext | None = None) -> ssl.SSLContext:
    """Add the PEM bundle at ``path`` to ``context`` (or to a new default context)."""
    context = context or default_ssl_context()
    context.load_verify_locations(cafile=path)
    return context


def load_client_certificate(cert_file: str, key_file: str, context: ssl.SSLContext | None = None) -> ssl.SSLContext:
    """Load a PEM certificate/key pair for mutual TLS into ``context``."""
    context = context or default_ssl_context()
    context.load_cert_chain(certfile=cert_file, keyfile=key_file)
    return context


def build_ssl_context(policy: TlsPolicy | None) -> ssl.SSLContext:
    policy = policy or TlsPolicy()
    context = default_ssl_context()
    if policy.trusted_ca:
        load_ca_bundle(policy.trusted_ca, context)
    if policy.insecure_skip_verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    if policy.has_client_certificate:
        load_client_certificate(policy.cert_file, policy.key_file, context)
    return context


__all__ = [
    "TlsPolicy",
    "build_ssl_context",
    "default_ssl_context",
    "load_ca_bundle",
    "load_client_certificate",
]
