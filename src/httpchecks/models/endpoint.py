# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Endpoint descriptor and resolved endpoint models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

from ..http.tls import TlsPolicy


def _is_str(value: Any) -> bool:
    return isinstance(value, str)


def _is_bool(value: Any) -> bool:
    return isinstance(value, bool)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_str_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


# descriptor key -> (RawEndpoint attribute, type check, expected type label)
DESCRIPTOR_FIELDS: dict[str, tuple[str, Any, str]] = {
    "url": ("url", _is_str, "string"),
    "header": ("headers", _is_str_list, "array of strings"),
    "search-string": ("search_string", _is_str, "string"),
    "redirect-ok": ("redirect_ok", _is_bool, "bool"),
    "timeout": ("timeout", _is_int, "int"),
    "mtls-key-file": ("mtls_key_file", _is_str, "string"),
    "mtls-cert-file": ("mtls_cert_file", _is_str, "string"),
    "trusted-ca": ("trusted_ca", _is_str, "string"),
    "insecure-skip-verify": ("insecure_skip_verify", _is_bool, "bool"),
    "create-event": ("create_event", _is_bool, "bool"),
    "event-entity-name": ("event_entity_name", _is_str, "string"),
    "event-check-name": ("event_check_name", _is_str, "string"),
    "event-handlers": ("event_handlers", _is_str_list, "array of strings"),
    "events-api": ("events_api", _is_str, "string"),
}


@dataclass(frozen=True)
class RawEndpoint:
    """One endpoint descriptor as written; ``None`` means "not given, inherit the default"."""

    url: str | None = None
    headers: tuple[str, ...] | None = None
    search_string: str | None = None
    redirect_ok: bool | None = None
    timeout: int | None = None
    mtls_key_file: str | None = None
    mtls_cert_file: str | None = None
    trusted_ca: str | None = None
    insecure_skip_verify: bool | None = None
    create_event: bool | None = None
    event_entity_name: str | None = None
    event_check_name: str | None = None
    event_handlers: tuple[str, ...] | None = None
    events_api: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> RawEndpoint:
        """Build a partial record from one decoded JSON object; unknown keys are ignored, null means absent."""
        values: dict[str, Any] = {}
        for key, (attr, check, label) in DESCRIPTOR_FIELDS.items():
            value = data.get(key)
            if value is None:
                continue
            if not check(value):
                raise ValueError(f"endpoint field {key!r} must be a {label}, got {type(value).__name__}")
            values[attr] = tuple(value) if isinstance(value, list) else value
        return cls(**values)

    def present_fields(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}


@dataclass(frozen=True)
class EndpointSpec:
    """A fully-resolved HTTP target and the policy used to judge it."""

    url: str
    headers: tuple[str, ...] = ()
    search_string: str = ""
    redirect_ok: bool = False
    timeout: int = 15
    mtls_key_file: str = ""
    mtls_cert_file: str = ""
    trusted_ca: str = ""
    insecure_skip_verify: bool = False
    create_event: bool = False
    event_entity_name: str = ""
    event_check_name: str = ""
    event_handlers: tuple[str, ...] = ()
    events_api: str = ""
    method: str = "GET"
    post_data: str = ""

    @property
    def tls_policy(self) -> TlsPolicy:
        return TlsPolicy(
            trusted_ca=self.trusted_ca,
            insecure_skip_verify=self.insecure_skip_verify,
            cert_file=self.mtls_cert_file,
            key_file=self.mtls_key_file,
        )


__all__ = ["DESCRIPTOR_FIELDS", "EndpointSpec", "RawEndpoint"]
