# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Endpoint resolution: parse descriptors, merge with defaults, validate.

Resolution happens in two explicit steps. Descriptors are first parsed into
partial ``RawEndpoint`` records, then each record is merged field by field
against ``EndpointDefaults``; a field given in the descriptor always replaces
the default (lists included), an absent field inherits it. Validation runs
over the whole list before any request is sent.
"""

from __future__ import annotations

import json
import logging
import re
import ssl
from collections.abc import Mapping
from dataclasses import asdict
from pathlib import Path

from ..config import CheckConfig, EndpointDefaults
from ..errors import ConfigurationError
from ..http.headers import split_header
from ..http.tls import load_ca_bundle, load_client_certificate
from ..http.url import url_host, url_path
from ..models import EndpointSpec, RawEndpoint, Severity

logger = logging.getLogger(__name__)

CHECK_NAME_PREFIX = "http_check-"
ROOT_PATH_TOKEN = "root_path"
_NON_ALNUM_RE = re.compile(r"[^a-zA-Z0-9]+")


def default_check_name(url: str) -> str:
    """``http_check-`` plus the URL path with non-alphanumeric runs replaced by ``_``."""
    path = url_path(url)
    if not path.strip("/"):
        return f"{CHECK_NAME_PREFIX}{ROOT_PATH_TOKEN}"
    return f"{CHECK_NAME_PREFIX}{_NON_ALNUM_RE.sub('_', path)}"


def default_entity_name(url: str) -> str:
    return url_host(url)


def parse_descriptor(text: str) -> list[RawEndpoint]:
    """Parse a JSON array of endpoint descriptor objects."""
    try:
        document = json.loads(text)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(
            f"cannot parse endpoints, please check documented examples: {exc}",
            Severity.UNKNOWN,
        ) from exc

    if not isinstance(document, list):
        raise ConfigurationError(
            "cannot parse endpoints: expected a JSON array of endpoint objects",
            Severity.UNKNOWN,
        )

    raw_endpoints: list[RawEndpoint] = []
    for index, entry in enumerate(document):
        if not isinstance(entry, Mapping):
            raise ConfigurationError(
                f"cannot parse endpoints: entry {index} is not a JSON object",
                Severity.UNKNOWN,
            )
        try:
            raw_endpoints.append(RawEndpoint.from_mapping(entry))
        except ValueError as exc:
            raise ConfigurationError(f"cannot parse endpoints: entry {index}: {exc}", Severity.UNKNOWN) from exc
    return raw_endpoints


def read_descriptor_file(path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"cannot read endpoints file {path}: {exc}", Severity.UNKNOWN) from exc


def merge_endpoint(raw: RawEndpoint, defaults: EndpointDefaults) -> EndpointSpec:
    """Overlay the fields present in ``raw`` on ``defaults`` and fill in derived event names."""
    values = asdict(defaults)
    values.update(raw.present_fields())
    values["headers"] = tuple(values["headers"])
    values["event_handlers"] = tuple(values["event_handlers"])
    if not values["event_entity_name"]:
        values["event_entity_name"] = default_entity_name(values["url"])
    if not values["event_check_name"]:
        values["event_check_name"] = default_check_name(values["url"])
    return EndpointSpec(**values)


def validate_endpoint(endpoint: EndpointSpec) -> None:
    """Raise ConfigurationError (WARNING) when ``endpoint`` cannot be probed as configured."""
    if not endpoint.url:
        raise ConfigurationError("--url or CHECK_URL environment variable is required")

    for header in endpoint.headers:
        try:
            split_header(header)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc

    if endpoint.timeout <= 0:
        raise ConfigurationError(f"--timeout must be a positive number of seconds, got {endpoint.timeout}")

    if endpoint.trusted_ca:
        try:
            load_ca_bundle(endpoint.trusted_ca)
        except (OSError, ssl.SSLError) as exc:
            raise ConfigurationError(f"error loading specified CA file {endpoint.trusted_ca}: {exc}") from exc

    if bool(endpoint.mtls_key_file) != bool(endpoint.mtls_cert_file):
        raise ConfigurationError("mTLS auth requires both --mtls-key-file and --mtls-cert-file")
    if endpoint.mtls_key_file and endpoint.mtls_cert_file:
        try:
            load_client_certificate(endpoint.mtls_cert_file, endpoint.mtls_key_file)
        except (OSError, ssl.SSLError) as exc:
            raise ConfigurationError(
                f"failed to load mTLS key pair {endpoint.mtls_cert_file}/{endpoint.mtls_key_file}: {exc}"
            ) from exc


def resolve_endpoints(config: CheckConfig) -> list[EndpointSpec]:
    """
    Produce the validated, ordered endpoint list for a run.

    Raises ConfigurationError with WARNING for invalid user input and UNKNOWN
    for descriptors that cannot be parsed at all.
    """
    if config.endpoints and config.endpoints_file:
        raise ConfigurationError("--endpoints and --endpoints-file are mutually exclusive")

    if config.endpoints_file:
        raw_endpoints = parse_descriptor(read_descriptor_file(config.endpoints_file))
    elif config.endpoints:
        raw_endpoints = parse_descriptor(config.endpoints)
    else:
        raw_endpoints = [RawEndpoint()]

    if not raw_endpoints:
        raise ConfigurationError("no endpoints parsed, please check documented examples", Severity.UNKNOWN)

    endpoints = [merge_endpoint(raw, config.defaults) for raw in raw_endpoints]
    for endpoint in endpoints:
        validate_endpoint(endpoint)

    logger.debug("Resolved %d endpoint(s)", len(endpoints))
    return endpoints


__all__ = [
    "CHECK_NAME_PREFIX",
    "default_check_name",
    "default_entity_name",
    "merge_endpoint",
    "parse_descriptor",
    "read_descriptor_file",
    "resolve_endpoints",
    "validate_endpoint",
]
