# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""http-checks CLI. The process exit code is the check severity."""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from ..checks.single import run_http_check, run_http_get, run_http_json, run_http_perf
from ..config import CheckConfig, EndpointDefaults
from ..http import create_default_http_client
from ..log import setup_logging
from ..models import AggregateReport
from ..runtime import HttpEndpointsCheck
from ..version import __version__


def _add_target_options(parser: argparse.ArgumentParser, *, overridable: bool = False) -> None:
    suffix = ", can be overridden by endpoint json attribute of same name" if overridable else ""
    parser.add_argument("-u", "--url", default=None, help=f"URL to test (default http://localhost:80/, env CHECK_URL){suffix}")
    parser.add_argument(
        "-i",
        "--insecure-skip-verify",
        action="store_true",
        default=None,
        help=f"Skip TLS certificate verification (not recommended!){suffix}",
    )
    parser.add_argument("-t", "--trusted-ca-file", default=None, help=f"TLS CA certificate bundle in PEM format{suffix}")
    parser.add_argument("-T", "--timeout", type=int, default=None, help=f"Request timeout in seconds (default 15){suffix}")
    parser.add_argument(
        "-H",
        "--header",
        action="append",
        default=None,
        help=f"Additional header to send in check request, repeatable{suffix}",
    )
    parser.add_argument("-K", "--mtls-key-file", default=None, help=f"Key file for mutual TLS auth in PEM format{suffix}")
    parser.add_argument("-C", "--mtls-cert-file", default=None, help=f"Certificate file for mutual TLS auth in PEM format{suffix}")


def _add_method_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-m", "--method", default="GET", help="Specify http method")
    parser.add_argument("-p", "--post-data", default="", help="Data to send via POST method")


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--json", action="store_true", help="Output JSON instead of check text")
    common.add_argument("--log-level", default=None, help="Logging level (default from HTTP_CHECKS_LOG_LEVEL)")

    parser = argparse.ArgumentParser(description="HTTP monitoring checks")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    endpoints = subparsers.add_parser("endpoints", parents=[common], help="HTTP status/string check for multiple endpoints")
    endpoints.add_argument("-e", "--endpoints", default="", help="JSON array of http endpoints to check")
    endpoints.add_argument("-f", "--endpoints-file", default="", help="File containing a JSON array of endpoints")
    endpoints.add_argument(
        "-n",
        "--dry-run",
        action="store_true",
        help="Do not create events; output the requests that would have created them instead",
    )
    endpoints.add_argument(
        "-S",
        "--suppress-ok-output",
        action="store_true",
        help="Aside from overall status, only output failures",
    )
    _add_target_options(endpoints, overridable=True)
    endpoints.add_argument("-s", "--search-string", default=None, help="String to search for, status check only if omitted")
    endpoints.add_argument("-r", "--redirect-ok", action="store_true", default=None, help="Allow redirects")
    endpoints.add_argument("--create-event", action="store_true", default=None, help="Create event for url")
    endpoints.add_argument("--event-check-name", default=None, help="Check name to use in generated event")
    endpoints.add_argument("--event-entity-name", default=None, help="Entity name to use in generated event")
    endpoints.add_argument("--event-handlers", default=None, help="Comma separated list of handlers for generated event")
    endpoints.add_argument("--events-api", default=None, help="Events API endpoint to use when generating events")

    check = subparsers.add_parser("check", parents=[common], help="HTTP status/string check")
    _add_target_options(check)
    check.add_argument("-s", "--search-string", default=None, help="String to search for, status check only if omitted")
    check.add_argument("-r", "--redirect-ok", action="store_true", default=None, help="Allow redirects")
    _add_method_options(check)

    perf = subparsers.add_parser("perf", parents=[common], help="HTTP performance check")
    _add_target_options(perf)
    perf.add_argument("-w", "--warning", default="1s", help="Warning threshold, e.g. 1s or 1000ms")
    perf.add_argument("-c", "--critical", default="2s", help="Critical threshold, e.g. 2s or 2000ms")
    perf.add_argument("--output-in-ms", action="store_true", help="Provide output in milliseconds")
    _add_method_options(perf)

    query = subparsers.add_parser("json", parents=[common], help="HTTP JSON query/expression check")
    _add_target_options(query)
    query.add_argument("-q", "--query", default="", help="Query written in jq format")
    query.add_argument("-e", "--expression", default="", help="Expression for comparing result of query, e.g. \">= 10\"")
    _add_method_options(query)

    get = subparsers.add_parser("get", parents=[common], help="HTTP GET passthrough")
    _add_target_options(get)

    return parser


def _split_handlers(value: str | None) -> list[str] | None:
    if value is None:
        return None
    return [item.strip() for item in value.split(",") if item.strip()]


def defaults_from_args(args: argparse.Namespace) -> EndpointDefaults:
    return EndpointDefaults.from_env(
        url=args.url,
        headers=args.header,
        search_string=getattr(args, "search_string", None),
        redirect_ok=getattr(args, "redirect_ok", None),
        timeout=args.timeout,
        mtls_key_file=args.mtls_key_file,
        mtls_cert_file=args.mtls_cert_file,
        trusted_ca=args.trusted_ca_file,
        insecure_skip_verify=args.insecure_skip_verify,
        create_event=getattr(args, "create_event", None),
        event_entity_name=getattr(args, "event_entity_name", None),
        event_check_name=getattr(args, "event_check_name", None),
        event_handlers=_split_handlers(getattr(args, "event_handlers", None)),
        events_api=getattr(args, "events_api", None),
    )


def _print_json(report: AggregateReport) -> None:
    payload: dict[str, Any] = report.to_dict()
    payload["output"] = list(report.lines)
    json.dump(payload, sys.stdout, indent=2, sort_keys=True)
    sys.stdout.write("\n")


def _print_report(report: AggregateReport) -> None:
    if report.lines:
        print(report.render())
    error = report.error
    if error is not None and report.results:
        print(f"Error: {error}", file=sys.stderr)


def run_command(args: argparse.Namespace) -> AggregateReport:
    defaults = defaults_from_args(args)
    if args.command == "endpoints":
        config = CheckConfig(
            defaults=defaults,
            endpoints=args.endpoints,
            endpoints_file=args.endpoints_file,
            dry_run=args.dry_run,
            suppress_ok_output=args.suppress_ok_output,
        )
        with HttpEndpointsCheck(config) as check:
            return check.run()

    client = create_default_http_client()
    try:
        if args.command == "check":
            return run_http_check(client, defaults, method=args.method, post_data=args.post_data)
        if args.command == "perf":
            return run_http_perf(
                client,
                defaults,
                warning=args.warning,
                critical=args.critical,
                output_in_ms=args.output_in_ms,
                method=args.method,
                post_data=args.post_data,
            )
        if args.command == "json":
            return run_http_json(
                client,
                defaults,
                query=args.query,
                expression=args.expression,
                method=args.method,
                post_data=args.post_data,
            )
        return run_http_get(client, defaults)
    finally:
        client.close()


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    report = run_command(args)
    if args.json:
        _print_json(report)
    else:
        _print_report(report)
    return report.exit_code


def _command_main(command: str):
    def entrypoint(argv: list[str] | None = None) -> int:
        args = list(sys.argv[1:] if argv is None else argv)
        return main([command, *args])

    return entrypoint


endpoints_main = _command_main("endpoints")
check_main = _command_main("check")
perf_main = _command_main("perf")
get_main = _command_main("get")
json_main = _command_main("json")


if __name__ == "__main__":
    raise SystemExit(main())
