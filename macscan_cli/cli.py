from __future__ import annotations

import argparse
import json
import os
import subprocess
import sys
import urllib.error
import urllib.request
from datetime import datetime
from pathlib import Path
from typing import Any

from macscan_core.config import DEFAULT_BUSINESS_NAME
from macscan_core.diagnostics import (
    analysis_to_dict,
    evaluate,
    parse_timestamp,
    scan_record_from_dict,
)
from macscan_core.reports import (
    AUDIENCE_ADVISOR,
    AUDIENCE_CLIENT,
    build_advisor_report,
    build_client_report,
    render,
)

DEFAULT_SERVICE_URL = "http://localhost:3000"
SERVICE_TARGET = "local_adapter.scan_service:app"


def _resolve_service_url(value: str | None) -> str:
    return value or os.getenv("MACSCAN_SERVICE_URL", DEFAULT_SERVICE_URL)


def _request_json(
    method: str,
    url: str,
    payload: dict[str, Any] | None = None,
    timeout: int = 30,
) -> dict[str, Any]:
    data = None
    if payload is not None:
        data = json.dumps(payload).encode("utf-8")
    req = urllib.request.Request(
        url,
        data=data,
        method=method,
        headers={"Content-Type": "application/json"},
    )
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            raw = resp.read()
            if not raw:
                return {}
            return json.loads(raw.decode("utf-8"))
    except urllib.error.HTTPError as exc:
        body = exc.read().decode("utf-8", errors="ignore")
        detail: str | dict[str, Any] = body
        try:
            detail = json.loads(body)
        except json.JSONDecodeError:
            detail = body or exc.reason
        raise RuntimeError(f"HTTP {exc.code} {detail}") from exc


def _print_json(payload: dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))


def _load_payload(path: str) -> dict[str, Any]:
    scan_path = Path(path)
    if not scan_path.exists():
        raise RuntimeError(f"Scan file not found: {scan_path}")
    payload = json.loads(scan_path.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise RuntimeError("Scan file must contain a JSON object")
    return payload


def _parse_now(value: str | None) -> datetime | None:
    if not value:
        return None
    parsed = parse_timestamp(value)
    if parsed is None:
        raise ValueError(f"Invalid --now timestamp: {value}")
    return parsed


def cmd_evaluate(args: argparse.Namespace) -> int:
    record = scan_record_from_dict(_load_payload(args.path))
    analysis = evaluate(record, _parse_now(args.now))
    _print_json(analysis_to_dict(analysis))
    return 0


def cmd_report(args: argparse.Namespace) -> int:
    record = scan_record_from_dict(_load_payload(args.path))
    analysis = evaluate(record, _parse_now(args.now))
    business_name = args.business_name or os.getenv(
        "BUSINESS_NAME", DEFAULT_BUSINESS_NAME
    )
    if args.audience == AUDIENCE_ADVISOR:
        report = build_advisor_report(record, analysis, business_name=business_name)
    else:
        report = build_client_report(record, analysis, business_name=business_name)
    sys.stdout.write(render(report, args.format))
    return 0


def cmd_submit(args: argparse.Namespace) -> int:
    service_url = _resolve_service_url(args.url).rstrip("/")
    payload = _load_payload(args.path)
    if args.email:
        payload["clientEmail"] = args.email
    response = _request_json("POST", f"{service_url}/scan-results", payload=payload)
    _print_json(response)
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    service_url = _resolve_service_url(args.url).rstrip("/")
    _print_json(_request_json("GET", f"{service_url}/health"))
    return 0


def _uvicorn_cmd(target: str, host: str, port: int, log_level: str) -> list[str]:
    return [
        "uvicorn",
        target,
        "--host",
        host,
        "--port",
        str(port),
        "--log-level",
        log_level,
    ]


def cmd_serve(args: argparse.Namespace) -> int:
    cmd = _uvicorn_cmd(SERVICE_TARGET, args.host, args.port, args.log_level)
    if args.dry_run:
        print(" ".join(cmd))
        return 0
    proc = subprocess.Popen(cmd)
    try:
        return proc.wait() or 0
    except KeyboardInterrupt:
        proc.terminate()
        proc.wait(timeout=5)
        return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="macscan")
    subparsers = parser.add_subparsers(dest="command")

    evaluate_parser = subparsers.add_parser(
        "evaluate", help="Score a scan file and print the analysis"
    )
    evaluate_parser.add_argument("--path", required=True)
    evaluate_parser.add_argument("--now", help="Evaluation time (ISO-8601)")
    evaluate_parser.set_defaults(func=cmd_evaluate)

    report_parser = subparsers.add_parser("report", help="Render a report for a scan file")
    report_parser.add_argument("--path", required=True)
    report_parser.add_argument(
        "--audience",
        choices=[AUDIENCE_CLIENT, AUDIENCE_ADVISOR],
        default=AUDIENCE_CLIENT,
    )
    report_parser.add_argument("--format", choices=["text", "html"], default="text")
    report_parser.add_argument("--now", help="Evaluation time (ISO-8601)")
    report_parser.add_argument("--business-name")
    report_parser.set_defaults(func=cmd_report)

    submit_parser = subparsers.add_parser(
        "submit", help="Post a scan file to a running scan service"
    )
    submit_parser.add_argument("--path", required=True)
    submit_parser.add_argument("--email", help="Override the client email")
    submit_parser.add_argument("--url")
    submit_parser.set_defaults(func=cmd_submit)

    status_parser = subparsers.add_parser("status", help="Check service health")
    status_parser.add_argument("--url")
    status_parser.set_defaults(func=cmd_status)

    serve_parser = subparsers.add_parser("serve", help="Run the scan service")
    serve_parser.add_argument("--host", default="0.0.0.0")
    serve_parser.add_argument("--port", type=int, default=3000)
    serve_parser.add_argument("--log-level", default="info")
    serve_parser.add_argument("--dry-run", action="store_true", help="Print command only")
    serve_parser.set_defaults(func=cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "command", None):
        parser.print_help()
        return 2
    try:
        return args.func(args)
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
