"""CsarKit CLI — validate CSAR manifests, run the server, and query audit logs."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

# Ensure project root is importable when running as script
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


def _load_config_or_exit(path: str | None):
    from csar.config_loader import load_config

    try:
        return load_config(path)
    except FileNotFoundError:
        print(f"Error: config not found: {path}", file=sys.stderr)
        sys.exit(1)
    except Exception as exc:
        print(f"Error: invalid config: {exc}", file=sys.stderr)
        sys.exit(1)


def cmd_validate(args: argparse.Namespace) -> None:
    """Validate a CSAR manifest (.mf) file."""
    from csar.audit.logger import JsonlAuditLogger
    from csar.validator import ManifestValidator

    path = Path(args.manifest)
    if not path.exists():
        print(f"Error: manifest not found: {path}", file=sys.stderr)
        sys.exit(1)

    config = _load_config_or_exit(args.config)
    validator = ManifestValidator(config=config, logger=JsonlAuditLogger(config.audit.path))

    with path.open("rb") as f:
        _, document = validator.validate(f, source=path.name)

    if args.json:
        print(document.to_report().model_dump_json(indent=2))
    elif document.is_valid:
        print(f"Manifest OK: {path}")
        print(f"  Metadata:  {len(document.metadata)} entries")
        for key, value in document.metadata.items():
            print(f"    {key}: {value}")
        print(f"  Sources:   {len(document.sources)}")
        for source in document.sources:
            print(f"    {source}")
        groups = document.non_mano_sources
        print(f"  Non-MANO artifact sets: {len(groups) or '(none)'}")
        for name, sources in groups.items():
            print(f"    {name}: {len(sources)} source(s)")

    if not document.is_valid:
        if not args.json:
            print(f"Error: invalid manifest: {path}", file=sys.stderr)
            for message in document.errors:
                print(f"  {message}", file=sys.stderr)
        sys.exit(1)


def cmd_run(args: argparse.Namespace) -> None:
    """Start the CsarKit validation server."""
    import os

    config = _load_config_or_exit(args.config)
    if args.config:
        os.environ["CSARKIT_CONFIG"] = args.config

    host = args.host or config.server.host
    port = args.port or config.server.port

    print(f"Starting CsarKit server for '{config.app.name}'...")
    print(f"  Config:   {args.config or '(defaults)'}")
    print(f"  Host:     {host}")
    print(f"  Port:     {port}")
    print(f"  Audit:    {config.audit.path}")
    print()

    import uvicorn

    uvicorn.run(
        "csar.app:app",
        host=host,
        port=port,
        reload=args.reload,
        log_level="info",
    )


def cmd_logs(args: argparse.Namespace) -> None:
    """Query audit logs."""
    from csar.audit.query import query_by_request, query_by_event, tail
    from contracts.audit import AuditEvent

    log_path = args.log_path

    if not Path(log_path).exists():
        print(f"No audit log found at {log_path}", file=sys.stderr)
        sys.exit(1)

    if args.request_id:
        entries = query_by_request(log_path, args.request_id)
    elif args.event:
        try:
            event = AuditEvent(args.event)
        except ValueError:
            valid = ", ".join(e.value for e in AuditEvent)
            print(f"Unknown event type: {args.event}", file=sys.stderr)
            print(f"Valid events: {valid}", file=sys.stderr)
            sys.exit(1)
        entries = query_by_event(log_path, event, limit=args.limit)
    else:
        entries = tail(log_path, n=args.limit)

    if not entries:
        print("No matching audit entries.")
        return

    for entry in entries:
        record = json.loads(entry.model_dump_json())
        if args.json:
            print(json.dumps(record))
        else:
            ts = record["ts"][:19]
            event = record["event"]
            rid = record["request_id"][:8]
            detail = json.dumps(record.get("detail", {}))
            print(f"{ts}  [{event:16s}]  {rid}  {record['source']}  {detail}")


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="csarkit",
        description="CsarKit — CSAR manifest validation CLI",
    )
    sub = parser.add_subparsers(dest="command")

    # validate
    p_val = sub.add_parser("validate", help="Validate a CSAR manifest (.mf)")
    p_val.add_argument("manifest", help="Path to manifest")
    p_val.add_argument("--config", "-c", help="Path to csarkit.yaml")
    p_val.add_argument("--json", action="store_true", help="Output the JSON report")
    p_val.set_defaults(func=cmd_validate)

    # run
    p_run = sub.add_parser("run", help="Start the CsarKit validation server")
    p_run.add_argument("--config", "-c", help="Path to csarkit.yaml")
    p_run.add_argument("--host", help="Bind address (default from config)")
    p_run.add_argument("--port", type=int, help="Port (default from config)")
    p_run.add_argument("--reload", action="store_true", help="Enable auto-reload")
    p_run.set_defaults(func=cmd_run)

    # logs
    p_logs = sub.add_parser("logs", help="Query audit logs")
    p_logs.add_argument("log_path", help="Path to audit JSONL file")
    p_logs.add_argument("--request-id", "-r", help="Filter by request ID")
    p_logs.add_argument("--event", "-e", help="Filter by event type")
    p_logs.add_argument("--limit", "-n", type=int, default=20, help="Max entries")
    p_logs.add_argument("--json", action="store_true", help="Output raw JSON")
    p_logs.set_defaults(func=cmd_logs)

    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        sys.exit(1)

    args.func(args)


if __name__ == "__main__":
    main()
