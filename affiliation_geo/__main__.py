"""CLI entrypoint for affiliation_geo."""

from __future__ import annotations

import argparse
import json
import sys

from affiliation_geo.logging_config import setup_logging


def main(argv: list[str] | None = None) -> int:
    setup_logging()

    parser = argparse.ArgumentParser(prog="affiliation-geo")
    parser.add_argument("--countries", default=None, help="Country list (JSON array or JSONL)")
    parser.add_argument("--institutions", default=None, help="Institution list (JSON array or JSONL)")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("serve")
    sub.add_parser("stats")

    resolve_parser = sub.add_parser("resolve")
    resolve_parser.add_argument("affiliation", nargs="+")
    resolve_parser.add_argument("--trace", action="store_true", help="Print engine trace events")

    batch_parser = sub.add_parser("batch")
    batch_parser.add_argument("file", help="One affiliation per line, '-' for stdin")
    batch_parser.add_argument("--json", action="store_true", dest="as_json")

    args = parser.parse_args(argv)

    if args.command == "serve":
        _serve()
        return 0

    from affiliation_geo.indexes import ReferenceDataError
    from affiliation_geo.reference import load_reference_data

    try:
        reference = load_reference_data(args.countries, args.institutions)
    except ReferenceDataError as e:
        print(f"Error loading reference data: {e}", file=sys.stderr)
        return 2

    if args.command == "stats":
        print(json.dumps(reference.summary(), indent=2))
    elif args.command == "resolve":
        _resolve(reference, args.affiliation, args.trace)
    elif args.command == "batch":
        _batch(reference, args.file, args.as_json)
    return 0


def _serve() -> None:
    import uvicorn

    from affiliation_geo.config import get_settings

    settings = get_settings()
    uvicorn.run(
        "affiliation_geo.api:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=(settings.env == "development"),
        log_level=settings.log_level.lower(),
    )


def _resolve(reference, affiliations: list[str], trace: bool) -> None:
    from affiliation_geo.config import get_settings
    from affiliation_geo.pipeline import resolve_one

    window = get_settings().resolver.disambiguation_window
    for affiliation in affiliations:
        events = []
        entries = resolve_one(affiliation, reference, trace=events.append if trace else None, window=window)
        out = {"affiliation": affiliation, "entries": [e.model_dump(mode="json") for e in entries]}
        if trace:
            out["trace"] = [
                {"step": ev.step, "segment": ev.segment, "message": ev.message, "data": ev.data}
                for ev in events
            ]
        print(json.dumps(out, ensure_ascii=False, indent=2, default=str))


def _batch(reference, path: str, as_json: bool) -> None:
    from affiliation_geo.config import get_settings
    from affiliation_geo.pipeline import format_report, log_trace_hook, resolve_lines

    settings = get_settings().resolver
    trace = log_trace_hook if settings.trace_city_matches else None

    if path == "-":
        report = resolve_lines(sys.stdin, reference, trace=trace, window=settings.disambiguation_window)
    else:
        with open(path, "r", encoding="utf-8") as f:
            report = resolve_lines(f, reference, trace=trace, window=settings.disambiguation_window)

    if as_json:
        print(json.dumps(report.model_dump(mode="json"), ensure_ascii=False, indent=2))
    else:
        print(format_report(report))


if __name__ == "__main__":
    sys.exit(main())
