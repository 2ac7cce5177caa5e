# app/cli.py
import argparse
import json
import sys
from typing import List, Optional

from app.core.config import Settings, build_source
from app.core.errors import IncidentPipelineError
from app.core.logging_config import configure_logging
from app.core.models import report_to_json
from app.pipeline.report_view import format_summary, summarize_report
from app.pipeline.runner import run_pipeline
from app.sources.http_source import HttpIncidentSource
from app.sources.snapshot import download_snapshot


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="incident-report", description="Aggregate incidents per identity and severity")
    parser.add_argument("--log-level", default=None, help="overrides LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    rep = sub.add_parser("report", help="run the pipeline and print the report")
    rep.add_argument("--source", choices=["http", "file"], default=None, help="overrides SOURCE_MODE")
    rep.add_argument("--data-dir", default=None, help="overrides DATA_DIR")
    rep.add_argument("--output", "-o", default=None, help="write to a file instead of stdout")
    rep.add_argument("--summary", action="store_true", help="print per-identity counts instead of JSON")
    rep.add_argument("--stats", action="store_true", help="print run statistics to stderr")
    rep.add_argument("--preserve-collisions", action="store_true",
                     help="keep records that share a timestamp")

    fetch = sub.add_parser("fetch", help="download a snapshot of every endpoint into DATA_DIR")
    fetch.add_argument("--data-dir", default=None, help="overrides DATA_DIR")
    return parser


def _report(args: argparse.Namespace, settings: Settings) -> int:
    if args.source:
        settings.source_mode = args.source
    if args.data_dir:
        settings.data_dir = args.data_dir
    if args.preserve_collisions:
        settings.preserve_collisions = True

    try:
        run = run_pipeline(
            build_source(settings),
            max_workers=settings.fetch_workers,
            preserve_collisions=settings.preserve_collisions,
        )
    except (IncidentPipelineError, ValueError) as e:
        sys.stderr.write(f"[report] {e}\n")
        return 1

    if args.summary:
        text = format_summary(summarize_report(run.report))
    else:
        text = json.dumps(report_to_json(run.report))
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(text + "\n")
    else:
        sys.stdout.write(text + "\n")
    if args.stats:
        sys.stderr.write(run.stats.model_dump_json(indent=2) + "\n")
    return 0


def _fetch(args: argparse.Namespace, settings: Settings) -> int:
    source = HttpIncidentSource(settings.api_url, settings.username, settings.password, timeout=settings.fetch_timeout)
    result = download_snapshot(source, args.data_dir or settings.data_dir, max_workers=settings.fetch_workers)
    for endpoint, reason in result.failed.items():
        sys.stderr.write(f"[fetch] {endpoint}: {reason}\n")
    return 1 if result.failed else 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings.from_env()
    configure_logging(args.log_level or settings.log_level)
    if args.command == "fetch":
        return _fetch(args, settings)
    return _report(args, settings)


if __name__ == "__main__":
    sys.exit(main())
