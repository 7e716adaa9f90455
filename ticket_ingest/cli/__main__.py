from __future__ import annotations

import argparse
import sys
import zipfile
from pathlib import Path
from typing import Any

from ticket_ingest.config.loader import ConfigError, load_config, load_config_from_env
from ticket_ingest.excel.aliases import KINDS
from ticket_ingest.excel.reader import IngestionError, read_sheet_grid
from ticket_ingest.excel.template import write_template
from ticket_ingest.logging.error_log import ErrorLogBuffer
from ticket_ingest.logging.init import log_summary, setup_logging
from ticket_ingest.models.config_models import IngestConfig
from ticket_ingest.normalize.dates import parse_flexible_date
from ticket_ingest.services.pipeline import NoValidRecordsError, ingest_file
from ticket_ingest.services.progress import ProgressTracker
from ticket_ingest.services.sla import SLA_THRESHOLDS_HOURS, format_hours_as_days, out_of_sla, sla_compliance
from ticket_ingest.services.summary import (
    count_by_location,
    render_error_lines,
    render_location_lines,
    render_sla_line,
    render_summary_line,
)

"""CLI entrypoint.

Flow:
- Load config (``--config`` or TICKET_INGEST_CONFIG / config/ingest.yml)
- Read the first (or ``--sheet``) sheet of FILE and ingest it
- Print row errors, write them to the JSONL error log
- Print the SUMMARY line (and SLA / location lines on request)

Exit codes: 0 every row valid, 2 some rows rejected, 1 fatal.
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

ERROR_LINES_SHOWN = 20

READ_ERRORS = (OSError, ValueError, zipfile.BadZipFile)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Excel ticket export validator")
    p.add_argument("file", nargs="?", type=Path, help="Excel file (.xlsx / .xls) to ingest")
    p.add_argument("--kind", choices=tuple(KINDS), default="incident", help="Ticket kind (default: incident)")
    p.add_argument("--config", type=Path, default=None, help="Config YAML (default: config/ingest.yml)")
    p.add_argument("--sheet", default=None, help="Sheet name (default: first sheet)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print the header & first rows then exit")
    p.add_argument("--sla", action="store_true", help="Evaluate SLA for the accepted tickets")
    p.add_argument("--as-of", default=None, help="Instant open tickets are measured against (ISO 8601)")
    p.add_argument("--by-location", action="store_true", help="Count accepted tickets per location")
    p.add_argument("--keep-na", nargs="*", default=None, metavar="STR",
                   help="Strings that must not be read as empty cells (e.g. NA)")
    p.add_argument("--write-template", type=Path, default=None, metavar="PATH",
                   help="Write a template workbook for --kind and exit")
    return p.parse_args(argv)


def _inspect_data(path: Path, sheet: str | None, keep_na: list[str] | None) -> int:
    try:
        grid = read_sheet_grid(path, sheet=sheet, keep_na_strings=keep_na)
    except (IngestionError, *READ_ERRORS) as e:
        print(f"inspect: read_error: {e}")
        return EXIT_FATAL
    print(f"FILE: {path.name}")
    if not grid.cells:
        print(f"  SHEET: {grid.sheet_name} (empty)")
        return EXIT_SUCCESS_ALL
    header = [str(c) for c in grid.cells[0] if c is not None]
    print(f"  SHEET: {grid.sheet_name} cols={header}")
    # datetime 含む場合は isoformat で表示
    sample = [
        [v.isoformat() if hasattr(v, "isoformat") else v for v in row]
        for row in grid.cells[1:4]
    ]
    print("    sample_rows=", sample)
    return EXIT_SUCCESS_ALL


def _sla_kwargs(kind: str, cfg: IngestConfig, as_of: Any) -> dict[str, Any]:
    kwargs: dict[str, Any] = {"kind": kind, "assume_open_as_of": as_of, "tz": cfg.timezone}
    if kind == "incident":
        kwargs["thresholds"] = cfg.sla_thresholds or SLA_THRESHOLDS_HOURS
        kwargs["default_hours"] = cfg.default_sla_hours
    return kwargs


def _load(args: argparse.Namespace) -> IngestConfig:
    if args.config is not None:
        return load_config(args.config)
    return load_config_from_env()


def main(argv: list[str] | None = None) -> int:
    # [] が渡された場合に sys.argv が混入しないよう None のときだけ読む
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    try:
        cfg = _load(args)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.write_template is not None:
        path = write_template(args.write_template, kind=args.kind)
        logger.info(f"template written: {path}")
        return EXIT_SUCCESS_ALL

    if args.file is None:
        logger.error("no input file given")
        return EXIT_FATAL
    if not args.file.exists():
        logger.error(f"file not found: {args.file}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(args.file, args.sheet, args.keep_na)

    as_of = None
    if args.as_of is not None:
        as_of = parse_flexible_date(args.as_of, tz=cfg.timezone)
        if as_of is None:
            logger.error(f"invalid --as-of value: {args.as_of}")
            return EXIT_FATAL

    logger.info(f"Processing file: {args.file} (kind={args.kind})")
    error_log = ErrorLogBuffer()
    try:
        with ProgressTracker(description=args.file.name) as tracker:
            result = ingest_file(
                args.file,
                kind=args.kind,
                config=cfg,
                sheet=args.sheet,
                progress=tracker,
                error_log=error_log,
                keep_na_strings=args.keep_na,
            )
    except NoValidRecordsError as e:
        for line in render_error_lines(e.errors, limit=ERROR_LINES_SHOWN):
            logger.warning(line)
        _flush(error_log, logger)
        logger.error(f"ingest: {e}")
        return EXIT_FATAL
    except IngestionError as e:
        logger.error(f"ingest: {e}")
        return EXIT_FATAL
    except READ_ERRORS as e:
        logger.error(f"read_error: {args.file.name}: {e}")
        return EXIT_FATAL

    for line in render_error_lines(result.errors, limit=ERROR_LINES_SHOWN):
        logger.warning(line)
    _flush(error_log, logger)

    if args.sla:
        kwargs = _sla_kwargs(args.kind, cfg, as_of)
        for t in out_of_sla(result.records, **kwargs):
            over = format_hours_as_days(t.sla.hours_over_threshold)
            logger.info(f"out of SLA: {t.number} {t.priority} {over} fora do SLA")
        logger.info(render_sla_line(sla_compliance(result.records, **kwargs)))

    if args.by_location:
        for line in render_location_lines(count_by_location(result.records, cfg.location_map)):
            logger.info(line)

    # log_summary が "SUMMARY " を付けるため先頭を除去
    log_summary(render_summary_line(result)[len("SUMMARY "):])

    if result.has_errors:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def _flush(error_log: ErrorLogBuffer, logger: Any) -> None:
    path = error_log.flush()
    if path is not None:
        logger.info(f"row errors written to {path}")


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
