#!/usr/bin/env python3
"""CLI entrypoint for the Ex certificate scanner."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from ex_certificates.cert_parser import export, history, scan, text_source
from ex_certificates.cert_parser.scan import ScanResult

logger = logging.getLogger("ex_certificates.cert_parser.cli")


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )


def parse_backend_list(value: str | None) -> list[str] | None:
    if not value:
        return None
    parts = [entry.strip() for entry in value.split(",") if entry.strip()]
    return parts or None


def command_scan(args: argparse.Namespace) -> int:
    history_path = history.resolve_history_path(args.history)
    results, failures = scan.scan_paths(
        args.paths,
        ocr=not args.no_ocr,
        min_chars=text_source.resolve_min_text_chars(args.min_text_chars),
        pdf_backends=parse_backend_list(args.pdf_backends),
    )
    if args.json:
        payload = [result.to_dict(include_raw=False) for result in results]
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        print_scan_table(results, failures)
    if results and not args.no_save:
        history_data = history.load_history(history_path)
        for result in results:
            history.add_entry(history_data, result)
        history.save_history(history_path, history_data)
        logger.info("Saved %d scan(s) to %s", len(results), history_path)
    if args.csv:
        count = export.write_csv(Path(args.csv), results)
        logger.info("Wrote %d row(s) to %s", count, args.csv)
    return 1 if failures else 0


def command_parse_text(args: argparse.Namespace) -> int:
    if args.source == "-":
        text = sys.stdin.read()
        file_name = None
    else:
        source = Path(args.source)
        try:
            text = source.read_text(encoding="utf-8", errors="ignore")
        except OSError as exc:
            logger.error("Cannot read %s: %s", source, exc)
            return 1
        file_name = source.name
    result = scan.scan_text(text, file_name=file_name)
    print(export.to_json(result))
    return 0


def command_history(args: argparse.Namespace) -> int:
    history_data = history.load_history(history.resolve_history_path(args.history))
    items = history.entries(history_data)
    if args.show is not None:
        entry = history.get_entry(history_data, args.show)
        if entry is None:
            logger.error("No history entry %d (%d stored)", args.show, len(items))
            return 1
        print(export.to_json(entry))
        return 0
    print(export.render_history(items))
    return 0


def command_export(args: argparse.Namespace) -> int:
    history_data = history.load_history(history.resolve_history_path(args.history))
    items = history.entries(history_data)
    if not items:
        logger.warning("No history to export")
        return 1
    output = Path(args.output) if args.output else Path(export.default_csv_name())
    count = export.write_csv(output, items)
    logger.info("Exported %d entries to %s", count, output)
    return 0


def command_clear(args: argparse.Namespace) -> int:
    history_path = history.resolve_history_path(args.history)
    history_data = history.load_history(history_path)
    removed = history.clear_history(history_data)
    history.save_history(history_path, history_data)
    logger.info("History cleared (%d entries removed)", removed)
    return 0


def print_scan_table(results: Sequence[ScanResult], failures: dict[str, str]) -> None:
    print("File".ljust(40), "Certificate".ljust(28), "Marking".ljust(30), "Conf.")
    print("-" * 106)
    for result in results:
        record = result.record
        name = (result.file_name or "-") + (" [OCR]" if result.used_ocr else "")
        print(
            name.ljust(40),
            (record.cert_number or "-").ljust(28),
            (record.marking or "-").ljust(30),
            f"{result.confidence}%",
        )
    for file_path, reason in sorted(failures.items()):
        print(Path(file_path).name.ljust(40), "error".ljust(28), reason)


def build_parser() -> argparse.ArgumentParser:
    parser_obj = argparse.ArgumentParser(description="Extract data from IECEx / ATEX / UKCA certificates")
    parser_obj.add_argument("--history", help="History file (overrides EXSCAN_HISTORY_PATH)")
    parser_obj.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser_obj.add_subparsers(dest="command")

    scan_parser = subparsers.add_parser("scan", help="Scan certificate documents")
    scan_parser.add_argument("paths", nargs="+", help="Files or directories to scan")
    scan_parser.add_argument("--no-ocr", action="store_true", help="Never fall back to OCR")
    scan_parser.add_argument("--no-save", action="store_true", help="Do not add results to history")
    scan_parser.add_argument("--json", action="store_true", help="Print results as JSON")
    scan_parser.add_argument("--csv", help="Also write the results to this CSV file")
    scan_parser.add_argument(
        "--pdf-backends",
        help="Comma-separated PDF extraction backend order (overrides EXSCAN_PDF_BACKENDS)",
    )
    scan_parser.add_argument(
        "--min-text-chars",
        type=int,
        help="Embedded text needed before OCR is skipped (overrides EXSCAN_MIN_TEXT_CHARS)",
    )
    scan_parser.set_defaults(func=command_scan)

    text_parser = subparsers.add_parser("parse-text", help="Parse already extracted text")
    text_parser.add_argument("source", help="Text file, or - for stdin")
    text_parser.set_defaults(func=command_parse_text)

    history_parser = subparsers.add_parser("history", help="Show scan history")
    history_parser.add_argument(
        "--show",
        type=int,
        metavar="N",
        help="Print entry N (1 = most recent) as JSON",
    )
    history_parser.set_defaults(func=command_history)

    export_parser = subparsers.add_parser("export", help="Export history as CSV")
    export_parser.add_argument("output", nargs="?", help="CSV file (default: dated file name)")
    export_parser.set_defaults(func=command_export)

    clear_parser = subparsers.add_parser("clear", help="Clear scan history")
    clear_parser.set_defaults(func=command_clear)

    return parser_obj


def main(argv: list[str] | None = None) -> int:
    parser_obj = build_parser()
    args = parser_obj.parse_args(argv)
    if not getattr(args, "command", None):
        parser_obj.print_help()
        return 0
    configure_logging(args.verbose)
    return int(args.func(args))


if __name__ == "__main__":
    sys.exit(main())
