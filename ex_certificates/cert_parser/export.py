"""CSV, JSON and Markdown output for scans and history entries."""
from __future__ import annotations

import csv
import io
import json
from collections.abc import Iterable, Mapping
from datetime import datetime
from pathlib import Path
from typing import Any

from .scan import ScanResult

CSV_FIELDS = [
    "certNumber",
    "certType",
    "marking",
    "gasGroup",
    "tempClass",
    "epl",
    "zone",
    "ipRating",
    "ambientTemp",
    "manufacturer",
    "equipment",
    "notifiedBody",
    "issueDate",
    "expiryDate",
    "category",
    "group",
    "standard",
    "specialConditions",
    "fileName",
    "scannedAt",
]


def _as_dict(item: ScanResult | Mapping[str, Any]) -> Mapping[str, Any]:
    if isinstance(item, ScanResult):
        return item.to_dict(include_raw=False)
    return item


def format_csv_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return "; ".join(
            str(entry.get("code") or entry) if isinstance(entry, Mapping) else str(entry)
            for entry in value
        )
    return str(value)


def to_csv(items: Iterable[ScanResult | Mapping[str, Any]]) -> str:
    buffer = io.StringIO()
    buffer.write(",".join(CSV_FIELDS) + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for item in items:
        data = _as_dict(item)
        writer.writerow([format_csv_value(data.get(name)) for name in CSV_FIELDS])
    return buffer.getvalue()


def write_csv(path: Path, items: Iterable[ScanResult | Mapping[str, Any]]) -> int:
    rows = list(items)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(to_csv(rows), encoding="utf-8")
    return len(rows)


def default_csv_name(today: datetime | None = None) -> str:
    stamp = (today or datetime.now()).strftime("%Y-%m-%d")
    return f"ex-certificates-{stamp}.csv"


def to_json(item: ScanResult | Mapping[str, Any]) -> str:
    data = {key: value for key, value in _as_dict(item).items() if key != "raw"}
    return json.dumps(data, indent=2, ensure_ascii=False)


def escape_cell(value: str) -> str:
    return value.replace("|", "\\|").replace("\n", " ")


def format_history_row(entry: Mapping[str, Any]) -> str:
    title = entry.get("certNumber") or entry.get("fileName") or "Unknown certificate"
    maker = " — ".join(str(entry[key]) for key in ("manufacturer", "equipment") if entry.get(key))
    marking = entry.get("marking") or "—"
    scanned = str(entry.get("scannedAt") or "")[:10]
    score = entry.get("confidence")
    score_text = f"{score}%" if score is not None else ""
    return (
        f"| {escape_cell(str(title))} | {escape_cell(maker)} | {escape_cell(str(marking))} "
        f"| {scanned} | {score_text} |"
    )


def render_history(history_entries: Iterable[Mapping[str, Any]]) -> str:
    rows = list(history_entries)
    lines = ["# Scanned Certificates", ""]
    if not rows:
        lines.append("_No certificates scanned yet._")
        lines.append("")
        return "\n".join(lines)
    lines.append(f"**Total scans:** {len(rows)}")
    lines.append("")
    lines.append("| Certificate | Manufacturer / Equipment | Marking | Scanned | Confidence |")
    lines.append("| --- | --- | --- | --- | --- |")
    for entry in rows:
        lines.append(format_history_row(entry))
    lines.append("")
    return "\n".join(lines)
