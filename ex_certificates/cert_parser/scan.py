"""Scan documents: extract text, parse it and attach scan metadata."""
from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from .parser import confidence, parse
from .record import CertificateRecord
from .text_source import (
    SUPPORTED_EXTENSIONS,
    DocumentReadError,
    extract_document_text,
    iter_supported_files,
)

logger = logging.getLogger(__name__)


def now_iso() -> str:
    return datetime.now(UTC).replace(microsecond=0).isoformat()


@dataclass(frozen=True)
class ScanResult:
    """A parsed record plus the metadata the caller attached to it."""

    record: CertificateRecord
    confidence: int
    scanned_at: str
    file_name: str | None = None
    used_ocr: bool = False
    source_meta: dict[str, Any] | None = field(default=None, compare=False)

    def to_dict(self, *, include_raw: bool = True) -> dict[str, Any]:
        data = self.record.to_dict(include_raw=include_raw)
        data["fileName"] = self.file_name
        data["scannedAt"] = self.scanned_at
        data["confidence"] = self.confidence
        data["usedOcr"] = self.used_ocr
        return data


def scan_text(
    text: str,
    *,
    file_name: str | None = None,
    used_ocr: bool = False,
    scanned_at: str | None = None,
    source_meta: dict[str, Any] | None = None,
) -> ScanResult:
    record = parse(text)
    return ScanResult(
        record=record,
        confidence=confidence(record),
        scanned_at=scanned_at or now_iso(),
        file_name=file_name,
        used_ocr=used_ocr,
        source_meta=source_meta,
    )


def scan_file(
    path: str | Path,
    *,
    ocr: bool = True,
    min_chars: int | None = None,
    pdf_backends: Iterable[str] | None = None,
) -> ScanResult:
    """Scan one document. Raises :class:`DocumentReadError` if it has no usable text."""
    file_path = Path(path)
    text, meta = extract_document_text(
        file_path,
        min_chars=min_chars,
        prefer_backends=pdf_backends,
        ocr=ocr,
    )
    result = scan_text(
        text,
        file_name=file_path.name,
        used_ocr=bool(meta.get("used_ocr")),
        source_meta=meta,
    )
    logger.info(
        "Scanned %s via %s: %s (confidence %d%%)",
        file_path.name,
        meta.get("backend"),
        result.record.cert_number or "no certificate number",
        result.confidence,
    )
    return result


def expand_paths(paths: Iterable[str | Path]) -> list[Path]:
    expanded: list[Path] = []
    for entry in paths:
        path = Path(entry).expanduser()
        if path.is_dir():
            expanded.extend(iter_supported_files(path))
        else:
            expanded.append(path)
    return expanded


def scan_paths(
    paths: Iterable[str | Path],
    *,
    ocr: bool = True,
    min_chars: int | None = None,
    pdf_backends: Iterable[str] | None = None,
) -> tuple[list[ScanResult], dict[str, str]]:
    """Scan files and directories; a failing file is reported, not raised."""
    results: list[ScanResult] = []
    failures: dict[str, str] = {}
    backends = list(pdf_backends) if pdf_backends else None
    for file_path in expand_paths(paths):
        try:
            results.append(
                scan_file(file_path, ocr=ocr, min_chars=min_chars, pdf_backends=backends)
            )
        except DocumentReadError as exc:
            logger.error("Failed to read %s: %s", file_path, exc.reason)
            failures[str(file_path)] = exc.reason
    return results, failures


__all__ = [
    "SUPPORTED_EXTENSIONS",
    "ScanResult",
    "expand_paths",
    "now_iso",
    "scan_file",
    "scan_paths",
    "scan_text",
]
