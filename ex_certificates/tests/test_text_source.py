from __future__ import annotations

from pathlib import Path

import pytest
from docx import Document

from ex_certificates.cert_parser import scan, text_source
from ex_certificates.cert_parser.text_source import DocumentReadError, extract_document_text

CERT_LINES = [
    "IECEx Certificate of Conformity",
    "Certificate No.: IECEx BAS 12.0001X",
    "Ex db IIC T4 Gb",
    "Manufacturer: Acme Instruments Ltd",
    "Equipment: Junction box type JB-4",
]


def build_pdf(lines: list[str]) -> bytes:
    ops = ["BT", "/F1 12 Tf"]
    y = 740
    for line in lines:
        escaped = line.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")
        ops.append(f"1 0 0 1 72 {y} Tm ({escaped}) Tj")
        y -= 18
    ops.append("ET")
    stream = "\n".join(ops).encode("latin-1")
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Count 1 /Kids [3 0 R] >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Contents 4 0 R /Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"
    xref_offset = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (
        len(objects) + 1,
        xref_offset,
    )
    return bytes(out)


@pytest.fixture()
def cert_pdf(tmp_path: Path) -> Path:
    path = tmp_path / "certificate.pdf"
    path.write_bytes(build_pdf(CERT_LINES))
    return path


@pytest.fixture()
def scanned_pdf(tmp_path: Path) -> Path:
    path = tmp_path / "scanned.pdf"
    path.write_bytes(build_pdf([]))
    return path


def squash(text: str) -> str:
    return " ".join(text.split())


def test_pdf_text_extraction(cert_pdf: Path) -> None:
    text, meta = extract_document_text(cert_pdf, prefer_backends=["pypdf"], ocr=False)
    assert "IECEx BAS 12.0001X" in squash(text)
    assert "Ex db IIC T4 Gb" in squash(text)
    assert meta["backend"] == "pypdf"
    assert meta["pages"] == 1
    assert meta["used_ocr"] is False
    assert meta["bytes"] > 0


def test_scan_file_parses_pdf(cert_pdf: Path) -> None:
    result = scan.scan_file(cert_pdf, pdf_backends=["pypdf"], ocr=False)
    assert result.file_name == "certificate.pdf"
    assert result.used_ocr is False
    assert result.record.cert_number == "IECEx BAS 12.0001X"
    assert result.record.marking == "Ex db IIC T4 Gb"
    assert result.confidence >= 70


def test_image_only_pdf_without_ocr_returns_empty_text(scanned_pdf: Path) -> None:
    text, meta = extract_document_text(scanned_pdf, prefer_backends=["pypdf"], ocr=False)
    assert text.strip() == ""
    assert meta["used_ocr"] is False


def test_short_pdf_text_falls_back_to_ocr(
    scanned_pdf: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    calls: list[tuple[str, int]] = []

    def fake_ocr(path: Path, *, lang: str, dpi: int) -> list[str]:
        calls.append((lang, dpi))
        return ["IECEx BAS 12.0001X", "Ex db IIC T4 Gb"]

    monkeypatch.setattr(text_source, "_ocr_pdf", fake_ocr)
    monkeypatch.setenv("EXSCAN_OCR_LANG", "deu")
    text, meta = extract_document_text(scanned_pdf, prefer_backends=["pypdf"])
    assert text == "IECEx BAS 12.0001X\n\nEx db IIC T4 Gb"
    assert meta["used_ocr"] is True
    assert meta["backend"] == "ocr"
    assert meta["pages"] == 2
    assert calls == [("deu", text_source.DEFAULT_OCR_DPI)]

    result = scan.scan_file(scanned_pdf, pdf_backends=["pypdf"])
    assert result.used_ocr is True
    assert result.to_dict()["usedOcr"] is True
    assert result.record.cert_number == "IECEx BAS 12.0001X"


def test_ocr_failure_is_a_read_error(scanned_pdf: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_ocr(path: Path, *, lang: str, dpi: int) -> list[str]:
        raise RuntimeError("tesseract is not installed")

    monkeypatch.setattr(text_source, "_ocr_pdf", broken_ocr)
    with pytest.raises(DocumentReadError) as excinfo:
        extract_document_text(scanned_pdf, prefer_backends=["pypdf"])
    assert "OCR failed" in excinfo.value.reason


def test_min_chars_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXSCAN_MIN_TEXT_CHARS", "10")
    assert text_source.resolve_min_text_chars(None) == 10
    assert text_source.resolve_min_text_chars(5) == 5
    monkeypatch.setenv("EXSCAN_MIN_TEXT_CHARS", "lots")
    assert text_source.resolve_min_text_chars(None) == text_source.DEFAULT_MIN_TEXT_CHARS


def test_plain_text_file(tmp_path: Path) -> None:
    path = tmp_path / "certificate.txt"
    path.write_text("\n".join(CERT_LINES), encoding="utf-8")
    text, meta = extract_document_text(path)
    assert "IECEx BAS 12.0001X" in text
    assert meta["backend"] == "text"


def test_html_file(tmp_path: Path) -> None:
    path = tmp_path / "certificate.html"
    path.write_text(
        "<html><head><style>p {color: red}</style></head><body>"
        "<h1>IECEx BAS 12.0001X</h1><p>Ex db IIC T4 Gb</p></body></html>",
        encoding="utf-8",
    )
    text, meta = extract_document_text(path)
    assert text.splitlines() == ["IECEx BAS 12.0001X", "Ex db IIC T4 Gb"]
    assert meta["backend"] == "bs4"


def test_docx_file(tmp_path: Path) -> None:
    path = tmp_path / "certificate.docx"
    document = Document()
    for line in CERT_LINES:
        document.add_paragraph(line)
    document.save(str(path))
    result = scan.scan_file(path)
    assert result.record.cert_number == "IECEx BAS 12.0001X"
    assert result.record.manufacturer == "Acme Instruments Ltd"
    assert result.record.equipment == "Junction box type JB-4"


def test_missing_and_unsupported_files(tmp_path: Path) -> None:
    with pytest.raises(DocumentReadError):
        extract_document_text(tmp_path / "missing.pdf")
    unsupported = tmp_path / "certificate.xlsx"
    unsupported.write_bytes(b"not a spreadsheet")
    with pytest.raises(DocumentReadError) as excinfo:
        extract_document_text(unsupported)
    assert "unsupported" in excinfo.value.reason


def test_scan_paths_reports_failures_and_continues(tmp_path: Path) -> None:
    folder = tmp_path / "certs"
    folder.mkdir()
    (folder / "a.txt").write_text("IECEx BAS 12.0001X\nEx db IIC T4 Gb", encoding="utf-8")
    (folder / "b.txt").write_text("T4", encoding="utf-8")
    (folder / "notes.csv").write_text("ignored", encoding="utf-8")
    results, failures = scan.scan_paths([folder, tmp_path / "missing.pdf"])
    assert [result.file_name for result in results] == ["a.txt", "b.txt"]
    assert results[1].confidence == 10
    assert list(failures) == [str(tmp_path / "missing.pdf")]


def test_unreadable_pdf_without_ocr_is_a_read_error(tmp_path: Path) -> None:
    broken = tmp_path / "broken.pdf"
    broken.write_bytes(b"this is not a pdf at all")
    with pytest.raises(DocumentReadError):
        extract_document_text(broken, prefer_backends=["pypdf"], ocr=False)

    results, failures = scan.scan_paths([broken], ocr=False, pdf_backends=["pypdf"])
    assert results == []
    assert list(failures) == [str(broken)]
