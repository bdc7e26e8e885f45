"""Document text extraction for certificate files.

PDFs go through a cascade of text backends; when none of them yields enough
text the document is treated as a scan and each page is OCR'd. The result is
always a single string with pages separated by a blank line.
"""
from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

from bs4 import BeautifulSoup
from docx import Document

logger = logging.getLogger(__name__)

DEFAULT_PDF_BACKENDS = [
    "pypdf",
    "pdfminer",
    "pikepdf+pypdf",
    "pikepdf+pdfminer",
]

SUPPORTED_EXTENSIONS = {
    ".pdf",
    ".txt",
    ".html",
    ".htm",
    ".docx",
}

PAGE_SEPARATOR = "\n\n"
DEFAULT_MIN_TEXT_CHARS = 50
DEFAULT_OCR_LANG = "eng"
DEFAULT_OCR_DPI = 200


class DocumentReadError(Exception):
    """The document could not be turned into text; nothing was parsed."""

    def __init__(self, path: str | Path, reason: str) -> None:
        super().__init__(f"{Path(path).name}: {reason}")
        self.path = str(path)
        self.reason = reason


def _resolve_backend_order(prefer_backends: Iterable[str] | None) -> list[str]:
    if prefer_backends:
        order = [backend.strip() for backend in prefer_backends if backend and backend.strip()]
    else:
        env_value = os.environ.get("EXSCAN_PDF_BACKENDS")
        if env_value:
            order = [backend.strip() for backend in env_value.split(",") if backend.strip()]
        else:
            order = list(DEFAULT_PDF_BACKENDS)
    return list(dict.fromkeys(order)) or list(DEFAULT_PDF_BACKENDS)


def _resolve_int(value: int | None, env_name: str, default: int) -> int:
    if value is not None:
        return max(value, 0)
    env_value = os.environ.get(env_name)
    if env_value:
        try:
            return max(int(env_value), 0)
        except ValueError:
            logger.debug("Invalid %s value: %s", env_name, env_value)
    return default


def resolve_min_text_chars(value: int | None) -> int:
    return _resolve_int(value, "EXSCAN_MIN_TEXT_CHARS", DEFAULT_MIN_TEXT_CHARS)


def resolve_ocr_dpi(value: int | None) -> int:
    return _resolve_int(value, "EXSCAN_OCR_DPI", DEFAULT_OCR_DPI) or DEFAULT_OCR_DPI


def resolve_ocr_lang(value: str | None) -> str:
    return value or os.environ.get("EXSCAN_OCR_LANG") or DEFAULT_OCR_LANG


def significant_chars(text: str) -> int:
    return len("".join(text.split()))


def _dedupe(sequence: Iterable[str]) -> list[str]:
    return [item for item in dict.fromkeys(sequence) if item]


def iter_supported_files(root: Path) -> Iterator[Path]:
    for path in sorted(root.rglob("*")):
        if path.is_file() and path.suffix.lower() in SUPPORTED_EXTENSIONS:
            yield path


def extract_document_text(
    path: str | Path,
    *,
    min_chars: int | None = None,
    prefer_backends: Iterable[str] | None = None,
    ocr: bool = True,
    ocr_lang: str | None = None,
    ocr_dpi: int | None = None,
) -> tuple[str, dict[str, Any]]:
    """Return the text of ``path`` and metadata about how it was obtained.

    Raises :class:`DocumentReadError` when the file is missing, has an
    unsupported type, or needs OCR and OCR fails.
    """
    doc_path = Path(path)
    if not doc_path.is_file():
        raise DocumentReadError(doc_path, "file not found")
    suffix = doc_path.suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        raise DocumentReadError(doc_path, f"unsupported file type {suffix or '(none)'}")

    if suffix == ".pdf":
        return extract_pdf_text(
            doc_path,
            min_chars=resolve_min_text_chars(min_chars),
            prefer_backends=prefer_backends,
            ocr=ocr,
            ocr_lang=resolve_ocr_lang(ocr_lang),
            ocr_dpi=resolve_ocr_dpi(ocr_dpi),
        )

    try:
        if suffix == ".txt":
            text = doc_path.read_text(encoding="utf-8", errors="ignore")
            backend = "text"
        elif suffix in {".html", ".htm"}:
            text = _extract_html(doc_path.read_text(encoding="utf-8", errors="ignore"))
            backend = "bs4"
        else:
            text = _extract_docx(doc_path)
            backend = "docx"
    except Exception as exc:
        raise DocumentReadError(doc_path, str(exc)) from exc
    meta = {
        "backend": backend,
        "bytes": doc_path.stat().st_size,
        "chars": len(text),
        "pages": 1,
        "warnings": [],
        "repaired": False,
        "used_ocr": False,
        "error": None,
    }
    return text, meta


def _extract_html(markup: str) -> str:
    soup = BeautifulSoup(markup, "lxml")
    for tag in soup(["script", "style"]):
        tag.decompose()
    return soup.get_text("\n", strip=True)


def _extract_docx(path: Path) -> str:
    document = Document(str(path))
    lines = [paragraph.text for paragraph in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            lines.append("  ".join(cell.text.strip() for cell in row.cells))
    return "\n".join(lines)


def extract_pdf_text(
    path: Path,
    *,
    min_chars: int = DEFAULT_MIN_TEXT_CHARS,
    prefer_backends: Iterable[str] | None = None,
    ocr: bool = True,
    ocr_lang: str = DEFAULT_OCR_LANG,
    ocr_dpi: int = DEFAULT_OCR_DPI,
) -> tuple[str, dict[str, Any]]:
    try:
        byte_size = path.stat().st_size
    except OSError:
        byte_size = 0

    best_text = ""
    best_backend = "none"
    best_pages = 0
    best_repaired = False
    all_warnings: list[str] = []
    last_error: str | None = None
    readable = False

    with tempfile.TemporaryDirectory(prefix="exscan_pdf_") as tmp_dir:
        repair_path: Path | None = None
        repair_error: str | None = None

        for backend_name in _resolve_backend_order(prefer_backends):
            use_repair = backend_name.startswith("pikepdf+")
            base_backend = backend_name.split("+", 1)[-1] if use_repair else backend_name
            target_path = path

            if use_repair:
                if repair_path is None and repair_error is None:
                    try:
                        repair_path = _repair_pdf_with_pikepdf(path, Path(tmp_dir))
                    except Exception as exc:  # pragma: no cover - pikepdf optional
                        repair_error = str(exc)
                        logger.debug("pikepdf repair failed for %s: %s", path, exc)
                if repair_path is None:
                    all_warnings.append(f"{backend_name}: pikepdf repair failed: {repair_error}")
                    last_error = repair_error
                    continue
                target_path = repair_path

            try:
                pages, backend_warnings = _extract_with_backend(base_backend, target_path)
            except Exception as exc:  # pragma: no cover - backend errors depend on deps
                logger.debug("PDF backend %s failed for %s: %s", base_backend, path, exc)
                all_warnings.append(f"{backend_name}: {exc}")
                last_error = str(exc)
                continue

            readable = True
            all_warnings.extend(f"{backend_name}: {warning}" for warning in backend_warnings)
            text = PAGE_SEPARATOR.join(pages)
            if significant_chars(text) > significant_chars(best_text):
                best_text = text
                best_backend = backend_name
                best_pages = len(pages)
                best_repaired = use_repair
            if significant_chars(text) >= min_chars and not backend_warnings:
                break

    if not readable:
        raise DocumentReadError(path, last_error or "no PDF backend could read the file")

    meta: dict[str, Any] = {
        "backend": best_backend,
        "bytes": byte_size,
        "chars": len(best_text),
        "pages": best_pages,
        "warnings": _dedupe(all_warnings),
        "repaired": best_repaired,
        "used_ocr": False,
        "error": None if best_text.strip() else last_error,
    }
    if significant_chars(best_text) >= min_chars or not ocr:
        return best_text, meta

    logger.info("%s has little embedded text, running OCR", path.name)
    try:
        pages = _ocr_pdf(path, lang=ocr_lang, dpi=ocr_dpi)
    except Exception as exc:
        raise DocumentReadError(path, f"OCR failed: {exc}") from exc
    text = PAGE_SEPARATOR.join(pages)
    meta.update(
        {
            "backend": "ocr",
            "chars": len(text),
            "pages": len(pages),
            "used_ocr": True,
            "error": None,
        }
    )
    return text, meta


def _extract_with_backend(backend: str, path: Path) -> tuple[list[str], list[str]]:
    if backend == "pypdf":
        return _extract_with_pypdf(path)
    if backend == "pdfminer":
        return _extract_with_pdfminer(path)
    raise RuntimeError(f"unknown backend: {backend}")


def _extract_with_pypdf(path: Path) -> tuple[list[str], list[str]]:
    warnings: list[str] = []
    try:
        from pypdf import PdfReader
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError("pypdf is not installed") from exc

    try:
        reader = PdfReader(str(path))
    except Exception as exc:  # pragma: no cover - upstream errors vary
        raise RuntimeError(str(exc)) from exc

    pages: list[str] = []
    for page_number, page in enumerate(reader.pages, start=1):
        try:
            text = page.extract_text() or ""
        except Exception as exc:  # pragma: no cover - depends on document
            warnings.append(f"page {page_number}: {exc}")
            text = ""
        pages.append(text)
    return pages, warnings


def _extract_with_pdfminer(path: Path) -> tuple[list[str], list[str]]:
    try:
        from pdfminer.high_level import extract_text
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError("pdfminer.six is not installed") from exc

    try:
        text = extract_text(str(path))
    except Exception as exc:  # pragma: no cover - upstream errors vary
        raise RuntimeError(str(exc)) from exc
    # pdfminer separates pages with form feeds.
    pages = (text or "").split("\f")
    while pages and not pages[-1].strip():
        pages.pop()
    return pages, []


def _repair_pdf_with_pikepdf(source: Path, temp_dir: Path) -> Path:
    try:
        from pikepdf import Pdf  # type: ignore[attr-defined]
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError("pikepdf is not installed") from exc

    repaired_path = Path(temp_dir) / "repaired.pdf"
    try:
        with Pdf.open(str(source)) as pdf:
            pdf.save(str(repaired_path))
    except Exception as exc:  # pragma: no cover - upstream errors vary
        raise RuntimeError(str(exc)) from exc
    return repaired_path


def _ocr_pdf(path: Path, *, lang: str, dpi: int) -> list[str]:
    try:
        import pytesseract
        from pdf2image import convert_from_path
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError("OCR needs pdf2image and pytesseract") from exc

    images = convert_from_path(str(path), dpi=dpi)
    pages: list[str] = []
    for page_number, image in enumerate(images, start=1):
        logger.info("Running OCR on page %d of %d", page_number, len(images))
        pages.append(pytesseract.image_to_string(image, lang=lang))
    return pages
