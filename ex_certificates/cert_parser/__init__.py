"""Ex certificate parser package."""
from __future__ import annotations

from . import export, history, scan, text_source
from .parser import confidence, parse
from .record import CertificateRecord, CertType, ProtectionType

__all__ = [
    "CertificateRecord",
    "CertType",
    "ProtectionType",
    "confidence",
    "export",
    "history",
    "parse",
    "scan",
    "text_source",
]
