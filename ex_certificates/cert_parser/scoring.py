"""Extraction confidence score."""
from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from .record import CertificateRecord

# Sums to 100.
CONFIDENCE_WEIGHTS: Mapping[str, int] = MappingProxyType(
    {
        "certNumber": 20,
        "marking": 20,
        "gasGroup": 10,
        "tempClass": 10,
        "protectionTypes": 10,
        "epl": 5,
        "manufacturer": 5,
        "equipment": 5,
        "notifiedBody": 5,
        "ipRating": 3,
        "ambientTemp": 3,
        "issueDate": 2,
        "expiryDate": 2,
    }
)

MAX_CONFIDENCE = 100


def _is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, (list, tuple)):
        return len(value) > 0
    return bool(value)


def confidence(record: CertificateRecord | Mapping[str, Any]) -> int:
    """Weighted presence score in ``[0, 100]``.

    Accepts a record or its serialized form (e.g. a history entry).
    """
    data = record.to_dict(include_raw=False) if isinstance(record, CertificateRecord) else record
    score = sum(weight for key, weight in CONFIDENCE_WEIGHTS.items() if _is_present(data.get(key)))
    return max(0, min(MAX_CONFIDENCE, score))
