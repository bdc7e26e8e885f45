"""Certificate record produced by a single parse."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class CertType(str, Enum):
    IECEX = "IECEx"
    ATEX = "ATEX"
    UKCA = "UKCA"
    IECEX_ATEX = "IECEx + ATEX"


@dataclass(frozen=True)
class ProtectionType:
    """One protection-type code taken from the Ex marking, e.g. ``db``."""

    code: str
    base_type: str
    level: str | None
    description: str

    def to_dict(self) -> dict[str, object]:
        return {
            "code": self.code,
            "baseType": self.base_type,
            "level": self.level,
            "description": self.description,
        }


# Attribute name -> serialized key, in output order.
FIELD_KEYS: dict[str, str] = {
    "cert_number": "certNumber",
    "cert_type": "certType",
    "marking": "marking",
    "markings": "markings",
    "protection_types": "protectionTypes",
    "gas_group": "gasGroup",
    "gas_group_info": "gasGroupInfo",
    "temp_class": "tempClass",
    "temp_class_max": "tempClassMax",
    "epl": "epl",
    "zone": "zone",
    "ip_rating": "ipRating",
    "ambient_temp": "ambientTemp",
    "manufacturer": "manufacturer",
    "equipment": "equipment",
    "notified_body": "notifiedBody",
    "issue_date": "issueDate",
    "expiry_date": "expiryDate",
    "special_conditions": "specialConditions",
    "standard": "standard",
    "category": "category",
    "group": "group",
    "raw": "raw",
}


@dataclass(frozen=True)
class CertificateRecord:
    """Structured certificate data.

    Scalar fields are either ``None`` or a non-empty string. ``markings`` is
    ordered longest first and ``protection_types`` follows the order of the
    codes in ``marking``.
    """

    raw: str
    cert_number: str | None = None
    cert_type: CertType | None = None
    marking: str | None = None
    markings: tuple[str, ...] = field(default_factory=tuple)
    protection_types: tuple[ProtectionType, ...] = field(default_factory=tuple)
    gas_group: str | None = None
    gas_group_info: str | None = None
    temp_class: str | None = None
    temp_class_max: str | None = None
    epl: str | None = None
    zone: str | None = None
    ip_rating: str | None = None
    ambient_temp: str | None = None
    manufacturer: str | None = None
    equipment: str | None = None
    notified_body: str | None = None
    issue_date: str | None = None
    expiry_date: str | None = None
    special_conditions: str | None = None
    standard: str | None = None
    category: str | None = None
    group: str | None = None

    def to_dict(self, *, include_raw: bool = True) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for attr, key in FIELD_KEYS.items():
            if attr == "raw" and not include_raw:
                continue
            value = getattr(self, attr)
            if attr == "cert_type" and value is not None:
                value = value.value
            elif attr == "markings":
                value = list(value)
            elif attr == "protection_types":
                value = [entry.to_dict() for entry in value]
            data[key] = value
        return data
