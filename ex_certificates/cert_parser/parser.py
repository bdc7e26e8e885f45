"""Turn certificate text into a :class:`CertificateRecord`.

``parse`` is a pure function: it reads nothing but its argument, keeps no
state between calls and never raises for any string input. Fields that no
rule recognises are left as ``None``.
"""
from __future__ import annotations

import logging
from typing import Any

from . import extractors
from .derive import apply_derivations
from .protection import decompose
from .record import CertificateRecord
from .scoring import confidence

logger = logging.getLogger(__name__)

__all__ = ["parse", "confidence"]


def parse(text: str) -> CertificateRecord:
    text = text or ""
    fields: dict[str, Any] = {}

    cert = extractors.extract_cert_number(text)
    if cert is not None:
        fields["cert_number"] = cert.number
        fields["cert_type"] = cert.cert_type

    markings = extractors.extract_markings(text)
    marking = markings[0] if markings else None
    if marking:
        logger.debug("Selected marking %r from %d candidates", marking, len(markings))
    fields["marking"] = marking
    fields["markings"] = tuple(markings)
    fields["protection_types"] = decompose(marking)

    fields["gas_group"], fields["gas_group_info"] = extractors.extract_gas_group(text, marking)
    fields["temp_class"], fields["temp_class_max"] = extractors.extract_temp_class(text, marking)
    fields["epl"] = extractors.extract_epl(text, marking)
    fields["zone"] = extractors.extract_zone(text)
    fields["ip_rating"] = extractors.extract_ip_rating(text)
    fields["ambient_temp"] = extractors.extract_ambient_temp(text)
    fields["manufacturer"] = extractors.extract_manufacturer(text)
    fields["equipment"] = extractors.extract_equipment(text)
    fields["notified_body"] = extractors.extract_notified_body(text)
    fields["issue_date"] = extractors.extract_issue_date(text)
    fields["expiry_date"] = extractors.extract_expiry_date(text)
    fields["special_conditions"] = extractors.extract_special_conditions(text)
    fields["standard"] = extractors.extract_standards(text)
    fields["category"] = extractors.extract_category(text)
    fields["group"] = extractors.extract_group(text)

    apply_derivations(fields)

    # Absence is None, never an empty string.
    cleaned = {key: (value if value != "" else None) for key, value in fields.items()}
    return CertificateRecord(raw=text, **cleaned)
