"""Field extractors.

Each extractor takes the raw document text (and, for the marking-scoped
fields, the selected marking) and returns the field value or ``None``.
Nothing here raises on odd input; a rule that does not match simply leaves
the field absent.
"""
from __future__ import annotations

import re
from dataclasses import dataclass

from . import rules
from .record import CertType
from .tables import CERT_BODIES_BY_LENGTH, GAS_GROUP_INFO, TEMP_CLASS_INFO


@dataclass(frozen=True)
class CertNumber:
    number: str
    cert_type: CertType


def extract_cert_number(text: str) -> CertNumber | None:
    for rule in rules.CERT_NUMBER_RULES:
        match = rule.pattern.search(text)
        if not match:
            continue
        number = rule.normalize(match.group(0))
        if not number:
            continue
        cert_type = rule.cert_type
        if cert_type is CertType.IECEX and rules.EMBEDDED_ATEX_RE.search(text):
            cert_type = CertType.IECEX_ATEX
        return CertNumber(number, cert_type)
    return None


def extract_markings(text: str) -> list[str]:
    """Collect every distinct marking candidate, longest first."""
    seen: set[str] = set()
    candidates: list[str] = []
    for pattern in rules.MARKING_RULES:
        for match in pattern.finditer(text):
            cleaned = re.sub(r"\s+", " ", match.group(0).strip())
            if cleaned and cleaned not in seen:
                seen.add(cleaned)
                candidates.append(cleaned)
    # sorted() is stable, so equal lengths keep rule order.
    return sorted(candidates, key=len, reverse=True)


def _scoped_search(pattern: re.Pattern[str], marking: str | None, text: str) -> re.Match[str] | None:
    if marking:
        match = pattern.search(marking)
        if match:
            return match
    return pattern.search(text)


def extract_gas_group(text: str, marking: str | None) -> tuple[str | None, str | None]:
    match = None
    if marking:
        match = rules.GAS_GROUP_MARKING_RE.search(marking)
    if match is None:
        match = rules.GAS_GROUP_TEXT_RE.search(text)
    if match is None:
        return None, None
    group = re.sub(r"^Group\s+", "", match.group(1), flags=re.IGNORECASE)
    return group, GAS_GROUP_INFO.get(group)


def extract_temp_class(text: str, marking: str | None) -> tuple[str | None, str | None]:
    match = _scoped_search(rules.TEMP_CLASS_RE, marking, text)
    if match is None:
        return None, None
    temp_class = f"T{match.group(1)}"
    return temp_class, TEMP_CLASS_INFO.get(temp_class)


def extract_epl(text: str, marking: str | None) -> str | None:
    match = _scoped_search(rules.EPL_RE, marking, text)
    return match.group(1) if match else None


def extract_zone(text: str) -> str | None:
    match = rules.ZONE_RE.search(text)
    return f"Zone {match.group(1)}" if match else None


def extract_ip_rating(text: str) -> str | None:
    match = rules.IP_RATING_RE.search(text)
    return f"IP{match.group(1)}" if match else None


def extract_ambient_temp(text: str) -> str | None:
    match = rules.AMBIENT_TEMP_RE.search(text)
    if not match:
        return None
    return f"{match.group(1)}°C to +{match.group(2)}°C"


def _clean_label_value(value: str) -> str:
    # Text extractors separate layout cells with runs of spaces; keep the first cell.
    value = re.split(r"\s{2,}", value.strip(), maxsplit=1)[0]
    value = re.sub(r"[,\s]+$", "", value)
    return value if len(value) >= 3 else ""


def extract_manufacturer(text: str) -> str | None:
    return rules.first_match(
        rules.MANUFACTURER_RULES,
        text,
        clean=_clean_label_value,
        reject=lambda value: bool(rules.MANUFACTURER_REJECT_RE.match(value)),
    )


def extract_equipment(text: str) -> str | None:
    return rules.first_match(
        rules.EQUIPMENT_RULES,
        text,
        clean=_clean_label_value,
        reject=lambda value: bool(rules.EQUIPMENT_REJECT_RE.match(value)),
    )


def extract_notified_body(text: str) -> str | None:
    for body in CERT_BODIES_BY_LENGTH:
        if re.search(rf"(?<!\w){re.escape(body)}(?!\w)", text):
            return body
    return None


def extract_issue_date(text: str) -> str | None:
    return rules.first_match(rules.ISSUE_DATE_RULES, text)


def extract_expiry_date(text: str) -> str | None:
    return rules.first_match(rules.EXPIRY_DATE_RULES, text)


SPECIAL_CONDITIONS_LIMIT = 500


def extract_special_conditions(text: str) -> str | None:
    match = rules.SPECIAL_CONDITIONS_RE.search(text)
    if not match:
        return None
    body = match.group("body").strip()[:SPECIAL_CONDITIONS_LIMIT].strip()
    return body or None


def extract_standards(text: str) -> str | None:
    found = [match.group(0).strip() for match in rules.STANDARD_RE.finditer(text)]
    unique = list(dict.fromkeys(value for value in found if value))
    return ", ".join(unique) if unique else None


def extract_category(text: str) -> str | None:
    return rules.first_match(rules.CATEGORY_RULES, text)


def extract_group(text: str) -> str | None:
    return rules.first_match(rules.GROUP_RULES, text)
