"""Ordered pattern rules for each certificate field.

Every field owns a tuple of rules that is tried in order. Unless noted the
first rule that matches wins; the marking shapes are the exception, where
every match of every shape is collected and the longest one is chosen.
"""
from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from .record import CertType


@dataclass(frozen=True)
class PatternRule:
    """A single label/pattern rule; ``group`` names the captured value."""

    pattern: re.Pattern[str]
    group: int | str = 1

    def search(self, text: str) -> str | None:
        match = self.pattern.search(text)
        if not match:
            return None
        return match.group(self.group)


@dataclass(frozen=True)
class CertNumberRule:
    cert_type: CertType
    pattern: re.Pattern[str]
    normalize: Callable[[str], str]


def first_match(
    rules: Iterable[PatternRule],
    text: str,
    *,
    clean: Callable[[str], str] | None = None,
    reject: Callable[[str], bool] | None = None,
) -> str | None:
    """Return the value of the first rule that matches and is not rejected.

    A rejected candidate moves on to the next rule, not to a later match of
    the same rule.
    """
    for rule in rules:
        value = rule.search(text)
        if value is None:
            continue
        value = clean(value) if clean else value.strip()
        if not value:
            continue
        if reject is not None and reject(value):
            continue
        return value
    return None


def _collapse_spaces(value: str) -> str:
    return re.sub(r"\s+", " ", value).strip()


def _strip_spaces(value: str) -> str:
    return re.sub(r"\s+", "", value)


# -- certificate numbers ------------------------------------------------------

CERT_NUMBER_RULES: tuple[CertNumberRule, ...] = (
    # IECEx BAS 12.0001X, IECEx CML 19.0034X/2.0
    CertNumberRule(
        CertType.IECEX,
        re.compile(r"IECEx\s+[A-Z]{2,5}\s+\d{2}\.\d{3,5}[A-Z]?(?:/\d+\.\d+)?", re.IGNORECASE),
        _collapse_spaces,
    ),
    # TRAC13ATEX0009X, FIDI 24 ATEX 0075X/1, BASEEFA15ATEX0123X
    CertNumberRule(
        CertType.ATEX,
        re.compile(
            r"[A-Z]{2,10}\s*\d{2}\s*ATEX\s*\d{3,5}\s*[XU]?(?:\s*/\s*V?\d\w*)?",
            re.IGNORECASE,
        ),
        _strip_spaces,
    ),
    # CML 21UKEX1234X
    CertNumberRule(
        CertType.UKCA,
        re.compile(r"[A-Z]{2,10}\s*\d{2}\s*UKEX\s*\d{3,5}\s*[XU]?", re.IGNORECASE),
        _collapse_spaces,
    ),
    CertNumberRule(
        CertType.UKCA,
        re.compile(r"UKCA\s+(?=[A-Z\-./]*\d)[A-Z0-9\-./]+", re.IGNORECASE),
        str.strip,
    ),
)

EMBEDDED_ATEX_RE = re.compile(r"\d{2}\s*ATEX\s*\d{3,5}", re.IGNORECASE)

# -- Ex markings --------------------------------------------------------------

_CODES = r"\bEx\s+(?:[deimopqstnabrh]{1,4}\s+)+"
# Gas group tokens are upper case even when the rest of a marking is not.
_GAS_GROUP = r"(?-i:I{1,3}[ABC]*)\b"

# Most specific shape first.
MARKING_RULES: tuple[re.Pattern[str], ...] = (
    # Ex db IIC T4 Gb, Ex db ib [ib] IIB T4 Gb
    re.compile(
        _CODES
        + r"(?:\[[a-z]{1,4}\]\s+)?"
        + _GAS_GROUP
        + r"(?:\+H2)?\s+T[1-6](?:/T[1-6])*\s*[GDM][abc](?:/[GDM][abc])*",
        re.IGNORECASE,
    ),
    # Ex ia I Ma
    re.compile(_CODES + r"(?-i:I)\s+M[ab]", re.IGNORECASE),
    # Ex tb IIIC T135°C Db
    re.compile(_CODES + r"(?-i:I{2,3}[ABC]*)\b\s+T\d+°?\s*C\s*[GDM][abc]", re.IGNORECASE),
    # Ex d IIB T4
    re.compile(
        _CODES + r"(?:\[[a-z]{1,4}\]\s+)?" + _GAS_GROUP + r"(?:\+H2)?\s+T[1-6](?:/T[1-6])*",
        re.IGNORECASE,
    ),
    # Ex d IIB
    re.compile(_CODES + _GAS_GROUP, re.IGNORECASE),
)

# Codes between "Ex" and the (upper case) gas-group token.
PROTECTION_PREFIX_RE = re.compile(
    r"^Ex\s+(.*?)(?:\[.*?\]\s*)?(?=(?-i:III[ABC]|II[ABC]?|I)\b)",
    re.IGNORECASE,
)

# -- marking-scoped fields with whole-text fallback ---------------------------

GAS_GROUP_MARKING_RE = re.compile(r"\b(III[ABC]|II[ABC](?:\+H2)?|I(?=\s+M[ab]\b))\b")
GAS_GROUP_TEXT_RE = re.compile(r"\b(III[ABC]|II[ABC](?:\+H2)?|Group\s+I(?:I[ABC]?)?)\b")
TEMP_CLASS_RE = re.compile(r"\bT([1-6])\b")
EPL_RE = re.compile(r"\b([GDM][abc])\b")

# -- other single-pattern fields ----------------------------------------------

ZONE_RE = re.compile(r"Zone\s+(\d{1,2})", re.IGNORECASE)
IP_RATING_RE = re.compile(r"\bIP\s*([0-9X]{2}[A-Z]?)\b", re.IGNORECASE)
AMBIENT_TEMP_RE = re.compile(
    r"(-\d+)\s*°?\s*C?\s*(?:to|\.{2,3}|–|—|-)\s*\+?(\d+)\s*°?\s*C",
    re.IGNORECASE,
)
SPECIAL_CONDITIONS_RE = re.compile(
    r"Special\s+Conditions?\s*(?:for\s+(?:safe\s+)?use)?[:\s]+"
    r"(?P<body>[\s\S]{10,}?)"
    r"(?=\n\s*\n|(?-i:\n[A-Z]{2,})|\n\d+\.\s|\Z)",
    re.IGNORECASE,
)
STANDARD_RE = re.compile(
    r"(?:EN\s+)?(?:IEC\s*)?60079-\d+(?::\d{4})?(?:\+A\d+:\d{4})*",
    re.IGNORECASE,
)

# -- label anchored fields ----------------------------------------------------

_LINE_VALUE = r"([^\n]{3,80})"

MANUFACTURER_RULES: tuple[PatternRule, ...] = (
    PatternRule(re.compile(r"Manufacturer[:\s]*\n\s*Address[:\s]*\n\s*" + _LINE_VALUE, re.IGNORECASE)),
    PatternRule(re.compile(r"Manufacturer[:\s]*\n\s*" + _LINE_VALUE, re.IGNORECASE)),
    PatternRule(re.compile(r"Manufacturer[:\s]+" + _LINE_VALUE, re.IGNORECASE)),
    PatternRule(re.compile(r"Applicant[:\s]*\n\s*" + _LINE_VALUE, re.IGNORECASE)),
    PatternRule(re.compile(r"Applicant[:\s]+" + _LINE_VALUE, re.IGNORECASE)),
    PatternRule(re.compile(r"Issued\s+to[:\s]*\n\s*" + _LINE_VALUE, re.IGNORECASE)),
    PatternRule(re.compile(r"Issued\s+to[:\s]+" + _LINE_VALUE, re.IGNORECASE)),
)
MANUFACTURER_REJECT_RE = re.compile(r"^(?:Address|Name|Location|see\b|refer\b|as\s)", re.IGNORECASE)

_LONG_LINE_VALUE = r"([^\n]{3,120})"

EQUIPMENT_RULES: tuple[PatternRule, ...] = (
    PatternRule(re.compile(r"Equipment[:\s]*\n\s*(?!Group)" + _LONG_LINE_VALUE, re.IGNORECASE)),
    PatternRule(re.compile(r"Equipment[:\s]+(?!Group)" + _LONG_LINE_VALUE, re.IGNORECASE)),
    PatternRule(re.compile(r"Apparatus[:\s]+" + _LONG_LINE_VALUE, re.IGNORECASE)),
    PatternRule(re.compile(r"Type\s+of\s+Equipment[:\s]+" + _LONG_LINE_VALUE, re.IGNORECASE)),
    PatternRule(re.compile(r"Product[:\s]*\n\s*" + _LONG_LINE_VALUE, re.IGNORECASE)),
    PatternRule(re.compile(r"Product[:\s]+" + _LONG_LINE_VALUE, re.IGNORECASE)),
)
EQUIPMENT_REJECT_RE = re.compile(r"^(?:or\s+Protective|Intended\s+for|listed\s+in)", re.IGNORECASE)

_ISO_DATE = r"(\d{4}[-/]\d{2}[-/]\d{2})"
_NAMED_DATE = r"(\d{1,2}[\s./-]\w{3,9}[\s./-]\d{4})"

ISSUE_DATE_RULES: tuple[PatternRule, ...] = (
    PatternRule(re.compile(r"Date\s+of\s+Issue[:\s]*\n?\s*" + _ISO_DATE, re.IGNORECASE)),
    PatternRule(re.compile(r"Date\s+of\s+Issue[:\s]+" + _NAMED_DATE, re.IGNORECASE)),
    PatternRule(re.compile(r"Issue\s*(?:d|Date)[:\s]+" + _ISO_DATE, re.IGNORECASE)),
    PatternRule(re.compile(r"Issue\s*(?:d|Date)[:\s]+" + _NAMED_DATE, re.IGNORECASE)),
    PatternRule(re.compile(r"Issued[:\s]+" + _NAMED_DATE, re.IGNORECASE)),
)

EXPIRY_DATE_RULES: tuple[PatternRule, ...] = (
    PatternRule(re.compile(r"Expir[ey]\s*(?:Date)?[:\s]+" + _ISO_DATE, re.IGNORECASE)),
    PatternRule(re.compile(r"Expir[ey]\s*(?:Date)?[:\s]+" + _NAMED_DATE, re.IGNORECASE)),
    PatternRule(re.compile(r"Valid\s+(?:until|to)[:\s]+" + _ISO_DATE, re.IGNORECASE)),
    PatternRule(re.compile(r"Valid\s+(?:until|to)[:\s]+" + _NAMED_DATE, re.IGNORECASE)),
    PatternRule(re.compile(r"Validity[:\s]+" + _NAMED_DATE, re.IGNORECASE)),
)

# -- ATEX specific ------------------------------------------------------------

CATEGORY_RULES: tuple[PatternRule, ...] = (
    PatternRule(re.compile(r"\bII\s+([1-3])\s+[GDM]\b")),
    PatternRule(re.compile(r"\bCategory\s+([1-3][GDM]?)\b", re.IGNORECASE)),
)

GROUP_RULES: tuple[PatternRule, ...] = (
    PatternRule(re.compile(r"Equipment\s+[Gg]roup\s+(I{1,3})")),
    PatternRule(re.compile(r"\b(I{2,3})\s+[1-3]\s+[GDM]\b")),
)
