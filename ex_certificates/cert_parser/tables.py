"""Static domain knowledge for explosion-protection certificates."""
from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

# Certification / notified bodies. Matching scans these longest-first so a
# longer name is never shadowed by a shorter one it contains.
CERT_BODIES: tuple[str, ...] = (
    "BASEEFA",
    "SIRA",
    "DEKRA",
    "PTB",
    "INERIS",
    "CESI",
    "LCIE",
    "UL",
    "FM",
    "CSA Group",
    "CSA",
    "TÜV",
    "TUV",
    "SGS",
    "ZELM",
    "FTZU",
    "NEMKO",
    "DEMKO",
    "KEMA",
    "BVS",
    "IBExU",
    "CERCHAR",
    "SIMTARS",
    "MSHA",
    "ITS",
    "Intertek",
    "Bureau Veritas",
    "CML",
    "Eurofins",
    "Presafe",
    "Fiditas",
    "FIDITAS",
    "ExVeritas",
    "SGS-CSTC",
    "CQM",
    "PCEC",
    "NEPSI",
    "TIIS",
    "KOSHA",
    "KTL",
    "PESO",
    "CCOE",
    "DNV GL",
    "DNV",
    "EXAM",
    "Element",
    "TestSafe",
    "Physikalisch-Technische Bundesanstalt",
)

CERT_BODIES_BY_LENGTH: tuple[str, ...] = tuple(sorted(CERT_BODIES, key=len, reverse=True))

PROTECTION_TYPES: Mapping[str, str] = MappingProxyType(
    {
        "d": "Flameproof enclosure",
        "e": "Increased safety",
        "i": "Intrinsic safety",
        "p": "Pressurized enclosure",
        "o": "Oil immersion",
        "q": "Powder/sand filling",
        "n": "Non-sparking",
        "m": "Encapsulation",
        "t": "Protection by enclosure",
        "s": "Special protection",
        "op": "Optical radiation",
        "h": "Non-incendive",
    }
)

GAS_GROUP_INFO: Mapping[str, str] = MappingProxyType(
    {
        "IIC": "Hydrogen, acetylene (most stringent)",
        "IIB": "Ethylene",
        "IIA": "Propane (least stringent)",
        "I": "Mining (methane)",
        "IIIA": "Combustible flyings",
        "IIIB": "Non-conductive dust",
        "IIIC": "Conductive dust (most stringent)",
    }
)

TEMP_CLASS_INFO: Mapping[str, str] = MappingProxyType(
    {
        "T1": "450°C",
        "T2": "300°C",
        "T3": "200°C",
        "T4": "135°C",
        "T5": "100°C",
        "T6": "85°C",
    }
)

EPL_ZONES: Mapping[str, str] = MappingProxyType(
    {
        "Ga": "0",
        "Gb": "1",
        "Gc": "2",
        "Da": "20",
        "Db": "21",
        "Dc": "22",
        "Ma": "M1",
        "Mb": "M2",
    }
)

VALID_PROTECTION_CODES: frozenset[str] = frozenset(
    {
        "d", "da", "db", "dc",
        "e", "ea", "eb", "ec",
        "i", "ia", "ib", "ic",
        "p", "pa", "pb", "pc", "px", "py", "pz",
        "o", "ob", "oc",
        "q", "qa", "qb",
        "n", "na", "nc", "nr", "nl",
        "m", "ma", "mb", "mc",
        "t", "ta", "tb", "tc",
        "s",
        "h",
        "op",
    }
)
