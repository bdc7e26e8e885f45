"""Split the protection-type prefix of an Ex marking into codes."""
from __future__ import annotations

import re

from .record import ProtectionType
from .rules import PROTECTION_PREFIX_RE
from .tables import PROTECTION_TYPES, VALID_PROTECTION_CODES


def _is_valid_code(token: str) -> bool:
    lowered = token.lower()
    return lowered in VALID_PROTECTION_CODES or re.sub(r"[abc]$", "", lowered) in VALID_PROTECTION_CODES


def _describe(token: str) -> ProtectionType:
    lowered = token.lower()
    base = re.sub(r"[abcrs]$", "", lowered) if len(lowered) > 1 else lowered
    level_match = re.search(r"[abc]$", lowered) if len(lowered) > 1 else None
    description = PROTECTION_TYPES.get(base) or PROTECTION_TYPES.get(lowered) or "Unknown"
    return ProtectionType(
        code=token,
        base_type=base,
        level=level_match.group(0) if level_match else None,
        description=description,
    )


def decompose(marking: str | None) -> tuple[ProtectionType, ...]:
    """Return the protection types named in ``marking``.

    Only the marking is inspected; protection letters elsewhere in the
    document are ignored. Tokens that are not protection codes (bracketed
    associated-apparatus codes, stray words) are dropped.
    """
    if not marking:
        return ()
    match = PROTECTION_PREFIX_RE.match(marking)
    if not match:
        return ()
    tokens = match.group(1).split()
    return tuple(_describe(token) for token in tokens if _is_valid_code(token))
