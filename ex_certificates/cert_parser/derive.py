"""Fill fields implied by other, already extracted fields."""
from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import Any

from .tables import EPL_ZONES

logger = logging.getLogger(__name__)

DERIVED_MARKER = "(derived from EPL)"


def zone_from_epl(epl: str | None) -> str | None:
    if not epl:
        return None
    zone = EPL_ZONES.get(epl)
    if zone is None:
        return None
    return f"Zone {zone} {DERIVED_MARKER}"


def apply_derivations(fields: MutableMapping[str, Any]) -> None:
    """Derive absent fields in the draft ``fields`` mapping.

    Only ``zone`` is derived; an explicitly extracted zone is never replaced.
    """
    if fields.get("zone"):
        return
    derived = zone_from_epl(fields.get("epl"))
    if derived:
        logger.debug("Derived %s from EPL %s", derived, fields.get("epl"))
        fields["zone"] = derived
