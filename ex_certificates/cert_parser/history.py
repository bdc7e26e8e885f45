"""Bounded scan history persisted as JSON."""
from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, cast

from .scan import ScanResult, now_iso

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 50
DEFAULT_HISTORY_PATH = Path("~/.ex_scanner/history.json")


def resolve_history_path(path: str | Path | None) -> Path:
    if path:
        return Path(path).expanduser()
    env_value = os.environ.get("EXSCAN_HISTORY_PATH")
    if env_value:
        return Path(env_value).expanduser()
    return DEFAULT_HISTORY_PATH.expanduser()


def ensure_history() -> dict[str, Any]:
    timestamp = now_iso()
    return {
        "metadata": {
            "created_at": timestamp,
            "updated_at": timestamp,
            "entry_count": 0,
        },
        "entries": [],
    }


def load_history(path: Path) -> dict[str, Any]:
    if not path.exists():
        return ensure_history()
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring unreadable history %s: %s", path, exc)
        return ensure_history()
    if not isinstance(data, dict) or not isinstance(data.get("entries"), list):
        logger.warning("Ignoring malformed history %s", path)
        return ensure_history()
    return cast(dict[str, Any], data)


def save_history(path: Path, history: Mapping[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        json.dump(history, fh, indent=2, ensure_ascii=False)


def entries(history: Mapping[str, Any]) -> list[dict[str, Any]]:
    return cast(list[dict[str, Any]], history.get("entries", []))


def get_entry(history: Mapping[str, Any], position: int) -> dict[str, Any] | None:
    """Return the entry at 1-based ``position`` (most recent first)."""
    items = entries(history)
    if 1 <= position <= len(items):
        return items[position - 1]
    return None


def add_entry(history: dict[str, Any], result: ScanResult | Mapping[str, Any]) -> dict[str, Any]:
    """Prepend a scan to ``history``; the raw text is never stored."""
    if isinstance(result, ScanResult):
        entry = result.to_dict(include_raw=False)
    else:
        entry = {key: value for key, value in result.items() if key != "raw"}
    items = cast(list[dict[str, Any]], history.setdefault("entries", []))
    items.insert(0, entry)
    del items[HISTORY_LIMIT:]
    _touch(history)
    return entry


def clear_history(history: dict[str, Any]) -> int:
    items = cast(list[dict[str, Any]], history.setdefault("entries", []))
    removed = len(items)
    items.clear()
    _touch(history)
    return removed


def _touch(history: dict[str, Any]) -> None:
    metadata = cast(dict[str, Any], history.setdefault("metadata", {}))
    metadata["updated_at"] = now_iso()
    metadata["entry_count"] = len(entries(history))
