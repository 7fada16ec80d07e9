"""
Corpus maintenance: de-duplicate, sort and rewrite the tournament file.
"""
import hashlib
import json
import logging
import os
import tempfile
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ..utils.date_utils import parse_date
from ..utils.normalize import build_counts
from .loader import corpus_records, read_corpus_file, resolve_meta_path

_LOG = logging.getLogger(__name__)


def decklist_fingerprint(cards) -> Optional[str]:
    """
    Content fingerprint of a decklist.

    sha256 over sorted ``"{qty}x{normalized name}"`` pairs, first 16 hex chars.
    Returns None for an empty list.
    """
    counts = build_counts(cards)
    if not counts:
        return None
    payload = "|".join(f"{qty}x{name}" for name, qty in sorted(counts.items()))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:16]


def dedupe_key(record: dict) -> str:
    key = record.get("decklistFingerprint")
    if not key and isinstance(record.get("cards"), list):
        key = decklist_fingerprint(record["cards"])
    if not key:
        key = "{}_{}_{}".format(
            record.get("eventName") or record.get("event") or "unknown",
            record.get("player") or "unknown",
            record.get("standing") or "",
        )
    return key


def deduplicate(records: list[dict]) -> list[dict]:
    """Keep the first record for each fingerprint, preserving order."""
    seen: dict[str, dict] = {}
    for record in records:
        if not isinstance(record, dict):
            continue
        seen.setdefault(dedupe_key(record), record)
    return list(seen.values())


def sort_by_date(records: list[dict]) -> list[dict]:
    """Newest first; undated records go last."""
    epoch = datetime.min.replace(tzinfo=timezone.utc)

    def key(record):
        return parse_date(record.get("date") or record.get("fetchedAt")) or epoch

    return sorted(records, key=key, reverse=True)


def write_json_atomic(path: Path, data) -> None:
    """Atomically write JSON to path with UTF-8 encoding."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


def save_corpus(path: Path, records: list[dict]) -> None:
    data = {
        "format": "core",
        "updatedAt": datetime.now(timezone.utc).isoformat(),
        "decksCount": len(records),
        "decks": records,
    }
    write_json_atomic(path, data)
    _LOG.info("Saved %d decks to %s", len(records), path)


def aggregate_corpus(path=None) -> dict:
    """
    Load, de-duplicate, date-sort and rewrite the corpus file.

    Returns:
        Stats dictionary (counts before/after, duration in ms and a note
        that is non-empty when the file is missing or unreadable)
    """
    start = time.monotonic()
    resolved = resolve_meta_path(path)
    if resolved is None:
        _LOG.warning("No tournament corpus found; nothing to aggregate")
        return {"path": None, "loaded": 0, "total": 0, "duplicates": 0, "durationMs": 0,
                "note": "No tournament corpus found"}

    try:
        payload = read_corpus_file(resolved)
    except (OSError, ValueError) as e:
        _LOG.warning("Failed to load tournament corpus %s: %s", resolved, e)
        return {
            "path": str(resolved), "loaded": 0, "total": 0, "duplicates": 0, "durationMs": 0,
            "note": f"Failed to load {resolved.name}: {e}",
        }
    records, _ = corpus_records(payload)

    unique = sort_by_date(deduplicate(records))
    if unique:
        save_corpus(resolved, unique)

    stats = {
        "path": str(resolved),
        "loaded": len(records),
        "total": len(unique),
        "duplicates": len(records) - len(unique),
        "durationMs": round((time.monotonic() - start) * 1000),
        "note": "",
    }
    _LOG.info("Aggregation complete: %(loaded)d loaded, %(total)d kept", stats)
    return stats
