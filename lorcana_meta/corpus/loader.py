"""
Tournament corpus loading.

The corpus is a single JSON file, either a bare list of deck records or an
object with a ``decks`` list. Both shapes are converted here, once, into
``TournamentDeck`` objects so callers never re-check the raw shape.
"""
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..analyzer.placement import parse_placement
from ..config import Config
from .models import Card, TournamentDeck

_LOG = logging.getLogger(__name__)

FORMAT_ALIASES = {"infinity": "Core"}
_FINISH_FIELDS = ("finish", "placement", "standing", "rankLabel", "rank")


@dataclass
class MetaSnapshot:
    """Parsed corpus plus a human-readable note when something went wrong."""
    decks: list[TournamentDeck] = field(default_factory=list)
    note: str = ""
    path: Optional[Path] = None
    updated_at: Optional[str] = None

    @property
    def available(self) -> bool:
        return bool(self.decks)


class MetaCache:
    """
    Holds the last parsed corpus keyed by (path, mtime).

    Entries are replaced wholesale, never mutated, so concurrent readers
    always see a complete snapshot.
    """

    def __init__(self):
        self._entry: Optional[tuple[Path, float, MetaSnapshot]] = None

    def get(self, path: Path, mtime: float) -> Optional[MetaSnapshot]:
        entry = self._entry
        if entry is not None and entry[0] == path and entry[1] == mtime:
            return entry[2]
        return None

    def put(self, path: Path, mtime: float, snapshot: MetaSnapshot) -> None:
        self._entry = (path, mtime, snapshot)

    def clear(self) -> None:
        self._entry = None


def resolve_meta_path(explicit=None) -> Optional[Path]:
    """Return the first existing corpus file among the known locations."""
    for candidate in Config.meta_path_candidates(explicit):
        try:
            if candidate.is_file():
                return candidate.resolve()
        except OSError:
            continue
    return None


def normalize_format(value) -> str:
    text = str(value).strip() if value else ""
    if not text:
        return Config.DEFAULT_FORMAT
    return FORMAT_ALIASES.get(text.lower(), text)


def deck_from_record(record: dict) -> TournamentDeck:
    """Convert one raw JSON deck record into the canonical deck type."""
    raw_cards = record.get("cards") if isinstance(record.get("cards"), list) else []
    cards = [c for c in (Card.from_raw(entry) for entry in raw_cards) if c is not None]

    standing = None
    finish = None
    for key in _FINISH_FIELDS:
        value = record.get(key)
        if value is None or value == "":
            continue
        if standing is None and not isinstance(value, (int, float)):
            standing = str(value)
        if finish is None:
            finish = parse_placement(value)
    if standing is None and finish is not None:
        standing = str(finish)

    inks = record.get("inks") if isinstance(record.get("inks"), list) else []

    return TournamentDeck(
        cards=cards,
        url=record.get("url") or record.get("link"),
        name=record.get("name"),
        title=record.get("title"),
        event=record.get("event") or record.get("eventName"),
        date=record.get("date") or record.get("fetchedAt") or record.get("lastScrapedAt"),
        standing=standing,
        finish=finish,
        format=normalize_format(record.get("format")),
        archetype=record.get("archetype"),
        inks=[str(i) for i in inks if isinstance(i, str) and i.strip()],
        player=record.get("player"),
        fingerprint=record.get("decklistFingerprint"),
        raw=record,
    )


def corpus_records(payload) -> tuple[list[dict], Optional[str]]:
    """Raw deck records and updatedAt from a bare list, ``{decks}`` or ``{items}``."""
    updated_at = None
    if isinstance(payload, list):
        records = payload
    elif isinstance(payload, dict):
        records = payload.get("decks") or payload.get("items") or []
        updated_at = payload.get("updatedAt")
        if not isinstance(records, list):
            records = []
    else:
        records = []
    return [r for r in records if isinstance(r, dict)], updated_at


def parse_corpus(payload) -> tuple[list[TournamentDeck], Optional[str]]:
    """Accept either corpus shape and return (decks, updatedAt)."""
    records, updated_at = corpus_records(payload)
    decks = [deck_from_record(r) for r in records]
    return decks, updated_at


def read_corpus_file(path: Path):
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def load_tournament_meta(path=None, cache: Optional[MetaCache] = None) -> MetaSnapshot:
    """
    Load the tournament corpus.

    Args:
        path: Explicit corpus file; falls back to the configured locations
        cache: Optional cache reused across calls within the process

    Returns:
        MetaSnapshot; a missing or unreadable file yields no decks and a note
    """
    resolved = resolve_meta_path(path)
    if resolved is None:
        _LOG.info("Tournament corpus not found (looked for %s)", Config.META_FILENAME)
        return MetaSnapshot(note=f"{Config.META_FILENAME} not found")

    try:
        mtime = resolved.stat().st_mtime
    except OSError as e:
        _LOG.warning("Cannot stat %s: %s", resolved, e)
        return MetaSnapshot(note=f"Failed to load {Config.META_FILENAME}: {e}", path=resolved)

    if cache is not None:
        cached = cache.get(resolved, mtime)
        if cached is not None:
            return cached

    try:
        payload = read_corpus_file(resolved)
    except (OSError, ValueError) as e:
        _LOG.warning("Failed to load tournament corpus %s: %s", resolved, e)
        return MetaSnapshot(note=f"Failed to load {Config.META_FILENAME}: {e}", path=resolved)

    decks, updated_at = parse_corpus(payload)
    _LOG.info("Loaded %d tournament decks from %s", len(decks), resolved)
    snapshot = MetaSnapshot(decks=decks, path=resolved, updated_at=updated_at)

    if cache is not None:
        cache.put(resolved, mtime, snapshot)
    return snapshot
