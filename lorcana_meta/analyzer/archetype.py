"""
Archetype inference for tournament decks.
"""
import json
import logging
from collections import Counter, defaultdict
from pathlib import Path
from typing import Optional

from ..corpus.models import TournamentDeck

_LOG = logging.getLogger(__name__)

UNKNOWN = "Unknown"
DEFAULT_KEYWORDS_PATH = Path(__file__).resolve().parent.parent / "data" / "ink_keywords.json"


def load_ink_keywords(path: Optional[Path] = None) -> dict[str, list[str]]:
    """
    Load the ink -> card-name keyword table.

    The table is plain JSON (``{"Amber": ["be prepared", ...]}``) so it can be
    extended without code changes. Insertion order decides which inks win
    when more than two are detected.
    """
    path = Path(path) if path else DEFAULT_KEYWORDS_PATH
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, ValueError) as e:
        _LOG.warning("Ink keyword table %s unreadable: %s", path, e)
        return {}

    if not isinstance(raw, dict):
        _LOG.warning("Ink keyword table %s is not an object", path)
        return {}
    return {
        str(ink): [str(k).lower() for k in keywords if str(k).strip()]
        for ink, keywords in raw.items()
        if isinstance(keywords, list)
    }


def _join_inks(inks: list[str]) -> Optional[str]:
    if len(inks) >= 2:
        return "/".join(inks[:2])
    if len(inks) == 1:
        return inks[0]
    return None


def detect_inks(deck: TournamentDeck, keywords: dict[str, list[str]]) -> list[str]:
    """Inks whose keywords appear in any card name, in table order."""
    names = [(c.name or "").lower() for c in deck.cards]
    return [
        ink for ink, words in keywords.items()
        if any(word in name for name in names for word in words)
    ]


def infer_archetype(deck: TournamentDeck, keywords: Optional[dict[str, list[str]]] = None) -> str:
    """
    Best-effort archetype label for a deck.

    Precedence: explicit archetype, title, declared inks, inks detected from
    card names, then ``"Unknown"``.
    """
    if deck.archetype and deck.archetype.strip() and deck.archetype != UNKNOWN:
        return deck.archetype.strip()

    if deck.title and deck.title.strip():
        return deck.title.strip()

    declared = _join_inks([i.strip() for i in deck.inks if i and i.strip()])
    if declared:
        return declared

    if keywords is None:
        keywords = load_ink_keywords()
    detected = _join_inks(detect_inks(deck, keywords))
    return detected or UNKNOWN


class ArchetypeAnalyzer:
    """Groups corpus decks by inferred archetype."""

    def __init__(self, decks: list[TournamentDeck], keywords: Optional[dict[str, list[str]]] = None):
        self.decks = decks
        self.keywords = keywords if keywords is not None else load_ink_keywords()
        self._labels: Optional[dict[int, str]] = None

    def label(self, deck: TournamentDeck) -> str:
        """Archetype label for a deck, cached by identity."""
        if self._labels is None:
            self._labels = {}
        key = id(deck)
        if key not in self._labels:
            self._labels[key] = infer_archetype(deck, self.keywords)
        return self._labels[key]

    def count(self, decks: list[TournamentDeck]) -> dict[str, dict]:
        """
        Count decks and placements per archetype.

        Returns:
            archetype -> {count, avgPlacement, topPlacements}
        """
        counts: Counter = Counter()
        placements: dict[str, list[int]] = defaultdict(list)

        for deck in decks:
            arch = self.label(deck)
            counts[arch] += 1
            if deck.finish:
                placements[arch].append(deck.finish)

        result = {}
        for arch, count in counts.items():
            finishes = placements.get(arch, [])
            result[arch] = {
                "count": count,
                "avgPlacement": round(sum(finishes) / len(finishes)) if finishes else None,
                "topPlacements": sum(1 for p in finishes if p <= 8),
            }
        return result
