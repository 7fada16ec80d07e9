"""
Data models for Lorcana tournament deck analysis.
"""
import re
from dataclasses import dataclass, field
from typing import Any, Optional

from ..utils.normalize import build_counts, to_quantity

_PACKED_NAME = re.compile(r"^(\d+)\s*[x×]\s*(.+)$", re.IGNORECASE)


@dataclass
class Card:
    """Represents a single card entry in a decklist."""
    name: str
    quantity: int = 1
    cost: Optional[float] = None
    ink: Optional[str] = None
    inkable: Optional[bool] = None
    card_type: Optional[str] = None

    @classmethod
    def from_raw(cls, entry: Any) -> Optional["Card"]:
        """Build a Card from a dict or a ``"3x Name"`` string."""
        if isinstance(entry, str):
            return _card_from_line(entry)
        if not isinstance(entry, dict):
            return None

        name = str(entry.get("name") or "").replace("\u00a0", " ").strip()
        raw_qty = entry.get("quantity", entry.get("count", entry.get("qty")))
        if raw_qty is None:
            # "4x Name" packed into the name field; "101 Dalmatian Street" stays whole
            match = _PACKED_NAME.match(name)
            if match:
                name, quantity = match.group(2).strip(), int(match.group(1))
            else:
                quantity = 1
        else:
            quantity = to_quantity(raw_qty)
            if quantity is None:
                quantity = 0

        return cls(
            name=name,
            quantity=quantity,
            cost=entry.get("cost"),
            ink=entry.get("ink"),
            inkable=entry.get("inkable"),
            card_type=entry.get("type") or entry.get("card_type"),
        )

    def to_dict(self) -> dict:
        data = {"name": self.name, "quantity": self.quantity}
        for key, value in (("cost", self.cost), ("ink", self.ink),
                           ("inkable", self.inkable), ("type", self.card_type)):
            if value is not None:
                data[key] = value
        return data


def _card_from_line(line: str) -> Optional[Card]:
    text = line.replace("\u00a0", " ").strip()
    if not text:
        return None
    match = re.match(r"^(\d+)\s*[x×]?\s+(.+?)\s*$", text, re.IGNORECASE)
    if match:
        return Card(name=match.group(2).strip(), quantity=int(match.group(1)))
    return Card(name=text, quantity=1)


@dataclass
class TournamentDeck:
    """A decklist plus tournament provenance, canonical in-memory form."""
    cards: list[Card] = field(default_factory=list)
    url: Optional[str] = None
    name: Optional[str] = None
    title: Optional[str] = None
    event: Optional[str] = None
    date: Optional[str] = None
    standing: Optional[str] = None
    finish: Optional[int] = None
    format: str = "Core"
    archetype: Optional[str] = None
    inks: list[str] = field(default_factory=list)
    player: Optional[str] = None
    fingerprint: Optional[str] = None
    raw: dict = field(default_factory=dict, repr=False)
    _counts: Optional[dict[str, int]] = field(default=None, init=False, repr=False, compare=False)

    @property
    def counts(self) -> dict[str, int]:
        """Normalized-name -> quantity map, built once per record."""
        if self._counts is None:
            self._counts = build_counts(self.cards)
        return self._counts

    @property
    def display_name(self) -> str:
        return self.name or self.title or self.archetype or "Deck"


@dataclass
class SimilarityResult:
    """A corpus deck with its similarity to the user's deck."""
    deck: TournamentDeck
    score: float


@dataclass
class ScoredDeck:
    """Pool entry for adds/cuts: similarity plus placement weight."""
    deck: TournamentDeck
    similarity: float
    weight: float

    @property
    def score(self) -> float:
        return self.similarity * (0.5 + 0.5 * self.weight)


@dataclass
class AggregateStats:
    """Finish statistics over a set of corpus decks."""
    count: int = 0
    best_finish: Optional[int] = None
    avg_finish: Optional[float] = None
    top8_rate: Optional[float] = None
    by_archetype: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "count": self.count,
            "bestFinish": self.best_finish,
            "avgFinish": self.avg_finish,
            "top8Rate": self.top8_rate,
            "byArchetype": dict(self.by_archetype),
        }


@dataclass
class ArchetypeTrend:
    """Share and trend of one archetype across the week/month windows."""
    archetype: str
    week_count: int = 0
    week_share: float = 0.0
    month_count: int = 0
    month_share: float = 0.0
    change: float = 0.0
    trend: str = "stable"
    avg_placement: Optional[int] = None
    top_placements: int = 0

    def to_dict(self) -> dict:
        return {
            "archetype": self.archetype,
            "weekCount": self.week_count,
            "weekShare": self.week_share,
            "monthCount": self.month_count,
            "monthShare": self.month_share,
            "change": self.change,
            "trend": self.trend,
            "avgPlacement": self.avg_placement,
            "topPlacements": self.top_placements,
        }
