"""
Meta state reporting: archetype and card trends plus meta health.

Provides:
- Time windows (last 7 / last 30 days) with a snapshot fallback
- Archetype share and trend (week share vs month share)
- Card popularity and trend by deck presence
- Meta health (normalized Shannon entropy, concentration, viable count)
"""
import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from ..config import Config
from ..corpus.loader import MetaSnapshot
from ..corpus.models import ArchetypeTrend, TournamentDeck
from ..utils.date_utils import age_in_days
from ..utils.normalize import normalize_name
from .archetype import ArchetypeAnalyzer

_LOG = logging.getLogger(__name__)

ARCHETYPE_TREND_THRESHOLD = 5.0
CARD_TREND_THRESHOLD = 10.0
VIABLE_SHARE = 5.0


@dataclass
class TimeWindows:
    week: list[TournamentDeck]
    month: list[TournamentDeck]
    all: list[TournamentDeck]
    has_valid_dates: bool


def time_windows(decks: list[TournamentDeck], now: Optional[datetime] = None) -> TimeWindows:
    """
    Partition decks into last-7-days and last-30-days windows.

    When no deck has a parsable date, or the week window is empty, both
    windows fall back to the whole corpus and ``has_valid_dates`` is False.
    """
    now = now or datetime.now(timezone.utc)
    week, month = [], []
    has_valid_dates = False

    for deck in decks:
        days = age_in_days(deck.date, now)
        if days is None:
            continue
        has_valid_dates = True
        if days <= 7:
            week.append(deck)
        if days <= 30:
            month.append(deck)

    if not has_valid_dates or not week:
        return TimeWindows(week=list(decks), month=list(decks), all=list(decks), has_valid_dates=False)
    return TimeWindows(week=week, month=month, all=list(decks), has_valid_dates=True)


def _trend(change: float, threshold: float, has_valid_dates: bool) -> str:
    if not has_valid_dates:
        return "stable"
    if change > threshold:
        return "rising"
    if change < -threshold:
        return "falling"
    return "stable"


def meta_health(shares: list[float]) -> dict[str, Any]:
    """
    Diversity and concentration of an archetype share distribution.

    Args:
        shares: Archetype shares in percent, any order

    Diversity is Shannon entropy (base 2) divided by its maximum for the
    number of archetypes, scaled to 0-100.
    """
    shares = [s for s in shares if s > 0]
    if not shares:
        return {"diversity": 0, "concentration": 0, "viableArchetypes": 0, "health": "Unknown"}

    total = sum(shares)
    top_share = max(shares)
    viable = sum(1 for s in shares if s >= VIABLE_SHARE)

    entropy = 0.0
    for s in shares:
        p = s / total
        entropy -= p * math.log2(p)

    max_entropy = math.log2(len(shares)) if len(shares) > 1 else 1.0
    diversity = entropy / max_entropy * 100 if max_entropy > 0 else 0.0

    if top_share > 40:
        health = "Concentrated"
    elif viable <= 3:
        health = "Limited"
    elif diversity < 50:
        health = "Developing"
    else:
        health = "Healthy"

    return {
        "diversity": round(diversity),
        "concentration": round(top_share),
        "viableArchetypes": viable,
        "health": health,
    }


class MetaStateAnalyzer:
    """Summarizes the tournament corpus as a point-in-time meta report."""

    def __init__(self, snapshot: MetaSnapshot, now: Optional[datetime] = None,
                 min_decks: int = Config.MIN_META_DECKS, keywords=None):
        """
        Initialize with a loaded corpus.

        Args:
            snapshot: MetaSnapshot from ``load_tournament_meta``
            now: Reference time for the windows (defaults to current UTC time)
            min_decks: Below this many decks the report is unavailable
            keywords: Optional ink keyword table for archetype inference
        """
        self.snapshot = snapshot
        self.decks = snapshot.decks
        self.now = now or datetime.now(timezone.utc)
        self.min_decks = min_decks
        self._archetypes = ArchetypeAnalyzer(self.decks, keywords)
        self._windows: Optional[TimeWindows] = None

    @property
    def windows(self) -> TimeWindows:
        if self._windows is None:
            self._windows = time_windows(self.decks, self.now)
        return self._windows

    def archetype_trends(self) -> list[ArchetypeTrend]:
        """Share and trend per archetype, sorted by week share."""
        windows = self.windows
        week = self._archetypes.count(windows.week)
        month = self._archetypes.count(windows.month)

        week_total = len(windows.week) or 1
        month_total = (len(windows.month) or 1) if windows.has_valid_dates else week_total

        trends = []
        for arch, week_data in week.items():
            month_data = month.get(arch, {"count": 0})
            week_pct = week_data["count"] / week_total * 100
            month_pct = month_data["count"] / month_total * 100
            change = week_pct - month_pct if windows.has_valid_dates else 0.0

            trends.append(ArchetypeTrend(
                archetype=arch,
                week_count=week_data["count"],
                week_share=round(week_pct, 1),
                month_count=month_data["count"],
                month_share=round(month_pct, 1),
                change=round(change, 1),
                trend=_trend(change, ARCHETYPE_TREND_THRESHOLD, windows.has_valid_dates),
                avg_placement=week_data["avgPlacement"],
                top_placements=week_data["topPlacements"],
            ))

        trends.sort(key=lambda t: (-t.week_count, t.archetype))
        return trends

    @staticmethod
    def _count_cards(decks: list[TournamentDeck]) -> dict[str, dict]:
        counts = defaultdict(lambda: {"name": None, "decks": 0, "total_qty": 0})
        for deck in decks:
            for key, qty in deck.counts.items():
                counts[key]["decks"] += 1
                counts[key]["total_qty"] += qty
            for card in deck.cards:
                key = normalize_name(card.name)
                if key in counts and counts[key]["name"] is None:
                    counts[key]["name"] = card.name.strip()
        return counts

    def card_popularity(self, top_n: int = 20) -> list[dict[str, Any]]:
        """Most played cards by deck presence in the week window."""
        windows = self.windows
        week = self._count_cards(windows.week)
        month = self._count_cards(windows.month)

        week_total = len(windows.week) or 1
        month_total = (len(windows.month) or 1) if windows.has_valid_dates else week_total

        trends = []
        for key, week_data in week.items():
            month_data = month.get(key)
            week_pct = week_data["decks"] / week_total * 100
            month_pct = month_data["decks"] / month_total * 100 if month_data else 0.0
            change = week_pct - month_pct if windows.has_valid_dates else 0.0

            trends.append({
                "card": week_data["name"] or key,
                "weekDecks": week_data["decks"],
                "weekShare": round(week_pct, 1),
                "weekAvgQty": round(week_data["total_qty"] / week_data["decks"], 1),
                "monthDecks": month_data["decks"] if month_data else 0,
                "monthShare": round(month_pct, 1),
                "change": round(change, 1),
                "trend": _trend(change, CARD_TREND_THRESHOLD, windows.has_valid_dates),
            })

        trends.sort(key=lambda c: (-c["weekDecks"], c["card"]))
        return trends[:top_n]

    def health(self, trends: Optional[list[ArchetypeTrend]] = None) -> dict[str, Any]:
        """Meta health over the week window's archetype shares."""
        trends = trends if trends is not None else self.archetype_trends()
        total = sum(t.week_count for t in trends)
        if not total:
            return meta_health([])
        return meta_health([t.week_count / total * 100 for t in trends])

    def analyze(self, archetype_limit: int = 10, card_limit: int = 20) -> dict[str, Any]:
        """Full meta report in a single payload."""
        if len(self.decks) < self.min_decks:
            return {
                "available": False,
                "note": self.snapshot.note
                or f"Insufficient tournament data (need at least {self.min_decks} decks)",
            }

        windows = self.windows
        if not windows.has_valid_dates:
            _LOG.info("No date information; analyzing all %d decks as current meta", len(self.decks))

        archetypes = self.archetype_trends()
        cards = self.card_popularity(card_limit)
        health = self.health(archetypes)
        _LOG.info(
            "Meta state: %d archetypes, health %s (%s%% diversity)",
            len(archetypes), health["health"], health["diversity"],
        )

        last_update = self.snapshot.updated_at or self.decks[0].date or self.now.isoformat()

        return {
            "available": True,
            "dataSource": (
                "Tournament results (time-based)" if windows.has_valid_dates
                else "Tournament results (snapshot)"
            ),
            "hasValidDates": windows.has_valid_dates,
            "lastUpdate": last_update,
            "totalDecks": len(self.decks),
            "archetypes": [t.to_dict() for t in archetypes[:archetype_limit]],
            "cards": cards,
            "health": health,
            "windows": {"week": len(windows.week), "month": len(windows.month)},
        }
