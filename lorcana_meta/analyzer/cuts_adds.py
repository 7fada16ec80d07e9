"""
Adds and cuts suggestions drawn from a pool of similar tournament decks.
"""
import math
from collections import defaultdict

from ..corpus.models import ScoredDeck
from ..utils.normalize import card_name_and_quantity, normalize_name

MAX_COPIES = 4


class CutsAddsAnalyzer:
    """Compares a user's card counts with presence and copies in the pool."""

    def __init__(
        self,
        add_presence: float = 0.45,
        add_margin: float = 0.8,
        cut_presence: float = 0.30,
        cut_margin: float = 0.5,
        limit: int = 12,
    ):
        self.add_presence = add_presence
        self.add_margin = add_margin
        self.cut_presence = cut_presence
        self.cut_margin = cut_margin
        self.limit = limit

    def card_stats(self, pool: list[ScoredDeck]) -> dict[str, dict]:
        """
        Per-card presence and weighted average copies over the pool.

        Each deck contributes with weight = placement weight x similarity.
        """
        stats = defaultdict(lambda: {
            "display": None,
            "deck_count": 0,
            "weighted_qty": 0.0,
            "total_weight": 0.0,
        })

        for entry in pool:
            deck_weight = entry.weight * entry.similarity
            for key, qty in entry.deck.counts.items():
                s = stats[key]
                s["deck_count"] += 1
                s["weighted_qty"] += qty * deck_weight
                s["total_weight"] += deck_weight

            for card in entry.deck.cards:
                key = normalize_name(card.name)
                if key in stats and stats[key]["display"] is None:
                    stats[key]["display"] = card.name

        pool_size = len(pool)
        result = {}
        for key, s in stats.items():
            if s["total_weight"] > 0:
                avg = s["weighted_qty"] / s["total_weight"]
            else:
                avg = 0.0
            result[key] = {
                "name": s["display"] or key,
                "presence": s["deck_count"] / pool_size if pool_size else 0.0,
                "avg_qty": avg,
            }
        return result

    def suggest(self, user_cards, pool: list[ScoredDeck]) -> dict:
        """
        Suggest cards to add and cut.

        Args:
            user_cards: The user's decklist (Card objects or dicts)
            pool: Similar decks from ``MetaComparator.similarity_pool``

        Returns:
            Dictionary with ``adds``, ``cuts`` and ``poolSize``
        """
        user_counts, user_names = self._user_counts(user_cards)
        if not pool:
            return {"adds": [], "cuts": [], "poolSize": 0}

        stats = self.card_stats(pool)

        adds = []
        cuts = []
        for key, s in stats.items():
            presence = s["presence"]
            avg_qty = s["avg_qty"]
            user_qty = user_counts.get(key, 0)
            diff = avg_qty - user_qty

            if (presence >= self.add_presence and diff >= self.add_margin
                    and user_qty < math.ceil(round(avg_qty, 1))):
                adds.append({
                    "name": s["name"],
                    "metaPresence": round(presence * 100),
                    "metaAvgQty": round(avg_qty, 1),
                    "yourQty": user_qty,
                    "suggestedQty": min(MAX_COPIES, math.ceil(round(avg_qty, 1))),
                    "priority": self._add_priority(presence),
                })
            elif user_qty > 0 and presence < self.cut_presence and diff < -self.cut_margin:
                cuts.append(self._cut_row(user_names.get(key, s["name"]), user_qty, presence, avg_qty))

        for key, qty in user_counts.items():
            if key not in stats:
                cuts.append(self._cut_row(user_names.get(key, key), qty, 0.0, 0.0))

        adds.sort(key=lambda a: a["metaPresence"], reverse=True)
        cuts.sort(key=lambda c: c["metaPresence"])

        return {
            "adds": adds[:self.limit],
            "cuts": cuts[:self.limit],
            "poolSize": len(pool),
        }

    @staticmethod
    def _user_counts(user_cards) -> tuple[dict[str, int], dict[str, str]]:
        counts: dict[str, int] = {}
        names: dict[str, str] = {}
        for card in user_cards or []:
            name, qty = card_name_and_quantity(card)
            key = normalize_name(name)
            if not key or qty is None or qty <= 0:
                continue
            counts[key] = counts.get(key, 0) + qty
            names.setdefault(key, name.strip())
        return counts, names

    @staticmethod
    def _add_priority(presence: float) -> str:
        if presence >= 0.75:
            return "High"
        if presence >= 0.55:
            return "Medium"
        return "Low"

    @staticmethod
    def _cut_row(name: str, user_qty: int, presence: float, avg_qty: float) -> dict:
        diff = avg_qty - user_qty
        if presence < 0.10:
            priority = "High"
        elif presence < 0.20:
            priority = "Medium"
        else:
            priority = "Low"
        return {
            "name": name,
            "yourQty": user_qty,
            "metaPresence": round(presence * 100),
            "metaAvgQty": round(avg_qty, 1),
            "suggestedCut": min(user_qty, math.ceil(abs(diff))),
            "priority": priority,
        }

