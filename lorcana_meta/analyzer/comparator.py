"""
Deck-vs-meta comparison against the tournament corpus.
"""
import logging
from collections import Counter
from typing import Iterable, Optional

from ..config import Config
from ..corpus.loader import MetaSnapshot, normalize_format
from ..corpus.models import AggregateStats, ScoredDeck, SimilarityResult, TournamentDeck
from ..utils.normalize import build_counts
from .placement import placement_weight
from .similarity import get_strategy

_LOG = logging.getLogger(__name__)


def compute_aggregate(decks: Iterable[TournamentDeck]) -> AggregateStats:
    """
    Best/average finish, top-8 rate and archetype counts; empty-safe.

    ``byArchetype`` counts the stored ``archetype`` field as-is (missing is
    "Unknown"). It does not run ``infer_archetype``, so a titled deck without
    an archetype is "Unknown" here even when the meta report labels it.
    """
    decks = list(decks)
    stats = AggregateStats(count=len(decks))
    if not decks:
        return stats

    by_archetype: Counter = Counter()
    finishes = []
    for deck in decks:
        by_archetype[deck.archetype or "Unknown"] += 1
        if deck.finish is not None:
            finishes.append(deck.finish)

    stats.by_archetype = dict(by_archetype)
    if finishes:
        stats.best_finish = min(finishes)
        stats.avg_finish = round(sum(finishes) / len(finishes), 2)
        stats.top8_rate = sum(1 for f in finishes if f <= 8) / len(finishes)
    return stats


class MetaComparator:
    """Finds the corpus decks most similar to a user's deck."""

    def __init__(self, snapshot: MetaSnapshot):
        """
        Initialize with a loaded corpus.

        Args:
            snapshot: MetaSnapshot from ``load_tournament_meta``
        """
        self.snapshot = snapshot
        self.decks = snapshot.decks

    def filter_decks(self, top: Optional[int], same_format: bool, deck_format: str) -> list[TournamentDeck]:
        """Apply the format and placement filters to the corpus."""
        target_format = normalize_format(deck_format)
        filtered = []
        for deck in self.decks:
            if same_format and deck.format and deck.format != target_format:
                continue
            if top:
                # an unparsable placement cannot prove a top-N finish
                if deck.finish is None or deck.finish > top:
                    continue
            filtered.append(deck)
        return filtered

    def score_decks(self, user_cards, decks: list[TournamentDeck], strategy: str = "blended") -> list[SimilarityResult]:
        """Score every deck against the user's deck, best first."""
        score_fn = get_strategy(strategy)
        user_counts = build_counts(user_cards)
        results = [SimilarityResult(deck=d, score=score_fn(user_counts, d.counts)) for d in decks]
        # sorted() is stable, so ties keep corpus order
        return sorted(results, key=lambda r: r.score, reverse=True)

    def compare(
        self,
        user_cards,
        top: Optional[int] = Config.DEFAULT_TOP,
        same_format: bool = True,
        top_k: int = Config.DEFAULT_TOP_K,
        min_sim: float = Config.DEFAULT_MIN_SIM,
        deck_format: str = Config.DEFAULT_FORMAT,
        strategy: str = "blended",
    ) -> dict:
        """
        Compare a user's deck to the corpus.

        Returns the top-K most similar decks plus aggregate finish statistics
        over every deck that passed the filters.
        """
        top_k = max(1, int(top_k or Config.DEFAULT_TOP_K))
        # fail fast on a bad strategy name even when the corpus is empty
        get_strategy(strategy)

        base = {
            "enabled": True,
            "filters": {"top": top, "sameFormat": bool(same_format)},
            "requestedTop": top,
            "strategy": strategy,
            "decksCount": len(self.decks),
        }

        if not self.decks:
            return {
                **base,
                "available": False,
                "comparedCount": 0,
                "note": self.snapshot.note or "No tournament data available",
                "similarDecks": [],
                "aggregate": compute_aggregate([]).to_dict(),
            }

        filtered = self.filter_decks(top, same_format, deck_format)
        scored = self.score_decks(user_cards, filtered, strategy)

        selected = [r for r in scored if r.score >= min_sim][:top_k]
        if not selected:
            selected = scored[:top_k]

        _LOG.debug(
            "Compared deck against %d/%d corpus decks (%d selected)",
            len(filtered), len(self.decks), len(selected),
        )

        return {
            **base,
            "available": True,
            "comparedCount": len(filtered),
            "note": self.snapshot.note or "",
            "similarDecks": [self._similar_row(r.deck, r.score) for r in selected],
            "aggregate": compute_aggregate(filtered).to_dict(),
        }

    def similarity_pool(
        self,
        user_cards,
        top: Optional[int] = Config.DEFAULT_TOP,
        same_format: bool = True,
        min_sim: float = Config.POOL_MIN_SIM,
        max_pool: int = Config.POOL_MAX_SIZE,
        deck_format: str = Config.DEFAULT_FORMAT,
        strategy: str = "jaccard",
    ) -> tuple[list[ScoredDeck], int]:
        """
        Build the similar-deck pool used for adds/cuts.

        Returns:
            (pool sorted by similarity x placement score, number of decks checked)
        """
        filtered = self.filter_decks(top, same_format, deck_format)
        pool = [
            ScoredDeck(deck=r.deck, similarity=r.score, weight=placement_weight(r.deck.finish))
            for r in self.score_decks(user_cards, filtered, strategy)
            if r.score >= min_sim
        ]
        pool.sort(key=lambda s: s.score, reverse=True)
        return pool[:max_pool], len(filtered)

    def suggest_cuts_adds(self, user_cards, top: Optional[int] = Config.DEFAULT_TOP,
                          same_format: bool = True, deck_format: str = Config.DEFAULT_FORMAT,
                          analyzer=None) -> dict:
        """Adds/cuts for a user's deck based on its similar-deck pool."""
        from .cuts_adds import CutsAddsAnalyzer

        analyzer = analyzer or CutsAddsAnalyzer()

        if not self.decks:
            return {
                "enabled": True,
                "available": False,
                "note": self.snapshot.note or "Tournament database not found",
                "similarDecks": [],
                "adds": [],
                "cuts": [],
                "aggregate": None,
            }

        pool, checked = self.similarity_pool(user_cards, top=top, same_format=same_format,
                                             deck_format=deck_format)
        if not pool:
            return {
                "enabled": True,
                "available": True,
                "note": f"No similar decks found in top-{top} ({checked} decks checked)",
                "totalChecked": checked,
                "similarDecks": [],
                "adds": [],
                "cuts": [],
                "aggregate": None,
            }

        suggestions = analyzer.suggest(user_cards, pool)
        return {
            "enabled": True,
            "available": True,
            "totalChecked": checked,
            "filters": {"top": top, "sameFormat": bool(same_format)},
            "aggregate": compute_aggregate(s.deck for s in pool).to_dict(),
            "similarDecks": [self._similar_row(s.deck, s.similarity) for s in pool[:8]],
            "adds": suggestions["adds"],
            "cuts": suggestions["cuts"],
        }

    @staticmethod
    def _similar_row(deck: TournamentDeck, score: float) -> dict:
        return {
            "score": round(score * 100, 1),
            "similarity": score,
            "url": deck.url,
            "name": deck.display_name,
            "archetype": deck.archetype,
            "inks": list(deck.inks),
            "event": deck.event,
            "date": deck.date,
            "standing": deck.standing,
            "finish": deck.finish,
        }
