"""
Heuristic matchup analysis.

Win rates come from a hand-authored matrix between the named archetypes,
nudged by small per-card deltas for cards in the user's deck. Nothing here
is learned from match results; the corpus only supplies meta shares.
"""
import re
from typing import Any, Optional

from ..corpus.models import TournamentDeck
from ..utils.normalize import card_name_and_quantity, normalize_name, to_quantity

# Signatures identify an archetype from inks and card names (normalized).
ARCHETYPE_SIGNATURES = {
    "Blurple (Amethyst/Steel)": {
        "inks": ["Amethyst", "Steel"],
        "must_have": ["hades infernal schemer", "junior woodchuck guidebook"],
        "key_cards": ["dumbo ninth wonder of the universe", "genie wish fulfilled",
                      "elsa the fifth spirit", "cheshire cat inexplicable"],
        "weight": 10,
    },
    "Amber/Steel Control": {
        "inks": ["Amber", "Steel"],
        "must_have": [],
        "key_cards": ["be prepared", "he hurled his thunderbolt",
                      "tinker bell giant fairy", "arthur king victorious"],
        "weight": 8,
    },
    "Sapphire/Steel Ramp": {
        "inks": ["Sapphire", "Steel"],
        "must_have": ["sail the azurite sea"],
        "key_cards": ["develop your brain", "vision of the future", "moana of motunui"],
        "weight": 9,
    },
    "Ruby/Amethyst Aggro": {
        "inks": ["Ruby", "Amethyst"],
        "must_have": [],
        "key_cards": ["goliath clan leader", "namaari single minded rival",
                      "mulan reflecting warrior", "tinker bell tiny tactician"],
        "weight": 8,
    },
    "Emerald/Steel Tempo": {
        "inks": ["Emerald", "Steel"],
        "must_have": [],
        "key_cards": ["simba rightful heir", "beast wolfsbane",
                      "lilo making a wish", "stitch carefree surfer"],
        "weight": 8,
    },
    "Dogs (Amber/Emerald)": {
        "inks": ["Amber", "Emerald"],
        "must_have": ["lady tramps darling"],
        "key_cards": ["tramp street smart", "dodger lovable rogue",
                      "bolt super dog", "rajah devoted protector"],
        "weight": 9,
    },
    "Sapphire/Amethyst Songs": {
        "inks": ["Sapphire", "Amethyst"],
        "must_have": [],
        "key_cards": ["a whole new world", "for the first time in forever",
                      "under the sea", "into the unknown"],
        "weight": 7,
    },
    "Amber/Amethyst": {
        "inks": ["Amber", "Amethyst"],
        "must_have": [],
        "key_cards": ["ursula deceiver", "iago giant spectral parrot", "hypnotic strength"],
        "weight": 6,
    },
}

# MATCHUP_MATRIX[a][b] = win rate (%) of a against b
MATCHUP_MATRIX = {
    "Blurple (Amethyst/Steel)": {
        "Blurple (Amethyst/Steel)": 50, "Amber/Steel Control": 58, "Sapphire/Steel Ramp": 54,
        "Ruby/Amethyst Aggro": 44, "Emerald/Steel Tempo": 52, "Dogs (Amber/Emerald)": 53,
        "Sapphire/Amethyst Songs": 56, "Amber/Amethyst": 57,
    },
    "Amber/Steel Control": {
        "Blurple (Amethyst/Steel)": 42, "Amber/Steel Control": 50, "Sapphire/Steel Ramp": 51,
        "Ruby/Amethyst Aggro": 55, "Emerald/Steel Tempo": 49, "Dogs (Amber/Emerald)": 52,
        "Sapphire/Amethyst Songs": 48, "Amber/Amethyst": 53,
    },
    "Sapphire/Steel Ramp": {
        "Blurple (Amethyst/Steel)": 46, "Amber/Steel Control": 49, "Sapphire/Steel Ramp": 50,
        "Ruby/Amethyst Aggro": 37, "Emerald/Steel Tempo": 53, "Dogs (Amber/Emerald)": 41,
        "Sapphire/Amethyst Songs": 55, "Amber/Amethyst": 54,
    },
    "Ruby/Amethyst Aggro": {
        "Blurple (Amethyst/Steel)": 56, "Amber/Steel Control": 45, "Sapphire/Steel Ramp": 63,
        "Ruby/Amethyst Aggro": 50, "Emerald/Steel Tempo": 48, "Dogs (Amber/Emerald)": 51,
        "Sapphire/Amethyst Songs": 57, "Amber/Amethyst": 52,
    },
    "Emerald/Steel Tempo": {
        "Blurple (Amethyst/Steel)": 48, "Amber/Steel Control": 51, "Sapphire/Steel Ramp": 47,
        "Ruby/Amethyst Aggro": 52, "Emerald/Steel Tempo": 50, "Dogs (Amber/Emerald)": 49,
        "Sapphire/Amethyst Songs": 53, "Amber/Amethyst": 51,
    },
    "Dogs (Amber/Emerald)": {
        "Blurple (Amethyst/Steel)": 47, "Amber/Steel Control": 48, "Sapphire/Steel Ramp": 59,
        "Ruby/Amethyst Aggro": 49, "Emerald/Steel Tempo": 51, "Dogs (Amber/Emerald)": 50,
        "Sapphire/Amethyst Songs": 55, "Amber/Amethyst": 52,
    },
    "Sapphire/Amethyst Songs": {
        "Blurple (Amethyst/Steel)": 44, "Amber/Steel Control": 52, "Sapphire/Steel Ramp": 45,
        "Ruby/Amethyst Aggro": 43, "Emerald/Steel Tempo": 47, "Dogs (Amber/Emerald)": 45,
        "Sapphire/Amethyst Songs": 50, "Amber/Amethyst": 54,
    },
    "Amber/Amethyst": {
        "Blurple (Amethyst/Steel)": 43, "Amber/Steel Control": 47, "Sapphire/Steel Ramp": 46,
        "Ruby/Amethyst Aggro": 48, "Emerald/Steel Tempo": 49, "Dogs (Amber/Emerald)": 48,
        "Sapphire/Amethyst Songs": 46, "Amber/Amethyst": 50,
    },
}

DEFAULT_OPPONENTS = list(MATCHUP_MATRIX)

# card -> {opponent: win rate delta}
CARD_ADJUSTMENTS = {
    "sail the azurite sea": {"Ruby/Amethyst Aggro": -2, "Sapphire/Steel Ramp": 1},
    "be prepared": {"Ruby/Amethyst Aggro": 4, "Dogs (Amber/Emerald)": 3},
    "he hurled his thunderbolt": {"Ruby/Amethyst Aggro": 3, "Blurple (Amethyst/Steel)": 2},
    "hades infernal schemer": {"Amber/Steel Control": 2, "Blurple (Amethyst/Steel)": -1},
    "goliath clan leader": {"Sapphire/Steel Ramp": 3, "Amber/Steel Control": -2},
    "cheshire cat inexplicable": {"Amber/Steel Control": 2, "Sapphire/Amethyst Songs": 2},
    "junior woodchuck guidebook": {"Sapphire/Steel Ramp": 2, "Sapphire/Amethyst Songs": 3},
}

# Per-opponent nudge for decks that match no signature
THEORETICAL_VARIANCE = {
    "Blurple (Amethyst/Steel)": -2,
    "Amber/Steel Control": 1,
    "Sapphire/Steel Ramp": 3,
    "Ruby/Amethyst Aggro": -4,
    "Emerald/Steel Tempo": 1,
    "Dogs (Amber/Emerald)": -2,
    "Sapphire/Amethyst Songs": 2,
    "Amber/Amethyst": 1,
}

MATCHUP_TIPS = {
    ("Sapphire/Steel Ramp", "Ruby/Amethyst Aggro"): [
        "Mulligan hard for early inkable plays",
        "Prioritize board presence over questing turns 1-4",
        "Use removal on their key threats, not just any character",
    ],
    ("Ruby/Amethyst Aggro", "Sapphire/Steel Ramp"): [
        "Race hard and close the game before they accelerate",
        "Quest aggressively; do not trade unless you must",
        "They need 4+ turns to set up, you need 4 or less",
    ],
    ("Blurple (Amethyst/Steel)", "Amber/Steel Control"): [
        "Your card advantage outlasts their removal",
        "Protect Junior Woodchuck Guidebook, it fuels your engine",
        "Do not overextend into Be Prepared",
    ],
    ("Amber/Steel Control", "Ruby/Amethyst Aggro"): [
        "Stabilize early with Bodyguard characters",
        "Save removal for their Evasive threats",
        "He Hurled His Thunderbolt is your best card here",
    ],
}

MIN_WINRATE, MAX_WINRATE = 28, 72


def _card_keys(cards) -> list[str]:
    keys = []
    for card in cards or []:
        name, _ = card_name_and_quantity(card)
        key = normalize_name(name)
        if key:
            keys.append(key)
    return keys


def detect_archetype(cards, inks: Optional[list[str]] = None) -> str:
    """Match a decklist against the archetype signatures."""
    card_set = set(_card_keys(cards))
    inks = [i for i in (inks or []) if isinstance(i, str) and i.strip()]
    inks_lower = [i.lower() for i in inks]

    best_name, best_score = "Unknown", 0.0
    for name, sig in ARCHETYPE_SIGNATURES.items():
        ink_match = not inks_lower or all(
            any(ink.lower() in i for i in inks_lower) for ink in sig["inks"]
        )
        must_match = all(card in card_set for card in sig["must_have"])
        key_hits = sum(1 for card in sig["key_cards"] if card in card_set)
        key_score = key_hits / len(sig["key_cards"]) if sig["key_cards"] else 0.0

        score = (3 if ink_match else 0) + (4 if must_match else -3) + key_score * sig["weight"]
        if score > best_score:
            best_name, best_score = name, score

    if best_score < 2 and len(inks) >= 2:
        return "/".join(inks[:2])
    return best_name


def find_best_archetype_match(name: Optional[str]) -> Optional[str]:
    """Map a free-form archetype label onto a matrix archetype by token."""
    if not name:
        return None
    lower = name.lower()
    for arch in DEFAULT_OPPONENTS:
        tokens = [t for t in re.split(r"[\s/()]+", arch.lower()) if t]
        if any(t in lower for t in tokens):
            return arch
    return None


def get_rating(winrate: float) -> str:
    if winrate >= 58:
        return "Favored"
    if winrate >= 45:
        return "Even"
    if winrate >= 37:
        return "Unfavored"
    return "Heavily Unfavored"


def get_key_tips(user_archetype: str, opponent: str, winrate: float) -> list[str]:
    specific = MATCHUP_TIPS.get((user_archetype, opponent))
    if specific:
        return list(specific)
    if winrate >= 58:
        return [
            "You are favored; play your game plan and avoid big mistakes",
            "Do not let them stabilize; press your structural advantage",
        ]
    if winrate <= 42:
        return [
            "You are unfavored; look for opponent mistakes and punish them",
            "Play for a longer game; do not over-commit early",
            "Sideboard heavily if playing best-of-3",
        ]
    return [
        "Even matchup; tight play and correct mulligan decisions matter most",
        "Know your role: are you the beatdown or the control player here?",
    ]


class MatchupAnalyzer:
    """Estimates matchups for a user's deck against the named archetypes."""

    def __init__(self, meta_decks: Optional[list[TournamentDeck]] = None):
        """
        Args:
            meta_decks: Corpus decks used only to compute meta shares
        """
        self.meta_decks = meta_decks or []

    def meta_frequency(self) -> dict[str, int]:
        """Percent of corpus decks mapped to each matrix archetype."""
        freq = {arch: 0 for arch in DEFAULT_OPPONENTS}
        total = 0
        for deck in self.meta_decks:
            matched = find_best_archetype_match(deck.archetype or "")
            if matched:
                freq[matched] += 1
                total += 1

        if total == 0:
            even = round(100 / len(DEFAULT_OPPONENTS))
            return {arch: even for arch in DEFAULT_OPPONENTS}
        return {arch: round(count / total * 100) for arch, count in freq.items()}

    @staticmethod
    def apply_card_adjustments(base: float, cards, opponent: str) -> float:
        winrate = base
        for key in set(_card_keys(cards)):
            winrate += CARD_ADJUSTMENTS.get(key, {}).get(opponent, 0)
        return winrate

    @staticmethod
    def theoretical_winrate(cards, opponent: str, inkable_pct: Optional[float] = None) -> float:
        """Fallback win rate for decks outside the matrix, from curve and ink ratio."""
        total_cost, count = 0.0, 0
        for card in cards or []:
            _, qty = card_name_and_quantity(card)
            qty = qty if qty and qty > 0 else 1
            cost = card.get("cost") if isinstance(card, dict) else getattr(card, "cost", None)
            total_cost += (to_quantity(cost) or 0) * qty
            count += qty
        avg_cost = total_cost / count if count else 0.0
        ink_ratio = (inkable_pct if inkable_pct is not None else 50) / 100

        winrate = 50.0
        if avg_cost > 5:
            winrate -= 3
        if avg_cost < 3:
            winrate += 2
        if ink_ratio < 0.4:
            winrate -= 3
        if ink_ratio > 0.7:
            winrate -= 2
        return winrate + THEORETICAL_VARIANCE.get(opponent, 0)

    def analyze(self, cards, inks: Optional[list[str]] = None,
                inkable_pct: Optional[float] = None) -> dict[str, Any]:
        """
        Matchup table for a decklist.

        Returns:
            Dictionary with the detected archetype, per-opponent matchups and a summary
        """
        user_archetype = detect_archetype(cards, inks)
        row = MATCHUP_MATRIX.get(user_archetype)
        meta_freq = self.meta_frequency()

        matchups = []
        for opponent in DEFAULT_OPPONENTS:
            if row is not None and opponent in row:
                base = row[opponent]
            else:
                base = self.theoretical_winrate(cards, opponent, inkable_pct)

            adjusted = self.apply_card_adjustments(base, cards, opponent)
            final = max(MIN_WINRATE, min(MAX_WINRATE, round(adjusted)))
            matchups.append({
                "opponent": opponent,
                "winRate": final,
                "rating": get_rating(final),
                "metaShare": meta_freq.get(opponent, 0),
                "keyTips": get_key_tips(user_archetype, opponent, final),
            })

        matchups.sort(key=lambda m: m["winRate"], reverse=True)
        avg = sum(m["winRate"] for m in matchups) / len(matchups)

        return {
            "available": True,
            "userArchetype": user_archetype,
            "dataSource": (
                f"Tournament data ({len(self.meta_decks)} decks)"
                if len(self.meta_decks) >= 100 else "Model-based"
            ),
            "matchups": matchups,
            "summary": {
                "avgWinRate": round(avg),
                "tier": "Tier 1" if avg >= 55 else "Tier 2" if avg >= 50 else "Tier 3",
                "favored": sum(1 for m in matchups if m["winRate"] >= 55),
                "even": sum(1 for m in matchups if 45 <= m["winRate"] < 55),
                "unfavored": sum(1 for m in matchups if m["winRate"] < 45),
            },
        }
