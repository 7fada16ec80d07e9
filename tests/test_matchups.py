import unittest

from lorcana_meta.analyzer.matchups import (
    DEFAULT_OPPONENTS,
    MAX_WINRATE,
    MIN_WINRATE,
    MatchupAnalyzer,
    detect_archetype,
    find_best_archetype_match,
    get_rating,
)
from lorcana_meta.corpus.models import TournamentDeck

RAMP_DECK = [
    {"name": "Sail the Azurite Sea", "quantity": 4},
    {"name": "Develop Your Brain", "quantity": 4},
    {"name": "Moana - Of Motunui", "quantity": 3},
]


class TestDetection(unittest.TestCase):

    def test_signature_match(self):
        self.assertEqual(detect_archetype(RAMP_DECK, ["Sapphire", "Steel"]), "Sapphire/Steel Ramp")

    def test_best_match_by_token(self):
        self.assertEqual(find_best_archetype_match("Dogs list"), "Dogs (Amber/Emerald)")
        self.assertIsNone(find_best_archetype_match(""))
        self.assertIsNone(find_best_archetype_match("zzz"))

    def test_rating(self):
        self.assertEqual(get_rating(60), "Favored")
        self.assertEqual(get_rating(50), "Even")
        self.assertEqual(get_rating(40), "Unfavored")
        self.assertEqual(get_rating(30), "Heavily Unfavored")


class TestMatchupAnalyzer(unittest.TestCase):

    def test_matrix_with_card_adjustment(self):
        result = MatchupAnalyzer().analyze(RAMP_DECK, inks=["Sapphire", "Steel"])
        self.assertEqual(result["userArchetype"], "Sapphire/Steel Ramp")
        by_opponent = {m["opponent"]: m for m in result["matchups"]}
        self.assertEqual(set(by_opponent), set(DEFAULT_OPPONENTS))

        # 37 from the matrix, -2 for Sail the Azurite Sea
        aggro = by_opponent["Ruby/Amethyst Aggro"]
        self.assertEqual(aggro["winRate"], 35)
        self.assertEqual(aggro["rating"], "Heavily Unfavored")
        self.assertIn("Mulligan hard for early inkable plays", aggro["keyTips"])

    def test_sorted_and_clamped(self):
        result = MatchupAnalyzer().analyze(RAMP_DECK, inks=["Sapphire", "Steel"])
        rates = [m["winRate"] for m in result["matchups"]]
        self.assertEqual(rates, sorted(rates, reverse=True))
        self.assertTrue(all(MIN_WINRATE <= r <= MAX_WINRATE for r in rates))
        self.assertIn(result["summary"]["tier"], ("Tier 1", "Tier 2", "Tier 3"))

    def test_even_meta_share_without_corpus(self):
        freq = MatchupAnalyzer().meta_frequency()
        self.assertEqual(set(freq.values()), {round(100 / len(DEFAULT_OPPONENTS))})

    def test_meta_share_from_corpus(self):
        decks = [TournamentDeck(archetype="Dogs list") for _ in range(3)]
        decks.append(TournamentDeck(archetype="???"))
        freq = MatchupAnalyzer(decks).meta_frequency()
        self.assertEqual(freq["Dogs (Amber/Emerald)"], 100)
        self.assertEqual(sum(freq.values()), 100)

    def test_theoretical_winrate(self):
        cheap = [{"name": "Chip", "quantity": 4, "cost": 1}]
        self.assertEqual(MatchupAnalyzer.theoretical_winrate(cheap, "Sapphire/Steel Ramp"), 55)
        expensive = [{"name": "Giant", "quantity": 4, "cost": 7}]
        self.assertEqual(
            MatchupAnalyzer.theoretical_winrate(expensive, "Amber/Steel Control", inkable_pct=30), 45,
        )


if __name__ == "__main__":
    unittest.main()
