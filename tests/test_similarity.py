import unittest

from lorcana_meta.analyzer.placement import parse_placement, placement_weight
from lorcana_meta.analyzer.similarity import blended, get_strategy, jaccard


class TestSimilarity(unittest.TestCase):

    def setUp(self):
        self.a = {"mickey": 4, "donald": 4}
        self.b = {"mickey": 4}
        self.c = {"goofy": 2, "pluto": 1}

    def test_identical_decks(self):
        self.assertEqual(jaccard(self.a, self.a), 1.0)
        self.assertEqual(blended(self.a, self.a), 1.0)

    def test_disjoint_decks(self):
        self.assertEqual(jaccard(self.a, self.c), 0.0)
        self.assertEqual(blended(self.a, self.c), 0.0)

    def test_empty_decks(self):
        self.assertEqual(jaccard({}, {}), 0.0)
        self.assertEqual(blended({}, self.a), 0.0)

    def test_jaccard_symmetric(self):
        self.assertEqual(jaccard(self.a, self.b), jaccard(self.b, self.a))
        self.assertAlmostEqual(jaccard(self.a, self.b), 0.5)

    def test_blended_asymmetric(self):
        # 0.75 * 4/8 + 0.25 * 4/8
        self.assertAlmostEqual(blended(self.a, self.b), 0.5)
        # 0.75 * 4/4 + 0.25 * 4/8
        self.assertAlmostEqual(blended(self.b, self.a), 0.875)

    def test_range(self):
        decks = [self.a, self.b, self.c, {"mickey": 1, "goofy": 4}]
        for x in decks:
            for y in decks:
                for fn in (jaccard, blended):
                    self.assertGreaterEqual(fn(x, y), 0.0)
                    self.assertLessEqual(fn(x, y), 1.0)

    def test_get_strategy(self):
        self.assertIs(get_strategy("JACCARD"), jaccard)
        self.assertIs(get_strategy("blended"), blended)
        with self.assertRaises(ValueError):
            get_strategy("cosine")


class TestPlacement(unittest.TestCase):

    def test_parse_placement(self):
        cases = {
            "Winner": 1,
            "Champion": 1,
            "1st": 1,
            "2nd": 2,
            "Runner-up": 2,
            "Finalist": 2,
            "Semi-finalist": 4,
            "Quarterfinalist": 8,
            "Top 8": 8,
            "top16": 16,
            "1-4": 1,
            "5th - 8th": 5,
            "Rank 12": 12,
            "Top 16 (first event)": 16,
            "Top 8 Finalist": 8,
            "Winner (Top 32 Swiss)": 32,
            "12345": 12345,
            "Top 128": 128,
            7: 7,
            3.0: 3,
        }
        for value, expected in cases.items():
            self.assertEqual(parse_placement(value), expected, value)

    def test_unparsable(self):
        for value in ["garbage", "", None, 0, -3, True, float("nan")]:
            self.assertIsNone(parse_placement(value), value)

    def test_placement_weight(self):
        self.assertEqual(placement_weight(1), 1.0)
        self.assertEqual(placement_weight(3), 0.9)
        self.assertEqual(placement_weight(8), 0.75)
        self.assertEqual(placement_weight("Top 16"), 0.6)
        self.assertEqual(placement_weight(32), 0.45)
        self.assertEqual(placement_weight(64), 0.3)
        self.assertEqual(placement_weight(100), 0.15)
        self.assertEqual(placement_weight(None), 0.15)
        self.assertEqual(placement_weight("garbage"), 0.15)

    def test_weight_monotonic(self):
        weights = [placement_weight(p) for p in range(1, 200)]
        self.assertEqual(weights, sorted(weights, reverse=True))


if __name__ == "__main__":
    unittest.main()
