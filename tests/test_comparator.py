import unittest

from lorcana_meta.analyzer.comparator import MetaComparator, compute_aggregate
from lorcana_meta.corpus.loader import MetaSnapshot, parse_corpus

USER_DECK = [{"name": "Mickey", "quantity": 4}, {"name": "Donald", "quantity": 4}]


def make_snapshot(records):
    decks, updated_at = parse_corpus(records)
    return MetaSnapshot(decks=decks, updated_at=updated_at)


class TestCompare(unittest.TestCase):

    def setUp(self):
        self.records = [
            {"name": "Deck1", "standing": "1st", "archetype": "Toons",
             "cards": [{"name": "Mickey", "quantity": 4}]},
            {"name": "Deck2", "standing": "Top 8", "archetype": "Toons",
             "cards": [{"name": "Mickey", "quantity": 4}, {"name": "Goofy", "quantity": 4}]},
        ]
        self.comparator = MetaComparator(make_snapshot(self.records))

    def test_empty_corpus(self):
        comparator = MetaComparator(MetaSnapshot(note="tournamentMeta.json not found"))
        result = comparator.compare(USER_DECK)
        self.assertFalse(result["available"])
        self.assertTrue(result["enabled"])
        self.assertEqual(result["similarDecks"], [])
        self.assertEqual(result["note"], "tournamentMeta.json not found")
        self.assertEqual(result["aggregate"]["count"], 0)
        self.assertIsNone(result["aggregate"]["bestFinish"])

    def test_most_similar_first(self):
        result = self.comparator.compare(USER_DECK, top=32)
        self.assertTrue(result["available"])
        names = [d["name"] for d in result["similarDecks"]]
        self.assertEqual(names, ["Deck1", "Deck2"])
        self.assertEqual(result["similarDecks"][0]["score"], 50.0)
        self.assertEqual(result["similarDecks"][1]["score"], 45.8)
        self.assertEqual(result["aggregate"]["bestFinish"], 1)
        self.assertEqual(result["aggregate"]["avgFinish"], 4.5)
        self.assertEqual(result["aggregate"]["top8Rate"], 1.0)
        self.assertEqual(result["aggregate"]["byArchetype"], {"Toons": 2})

    def test_jaccard_strategy(self):
        result = self.comparator.compare(USER_DECK, strategy="jaccard")
        self.assertEqual(result["strategy"], "jaccard")
        self.assertEqual(result["similarDecks"][0]["score"], 50.0)
        self.assertEqual(result["similarDecks"][1]["score"], 33.3)

    def test_top_filter_excludes_unparsable(self):
        self.records.append({"name": "Deck3", "standing": "garbage",
                             "cards": [{"name": "Mickey", "quantity": 4}]})
        self.records.append({"name": "Deck4", "standing": "Top 64",
                             "cards": [{"name": "Mickey", "quantity": 4}]})
        comparator = MetaComparator(make_snapshot(self.records))

        filtered = comparator.compare(USER_DECK, top=32)
        self.assertEqual(filtered["comparedCount"], 2)
        self.assertEqual(filtered["decksCount"], 4)

        unfiltered = comparator.compare(USER_DECK, top=None)
        self.assertEqual(unfiltered["comparedCount"], 4)
        self.assertEqual(unfiltered["requestedTop"], None)

    def test_min_sim_fallback(self):
        result = self.comparator.compare([{"name": "Pluto", "quantity": 4}], top_k=1)
        self.assertEqual(len(result["similarDecks"]), 1)
        self.assertEqual(result["similarDecks"][0]["score"], 0.0)

    def test_min_sim_threshold(self):
        result = self.comparator.compare(USER_DECK, min_sim=0.49)
        self.assertEqual([d["name"] for d in result["similarDecks"]], ["Deck1"])

    def test_format_filter(self):
        records = self.records + [{"name": "Draft", "format": "Draft", "standing": "1st",
                                   "cards": [{"name": "Mickey", "quantity": 4}]}]
        comparator = MetaComparator(make_snapshot(records))
        self.assertEqual(comparator.compare(USER_DECK)["comparedCount"], 2)
        self.assertEqual(comparator.compare(USER_DECK, same_format=False)["comparedCount"], 3)
        self.assertEqual(comparator.compare(USER_DECK, deck_format="Infinity")["comparedCount"], 2)

    def test_ties_keep_corpus_order(self):
        records = [
            {"name": name, "standing": "1st", "cards": [{"name": "Mickey", "quantity": 4}]}
            for name in ("A", "B", "C")
        ]
        result = MetaComparator(make_snapshot(records)).compare(USER_DECK)
        self.assertEqual([d["name"] for d in result["similarDecks"]], ["A", "B", "C"])

    def test_unknown_strategy(self):
        with self.assertRaises(ValueError):
            self.comparator.compare(USER_DECK, strategy="cosine")


class TestSimilarityPool(unittest.TestCase):

    def test_pool_ranked_by_similarity_and_placement(self):
        records = [
            {"name": "Low", "standing": "Top 32", "cards": [{"name": "Mickey", "quantity": 4},
                                                           {"name": "Donald", "quantity": 4}]},
            {"name": "High", "standing": "1st", "cards": [{"name": "Mickey", "quantity": 4},
                                                         {"name": "Donald", "quantity": 4}]},
            {"name": "Far", "standing": "1st", "cards": [{"name": "Pluto", "quantity": 4}]},
        ]
        pool, checked = MetaComparator(make_snapshot(records)).similarity_pool(USER_DECK)
        self.assertEqual(checked, 3)
        self.assertEqual([s.deck.name for s in pool], ["High", "Low"])
        self.assertAlmostEqual(pool[0].score, 1.0)
        self.assertAlmostEqual(pool[1].score, 0.725)


class TestAggregate(unittest.TestCase):

    def test_empty(self):
        self.assertEqual(compute_aggregate([]).to_dict(), {
            "count": 0, "bestFinish": None, "avgFinish": None, "top8Rate": None, "byArchetype": {},
        })

    def test_ignores_unparsable_finishes(self):
        decks, _ = parse_corpus([
            {"standing": "2nd", "cards": []},
            {"standing": "Top 16", "cards": []},
            {"standing": "???", "cards": []},
        ])
        stats = compute_aggregate(decks).to_dict()
        self.assertEqual(stats["count"], 3)
        self.assertEqual(stats["bestFinish"], 2)
        self.assertEqual(stats["avgFinish"], 9)
        self.assertEqual(stats["top8Rate"], 0.5)
        self.assertEqual(stats["byArchetype"], {"Unknown": 3})

    def test_archetype_counts_use_stored_field(self):
        decks, _ = parse_corpus([
            {"archetype": "Aggro", "standing": "1st", "cards": []},
            {"title": "Steel Control", "inks": ["Amber", "Steel"], "standing": "2nd", "cards": []},
        ])
        stats = compute_aggregate(decks).to_dict()
        self.assertEqual(stats["byArchetype"], {"Aggro": 1, "Unknown": 1})


if __name__ == "__main__":
    unittest.main()
