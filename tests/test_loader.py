import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from lorcana_meta.config import Config
from lorcana_meta.corpus.loader import (
    MetaCache,
    deck_from_record,
    load_tournament_meta,
    normalize_format,
    parse_corpus,
)

RECORDS = [
    {
        "name": "Steel Amber Control",
        "standing": "Top 8",
        "format": "Infinity",
        "cards": [{"name": "Be Prepared", "quantity": 3}, "2x Goofy - Musketeer"],
    },
    {
        "name": "Ruby Aggro",
        "placement": 3,
        "date": "2025-02-01T10:00:00Z",
        "cards": [{"name": "Goliath - Clan Leader", "count": 4}],
    },
]


class TestParsing(unittest.TestCase):

    def test_deck_from_record(self):
        deck = deck_from_record(RECORDS[0])
        self.assertEqual(deck.standing, "Top 8")
        self.assertEqual(deck.finish, 8)
        self.assertEqual(deck.format, "Core")
        self.assertEqual(deck.counts, {"be prepared": 3, "goofy musketeer": 2})

    def test_numeric_placement(self):
        deck = deck_from_record(RECORDS[1])
        self.assertEqual(deck.finish, 3)
        self.assertEqual(deck.standing, "3")

    def test_normalize_format(self):
        self.assertEqual(normalize_format("Infinity"), "Core")
        self.assertEqual(normalize_format(None), "Core")
        self.assertEqual(normalize_format("  "), "Core")
        self.assertEqual(normalize_format("Draft"), "Draft")

    def test_both_corpus_shapes(self):
        from_list, updated = parse_corpus(RECORDS)
        self.assertIsNone(updated)
        from_dict, updated = parse_corpus({"updatedAt": "2025-02-02", "decks": RECORDS})
        self.assertEqual(updated, "2025-02-02")
        self.assertEqual([d.name for d in from_list], [d.name for d in from_dict])

    def test_unknown_shape(self):
        self.assertEqual(parse_corpus("nope"), ([], None))
        self.assertEqual(parse_corpus({"decks": "nope"}), ([], None))


class TestLoadTournamentMeta(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = Path(self.tmp.name) / "tournamentMeta.json"

    def tearDown(self):
        self.tmp.cleanup()

    def _write(self, payload):
        with open(self.path, "w", encoding="utf-8") as f:
            if isinstance(payload, str):
                f.write(payload)
            else:
                json.dump(payload, f)

    def test_missing_file(self):
        with mock.patch.object(Config, "meta_path_candidates", return_value=[self.path]):
            snapshot = load_tournament_meta()
        self.assertEqual(snapshot.decks, [])
        self.assertFalse(snapshot.available)
        self.assertEqual(snapshot.note, "tournamentMeta.json not found")

    def test_malformed_file(self):
        self._write("{not json")
        with self.assertLogs("lorcana_meta.corpus.loader", level="WARNING"):
            snapshot = load_tournament_meta(self.path)
        self.assertEqual(snapshot.decks, [])
        self.assertTrue(snapshot.note.startswith("Failed to load tournamentMeta.json"))

    def test_loads_object_shape(self):
        self._write({"updatedAt": "2025-02-02T00:00:00Z", "decks": RECORDS})
        snapshot = load_tournament_meta(self.path)
        self.assertEqual(len(snapshot.decks), 2)
        self.assertEqual(snapshot.note, "")
        self.assertEqual(snapshot.updated_at, "2025-02-02T00:00:00Z")
        self.assertEqual(snapshot.path, self.path.resolve())

    def test_cache_hit_and_refresh(self):
        self._write(RECORDS)
        cache = MetaCache()
        first = load_tournament_meta(self.path, cache=cache)
        self.assertIs(load_tournament_meta(self.path, cache=cache), first)

        self._write(RECORDS[:1])
        mtime = os.stat(self.path).st_mtime + 10
        os.utime(self.path, (mtime, mtime))
        refreshed = load_tournament_meta(self.path, cache=cache)
        self.assertIsNot(refreshed, first)
        self.assertEqual(len(refreshed.decks), 1)

    def test_env_var_location(self):
        self._write(RECORDS)
        with mock.patch.dict(os.environ, {"TOURNAMENT_META_PATH": str(self.path)}):
            snapshot = load_tournament_meta()
        self.assertEqual(snapshot.path, self.path.resolve())
        self.assertEqual(len(snapshot.decks), 2)


if __name__ == "__main__":
    unittest.main()
