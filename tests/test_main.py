import io
import json
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path

from lorcana_meta.main import main, read_decklist

CORPUS = [
    {"name": "Deck1", "standing": "1st", "cards": [{"name": "Mickey", "quantity": 4}]},
    {"name": "Deck2", "standing": "Top 8", "cards": [{"name": "Mickey", "quantity": 4},
                                                    {"name": "Goofy", "quantity": 4}]},
]


class TestCli(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        root = Path(self.tmp.name)
        self.meta = root / "tournamentMeta.json"
        self.meta.write_text(json.dumps(CORPUS), encoding="utf-8")
        self.deck = root / "deck.txt"
        self.deck.write_text("# my deck\n4 Mickey\n4x Donald\n\n", encoding="utf-8")

    def tearDown(self):
        self.tmp.cleanup()

    def _run(self, *argv):
        out = io.StringIO()
        with redirect_stdout(out):
            code = main(["--log-level", "WARNING", "--meta", str(self.meta), *argv])
        return code, out.getvalue()

    def test_read_text_decklist(self):
        self.assertEqual(read_decklist(str(self.deck)), [
            {"name": "Mickey", "quantity": 4},
            {"name": "Donald", "quantity": 4},
        ])

    def test_read_json_decklist(self):
        path = Path(self.tmp.name) / "deck.json"
        path.write_text(json.dumps([{"name": "Mickey", "quantity": 2}, "3x Goofy"]), encoding="utf-8")
        self.assertEqual(read_decklist(str(path)), [
            {"name": "Mickey", "quantity": 2},
            {"name": "Goofy", "quantity": 3},
        ])

    def test_compare_json(self):
        code, out = self._run("compare", str(self.deck), "--json", "--cuts-adds")
        self.assertEqual(code, 0)
        result = json.loads(out)
        self.assertEqual(result["similarDecks"][0]["name"], "Deck1")
        self.assertIn("cutsAdds", result)

    def test_compare_report(self):
        code, out = self._run("compare", str(self.deck))
        self.assertEqual(code, 0)
        self.assertIn("Deck1", out)

    def test_matchups(self):
        code, out = self._run("matchups", str(self.deck), "--inks", "Amber,Steel")
        self.assertEqual(code, 0)
        self.assertIn("vs ", out)

    def test_analyze_small_corpus(self):
        code, out = self._run("analyze")
        self.assertEqual(code, 0)
        self.assertIn("Insufficient", out)

    def test_dedupe(self):
        code, out = self._run("dedupe")
        self.assertEqual(code, 0)
        saved = json.loads(self.meta.read_text(encoding="utf-8"))
        self.assertEqual(saved["decksCount"], 2)

    def test_dedupe_malformed_corpus(self):
        self.meta.write_text("{not json", encoding="utf-8")
        code, out = self._run("dedupe")
        self.assertEqual(code, 1)
        self.assertIn("Failed to load", out)


if __name__ == "__main__":
    unittest.main()
