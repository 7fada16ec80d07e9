"""
Flask web application for Lorcana deck vs meta analysis.
"""
import logging

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from ..analyzer.comparator import MetaComparator
from ..analyzer.matchups import MatchupAnalyzer
from ..analyzer.meta_state import MetaStateAnalyzer
from ..analyzer.similarity import STRATEGIES
from ..config import Config
from ..log import configure_logging
from .data_manager import DataManager

_LOG = logging.getLogger(__name__)

app = Flask(__name__)

data_manager = DataManager(Config.TOURNAMENT_META_PATH)

MAX_CARDS = 200


class InvalidRequest(ValueError):
    """Raised for a malformed request body."""


def _json_error(code: str, detail: str, status: int):
    return jsonify({"error": code, "detail": detail}), status


@app.errorhandler(InvalidRequest)
def handle_invalid_request(err):
    return _json_error("invalid_request", str(err), 400)


@app.errorhandler(HTTPException)
def handle_http_error(err):
    return _json_error(err.name.lower().replace(" ", "_"), err.description or "", err.code or 500)


@app.errorhandler(Exception)
def handle_unexpected(err):
    _LOG.exception("Unhandled error on %s", request.path)
    return _json_error("server_error", "A server error occurred.", 500)


def _request_body() -> dict:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise InvalidRequest("Request body must be a JSON object")
    return body


def parse_decklist(body: dict) -> list[dict]:
    """Validate ``cards`` as a non-empty list of {name, quantity}."""
    cards = body.get("cards")
    if not isinstance(cards, list) or not cards:
        raise InvalidRequest("'cards' must be a non-empty list")
    if len(cards) > MAX_CARDS:
        raise InvalidRequest(f"'cards' may hold at most {MAX_CARDS} entries")

    decklist = []
    for i, card in enumerate(cards):
        if not isinstance(card, dict):
            raise InvalidRequest(f"cards[{i}] must be an object")
        name = card.get("name")
        if not isinstance(name, str) or not name.strip():
            raise InvalidRequest(f"cards[{i}].name must be a non-empty string")
        qty = card.get("quantity", 1)
        if isinstance(qty, bool) or not isinstance(qty, int) or qty < 1:
            raise InvalidRequest(f"cards[{i}].quantity must be a positive integer")
        entry = dict(card)
        entry["name"] = name.strip()
        entry["quantity"] = qty
        decklist.append(entry)
    return decklist


def _optional_int(body: dict, key: str, default):
    value = body.get(key, default)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidRequest(f"'{key}' must be a non-negative integer")
    return value


def _optional_float(body: dict, key: str, default: float) -> float:
    value = body.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0 <= value <= 1:
        raise InvalidRequest(f"'{key}' must be a number between 0 and 1")
    return float(value)


def _same_format(body: dict) -> bool:
    value = body.get("sameFormat", True)
    if not isinstance(value, bool):
        raise InvalidRequest("'sameFormat' must be a boolean")
    return value


@app.route("/api/meta/health")
def api_meta_health():
    return jsonify({"ok": True, "service": "meta-analyzer", "version": "1.0"})


@app.route("/api/meta/state")
def api_meta_state():
    """Archetype and card trends plus meta health."""
    snapshot = data_manager.get_snapshot()
    return jsonify(MetaStateAnalyzer(snapshot).analyze())


@app.route("/api/meta/compare", methods=["POST"])
def api_meta_compare():
    """Most similar tournament decks and their aggregate finishes."""
    body = _request_body()
    cards = parse_decklist(body)

    strategy = body.get("strategy", "blended")
    if strategy not in STRATEGIES:
        raise InvalidRequest(f"'strategy' must be one of {sorted(STRATEGIES)}")

    comparator = MetaComparator(data_manager.get_snapshot())
    result = comparator.compare(
        cards,
        top=_optional_int(body, "top", Config.DEFAULT_TOP),
        same_format=_same_format(body),
        top_k=_optional_int(body, "topK", Config.DEFAULT_TOP_K) or Config.DEFAULT_TOP_K,
        min_sim=_optional_float(body, "minSim", Config.DEFAULT_MIN_SIM),
        deck_format=str(body.get("format") or Config.DEFAULT_FORMAT),
        strategy=strategy,
    )
    return jsonify(result)


@app.route("/api/meta/cuts-adds", methods=["POST"])
def api_meta_cuts_adds():
    """Adds and cuts suggested by the similar-deck pool."""
    body = _request_body()
    cards = parse_decklist(body)

    comparator = MetaComparator(data_manager.get_snapshot())
    result = comparator.suggest_cuts_adds(
        cards,
        top=_optional_int(body, "top", Config.DEFAULT_TOP),
        same_format=_same_format(body),
        deck_format=str(body.get("format") or Config.DEFAULT_FORMAT),
    )
    return jsonify(result)


@app.route("/api/matchups", methods=["POST"])
def api_matchups():
    """Heuristic matchup table for a decklist."""
    body = _request_body()
    cards = parse_decklist(body)

    inks = body.get("inks") or []
    if not isinstance(inks, list) or not all(isinstance(i, str) for i in inks):
        raise InvalidRequest("'inks' must be a list of strings")

    inkable_pct = body.get("inkablePct")
    if inkable_pct is not None and (isinstance(inkable_pct, bool) or not isinstance(inkable_pct, (int, float))):
        raise InvalidRequest("'inkablePct' must be a number")

    analyzer = MatchupAnalyzer(data_manager.get_snapshot().decks)
    return jsonify(analyzer.analyze(cards, inks=inks, inkable_pct=inkable_pct))


def run(host: str = Config.HOST, port: int = Config.PORT, debug: bool = Config.DEBUG):
    """Run the Flask application."""
    configure_logging(Config.LOG_LEVEL)
    app.run(host=host, port=port, debug=debug)


if __name__ == "__main__":
    run()
