"""
CLI entry point for the Lorcana Meta Analyzer.
"""
import argparse
import json
import sys
from pathlib import Path

from .config import Config
from .log import configure_logging


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Lorcana Deck vs Tournament Meta Analyzer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m lorcana_meta.main analyze                 # Meta state report
  python -m lorcana_meta.main compare my_deck.txt     # Similar tournament decks
  python -m lorcana_meta.main compare my_deck.txt --cuts-adds
  python -m lorcana_meta.main matchups my_deck.txt    # Heuristic matchup table
  python -m lorcana_meta.main dedupe                  # Clean the corpus file
  python -m lorcana_meta.main web                     # Start web API
        """
    )
    parser.add_argument(
        "--meta", "-m",
        type=str,
        default=None,
        help="Path to tournamentMeta.json (default: TOURNAMENT_META_PATH or db/)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=Config.LOG_LEVEL,
        help=f"Logging level (default: {Config.LOG_LEVEL})"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Analyze command
    analyze_parser = subparsers.add_parser("analyze", help="Show meta state report")
    analyze_parser.add_argument("--json", action="store_true", help="Print raw JSON")

    # Compare command
    compare_parser = subparsers.add_parser("compare", help="Compare a decklist to the meta")
    compare_parser.add_argument("decklist", type=str, help="Decklist file (text or JSON)")
    compare_parser.add_argument(
        "--top", "-t",
        type=int,
        default=Config.DEFAULT_TOP,
        help=f"Only consider decks that finished in the top N, 0 for all (default: {Config.DEFAULT_TOP})"
    )
    compare_parser.add_argument(
        "--top-k", "-k",
        type=int,
        default=Config.DEFAULT_TOP_K,
        help=f"Number of similar decks to show (default: {Config.DEFAULT_TOP_K})"
    )
    compare_parser.add_argument(
        "--min-sim",
        type=float,
        default=Config.DEFAULT_MIN_SIM,
        help=f"Minimum similarity 0..1 (default: {Config.DEFAULT_MIN_SIM})"
    )
    compare_parser.add_argument("--any-format", action="store_true", help="Do not filter by format")
    compare_parser.add_argument("--format", type=str, default=Config.DEFAULT_FORMAT, help="Deck format")
    compare_parser.add_argument(
        "--strategy",
        choices=["blended", "jaccard"],
        default="blended",
        help="Similarity formula (default: blended)"
    )
    compare_parser.add_argument("--cuts-adds", action="store_true", help="Also suggest adds and cuts")
    compare_parser.add_argument("--json", action="store_true", help="Print raw JSON")

    # Matchups command
    matchups_parser = subparsers.add_parser("matchups", help="Heuristic matchup table")
    matchups_parser.add_argument("decklist", type=str, help="Decklist file (text or JSON)")
    matchups_parser.add_argument("--inks", type=str, default="", help="Comma separated inks")
    matchups_parser.add_argument("--json", action="store_true", help="Print raw JSON")

    # Dedupe command
    subparsers.add_parser("dedupe", help="De-duplicate and date-sort the corpus file")

    # Web command
    web_parser = subparsers.add_parser("web", help="Start web API")
    web_parser.add_argument(
        "--host",
        type=str,
        default=Config.HOST,
        help=f"Host to bind to (default: {Config.HOST})"
    )
    web_parser.add_argument(
        "--port", "-p",
        type=int,
        default=Config.PORT,
        help=f"Port to bind to (default: {Config.PORT})"
    )
    web_parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode"
    )

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.command == "analyze":
        return run_analyze(args)
    elif args.command == "compare":
        return run_compare(args)
    elif args.command == "matchups":
        return run_matchups(args)
    elif args.command == "dedupe":
        return run_dedupe(args)
    elif args.command == "web":
        return run_web(args)
    else:
        parser.print_help()
        return 0


def read_decklist(path: str) -> list[dict]:
    """
    Read a decklist file.

    Accepts a JSON list of {name, quantity} or plain text lines such as
    ``4 Mickey Mouse - Brave Little Tailor`` / ``4x Goofy``.
    """
    from .corpus.models import Card

    text = Path(path).read_text(encoding="utf-8")
    stripped = text.strip()
    if stripped.startswith("["):
        entries = json.loads(stripped)
    else:
        entries = [line for line in text.splitlines() if line.strip() and not line.lstrip().startswith("#")]

    cards = [Card.from_raw(entry) for entry in entries]
    return [c.to_dict() for c in cards if c is not None and c.name]


def _load(args):
    from .corpus.loader import load_tournament_meta

    return load_tournament_meta(args.meta)


def _arrow(trend: str) -> str:
    return {"rising": "↑", "falling": "↓"}.get(trend, "→")


def run_analyze(args):
    """Print the meta state report."""
    from .analyzer.meta_state import MetaStateAnalyzer

    snapshot = _load(args)
    result = MetaStateAnalyzer(snapshot).analyze()

    if args.json:
        print(json.dumps(result, indent=2, ensure_ascii=False))
        return 0

    if not result["available"]:
        print(f"⚠️  {result['note']}")
        return 0

    print("=" * 60)
    print("  META STATE REPORT")
    print("=" * 60)
    print(f"  Data: {result['totalDecks']} decks")
    if not result["hasValidDates"]:
        print("  Note: Snapshot analysis (no date information)")
    health = result["health"]
    print(f"  Health: {health['health']} ({health['diversity']}% diversity)")

    print("\nTOP ARCHETYPES:")
    print("-" * 60)
    for arch in result["archetypes"][:5]:
        print(f"  {arch['weekShare']}% {arch['archetype']} {_arrow(arch['trend'])}")
        if arch["avgPlacement"]:
            print(f"     Avg placement: #{arch['avgPlacement']}, Top 8: {arch['topPlacements']}")

    print("\nTOP CARDS:")
    print("-" * 60)
    for card in result["cards"][:10]:
        print(f"  {card['weekShare']}% {card['card']} {_arrow(card['trend'])}")
    return 0


def run_compare(args):
    """Compare a decklist to the corpus."""
    from .analyzer.comparator import MetaComparator

    cards = read_decklist(args.decklist)
    comparator = MetaComparator(_load(args))
    result = comparator.compare(
        cards,
        top=args.top or None,
        same_format=not args.any_format,
        top_k=args.top_k,
        min_sim=args.min_sim,
        deck_format=args.format,
        strategy=args.strategy,
    )
    if args.cuts_adds:
        result["cutsAdds"] = comparator.suggest_cuts_adds(
            cards, top=args.top or None, same_format=not args.any_format, deck_format=args.format,
        )

    if args.json:
        print(json.dumps(result, indent=2, ensure_ascii=False))
        return 0

    if not result["available"]:
        print(f"⚠️  Meta comparison unavailable: {result['note']}")
        return 0

    agg = result["aggregate"]
    print(f"\n📊 Compared against {result['comparedCount']} of {result['decksCount']} decks")
    print(f"   Best finish: {agg['bestFinish']} | Avg finish: {agg['avgFinish']} | "
          f"Top 8 rate: {agg['top8Rate'] if agg['top8Rate'] is None else round(agg['top8Rate'] * 100, 1)}")

    print(f"\n🔍 Most similar decks ({result['strategy']}):")
    for i, deck in enumerate(result["similarDecks"], 1):
        print(f"   {i:2}. {deck['score']:5.1f}%  {deck['name']}  [{deck['standing'] or '-'}] {deck['event'] or ''}")

    if args.cuts_adds:
        suggestions = result["cutsAdds"]
        if suggestions.get("adds"):
            print("\n➕ Adds:")
            for add in suggestions["adds"]:
                print(f"   {add['name']}: {add['yourQty']} -> {add['suggestedQty']} "
                      f"({add['metaPresence']}% of similar decks, {add['priority']})")
        if suggestions.get("cuts"):
            print("\n➖ Cuts:")
            for cut in suggestions["cuts"]:
                print(f"   {cut['name']}: -{cut['suggestedCut']} "
                      f"({cut['metaPresence']}% of similar decks, {cut['priority']})")
    return 0


def run_matchups(args):
    """Print the heuristic matchup table."""
    from .analyzer.matchups import MatchupAnalyzer

    cards = read_decklist(args.decklist)
    inks = [i.strip() for i in args.inks.split(",") if i.strip()]
    result = MatchupAnalyzer(_load(args).decks).analyze(cards, inks=inks)

    if args.json:
        print(json.dumps(result, indent=2, ensure_ascii=False))
        return 0

    summary = result["summary"]
    print(f"\n🎯 {result['userArchetype']} ({summary['tier']}, avg {summary['avgWinRate']}%)")
    print("=" * 50)
    for m in result["matchups"]:
        print(f"   vs {m['opponent']}: {m['winRate']}% ({m['rating']}, {m['metaShare']}% of meta)")
    return 0


def run_dedupe(args):
    """De-duplicate the corpus file in place."""
    from .corpus.aggregator import aggregate_corpus

    stats = aggregate_corpus(args.meta)
    if stats["note"]:
        print(f"❌ {stats['note']}")
        return 1
    print("\n✅ Aggregation complete!")
    print(f"   Loaded: {stats['loaded']} decks")
    print(f"   Duplicates removed: {stats['duplicates']}")
    print(f"   Total in DB: {stats['total']} decks")
    return 0


def run_web(args):
    """Run the web API."""
    from .web.app import data_manager, run

    if args.meta:
        data_manager.set_meta_path(Path(args.meta))
    print(f"🌐 Starting web API at http://{args.host}:{args.port}")
    run(host=args.host, port=args.port, debug=args.debug)
    return 0


if __name__ == "__main__":
    sys.exit(main())
