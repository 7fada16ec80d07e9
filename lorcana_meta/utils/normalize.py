"""
Card name normalization and deck count helpers.
"""
import re
import unicodedata
from typing import Iterable, Optional


_APOSTROPHES = re.compile(r"['’]")
_DASHES = re.compile(r"[-–—]")
_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_name(value) -> str:
    """
    Normalize a card name for comparison.

    Lowercases, strips diacritics and punctuation, turns dashes into spaces
    and collapses whitespace. ``None`` yields an empty string.
    """
    if value is None:
        return ""
    text = str(value).lower()
    text = unicodedata.normalize("NFD", text)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = text.replace("\u00a0", " ")
    text = _APOSTROPHES.sub("", text)
    text = _DASHES.sub(" ", text)
    text = _NON_ALNUM.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def to_quantity(value) -> Optional[int]:
    """Coerce a quantity field to int, or None when it is not a number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return int(number)


def card_name_and_quantity(card) -> tuple[str, Optional[int]]:
    """Read (name, quantity) from a Card object or a plain dict."""
    if isinstance(card, dict):
        name = card.get("name") or card.get("normalizedName") or ""
        raw_qty = card.get("quantity", card.get("count", card.get("qty")))
        return str(name), to_quantity(raw_qty)
    return str(getattr(card, "name", "") or ""), to_quantity(getattr(card, "quantity", None))


def build_counts(cards: Optional[Iterable]) -> dict[str, int]:
    """
    Build a normalized-name -> total quantity map.

    Entries with an empty name or a non-positive quantity are dropped.
    """
    counts: dict[str, int] = {}
    for card in cards or []:
        name, qty = card_name_and_quantity(card)
        key = normalize_name(name)
        if not key or qty is None or qty <= 0:
            continue
        counts[key] = counts.get(key, 0) + qty
    return counts
