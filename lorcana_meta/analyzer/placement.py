"""
Tournament placement parsing and weighting.
"""
import re
from typing import Optional

_TITLES = (
    (re.compile(r"(winner|champion)", re.IGNORECASE), 1),
    (re.compile(r"(finalist|runner[\s-]?up)", re.IGNORECASE), 2),
    (re.compile(r"semi[\s-]?finalist", re.IGNORECASE), 4),
    (re.compile(r"quarter[\s-]?finalist", re.IGNORECASE), 8),
)
_ORDINAL = re.compile(r"\b(\d+)\s*(st|nd|rd|th)\b", re.IGNORECASE)
_TOP = re.compile(r"\btop\s*(\d+)", re.IGNORECASE)
_RANGE = re.compile(r"(\d+)\s*[-–]\s*(\d+)")
_NUMBER = re.compile(r"(\d+)")

# (best place, weight); anything worse than the last bound falls to the floor
_PLACEMENT_WEIGHTS = (
    (1, 1.00),
    (4, 0.90),
    (8, 0.75),
    (16, 0.60),
    (32, 0.45),
    (64, 0.30),
)
_WEIGHT_FLOOR = 0.15


def parse_placement(value) -> Optional[int]:
    """
    Extract the best place implied by a free-form standing.

    ``"Winner"`` -> 1, ``"2nd"`` -> 2, ``"Top 8"`` -> 8, ``"1-4"`` -> 1,
    ``"garbage"`` -> None. Never raises.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 1 else None
    if isinstance(value, float):
        if value != value or value < 1 or value == float("inf"):
            return None
        return int(value)

    text = str(value).strip()
    if not text:
        return None

    for pattern, place in _TITLES:
        # a title counts only as the whole standing
        if pattern.fullmatch(text):
            return place

    for pattern in (_ORDINAL, _TOP, _RANGE, _NUMBER):
        match = pattern.search(text)
        if match:
            place = int(match.group(1))
            return place if place >= 1 else None
    return None


def placement_weight(value) -> float:
    """Weight a finish: 1st = 1.0 stepping down to 0.15 beyond top 64."""
    place = value if isinstance(value, int) and not isinstance(value, bool) else parse_placement(value)
    if place is None or place < 1:
        return _WEIGHT_FLOOR
    for bound, weight in _PLACEMENT_WEIGHTS:
        if place <= bound:
            return weight
    return _WEIGHT_FLOOR
