"""
Deck similarity strategies.

Two formulas are in use:

- ``jaccard``: weighted Jaccard, sum(min) / sum(max) over every card key.
  Symmetric, 1.0 for identical decks.
- ``blended``: 0.75 * (overlap / size of A) + 0.25 * weighted Jaccard.
  Deliberately asymmetric: ``a`` is the user's deck and recall against it
  dominates the score.

Both take normalized-name -> quantity maps and return a value in [0, 1].
"""
from typing import Callable, Mapping

Counts = Mapping[str, int]

__all__ = ["jaccard", "blended", "get_strategy", "STRATEGIES"]


def jaccard(a: Counts, b: Counts) -> float:
    """Weighted Jaccard similarity between two count maps."""
    intersection = 0
    union = 0
    for key in set(a) | set(b):
        qa = max(a.get(key, 0), 0)
        qb = max(b.get(key, 0), 0)
        intersection += min(qa, qb)
        union += max(qa, qb)
    if union <= 0:
        return 0.0
    return intersection / union


def blended(a: Counts, b: Counts) -> float:
    """Recall-weighted blend of overlap-with-A and weighted Jaccard."""
    total_a = sum(max(q, 0) for q in a.values())
    if total_a <= 0:
        return 0.0
    total_b = sum(max(q, 0) for q in b.values())

    intersection = 0
    for key, qa in a.items():
        intersection += min(max(qa, 0), max(b.get(key, 0), 0))

    overlap_a = intersection / total_a
    denominator = total_a + total_b - intersection
    jaccard_q = intersection / denominator if denominator > 0 else 0.0
    return 0.75 * overlap_a + 0.25 * jaccard_q


STRATEGIES: dict[str, Callable[[Counts, Counts], float]] = {
    "jaccard": jaccard,
    "blended": blended,
}


def get_strategy(name: str) -> Callable[[Counts, Counts], float]:
    """Look up a similarity function by name."""
    try:
        return STRATEGIES[str(name).lower()]
    except KeyError:
        raise ValueError(
            f"Unknown similarity strategy {name!r}; expected one of {sorted(STRATEGIES)}"
        ) from None
