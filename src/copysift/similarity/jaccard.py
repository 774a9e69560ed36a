from typing import AbstractSet


def jaccard(set_a: AbstractSet[str], set_b: AbstractSet[str]) -> float:
    """
    Exact Jaccard similarity |A & B| / |A | B| of two shingle sets.

    Two empty sets score 0, not 1.
    """
    if not set_a and not set_b:
        return 0.0

    smaller, larger = (set_a, set_b) if len(set_a) <= len(set_b) else (set_b, set_a)
    intersection = sum(1 for item in smaller if item in larger)

    union = len(set_a) + len(set_b) - intersection
    if union <= 0:
        return 0.0
    return intersection / union


def to_percent(similarity: float) -> int:
    """Similarity as the integer percentage shown to users."""
    # halves round up
    return int(similarity * 100 + 0.5)
