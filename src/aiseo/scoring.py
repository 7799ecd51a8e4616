"""Shared arithmetic for the point-deduction rubrics.

All rounding is round-half-up on integers so results do not depend on
floating point representation.
"""

from typing import Dict, List, Mapping

from aiseo.constants import MAX_SCORE, MIN_SCORE


def clamp_score(score: int) -> int:
    """Clamp a score into [0, 100]."""
    return max(MIN_SCORE, min(MAX_SCORE, int(score)))


def round_half_up_mean(values: List[int]) -> int:
    """Arithmetic mean of integers, rounded half up."""
    if not values:
        return 0
    return (2 * sum(values) + len(values)) // (2 * len(values))


def weighted_score(scores: Mapping[str, int], weights: Mapping[str, int]) -> int:
    """Weighted mean of category scores using integer percent weights.

    Args:
        scores: Category name to score (0-100)
        weights: Category name to weight; weights need not sum to 100 and
            missing categories weigh nothing

    Returns:
        Rounded-half-up weighted mean, clamped to [0, 100]
    """
    total_weight = sum(weights.get(name, 0) for name in scores)
    if total_weight <= 0:
        return 0
    weighted_total = sum(scores[name] * weights.get(name, 0) for name in scores)
    return clamp_score((2 * weighted_total + total_weight) // (2 * total_weight))


class ScoreCard:
    """Accumulates a category score together with its issues.

    Example:
        card = ScoreCard()
        card.deduct(30, "title_short", "Title is too short")
        card.score, card.issues
    """

    def __init__(self, start: int = MAX_SCORE):
        self._score = start
        self.issues: List[str] = []
        self.codes: List[str] = []

    def deduct(self, points: int, code: str, message: str) -> None:
        self._score -= points
        self.flag(code, message)

    def add(self, points: int) -> None:
        self._score += points

    def set(self, score: int) -> None:
        self._score = score

    def flag(self, code: str, message: str) -> None:
        """Record an issue without changing the score."""
        self.issues.append(message)
        self.codes.append(code)

    @property
    def score(self) -> int:
        return clamp_score(self._score)

    def fields(self) -> Dict[str, object]:
        """Keyword arguments for a CategoryResult constructor."""
        return {
            "score": self.score,
            "issues": tuple(self.issues),
            "issue_codes": tuple(self.codes),
        }
