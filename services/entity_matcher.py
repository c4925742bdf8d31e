"""
Entity matcher: token-overlap fuzzy scoring shared by customer and
product resolution.

score(input, candidate) is a pure function of two normalized strings.
The weight table decides which flavour of overlap is used:

- count mode (customers): fraction of input tokens found in the
  candidate, exact or as a substring in either direction.
- length-weighted mode (products): matched characters over total
  characters, with substring hits earning partial credit.

Precedence: exact → containment (if enabled) → token overlap.
"""

from dataclasses import dataclass
from typing import Callable, Generic, Iterable, Optional, TypeVar

import structlog

from config.parsing import (
    EXACT_MATCH_SCORE,
    CONTAINMENT_SCORE,
    PARTIAL_MATCH_CEILING,
    BRANCH_BONUS_WEIGHT,
    PARTIAL_TOKEN_CREDIT,
    PARTIAL_TOKEN_MIN_LENGTH,
)
from utils.text_utils import tokenize

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class MatchWeights:
    """Weight table for one matching flavour."""
    exact: float = EXACT_MATCH_SCORE
    containment: Optional[float] = CONTAINMENT_SCORE  # None disables the containment step
    partial_ceiling: float = PARTIAL_MATCH_CEILING
    secondary_bonus: float = BRANCH_BONUS_WEIGHT
    min_token_length: int = 2
    length_weighted: bool = False
    partial_credit: float = PARTIAL_TOKEN_CREDIT
    partial_min_length: int = 1


CUSTOMER_WEIGHTS = MatchWeights()

PRODUCT_WEIGHTS = MatchWeights(
    containment=None,
    secondary_bonus=0,
    min_token_length=1,
    length_weighted=True,
    partial_min_length=PARTIAL_TOKEN_MIN_LENGTH,
)


@dataclass(frozen=True)
class MatchResult(Generic[T]):
    """Accepted best match."""
    candidate: T
    score: float
    exact: bool = False


def _tokens_overlap(token: str, other: str) -> bool:
    return token in other or other in token


class EntityMatcher:
    """
    Stateless token-overlap scorer.

    Usage:
        matcher = EntityMatcher(CUSTOMER_WEIGHTS)
        matcher.score("heytea genting", "heytea genting")  # 100
    """

    def __init__(self, weights: MatchWeights = CUSTOMER_WEIGHTS):
        self.weights = weights

    def score(self, input_text: str, candidate_text: str) -> float:
        """
        Similarity of two normalized strings, 0-100.

        Args:
            input_text: Normalized pasted text
            candidate_text: Normalized candidate name

        Returns:
            Score; 0 when either side is empty
        """
        if not input_text or not candidate_text:
            return 0.0

        if input_text == candidate_text:
            return float(self.weights.exact)

        if self.weights.containment is not None and (
            input_text in candidate_text or candidate_text in input_text
        ):
            return float(self.weights.containment)

        input_tokens = tokenize(input_text, self.weights.min_token_length)
        candidate_tokens = tokenize(candidate_text, self.weights.min_token_length)
        if not input_tokens:
            return 0.0

        if self.weights.length_weighted:
            return self._length_weighted_overlap(input_tokens, candidate_tokens)
        return self._count_overlap(input_tokens, candidate_tokens)

    def secondary_bonus(self, input_text: str, secondary_text: str) -> float:
        """
        Bonus for overlap with a secondary field (the branch name).

        Fraction of the secondary tokens hit by the input, capped at 1,
        times the bonus weight.
        """
        if not self.weights.secondary_bonus or not input_text or not secondary_text:
            return 0.0

        input_tokens = tokenize(input_text, self.weights.min_token_length)
        secondary_tokens = tokenize(secondary_text, self.weights.min_token_length)
        if not secondary_tokens:
            return 0.0

        hits = sum(
            1 for t in input_tokens
            if any(_tokens_overlap(t, s) for s in secondary_tokens)
        )
        if hits == 0:
            return 0.0
        return min(hits / len(secondary_tokens), 1.0) * self.weights.secondary_bonus

    def _count_overlap(self, input_tokens: list[str], candidate_tokens: list[str]) -> float:
        hits = sum(
            1 for t in input_tokens
            if any(_tokens_overlap(t, c) for c in candidate_tokens)
        )
        return (hits / len(input_tokens)) * self.weights.partial_ceiling

    def _length_weighted_overlap(self, input_tokens: list[str], candidate_tokens: list[str]) -> float:
        total_length = sum(len(t) for t in input_tokens)
        if total_length == 0:
            return 0.0

        candidate_set = set(candidate_tokens)
        matched_length = 0.0
        for token in input_tokens:
            if token in candidate_set:
                matched_length += len(token)
            elif len(token) >= self.weights.partial_min_length and any(
                _tokens_overlap(token, c) for c in candidate_tokens
            ):
                matched_length += len(token) * self.weights.partial_credit

        return (matched_length / total_length) * self.weights.partial_ceiling

    def best_match(
        self,
        candidates: Iterable[T],
        key: Callable[[T], tuple[float, bool]],
        threshold: float,
    ) -> Optional[MatchResult[T]]:
        """
        Pick the highest-scoring candidate at or above the threshold.

        key returns (final score, is_exact_name_match) for a candidate.
        Equal scores keep the first-seen candidate, except that an exact
        name match beats a non-exact candidate with the same score.

        Args:
            candidates: Candidates in registry order
            key: Candidate -> (score, exact)
            threshold: Acceptance threshold

        Returns:
            MatchResult, or None when nothing scores above zero and
            reaches the threshold
        """
        best: Optional[MatchResult[T]] = None

        for candidate in candidates:
            score, exact = key(candidate)
            if best is None or (score, exact) > (best.score, best.exact):
                best = MatchResult(candidate=candidate, score=score, exact=exact)

        if best is None or best.score <= 0 or best.score < threshold:
            return None
        return best
