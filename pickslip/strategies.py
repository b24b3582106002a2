"""
Strategy interface and generic arbitration for field extraction.

Each field is parsed by several independent strategies. Their candidates
are merged by a single arbitration routine: agreeing strategies
corroborate each other, and positional fields keep one candidate per
stretch of text.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Generic, Hashable, List, Optional, Pattern, TypeVar

from pickslip.models import Candidate

T = TypeVar('T')


class Strategy(ABC, Generic[T]):
    """One way of reading a field out of normalized text."""

    strategy_id = 'strategy'

    @abstractmethod
    def extract(self, text: str) -> List[Candidate[T]]:
        """Return every candidate this strategy finds, possibly none."""


class RegexStrategy(Strategy[T]):
    """Emit one candidate per regex match that converts to a value."""

    def __init__(
        self,
        strategy_id: str,
        pattern: Pattern,
        confidence: float,
        convert: Callable[[Any], Optional[T]],
        span_group: int = 0
    ):
        """
        Args:
            strategy_id: Identifier recorded on each candidate
            pattern: Compiled pattern searched with finditer
            confidence: Confidence assigned to every candidate
            convert: Maps a match object to a value, or None to skip it
            span_group: Group whose span is recorded (0 = whole match)
        """
        self.strategy_id = strategy_id
        self.pattern = pattern
        self.confidence = confidence
        self.convert = convert
        self.span_group = span_group

    def extract(self, text: str) -> List[Candidate[T]]:
        candidates = []
        for match in self.pattern.finditer(text):
            value = self.convert(match)
            if value is None:
                continue
            candidates.append(Candidate(value, self.confidence, self.strategy_id, match.span(self.span_group)))
        return candidates


def combine(
    candidates: List[Candidate],
    key: Callable[[Candidate], Hashable] = lambda c: c.value,
    bonus: float = 0.05
) -> List[Candidate]:
    """
    Merge candidates that share a key.

    The merged candidate keeps the value, strategy and span of its most
    confident member. Its confidence is that maximum plus `bonus` for each
    additional distinct strategy that agreed, capped at 1.0.

    Returns:
        Merged candidates, most confident first; ties keep first-seen order
    """
    groups: Dict[Hashable, List[Candidate]] = {}
    for candidate in candidates:
        groups.setdefault(key(candidate), []).append(candidate)

    merged = []
    for members in groups.values():
        best = max(members, key=lambda c: c.confidence)
        strategies = {c.strategy_id for c in members}
        confidence = min(1.0, best.confidence + bonus * (len(strategies) - 1))
        merged.append(Candidate(best.value, confidence, best.strategy_id, best.span))

    return sorted(merged, key=lambda c: -c.confidence)


def _overlaps(a: Candidate, b: Candidate) -> bool:
    return a.span[0] < b.span[1] and b.span[0] < a.span[1]


def arrange_positional(candidates: List[Candidate], bonus: float = 0.05) -> List[Candidate]:
    """
    Arbitrate a positional field (one value per pick).

    Candidates at the same span are merged as in combine(); overlapping
    spans are then suppressed, keeping the more confident (longer on
    ties) match. Survivors are returned in text order.
    """
    merged = combine([c for c in candidates if c.span is not None], key=lambda c: c.span, bonus=bonus)
    ranked = sorted(merged, key=lambda c: (-c.confidence, -(c.span[1] - c.span[0]), c.span[0]))

    kept: List[Candidate] = []
    for candidate in ranked:
        if not any(_overlaps(candidate, other) for other in kept):
            kept.append(candidate)
    return sorted(kept, key=lambda c: c.span[0])


def select_best(candidates: List[Candidate], threshold: float = 0.0) -> Optional[Candidate]:
    """Most confident candidate at or above threshold, else None."""
    if not candidates:
        return None
    best = max(candidates, key=lambda c: c.confidence)
    return best if best.confidence >= threshold else None


class FieldExtractor(Generic[T]):
    """Runs every strategy registered for a field and arbitrates the result."""

    def __init__(
        self,
        name: str,
        strategies: List[Strategy[T]],
        positional: bool = False,
        bonus: float = 0.05,
        logger: Optional[logging.Logger] = None
    ):
        self.name = name
        self.strategies = strategies
        self.positional = positional
        self.bonus = bonus
        self.logger = logger

    def candidates(self, text: str) -> List[Candidate[T]]:
        """
        Raw candidates from all strategies, in registration order.

        A strategy that raises is logged and contributes nothing.
        """
        results = []
        for strategy in self.strategies:
            try:
                found = strategy.extract(text)
            except Exception as e:
                if self.logger:
                    self.logger.warning(f"{self.name}: strategy {strategy.strategy_id} failed: {e}")
                continue
            results.extend(found)

        if self.logger:
            self.logger.debug(f"{self.name}: {len(results)} raw candidates")
        return results

    def extract(self, text: str) -> List[Candidate[T]]:
        """Arbitrated candidates: confidence order for scalar fields, text order for positional ones."""
        raw = self.candidates(text)
        if self.positional:
            return arrange_positional(raw, self.bonus)
        return combine(raw, bonus=self.bonus)
