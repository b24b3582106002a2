"""
Entry amount / potential payout extraction.

Four independent strategies read the money pair; their candidates are
arbitrated like any other scalar field, with a hard default when none
of them produces a usable pair.
"""

import logging
import re
from typing import List, Optional, Tuple

from pickslip.field_extractors import (
    AMOUNT,
    CLOCK_PATTERN,
    DATE_PATTERN,
    PICK_ONLY_PATTERN,
    parse_amount,
)
from pickslip.models import Candidate, MoneyPair, PlayType
from pickslip.reference_data import ReferenceData
from pickslip.strategies import FieldExtractor, Strategy, combine, select_best

DOLLAR_PATTERN = re.compile(r'\$[ \t]*(' + AMOUNT + r')(?![\d])')
NUMERIC_TOKEN_PATTERN = re.compile(r'(?<![\w.,])(\$[ \t]*)?(' + AMOUNT + r')(?![\w]|\.\d|,\d)')

CONTEXT_PATTERNS = [
    (re.compile(r'\bentry[ \t:]*\$?[ \t]*(' + AMOUNT + r')[\s\S]{0,40}?\bpayout[ \t:]*\$?[ \t]*(' + AMOUNT + ')', re.IGNORECASE), False),
    (re.compile(r'\$[ \t]*(' + AMOUNT + r')\s*to\s+(?:pay|win)\s*\$[ \t]*(' + AMOUNT + ')', re.IGNORECASE), False),
    (re.compile(r'\$[ \t]*(' + AMOUNT + r')\s*paid\s*\$[ \t]*(' + AMOUNT + ')', re.IGNORECASE), False),
    (re.compile(r'\bpayout[ \t:]*\$?[ \t]*(' + AMOUNT + r')[\s\S]{0,40}?\bentry[ \t:]*\$?[ \t]*(' + AMOUNT + ')', re.IGNORECASE), True),
]


def in_bounds(value: float, bounds: Tuple[float, float]) -> bool:
    return bounds[0] <= value <= bounds[1]


def correct_dropped_decimal(token: str) -> float:
    """'250' -> 2.50 and '1500' -> 15.00 when the decimal point was lost."""
    value = parse_amount(token)
    if '.' not in token and ',' not in token and (100 <= value <= 999 or 1000 <= value <= 9999):
        return value / 100
    return value


def is_usable(pair: MoneyPair) -> bool:
    return pair.entry > 0 and pair.payout > 0


class DirectDollarStrategy(Strategy[MoneyPair]):
    """Smallest and largest of at least two distinct dollar amounts."""

    strategy_id = 'money-direct'

    def __init__(self, bounds: Tuple[float, float], confidence: float = 0.9):
        self.bounds = bounds
        self.confidence = confidence

    def extract(self, text: str) -> List[Candidate[MoneyPair]]:
        amounts = {parse_amount(m.group(1)) for m in DOLLAR_PATTERN.finditer(text)}
        amounts = sorted(a for a in amounts if in_bounds(a, self.bounds))
        if len(amounts) < 2:
            return []
        return [Candidate(MoneyPair(amounts[0], amounts[-1]), self.confidence, self.strategy_id)]


class ContextualStrategy(Strategy[MoneyPair]):
    """Phrases that name the entry and payout explicitly."""

    strategy_id = 'money-contextual'

    def __init__(self, bounds: Tuple[float, float], confidence: float = 0.8):
        self.bounds = bounds
        self.confidence = confidence

    def extract(self, text: str) -> List[Candidate[MoneyPair]]:
        candidates = []
        for pattern, payout_first in CONTEXT_PATTERNS:
            for match in pattern.finditer(text):
                first, second = parse_amount(match.group(1)), parse_amount(match.group(2))
                pair = MoneyPair(second, first) if payout_first else MoneyPair(first, second)
                if in_bounds(pair.entry, self.bounds) and in_bounds(pair.payout, self.bounds):
                    candidates.append(Candidate(pair, self.confidence, self.strategy_id, match.span()))
        return candidates


def numeric_tokens(text: str) -> List[Tuple[float, bool]]:
    """
    (value, dollar_prefixed) for every number outside pick counts, dates and clocks.

    Values have dropped decimal points restored.
    """
    excluded = [m.span() for pattern in (PICK_ONLY_PATTERN, DATE_PATTERN, CLOCK_PATTERN) for m in pattern.finditer(text)]
    tokens = []
    for match in NUMERIC_TOKEN_PATTERN.finditer(text):
        start, end = match.span(2)
        if any(s <= start and end <= e for s, e in excluded):
            continue
        tokens.append((correct_dropped_decimal(match.group(2)), match.group(1) is not None))
    return tokens


class NumericStrategy(Strategy[MoneyPair]):
    """Bare numbers with decimal-drop correction; dollar-prefixed ones preferred."""

    strategy_id = 'money-numeric'

    def __init__(self, bounds: Tuple[float, float], confidence: float = 0.6):
        self.bounds = bounds
        self.confidence = confidence

    def extract(self, text: str) -> List[Candidate[MoneyPair]]:
        tokens = [(value, dollar) for value, dollar in numeric_tokens(text) if in_bounds(value, self.bounds)]
        dollar_values = {value for value, dollar in tokens if dollar}
        values = sorted(dollar_values if len(dollar_values) >= 2 else {value for value, _ in tokens})
        if len(values) < 2:
            return []
        return [Candidate(MoneyPair(values[0], values[-1]), self.confidence, self.strategy_id)]


class HistoricalStrategy(Strategy[MoneyPair]):
    """
    Match amounts seen in the text against known pairs for the pick count.

    The pair whose entry is closest to a seen amount wins, payout closeness
    breaking ties. It is returned at full strategy confidence when its entry is within
    tolerance of a seen amount, otherwise the pick count's default pair is
    returned at low confidence.
    """

    strategy_id = 'money-historical'

    def __init__(
        self,
        reference: ReferenceData,
        play_type_extractor: FieldExtractor[PlayType],
        confidence: float = 0.7,
        fallback_confidence: float = 0.3
    ):
        self.reference = reference
        self.play_type_extractor = play_type_extractor
        self.confidence = confidence
        self.fallback_confidence = fallback_confidence

    def seen_amounts(self, text: str) -> List[float]:
        bounds = self.reference.money_bounds
        amounts = [parse_amount(m.group(1)) for m in DOLLAR_PATTERN.finditer(text)]
        if not amounts:
            amounts = [value for value, _ in numeric_tokens(text)]
        return [a for a in amounts if in_bounds(a, bounds)]

    def within_tolerance(self, seen: float, expected: float) -> bool:
        absolute, relative = self.reference.pair_tolerance
        difference = abs(seen - expected)
        return difference <= absolute or difference <= relative * expected

    def extract(self, text: str) -> List[Candidate[MoneyPair]]:
        play_type = select_best(self.play_type_extractor.extract(text))
        if play_type is None:
            return []
        pick_count = play_type.value.pick_count

        pairs = self.reference.historical_pairs(pick_count)
        amounts = self.seen_amounts(text)
        if pairs and amounts:
            def distance(pair: MoneyPair) -> Tuple[float, float]:
                return (min(abs(pair.entry - a) for a in amounts), min(abs(pair.payout - a) for a in amounts))

            best = min(pairs, key=distance)
            if any(self.within_tolerance(a, best.entry) for a in amounts):
                return [Candidate(best, self.confidence, self.strategy_id)]

        return [Candidate(self.reference.default_pair(pick_count), self.fallback_confidence, self.strategy_id)]


def build_money_extractor(
    reference: ReferenceData,
    play_type_extractor: FieldExtractor[PlayType],
    bonus: float = 0.05,
    logger: Optional[logging.Logger] = None
) -> FieldExtractor[MoneyPair]:
    bounds = reference.money_bounds
    return FieldExtractor('money', [
        DirectDollarStrategy(bounds),
        ContextualStrategy(bounds),
        NumericStrategy(bounds),
        HistoricalStrategy(reference, play_type_extractor),
    ], bonus=bonus, logger=logger)


def resolve_money(
    candidates: List[Candidate[MoneyPair]],
    reference: ReferenceData,
    threshold: float = 0.0,
    bonus: float = 0.05
) -> Tuple[Candidate[MoneyPair], bool]:
    """
    Pick the money pair for the lineup.

    Returns:
        Tuple of (candidate, used_default). The hard default is used when no
        usable candidate reaches the threshold.
    """
    usable = combine([c for c in candidates if is_usable(c.value)], bonus=bonus)
    best = select_best(usable, threshold)
    if best is not None:
        return best, False
    return Candidate(reference.hard_default, reference.hard_default_confidence, 'money-default'), True
