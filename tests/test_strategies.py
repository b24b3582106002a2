"""Tests for candidate arbitration and the field extractor runner."""

import re

import pytest

from pickslip.models import Candidate
from pickslip.strategies import (
    FieldExtractor,
    RegexStrategy,
    Strategy,
    arrange_positional,
    combine,
    select_best,
)


class BrokenStrategy(Strategy[str]):
    strategy_id = 'broken'

    def extract(self, text):
        raise RuntimeError("parser exploded")


# ---------------------------------------------------------------------------
# Arbitration
# ---------------------------------------------------------------------------

class TestCombine:
    """Merging of agreeing candidates."""

    def test_agreeing_strategies_corroborate(self):
        """Two strategies agreeing add one bonus to the best confidence."""
        merged = combine([Candidate(10, 0.9, 'a'), Candidate(10, 0.6, 'b')], bonus=0.05)
        assert len(merged) == 1
        assert merged[0].confidence == pytest.approx(0.95)
        assert merged[0].strategy_id == 'a'

    def test_same_strategy_does_not_corroborate(self):
        """Repeated hits from one strategy earn no bonus."""
        merged = combine([Candidate(10, 0.6, 'a'), Candidate(10, 0.6, 'a')])
        assert merged[0].confidence == pytest.approx(0.6)

    def test_confidence_capped(self):
        """Merged confidence never exceeds 1.0."""
        merged = combine([Candidate('x', 0.98, s) for s in 'abcd'], bonus=0.05)
        assert merged[0].confidence == 1.0

    def test_ordered_by_confidence(self):
        """Most confident value first."""
        merged = combine([Candidate('low', 0.3, 'a'), Candidate('high', 0.8, 'b')])
        assert [c.value for c in merged] == ['high', 'low']


class TestArrangePositional:
    """One candidate per stretch of text, in text order."""

    def test_overlaps_keep_most_confident(self):
        """Overlapping matches keep the stronger one; disjoint ones survive."""
        arranged = arrange_positional([
            Candidate('short', 0.7, 'a', (0, 10)),
            Candidate('long', 0.8, 'b', (0, 14)),
            Candidate('later', 0.7, 'a', (20, 30)),
        ])
        assert [c.value for c in arranged] == ['long', 'later']

    def test_ties_prefer_longer_span(self):
        """Equal confidence keeps the longer match."""
        arranged = arrange_positional([
            Candidate('Hits', 0.9, 'a', (0, 4)),
            Candidate('Hits Allowed', 0.9, 'b', (0, 12)),
        ])
        assert [c.value for c in arranged] == ['Hits Allowed']

    def test_text_order(self):
        """Survivors come back ordered by position, not confidence."""
        arranged = arrange_positional([
            Candidate('second', 0.9, 'a', (10, 15)),
            Candidate('first', 0.5, 'a', (0, 5)),
        ])
        assert [c.value for c in arranged] == ['first', 'second']

    def test_same_span_corroborates(self):
        """Strategies matching the same span merge with a bonus."""
        arranged = arrange_positional([
            Candidate(22.5, 0.85, 'before-stat', (3, 7)),
            Candidate(22.5, 0.45, 'bare', (3, 7)),
        ], bonus=0.05)
        assert len(arranged) == 1
        assert arranged[0].confidence == pytest.approx(0.9)


class TestSelectBest:
    """Threshold-gated selection."""

    def test_below_threshold(self):
        assert select_best([Candidate('x', 0.4, 'a')], 0.5) is None

    def test_at_threshold(self):
        assert select_best([Candidate('x', 0.5, 'a')], 0.5).value == 'x'

    def test_empty(self):
        assert select_best([]) is None


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------

class TestFieldExtractor:
    """Strategy execution and failure isolation."""

    @pytest.fixture
    def word_strategy(self):
        return RegexStrategy('word', re.compile(r'[A-Z][a-z]+'), 0.7, lambda m: m.group(0))

    def test_failing_strategy_is_skipped(self, word_strategy, null_logger):
        """A raising strategy contributes nothing but does not stop the others."""
        extractor = FieldExtractor('name', [BrokenStrategy(), word_strategy], logger=null_logger)
        assert [c.value for c in extractor.extract("Kelsey")] == ['Kelsey']

    def test_positional_extract(self, word_strategy):
        """Positional fields come back in text order."""
        extractor = FieldExtractor('name', [word_strategy], positional=True)
        assert [c.value for c in extractor.extract("Bravo then Alpha")] == ['Bravo', 'Alpha']

    def test_regex_strategy_skips_unconverted(self):
        """Matches converted to None are dropped."""
        strategy = RegexStrategy('digit', re.compile(r'\d'), 0.5, lambda m: int(m.group(0)) if m.group(0) != '0' else None)
        assert [c.value for c in strategy.extract("102")] == [1, 2]
