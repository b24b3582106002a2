"""Tests for entry amount and potential payout extraction."""

import pytest

from pickslip.field_extractors import build_play_type_extractor
from pickslip.models import Candidate, MoneyPair
from pickslip.money_extractors import (
    ContextualStrategy,
    DirectDollarStrategy,
    HistoricalStrategy,
    NumericStrategy,
    build_money_extractor,
    correct_dropped_decimal,
    resolve_money,
)

BOUNDS = (0.10, 10000.0)


# ---------------------------------------------------------------------------
# Individual strategies
# ---------------------------------------------------------------------------

class TestDirectDollar:
    """Smallest and largest dollar amounts."""

    def test_min_and_max(self):
        """Entry is the smallest amount and payout the largest."""
        found = DirectDollarStrategy(BOUNDS).extract("6-Pick Flex Play\n$10 to pay $231.25")
        assert found == [Candidate(MoneyPair(10.0, 231.25), 0.9, 'money-direct')]

    def test_needs_two_distinct_amounts(self):
        """A single (or repeated) amount is not a pair."""
        assert DirectDollarStrategy(BOUNDS).extract("Entry $5") == []
        assert DirectDollarStrategy(BOUNDS).extract("$5 and $5") == []

    def test_thousands_separator(self):
        """Comma-grouped amounts parse as one number."""
        found = DirectDollarStrategy(BOUNDS).extract("$20 to pay $1,000")
        assert found[0].value == MoneyPair(20.0, 1000.0)


class TestContextual:
    """Entry/payout phrases."""

    def test_entry_then_payout(self):
        found = ContextualStrategy(BOUNDS).extract("Entry: $5\nPayout: $35")
        assert [c.value for c in found] == [MoneyPair(5.0, 35.0)]
        assert found[0].confidence == 0.8

    def test_payout_then_entry(self):
        """Payout-first phrasing is swapped into (entry, payout)."""
        found = ContextualStrategy(BOUNDS).extract("Payout $35 Entry $5")
        assert [c.value for c in found] == [MoneyPair(5.0, 35.0)]

    def test_to_pay(self):
        found = ContextualStrategy(BOUNDS).extract("$10 to pay $231.25")
        assert [c.value for c in found] == [MoneyPair(10.0, 231.25)]


class TestNumeric:
    """Bare numbers with decimal-drop correction."""

    @pytest.mark.parametrize("token, expected", [
        ("250", 2.5),
        ("1500", 15.0),
        ("35", 35.0),
        ("2.50", 2.5),
        ("1,500", 1500.0),
    ])
    def test_correct_dropped_decimal(self, token, expected):
        assert correct_dropped_decimal(token) == expected

    def test_dropped_decimals_restored(self):
        """'250 750' reads as $2.50 to pay $7.50."""
        found = NumericStrategy(BOUNDS).extract("250 750")
        assert found == [Candidate(MoneyPair(2.5, 7.5), 0.6, 'money-numeric')]

    def test_pick_count_excluded(self):
        """The pick count is not mistaken for an amount."""
        found = NumericStrategy(BOUNDS).extract("4-Pick 5 35")
        assert found[0].value == MoneyPair(5.0, 35.0)

    def test_dollar_tokens_preferred(self):
        """With two dollar amounts, bare numbers are ignored."""
        found = NumericStrategy(BOUNDS).extract("22.5 Points $5 to pay $15 8.5")
        assert found[0].value == MoneyPair(5.0, 15.0)


class TestHistorical:
    """Known pairs for the pick count."""

    @pytest.fixture
    def strategy(self, reference):
        return HistoricalStrategy(reference, build_play_type_extractor(reference.pick_counts))

    def test_matching_entry(self, strategy):
        """A seen entry matching a known pair yields that pair."""
        found = strategy.extract("3-Pick Flex Play $5")
        assert found == [Candidate(MoneyPair(5.0, 30.0), 0.7, 'money-historical')]

    def test_payout_breaks_entry_ties(self, strategy):
        """Among pairs with the same entry, the closest payout wins."""
        found = strategy.extract("2-Pick Power Play $5 to pay $17.50")
        assert found[0].value == MoneyPair(5.0, 17.5)

    def test_unknown_amount_falls_back(self, strategy):
        """No known entry near the amounts yields the default pair at low confidence."""
        found = strategy.extract("6-Pick Flex Play $50 to pay $500")
        assert found == [Candidate(MoneyPair(10.0, 231.25), 0.3, 'money-historical')]

    def test_no_pick_count(self, strategy):
        """Without a play type there is nothing to look up."""
        assert strategy.extract("$5 to pay $35") == []


# ---------------------------------------------------------------------------
# Arbitration
# ---------------------------------------------------------------------------

class TestResolveMoney:
    """Combined money extraction and the hard default."""

    @pytest.fixture
    def extractor(self, reference):
        return build_money_extractor(reference, build_play_type_extractor(reference.pick_counts))

    def test_strategies_corroborate(self, extractor, reference):
        """Agreeing strategies push the pair close to full confidence."""
        money, used_default = resolve_money(extractor.extract("6-Pick Flex Play\n$10 to pay $231.25"), reference)
        assert money.value == MoneyPair(10.0, 231.25)
        assert money.confidence > 0.9
        assert not used_default

    def test_hard_default(self, extractor, reference):
        """Text without amounts falls back to the hard default."""
        money, used_default = resolve_money(extractor.extract("Kelsey Plum"), reference)
        assert money.value == MoneyPair(2.5, 7.5)
        assert used_default

    def test_zero_amounts_unusable(self, reference):
        """Pairs with a zero side are discarded before selection."""
        candidates = [Candidate(MoneyPair(0.0, 35.0), 0.9, 'money-direct')]
        money, used_default = resolve_money(candidates, reference)
        assert used_default
        assert money.value == reference.hard_default

    def test_threshold(self, reference):
        """Candidates below the threshold are not accepted."""
        candidates = [Candidate(MoneyPair(5.0, 35.0), 0.2, 'money-historical')]
        _, used_default = resolve_money(candidates, reference, threshold=0.25)
        assert used_default
