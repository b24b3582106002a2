"""Tests for recognized-text normalization."""

import pytest

from pickslip.normalizer import normalize_text


class TestNormalizeText:
    """Artifact removal, misread repair and whitespace cleanup."""

    def test_artifacts_become_spaces(self):
        """Scan artifacts split words instead of joining them."""
        assert normalize_text("Kelsey|Plum") == "Kelsey Plum"
        assert normalize_text("22.5 ~ Points") == "22.5 Points"

    @pytest.mark.parametrize("raw, expected", [
        ("P0ints", "Points"),
        ("1ine", "line"),
        ("5teals", "steals"),
        ("AsSists", "Assists"),
        ("Ta1ent", "Talent"),
    ])
    def test_misreads_in_word_context(self, raw, expected):
        """Digits and capitals inside lowercase words are repaired."""
        assert normalize_text(raw) == expected

    def test_chained_misreads_settle(self):
        """A repair that exposes another misread is repaired too."""
        assert normalize_text("10ad") == "load"

    @pytest.mark.parametrize("text", [
        "22.5 Points",
        "$10 to pay $231.25",
        "Sabrina Ionescu",
        "6-Pick Flex Play",
        "ATL 90 @ GSV 81",
    ])
    def test_real_tokens_preserved(self, text):
        """Numbers and capitalized names are left alone."""
        assert normalize_text(text) == text

    @pytest.mark.parametrize("text", [
        "$10to pay $231.25",
        "1st Quarter",
        "RD 1",
        "22.5points",
    ])
    def test_numeric_tokens_not_repaired(self, text):
        """Digits after '$', '.' or another digit, and ordinals, are real numbers."""
        assert normalize_text(text) == text

    def test_lines_preserved_and_blank_lines_dropped(self):
        """Line breaks survive, blank lines and padding do not."""
        raw = "  6-Pick   Flex Play \n\n\t$10 to pay $231.25\n   \nKelsey  Plum"
        assert normalize_text(raw) == "6-Pick Flex Play\n$10 to pay $231.25\nKelsey Plum"

    def test_empty(self):
        """Empty input stays empty."""
        assert normalize_text("") == ""

    @pytest.mark.parametrize("raw", [
        "P0ints|Reb0unds  \n\n5-Pick Power Play",
        "10ad 1ine ~ AsSists",
        "Kelsey Plum\n22.5 Points\n↑",
    ])
    def test_idempotent(self, raw):
        """Normalizing twice equals normalizing once."""
        once = normalize_text(raw)
        assert normalize_text(once) == once
