"""
Lineup validation module.
Checks a draft lineup against plausibility constraints and proposes a
corrected copy.
"""

import logging
from dataclasses import replace
from typing import List, Optional, Tuple

from pickslip.models import Lineup, LineupStatus, Player, ValidationReport
from pickslip.player_extractors import is_plausible_name
from pickslip.reference_data import ReferenceData

GROSS_PAYOUT_MULTIPLE = 100


class LineupValidator:
    """Validates a lineup against the reference tables."""

    def __init__(self, reference: ReferenceData, logger: Optional[logging.Logger] = None):
        """
        Args:
            reference: Reference tables with entry ranges, ratio bands and line ranges
            logger: Logger instance
        """
        self.reference = reference
        self.logger = logger

    def validate_entry(self, lineup: Lineup) -> Tuple[bool, Optional[float], str]:
        """
        Validate the entry amount against the pick-count range.

        Returns:
            Tuple of (is_valid, suggested_entry, error_message)
        """
        entry_range = self.reference.entry_range(lineup.pick_count)
        if entry_range['min'] <= lineup.entry_amount <= entry_range['max']:
            return True, None, ""
        return False, entry_range['typical'], (
            f"Entry amount ${lineup.entry_amount:.2f} outside expected range "
            f"${entry_range['min']:.2f}-${entry_range['max']:.2f} for '{lineup.type}'; "
            f"suggested ${entry_range['typical']:.2f}"
        )

    def validate_payout(self, lineup: Lineup, entry: float) -> Tuple[bool, Optional[float], str]:
        """
        Validate the potential payout relative to the entry.

        Args:
            lineup: Lineup to check
            entry: Entry amount to base suggestions on (already corrected if needed)

        Returns:
            Tuple of (is_valid, suggested_payout, error_message)
        """
        payout = lineup.potential_payout
        if payout <= lineup.entry_amount:
            if lineup.status == LineupStatus.LOSS:
                if self.logger:
                    self.logger.info(f"Loss lineup with payout ${payout:.2f} below entry ${lineup.entry_amount:.2f}")
                return True, None, ""
            return False, entry * 2, (
                f"Potential payout ${payout:.2f} does not exceed entry ${lineup.entry_amount:.2f}; "
                f"suggested ${entry * 2:.2f}"
            )
        if payout > lineup.entry_amount * GROSS_PAYOUT_MULTIPLE:
            return False, entry * 10, (
                f"Potential payout ${payout:.2f} exceeds {GROSS_PAYOUT_MULTIPLE}x entry "
                f"${lineup.entry_amount:.2f}; suggested ${entry * 10:.2f}"
            )
        return True, None, ""

    def validate_ratio(self, lineup: Lineup) -> Tuple[bool, str]:
        """Payout/entry ratio within the pick-count band. Reported only."""
        if lineup.entry_amount <= 0:
            return True, ""
        low, high = self.reference.ratio_band(lineup.pick_count)
        ratio = lineup.potential_payout / lineup.entry_amount
        if low <= ratio <= high:
            return True, ""
        return False, f"Payout ratio {ratio:.2f}x outside expected {low:g}-{high:g}x for '{lineup.type}'"

    def validate_player_count(self, lineup: Lineup) -> Tuple[bool, str]:
        expected = lineup.pick_count
        found = len(lineup.players)
        if expected is None:
            return False, f"Could not determine pick count from type '{lineup.type}'"
        if expected != found:
            return False, f"Expected {expected} players for '{lineup.type}' but found {found}"
        return True, ""

    def validate_line(self, index: int, player: Player) -> Tuple[bool, str]:
        low, high = self.reference.line_range(player.sport, player.stat_type)
        if low <= player.line <= high:
            return True, ""
        return False, (
            f"Player {index + 1} ({player.name}): line {player.line:g} outside "
            f"{player.sport.value} {player.stat_type.value} range [{low:g}, {high:g}]"
        )

    def validate_name(self, index: int, player: Player) -> Tuple[bool, str]:
        if is_plausible_name(player.name):
            return True, ""
        return False, f"Player {index + 1}: implausible name '{player.name}'"

    def validate(self, lineup: Lineup) -> ValidationReport:
        """
        Run every check; none short-circuits another.

        Args:
            lineup: Draft lineup

        Returns:
            ValidationReport, with a corrected copy whenever any check failed.
            Only entry, payout and implausible names are substituted.
        """
        errors: List[str] = []

        entry_ok, suggested_entry, message = self.validate_entry(lineup)
        if not entry_ok:
            errors.append(message)
        corrected_entry = suggested_entry if suggested_entry is not None else lineup.entry_amount

        payout_ok, suggested_payout, message = self.validate_payout(lineup, corrected_entry)
        if not payout_ok:
            errors.append(message)

        ratio_ok, message = self.validate_ratio(lineup)
        if not ratio_ok:
            errors.append(message)

        count_ok, message = self.validate_player_count(lineup)
        if not count_ok:
            errors.append(message)

        corrected_players = []
        for i, player in enumerate(lineup.players):
            line_ok, message = self.validate_line(i, player)
            if not line_ok:
                errors.append(message)
            name_ok, message = self.validate_name(i, player)
            if not name_ok:
                errors.append(message)
                player = replace(player, name=self.reference.placeholder_name)
            corrected_players.append(player)

        if self.logger:
            if errors:
                self.logger.warning(f"Validation found {len(errors)} issues: {errors}")
            else:
                self.logger.info("Validation passed")

        if not errors:
            return ValidationReport(is_valid=True)

        corrected = replace(
            lineup,
            entry_amount=corrected_entry,
            potential_payout=suggested_payout if suggested_payout is not None else lineup.potential_payout,
            players=tuple(corrected_players),
        )
        return ValidationReport(is_valid=False, errors=tuple(errors), corrected_lineup=corrected)
