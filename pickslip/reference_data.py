"""
Reference tables used by the extractors and the validator.
Historical money pairs, plausibility ranges and vocabularies are kept in
reference_data.json so heuristics can be tuned without code changes.
"""

import logging
from typing import Any, Dict, List, Optional, Set, Tuple

from pickslip.models import MoneyPair, PlayStyle, PlayType, Sport, StatType
from pickslip.utils import load_json

WILDCARD = '*'


class ReferenceData:
    """Read-only view over the reference tables."""

    REQUIRED_FIELDS = [
        'money',
        'pick_counts',
        'historical_pairs',
        'default_pairs',
        'entry_ranges',
        'payout_ratio_bands',
        'line_ranges',
    ]

    def __init__(self, data: Dict[str, Any]):
        """
        Args:
            data: Parsed reference_data.json contents

        Raises:
            ValueError: If a required table is missing
        """
        missing_fields = [f for f in self.REQUIRED_FIELDS if f not in data]
        if missing_fields:
            raise ValueError(f"Reference data missing required fields: {missing_fields}")
        self.data = data
        self.version = data.get('version', 'unversioned')

    @classmethod
    def load(cls, path: str, logger: Optional[logging.Logger] = None) -> 'ReferenceData':
        """
        Load reference tables from a JSON file.

        Raises:
            IOError: If the file cannot be loaded
            ValueError: If a required table is missing
        """
        try:
            data = load_json(path, logger)
        except IOError as e:
            raise IOError(f"Failed to load reference data from {path}: {e}")
        reference = cls(data)
        if logger:
            logger.info(f"Loaded reference data version {reference.version} from {path}")
        return reference

    @staticmethod
    def _by_pick_count(table: Dict[str, Any], pick_count: Optional[int]) -> Any:
        key = str(pick_count) if pick_count is not None else WILDCARD
        if key in table:
            return table[key]
        return table.get(WILDCARD)

    @property
    def money_bounds(self) -> Tuple[float, float]:
        money = self.data['money']
        return (float(money.get('min_amount', 0.10)), float(money.get('max_amount', 10000)))

    @property
    def hard_default(self) -> MoneyPair:
        entry, payout = self.data['money'].get('hard_default', [2.50, 7.50])
        return MoneyPair(float(entry), float(payout))

    @property
    def hard_default_confidence(self) -> float:
        return float(self.data['money'].get('hard_default_confidence', 0.2))

    @property
    def pair_tolerance(self) -> Tuple[float, float]:
        """(absolute, relative) tolerance for matching a seen entry to a historical one."""
        tolerance = self.data['money'].get('pair_tolerance', {})
        return (float(tolerance.get('absolute', 0.01)), float(tolerance.get('relative', 0.05)))

    @property
    def pick_counts(self) -> List[int]:
        return [int(n) for n in self.data['pick_counts']]

    @property
    def default_play_type(self) -> PlayType:
        spec = self.data.get('default_play_type', {})
        return PlayType(
            pick_count=int(spec.get('pick_count', 4)),
            style=PlayStyle(spec.get('style', PlayStyle.FLEX.value))
        )

    @property
    def placeholder_name(self) -> str:
        return self.data.get('placeholder_name', 'Unknown Player')

    def historical_pairs(self, pick_count: Optional[int]) -> List[MoneyPair]:
        """Known (entry, payout) pairs for a pick count, empty when none are recorded."""
        if pick_count is None:
            return []
        pairs = self.data['historical_pairs'].get(str(pick_count), [])
        return [MoneyPair(float(entry), float(payout)) for entry, payout in pairs]

    def default_pair(self, pick_count: Optional[int]) -> MoneyPair:
        pair = self._by_pick_count(self.data['default_pairs'], pick_count)
        if pair is None:
            return self.hard_default
        return MoneyPair(float(pair[0]), float(pair[1]))

    def entry_range(self, pick_count: Optional[int]) -> Dict[str, float]:
        """Return {'min', 'max', 'typical'} entry bounds for a pick count."""
        entry_range = self._by_pick_count(self.data['entry_ranges'], pick_count) or {}
        return {
            'min': float(entry_range.get('min', 1)),
            'max': float(entry_range.get('max', 1000)),
            'typical': float(entry_range.get('typical', 5)),
        }

    def ratio_band(self, pick_count: Optional[int]) -> Tuple[float, float]:
        band = self._by_pick_count(self.data['payout_ratio_bands'], pick_count) or [1.5, 50]
        return (float(band[0]), float(band[1]))

    def line_range(self, sport: Sport, stat_type: StatType) -> Tuple[float, float]:
        """
        Plausible line range for a sport and stat.

        Lookup order: sport+stat, sport wildcard, global wildcard.
        """
        ranges = self.data['line_ranges']
        for sport_key, stat_key in (
            (sport.value, stat_type.value),
            (sport.value, WILDCARD),
            (WILDCARD, stat_type.value),
            (WILDCARD, WILDCARD),
        ):
            bounds = ranges.get(sport_key, {}).get(stat_key)
            if bounds is not None:
                return (float(bounds[0]), float(bounds[1]))
        return (0.5, 200.0)

    @property
    def known_players(self) -> List[Tuple[str, Sport]]:
        players = []
        for sport_label, names in self.data.get('known_players', {}).items():
            sport = Sport.from_label(sport_label)
            players.extend((name, sport) for name in names)
        return players

    @property
    def name_stopwords(self) -> Set[str]:
        return {word.lower() for word in self.data.get('name_stopwords', [])}
