"""
Arbitration of extracted candidates into a draft Lineup.
"""

import logging
from typing import Any, Dict, List, Optional

from pickslip.field_extractors import (
    build_date_extractor,
    build_direction_extractor,
    build_line_extractor,
    build_match_status_extractor,
    build_opponent_extractor,
    build_paid_amount_extractor,
    build_play_type_extractor,
    build_sport_extractor,
    build_stat_extractor,
    build_status_extractor,
    field_confidences,
)
from pickslip.models import (
    Candidate,
    Direction,
    DraftLineup,
    Lineup,
    LineupStatus,
    Player,
    Sport,
    StatType,
)
from pickslip.money_extractors import build_money_extractor, resolve_money
from pickslip.player_extractors import build_name_extractor
from pickslip.reference_data import ReferenceData
from pickslip.strategies import FieldExtractor, select_best

# Per-pick fields, named as the Player attributes they fill
PLAYER_FIELDS = ['name', 'sport', 'stat_type', 'line', 'direction', 'opponent']

REFUND_STATUSES = (LineupStatus.REFUND, LineupStatus.PUSH, LineupStatus.VOID, LineupStatus.CANCELLED)


class ExtractorBank:
    """All field extractors, built once from the reference tables and thresholds."""

    def __init__(
        self,
        reference: ReferenceData,
        params: Optional[Dict[str, Any]] = None,
        logger: Optional[logging.Logger] = None
    ):
        params = params or {}
        bonus = params.get('corroboration_bonus', 0.05)
        self.logger = logger

        play_type = build_play_type_extractor(reference.pick_counts, bonus, logger)
        self.extractors: Dict[str, FieldExtractor] = {
            'play_type': play_type,
            'money': build_money_extractor(reference, play_type, bonus, logger),
            'name': build_name_extractor(reference, bonus, logger, params.get('fuzzy_threshold', 0.85)),
            'sport': build_sport_extractor(bonus, logger),
            'stat_type': build_stat_extractor(bonus, logger),
            'line': build_line_extractor(params.get('half_point_bonus', 0.1), bonus=bonus, logger=logger),
            'direction': build_direction_extractor(bonus, logger),
            'opponent': build_opponent_extractor(bonus, logger),
            'status': build_status_extractor(bonus, logger),
            'paid_amount': build_paid_amount_extractor(bonus, logger),
            'date': build_date_extractor(bonus, logger),
            'match_status': build_match_status_extractor(bonus, logger),
        }

    def extract_all(self, text: str) -> Dict[str, List[Candidate]]:
        """Arbitrated candidates for every field."""
        candidates = {name: extractor.extract(text) for name, extractor in self.extractors.items()}
        if self.logger:
            counts = {name: len(found) for name, found in candidates.items()}
            self.logger.debug(f"Extracted candidates: {counts}")
        return candidates


class LineupBuilder:
    """Turns per-field candidates into a draft Lineup with ordered players."""

    DEFAULTS = {
        'sport': Sport.UNKNOWN,
        'stat_type': StatType.UNKNOWN,
        'line': 0.0,
        'direction': Direction.UNKNOWN,
        'opponent': None,
    }

    def __init__(
        self,
        reference: ReferenceData,
        params: Optional[Dict[str, Any]] = None,
        logger: Optional[logging.Logger] = None
    ):
        params = params or {}
        self.reference = reference
        self.acceptance_threshold = params.get('acceptance_threshold', 0.5)
        self.field_thresholds = params.get('field_thresholds', {})
        self.low_confidence_below = params.get('low_confidence_below', 0.6)
        self.bonus = params.get('corroboration_bonus', 0.05)
        self.logger = logger

    def threshold(self, field_name: str) -> float:
        return self.field_thresholds.get(field_name, self.acceptance_threshold)

    def default_for(self, field_name: str) -> Any:
        if field_name == 'name':
            return self.reference.placeholder_name
        return self.DEFAULTS[field_name]

    def _scalar(self, candidates: Dict[str, List[Candidate]], field_name: str) -> Optional[Candidate]:
        return select_best(candidates.get(field_name, []), self.threshold(field_name))

    def _positional(
        self,
        candidates: Dict[str, List[Candidate]],
        field_name: str,
        pick_count: int,
        low_confidence: List[str]
    ) -> List[Any]:
        """Assign the i-th accepted candidate to player i, cycling when short."""
        accepted = [c for c in candidates.get(field_name, []) if c.confidence >= self.threshold(field_name)]
        values = []
        for i in range(pick_count):
            label = f"players[{i}].{field_name}"
            if not accepted:
                values.append(self.default_for(field_name))
                low_confidence.append(label)
                continue
            candidate = accepted[i % len(accepted)]
            values.append(candidate.value)
            if i >= len(accepted) or candidate.confidence < self.low_confidence_below:
                low_confidence.append(label)
        return values

    def build(self, candidates: Dict[str, List[Candidate]]) -> DraftLineup:
        """
        Build the draft Lineup.

        Args:
            candidates: Arbitrated candidates per field, as from ExtractorBank.extract_all

        Returns:
            DraftLineup with the fields that fell back to defaults, were cycled,
            or were accepted below the low-confidence mark
        """
        low_confidence: List[str] = []

        play_type_candidate = self._scalar(candidates, 'play_type')
        if play_type_candidate is None:
            play_type = self.reference.default_play_type
            low_confidence.append('play_type')
        else:
            play_type = play_type_candidate.value
            if play_type_candidate.confidence < self.low_confidence_below:
                low_confidence.append('play_type')

        money, used_default = resolve_money(
            candidates.get('money', []),
            self.reference,
            self.threshold('money'),
            self.bonus
        )
        if used_default or money.confidence < self.low_confidence_below:
            low_confidence.append('money')

        pick_count = play_type.pick_count
        columns = {
            field_name: self._positional(candidates, field_name, pick_count, low_confidence)
            for field_name in PLAYER_FIELDS
        }
        match_statuses = [c.value for c in candidates.get('match_status', [])
                          if c.confidence >= self.threshold('match_status')]

        players = []
        for i in range(pick_count):
            attributes = {field_name: columns[field_name][i] for field_name in PLAYER_FIELDS}
            attributes['match_status'] = match_statuses[i] if i < len(match_statuses) else None
            players.append(Player(**attributes))

        status_candidate = self._scalar(candidates, 'status')
        status = status_candidate.value if status_candidate else LineupStatus.PENDING
        paid_candidate = self._scalar(candidates, 'paid_amount')
        date_candidate = self._scalar(candidates, 'date')

        lineup = Lineup(
            type=play_type.label,
            entry_amount=money.value.entry,
            potential_payout=money.value.payout,
            status=status,
            players=tuple(players),
            actual_payout=self.actual_payout(status, money.value.entry, money.value.payout,
                                             paid_candidate.value if paid_candidate else None),
            date=date_candidate.value if date_candidate else None,
        )

        confidences = field_confidences(candidates)
        confidences['money'] = money.confidence

        if self.logger:
            self.logger.info(f"Built draft lineup: {lineup.type}, ${lineup.entry_amount} -> ${lineup.potential_payout}, "
                             f"{len(low_confidence)} low-confidence fields")
        return DraftLineup(lineup=lineup, low_confidence_fields=tuple(low_confidence), field_confidences=confidences)

    @staticmethod
    def actual_payout(
        status: LineupStatus,
        entry: float,
        payout: float,
        paid_amount: Optional[float]
    ) -> Optional[float]:
        """Paid amount when shown, else implied by the outcome; None while pending or lost."""
        if paid_amount is not None:
            return paid_amount
        if status == LineupStatus.WIN:
            return payout
        if status in REFUND_STATUSES:
            return entry
        return None
