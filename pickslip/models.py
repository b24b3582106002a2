"""
Data model for pick-slip extraction.
Value types passed between pipeline stages and the JSON record shape
handed to the review and persistence collaborators.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, NamedTuple, Optional, Tuple, TypeVar

T = TypeVar('T')

PICK_COUNT_PATTERN = re.compile(r'^\s*(\d+)\s*-?\s*pick', re.IGNORECASE)


class RegionRole(Enum):
    """Role of an image region, or of a recognition pass."""

    HEADER = 'header'
    PICK_CARD = 'pick-card'
    FOOTER = 'footer'
    WHOLE_IMAGE = 'whole-image'
    COMPOSITE = 'composite'


class Sport(Enum):
    NBA = 'NBA'
    WNBA = 'WNBA'
    NBASLH = 'NBASLH'
    NFL = 'NFL'
    NHL = 'NHL'
    MLB = 'MLB'
    TENNIS = 'Tennis'
    GOLF = 'Golf'
    SOCCER = 'Soccer'
    MMA = 'MMA'
    HRDERBY = 'HRDERBY'
    ALLSTAR = 'ALLSTAR'
    UNKNOWN = 'Unknown'

    @classmethod
    def from_label(cls, label: Optional[str]) -> 'Sport':
        """Map a display label (case-insensitive) to a member, UNKNOWN if none matches."""
        if label:
            for member in cls:
                if member.value.lower() == label.strip().lower():
                    return member
        return cls.UNKNOWN


class StatType(Enum):
    # Basketball
    POINTS = 'Points'
    REBOUNDS = 'Rebounds'
    ASSISTS = 'Assists'
    PTS_REBS_ASTS = 'Pts+Rebs+Asts'
    PTS_REBS = 'Pts+Rebs'
    PTS_ASTS = 'Pts+Asts'
    REBS_ASTS = 'Rebs+Asts'
    FANTASY_SCORE = 'Fantasy Score'
    FG_MADE = 'FG Made'
    FG_ATTEMPTED = 'FG Attempted'
    THREE_PT_MADE = '3PT Made'
    FT_MADE = 'FT Made'
    STEALS = 'Steals'
    BLOCKS = 'Blocks'
    TURNOVERS = 'Turnovers'
    MINUTES_PLAYED = 'Minutes Played'
    # Baseball
    HITS = 'Hits'
    HOME_RUNS = 'Home Runs'
    RBIS = 'RBIs'
    RUNS = 'Runs'
    HITS_RUNS_RBIS = 'Hits+Runs+RBIs'
    PITCHER_STRIKEOUTS = 'Pitcher Strikeouts'
    HITTER_FANTASY_SCORE = 'Hitter Fantasy Score'
    STOLEN_BASES = 'Stolen Bases'
    WALKS = 'Walks'
    SAVES = 'Saves'
    INNINGS_PITCHED = 'Innings Pitched'
    EARNED_RUNS_ALLOWED = 'Earned Runs Allowed'
    PITCHES_THROWN = 'Pitches Thrown'
    HITS_ALLOWED = 'Hits Allowed'
    TOTAL_BASES = 'Total Bases'
    # Tennis
    TOTAL_GAMES = 'Total Games'
    TOTAL_GAMES_WON = 'Total Games Won'
    BREAK_POINTS_WON = 'Break Points Won'
    DOUBLE_FAULTS = 'Double Faults'
    ACES = 'Aces'
    # Golf
    STROKES = 'Strokes'
    BIRDIES_OR_BETTER = 'Birdies Or Better'
    BIRDIES = 'Birdies'
    EAGLES = 'Eagles'
    BOGEYS = 'Bogeys'
    FAIRWAYS_HIT = 'Fairways Hit'
    GREENS_IN_REGULATION = 'Greens In Regulation'
    # Soccer
    GOALS = 'Goals'
    SHOTS = 'Shots'
    SHOTS_ON_TARGET = 'Shots On Target'
    PASSES_ATTEMPTED = 'Passes Attempted'
    GOALIE_SAVES = 'Goalie Saves'
    TACKLES = 'Tackles'
    # MMA
    SIGNIFICANT_STRIKES = 'Significant Strikes'
    TAKEDOWNS = 'Takedowns'
    FIGHT_TIME = 'Fight Time (Mins)'
    # Football
    PASSING_YARDS = 'Passing Yards'
    RUSHING_YARDS = 'Rushing Yards'
    RECEIVING_YARDS = 'Receiving Yards'
    RECEPTIONS = 'Receptions'
    TOUCHDOWNS = 'Touchdowns'
    UNKNOWN = 'Unknown'

    @classmethod
    def from_label(cls, label: Optional[str]) -> 'StatType':
        if label:
            for member in cls:
                if member.value.lower() == label.strip().lower():
                    return member
        return cls.UNKNOWN


class Direction(Enum):
    OVER = 'over'
    UNDER = 'under'
    UNKNOWN = 'unknown'


class PlayStyle(Enum):
    FLEX = 'Flex'
    POWER = 'Power'


class LineupStatus(Enum):
    PENDING = 'pending'
    WIN = 'win'
    LOSS = 'loss'
    REFUND = 'refund'
    PUSH = 'push'
    CANCELLED = 'cancelled'
    VOID = 'void'


class MoneyPair(NamedTuple):
    entry: float
    payout: float


@dataclass(frozen=True)
class PlayType:
    """Pick count plus payout style, e.g. '6-Pick Flex Play'."""

    pick_count: int
    style: PlayStyle = PlayStyle.FLEX

    @property
    def label(self) -> str:
        return f"{self.pick_count}-Pick {self.style.value} Play"


def parse_pick_count(type_label: str) -> Optional[int]:
    """Return the numeral at the start of a lineup type label, or None."""
    match = PICK_COUNT_PATTERN.match(type_label or '')
    return int(match.group(1)) if match else None


@dataclass(frozen=True)
class Region:
    """Rectangular sub-area of the preprocessed image."""

    left: int
    top: int
    width: int
    height: int
    role: RegionRole

    def to_rect(self) -> Tuple[int, int, int, int]:
        return (self.left, self.top, self.width, self.height)


@dataclass(frozen=True)
class RecognitionResult:
    """Text and 0-100 confidence from one recognition pass."""

    text: str
    confidence: float
    region_role: RegionRole


@dataclass(frozen=True)
class Candidate(Generic[T]):
    """
    One strategy's guess for a field value.

    Attributes:
        value: Parsed value
        confidence: Strategy confidence (0-1)
        strategy_id: Identifier of the strategy that produced it
        span: (start, end) offsets of the match in the normalized text
    """

    value: T
    confidence: float
    strategy_id: str
    span: Optional[Tuple[int, int]] = None


@dataclass(frozen=True)
class Player:
    name: str
    sport: Sport
    stat_type: StatType
    line: float
    direction: Direction
    opponent: Optional[str] = None
    match_status: Optional[str] = None
    actual_value: Optional[float] = None
    is_win: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'name': self.name,
            'sport': self.sport.value,
            'statType': self.stat_type.value,
            'line': self.line,
            'direction': self.direction.value,
        }
        optional = {
            'opponent': self.opponent,
            'matchStatus': self.match_status,
            'actualValue': self.actual_value,
            'isWin': self.is_win,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Player':
        """
        Build a Player from its JSON shape.

        Raises:
            ValueError: If a required field is missing or has the wrong type
        """
        if not isinstance(data, dict):
            raise ValueError(f"Player must be an object, got {type(data).__name__}")
        for key in ('name', 'sport', 'statType'):
            if not isinstance(data.get(key), str):
                raise ValueError(f"Player field '{key}' must be a string")
        line = data.get('line')
        if isinstance(line, bool) or not isinstance(line, (int, float)):
            raise ValueError("Player field 'line' must be a number")
        try:
            direction = Direction(data.get('direction'))
        except ValueError:
            raise ValueError(f"Invalid player direction: {data.get('direction')!r}")
        is_win = data.get('isWin')
        if is_win is not None and not isinstance(is_win, bool):
            raise ValueError("Player field 'isWin' must be a boolean when present")
        return cls(
            name=data['name'],
            sport=Sport.from_label(data['sport']),
            stat_type=StatType.from_label(data['statType']),
            line=float(line),
            direction=direction,
            opponent=data.get('opponent'),
            match_status=data.get('matchStatus'),
            actual_value=data.get('actualValue'),
            is_win=is_win,
        )


@dataclass(frozen=True)
class Lineup:
    """One wager record. Never mutated; corrections build a new Lineup."""

    type: str
    entry_amount: float
    potential_payout: float
    status: LineupStatus = LineupStatus.PENDING
    players: Tuple[Player, ...] = ()
    actual_payout: Optional[float] = None
    date: Optional[str] = None

    @property
    def pick_count(self) -> Optional[int]:
        return parse_pick_count(self.type)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'type': self.type,
            'entryAmount': self.entry_amount,
            'potentialPayout': self.potential_payout,
            'status': self.status.value,
            'players': [player.to_dict() for player in self.players],
        }
        if self.actual_payout is not None:
            data['actualPayout'] = self.actual_payout
        if self.date is not None:
            data['date'] = self.date
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Lineup':
        """
        Build a Lineup from its JSON shape.

        Raises:
            ValueError: If the structure does not match the record shape
        """
        if not isinstance(data, dict):
            raise ValueError(f"Lineup must be an object, got {type(data).__name__}")
        if not isinstance(data.get('type'), str):
            raise ValueError("Lineup field 'type' must be a string")
        for key in ('entryAmount', 'potentialPayout'):
            value = data.get(key)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"Lineup field '{key}' must be a number")
        if not isinstance(data.get('players'), list):
            raise ValueError("Lineup field 'players' must be a list")
        try:
            status = LineupStatus(data.get('status', 'pending'))
        except ValueError:
            raise ValueError(f"Invalid lineup status: {data.get('status')!r}")
        return cls(
            type=data['type'],
            entry_amount=float(data['entryAmount']),
            potential_payout=float(data['potentialPayout']),
            status=status,
            players=tuple(Player.from_dict(p) for p in data['players']),
            actual_payout=data.get('actualPayout'),
            date=data.get('date'),
        )


@dataclass(frozen=True)
class ValidationReport:
    is_valid: bool
    errors: Tuple[str, ...] = ()
    corrected_lineup: Optional[Lineup] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {'isValid': self.is_valid, 'errors': list(self.errors)}
        if self.corrected_lineup is not None:
            data['correctedLineup'] = self.corrected_lineup.to_dict()
        return data


@dataclass(frozen=True)
class DraftLineup:
    """Builder output: the draft record plus the fields that fell back to defaults."""

    lineup: Lineup
    low_confidence_fields: Tuple[str, ...] = ()
    field_confidences: Dict[str, float] = field(default_factory=dict)
