"""
Extraction strategies for the scalar and per-pick slip fields other than
money and player names: play type, sport, stat type, line, direction,
opponent, lineup status, paid amount, slip date and match status.
"""

import logging
import re
from datetime import date
from typing import Dict, List, Optional, Pattern, Sequence, Tuple

from pickslip.models import (
    Candidate,
    Direction,
    LineupStatus,
    PlayStyle,
    PlayType,
    Sport,
    StatType,
)
from pickslip.strategies import FieldExtractor, RegexStrategy, Strategy

AMOUNT = r'\d{1,3}(?:,\d{3})+(?:\.\d{1,2})?|\d+(?:\.\d{1,2})?'
NUMBER = r'\d+(?:\.\d+)?'

MONTHS = {
    'jan': 1, 'feb': 2, 'mar': 3, 'apr': 4, 'may': 5, 'jun': 6,
    'jul': 7, 'aug': 8, 'sep': 9, 'oct': 10, 'nov': 11, 'dec': 12,
}

FULL_PLAY_TYPE_PATTERN = re.compile(r'(\d)\s*-?\s*pick\s+(flex|power)\s*play', re.IGNORECASE)
PICK_ONLY_PATTERN = re.compile(r'(\d)\s*-?\s*pick\b', re.IGNORECASE)
POWER_PLAY_PATTERN = re.compile(r'power\s*play', re.IGNORECASE)

SCOREBOARD_PATTERN = re.compile(r'\b([A-Z]{2,4})[ \t]+(\d{1,3})[ \t]*@[ \t]*([A-Z]{2,4})[ \t]+(\d{1,3})\b')
MATCHUP_PATTERN = re.compile(r'\b([A-Z]{2,4})[ \t]*(?:@|vs\.?)[ \t]*([A-Z]{2,4})\b')
NAMED_OPPONENT_PATTERN = re.compile(
    r"(@|\bvs\.?)[ \t]+([A-Z][A-Za-z'\-]*\.?(?:[ \t]+(?!(?:Final|Live|Halftime)\b)[A-Z][A-Za-z'\-]*\.?){0,2})"
)

DATE_PATTERN = re.compile(
    r'\b(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\.?[ \t]+(\d{1,2}),?[ \t]+(\d{4})\b',
    re.IGNORECASE
)
CLOCK_PATTERN = re.compile(r'\d{1,2}:\d{2}')
ROUND_PATTERN = re.compile(r'\b(?:RD|Rd|Round)[ \t]*\d{1,2}\b')
DOLLAR_TOKEN_PATTERN = re.compile(r'\$[ \t]*(?:' + AMOUNT + ')')
PERCENT_PATTERN = re.compile(NUMBER + r'[ \t]*%')

# League codes are matched case-sensitively, generic words are not
LEAGUE_CODES: List[Tuple[str, Sport]] = [
    (r'WNBA', Sport.WNBA),
    (r'NBASLH?', Sport.NBASLH),
    (r'NBA', Sport.NBA),
    (r'NFL', Sport.NFL),
    (r'NHL', Sport.NHL),
    (r'MLB', Sport.MLB),
    (r'L?PGA', Sport.GOLF),
    (r'TENNIS|ATP|WTA', Sport.TENNIS),
    (r'SOCCER|MLS|EPL', Sport.SOCCER),
    (r'MMA|UFC', Sport.MMA),
    (r'HRDERBY', Sport.HRDERBY),
    (r'ALLSTAR', Sport.ALLSTAR),
]

# Tournament rounds: "PGA Old Greenwood RD 1"
EVENT_PATTERN = re.compile(
    r'(?<![A-Za-z0-9])(?:' + '|'.join(code for code, _ in LEAGUE_CODES) + r')'
    r"(?:[ \t]+[A-Z][A-Za-z'\-]*){1,4}[ \t]+(?:RD|Rd|Round)[ \t]*\d{1,2}\b"
)

SPORT_WORDS: List[Tuple[str, Sport]] = [
    (r'basketball', Sport.NBA),
    (r'baseball', Sport.MLB),
    (r'football', Sport.NFL),
    (r'hockey', Sport.NHL),
    (r'tennis', Sport.TENNIS),
    (r'golf', Sport.GOLF),
    (r'soccer', Sport.SOCCER),
]

# Abbreviations the app uses besides the display names
STAT_ALIASES: List[Tuple[str, StatType]] = [
    (r'PRA', StatType.PTS_REBS_ASTS),
    (r'Points\s*\+\s*Rebounds\s*\+\s*Assists', StatType.PTS_REBS_ASTS),
    (r'3[ \t]*-?[ \t]*P(?:oin)?t(?:er)?s?[ \t]+Made', StatType.THREE_PT_MADE),
    (r'H\s*\+\s*R\s*\+\s*RBIs?', StatType.HITS_RUNS_RBIS),
    (r'Strikeouts', StatType.PITCHER_STRIKEOUTS),
    (r'Sig(?:\.|nificant)?[ \t]+Strikes', StatType.SIGNIFICANT_STRIKES),
    (r'Fantasy[ \t]+Points', StatType.FANTASY_SCORE),
]

STATUS_KEYWORDS: List[Tuple[str, Pattern, LineupStatus, float]] = [
    ('status-refund', re.compile(r'\b(?:self[ \t]*)?refund(?:ed)?\b', re.IGNORECASE), LineupStatus.REFUND, 0.9),
    ('status-cancelled', re.compile(r'\bcancel(?:l)?ed\b', re.IGNORECASE), LineupStatus.CANCELLED, 0.85),
    ('status-void', re.compile(r'\bvoid(?:ed)?\b', re.IGNORECASE), LineupStatus.VOID, 0.85),
    ('status-push', re.compile(r'\bpush\b', re.IGNORECASE), LineupStatus.PUSH, 0.8),
    ('status-loss', re.compile(r'\b(?:loss|lost)\b', re.IGNORECASE), LineupStatus.LOSS, 0.8),
    ('status-win', re.compile(r'(?<!to )\b(?:win|won|paid)\b', re.IGNORECASE), LineupStatus.WIN, 0.8),
]

MATCH_STATUS_PATTERN = re.compile(
    r'\b(?:(Final(?:[ \t]*OT)?)|(Live)|(now)|(Halftime)|(Q[1-4][ \t]+\d{1,2}:\d{2}|\d{1,2}:\d{2}[ \t]+Q[1-4]))\b'
)


def parse_amount(token: str) -> float:
    return float(token.replace(',', ''))


def _word_pattern(alternation: str, flags: int = 0) -> Pattern:
    return re.compile(r'(?<![A-Za-z0-9])(?:' + alternation + r')(?![A-Za-z])', flags)


def stat_phrase_pattern(label: str) -> str:
    """Regex for a stat display label with flexible spacing and an optional plural."""
    parts = []
    for token in re.split(r'(\s+|\+)', label):
        if not token:
            continue
        if token.isspace():
            parts.append(r'\s+')
        elif token == '+':
            parts.append(r'\s*\+\s*')
        else:
            parts.append(re.escape(token))
    if label[-1].isalpha():
        if label.endswith('s'):
            parts[-1] = parts[-1][:-1] + 's?'
        else:
            parts[-1] = parts[-1] + 's?'
    return ''.join(parts)


def is_compound_stat(label: str) -> bool:
    return ' ' in label or '+' in label


def stat_entries() -> List[Tuple[str, StatType, float]]:
    """(pattern, stat, confidence) for every stat label and alias."""
    entries = []
    for alias, stat in STAT_ALIASES:
        entries.append((alias, stat, 0.9))
    for stat in StatType:
        if stat == StatType.UNKNOWN:
            continue
        confidence = 0.9 if is_compound_stat(stat.value) else 0.6
        entries.append((stat_phrase_pattern(stat.value), stat, confidence))
    return entries


STAT_ALTERNATION = '|'.join(pattern for pattern, _, _ in stat_entries())


class NumberStrategy(Strategy[float]):
    """
    Line numbers from one pattern, restricted to a plausible range.

    Numbers inside money tokens, pick counts, scoreboards, dates, clocks and
    percentages are skipped. Half-point values get a small bonus.
    """

    EXCLUSIONS = [
        DOLLAR_TOKEN_PATTERN,
        PICK_ONLY_PATTERN,
        SCOREBOARD_PATTERN,
        DATE_PATTERN,
        CLOCK_PATTERN,
        PERCENT_PATTERN,
        ROUND_PATTERN,
    ]

    def __init__(
        self,
        strategy_id: str,
        pattern: Pattern,
        confidence: float,
        bounds: Tuple[float, float] = (0.5, 200.0),
        half_point_bonus: float = 0.1,
        fractional_only: bool = False
    ):
        """
        Args:
            strategy_id: Identifier recorded on each candidate
            pattern: Pattern whose group 1 is the number
            confidence: Base confidence
            bounds: Inclusive range of accepted values
            half_point_bonus: Added for values where x % 0.5 == 0
            fractional_only: Restrict the bonus to .5 values, leaving integers at the base confidence
        """
        self.strategy_id = strategy_id
        self.pattern = pattern
        self.confidence = confidence
        self.bounds = bounds
        self.half_point_bonus = half_point_bonus
        self.fractional_only = fractional_only

    def earns_bonus(self, value: float) -> bool:
        if self.fractional_only:
            return value % 1 == 0.5
        return value % 0.5 == 0

    def excluded_spans(self, text: str) -> List[Tuple[int, int]]:
        return [m.span() for pattern in self.EXCLUSIONS for m in pattern.finditer(text)]

    def extract(self, text: str) -> List[Candidate[float]]:
        excluded = self.excluded_spans(text)
        candidates = []
        for match in self.pattern.finditer(text):
            start, end = match.span(1)
            if any(s <= start and end <= e for s, e in excluded):
                continue
            value = float(match.group(1))
            if not (self.bounds[0] <= value <= self.bounds[1]):
                continue
            confidence = self.confidence
            if self.earns_bonus(value):
                confidence = min(1.0, confidence + self.half_point_bonus)
            candidates.append(Candidate(value, confidence, self.strategy_id, (start, end)))
        return candidates


class StatusStrategy(Strategy[LineupStatus]):
    """Lineup outcome keywords. Absence of all keywords yields nothing (pending)."""

    strategy_id = 'status-keywords'

    def extract(self, text: str) -> List[Candidate[LineupStatus]]:
        candidates = []
        for strategy_id, pattern, status, confidence in STATUS_KEYWORDS:
            for match in pattern.finditer(text):
                candidates.append(Candidate(status, confidence, strategy_id, match.span()))
        return candidates


def _play_type_from_full(match: re.Match, pick_counts: Sequence[int]) -> Optional[PlayType]:
    count = int(match.group(1))
    if count not in pick_counts:
        return None
    return PlayType(count, PlayStyle(match.group(2).capitalize()))


class PickOnlyStrategy(Strategy[PlayType]):
    """'<N>-Pick' without a style; Power only if 'power play' appears anywhere."""

    strategy_id = 'play-type-pick-only'

    def __init__(self, pick_counts: Sequence[int], confidence: float = 0.6):
        self.pick_counts = pick_counts
        self.confidence = confidence

    def extract(self, text: str) -> List[Candidate[PlayType]]:
        style = PlayStyle.POWER if POWER_PLAY_PATTERN.search(text) else PlayStyle.FLEX
        candidates = []
        for match in PICK_ONLY_PATTERN.finditer(text):
            count = int(match.group(1))
            if count in self.pick_counts:
                candidates.append(Candidate(PlayType(count, style), self.confidence, self.strategy_id, match.span()))
        return candidates


def build_play_type_extractor(
    pick_counts: Sequence[int],
    bonus: float = 0.05,
    logger: Optional[logging.Logger] = None
) -> FieldExtractor[PlayType]:
    return FieldExtractor('play_type', [
        RegexStrategy('play-type-full', FULL_PLAY_TYPE_PATTERN, 0.9, lambda m: _play_type_from_full(m, pick_counts)),
        PickOnlyStrategy(pick_counts),
    ], bonus=bonus, logger=logger)


def build_sport_extractor(bonus: float = 0.05, logger: Optional[logging.Logger] = None) -> FieldExtractor[Sport]:
    codes = {code: sport for code, sport in LEAGUE_CODES}
    words = {word: sport for word, sport in SPORT_WORDS}

    def from_code(match: re.Match) -> Optional[Sport]:
        for code, sport in codes.items():
            if re.fullmatch(code, match.group(0)):
                return sport
        return None

    def from_word(match: re.Match) -> Optional[Sport]:
        return words.get(match.group(0).lower())

    return FieldExtractor('sport', [
        RegexStrategy('sport-league-code', _word_pattern('|'.join(codes)), 0.9, from_code),
        RegexStrategy('sport-word', _word_pattern('|'.join(words), re.IGNORECASE), 0.6, from_word),
    ], positional=True, bonus=bonus, logger=logger)


def build_stat_extractor(bonus: float = 0.05, logger: Optional[logging.Logger] = None) -> FieldExtractor[StatType]:
    strategies = []
    for pattern, stat, confidence in stat_entries():
        kind = 'phrase' if confidence >= 0.9 else 'word'
        strategies.append(RegexStrategy(
            f"stat-{kind}-{stat.name.lower()}",
            _word_pattern(pattern, re.IGNORECASE),
            confidence,
            lambda m, stat=stat: stat
        ))
    return FieldExtractor('stat_type', strategies, positional=True, bonus=bonus, logger=logger)


def build_line_extractor(
    half_point_bonus: float = 0.1,
    bounds: Tuple[float, float] = (0.5, 200.0),
    bonus: float = 0.05,
    logger: Optional[logging.Logger] = None
) -> FieldExtractor[float]:
    before_stat = re.compile(
        r'(?<![\w.$:,])(' + NUMBER + r')\s+(?=(?:' + STAT_ALTERNATION + r')(?![A-Za-z]))',
        re.IGNORECASE
    )
    after_marker = re.compile(
        r'(?:[↑↓]|\b(?:over|under|more|less|higher|lower)\b)[ \t]*(' + NUMBER + r')(?![\w%:]|\.\d)',
        re.IGNORECASE
    )
    bare = re.compile(r'(?<![\w.$:,])(' + NUMBER + r')(?![\w%:]|\.\d|,\d)')
    return FieldExtractor('line', [
        NumberStrategy('line-before-stat', before_stat, 0.85, bounds, half_point_bonus),
        NumberStrategy('line-after-direction', after_marker, 0.8, bounds, half_point_bonus),
        # Unanchored integers (jersey numbers, rounds) stay below acceptance
        NumberStrategy('line-bare-number', bare, 0.45, bounds, half_point_bonus, fractional_only=True),
    ], positional=True, bonus=bonus, logger=logger)


def build_direction_extractor(bonus: float = 0.05, logger: Optional[logging.Logger] = None) -> FieldExtractor[Direction]:
    def from_arrow(match: re.Match) -> Direction:
        return Direction.OVER if match.group(0) == '↑' else Direction.UNDER

    def from_word(match: re.Match) -> Direction:
        if match.group(0).lower() in ('over', 'more', 'higher'):
            return Direction.OVER
        return Direction.UNDER

    return FieldExtractor('direction', [
        RegexStrategy('direction-arrow', re.compile(r'[↑↓]'), 0.9, from_arrow),
        RegexStrategy(
            'direction-word',
            re.compile(r'\b(?:over|under|more|less|higher|lower)\b', re.IGNORECASE),
            0.7,
            from_word
        ),
    ], positional=True, bonus=bonus, logger=logger)


def build_opponent_extractor(bonus: float = 0.05, logger: Optional[logging.Logger] = None) -> FieldExtractor[str]:
    def scoreboard(match: re.Match) -> str:
        return f"{match.group(1)} {match.group(2)} @ {match.group(3)} {match.group(4)}"

    def matchup(match: re.Match) -> str:
        return f"{match.group(1)} @ {match.group(2)}"

    def named(match: re.Match) -> str:
        prefix = '@' if match.group(1) == '@' else 'vs'
        return f"{prefix} {match.group(2)}"

    def event(match: re.Match) -> str:
        return re.sub(r'[ \t]+', ' ', match.group(0))

    return FieldExtractor('opponent', [
        RegexStrategy('opponent-scoreboard', SCOREBOARD_PATTERN, 0.9, scoreboard),
        RegexStrategy('opponent-event', EVENT_PATTERN, 0.8, event),
        RegexStrategy('opponent-matchup', MATCHUP_PATTERN, 0.75, matchup),
        RegexStrategy('opponent-named', NAMED_OPPONENT_PATTERN, 0.6, named),
    ], positional=True, bonus=bonus, logger=logger)


def build_status_extractor(bonus: float = 0.05, logger: Optional[logging.Logger] = None) -> FieldExtractor[LineupStatus]:
    return FieldExtractor('status', [StatusStrategy()], bonus=bonus, logger=logger)


def build_paid_amount_extractor(bonus: float = 0.05, logger: Optional[logging.Logger] = None) -> FieldExtractor[float]:
    pattern = re.compile(r'\b(?:paid|won)[ \t:]*\$[ \t]*(' + AMOUNT + ')', re.IGNORECASE)
    return FieldExtractor('paid_amount', [
        RegexStrategy('paid-amount', pattern, 0.85, lambda m: parse_amount(m.group(1))),
    ], bonus=bonus, logger=logger)


def _iso_date(match: re.Match) -> Optional[str]:
    try:
        return date(int(match.group(3)), MONTHS[match.group(1).lower()[:3]], int(match.group(2))).isoformat()
    except ValueError:
        return None


def build_date_extractor(bonus: float = 0.05, logger: Optional[logging.Logger] = None) -> FieldExtractor[str]:
    return FieldExtractor('date', [
        RegexStrategy('date-month-name', DATE_PATTERN, 0.8, _iso_date),
    ], bonus=bonus, logger=logger)


def _match_status(match: re.Match) -> str:
    final, live, now, halftime, clock = match.groups()
    if final:
        return re.sub(r'[ \t]+', ' ', final)
    if clock:
        return re.sub(r'[ \t]+', ' ', clock)
    return live or now or halftime


def build_match_status_extractor(bonus: float = 0.05, logger: Optional[logging.Logger] = None) -> FieldExtractor[str]:
    return FieldExtractor('match_status', [
        RegexStrategy('match-status', MATCH_STATUS_PATTERN, 0.8, _match_status),
    ], positional=True, bonus=bonus, logger=logger)


def field_confidences(candidates: Dict[str, List[Candidate]]) -> Dict[str, float]:
    """Best confidence seen per field, 0.0 for fields with no candidates."""
    return {
        name: max((c.confidence for c in found), default=0.0)
        for name, found in candidates.items()
    }
