"""
Player name extraction.
"""

import logging
import re
from difflib import SequenceMatcher
from typing import Iterable, List, Optional, Pattern, Sequence, Set, Tuple

from pickslip.field_extractors import CLOCK_PATTERN, LEAGUE_CODES, ROUND_PATTERN
from pickslip.models import Candidate, Sport, StatType
from pickslip.reference_data import ReferenceData
from pickslip.strategies import FieldExtractor, Strategy

NAME_TOKEN = r"[A-ZÀ-Þ][a-zß-ÿ]+(?:[A-Z][a-zß-ÿ]+)?(?:[-'][A-ZÀ-Þ][a-zß-ÿ]+)?"
INITIAL = r"[A-Z]\."
SEPARATOR = r"[ \t]+"
SUFFIX = r"(?:Jr\.?|Sr\.?|III|II|IV)"
NAME_START = r"(?<![A-Za-zÀ-ÿ'\-])"
NAME_END = r"(?![A-Za-zß-ÿ'\-])"

NAME_SHAPE_PATTERN = re.compile(r"^[A-ZÀ-Þ][A-Za-zÀ-ÿ .'\-]*$")
OPPONENT_PREFIX_PATTERN = re.compile(r"(?:@|\bvs\.?)[ \t]*$", re.IGNORECASE)

# Event lines ("PGA Old Greenwood RD 1", "WNBA Q3 4:12") hold venues and clocks, not players
LEAGUE_CODE_PATTERN = re.compile(
    r'(?<![A-Za-z0-9])(?:' + '|'.join(code for code, _ in LEAGUE_CODES) + r')(?![A-Za-z])'
)
EVENT_MARKERS = [LEAGUE_CODE_PATTERN, ROUND_PATTERN, CLOCK_PATTERN]


def is_plausible_name(name: str) -> bool:
    """
    Name-shape predicate shared by the extractors and the validator.

    At least 4 characters, contains a space, starts with a capital and uses
    only letters, spaces and the name punctuation - ' .
    """
    if not name or len(name) < 4 or ' ' not in name:
        return False
    if any(ch.isdigit() for ch in name):
        return False
    return bool(NAME_SHAPE_PATTERN.match(name))


def vocabulary_stopwords() -> Set[str]:
    """Lowercased words from stat and sport labels, never part of a name."""
    words = set()
    for label in [s.value for s in StatType] + [s.value for s in Sport]:
        words.update(w.lower() for w in re.split(r'[\s+()]+', label) if w)
    words.discard('unknown')
    return words


def is_event_line(text: str, start: int, end: int) -> bool:
    """True when the line holding text[start:end] carries a league code, round marker or clock."""
    line_start = text.rfind('\n', 0, start) + 1
    line_end = text.find('\n', end)
    line = text[line_start:] if line_end == -1 else text[line_start:line_end]
    return any(pattern.search(line) for pattern in EVENT_MARKERS)


def match_known_name(
    value: str,
    known_names: Sequence[str],
    fuzzy_threshold: float = 0.85
) -> Tuple[Optional[str], float]:
    """
    Match a name against the known players, exactly first and then fuzzily.

    Args:
        value: Name read from the slip
        known_names: Canonical player names
        fuzzy_threshold: Minimum similarity score for fuzzy matching (0-1)

    Returns:
        Tuple of (matched_name or None, best similarity score)
    """
    if value in known_names:
        return value, 1.0

    best_match = None
    best_score = 0.0
    for name in known_names:
        ratio = SequenceMatcher(None, value.lower(), name.lower()).ratio()
        if ratio > best_score:
            best_score = ratio
            best_match = name

    if best_score >= fuzzy_threshold:
        return best_match, best_score
    return None, best_score


def _overlapping(body: str) -> Pattern:
    # Zero-width anchor so every start position is tried
    return re.compile(NAME_START + r'(?=(' + body + NAME_END + r'))')


class NamePatternStrategy(Strategy[str]):
    """
    Capitalized token sequences that pass the shared name filter.

    Names within the fuzzy threshold of a known player are replaced by the
    known spelling.
    """

    def __init__(
        self,
        strategy_id: str,
        pattern: Pattern,
        confidence: float,
        stopwords: Set[str],
        known_names: Sequence[str] = (),
        fuzzy_threshold: float = 0.85,
        logger: Optional[logging.Logger] = None
    ):
        self.strategy_id = strategy_id
        self.pattern = pattern
        self.confidence = confidence
        self.stopwords = stopwords
        self.known_names = list(known_names)
        self.fuzzy_threshold = fuzzy_threshold
        self.logger = logger

    def accepts(self, name: str) -> bool:
        if not is_plausible_name(name):
            return False
        tokens = re.split(r'[ \t]+', name)
        return not any(token.lower().rstrip('.') in self.stopwords for token in tokens)

    def canonical(self, name: str) -> str:
        if not self.known_names:
            return name
        matched, score = match_known_name(name, self.known_names, self.fuzzy_threshold)
        if matched is None:
            return name
        if matched != name and self.logger:
            self.logger.debug(f"Fuzzy matched '{name}' to '{matched}' (score: {score:.2f})")
        return matched

    def extract(self, text: str) -> List[Candidate[str]]:
        candidates = []
        for match in self.pattern.finditer(text):
            start, end = match.span(1)
            if OPPONENT_PREFIX_PATTERN.search(text[:start]) or is_event_line(text, start, end):
                continue
            name = re.sub(r'[ \t]+', ' ', match.group(1))
            if self.accepts(name):
                candidates.append(Candidate(self.canonical(name), self.confidence, self.strategy_id, (start, end)))
        return candidates


class KnownPlayerStrategy(Strategy[str]):
    """Exact (case-insensitive) matches against the reference player list."""

    strategy_id = 'name-known-player'

    def __init__(self, names: Iterable[str], confidence: float = 0.9):
        self.confidence = confidence
        self.patterns = []
        for name in names:
            body = SEPARATOR.join(re.escape(part) for part in name.split())
            self.patterns.append((name, re.compile(NAME_START + body + NAME_END, re.IGNORECASE)))

    def extract(self, text: str) -> List[Candidate[str]]:
        candidates = []
        for name, pattern in self.patterns:
            for match in pattern.finditer(text):
                candidates.append(Candidate(name, self.confidence, self.strategy_id, match.span()))
        return candidates


def build_name_extractor(
    reference: ReferenceData,
    bonus: float = 0.05,
    logger: Optional[logging.Logger] = None,
    fuzzy_threshold: float = 0.85
) -> FieldExtractor[str]:
    stopwords = reference.name_stopwords | vocabulary_stopwords()
    known_names = [name for name, _ in reference.known_players]
    two_tokens = NAME_TOKEN + SEPARATOR + NAME_TOKEN
    three_tokens = NAME_TOKEN + SEPARATOR + f"(?:{INITIAL}|{NAME_TOKEN})" + SEPARATOR + NAME_TOKEN
    suffixed = NAME_TOKEN + f"(?:{SEPARATOR}{NAME_TOKEN}){{1,2}}" + SEPARATOR + SUFFIX

    def shape(strategy_id: str, body: str, confidence: float) -> NamePatternStrategy:
        return NamePatternStrategy(
            strategy_id, _overlapping(body), confidence, stopwords, known_names, fuzzy_threshold, logger
        )

    return FieldExtractor('name', [
        shape('name-suffixed', suffixed, 0.9),
        KnownPlayerStrategy(known_names),
        shape('name-three-token', three_tokens, 0.8),
        shape('name-two-token', two_tokens, 0.7),
    ], positional=True, bonus=bonus, logger=logger)
