"""
Text normalization for recognized slip text.
"""

import re

ARTIFACT_PATTERN = re.compile(r'[|\\/_~]')
HORIZONTAL_SPACE_PATTERN = re.compile(r'[^\S\n]+')

# Digit misreads inside words: "P0ints" -> "Points", "1ine" -> "line", "10ad" -> "load".
# A digit run is repaired only after a letter or at a word start, so "$10to" and "1st" keep their digits.
DIGIT_MISREAD_PATTERN = re.compile(r'(?:(?<=[A-Za-z])|(?<![\w$.,]))[015]+(?=[a-z])(?!(?:st|nd|rd|th)\b)')
# Capital misreads only mid-word so capitalized names survive: "AsSists" -> "Assists", "Ionescu" stays
CAPITAL_MISREAD_PATTERN = re.compile(r'(?<=[a-z])[IS](?=[a-z])')

MISREAD_MAP = {'0': 'o', '1': 'l', '5': 's', 'I': 'l', 'S': 's'}


def _swap(match: re.Match) -> str:
    return ''.join(MISREAD_MAP[ch] for ch in match.group(0))


def _fix_misreads(text: str) -> str:
    while True:
        fixed = DIGIT_MISREAD_PATTERN.sub(_swap, text)
        fixed = CAPITAL_MISREAD_PATTERN.sub(_swap, fixed)
        if fixed == text:
            return fixed
        text = fixed


def normalize_text(text: str) -> str:
    """
    Clean recognized text. Deterministic and idempotent.

    Replaces scan artifacts with spaces, repairs digit/letter misreads in
    word context, collapses horizontal whitespace, trims each line and
    drops blank lines. Line breaks are preserved.

    Args:
        text: Canonical text from fusion

    Returns:
        Normalized text
    """
    if not text:
        return ''
    text = ARTIFACT_PATTERN.sub(' ', text)
    text = _fix_misreads(text)
    lines = (HORIZONTAL_SPACE_PATTERN.sub(' ', line).strip() for line in text.split('\n'))
    return '\n'.join(line for line in lines if line)
