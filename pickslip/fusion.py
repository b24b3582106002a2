"""
Result fusion: choose one canonical text from several recognition passes.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from pickslip.models import RecognitionResult, RegionRole

DOLLAR_PATTERN = re.compile(r'\$\d+')
NOISE_PATTERN = re.compile(r'[^A-Za-z0-9\s$.\-+@:,%]')
PASS_ROLES = (RegionRole.HEADER, RegionRole.PICK_CARD, RegionRole.FOOTER)


class ResultFusion:
    """Scores recognition results and selects the canonical text."""

    def __init__(self, params: Optional[Dict[str, Any]] = None, logger: Optional[logging.Logger] = None):
        params = params or {}
        self.keywords = [k.lower() for k in params.get('keywords', ['pick', 'flex', 'play'])]
        self.keyword_bonus = params.get('keyword_bonus', 10)
        self.noise_penalty = params.get('noise_penalty', 0.5)
        self.include_composite = params.get('include_composite', True)
        self.logger = logger

    def score(self, result: RecognitionResult) -> float:
        """
        Confidence plus a bonus for each slip keyword and a dollar amount,
        minus a penalty per character outside the expected alphabet.
        """
        lowered = result.text.lower()
        bonus = sum(self.keyword_bonus for keyword in self.keywords if keyword in lowered)
        if DOLLAR_PATTERN.search(result.text):
            bonus += self.keyword_bonus
        noise = len(NOISE_PATTERN.findall(result.text))
        return result.confidence + bonus - self.noise_penalty * noise

    def composite(self, results: List[RecognitionResult]) -> Optional[RecognitionResult]:
        """Stitch the region passes top to bottom into one result."""
        region_results = [r for r in results if r.region_role in PASS_ROLES]
        if not region_results:
            return None
        text = '\n'.join(r.text for r in region_results if r.text.strip())
        confidence = sum(r.confidence for r in region_results) / len(region_results)
        return RecognitionResult(text=text, confidence=confidence, region_role=RegionRole.COMPOSITE)

    def with_composite(self, results: List[RecognitionResult]) -> List[RecognitionResult]:
        """Append the composite result last so ties still favour real passes."""
        if not self.include_composite:
            return list(results)
        composite = self.composite(results)
        return list(results) + ([composite] if composite is not None else [])

    def select(self, results: List[RecognitionResult]) -> Optional[RecognitionResult]:
        """Highest-scoring result; the earliest wins ties. None for an empty list."""
        best = None
        best_score = None
        for result in results:
            score = self.score(result)
            if best_score is None or score > best_score:
                best, best_score = result, score

        if self.logger and best is not None:
            self.logger.debug(f"Selected {best.region_role.value} result (score: {best_score:.1f}) from {len(results)} candidates")
        return best

    def fuse(self, results: List[RecognitionResult]) -> str:
        """Canonical text for a run, empty when nothing was recognized."""
        best = self.select(self.with_composite(results))
        return best.text if best is not None else ''
