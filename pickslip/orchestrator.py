"""
Recognition orchestration.
Runs one engine pass per region with the profile for its role, then a
whole-image backup pass, all while holding the engine handle.
"""

import logging
import numpy as np
from typing import Any, Callable, Dict, List, Optional, Tuple

from pickslip.engine_handle import EngineHandle
from pickslip.exceptions import EngineError
from pickslip.models import RecognitionResult, Region, RegionRole

ProgressCallback = Callable[[str, float], None]


class RecognitionOrchestrator:
    """Drives the engine over the segmented regions of one image."""

    def __init__(
        self,
        handle: EngineHandle,
        profiles: Dict[str, Dict[str, Any]],
        logger: Optional[logging.Logger] = None
    ):
        """
        Args:
            handle: Engine handle shared with other pipelines
            profiles: Parameter profiles keyed by region role value
            logger: Logger instance
        """
        self.handle = handle
        self.profiles = profiles
        self.logger = logger

    def profile_for(self, role: RegionRole) -> Dict[str, Any]:
        """Header uses its own profile; everything else reads like a pick card."""
        if role.value in self.profiles:
            return self.profiles[role.value]
        return self.profiles.get(RegionRole.PICK_CARD.value, {})

    def recognize_all(
        self,
        image: np.ndarray,
        regions: List[Region],
        on_progress: Optional[ProgressCallback] = None,
        progress_range: Tuple[float, float] = (20.0, 80.0)
    ) -> List[RecognitionResult]:
        """
        Recognize every region, then the whole image.

        Args:
            image: Preprocessed buffer
            regions: Ordered regions from the segmenter
            on_progress: Called after each pass with (status, percent)
            progress_range: Percent span this stage reports across

        Returns:
            One result per region in order, followed by the whole-image result

        Raises:
            EngineError: If any engine call fails; no partial results are returned
        """
        passes: List[Tuple[Optional[Region], RegionRole]] = [(region, region.role) for region in regions]
        passes.append((None, RegionRole.WHOLE_IMAGE))

        start, end = progress_range
        step = (end - start) / len(passes)
        results = []

        with self.handle.session():
            for i, (region, role) in enumerate(passes):
                profile_role = RegionRole.PICK_CARD if role == RegionRole.WHOLE_IMAGE else role
                try:
                    self.handle.configure(self.profile_for(profile_role))
                    text, confidence = self.handle.recognize(image, region)
                    text = text or ''
                    confidence = max(0.0, min(100.0, float(confidence)))
                except Exception as e:
                    if self.logger:
                        self.logger.error(f"Recognition pass {i + 1}/{len(passes)} ({role.value}) failed: {e}")
                    raise EngineError(f"Text recognition failed on {role.value} pass: {e}") from e

                results.append(RecognitionResult(text=text, confidence=confidence, region_role=role))

                if self.logger:
                    self.logger.debug(f"Pass {i + 1}/{len(passes)} ({role.value}): {len(text)} chars (conf: {confidence:.1f})")

                if on_progress:
                    on_progress(f"Recognized {role.value} ({i + 1}/{len(passes)})", start + step * (i + 1))

        if self.logger:
            self.logger.info(f"Completed {len(results)} recognition passes")
        return results
