"""
Fixed-layout region segmentation for pick-slip screenshots.
"""

import logging
import math
from typing import Any, Dict, List, Optional

from pickslip.models import Region, RegionRole


class RegionSegmenter:
    """
    Splits a buffer into header, pick-card and footer bands.

    The layout depends only on the buffer dimensions, never on its pixels,
    so a clean and a noisy capture of the same size segment identically.
    """

    def __init__(self, params: Optional[Dict[str, Any]] = None, logger: Optional[logging.Logger] = None):
        params = params or {}
        self.header_fraction = params.get('header_fraction', 0.15)
        self.footer_fraction = params.get('footer_fraction', 0.10)
        self.card_height_fraction = params.get('card_height_fraction', 0.12)
        self.min_cards = params.get('min_cards', 2)
        self.max_cards = params.get('max_cards', 6)
        self.logger = logger

    def card_count(self, height: int) -> int:
        """Number of pick-card bands for a buffer of the given height."""
        player_area = height * (1 - self.header_fraction - self.footer_fraction)
        expected_card_height = height * self.card_height_fraction
        if expected_card_height <= 0:
            return self.min_cards
        count = math.floor(player_area / expected_card_height)
        return max(self.min_cards, min(self.max_cards, count))

    def segment(self, width: int, height: int) -> List[Region]:
        """
        Compute the ordered regions for a buffer.

        Args:
            width: Buffer width in pixels
            height: Buffer height in pixels

        Returns:
            Header, pick cards top to bottom, then footer. Every region is at
            least 1x1 pixel, even for degenerate sizes.
        """
        width = max(1, int(width))
        height = max(1, int(height))

        header_height = max(1, int(height * self.header_fraction))
        footer_height = max(1, int(height * self.footer_fraction))
        footer_top = max(header_height, height - footer_height)
        player_height = max(0, footer_top - header_height)

        num_cards = self.card_count(height)
        card_height = max(1, player_height // num_cards)

        regions = [Region(0, 0, width, header_height, RegionRole.HEADER)]
        for i in range(num_cards):
            regions.append(Region(0, header_height + i * card_height, width, card_height, RegionRole.PICK_CARD))
        regions.append(Region(0, footer_top, width, footer_height, RegionRole.FOOTER))

        if self.logger:
            self.logger.debug(f"Segmented {width}x{height} into {num_cards} pick cards")
        return regions
