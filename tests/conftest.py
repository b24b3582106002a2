"""Shared fixtures for the pick-slip pipeline tests."""

import logging

import cv2
import numpy as np
import pytest

from pickslip.config_manager import ConfigManager
from pickslip.pipeline import default_config_path
from pickslip.reference_data import ReferenceData


class FakeEngine:
    """Scripted recognition engine keyed by region role value."""

    def __init__(self, texts=None, default=('', 0.0), fail_on=None):
        self.texts = texts or {}
        self.default = default
        self.fail_on = fail_on
        self.calls = []

    def recognize(self, image, region, profile):
        role = region.role.value if region is not None else 'whole-image'
        self.calls.append((role, dict(profile)))
        if self.fail_on is not None and role == self.fail_on:
            raise RuntimeError(f"engine crashed on {role}")
        return self.texts.get(role, self.default)


def make_slip_image(width=600, height=1200, noise=False, seed=0):
    """Encoded PNG of a light screenshot with dark text-like bars."""
    image = np.full((height, width, 3), 245, dtype=np.uint8)
    for i in range(8):
        top = 60 + i * (height // 9)
        cv2.rectangle(image, (40, top), (width - 40, top + 30), (20, 20, 20), -1)
    if noise:
        rng = np.random.default_rng(seed)
        speckle = rng.integers(0, 60, size=image.shape, dtype=np.uint8)
        image = cv2.subtract(image, speckle)
    ok, encoded = cv2.imencode('.png', image)
    assert ok
    return encoded.tobytes()


@pytest.fixture
def null_logger():
    logger = logging.getLogger('pickslip-tests')
    logger.handlers.clear()
    logger.addHandler(logging.NullHandler())
    logger.propagate = False
    return logger


@pytest.fixture
def config_manager(null_logger):
    return ConfigManager(default_config_path(), null_logger)


@pytest.fixture
def reference(config_manager):
    return ReferenceData.load(config_manager.get_reference_data_path())


@pytest.fixture
def slip_image_bytes():
    return make_slip_image()
