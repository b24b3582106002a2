"""
Exception types for the pick-slip extraction pipeline.
Only image decoding and text recognition may abort a run.
"""


class PickSlipError(Exception):
    """Base class for fatal pipeline errors."""


class DecodeError(PickSlipError):
    """Raised when the input bytes cannot be decoded into an image."""


class EngineError(PickSlipError):
    """Raised when the text recognition engine fails during a pass."""
