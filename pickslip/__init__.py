"""
Pick-slip OCR extraction pipeline
"""

from pickslip.config_manager import ConfigManager
from pickslip.constraint_validator import LineupValidator
from pickslip.engine_handle import EngineHandle, EnginePool
from pickslip.exceptions import DecodeError, EngineError, PickSlipError
from pickslip.fusion import ResultFusion
from pickslip.models import (
    Candidate,
    Direction,
    Lineup,
    LineupStatus,
    MoneyPair,
    Player,
    PlayStyle,
    PlayType,
    RecognitionResult,
    Region,
    RegionRole,
    Sport,
    StatType,
    ValidationReport,
)
from pickslip.normalizer import normalize_text
from pickslip.ocr_engines import OCREngine
from pickslip.orchestrator import RecognitionOrchestrator
from pickslip.pipeline import ExtractionResult, SlipProcessor, default_config_path
from pickslip.preprocessor import PreprocessingPipeline, decode_image
from pickslip.record_builder import ExtractorBank, LineupBuilder
from pickslip.reference_data import ReferenceData
from pickslip.segmenter import RegionSegmenter
from pickslip.utils import setup_logger, save_json, load_json

__all__ = [
    'ConfigManager',
    'LineupValidator',
    'EngineHandle',
    'EnginePool',
    'DecodeError',
    'EngineError',
    'PickSlipError',
    'ResultFusion',
    'Candidate',
    'Direction',
    'Lineup',
    'LineupStatus',
    'MoneyPair',
    'Player',
    'PlayStyle',
    'PlayType',
    'RecognitionResult',
    'Region',
    'RegionRole',
    'Sport',
    'StatType',
    'ValidationReport',
    'normalize_text',
    'OCREngine',
    'RecognitionOrchestrator',
    'ExtractionResult',
    'SlipProcessor',
    'default_config_path',
    'PreprocessingPipeline',
    'decode_image',
    'ExtractorBank',
    'LineupBuilder',
    'ReferenceData',
    'RegionSegmenter',
    'setup_logger',
    'save_json',
    'load_json',
]
