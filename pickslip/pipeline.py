"""
Main pick-slip processor orchestrating the full pipeline.
Coordinates preprocessing, segmentation, recognition, fusion, extraction,
validation and result storage for one image at a time.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from pickslip.config_manager import ConfigManager
from pickslip.constraint_validator import LineupValidator
from pickslip.engine_handle import EngineHandle
from pickslip.fusion import ResultFusion
from pickslip.models import Lineup, RecognitionResult, ValidationReport
from pickslip.normalizer import normalize_text
from pickslip.ocr_engines import OCREngine
from pickslip.orchestrator import ProgressCallback, RecognitionOrchestrator
from pickslip.preprocessor import PreprocessingPipeline
from pickslip.record_builder import ExtractorBank, LineupBuilder
from pickslip.reference_data import ReferenceData
from pickslip.segmenter import RegionSegmenter
from pickslip.utils import read_image_bytes, save_json, setup_logger

ReviewCallback = Callable[[Lineup, ValidationReport], Optional[Lineup]]


def default_config_path() -> str:
    """Path of the pipeline config shipped with the package."""
    return str(Path(__file__).parent / 'configs' / 'pipelines' / 'default.json')


@dataclass
class ExtractionResult:
    """Everything one run produced, from raw recognition to the validated record."""

    run_id: str
    lineup: Lineup
    report: ValidationReport
    canonical_text: str
    normalized_text: str
    recognition_results: List[RecognitionResult] = field(default_factory=list)
    low_confidence_fields: Tuple[str, ...] = ()
    field_confidences: Dict[str, float] = field(default_factory=dict)
    confirmed_lineup: Optional[Lineup] = None
    source: Optional[str] = None
    processed_at: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'runId': self.run_id,
            'source': self.source,
            'processedAt': self.processed_at,
            'lineup': self.lineup.to_dict(),
            'validation': self.report.to_dict(),
            'lowConfidenceFields': list(self.low_confidence_fields),
            'fieldConfidences': self.field_confidences,
            'canonicalText': self.canonical_text,
            'normalizedText': self.normalized_text,
            'recognitionResults': [
                {'text': r.text, 'confidence': r.confidence, 'regionRole': r.region_role.value}
                for r in self.recognition_results
            ],
        }
        if self.confirmed_lineup is not None:
            data['confirmedLineup'] = self.confirmed_lineup.to_dict()
        return data


class SlipProcessor:
    """Orchestrates the full pick-slip pipeline."""

    def __init__(
        self,
        config_path: Optional[str] = None,
        debug: bool = False,
        engine: Any = None,
        handle: Optional[EngineHandle] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the processor.

        Args:
            config_path: Path to JSON pipeline config (defaults to the packaged one)
            debug: Enable debug logging
            engine: Recognition engine to use instead of the configured OCR library
            handle: Shared engine handle; takes precedence over engine
            logger: Logger instance (a console and file logger is created when None)

        Raises:
            IOError: If config or reference files cannot be loaded
            ValueError: If config validation fails or debug is not a boolean
        """
        if not isinstance(debug, bool):
            raise ValueError(f"debug parameter must be a boolean, got {type(debug).__name__}")

        self.debug = debug
        self.config_path = config_path or default_config_path()
        self.logger = logger or setup_logger(name='SlipProcessor', log_dir='.logging', debug=debug)

        self.logger.info("Starting Slip Processor")
        self.logger.info(f"Config path: {self.config_path}")

        try:
            self.config_manager = ConfigManager(self.config_path, self.logger)
            self.reference = ReferenceData.load(self.config_manager.get_reference_data_path(), self.logger)
        except Exception as e:
            self.logger.error(f"Failed to load configuration: {e}")
            raise

        self.output_paths = self.config_manager.get_output_paths()
        extraction = self.config_manager.get_extraction()

        self.preprocessing = PreprocessingPipeline(self.logger)
        self.segmenter = RegionSegmenter(self.config_manager.get_segmentation(), self.logger)
        self.fusion = ResultFusion(self.config_manager.get_fusion(), self.logger)
        self.extractors = ExtractorBank(self.reference, extraction, self.logger)
        self.builder = LineupBuilder(self.reference, extraction, self.logger)
        self.validator = LineupValidator(self.reference, self.logger)

        if handle is None:
            if engine is None:
                engine = OCREngine(
                    config_manager=self.config_manager,
                    primary_engine=self.config_manager.get_primary_engine(),
                    logger=self.logger
                )
            handle = EngineHandle(engine, self.logger)
        self.handle = handle
        self.orchestrator = RecognitionOrchestrator(handle, self.config_manager.get_profiles(), self.logger)

        self.logger.info("Slip Processor initialized successfully")

    def process_image(
        self,
        image_path: str,
        on_progress: Optional[ProgressCallback] = None,
        review: Optional[ReviewCallback] = None
    ) -> ExtractionResult:
        """
        Process one screenshot file.

        Raises:
            FileNotFoundError: If the image does not exist
            DecodeError: If the file is not a readable image
            EngineError: If text recognition fails
        """
        self.logger.info(f"Processing image: {image_path}")
        data = read_image_bytes(str(image_path), self.logger)
        return self.process_bytes(data, on_progress=on_progress, review=review, source=str(image_path))

    def process_bytes(
        self,
        data: bytes,
        on_progress: Optional[ProgressCallback] = None,
        review: Optional[ReviewCallback] = None,
        source: Optional[str] = None
    ) -> ExtractionResult:
        """
        Run every stage on encoded image bytes.

        Args:
            data: Encoded image
            on_progress: Called with (status, percent); percent never decreases
            review: Human-review collaborator; returns the confirmed lineup or None
            source: Where the bytes came from, recorded on the result

        Returns:
            ExtractionResult

        Raises:
            DecodeError: If the bytes are not a readable image
            EngineError: If text recognition fails
        """
        run_id = uuid.uuid4().hex[:8]
        self.logger.info(f"Run ID: {run_id}")
        progress = _MonotonicProgress(on_progress)

        progress("Preprocessing image", 0)
        buffer = self.preprocessing.preprocess(data, self.config_manager.get_preprocessing_chain())
        progress("Preprocessing complete", 10)

        height, width = buffer.shape[:2]
        regions = self.segmenter.segment(width, height)
        progress("Recognizing text", 20)
        results = self.orchestrator.recognize_all(buffer, regions, on_progress=progress, progress_range=(20, 80))

        canonical_text = self.fusion.fuse(results)
        normalized_text = normalize_text(canonical_text)
        self.logger.debug(f"Normalized text:\n{normalized_text}")

        progress("Extracting fields", 85)
        candidates = self.extractors.extract_all(normalized_text)
        draft = self.builder.build(candidates)
        progress("Validating lineup", 90)
        report = self.validator.validate(draft.lineup)

        confirmed = None
        if review is not None:
            confirmed = review(draft.lineup, report)
            if confirmed is None:
                self.logger.info("Review cancelled; lineup not confirmed")

        progress("Complete", 100)

        return ExtractionResult(
            run_id=run_id,
            lineup=draft.lineup,
            report=report,
            canonical_text=canonical_text,
            normalized_text=normalized_text,
            recognition_results=results,
            low_confidence_fields=draft.low_confidence_fields,
            field_confidences=draft.field_confidences,
            confirmed_lineup=confirmed,
            source=source,
        )

    def save_result(self, result: ExtractionResult, output_filename_prefix: Optional[str] = None) -> str:
        """
        Write a run's record as JSON under the records output path.

        Returns:
            Path of the written file

        Raises:
            IOError: If file writing fails
        """
        if output_filename_prefix is None:
            output_filename_prefix = Path(result.source).stem if result.source else 'slip'
        output_path = Path(self.output_paths['records']) / f"{output_filename_prefix}_{result.run_id}_record.json"
        save_json(str(output_path), result.to_dict(), self.logger)
        return str(output_path)


class _MonotonicProgress:
    """Wraps a progress callback so reported percentages never go backwards."""

    def __init__(self, callback: Optional[ProgressCallback]):
        self.callback = callback
        self.last = 0.0

    def __call__(self, status: str, percent: float) -> None:
        self.last = max(self.last, float(percent))
        if self.callback:
            self.callback(status, self.last)
