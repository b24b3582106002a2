"""
Configuration management for the pick-slip pipeline.
Loads and validates JSON configuration files.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional
from pickslip.utils import load_json


class ConfigManager:
    """Manages configuration loading and validation."""

    def __init__(self, config_path: str, logger: Optional[logging.Logger] = None):
        """
        Initialize config manager and load configuration.

        Args:
            config_path: Path to JSON pipeline config file
            logger: Logger instance

        Raises:
            IOError: If a config file cannot be loaded
            ValueError: If config validation fails
        """
        self.logger = logger
        self.config_path = config_path
        self.config = self._load_and_validate_config(config_path)

        # Engine and reference tables live next to the pipelines directory
        config_dir = Path(config_path).parent.parent
        self.ocr_engines_config = self._load_ocr_engines_config(str(config_dir / 'ocr_engines.json'))
        self.reference_data_path = str(config_dir / 'reference_data.json')

    def _load_and_validate_config(self, config_path: str) -> Dict[str, Any]:
        """
        Load and validate configuration from JSON file.

        Raises:
            IOError: If config file cannot be loaded
            ValueError: If config validation fails
        """
        try:
            config = load_json(config_path, self.logger)
        except IOError as e:
            raise IOError(f"Failed to load config from {config_path}: {e}")

        required_fields = [
            'output_paths',
            'primary_engine',
            'preprocessing_chain',
            'segmentation',
            'fusion',
            'extraction'
        ]

        missing_fields = [f for f in required_fields if f not in config]
        if missing_fields:
            raise ValueError(f"Missing required config fields: {missing_fields}")

        required_output_paths = ['records', 'reports', 'logs']
        missing_paths = [p for p in required_output_paths if p not in config['output_paths']]
        if missing_paths:
            raise ValueError(f"Missing required output paths: {missing_paths}")

        if not config['preprocessing_chain'] or not isinstance(config['preprocessing_chain'], list):
            raise ValueError("preprocessing_chain must be a non-empty list")

        for i, step in enumerate(config['preprocessing_chain']):
            if not isinstance(step, dict) or 'method' not in step:
                raise ValueError(f"Preprocessing step {i} must have a 'method'")

        if not isinstance(config['primary_engine'], str) or not config['primary_engine'].strip():
            raise ValueError("primary_engine must be a non-empty string")

        segmentation = config['segmentation']
        if segmentation.get('min_cards', 2) > segmentation.get('max_cards', 6):
            raise ValueError("segmentation min_cards must not exceed max_cards")

        fuzzy_threshold = config['extraction'].get('fuzzy_threshold', 0.85)
        if not 0.0 <= fuzzy_threshold <= 1.0:
            raise ValueError(f"extraction fuzzy_threshold must be between 0 and 1, got {fuzzy_threshold}")

        if self.logger:
            self.logger.info(f"Successfully loaded and validated config from {config_path}")

        return config

    def _load_ocr_engines_config(self, config_path: str) -> Dict[str, Any]:
        """
        Load OCR engines configuration from JSON file.

        Args:
            config_path: Path to ocr_engines.json

        Returns:
            OCR engines configuration dictionary

        Raises:
            IOError: If config file cannot be loaded
            ValueError: If config validation fails
        """
        try:
            ocr_engines_config = load_json(config_path, self.logger)
        except IOError as e:
            raise IOError(f"Failed to load OCR engines config from {config_path}: {e}")

        required_fields = ['engines', 'profiles']
        missing_fields = [f for f in required_fields if f not in ocr_engines_config]
        if missing_fields:
            raise ValueError(f"OCR engines config missing required fields: {missing_fields}")

        if not isinstance(ocr_engines_config['engines'], dict) or not ocr_engines_config['engines']:
            raise ValueError("engines must be a non-empty dictionary")

        missing_profiles = [
            role for role in ('header', 'pick-card', 'footer')
            if role not in ocr_engines_config['profiles']
        ]
        if missing_profiles:
            raise ValueError(f"OCR engines config missing region profiles: {missing_profiles}")

        if self.logger:
            self.logger.info(f"Successfully loaded OCR engines config from {config_path}")

        return ocr_engines_config

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key.

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Configuration value
        """
        return self.config.get(key, default)

    def get_nested(self, keys: List[str], default: Any = None) -> Any:
        """
        Get nested configuration value.

        Args:
            keys: List of keys to traverse (e.g., ['extraction', 'field_thresholds'])
            default: Default value if key path not found
        """
        value = self.config
        for key in keys:
            if isinstance(value, dict):
                value = value.get(key)
                if value is None:
                    return default
            else:
                return default
        return value

    def get_preprocessing_chain(self) -> List[Dict[str, Any]]:
        """Get the ordered preprocessing steps."""
        return self.config.get('preprocessing_chain', [])

    def get_primary_engine(self) -> str:
        """Get the primary OCR engine name."""
        return self.config.get('primary_engine', 'tesseract')

    def get_engine_config(self, engine_name: str) -> Dict[str, Any]:
        """
        Get configuration parameters for a specific OCR engine.

        Args:
            engine_name: Name of the OCR engine (e.g., 'paddleocr', 'tesseract', 'easyocr')

        Returns:
            Engine-specific configuration dictionary
        """
        return self.ocr_engines_config.get('engines', {}).get(engine_name, {})

    def get_profiles(self) -> Dict[str, Dict[str, Any]]:
        """Get recognition parameter profiles keyed by region role."""
        return self.ocr_engines_config.get('profiles', {})

    def get_segmentation(self) -> Dict[str, Any]:
        return self.config.get('segmentation', {})

    def get_fusion(self) -> Dict[str, Any]:
        return self.config.get('fusion', {})

    def get_extraction(self) -> Dict[str, Any]:
        return self.config.get('extraction', {})

    def get_output_paths(self) -> Dict[str, str]:
        """Get output paths."""
        return self.config.get('output_paths', {})

    def get_reference_data_path(self) -> str:
        """Get the path of the reference tables file."""
        return self.reference_data_path
