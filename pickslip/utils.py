"""
Utility functions for logging, file I/O, and helper functions.
"""

import logging
import os
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional


def setup_logger(
    name: str,
    log_dir: Optional[str] = None,
    debug: bool = True,
    console_output: bool = True,
    console_level: Optional[int] = None
) -> logging.Logger:
    """
    Set up a logger with file and console handlers.

    Args:
        name: Logger name
        log_dir: Directory to save log files (no file handler when None)
        debug: Enable debug mode (verbose logging)
        console_output: Whether to print to console
        console_level: Log level for console handler (defaults to DEBUG in debug mode, INFO otherwise)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    # Clear existing handlers
    logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        log_file = os.path.join(log_dir, f'{name}_{datetime.now().strftime("%Y%m%d_%H%M%S")}.log')
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG if debug else logging.INFO)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if console_output:
        console_handler = logging.StreamHandler()
        if console_level is not None:
            console_handler.setLevel(console_level)
        else:
            console_handler.setLevel(logging.DEBUG if debug else logging.INFO)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger


def read_image_bytes(
    filepath: str,
    logger: Optional[logging.Logger] = None
) -> bytes:
    """
    Read a screenshot file into memory.

    Raises:
        FileNotFoundError: If the file does not exist
        IOError: If file reading fails
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Image not found: {filepath}")
    try:
        data = path.read_bytes()
    except OSError as e:
        raise IOError(f"Failed to read image {filepath}: {e}")
    if logger:
        logger.debug(f"Read {len(data)} bytes from {filepath}")
    return data


def save_json(
    filepath: str,
    data: Dict[str, Any],
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Save data to a JSON file.

    Args:
        filepath: Path to save JSON file
        data: Dictionary to write
        logger: Logger instance for logging

    Raises:
        IOError: If file writing fails
    """
    try:
        Path(filepath).parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, 'w', encoding='utf-8') as jsonfile:
            json.dump(data, jsonfile, indent=2, ensure_ascii=False)
        if logger:
            logger.info(f"Saved JSON to {filepath}")
    except IOError as e:
        raise IOError(f"Failed to save JSON to {filepath}: {e}")


def load_json(
    filepath: str,
    logger: Optional[logging.Logger] = None
) -> Dict[str, Any]:
    """
    Load data from a JSON file.

    Raises:
        IOError: If file reading or parsing fails
    """
    try:
        with open(filepath, 'r', encoding='utf-8') as jsonfile:
            data = json.load(jsonfile)
        if logger:
            logger.debug(f"Loaded JSON from {filepath}")
        return data
    except (IOError, json.JSONDecodeError) as e:
        raise IOError(f"Failed to load JSON from {filepath}: {e}")


def load_json_records(
    records_dir: str,
    pattern: str = '*_record.json',
    logger: Optional[logging.Logger] = None
) -> List[Dict[str, Any]]:
    """Load every saved pipeline record in a directory, sorted by filename."""
    records = []
    for path in sorted(Path(records_dir).glob(pattern)):
        records.append(load_json(str(path), logger))
    if logger:
        logger.info(f"Loaded {len(records)} records from {records_dir}")
    return records
