#!/usr/bin/env python3
"""
Main entry point for the pick-slip OCR extraction pipeline.
Supports both CLI and programmatic usage.
"""

import sys
import argparse
from pathlib import Path

from pickslip.exceptions import DecodeError, EngineError
from pickslip.pipeline import SlipProcessor, default_config_path

IMAGE_PATTERNS = ('*.png', '*.jpg', '*.jpeg', '*.heic', '*.heif')


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description='Pick-slip OCR extraction pipeline',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Process a single screenshot with the packaged config
  python main.py --image screenshots/IMG_0412.PNG

  # Process a single screenshot with a custom config
  python main.py --image screenshots/IMG_0412.PNG --config my_configs/pipelines/custom.json

  # Enable debug logging and skip writing the record
  python main.py --image screenshots/IMG_0412.PNG --debug --no-save

  # Process all screenshots in a directory
  python main.py --image-dir screenshots/
        """
    )

    parser.add_argument(
        '--image',
        type=str,
        help='Path to a single image to process'
    )
    parser.add_argument(
        '--image-dir',
        type=str,
        help='Path to directory containing images to process'
    )
    parser.add_argument(
        '--config',
        type=str,
        default=default_config_path(),
        help='Path to pipeline configuration file (default: packaged default.json)'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )
    parser.add_argument(
        '--no-save',
        action='store_true',
        help='Do not write record JSON files'
    )

    args = parser.parse_args()

    # Validate arguments
    if not args.image and not args.image_dir:
        parser.error('Either --image or --image-dir must be specified')

    if args.image and args.image_dir:
        parser.error('Cannot specify both --image and --image-dir')

    if not Path(args.config).exists():
        parser.error(f'Config file not found: {args.config}')

    try:
        processor = SlipProcessor(args.config, debug=args.debug)
    except Exception as e:
        print(f"Failed to initialize processor: {e}", file=sys.stderr)
        return 1

    save = not args.no_save
    try:
        if args.image:
            process_single_image(processor, args.image, save)
        else:
            process_image_directory(processor, args.image_dir, save)

    except DecodeError as e:
        processor.logger.error(f"Could not read image: {e}")
        return 2
    except EngineError as e:
        processor.logger.error(f"Could not recognize text: {e}")
        return 3
    except Exception as e:
        processor.logger.error(f"Processing failed: {e}")
        return 1

    return 0


def log_result(processor: SlipProcessor, result) -> None:
    lineup = result.lineup
    processor.logger.info(
        f"{lineup.type}: ${lineup.entry_amount:.2f} to pay ${lineup.potential_payout:.2f} ({lineup.status.value})"
    )
    for i, player in enumerate(lineup.players, 1):
        processor.logger.info(
            f"  {i}. {player.name} - {player.stat_type.value} {player.direction.value} {player.line:g}"
        )
    if not result.report.is_valid:
        for error in result.report.errors:
            processor.logger.warning(f"  Validation: {error}")
    if result.low_confidence_fields:
        processor.logger.warning(f"  Needs review: {', '.join(result.low_confidence_fields)}")


def process_single_image(processor: SlipProcessor, image_path: str, save: bool = True) -> None:
    """
    Process a single image.

    Args:
        processor: SlipProcessor instance
        image_path: Path to image file
        save: Write the record JSON

    Raises:
        FileNotFoundError: If image file not found
        DecodeError: If the image cannot be decoded
        EngineError: If text recognition fails
    """
    if not Path(image_path).exists():
        raise FileNotFoundError(f"Image not found: {image_path}")

    result = processor.process_image(image_path)
    log_result(processor, result)
    if save:
        output_path = processor.save_result(result)
        processor.logger.info(f"Record saved to {output_path}")


def process_image_directory(processor: SlipProcessor, image_dir: str, save: bool = True) -> None:
    """
    Process all images in a directory.

    Args:
        processor: SlipProcessor instance
        image_dir: Path to directory containing images
        save: Write a record JSON per image

    Raises:
        NotADirectoryError: If directory not found
        Exception: If processing fails (stops on first error)
    """
    image_dir_path = Path(image_dir)

    if not image_dir_path.is_dir():
        raise NotADirectoryError(f"Directory not found: {image_dir}")

    image_files = sorted({
        path for pattern in IMAGE_PATTERNS
        for case in (pattern, pattern.upper())
        for path in image_dir_path.glob(case)
    })

    if not image_files:
        processor.logger.warning(f"No images found in {image_dir}")
        return

    processor.logger.info(f"Found {len(image_files)} images to process")

    for i, image_path in enumerate(image_files, 1):
        processor.logger.info(f"[{i}/{len(image_files)}] Processing: {image_path.name}")
        process_single_image(processor, str(image_path), save)


if __name__ == '__main__':
    sys.exit(main())
