#!/usr/bin/env python3
"""
Example: Process a single pick-slip screenshot programmatically.
Demonstrates progress reporting and a review callback that confirms the draft.
"""
from pickslip import SlipProcessor


def print_progress(status, percent):
    print(f"  [{percent:5.1f}%] {status}")


def review(lineup, report):
    """Accept the validator's corrected copy when there is one."""
    if not report.is_valid:
        print("\nValidation issues:")
        for error in report.errors:
            print(f"  - {error}")
        return report.corrected_lineup
    return lineup


def main():
    """Process a single image with the pick-slip pipeline."""
    print("=" * 80)
    print("Single Slip Processing")
    print("=" * 80)

    # Packaged config is used when config_path is omitted
    processor = SlipProcessor(debug=False)

    image_path = 'screenshots/IMG_0412.PNG'

    try:
        result = processor.process_image(image_path, on_progress=print_progress, review=review)
        output_path = processor.save_result(result)

        lineup = result.confirmed_lineup or result.lineup
        print(f"\nProcessing complete!")
        print(f"  Type: {lineup.type}")
        print(f"  Entry: ${lineup.entry_amount:.2f}")
        print(f"  Potential payout: ${lineup.potential_payout:.2f}")
        for i, player in enumerate(lineup.players, 1):
            print(f"  {i}. {player.name} {player.stat_type.value} {player.direction.value} {player.line:g}")
        if result.low_confidence_fields:
            print(f"  Needs review: {', '.join(result.low_confidence_fields)}")
        print(f"\nRecord: {output_path}")

    except FileNotFoundError as e:
        print(f"Error: {e}")
        print("Make sure screenshots/IMG_0412.PNG exists")
    except Exception as e:
        print(f"Processing error: {e}")


if __name__ == '__main__':
    try:
        main()
    except KeyboardInterrupt:
        print("\nInterrupted by user")
