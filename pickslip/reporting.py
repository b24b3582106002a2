"""
Merge saved pipeline records into a CSV and summarize stakes and results.
"""

import argparse
import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from pickslip.config_manager import ConfigManager
from pickslip.pipeline import default_config_path
from pickslip.utils import load_json_records, setup_logger

MERGED_CSV_NAME = 'all_records.csv'

LINEUP_COLUMNS = [
    'run_id', 'source', 'date', 'type', 'status', 'entry_amount', 'potential_payout',
    'odds', 'actual_payout', 'is_valid', 'confirmed',
]
PICK_COLUMNS = ['pick_index', 'player', 'sport', 'stat_type', 'line', 'direction', 'opponent', 'match_status']


def record_lineup(record: Dict[str, Any]) -> Dict[str, Any]:
    """The confirmed lineup when review produced one, otherwise the draft."""
    return record.get('confirmedLineup') or record.get('lineup') or {}


def payout_odds(entry_amount: Optional[float], potential_payout: Optional[float]) -> Optional[str]:
    """
    Profit over stake as signed odds, e.g. $5 to pay $15 is '+200'.

    Returns None when either amount is missing or the entry is not positive.
    """
    if entry_amount is None or potential_payout is None or entry_amount <= 0:
        return None
    percentage = (potential_payout - entry_amount) / entry_amount * 100
    rounded = math.floor(percentage + 0.5)
    return f"+{rounded}" if percentage > 0 else f"{rounded}"


def lineups_to_frame(records: List[Dict[str, Any]]) -> pd.DataFrame:
    """
    Flatten records into one row per pick.

    Lineups without players still get a single row with empty pick columns.
    """
    rows = []
    for record in records:
        lineup = record_lineup(record)
        base = {
            'run_id': record.get('runId'),
            'source': record.get('source'),
            'date': lineup.get('date'),
            'type': lineup.get('type'),
            'status': lineup.get('status'),
            'entry_amount': lineup.get('entryAmount'),
            'potential_payout': lineup.get('potentialPayout'),
            'odds': payout_odds(lineup.get('entryAmount'), lineup.get('potentialPayout')),
            'actual_payout': lineup.get('actualPayout'),
            'is_valid': record.get('validation', {}).get('isValid'),
            'confirmed': 'confirmedLineup' in record,
        }
        players = lineup.get('players') or []
        if not players:
            rows.append({**base, **{column: None for column in PICK_COLUMNS}})
            continue
        for i, player in enumerate(players):
            rows.append({
                **base,
                'pick_index': i,
                'player': player.get('name'),
                'sport': player.get('sport'),
                'stat_type': player.get('statType'),
                'line': player.get('line'),
                'direction': player.get('direction'),
                'opponent': player.get('opponent'),
                'match_status': player.get('matchStatus'),
            })
    return pd.DataFrame(rows, columns=LINEUP_COLUMNS + PICK_COLUMNS)


def summarize(records: List[Dict[str, Any]]) -> Dict[str, float]:
    """
    Totals across lineups: count, stake, winnings, losses and refunds.

    Winnings use the actual payout when known, else the potential payout.
    """
    lineups = pd.DataFrame([record_lineup(r) for r in records])
    if lineups.empty:
        return {'total_lineups': 0, 'total_stake': 0.0, 'total_won': 0.0, 'total_lost': 0.0, 'total_refunded': 0.0}

    for column in ('entryAmount', 'potentialPayout', 'actualPayout', 'status'):
        if column not in lineups:
            lineups[column] = None
    payouts = lineups['actualPayout'].fillna(lineups['potentialPayout']).astype(float)
    entries = lineups['entryAmount'].astype(float)
    status = lineups['status']

    return {
        'total_lineups': int(len(lineups)),
        'total_stake': float(entries.sum()),
        'total_won': float(payouts[status == 'win'].sum()),
        'total_lost': float(entries[status == 'loss'].sum()),
        'total_refunded': float(entries[status.isin(['refund', 'push', 'void', 'cancelled'])].sum()),
    }


def merge_records(
    records_dir: str,
    merged_csv_path: str,
    logger: Optional[logging.Logger] = None,
    records: Optional[List[Dict[str, Any]]] = None
) -> pd.DataFrame:
    """
    Takes in a folder of record JSON files, an output from the pipeline, and merges them into one CSV.

    Args:
        records_dir: Directory of *_record.json files
        merged_csv_path: Where to write the CSV
        logger: Logger instance
        records: Records already loaded from records_dir, to skip reading them again

    Raises:
        IOError: If a record cannot be read or the CSV cannot be written
    """
    if records is None:
        records = load_json_records(records_dir, logger=logger)
    frame = lineups_to_frame(records)
    try:
        Path(merged_csv_path).parent.mkdir(parents=True, exist_ok=True)
        frame.to_csv(merged_csv_path, index=False)
    except OSError as e:
        if logger:
            logger.exception(e)
        raise IOError(f"Failed to write merged records to {merged_csv_path}: {e}")
    if logger:
        logger.info(f"Written merged records to: {merged_csv_path}")
    return frame


def main():
    """Main entry point for command-line execution"""
    parser = argparse.ArgumentParser(
        description="Merge saved pick-slip records into a single CSV file and print totals"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=default_config_path(),
        help="Pipeline config whose output_paths locate records and reports (default: packaged config)"
    )
    parser.add_argument(
        "--records_dir",
        type=str,
        default=None,
        help="Directory containing *_record.json files (default: output_paths.records)"
    )
    parser.add_argument(
        "--merged_csv_path",
        type=str,
        default=None,
        help=f"Output path for the merged CSV file (default: output_paths.reports/{MERGED_CSV_NAME})"
    )

    args = parser.parse_args()
    logger = setup_logger(name='reporting', debug=False)
    output_paths = ConfigManager(args.config, logger).get_output_paths()
    records_dir = args.records_dir or output_paths['records']
    merged_csv_path = args.merged_csv_path or str(Path(output_paths['reports']) / MERGED_CSV_NAME)

    records = load_json_records(records_dir, logger=logger)
    merge_records(records_dir, merged_csv_path, logger, records=records)
    for key, value in summarize(records).items():
        logger.info(f"{key}: {value}")


if __name__ == "__main__":
    main()
