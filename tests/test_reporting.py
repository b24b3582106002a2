"""Tests for merging saved records and summarizing results."""

import pandas as pd
import pytest

from pickslip.reporting import (
    LINEUP_COLUMNS,
    PICK_COLUMNS,
    lineups_to_frame,
    main,
    merge_records,
    payout_odds,
    summarize,
)
from pickslip.utils import save_json


def record(run_id, status, entry, payout, players=2, actual=None, confirmed=None):
    lineup = {
        'type': f"{players}-Pick Flex Play",
        'entryAmount': entry,
        'potentialPayout': payout,
        'status': status,
        'players': [
            {'name': f"Player {i}", 'sport': 'WNBA', 'statType': 'Points', 'line': 10.5, 'direction': 'over'}
            for i in range(players)
        ],
    }
    if actual is not None:
        lineup['actualPayout'] = actual
    data = {'runId': run_id, 'source': f"{run_id}.png", 'lineup': lineup, 'validation': {'isValid': True}}
    if confirmed is not None:
        data['confirmedLineup'] = confirmed
    return data


class TestLineupsToFrame:
    """One row per pick."""

    def test_rows_per_pick(self):
        frame = lineups_to_frame([record('a', 'win', 5, 15), record('b', 'pending', 10, 100, players=3)])
        assert len(frame) == 5
        assert list(frame.columns) == LINEUP_COLUMNS + PICK_COLUMNS
        assert frame['player'].tolist()[:2] == ["Player 0", "Player 1"]

    def test_confirmed_lineup_preferred(self):
        confirmed = dict(record('a', 'win', 20, 60)['lineup'])
        frame = lineups_to_frame([record('a', 'win', 5, 15, confirmed=confirmed)])
        assert set(frame['entry_amount']) == {20}
        assert frame['confirmed'].all()

    def test_lineup_without_players(self):
        frame = lineups_to_frame([record('a', 'pending', 5, 15, players=0)])
        assert len(frame) == 1
        assert pd.isna(frame.loc[0, 'player'])


class TestSummarize:
    """Totals across lineups."""

    def test_totals(self):
        records = [
            record('a', 'win', 5, 15),
            record('b', 'win', 5, 15, actual=12.5),
            record('c', 'loss', 10, 100),
            record('d', 'refund', 2, 6),
            record('e', 'pending', 1, 3),
        ]
        totals = summarize(records)
        assert totals['total_lineups'] == 5
        assert totals['total_stake'] == pytest.approx(23.0)
        assert totals['total_won'] == pytest.approx(27.5)
        assert totals['total_lost'] == pytest.approx(10.0)
        assert totals['total_refunded'] == pytest.approx(2.0)

    def test_empty(self):
        assert summarize([])['total_lineups'] == 0


class TestMergeRecords:
    """CSV export of a records directory."""

    def test_merge_writes_csv(self, tmp_path, null_logger):
        records_dir = tmp_path / "records"
        save_json(str(records_dir / "a_1_record.json"), record('a', 'win', 5, 15))
        save_json(str(records_dir / "b_2_record.json"), record('b', 'loss', 5, 35, players=4))
        (records_dir / "notes.json").write_text("{}")

        csv_path = tmp_path / "reports" / "all.csv"
        frame = merge_records(str(records_dir), str(csv_path), null_logger)

        assert csv_path.exists()
        assert len(frame) == 6
        assert len(pd.read_csv(csv_path)) == 6

    def test_preloaded_records_not_read_again(self, tmp_path):
        """Records already in memory are written without touching the directory."""
        csv_path = tmp_path / "all.csv"
        frame = merge_records(str(tmp_path / "absent"), str(csv_path), records=[record('a', 'win', 5, 15)])
        assert len(frame) == 2
        assert csv_path.exists()


class TestPayoutOdds:
    """Profit over stake, signed."""

    @pytest.mark.parametrize("entry, payout, expected", [
        (5, 15, "+200"),
        (10, 231.25, "+2213"),
        (5, 5, "0"),
        (10, 2.5, "-75"),
    ])
    def test_odds(self, entry, payout, expected):
        assert payout_odds(entry, payout) == expected

    def test_missing_amounts(self):
        assert payout_odds(None, 15) is None
        assert payout_odds(0, 15) is None

    def test_odds_column(self):
        frame = lineups_to_frame([record('a', 'win', 5, 15)])
        assert set(frame['odds']) == {"+200"}


class TestReportCommand:
    """The pickslip-report entry point."""

    def test_paths_from_config(self, tmp_path, monkeypatch):
        """Records and reports default to the config's output paths."""
        monkeypatch.chdir(tmp_path)
        save_json(str(tmp_path / "output" / "records" / "a_1_record.json"), record('a', 'win', 5, 15))
        monkeypatch.setattr("sys.argv", ["pickslip-report"])
        main()
        merged = pd.read_csv(tmp_path / "output" / "reports" / "all_records.csv")
        assert len(merged) == 2
