"""Tests for the pick-slip data model and its JSON record shape."""

import pytest

from pickslip.models import (
    Direction,
    Lineup,
    LineupStatus,
    Player,
    PlayStyle,
    PlayType,
    Sport,
    StatType,
    parse_pick_count,
)


# ---------------------------------------------------------------------------
# Labels and lookups
# ---------------------------------------------------------------------------

class TestLabels:
    """Display labels and case-insensitive enum lookups."""

    def test_play_type_label(self):
        """Play type renders as '<N>-Pick <Style> Play'."""
        assert PlayType(6, PlayStyle.FLEX).label == "6-Pick Flex Play"
        assert PlayType(2, PlayStyle.POWER).label == "2-Pick Power Play"

    def test_parse_pick_count(self):
        """Leading numeral of a type label is the pick count."""
        assert parse_pick_count("5-Pick Flex Play") == 5
        assert parse_pick_count("3 Pick Power Play") == 3
        assert parse_pick_count("Flex Play") is None
        assert parse_pick_count("") is None

    def test_sport_from_label(self):
        """Sport labels match case-insensitively, unknown labels map to UNKNOWN."""
        assert Sport.from_label("wnba") == Sport.WNBA
        assert Sport.from_label("Tennis") == Sport.TENNIS
        assert Sport.from_label("curling") == Sport.UNKNOWN
        assert Sport.from_label(None) == Sport.UNKNOWN

    def test_stat_from_label(self):
        """Compound stat labels round-trip through their display value."""
        assert StatType.from_label("Pts+Rebs+Asts") == StatType.PTS_REBS_ASTS
        assert StatType.from_label("hitter fantasy score") == StatType.HITTER_FANTASY_SCORE
        assert StatType.from_label("Blorps") == StatType.UNKNOWN


# ---------------------------------------------------------------------------
# Record shape
# ---------------------------------------------------------------------------

class TestRecordShape:
    """Lineup and Player serialization."""

    @pytest.fixture
    def lineup(self):
        return Lineup(
            type="2-Pick Power Play",
            entry_amount=5.0,
            potential_payout=15.0,
            status=LineupStatus.WIN,
            players=(
                Player("Kelsey Plum", Sport.WNBA, StatType.POINTS, 22.5, Direction.OVER,
                       opponent="ATL 90 @ GSV 81", match_status="Final"),
                Player("Aja Wilson", Sport.WNBA, StatType.REBOUNDS, 8.5, Direction.UNDER),
            ),
            actual_payout=15.0,
            date="2025-07-17",
        )

    def test_to_dict_uses_record_keys(self, lineup):
        """Serialized lineup uses the camelCase record keys and enum values."""
        data = lineup.to_dict()
        assert data['type'] == "2-Pick Power Play"
        assert data['entryAmount'] == 5.0
        assert data['potentialPayout'] == 15.0
        assert data['status'] == 'win'
        assert data['actualPayout'] == 15.0
        assert data['date'] == "2025-07-17"
        assert data['players'][0]['statType'] == 'Points'
        assert data['players'][0]['direction'] == 'over'
        assert data['players'][0]['matchStatus'] == 'Final'

    def test_player_omits_missing_optionals(self, lineup):
        """Optional player fields are left out rather than written as null."""
        data = lineup.players[1].to_dict()
        assert 'opponent' not in data
        assert 'isWin' not in data
        assert set(data) == {'name', 'sport', 'statType', 'line', 'direction'}

    def test_from_dict_restores_lineup(self, lineup):
        """A serialized lineup parses back to an equal value."""
        assert Lineup.from_dict(lineup.to_dict()) == lineup

    def test_from_dict_defaults_status(self):
        """A record without status is pending."""
        lineup = Lineup.from_dict({'type': "4-Pick Flex Play", 'entryAmount': 5, 'potentialPayout': 35, 'players': []})
        assert lineup.status == LineupStatus.PENDING
        assert lineup.pick_count == 4

    def test_from_dict_rejects_missing_players(self):
        """Players must be a list."""
        with pytest.raises(ValueError, match="players"):
            Lineup.from_dict({'type': "4-Pick Flex Play", 'entryAmount': 5, 'potentialPayout': 35})

    def test_from_dict_rejects_bad_direction(self):
        """Direction must be one of over, under, unknown."""
        player = {'name': "Aja Wilson", 'sport': 'WNBA', 'statType': 'Points', 'line': 20.5, 'direction': 'sideways'}
        with pytest.raises(ValueError, match="direction"):
            Player.from_dict(player)

    def test_from_dict_rejects_boolean_amount(self):
        """Booleans are not accepted as money amounts."""
        with pytest.raises(ValueError, match="entryAmount"):
            Lineup.from_dict({'type': "2-Pick Flex Play", 'entryAmount': True, 'potentialPayout': 7.5, 'players': []})

    def test_lineup_is_immutable(self, lineup):
        """Lineups are frozen; corrections build new values."""
        with pytest.raises(AttributeError):
            lineup.entry_amount = 10.0
