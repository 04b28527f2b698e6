import os

from sheet_parser.utils.file_helpers import ensure_directory_exists, get_output_path, normalize_name
from sheet_parser.utils.league_helpers import (
    division_from_league,
    league_number,
    league_sort_key,
    same_league,
)


class TestLeagueHelpers:
    def test_division_from_league(self):
        assert division_from_league("A1") == "A"
        assert division_from_league(" b2 ") == "B"
        assert division_from_league("Γ3") == "Γ"
        assert division_from_league("G3") == "Γ"
        assert division_from_league("") == "Unknown"
        assert division_from_league("Z9") == "Unknown"

    def test_league_number(self):
        assert league_number("A10") == 10
        assert league_number("Premier") == 9999

    def test_league_order(self):
        leagues = ["B1", "A10", "Γ1", "A2", "Unassigned"]
        assert sorted(leagues, key=league_sort_key) == ["A2", "A10", "B1", "Γ1", "Unassigned"]

    def test_same_league(self):
        assert same_league("A1", " a1")
        assert not same_league("A1", "A10")


class TestFileHelpers:
    def test_normalize_name(self):
        assert normalize_name("Champions League!") == "champions_league"
        assert normalize_name(" Weekly - Standings ") == "weekly_standings"

    def test_get_output_path(self, tmp_path):
        assert get_output_path("history", "standings", suffix="_rankings") == "history_standings_rankings.csv"

        target = tmp_path / "out"
        path = get_output_path("seasons", "champions_league", str(target))
        assert path == os.path.join(str(target), "seasons_champions_league.csv")
        assert target.is_dir()

    def test_ensure_directory_exists_is_idempotent(self, tmp_path):
        target = tmp_path / "a" / "b"
        ensure_directory_exists(str(target))
        ensure_directory_exists(str(target))
        assert target.is_dir()
