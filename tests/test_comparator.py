import itertools

import pytest

from sheet_parser.constants import CANON_ORDER
from sheet_parser.core.comparator import (
    LOSS,
    TIE,
    WIN,
    CategoryRecord,
    StatKey,
    compare_entities,
    compare_stat,
    detect_stat_keys,
    is_lower_better,
    is_stat_header,
    pair_records,
    stat_key,
)


class TestCompareStat:
    def test_polarity(self):
        assert compare_stat("12", "8", "PTS") == WIN
        assert compare_stat("12", "8", "TO") == LOSS
        assert compare_stat("8", "12", StatKey("TO", higher_is_better=False)) == WIN
        assert compare_stat("54.3%", "0.543", "FG%") == TIE

    def test_empty_loses_to_any_value(self):
        assert compare_stat("", "5", "PTS") == LOSS
        assert compare_stat("5", "—", "PTS") == WIN
        assert compare_stat("", "", "PTS") == TIE

    def test_text_values(self):
        assert compare_stat("abc", "abd", "Note") == LOSS
        assert compare_stat("B", "a", "Note") == WIN
        assert compare_stat("Same", "same ", "Note") == TIE

    def test_registry(self):
        assert is_lower_better("TO")
        assert is_lower_better("Turnovers")
        assert not is_lower_better("PTS")
        assert stat_key("TO") == StatKey("TO", False)
        assert stat_key(StatKey("X", False)) == StatKey("X", False)


class TestCompareEntities:
    def test_wins_losses_ties_add_up(self):
        values = ["", "-0", "5", "54.3%", "abc"]
        stats = ["PTS", "TO", "FG%"]
        for a_vals, b_vals in itertools.product(itertools.product(values, repeat=3), repeat=2):
            a = dict(zip(stats, a_vals))
            b = dict(zip(stats, b_vals))
            result = compare_entities(a, b, stats)
            assert result.wins + result.losses + result.ties == len(stats)

    def test_missing_stat_counts_as_empty(self):
        result = compare_entities({"PTS": "5"}, {}, ["PTS", "REB"])
        assert result.outcomes == {"PTS": WIN, "REB": TIE}
        assert result.as_dict() == {"wins": 1, "losses": 0, "ties": 1}
        assert result.total == 2

    def test_category_record(self):
        record = CategoryRecord(1, 2, 3, {})
        assert record.total == 6


class TestStatDetection:
    def test_canonical_order(self):
        headers = ["Rank", "Team", "TO", "BLK", "ST", "AST", "REB", "PTS", "FT%", "3P", "FG%", "Score", "League"]
        names = [s.name for s in detect_stat_keys(headers, "Team")]
        assert names == CANON_ORDER

    def test_table_order_when_few_canonical(self):
        headers = ["Team", "PTS", "Matchup No", "Category H2H", "Result", "Extra", "FG% Rank", "Regular League"]
        keys = detect_stat_keys(headers, "Team")
        assert [s.name for s in keys] == ["PTS", "Extra"]

    def test_turnovers_are_lower_is_better(self):
        keys = detect_stat_keys(["Team", "PTS", "TO"], "Team")
        assert keys == [StatKey("PTS", True), StatKey("TO", False)]

    @pytest.mark.parametrize("key", ["", "Team", "league", "http://x", "Fantrax link"])
    def test_skipped_headers(self, key):
        assert not is_stat_header(key, "Team")

    def test_pair_records(self):
        records = [{"i": n} for n in range(5)]
        pairs = pair_records(records)
        assert [(a["i"], b["i"]) for a, b in pairs] == [(0, 1), (2, 3)]
