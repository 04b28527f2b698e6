import pytest

from sheet_parser.constants import CHAMPIONS_LEAGUE_MARKER, STANDINGS_TOTALS_MARKER
from sheet_parser.core.ingestion import Grid
from sheet_parser.core.table_detector import (
    SectionBoundary,
    detect_separator_columns,
    discover_by_anchor,
    discover_by_marker,
    discover_by_separators,
    find_anchor_column,
    find_section_end,
    find_sections,
    row_matches_marker,
    split_trailing,
)
from sheet_parser.exceptions import RequiredColumnNotFound, RequiredMarkerNotFound, SectionTooSmall


def separator_grid(blank_rows, total=100):
    rows = []
    for i in range(total):
        rows.append([f"T{i}", "" if i < blank_rows else "v", "y"])
    return Grid(rows)


class TestMarkers:
    def test_all_phrases_must_be_present(self):
        row = ["STANDINGS BEFORE MATCHUP", "", "TOTAL   STATISTICS"]
        assert row_matches_marker(row, STANDINGS_TOTALS_MARKER)
        assert not row_matches_marker(["STANDINGS BEFORE MATCHUP"], STANDINGS_TOTALS_MARKER)

    def test_marker_offsets_count_non_blank_rows(self):
        grid = Grid([
            ["Title"],
            ["Standings Before Matchup / Total Statistics"],
            [""],
            ["#", "Team", "W"],
            ["1", "Alpha", "5"],
            ["2", "Beta", "4"],
            [""],
            ["notes"],
        ])
        sections = discover_by_marker(grid, STANDINGS_TOTALS_MARKER, label="standings")
        assert sections == [SectionBoundary(4, 6, 3, label="standings")]

    def test_required_marker_missing(self):
        grid = Grid([["Team", "PTS"], ["Alpha", "1"]])
        with pytest.raises(RequiredMarkerNotFound) as exc:
            discover_by_marker(grid, CHAMPIONS_LEAGUE_MARKER)
        assert exc.value.phrases == ("champions league",)
        assert discover_by_marker(grid, CHAMPIONS_LEAGUE_MARKER, required=False) == []

    def test_all_matches(self):
        grid = Grid([
            ["Champions League"],
            ["Team", "Pts"],
            ["A", "1"],
            [""],
            ["Champions League"],
            ["Team", "Pts"],
            ["B", "2"],
        ])
        sections = discover_by_marker(grid, CHAMPIONS_LEAGUE_MARKER, all_matches=True)
        assert [(s.start, s.end, s.header_row) for s in sections] == [(2, 3, 1), (6, 7, 5)]

    def test_section_ends_at_stop_marker(self):
        grid = Grid([
            ["Matchup live results"],
            ["Team", "PTS"],
            ["A", "1"],
            ["Standings before matchup"],
            ["#", "Team"],
        ])
        sections = discover_by_marker(grid, "matchup live results",
                                      stop_markers=[("standings before matchup",)])
        assert (sections[0].start, sections[0].end) == (2, 3)


class TestSectionEnd:
    def test_long_blank_run_ends_section(self):
        rows = [["a"], ["b"], ["c"]] + [[""]] * 8 + [["d"]]
        assert find_section_end(Grid(rows), 0, stop_at_blank=False) == 3

    def test_short_blank_run_is_crossed(self):
        rows = [["a"], [""], [""], ["b"]]
        assert find_section_end(Grid(rows), 0, stop_at_blank=False) == 4
        assert find_section_end(Grid(rows), 0, stop_at_blank=True) == 1

    def test_blank_rows_before_stop_marker_are_excluded(self):
        rows = [["a"], ["b"], [""], ["Champions League"]]
        assert find_section_end(Grid(rows), 0, [CHAMPIONS_LEAGUE_MARKER], stop_at_blank=False) == 2


class TestAnchors:
    def test_anchor_section(self, scenario_grid):
        sections = discover_by_anchor(scenario_grid, "Team")
        assert sections == [SectionBoundary(1, 3, 0)]

    def test_anchor_restricted_to_column(self):
        assert find_anchor_column(["", "Team"], "Team", column=0) == -1
        assert find_anchor_column(["", "Team"], "Team", column=1) == 1
        assert find_anchor_column(["Club", "PTS"], "Team", candidates=["club"]) == 0

    def test_missing_anchor_is_an_error(self):
        grid = Grid([["Name", "PTS"], ["Alpha", "1"]])
        with pytest.raises(RequiredColumnNotFound) as exc:
            find_sections(grid, "anchor")
        assert exc.value.label == "Team"

    def test_find_sections_dispatch(self, scenario_grid):
        assert find_sections(scenario_grid, "anchor", anchor="Team") == discover_by_anchor(scenario_grid)
        with pytest.raises(ValueError):
            find_sections(scenario_grid, "diagonal")


class TestSeparators:
    def test_separator_at_ninety_percent(self):
        assert 1 in detect_separator_columns(separator_grid(90), 0, sample_size=100)

    def test_no_separator_at_eighty_percent(self):
        assert 1 not in detect_separator_columns(separator_grid(80), 0, sample_size=100)

    def test_dash_cells_count_as_blank(self):
        grid = Grid([["A", "—", "1"], ["B", "-", "2"], ["C", "", "3"]])
        assert detect_separator_columns(grid) == [1]

    def test_blocks_with_trailing_columns(self):
        header = ["Team", "2021", "2022", "2023", "W", "L", "T", "Titles", "", "Notes"]
        rows = [header] + [[f"T{i}", "1", "2", "3", "4", "5", "6", "7", "", "n"] for i in range(10)]
        grid = Grid(rows)

        block, trailing = discover_by_separators(grid, trailing=4, label="seasons")
        assert (block.col_start, block.col_end, block.label) == (1, 4, "seasons:block")
        assert (trailing.col_start, trailing.col_end, trailing.label) == (4, 8, "seasons:trailing")
        assert (block.start, block.end, block.header_row) == (1, 11, 0)

        blocks = discover_by_separators(grid)
        assert [(b.col_start, b.col_end) for b in blocks] == [(1, 8), (9, 10)]
        assert [b.label for b in blocks] == ["block:0", "block:1"]

    def test_block_too_small(self):
        grid = Grid([["Team", "2021", "2022", ""], ["A", "1", "2", ""], ["B", "2", "1", ""]])
        with pytest.raises(SectionTooSmall) as exc:
            find_sections(grid, "separator", trailing=4)
        assert (exc.value.found, exc.value.minimum) == (2, 4)

    def test_split_trailing(self):
        assert split_trailing((2, 9), 4) == ((2, 5), (5, 9))
        with pytest.raises(SectionTooSmall):
            split_trailing((2, 4), 4)
