import pytest

from sheet_parser.core.ingestion import Grid
from sheet_parser.core.table_assembler import AssemblyOptions, Table, assemble
from sheet_parser.core.table_detector import SectionBoundary, find_sections
from sheet_parser.exceptions import RequiredColumnNotFound


def section(grid):
    return find_sections(grid, "anchor")[0]


class TestAssemble:
    def test_records_and_metadata(self, scenario_grid):
        table = assemble(scenario_grid, section(scenario_grid), options=AssemblyOptions(strategy="anchor"))

        assert table.headers == ("Rank", "Team", "FG%", "TO")
        assert [r["Team"] for r in table] == ["Alpha", "Beta"]
        assert table.metadata["header_row"] == 0
        assert table.metadata["columns"] == {"Rank": 0, "Team": 1, "FG%": 2, "TO": 3}
        assert table.metadata["section"] == (1, 3)
        assert table.metadata["skipped_rows"] == []
        assert table.metadata["primary_key"] == "Team"
        assert table.metadata["strategy"] == "anchor"

    def test_records_are_read_only(self, scenario_grid):
        table = assemble(scenario_grid, section(scenario_grid))
        with pytest.raises(TypeError):
            table[0]["Team"] = "Gamma"

    def test_rows_without_primary_key_are_skipped(self):
        grid = Grid([
            ["Team", "PTS"],
            ["Alpha", "1"],
            ["", "2"],
            ["", ""],
            ["Beta", "3"],
        ])
        table = assemble(grid, SectionBoundary(1, 5, 0))
        assert [r["Team"] for r in table] == ["Alpha", "Beta"]
        assert table.metadata["skipped_rows"] == [2]

    def test_stop_on_missing_key(self):
        grid = Grid([["Team", "PTS"], ["Alpha", "1"], ["", "2"], ["Beta", "3"]])
        table = assemble(grid, SectionBoundary(1, 4, 0), options=AssemblyOptions(stop_on_missing_key=True))
        assert len(table) == 1

    def test_missing_primary_key(self):
        grid = Grid([["Name", "PTS"], ["Alpha", "1"]])
        with pytest.raises(RequiredColumnNotFound):
            assemble(grid, SectionBoundary(1, 2, 0))

    def test_missing_required_key(self):
        grid = Grid([["Team", "PTS"], ["Alpha", "1"]])
        with pytest.raises(RequiredColumnNotFound) as exc:
            assemble(grid, SectionBoundary(1, 2, 0), options=AssemblyOptions(required_keys=("League",)))
        assert exc.value.label == "League"

    def test_required_key_skips_rows(self):
        grid = Grid([["Team", "League"], ["Alpha", "A1"], ["Beta", ""]])
        table = assemble(grid, SectionBoundary(1, 3, 0), options=AssemblyOptions(required_keys=("League",)))
        assert [r["Team"] for r in table] == ["Alpha"]
        assert table.metadata["skipped_rows"] == [2]

    def test_stop_after_and_max_rows(self):
        grid = Grid([
            ["Team", "FG%", "TO", "Extra"],
            ["Alpha", "0.5", "10", "x"],
            ["Beta", "0.4", "12", "y"],
        ])
        options = AssemblyOptions(stop_after="TO", max_rows=1)
        table = assemble(grid, SectionBoundary(1, 3, 0), options=options)
        assert table.headers == ("Team", "FG%", "TO")
        assert table.metadata["dropped_columns"] == [3]
        assert len(table) == 1

    def test_trailing_and_noise_columns(self):
        grid = Grid([
            ["Team", "", "PTS", "—", "", ""],
            ["Alpha", "x", "1", "—", "", ""],
            ["Beta", "", "2", "", "", ""],
        ])
        table = assemble(grid, SectionBoundary(1, 3, 0))
        assert table.headers == ("Team", "col_1", "PTS")
        assert table[0]["col_1"] == "x"
        assert table.metadata["dropped_columns"] == [3, 4, 5]

    def test_leading_rank_column(self):
        grid = Grid([["", "Team", "PTS"], ["1", "Alpha", "5"], ["2", "Beta", "6"]])
        table = assemble(grid, SectionBoundary(1, 3, 0), options=AssemblyOptions(leading_rank=True))
        assert table.headers == ("Rank", "Team", "PTS")
        assert table.metadata["rank_column"] == 0

    def test_leading_rank_keeps_an_existing_rank_label(self):
        grid = Grid([["", "Team", "Rank"], ["1", "Alpha", "3"], ["2", "Beta", "4"]])
        table = assemble(grid, SectionBoundary(1, 3, 0), options=AssemblyOptions(leading_rank=True))
        assert table.headers == ("col_0", "Team", "Rank")
        assert table[1]["Rank"] == "4"

    def test_repeated_and_suffixed_labels_keep_every_value(self):
        grid = Grid([["Team", "GP", "GP", "GP_2"], ["Alpha", "1", "2", "3"]])
        table = assemble(grid, SectionBoundary(1, 2, 0))
        assert table.headers == ("Team", "GP", "GP_2", "GP_2_2")
        assert dict(table[0]) == {"Team": "Alpha", "GP": "1", "GP_2": "2", "GP_2_2": "3"}

    def test_positional_key_does_not_shadow_a_label(self):
        grid = Grid([["Team", "", "col_1"], ["Alpha", "x", "y"]])
        table = assemble(grid, SectionBoundary(1, 2, 0))
        assert table.headers == ("Team", "col_1_2", "col_1")
        assert table[0]["col_1_2"] == "x"
        assert table[0]["col_1"] == "y"

    def test_positional_headers(self):
        grid = Grid([["marker"], ["1", "Alpha"], ["2", "Beta"]])
        options = AssemblyOptions(headers=["#", "Team"], required_keys=("#",))
        table = assemble(grid, SectionBoundary(1, 3), options=options)
        assert table.headers == ("#", "Team")
        assert table.metadata["header_row"] == -1

    def test_without_header_row(self):
        with pytest.raises(ValueError):
            assemble(Grid([["a"]]), SectionBoundary(0, 1))

    def test_hidden_headers(self):
        grid = Grid([["Team", "GP", "General Statistics FG%", "W"], ["Alpha", "9", "0.5", "3"]])
        options = AssemblyOptions(hidden_headers=("gp",), hidden_prefixes=("general statistics",))
        table = assemble(grid, SectionBoundary(1, 2, 0), options=options)
        assert table.headers == ("Team", "W")


class TestTable:
    def make_table(self, gp2_values):
        records = [
            {"Team": "Alpha", "GP": "10", "GP_2": gp2_values[0]},
            {"Team": "Beta", "GP": "9", "GP_2": gp2_values[1]},
        ]
        return Table(["Team", "GP", "GP_2"], records)

    def test_resolve_key_prefers_variant_with_values(self):
        table = self.make_table(["", "3"])
        assert table.resolve_key("GP", 2) == "GP_2"
        assert table.value(table[0], "GP", 2) == ""
        assert table.value(table[1], "GP", 2) == "3"

    def test_resolve_key_falls_back_to_base(self):
        table = self.make_table(["", ""])
        assert table.resolve_key("GP", 2) == "GP"
        assert table.resolve_key("PTS", 2) == "PTS"
        assert table.resolved_keys == {("GP", 2): "GP", ("PTS", 2): "PTS"}

    def test_resolve_keys(self):
        table = self.make_table(["1", "2"])
        assert table.resolve_keys(["GP", "Team"], 2) == {"GP": "GP_2", "Team": "Team"}

    def test_column_and_find_key(self):
        table = self.make_table(["", ""])
        assert table.column("Team") == ["Alpha", "Beta"]
        assert table.find_key("gp") == "GP"
        assert table.find_key("PTS") is None
        assert not table.has_values("GP_2")

    def test_to_dataframe(self, scenario_grid):
        table = assemble(scenario_grid, section(scenario_grid))

        df = table.to_dataframe(snake_case=True, typed=True)
        assert list(df.columns) == ["rank", "team", "fg_pct", "to"]
        assert df["fg_pct"].tolist() == pytest.approx([0.543, 0.543])
        assert df["team"].tolist() == ["Alpha", "Beta"]

        raw = table.to_dataframe()
        assert raw["FG%"].tolist() == ["54.3%", "0.543"]

    def test_empty_table(self):
        table = Table(["Team"], [])
        assert table.is_empty
        assert len(table) == 0
        assert table.to_dataframe().empty
