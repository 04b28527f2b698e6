import pandas as pd
import pytest

from main import main
from sheet_parser import (
    AssemblyOptions,
    RequiredColumnNotFound,
    assemble,
    compare_entities,
    find_sections,
    ingest,
    sort_by,
)
from sheet_parser.core.comparator import stat_key


class TestScenario:
    def test_assemble_sort_compare(self, scenario_csv):
        grid = ingest(scenario_csv)
        boundary = find_sections(grid, "anchor", anchor="Team")[0]
        table = assemble(grid, boundary, options=AssemblyOptions(strategy="anchor"))

        assert len(table) == 2
        alpha, beta = table.records
        assert table.to_dataframe(typed=True)["FG%"].tolist() == pytest.approx([0.543, 0.543])

        assert [r["Team"] for r in sort_by(table, "TO", "asc")] == ["Beta", "Alpha"]

        result = compare_entities(alpha, beta, [stat_key("FG%"), stat_key("TO")])
        assert result.as_dict() == {"wins": 0, "losses": 1, "ties": 1}

    def test_missing_anchor(self):
        grid = ingest("Name,PTS\nAlpha,1\n")
        with pytest.raises(RequiredColumnNotFound):
            find_sections(grid, "anchor")


class TestCli:
    @pytest.fixture
    def export_file(self, tmp_path, scenario_csv):
        path = tmp_path / "week.csv"
        path.write_text(scenario_csv, encoding="utf-8")
        return str(path)

    def test_compare_and_export(self, export_file, tmp_path, capsys):
        output = tmp_path / "out.csv"
        code = main(["--file", export_file, "--shape", "matchup", "--compare", "alpha", "Beta",
                     "-o", str(output), "--snake-case"])

        assert code == 0
        assert "Record: 0-1-1" in capsys.readouterr().out
        df = pd.read_csv(output)
        assert list(df.columns) == ["rank", "team", "fg_pct", "to"]
        assert len(df) == 2

    def test_sort_descending(self, export_file, capsys):
        assert main(["--file", export_file, "--shape", "matchup", "--sort", "to", "--desc"]) == 0
        preview = capsys.readouterr().out.split("📋")[1]
        assert preview.index("Alpha") < preview.index("Beta")

    def test_output_dir(self, export_file, tmp_path):
        target = tmp_path / "exports"
        assert main(["--file", export_file, "--shape", "standings", "--output-dir", str(target)]) == 0
        assert (target / "standings_standings.csv").is_file()

    def test_unknown_team(self, export_file, capsys):
        assert main(["--file", export_file, "--shape", "matchup", "--compare", "Alpha", "Omega"]) == 1
        assert "Team not found: Omega" in capsys.readouterr().out

    def test_structural_error_exits_with_message(self, tmp_path, capsys):
        path = tmp_path / "bad.csv"
        path.write_text("Name,PTS\nAlpha,1\n", encoding="utf-8")

        assert main(["--file", str(path), "--shape", "standings"]) == 1
        assert "required column not found" in capsys.readouterr().out

    def test_missing_file(self, tmp_path, capsys):
        assert main(["--file", str(tmp_path / "nope.csv")]) == 1
        assert "❌" in capsys.readouterr().out
