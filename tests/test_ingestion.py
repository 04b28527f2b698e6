import json

import pytest

from sheet_parser.core.ingestion import (
    Grid,
    extract_gviz_payload,
    gviz_cell_value,
    ingest,
    parse_delimited,
)
from sheet_parser.exceptions import ParseError, SourceDecodeError


class TestParseDelimited:
    def test_quoted_fields_and_escaped_quotes(self):
        rows = parse_delimited('a,"b,c"\r\n"say ""hi""",d')
        assert rows == [["a", "b,c"], ['say "hi"', "d"]]

    def test_newline_inside_quotes_is_literal(self):
        rows = parse_delimited('x,"line1\nline2"\ny,z')
        assert rows[0] == ["x", "line1\nline2"]
        assert rows[1] == ["y", "z"]

    def test_custom_delimiter(self):
        assert parse_delimited("a;b\n1;2", delimiter=";") == [["a", "b"], ["1", "2"]]

    def test_unterminated_quote(self):
        with pytest.raises(SourceDecodeError):
            parse_delimited('a,"never closed\n1,2')

    def test_text_after_closing_quote_is_malformed(self):
        with pytest.raises(SourceDecodeError):
            parse_delimited('"a"b,c\n1,2')

    def test_trailing_newline_adds_no_row(self):
        assert parse_delimited("a,b\n1,2\n") == [["a", "b"], ["1", "2"]]


class TestIngestDelimited:
    def test_trailing_blank_rows_removed(self):
        grid = ingest("Team,PTS\nAlpha,1\n,\n\n", source_format="csv")
        assert grid.rows == (("Team", "PTS"), ("Alpha", "1"))
        assert grid.labels == ()

    def test_internal_blank_rows_kept(self):
        grid = ingest("Team,PTS\n,\nAlpha,1\n")
        assert len(grid) == 3
        assert grid.is_blank_row(1)

    def test_bytes_with_bom(self):
        grid = ingest(b"\xef\xbb\xbfTeam,PTS\nAlpha,1\n")
        assert grid.cell(0, 0) == "Team"

    def test_brace_led_csv_falls_back_to_delimited(self):
        grid = ingest("{note},Team\nx,Alpha\n")
        assert grid.rows == (("{note}", "Team"), ("x", "Alpha"))
        assert grid.labels == ()

    def test_json_without_table_falls_back_to_delimited(self):
        grid = ingest('{"a": 1}\nAlpha\n')
        assert grid.rows == (('{"a": 1}',), ("Alpha",))

    def test_empty_input(self):
        with pytest.raises(SourceDecodeError):
            ingest("   \n")

    def test_unsupported_type(self):
        with pytest.raises(ParseError):
            ingest(123)

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            ingest("a,b", source_format="xlsx")


class TestIngestGviz:
    def test_envelope(self):
        payload = {
            "status": "ok",
            "table": {
                "cols": [{"id": "A", "label": "Team"}, {"id": "B", "label": "PTS"}],
                "rows": [
                    {"c": [{"v": "Alpha"}, {"v": 120.0, "f": "120"}]},
                    {"c": [{"v": "Beta"}, None]},
                    {"c": [None, None]},
                ],
            },
        }
        text = "/*O_o*/\ngoogle.visualization.Query.setResponse(" + json.dumps(payload) + ");"

        grid = ingest(text)
        assert grid.labels == ("Team", "PTS")
        assert grid.rows == (("Alpha", "120"), ("Beta", ""))

    def test_decoded_mapping(self):
        grid = ingest({"table": {"cols": [{"label": "Team"}], "rows": [{"c": [{"v": "Alpha"}]}]}})
        assert grid.rows == (("Alpha",),)

    def test_formatted_value_preferred(self):
        assert gviz_cell_value({"v": 0.543, "f": "54.3%"}) == "54.3%"
        assert gviz_cell_value({"v": 12}) == "12"
        assert gviz_cell_value(None) == ""

    def test_error_status(self):
        text = 'google.visualization.Query.setResponse({"status":"error","errors":[{"message":"Invalid gid"}]});'
        with pytest.raises(SourceDecodeError) as exc:
            ingest(text)
        assert "Invalid gid" in str(exc.value)

    def test_invalid_json(self):
        with pytest.raises(SourceDecodeError):
            extract_gviz_payload("google.visualization.Query.setResponse({bad json});")

    def test_missing_object(self):
        with pytest.raises(SourceDecodeError):
            ingest("google.visualization.Query.setResponse(", source_format="gviz")


class TestGrid:
    def test_ragged_rows_read_as_empty(self):
        grid = Grid([["a", "b", "c"], ["d"]])
        assert grid.width == 3
        assert grid.cell(1, 2) == ""
        assert grid.cell(5, 0) == ""
        assert grid.row(1) == ("d", "", "")

    def test_with_label_row(self):
        grid = Grid([["Alpha", "1"]], labels=["Team", "PTS"])
        labelled = grid.with_label_row()
        assert labelled.row(0) == ("Team", "PTS")
        assert labelled.row(1) == ("Alpha", "1")

    def test_immutable_equality(self):
        assert Grid([["a"]]) == Grid([["a"]])
        assert hash(Grid([["a"]])) == hash(Grid([["a"]]))
        assert Grid([["a"]]) != Grid([["a"]], labels=["x"])
