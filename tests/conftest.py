import json

import pytest

from sheet_parser.constants import HISTORY_BASE_COLUMNS
from sheet_parser.core.ingestion import Grid


def gviz_text(labels, rows):
    """Wrap labels and rows the way the GViz endpoint does"""
    payload = {
        "version": "0.6",
        "status": "ok",
        "table": {
            "cols": [{"id": chr(65 + i), "label": label, "type": "string"} for i, label in enumerate(labels)],
            "rows": [{"c": [{"v": cell} if cell != "" else None for cell in row]} for row in rows],
        },
    }
    return "/*O_o*/\ngoogle.visualization.Query.setResponse(" + json.dumps(payload) + ");"


@pytest.fixture
def make_gviz():
    return gviz_text


@pytest.fixture
def scenario_grid():
    return Grid([
        ["Rank", "Team", "FG%", "TO"],
        ["1", "Alpha", "54.3%", "12"],
        ["2", "Beta", "0.543", "8"],
    ])


@pytest.fixture
def scenario_csv():
    return "Rank,Team,FG%,TO\r\n1,Alpha,54.3%,12\r\n2,Beta,0.543,8\r\n"


@pytest.fixture
def matchup_rows():
    stats = ["FG%", "3P", "FT%", "PTS", "REB", "AST", "ST", "BLK", "TO"]
    standings = ["#", "Team", "W", "L", "T", "W%", "GP"] + stats
    return [
        ["MATCHUP LIVE RESULTS"],
        ["", "Team"] + stats + ["Score"],
        ["1", "Alpha", ".480", "50", "0.8", "500", "200", "100", "40", "30", "60", "6-3-0"],
        ["2", "Beta", ".450", "55", "0.75", "480", "210", "90", "45", "25", "70", "3-6-0"],
        ["3", "Gamma", ".470", "52", "0.78", "490", "205", "95", "42", "28", "65", "0-0-9"],
        ["4", "Delta", ".470", "52", "0.78", "490", "205", "95", "42", "28", "65", "0-0-9"],
        [""],
        ["STANDINGS BEFORE MATCHUP / TOTAL STATISTICS"],
        standings,
        ["1", "Alpha", "10", "5", "1", ".650", "16", ".480", "500", "0.8", "5000", "2000", "1000", "400", "300", "600"],
        ["2", "Beta", "9", "6", "1", ".590", "16", ".450", "550", "0.75", "4800", "2100", "900", "450", "250", "700"],
        [""],
        ["", "League average", "9", "6", "1", ".600", "16", ".460", "520", "0.77", "4900", "2050", "950", "420", "270", "650"],
    ]


def history_row(team, league, standing, league_rank, totals, rankings=None):
    second = [str(v) for v in rankings] if rankings else [""] * (len(HISTORY_BASE_COLUMNS) + 2)
    return ["", team, league, str(standing), str(league_rank)] + [str(v) for v in totals] + second


@pytest.fixture
def history_header():
    return (["", "Team", "League", "Category Standing", "League Ranking"] + HISTORY_BASE_COLUMNS
            + ["Category Standing", "League Ranking"] + HISTORY_BASE_COLUMNS)


@pytest.fixture
def history_totals_grid(history_header):
    return Grid([
        ["Season 2023 Rankings"],
        history_header,
        history_row("Alpha", "A1", 2, 1, [10, ".500", 100, ".800", 1000, 400, 200, 50, 30, 80]),
        history_row("Beta", "A1", 1, 2, [10, ".450", 120, ".750", 1100, 380, 210, 55, 25, 60]),
        history_row("Gamma", "A2", 3, 1, [10, ".400", 90, ".700", 900, 350, 190, 45, 20, 90]),
        [""],
        history_row("Delta", "", 4, 1, [10, ".300", 80, ".600", 800, 300, 150, 40, 10, 95]),
        history_row("", "A2", 5, 2, [10, ".300", 80, ".600", 800, 300, 150, 40, 10, 95]),
    ])


@pytest.fixture
def history_rankings_grid(history_header):
    return Grid([
        history_header,
        history_row("Alpha", "A1", 2, 1, [10, ".500", 100, ".800", 1000, 400, 200, 50, 30, 80],
                    [1, 1, 1, 1, 2, 1, 2, 1, 2, 1, 1, 3]),
        history_row("Beta", "A1", 1, 2, [10, ".450", 120, ".750", 1100, 380, 210, 55, 25, 60],
                    [2, 2, 1, 2, 1, 2, 1, 2, 1, 2, 2, 1]),
        history_row("Gamma", "A2", 3, 1, [10, ".400", 90, ".700", 900, 350, 190, 45, 20, 90],
                    [3, 1, 1, 3, 3, 3, 3, 3, 3, 3, 3, 2]),
    ])


@pytest.fixture
def seasons_rows():
    return [
        ["All-time history"],
        ["#", "Team", "2021", "2022", "2023", "W", "L", "T", "Titles", "", "Notes"],
        ["1", "Alpha", "1", "2", "1", "30", "10", "2", "2", "", "x"],
        ["2", "Beta", "2", "1", "3", "25", "15", "2", "1", "", ""],
        ["3", "Gamma", "3", "3", "2", "20", "20", "2", "0", "", ""],
        [""],
        ["Champions League"],
        ["Season", "Winner"],
        ["2021", "Alpha"],
        ["2022", "Beta"],
    ]


class StubResponse:
    def __init__(self, status_code=200, text="", reason=""):
        self.status_code = status_code
        self.text = text
        self.reason = reason


class StubSession:
    """requests.Session stand-in replaying queued responses or exceptions"""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.headers = {}
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def stub_session():
    return StubSession


@pytest.fixture
def stub_response():
    return StubResponse
