"""
Constants and configuration for sheet parsers.

This module contains all shared constants including placeholder values,
header rename rules, section markers, anchor labels, the statistic registry
and the detection thresholds used across the engine and the sheet shapes.
"""

# Cell values that carry no data (dash placeholders used in hand-kept sheets)
EMPTY_PLACEHOLDERS = {'', '—', '-', '–'}

# Header values treated as blank
BAD_HEADERS = {'', '—', '-', '–', '— —'}

# Glyphs that mark a dash placeholder when leading a numeric cell
DASH_GLYPHS = ('-', '–', '—')

# Currency-like symbols stripped before numeric detection
CURRENCY_SYMBOLS = '$€£¥'

# Header rename rules: (phrases that must all be present, canonical name).
# Matched case-insensitively against the cleaned header text, first match wins.
HEADER_RENAME_RULES = [
    (('general standings general ranking', 'regular ranking'), 'Rank'),
    (('weekly standings weekly ranking', 'official ranking'), 'Rank'),
    (('points system', 'w% points'), 'W% points'),
]

# Exact renames on the normalized (lower-case, single-spaced) header text
HEADER_EXACT_RENAMES = {
    'weekly statistics fg%': 'FG%',
    'weekly statistics rankings fg%': 'FG% Rank',
}

# Anchor label of the team/entity column
TEAM_LABEL = 'Team'
LEAGUE_LABEL = 'League'
RANK_LABEL = 'Rank'

# Accepted spellings of the team column (normalized)
TEAM_COLUMN_CANDIDATES = ['team', 'ομαδα', 'ομάδα', 'club', 'squad']

# Marker phrases (normalized, all phrases of a tuple must be present)
MATCHUP_TITLE_MARKER = ('matchup live results',)
STANDINGS_TITLE_MARKER = ('standings before matchup',)
STANDINGS_TOTALS_MARKER = ('standings before matchup', 'total statistics')
CHAMPIONS_LEAGUE_MARKER = ('champions league',)

# Section discovery thresholds
SEPARATOR_BLANK_THRESHOLD = 0.9   # Fraction of blank sampled cells that flags a separator column
SEPARATOR_SAMPLE_ROWS = 220       # Rows sampled for separator detection
MAX_BLANK_RUN = 8                 # Consecutive blank rows that end a section without a stop marker
RANK_PROBE_ROWS = 7               # Rows probed to decide whether the column left of Team is a rank

# Defensive caps keeping every operation O(grid size)
MAX_ROWS = 5000
MAX_COLUMNS = 512

# Canonical category statistics, in display order
CANON_ORDER = ['FG%', '3P', 'FT%', 'PTS', 'REB', 'AST', 'ST', 'BLK', 'TO']

# Canonical order is used only when at least this many categories are present
MIN_CANON_PRESENT = 7

# Statistics where a lower value is better
LOWER_IS_BETTER_STATS = {'to'}
LOWER_IS_BETTER_PHRASES = ('turnover',)

# Raw statistic columns of the general standings (hidden in general mode)
HIDE_GENERAL_COLUMNS = {
    'gp',
    'fg%',
    '3p',
    'ft%',
    'pts',
    'reb',
    'ast',
    'st',
    'blk',
    'to',
    'general statistics fg%',
    'general statistics rankings gp',
}

HIDE_GENERAL_PREFIXES = ['general statistics', 'general statistics rankings']

# Fixed column layout of the "standings before matchup" block
STANDINGS_BEFORE_HEADERS = [
    '#', 'Team', 'W', 'L', 'T', 'W%', 'GP',
    'FG%', '3P', 'FT%', 'PTS', 'REB', 'AST', 'ST', 'BLK', 'TO',
]
STANDINGS_BEFORE_MAX_ROWS = 12

# History (season rankings) layout
HISTORY_TEAM_COLUMN_INDEX = 1
HISTORY_RANK_COLUMN = 'Category Standing'
HISTORY_LEAGUE_RANK_COLUMN = 'League Ranking'
HISTORY_BASE_COLUMNS = ['GP', 'FG%', '3P', 'FT%', 'PTS', 'REB', 'AST', 'ST', 'BLK', 'TO']
HISTORY_VARIANTS = {'totals': 1, 'rankings': 2}
PODIUM_SIZE = 3
CATEGORY_HIGHLIGHT_SIZE = 5

# Header labels never treated as category statistics
STAT_SKIP_EXACT = {'league', 'result', 'score'}
STAT_SKIP_PHRASES = ['matchup no', 'category h2h', 'rank', 'regular league', 'http', 'fantrax', 'link']

# Playoff round labels detected from header text (checked in order)
PLAYOFF_ROUNDS = [
    ('round 1', 'Round 1'),
    ('semifinals', 'SEMIFINALS'),
    ('finals', 'FINALS'),
    ('3rd place', '3RD PLACE'),
    ('third place', '3RD PLACE'),
]
DEFAULT_PLAYOFF_ROUND = 'PLAYOFFS'
BYE_TEAM = 'bye'

# Team directory
UNASSIGNED_LEAGUE = 'Unassigned'
UNKNOWN_DIVISION = 'Unknown'
DIVISION_ORDER = {'A': 1, 'B': 2, 'Γ': 3}
MAX_KEY_VARIANT = 6
TEAM_STAT_SOURCES = {
    'FG%': ['GENERAL STATISTICS FG%', 'FG%'],
    '3P': ['3P'],
    'FT%': ['FT%'],
    'PTS': ['PTS'],
    'REB': ['REB'],
    'AST': ['AST'],
    'ST': ['ST'],
    'BLK': ['BLK'],
    'TO': ['TO'],
}

# Season history layout: fixed number of trailing totals columns
SEASON_TOTALS_COLUMNS = 4

# Retrieval boundary
GVIZ_URL_TEMPLATE = 'https://docs.google.com/spreadsheets/d/{sheet_id}/gviz/tq?tqx=out:json&gid={gid}'
CSV_URL_TEMPLATE = 'https://docs.google.com/spreadsheets/d/{sheet_id}/export?format=csv&gid={gid}'
SHEET_ID_ENV_VAR = 'GNFC_SHEET_ID'
REQUEST_TIMEOUT = 30
MAX_FETCH_ATTEMPTS = 5
RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

DEFAULT_HEADERS = {
    'User-Agent': 'sheet-parser/1.0 (+https://docs.google.com/spreadsheets)',
    'Accept': 'application/json,text/csv,text/plain;q=0.9,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.9',
}

# Replacements applied after snake_case conversion for readability
SNAKE_CASE_REPLACEMENTS = {
    'w_pct_points': 'win_pct_points',
    '3p': 'threes',
}
