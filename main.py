#!/usr/bin/env python3
"""
Sheet Parser - CLI entry point for hand-kept spreadsheet exports

This script provides a command-line interface for parsing Google Sheets
exports (CSV or GViz JSON) into typed tables using the sheet_parser package.

Supports:
- Parsing a local export file or fetching a sheet tab by id/gid
- Sorting a table by any column
- Head-to-head category comparison of two teams
- CSV export of the parsed table
"""

import argparse
import logging
import sys

from sheet_parser import create_parser
from sheet_parser.core.comparator import compare_entities, detect_stat_keys
from sheet_parser.core.fetcher import SheetFetcher, csv_url, default_sheet_id, gviz_url
from sheet_parser.core.sorting import ASC, DESC, sort_table
from sheet_parser.core.value_normalizer import normalize_text
from sheet_parser.exceptions import SheetParserError
from sheet_parser.parsers import SHAPES
from sheet_parser.constants import SHEET_ID_ENV_VAR
from sheet_parser.utils.file_helpers import get_output_path


def load_source(args) -> str:
    """Read the export text from a file or fetch it from Google Sheets"""
    if args.file:
        print(f"📂 Reading export: {args.file}")
        with open(args.file, encoding='utf-8-sig') as f:
            return f.read()

    sheet_id = args.sheet_id or default_sheet_id()
    if not sheet_id:
        raise SystemExit(f"❌ No sheet id: pass --sheet-id or set {SHEET_ID_ENV_VAR}")
    if args.gid is None:
        raise SystemExit("❌ --gid is required when fetching a sheet")

    url = csv_url(sheet_id, args.gid) if args.format == 'csv' else gviz_url(sheet_id, args.gid)
    print(f"🌐 Fetching: {url[:100]}")
    return SheetFetcher().fetch_text(url)


def find_record(table, team_key: str, name: str):
    """Record of a team by case-insensitive name, or None"""
    wanted = normalize_text(name)
    for record in table:
        if normalize_text(record.get(team_key)) == wanted:
            return record
    return None


def print_comparison(sheet, table, team_a: str, team_b: str) -> bool:
    """Print the category head-to-head of two teams; False when a team is missing"""
    team_key = sheet.views.get('team_key') or table.metadata.get('primary_key')
    a = find_record(table, team_key, team_a)
    b = find_record(table, team_key, team_b)
    for name, record in ((team_a, a), (team_b, b)):
        if record is None:
            print(f"❌ Team not found: {name}")
            return False

    stats = sheet.views.get('stat_keys') or detect_stat_keys(table.headers, team_key)
    result = compare_entities(a, b, stats)

    print(f"\n⚔️  {a[team_key]} vs {b[team_key]}")
    for stat in stats:
        outcome = result.outcomes[stat.name]
        mark = 'W' if outcome > 0 else 'L' if outcome < 0 else 'T'
        print(f"  {stat.name:>6}: {a.get(stat.name, '') or '—':>8} | {b.get(stat.name, '') or '—':<8} {mark}")
    print(f"📊 Record: {result.wins}-{result.losses}-{result.ties}")
    return True


def print_pairs(sheet) -> None:
    """Print the W/L/T record of every pair of a matchup or playoff sheet"""
    pairs = sheet.views.get('pairs') or []
    results = sheet.views.get('results') or []
    team_key = sheet.views.get('team_key')
    if not pairs:
        return

    round_title = sheet.views.get('round')
    print(f"\n🏀 {round_title or 'Matchups'}: {len(pairs)} pairs")
    for (a, b), result in zip(pairs, results):
        print(f"  {a.get(team_key, '')} {result.wins}-{result.losses}-{result.ties} {b.get(team_key, '')}")


def main(argv=None) -> int:
    """Main function with command-line argument support"""
    parser = argparse.ArgumentParser(
        description='Parse hand-kept Google Sheets exports into typed tables',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --file standings.json --shape standings
  %(prog)s --file week.json --shape matchup --compare "Alpha" "Beta"
  %(prog)s --file ranking.csv --shape history --variant rankings --sort "Category Standing"
  %(prog)s --sheet-id ID --gid 1782234437 --shape standings -o standings.csv
        """
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument('--file',
                        help='Local export file (CSV or GViz JSON)')
    source.add_argument('--sheet-id',
                        help=f'Spreadsheet id to fetch (default: ${SHEET_ID_ENV_VAR})')
    parser.add_argument('--gid',
                        help='Tab id to fetch (with --sheet-id)')
    parser.add_argument('--format',
                        choices=['auto', 'csv', 'gviz'],
                        default='auto',
                        help='Source format (default: auto)')
    parser.add_argument('--shape',
                        choices=SHAPES,
                        default='standings',
                        help='Sheet shape (default: standings)')
    parser.add_argument('--table',
                        help='Table to show (default: the first table of the sheet)')
    parser.add_argument('--sort',
                        help='Column to sort by')
    parser.add_argument('--desc',
                        action='store_true',
                        help='Sort descending')
    parser.add_argument('--league',
                        help='League to keep (playouts/playoffs)')
    parser.add_argument('--variant',
                        choices=['totals', 'rankings'],
                        default='totals',
                        help='Header set of the history sheet (default: totals)')
    parser.add_argument('--compare',
                        nargs=2,
                        metavar=('TEAM_A', 'TEAM_B'),
                        help='Category head-to-head of two teams')
    parser.add_argument('-o', '--output',
                        help='Write the table to a CSV file')
    parser.add_argument('--output-dir',
                        help='Write every table of the sheet to CSV files in this directory')
    parser.add_argument('--snake-case',
                        action='store_true',
                        help='Use snake_case column names in the CSV output')
    parser.add_argument('-v', '--verbose',
                        action='store_true',
                        help='Enable debug logging')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        sheet_parser = create_parser(args.shape, args.league, args.variant, args.format)
        text = load_source(args)

        print(f"🔍 Parsing {args.shape} sheet...")
        sheet = sheet_parser.parse(text)
        table = sheet.table(args.table)
    except (SheetParserError, OSError, KeyError) as e:
        print(f"❌ {e}")
        return 1

    print(f"✅ Found tables: {', '.join(f'{name} ({len(t)} rows)' for name, t in sheet.tables.items())}")

    if args.sort:
        key = table.find_key(args.sort) or args.sort
        table = sort_table(table, key, DESC if args.desc else ASC)
    elif args.table is None and 'ranked' in sheet.views:
        table = sheet.views['ranked']

    if args.compare:
        if not print_comparison(sheet, table, *args.compare):
            return 1
    else:
        print_pairs(sheet)

    df = table.to_dataframe()
    print(f"\n📋 {len(table)} rows × {len(table.headers)} columns")
    if not df.empty:
        print(df.head(20).to_string(index=False))

    if args.output:
        sheet_parser.save_to_csv(table, args.output, snake_case=args.snake_case)
        print(f"💾 File saved: {args.output}")

    if args.output_dir:
        suffix = f"_{args.variant}" if args.shape == 'history' else ''
        for name, sheet_table in sheet.tables.items():
            path = get_output_path(args.shape, name, args.output_dir, suffix)
            sheet_parser.save_to_csv(sheet_table, path, snake_case=args.snake_case)
            print(f"💾 File saved: {path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
