#!/usr/bin/env python3
"""
Fund Explorer CLI — query fund exports from the terminal, convert workbooks, serve the API.

USAGE:
  python -m fund_explorer.cli query                                   # Top 10 active funds by YTD
  python -m fund_explorer.cli query --source etf-y-etc --sort one_year_return
  python -m fund_explorer.cli query --category "Renta Fija" --currency EUR --page 2
  python -m fund_explorer.cli query --isin LU0123456789

  python -m fund_explorer.cli filters --source fondos-indexados      # Filter-panel counts

  python -m fund_explorer.cli convert Fondos.xlsx                     # Workbook -> datos-*.csv

  python -m fund_explorer.cli serve                                   # Start API server
  python -m fund_explorer.cli serve --port 8000
"""
from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from fund_explorer.config import DATA_FOLDER
from fund_explorer.analytics.filter_counts import aggregate_counts
from fund_explorer.data.loader import convert_workbook, load_profile
from fund_explorer.data.query import execute
from fund_explorer.data.schemas import DatasetProfile, Query, SortKey, TriState
from fund_explorer.errors import FundExplorerError
from fund_explorer.logging_setup import configure_logging


def _build_query(args) -> Query:
    """Build a Query from CLI args."""
    return Query(
        isin=args.isin or "",
        categories=args.category or [],
        currency=args.currency or "",
        risk_levels=args.risk or [],
        focus_list=args.focus,
        implicit_advisory=args.implicit,
        explicit_advisory=args.explicit,
        hedge=args.hedge,
        sort_by=args.sort,
        page=args.page,
        limit=args.limit,
        data_source=args.source,
    )


def cmd_query(args):
    """Print one page of query results."""
    query = _build_query(args)
    funds = load_profile(query.data_source, Path(args.data_dir))
    result = execute(funds, query)

    key = query.sort_by.value
    print(f"\n{query.data_source.label.upper()} — sorted by {key}")
    print("=" * 100)
    print(f"{'ISIN':<14}{'NAME':<44}{'CCY':<5}{'RISK':<20}{key:>14}")
    print("-" * 100)
    for f in result.funds:
        print(f"{f.isin:<14}{f.name[:42]:<44}{f.currency[:4]:<5}{f.risk_level.value:<20}{getattr(f, key):>14.2f}")
    print("-" * 100)
    print(f"Page {result.page}/{max(result.total_pages, 1)}  |  {result.total:,} matching funds\n")


def cmd_filters(args):
    """Print filter-panel counts for a data source."""
    profile = DatasetProfile.parse(args.source)
    funds = load_profile(profile, Path(args.data_dir))
    counts = aggregate_counts(funds, profile).to_dict()

    print(f"\n{profile.label.upper()} — {len(funds):,} funds")
    print("=" * 60)
    for group, tally in counts.items():
        if tally is None:
            continue
        print(f"\n  {group}")
        for value, n in tally.items():
            print(f"    {value[:44]:<46}{n:>8,}")
    print()


def cmd_convert(args):
    """Convert an Excel workbook into per-sheet source CSVs."""
    results = convert_workbook(Path(args.workbook), Path(args.data_dir))
    for r in results:
        target = r["profile"] or "(no matching profile)"
        print(f"  {r['sheet']:<30} -> {r['file']:<40} {r['rows']:>6,} rows  {target}")


def cmd_serve(args):
    """Start the API server."""
    import uvicorn
    print(f"\nStarting Fund Explorer API on port {args.port}...")
    uvicorn.run("fund_explorer.main:app", host="0.0.0.0", port=args.port, reload=args.reload,
                timeout_keep_alive=65)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Fund Explorer — fund export normalization and query engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--data-dir", default=str(DATA_FOLDER), help=f"Source CSV folder (default {DATA_FOLDER})")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING...")
    subparsers = parser.add_subparsers(dest="command", help="Command")

    sources = [p.value for p in DatasetProfile]
    tri = [t.value for t in TriState]

    # query subcommand
    query_parser = subparsers.add_parser("query", help="Filter, sort and page through funds")
    query_parser.add_argument("--source", choices=sources, default=DatasetProfile.ACTIVE_MANAGEMENT.value)
    query_parser.add_argument("--isin", help="Exact ISIN")
    query_parser.add_argument("--category", action="append", help="Category prefix (repeatable)")
    query_parser.add_argument("--currency", help="Currency code")
    query_parser.add_argument("--risk", action="append", help="Risk level (repeatable)")
    query_parser.add_argument("--focus", choices=tri, default=TriState.ANY.value)
    query_parser.add_argument("--implicit", choices=tri, default=TriState.ANY.value)
    query_parser.add_argument("--explicit", choices=tri, default=TriState.ANY.value)
    query_parser.add_argument("--hedge", choices=tri, default=TriState.ANY.value)
    query_parser.add_argument("--sort", choices=[s.value for s in SortKey], default=SortKey.YTD_RETURN.value)
    query_parser.add_argument("--page", type=int, default=1)
    query_parser.add_argument("--limit", type=int, default=10)
    query_parser.set_defaults(func=cmd_query)

    # filters subcommand
    filters_parser = subparsers.add_parser("filters", help="Show filter-panel counts")
    filters_parser.add_argument("--source", choices=sources, default=DatasetProfile.ACTIVE_MANAGEMENT.value)
    filters_parser.set_defaults(func=cmd_filters)

    # convert subcommand
    convert_parser = subparsers.add_parser("convert", help="Convert an Excel workbook to source CSVs")
    convert_parser.add_argument("workbook", help="Path to .xlsx workbook")
    convert_parser.set_defaults(func=cmd_convert)

    # serve subcommand
    serve_parser = subparsers.add_parser("serve", help="Start API server")
    serve_parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", "8000")), help="Port (default 8000)")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    serve_parser.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    configure_logging(args.log_level)
    try:
        args.func(args)
    except FundExplorerError as e:
        print(f"  Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
