"""CLI entry point for the dividend spreadsheet pipeline."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import asdict, replace
from datetime import date
from pathlib import Path

import pandas as pd

from dividend_pipeline.analysis.aggregation import (
    by_date,
    by_instrument_and_date,
    totals,
)
from dividend_pipeline.analysis.filtering import (
    FilterOptions,
    amount_bounds,
    apply_filters,
    available_instruments,
)
from dividend_pipeline.config import (
    DateSortField,
    ExportConfig,
    ForecastConfig,
    IngestConfig,
    InstrumentSortField,
    RecordSortField,
)
from dividend_pipeline.data import LoadedFile, SheetResult, load_file, process_sheet
from dividend_pipeline.data.companies import (
    all_companies,
    display_name,
    long_name_for,
    search_companies,
)
from dividend_pipeline.data.dates import format_date
from dividend_pipeline.errors import DividendPipelineError
from dividend_pipeline.metrics.forecast import compute_forecast, projection_series
from dividend_pipeline.metrics.summary import compute_summary
from dividend_pipeline.output.csv_export import (
    DATE_COLUMNS,
    INSTRUMENT_COLUMNS,
    export_by_date_csv,
    export_by_instrument_csv,
    export_records_csv,
    to_frame,
)

logger = logging.getLogger(__name__)

MONTH_NAMES = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Argument list (defaults to sys.argv[1:]).

    Returns:
        Parsed arguments namespace.
    """
    verbosity = argparse.ArgumentParser(add_help=False)
    verbosity.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    common = argparse.ArgumentParser(add_help=False, parents=[verbosity])
    common.add_argument("file", type=Path, help="Dividend export (.xls or .xlsx)")
    common.add_argument(
        "--sheet",
        type=int,
        default=None,
        help="Sheet index to process (default: auto-detected)",
    )
    common.add_argument(
        "--as-of",
        type=date.fromisoformat,
        default=None,
        help="Reference date YYYY-MM-DD (default: today)",
    )

    filters = argparse.ArgumentParser(add_help=False)
    filters.add_argument(
        "--search",
        default="",
        help="Keep records whose name, ticker, or ISIN contains this text",
    )
    filters.add_argument(
        "--instrument",
        dest="instruments",
        action="append",
        default=None,
        help="Keep only this instrument (long name or ticker, repeatable)",
    )
    filters.add_argument(
        "--from",
        dest="start_date",
        type=date.fromisoformat,
        default=None,
        help="Earliest payment date YYYY-MM-DD (inclusive)",
    )
    filters.add_argument(
        "--to",
        dest="end_date",
        type=date.fromisoformat,
        default=None,
        help="Latest payment date YYYY-MM-DD (inclusive)",
    )
    filters.add_argument(
        "--min-amount",
        type=float,
        default=None,
        help="Minimum net USD amount (inclusive)",
    )
    filters.add_argument(
        "--max-amount",
        type=float,
        default=None,
        help="Maximum net USD amount (inclusive)",
    )

    parser = argparse.ArgumentParser(
        prog="dividend-pipeline",
        description="Dividend spreadsheet aggregation and forecasting",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("sheets", parents=[common], help="List workbook sheets")

    records_parser = subparsers.add_parser(
        "records", parents=[common, filters], help="Show cleaned records"
    )
    records_parser.add_argument(
        "--sort",
        choices=[f.value for f in RecordSortField],
        default=None,
        help="Sort field (default: sheet order)",
    )
    records_parser.add_argument(
        "--ascending",
        action="store_true",
        help="Sort ascending (default: descending)",
    )

    date_parser = subparsers.add_parser(
        "by-date", parents=[common, filters], help="Totals and cumulative totals per date"
    )
    date_parser.add_argument(
        "--sort",
        choices=[f.value for f in DateSortField],
        default=DateSortField.DATE.value,
        help="Sort field (default: date)",
    )
    date_parser.add_argument(
        "--ascending",
        action="store_true",
        help="Sort ascending (default: descending)",
    )

    instrument_parser = subparsers.add_parser(
        "by-instrument", parents=[common, filters], help="Totals per instrument and date"
    )
    instrument_parser.add_argument(
        "--sort",
        choices=[f.value for f in InstrumentSortField],
        default=InstrumentSortField.DATE.value,
        help="Sort field (default: date)",
    )
    instrument_parser.add_argument(
        "--ascending",
        action="store_true",
        help="Sort ascending (default: descending)",
    )
    instrument_parser.add_argument(
        "--short-names",
        action="store_true",
        help="Show tickers instead of long names where known",
    )

    subparsers.add_parser("forecast", parents=[common, filters], help="Trend projections")
    subparsers.add_parser("summary", parents=[common, filters], help="Headline metrics")

    export_parser = subparsers.add_parser(
        "export", parents=[common, filters], help="Write records and aggregates as CSV"
    )
    export_parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("output"),
        help="Output directory (default: output/)",
    )

    companies_parser = subparsers.add_parser(
        "companies", parents=[verbosity], help="List or search known tickers"
    )
    companies_parser.add_argument(
        "term",
        nargs="?",
        default="",
        help="Text to search in tickers and company names (default: list all)",
    )

    return parser.parse_args(argv)


def _filter_options(args: argparse.Namespace) -> FilterOptions | None:
    """Record filters requested on the command line, or None for none."""
    instruments = [long_name_for(name) or name for name in args.instruments or []]
    options = FilterOptions(
        search_term=args.search,
        instruments=instruments,
        start_date=args.start_date,
        end_date=args.end_date,
        min_amount=args.min_amount,
        max_amount=args.max_amount,
        sort_by=None,
    )
    if options == FilterOptions(sort_by=None):
        return None
    return options


def _load(args: argparse.Namespace, config: IngestConfig) -> tuple[LoadedFile, SheetResult]:
    """Load the file, process the requested (or default) sheet, apply filters."""
    loaded = load_file(args.file, config)
    sheet_index = loaded.default_sheet if args.sheet is None else args.sheet
    result = process_sheet(loaded.workbook, sheet_index, config)

    options = _filter_options(args)
    if options is not None:
        records = apply_filters(result.records, options, today=args.as_of)
        logger.info("Filters kept %d of %d records", len(records), len(result.records))
        result = replace(result, records=records)
    return loaded, result


def _print_frame(frame: pd.DataFrame) -> None:
    if frame.empty:
        print("(no rows)")
    else:
        print(frame.to_string(index=False))


def run_sheets(args: argparse.Namespace, config: IngestConfig) -> None:
    """List sheets, marking the auto-detected one."""
    loaded = load_file(args.file, config)
    info = loaded.file_info
    print(f"{info.name}  {info.size}  modified {info.last_modified:%d/%m/%Y %H:%M}")
    for index, name in enumerate(loaded.workbook.sheet_names):
        marker = " (default)" if index == loaded.default_sheet else ""
        readable = "" if name in loaded.workbook.sheets else " [unreadable]"
        print(f"{index:>3}  {name}{marker}{readable}")


def run_records(args: argparse.Namespace, config: IngestConfig) -> None:
    """Print cleaned records, with the instrument list and amount range."""
    _, result = _load(args, config)
    records = result.records
    if args.sort is not None:
        records = apply_filters(
            records,
            FilterOptions(sort_by=RecordSortField(args.sort), descending=not args.ascending),
            today=args.as_of,
        )

    _print_frame(pd.DataFrame([asdict(r) for r in records]))
    print(f"\n{len(records)} records from sheet {result.sheet_name!r}")
    if records:
        labels = [label for label, _ in available_instruments(records)]
        low, high = amount_bounds(records)
        print(f"Instruments: {', '.join(labels)}")
        print(f"USD amount range: {low} to {high}")


def run_by_date(args: argparse.Namespace, config: IngestConfig) -> None:
    """Print date aggregates with column totals."""
    _, result = _load(args, config)
    aggregates = by_date(
        result.records,
        sort_by=DateSortField(args.sort),
        descending=not args.ascending,
        today=args.as_of,
    )
    _print_frame(to_frame(aggregates, DATE_COLUMNS).round(2))
    usd, eur = totals(aggregates)
    print(f"\n{len(aggregates)} dates, total USD {usd:.2f}, total EUR {eur:.2f}")


def run_by_instrument(args: argparse.Namespace, config: IngestConfig) -> None:
    """Print per-instrument, per-date aggregates with column totals."""
    _, result = _load(args, config)
    aggregates = by_instrument_and_date(
        result.records,
        sort_by=InstrumentSortField(args.sort),
        descending=not args.ascending,
        short_names=args.short_names,
        today=args.as_of,
    )
    frame = to_frame(aggregates, INSTRUMENT_COLUMNS).round(2)
    if args.short_names:
        frame["instrument_name"] = frame["instrument_name"].map(display_name)
    _print_frame(frame)
    usd, eur = totals(aggregates)
    print(f"\n{len(aggregates)} payments, total USD {usd:.2f}, total EUR {eur:.2f}")


def run_forecast(args: argparse.Namespace, config: IngestConfig) -> None:
    """Print forecast estimates, seasonality, growth ranking, and projection."""
    _, result = _load(args, config)
    forecast_config = ForecastConfig()
    forecast = compute_forecast(result.records, forecast_config, today=args.as_of)

    print(f"Next quarter estimate: {forecast.next_quarter_estimate:.2f}")
    print(f"Next year estimate:    {forecast.next_year_estimate:.2f}")
    print(f"Trend:                 {forecast.trend.value}")
    print(f"Confidence:            {forecast.confidence_percent:.1f}%")
    print(f"Risk level:            {forecast.risk_level.value}")

    if forecast.seasonal_pattern:
        print("\nSeasonal pattern")
        _print_frame(pd.DataFrame([
            {"month": MONTH_NAMES[f.month], "multiplier": round(f.multiplier, 2)}
            for f in forecast.seasonal_pattern
        ]))

    if forecast.top_growth_instruments:
        print("\nTop growth instruments")
        _print_frame(pd.DataFrame([
            {
                "instrument": display_name(g.name),
                "growth_percent": round(g.growth_percent, 1),
                "predicted_next": round(g.predicted_next_amount, 2),
            }
            for g in forecast.top_growth_instruments
        ]))

    as_of = args.as_of or date.today()
    print("\nMonthly history and projection")
    _print_frame(pd.DataFrame([
        {
            "month": p.label,
            "amount": round(p.amount, 2),
            "projected": "yes" if p.projected else "",
        }
        for p in projection_series(result.records, as_of, forecast_config)
    ]))


def run_summary(args: argparse.Namespace, config: IngestConfig) -> None:
    _, result = _load(args, config)
    summary = compute_summary(result.records, as_of=args.as_of)
    print(f"Total USD:               {summary.total_usd:.2f}")
    print(f"Total EUR:               {summary.total_eur:.2f}")
    print(f"Payments:                {summary.total_transactions}")
    print(f"Instruments:             {summary.unique_instruments}")
    print(f"Average per payment:     {summary.average_per_transaction:.2f}")
    print(f"Monthly average:         {summary.monthly_average:.2f}")
    print(f"Best month:              {summary.best_month} ({summary.best_month_amount:.2f})")
    print(
        f"Best instrument:         {display_name(summary.best_instrument)} "
        f"({summary.best_instrument_amount:.2f})"
    )
    print(f"First payment:           {format_date(summary.first_payment)}")
    print(f"Last payment:            {format_date(summary.last_payment)}")
    print(f"Recent activity:         {summary.activity_trend.value}")


def run_export(args: argparse.Namespace, config: IngestConfig) -> None:
    """Write records, date aggregates, and instrument aggregates as CSV."""
    _, result = _load(args, config)
    export_config = ExportConfig()
    output_dir: Path = args.output_dir
    names = export_config.filenames

    export_records_csv(
        result.records, output_dir / names["records"], export_config.decimals
    )
    export_by_date_csv(
        by_date(result.records, today=args.as_of),
        output_dir / names["by_date"],
        export_config.decimals,
    )
    export_by_instrument_csv(
        by_instrument_and_date(
            result.records, sort_by=InstrumentSortField.DATE, today=args.as_of
        ),
        output_dir / names["by_instrument"],
        export_config.decimals,
    )
    logger.info("Exported %d records to %s", len(result.records), output_dir)


def run_companies(args: argparse.Namespace, config: IngestConfig) -> None:
    """Print the ticker table, or the entries matching a search term."""
    companies = search_companies(args.term) if args.term else all_companies()
    _print_frame(pd.DataFrame(
        [{"ticker": c.ticker, "name": c.long_name} for c in companies],
        columns=["ticker", "name"],
    ))


COMMANDS = {
    "companies": run_companies,
    "sheets": run_sheets,
    "records": run_records,
    "by-date": run_by_date,
    "by-instrument": run_by_instrument,
    "forecast": run_forecast,
    "summary": run_summary,
    "export": run_export,
}


def main(argv: list[str] | None = None) -> None:
    """Main entry point.

    Args:
        argv: Argument list (defaults to sys.argv[1:]).
    """
    args = _parse_args(argv)

    # Configure logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    handler = COMMANDS.get(args.command)
    if handler is None:
        logger.error("Unknown command: %s", args.command)
        sys.exit(1)

    try:
        handler(args, IngestConfig())
    except DividendPipelineError as exc:
        logger.error("%s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
