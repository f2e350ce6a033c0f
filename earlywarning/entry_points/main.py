#!/usr/bin/env python3
"""
Early-Warning Signals Engine - Command Interface

Usage:
    earlywarning analyze prices.csv [--column Close] [--date-column Date]
    earlywarning csd prices.csv [--window 120 --lookback 60]
    earlywarning lppl prices.csv [--workers 4 --timeout 30]
    earlywarning config [--preset short_history]
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from dotenv import load_dotenv

from ..analysis.market_analysis import run_csd, run_lppl
from ..analysis.report import build_analysis_report, build_csd_summary, build_lppl_summary
from ..config.analysis_settings import ANALYSIS_SETTINGS, get_analysis_config, load_config_from_env
from ..error_handling.errors import DataLoadError, EarlyWarningError, extract_error_details
from ..log_utils.custom_handlers import setup_analysis_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2

LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


def load_price_series(path: str, column: Optional[str] = None,
                      date_column: Optional[str] = None) -> Tuple[np.ndarray, Optional[list]]:
    """
    Read a price column (and optional date column) from a CSV file

    Without --column the 'Close' column is used, or the only numeric column
    when there is exactly one. Rows with a missing price are dropped.
    """
    csv_path = Path(path)
    if not csv_path.exists():
        raise DataLoadError(f"Input file not found: {path}", parameter='path', value=path)

    try:
        frame = pd.read_csv(csv_path)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise DataLoadError(f"Could not parse {path}: {e}", parameter='path', value=path) from e

    if column is None:
        numeric_columns = list(frame.select_dtypes(include='number').columns)
        if 'Close' in frame.columns:
            column = 'Close'
        elif len(numeric_columns) == 1:
            column = numeric_columns[0]
        else:
            raise DataLoadError(
                f"Cannot choose a price column among {list(frame.columns)}; use --column",
                parameter='column')

    for required in filter(None, (column, date_column)):
        if required not in frame.columns:
            raise DataLoadError(f"Column '{required}' not found in {path}",
                                parameter='column', value=required)

    prices = pd.to_numeric(frame[column], errors='coerce')
    missing = int(prices.isna().sum())
    if missing:
        logger.warning("Dropping %d rows without a numeric price", missing)
    keep = prices.notna()

    dates = None
    if date_column is not None:
        dates = [str(d) for d in frame.loc[keep, date_column]]

    values = prices[keep].to_numpy(dtype=float)
    if len(values) == 0:
        raise DataLoadError(f"No numeric prices in column '{column}'", parameter='column', value=column)

    logger.info("Loaded %d prices from %s", len(values), path)
    return values, dates


def _resolve_config(args):
    if args.env_file or args.from_env:
        base = load_config_from_env(args.env_file, preset=args.preset)
        return get_analysis_config(
            args.preset, strict=True,
            detrend_bandwidth=args.bandwidth if args.bandwidth is not None else base.detrend_bandwidth,
            csd_window=args.window if args.window is not None else base.csd_window,
            tau_lookback=args.lookback if args.lookback is not None else base.tau_lookback)
    return get_analysis_config(args.preset, strict=True, detrend_bandwidth=args.bandwidth,
                               csd_window=args.window, tau_lookback=args.lookback)


def _emit(payload, output: Optional[str]):
    text = json.dumps(payload, indent=2, ensure_ascii=False, default=str)
    if output:
        Path(output).write_text(text + '\n', encoding='utf-8')
        logger.info("Wrote %s", output)
    else:
        print(text)


def run_analyze(args) -> int:
    prices, dates = load_price_series(args.input, args.column, args.date_column)
    config = _resolve_config(args)
    report = build_analysis_report(prices, dates=dates, config=config, timeout=args.timeout,
                                   workers=args.workers,
                                   include_time_series=not args.summary_only,
                                   sources={'file': str(args.input), 'column': args.column or 'auto'})
    _emit(report, args.output)
    return EXIT_OK


def run_csd_command(args) -> int:
    prices, _ = load_price_series(args.input, args.column, args.date_column)
    config = _resolve_config(args)
    csd = run_csd(prices, config)
    payload = {'config': config.to_dict(), 'csd': build_csd_summary(csd)}
    if not args.summary_only:
        payload['series'] = csd.to_dict()
    _emit(payload, args.output)
    return EXIT_OK


def run_lppl_command(args) -> int:
    prices, _ = load_price_series(args.input, args.column, args.date_column)
    lppl = run_lppl(prices, timeout=args.timeout, workers=args.workers)
    payload = {'lppl': build_lppl_summary(lppl)}
    if not args.summary_only:
        payload['result'] = lppl.to_dict()
    _emit(payload, args.output)
    return EXIT_OK


def run_config_command(args) -> int:
    config = _resolve_config(args)
    _emit({'preset': args.preset, 'config': config.to_dict(),
           'available_presets': sorted(ANALYSIS_SETTINGS)}, args.output)
    return EXIT_OK


def _add_config_arguments(parser):
    parser.add_argument('--preset', default='default', help='Named configuration preset')
    parser.add_argument('--bandwidth', type=float, help='Detrending kernel bandwidth (steps)')
    parser.add_argument('--window', type=int, help='Rolling AR(1)/variance window')
    parser.add_argument('--lookback', type=int, help="Kendall's tau lookback")
    parser.add_argument('--from-env', action='store_true',
                        help='Read EARLYWARNING_* variables (and .env) before applying flags')
    parser.add_argument('--env-file', help='Explicit .env file to load')


def _add_input_arguments(parser):
    parser.add_argument('input', help='CSV file with a price column')
    parser.add_argument('--column', help="Price column (default: 'Close' or the only numeric column)")
    parser.add_argument('--date-column', help='Date/label column to carry into the report')
    parser.add_argument('--output', '-o', help='Write JSON here instead of stdout')
    parser.add_argument('--summary-only', action='store_true', help='Omit per-step series')


def _add_logging_arguments(parser):
    parser.add_argument('--log-level', default='WARNING', type=str.upper, choices=LOG_LEVELS,
                        help='Logging level')
    parser.add_argument('--log-dir', help='Also write a detailed log under <log-dir>/logs')


def _add_lppl_arguments(parser):
    parser.add_argument('--workers', type=int, default=1, help='Processes for the LPPL grid search')
    parser.add_argument('--timeout', type=float, help='Seconds allowed for the LPPL grid search')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='earlywarning',
        description="Early-Warning Signals Engine - critical slowing down and LPPL bubble analysis",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  earlywarning analyze spx.csv --date-column Date
  earlywarning csd spx.csv --preset short_history --summary-only
  earlywarning lppl spx.csv --workers 4 --timeout 30
  earlywarning config --from-env
        """
    )
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    analyze_parser = subparsers.add_parser('analyze', help='Run CSD and LPPL and print the merged report')
    _add_input_arguments(analyze_parser)
    _add_config_arguments(analyze_parser)
    _add_lppl_arguments(analyze_parser)
    analyze_parser.set_defaults(handler=run_analyze)

    csd_parser = subparsers.add_parser('csd', help='Critical slowing down indicators only')
    _add_input_arguments(csd_parser)
    _add_config_arguments(csd_parser)
    csd_parser.set_defaults(handler=run_csd_command)

    lppl_parser = subparsers.add_parser('lppl', help='LPPL bubble fit only')
    _add_input_arguments(lppl_parser)
    _add_lppl_arguments(lppl_parser)
    lppl_parser.set_defaults(handler=run_lppl_command)

    config_parser = subparsers.add_parser('config', help='Show the effective CSD configuration')
    _add_config_arguments(config_parser)
    config_parser.add_argument('--output', '-o', help='Write JSON here instead of stdout')
    config_parser.set_defaults(handler=run_config_command)

    for subparser in (analyze_parser, csd_parser, lppl_parser, config_parser):
        _add_logging_arguments(subparser)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_USAGE

    load_dotenv()
    setup_analysis_logging(args.log_level, log_dir=args.log_dir)

    try:
        return args.handler(args)
    except EarlyWarningError as e:
        logger.error("%s", extract_error_details(e))
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR
    except Exception as e:
        logger.error("%s", extract_error_details(e), exc_info=True)
        print(f"Unexpected error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == '__main__':
    sys.exit(main())
