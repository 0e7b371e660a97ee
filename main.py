# main.py

"""Entry point for the price_history command-line tool."""

import argparse
import logging
import sys

from src.config.logging_config import setup_logging

logger = logging.getLogger("price_history.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="price_history",
        description=(
            "Per-item price history for prior lowest price disclosure."
        ),
    )
    action = parser.add_mutually_exclusive_group(required=True)
    action.add_argument(
        "--job",
        default=None,
        metavar="CSV",
        help="Record today's prices from a CSV of item_id,price rows.",
    )
    action.add_argument(
        "--show",
        default=None,
        metavar="ITEM",
        help="Show the stored price history of an item.",
    )
    action.add_argument(
        "--lookup",
        default=None,
        metavar="ITEM",
        help="Print the prior best price of an item.",
    )
    parser.add_argument(
        "--current-price",
        type=float,
        default=None,
        dest="current_price",
        help="Current selling price (required with --lookup).",
    )
    parser.add_argument(
        "--locale",
        default=None,
        help="Request locale for --lookup, e.g. de_DE.",
    )
    parser.add_argument(
        "--price-book",
        default=None,
        dest="price_book_id",
        help="History price book id (default: site default book).",
    )
    parser.add_argument(
        "--date",
        default=None,
        dest="today",
        metavar="YYYYMMDD",
        help="Override today's date.",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="table",
        dest="output_format",
        help="Output format for --show (default: table).",
    )
    return parser


def main() -> None:
    """Route to the requested command and exit with its status."""
    log_file = setup_logging()
    logger.info("price_history starting, log file: %s", log_file)

    parser = _build_parser()
    args = parser.parse_args()

    from src.cli.runner import (
        parse_day,
        run_history_job,
        run_lookup,
        show_history,
    )

    today = parse_day(args.today)

    try:
        if args.job is not None:
            exit_code = run_history_job(args.job, args.price_book_id, today)
        elif args.show is not None:
            exit_code = show_history(
                args.show, args.price_book_id, today, args.output_format,
            )
        else:
            if args.current_price is None:
                parser.error("--lookup requires --current-price")
            exit_code = run_lookup(args.lookup, args.current_price, args.locale)
    except Exception:
        logger.critical("Fatal error during CLI run", exc_info=True)
        raise

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
