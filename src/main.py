import argparse
import csv
import logging
import os
import sys
from decimal import Decimal
from typing import Dict, List, Optional, TextIO

from models import ClientAccount
from payments_engine import PaymentsEngine

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV_VAR = "PAYMENTS_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"
OUTPUT_HEADER = ["client", "available", "held", "total", "locked"]


def configure_logging(level: Optional[str] = None) -> None:
    """Send diagnostics to stderr so stdout carries only the account snapshot."""
    level = (level or os.environ.get(LOG_LEVEL_ENV_VAR) or DEFAULT_LOG_LEVEL).upper()
    if level not in logging.getLevelNamesMapping():
        level = DEFAULT_LOG_LEVEL
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def format_decimal(value: Decimal) -> str:
    """Format decimal at its natural precision, removing trailing zeros."""
    normalized = value.normalize()
    return f"{normalized:f}"


def write_accounts(accounts: Dict[int, ClientAccount], stream: TextIO) -> None:
    """Write accounts as CSV rows, ordered by client id."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(OUTPUT_HEADER)
    for client_id in sorted(accounts.keys()):
        account = accounts[client_id]
        writer.writerow([
            client_id,
            format_decimal(account.available),
            format_decimal(account.held),
            format_decimal(account.total),
            str(account.locked).lower(),
        ])


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="payments-engine",
        description="Apply a CSV of transactions and print the resulting account balances.",
    )
    parser.add_argument("input_file", help="path to the transactions CSV")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        default=None,
        help=f"diagnostic verbosity (default: ${LOG_LEVEL_ENV_VAR} or {DEFAULT_LOG_LEVEL})",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)

    engine = PaymentsEngine()
    try:
        accounts = engine.process_file(args.input_file)
    except OSError as e:
        logger.error(f"Could not read {args.input_file}: {e}")
        return 1

    write_accounts(accounts, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
