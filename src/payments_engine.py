import csv
import logging
import re
from decimal import Decimal
from typing import Dict, Iterable, Iterator, Optional, TextIO

from models import Transaction, TransactionType, ClientAccount, ProcessingStats, MAX_AMOUNT_EXPONENT
from transaction_processor import TransactionProcessor

logger = logging.getLogger(__name__)

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1

# Plain ASCII tokens only: no underscores, exponents or non-ASCII digits.
ID_PATTERN = re.compile(r"\d+", re.ASCII)
AMOUNT_PATTERN = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)", re.ASCII)


class PaymentsEngine:
    """
    Feeds transactions from a CSV source through a TransactionProcessor in file order.
    Records that fail are logged and skipped; only an unreadable input is fatal.
    """

    def __init__(self, processor: Optional[TransactionProcessor] = None):
        self._processor = processor if processor is not None else TransactionProcessor()
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states. Raises OSError if it cannot be read."""
        logger.info(f"Processing transactions from {filepath}")

        with open(filepath, "r", newline="") as f:
            accounts = self.process_records(self.read_transactions(f))

        logger.info(
            f"Processed: {self._stats.processed}, "
            f"Failed: {self._stats.failed}, "
            f"Accounts: {len(accounts)}"
        )
        return accounts

    def process_records(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        """Apply transactions strictly in order and return the resulting accounts."""
        for transaction in transactions:
            result = self._processor.process_transaction(transaction)
            self._stats.record(result)
            if not result.ok:
                logger.warning(f"Failed to process {transaction}: {result.value}")

        return self._processor.get_all_accounts()

    def read_transactions(self, stream: TextIO) -> Iterator[Transaction]:
        """Yield parsed transactions from a CSV stream, dropping malformed rows."""
        reader = csv.DictReader(stream)
        for row in reader:
            transaction = parse_csv_row(row)
            if transaction is not None:
                yield transaction


def parse_csv_row(row: Dict[Optional[str], Optional[str]]) -> Optional[Transaction]:
    """Parse CSV row into Transaction, or None if any field is malformed."""
    try:
        # Short rows leave trailing values as None; overflow values land under a None key.
        normalized = {k.strip(): (v or "").strip() for k, v in row.items() if isinstance(k, str)}

        transaction_type_str = normalized["type"].lower()
        client_id = parse_id(normalized["client"])
        transaction_id = parse_id(normalized["tx"])

        if not 0 <= client_id <= MAX_CLIENT_ID:
            raise ValueError(f"client id {client_id} out of range")
        if not 0 <= transaction_id <= MAX_TRANSACTION_ID:
            raise ValueError(f"transaction id {transaction_id} out of range")

        amount = None
        amount_str = normalized.get("amount", "")
        if amount_str:
            if not AMOUNT_PATTERN.fullmatch(amount_str):
                raise ValueError(f"amount {amount_str!r} is not a plain decimal number")
            amount = Decimal(amount_str)
            if amount.copy_abs().adjusted() >= MAX_AMOUNT_EXPONENT:
                raise ValueError(f"amount {amount_str} is too large")

        return Transaction(
            transaction_type=TransactionType(transaction_type_str),
            client_id=client_id,
            transaction_id=transaction_id,
            amount=amount,
        )
    except (KeyError, ValueError) as e:
        logger.warning(f"Failed to parse row {row}: {e!r}")
        return None


def parse_id(value: str) -> int:
    if not ID_PATTERN.fullmatch(value):
        raise ValueError(f"id {value!r} is not a plain unsigned integer")
    return int(value)
