import logging
from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_EVEN
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)

# Amounts carrying more fractional digits than this are rounded half-to-even.
DECIMAL_PLACES = 4
_QUANTUM = Decimal(1).scaleb(-DECIMAL_PLACES)
# Largest amounts keep DECIMAL_PLACES fractional digits within 28 significant digits.
MAX_AMOUNT_EXPONENT = 28 - DECIMAL_PLACES


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class ProcessingResult(Enum):
    """Outcome of applying one record. Everything except SUCCESS is an error kind."""

    SUCCESS = "success"
    INVALID_TRANSACTION = "invalid_transaction"
    NO_SUCH_ACCOUNT = "no_such_account"
    NO_SUCH_TRANSACTION = "no_such_transaction"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    CLIENT_MISMATCH = "client_mismatch"
    UNDISPUTED_TRANSACTION = "undisputed_transaction"
    DUPLICATE_TRANSACTION_ID = "duplicate_transaction_id"
    DUPLICATE_DISPUTE_REQUEST = "duplicate_dispute_request"
    ACCOUNT_LOCKED = "account_locked"

    @property
    def ok(self) -> bool:
        return self is ProcessingResult.SUCCESS


def round_amount(amount: Decimal) -> Decimal:
    """Round to DECIMAL_PLACES using banker's rounding, keeping shorter scales as given."""
    if amount.as_tuple().exponent < -DECIMAL_PLACES:
        return amount.quantize(_QUANTUM, rounding=ROUND_HALF_EVEN)
    return amount


@dataclass
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None
    under_dispute: bool = False

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"

    def validate(self) -> ProcessingResult:
        """
        Check the shape of an incoming record and round its amount.

        Deposits and withdrawals need an amount strictly greater than zero
        and small enough to keep four fractional digits.
        Disputes, resolves and chargebacks carry no amount of their own.
        """
        if self.transaction_type in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL):
            if self.amount is None or self.amount <= 0 or self.amount.adjusted() >= MAX_AMOUNT_EXPONENT:
                return ProcessingResult.INVALID_TRANSACTION
            self.amount = round_amount(self.amount)
        return ProcessingResult.SUCCESS

    def validate_against_stored(self, stored: "Transaction") -> ProcessingResult:
        """
        Check a dispute, resolve or chargeback against the deposit it references.

        Only deposits can be disputed, the client must match, a dispute needs the
        deposit to be undisputed and a resolve or chargeback needs it disputed.
        """
        if stored.transaction_type != TransactionType.DEPOSIT:
            return ProcessingResult.INVALID_TRANSACTION

        if self.client_id != stored.client_id:
            return ProcessingResult.CLIENT_MISMATCH

        if self.transaction_type == TransactionType.DISPUTE:
            if stored.under_dispute:
                return ProcessingResult.DUPLICATE_DISPUTE_REQUEST
        elif not stored.under_dispute:
            return ProcessingResult.UNDISPUTED_TRANSACTION

        return ProcessingResult.SUCCESS


@dataclass
class ClientAccount:
    """
    Balances for one client.

    `total` is tracked on its own rather than derived, so each operation moves
    exactly the fields it names. No operation clamps `available` or `held`:
    disputing a deposit whose funds were already withdrawn drives `available`
    negative.
    """

    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    locked: bool = False

    def deposit(self, amount: Decimal) -> ProcessingResult:
        if self.locked:
            return ProcessingResult.ACCOUNT_LOCKED

        logger.debug(f"Pre-deposit: {self}")
        self.available += amount
        self.total += amount
        logger.debug(f"Post-deposit: {self}")
        return ProcessingResult.SUCCESS

    def withdraw(self, amount: Decimal) -> ProcessingResult:
        if self.locked:
            return ProcessingResult.ACCOUNT_LOCKED

        if self.available < amount:
            return ProcessingResult.INSUFFICIENT_FUNDS

        logger.debug(f"Pre-withdrawal: {self}")
        self.available -= amount
        self.total -= amount
        logger.debug(f"Post-withdrawal: {self}")
        return ProcessingResult.SUCCESS

    def dispute(self, amount: Decimal) -> ProcessingResult:
        """Move a disputed amount from available into held."""
        if self.locked:
            return ProcessingResult.ACCOUNT_LOCKED

        logger.debug(f"Pre-dispute: {self}")
        self.available -= amount
        self.held += amount
        logger.debug(f"Post-dispute: {self}")
        return ProcessingResult.SUCCESS

    def resolve(self, amount: Decimal) -> ProcessingResult:
        """Release a held amount back to available."""
        if self.locked:
            return ProcessingResult.ACCOUNT_LOCKED

        logger.debug(f"Pre-resolve: {self}")
        self.held -= amount
        self.available += amount
        logger.debug(f"Post-resolve: {self}")
        return ProcessingResult.SUCCESS

    def chargeback(self, amount: Decimal) -> ProcessingResult:
        """Remove a held amount for good and freeze the account."""
        if self.locked:
            return ProcessingResult.ACCOUNT_LOCKED

        logger.debug(f"Pre-chargeback: {self}")
        self.total -= amount
        self.held -= amount
        self.locked = True
        logger.debug(f"Post-chargeback: {self}")
        return ProcessingResult.SUCCESS


@dataclass
class ProcessingStats:
    """Counters for tracking processing statistics."""

    processed: int = 0
    failed: int = 0
    failures_by_result: Counter = field(default_factory=Counter)

    def record(self, result: ProcessingResult) -> None:
        if result.ok:
            self.processed += 1
        else:
            self.failed += 1
            self.failures_by_result[result] += 1
