import logging
from typing import Dict, Optional, Tuple, assert_never

from models import Transaction, TransactionType, ClientAccount, ProcessingResult
from account_ledger import AccountLedger
from transaction_store import TransactionStore

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions, one at a time, against the account ledger and transaction store.
    Returns ProcessingResult to indicate success or which error stopped the record.
    A failed record leaves every account and stored transaction untouched.
    """

    def __init__(self, accounts: Optional[AccountLedger] = None, transactions: Optional[TransactionStore] = None):
        self._accounts = accounts if accounts is not None else AccountLedger()
        self._transactions = transactions if transactions is not None else TransactionStore()

    @property
    def accounts(self) -> AccountLedger:
        return self._accounts

    @property
    def transactions(self) -> TransactionStore:
        return self._transactions

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        return self._accounts.get_all_accounts()

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        Deposits and withdrawals are validated, applied and stored. Disputes,
        resolves and chargebacks act on the stored deposit they reference,
        using its amount.
        """
        logger.debug(f"Processing {transaction}")

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                return self._handle_deposit(transaction)
            case TransactionType.WITHDRAWAL:
                return self._handle_withdrawal(transaction)
            case TransactionType.DISPUTE:
                return self._handle_dispute(transaction)
            case TransactionType.RESOLVE:
                return self._handle_resolve(transaction)
            case TransactionType.CHARGEBACK:
                return self._handle_chargeback(transaction)
            case _:
                assert_never(transaction.transaction_type)

    def _handle_deposit(self, transaction: Transaction) -> ProcessingResult:
        result = transaction.validate()
        if not result.ok:
            return result

        if self._transactions.contains(transaction.transaction_id):
            return ProcessingResult.DUPLICATE_TRANSACTION_ID

        account = self._accounts.get_or_create_account(transaction.client_id)
        result = account.deposit(transaction.amount)
        if result.ok:
            self._transactions.insert(transaction)
        return result

    def _handle_withdrawal(self, transaction: Transaction) -> ProcessingResult:
        result = transaction.validate()
        if not result.ok:
            return result

        if self._transactions.contains(transaction.transaction_id):
            return ProcessingResult.DUPLICATE_TRANSACTION_ID

        # Withdrawals never open an account.
        account = self._accounts.get_account(transaction.client_id)
        if account is None:
            return ProcessingResult.NO_SUCH_ACCOUNT

        result = account.withdraw(transaction.amount)
        if result.ok:
            self._transactions.insert(transaction)
        return result

    def _handle_dispute(self, transaction: Transaction) -> ProcessingResult:
        result, stored, account = self._resolve_referenced(transaction)
        if not result.ok:
            return result

        result = account.dispute(stored.amount)
        if result.ok:
            self._transactions.set_disputed(stored.transaction_id, True)
        return result

    def _handle_resolve(self, transaction: Transaction) -> ProcessingResult:
        result, stored, account = self._resolve_referenced(transaction)
        if not result.ok:
            return result

        result = account.resolve(stored.amount)
        if result.ok:
            self._transactions.set_disputed(stored.transaction_id, False)
        return result

    def _handle_chargeback(self, transaction: Transaction) -> ProcessingResult:
        result, stored, account = self._resolve_referenced(transaction)
        if not result.ok:
            return result

        result = account.chargeback(stored.amount)
        if result.ok:
            self._transactions.set_disputed(stored.transaction_id, False)
        return result

    def _resolve_referenced(
        self, transaction: Transaction
    ) -> Tuple[ProcessingResult, Optional[Transaction], Optional[ClientAccount]]:
        """Find and check the stored deposit and the account a dispute-type record refers to."""
        stored = self._transactions.get(transaction.transaction_id)
        if stored is None:
            return ProcessingResult.NO_SUCH_TRANSACTION, None, None

        result = transaction.validate_against_stored(stored)
        if not result.ok:
            return result, None, None

        account = self._accounts.get_account(transaction.client_id)
        if account is None:
            return ProcessingResult.NO_SUCH_ACCOUNT, None, None

        return ProcessingResult.SUCCESS, stored, account
