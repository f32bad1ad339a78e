from typing import Dict, Optional

from models import Transaction


class TransactionStore:
    """
    Deposits and withdrawals keyed by transaction id, kept for dispute lookups.
    The dispute flag lives on the stored record.
    """

    def __init__(self):
        self._transactions: Dict[int, Transaction] = {}

    def __len__(self) -> int:
        return len(self._transactions)

    def contains(self, transaction_id: int) -> bool:
        return transaction_id in self._transactions

    def get(self, transaction_id: int) -> Optional[Transaction]:
        """Retrieve stored transaction by ID."""
        return self._transactions.get(transaction_id)

    def insert(self, transaction: Transaction) -> None:
        """Store a deposit or withdrawal. Callers reject duplicate ids first."""
        self._transactions[transaction.transaction_id] = transaction

    def set_disputed(self, transaction_id: int, disputed: bool) -> None:
        """Set or clear the dispute flag on an already stored transaction."""
        self._transactions[transaction_id].under_dispute = disputed
