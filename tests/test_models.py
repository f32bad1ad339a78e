import sys
import os
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from models import Transaction, TransactionType, ClientAccount, ProcessingResult, ProcessingStats, round_amount


def make_deposit(client_id: int = 1, transaction_id: int = 1, amount: str = "5") -> Transaction:
    return Transaction(TransactionType.DEPOSIT, client_id=client_id, transaction_id=transaction_id, amount=Decimal(amount))


class TestTransaction:
    def test_create_deposit(self):
        transaction = Transaction(
            transaction_type=TransactionType.DEPOSIT,
            client_id=1,
            transaction_id=1,
            amount=Decimal("100.0"),
        )
        assert transaction.transaction_type == TransactionType.DEPOSIT
        assert transaction.client_id == 1
        assert transaction.transaction_id == 1
        assert transaction.amount == Decimal("100.0")
        assert transaction.under_dispute is False

    def test_create_dispute_no_amount(self):
        transaction = Transaction(
            transaction_type=TransactionType.DISPUTE,
            client_id=1,
            transaction_id=1,
        )
        assert transaction.amount is None

    def test_validate_rounds_half_to_even(self):
        transaction = make_deposit(amount="1.23456")
        assert transaction.validate() == ProcessingResult.SUCCESS
        assert transaction.amount == Decimal("1.2346")

    def test_validate_keeps_short_scale(self):
        transaction = make_deposit(amount="1.5")
        transaction.validate()
        assert str(transaction.amount) == "1.5"

    def test_validate_rejects_missing_zero_and_negative_amounts(self):
        for amount in (None, Decimal("0"), Decimal("-5")):
            for transaction_type in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL):
                transaction = Transaction(transaction_type, client_id=1, transaction_id=1, amount=amount)
                assert transaction.validate() == ProcessingResult.INVALID_TRANSACTION

    def test_validate_rejects_amount_too_large_to_round(self):
        transaction = make_deposit(amount="99999999999999999999999999.12345")
        assert transaction.validate() == ProcessingResult.INVALID_TRANSACTION

    def test_validate_ignores_amount_on_dispute(self):
        transaction = Transaction(TransactionType.DISPUTE, client_id=1, transaction_id=1)
        assert transaction.validate() == ProcessingResult.SUCCESS

    def test_validate_against_stored_withdrawal(self):
        stored = Transaction(TransactionType.WITHDRAWAL, client_id=1, transaction_id=1, amount=Decimal("5"))
        dispute = Transaction(TransactionType.DISPUTE, client_id=1, transaction_id=1)
        assert dispute.validate_against_stored(stored) == ProcessingResult.INVALID_TRANSACTION

    def test_validate_against_stored_client_mismatch(self):
        dispute = Transaction(TransactionType.DISPUTE, client_id=2, transaction_id=1)
        assert dispute.validate_against_stored(make_deposit()) == ProcessingResult.CLIENT_MISMATCH

    def test_validate_against_stored_dispute_flags(self):
        stored = make_deposit()
        dispute = Transaction(TransactionType.DISPUTE, client_id=1, transaction_id=1)
        resolve = Transaction(TransactionType.RESOLVE, client_id=1, transaction_id=1)
        chargeback = Transaction(TransactionType.CHARGEBACK, client_id=1, transaction_id=1)

        assert dispute.validate_against_stored(stored) == ProcessingResult.SUCCESS
        assert resolve.validate_against_stored(stored) == ProcessingResult.UNDISPUTED_TRANSACTION
        assert chargeback.validate_against_stored(stored) == ProcessingResult.UNDISPUTED_TRANSACTION

        stored.under_dispute = True
        assert dispute.validate_against_stored(stored) == ProcessingResult.DUPLICATE_DISPUTE_REQUEST
        assert resolve.validate_against_stored(stored) == ProcessingResult.SUCCESS
        assert chargeback.validate_against_stored(stored) == ProcessingResult.SUCCESS


class TestRoundAmount:
    def test_banker_rounding(self):
        assert round_amount(Decimal("0.00005")) == Decimal("0.0000")
        assert round_amount(Decimal("0.00015")) == Decimal("0.0002")
        assert round_amount(Decimal("2.00025")) == Decimal("2.0002")

    def test_four_places_untouched(self):
        assert str(round_amount(Decimal("1.2345"))) == "1.2345"


class TestClientAccount:
    def test_default_values(self):
        account = ClientAccount(client_id=1)
        assert account.available == Decimal("0")
        assert account.held == Decimal("0")
        assert account.total == Decimal("0")
        assert account.locked is False

    def test_deposit_and_withdraw(self):
        account = ClientAccount(client_id=1)
        assert account.deposit(Decimal("10")) == ProcessingResult.SUCCESS
        assert account.withdraw(Decimal("4")) == ProcessingResult.SUCCESS
        assert account.available == Decimal("6")
        assert account.total == Decimal("6")
        assert account.total == account.available + account.held

    def test_withdraw_insufficient_funds_leaves_account_unchanged(self):
        account = ClientAccount(client_id=1)
        account.deposit(Decimal("3"))
        assert account.withdraw(Decimal("3.0001")) == ProcessingResult.INSUFFICIENT_FUNDS
        assert account == ClientAccount(client_id=1, available=Decimal("3"), total=Decimal("3"))

    def test_dispute_resolve_chargeback(self):
        account = ClientAccount(client_id=1)
        account.deposit(Decimal("5"))

        account.dispute(Decimal("5"))
        assert (account.available, account.held, account.total) == (Decimal("0"), Decimal("5"), Decimal("5"))

        account.resolve(Decimal("5"))
        assert (account.available, account.held, account.total) == (Decimal("5"), Decimal("0"), Decimal("5"))

        account.dispute(Decimal("5"))
        account.chargeback(Decimal("5"))
        assert (account.available, account.held, account.total) == (Decimal("0"), Decimal("0"), Decimal("0"))
        assert account.locked is True

    def test_dispute_is_not_clamped(self):
        account = ClientAccount(client_id=1)
        account.dispute(Decimal("5"))
        assert account.available == Decimal("-5")
        assert account.held == Decimal("5")
        assert account.total == Decimal("0")

    def test_locked_account_rejects_every_operation(self):
        account = ClientAccount(client_id=1, available=Decimal("10"), total=Decimal("10"), locked=True)
        operations = (account.deposit, account.withdraw, account.dispute, account.resolve, account.chargeback)
        for operation in operations:
            # Lock check runs before the insufficient funds check.
            assert operation(Decimal("100")) == ProcessingResult.ACCOUNT_LOCKED
        assert account.available == Decimal("10")
        assert account.held == Decimal("0")
        assert account.total == Decimal("10")


class TestProcessingResult:
    def test_enum_values(self):
        assert ProcessingResult.SUCCESS.value == "success"
        assert ProcessingResult.ACCOUNT_LOCKED.value == "account_locked"
        assert len(ProcessingResult) == 10

    def test_ok(self):
        assert ProcessingResult.SUCCESS.ok
        assert not any(result.ok for result in ProcessingResult if result is not ProcessingResult.SUCCESS)


class TestProcessingStats:
    def test_record(self):
        stats = ProcessingStats()
        stats.record(ProcessingResult.SUCCESS)
        stats.record(ProcessingResult.INSUFFICIENT_FUNDS)
        stats.record(ProcessingResult.INSUFFICIENT_FUNDS)
        stats.record(ProcessingResult.ACCOUNT_LOCKED)

        assert stats.processed == 1
        assert stats.failed == 3
        assert stats.failures_by_result[ProcessingResult.INSUFFICIENT_FUNDS] == 2
        assert stats.failures_by_result[ProcessingResult.ACCOUNT_LOCKED] == 1
