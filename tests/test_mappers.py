"""Tests for database mappers."""

from datetime import datetime, date, UTC
from decimal import Decimal

from passbook.database.models import (
    Account as ORMAccount,
    BankChargeDetails as ORMBankChargeDetails,
    Recipient as ORMRecipient,
    Transaction as ORMTransaction,
)
from passbook.database.mappers import (
    account_to_domain,
    details_to_columns,
    details_to_domain,
    recipient_to_domain,
    transaction_to_domain,
)
from passbook.domain.entities import (
    Account,
    BankChargeDetails,
    BankTransferDetails,
    Recipient,
    Transaction,
)
from passbook.domain.enums import (
    AccountType,
    BankChargeType,
    RecipientType,
    TransactionStatus,
    TransactionType,
    TransferMode,
)


class TestAccountMapper:
    """Tests for Account mapper."""

    def test_account_to_domain(self):
        """Test converting ORM Account to domain Account."""
        orm_account = ORMAccount(
            id=1,
            name="HDFC Current",
            account_type="current",
            bank_name="HDFC Bank",
            opening_balance=Decimal("100.00"),
            current_balance=Decimal("250.00"),
            version=3,
            created_at=datetime.now(UTC),
        )

        account = account_to_domain(orm_account)

        assert isinstance(account, Account)
        assert account.account_type is AccountType.CURRENT
        assert account.current_balance == Decimal("250.00")
        assert account.version == 3


class TestRecipientMapper:
    def test_recipient_to_domain(self):
        orm_recipient = ORMRecipient(
            id=7,
            name="HDFC Current",
            recipient_type="account",
            account_id=None,
            linked_account_id=1,
            created_at=datetime.now(UTC),
        )

        recipient = recipient_to_domain(orm_recipient)

        assert isinstance(recipient, Recipient)
        assert recipient.recipient_type is RecipientType.ACCOUNT
        assert recipient.linked_account_id == 1
        assert recipient.is_reserved


class TestTransactionMapper:
    """Tests for Transaction mapper."""

    def _orm(self, transaction_type, status):
        now = datetime.now(UTC)
        return ORMTransaction(
            id=5,
            transaction_type=transaction_type,
            amount=Decimal("99.50"),
            account_id=1,
            status=status,
            transaction_date=date(2024, 1, 15),
            created_at=now,
            updated_at=now,
        )

    def test_transaction_to_domain(self):
        """Test converting ORM Transaction to domain Transaction."""
        transaction = transaction_to_domain(self._orm("cheque_given", "pending"))

        assert isinstance(transaction, Transaction)
        assert transaction.transaction_type is TransactionType.CHEQUE_GIVEN
        assert transaction.status is TransactionStatus.PENDING
        assert transaction.amount == Decimal("99.50")
        assert transaction.details is None
        assert not transaction.is_receiver_side

    def test_legacy_values_are_normalized(self):
        """Test that rows written by older versions come out canonical."""
        transaction = transaction_to_domain(self._orm("deposit", "completed"))

        assert transaction.transaction_type is TransactionType.CASH_DEPOSIT
        assert transaction.status is TransactionStatus.DEPOSITED


class TestDetailMappers:
    def test_enum_columns_round_through_values(self):
        details = BankTransferDetails(transfer_date=date(2024, 1, 2), transfer_mode=TransferMode.IMPS)

        columns = details_to_columns(details)

        assert columns["transfer_mode"] == "imps"
        assert columns["transfer_date"] == date(2024, 1, 2)
        assert columns["settlement_date"] is None

    def test_details_to_domain(self):
        row = ORMBankChargeDetails(
            transaction_id=5,
            charge_type="atm_charge",
            debit_date=date(2024, 1, 3),
            charge_amount=Decimal("23.60"),
            narration="ATM WDL CHG",
        )

        details = details_to_domain(row, BankChargeDetails)

        assert details == BankChargeDetails(
            charge_type=BankChargeType.ATM_CHARGE,
            debit_date=date(2024, 1, 3),
            charge_amount=Decimal("23.60"),
            narration="ATM WDL CHG",
        )
