"""Tests for the Database interface and the SQLAlchemy implementation."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from passbook.database.details import relationship_name
from passbook.database.models import ChequeDetails as ORMChequeDetails
from passbook.domain import entities
from passbook.domain.enums import (
    AccountType,
    DetailKind,
    RecipientType,
    TransactionStatus,
    TransactionType,
    TransferMode,
)
from passbook.domain.errors import BalanceConflictError, ConflictError, NotFoundError, ValidationError


@pytest.fixture
def account_id(temp_db):
    return temp_db.create_account(
        name="HDFC Current", account_type=AccountType.CURRENT, opening_balance=Decimal("1000")
    )


def _create_cheque(db, account_id, number="CHQ-1"):
    transaction_id = db.create_transaction(
        transaction_type=TransactionType.CHEQUE_RECEIVED,
        amount=Decimal("250"),
        account_id=account_id,
        status=TransactionStatus.PENDING,
        transaction_date=date(2024, 6, 1),
    )
    db.create_details(
        transaction_id,
        TransactionType.CHEQUE_RECEIVED,
        entities.ChequeDetails(cheque_number=number, issue_date=date(2024, 6, 1), due_date=date(2024, 6, 5)),
    )
    return transaction_id


class TestDomainModels:
    """The Database interface returns domain entities, never ORM rows."""

    def test_get_account_returns_domain_model(self, temp_db, account_id):
        account = temp_db.get_account(account_id)

        assert isinstance(account, entities.Account)
        assert account.account_type is AccountType.CURRENT
        assert account.current_balance == Decimal("1000")
        assert isinstance(account.created_at, datetime)

    def test_lookup_by_name_and_number(self, temp_db):
        account_id = temp_db.create_account(
            name="ICICI", account_type=AccountType.SAVINGS, opening_balance=Decimal("0"), account_number="999"
        )
        assert temp_db.get_account_by_name("ICICI").id == account_id
        assert temp_db.get_account_by_number("999").id == account_id
        assert temp_db.get_account_by_name("Nope") is None

    def test_get_transaction_includes_details(self, temp_db, account_id):
        transaction_id = _create_cheque(temp_db, account_id)
        txn = temp_db.get_transaction(transaction_id)

        assert isinstance(txn, entities.Transaction)
        assert txn.transaction_type is TransactionType.CHEQUE_RECEIVED
        assert isinstance(txn.details, entities.ChequeDetails)
        assert txn.details.cheque_number == "CHQ-1"

    def test_missing_rows_return_none(self, temp_db):
        assert temp_db.get_account(1) is None
        assert temp_db.get_recipient(1) is None
        assert temp_db.get_transaction(1) is None
        assert temp_db.get_child_transaction(1) is None


class TestUnitOfWork:
    def test_rollback_on_error(self, temp_db, account_id):
        with pytest.raises(RuntimeError):
            with temp_db.transaction():
                _create_cheque(temp_db, account_id)
                temp_db.compare_and_set_balance(account_id, 0, Decimal("5"))
                raise RuntimeError("boom")

        assert temp_db.list_transactions() == []
        assert temp_db.get_account(account_id).current_balance == Decimal("1000")

    def test_nested_blocks_commit_once(self, temp_db, account_id):
        with temp_db.transaction():
            with temp_db.transaction():
                _create_cheque(temp_db, account_id, number="A")
            _create_cheque(temp_db, account_id, number="B")

        temp_db.disconnect()
        assert temp_db.count_transactions() == 2

    def test_inner_error_rolls_back_outer(self, temp_db, account_id):
        with pytest.raises(ValueError):
            with temp_db.transaction():
                _create_cheque(temp_db, account_id, number="A")
                with temp_db.transaction():
                    raise ValueError("inner")

        assert temp_db.count_transactions() == 0

    def test_unique_violation_becomes_conflict(self, temp_db, account_id):
        with pytest.raises(ConflictError):
            temp_db.create_account(name="HDFC Current", account_type=AccountType.CASH, opening_balance=Decimal("0"))


class TestCompareAndSet:
    def test_write_bumps_version(self, temp_db, account_id):
        account = temp_db.compare_and_set_balance(account_id, 0, Decimal("1500"))
        assert account.current_balance == Decimal("1500")
        assert account.version == 1

    def test_stale_version_rejected(self, temp_db, account_id):
        temp_db.compare_and_set_balance(account_id, 0, Decimal("1500"))
        with pytest.raises(BalanceConflictError):
            temp_db.compare_and_set_balance(account_id, 0, Decimal("9999"))
        assert temp_db.get_account(account_id).current_balance == Decimal("1500")

    def test_missing_account(self, temp_db):
        with pytest.raises(BalanceConflictError):
            temp_db.compare_and_set_balance(42, 0, Decimal("1"))


class TestRecipients:
    def test_reserved_recipients_hidden_by_default(self, temp_db, account_id):
        temp_db.create_recipient(name="Self", recipient_type=RecipientType.OWNER, account_id=account_id)
        temp_db.create_recipient(name="Acme", recipient_type=RecipientType.SUPPLIER, account_id=account_id)

        assert [r.name for r in temp_db.list_recipients(account_id=account_id)] == ["Acme"]
        assert len(temp_db.list_recipients(account_id=account_id, include_reserved=True)) == 2
        assert temp_db.get_owner_recipient(account_id).name == "Self"

    def test_unknown_contact_field(self, temp_db, account_id):
        with pytest.raises(TypeError):
            temp_db.create_recipient(
                name="Acme", recipient_type=RecipientType.SUPPLIER, account_id=account_id, fax="123"
            )

    def test_one_shadow_per_account(self, temp_db, account_id):
        temp_db.create_recipient(name="HDFC", recipient_type=RecipientType.ACCOUNT, linked_account_id=account_id)
        with pytest.raises(ConflictError):
            temp_db.create_recipient(
                name="HDFC again", recipient_type=RecipientType.ACCOUNT, linked_account_id=account_id
            )


class TestDetailAdapter:
    def test_relationship_names(self):
        assert relationship_name(DetailKind.CHEQUE) == "cheque_details"
        assert relationship_name(DetailKind.UPI_SETTLEMENT) == "upi_settlement_details"

    def test_details_of_wrong_kind_rejected(self, temp_db, account_id):
        transaction_id = temp_db.create_transaction(
            transaction_type=TransactionType.NEFT,
            amount=Decimal("10"),
            account_id=account_id,
            status=TransactionStatus.PENDING,
            transaction_date=date(2024, 6, 1),
        )
        with pytest.raises(ValidationError):
            temp_db.create_details(
                transaction_id, TransactionType.NEFT, entities.CashDepositDetails(deposit_date=date(2024, 6, 1))
            )

    def test_update_overwrites_fields(self, temp_db, account_id):
        transaction_id = temp_db.create_transaction(
            transaction_type=TransactionType.BANK_TRANSFER_IN,
            amount=Decimal("10"),
            account_id=account_id,
            status=TransactionStatus.PENDING,
            transaction_date=date(2024, 6, 1),
        )
        temp_db.create_details(
            transaction_id,
            TransactionType.BANK_TRANSFER_IN,
            entities.BankTransferDetails(transfer_date=date(2024, 6, 1), transfer_mode=TransferMode.NEFT),
        )
        temp_db.update_details(
            transaction_id,
            TransactionType.BANK_TRANSFER_IN,
            entities.BankTransferDetails(
                transfer_date=date(2024, 6, 1), settlement_date=date(2024, 6, 2), transfer_mode=TransferMode.RTGS
            ),
        )

        details = temp_db.get_transaction(transaction_id).details
        assert details.settlement_date == date(2024, 6, 2)
        assert details.transfer_mode is TransferMode.RTGS

    def test_update_creates_missing_row(self, temp_db, account_id):
        transaction_id = temp_db.create_transaction(
            transaction_type=TransactionType.UPI_SETTLEMENT,
            amount=Decimal("10"),
            account_id=account_id,
            status=TransactionStatus.PENDING,
            transaction_date=date(2024, 6, 1),
        )
        assert temp_db.get_transaction(transaction_id).details is None

        temp_db.update_details(
            transaction_id,
            TransactionType.UPI_SETTLEMENT,
            entities.UpiSettlementDetails(settlement_date=date(2024, 6, 1)),
        )
        assert temp_db.get_transaction(transaction_id).details.settlement_date == date(2024, 6, 1)

    def test_cheque_number_lookup(self, temp_db, account_id):
        transaction_id = _create_cheque(temp_db, account_id)

        assert temp_db.cheque_number_exists("CHQ-1")
        assert not temp_db.cheque_number_exists("CHQ-1", exclude_transaction_id=transaction_id)
        assert not temp_db.cheque_number_exists("CHQ-2")

    def test_deleting_transaction_deletes_detail_row(self, temp_db, account_id):
        transaction_id = _create_cheque(temp_db, account_id)
        temp_db.delete_transaction(transaction_id)

        session = temp_db._get_session()
        assert session.query(ORMChequeDetails).count() == 0

    def test_delete_missing_transaction(self, temp_db):
        with pytest.raises(NotFoundError):
            temp_db.delete_transaction(123)
