"""Tests for the recipient service."""

from decimal import Decimal

import pytest

from conftest import TODAY
from passbook.domain.entities import ChequeDetails, TransactionPayload
from passbook.domain.enums import RecipientType, TransactionStatus, TransactionType
from passbook.domain.errors import ConflictError, DependencyError, NotFoundError, ValidationError


def test_create_recipient_with_contact(recipient_service, current_account):
    recipient_id = recipient_service.create_recipient(
        name="Acme Traders",
        recipient_type="supplier",
        account_id=current_account.id,
        ifsc_code="HDFC0000123",
        phone="+91 98765 43210",
    )
    recipient = recipient_service.get_recipient(recipient_id)

    assert recipient.recipient_type is RecipientType.SUPPLIER
    assert recipient.account_id == current_account.id
    assert recipient.ifsc_code == "HDFC0000123"
    assert recipient.phone == "+91 98765 43210"
    assert not recipient.is_reserved


@pytest.mark.parametrize("recipient_type", ["account", "owner"])
def test_reserved_types_rejected(recipient_service, current_account, recipient_type):
    with pytest.raises(ValidationError):
        recipient_service.create_recipient(name="X", recipient_type=recipient_type, account_id=current_account.id)


def test_create_recipient_requires_account(recipient_service):
    with pytest.raises(NotFoundError):
        recipient_service.create_recipient(name="Acme", recipient_type="supplier", account_id=999)


def test_create_recipient_rejects_unknown_type(recipient_service, current_account):
    with pytest.raises(ValidationError):
        recipient_service.create_recipient(name="Acme", recipient_type="friend", account_id=current_account.id)


def test_list_recipients_scoped_to_account(recipient_service, current_account, savings_account, supplier):
    recipient_service.create_recipient(name="Landlord", recipient_type="other", account_id=savings_account.id)

    assert [r.name for r in recipient_service.list_recipients_for_account(current_account.id)] == ["Acme Traders"]
    assert [r.name for r in recipient_service.list_recipients_for_account(savings_account.id)] == ["Landlord"]


def test_list_transfer_targets_excludes_source(recipient_service, current_account, savings_account):
    targets = recipient_service.list_transfer_targets(current_account.id)
    assert [t.linked_account_id for t in targets] == [savings_account.id]
    assert targets[0].recipient_type is RecipientType.ACCOUNT


def test_update_recipient(recipient_service, supplier):
    recipient_service.update_recipient(supplier.id, name="Acme Traders Pvt Ltd", email="accounts@acme.example")
    recipient = recipient_service.get_recipient(supplier.id)
    assert recipient.name == "Acme Traders Pvt Ltd"
    assert recipient.email == "accounts@acme.example"


def test_reserved_recipient_cannot_be_changed(recipient_service, temp_db, current_account):
    owner = temp_db.get_owner_recipient(current_account.id)
    with pytest.raises(ValidationError):
        recipient_service.update_recipient(owner.id, name="Me")
    with pytest.raises(ValidationError):
        recipient_service.delete_recipient(owner.id)


def test_delete_unused_recipient(recipient_service, supplier):
    recipient_service.delete_recipient(supplier.id)
    assert recipient_service.get_recipient(supplier.id) is None


def test_delete_recipient_in_use(recipient_service, transaction_service, current_account, supplier):
    transaction_service.create_transaction(
        TransactionPayload(
            transaction_type=TransactionType.CHEQUE_GIVEN,
            amount=Decimal("100"),
            account_id=current_account.id,
            status=TransactionStatus.PENDING,
            recipient_id=supplier.id,
            details=ChequeDetails(cheque_number="CHQ-77", issue_date=TODAY, due_date=TODAY),
        )
    )
    with pytest.raises(DependencyError):
        recipient_service.delete_recipient(supplier.id)


def test_delete_missing_recipient(recipient_service):
    with pytest.raises(NotFoundError):
        recipient_service.delete_recipient(999)


class TestGstNumber:
    def test_stored_upper_case_with_address(self, recipient_service, current_account):
        recipient_id = recipient_service.create_recipient(
            name="Acme Traders",
            recipient_type="supplier",
            account_id=current_account.id,
            address="12 MG Road, Pune",
            gst_number=" 27aaaca1234a1z5 ",
        )
        recipient = recipient_service.get_recipient(recipient_id)
        assert recipient.gst_number == "27AAACA1234A1Z5"
        assert recipient.address == "12 MG Road, Pune"

    def test_find_by_gst_number(self, recipient_service, current_account):
        recipient_id = recipient_service.create_recipient(
            name="Acme Traders", recipient_type="supplier", account_id=current_account.id, gst_number="27AAACA1234A1Z5"
        )
        assert recipient_service.find_by_gst_number("27aaaca1234a1z5").id == recipient_id
        assert recipient_service.find_by_gst_number("29BBBCB5678B1Z1") is None

    def test_duplicate_rejected(self, recipient_service, current_account, savings_account):
        recipient_service.create_recipient(
            name="Acme Traders", recipient_type="supplier", account_id=current_account.id, gst_number="27AAACA1234A1Z5"
        )
        with pytest.raises(ConflictError):
            recipient_service.create_recipient(
                name="Acme Again",
                recipient_type="supplier",
                account_id=savings_account.id,
                gst_number="27aaaca1234a1z5",
            )

    def test_update_keeps_own_number(self, recipient_service, current_account, supplier):
        recipient_service.update_recipient(supplier.id, gst_number="27AAACA1234A1Z5")
        recipient_service.update_recipient(supplier.id, gst_number="27aaaca1234a1z5", phone="020 1234")
        assert recipient_service.get_recipient(supplier.id).gst_number == "27AAACA1234A1Z5"

        other_id = recipient_service.create_recipient(
            name="Beta Metals", recipient_type="supplier", account_id=current_account.id
        )
        with pytest.raises(ConflictError):
            recipient_service.update_recipient(other_id, gst_number="27AAACA1234A1Z5")


def test_list_recipients_by_type(recipient_service, current_account, savings_account, supplier):
    recipient_service.create_recipient(name="Zenith Steel", recipient_type="supplier", account_id=savings_account.id)
    recipient_service.create_recipient(name="Landlord", recipient_type="other", account_id=current_account.id)

    assert [r.name for r in recipient_service.list_recipients_by_type("supplier")] == ["Acme Traders", "Zenith Steel"]
    assert [r.name for r in recipient_service.list_recipients_by_type("supplier", savings_account.id)] == [
        "Zenith Steel"
    ]
    assert recipient_service.list_recipients_by_type(RecipientType.CUSTOMER) == []


@pytest.mark.parametrize("recipient_type", ["owner", "account", "friend"])
def test_list_recipients_by_type_rejects_reserved_and_unknown(recipient_service, recipient_type):
    with pytest.raises(ValidationError):
        recipient_service.list_recipients_by_type(recipient_type)
