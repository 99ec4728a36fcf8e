"""Tests for the per-type rule tables."""

import pytest

from passbook.domain.enums import DetailKind, TransactionDirection, TransactionStatus, TransactionType
from passbook.domain.errors import InvalidStatusForTypeError, ValidationError
from passbook.domain.rules import (
    GREEN_STATUSES,
    TYPE_RULES,
    completion_status,
    direction,
    ensure_legal_status,
    is_green_status,
    is_legal_status,
    is_visible_in_list,
    legal_statuses,
    normalize_status,
    normalize_type,
    receiver_status_for,
    required_detail_kind,
    requires_recipient,
    valid_statuses,
)

S = TransactionStatus
T = TransactionType


def test_every_type_has_a_rule():
    """Test that the rule table covers every canonical type."""
    assert set(TYPE_RULES) == set(TransactionType)


@pytest.mark.parametrize("transaction_type", list(TransactionType))
def test_completion_status_is_legal_and_green(transaction_type):
    """Test that each type's completion status is legal for it and moves money."""
    status = completion_status(transaction_type)
    assert status in legal_statuses(transaction_type)
    assert is_green_status(status)


@pytest.mark.parametrize("transaction_type", list(TransactionType))
def test_pending_is_legal_for_every_type(transaction_type):
    assert is_legal_status(transaction_type, S.PENDING)


def test_directions():
    """Test the credit/debit side of each type."""
    credits = {T.CASH_DEPOSIT, T.CHEQUE_RECEIVED, T.BANK_TRANSFER_IN, T.UPI_SETTLEMENT, T.ACCOUNT_TRANSFER_IN}
    for transaction_type in TransactionType:
        expected = TransactionDirection.CREDIT if transaction_type in credits else TransactionDirection.DEBIT
        assert direction(transaction_type) is expected


def test_detail_kinds():
    assert required_detail_kind(T.CHEQUE_GIVEN) is DetailKind.CHEQUE
    assert required_detail_kind(T.CHEQUE_RECEIVED) is DetailKind.CHEQUE
    assert required_detail_kind(T.IMPS) is DetailKind.ONLINE_TRANSFER
    assert required_detail_kind(T.BANK_TRANSFER_OUT) is DetailKind.BANK_TRANSFER
    assert required_detail_kind(T.ACCOUNT_TRANSFER_IN) is DetailKind.ACCOUNT_TRANSFER


def test_recipient_required_types():
    assert requires_recipient(T.CHEQUE_GIVEN)
    assert requires_recipient(T.NEFT)
    assert not requires_recipient(T.CASH_DEPOSIT)
    assert not requires_recipient(T.BANK_CHARGE)
    assert not requires_recipient(T.ACCOUNT_TRANSFER)


def test_green_partition():
    """Test that failure and cancellation statuses never move money."""
    for status in (S.PENDING, S.SUBMITTED, S.BOUNCED, S.CANCELLED, S.FAILED, S.STOPPED):
        assert not is_green_status(status)
    assert S.CLEARED in GREEN_STATUSES
    assert S.RECEIVED in GREEN_STATUSES


def test_cheque_status_sets_differ_by_side():
    """Test that only received cheques can be submitted and only given ones stopped."""
    assert is_legal_status(T.CHEQUE_RECEIVED, S.SUBMITTED)
    assert not is_legal_status(T.CHEQUE_GIVEN, S.SUBMITTED)
    assert is_legal_status(T.CHEQUE_GIVEN, S.STOPPED)
    assert not is_legal_status(T.CHEQUE_RECEIVED, S.STOPPED)


def test_ensure_legal_status_lists_allowed():
    with pytest.raises(InvalidStatusForTypeError) as excinfo:
        ensure_legal_status(T.BANK_CHARGE, S.CLEARED)
    message = str(excinfo.value)
    assert "cleared" in message
    assert "debited" in message


def test_valid_statuses_keeps_display_order():
    assert valid_statuses(T.CASH_DEPOSIT) == [S.PENDING, S.DEPOSITED, S.CANCELLED]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("cheque", T.CHEQUE_RECEIVED),
        ("deposit", T.CASH_DEPOSIT),
        ("transfer", T.BANK_TRANSFER_IN),
        ("settlement", T.UPI_SETTLEMENT),
        ("online", T.NEFT),
        ("internal_transfer", T.ACCOUNT_TRANSFER),
        ("other", T.BANK_CHARGE),
        ("  NEFT ", T.NEFT),
        (T.RTGS, T.RTGS),
    ],
)
def test_normalize_type(raw, expected):
    assert normalize_type(raw) is expected


def test_normalize_type_unknown():
    with pytest.raises(ValidationError):
        normalize_type("barter")


def test_normalize_status_maps_completed_per_type():
    """Test that the legacy 'completed' status becomes the type's completion status."""
    assert normalize_status("completed", T.CHEQUE_GIVEN) is S.CLEARED
    assert normalize_status("completed", T.CASH_DEPOSIT) is S.DEPOSITED
    assert normalize_status(S.COMPLETED, T.UPI_SETTLEMENT) is S.SETTLED
    assert normalize_status("Pending", T.UPI) is S.PENDING


def test_normalize_status_unknown():
    with pytest.raises(ValidationError):
        normalize_status("lost", T.UPI)


def test_receiver_status_mapping():
    assert receiver_status_for(S.PENDING) is S.PENDING
    assert receiver_status_for(S.TRANSFERRED) is S.RECEIVED
    assert receiver_status_for(S.CANCELLED) is None


def test_pending_receivers_are_hidden():
    assert not is_visible_in_list(T.ACCOUNT_TRANSFER_IN, S.PENDING, is_receiver_side=True)
    assert is_visible_in_list(T.ACCOUNT_TRANSFER_IN, S.RECEIVED, is_receiver_side=True)
    assert is_visible_in_list(T.ACCOUNT_TRANSFER, S.PENDING)
