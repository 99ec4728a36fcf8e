"""Date-sequence and date-versus-status rules for detail records.

Each check raises a ``ValidationError`` subclass on the first violation and
returns None otherwise. ``today`` is the validation date; a date is "in the
future" only when it falls on a later calendar day.
"""

from datetime import date
from itertools import combinations
from typing import Optional

from passbook.domain.entities import (
    BankTransferDetails,
    ChequeDetails,
    OnlineTransferDetails,
    TransactionDetails,
)
from passbook.domain.enums import DetailKind, TransactionStatus
from passbook.domain.errors import (
    DateSequenceViolationError,
    FutureDateNotAllowedError,
    MissingRequiredFieldError,
    future_date_not_allowed,
)
from passbook.domain.rules import ONLINE_TERMINAL_STATUSES, is_terminal_status

# Order in which cheque lifecycle dates must occur
CHEQUE_DATE_SEQUENCE = (
    ("issue_date", "issue date"),
    ("due_date", "due date"),
    ("submitted_date", "submission date"),
    ("cleared_date", "cleared date"),
)

# Dates a cheque must carry before it may take a status
CHEQUE_STATUS_REQUIREMENTS: dict[TransactionStatus, tuple[str, ...]] = {
    TransactionStatus.SUBMITTED: ("issue_date",),
    TransactionStatus.CLEARED: ("issue_date", "due_date", "cleared_date"),
    TransactionStatus.STOPPED: ("issue_date",),
}

_FIELD_LABELS = dict(CHEQUE_DATE_SEQUENCE)

PRIMARY_DATE_LABELS = {
    DetailKind.CASH_DEPOSIT: "Deposit date",
    DetailKind.CHEQUE: "Cheque date",
    DetailKind.BANK_TRANSFER: "Transfer date",
    DetailKind.ONLINE_TRANSFER: "Transfer date",
    DetailKind.UPI_SETTLEMENT: "Settlement date",
    DetailKind.ACCOUNT_TRANSFER: "Transfer date",
    DetailKind.BANK_CHARGE: "Debit date",
}


def _is_future(value: date, today: date) -> bool:
    return value > today


def check_not_future(
    value: Optional[date], status: TransactionStatus, today: date, field_label: str = "Transaction date"
) -> None:
    """Reject a date after today when the status is terminal."""
    if value is None:
        return
    if is_terminal_status(status) and _is_future(value, today):
        raise FutureDateNotAllowedError(future_date_not_allowed(field_label, status.value))


def check_cheque_dates(details: ChequeDetails) -> None:
    """Validate cheque number, due date and the ordering of lifecycle dates.

    Dates must satisfy issue <= due <= submitted <= cleared for every pair in
    which both ends are present.
    """
    if not details.cheque_number or not details.cheque_number.strip():
        raise MissingRequiredFieldError("Cheque number is required for cheque transactions")
    if details.due_date is None:
        raise MissingRequiredFieldError("Cheque due date is required for cheque transactions")

    present = [
        (label, getattr(details, name))
        for name, label in CHEQUE_DATE_SEQUENCE
        if getattr(details, name) is not None
    ]
    for (earlier_label, earlier), (later_label, later) in combinations(present, 2):
        if later < earlier:
            raise DateSequenceViolationError(
                f"Cheque {later_label} ({later.isoformat()}) cannot be before the "
                f"{earlier_label} ({earlier.isoformat()})"
            )


def check_cheque_status_requirements(details: ChequeDetails, status: TransactionStatus) -> None:
    """Require the dates a cheque status implies (e.g. CLEARED needs a cleared date)."""
    for name in CHEQUE_STATUS_REQUIREMENTS.get(status, ()):
        if getattr(details, name) is None:
            raise MissingRequiredFieldError(
                f"Cheque {_FIELD_LABELS[name]} is required for {status.value.upper()} status"
            )


def check_bank_transfer_dates(details: BankTransferDetails, status: Optional[TransactionStatus]) -> None:
    """Validate transfer/settlement ordering and settlement-versus-status coherence."""
    if details.transfer_date is None:
        raise MissingRequiredFieldError("Transfer date is required for bank transfer transactions")

    if details.settlement_date is not None and details.settlement_date < details.transfer_date:
        raise DateSequenceViolationError(
            "Settlement date cannot be before the transfer date. "
            "A transfer must happen before it can be settled."
        )

    if status is None:
        return
    if details.settlement_date is not None and status is TransactionStatus.PENDING:
        raise DateSequenceViolationError(
            'Transaction status cannot be "pending" when settlement date is provided. '
            'If the transfer has been settled, please update the status to "transferred".'
        )
    if details.settlement_date is None and status is TransactionStatus.TRANSFERRED:
        raise MissingRequiredFieldError(
            'Settlement date is required when transaction status is "transferred". '
            "Please provide the settlement date."
        )


def check_online_transfer_dates(
    details: OnlineTransferDetails, status: Optional[TransactionStatus], today: date
) -> None:
    """Require a transfer date, and forbid future dates once the transfer is final."""
    if details.transfer_date is None:
        raise MissingRequiredFieldError("Valid transfer date is required for online transfer transactions")
    if status in ONLINE_TERMINAL_STATUSES and _is_future(details.transfer_date, today):
        raise FutureDateNotAllowedError(future_date_not_allowed("Transfer date", status.value))


def check_detail_dates(details: TransactionDetails, status: TransactionStatus, today: date) -> None:
    """Run every date rule that applies to the detail record's kind."""
    if isinstance(details, ChequeDetails):
        check_cheque_dates(details)
        check_cheque_status_requirements(details, status)
    elif isinstance(details, BankTransferDetails):
        check_bank_transfer_dates(details, status)
    elif isinstance(details, OnlineTransferDetails):
        check_online_transfer_dates(details, status, today)

    check_not_future(details.primary_date, status, today, field_label=_primary_date_label(details))


def _primary_date_label(details: TransactionDetails) -> str:
    return PRIMARY_DATE_LABELS[details.kind]

