"""Per-type rule tables.

Every fact about a transaction type (direction, required detail record,
legal statuses, completion status, whether a counterparty is required) is
read from ``TYPE_RULES``. Nothing else in the code base switches on the
transaction type to recompute these.
"""

from dataclasses import dataclass
from typing import Optional, Union

from passbook.domain.enums import (
    DetailKind,
    TransactionDirection,
    TransactionStatus,
    TransactionType,
)
from passbook.domain.errors import InvalidStatusForTypeError, ValidationError, invalid_status_for_type

CREDIT = TransactionDirection.CREDIT
DEBIT = TransactionDirection.DEBIT
S = TransactionStatus


@dataclass(frozen=True)
class TypeRule:
    """Static rules for one transaction type."""

    direction: TransactionDirection
    detail_kind: DetailKind
    statuses: tuple[TransactionStatus, ...]
    completion_status: TransactionStatus
    requires_recipient: bool = False
    system_only: bool = False
    label: str = ""


_ONLINE_STATUSES = (S.PENDING, S.TRANSFERRED, S.CANCELLED)

TYPE_RULES: dict[TransactionType, TypeRule] = {
    TransactionType.CASH_DEPOSIT: TypeRule(
        CREDIT, DetailKind.CASH_DEPOSIT, (S.PENDING, S.DEPOSITED, S.CANCELLED), S.DEPOSITED,
        label="cash deposit",
    ),
    TransactionType.CHEQUE_RECEIVED: TypeRule(
        CREDIT,
        DetailKind.CHEQUE,
        (S.PENDING, S.SUBMITTED, S.CLEARED, S.BOUNCED, S.CANCELLED),
        S.CLEARED,
        requires_recipient=True,
        label="cheque",
    ),
    TransactionType.CHEQUE_GIVEN: TypeRule(
        DEBIT,
        DetailKind.CHEQUE,
        (S.PENDING, S.CLEARED, S.BOUNCED, S.STOPPED, S.CANCELLED),
        S.CLEARED,
        requires_recipient=True,
        label="cheque",
    ),
    TransactionType.BANK_TRANSFER_IN: TypeRule(
        CREDIT,
        DetailKind.BANK_TRANSFER,
        (S.PENDING, S.TRANSFERRED, S.FAILED, S.CANCELLED),
        S.TRANSFERRED,
        requires_recipient=True,
        label="bank transfer",
    ),
    TransactionType.BANK_TRANSFER_OUT: TypeRule(
        DEBIT,
        DetailKind.BANK_TRANSFER,
        (S.PENDING, S.TRANSFERRED, S.FAILED, S.CANCELLED),
        S.TRANSFERRED,
        requires_recipient=True,
        label="bank transfer",
    ),
    TransactionType.NEFT: TypeRule(
        DEBIT, DetailKind.ONLINE_TRANSFER, _ONLINE_STATUSES, S.TRANSFERRED,
        requires_recipient=True, label="NEFT transfer",
    ),
    TransactionType.IMPS: TypeRule(
        DEBIT, DetailKind.ONLINE_TRANSFER, _ONLINE_STATUSES, S.TRANSFERRED,
        requires_recipient=True, label="IMPS transfer",
    ),
    TransactionType.RTGS: TypeRule(
        DEBIT, DetailKind.ONLINE_TRANSFER, _ONLINE_STATUSES, S.TRANSFERRED,
        requires_recipient=True, label="RTGS transfer",
    ),
    TransactionType.UPI: TypeRule(
        DEBIT, DetailKind.ONLINE_TRANSFER, _ONLINE_STATUSES, S.TRANSFERRED,
        requires_recipient=True, label="UPI transfer",
    ),
    TransactionType.UPI_SETTLEMENT: TypeRule(
        CREDIT,
        DetailKind.UPI_SETTLEMENT,
        (S.PENDING, S.SETTLED, S.FAILED, S.CANCELLED),
        S.SETTLED,
        label="UPI settlement",
    ),
    TransactionType.ACCOUNT_TRANSFER: TypeRule(
        DEBIT,
        DetailKind.ACCOUNT_TRANSFER,
        (S.PENDING, S.TRANSFERRED, S.CANCELLED),
        S.TRANSFERRED,
        label="account transfer",
    ),
    TransactionType.BANK_CHARGE: TypeRule(
        DEBIT, DetailKind.BANK_CHARGE, (S.PENDING, S.DEBITED, S.CANCELLED), S.DEBITED,
        label="bank charge",
    ),
    TransactionType.ACCOUNT_TRANSFER_IN: TypeRule(
        CREDIT,
        DetailKind.ACCOUNT_TRANSFER,
        (S.PENDING, S.RECEIVED),
        S.RECEIVED,
        system_only=True,
        label="account transfer receipt",
    ),
}

# Balance-affecting statuses. Everything else is "red" and never moves money.
GREEN_STATUSES = frozenset(
    {S.DEPOSITED, S.CLEARED, S.SETTLED, S.TRANSFERRED, S.DEBITED, S.RECEIVED, S.COMPLETED}
)

# Statuses for which the primary date of a transaction may not lie in the future.
TERMINAL_STATUSES = frozenset(
    {S.DEPOSITED, S.CLEARED, S.SETTLED, S.TRANSFERRED, S.DEBITED, S.RECEIVED, S.SUBMITTED, S.CANCELLED}
)

ONLINE_TERMINAL_STATUSES = frozenset({S.TRANSFERRED, S.SETTLED, S.CANCELLED})

LEGACY_TYPE_ALIASES: dict[str, TransactionType] = {
    "cheque": TransactionType.CHEQUE_RECEIVED,
    "deposit": TransactionType.CASH_DEPOSIT,
    "transfer": TransactionType.BANK_TRANSFER_IN,
    "settlement": TransactionType.UPI_SETTLEMENT,
    "online": TransactionType.NEFT,
    "online_transfer": TransactionType.NEFT,
    "internal_transfer": TransactionType.ACCOUNT_TRANSFER,
    # Uncategorized debits; the migration gives them an "other" bank charge record
    "other": TransactionType.BANK_CHARGE,
}

# Receiver status keyed by sender status for account transfers. Sender
# statuses missing from this map (e.g. CANCELLED) leave no receiver behind.
RECEIVER_STATUS_BY_SENDER_STATUS: dict[TransactionStatus, TransactionStatus] = {
    S.PENDING: S.PENDING,
    S.TRANSFERRED: S.RECEIVED,
}


def rule_for(transaction_type: TransactionType) -> TypeRule:
    """Return the rule row for a canonical type."""
    return TYPE_RULES[transaction_type]


def required_detail_kind(transaction_type: TransactionType) -> DetailKind:
    return TYPE_RULES[transaction_type].detail_kind


def legal_statuses(transaction_type: TransactionType) -> frozenset[TransactionStatus]:
    return frozenset(TYPE_RULES[transaction_type].statuses)


def completion_status(transaction_type: TransactionType) -> TransactionStatus:
    return TYPE_RULES[transaction_type].completion_status


def direction(transaction_type: TransactionType) -> TransactionDirection:
    return TYPE_RULES[transaction_type].direction


def requires_recipient(transaction_type: TransactionType) -> bool:
    return TYPE_RULES[transaction_type].requires_recipient


def is_green_status(status: TransactionStatus) -> bool:
    """Return True if the status represents a completed, balance-affecting state."""
    return status in GREEN_STATUSES


def is_terminal_status(status: TransactionStatus) -> bool:
    return status in TERMINAL_STATUSES


def is_legal_status(transaction_type: TransactionType, status: TransactionStatus) -> bool:
    return status in TYPE_RULES[transaction_type].statuses


def ensure_legal_status(transaction_type: TransactionType, status: TransactionStatus) -> None:
    """Raise InvalidStatusForTypeError if the status is not legal for the type."""
    if not is_legal_status(transaction_type, status):
        raise InvalidStatusForTypeError(
            invalid_status_for_type(status.value, transaction_type.value, valid_statuses(transaction_type))
        )


def valid_statuses(transaction_type: TransactionType) -> list[TransactionStatus]:
    """Return the legal statuses for a type, in display order."""
    return list(TYPE_RULES[transaction_type].statuses)


def receiver_status_for(sender_status: TransactionStatus) -> Optional[TransactionStatus]:
    """Return the receiver-side status for an account transfer sender status."""
    return RECEIVER_STATUS_BY_SENDER_STATUS.get(sender_status)


def is_visible_in_list(
    transaction_type: TransactionType, status: TransactionStatus, is_receiver_side: bool = False
) -> bool:
    """Return False for receiver halves that have not been received yet."""
    if is_receiver_side and transaction_type is TransactionType.ACCOUNT_TRANSFER_IN:
        return status is TransactionStatus.RECEIVED
    return True


def normalize_type(value: Union[str, TransactionType]) -> TransactionType:
    """Map a canonical or legacy type spelling onto a canonical type.

    Raises:
        ValidationError: If the value is not a known type
    """
    if isinstance(value, TransactionType):
        return value
    key = str(value).strip().lower()
    if key in LEGACY_TYPE_ALIASES:
        return LEGACY_TYPE_ALIASES[key]
    try:
        return TransactionType(key)
    except ValueError:
        raise ValidationError(f"Unknown transaction type '{value}'") from None


def normalize_status(
    value: Union[str, TransactionStatus], transaction_type: TransactionType
) -> TransactionStatus:
    """Parse a status and resolve the legacy ``completed`` status for a type.

    Raises:
        ValidationError: If the value is not a known status
    """
    if isinstance(value, TransactionStatus):
        status = value
    else:
        try:
            status = TransactionStatus(str(value).strip().lower())
        except ValueError:
            raise ValidationError(f"Unknown transaction status '{value}'") from None
    if status is TransactionStatus.COMPLETED:
        return completion_status(transaction_type)
    return status
