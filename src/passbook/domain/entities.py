"""Domain model entities for passbook.

These are pure data classes representing business concepts, independent of
database schema. Entities are frozen: state changes go through the domain
services, which write through the database layer and read the result back.
"""

from dataclasses import dataclass, field, fields, replace
from datetime import datetime, date
from decimal import Decimal
from typing import ClassVar, Optional, Union

from passbook.domain.enums import (
    AccountType,
    BankChargeType,
    DetailKind,
    RecipientType,
    TransactionDirection,
    TransactionStatus,
    TransactionType,
    TransferMode,
)
from passbook.domain.rules import direction as direction_for


@dataclass(frozen=True)
class Account:
    """Bank account domain entity.

    ``current_balance`` is only ever written by the balance engine; ``version``
    is bumped on every balance write and used for compare-and-set.
    """

    id: int
    name: str
    account_type: AccountType
    opening_balance: Decimal
    current_balance: Decimal
    created_at: datetime
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    notes: Optional[str] = None
    version: int = 0


@dataclass(frozen=True)
class Recipient:
    """Counterparty domain entity.

    ``account_id`` scopes a recipient to one account. ACCOUNT-type recipients
    are unscoped and instead carry ``linked_account_id``, the account they
    stand for.
    """

    id: int
    name: str
    recipient_type: RecipientType
    account_id: Optional[int]
    created_at: datetime
    linked_account_id: Optional[int] = None
    bank_account_no: Optional[str] = None
    ifsc_code: Optional[str] = None
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    gst_number: Optional[str] = None
    notes: Optional[str] = None

    @property
    def is_reserved(self) -> bool:
        return self.recipient_type in (RecipientType.ACCOUNT, RecipientType.OWNER)


class _Detail:
    """Mixin for detail records."""

    kind: ClassVar[DetailKind]

    @property
    def primary_date(self) -> Optional[date]:
        raise NotImplementedError

    def merged_with(self, changes: "_Detail"):
        """Return a copy with every non-None field of ``changes`` applied."""
        if type(changes) is not type(self):
            raise TypeError(f"Cannot merge {type(changes).__name__} into {type(self).__name__}")
        updates = {f.name: getattr(changes, f.name) for f in fields(changes) if getattr(changes, f.name) is not None}
        return replace(self, **updates)

    def without(self, names):
        """Return a copy with the named fields set to None."""
        return replace(self, **{name: None for name in names})


@dataclass(frozen=True)
class CashDepositDetails(_Detail):
    kind: ClassVar[DetailKind] = DetailKind.CASH_DEPOSIT

    deposit_date: Optional[date] = None
    notes: Optional[str] = None

    @property
    def primary_date(self) -> Optional[date]:
        return self.deposit_date


@dataclass(frozen=True)
class ChequeDetails(_Detail):
    kind: ClassVar[DetailKind] = DetailKind.CHEQUE

    cheque_number: Optional[str] = None
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    submitted_date: Optional[date] = None
    cleared_date: Optional[date] = None
    bounce_charge: Optional[Decimal] = None
    bank_name: Optional[str] = None
    notes: Optional[str] = None

    @property
    def primary_date(self) -> Optional[date]:
        # Latest lifecycle event that has happened; the due date may be post-dated
        return self.cleared_date or self.submitted_date or self.issue_date


@dataclass(frozen=True)
class BankTransferDetails(_Detail):
    kind: ClassVar[DetailKind] = DetailKind.BANK_TRANSFER

    transfer_date: Optional[date] = None
    settlement_date: Optional[date] = None
    transfer_mode: Optional[TransferMode] = None
    reference_number: Optional[str] = None
    notes: Optional[str] = None

    @property
    def primary_date(self) -> Optional[date]:
        return self.transfer_date


@dataclass(frozen=True)
class OnlineTransferDetails(_Detail):
    kind: ClassVar[DetailKind] = DetailKind.ONLINE_TRANSFER

    transfer_date: Optional[date] = None
    utr_number: Optional[str] = None
    notes: Optional[str] = None

    @property
    def primary_date(self) -> Optional[date]:
        return self.transfer_date


@dataclass(frozen=True)
class UpiSettlementDetails(_Detail):
    kind: ClassVar[DetailKind] = DetailKind.UPI_SETTLEMENT

    settlement_date: Optional[date] = None
    upi_reference: Optional[str] = None
    batch_number: Optional[str] = None
    notes: Optional[str] = None

    @property
    def primary_date(self) -> Optional[date]:
        return self.settlement_date


@dataclass(frozen=True)
class AccountTransferDetails(_Detail):
    kind: ClassVar[DetailKind] = DetailKind.ACCOUNT_TRANSFER

    transfer_date: Optional[date] = None
    transfer_reference: Optional[str] = None
    purpose: Optional[str] = None
    notes: Optional[str] = None

    @property
    def primary_date(self) -> Optional[date]:
        return self.transfer_date


@dataclass(frozen=True)
class BankChargeDetails(_Detail):
    kind: ClassVar[DetailKind] = DetailKind.BANK_CHARGE

    charge_type: Optional[BankChargeType] = None
    debit_date: Optional[date] = None
    charge_amount: Optional[Decimal] = None
    narration: Optional[str] = None

    @property
    def primary_date(self) -> Optional[date]:
        return self.debit_date


TransactionDetails = Union[
    CashDepositDetails,
    ChequeDetails,
    BankTransferDetails,
    OnlineTransferDetails,
    UpiSettlementDetails,
    AccountTransferDetails,
    BankChargeDetails,
]

DETAIL_CLASSES: dict[DetailKind, type] = {
    cls.kind: cls
    for cls in (
        CashDepositDetails,
        ChequeDetails,
        BankTransferDetails,
        OnlineTransferDetails,
        UpiSettlementDetails,
        AccountTransferDetails,
        BankChargeDetails,
    )
}


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity (one ledger entry)."""

    id: int
    transaction_type: TransactionType
    amount: Decimal
    account_id: int
    status: TransactionStatus
    transaction_date: date
    created_at: datetime
    updated_at: datetime
    recipient_id: Optional[int] = None
    to_account_id: Optional[int] = None
    description: Optional[str] = None
    parent_transaction_id: Optional[int] = None
    details: Optional[TransactionDetails] = None

    @property
    def direction(self) -> TransactionDirection:
        return direction_for(self.transaction_type)

    @property
    def is_receiver_side(self) -> bool:
        return self.parent_transaction_id is not None


@dataclass(frozen=True)
class TransactionPayload:
    """Validated input for creating a transaction."""

    transaction_type: TransactionType
    amount: Decimal
    account_id: int
    status: TransactionStatus
    recipient_id: Optional[int] = None
    to_account_id: Optional[int] = None
    description: Optional[str] = None
    transaction_date: Optional[date] = None
    details: Optional[TransactionDetails] = None


@dataclass(frozen=True)
class TransactionUpdate:
    """Partial update of a transaction. ``None`` means "leave unchanged".

    Fields named in ``clear_detail_fields`` are removed from the stored detail
    record after ``details`` has been merged in.

    The type and owning account of a transaction are fixed at creation and
    cannot be updated.
    """

    amount: Optional[Decimal] = None
    status: Optional[TransactionStatus] = None
    recipient_id: Optional[int] = None
    to_account_id: Optional[int] = None
    description: Optional[str] = None
    transaction_date: Optional[date] = None
    details: Optional[TransactionDetails] = None
    clear_recipient: bool = False
    clear_detail_fields: frozenset[str] = frozenset()


@dataclass(frozen=True)
class AccountStats:
    """Transaction totals for one account."""

    account_id: int
    total_credits: Decimal = Decimal("0")
    total_debits: Decimal = Decimal("0")
    pending_count: int = 0
    completed_count: int = 0
    credits_by_type: dict[str, Decimal] = field(default_factory=dict)
    debits_by_type: dict[str, Decimal] = field(default_factory=dict)


@dataclass(frozen=True)
class TypeTotals:
    count: int = 0
    amount: Decimal = Decimal("0")


@dataclass(frozen=True)
class TransactionSummary:
    """Totals across every account.

    Credit, debit and net totals count completed transactions only. The
    per-type breakdown counts every listed transaction whatever its status.
    """

    total_transactions: int = 0
    total_credits: Decimal = Decimal("0")
    total_debits: Decimal = Decimal("0")
    pending_count: int = 0
    completed_count: int = 0
    by_type: dict[str, TypeTotals] = field(default_factory=dict)

    @property
    def net_amount(self) -> Decimal:
        return self.total_credits - self.total_debits


@dataclass(frozen=True)
class BulkFailure:
    """A payload rejected during bulk creation, by its position in the input."""

    index: int
    error: str


@dataclass(frozen=True)
class BulkResult:
    created: list[Transaction] = field(default_factory=list)
    failed: list[BulkFailure] = field(default_factory=list)
