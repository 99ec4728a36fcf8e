"""Enumerations shared by the domain and database layers."""

from enum import Enum


class TransactionDirection(str, Enum):
    """Whether a transaction adds money to or removes money from its account."""

    CREDIT = "credit"
    DEBIT = "debit"

    def reversed(self) -> "TransactionDirection":
        """Return the opposite direction."""
        if self is TransactionDirection.CREDIT:
            return TransactionDirection.DEBIT
        return TransactionDirection.CREDIT


class TransactionType(str, Enum):
    """Canonical transaction types.

    Legacy spellings accepted at the input boundary are mapped onto these
    by ``passbook.domain.rules.normalize_type``.
    """

    CASH_DEPOSIT = "cash_deposit"
    CHEQUE_RECEIVED = "cheque_received"
    CHEQUE_GIVEN = "cheque_given"
    BANK_TRANSFER_IN = "bank_transfer_in"
    BANK_TRANSFER_OUT = "bank_transfer_out"
    NEFT = "neft"
    IMPS = "imps"
    RTGS = "rtgs"
    UPI = "upi"
    UPI_SETTLEMENT = "upi_settlement"
    ACCOUNT_TRANSFER = "account_transfer"
    BANK_CHARGE = "bank_charge"
    # Receiver half of an account transfer, only ever created by the system
    ACCOUNT_TRANSFER_IN = "account_transfer_in"


class TransactionStatus(str, Enum):
    """Transaction statuses across all types."""

    PENDING = "pending"
    SUBMITTED = "submitted"
    DEPOSITED = "deposited"
    CLEARED = "cleared"
    SETTLED = "settled"
    TRANSFERRED = "transferred"
    DEBITED = "debited"
    RECEIVED = "received"
    COMPLETED = "completed"
    BOUNCED = "bounced"
    CANCELLED = "cancelled"
    FAILED = "failed"
    STOPPED = "stopped"


class DetailKind(str, Enum):
    """The seven shapes of type-specific detail records."""

    CASH_DEPOSIT = "cash_deposit"
    CHEQUE = "cheque"
    BANK_TRANSFER = "bank_transfer"
    ONLINE_TRANSFER = "online_transfer"
    UPI_SETTLEMENT = "upi_settlement"
    ACCOUNT_TRANSFER = "account_transfer"
    BANK_CHARGE = "bank_charge"


class TransferMode(str, Enum):
    """Rail used for a bank transfer."""

    NEFT = "neft"
    IMPS = "imps"
    RTGS = "rtgs"
    UPI = "upi"


class BankChargeType(str, Enum):
    """Fee categories a bank may debit."""

    NEFT_CHARGE = "neft_charge"
    IMPS_CHARGE = "imps_charge"
    RTGS_CHARGE = "rtgs_charge"
    CHEQUE_RETURN_CHARGE = "cheque_return_charge"
    ATM_CHARGE = "atm_charge"
    CASH_DEPOSIT_CHARGE = "cash_deposit_charge"
    MAINTENANCE_FEE = "maintenance_fee"
    OTHER = "other"


class AccountType(str, Enum):
    """Account classification."""

    CURRENT = "current"
    SAVINGS = "savings"
    CASH = "cash"
    CREDIT = "credit"
    OTHER = "other"


class RecipientType(str, Enum):
    """Counterparty classification.

    ACCOUNT and OWNER are reserved: they are maintained automatically and
    never offered in user-facing recipient lists.
    """

    CUSTOMER = "customer"
    SUPPLIER = "supplier"
    UTILITY = "utility"
    EMPLOYEE = "employee"
    BANK = "bank"
    OTHER = "other"
    ACCOUNT = "account"
    OWNER = "owner"


RESERVED_RECIPIENT_TYPES = frozenset({RecipientType.ACCOUNT, RecipientType.OWNER})
