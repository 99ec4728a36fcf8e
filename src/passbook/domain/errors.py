"""Shared domain error messages and error types."""

from decimal import Decimal
from typing import Iterable


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


# Structural
class MissingDetailRecordError(ValidationError):
    """The detail record required by the transaction type is absent."""


class MissingRequiredFieldError(ValidationError):
    """A field required by the detail record or the status is absent."""


class RecipientRequiredError(ValidationError):
    """The transaction type needs a counterparty."""


class DestinationAccountRequiredError(ValidationError):
    """An account transfer has no destination account."""


class SameAccountTransferError(ValidationError):
    """An account transfer points back at its source account."""


# Temporal
class FutureDateNotAllowedError(ValidationError):
    """A completed transaction carries a date after today."""


class DateSequenceViolationError(ValidationError):
    """Detail record dates are out of order."""


# Referential
class RecipientAccountMismatchError(ValidationError):
    """The recipient is scoped to a different account."""


class DuplicateChequeNumberError(ConflictError):
    """The cheque number is already used by another transaction."""


# State machine
class InvalidStatusForTypeError(ValidationError):
    """The status is not in the legal set for the transaction type."""


class ImmutableTransactionError(ValidationError):
    """The transaction is derived from another one and cannot be changed directly."""


# Financial
class InsufficientBalanceError(DomainError):
    """A completed debit would overdraw the account."""


class BalanceConflictError(ConflictError):
    """The account balance changed underneath a pending write."""


# Consistency
class TransferConsistencyError(DomainError):
    """The receiver half of an account transfer could not be kept in step."""


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def recipient_not_found(recipient_id: int) -> str:
    """Return message for missing recipient."""
    return f"Recipient {recipient_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def duplicate_account_name(name: str) -> str:
    return f"Account with name '{name}' already exists"


def duplicate_account_number(account_number: str) -> str:
    return f"Account number '{account_number}' is already in use by another account"


def duplicate_cheque_number(cheque_number: str) -> str:
    """Return message for a cheque number that is already used."""
    return (
        f"Cheque number {cheque_number} is already used in the system. "
        "Please use a different cheque number."
    )


def missing_detail_record(label: str) -> str:
    """Return message for a missing detail record."""
    return f"{label[0].upper()}{label[1:]} details are required for {label} transactions"


def recipient_required(label: str) -> str:
    """Return message for a missing recipient."""
    return f"Recipient is required for {label} transactions. Please specify who the transaction is from/to."


def recipient_account_mismatch(recipient_name: str) -> str:
    return (
        f"Invalid recipient. The selected recipient \"{recipient_name}\" belongs to a different account. "
        "Please select a recipient that belongs to the same account as this transaction."
    )


def invalid_status_for_type(status: str, transaction_type: str, valid: Iterable) -> str:
    """Return message for an illegal status."""
    allowed = ", ".join(s.value if hasattr(s, "value") else str(s) for s in valid)
    return f"Status '{status}' is not valid for {transaction_type} transactions (allowed: {allowed})"


def future_date_not_allowed(field_label: str, status: str) -> str:
    """Return message for a future date on a completed transaction."""
    return (
        f"{field_label} cannot be in the future when status is \"{status}\". "
        "Completed transactions must have a date in the past or today."
    )


def insufficient_balance(current_balance: Decimal, amount: Decimal) -> str:
    """Return message for a debit that would overdraw the account."""
    return f"Insufficient balance. Current balance: {current_balance:.2f}, Transaction amount: {amount:.2f}"


def balance_conflict(account_id: int) -> str:
    return f"Balance of account {account_id} was modified concurrently, please retry"


def receiver_not_editable(transaction_id: int, parent_id: int) -> str:
    return (
        f"Transaction {transaction_id} was created automatically for account transfer {parent_id} "
        f"and cannot be changed directly. Update transaction {parent_id} instead."
    )


def account_delete_blocked(account_id: int, transaction_count: int) -> str:
    """Return message when account has dependent transactions."""
    return (
        f"Cannot delete account {account_id}: it has "
        f"{transaction_count} transaction{'s' if transaction_count != 1 else ''}. "
        "Please delete them first."
    )


def recipient_delete_blocked(recipient_id: int, transaction_count: int) -> str:
    return (
        f"Cannot delete recipient {recipient_id}: it is used by "
        f"{transaction_count} transaction{'s' if transaction_count != 1 else ''}."
    )
