"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic: enum columns are stored as their
string values, and legacy type/status spellings still present in old rows
are normalized on the way out.
"""

from dataclasses import fields
from typing import Any, Optional

from passbook.domain import entities as domain
from passbook.domain.enums import AccountType, BankChargeType, RecipientType, TransferMode
from passbook.domain.rules import normalize_status, normalize_type
from passbook.database.models import (
    Account as ORMAccount,
    Recipient as ORMRecipient,
    Transaction as ORMTransaction,
)

# Detail columns holding enum values, keyed by column name
_DETAIL_ENUM_COLUMNS = {
    "transfer_mode": TransferMode,
    "charge_type": BankChargeType,
}


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        name=orm_account.name,
        account_type=AccountType(orm_account.account_type),
        opening_balance=orm_account.opening_balance,
        current_balance=orm_account.current_balance,
        created_at=orm_account.created_at,
        bank_name=orm_account.bank_name,
        account_number=orm_account.account_number,
        notes=orm_account.notes,
        version=orm_account.version,
    )


def recipient_to_domain(orm_recipient: ORMRecipient) -> domain.Recipient:
    """Convert SQLAlchemy Recipient model to domain Recipient entity."""
    return domain.Recipient(
        id=orm_recipient.id,
        name=orm_recipient.name,
        recipient_type=RecipientType(orm_recipient.recipient_type),
        account_id=orm_recipient.account_id,
        created_at=orm_recipient.created_at,
        linked_account_id=orm_recipient.linked_account_id,
        bank_account_no=orm_recipient.bank_account_no,
        ifsc_code=orm_recipient.ifsc_code,
        contact_person=orm_recipient.contact_person,
        phone=orm_recipient.phone,
        email=orm_recipient.email,
        address=orm_recipient.address,
        gst_number=orm_recipient.gst_number,
        notes=orm_recipient.notes,
    )


def details_to_domain(orm_details: Any, detail_class: type) -> domain.TransactionDetails:
    """Convert a SQLAlchemy detail row into the matching domain detail record."""
    values = {}
    for f in fields(detail_class):
        value = getattr(orm_details, f.name)
        enum_type = _DETAIL_ENUM_COLUMNS.get(f.name)
        if enum_type is not None and value is not None:
            value = enum_type(value)
        values[f.name] = value
    return detail_class(**values)


def details_to_columns(details: domain.TransactionDetails) -> dict[str, Any]:
    """Flatten a domain detail record into column values for its table."""
    values = {}
    for f in fields(details):
        value = getattr(details, f.name)
        if f.name in _DETAIL_ENUM_COLUMNS and value is not None:
            value = value.value
        values[f.name] = value
    return values


def transaction_to_domain(
    orm_transaction: ORMTransaction, details: Optional[domain.TransactionDetails] = None
) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    transaction_type = normalize_type(orm_transaction.transaction_type)
    return domain.Transaction(
        id=orm_transaction.id,
        transaction_type=transaction_type,
        amount=orm_transaction.amount,
        account_id=orm_transaction.account_id,
        status=normalize_status(orm_transaction.status, transaction_type),
        transaction_date=orm_transaction.transaction_date,
        created_at=orm_transaction.created_at,
        updated_at=orm_transaction.updated_at,
        recipient_id=orm_transaction.recipient_id,
        to_account_id=orm_transaction.to_account_id,
        description=orm_transaction.description,
        parent_transaction_id=orm_transaction.parent_transaction_id,
        details=details,
    )
