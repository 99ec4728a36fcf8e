"""Detail record adapter.

Creates, updates and loads the one detail row a transaction owns. Which of
the seven tables is used is decided only by the transaction type's rule row;
no business rules live here.
"""

from typing import Any, Optional

from sqlalchemy.orm import Session

from passbook.database import models
from passbook.database.mappers import details_to_columns, details_to_domain
from passbook.domain.entities import DETAIL_CLASSES, TransactionDetails
from passbook.domain.enums import DetailKind, TransactionType
from passbook.domain.errors import ValidationError
from passbook.domain.rules import normalize_type, required_detail_kind

DETAIL_MODELS: dict[DetailKind, type] = {
    DetailKind.CASH_DEPOSIT: models.CashDepositDetails,
    DetailKind.CHEQUE: models.ChequeDetails,
    DetailKind.BANK_TRANSFER: models.BankTransferDetails,
    DetailKind.ONLINE_TRANSFER: models.OnlineTransferDetails,
    DetailKind.UPI_SETTLEMENT: models.UpiSettlementDetails,
    DetailKind.ACCOUNT_TRANSFER: models.AccountTransferDetails,
    DetailKind.BANK_CHARGE: models.BankChargeDetails,
}


def relationship_name(kind: DetailKind) -> str:
    """Return the Transaction relationship attribute holding this kind of detail row."""
    return f"{kind.value}_details"


def _kind_for(transaction_type: TransactionType, details: TransactionDetails) -> DetailKind:
    kind = required_detail_kind(transaction_type)
    if details.kind is not kind:
        raise ValidationError(
            f"{transaction_type.value} transactions take {kind.value} details, "
            f"not {details.kind.value} details"
        )
    return kind


def create_detail(
    session: Session,
    orm_transaction: models.Transaction,
    transaction_type: TransactionType,
    details: TransactionDetails,
) -> Any:
    """Add the detail row for a freshly created transaction."""
    kind = _kind_for(transaction_type, details)
    row = DETAIL_MODELS[kind](transaction_id=orm_transaction.id, **details_to_columns(details))
    setattr(orm_transaction, relationship_name(kind), row)
    session.add(row)
    return row


def update_detail(
    session: Session,
    orm_transaction: models.Transaction,
    transaction_type: TransactionType,
    details: TransactionDetails,
) -> Any:
    """Overwrite the detail row of a transaction, creating it if it is missing."""
    kind = _kind_for(transaction_type, details)
    row = getattr(orm_transaction, relationship_name(kind))
    if row is None:
        return create_detail(session, orm_transaction, transaction_type, details)
    for name, value in details_to_columns(details).items():
        setattr(row, name, value)
    return row


def load_detail(orm_transaction: models.Transaction) -> Optional[TransactionDetails]:
    """Return the domain detail record of a transaction, or None if it has none."""
    kind = required_detail_kind(normalize_type(orm_transaction.transaction_type))
    row = getattr(orm_transaction, relationship_name(kind))
    if row is None:
        return None
    return details_to_domain(row, DETAIL_CLASSES[kind])
