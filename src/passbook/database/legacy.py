"""Rewrite legacy transaction type and status values stored by older versions."""

from sqlalchemy.orm import Session

from passbook.database.models import BankChargeDetails, Transaction
from passbook.domain.enums import BankChargeType, TransactionStatus
from passbook.domain.rules import LEGACY_TYPE_ALIASES, completion_status, normalize_type

LEGACY_OTHER_TYPE = "other"


def normalize_legacy_rows(session: Session) -> dict[str, int]:
    """Map legacy type spellings and the ``completed`` status onto canonical values.

    Rows of the legacy ``other`` type become bank charges; those without a
    detail record get one with charge type ``other`` dated on the transaction
    date.

    Does not commit. Returns counts of rewritten ``types`` and ``statuses``
    and of backfilled ``details``.
    """
    counts = {"types": 0, "statuses": 0, "details": 0}

    legacy_types = (
        session.query(Transaction).filter(Transaction.transaction_type.in_(list(LEGACY_TYPE_ALIASES))).all()
    )
    for txn in legacy_types:
        if txn.transaction_type == LEGACY_OTHER_TYPE and txn.bank_charge_details is None:
            txn.bank_charge_details = BankChargeDetails(
                charge_type=BankChargeType.OTHER.value,
                debit_date=txn.transaction_date,
                narration=txn.description,
            )
            counts["details"] += 1
        txn.transaction_type = LEGACY_TYPE_ALIASES[txn.transaction_type].value
        counts["types"] += 1

    completed = session.query(Transaction).filter(Transaction.status == TransactionStatus.COMPLETED.value).all()
    for txn in completed:
        txn.status = completion_status(normalize_type(txn.transaction_type)).value
        counts["statuses"] += 1

    session.flush()
    return counts
