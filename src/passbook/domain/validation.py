"""Transaction validation engine.

Runs every structural, temporal, referential and state-machine check on a
transaction payload before anything is written. Checks run in a fixed order
and stop at the first failure.
"""

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional

from passbook.database.base import Database
from passbook.domain.date_rules import check_detail_dates, check_not_future
from passbook.domain.entities import ChequeDetails, TransactionPayload
from passbook.domain.enums import TransactionType
from passbook.domain.errors import (
    DestinationAccountRequiredError,
    DuplicateChequeNumberError,
    MissingDetailRecordError,
    NotFoundError,
    RecipientAccountMismatchError,
    RecipientRequiredError,
    SameAccountTransferError,
    ValidationError,
    account_not_found,
    duplicate_cheque_number,
    missing_detail_record,
    recipient_account_mismatch,
    recipient_not_found,
    recipient_required,
)
from passbook.domain.rules import ensure_legal_status, rule_for

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def to_amount(value: Any) -> Decimal:
    """Convert an amount to a Decimal with at most two decimal places.

    Raises:
        ValidationError: If the value is not a finite number or has fractions of a paisa
    """
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
        if not amount.is_finite():
            raise InvalidOperation
        whole_paise = amount == amount.quantize(CENT)
    except InvalidOperation:
        raise ValidationError(f"Invalid amount '{value}'") from None
    if not whole_paise:
        raise ValidationError(f"Amount {value} has more than two decimal places")
    return amount


class TransactionValidator:
    """Validate transaction payloads against the rule tables and stored data."""

    def __init__(self, db: Database, today: Optional[Callable[[], date]] = None):
        """Initialize validator.

        Args:
            db: Database instance used for account, recipient and cheque lookups
            today: Callable returning the validation date (defaults to date.today)
        """
        self.db = db
        self.today = today or date.today

    def validate(
        self,
        payload: TransactionPayload,
        exclude_transaction_id: Optional[int] = None,
        allow_system_types: bool = False,
    ) -> None:
        """Validate a payload, raising the first violation found.

        Args:
            payload: Normalized payload (canonical type and status)
            exclude_transaction_id: ID of the transaction being updated, ignored
                by the cheque number uniqueness check
            allow_system_types: Accept types that only the system may create

        Raises:
            ValidationError: For structural, temporal and state-machine violations
            NotFoundError: If a referenced account or recipient does not exist
            ConflictError: If the cheque number is already used
        """
        today = self.today()
        rule = rule_for(payload.transaction_type)

        if rule.system_only and not allow_system_types:
            raise ValidationError(
                f"{payload.transaction_type.value} transactions are created automatically "
                "and cannot be created directly"
            )
        if payload.amount is None or to_amount(payload.amount) <= 0:
            raise ValidationError("Amount must be greater than zero")
        if self.db.get_account(payload.account_id) is None:
            raise NotFoundError(account_not_found(payload.account_id))

        # 1. Transaction date vs status
        check_not_future(payload.transaction_date, payload.status, today)

        # 2. Detail record present and of the right shape
        details = payload.details
        if details is None or details.kind is not rule.detail_kind:
            raise MissingDetailRecordError(missing_detail_record(rule.label))

        # 3. Counterparty
        if rule.requires_recipient and payload.recipient_id is None:
            raise RecipientRequiredError(recipient_required(rule.label))

        # 4. Detail dates
        check_detail_dates(details, payload.status, today)

        # 5. Cheque number uniqueness
        if isinstance(details, ChequeDetails) and self.db.cheque_number_exists(
            details.cheque_number, exclude_transaction_id=exclude_transaction_id
        ):
            raise DuplicateChequeNumberError(duplicate_cheque_number(details.cheque_number))

        # 6. Destination account
        if payload.transaction_type is TransactionType.ACCOUNT_TRANSFER:
            self._check_destination(payload)

        # 7. Recipient scoping
        if payload.recipient_id is not None:
            recipient = self.db.get_recipient(payload.recipient_id)
            if recipient is None:
                raise NotFoundError(recipient_not_found(payload.recipient_id))
            if recipient.account_id is not None and recipient.account_id != payload.account_id:
                raise RecipientAccountMismatchError(recipient_account_mismatch(recipient.name))

        # 8. Status legality
        ensure_legal_status(payload.transaction_type, payload.status)

        logger.debug(
            "Validated %s payload for account %s (status %s)",
            payload.transaction_type.value,
            payload.account_id,
            payload.status.value,
        )

    def _check_destination(self, payload: TransactionPayload) -> None:
        if payload.to_account_id is None:
            raise DestinationAccountRequiredError("Destination account is required for account transfers")
        if payload.to_account_id == payload.account_id:
            raise SameAccountTransferError("Source and destination accounts cannot be the same")
        if self.db.get_account(payload.to_account_id) is None:
            raise NotFoundError(account_not_found(payload.to_account_id))
