"""Transaction domain service."""

import logging
from collections import defaultdict
from dataclasses import fields, replace
from datetime import date
from decimal import Decimal
from typing import Callable, Iterable, Optional, Union

from passbook.database.base import Database
from passbook.domain.balance import BalanceEngine
from passbook.domain.entities import (
    DETAIL_CLASSES,
    Account,
    AccountStats,
    BulkFailure,
    BulkResult,
    Transaction as TransactionEntity,
    TransactionDetails,
    TransactionPayload,
    TransactionSummary,
    TransactionUpdate,
    TypeTotals,
)
from passbook.domain.enums import TransactionDirection, TransactionStatus, TransactionType
from passbook.domain.errors import (
    DomainError,
    ImmutableTransactionError,
    NotFoundError,
    ValidationError,
    account_not_found,
    receiver_not_editable,
    transaction_not_found,
)
from passbook.domain.rules import (
    TYPE_RULES,
    direction,
    is_green_status,
    is_visible_in_list,
    normalize_status,
    normalize_type,
    required_detail_kind,
    valid_statuses,
)
from passbook.domain.transfers import TransferFanout
from passbook.domain.validation import TransactionValidator, to_amount

logger = logging.getLogger(__name__)


class TransactionService:
    """Service for managing transactions.

    Every write runs as one unit of work covering the transaction row, its
    detail record, the balance change and, for account transfers, the
    receiver half on the destination account.
    """

    def __init__(self, db: Database, today: Optional[Callable[[], date]] = None):
        """Initialize transaction service.

        Args:
            db: Database instance
            today: Callable returning the current date (defaults to date.today)
        """
        self.db = db
        self.today = today or date.today
        self.validator = TransactionValidator(db, today=self.today)
        self.balance = BalanceEngine(self._persist_balance)
        self.transfers = TransferFanout(db, self.balance)

    def _persist_balance(self, account: Account, new_balance: Decimal) -> Account:
        return self.db.compare_and_set_balance(account.id, account.version, new_balance)

    def _lock_account(self, account_id: int) -> Account:
        account = self.db.get_account(account_id, for_update=True)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def create_transaction(self, payload: TransactionPayload) -> TransactionEntity:
        """Create a transaction with its detail record.

        Args:
            payload: Transaction data; type and status may use legacy spellings

        Returns:
            The stored transaction

        Raises:
            ValidationError: If the payload is rejected
            NotFoundError: If the account, destination or recipient doesn't exist
            ConflictError: If the cheque number is taken or the balance changed concurrently
            InsufficientBalanceError: If a completed debit would overdraw the account
        """
        payload = self._normalize(payload)

        with self.db.transaction():
            payload = self._assign_default_recipient(payload)
            self.validator.validate(payload)

            transaction_id = self.db.create_transaction(
                transaction_type=payload.transaction_type,
                amount=payload.amount,
                account_id=payload.account_id,
                status=payload.status,
                transaction_date=payload.transaction_date,
                recipient_id=payload.recipient_id,
                to_account_id=payload.to_account_id,
                description=payload.description,
            )
            self.db.create_details(transaction_id, payload.transaction_type, payload.details)

            account = self._lock_account(payload.account_id)
            self.balance.apply(account, direction(payload.transaction_type), payload.amount, payload.status)

            self.transfers.sync(self.db.get_transaction(transaction_id))

        logger.info(
            "Created %s transaction %s on account %s (%s, %s)",
            payload.transaction_type.value,
            transaction_id,
            payload.account_id,
            payload.amount,
            payload.status.value,
        )
        return self.get_transaction(transaction_id)

    def _normalize(self, payload: TransactionPayload) -> TransactionPayload:
        transaction_type = normalize_type(payload.transaction_type)
        return replace(
            payload,
            transaction_type=transaction_type,
            status=normalize_status(payload.status, transaction_type),
            amount=to_amount(payload.amount) if payload.amount is not None else None,
            transaction_date=payload.transaction_date or self.today(),
        )

    def validate_transaction(self, payload: TransactionPayload) -> TransactionPayload:
        """Run every check ``create_transaction`` runs without writing anything.

        Includes the funds check for payloads that would debit the balance.

        Returns:
            The payload as it would be stored (canonical type and status,
            default recipient filled in)

        Raises:
            The same errors as ``create_transaction``
        """
        payload = self._normalize(payload)
        payload = self._assign_default_recipient(payload)
        self.validator.validate(payload)
        account = self.db.get_account(payload.account_id)
        self.balance.validate_sufficient_funds(
            account, direction(payload.transaction_type), payload.amount, payload.status
        )
        return payload

    def create_transactions(self, payloads: Iterable[TransactionPayload]) -> BulkResult:
        """Create several transactions, each in its own unit of work.

        A rejected payload does not stop the others; it is reported in the
        result by its position in ``payloads``.
        """
        created = []
        failed = []
        for index, payload in enumerate(payloads):
            try:
                created.append(self.create_transaction(payload))
            except DomainError as e:
                logger.warning("Bulk item %d rejected: %s", index, e)
                failed.append(BulkFailure(index=index, error=str(e)))
        logger.info("Bulk create: %d created, %d rejected", len(created), len(failed))
        return BulkResult(created=created, failed=failed)

    def _assign_default_recipient(self, payload: TransactionPayload) -> TransactionPayload:
        if payload.recipient_id is not None:
            return payload
        recipient = None
        if payload.transaction_type is TransactionType.CASH_DEPOSIT:
            recipient = self.db.get_owner_recipient(payload.account_id)
        elif payload.transaction_type is TransactionType.ACCOUNT_TRANSFER and payload.to_account_id is not None:
            recipient = self.db.get_account_recipient(payload.to_account_id)
        if recipient is None:
            return payload
        return replace(payload, recipient_id=recipient.id)

    def get_transaction(self, transaction_id: int) -> TransactionEntity:
        """Get transaction by ID.

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        transaction = self.db.get_transaction(transaction_id)
        if transaction is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return transaction

    def _get_editable(self, transaction_id: int) -> TransactionEntity:
        transaction = self.get_transaction(transaction_id)
        if transaction.is_receiver_side:
            raise ImmutableTransactionError(
                receiver_not_editable(transaction.id, transaction.parent_transaction_id)
            )
        return transaction

    def update_transaction(self, transaction_id: int, changes: TransactionUpdate) -> TransactionEntity:
        """Update a transaction.

        Only the fields set on ``changes`` are changed. A detail record in
        ``changes`` is merged into the stored one field by field. Fields named
        in ``changes.clear_detail_fields`` are then removed. The old balance
        effect is reversed before the new one is applied.

        Raises:
            NotFoundError: If the transaction doesn't exist
            ImmutableTransactionError: If it is the receiver half of an account transfer
            ValidationError, ConflictError, InsufficientBalanceError: As for create
        """
        with self.db.transaction():
            existing = self._get_editable(transaction_id)
            payload = self._merge(existing, changes)
            self.validator.validate(payload, exclude_transaction_id=existing.id)

            account = self._lock_account(existing.account_id)
            account = self.balance.reverse(account, existing.direction, existing.amount, existing.status)

            self.db.update_transaction(
                existing.id,
                amount=payload.amount,
                status=payload.status,
                transaction_date=payload.transaction_date,
                recipient_id=payload.recipient_id,
                to_account_id=payload.to_account_id,
                description=changes.description,
                clear_recipient=payload.recipient_id is None,
            )
            self.db.update_details(existing.id, existing.transaction_type, payload.details)
            self.balance.apply(account, existing.direction, payload.amount, payload.status)

            self.transfers.sync(self.db.get_transaction(existing.id))

        logger.info("Updated transaction %s (%s, %s)", transaction_id, payload.amount, payload.status.value)
        return self.get_transaction(transaction_id)

    def _merge(self, existing: TransactionEntity, changes: TransactionUpdate) -> TransactionPayload:
        status = existing.status
        if changes.status is not None:
            status = normalize_status(changes.status, existing.transaction_type)

        details = existing.details
        if changes.details is not None:
            if details is not None and type(details) is type(changes.details):
                details = details.merged_with(changes.details)
            else:
                details = changes.details
        if changes.clear_detail_fields:
            details = self._clear_detail_fields(existing.transaction_type, details, changes.clear_detail_fields)

        recipient_id = existing.recipient_id
        if changes.clear_recipient:
            recipient_id = None
        elif changes.recipient_id is not None:
            recipient_id = changes.recipient_id

        to_account_id = existing.to_account_id
        if changes.to_account_id is not None:
            to_account_id = changes.to_account_id
            if (
                existing.transaction_type is TransactionType.ACCOUNT_TRANSFER
                and changes.recipient_id is None
                and to_account_id != existing.to_account_id
            ):
                shadow = self.db.get_account_recipient(to_account_id)
                recipient_id = shadow.id if shadow is not None else None

        return TransactionPayload(
            transaction_type=existing.transaction_type,
            amount=to_amount(changes.amount) if changes.amount is not None else existing.amount,
            account_id=existing.account_id,
            status=status,
            recipient_id=recipient_id,
            to_account_id=to_account_id,
            description=changes.description if changes.description is not None else existing.description,
            transaction_date=changes.transaction_date or existing.transaction_date,
            details=details,
        )

    @staticmethod
    def _clear_detail_fields(
        transaction_type: TransactionType, details: Optional[TransactionDetails], names: Iterable[str]
    ) -> Optional[TransactionDetails]:
        known = {f.name for f in fields(DETAIL_CLASSES[required_detail_kind(transaction_type)])}
        unknown = set(names) - known
        if unknown:
            raise ValidationError(
                f"Unknown detail field(s) for {transaction_type.value}: {', '.join(sorted(unknown))}"
            )
        if details is None:
            return None
        return details.without(names)

    def update_status(self, transaction_id: int, status: Union[str, TransactionStatus]) -> TransactionEntity:
        """Move a transaction to a new status."""
        return self.update_transaction(transaction_id, TransactionUpdate(status=status))

    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction, reversing its balance effect.

        Deleting the sender of an account transfer also removes its receiver.

        Raises:
            NotFoundError: If the transaction doesn't exist
            ImmutableTransactionError: If it is the receiver half of an account transfer
        """
        with self.db.transaction():
            existing = self._get_editable(transaction_id)
            if existing.transaction_type is TransactionType.ACCOUNT_TRANSFER:
                self.transfers.remove_for_sender(existing)

            account = self._lock_account(existing.account_id)
            self.balance.reverse(account, existing.direction, existing.amount, existing.status)
            self.db.delete_transaction(existing.id)

        logger.info("Deleted transaction %s", transaction_id)

    def list_transactions(
        self,
        account_id: Optional[int] = None,
        transaction_type: Optional[Union[str, TransactionType]] = None,
        direction: Optional[TransactionDirection] = None,
        status: Optional[TransactionStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        include_hidden: bool = False,
    ) -> list[TransactionEntity]:
        """List transactions with optional filters.

        Args:
            account_id: Optional owning account filter
            transaction_type: Optional type filter (legacy spellings accepted)
            direction: Optional credit/debit filter
            status: Optional status filter
            start_date: Optional start date filter
            end_date: Optional end date filter
            include_hidden: Also return receiver halves that are still pending

        Returns:
            List of transaction entities, newest first
        """
        types: Optional[list[TransactionType]] = None
        if transaction_type is not None:
            types = [normalize_type(transaction_type)]
        if direction is not None:
            by_direction = [t for t, rule in TYPE_RULES.items() if rule.direction is direction]
            types = [t for t in (types or by_direction) if t in by_direction]

        transactions = self.db.list_transactions(
            account_id=account_id,
            transaction_types=types,
            status=status,
            start_date=start_date,
            end_date=end_date,
        )
        if include_hidden:
            return transactions
        return [
            t for t in transactions if is_visible_in_list(t.transaction_type, t.status, t.is_receiver_side)
        ]

    def search_transactions(
        self,
        text: Optional[str] = None,
        min_amount: Optional[Decimal] = None,
        max_amount: Optional[Decimal] = None,
        account_id: Optional[int] = None,
        include_hidden: bool = False,
    ) -> list[TransactionEntity]:
        """Search by description, account name or recipient name, and by amount.

        Args:
            text: Case-insensitive substring; blank means no text filter
            min_amount: Smallest amount to include
            max_amount: Largest amount to include
            account_id: Optional owning account filter
            include_hidden: Also return receiver halves that are still pending

        Raises:
            ValidationError: If a bound is negative or the bounds are reversed
        """
        bounds = [to_amount(v) if v is not None else None for v in (min_amount, max_amount)]
        if any(b is not None and b < 0 for b in bounds):
            raise ValidationError("Amount bounds cannot be negative")
        if None not in bounds and bounds[0] > bounds[1]:
            raise ValidationError("Minimum amount cannot exceed maximum amount")

        transactions = self.db.search_transactions(
            text=text.strip() if text else None,
            min_amount=bounds[0],
            max_amount=bounds[1],
            account_id=account_id,
        )
        if include_hidden:
            return transactions
        return [
            t for t in transactions if is_visible_in_list(t.transaction_type, t.status, t.is_receiver_side)
        ]

    def get_valid_statuses_for_type(self, transaction_type: Union[str, TransactionType]) -> list[TransactionStatus]:
        """Return the statuses a transaction of this type may take."""
        return valid_statuses(normalize_type(transaction_type))

    def get_account_stats(self, account_id: int) -> AccountStats:
        """Summarize the transactions of an account.

        Totals and per-type breakdowns only count completed (balance-affecting)
        transactions.
        """
        if self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))

        total_credits = Decimal("0")
        total_debits = Decimal("0")
        credits_by_type: dict[str, Decimal] = defaultdict(Decimal)
        debits_by_type: dict[str, Decimal] = defaultdict(Decimal)
        pending_count = 0
        completed_count = 0

        for txn in self.list_transactions(account_id=account_id):
            if txn.status is TransactionStatus.PENDING:
                pending_count += 1
            if not is_green_status(txn.status):
                continue
            completed_count += 1
            if txn.direction is TransactionDirection.CREDIT:
                total_credits += txn.amount
                credits_by_type[txn.transaction_type.value] += txn.amount
            else:
                total_debits += txn.amount
                debits_by_type[txn.transaction_type.value] += txn.amount

        return AccountStats(
            account_id=account_id,
            total_credits=total_credits,
            total_debits=total_debits,
            pending_count=pending_count,
            completed_count=completed_count,
            credits_by_type=dict(credits_by_type),
            debits_by_type=dict(debits_by_type),
        )

    def get_summary(self) -> TransactionSummary:
        """Summarize the transactions of every account."""
        total_credits = Decimal("0")
        total_debits = Decimal("0")
        pending_count = 0
        completed_count = 0
        by_type: dict[str, TypeTotals] = {}

        transactions = self.list_transactions()
        for txn in transactions:
            key = txn.transaction_type.value
            totals = by_type.get(key, TypeTotals())
            by_type[key] = TypeTotals(count=totals.count + 1, amount=totals.amount + txn.amount)

            if txn.status is TransactionStatus.PENDING:
                pending_count += 1
            if not is_green_status(txn.status):
                continue
            completed_count += 1
            if txn.direction is TransactionDirection.CREDIT:
                total_credits += txn.amount
            else:
                total_debits += txn.amount

        return TransactionSummary(
            total_transactions=len(transactions),
            total_credits=total_credits,
            total_debits=total_debits,
            pending_count=pending_count,
            completed_count=completed_count,
            by_type=by_type,
        )

    def reconcile_transfers(self) -> int:
        """Bring every account-transfer receiver in step with its sender.

        Returns:
            Number of receivers created, updated or removed
        """
        repaired = 0
        with self.db.transaction():
            senders = self.db.list_transactions(transaction_types=[TransactionType.ACCOUNT_TRANSFER])
            for sender in senders:
                action = self.transfers.sync(sender)
                if action is not None:
                    logger.warning("Reconciled account transfer %s: receiver %s", sender.id, action.value)
                    repaired += 1
        logger.info("Reconciled %d of %d account transfers", repaired, len(senders))
        return repaired
