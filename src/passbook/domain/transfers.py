"""Account-transfer fan-out.

An ACCOUNT_TRANSFER (the sender, a debit on the source account) owns one
ACCOUNT_TRANSFER_IN receiver on the destination account, linked by
``parent_transaction_id``. The receiver is entirely derived from the sender:

    sender PENDING      -> receiver PENDING (hidden from listings)
    sender TRANSFERRED  -> receiver RECEIVED (credits the destination)
    sender CANCELLED    -> no receiver
    any other status    -> receiver left as it is

All receiver writes happen in the caller's unit of work. Failures are logged
and re-raised so the sender change rolls back with them.
"""

import logging
from enum import Enum
from typing import Optional

from passbook.database.base import Database
from passbook.domain.balance import BalanceEngine
from passbook.domain.entities import Account, AccountTransferDetails, Transaction
from passbook.domain.enums import TransactionStatus, TransactionType
from passbook.domain.errors import DomainError, NotFoundError, TransferConsistencyError, account_not_found
from passbook.domain.rules import receiver_status_for

logger = logging.getLogger(__name__)

RECEIVER_DESCRIPTION_PREFIX = "[Account Transfer] from "


class ReceiverAction(str, Enum):
    """What a sync did to the receiver half."""

    CREATED = "created"
    UPDATED = "updated"
    REMOVED = "removed"


def receiver_description(source: Account) -> str:
    return f"{RECEIVER_DESCRIPTION_PREFIX}{source.name}"


def receiver_details(sender: Transaction) -> AccountTransferDetails:
    """Build the receiver's detail record from the sender's."""
    sent = sender.details if isinstance(sender.details, AccountTransferDetails) else AccountTransferDetails()
    return AccountTransferDetails(
        transfer_date=sent.transfer_date or sender.transaction_date,
        transfer_reference=sent.transfer_reference,
        purpose=sent.purpose,
        notes=f"Automatic credit from account transfer (Ref: {sender.id})",
    )


class TransferFanout:
    """Keep the receiver half of account transfers in step with the sender."""

    def __init__(self, db: Database, balance: BalanceEngine):
        self.db = db
        self.balance = balance

    def sync(self, sender: Transaction) -> Optional[ReceiverAction]:
        """Create, update or remove the receiver so it matches the sender's state.

        Idempotent: running it again for an unchanged sender does nothing.

        Returns:
            The action taken, or None if the receiver was already in step

        Raises:
            TransferConsistencyError: If the receiver could not be written
        """
        if sender.transaction_type is not TransactionType.ACCOUNT_TRANSFER:
            return None

        receiver = self.db.get_child_transaction(sender.id)
        try:
            if sender.status is TransactionStatus.CANCELLED:
                if receiver is None:
                    return None
                self.remove_receiver(receiver)
                return ReceiverAction.REMOVED

            target_status = receiver_status_for(sender.status)
            if target_status is None:
                return None

            if receiver is not None and receiver.account_id != sender.to_account_id:
                # Destination changed: the old receiver goes, a new one is created
                self.remove_receiver(receiver)
                self._create_receiver(sender, target_status)
                return ReceiverAction.UPDATED

            if receiver is None:
                self._create_receiver(sender, target_status)
                return ReceiverAction.CREATED

            if self._update_receiver(sender, receiver, target_status):
                return ReceiverAction.UPDATED
            return None
        except DomainError as exc:
            logger.error("Account transfer %s: receiver sync failed: %s", sender.id, exc, exc_info=True)
            raise TransferConsistencyError(
                f"Could not update the receiving side of account transfer {sender.id}: {exc}"
            ) from exc

    def remove_for_sender(self, sender: Transaction) -> bool:
        """Remove the receiver of a sender that is about to be deleted."""
        receiver = self.db.get_child_transaction(sender.id)
        if receiver is None:
            return False
        try:
            self.remove_receiver(receiver)
        except DomainError as exc:
            logger.error("Account transfer %s: receiver removal failed: %s", sender.id, exc, exc_info=True)
            raise TransferConsistencyError(
                f"Could not remove the receiving side of account transfer {sender.id}: {exc}"
            ) from exc
        return True

    def remove_receiver(self, receiver: Transaction) -> None:
        """Reverse the receiver's balance effect, then delete it."""
        account = self._lock_account(receiver.account_id)
        self.balance.reverse(account, receiver.direction, receiver.amount, receiver.status)
        self.db.delete_transaction(receiver.id)
        logger.info(
            "Removed receiver transaction %s of account transfer %s", receiver.id, receiver.parent_transaction_id
        )

    def _create_receiver(self, sender: Transaction, status: TransactionStatus) -> int:
        source = self._lock_account(sender.account_id)
        destination = self._lock_account(sender.to_account_id)
        shadow = self.db.get_account_recipient(source.id)

        receiver_id = self.db.create_transaction(
            transaction_type=TransactionType.ACCOUNT_TRANSFER_IN,
            amount=sender.amount,
            account_id=destination.id,
            status=status,
            transaction_date=sender.transaction_date,
            recipient_id=shadow.id if shadow is not None else None,
            description=receiver_description(source),
            parent_transaction_id=sender.id,
        )
        self.db.create_details(receiver_id, TransactionType.ACCOUNT_TRANSFER_IN, receiver_details(sender))
        receiver = self.db.get_transaction(receiver_id)
        self.balance.apply(destination, receiver.direction, receiver.amount, receiver.status)
        logger.info(
            "Created receiver transaction %s on account %s for account transfer %s (%s)",
            receiver_id,
            destination.id,
            sender.id,
            status.value,
        )
        return receiver_id

    def _update_receiver(self, sender: Transaction, receiver: Transaction, status: TransactionStatus) -> bool:
        source = self._lock_account(sender.account_id)
        details = receiver_details(sender)
        description = receiver_description(source)
        if (
            receiver.amount == sender.amount
            and receiver.status is status
            and receiver.transaction_date == sender.transaction_date
            and receiver.description == description
            and receiver.details == details
        ):
            return False

        account = self._lock_account(receiver.account_id)
        account = self.balance.reverse(account, receiver.direction, receiver.amount, receiver.status)
        self.db.update_transaction(
            receiver.id,
            amount=sender.amount,
            status=status,
            transaction_date=sender.transaction_date,
            description=description,
        )
        self.db.update_details(receiver.id, receiver.transaction_type, details)
        self.balance.apply(account, receiver.direction, sender.amount, status)
        logger.info(
            "Updated receiver transaction %s of account transfer %s (%s)", receiver.id, sender.id, status.value
        )
        return True

    def _lock_account(self, account_id: Optional[int]) -> Account:
        account = self.db.get_account(account_id, for_update=True) if account_id is not None else None
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account
