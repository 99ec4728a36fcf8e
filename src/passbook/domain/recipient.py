"""Recipient domain service."""

import logging
from typing import Optional, Union

from passbook.database.base import Database
from passbook.domain.entities import Recipient as RecipientEntity
from passbook.domain.enums import RESERVED_RECIPIENT_TYPES, RecipientType
from passbook.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
    account_not_found,
    recipient_delete_blocked,
    recipient_not_found,
)

logger = logging.getLogger(__name__)


class RecipientService:
    """Service for managing payees and payers.

    ACCOUNT and OWNER recipients are maintained by ``AccountService`` and
    cannot be created, edited or deleted here.
    """

    def __init__(self, db: Database):
        self.db = db

    def create_recipient(
        self,
        name: str,
        recipient_type: Union[str, RecipientType],
        account_id: int,
        **contact: Optional[str],
    ) -> int:
        """Create a recipient scoped to an account.

        Args:
            name: Recipient name
            recipient_type: Classification (reserved types are rejected)
            account_id: Account the recipient belongs to
            **contact: bank_account_no, ifsc_code, contact_person, phone, email,
                address, gst_number, notes

        Returns:
            Recipient ID

        Raises:
            ValidationError: If the name is empty or the type is unknown or reserved
            NotFoundError: If the account doesn't exist
            ConflictError: If another recipient has the same GST number
        """
        if not name or not name.strip():
            raise ValidationError("Recipient name cannot be empty")
        try:
            recipient_type = RecipientType(recipient_type)
        except ValueError:
            raise ValidationError(f"Unknown recipient type '{recipient_type}'") from None
        if recipient_type in RESERVED_RECIPIENT_TYPES:
            raise ValidationError(
                f"Recipients of type '{recipient_type.value}' are maintained automatically"
            )
        if self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))
        contact = self._normalize_gst(contact)

        recipient_id = self.db.create_recipient(
            name=name, recipient_type=recipient_type, account_id=account_id, **contact
        )
        logger.info("Created recipient '%s' (ID: %s) for account %s", name, recipient_id, account_id)
        return recipient_id

    def _normalize_gst(self, contact: dict, recipient_id: Optional[int] = None) -> dict:
        gst_number = contact.get("gst_number")
        if gst_number is None:
            return contact
        gst_number = gst_number.strip().upper() or None
        if gst_number is not None:
            existing = self.db.get_recipient_by_gst_number(gst_number)
            if existing is not None and existing.id != recipient_id:
                raise ConflictError(f"Recipient '{existing.name}' already has GST number {gst_number}")
        return {**contact, "gst_number": gst_number}

    def get_recipient(self, recipient_id: int) -> Optional[RecipientEntity]:
        return self.db.get_recipient(recipient_id)

    def find_by_gst_number(self, gst_number: str) -> Optional[RecipientEntity]:
        """Look up a recipient by GST number (case-insensitive)."""
        return self.db.get_recipient_by_gst_number(gst_number.strip().upper())

    def list_recipients_by_type(
        self, recipient_type: Union[str, RecipientType], account_id: Optional[int] = None
    ) -> list[RecipientEntity]:
        """List user recipients of one type, optionally only those of one account."""
        try:
            recipient_type = RecipientType(recipient_type)
        except ValueError:
            raise ValidationError(f"Unknown recipient type '{recipient_type}'") from None
        if recipient_type in RESERVED_RECIPIENT_TYPES:
            raise ValidationError(f"Recipients of type '{recipient_type.value}' are not listed")
        return self.db.list_recipients(account_id=account_id, recipient_type=recipient_type)

    def list_recipients_for_account(self, account_id: int) -> list[RecipientEntity]:
        """List the user-facing recipients of an account (reserved types excluded)."""
        return self.db.list_recipients(account_id=account_id)

    def list_transfer_targets(self, source_account_id: int) -> list[RecipientEntity]:
        """List the shadow recipients of every account except the source."""
        return [
            r
            for r in self.db.list_recipients(recipient_type=RecipientType.ACCOUNT)
            if r.linked_account_id != source_account_id
        ]

    def _get_user_recipient(self, recipient_id: int) -> RecipientEntity:
        recipient = self.db.get_recipient(recipient_id)
        if recipient is None:
            raise NotFoundError(recipient_not_found(recipient_id))
        if recipient.is_reserved:
            raise ValidationError(
                f"Recipient {recipient_id} is maintained automatically and cannot be changed directly"
            )
        return recipient

    def update_recipient(self, recipient_id: int, **changes: Optional[str]) -> None:
        """Update name or contact fields of a recipient."""
        self._get_user_recipient(recipient_id)
        self.db.update_recipient(recipient_id, **self._normalize_gst(changes, recipient_id))

    def delete_recipient(self, recipient_id: int) -> None:
        """Delete a recipient that no transaction refers to.

        Raises:
            NotFoundError: If the recipient doesn't exist
            ValidationError: If the recipient is reserved
            DependencyError: If transactions refer to it
        """
        self._get_user_recipient(recipient_id)
        count = self.db.get_recipient_transaction_count(recipient_id)
        if count > 0:
            raise DependencyError(recipient_delete_blocked(recipient_id, count))
        self.db.delete_recipient(recipient_id)
        logger.info("Deleted recipient %s", recipient_id)
