"""Account domain service."""

import logging
from decimal import Decimal
from typing import Optional, Union

from passbook.database.base import Database
from passbook.domain.entities import Account as AccountEntity
from passbook.domain.enums import AccountType, RecipientType, TransactionStatus
from passbook.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
    account_delete_blocked,
    account_not_found,
    duplicate_account_name,
    duplicate_account_number,
)

logger = logging.getLogger(__name__)

OWNER_RECIPIENT_NAME = "Self"

# Account types that get an OWNER recipient for self-originated cash deposits
OWNER_ACCOUNT_TYPES = frozenset({AccountType.CURRENT, AccountType.SAVINGS})


class AccountService:
    """Service for managing accounts.

    Balances are read-only here: ``current_balance`` only moves through the
    balance engine when transactions are written.
    """

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self,
        name: str,
        account_type: Union[str, AccountType],
        opening_balance: Decimal = Decimal("0"),
        bank_name: Optional[str] = None,
        account_number: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Create a new account and its reserved recipients.

        Args:
            name: Account name
            account_type: Account classification
            opening_balance: Balance at creation; also the initial current balance
            bank_name: Optional bank name
            account_number: Optional account number (unique)
            notes: Optional notes

        Returns:
            Account ID

        Raises:
            ValidationError: If the name is empty or the type is unknown
            ConflictError: If the name or account number already exists
        """
        if not name or not name.strip():
            raise ValidationError("Account name cannot be empty")
        try:
            account_type = AccountType(account_type)
        except ValueError:
            raise ValidationError(f"Unknown account type '{account_type}'") from None

        with self.db.transaction():
            if self.db.get_account_by_name(name) is not None:
                raise ConflictError(duplicate_account_name(name))
            if account_number and self.db.get_account_by_number(account_number) is not None:
                raise ConflictError(duplicate_account_number(account_number))

            account_id = self.db.create_account(
                name=name,
                account_type=account_type,
                opening_balance=Decimal(opening_balance),
                bank_name=bank_name,
                account_number=account_number,
                notes=notes,
            )
            self.db.create_recipient(
                name=name,
                recipient_type=RecipientType.ACCOUNT,
                linked_account_id=account_id,
                bank_account_no=account_number,
            )
            if account_type in OWNER_ACCOUNT_TYPES:
                self.db.create_recipient(
                    name=OWNER_RECIPIENT_NAME, recipient_type=RecipientType.OWNER, account_id=account_id
                )

        logger.info("Created %s account '%s' (ID: %s)", account_type.value, name, account_id)
        return account_id

    def get_account(self, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID.

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def list_accounts(self) -> list[AccountEntity]:
        """List all accounts."""
        return self.db.list_accounts()

    def get_current_balance(self, account_id: int) -> Decimal:
        """Return the running balance of an account.

        Raises:
            NotFoundError: If the account doesn't exist
        """
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account.current_balance

    def get_pending_transaction_count(self, account_id: Optional[int] = None) -> int:
        """Count pending transactions, for one account or all of them."""
        return self.db.count_transactions(account_id=account_id, status=TransactionStatus.PENDING)

    def rename_account(self, account_id: int, name: str, bank_name: Optional[str] = None) -> None:
        """Rename an account and its shadow recipient.

        Args:
            account_id: Account ID to rename
            name: New account name
            bank_name: Optional new bank name (if None, bank_name is not updated)

        Raises:
            NotFoundError: If account not found
            ConflictError: If the name already exists
        """
        if not name or not name.strip():
            raise ValidationError("Account name cannot be empty")

        with self.db.transaction():
            if self.db.get_account(account_id) is None:
                raise NotFoundError(account_not_found(account_id))
            existing = self.db.get_account_by_name(name)
            if existing is not None and existing.id != account_id:
                raise ConflictError(duplicate_account_name(name))

            self.db.update_account(account_id, name=name, bank_name=bank_name)
            shadow = self.db.get_account_recipient(account_id)
            if shadow is not None:
                self.db.update_recipient(shadow.id, name=name)

        logger.info("Renamed account %s to '%s'", account_id, name)

    def delete_account(self, account_id: int) -> None:
        """Delete an account together with the recipients scoped to it.

        Raises:
            NotFoundError: If account not found
            DependencyError: If any transaction belongs to or targets the account
        """
        with self.db.transaction():
            if self.db.get_account(account_id) is None:
                raise NotFoundError(account_not_found(account_id))

            transaction_count = self.db.get_account_transaction_count(account_id)
            shadow = self.db.get_account_recipient(account_id)
            if shadow is not None:
                transaction_count += self.db.get_recipient_transaction_count(shadow.id)
            if transaction_count > 0:
                raise DependencyError(account_delete_blocked(account_id, transaction_count))

            for recipient in self.db.list_recipients(account_id=account_id, include_reserved=True):
                self.db.delete_recipient(recipient.id)
            if shadow is not None:
                self.db.delete_recipient(shadow.id)
            self.db.delete_account(account_id)

        logger.info("Deleted account %s", account_id)
