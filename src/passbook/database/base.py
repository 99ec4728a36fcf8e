"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Optional
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from passbook.domain.entities import (
    Account,
    Recipient,
    Transaction,
    TransactionDetails,
)
from passbook.domain.enums import (
    AccountType,
    RecipientType,
    TransactionStatus,
    TransactionType,
)


class Database(ABC):
    """Abstract database interface for passbook.

    Write methods commit immediately when called outside ``transaction()``;
    inside it they only flush, and the outermost block commits or rolls back
    everything written within it.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def transaction(self) -> AbstractContextManager[None]:
        """Open a unit of work. Nested blocks join the outermost one."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        name: str,
        account_type: AccountType,
        opening_balance: Decimal,
        bank_name: Optional[str] = None,
        account_number: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Create a new account with ``current_balance = opening_balance``. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int, for_update: bool = False) -> Optional[Account]:
        """Get account by ID, optionally locking the row for the current unit of work."""
        pass

    @abstractmethod
    def get_account_by_name(self, name: str) -> Optional[Account]:
        """Get account by name."""
        pass

    @abstractmethod
    def get_account_by_number(self, account_number: str) -> Optional[Account]:
        """Get account by account number."""
        pass

    @abstractmethod
    def list_accounts(self) -> list[Account]:
        """List all accounts."""
        pass

    @abstractmethod
    def update_account(
        self,
        account_id: int,
        name: Optional[str] = None,
        bank_name: Optional[str] = None,
        account_number: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> None:
        """Update descriptive account fields. Balances are not writable here."""
        pass

    @abstractmethod
    def compare_and_set_balance(self, account_id: int, expected_version: int, new_balance: Decimal) -> Account:
        """Write a new balance if the account is still at ``expected_version``.

        Raises:
            BalanceConflictError: If the account changed since it was read
        """
        pass

    @abstractmethod
    def delete_account(self, account_id: int) -> None:
        """Delete an account."""
        pass

    @abstractmethod
    def get_account_transaction_count(self, account_id: int) -> int:
        """Count transactions owned by, or addressed to, an account."""
        pass

    # Recipient operations
    @abstractmethod
    def create_recipient(
        self,
        name: str,
        recipient_type: RecipientType,
        account_id: Optional[int] = None,
        linked_account_id: Optional[int] = None,
        **contact: Optional[str],
    ) -> int:
        """Create a recipient. Returns recipient ID."""
        pass

    @abstractmethod
    def get_recipient(self, recipient_id: int) -> Optional[Recipient]:
        """Get recipient by ID."""
        pass

    @abstractmethod
    def get_account_recipient(self, linked_account_id: int) -> Optional[Recipient]:
        """Get the ACCOUNT-type shadow recipient standing for an account."""
        pass

    @abstractmethod
    def get_owner_recipient(self, account_id: int) -> Optional[Recipient]:
        """Get the OWNER-type recipient of an account."""
        pass

    @abstractmethod
    def get_recipient_by_gst_number(self, gst_number: str) -> Optional[Recipient]:
        """Get the recipient registered under a GST number."""
        pass

    @abstractmethod
    def list_recipients(
        self,
        account_id: Optional[int] = None,
        recipient_type: Optional[RecipientType] = None,
        include_reserved: bool = False,
    ) -> list[Recipient]:
        """List recipients, optionally filtered by scoping account and type."""
        pass

    @abstractmethod
    def update_recipient(self, recipient_id: int, **changes: Optional[str]) -> None:
        """Update recipient fields. ``None`` values are ignored."""
        pass

    @abstractmethod
    def delete_recipient(self, recipient_id: int) -> None:
        """Delete a recipient."""
        pass

    @abstractmethod
    def get_recipient_transaction_count(self, recipient_id: int) -> int:
        """Count transactions referencing a recipient."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        transaction_type: TransactionType,
        amount: Decimal,
        account_id: int,
        status: TransactionStatus,
        transaction_date: date,
        recipient_id: Optional[int] = None,
        to_account_id: Optional[int] = None,
        description: Optional[str] = None,
        parent_transaction_id: Optional[int] = None,
    ) -> int:
        """Create a transaction row (without its detail record). Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID, with its detail record loaded."""
        pass

    @abstractmethod
    def get_child_transaction(self, parent_transaction_id: int) -> Optional[Transaction]:
        """Get the receiver half of an account transfer by its sender's ID."""
        pass

    @abstractmethod
    def update_transaction(
        self,
        transaction_id: int,
        amount: Optional[Decimal] = None,
        status: Optional[TransactionStatus] = None,
        transaction_date: Optional[date] = None,
        recipient_id: Optional[int] = None,
        to_account_id: Optional[int] = None,
        description: Optional[str] = None,
        clear_recipient: bool = False,
    ) -> None:
        """Update scalar transaction fields. ``None`` leaves a field unchanged.

        The transaction type and owning account are not updatable.
        """
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction together with its detail record."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        account_id: Optional[int] = None,
        transaction_types: Optional[list[TransactionType]] = None,
        status: Optional[TransactionStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Transaction]:
        """List transactions with optional filters, newest first."""
        pass

    @abstractmethod
    def search_transactions(
        self,
        text: Optional[str] = None,
        min_amount: Optional[Decimal] = None,
        max_amount: Optional[Decimal] = None,
        account_id: Optional[int] = None,
    ) -> list[Transaction]:
        """Find transactions whose description, account name or recipient name
        contains ``text`` (case-insensitive) and whose amount lies within the bounds.
        """
        pass

    @abstractmethod
    def count_transactions(
        self, account_id: Optional[int] = None, status: Optional[TransactionStatus] = None
    ) -> int:
        """Count transactions, optionally filtered by owning account and status."""
        pass

    # Detail record operations
    @abstractmethod
    def create_details(
        self, transaction_id: int, transaction_type: TransactionType, details: TransactionDetails
    ) -> None:
        """Attach the detail record of a transaction."""
        pass

    @abstractmethod
    def update_details(
        self, transaction_id: int, transaction_type: TransactionType, details: TransactionDetails
    ) -> None:
        """Replace the stored fields of a transaction's detail record."""
        pass

    @abstractmethod
    def cheque_number_exists(self, cheque_number: str, exclude_transaction_id: Optional[int] = None) -> bool:
        """Check whether a cheque number is used by any transaction other than the excluded one."""
        pass
