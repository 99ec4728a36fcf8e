"""Balance mutation engine.

The only writer of ``Account.current_balance``. Whether a transaction moves
money is decided by the green/red status partition in ``rules``; the new
balance is handed to an injected persistence callback, which in production
is the database's compare-and-set write.
"""

import logging
from decimal import Decimal
from typing import Callable

from passbook.domain.entities import Account
from passbook.domain.enums import TransactionDirection, TransactionStatus
from passbook.domain.errors import InsufficientBalanceError, insufficient_balance
from passbook.domain.rules import is_green_status

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

# Receives the account as read and the balance to store; returns the account as written
PersistBalance = Callable[[Account, Decimal], Account]


class BalanceEngine:
    """Apply and reverse the balance effect of transactions."""

    def __init__(self, persist: PersistBalance):
        self.persist = persist

    @staticmethod
    def should_update_balance(status: TransactionStatus) -> bool:
        return is_green_status(status)

    def compute_delta(self, direction: TransactionDirection, amount: Decimal, status: TransactionStatus) -> Decimal:
        """Return the signed change a transaction makes to its account's balance."""
        if not self.should_update_balance(status):
            return ZERO
        if direction is TransactionDirection.CREDIT:
            return amount
        return -amount

    def validate_sufficient_funds(
        self, account: Account, direction: TransactionDirection, amount: Decimal, status: TransactionStatus
    ) -> None:
        """Reject a green debit larger than the current balance. Red debits always pass."""
        if direction is not TransactionDirection.DEBIT or not self.should_update_balance(status):
            return
        if amount > account.current_balance:
            raise InsufficientBalanceError(insufficient_balance(account.current_balance, amount))

    def apply(
        self, account: Account, direction: TransactionDirection, amount: Decimal, status: TransactionStatus
    ) -> Account:
        """Apply a transaction's effect to the account it belongs to.

        Funds are checked against ``account`` as passed in, which callers read
        inside the same unit of work that performs the write.

        Raises:
            InsufficientBalanceError: If a green debit exceeds the balance
            BalanceConflictError: If the account changed since it was read
        """
        delta = self.compute_delta(direction, amount, status)
        if delta == ZERO:
            return account
        self.validate_sufficient_funds(account, direction, amount, status)
        return self._write(account, delta)

    def reverse(
        self, account: Account, direction: TransactionDirection, amount: Decimal, status: TransactionStatus
    ) -> Account:
        """Undo the effect ``apply`` had for the same arguments.

        No funds check: reversing a credit may take the balance below zero.
        """
        delta = self.compute_delta(direction.reversed(), amount, status)
        if delta == ZERO:
            return account
        return self._write(account, delta)

    def _write(self, account: Account, delta: Decimal) -> Account:
        new_balance = account.current_balance + delta
        logger.debug(
            "Account %s balance %s -> %s (delta %s)", account.id, account.current_balance, new_balance, delta
        )
        return self.persist(account, new_balance)
