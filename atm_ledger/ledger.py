"""
Single-Account Ledger

Ordered, append-only transaction history with a running balance. Every
transaction records the balance it produced, so the balance always equals the
last entry's balance_after. The history may be capped; when it is, the oldest
entries are evicted and their audit trail is lost, but the balance is not.
"""

from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Deque, Iterable, Iterator, Optional, Tuple

from .exceptions import (
    AmountOverflowError, InsufficientFundsError, NonPositiveAmountError, ParseError
)
from .logging_config import get_logger, log_action
from .money import Money, check_range, format_decimal


class TransactionKind(Enum):
    """Kinds of ledger transactions, valued by their persisted code"""
    DEPOSIT = 1
    WITHDRAW = 2

    @property
    def code(self) -> int:
        return self.value

    @classmethod
    def from_code(cls, code: int) -> 'TransactionKind':
        try:
            return cls(code)
        except ValueError:
            raise ParseError(f"Unknown transaction type code: {code}") from None


def current_timestamp() -> int:
    """Current time as integer seconds since the epoch"""
    return int(datetime.now(timezone.utc).timestamp())


@dataclass(frozen=True)
class Transaction:
    """
    Immutable ledger entry.
    balance_after is the account balance once this transaction was applied.
    """
    kind: TransactionKind
    amount: Money
    balance_after: Money
    timestamp: int

    def __post_init__(self):
        if not self.amount.is_positive():
            raise ValueError("Transaction amount must be positive")

    @property
    def occurred_at(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp, timezone.utc)

    @property
    def signed_amount(self) -> Money:
        """Amount as applied to the balance: negative for withdrawals"""
        return self.amount if self.kind == TransactionKind.DEPOSIT else -self.amount

    def as_tuple(self) -> Tuple[int, int, int, int]:
        """(type code, amount cents, balance_after cents, timestamp), the persisted field order"""
        return (self.kind.code, self.amount.cents, self.balance_after.cents, self.timestamp)

    @classmethod
    def from_codes(cls, kind: int, amount: int, balance_after: int, timestamp: int) -> 'Transaction':
        """
        Build a transaction from persisted integer fields

        Raises:
            ParseError: If the type code is unknown, the amount is not positive
                or a value is outside the 64-bit range
        """
        record_kind = TransactionKind.from_code(kind)
        if amount <= 0:
            raise ParseError(f"Transaction amount must be positive, got {amount}")
        try:
            return cls(
                kind=record_kind,
                amount=Money(amount),
                balance_after=Money(balance_after),
                timestamp=check_range(timestamp),
            )
        except AmountOverflowError as e:
            raise ParseError(f"Transaction field out of range: {e.message}") from e


class Ledger:
    """
    Transaction history and balance for the single account.

    The ledger is a plain value: callers own it and pass it to whatever needs
    it. It is not shared across threads.
    """

    def __init__(self, max_history: Optional[int] = None,
                 clock: Optional[Callable[[], int]] = None):
        """
        Args:
            max_history: Maximum number of transactions kept in the history,
                None for no bound. When the bound is reached the oldest
                transaction is evicted before a new one is appended.
            clock: Returns the timestamp for new transactions
        """
        if max_history is not None and max_history < 1:
            raise ValueError("max_history must be at least 1")

        self.max_history = max_history
        self.evicted_count = 0
        self._history: Deque[Transaction] = deque()
        self._balance = Money.zero()
        self._clock = clock or current_timestamp
        self.logger = get_logger("atm_ledger.ledger")

    @classmethod
    def restore(cls, transactions: Iterable[Transaction], balance: Money,
                max_history: Optional[int] = None,
                clock: Optional[Callable[[], int]] = None) -> 'Ledger':
        """
        Rebuild a ledger from persisted records.

        The balance is taken as given. When more records are supplied than
        max_history allows, only the newest are kept so the in-memory history
        and the next save agree.
        """
        ledger = cls(max_history=max_history, clock=clock)
        for transaction in transactions:
            ledger._append(transaction)
        ledger._balance = balance
        return ledger

    @property
    def balance(self) -> Money:
        return self._balance

    @property
    def transactions(self) -> Tuple[Transaction, ...]:
        return tuple(self._history)

    @property
    def last_transaction(self) -> Optional[Transaction]:
        return self._history[-1] if self._history else None

    def __len__(self) -> int:
        return len(self._history)

    def __iter__(self) -> Iterator[Transaction]:
        return self.history()

    def history(self) -> Iterator[Transaction]:
        """Iterate the history oldest first. Each call starts a fresh pass over a snapshot."""
        return iter(tuple(self._history))

    def apply_deposit(self, amount: Money) -> Transaction:
        """
        Deposit money into the account

        Args:
            amount: Positive amount to deposit

        Returns:
            The recorded deposit transaction

        Raises:
            NonPositiveAmountError: If amount is zero or negative
            AmountOverflowError: If the new balance would exceed the 64-bit range
        """
        if not amount.is_positive():
            raise NonPositiveAmountError(format_decimal(amount))

        new_balance = self._balance + amount
        return self._record(TransactionKind.DEPOSIT, amount, new_balance)

    def apply_withdraw(self, amount: Money) -> Transaction:
        """
        Withdraw money from the account

        Args:
            amount: Positive amount, no greater than the current balance

        Returns:
            The recorded withdrawal transaction

        Raises:
            NonPositiveAmountError: If amount is zero or negative
            InsufficientFundsError: If amount exceeds the balance
        """
        if not amount.is_positive():
            raise NonPositiveAmountError(format_decimal(amount))
        if amount > self._balance:
            raise InsufficientFundsError(format_decimal(amount), format_decimal(self._balance))

        new_balance = self._balance - amount
        return self._record(TransactionKind.WITHDRAW, amount, new_balance)

    def is_consistent(self) -> bool:
        """Check that each entry's balance_after follows from the previous one and the balance matches the last"""
        previous = None
        for transaction in self._history:
            if previous is not None:
                try:
                    expected = previous.balance_after + transaction.signed_amount
                except AmountOverflowError:
                    return False
                if transaction.balance_after != expected:
                    return False
            previous = transaction

        if previous is not None and previous.balance_after != self._balance:
            return False
        return True

    def _record(self, kind: TransactionKind, amount: Money, new_balance: Money) -> Transaction:
        transaction = Transaction(
            kind=kind,
            amount=amount,
            balance_after=new_balance,
            timestamp=self._clock(),
        )
        self._append(transaction)
        self._balance = new_balance

        log_action(
            self.logger, "info", f"{kind.name.capitalize()} of {format_decimal(amount)}",
            action=kind.name.lower(), resource="ledger",
            extra={
                "amount_cents": amount.cents,
                "balance_after": new_balance.cents,
                "timestamp": transaction.timestamp,
            }
        )
        return transaction

    def _append(self, transaction: Transaction) -> None:
        if self.max_history is not None:
            while len(self._history) >= self.max_history:
                evicted = self._history.popleft()
                self.evicted_count += 1
                log_action(
                    self.logger, "warning",
                    "History capacity reached, evicting oldest transaction",
                    action="evict", resource="ledger",
                    extra={"max_history": self.max_history, "evicted": evicted.as_tuple()}
                )
        self._history.append(transaction)
