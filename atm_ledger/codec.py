"""
Codec Interface

A codec pairs an encoder and a decoder for one on-disk representation of the
ledger. Decoders are best-effort: malformed records are skipped and counted,
never raised.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Optional, Union

from .ledger import Ledger
from .logging_config import get_logger, log_action


class LedgerCodec(ABC):
    """Abstract interface for ledger file formats"""

    name = "codec"

    def __init__(self, max_history: Optional[int] = None,
                 clock: Optional[Callable[[], int]] = None):
        """
        Args:
            max_history: History bound applied to decoded ledgers
            clock: Timestamp source handed to decoded ledgers
        """
        self.max_history = max_history
        self.clock = clock
        self.skipped_records = 0
        self.logger = get_logger(f"atm_ledger.{self.name}")

    @abstractmethod
    def encode(self, ledger: Ledger) -> str:
        """Serialize the ledger to text"""
        pass

    @abstractmethod
    def decode(self, text: str) -> Ledger:
        """Parse text into a ledger, skipping malformed records"""
        pass

    def write(self, ledger: Ledger, path: Union[str, Path]) -> None:
        """
        Write the ledger to a file

        Raises:
            OSError: If the file cannot be opened or written
        """
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(self.encode(ledger))

    def read(self, path: Union[str, Path]) -> Ledger:
        """
        Read a ledger from a file

        Bytes that are not valid UTF-8 become U+FFFD, so they damage only
        the record they sit in and the decoder skips that record.

        Raises:
            OSError: If the file cannot be opened or read
        """
        with open(path, "r", encoding="utf-8", errors="replace", newline="") as f:
            return self.decode(f.read())

    def _skip(self, reason: str, location: str) -> None:
        self.skipped_records += 1
        log_action(
            self.logger, "warning", f"Skipping malformed {self.name} record at {location}: {reason}",
            action="skip_record", resource=self.name,
            extra={"location": location, "reason": reason}
        )

    def _build(self, transactions, balance) -> Ledger:
        return Ledger.restore(transactions, balance, max_history=self.max_history, clock=self.clock)
