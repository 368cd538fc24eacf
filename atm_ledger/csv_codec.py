"""
CSV Codec

Plain comma-delimited format: an optional header line followed by one
``type,amount_cents,balance_after,timestamp`` line per transaction. Every
field is an integer, so no quoting or escaping is involved.
"""

import csv
import io
from typing import List, Optional

from .exceptions import AmountOverflowError, ParseError
from .codec import LedgerCodec
from .ledger import Ledger, Transaction
from .logging_config import log_action
from .money import Money, parse_integer

CSV_COLUMNS = ["type", "amount_cents", "balance_after", "timestamp"]
HEADER_PREFIX = "type,"


class CsvCodec(LedgerCodec):
    """Reads and writes the transactions.csv format"""

    name = "csv"

    def encode(self, ledger: Ledger) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_COLUMNS)
        for transaction in ledger.history():
            writer.writerow(transaction.as_tuple())
        return buffer.getvalue()

    def decode(self, text: str) -> Ledger:
        """
        Parse CSV text into a ledger.

        A first line starting with the header prefix is skipped; otherwise it
        is treated as data. Lines with fewer than four fields or with
        non-integer or invalid values are skipped. The balance is the last
        accepted row's balance_after, or zero.
        """
        self.skipped_records = 0
        lines = text.splitlines()
        start = 1 if lines and lines[0].startswith(HEADER_PREFIX) else 0

        transactions: List[Transaction] = []
        for line_number, line in enumerate(lines[start:], start=start + 1):
            if not line.strip():
                continue
            transaction = self._parse_line(line, line_number)
            if transaction is not None:
                transactions.append(transaction)

        balance = transactions[-1].balance_after if transactions else Money.zero()
        log_action(
            self.logger, "info", f"Decoded {len(transactions)} CSV transactions",
            action="decode", resource="csv",
            extra={"transactions": len(transactions), "skipped": self.skipped_records}
        )
        return self._build(transactions, balance)

    def _parse_line(self, line: str, line_number: int) -> Optional[Transaction]:
        fields = line.split(",")
        location = f"line {line_number}"
        if len(fields) < len(CSV_COLUMNS):
            self._skip(f"expected {len(CSV_COLUMNS)} fields, got {len(fields)}", location)
            return None

        try:
            kind, amount, balance_after, timestamp = (parse_integer(f) for f in fields[:4])
            return Transaction.from_codes(kind, amount, balance_after, timestamp)
        except (ParseError, AmountOverflowError) as e:
            self._skip(e.message, location)
            return None
