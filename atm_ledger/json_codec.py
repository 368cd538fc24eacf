"""
JSON Codec

Writes and reads one fixed document shape:

    {
      "balance_cents": 5950,
      "transactions": [
        {"type": 1, "amount": 10000, "balance_after": 10000, "timestamp": 1700000000},
        {"type": 2, "amount": 4050, "balance_after": 5950, "timestamp": 1700000060}
      ]
    }

This is not a general JSON parser. Decoding scans the text for the
``"balance_cents"`` key and for every ``{"type"`` object opener, pulling the
integers that follow in fixed field order. Separator text between the integers
is ignored, so whitespace differences do not matter, but key order inside an
object is assumed. Anything that does not yield four integers is skipped.
"""

import re
from typing import List

from .exceptions import AmountOverflowError, ParseError
from .codec import LedgerCodec
from .ledger import Ledger, Transaction
from .logging_config import log_action
from .money import Money, parse_integer

BALANCE_KEY = '"balance_cents"'
TRANSACTION_MARKER = '{"type"'

# Separators never cross an object boundary, so a damaged object cannot
# borrow integers from the next one.
_SEPARATOR = r"[^0-9{}-]+"
_INTEGER = r"(-?[0-9]+)"

_BALANCE_PATTERN = re.compile(re.escape(BALANCE_KEY) + r"[^0-9-]+" + _INTEGER)
_TRANSACTION_PATTERN = re.compile(re.escape(TRANSACTION_MARKER) + (_SEPARATOR + _INTEGER) * 4)


class JsonCodec(LedgerCodec):
    """Reads and writes the transactions.json format"""

    name = "json"

    def encode(self, ledger: Ledger) -> str:
        objects = [
            '    {{"type": {}, "amount": {}, "balance_after": {}, "timestamp": {}}}'.format(*t.as_tuple())
            for t in ledger.history()
        ]
        parts = [
            "{\n",
            f'  "balance_cents": {ledger.balance.cents},\n',
            '  "transactions": [\n',
        ]
        if objects:
            parts.append(",\n".join(objects) + "\n")
        parts.append("  ]\n}\n")
        return "".join(parts)

    def decode(self, text: str) -> Ledger:
        """
        Parse a JSON document into a ledger.

        The balance is the last parsed transaction's balance_after; with no
        parsed transactions the explicit balance_cents value is kept, or zero
        if it is missing.
        """
        self.skipped_records = 0
        explicit_balance = self._find_balance(text)

        transactions: List[Transaction] = []
        position = 0
        while True:
            index = text.find(TRANSACTION_MARKER, position)
            if index < 0:
                break
            # Always move past this occurrence, whatever the match outcome
            position = index + len(TRANSACTION_MARKER)

            match = _TRANSACTION_PATTERN.match(text, index)
            if not match:
                self._skip("expected four integer fields", f"offset {index}")
                continue
            try:
                fields = [parse_integer(g) for g in match.groups()]
                transactions.append(Transaction.from_codes(*fields))
            except (ParseError, AmountOverflowError) as e:
                self._skip(e.message, f"offset {index}")

        if transactions:
            balance = transactions[-1].balance_after
        else:
            balance = explicit_balance

        log_action(
            self.logger, "info", f"Decoded {len(transactions)} JSON transactions",
            action="decode", resource="json",
            extra={"transactions": len(transactions), "skipped": self.skipped_records}
        )
        return self._build(transactions, balance)

    def _find_balance(self, text: str) -> Money:
        index = text.find(BALANCE_KEY)
        if index < 0:
            return Money.zero()

        match = _BALANCE_PATTERN.match(text, index)
        if not match:
            self._skip("balance_cents has no integer value", f"offset {index}")
            return Money.zero()
        try:
            return Money(parse_integer(match.group(1)))
        except (ParseError, AmountOverflowError) as e:
            self._skip(e.message, f"offset {index}")
            return Money.zero()
