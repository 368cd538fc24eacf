"""
ATM Ledger

Single-account ledger with exact cent arithmetic, and CSV and JSON
persistence that tolerates damaged files when reloading.
"""

from .exceptions import (
    LedgerError, ParseError, ValidationError, NonPositiveAmountError,
    InsufficientFundsError, AmountOverflowError
)
from .money import Money, parse_decimal, format_decimal
from .ledger import Ledger, Transaction, TransactionKind
from .csv_codec import CsvCodec
from .json_codec import JsonCodec
from .persistence import PersistenceController, SaveReport

__version__ = "1.0.0"
