"""
Money Module

Fixed-point amounts held as an integer count of cents. Parsing and formatting
work on decimal strings directly so no value ever passes through a float.
The representable range is that of a signed 64-bit integer, which is the
width used by the persisted formats.
"""

from dataclasses import dataclass
from typing import Union
import re

from .exceptions import AmountOverflowError, ParseError

MIN_CENTS = -(2 ** 63)
MAX_CENTS = 2 ** 63 - 1

CENTS_PER_UNIT = 100

# ASCII only: str.strip() and \d would also accept other Unicode spaces/digits
_WHITESPACE = " \t\n\r\f\v"
_DECIMAL_PATTERN = re.compile(r"([0-9]+)(?:\.([0-9]+))?")
_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")

# 2**63 has 19 digits
MAX_DIGITS = 19


def check_range(cents: int) -> int:
    """Return cents unchanged, or raise AmountOverflowError if out of range"""
    if cents < MIN_CENTS or cents > MAX_CENTS:
        raise AmountOverflowError(f"Amount of {cents} cents exceeds the 64-bit range")
    return cents


def parse_integer(digits: str) -> int:
    """
    Convert an optionally signed run of ASCII digits to an int in the 64-bit range

    The digit count is checked before conversion, so oversized input never
    reaches int() and its digit limit.

    Raises:
        ParseError: If the text is not an optionally signed digit run
        AmountOverflowError: If the value is outside the 64-bit range
    """
    text = digits.strip(_WHITESPACE)
    if not _INTEGER_PATTERN.fullmatch(text):
        raise ParseError(f"Not an integer: '{digits[:40]}'")

    magnitude = text.lstrip("+-").lstrip("0") or "0"
    if len(magnitude) > MAX_DIGITS:
        raise AmountOverflowError(f"Integer of {len(magnitude)} digits exceeds the 64-bit range")
    value = int(magnitude)
    return check_range(-value if text.startswith("-") else value)


@dataclass(frozen=True)
class Money:
    """
    Immutable amount in cents.
    Arithmetic is checked: results outside the 64-bit range raise
    AmountOverflowError instead of wrapping.
    """
    cents: int

    def __post_init__(self):
        if isinstance(self.cents, bool) or not isinstance(self.cents, int):
            raise TypeError(f"Money requires an integer number of cents, got {type(self.cents).__name__}")
        check_range(self.cents)

    @classmethod
    def zero(cls) -> 'Money':
        return cls(0)

    @classmethod
    def from_cents(cls, cents: int) -> 'Money':
        return cls(cents)

    def add(self, other: 'Money') -> 'Money':
        """Checked addition"""
        return Money(self.cents + other.cents)

    def subtract(self, other: 'Money') -> 'Money':
        """Checked subtraction"""
        return Money(self.cents - other.cents)

    def __add__(self, other: 'Money') -> 'Money':
        if not isinstance(other, Money):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: 'Money') -> 'Money':
        if not isinstance(other, Money):
            return NotImplemented
        return self.subtract(other)

    def __neg__(self) -> 'Money':
        return Money(-self.cents)

    def __abs__(self) -> 'Money':
        return Money(abs(self.cents))

    def __lt__(self, other: 'Money') -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.cents < other.cents

    def __le__(self, other: 'Money') -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.cents <= other.cents

    def __gt__(self, other: 'Money') -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.cents > other.cents

    def __ge__(self, other: 'Money') -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.cents >= other.cents

    def __str__(self) -> str:
        return format_decimal(self)

    def is_zero(self) -> bool:
        """Check if amount is exactly zero"""
        return self.cents == 0

    def is_positive(self) -> bool:
        """Check if amount is positive"""
        return self.cents > 0

    def is_negative(self) -> bool:
        """Check if amount is negative"""
        return self.cents < 0

    def to_string(self, currency_code: str = "USD") -> str:
        """Format for display, e.g. 'USD 1,234.56'"""
        units, rem = divmod(abs(self.cents), CENTS_PER_UNIT)
        sign = "-" if self.cents < 0 else ""
        return f"{currency_code} {sign}{units:,}.{rem:02d}"


def parse_decimal(text: str) -> Money:
    """
    Parse a human decimal string into Money.

    Accepts ``digits`` or ``digits.digits`` with at most two fractional digits,
    optionally surrounded by whitespace. A single fractional digit is scaled,
    so "12.3" is 1230 cents.

    Args:
        text: Amount as typed by a user

    Returns:
        Money holding the exact number of cents

    Raises:
        ParseError: If the text is empty, signed, has interior whitespace,
            non-digit characters or more than two fractional digits
        AmountOverflowError: If the value exceeds the 64-bit range
    """
    if not isinstance(text, str):
        raise ParseError(f"Amount must be a string, got {type(text).__name__}")

    stripped = text.strip(_WHITESPACE)
    if not stripped:
        raise ParseError("Amount is empty")
    if stripped.startswith("-"):
        raise ParseError(f"Negative amounts are not allowed: '{stripped}'")

    match = _DECIMAL_PATTERN.fullmatch(stripped)
    if not match:
        raise ParseError(f"Malformed amount: '{stripped}'")

    units, fraction = match.group(1), match.group(2) or ""
    if len(fraction) > 2:
        raise ParseError(f"Too many fractional digits (max 2): '{stripped}'")

    cents = parse_integer(units) * CENTS_PER_UNIT + int(fraction.ljust(2, "0"))
    return Money(check_range(cents))


def format_decimal(money: Union[Money, int]) -> str:
    """Render an amount with exactly two fractional digits, e.g. '-12.05'"""
    cents = money.cents if isinstance(money, Money) else money
    units, rem = divmod(abs(cents), CENTS_PER_UNIT)
    sign = "-" if cents < 0 else ""
    return f"{sign}{units}.{rem:02d}"
