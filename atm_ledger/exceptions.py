"""
Ledger Exceptions

Error taxonomy for amount parsing, ledger validation and amount overflow.
I/O failures are left as the built-in OSError raised by the codecs.
"""


class LedgerError(Exception):
    """Base exception for all ledger errors"""

    def __init__(self, message: str, code: str = "LEDGER_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ParseError(LedgerError, ValueError):
    """Raised when a decimal amount or a persisted record is malformed"""

    def __init__(self, message: str):
        super().__init__(message, code="PARSE_ERROR")


class ValidationError(LedgerError, ValueError):
    """Raised when a ledger operation is rejected"""

    def __init__(self, message: str, code: str = "VALIDATION_ERROR"):
        super().__init__(message, code=code)


class NonPositiveAmountError(ValidationError):
    """Raised when a deposit or withdrawal amount is zero or negative"""

    def __init__(self, amount: str):
        self.amount = amount
        super().__init__(f"Amount must be positive: {amount}", code="NON_POSITIVE_AMOUNT")


class InsufficientFundsError(ValidationError):
    """Raised when a withdrawal exceeds the current balance"""

    def __init__(self, requested: str, available: str):
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient funds: requested {requested}, available {available}",
            code="INSUFFICIENT_FUNDS",
        )


class AmountOverflowError(LedgerError, OverflowError):
    """Raised when an amount falls outside the representable integer range"""

    def __init__(self, message: str):
        super().__init__(message, code="AMOUNT_OVERFLOW")
