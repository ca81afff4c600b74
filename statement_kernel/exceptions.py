"""
Typed Exception Hierarchy for the Statement Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Statement conversion must fail precisely. A caller ingesting thousands of
bank statements needs to tell "the bank sent inconsistent balances" apart
from "this format pair cannot be converted" without parsing message text.

Every error:
  1. Has a TYPED exception class (catch by type, not message)
  2. Has a CODE attribute (machine-readable, API-safe)
  3. Carries structured DATA (not just a message string)

Example:
    try:
        camt053 = convert(mt940, StatementFormat.CAMT053)
    except BalanceMismatchError as e:
        log.warning("statement_rejected", extra={"expected": e.expected})
        api_response(code=e.code, expected=str(e.expected))

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from StatementKernelError:

    StatementKernelError (base)
    |
    +-- DocumentError
    |   +-- MissingRequiredFieldError
    |   +-- ReferenceLengthError
    |   +-- BuilderConsumedError
    |
    +-- BalanceError
    |   +-- MissingBalanceError
    |   +-- BalanceMismatchError
    |
    +-- CurrencyError
    |   +-- CurrencyMismatchError
    |
    +-- ConversionError
    |   +-- UnsupportedConversionError
    |
    +-- LedgerError
        +-- LedgerFieldOverflowError
        +-- LedgerFormatError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Document        | MISSING_REQUIRED_FIELD      | Mandatory construction field absent
                | REFERENCE_LENGTH            | code + customer reference > 16 chars
                | BUILDER_CONSUMED            | build() called twice on one builder
----------------|-----------------------------|-----------------------------------------
Balance         | MISSING_BALANCE             | Neither opening nor closing supplied
                | BALANCE_MISMATCH            | opening + entries != closing
----------------|-----------------------------|-----------------------------------------
Currency        | CURRENCY_MISMATCH           | Entry/balance currencies differ
----------------|-----------------------------|-----------------------------------------
Conversion      | UNSUPPORTED_CONVERSION      | No direct or hub-routed path
----------------|-----------------------------|-----------------------------------------
Ledger          | LEDGER_FIELD_OVERFLOW       | Field too long under REJECT strategy
                | LEDGER_FORMAT               | Unparseable date/amount in a ledger row

===============================================================================
HANDLING PATTERNS
===============================================================================

1. The only recoverable path is balance drift in real-world data. Callers
   that accept such data pass ``skip_balance_validation=True`` explicitly
   instead of catching BalanceMismatchError.

2. Everything else propagates unmodified. Construction and conversion are
   all-or-nothing: no partial document is ever returned alongside an error.

Value-object validation (negative amounts, malformed currency codes) raises
``ValueError``, the same way the value types in ``domain.values`` do.
"""

from __future__ import annotations

from decimal import Decimal


class StatementKernelError(Exception):
    """
    Base exception for all statement kernel errors.

    All subclasses must have a `code` class attribute
    for machine-readable error identification.
    """

    code: str = "STATEMENT_KERNEL_ERROR"


# Document construction


class DocumentError(StatementKernelError):
    """Base exception for document and entry construction errors."""

    code: str = "DOCUMENT_ERROR"


class MissingRequiredFieldError(DocumentError):
    """A mandatory field was absent at construction time."""

    code: str = "MISSING_REQUIRED_FIELD"

    def __init__(self, field: str, document: str):
        self.field = field
        self.document = document
        super().__init__(f"{document}: required field '{field}' is missing")


class ReferenceLengthError(DocumentError):
    """Transaction code plus customer reference exceed the positional limit."""

    code: str = "REFERENCE_LENGTH"

    def __init__(self, transaction_code: str, customer_reference: str, max_length: int):
        self.transaction_code = transaction_code
        self.customer_reference = customer_reference
        self.max_length = max_length
        super().__init__(
            f"Reference '{transaction_code}{customer_reference}' is "
            f"{len(transaction_code) + len(customer_reference)} characters, "
            f"maximum is {max_length}"
        )


class BuilderConsumedError(DocumentError):
    """A document builder was used after build() already froze it."""

    code: str = "BUILDER_CONSUMED"

    def __init__(self, builder: str):
        self.builder = builder
        super().__init__(f"{builder} has already been built")


# Balances


class BalanceError(StatementKernelError):
    """Base exception for balance reconciliation errors."""

    code: str = "BALANCE_ERROR"


class MissingBalanceError(BalanceError):
    """Neither an opening nor a closing balance is available."""

    code: str = "MISSING_BALANCE"

    def __init__(self, context: str = "reconciliation"):
        self.context = context
        super().__init__(
            f"{context}: at least one of opening or closing balance is required"
        )


class BalanceMismatchError(BalanceError):
    """Opening balance plus entries does not equal the closing balance."""

    code: str = "BALANCE_MISMATCH"

    def __init__(self, expected: Decimal, actual: Decimal, currency: str):
        self.expected = expected
        self.actual = actual
        self.currency = currency
        super().__init__(
            f"Closing balance mismatch: expected {expected} {currency}, "
            f"got {actual} {currency}"
        )


# Currency


class CurrencyError(StatementKernelError):
    """Base exception for currency-related errors."""

    code: str = "CURRENCY_ERROR"


class CurrencyMismatchError(CurrencyError):
    """Attempted operation on mismatched currencies."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Currency mismatch: expected {expected}, got {actual}")


# Conversion


class ConversionError(StatementKernelError):
    """Base exception for format conversion errors."""

    code: str = "CONVERSION_ERROR"


class UnsupportedConversionError(ConversionError):
    """No direct or hub-routed conversion path exists."""

    code: str = "UNSUPPORTED_CONVERSION"

    def __init__(self, source: str, target: str):
        self.source = source
        self.target = target
        super().__init__(f"No conversion path from {source} to {target}")


# Ledger encoding


class LedgerError(StatementKernelError):
    """Base exception for fixed-width ledger encoding errors."""

    code: str = "LEDGER_ERROR"


class LedgerFieldOverflowError(LedgerError):
    """A value does not fit its ledger field under the REJECT strategy."""

    code: str = "LEDGER_FIELD_OVERFLOW"

    def __init__(self, field: str, max_length: int, length: int):
        self.field = field
        self.max_length = max_length
        self.length = length
        super().__init__(
            f"Ledger field '{field}' holds {max_length} characters, got {length}"
        )


class LedgerFormatError(LedgerError):
    """A ledger field value could not be parsed."""

    code: str = "LEDGER_FORMAT"

    def __init__(self, field: str, value: str):
        self.field = field
        self.value = value
        super().__init__(f"Ledger field '{field}' has unparseable value '{value}'")
