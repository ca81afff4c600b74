"""
Values -- Immutable, self-validating statement value objects.

Responsibility:
    Provides the primitive value types every statement format shares:
    CreditDebit direction, Currency, Money and the two-decimal amount
    normalisation used for balances and entries.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by every other domain module. No outward dependencies.

Invariants enforced:
    - Amounts are Decimal, never float, and carry exactly two fractional
      digits once normalised (ROUND_HALF_UP).
    - Currency codes are three upper-case letters, normalised on construction.
    - Money arithmetic never mixes currencies.

Failure modes:
    - ValueError on construction with invalid amounts or currency codes.
    - ValueError when Money arithmetic mixes currencies.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum

AMOUNT_QUANTUM = Decimal("0.01")

_CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")
_IBAN_PATTERN = re.compile(r"^[A-Z]{2}\d{2}[A-Z0-9]{11,30}$")
_BIC_PATTERN = re.compile(r"^[A-Z]{4}[A-Z]{2}[A-Z0-9]{2}(?:[A-Z0-9]{3})?$")


class CreditDebit(str, Enum):
    """Direction of a balance or movement. The sign never lives in the amount."""

    CREDIT = "C"
    DEBIT = "D"

    @property
    def sign(self) -> int:
        return 1 if self is CreditDebit.CREDIT else -1

    @classmethod
    def for_signed(cls, value: Decimal) -> CreditDebit:
        """Credit for zero and positive values, debit otherwise."""
        return cls.CREDIT if value >= 0 else cls.DEBIT

    def opposite(self) -> CreditDebit:
        return CreditDebit.DEBIT if self is CreditDebit.CREDIT else CreditDebit.CREDIT


def to_amount(value: Decimal | str | int | float) -> Decimal:
    """
    Normalise a monetary value to a two-decimal Decimal.

    Preconditions:
        - value is a Decimal, int, numeric string or float (floats go
          through ``str`` so 0.1 stays 0.10).

    Postconditions:
        - Returns a finite Decimal quantised to 0.01 with ROUND_HALF_UP.

    Raises:
        ValueError: if the value is not numeric or not finite.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid amount: {value!r}")
    if not isinstance(value, Decimal):
        try:
            value = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as e:
            raise ValueError(f"Invalid amount: {value!r}") from e
    if not value.is_finite():
        raise ValueError(f"Amount must be finite: {value}")
    return value.quantize(AMOUNT_QUANTUM, rounding=ROUND_HALF_UP)


def to_unsigned_amount(value: Decimal | str | int | float) -> Decimal:
    """Normalise like ``to_amount`` and reject negative values."""
    amount = to_amount(value)
    if amount < 0:
        raise ValueError(f"Amount must be non-negative, got {amount}")
    return amount


@dataclass(frozen=True, slots=True)
class Currency:
    """
    Three-letter currency code value object.

    Guarantees:
        - Immutable and hashable
        - code is upper-case, stripped and exactly three letters

    Non-goals:
        - Does NOT carry decimal places; statement amounts always use two.
    """

    code: str

    def __post_init__(self) -> None:
        normalized = self.code.upper().strip() if isinstance(self.code, str) else ""
        if not _CURRENCY_PATTERN.match(normalized):
            raise ValueError(f"Invalid currency code: {self.code!r}")
        object.__setattr__(self, "code", normalized)

    @classmethod
    def coerce(cls, value: str | Currency) -> Currency:
        if isinstance(value, Currency):
            return value
        if isinstance(value, str):
            return cls(value)
        raise TypeError(f"currency must be Currency or str, got {type(value)}")

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"Currency({self.code!r})"


@dataclass(frozen=True, slots=True)
class Money:
    """
    Signed monetary amount paired with its Currency.

    Used for entry extras (original, equivalent and fee amounts) and for
    document totals. Balances and entries keep an unsigned amount plus a
    CreditDebit direction instead.
    """

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_amount(self.amount))
        object.__setattr__(self, "currency", Currency.coerce(self.currency))

    @classmethod
    def of(cls, amount: Decimal | str | int, currency: str | Currency) -> Money:
        """Factory accepting a plain currency code."""
        return cls(amount=to_amount(amount), currency=Currency.coerce(currency))

    @classmethod
    def zero(cls, currency: str | Currency) -> Money:
        return cls(amount=Decimal("0.00"), currency=Currency.coerce(currency))

    @property
    def is_zero(self) -> bool:
        return self.amount == 0

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        if self.currency != other.currency:
            raise ValueError(
                f"Cannot add Money with different currencies: "
                f"{self.currency} and {other.currency}"
            )
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        if self.currency != other.currency:
            raise ValueError(
                f"Cannot subtract Money with different currencies: "
                f"{self.currency} and {other.currency}"
            )
        return Money(amount=self.amount - other.amount, currency=self.currency)

    def __neg__(self) -> Money:
        return Money(amount=-self.amount, currency=self.currency)

    def __abs__(self) -> Money:
        return Money(amount=abs(self.amount), currency=self.currency)

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.code}"

    def __repr__(self) -> str:
        return f"Money({self.amount!r}, {self.currency!r})"


def is_iban(value: str | None) -> bool:
    """Shape check only (country, check digits, 11-30 alphanumerics); no checksum."""
    return bool(value) and _IBAN_PATTERN.match(value) is not None


def is_bic(value: str | None) -> bool:
    return bool(value) and _BIC_PATTERN.match(value) is not None


def bank_code_from_iban(iban: str) -> str | None:
    """German IBANs embed the 8-digit bank code (BLZ) after the check digits."""
    if is_iban(iban) and iban.startswith("DE") and len(iban) == 22:
        return iban[4:12]
    return None
