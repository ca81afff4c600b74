"""
Balance -- statement balance value object and its kind tags.

Responsibility:
    A Balance is an unsigned amount with a CreditDebit direction, a date,
    a currency and a kind tag. The kind tag records which field of which
    format family the balance belongs to (MT ``:60F:`` vs camt ``PRCD``).

Architecture position:
    Kernel > Domain -- pure, zero I/O.

Invariants enforced:
    - amount >= 0 with exactly two fractional digits; the sign lives in
      ``direction``.
    - signed_amount == amount for credit, -amount for debit.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from enum import Enum

from statement_kernel.domain.values import CreditDebit, Currency, to_amount, to_unsigned_amount


class BalanceKind(str, Enum):
    """Balance kind tags for both format families."""

    # Positional-text family (SWIFT field tags)
    OPENING = "60F"
    INTERIM_OPENING = "60M"
    CLOSING = "62F"
    INTERIM_CLOSING = "62M"
    AVAILABLE = "64"
    FORWARD = "65"

    # Structured-elemental family (ISO 20022 balance type codes)
    OPENING_BOOKED = "OPBD"
    PREVIOUS_CLOSING = "PRCD"
    CLOSING_BOOKED = "CLBD"
    CLOSING_AVAILABLE = "CLAV"
    FORWARD_AVAILABLE = "FWAV"
    INTERIM_BOOKED = "ITBD"
    INTERIM_AVAILABLE = "ITAV"

    @property
    def is_opening(self) -> bool:
        return self in _OPENING_KINDS

    @property
    def is_closing(self) -> bool:
        return self in _CLOSING_KINDS


_OPENING_KINDS = frozenset({
    BalanceKind.OPENING,
    BalanceKind.INTERIM_OPENING,
    BalanceKind.OPENING_BOOKED,
    BalanceKind.PREVIOUS_CLOSING,
})

_CLOSING_KINDS = frozenset({
    BalanceKind.CLOSING,
    BalanceKind.INTERIM_CLOSING,
    BalanceKind.CLOSING_BOOKED,
    BalanceKind.CLOSING_AVAILABLE,
    BalanceKind.INTERIM_BOOKED,
})


@dataclass(frozen=True, slots=True)
class Balance:
    """
    Account balance at a point in a statement period.

    Guarantees:
        - Immutable and hashable
        - amount is a non-negative two-decimal Decimal
        - currency is a validated Currency
    """

    direction: CreditDebit
    date: date
    currency: Currency
    amount: Decimal
    kind: BalanceKind = BalanceKind.CLOSING

    def __post_init__(self) -> None:
        object.__setattr__(self, "direction", CreditDebit(self.direction))
        object.__setattr__(self, "currency", Currency.coerce(self.currency))
        object.__setattr__(self, "amount", to_unsigned_amount(self.amount))
        object.__setattr__(self, "kind", BalanceKind(self.kind))

    @classmethod
    def from_signed(
        cls,
        value: Decimal | str | int,
        *,
        date: date,
        currency: str | Currency,
        kind: BalanceKind,
    ) -> Balance:
        """
        Build a balance from a signed value.

        Postconditions:
            - direction is CREDIT when value >= 0, else DEBIT.
            - amount is abs(value) at two decimals.
        """
        signed = to_amount(value)
        return cls(
            direction=CreditDebit.for_signed(signed),
            date=date,
            currency=Currency.coerce(currency),
            amount=abs(signed),
            kind=kind,
        )

    @property
    def signed_amount(self) -> Decimal:
        return self.amount * self.direction.sign

    def with_kind(self, kind: BalanceKind) -> Balance:
        """Return a copy carrying another kind tag."""
        if kind is self.kind:
            return self
        return replace(self, kind=kind)

    def same_value(self, other: Balance) -> bool:
        """True when both balances carry the same signed amount and currency."""
        return self.currency == other.currency and self.signed_amount == other.signed_amount
