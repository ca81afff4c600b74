"""
Balance reconciler -- pure engine deriving and validating statement balances.

Given any two of {opening, closing, entries} it derives the third; given all
three it validates them. Every converter whose target has a different
balance cardinality than its source resolves balances through ``reconcile``.

Architecture: statement_engines -- pure calculation, zero I/O, no clock.

Invariants enforced:
    - opening.signed_amount + sum(entry.signed_amount) == closing.signed_amount
      at two decimals, unless validation is explicitly skipped.
    - Derived balances are credit when the signed value is >= 0, debit
      otherwise; the stored amount is always the absolute value.
    - One linear pass over the entries.

Failure modes:
    - MissingBalanceError: neither opening nor closing supplied.
    - BalanceMismatchError: all three supplied and inconsistent (carries the
      expected closing value).
    - CurrencyMismatchError: an entry or balance in another currency.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from statement_engines.tracer import traced_engine
from statement_kernel.domain.balance import Balance, BalanceKind
from statement_kernel.domain.entries import Movement
from statement_kernel.domain.values import AMOUNT_QUANTUM, Currency
from statement_kernel.exceptions import (
    BalanceMismatchError,
    CurrencyMismatchError,
    MissingBalanceError,
)
from statement_kernel.logging_config import get_logger

logger = get_logger("engines.reconciliation")


@dataclass(frozen=True, slots=True)
class ReconciledBalances:
    """Opening and closing balance after reconciliation."""

    opening: Balance
    closing: Balance

    @property
    def movement(self) -> Decimal:
        return self.closing.signed_amount - self.opening.signed_amount


@dataclass(frozen=True, slots=True)
class _EntrySummary:
    total: Decimal
    last_booking_date: date | None
    count: int


def _summarize(entries: Iterable[Movement], currency: Currency) -> _EntrySummary:
    total = Decimal("0.00")
    last_booking: date | None = None
    count = 0
    for entry in entries:
        if entry.currency != currency:
            raise CurrencyMismatchError(currency.code, entry.currency.code)
        total += entry.signed_amount
        last_booking = entry.booking_date
        count += 1
    return _EntrySummary(total=total.quantize(AMOUNT_QUANTUM), last_booking_date=last_booking, count=count)


@traced_engine("reconcile", "1.0", fingerprint_fields=("opening", "closing", "skip_validation"))
def reconcile(
    opening: Balance | None,
    closing: Balance | None,
    entries: Iterable[Movement] = (),
    *,
    skip_validation: bool = False,
    opening_kind: BalanceKind = BalanceKind.OPENING,
    closing_kind: BalanceKind = BalanceKind.CLOSING,
) -> ReconciledBalances:
    """
    Derive the missing balance or validate both.

    Preconditions:
        - At least one of ``opening`` / ``closing`` is given.

    Postconditions:
        - Opening only: closing = opening + signed sum, dated at the last
          entry's booking date (the opening date when there are no entries),
          tagged ``closing_kind``.
        - Closing only: opening = closing - signed sum, dated at the closing
          date, tagged ``opening_kind``.
        - Both: returned unchanged once validated (or uncompared when
          ``skip_validation`` is set).

    Raises:
        MissingBalanceError: neither balance given.
        BalanceMismatchError: both given, inconsistent, validation not skipped.
        CurrencyMismatchError: currencies differ.
    """
    if opening is None and closing is None:
        raise MissingBalanceError("reconcile")

    anchor = opening if opening is not None else closing
    if opening is not None and closing is not None and opening.currency != closing.currency:
        raise CurrencyMismatchError(opening.currency.code, closing.currency.code)

    if opening is not None and closing is not None and skip_validation:
        logger.debug(
            "balance_validation_skipped",
            extra={"opening": opening.signed_amount, "closing": closing.signed_amount},
        )
        return ReconciledBalances(opening=opening, closing=closing)

    summary = _summarize(entries, anchor.currency)

    if opening is not None and closing is not None:
        expected = (opening.signed_amount + summary.total).quantize(AMOUNT_QUANTUM)
        actual = closing.signed_amount.quantize(AMOUNT_QUANTUM)
        if expected != actual:
            logger.warning(
                "balance_mismatch",
                extra={
                    "expected": expected,
                    "actual": actual,
                    "currency": closing.currency.code,
                    "entry_count": summary.count,
                },
            )
            raise BalanceMismatchError(expected, actual, closing.currency.code)
        return ReconciledBalances(opening=opening, closing=closing)

    if opening is not None:
        derived = Balance.from_signed(
            opening.signed_amount + summary.total,
            date=summary.last_booking_date or opening.date,
            currency=opening.currency,
            kind=closing_kind,
        )
        logger.debug("closing_balance_derived", extra={"closing": derived.signed_amount})
        return ReconciledBalances(opening=opening, closing=derived)

    derived = Balance.from_signed(
        closing.signed_amount - summary.total,
        date=closing.date,
        currency=closing.currency,
        kind=opening_kind,
    )
    logger.debug("opening_balance_derived", extra={"opening": derived.signed_amount})
    return ReconciledBalances(opening=derived, closing=closing)


def signed_total(entries: Iterable[Movement], currency: Currency) -> Decimal:
    """Signed sum of ``entries`` in ``currency`` (credit adds, debit subtracts)."""
    return _summarize(entries, currency).total
