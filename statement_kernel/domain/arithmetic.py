"""
Balance arithmetic shared by documents and the reconciler.

Kept in the kernel so that document construction can enforce
``opening + sum(entries) == closing`` without importing the engines layer.
Both helpers make a single pass over the entry sequence.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from statement_kernel.domain.balance import Balance
from statement_kernel.domain.entries import Movement
from statement_kernel.domain.values import AMOUNT_QUANTUM, Currency
from statement_kernel.exceptions import BalanceMismatchError, CurrencyMismatchError


def signed_total(entries: Iterable[Movement], currency: Currency | None = None) -> Decimal:
    """
    Sum of signed entry amounts (credit adds, debit subtracts).

    Raises:
        CurrencyMismatchError: if ``currency`` is given and an entry differs.
    """
    total = Decimal("0.00")
    for entry in entries:
        if currency is not None and entry.currency != currency:
            raise CurrencyMismatchError(currency.code, entry.currency.code)
        total += entry.signed_amount
    return total.quantize(AMOUNT_QUANTUM)


def expected_closing(opening: Balance, entries: Iterable[Movement]) -> Decimal:
    """Signed closing value implied by ``opening`` and ``entries``."""
    return (opening.signed_amount + signed_total(entries, opening.currency)).quantize(
        AMOUNT_QUANTUM
    )


def verify_balances(opening: Balance, closing: Balance, entries: Iterable[Movement]) -> Decimal:
    """
    Check that opening plus entries equals closing at two decimals.

    Returns:
        The expected signed closing value.

    Raises:
        CurrencyMismatchError: opening/closing/entry currencies differ.
        BalanceMismatchError: carrying the expected and the supplied value.
    """
    if opening.currency != closing.currency:
        raise CurrencyMismatchError(opening.currency.code, closing.currency.code)
    expected = expected_closing(opening, entries)
    actual = closing.signed_amount.quantize(AMOUNT_QUANTUM)
    if expected != actual:
        raise BalanceMismatchError(expected, actual, closing.currency.code)
    return expected
