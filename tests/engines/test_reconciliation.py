"""
Tests for the balance reconciler.

Covers:
- Both balances: consistent pass-through, mismatch error, skip opt-out
- Opening only: closing derived and dated at the last booking date
- Closing only: opening derived at the closing date
- Neither: MissingBalanceError
- Currency mismatches and the STATEMENT_ENGINE_TRACE record
"""

from datetime import date
from decimal import Decimal

import pytest

from statement_engines.reconciliation import reconcile, signed_total
from statement_kernel.domain import BalanceKind, CreditDebit, Currency
from statement_kernel.exceptions import (
    BalanceMismatchError,
    CurrencyMismatchError,
    MissingBalanceError,
)


class TestReconcileBothBalances:
    """Opening and closing both supplied."""

    def test_consistent_balances_pass_through(self, make_balance, sample_entries):
        opening = make_balance("1000.00", BalanceKind.OPENING)
        closing = make_balance("1250.00")
        result = reconcile(opening, closing, sample_entries)
        assert result.opening is opening
        assert result.closing is closing
        assert result.movement == Decimal("250.00")

    def test_mismatch_raises_with_expected_value(self, make_balance, sample_entries):
        with pytest.raises(BalanceMismatchError) as exc_info:
            reconcile(
                make_balance("1000.00", BalanceKind.OPENING),
                make_balance("1249.99"),
                sample_entries,
            )
        assert exc_info.value.expected == Decimal("1250.00")
        assert exc_info.value.actual == Decimal("1249.99")
        assert exc_info.value.code == "BALANCE_MISMATCH"

    def test_mismatch_logged(self, make_balance, sample_entries, captured_logs):
        with pytest.raises(BalanceMismatchError):
            reconcile(make_balance("0", BalanceKind.OPENING), make_balance("1"), sample_entries)
        warnings = [r for r in captured_logs() if r["message"] == "balance_mismatch"]
        assert len(warnings) == 1
        assert warnings[0]["level"] == "WARNING"
        assert warnings[0]["entry_count"] == 3

    def test_skip_validation_accepts_drift(self, make_balance, sample_entries):
        closing = make_balance("1250.01")
        result = reconcile(
            make_balance("1000.00", BalanceKind.OPENING), closing, sample_entries,
            skip_validation=True,
        )
        assert result.closing is closing

    def test_currency_mismatch(self, make_balance):
        with pytest.raises(CurrencyMismatchError):
            reconcile(
                make_balance("0", BalanceKind.OPENING, currency="EUR"),
                make_balance("0", currency="USD"),
            )


class TestReconcileDerivation:
    """One balance supplied, the other derived."""

    def test_closing_derived_from_opening(self, make_balance, make_entry):
        entries = (
            make_entry("500.00", on=date(2025, 3, 10)),
            make_entry("-200.00", on=date(2025, 3, 20)),
            make_entry("-50.00", on=date(2025, 3, 15)),
        )
        opening = make_balance("1000.00", BalanceKind.OPENING, on=date(2025, 3, 1))
        result = reconcile(opening, None, entries, closing_kind=BalanceKind.CLOSING_BOOKED)

        assert result.closing.signed_amount == Decimal("1250.00")
        assert result.closing.direction is CreditDebit.CREDIT
        # dated at the last entry in list order, not the latest booking date
        assert result.closing.date == date(2025, 3, 15)
        assert result.closing.kind is BalanceKind.CLOSING_BOOKED

    def test_closing_without_entries_keeps_opening_date(self, make_balance):
        opening = make_balance("10.00", BalanceKind.OPENING, on=date(2025, 3, 1))
        result = reconcile(opening, None, ())
        assert result.closing.date == date(2025, 3, 1)
        assert result.closing.same_value(opening)

    def test_opening_derived_from_closing(self, make_balance, sample_entries):
        closing = make_balance("1250.00", on=date(2025, 3, 31))
        result = reconcile(None, closing, sample_entries, opening_kind=BalanceKind.PREVIOUS_CLOSING)
        assert result.opening.signed_amount == Decimal("1000.00")
        assert result.opening.date == date(2025, 3, 31)
        assert result.opening.kind is BalanceKind.PREVIOUS_CLOSING

    def test_derived_balance_can_turn_debit(self, make_balance, make_entry):
        opening = make_balance("100.00", BalanceKind.OPENING)
        result = reconcile(opening, None, (make_entry("-150.00"),))
        assert result.closing.direction is CreditDebit.DEBIT
        assert result.closing.amount == Decimal("50.00")

    def test_entry_currency_checked(self, make_balance, make_entry):
        with pytest.raises(CurrencyMismatchError):
            reconcile(make_balance("0", BalanceKind.OPENING), None, (make_entry("5", currency="USD"),))

    def test_neither_balance(self, sample_entries):
        with pytest.raises(MissingBalanceError) as exc_info:
            reconcile(None, None, sample_entries)
        assert exc_info.value.code == "MISSING_BALANCE"


class TestReconcileTrace:
    """The reconciler is wrapped by the engine tracer."""

    def test_trace_emitted(self, make_balance, captured_logs):
        reconcile(make_balance("1", BalanceKind.OPENING), None, ())
        traces = [r for r in captured_logs() if r["message"] == "STATEMENT_ENGINE_TRACE"]
        assert len(traces) == 1
        assert traces[0]["engine_name"] == "reconcile"
        assert traces[0]["engine_version"] == "1.0"
        assert len(traces[0]["input_fingerprint"]) == 16

    def test_fingerprint_deterministic(self, make_balance, captured_logs):
        opening = make_balance("1", BalanceKind.OPENING)
        reconcile(opening, None, ())
        reconcile(opening, None, ())
        traces = [r for r in captured_logs() if r["message"] == "STATEMENT_ENGINE_TRACE"]
        assert traces[0]["input_fingerprint"] == traces[1]["input_fingerprint"]


class TestSignedTotal:
    """signed_total helper."""

    def test_sum(self, sample_entries):
        assert signed_total(sample_entries, Currency("EUR")) == Decimal("250.00")

    def test_empty(self):
        assert signed_total((), Currency("EUR")) == Decimal("0.00")
