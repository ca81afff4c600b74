"""
Unit tests for document records.

Verifies:
- Mandatory fields per variant
- Balance invariant at construction (and the validate_balances opt-out)
- Currency consistency between balances and entries
- Capability flags and totals
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from statement_kernel.domain import (
    BalanceKind,
    Camt052Document,
    Camt053Document,
    Camt054Document,
    CreditDebit,
    Currency,
    LedgerDocument,
    LedgerEntry,
    Mt940Document,
    Mt941Document,
    Mt942Document,
    ReportEntry,
    StatementDocument,
    StatementFormat,
    compute_totals,
)
from statement_kernel.exceptions import (
    BalanceMismatchError,
    CurrencyMismatchError,
    MissingRequiredFieldError,
)


class TestMt940Document:
    """Hub document construction."""

    def test_sample_statement_is_consistent(self, sample_statement):
        assert sample_statement.format is StatementFormat.MT940
        assert sample_statement.has_opening_balance
        assert sample_statement.has_closing_balance
        assert len(sample_statement.entries) == 3
        assert isinstance(sample_statement.entries, tuple)

    def test_totals(self, sample_statement):
        totals = sample_statement.totals
        assert totals.credit_count == 1
        assert totals.credit_total == Decimal("500.00")
        assert totals.debit_count == 2
        assert totals.debit_total == Decimal("250.00")
        assert totals.net_movement == Decimal("250.00")

    def test_mismatch_rejected(self, make_balance, sample_entries):
        with pytest.raises(BalanceMismatchError) as exc_info:
            Mt940Document(
                account_id="ACC",
                reference_id="REF",
                statement_number="00001",
                opening_balance=make_balance("1000.00", BalanceKind.OPENING),
                closing_balance=make_balance("1200.00"),
                entries=sample_entries,
            )
        assert exc_info.value.expected == Decimal("1250.00")
        assert exc_info.value.actual == Decimal("1200.00")

    def test_mismatch_accepted_when_validation_skipped(self, make_balance, sample_entries):
        doc = Mt940Document(
            account_id="ACC",
            reference_id="REF",
            statement_number="00001",
            opening_balance=make_balance("1000.00", BalanceKind.OPENING),
            closing_balance=make_balance("1250.01"),
            entries=sample_entries,
            validate_balances=False,
        )
        assert doc.closing_balance.amount == Decimal("1250.01")

    def test_missing_opening_rejected(self, make_balance):
        with pytest.raises(MissingRequiredFieldError) as exc_info:
            Mt940Document(
                account_id="ACC",
                reference_id="REF",
                statement_number="00001",
                opening_balance=None,
                closing_balance=make_balance("0"),
            )
        assert exc_info.value.field == "opening_balance"

    def test_reference_id_limit(self, make_balance):
        with pytest.raises(ValueError, match="reference_id"):
            Mt940Document(
                account_id="ACC",
                reference_id="R" * 17,
                statement_number="00001",
                opening_balance=make_balance("0", BalanceKind.OPENING),
                closing_balance=make_balance("0"),
            )

    def test_entry_currency_mismatch_rejected(self, make_balance, make_entry):
        with pytest.raises(CurrencyMismatchError):
            Mt940Document(
                account_id="ACC",
                reference_id="REF",
                statement_number="00001",
                opening_balance=make_balance("0", BalanceKind.OPENING),
                closing_balance=make_balance("10"),
                entries=(make_entry("10", currency="USD"),),
            )

    def test_wrong_entry_shape_rejected(self, make_balance):
        entry = LedgerEntry(
            booking_date=date(2025, 1, 1),
            value_date=date(2025, 1, 1),
            amount=Decimal("10"),
            direction=CreditDebit.CREDIT,
            currency="EUR",
        )
        with pytest.raises(TypeError):
            Mt940Document(
                account_id="ACC",
                reference_id="REF",
                statement_number="00001",
                opening_balance=make_balance("0", BalanceKind.OPENING),
                closing_balance=make_balance("10"),
                entries=(entry,),
            )

    def test_empty_entries_require_equal_balances(self, make_balance):
        doc = Mt940Document(
            account_id="ACC",
            reference_id="REF",
            statement_number="00001",
            opening_balance=make_balance("-20", BalanceKind.OPENING),
            closing_balance=make_balance("-20"),
        )
        assert doc.entries == ()

    def test_satisfies_document_protocol(self, sample_statement):
        assert isinstance(sample_statement, StatementDocument)


class TestMt941Document:
    """Balance report construction."""

    def test_summary_must_reconcile(self, make_balance):
        with pytest.raises(BalanceMismatchError):
            Mt941Document(
                account_id="ACC",
                reference_id="REF",
                statement_number="00001",
                opening_balance=make_balance("100", BalanceKind.OPENING),
                closing_balance=make_balance("150"),
                credit_count=1,
                credit_total=Decimal("40"),
            )

    def test_opening_optional(self, make_balance):
        doc = Mt941Document(
            account_id="ACC",
            reference_id="REF",
            statement_number="00001",
            closing_balance=make_balance("150"),
        )
        assert not doc.has_opening_balance
        assert doc.entries == ()
        assert doc.totals.credit_total == Decimal("0.00")


class TestMt942Document:
    """Interim report construction."""

    def test_opening_optional(self, make_balance, make_entry):
        doc = Mt942Document(
            account_id="ACC",
            reference_id="REF",
            statement_number="00001",
            closing_balance=make_balance("10", BalanceKind.INTERIM_CLOSING),
            entries=(make_entry("10"),),
        )
        assert not doc.has_opening_balance
        assert doc.totals.net_movement == Decimal("10.00")


class TestCamtDocuments:
    """Structured-elemental documents."""

    def _entry(self, signed: str) -> ReportEntry:
        value = Decimal(signed)
        return ReportEntry(
            booking_date=date(2025, 3, 31),
            value_date=date(2025, 3, 31),
            amount=abs(value),
            direction=CreditDebit.for_signed(value),
            currency="EUR",
        )

    def test_camt053_balances_optional(self):
        doc = Camt053Document(
            statement_id="STMT-1",
            account_id="DE89370400440532013000",
            currency="EUR",
            message_id="MSG-1",
            entries=(self._entry("5"),),
        )
        assert not doc.has_opening_balance
        assert not doc.has_closing_balance

    def test_camt052_invariant(self, make_balance):
        with pytest.raises(BalanceMismatchError):
            Camt052Document(
                statement_id="RPT-1",
                account_id="ACC",
                currency="EUR",
                message_id="MSG-1",
                opening_balance=make_balance("0", BalanceKind.PREVIOUS_CLOSING),
                closing_balance=make_balance("6", BalanceKind.CLOSING_AVAILABLE),
                entries=(self._entry("5"),),
            )

    def test_camt053_balance_currency_checked(self, make_balance):
        with pytest.raises(CurrencyMismatchError):
            Camt053Document(
                statement_id="STMT-1",
                account_id="ACC",
                currency="EUR",
                message_id="MSG-1",
                closing_balance=make_balance("0", BalanceKind.CLOSING_BOOKED, currency="USD"),
            )

    def test_camt052_available_balance_currency_checked(self, make_balance):
        with pytest.raises(CurrencyMismatchError):
            Camt052Document(
                statement_id="RPT-1",
                account_id="ACC",
                currency="EUR",
                message_id="MSG-1",
                closing_available_balance=make_balance(
                    "0", BalanceKind.INTERIM_AVAILABLE, currency="USD"
                ),
            )

    def test_camt054_has_no_balances(self):
        doc = Camt054Document(
            notification_id="NTF-1",
            account_id="ACC",
            currency="EUR",
            message_id="MSG-1",
            creation_datetime=datetime(2025, 3, 31, 12, 0),
            entries=(self._entry("-5"),),
        )
        assert doc.opening_balance is None
        assert doc.closing_balance is None
        assert doc.totals.debit_total == Decimal("5.00")

    def test_missing_message_id_rejected(self):
        with pytest.raises(MissingRequiredFieldError):
            Camt054Document(notification_id="NTF-1", account_id="ACC", currency="EUR", message_id="")


class TestLedgerDocument:
    """Ledger statement records."""

    def test_account_id_with_bank_code(self):
        doc = LedgerDocument(
            bank_code="37040044",
            account_number="532013000",
            statement_number="1",
            statement_date=date(2025, 3, 31),
            currency="EUR",
        )
        assert doc.account_id == "37040044/532013000"

    def test_account_id_for_iban(self):
        doc = LedgerDocument(
            bank_code="37040044",
            account_number="DE89370400440532013000",
            statement_number="",
            statement_date=date(2025, 3, 31),
            currency="EUR",
        )
        assert doc.account_id == "DE89370400440532013000"

    def test_statement_date_required(self):
        with pytest.raises(MissingRequiredFieldError):
            LedgerDocument(
                bank_code="",
                account_number="ACC",
                statement_number="",
                statement_date=None,
                currency="EUR",
            )


class TestComputeTotals:
    """compute_totals over mixed entries."""

    def test_empty(self):
        totals = compute_totals((), Currency("EUR"))
        assert totals.credit_count == 0
        assert totals.debit_count == 0
        assert totals.net_movement == Decimal("0.00")
