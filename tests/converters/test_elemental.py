"""
Tests for the hub <-> camt.052/053/054 converters.

Covers balance-kind translation (PRCD/CLBD, CLAV), identifier
extraction into discrete fields and back, options-driven metadata and
the balance fallbacks of the balance-less sources.
"""

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal

import pytest

from statement_converters import (
    ConversionOptions,
    convert_camt052_to_mt940,
    convert_camt053_to_mt940,
    convert_camt054_to_mt940,
    convert_mt940_to_camt052,
    convert_mt940_to_camt053,
    convert_mt940_to_camt054,
)
from statement_kernel.domain import (
    BalanceKind,
    Camt052Document,
    Camt053Document,
    Camt054Document,
    CreditDebit,
    EntryReferences,
    ReportEntry,
)
from statement_kernel.exceptions import BalanceMismatchError, MissingBalanceError


def _report_entry(signed: str, on: date = date(2025, 3, 31), **fields) -> ReportEntry:
    value = Decimal(signed)
    return ReportEntry(
        booking_date=on,
        value_date=on,
        amount=abs(value),
        direction=CreditDebit.for_signed(value),
        currency="EUR",
        **fields,
    )


# =============================================================================
# camt.053
# =============================================================================


class TestMt940ToCamt053:
    """Statement -> end-of-day bank statement."""

    def test_balance_kinds(self, sample_statement):
        camt = convert_mt940_to_camt053(sample_statement)
        assert camt.opening_balance.kind is BalanceKind.PREVIOUS_CLOSING
        assert camt.closing_balance.kind is BalanceKind.CLOSING_BOOKED
        assert camt.opening_balance.signed_amount == Decimal("1000.00")
        assert camt.closing_balance.signed_amount == Decimal("1250.00")

    def test_header(self, sample_statement):
        camt = convert_mt940_to_camt053(sample_statement)
        assert camt.statement_id == "STMT-2025-001"
        assert camt.message_id == "MT940-STMT-2025-001"
        assert camt.sequence_number == "00001"
        assert camt.account_id == sample_statement.account_id
        assert camt.currency.code == "EUR"
        assert camt.servicer_bic is None
        assert camt.creation_datetime is None

    def test_options_override_header(self, sample_statement):
        stamp = datetime(2025, 4, 1, 6, 0)
        options = ConversionOptions(message_id="MSG-42", creation_datetime=stamp)
        camt = convert_mt940_to_camt053(sample_statement, options)
        assert camt.message_id == "MSG-42"
        assert camt.creation_datetime == stamp

    def test_servicer_bic_from_account_id(self, sample_statement):
        statement = replace(sample_statement, account_id="COBADEFFXXX/1234567")
        assert convert_mt940_to_camt053(statement).servicer_bic == "COBADEFFXXX"

    def test_tags_become_identifiers(self, sample_statement):
        first, second, third = convert_mt940_to_camt053(sample_statement).entries
        assert first.references.end_to_end_id == "E2E-001"
        assert first.counterparty.name == "ACME GmbH"
        assert first.counterparty.iban == "DE44500105175407324931"
        assert first.remittance == "Invoice 4711"
        assert first.entry_reference == "INV4711"
        assert first.account_servicer_reference == "BANKREF1"
        assert first.transaction_code == "NTRF"

        assert second.references.mandate_id == "MANDATE-7"
        assert second.references.creditor_id == "DE98ZZZ09999999999"
        assert second.direction is CreditDebit.DEBIT

        assert third.remittance == "Card fee"
        assert third.transaction_code == "NCHG"

    def test_available_balance_translated(self, sample_statement, make_balance):
        statement = replace(
            sample_statement,
            closing_available_balance=make_balance("1250.00", BalanceKind.AVAILABLE),
        )
        camt = convert_mt940_to_camt053(statement)
        assert camt.closing_available_balance.kind is BalanceKind.CLOSING_AVAILABLE


class TestCamt053ToMt940:
    """End-of-day bank statement -> statement."""

    def test_round_trip_is_identity(self, sample_statement):
        assert convert_camt053_to_mt940(convert_mt940_to_camt053(sample_statement)) == sample_statement

    def test_missing_opening_derived(self, sample_statement):
        camt = replace(convert_mt940_to_camt053(sample_statement), opening_balance=None)
        statement = convert_camt053_to_mt940(camt)
        assert statement.opening_balance.signed_amount == Decimal("1000.00")
        assert statement.opening_balance.kind is BalanceKind.OPENING

    def test_missing_closing_derived(self, sample_statement):
        camt = replace(convert_mt940_to_camt053(sample_statement), closing_balance=None)
        statement = convert_camt053_to_mt940(camt)
        assert statement.closing_balance.signed_amount == Decimal("1250.00")
        assert statement.closing_balance.kind is BalanceKind.CLOSING

    def test_no_balances_raises(self):
        camt = Camt053Document(
            statement_id="S1",
            account_id="ACC",
            currency="EUR",
            message_id="M1",
            entries=(_report_entry("10.00"),),
        )
        with pytest.raises(MissingBalanceError):
            convert_camt053_to_mt940(camt)

    def test_options_supply_balance(self, make_balance):
        camt = Camt053Document(
            statement_id="S1",
            account_id="ACC",
            currency="EUR",
            message_id="M1",
            entries=(_report_entry("10.00"),),
        )
        options = ConversionOptions(opening_balance=make_balance("90.00", BalanceKind.OPENING))
        statement = convert_camt053_to_mt940(camt, options)
        assert statement.closing_balance.signed_amount == Decimal("100.00")

    def test_defaults_fill_positional_fields(self, make_balance):
        camt = Camt053Document(
            statement_id="@@@",
            account_id="ACC",
            currency="EUR",
            message_id="M1",
            closing_balance=make_balance("10.00", BalanceKind.CLOSING_BOOKED),
            entries=(_report_entry("10.00", remittance="Rent"),),
        )
        statement = convert_camt053_to_mt940(camt)
        assert statement.reference_id == "CAMT-REF"
        assert statement.statement_number == "00001"
        entry = statement.entries[0]
        assert entry.reference.transaction_code == "TRF"
        assert entry.reference.customer_reference == "NOTPROVIDED"
        assert entry.purpose == "Rent"

    def test_end_to_end_id_used_as_customer_reference(self, make_balance):
        camt = Camt053Document(
            statement_id="S1",
            account_id="ACC",
            currency="EUR",
            message_id="M1",
            closing_balance=make_balance("10.00", BalanceKind.CLOSING_BOOKED),
            entries=(_report_entry("10.00", references=EntryReferences(end_to_end_id="E2E-9")),),
        )
        entry = convert_camt053_to_mt940(camt).entries[0]
        assert entry.reference.customer_reference == "E2E-9"
        assert entry.purpose == "EREF+E2E-9"

    def test_mismatch_raises_unless_skipped(self, sample_statement, make_balance):
        camt = replace(
            convert_mt940_to_camt053(sample_statement),
            closing_balance=make_balance("999.00", BalanceKind.CLOSING_BOOKED),
            validate_balances=False,
        )
        with pytest.raises(BalanceMismatchError):
            convert_camt053_to_mt940(camt)
        statement = convert_camt053_to_mt940(camt, ConversionOptions(skip_balance_validation=True))
        assert statement.closing_balance.signed_amount == Decimal("999.00")


# =============================================================================
# camt.052
# =============================================================================


class TestCamt052:
    """Statement <-> intraday account report."""

    def test_closing_becomes_available(self, sample_statement):
        camt = convert_mt940_to_camt052(sample_statement)
        assert isinstance(camt, Camt052Document)
        assert camt.opening_balance.kind is BalanceKind.PREVIOUS_CLOSING
        assert camt.closing_balance.kind is BalanceKind.CLOSING_AVAILABLE

    def test_round_trip_is_identity(self, sample_statement):
        assert convert_camt052_to_mt940(convert_mt940_to_camt052(sample_statement)) == sample_statement

    def test_available_balance_round_trip(self, sample_statement, make_balance):
        statement = replace(
            sample_statement,
            closing_available_balance=make_balance("1200.00", BalanceKind.AVAILABLE),
        )
        camt = convert_mt940_to_camt052(statement)
        assert camt.closing_available_balance.kind is BalanceKind.INTERIM_AVAILABLE
        assert camt.closing_available_balance.signed_amount == Decimal("1200.00")
        assert camt.closing_balance.kind is BalanceKind.CLOSING_AVAILABLE
        assert convert_camt052_to_mt940(camt) == statement

    def test_available_balance_never_takes_closing_tag(self, sample_statement, make_balance):
        camt = replace(
            convert_mt940_to_camt052(sample_statement),
            closing_available_balance=make_balance("1200.00", BalanceKind.CLOSING_AVAILABLE),
        )
        statement = convert_camt052_to_mt940(camt)
        assert statement.closing_available_balance.kind is BalanceKind.AVAILABLE
        assert statement.closing_balance.kind is BalanceKind.CLOSING

    def test_scenario_balances_through_both_reports(self, sample_statement):
        for forward, back in (
            (convert_mt940_to_camt053, convert_camt053_to_mt940),
            (convert_mt940_to_camt052, convert_camt052_to_mt940),
        ):
            statement = back(forward(sample_statement))
            assert statement.opening_balance.signed_amount == Decimal("1000.00")
            assert statement.closing_balance.signed_amount == Decimal("1250.00")
            assert [e.signed_amount for e in statement.entries] == [
                Decimal("500.00"), Decimal("-200.00"), Decimal("-50.00"),
            ]


# =============================================================================
# camt.054
# =============================================================================


class TestCamt054:
    """Statement <-> debit/credit notification."""

    def test_balances_dropped(self, sample_statement):
        notification = convert_mt940_to_camt054(sample_statement)
        assert isinstance(notification, Camt054Document)
        assert notification.notification_id == "STMT-2025-001"
        assert notification.has_opening_balance is False
        assert len(notification.entries) == 3

    def test_zero_opening_without_options(self, sample_statement):
        statement = convert_camt054_to_mt940(convert_mt940_to_camt054(sample_statement))
        assert statement.opening_balance.signed_amount == Decimal("0.00")
        assert statement.opening_balance.direction is CreditDebit.CREDIT
        assert statement.opening_balance.date == date(2025, 3, 31)
        assert statement.closing_balance.signed_amount == Decimal("250.00")
        assert statement.statement_number == "00001"
        assert statement.reference_id == "STMT-2025-001"

    def test_options_opening_restores_statement(self, sample_statement):
        options = ConversionOptions(opening_balance=sample_statement.opening_balance)
        statement = convert_camt054_to_mt940(convert_mt940_to_camt054(sample_statement), options)
        assert statement == sample_statement

    def test_empty_notification_uses_creation_date(self):
        notification = Camt054Document(
            notification_id="N1",
            account_id="ACC",
            currency="EUR",
            message_id="M1",
            creation_datetime=datetime(2025, 3, 15, 9, 0),
        )
        statement = convert_camt054_to_mt940(notification)
        assert statement.opening_balance.date == date(2025, 3, 15)
        assert statement.closing_balance.signed_amount == Decimal("0.00")

    def test_empty_notification_without_any_date(self):
        notification = Camt054Document(
            notification_id="N1", account_id="ACC", currency="EUR", message_id="M1",
        )
        with pytest.raises(MissingBalanceError):
            convert_camt054_to_mt940(notification)
