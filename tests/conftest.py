"""
Pytest fixtures for the statement kernel test suite.

Provides:
- Structured logging configured once per session, LogContext reset per test
- captured_logs: JSON log capture for asserting on emitted events
- Factory fixtures for balances, entries and a reference MT940 statement
"""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO

import pytest

from statement_kernel.domain import (
    Balance,
    BalanceKind,
    CreditDebit,
    Entry,
    Mt940Document,
    Reference,
)
from statement_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

STATEMENT_DATE = date(2025, 3, 31)
ACCOUNT_ID = "DE89370400440532013000"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture statement_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, sample_statement):
            convert(sample_statement, StatementFormat.CAMT053)
            logs = captured_logs()
            assert any(r["message"] == "conversion_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("statement_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Domain factories
# =============================================================================


@pytest.fixture
def make_balance():
    """Factory fixture: balance from a signed value."""

    def _make(
        signed: str | Decimal,
        kind: BalanceKind = BalanceKind.CLOSING,
        on: date = STATEMENT_DATE,
        currency: str = "EUR",
    ) -> Balance:
        return Balance.from_signed(Decimal(signed), date=on, currency=currency, kind=kind)

    return _make


@pytest.fixture
def make_entry():
    """Factory fixture: positional entry from a signed value."""

    def _make(
        signed: str | Decimal,
        purpose: str | None = None,
        on: date = STATEMENT_DATE,
        currency: str = "EUR",
        code: str = "TRF",
        customer_reference: str = "NONREF",
        bank_reference: str | None = None,
    ) -> Entry:
        value = Decimal(signed)
        return Entry(
            booking_date=on,
            value_date=on,
            amount=abs(value),
            direction=CreditDebit.for_signed(value),
            currency=currency,
            reference=Reference(code, customer_reference, bank_reference),
            purpose=purpose,
        )

    return _make


@pytest.fixture
def sample_entries(make_entry):
    """+500.00, -200.00, -50.00 with tagged purposes."""
    return (
        make_entry(
            "500.00",
            "EREF+E2E-001 NAME+ACME GmbH IBAN+DE44500105175407324931 SVWZ+Invoice 4711",
            customer_reference="INV4711",
            bank_reference="BANKREF1",
        ),
        make_entry(
            "-200.00",
            "EREF+E2E-002 MREF+MANDATE-7 CRED+DE98ZZZ09999999999 SVWZ+Direct debit March",
        ),
        make_entry("-50.00", "Card fee", code="CHG"),
    )


@pytest.fixture
def sample_statement(make_balance, sample_entries):
    """Opening 1000.00 credit, three entries, closing 1250.00 credit."""
    return Mt940Document(
        account_id=ACCOUNT_ID,
        reference_id="STMT-2025-001",
        statement_number="00001",
        opening_balance=make_balance("1000.00", BalanceKind.OPENING, on=date(2025, 3, 1)),
        closing_balance=make_balance("1250.00", BalanceKind.CLOSING),
        entries=sample_entries,
    )
