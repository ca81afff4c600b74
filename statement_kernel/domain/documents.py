"""
Documents -- one immutable record per statement format variant.

Responsibility:
    Plain data records for MT940, MT941, MT942, camt.052, camt.053,
    camt.054 and the fixed-width ledger. Each implements the
    ``StatementDocument`` capability protocol instead of sharing a base
    class: ``format``, ``opening_balance``, ``closing_balance``,
    ``has_opening_balance``, ``has_closing_balance`` and ``entries``.

Architecture position:
    Kernel > Domain -- pure, zero I/O. Converters construct these records
    in one step, so no partially built document is ever visible.

Invariants enforced:
    - Mandatory fields per variant are present (MissingRequiredFieldError).
    - Entries and balances share the document currency (CurrencyMismatchError).
    - When opening and closing are both present they reconcile with the
      entries (BalanceMismatchError) unless ``validate_balances=False``.
    - Entry sequences are stored as tuples.

Usage:
    doc = Mt940Document(
        account_id="DE89370400440532013000",
        reference_id="STMT-2025-001",
        statement_number="00001",
        opening_balance=opening,
        closing_balance=closing,
        entries=(entry1, entry2),
    )
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Protocol, runtime_checkable

from statement_kernel.domain.arithmetic import signed_total, verify_balances
from statement_kernel.domain.balance import Balance
from statement_kernel.domain.entries import (
    REFERENCE_MAX_LENGTH,
    Entry,
    LedgerEntry,
    Movement,
    ReportEntry,
)
from statement_kernel.domain.values import AMOUNT_QUANTUM, CreditDebit, Currency, is_iban
from statement_kernel.exceptions import (
    BalanceMismatchError,
    CurrencyMismatchError,
    MissingRequiredFieldError,
)


class StatementFormat(str, Enum):
    """Every format the conversion graph knows."""

    MT940 = "MT940"
    MT941 = "MT941"
    MT942 = "MT942"
    CAMT052 = "camt.052"
    CAMT053 = "camt.053"
    CAMT054 = "camt.054"
    LEDGER = "ledger"


@runtime_checkable
class StatementDocument(Protocol):
    """Capability every document variant offers to the reconciler and converters."""

    format: ClassVar[StatementFormat]

    @property
    def opening_balance(self) -> Balance | None: ...

    @property
    def closing_balance(self) -> Balance | None: ...

    @property
    def entries(self) -> Sequence[Movement]: ...

    @property
    def has_opening_balance(self) -> bool: ...

    @property
    def has_closing_balance(self) -> bool: ...


@dataclass(frozen=True, slots=True)
class StatementTotals:
    """Counts and sums of the debit and credit entries of a document."""

    currency: Currency
    credit_count: int
    credit_total: Decimal
    debit_count: int
    debit_total: Decimal

    @property
    def net_movement(self) -> Decimal:
        return self.credit_total - self.debit_total


def compute_totals(entries: Sequence[Movement], currency: Currency) -> StatementTotals:
    credit_count = debit_count = 0
    credit_total = debit_total = Decimal("0.00")
    for entry in entries:
        if entry.direction is CreditDebit.CREDIT:
            credit_count += 1
            credit_total += entry.amount
        else:
            debit_count += 1
            debit_total += entry.amount
    return StatementTotals(
        currency=currency,
        credit_count=credit_count,
        credit_total=credit_total.quantize(AMOUNT_QUANTUM),
        debit_count=debit_count,
        debit_total=debit_total.quantize(AMOUNT_QUANTUM),
    )


# ---------------------------------------------------------------------------
# Shared validation
# ---------------------------------------------------------------------------


def _require(doc: object, owner: str, *names: str) -> None:
    for name in names:
        value = getattr(doc, name)
        if value is None or value == "":
            raise MissingRequiredFieldError(name, owner)


def _freeze_entries(doc: object, entry_type: type, owner: str) -> None:
    entries = tuple(doc.entries)
    for entry in entries:
        if not isinstance(entry, entry_type):
            raise TypeError(
                f"{owner} entries must be {entry_type.__name__}, got {type(entry).__name__}"
            )
    object.__setattr__(doc, "entries", entries)


def _check_reference_id(doc: object, owner: str) -> None:
    if len(doc.reference_id) > REFERENCE_MAX_LENGTH:
        raise ValueError(
            f"{owner} reference_id exceeds {REFERENCE_MAX_LENGTH} characters: "
            f"{doc.reference_id!r}"
        )


def _check_currency(currency: Currency, balances: Sequence[Balance | None], entries: Sequence[Movement]) -> None:
    for balance in balances:
        if balance is not None and balance.currency != currency:
            raise CurrencyMismatchError(currency.code, balance.currency.code)
    signed_total(entries, currency)


def _check_balances(doc: object) -> None:
    if (
        doc.validate_balances
        and doc.opening_balance is not None
        and doc.closing_balance is not None
    ):
        verify_balances(doc.opening_balance, doc.closing_balance, doc.entries)


# ---------------------------------------------------------------------------
# Positional-text family
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Mt940Document:
    """
    MT940 final daily statement -- the hub of the conversion graph.

    Opening and closing balances are both mandatory.
    """

    format: ClassVar[StatementFormat] = StatementFormat.MT940

    account_id: str
    reference_id: str
    statement_number: str
    opening_balance: Balance
    closing_balance: Balance
    entries: tuple[Entry, ...] = ()
    closing_available_balance: Balance | None = None
    forward_available_balances: tuple[Balance, ...] = ()
    related_reference: str | None = None
    validate_balances: bool = field(default=True, repr=False, compare=False)

    def __post_init__(self) -> None:
        _require(
            self, "Mt940Document",
            "account_id", "reference_id", "statement_number",
            "opening_balance", "closing_balance",
        )
        _check_reference_id(self, "Mt940Document")
        _freeze_entries(self, Entry, "Mt940Document")
        object.__setattr__(self, "forward_available_balances", tuple(self.forward_available_balances))
        _check_currency(
            self.currency,
            (self.opening_balance, self.closing_available_balance, *self.forward_available_balances),
            self.entries,
        )
        _check_balances(self)

    @property
    def currency(self) -> Currency:
        return self.closing_balance.currency

    @property
    def has_opening_balance(self) -> bool:
        return True

    @property
    def has_closing_balance(self) -> bool:
        return True

    @property
    def totals(self) -> StatementTotals:
        return compute_totals(self.entries, self.currency)


@dataclass(frozen=True, slots=True)
class Mt941Document:
    """
    MT941 balance report -- balances and movement summary, no entries.

    When the opening balance is present, opening + credit_total -
    debit_total must equal the closing balance.
    """

    format: ClassVar[StatementFormat] = StatementFormat.MT941

    account_id: str
    reference_id: str
    statement_number: str
    closing_balance: Balance
    opening_balance: Balance | None = None
    closing_available_balance: Balance | None = None
    forward_available_balances: tuple[Balance, ...] = ()
    credit_count: int = 0
    credit_total: Decimal = Decimal("0.00")
    debit_count: int = 0
    debit_total: Decimal = Decimal("0.00")
    validate_balances: bool = field(default=True, repr=False, compare=False)

    def __post_init__(self) -> None:
        _require(self, "Mt941Document", "account_id", "reference_id", "statement_number", "closing_balance")
        _check_reference_id(self, "Mt941Document")
        object.__setattr__(self, "forward_available_balances", tuple(self.forward_available_balances))
        object.__setattr__(self, "credit_total", Decimal(self.credit_total).quantize(AMOUNT_QUANTUM))
        object.__setattr__(self, "debit_total", Decimal(self.debit_total).quantize(AMOUNT_QUANTUM))
        _check_currency(
            self.currency,
            (self.opening_balance, self.closing_available_balance, *self.forward_available_balances),
            (),
        )
        if self.validate_balances and self.opening_balance is not None:
            expected = self.opening_balance.signed_amount + self.credit_total - self.debit_total
            if expected != self.closing_balance.signed_amount:
                raise BalanceMismatchError(
                    expected.quantize(AMOUNT_QUANTUM),
                    self.closing_balance.signed_amount,
                    self.currency.code,
                )

    @property
    def entries(self) -> tuple[Entry, ...]:
        return ()

    @property
    def currency(self) -> Currency:
        return self.closing_balance.currency

    @property
    def has_opening_balance(self) -> bool:
        return self.opening_balance is not None

    @property
    def has_closing_balance(self) -> bool:
        return True

    @property
    def totals(self) -> StatementTotals:
        return StatementTotals(
            currency=self.currency,
            credit_count=self.credit_count,
            credit_total=self.credit_total,
            debit_count=self.debit_count,
            debit_total=self.debit_total,
        )


@dataclass(frozen=True, slots=True)
class Mt942Document:
    """MT942 interim transaction report. Opening balance is optional."""

    format: ClassVar[StatementFormat] = StatementFormat.MT942

    account_id: str
    reference_id: str
    statement_number: str
    closing_balance: Balance
    opening_balance: Balance | None = None
    entries: tuple[Entry, ...] = ()
    floor_limit: Decimal | None = None
    date_time_indication: datetime | None = None
    validate_balances: bool = field(default=True, repr=False, compare=False)

    def __post_init__(self) -> None:
        _require(self, "Mt942Document", "account_id", "reference_id", "statement_number", "closing_balance")
        _check_reference_id(self, "Mt942Document")
        _freeze_entries(self, Entry, "Mt942Document")
        _check_currency(self.currency, (self.opening_balance,), self.entries)
        _check_balances(self)

    @property
    def currency(self) -> Currency:
        return self.closing_balance.currency

    @property
    def has_opening_balance(self) -> bool:
        return self.opening_balance is not None

    @property
    def has_closing_balance(self) -> bool:
        return True

    @property
    def totals(self) -> StatementTotals:
        return compute_totals(self.entries, self.currency)


# ---------------------------------------------------------------------------
# Structured-elemental family
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Camt052Document:
    """
    camt.052 intraday account report. Both balances are optional.

    The closing balance carries CLAV; the separate available balance of the
    report (ITAV) maps to the MT940 closing available balance.
    """

    format: ClassVar[StatementFormat] = StatementFormat.CAMT052

    statement_id: str
    account_id: str
    currency: Currency
    message_id: str
    sequence_number: str | None = None
    creation_datetime: datetime | None = None
    servicer_bic: str | None = None
    account_owner: str | None = None
    opening_balance: Balance | None = None
    closing_balance: Balance | None = None
    entries: tuple[ReportEntry, ...] = ()
    closing_available_balance: Balance | None = None
    forward_available_balances: tuple[Balance, ...] = ()
    validate_balances: bool = field(default=True, repr=False, compare=False)

    def __post_init__(self) -> None:
        _require(self, "Camt052Document", "statement_id", "account_id", "currency", "message_id")
        object.__setattr__(self, "currency", Currency.coerce(self.currency))
        _freeze_entries(self, ReportEntry, "Camt052Document")
        object.__setattr__(self, "forward_available_balances", tuple(self.forward_available_balances))
        _check_currency(
            self.currency,
            (
                self.opening_balance,
                self.closing_balance,
                self.closing_available_balance,
                *self.forward_available_balances,
            ),
            self.entries,
        )
        _check_balances(self)

    @property
    def has_opening_balance(self) -> bool:
        return self.opening_balance is not None

    @property
    def has_closing_balance(self) -> bool:
        return self.closing_balance is not None

    @property
    def totals(self) -> StatementTotals:
        return compute_totals(self.entries, self.currency)


@dataclass(frozen=True, slots=True)
class Camt053Document:
    """camt.053 end-of-day bank statement. Both balances are optional."""

    format: ClassVar[StatementFormat] = StatementFormat.CAMT053

    statement_id: str
    account_id: str
    currency: Currency
    message_id: str
    sequence_number: str | None = None
    creation_datetime: datetime | None = None
    servicer_bic: str | None = None
    account_owner: str | None = None
    opening_balance: Balance | None = None
    closing_balance: Balance | None = None
    entries: tuple[ReportEntry, ...] = ()
    closing_available_balance: Balance | None = None
    forward_available_balances: tuple[Balance, ...] = ()
    validate_balances: bool = field(default=True, repr=False, compare=False)

    def __post_init__(self) -> None:
        _require(self, "Camt053Document", "statement_id", "account_id", "currency", "message_id")
        object.__setattr__(self, "currency", Currency.coerce(self.currency))
        _freeze_entries(self, ReportEntry, "Camt053Document")
        object.__setattr__(self, "forward_available_balances", tuple(self.forward_available_balances))
        _check_currency(
            self.currency,
            (
                self.opening_balance,
                self.closing_balance,
                self.closing_available_balance,
                *self.forward_available_balances,
            ),
            self.entries,
        )
        _check_balances(self)

    @property
    def has_opening_balance(self) -> bool:
        return self.opening_balance is not None

    @property
    def has_closing_balance(self) -> bool:
        return self.closing_balance is not None

    @property
    def totals(self) -> StatementTotals:
        return compute_totals(self.entries, self.currency)


@dataclass(frozen=True, slots=True)
class Camt054Document:
    """camt.054 debit/credit notification. Carries no balances."""

    format: ClassVar[StatementFormat] = StatementFormat.CAMT054

    notification_id: str
    account_id: str
    currency: Currency
    message_id: str
    creation_datetime: datetime | None = None
    servicer_bic: str | None = None
    account_owner: str | None = None
    entries: tuple[ReportEntry, ...] = ()

    def __post_init__(self) -> None:
        _require(self, "Camt054Document", "notification_id", "account_id", "currency", "message_id")
        object.__setattr__(self, "currency", Currency.coerce(self.currency))
        _freeze_entries(self, ReportEntry, "Camt054Document")
        _check_currency(self.currency, (), self.entries)

    @property
    def opening_balance(self) -> None:
        return None

    @property
    def closing_balance(self) -> None:
        return None

    @property
    def has_opening_balance(self) -> bool:
        return False

    @property
    def has_closing_balance(self) -> bool:
        return False

    @property
    def totals(self) -> StatementTotals:
        return compute_totals(self.entries, self.currency)


# ---------------------------------------------------------------------------
# Fixed-width ledger
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class LedgerDocument:
    """
    Ledger statement: the rows one bank account produces for one statement.

    The account is identified by bank code (BLZ or BIC) and account number
    (or IBAN). Ledger rows carry no balances.
    """

    format: ClassVar[StatementFormat] = StatementFormat.LEDGER

    bank_code: str
    account_number: str
    statement_number: str
    statement_date: date
    currency: Currency
    entries: tuple[LedgerEntry, ...] = ()

    def __post_init__(self) -> None:
        _require(self, "LedgerDocument", "account_number", "statement_date", "currency")
        if self.bank_code is None:
            object.__setattr__(self, "bank_code", "")
        if self.statement_number is None:
            object.__setattr__(self, "statement_number", "")
        object.__setattr__(self, "currency", Currency.coerce(self.currency))
        _freeze_entries(self, LedgerEntry, "LedgerDocument")
        _check_currency(self.currency, (), self.entries)

    @property
    def account_id(self) -> str:
        """IBAN on its own, otherwise ``bank code/account number``."""
        if self.bank_code and not is_iban(self.account_number):
            return f"{self.bank_code}/{self.account_number}"
        return self.account_number

    @property
    def opening_balance(self) -> None:
        return None

    @property
    def closing_balance(self) -> None:
        return None

    @property
    def has_opening_balance(self) -> bool:
        return False

    @property
    def has_closing_balance(self) -> bool:
        return False

    @property
    def totals(self) -> StatementTotals:
        return compute_totals(self.entries, self.currency)
