"""
Entries -- posted movements for each statement family.

Responsibility:
    Defines the three entry shapes the formats carry:

    * ``Entry``        -- positional-text line (MT940 ``:61:`` + ``:86:``),
      identified by a ``Reference`` and a free-text purpose.
    * ``ReportEntry``  -- structured-elemental entry (camt ``Ntry``) with
      discrete end-to-end / mandate / creditor / instruction identifiers.
    * ``LedgerEntry``  -- fixed-width ledger row content (payer fields,
      purpose text, booking text).

    All three implement the ``Movement`` protocol so the reconciler and the
    totals helpers never care which family an entry came from.

Architecture position:
    Kernel > Domain -- pure, zero I/O. Depends only on ``values`` and the
    exception hierarchy.

Invariants enforced:
    - amount >= 0 at two decimals, sign in ``direction``.
    - Reference: len(transaction_code) + len(customer_reference) <= 16.
    - Positional purpose text is at most 6 lines of 65 characters.

Failure modes:
    - MissingRequiredFieldError for absent dates, codes or references.
    - ReferenceLengthError for over-long positional references.
    - ValueError for negative amounts, bad currency codes, over-long purpose.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Protocol, runtime_checkable

from statement_kernel.domain.values import CreditDebit, Currency, Money, to_unsigned_amount
from statement_kernel.exceptions import MissingRequiredFieldError, ReferenceLengthError

REFERENCE_MAX_LENGTH = 16
TRANSACTION_CODE_LENGTH = 3
PURPOSE_MAX_LENGTH = 390  # 6 lines x 65 characters


@runtime_checkable
class Movement(Protocol):
    """Capability shared by every entry shape."""

    @property
    def booking_date(self) -> date: ...

    @property
    def amount(self) -> Decimal: ...

    @property
    def direction(self) -> CreditDebit: ...

    @property
    def currency(self) -> Currency: ...

    @property
    def signed_amount(self) -> Decimal: ...


def _normalize_core(entry: object, owner: str) -> None:
    """Validate and normalise the fields every entry shape shares."""
    for name in ("booking_date", "value_date", "amount", "direction", "currency"):
        if getattr(entry, name) is None:
            raise MissingRequiredFieldError(name, owner)
    object.__setattr__(entry, "amount", to_unsigned_amount(entry.amount))
    object.__setattr__(entry, "direction", CreditDebit(entry.direction))
    object.__setattr__(entry, "currency", Currency.coerce(entry.currency))
    for name in ("original_amount", "equivalent_amount", "fee_amount"):
        extra = getattr(entry, name)
        if extra is not None and not isinstance(extra, Money):
            raise TypeError(f"{owner}.{name} must be Money, got {type(extra)}")


@dataclass(frozen=True, slots=True)
class Reference:
    """
    Positional-text transaction reference.

    Contract:
        ``transaction_code`` is the three-character type identification
        (``TRF``, ``CHK``, a three-digit GVC, ...); ``customer_reference`` is
        the account owner's reference (``NONREF`` when none); the optional
        ``bank_reference`` is the servicing institution's reference.

    Raises:
        MissingRequiredFieldError: empty code or customer reference.
        ReferenceLengthError: code + customer reference longer than 16.
    """

    transaction_code: str
    customer_reference: str
    bank_reference: str | None = None

    def __post_init__(self) -> None:
        if not self.transaction_code:
            raise MissingRequiredFieldError("transaction_code", "Reference")
        if not self.customer_reference:
            raise MissingRequiredFieldError("customer_reference", "Reference")
        if len(self.transaction_code) != TRANSACTION_CODE_LENGTH:
            raise ValueError(
                f"Transaction code must be {TRANSACTION_CODE_LENGTH} characters, "
                f"got {self.transaction_code!r}"
            )
        if len(self.transaction_code) + len(self.customer_reference) > REFERENCE_MAX_LENGTH:
            raise ReferenceLengthError(
                self.transaction_code, self.customer_reference, REFERENCE_MAX_LENGTH
            )
        if self.bank_reference == "":
            object.__setattr__(self, "bank_reference", None)

    @property
    def customer_reference_capacity(self) -> int:
        return REFERENCE_MAX_LENGTH - len(self.transaction_code)


@dataclass(frozen=True, slots=True)
class Entry:
    """
    Positional-text entry (one ``:61:`` line with its ``:86:`` purpose).

    Immutable once constructed; owned by exactly one document.
    """

    booking_date: date
    value_date: date
    amount: Decimal
    direction: CreditDebit
    currency: Currency
    reference: Reference
    purpose: str | None = None
    is_reversal: bool = False
    original_amount: Money | None = None
    equivalent_amount: Money | None = None
    fee_amount: Money | None = None

    def __post_init__(self) -> None:
        _normalize_core(self, "Entry")
        if self.reference is None:
            raise MissingRequiredFieldError("reference", "Entry")
        if self.purpose is not None and len(self.purpose) > PURPOSE_MAX_LENGTH:
            raise ValueError(
                f"Entry purpose exceeds {PURPOSE_MAX_LENGTH} characters "
                f"({len(self.purpose)})"
            )

    @property
    def signed_amount(self) -> Decimal:
        return self.amount * self.direction.sign


@dataclass(frozen=True, slots=True)
class EntryReferences:
    """Discrete payment identifiers carried by a structured-elemental entry."""

    end_to_end_id: str | None = None
    mandate_id: str | None = None
    creditor_id: str | None = None
    instruction_id: str | None = None
    payment_information_id: str | None = None


@dataclass(frozen=True, slots=True)
class Counterparty:
    """Other party of a movement (debtor for credits, creditor for debits)."""

    name: str | None = None
    iban: str | None = None
    bic: str | None = None

    @property
    def is_empty(self) -> bool:
        return not (self.name or self.iban or self.bic)


@dataclass(frozen=True, slots=True)
class ReportEntry:
    """
    Structured-elemental entry (camt.052/053/054 ``Ntry``).

    ``transaction_code`` is the four-letter bank transaction code
    (``NTRF``, ``NCHK``, ...). ``status`` is ``BOOK`` for booked entries.
    """

    booking_date: date
    value_date: date
    amount: Decimal
    direction: CreditDebit
    currency: Currency
    references: EntryReferences = EntryReferences()
    entry_reference: str | None = None
    account_servicer_reference: str | None = None
    remittance: str | None = None
    counterparty: Counterparty = Counterparty()
    transaction_code: str = "NTRF"
    status: str = "BOOK"
    is_reversal: bool = False
    additional_info: str | None = None
    original_amount: Money | None = None
    equivalent_amount: Money | None = None
    fee_amount: Money | None = None

    def __post_init__(self) -> None:
        _normalize_core(self, "ReportEntry")
        if not self.transaction_code:
            raise MissingRequiredFieldError("transaction_code", "ReportEntry")

    @property
    def signed_amount(self) -> Decimal:
        return self.amount * self.direction.sign


@dataclass(frozen=True, slots=True)
class LedgerEntry:
    """
    Ledger row content before fixed-width encoding.

    ``purpose`` and ``payer_name`` are whole texts here; the ledger codec
    chunks them into 27-character blocks.
    """

    booking_date: date
    value_date: date
    amount: Decimal
    direction: CreditDebit
    currency: Currency
    payer_name: str | None = None
    payer_bank_code: str | None = None
    payer_account: str | None = None
    purpose: str | None = None
    transaction_code: str = "TRF"
    booking_text: str | None = None
    original_amount: Money | None = None
    equivalent_amount: Money | None = None
    fee_amount: Money | None = None

    def __post_init__(self) -> None:
        _normalize_core(self, "LedgerEntry")
        if not self.transaction_code:
            raise MissingRequiredFieldError("transaction_code", "LedgerEntry")

    @property
    def signed_amount(self) -> Decimal:
        return self.amount * self.direction.sign
