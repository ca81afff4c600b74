"""
Conversion table schema.

Frozen dataclasses the loader parses the packaged YAML tables into. The
tables are pure lookup data -- no executable logic -- and are shared
read-only by every conversion.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from statement_kernel.domain.balance import BalanceKind
from statement_kernel.domain.documents import StatementFormat

# ---------------------------------------------------------------------------
# Balance kinds
# ---------------------------------------------------------------------------


class BalanceRole(str, Enum):
    """Position a balance takes inside a document."""

    OPENING = "opening"
    CLOSING = "closing"
    AVAILABLE = "available"
    FORWARD = "forward"


@dataclass(frozen=True)
class BalanceKindTable:
    """Per-format role tags plus per-pair tag translations."""

    roles: Mapping[StatementFormat, Mapping[BalanceRole, BalanceKind]]
    pairs: Mapping[tuple[StatementFormat, StatementFormat], Mapping[BalanceKind, BalanceKind]]

    def role_kind(self, fmt: StatementFormat, role: BalanceRole) -> BalanceKind:
        """
        Tag ``fmt`` assigns to ``role``.

        Raises:
            KeyError: the format has no balance in that role.
        """
        return self.roles[fmt][role]

    def kind_for(
        self,
        source: StatementFormat,
        target: StatementFormat,
        role: BalanceRole,
        source_kind: BalanceKind | None = None,
    ) -> BalanceKind:
        """Translate ``source_kind`` for the pair, falling back to the target's role tag."""
        if source_kind is not None:
            translated = self.pairs.get((source, target), {}).get(source_kind)
            if translated is not None:
                return translated
        return self.role_kind(target, role)


# ---------------------------------------------------------------------------
# Transaction codes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TransactionCodeTable:
    """Three-character positional codes vs four-letter ISO bank transaction codes."""

    positional_to_elemental: Mapping[str, str]
    elemental_to_positional: Mapping[str, str]
    default_positional: str
    default_elemental: str

    def to_elemental(self, code: str | None) -> str:
        if not code:
            return self.default_elemental
        return self.positional_to_elemental.get(code.upper(), self.default_elemental)

    def to_positional(self, code: str | None) -> str:
        if not code:
            return self.default_positional
        return self.elemental_to_positional.get(code.upper(), self.default_positional)


# ---------------------------------------------------------------------------
# Ledger layout
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LedgerField:
    """One position of a ledger row."""

    position: int
    name: str
    max_length: int
    required: bool = False
    quoted: bool = True


@dataclass(frozen=True)
class LedgerLayout:
    """Ordered field table of a ledger row."""

    fields: tuple[LedgerField, ...]

    @property
    def field_count(self) -> int:
        return len(self.fields)

    def field(self, name: str) -> LedgerField:
        for candidate in self.fields:
            if candidate.name == name:
                return candidate
        raise KeyError(name)

    def index(self, name: str) -> int:
        """Zero-based column index of ``name``."""
        return self.field(name).position - 1

    def group(self, prefix: str) -> tuple[LedgerField, ...]:
        """Fields named ``<prefix>_<n>`` ordered by n (purpose_1 .. purpose_14)."""
        members = [
            f for f in self.fields
            if f.name.startswith(f"{prefix}_") and f.name[len(prefix) + 1:].isdigit()
        ]
        return tuple(sorted(members, key=lambda f: int(f.name[len(prefix) + 1:])))

    @property
    def required_fields(self) -> tuple[LedgerField, ...]:
        return tuple(f for f in self.fields if f.required)


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ConversionDefaults:
    """Deterministic defaults for fields a target requires and a source lacks."""

    statement_number: str
    customer_reference: str
    missing_end_to_end_id: str
    camt_reference_fallback: str
    ledger_reference_prefix: str
    ledger_reference_fallback: str
    message_id_prefix: str
    message_id_max_length: int
    ledger_block_length: int
    ledger_two_digit_year_pivot: int
    ledger_currency: str


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ConversionTables:
    """Everything the converters and the ledger codec look up."""

    balance_kinds: BalanceKindTable
    transaction_codes: TransactionCodeTable
    ledger_layout: LedgerLayout
    defaults: ConversionDefaults
    checksum: str
