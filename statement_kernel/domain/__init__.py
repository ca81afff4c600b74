"""Statement domain: value objects, entries, documents and builders."""

from statement_kernel.domain.arithmetic import expected_closing, signed_total, verify_balances
from statement_kernel.domain.balance import Balance, BalanceKind
from statement_kernel.domain.builders import StatementBuilder
from statement_kernel.domain.documents import (
    Camt052Document,
    Camt053Document,
    Camt054Document,
    LedgerDocument,
    Mt940Document,
    Mt941Document,
    Mt942Document,
    StatementDocument,
    StatementFormat,
    StatementTotals,
    compute_totals,
)
from statement_kernel.domain.entries import (
    PURPOSE_MAX_LENGTH,
    REFERENCE_MAX_LENGTH,
    Counterparty,
    Entry,
    EntryReferences,
    LedgerEntry,
    Movement,
    Reference,
    ReportEntry,
)
from statement_kernel.domain.values import (
    CreditDebit,
    Currency,
    Money,
    bank_code_from_iban,
    is_bic,
    is_iban,
    to_amount,
)

__all__ = [
    "Balance",
    "BalanceKind",
    "Camt052Document",
    "Camt053Document",
    "Camt054Document",
    "Counterparty",
    "CreditDebit",
    "Currency",
    "Entry",
    "EntryReferences",
    "LedgerDocument",
    "LedgerEntry",
    "Money",
    "Movement",
    "Mt940Document",
    "Mt941Document",
    "Mt942Document",
    "PURPOSE_MAX_LENGTH",
    "REFERENCE_MAX_LENGTH",
    "Reference",
    "ReportEntry",
    "StatementBuilder",
    "StatementDocument",
    "StatementFormat",
    "StatementTotals",
    "bank_code_from_iban",
    "compute_totals",
    "expected_closing",
    "is_bic",
    "is_iban",
    "signed_total",
    "to_amount",
    "verify_balances",
]
