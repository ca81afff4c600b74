"""
Statement Engines -- pure functions shared by all converters.

All engines are pure: no I/O, no clock, no mutable module state.
They can be called independently of the converters.

Engines:
    - reconcile: derive or validate opening/closing balances
    - extract_tags / format_tags: tagged identifiers in remittance text
    - parse_structured_purpose / format_structured_purpose: ``:86:`` sub-fields
    - ledger codec: fixed-width ledger rows
"""

from statement_engines.ledger_codec import (
    LedgerRowHeader,
    OverflowStrategy,
    chunk_text,
    decode_row,
    decode_rows,
    encode_document,
    encode_entry,
    format_amount,
    format_date,
    format_line,
    join_blocks,
    parse_amount,
    parse_date,
    parse_line,
)
from statement_engines.reconciliation import ReconciledBalances, reconcile, signed_total
from statement_engines.references import RemittanceTags, extract_tags, format_tags
from statement_engines.structured_purpose import (
    StructuredPurpose,
    format_structured_purpose,
    parse_structured_purpose,
)
from statement_engines.tracer import traced_engine

__all__ = [
    "LedgerRowHeader",
    "OverflowStrategy",
    "ReconciledBalances",
    "RemittanceTags",
    "StructuredPurpose",
    "chunk_text",
    "decode_row",
    "decode_rows",
    "encode_document",
    "encode_entry",
    "extract_tags",
    "format_amount",
    "format_date",
    "format_line",
    "format_structured_purpose",
    "format_tags",
    "join_blocks",
    "parse_amount",
    "parse_date",
    "parse_line",
    "parse_structured_purpose",
    "reconcile",
    "signed_total",
    "traced_engine",
]
