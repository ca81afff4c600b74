"""
statement_config -- single public entrypoint for conversion lookup tables.

Responsibility:
    Provides the balance-kind tables, transaction-code map, ledger field
    layout and conversion defaults through ``get_conversion_tables()``.
    The tables are loaded from the packaged YAML once, at import, and are
    immutable afterwards, so concurrent conversions share them freely.

Architecture position:
    Configuration -- sits above ``statement_kernel`` and below
    ``statement_engines`` / ``statement_converters``. The kernel MUST NEVER
    import from ``statement_config``.

Failure modes:
    - ``FileNotFoundError`` / ``yaml.YAMLError`` / ``ValueError`` at import
      when the packaged tables are missing or malformed.
"""

from __future__ import annotations

from statement_config.loader import load_conversion_tables
from statement_config.schema import (
    BalanceKindTable,
    BalanceRole,
    ConversionDefaults,
    ConversionTables,
    LedgerField,
    LedgerLayout,
    TransactionCodeTable,
)
from statement_kernel.logging_config import get_logger

logger = get_logger("config")

_ACTIVE_TABLES: ConversionTables = load_conversion_tables()
logger.debug(
    "conversion_tables_loaded",
    extra={
        "checksum": _ACTIVE_TABLES.checksum,
        "ledger_field_count": _ACTIVE_TABLES.ledger_layout.field_count,
    },
)


def get_conversion_tables() -> ConversionTables:
    """The ONLY runtime entrypoint for lookup tables."""
    return _ACTIVE_TABLES


__all__ = [
    "BalanceKindTable",
    "BalanceRole",
    "ConversionDefaults",
    "ConversionTables",
    "LedgerField",
    "LedgerLayout",
    "TransactionCodeTable",
    "get_conversion_tables",
]
