"""
statement_converters -- format-pair converters and the conversion graph.

Responsibility:
    One pure function per direct edge of the conversion graph plus
    ``convert`` / ``convert_many``, which route any supported pair through
    the MT940 hub when no direct edge exists.

Architecture position:
    Top layer -- imports ``statement_kernel``, ``statement_config`` and
    ``statement_engines``; nothing imports it.
"""

from statement_converters.elemental import (
    convert_camt052_to_mt940,
    convert_camt053_to_mt940,
    convert_camt054_to_mt940,
    convert_mt940_to_camt052,
    convert_mt940_to_camt053,
    convert_mt940_to_camt054,
)
from statement_converters.graph import (
    DOCUMENT_TYPES,
    EDGES,
    HUB_FORMAT,
    convert,
    convert_many,
    document_format,
    find_route,
)
from statement_converters.ledger import (
    convert_camt053_to_ledger,
    convert_ledger_to_camt053,
    convert_ledger_to_mt940,
    convert_mt940_to_ledger,
)
from statement_converters.options import DEFAULT_OPTIONS, ConversionOptions
from statement_converters.positional import (
    convert_mt940_to_mt941,
    convert_mt940_to_mt942,
    convert_mt941_to_mt940,
    convert_mt942_to_mt940,
)

__all__ = [
    "DEFAULT_OPTIONS",
    "DOCUMENT_TYPES",
    "EDGES",
    "HUB_FORMAT",
    "ConversionOptions",
    "convert",
    "convert_camt052_to_mt940",
    "convert_camt053_to_ledger",
    "convert_camt053_to_mt940",
    "convert_camt054_to_mt940",
    "convert_ledger_to_camt053",
    "convert_ledger_to_mt940",
    "convert_many",
    "convert_mt940_to_camt052",
    "convert_mt940_to_camt053",
    "convert_mt940_to_camt054",
    "convert_mt940_to_ledger",
    "convert_mt940_to_mt941",
    "convert_mt940_to_mt942",
    "convert_mt941_to_mt940",
    "convert_mt942_to_mt940",
    "document_format",
    "find_route",
]
