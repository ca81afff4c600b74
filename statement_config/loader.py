"""
Conversion Table Loader (``statement_config.loader``).

Responsibility
--------------
Loads the packaged YAML tables and parses them into the frozen
``statement_config.schema`` dataclasses. Runtime code obtains the parsed
tables through ``statement_config.get_conversion_tables()``; this module is
used once at import and by tests that load alternative tables.

Invariants enforced
-------------------
* Parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; no silent defaults for required keys.
* Every parsed mapping is wrapped in ``MappingProxyType`` so shared tables
  cannot be mutated after load.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the raw
  tables for identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown format names or balance tags  -> ``ValueError``.
* Gaps or duplicates in ledger positions  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from statement_config.schema import (
    BalanceKindTable,
    BalanceRole,
    ConversionDefaults,
    ConversionTables,
    LedgerField,
    LedgerLayout,
    TransactionCodeTable,
)
from statement_kernel.domain.balance import BalanceKind
from statement_kernel.domain.documents import StatementFormat

DATA_DIR = Path(__file__).parent / "data"

_PAIR_SEPARATOR = "->"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Preconditions:
        - ``path`` must point to an existing, readable YAML file.
    Postconditions:
        - Returns a ``dict`` (possibly empty if the YAML is empty).
    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def parse_balance_kinds(data: dict[str, Any]) -> BalanceKindTable:
    """
    Parse the ``roles`` and ``pairs`` sections of balance_kinds.yaml.

    Raises:
        KeyError: a section is missing.
        ValueError: unknown format, role, or balance tag, or a malformed
            pair key.
    """
    roles = {}
    for fmt_name, role_map in data["roles"].items():
        roles[StatementFormat(fmt_name)] = MappingProxyType({
            BalanceRole(role): BalanceKind(str(kind)) for role, kind in role_map.items()
        })

    pairs = {}
    for pair_key, kind_map in data["pairs"].items():
        source, sep, target = str(pair_key).partition(_PAIR_SEPARATOR)
        if not sep:
            raise ValueError(f"Balance kind pair must be 'SOURCE->TARGET', got {pair_key!r}")
        pairs[(StatementFormat(source), StatementFormat(target))] = MappingProxyType({
            BalanceKind(str(src)): BalanceKind(str(dst)) for src, dst in (kind_map or {}).items()
        })

    return BalanceKindTable(roles=MappingProxyType(roles), pairs=MappingProxyType(pairs))


def parse_transaction_codes(data: dict[str, Any]) -> TransactionCodeTable:
    """Parse transaction_codes.yaml. Codes are upper-cased."""
    return TransactionCodeTable(
        positional_to_elemental=MappingProxyType({
            str(k).upper(): str(v).upper() for k, v in data["positional_to_elemental"].items()
        }),
        elemental_to_positional=MappingProxyType({
            str(k).upper(): str(v).upper() for k, v in data["elemental_to_positional"].items()
        }),
        default_positional=str(data["default_positional"]).upper(),
        default_elemental=str(data["default_elemental"]).upper(),
    )


def parse_ledger_layout(data: dict[str, Any]) -> LedgerLayout:
    """
    Parse ledger_fields.yaml.

    Postconditions:
        - Fields are ordered by position and positions run 1..N without gaps.
    Raises:
        ValueError: duplicate or missing positions, duplicate names,
            non-positive lengths.
    """
    fields = tuple(sorted(
        (
            LedgerField(
                position=int(item["position"]),
                name=item["name"],
                max_length=int(item["max_length"]),
                required=bool(item.get("required", False)),
                quoted=bool(item.get("quoted", True)),
            )
            for item in data["fields"]
        ),
        key=lambda f: f.position,
    ))
    positions = [f.position for f in fields]
    if positions != list(range(1, len(fields) + 1)):
        raise ValueError(f"Ledger field positions must run 1..{len(fields)}, got {positions}")
    names = [f.name for f in fields]
    if len(set(names)) != len(names):
        raise ValueError("Ledger field names must be unique")
    for f in fields:
        if f.max_length <= 0:
            raise ValueError(f"Ledger field {f.name!r} must have a positive max_length")
    return LedgerLayout(fields=fields)


def parse_defaults(data: dict[str, Any]) -> ConversionDefaults:
    """Parse defaults.yaml; every key is required."""
    return ConversionDefaults(
        statement_number=str(data["statement_number"]),
        customer_reference=str(data["customer_reference"]),
        missing_end_to_end_id=str(data["missing_end_to_end_id"]),
        camt_reference_fallback=str(data["camt_reference_fallback"]),
        ledger_reference_prefix=str(data["ledger_reference_prefix"]),
        ledger_reference_fallback=str(data["ledger_reference_fallback"]),
        message_id_prefix=str(data["message_id_prefix"]),
        message_id_max_length=int(data["message_id_max_length"]),
        ledger_block_length=int(data["ledger_block_length"]),
        ledger_two_digit_year_pivot=int(data["ledger_two_digit_year_pivot"]),
        ledger_currency=str(data["ledger_currency"]),
    )


def compute_checksum(raw: dict[str, Any]) -> str:
    """Deterministic SHA-256 of the raw table contents."""
    canonical = json.dumps(raw, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def load_conversion_tables(directory: Path = DATA_DIR) -> ConversionTables:
    """
    Load and parse every table under ``directory``.

    Raises:
        FileNotFoundError, yaml.YAMLError, KeyError, ValueError -- see module
        docstring.
    """
    raw = {
        "balance_kinds": load_yaml_file(directory / "balance_kinds.yaml"),
        "transaction_codes": load_yaml_file(directory / "transaction_codes.yaml"),
        "ledger_fields": load_yaml_file(directory / "ledger_fields.yaml"),
        "defaults": load_yaml_file(directory / "defaults.yaml"),
    }
    return ConversionTables(
        balance_kinds=parse_balance_kinds(raw["balance_kinds"]),
        transaction_codes=parse_transaction_codes(raw["transaction_codes"]),
        ledger_layout=parse_ledger_layout(raw["ledger_fields"]),
        defaults=parse_defaults(raw["defaults"]),
        checksum=compute_checksum(raw),
    )
