"""
StatementBuilder -- single-use mutable builder for document records.

Collects fields and entries incrementally (e.g. while walking a parsed
message) and freezes them into one immutable document on ``build()``.
The builder is consumed by ``build()``; further use raises
BuilderConsumedError, so a half-assembled document never escapes.

Usage:
    builder = StatementBuilder(
        Mt940Document,
        account_id="DE89370400440532013000",
        reference_id="STMT-2025-001",
        statement_number="00001",
    )
    builder.set_opening_balance(opening)
    builder.add_entry(entry)
    builder.set_closing_balance(closing)
    document = builder.build()
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Generic, TypeVar

from statement_kernel.domain.balance import Balance
from statement_kernel.exceptions import BuilderConsumedError

D = TypeVar("D")


class StatementBuilder(Generic[D]):
    """Accumulates fields for ``document_type`` and builds it exactly once."""

    def __init__(self, document_type: type[D], **fields: Any):
        self._document_type = document_type
        self._fields: dict[str, Any] = dict(fields)
        self._entries: list[Any] = list(self._fields.pop("entries", ()))
        self._consumed = False

    def _check_open(self) -> None:
        if self._consumed:
            raise BuilderConsumedError(f"StatementBuilder[{self._document_type.__name__}]")

    def set(self, **fields: Any) -> StatementBuilder[D]:
        self._check_open()
        if "entries" in fields:
            self._entries = list(fields.pop("entries"))
        self._fields.update(fields)
        return self

    def set_opening_balance(self, balance: Balance | None) -> StatementBuilder[D]:
        return self.set(opening_balance=balance)

    def set_closing_balance(self, balance: Balance | None) -> StatementBuilder[D]:
        return self.set(closing_balance=balance)

    def add_entry(self, entry: Any) -> StatementBuilder[D]:
        self._check_open()
        self._entries.append(entry)
        return self

    def add_entries(self, entries: Iterable[Any]) -> StatementBuilder[D]:
        self._check_open()
        self._entries.extend(entries)
        return self

    @property
    def entry_count(self) -> int:
        return len(self._entries)

    def build(self) -> D:
        """
        Freeze the collected fields into a document.

        Postconditions:
            - The builder is consumed, even if construction raised.

        Raises:
            BuilderConsumedError: build() was already called.
            Any construction error of the document type.
        """
        self._check_open()
        self._consumed = True
        if "entries" in self._document_type.__dataclass_fields__:
            return self._document_type(entries=tuple(self._entries), **self._fields)
        if self._entries:
            raise TypeError(f"{self._document_type.__name__} does not carry entries")
        return self._document_type(**self._fields)
