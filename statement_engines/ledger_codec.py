"""
Fixed-width ledger codec -- ledger entries to and from positional fields.

Responsibility:
    Encodes ``LedgerEntry`` values into rows of positional text fields
    (34 positions, semicolon separated on the wire) using the per-field
    maximum lengths of the configured ``LedgerLayout``, and decodes such
    rows back into entries.

Architecture position:
    Engines -- pure, zero I/O. Reads the layout and defaults from
    ``statement_config.get_conversion_tables()`` unless given explicitly.

Invariants enforced:
    - Every encoded field fits its maximum length: TRUNCATE (default) cuts
      the value, REJECT raises LedgerFieldOverflowError.
    - Free text is normalised to single spaces and chunked into blocks of at
      most 27 characters. Word-bounded blocks stay below 27; only a split
      word fills a whole block, and decoding glues a full block to the next
      one without a space, so identifiers survive the round trip.
    - Dates are written ``dd.mm.YYYY``; several notations are accepted on
      read and two-digit years pivot at 30 (<= 30 -> 20xx, else 19xx).
    - Amounts are written with an explicit sign and a decimal comma
      (``+1234,56``).

Failure modes:
    - LedgerFieldOverflowError under the REJECT strategy.
    - LedgerFormatError for unparseable dates, amounts or field counts.
    - MissingRequiredFieldError for empty required positions on decode.
"""

from __future__ import annotations

import csv
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum

from statement_config import LedgerField, LedgerLayout, get_conversion_tables
from statement_kernel.domain.documents import LedgerDocument
from statement_kernel.domain.entries import LedgerEntry
from statement_kernel.domain.values import AMOUNT_QUANTUM, CreditDebit, Currency, Money
from statement_kernel.exceptions import (
    LedgerFieldOverflowError,
    LedgerFormatError,
    MissingRequiredFieldError,
)
from statement_kernel.logging_config import get_logger

logger = get_logger("engines.ledger_codec")

FIELD_SEPARATOR = ";"
MIN_FIELD_COUNT = 7


class OverflowStrategy(str, Enum):
    TRUNCATE = "truncate"
    REJECT = "reject"


@dataclass(frozen=True, slots=True)
class LedgerRowHeader:
    """Account-level columns repeated on every row of one statement."""

    bank_code: str
    account_number: str
    statement_number: str = ""
    statement_date: date | None = None


# ---------------------------------------------------------------------------
# Field primitives
# ---------------------------------------------------------------------------


def fit(value: str | None, field: LedgerField, strategy: OverflowStrategy = OverflowStrategy.TRUNCATE) -> str:
    """Fit ``value`` into ``field``; None becomes the empty string."""
    if value is None:
        return ""
    if len(value) <= field.max_length:
        return value
    if strategy is OverflowStrategy.REJECT:
        raise LedgerFieldOverflowError(field.name, field.max_length, len(value))
    logger.warning(
        "ledger_field_truncated",
        extra={"field": field.name, "max_length": field.max_length, "length": len(value)},
    )
    return value[:field.max_length]


def chunk_text(
    text: str | None,
    block_length: int,
    max_blocks: int | None = None,
    *,
    strategy: OverflowStrategy = OverflowStrategy.TRUNCATE,
    field_name: str = "text",
) -> tuple[str, ...]:
    """
    Split ``text`` into blocks of at most ``block_length`` characters.

    Whitespace is normalised first. Blocks built from whole words stay
    shorter than ``block_length``; only a word too long for such a block is
    split, into pieces of exactly ``block_length`` characters followed by
    its tail. A full block therefore always continues into the next one,
    which is how ``join_blocks`` restores the word. When a split word ends
    exactly on a block boundary an empty block marks the word end.

    Raises:
        LedgerFieldOverflowError: more than ``max_blocks`` blocks are needed
            and the strategy is REJECT.
    """
    if not text:
        return ()
    word_limit = block_length - 1
    blocks: list[str] = []
    current = ""
    for word in text.split():
        if len(word) > word_limit:
            if current:
                blocks.append(current)
                current = ""
            while len(word) >= block_length:
                blocks.append(word[:block_length])
                word = word[block_length:]
            if not word:
                blocks.append("")
                continue
        if not current:
            current = word
        elif len(current) + 1 + len(word) <= word_limit:
            current = f"{current} {word}"
        else:
            blocks.append(current)
            current = word
    if current:
        blocks.append(current)
    while blocks and not blocks[-1]:
        blocks.pop()

    if max_blocks is not None and len(blocks) > max_blocks:
        if strategy is OverflowStrategy.REJECT:
            raise LedgerFieldOverflowError(
                field_name, block_length * max_blocks, len(" ".join(blocks))
            )
        logger.warning(
            "ledger_text_truncated",
            extra={"field": field_name, "blocks": len(blocks), "max_blocks": max_blocks},
        )
        blocks = blocks[:max_blocks]
    return tuple(blocks)


def join_blocks(blocks: Iterable[str], block_length: int | None = None) -> str | None:
    """
    Reassemble decoded blocks; None when all are empty.

    Blocks are joined with single spaces, except that a block filling all
    ``block_length`` characters is glued to the next one. An empty block
    ends such a run.
    """
    text = ""
    glued = False
    for block in blocks:
        block = block.strip() if block else ""
        if not block:
            glued = False
            continue
        if text and not glued:
            text += " "
        text += block
        glued = block_length is not None and len(block) >= block_length
    return text or None


def format_date(value: date | None) -> str:
    return value.strftime("%d.%m.%Y") if value is not None else ""


# (pattern, group order, two-digit year)
_DATE_NOTATIONS: tuple[tuple[re.Pattern[str], str, bool], ...] = (
    (re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$"), "ymd", False),   # Y-m-d
    (re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{4})$"), "dmy", False),  # d.m.Y
    (re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{2})$"), "dmy", True),   # d.m.y
    (re.compile(r"^(\d{4})(\d{2})(\d{2})$"), "ymd", False),          # Ymd
    (re.compile(r"^(\d{2})(\d{2})(\d{2})$"), "ymd", True),           # ymd
    (re.compile(r"^(\d{2})(\d{2})(\d{4})$"), "dmy", False),          # dmY
    (re.compile(r"^(\d{2})(\d{2})(\d{2})$"), "dmy", True),           # dmy
    (re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$"), "dmy", False),    # d/m/Y
    (re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$"), "dmy", False),    # d-m-Y
)


def expand_year(two_digit_year: int, pivot: int) -> int:
    """Two-digit years up to ``pivot`` are 20xx, later ones 19xx."""
    return 2000 + two_digit_year if two_digit_year <= pivot else 1900 + two_digit_year


def parse_date(value: str | None, field_name: str = "date", *, pivot: int | None = None) -> date | None:
    """
    Parse a ledger date in any accepted notation.

    Notations are tried in order: Y-m-d, d.m.Y, d.m.y, Ymd, ymd, dmY, dmy,
    d/m/Y, d-m-Y. The first one yielding a valid calendar date wins.

    Raises:
        LedgerFormatError: no notation matches.
    """
    if value is None or not value.strip():
        return None
    text = value.strip()
    if pivot is None:
        pivot = get_conversion_tables().defaults.ledger_two_digit_year_pivot
    for pattern, order, two_digit in _DATE_NOTATIONS:
        match = pattern.match(text)
        if match is None:
            continue
        parts = dict(zip(order, (int(g) for g in match.groups())))
        year = expand_year(parts["y"], pivot) if two_digit else parts["y"]
        try:
            return date(year, parts["m"], parts["d"])
        except ValueError:
            continue
    raise LedgerFormatError(field_name, value)


def format_amount(value: Decimal | None) -> str:
    """Signed amount with decimal comma: ``+1234,56`` / ``-50,00``."""
    if value is None:
        return ""
    quantized = value.quantize(AMOUNT_QUANTUM)
    sign = "-" if quantized < 0 else "+"
    return f"{sign}{abs(quantized)}".replace(".", ",")


def parse_amount(value: str | None, field_name: str = "amount") -> Decimal | None:
    """
    Parse a signed ledger amount; comma or dot decimals are accepted.

    Raises:
        LedgerFormatError: not a number.
    """
    if value is None or not value.strip():
        return None
    text = value.strip().replace(" ", "")
    if "," in text:
        text = text.replace(".", "").replace(",", ".")
    try:
        amount = Decimal(text)
    except InvalidOperation as e:
        raise LedgerFormatError(field_name, value) from e
    if not amount.is_finite():
        raise LedgerFormatError(field_name, value)
    return amount.quantize(AMOUNT_QUANTUM)


# ---------------------------------------------------------------------------
# Rows
# ---------------------------------------------------------------------------


def _layout_or_default(layout: LedgerLayout | None) -> LedgerLayout:
    return layout if layout is not None else get_conversion_tables().ledger_layout


def _block_length(fields: Sequence[LedgerField]) -> int:
    return min(
        get_conversion_tables().defaults.ledger_block_length,
        *(f.max_length for f in fields),
    )


def encode_entry(
    entry: LedgerEntry,
    header: LedgerRowHeader,
    *,
    strategy: OverflowStrategy = OverflowStrategy.TRUNCATE,
    layout: LedgerLayout | None = None,
) -> tuple[str, ...]:
    """
    Encode one entry as a row of positional fields.

    Postconditions:
        - len(result) == layout.field_count.
        - Every field fits its maximum length.

    Raises:
        LedgerFieldOverflowError: under REJECT when a value does not fit.
    """
    layout = _layout_or_default(layout)
    row = [""] * layout.field_count

    def put(name: str, value: str | None) -> None:
        field = layout.field(name)
        row[field.position - 1] = fit(value, field, strategy)

    def put_blocks(prefix: str, text: str | None) -> None:
        fields = layout.group(prefix)
        if not fields:
            return
        blocks = chunk_text(
            text,
            _block_length(fields),
            len(fields),
            strategy=strategy,
            field_name=prefix,
        )
        for field, block in zip(fields, blocks):
            row[field.position - 1] = block

    def put_extra(amount_name: str, currency_name: str, money: Money | None) -> None:
        if money is not None:
            put(amount_name, format_amount(money.amount))
            put(currency_name, money.currency.code)

    put("bank_code", header.bank_code)
    put("account_number", header.account_number)
    put("statement_number", header.statement_number)
    put("statement_date", format_date(header.statement_date))
    put("value_date", format_date(entry.value_date))
    put("booking_date", format_date(entry.booking_date))
    put("amount", format_amount(entry.signed_amount))
    put_blocks("payer_name", entry.payer_name)
    put("payer_bank_code", entry.payer_bank_code)
    put("payer_account", entry.payer_account)
    put_blocks("purpose", entry.purpose)
    put("transaction_code", entry.transaction_code)
    put("currency", entry.currency.code)
    put("booking_text", entry.booking_text)
    put_extra("original_amount", "original_currency", entry.original_amount)
    put_extra("equivalent_amount", "equivalent_currency", entry.equivalent_amount)
    put_extra("fee_amount", "fee_currency", entry.fee_amount)
    return tuple(row)


def decode_row(
    fields: Sequence[str],
    *,
    layout: LedgerLayout | None = None,
) -> tuple[LedgerRowHeader, LedgerEntry]:
    """
    Decode one row of positional fields.

    Rows may be shorter than the layout (trailing optional positions
    omitted) but must reach the amount column.

    Raises:
        LedgerFormatError: too few or too many fields, bad dates or amounts,
            unknown currency codes.
        MissingRequiredFieldError: a required position is empty.
    """
    layout = _layout_or_default(layout)
    if not MIN_FIELD_COUNT <= len(fields) <= layout.field_count:
        raise LedgerFormatError("row", f"{len(fields)} fields")
    values = [value.strip() for value in fields] + [""] * (layout.field_count - len(fields))

    def get(name: str) -> str:
        return values[layout.index(name)]

    for field in layout.required_fields:
        if not values[field.position - 1]:
            raise MissingRequiredFieldError(field.name, "LedgerRow")

    tables = get_conversion_tables()
    currency_code = get("currency") or tables.defaults.ledger_currency
    try:
        currency = Currency(currency_code)
    except ValueError as e:
        raise LedgerFormatError("currency", currency_code) from e

    def get_blocks(prefix: str) -> str | None:
        fields = layout.group(prefix)
        if not fields:
            return None
        return join_blocks((values[f.position - 1] for f in fields), _block_length(fields))

    def get_extra(amount_name: str, currency_name: str) -> Money | None:
        amount = parse_amount(get(amount_name), amount_name)
        if amount is None:
            return None
        try:
            return Money.of(amount, get(currency_name) or currency)
        except ValueError as e:
            raise LedgerFormatError(currency_name, get(currency_name)) from e

    signed = parse_amount(get("amount"), "amount")
    booking_date = parse_date(get("booking_date"), "booking_date")
    entry = LedgerEntry(
        booking_date=booking_date,
        value_date=parse_date(get("value_date"), "value_date") or booking_date,
        amount=abs(signed),
        direction=CreditDebit.for_signed(signed),
        currency=currency,
        payer_name=get_blocks("payer_name"),
        payer_bank_code=get("payer_bank_code") or None,
        payer_account=get("payer_account") or None,
        purpose=get_blocks("purpose"),
        transaction_code=get("transaction_code") or tables.transaction_codes.default_positional,
        booking_text=get("booking_text") or None,
        original_amount=get_extra("original_amount", "original_currency"),
        equivalent_amount=get_extra("equivalent_amount", "equivalent_currency"),
        fee_amount=get_extra("fee_amount", "fee_currency"),
    )
    header = LedgerRowHeader(
        bank_code=get("bank_code"),
        account_number=get("account_number"),
        statement_number=get("statement_number"),
        statement_date=parse_date(get("statement_date"), "statement_date"),
    )
    return header, entry


def encode_document(
    document: LedgerDocument,
    *,
    strategy: OverflowStrategy = OverflowStrategy.TRUNCATE,
    layout: LedgerLayout | None = None,
) -> tuple[tuple[str, ...], ...]:
    """One row per entry, all sharing the document's account header."""
    header = LedgerRowHeader(
        bank_code=document.bank_code,
        account_number=document.account_number,
        statement_number=document.statement_number,
        statement_date=document.statement_date,
    )
    return tuple(
        encode_entry(entry, header, strategy=strategy, layout=layout)
        for entry in document.entries
    )


def decode_rows(
    rows: Iterable[Sequence[str]],
    *,
    layout: LedgerLayout | None = None,
) -> LedgerDocument:
    """
    Decode rows of one account statement into a LedgerDocument.

    The account header is taken from the first row. The statement date
    falls back to the first entry's booking date.

    Raises:
        MissingRequiredFieldError: no rows.
        Any error of ``decode_row``.
    """
    header: LedgerRowHeader | None = None
    entries: list[LedgerEntry] = []
    for row in rows:
        row_header, entry = decode_row(row, layout=layout)
        if header is None:
            header = row_header
        entries.append(entry)
    if header is None:
        raise MissingRequiredFieldError("rows", "LedgerDocument")
    return LedgerDocument(
        bank_code=header.bank_code,
        account_number=header.account_number,
        statement_number=header.statement_number,
        statement_date=header.statement_date or entries[0].booking_date,
        currency=entries[0].currency,
        entries=tuple(entries),
    )


# ---------------------------------------------------------------------------
# Text lines
# ---------------------------------------------------------------------------


def format_line(fields: Sequence[str], *, layout: LedgerLayout | None = None) -> str:
    """Join a row with semicolons, double-quoting alphanumeric positions."""
    layout = _layout_or_default(layout)
    rendered = []
    for field, value in zip(layout.fields, fields):
        if field.quoted:
            rendered.append('"' + value.replace('"', '""') + '"')
        else:
            rendered.append(value)
    return FIELD_SEPARATOR.join(rendered)


def parse_line(line: str) -> tuple[str, ...]:
    """Split one semicolon-separated line, honouring double quotes."""
    reader = csv.reader([line.rstrip("\r\n")], delimiter=FIELD_SEPARATOR, quotechar='"')
    return tuple(next(reader, []))
