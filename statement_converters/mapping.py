"""
Shared entry mapper and metadata helpers for the per-pair converters.

Amounts, directions, currencies, dates, reversal flags and extra amounts
always pass through unchanged. Identifiers cross between the free-text
family and the discrete-identifier family through ``extract_tags`` /
``format_tags``; structured ``:86:`` purposes are unpacked first.

Every function here is pure and touches each entry once.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import replace
from datetime import date

from statement_config import BalanceRole, get_conversion_tables
from statement_converters.options import ConversionOptions
from statement_engines.reconciliation import ReconciledBalances, reconcile
from statement_engines.references import RemittanceTags, extract_tags, format_tags
from statement_engines.structured_purpose import StructuredPurpose, parse_structured_purpose
from statement_kernel.domain.balance import Balance
from statement_kernel.domain.documents import Mt940Document, StatementFormat
from statement_kernel.domain.entries import (
    PURPOSE_MAX_LENGTH,
    REFERENCE_MAX_LENGTH,
    TRANSACTION_CODE_LENGTH,
    Counterparty,
    Entry,
    EntryReferences,
    LedgerEntry,
    Movement,
    Reference,
    ReportEntry,
)
from statement_kernel.domain.values import Currency, bank_code_from_iban, is_bic
from statement_kernel.exceptions import MissingBalanceError
from statement_kernel.logging_config import get_logger

logger = get_logger("converters.mapping")

_IDENTIFIER_STRIP = re.compile(r"[^A-Za-z0-9\-]")


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------


def clean_identifier(value: str | None, max_length: int) -> str:
    """Keep letters, digits and hyphens; cut to ``max_length``."""
    if not value:
        return ""
    return _IDENTIFIER_STRIP.sub("", value)[:max_length]


def reference_id_from(value: str | None, fallback: str) -> str:
    return clean_identifier(value, REFERENCE_MAX_LENGTH) or fallback


def message_id_from(reference_id: str) -> str:
    defaults = get_conversion_tables().defaults
    return clean_identifier(
        f"{defaults.message_id_prefix}{reference_id}", defaults.message_id_max_length
    )


def bic_from_account_id(account_id: str) -> str | None:
    """BIC prefix of ``BIC/account`` or ``BIC account`` style ids."""
    head = re.split(r"[/\s]", account_id, maxsplit=1)[0]
    return head if is_bic(head) else None


def split_account_id(account_id: str) -> tuple[str, str]:
    """
    ``(bank_code, account_number)`` for the ledger header.

    ``BLZ/account`` and ``BIC/account`` split at the slash; a German IBAN
    yields its embedded bank code; anything else has no bank code.
    """
    bank_code, sep, account_number = account_id.partition("/")
    if sep:
        return bank_code, account_number
    return bank_code_from_iban(account_id) or "", account_id


def ledger_statement_number(statement_number: str | None) -> str:
    """Positional statement numbers (``00001``, ``00001/001``) as a plain number."""
    digits = (statement_number or "").split("/")[0]
    return str(int(digits)) if digits.isdigit() else ""


def positional_statement_number(statement_number: str | None) -> str:
    if statement_number and statement_number.isdigit():
        return statement_number.zfill(5)
    return statement_number or get_conversion_tables().defaults.statement_number


# ---------------------------------------------------------------------------
# Balances
# ---------------------------------------------------------------------------


def retag(
    balance: Balance | None,
    source: StatementFormat,
    target: StatementFormat,
    role: BalanceRole,
) -> Balance | None:
    """
    Translate the kind tag of ``balance`` for the pair; the value never changes.

    A translation that does not fit ``role`` (an opening balance carrying a
    closing tag, or an available balance landing on the target's closing
    tag) falls back to the target's tag for the role.
    """
    if balance is None:
        return None
    kinds = get_conversion_tables().balance_kinds
    kind = kinds.kind_for(source, target, role, balance.kind)
    if (
        (role is BalanceRole.OPENING and not kind.is_opening)
        or (role is BalanceRole.CLOSING and not kind.is_closing)
        or (role is BalanceRole.AVAILABLE and kind is kinds.role_kind(target, BalanceRole.CLOSING))
    ):
        kind = kinds.role_kind(target, role)
    return balance.with_kind(kind)


def retag_all(
    balances: tuple[Balance, ...],
    source: StatementFormat,
    target: StatementFormat,
    role: BalanceRole,
) -> tuple[Balance, ...]:
    return tuple(retag(b, source, target, role) for b in balances)


def stated_opening(document: Mt940Document) -> Balance | None:
    """
    Opening balance to carry into a target whose opening is optional.

    Without entries, an opening equal to the one the reverse conversion
    derives from the closing balance (same value and date, default tag) is
    left out; converting back restores it unchanged.
    """
    opening = document.opening_balance
    if document.entries:
        return opening
    closing = document.closing_balance
    derived = Balance.from_signed(
        closing.signed_amount,
        date=closing.date,
        currency=closing.currency,
        kind=get_conversion_tables().balance_kinds.role_kind(StatementFormat.MT940, BalanceRole.OPENING),
    )
    return None if opening == derived else opening


def resolve_balances(
    opening: Balance | None,
    closing: Balance | None,
    entries: Sequence[Movement],
    source: StatementFormat,
    target: StatementFormat,
    options: ConversionOptions,
) -> ReconciledBalances:
    """
    Reconcile for the target and tag both balances with the target's kinds.

    Raises:
        MissingBalanceError: neither balance given.
        BalanceMismatchError: inconsistent balances, validation not skipped.
    """
    kinds = get_conversion_tables().balance_kinds
    resolved = reconcile(
        opening,
        closing,
        entries,
        skip_validation=options.skip_balance_validation,
        opening_kind=kinds.role_kind(target, BalanceRole.OPENING),
        closing_kind=kinds.role_kind(target, BalanceRole.CLOSING),
    )
    return ReconciledBalances(
        opening=retag(resolved.opening, source, target, BalanceRole.OPENING),
        closing=retag(resolved.closing, source, target, BalanceRole.CLOSING),
    )


def fallback_balances(
    currency: Currency,
    entries: Sequence[Movement],
    document_date: date | None,
    target: StatementFormat,
    options: ConversionOptions,
) -> tuple[Balance | None, Balance | None]:
    """
    Balances for sources that carry none (camt.054, ledger).

    Caller-supplied balances win. Otherwise a zero credit opening dated at
    the first entry's booking date, or ``document_date`` without entries.

    Raises:
        MissingBalanceError: no options, no entries and no document date.
    """
    if options.opening_balance is not None or options.closing_balance is not None:
        return options.opening_balance, options.closing_balance
    on = entries[0].booking_date if entries else document_date
    if on is None:
        raise MissingBalanceError("balance-less source without entries")
    kind = get_conversion_tables().balance_kinds.role_kind(target, BalanceRole.OPENING)
    return Balance.from_signed(0, date=on, currency=currency, kind=kind), None


# ---------------------------------------------------------------------------
# Purpose text
# ---------------------------------------------------------------------------


def positional_purpose_parts(purpose: str | None) -> tuple[RemittanceTags, StructuredPurpose | None]:
    """
    Tags of a positional purpose, unpacking ``:86:`` sub-fields when present.

    Counterparty data from the sub-fields fills what the tags leave empty.
    """
    structured = parse_structured_purpose(purpose)
    if structured is None:
        return extract_tags(purpose), None
    tags = extract_tags(structured.purpose_text)
    tags = replace(
        tags,
        counterparty_name=tags.counterparty_name or structured.name,
        counterparty_iban=tags.counterparty_iban or structured.account,
        counterparty_bic=tags.counterparty_bic or structured.bank_code,
    )
    return tags, structured


def fit_purpose(text: str | None) -> str | None:
    """Positional purposes hold at most 6 x 65 characters; longer text is cut."""
    if not text:
        return None
    if len(text) > PURPOSE_MAX_LENGTH:
        logger.warning(
            "purpose_truncated",
            extra={"length": len(text), "max_length": PURPOSE_MAX_LENGTH},
        )
        return text[:PURPOSE_MAX_LENGTH]
    return text


def _without_counterparty(tags: RemittanceTags) -> RemittanceTags:
    return replace(tags, counterparty_name=None, counterparty_iban=None, counterparty_bic=None)


def _positional_reference(code: str, customer_reference: str | None, bank_reference: str | None) -> Reference:
    if len(code) != TRANSACTION_CODE_LENGTH:
        code = get_conversion_tables().transaction_codes.default_positional
    customer = customer_reference or get_conversion_tables().defaults.customer_reference
    return Reference(
        transaction_code=code,
        customer_reference=customer[:REFERENCE_MAX_LENGTH - len(code)],
        bank_reference=bank_reference or None,
    )


# ---------------------------------------------------------------------------
# Entry mapping
# ---------------------------------------------------------------------------


def entry_to_report_entry(entry: Entry) -> ReportEntry:
    """Positional entry -> elemental entry."""
    tags, structured = positional_purpose_parts(entry.purpose)
    codes = get_conversion_tables().transaction_codes
    return ReportEntry(
        booking_date=entry.booking_date,
        value_date=entry.value_date,
        amount=entry.amount,
        direction=entry.direction,
        currency=entry.currency,
        references=EntryReferences(
            end_to_end_id=tags.end_to_end_id,
            mandate_id=tags.mandate_id,
            creditor_id=tags.creditor_id,
            instruction_id=tags.instruction_id,
        ),
        entry_reference=entry.reference.customer_reference,
        account_servicer_reference=entry.reference.bank_reference,
        remittance=tags.remainder or None,
        counterparty=Counterparty(
            name=tags.counterparty_name,
            iban=tags.counterparty_iban,
            bic=tags.counterparty_bic,
        ),
        transaction_code=codes.to_elemental(entry.reference.transaction_code),
        is_reversal=entry.is_reversal,
        additional_info=structured.booking_text if structured is not None else None,
        original_amount=entry.original_amount,
        equivalent_amount=entry.equivalent_amount,
        fee_amount=entry.fee_amount,
    )


def report_entry_to_entry(entry: ReportEntry) -> Entry:
    """Elemental entry -> positional entry."""
    defaults = get_conversion_tables().defaults
    code = get_conversion_tables().transaction_codes.to_positional(entry.transaction_code)
    purpose = format_tags(RemittanceTags(
        end_to_end_id=entry.references.end_to_end_id,
        mandate_id=entry.references.mandate_id,
        creditor_id=entry.references.creditor_id,
        instruction_id=entry.references.instruction_id,
        counterparty_name=entry.counterparty.name,
        counterparty_iban=entry.counterparty.iban,
        counterparty_bic=entry.counterparty.bic,
        remainder=entry.remittance or "",
    ))
    return Entry(
        booking_date=entry.booking_date,
        value_date=entry.value_date,
        amount=entry.amount,
        direction=entry.direction,
        currency=entry.currency,
        reference=_positional_reference(
            code,
            entry.entry_reference or entry.references.end_to_end_id or defaults.missing_end_to_end_id,
            entry.account_servicer_reference,
        ),
        purpose=fit_purpose(purpose),
        is_reversal=entry.is_reversal,
        original_amount=entry.original_amount,
        equivalent_amount=entry.equivalent_amount,
        fee_amount=entry.fee_amount,
    )


def entry_to_ledger_entry(entry: Entry) -> LedgerEntry:
    """Positional entry -> ledger entry; counterparty tags become payer columns."""
    tags, _ = positional_purpose_parts(entry.purpose)
    return LedgerEntry(
        booking_date=entry.booking_date,
        value_date=entry.value_date,
        amount=entry.amount,
        direction=entry.direction,
        currency=entry.currency,
        payer_name=tags.counterparty_name,
        payer_bank_code=tags.counterparty_bic,
        payer_account=tags.counterparty_iban,
        purpose=format_tags(_without_counterparty(tags)) or None,
        transaction_code=entry.reference.transaction_code,
        booking_text=entry.reference.customer_reference,
        original_amount=entry.original_amount,
        equivalent_amount=entry.equivalent_amount,
        fee_amount=entry.fee_amount,
    )


def ledger_entry_to_entry(entry: LedgerEntry) -> Entry:
    """Ledger entry -> positional entry; payer columns become counterparty tags."""
    tags = extract_tags(entry.purpose)
    tags = replace(
        tags,
        counterparty_name=entry.payer_name or tags.counterparty_name,
        counterparty_iban=entry.payer_account or tags.counterparty_iban,
        counterparty_bic=entry.payer_bank_code or tags.counterparty_bic,
    )
    return Entry(
        booking_date=entry.booking_date,
        value_date=entry.value_date,
        amount=entry.amount,
        direction=entry.direction,
        currency=entry.currency,
        reference=_positional_reference(entry.transaction_code, entry.booking_text, None),
        purpose=fit_purpose(format_tags(tags)),
        original_amount=entry.original_amount,
        equivalent_amount=entry.equivalent_amount,
        fee_amount=entry.fee_amount,
    )


def report_entry_to_ledger_entry(entry: ReportEntry) -> LedgerEntry:
    """Elemental entry -> ledger entry."""
    purpose = format_tags(RemittanceTags(
        end_to_end_id=entry.references.end_to_end_id,
        mandate_id=entry.references.mandate_id,
        creditor_id=entry.references.creditor_id,
        instruction_id=entry.references.instruction_id,
        remainder=entry.remittance or "",
    ))
    return LedgerEntry(
        booking_date=entry.booking_date,
        value_date=entry.value_date,
        amount=entry.amount,
        direction=entry.direction,
        currency=entry.currency,
        payer_name=entry.counterparty.name,
        payer_bank_code=entry.counterparty.bic,
        payer_account=entry.counterparty.iban,
        purpose=purpose or None,
        transaction_code=get_conversion_tables().transaction_codes.to_positional(entry.transaction_code),
        booking_text=entry.entry_reference,
        original_amount=entry.original_amount,
        equivalent_amount=entry.equivalent_amount,
        fee_amount=entry.fee_amount,
    )


def ledger_entry_to_report_entry(entry: LedgerEntry) -> ReportEntry:
    """Ledger entry -> elemental entry."""
    tags = extract_tags(entry.purpose)
    return ReportEntry(
        booking_date=entry.booking_date,
        value_date=entry.value_date,
        amount=entry.amount,
        direction=entry.direction,
        currency=entry.currency,
        references=EntryReferences(
            end_to_end_id=tags.end_to_end_id,
            mandate_id=tags.mandate_id,
            creditor_id=tags.creditor_id,
            instruction_id=tags.instruction_id,
        ),
        entry_reference=entry.booking_text,
        remittance=tags.remainder or None,
        counterparty=Counterparty(
            name=entry.payer_name or tags.counterparty_name,
            iban=entry.payer_account or tags.counterparty_iban,
            bic=entry.payer_bank_code or tags.counterparty_bic,
        ),
        transaction_code=get_conversion_tables().transaction_codes.to_elemental(entry.transaction_code),
        original_amount=entry.original_amount,
        equivalent_amount=entry.equivalent_amount,
        fee_amount=entry.fee_amount,
    )


def log_completed(source: StatementFormat, target: StatementFormat, entry_count: int) -> None:
    logger.info(
        "conversion_completed",
        extra={
            "source_format": source.value,
            "target_format": target.value,
            "entry_count": entry_count,
        },
    )
