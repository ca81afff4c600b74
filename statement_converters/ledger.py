"""
Ledger converters: MT940 <-> ledger, camt.053 <-> ledger.

Ledger rows carry no balances. Going to the ledger drops them; coming
from the ledger they are taken from the options or start at a zero
credit opening balance, and the closing balance is derived.
"""

from __future__ import annotations

from statement_config import get_conversion_tables
from statement_converters.mapping import (
    clean_identifier,
    entry_to_ledger_entry,
    fallback_balances,
    ledger_entry_to_entry,
    ledger_entry_to_report_entry,
    ledger_statement_number,
    log_completed,
    positional_statement_number,
    reference_id_from,
    report_entry_to_ledger_entry,
    resolve_balances,
    split_account_id,
)
from statement_converters.options import DEFAULT_OPTIONS, ConversionOptions
from statement_engines.tracer import traced_engine
from statement_kernel.domain.documents import (
    Camt053Document,
    LedgerDocument,
    Mt940Document,
    StatementFormat,
)
from statement_kernel.domain.values import is_bic

MT940 = StatementFormat.MT940
CAMT053 = StatementFormat.CAMT053
LEDGER = StatementFormat.LEDGER


def _ledger_statement_id(document: LedgerDocument) -> str:
    prefix = get_conversion_tables().defaults.ledger_reference_prefix
    parts = [prefix, document.statement_date.strftime("%Y%m%d")]
    if document.statement_number:
        parts.append(document.statement_number)
    return "-".join(parts)


@traced_engine("mt940_to_ledger", "1.0", fingerprint_fields=("document",))
def convert_mt940_to_ledger(
    document: Mt940Document,
    options: ConversionOptions = DEFAULT_OPTIONS,
) -> LedgerDocument:
    """One ledger entry per statement entry, dated at the closing balance."""
    bank_code, account_number = split_account_id(document.account_id)
    entries = tuple(entry_to_ledger_entry(e) for e in document.entries)
    result = LedgerDocument(
        bank_code=bank_code,
        account_number=account_number,
        statement_number=ledger_statement_number(document.statement_number),
        statement_date=document.closing_balance.date,
        currency=document.currency,
        entries=entries,
    )
    log_completed(MT940, LEDGER, len(entries))
    return result


@traced_engine("ledger_to_mt940", "1.0", fingerprint_fields=("document",))
def convert_ledger_to_mt940(
    document: LedgerDocument,
    options: ConversionOptions = DEFAULT_OPTIONS,
) -> Mt940Document:
    """
    Ledger rows -> statement.

    The reference id is ``LEDGER`` plus the statement number
    (``LEDGER-REF`` without one) unless the options carry one.
    """
    defaults = get_conversion_tables().defaults
    entries = tuple(ledger_entry_to_entry(e) for e in document.entries)
    opening, closing = fallback_balances(
        document.currency, entries, document.statement_date, MT940, options,
    )
    balances = resolve_balances(opening, closing, entries, LEDGER, MT940, options)

    reference_id = options.reference_id
    if not reference_id:
        reference_id = defaults.ledger_reference_fallback
        if document.statement_number:
            reference_id = reference_id_from(
                f"{defaults.ledger_reference_prefix}{document.statement_number}",
                defaults.ledger_reference_fallback,
            )

    result = Mt940Document(
        account_id=document.account_id,
        reference_id=reference_id,
        statement_number=positional_statement_number(document.statement_number),
        opening_balance=balances.opening,
        closing_balance=balances.closing,
        entries=entries,
        validate_balances=not options.skip_balance_validation,
    )
    log_completed(LEDGER, MT940, len(entries))
    return result


@traced_engine("camt053_to_ledger", "1.0", fingerprint_fields=("document",))
def convert_camt053_to_ledger(
    document: Camt053Document,
    options: ConversionOptions = DEFAULT_OPTIONS,
) -> LedgerDocument:
    """
    Bank statement -> ledger rows.

    The statement date is the closing balance date, else the creation date,
    else the first booking date.
    """
    statement_date = None
    if document.closing_balance is not None:
        statement_date = document.closing_balance.date
    elif document.creation_datetime is not None:
        statement_date = document.creation_datetime.date()
    elif document.entries:
        statement_date = document.entries[0].booking_date

    bank_code, account_number = split_account_id(document.account_id)
    entries = tuple(report_entry_to_ledger_entry(e) for e in document.entries)
    result = LedgerDocument(
        bank_code=bank_code,
        account_number=account_number,
        statement_number=ledger_statement_number(document.sequence_number),
        statement_date=statement_date,
        currency=document.currency,
        entries=entries,
    )
    log_completed(CAMT053, LEDGER, len(entries))
    return result


@traced_engine("ledger_to_camt053", "1.0", fingerprint_fields=("document",))
def convert_ledger_to_camt053(
    document: LedgerDocument,
    options: ConversionOptions = DEFAULT_OPTIONS,
) -> Camt053Document:
    """Ledger rows -> bank statement with reconciled PRCD / CLBD balances."""
    defaults = get_conversion_tables().defaults
    entries = tuple(ledger_entry_to_report_entry(e) for e in document.entries)
    opening, closing = fallback_balances(
        document.currency, entries, document.statement_date, CAMT053, options,
    )
    balances = resolve_balances(opening, closing, entries, LEDGER, CAMT053, options)

    statement_id = _ledger_statement_id(document)
    result = Camt053Document(
        statement_id=statement_id,
        account_id=document.account_id,
        currency=document.currency,
        message_id=options.message_id or clean_identifier(
            statement_id, defaults.message_id_max_length
        ),
        sequence_number=document.statement_number or None,
        creation_datetime=options.creation_datetime,
        servicer_bic=document.bank_code if is_bic(document.bank_code) else None,
        opening_balance=balances.opening,
        closing_balance=balances.closing,
        entries=entries,
        validate_balances=not options.skip_balance_validation,
    )
    log_completed(LEDGER, CAMT053, len(entries))
    return result
