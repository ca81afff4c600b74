"""
Hub <-> structured-elemental converters: MT940 <-> camt.052/053/054.

Positional entries become ``ReportEntry`` values (tags extracted into
discrete identifiers) and back (identifiers rendered as tagged purpose
text). Balances are reconciled whenever the source may lack one and
their kind tags are translated through the configured per-pair table.
"""

from __future__ import annotations

from statement_config import BalanceRole, get_conversion_tables
from statement_converters.mapping import (
    bic_from_account_id,
    entry_to_report_entry,
    fallback_balances,
    log_completed,
    message_id_from,
    positional_statement_number,
    reference_id_from,
    report_entry_to_entry,
    resolve_balances,
    retag,
    retag_all,
    stated_opening,
)
from statement_converters.options import DEFAULT_OPTIONS, ConversionOptions
from statement_engines.tracer import traced_engine
from statement_kernel.domain.documents import (
    Camt052Document,
    Camt053Document,
    Camt054Document,
    Mt940Document,
    StatementFormat,
)

MT940 = StatementFormat.MT940
CAMT052 = StatementFormat.CAMT052
CAMT053 = StatementFormat.CAMT053
CAMT054 = StatementFormat.CAMT054


def _camt_header(document: Mt940Document, options: ConversionOptions) -> dict:
    """Identification fields shared by every elemental target."""
    return {
        "account_id": document.account_id,
        "currency": document.currency,
        "message_id": options.message_id or message_id_from(document.reference_id),
        "creation_datetime": options.creation_datetime,
        "servicer_bic": bic_from_account_id(document.account_id),
    }


def _mt_reference_id(statement_id: str, options: ConversionOptions) -> str:
    return options.reference_id or reference_id_from(
        statement_id, get_conversion_tables().defaults.camt_reference_fallback
    )


# ---------------------------------------------------------------------------
# camt.052
# ---------------------------------------------------------------------------


@traced_engine("mt940_to_camt052", "1.0", fingerprint_fields=("document",))
def convert_mt940_to_camt052(
    document: Mt940Document,
    options: ConversionOptions = DEFAULT_OPTIONS,
) -> Camt052Document:
    """Statement -> intraday account report; the closing balance becomes CLAV."""
    entries = tuple(entry_to_report_entry(e) for e in document.entries)
    result = Camt052Document(
        statement_id=document.reference_id,
        sequence_number=document.statement_number,
        opening_balance=retag(stated_opening(document), MT940, CAMT052, BalanceRole.OPENING),
        closing_balance=retag(document.closing_balance, MT940, CAMT052, BalanceRole.CLOSING),
        entries=entries,
        closing_available_balance=retag(
            document.closing_available_balance, MT940, CAMT052, BalanceRole.AVAILABLE
        ),
        forward_available_balances=retag_all(
            document.forward_available_balances, MT940, CAMT052, BalanceRole.FORWARD
        ),
        validate_balances=not options.skip_balance_validation,
        **_camt_header(document, options),
    )
    log_completed(MT940, CAMT052, len(entries))
    return result


@traced_engine("camt052_to_mt940", "1.0", fingerprint_fields=("document",))
def convert_camt052_to_mt940(
    document: Camt052Document,
    options: ConversionOptions = DEFAULT_OPTIONS,
) -> Mt940Document:
    """
    Intraday account report -> statement.

    Raises:
        MissingBalanceError: the report and the options carry no balance.
        BalanceMismatchError: balances do not reconcile with the entries.
    """
    entries = tuple(report_entry_to_entry(e) for e in document.entries)
    balances = resolve_balances(
        document.opening_balance or options.opening_balance,
        document.closing_balance or options.closing_balance,
        entries, CAMT052, MT940, options,
    )
    result = Mt940Document(
        account_id=document.account_id,
        reference_id=_mt_reference_id(document.statement_id, options),
        statement_number=positional_statement_number(document.sequence_number),
        opening_balance=balances.opening,
        closing_balance=balances.closing,
        entries=entries,
        closing_available_balance=retag(
            document.closing_available_balance, CAMT052, MT940, BalanceRole.AVAILABLE
        ),
        forward_available_balances=retag_all(
            document.forward_available_balances, CAMT052, MT940, BalanceRole.FORWARD
        ),
        validate_balances=not options.skip_balance_validation,
    )
    log_completed(CAMT052, MT940, len(entries))
    return result


# ---------------------------------------------------------------------------
# camt.053
# ---------------------------------------------------------------------------


@traced_engine("mt940_to_camt053", "1.0", fingerprint_fields=("document",))
def convert_mt940_to_camt053(
    document: Mt940Document,
    options: ConversionOptions = DEFAULT_OPTIONS,
) -> Camt053Document:
    """Statement -> end-of-day bank statement (PRCD / CLBD)."""
    entries = tuple(entry_to_report_entry(e) for e in document.entries)
    result = Camt053Document(
        statement_id=document.reference_id,
        sequence_number=document.statement_number,
        opening_balance=retag(stated_opening(document), MT940, CAMT053, BalanceRole.OPENING),
        closing_balance=retag(document.closing_balance, MT940, CAMT053, BalanceRole.CLOSING),
        entries=entries,
        closing_available_balance=retag(
            document.closing_available_balance, MT940, CAMT053, BalanceRole.AVAILABLE
        ),
        forward_available_balances=retag_all(
            document.forward_available_balances, MT940, CAMT053, BalanceRole.FORWARD
        ),
        validate_balances=not options.skip_balance_validation,
        **_camt_header(document, options),
    )
    log_completed(MT940, CAMT053, len(entries))
    return result


@traced_engine("camt053_to_mt940", "1.0", fingerprint_fields=("document",))
def convert_camt053_to_mt940(
    document: Camt053Document,
    options: ConversionOptions = DEFAULT_OPTIONS,
) -> Mt940Document:
    """
    End-of-day bank statement -> statement.

    Raises:
        MissingBalanceError: the statement and the options carry no balance.
        BalanceMismatchError: balances do not reconcile with the entries.
    """
    entries = tuple(report_entry_to_entry(e) for e in document.entries)
    balances = resolve_balances(
        document.opening_balance or options.opening_balance,
        document.closing_balance or options.closing_balance,
        entries, CAMT053, MT940, options,
    )
    result = Mt940Document(
        account_id=document.account_id,
        reference_id=_mt_reference_id(document.statement_id, options),
        statement_number=positional_statement_number(document.sequence_number),
        opening_balance=balances.opening,
        closing_balance=balances.closing,
        entries=entries,
        closing_available_balance=retag(
            document.closing_available_balance, CAMT053, MT940, BalanceRole.AVAILABLE
        ),
        forward_available_balances=retag_all(
            document.forward_available_balances, CAMT053, MT940, BalanceRole.FORWARD
        ),
        validate_balances=not options.skip_balance_validation,
    )
    log_completed(CAMT053, MT940, len(entries))
    return result


# ---------------------------------------------------------------------------
# camt.054
# ---------------------------------------------------------------------------


@traced_engine("mt940_to_camt054", "1.0", fingerprint_fields=("document",))
def convert_mt940_to_camt054(
    document: Mt940Document,
    options: ConversionOptions = DEFAULT_OPTIONS,
) -> Camt054Document:
    """Statement -> debit/credit notification; balances are dropped."""
    entries = tuple(entry_to_report_entry(e) for e in document.entries)
    result = Camt054Document(
        notification_id=document.reference_id,
        entries=entries,
        **_camt_header(document, options),
    )
    log_completed(MT940, CAMT054, len(entries))
    return result


@traced_engine("camt054_to_mt940", "1.0", fingerprint_fields=("document",))
def convert_camt054_to_mt940(
    document: Camt054Document,
    options: ConversionOptions = DEFAULT_OPTIONS,
) -> Mt940Document:
    """
    Notification -> statement.

    Balances come from the options; without them the statement opens at a
    zero credit balance and the closing balance is derived from the entries.
    """
    entries = tuple(report_entry_to_entry(e) for e in document.entries)
    creation_date = document.creation_datetime.date() if document.creation_datetime else None
    opening, closing = fallback_balances(
        document.currency, entries, creation_date, MT940, options,
    )
    balances = resolve_balances(opening, closing, entries, CAMT054, MT940, options)
    result = Mt940Document(
        account_id=document.account_id,
        reference_id=_mt_reference_id(document.notification_id, options),
        statement_number=get_conversion_tables().defaults.statement_number,
        opening_balance=balances.opening,
        closing_balance=balances.closing,
        entries=entries,
        validate_balances=not options.skip_balance_validation,
    )
    log_completed(CAMT054, MT940, len(entries))
    return result
