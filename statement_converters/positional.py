"""
Positional-text family converters: MT940 <-> MT941, MT940 <-> MT942.

MT941 carries balances and a movement summary but no entries; MT942 is
the intraday variant of MT940 with interim balance tags and an optional
opening balance. Every function is pure and constructs its target in a
single step.
"""

from __future__ import annotations

from statement_config import BalanceRole
from statement_converters.mapping import (
    log_completed,
    resolve_balances,
    retag,
    retag_all,
    stated_opening,
)
from statement_converters.options import DEFAULT_OPTIONS, ConversionOptions
from statement_engines.tracer import traced_engine
from statement_kernel.domain.documents import (
    Mt940Document,
    Mt941Document,
    Mt942Document,
    StatementFormat,
)

MT940 = StatementFormat.MT940
MT941 = StatementFormat.MT941
MT942 = StatementFormat.MT942


@traced_engine("mt940_to_mt941", "1.0", fingerprint_fields=("document",))
def convert_mt940_to_mt941(
    document: Mt940Document,
    options: ConversionOptions = DEFAULT_OPTIONS,
) -> Mt941Document:
    """
    Summarise a statement as a balance report.

    Entries are dropped; their counts and per-direction totals are kept.
    """
    totals = document.totals
    result = Mt941Document(
        account_id=document.account_id,
        reference_id=document.reference_id,
        statement_number=document.statement_number,
        opening_balance=retag(stated_opening(document), MT940, MT941, BalanceRole.OPENING),
        closing_balance=retag(document.closing_balance, MT940, MT941, BalanceRole.CLOSING),
        closing_available_balance=retag(
            document.closing_available_balance, MT940, MT941, BalanceRole.AVAILABLE
        ),
        forward_available_balances=retag_all(
            document.forward_available_balances, MT940, MT941, BalanceRole.FORWARD
        ),
        credit_count=totals.credit_count,
        credit_total=totals.credit_total,
        debit_count=totals.debit_count,
        debit_total=totals.debit_total,
        validate_balances=not options.skip_balance_validation,
    )
    log_completed(MT940, MT941, 0)
    return result


@traced_engine("mt941_to_mt940", "1.0", fingerprint_fields=("document",))
def convert_mt941_to_mt940(
    document: Mt941Document,
    options: ConversionOptions = DEFAULT_OPTIONS,
) -> Mt940Document:
    """
    Expand a balance report into an entry-less statement.

    A missing opening balance is derived from the closing balance. With both
    present they must agree (there are no entries to account for a
    difference) unless ``skip_balance_validation`` is set.
    """
    balances = resolve_balances(
        document.opening_balance, document.closing_balance, (), MT941, MT940, options,
    )
    result = Mt940Document(
        account_id=document.account_id,
        reference_id=document.reference_id,
        statement_number=document.statement_number,
        opening_balance=balances.opening,
        closing_balance=balances.closing,
        closing_available_balance=retag(
            document.closing_available_balance, MT941, MT940, BalanceRole.AVAILABLE
        ),
        forward_available_balances=retag_all(
            document.forward_available_balances, MT941, MT940, BalanceRole.FORWARD
        ),
        validate_balances=not options.skip_balance_validation,
    )
    log_completed(MT941, MT940, 0)
    return result


@traced_engine("mt940_to_mt942", "1.0", fingerprint_fields=("document",))
def convert_mt940_to_mt942(
    document: Mt940Document,
    options: ConversionOptions = DEFAULT_OPTIONS,
) -> Mt942Document:
    """Re-issue a statement as an interim report with interim balance tags."""
    result = Mt942Document(
        account_id=document.account_id,
        reference_id=document.reference_id,
        statement_number=document.statement_number,
        opening_balance=retag(stated_opening(document), MT940, MT942, BalanceRole.OPENING),
        closing_balance=retag(document.closing_balance, MT940, MT942, BalanceRole.CLOSING),
        entries=document.entries,
        date_time_indication=options.creation_datetime,
        validate_balances=not options.skip_balance_validation,
    )
    log_completed(MT940, MT942, len(result.entries))
    return result


@traced_engine("mt942_to_mt940", "1.0", fingerprint_fields=("document",))
def convert_mt942_to_mt940(
    document: Mt942Document,
    options: ConversionOptions = DEFAULT_OPTIONS,
) -> Mt940Document:
    """Finalise an interim report; a missing opening balance is derived."""
    balances = resolve_balances(
        document.opening_balance, document.closing_balance, document.entries,
        MT942, MT940, options,
    )
    result = Mt940Document(
        account_id=document.account_id,
        reference_id=document.reference_id,
        statement_number=document.statement_number,
        opening_balance=balances.opening,
        closing_balance=balances.closing,
        entries=document.entries,
        validate_balances=not options.skip_balance_validation,
    )
    log_completed(MT942, MT940, len(result.entries))
    return result
