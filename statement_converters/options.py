"""Per-call conversion options."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from statement_kernel.domain.balance import Balance


@dataclass(frozen=True, slots=True)
class ConversionOptions:
    """
    Caller-supplied inputs a conversion may need beyond the source document.

    Attributes:
        skip_balance_validation: Accept opening/closing/entries that do not
            reconcile (benign rounding drift in external data). Propagates
            to the reconciler and to the constructed document.
        opening_balance: Used when the source carries no opening balance
            (camt.054, ledger, camt.052/053 without balances).
        closing_balance: Used when the source carries no closing balance.
        message_id: Overrides the derived camt message id.
        reference_id: Overrides the derived MT reference id.
        creation_datetime: Creation timestamp for elemental targets and the
            MT942 date-time indication. Never taken from the clock.
    """

    skip_balance_validation: bool = False
    opening_balance: Balance | None = None
    closing_balance: Balance | None = None
    message_id: str | None = None
    reference_id: str | None = None
    creation_datetime: datetime | None = None


DEFAULT_OPTIONS = ConversionOptions()
