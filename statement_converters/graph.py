"""
Conversion graph -- explicit edge table plus hub routing.

Responsibility:
    Maps every supported (source, target) format pair to its direct
    converter and routes pairs without a direct edge through the hub
    format (MT940): A -> MT940 -> B.

Architecture position:
    Converters -- the only module that dispatches between converters.
    Direct converters never call the router or each other, so the graph
    has no converter-to-converter cycles.

Failure modes:
    - UnsupportedConversionError: unknown document type, or no direct or
      hub-routed path for the pair.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType
from typing import Any

from statement_converters.elemental import (
    convert_camt052_to_mt940,
    convert_camt053_to_mt940,
    convert_camt054_to_mt940,
    convert_mt940_to_camt052,
    convert_mt940_to_camt053,
    convert_mt940_to_camt054,
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
from statement_kernel.domain.documents import (
    Camt052Document,
    Camt053Document,
    Camt054Document,
    LedgerDocument,
    Mt940Document,
    Mt941Document,
    Mt942Document,
    StatementFormat,
)
from statement_kernel.exceptions import UnsupportedConversionError
from statement_kernel.logging_config import LogContext, get_logger

logger = get_logger("converters.graph")

HUB_FORMAT = StatementFormat.MT940

Converter = Callable[[Any, ConversionOptions], Any]

DOCUMENT_TYPES: Mapping[StatementFormat, type] = MappingProxyType({
    StatementFormat.MT940: Mt940Document,
    StatementFormat.MT941: Mt941Document,
    StatementFormat.MT942: Mt942Document,
    StatementFormat.CAMT052: Camt052Document,
    StatementFormat.CAMT053: Camt053Document,
    StatementFormat.CAMT054: Camt054Document,
    StatementFormat.LEDGER: LedgerDocument,
})

EDGES: Mapping[tuple[StatementFormat, StatementFormat], Converter] = MappingProxyType({
    (StatementFormat.MT940, StatementFormat.MT941): convert_mt940_to_mt941,
    (StatementFormat.MT941, StatementFormat.MT940): convert_mt941_to_mt940,
    (StatementFormat.MT940, StatementFormat.MT942): convert_mt940_to_mt942,
    (StatementFormat.MT942, StatementFormat.MT940): convert_mt942_to_mt940,
    (StatementFormat.MT940, StatementFormat.CAMT052): convert_mt940_to_camt052,
    (StatementFormat.CAMT052, StatementFormat.MT940): convert_camt052_to_mt940,
    (StatementFormat.MT940, StatementFormat.CAMT053): convert_mt940_to_camt053,
    (StatementFormat.CAMT053, StatementFormat.MT940): convert_camt053_to_mt940,
    (StatementFormat.MT940, StatementFormat.CAMT054): convert_mt940_to_camt054,
    (StatementFormat.CAMT054, StatementFormat.MT940): convert_camt054_to_mt940,
    (StatementFormat.MT940, StatementFormat.LEDGER): convert_mt940_to_ledger,
    (StatementFormat.LEDGER, StatementFormat.MT940): convert_ledger_to_mt940,
    (StatementFormat.CAMT053, StatementFormat.LEDGER): convert_camt053_to_ledger,
    (StatementFormat.LEDGER, StatementFormat.CAMT053): convert_ledger_to_camt053,
})


def find_route(
    source: StatementFormat | str,
    target: StatementFormat | str,
) -> tuple[StatementFormat, ...]:
    """
    Formats visited converting ``source`` to ``target``, both ends included.

    Same format: ``(source,)``. Direct edge: ``(source, target)``.
    Otherwise ``(source, MT940, target)`` when both hops exist.

    Raises:
        UnsupportedConversionError: no direct or hub-routed path.
    """
    try:
        source = StatementFormat(source)
        target = StatementFormat(target)
    except ValueError as exc:
        raise UnsupportedConversionError(str(source), str(target)) from exc
    if source == target:
        return (source,)
    if (source, target) in EDGES:
        return (source, target)
    if (source, HUB_FORMAT) in EDGES and (HUB_FORMAT, target) in EDGES:
        return (source, HUB_FORMAT, target)
    raise UnsupportedConversionError(source.value, target.value)


def document_format(document: object) -> StatementFormat | None:
    """Format of ``document``, None for anything that is not a statement document."""
    for fmt, document_type in DOCUMENT_TYPES.items():
        if isinstance(document, document_type):
            return fmt
    return None


def convert(
    document: Any,
    target_format: StatementFormat | str,
    options: ConversionOptions = DEFAULT_OPTIONS,
) -> Any:
    """
    Convert ``document`` into ``target_format``.

    A document already in the target format is returned unchanged. All
    hops run to completion or the call raises; no partial result escapes.

    Raises:
        UnsupportedConversionError: unknown document type or pair.
        Any error of the direct converters on the route.
    """
    source = document_format(document)
    try:
        target = StatementFormat(target_format)
    except ValueError as exc:
        source_name = source.value if source is not None else type(document).__name__
        raise UnsupportedConversionError(source_name, str(target_format)) from exc
    if source is None:
        raise UnsupportedConversionError(type(document).__name__, target.value)

    route = find_route(source, target)
    with LogContext.bind(source_format=source.value, target_format=target.value):
        if len(route) > 2:
            logger.debug(
                "conversion_routed_via_hub",
                extra={"route": [fmt.value for fmt in route]},
            )
        result = document
        for hop_source, hop_target in zip(route, route[1:]):
            result = EDGES[(hop_source, hop_target)](result, options)
    return result


def convert_many(
    documents: Iterable[Any],
    target_format: StatementFormat | str,
    options: ConversionOptions = DEFAULT_OPTIONS,
) -> tuple[Any, ...]:
    """Convert each document independently; the first failure propagates."""
    return tuple(convert(document, target_format, options) for document in documents)
