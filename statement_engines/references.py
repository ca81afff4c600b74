"""
Reference extractor -- tagged payment identifiers inside free text.

SEPA remittance text in the positional-text family embeds structured
identifiers as ``TAG+value`` segments, e.g.::

    EREF+E2E-001 MREF+MANDATE-7 CRED+DE98ZZZ09999999999 SVWZ+Invoice 4711

``extract_tags`` splits such text into a ``RemittanceTags`` record and
``format_tags`` turns the record back into text in canonical tag order.
Converters use the pair whenever an entry crosses between the free-text
and the discrete-identifier families.

Architecture: statement_engines -- pure, zero I/O.

Invariants enforced:
    - A tag is recognised at the start of the text or after whitespace.
    - A value runs from just after its tag to the next recognised tag or
      the end of the text; surrounding whitespace is dropped and internal
      whitespace runs collapse to one space.
    - Untagged leading content is kept as ``remainder``; ``SVWZ`` content
      is appended to it.
    - extract_tags(format_tags(tags)) == tags for values without tag
      markers of their own; only ordering and whitespace may change.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

END_TO_END_TAG = "EREF"
MANDATE_TAG = "MREF"
CREDITOR_TAG = "CRED"
INSTRUCTION_TAG = "KREF"
NAME_TAG = "NAME"
IBAN_TAG = "IBAN"
BIC_TAG = "BIC"
PURPOSE_TAG = "SVWZ"

NOT_PROVIDED = "NOTPROVIDED"

# Canonical emission order
_TAG_ORDER = (
    (END_TO_END_TAG, "end_to_end_id"),
    (MANDATE_TAG, "mandate_id"),
    (CREDITOR_TAG, "creditor_id"),
    (INSTRUCTION_TAG, "instruction_id"),
    (NAME_TAG, "counterparty_name"),
    (IBAN_TAG, "counterparty_iban"),
    (BIC_TAG, "counterparty_bic"),
)
_FIELD_FOR_TAG = dict(_TAG_ORDER)

_TAG_PATTERN = re.compile(
    r"(?:^|(?<=\s))(" + "|".join(
        [tag for tag, _ in _TAG_ORDER] + [PURPOSE_TAG]
    ) + r")\+"
)


def _clean(value: str) -> str:
    return " ".join(value.split())


@dataclass(frozen=True, slots=True)
class RemittanceTags:
    """Structured identifiers plus the untagged remainder of a remittance text."""

    end_to_end_id: str | None = None
    mandate_id: str | None = None
    creditor_id: str | None = None
    instruction_id: str | None = None
    counterparty_name: str | None = None
    counterparty_iban: str | None = None
    counterparty_bic: str | None = None
    remainder: str = ""

    @property
    def has_identifiers(self) -> bool:
        return any(getattr(self, name) for _, name in _TAG_ORDER)


def extract_tags(text: str | None) -> RemittanceTags:
    """
    Split tagged remittance text into its parts.

    Postconditions:
        - Absent tags yield None; an empty or None text yields an empty
          record.
        - A tag that occurs more than once keeps its values joined by a
          single space, in order of appearance.
    """
    if not text:
        return RemittanceTags()

    matches = list(_TAG_PATTERN.finditer(text))
    if not matches:
        return RemittanceTags(remainder=_clean(text))

    collected: dict[str, list[str]] = {}
    for index, match in enumerate(matches):
        end = matches[index + 1].start() if index + 1 < len(matches) else len(text)
        value = _clean(text[match.end():end])
        if value:
            collected.setdefault(match.group(1), []).append(value)

    remainder_parts = [_clean(text[:matches[0].start()])]
    remainder_parts.extend(collected.pop(PURPOSE_TAG, []))

    fields = {_FIELD_FOR_TAG[tag]: " ".join(values) for tag, values in collected.items()}
    return RemittanceTags(
        remainder=" ".join(part for part in remainder_parts if part),
        **fields,
    )


def format_tags(tags: RemittanceTags) -> str:
    """
    Render ``tags`` as text in canonical order: EREF, MREF, CRED, KREF,
    NAME, IBAN, BIC, SVWZ.

    Empty parts are omitted, as is an end-to-end id of ``NOTPROVIDED``.
    Without any identifier the remainder is returned as is, without a
    ``SVWZ+`` prefix.
    """
    parts: list[str] = []
    for tag, name in _TAG_ORDER:
        value = getattr(tags, name)
        if not value:
            continue
        if tag == END_TO_END_TAG and value == NOT_PROVIDED:
            continue
        parts.append(f"{tag}+{value}")

    if not parts:
        return tags.remainder
    if tags.remainder:
        parts.append(f"{PURPOSE_TAG}+{tags.remainder}")
    return " ".join(parts)
