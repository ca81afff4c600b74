"""
Structured purpose codec for the German ``:86:`` sub-field layout.

Many banks fill the MT940 information-to-account-owner field with numbered
sub-fields after a three-digit business transaction code (GVC)::

    166?00SEPA-GUTSCHRIFT?109310?20EREF+E2E-001 SVWZ+Inv?21oice 4711
    ?30COBADEFFXXX?31DE89370400440532013000?32ACME GmbH

Sub-fields: ``?00`` booking text, ``?10`` primanota, ``?20``-``?29`` and
``?60``-``?63`` purpose lines, ``?30`` counterparty bank code or BIC,
``?31`` counterparty account or IBAN, ``?32``/``?33`` counterparty name,
``?34`` text key extension.

Purpose lines are fixed 27-character slices of one text, so they are
concatenated without separators.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

SUBFIELD_LENGTH = 27

_PURPOSE_SLOTS = tuple(range(20, 30)) + tuple(range(60, 64))
_NAME_SLOTS = (32, 33)

_STRUCTURED_PATTERN = re.compile(r"^(\d{3})\?\d{2}", re.DOTALL)
_SUBFIELD_PATTERN = re.compile(r"\?(\d{2})")


@dataclass(frozen=True, slots=True)
class StructuredPurpose:
    gvc_code: str
    booking_text: str | None = None
    primanota: str | None = None
    purpose_lines: tuple[str, ...] = ()
    bank_code: str | None = None
    account: str | None = None
    name: str | None = None
    text_key_extension: str | None = None

    @property
    def purpose_text(self) -> str:
        return "".join(self.purpose_lines)


def is_structured(text: str | None) -> bool:
    return bool(text) and _STRUCTURED_PATTERN.match(_unwrap(text)) is not None


def _unwrap(text: str) -> str:
    return text.replace("\r", "").replace("\n", "")


def parse_structured_purpose(text: str | None) -> StructuredPurpose | None:
    """
    Parse ``text`` into its sub-fields.

    Returns:
        None when ``text`` does not start with a GVC code followed by a
        ``?NN`` sub-field; line breaks inside the text are ignored.
    """
    if not text:
        return None
    flat = _unwrap(text)
    head = _STRUCTURED_PATTERN.match(flat)
    if head is None:
        return None

    body = flat[3:]
    pieces = _SUBFIELD_PATTERN.split(body)
    # pieces: ["", "00", "SEPA-GUTSCHRIFT", "10", "9310", ...]
    subfields: dict[int, str] = {}
    for index in range(1, len(pieces) - 1, 2):
        subfields[int(pieces[index])] = subfields.get(int(pieces[index]), "") + pieces[index + 1]

    purpose_lines = tuple(subfields[slot] for slot in _PURPOSE_SLOTS if subfields.get(slot))
    name = "".join(subfields.get(slot, "") for slot in _NAME_SLOTS)
    return StructuredPurpose(
        gvc_code=head.group(1),
        booking_text=subfields.get(0) or None,
        primanota=subfields.get(10) or None,
        purpose_lines=purpose_lines,
        bank_code=subfields.get(30) or None,
        account=subfields.get(31) or None,
        name=name or None,
        text_key_extension=subfields.get(34) or None,
    )


def split_purpose(text: str) -> tuple[str, ...]:
    """Slice ``text`` into purpose lines; anything past the last slot is dropped."""
    lines = tuple(
        text[i:i + SUBFIELD_LENGTH] for i in range(0, len(text), SUBFIELD_LENGTH)
    )
    return lines[:len(_PURPOSE_SLOTS)]


def format_structured_purpose(purpose: StructuredPurpose) -> str:
    """Render ``purpose`` in the ``:86:`` sub-field layout, without line breaks."""
    parts = [purpose.gvc_code]
    if purpose.booking_text:
        parts.append(f"?00{purpose.booking_text}")
    if purpose.primanota:
        parts.append(f"?10{purpose.primanota}")
    for slot, line in zip(_PURPOSE_SLOTS, purpose.purpose_lines):
        parts.append(f"?{slot:02d}{line}")
    if purpose.bank_code:
        parts.append(f"?30{purpose.bank_code}")
    if purpose.account:
        parts.append(f"?31{purpose.account}")
    if purpose.name:
        name = purpose.name[:SUBFIELD_LENGTH * len(_NAME_SLOTS)]
        for slot, start in zip(_NAME_SLOTS, range(0, len(name), SUBFIELD_LENGTH)):
            parts.append(f"?{slot:02d}{name[start:start + SUBFIELD_LENGTH]}")
    if purpose.text_key_extension:
        parts.append(f"?34{purpose.text_key_extension}")
    return "".join(parts)
