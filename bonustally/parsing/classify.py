"""Classify normalized log lines as sales, name updates, or noise.

The checks run in a fixed order: a line that looks like a paid invoice is
never also considered as a name update, even when the sale is rejected for
missing fields.
"""

from __future__ import annotations

import dataclasses
import enum
import typing as typ

from .extract import RegexFieldExtractor
from .normalize import normalize_text

if typ.TYPE_CHECKING:
    from .extract import FieldExtractor

SALE_MARKER = "ha pagado una factura"
SALE_TARGET_MARKER = "de ["
NAME_MARKERS: tuple[str, ...] = ("ha retirado", "ha guardado", "ha enviado")


class LineKind(enum.StrEnum):
    """Outcome of classifying one line."""

    SALE = "sale"
    NAME_UPDATE = "name_update"
    INCOMPLETE = "incomplete"
    NOISE = "noise"


@dataclasses.dataclass(frozen=True, slots=True)
class ClassifiedLine:
    """A classified line with whatever fields were extracted."""

    kind: LineKind
    text: str
    identifier: str | None = None
    amount: int = 0
    name: str | None = None

    @property
    def is_sale(self) -> bool:
        """Return True when the line should be recorded as a sale."""
        return self.kind is LineKind.SALE


class LineClassifier:
    """Apply the sale / name-update decision policy to raw message text."""

    def __init__(self, extractor: FieldExtractor | None = None) -> None:
        """Bind the classifier to a field extractor."""
        self._extractor = extractor or RegexFieldExtractor.default()

    def classify(self, raw_text: str) -> ClassifiedLine:
        """Normalize ``raw_text`` and classify it."""
        text = normalize_text(raw_text)
        lowered = text.lower()

        if SALE_MARKER in lowered and SALE_TARGET_MARKER in lowered:
            return self._classify_sale(text)
        if any(marker in lowered for marker in NAME_MARKERS):
            return self._classify_name(text)
        return ClassifiedLine(kind=LineKind.NOISE, text=text)

    def _classify_sale(self, text: str) -> ClassifiedLine:
        identifier = self._extractor.extract_identifier(text)
        amount = self._extractor.extract_amount(text)
        kind = (
            LineKind.SALE
            if identifier is not None and amount > 0
            else LineKind.INCOMPLETE
        )
        return ClassifiedLine(kind=kind, text=text, identifier=identifier, amount=amount)

    def _classify_name(self, text: str) -> ClassifiedLine:
        identifier = self._extractor.extract_identifier(text)
        name = self._extractor.extract_name(text)
        kind = (
            LineKind.NAME_UPDATE
            if identifier is not None and name is not None
            else LineKind.INCOMPLETE
        )
        return ClassifiedLine(kind=kind, text=text, identifier=identifier, name=name)


__all__ = [
    "NAME_MARKERS",
    "SALE_MARKER",
    "SALE_TARGET_MARKER",
    "ClassifiedLine",
    "LineClassifier",
    "LineKind",
]
