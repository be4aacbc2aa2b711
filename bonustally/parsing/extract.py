"""Field extraction from normalized log lines.

Extraction is isolated behind :class:`FieldExtractor` so the classifier does
not care whether fields are pulled out with regular expressions or a
hand-written scanner. :class:`RegexFieldExtractor` is the default and is
driven entirely by an :class:`ExtractionPatterns` rule set.
"""

from __future__ import annotations

import dataclasses
import re
import typing as typ

# Three ASCII letters then five ASCII digits, whitespace allowed between any
# characters.
IDENTIFIER_PATTERN = r"(?a:\[\s*((?:[A-Za-z]\s*){3}(?:\d\s*){4}\d)\s*\])"
AMOUNT_PATTERN = r"\$\s*(\d+(?:,\d{3})*(?:\.\d{2})?)"
NAME_VERBS: tuple[str, ...] = ("retirado", "guardado", "enviado")

_WHITESPACE_RE = re.compile(r"\s+")


class FieldExtractor(typ.Protocol):
    """Pulls identifier, amount and name fields out of a normalized line."""

    def extract_identifier(self, text: str) -> str | None:
        """Return the upper-cased identifier, or ``None`` when absent."""
        ...

    def extract_amount(self, text: str) -> int:
        """Return the whole-unit amount, or ``0`` when absent."""
        ...

    def extract_name(self, text: str) -> str | None:
        """Return the display name preceding a name verb, or ``None``."""
        ...


def _name_pattern(identifier_pattern: str, verbs: typ.Sequence[str]) -> str:
    alternatives = "|".join(re.escape(verb) for verb in verbs)
    return rf"{identifier_pattern}\s+(?P<name>.+?)\s+ha\s+(?:{alternatives})\b"


@dataclasses.dataclass(frozen=True, slots=True)
class ExtractionPatterns:
    """Regular-expression rules for each extracted field."""

    identifier: str = IDENTIFIER_PATTERN
    amount: str = AMOUNT_PATTERN
    name_verbs: tuple[str, ...] = NAME_VERBS

    def compile(self) -> RegexFieldExtractor:
        """Compile the rules into an extractor."""
        return RegexFieldExtractor(
            identifier_re=re.compile(self.identifier, re.IGNORECASE),
            amount_re=re.compile(self.amount),
            name_re=re.compile(
                _name_pattern(self.identifier, self.name_verbs), re.IGNORECASE
            ),
        )


@dataclasses.dataclass(frozen=True, slots=True)
class RegexFieldExtractor:
    """Regular-expression implementation of :class:`FieldExtractor`."""

    identifier_re: re.Pattern[str]
    amount_re: re.Pattern[str]
    name_re: re.Pattern[str]

    @classmethod
    def default(cls) -> RegexFieldExtractor:
        """Return an extractor for the stock log grammar."""
        return ExtractionPatterns().compile()

    def extract_identifier(self, text: str) -> str | None:
        """Return the bracketed identifier with whitespace removed, upper-cased.

        >>> RegexFieldExtractor.default().extract_identifier("de [abc 12345]")
        'ABC12345'

        """
        match = self.identifier_re.search(text)
        if match is None:
            return None
        return _WHITESPACE_RE.sub("", match.group(1)).upper()

    def extract_amount(self, text: str) -> int:
        """Return the ``$`` amount as an integer, discarding any cents.

        The fraction is truncated, never rounded: ``$1,234.99`` yields 1234.
        """
        match = self.amount_re.search(text)
        if match is None:
            return 0
        whole, _, _cents = match.group(1).replace(",", "").partition(".")
        return int(whole)

    def extract_name(self, text: str) -> str | None:
        """Return the text between the identifier and a trailing name verb."""
        match = self.name_re.search(text)
        if match is None:
            return None
        name = match.group("name").strip()
        return name or None


__all__ = [
    "AMOUNT_PATTERN",
    "IDENTIFIER_PATTERN",
    "NAME_VERBS",
    "ExtractionPatterns",
    "FieldExtractor",
    "RegexFieldExtractor",
]
