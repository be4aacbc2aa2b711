"""Log-line normalization, field extraction and classification."""

from __future__ import annotations

from .classify import ClassifiedLine, LineClassifier, LineKind
from .extract import ExtractionPatterns, FieldExtractor, RegexFieldExtractor
from .normalize import normalize_text

__all__ = [
    "ClassifiedLine",
    "ExtractionPatterns",
    "FieldExtractor",
    "LineClassifier",
    "LineKind",
    "RegexFieldExtractor",
    "normalize_text",
]
