"""Unit tests for the regular-expression field extractor."""

from __future__ import annotations

import pytest

from bonustally.parsing.extract import ExtractionPatterns, RegexFieldExtractor


@pytest.fixture
def extractor() -> RegexFieldExtractor:
    """Provide the stock extractor."""
    return RegexFieldExtractor.default()


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        pytest.param("factura de [ABC12345] por $10", "ABC12345", id="plain"),
        pytest.param("de [abc12345]", "ABC12345", id="lowercase"),
        pytest.param("de [ ABC 12345 ]", "ABC12345", id="inner_spaces"),
        pytest.param("de [ a b c 1 2 3 4 5 ]", "ABC12345", id="spaced_characters"),
        pytest.param("de [AB12345]", None, id="two_letters"),
        pytest.param("de [ABC1234]", None, id="four_digits"),
        pytest.param("de ABC12345", None, id="no_brackets"),
        pytest.param("de [\u212aAB12345]", None, id="kelvin_sign"),
        pytest.param("de [ABC\u0661\u0662\u0663\u0664\u0665]", None, id="arabic_digits"),
        pytest.param("de [ABC\uff11\uff12\uff13\uff14\uff15]", None, id="fullwidth_digits"),
        pytest.param("[XYZ00001] first [ABC12345] second", "XYZ00001", id="first_wins"),
    ],
)
def test_extract_identifier(
    extractor: RegexFieldExtractor, text: str, expected: str | None
) -> None:
    """Identifiers are bracketed, whitespace-tolerant and upper-cased."""
    assert extractor.extract_identifier(text) == expected


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        pytest.param("por $1,500", 1500, id="thousands"),
        pytest.param("por $ 250", 250, id="space_after_sign"),
        pytest.param("por $1,234.99", 1234, id="cents_truncated"),
        pytest.param("por $0", 0, id="zero"),
        pytest.param("por 1500", 0, id="no_sign"),
        pytest.param("por $", 0, id="sign_only"),
        pytest.param("$5 then $7", 5, id="first_amount"),
    ],
)
def test_extract_amount(
    extractor: RegexFieldExtractor, text: str, expected: int
) -> None:
    """Amounts drop separators and cents; missing amounts are zero."""
    assert extractor.extract_amount(text) == expected


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        pytest.param("[ABC12345] Juan Perez ha retirado $100", "Juan Perez", id="retirado"),
        pytest.param("[ABC12345] Ana ha guardado un item", "Ana", id="guardado"),
        pytest.param("[ABC12345] Luis HA ENVIADO $5", "Luis", id="case_insensitive"),
        pytest.param("[ABC12345] ha retirado $100", None, id="missing_name"),
        pytest.param("Juan ha retirado $100", None, id="missing_identifier"),
        pytest.param("[ABC12345] Juan ha comprado algo", None, id="unknown_verb"),
    ],
)
def test_extract_name(
    extractor: RegexFieldExtractor, text: str, expected: str | None
) -> None:
    """Names sit between the identifier and a known verb."""
    assert extractor.extract_name(text) == expected


def test_custom_patterns_change_verbs() -> None:
    """A custom rule set swaps the accepted name verbs."""
    extractor = ExtractionPatterns(name_verbs=("vendido",)).compile()

    assert extractor.extract_name("[ABC12345] Juan ha vendido algo") == "Juan"
    assert extractor.extract_name("[ABC12345] Juan ha retirado algo") is None
