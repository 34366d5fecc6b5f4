"""
Constraint Extractor.

Pulls a price ceiling and a known color out of a free-text shopping query
and returns what is left as the clean search text:

    "Blue iPhone below $500" -> clean_text="iPhone", price_ceiling=500, color="Blue"

Only the first price phrase and the first color are consumed. Extraction is
total: text without a match passes through with the field left as None.
"""

import re
from typing import Optional, Tuple

from core.logging import get_logger
from search.models import ExtractedConstraints
from search.vocabulary import DEFAULT_VOCABULARY, ExtractionVocabulary

logger = get_logger(__name__)

_WHITESPACE = re.compile(r"\s+")


def _collapse(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def _cut(text: str, match: re.Match) -> str:
    start, end = match.span()
    return text[:start] + " " + text[end:]


def extract_price(
    text: str, vocabulary: ExtractionVocabulary = DEFAULT_VOCABULARY,
) -> Tuple[Optional[int], str]:
    """Return (price_ceiling, text without the price phrase)."""
    match = vocabulary.price_pattern.search(text)
    if not match:
        return None, text
    return int(match.group(1)), _cut(text, match)


def extract_color(
    text: str, vocabulary: ExtractionVocabulary = DEFAULT_VOCABULARY,
) -> Tuple[Optional[str], str]:
    """Return (title-cased color, text without the color name)."""
    match = vocabulary.color_pattern.search(text)
    if not match:
        return None, text
    return _collapse(match.group(1)).title(), _cut(text, match)


def extract(
    text: str, vocabulary: ExtractionVocabulary = DEFAULT_VOCABULARY,
) -> ExtractedConstraints:
    """
    Extract price and color constraints from a query.

    Args:
        text: Raw query text.
        vocabulary: Price phrases and colors to recognise.

    Returns:
        ExtractedConstraints with the residual text whitespace-normalized.
    """
    text = text or ""
    price, remaining = extract_price(text, vocabulary)
    color, remaining = extract_color(remaining, vocabulary)

    constraints = ExtractedConstraints(
        clean_text=_collapse(remaining),
        price_ceiling=price,
        color=color,
    )
    if not constraints.is_empty:
        logger.debug(
            "Extracted query constraints",
            query=text,
            clean_text=constraints.clean_text,
            price=price,
            color=color,
        )
    return constraints
