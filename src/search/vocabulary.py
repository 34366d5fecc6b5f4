"""
Extraction vocabulary: price phrases and known color names.

Kept as data so tests and deployments can extend the tables without
touching extractor logic:

    from search.vocabulary import DEFAULT_VOCABULARY
    vocab = DEFAULT_VOCABULARY.extend(colors=["coral"])
"""

import re
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Iterable, Tuple


# ============================================================================
# Default Tables
# ============================================================================

# English and French "price ceiling" phrases ("under $500", "moins de 300").
PRICE_PHRASES: Tuple[str, ...] = (
    "below",
    "under",
    "less than",
    "<",
    "sous",
    "moins de",
)

# Order matters for ties: earlier entries win over later ones of equal length.
KNOWN_COLORS: Tuple[str, ...] = (
    "black", "white", "silver", "gray", "grey", "red", "blue", "green",
    "yellow", "orange", "purple", "pink", "gold", "rose gold", "brown",
    "navy", "teal", "midnight", "space gray", "starlight", "graphite",
    "sky blue", "bay blue", "titanium",
)


@dataclass(frozen=True)
class ExtractionVocabulary:
    """Phrase tables used by the constraint extractor."""
    price_phrases: Tuple[str, ...] = PRICE_PHRASES
    colors: Tuple[str, ...] = KNOWN_COLORS

    def extend(
        self,
        price_phrases: Iterable[str] = (),
        colors: Iterable[str] = (),
    ) -> "ExtractionVocabulary":
        """Return a new vocabulary with extra entries appended (duplicates skipped)."""
        return replace(
            self,
            price_phrases=_merge(self.price_phrases, price_phrases),
            colors=_merge(self.colors, colors),
        )

    @property
    def price_pattern(self) -> re.Pattern:
        return _build_price_pattern(self.price_phrases)

    @property
    def color_pattern(self) -> re.Pattern:
        return _build_color_pattern(self.colors)


DEFAULT_VOCABULARY = ExtractionVocabulary()


# ============================================================================
# Pattern Builders
# ============================================================================

def _merge(existing: Tuple[str, ...], extra: Iterable[str]) -> Tuple[str, ...]:
    seen = {e.lower() for e in existing}
    merged = list(existing)
    for item in extra:
        item = item.strip()
        if item and item.lower() not in seen:
            seen.add(item.lower())
            merged.append(item)
    return tuple(merged)


def _longest_first(phrases: Tuple[str, ...]) -> list:
    # sorted() is stable, so equal-length entries keep their listed order
    return sorted(phrases, key=len, reverse=True)


@lru_cache(maxsize=32)
def _build_price_pattern(phrases: Tuple[str, ...]) -> re.Pattern:
    """``<phrase> $<int>`` anywhere in the text, with surrounding spaces."""
    alternation = "|".join(re.escape(p) for p in _longest_first(phrases))
    return re.compile(r"\s*(?:" + alternation + r")\s*\$?(\d+)", re.IGNORECASE)


@lru_cache(maxsize=32)
def _build_color_pattern(colors: Tuple[str, ...]) -> re.Pattern:
    """One alternation over all colors, multi-word names before their parts.

    A single combined pattern means "space gray" is consumed as a whole
    instead of leaving "space" behind after matching "gray".
    """
    alternation = "|".join(re.escape(c) for c in _longest_first(colors))
    return re.compile(r"\b(" + alternation + r")\b", re.IGNORECASE)
