"""
Query Compiler: retrieval mode + text + vector + filters -> Weaviate GraphQL.

Pure and deterministic. The same arguments always produce byte-identical
GraphQL, vectors included (floats are rendered with a fixed format).

Search clause per mode:

    lexical          bm25: { query: "..." }
    vector           nearVector: { vector: [...] }
    hybrid           hybrid: { query: "...", vector: [...] }   (vector optional)
    hybrid_filtered  hybrid clause + where: <predicate>

Every string literal goes through escape_graphql_string().
"""

import math
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from core.logging import get_logger
from search.errors import MissingVectorError
from search.models import (
    CompiledQuery,
    FilterAnd,
    FilterCondition,
    FilterPredicate,
    RetrievalMode,
)

logger = get_logger(__name__)


DEFAULT_CLASS_NAME = "Product"

RETURN_PROPERTIES = ("name", "brand", "color", "category", "price", "description")

# Fixed float rendering: 8 significant digits, exponent form for tiny values.
FLOAT_FORMAT = ".8g"

LESS_THAN = "LessThan"
EQUAL = "Equal"

# filter key -> (property path, operator); order here is leaf order in the output
FILTER_FIELDS: Dict[str, tuple] = {
    "price": ("price", LESS_THAN),
    "color": ("color", EQUAL),
    "category": ("category", EQUAL),
}


# =============================================================================
# Literals
# =============================================================================

# GraphQL string literals may not contain raw characters below U+0020
_STRING_ESCAPES: Dict[int, str] = {code: f"\\u{code:04x}" for code in range(0x20)}
_STRING_ESCAPES.update({
    ord("\\"): "\\\\",
    ord('"'): '\\"',
    ord("\n"): "\\n",
    ord("\r"): "\\r",
    ord("\t"): "\\t",
    ord("\b"): "\\b",
    ord("\f"): "\\f",
})


def escape_graphql_string(value: str) -> str:
    """Escape a value for use inside a GraphQL string literal.

    Backslash and double quote get backslash escapes, as do the usual
    whitespace controls. Remaining control characters become \\uXXXX.
    """
    return value.translate(_STRING_ESCAPES)


def _string_literal(value: str) -> str:
    return '"' + escape_graphql_string(value) + '"'


def _float_literal(value: float) -> str:
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"Non-finite number cannot be rendered in GraphQL: {value}")
    return format(value, FLOAT_FORMAT)


def _number_literal(value: Union[int, float]) -> str:
    if isinstance(value, bool):
        raise TypeError("Boolean is not a numeric filter value")
    if isinstance(value, int):
        return str(value)
    return _float_literal(value)


def _has_vector(vector: Optional[Sequence[float]]) -> bool:
    return vector is not None and len(vector) > 0


def _vector_literal(vector: Sequence[float]) -> str:
    return "[" + ", ".join(_float_literal(v) for v in vector) + "]"


# =============================================================================
# Filters
# =============================================================================

def build_filter_predicate(filters: Optional[Mapping[str, Any]]) -> Optional[FilterPredicate]:
    """
    Build the where-clause predicate tree from a filter dict.

    None or empty-string values mean "no constraint". Zero leaves gives None,
    one leaf a bare condition, two or more an AND.
    """
    if not filters:
        return None

    unknown = sorted(set(filters) - set(FILTER_FIELDS))
    if unknown:
        logger.debug("Ignoring unsupported filter fields", fields=unknown)

    leaves: List[FilterCondition] = []
    for key, (path, operator) in FILTER_FIELDS.items():
        value = filters.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        if operator == LESS_THAN:
            if isinstance(value, str):
                value = float(value)
        else:
            value = str(value)
        leaves.append(FilterCondition(path=path, operator=operator, value=value))

    if not leaves:
        return None
    if len(leaves) == 1:
        return leaves[0]
    return FilterAnd(operands=tuple(leaves))


def render_predicate(predicate: FilterPredicate) -> str:
    """Serialize a predicate tree to Weaviate's where syntax."""
    if isinstance(predicate, FilterAnd):
        operands = ", ".join(render_predicate(op) for op in predicate.operands)
        return f"{{ operator: And, operands: [{operands}] }}"

    if predicate.operator == LESS_THAN:
        value = f"valueNumber: {_number_literal(predicate.value)}"
    else:
        value = f"valueText: {_string_literal(str(predicate.value))}"
    return f'{{ path: ["{escape_graphql_string(predicate.path)}"], operator: {predicate.operator}, {value} }}'


# =============================================================================
# Search Clauses
# =============================================================================

def _bm25_clause(text: str, vector: Optional[Sequence[float]], alpha: Optional[float]) -> str:
    return f"bm25: {{ query: {_string_literal(text)} }}"


def _near_vector_clause(text: str, vector: Optional[Sequence[float]], alpha: Optional[float]) -> str:
    if not _has_vector(vector):
        raise MissingVectorError()
    return f"nearVector: {{ vector: {_vector_literal(vector)} }}"


def _hybrid_clause(text: str, vector: Optional[Sequence[float]], alpha: Optional[float]) -> str:
    parts = [f"query: {_string_literal(text)}"]
    if alpha is not None:
        parts.append(f"alpha: {_number_literal(float(alpha))}")
    if _has_vector(vector):
        parts.append(f"vector: {_vector_literal(vector)}")
    return "hybrid: { " + ", ".join(parts) + " }"


_CLAUSE_BUILDERS: Dict[RetrievalMode, Callable[..., str]] = {
    RetrievalMode.LEXICAL: _bm25_clause,
    RetrievalMode.VECTOR: _near_vector_clause,
    RetrievalMode.HYBRID: _hybrid_clause,
    RetrievalMode.HYBRID_FILTERED: _hybrid_clause,
}


# =============================================================================
# Compile
# =============================================================================

def compile_query(
    search_text: str,
    mode: Union[RetrievalMode, str],
    vector: Optional[Sequence[float]] = None,
    filters: Optional[Mapping[str, Any]] = None,
    limit: int = 10,
    *,
    alpha: Optional[float] = None,
    class_name: str = DEFAULT_CLASS_NAME,
) -> CompiledQuery:
    """
    Compile a search request into a Weaviate GraphQL Get query.

    Args:
        search_text: Text for keyword scoring (ignored in vector mode).
        mode: Retrieval mode (enum or its string value; 'bm25' = lexical).
        vector: Query embedding. Required for vector mode, optional for hybrid.
        filters: {'price': ..., 'color': ..., 'category': ...}; only applied
                 in hybrid_filtered mode.
        limit: Passed through as the result limit.
        alpha: Optional hybrid blend weight.
        class_name: Weaviate class to query.

    Raises:
        InvalidModeError: Unknown mode.
        MissingVectorError: Vector mode without a vector.
        ValueError: NaN or infinite number in a filter, vector or alpha.
    """
    mode = RetrievalMode.parse(mode)
    search_text = search_text or ""

    search_clause = _CLAUSE_BUILDERS[mode](search_text, vector, alpha)

    where_clause: Optional[str] = None
    if mode is RetrievalMode.HYBRID_FILTERED:
        predicate = build_filter_predicate(filters)
        if predicate is not None:
            where_clause = render_predicate(predicate)

    where_part = f", where: {where_clause}" if where_clause else ""
    text = (
        "{\n"
        "  Get {\n"
        f"    {class_name}(\n"
        f"      {search_clause}{where_part}\n"
        f"      limit: {limit}\n"
        "    ) {\n"
        f"      {' '.join(RETURN_PROPERTIES)}\n"
        "      _additional { score distance }\n"
        "    }\n"
        "  }\n"
        "}"
    )

    return CompiledQuery(
        text=text,
        search_clause=search_clause,
        where_clause=where_clause,
        limit=limit,
    )
