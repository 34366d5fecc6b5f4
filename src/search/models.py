"""
Search domain types and pydantic models for the search API.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, Field

from search.errors import InvalidModeError


# ============================================================================
# Enums
# ============================================================================

class RetrievalMode(str, Enum):
    """Scoring strategy sent to the backend."""
    LEXICAL = "lexical"                  # BM25 keyword scoring only
    VECTOR = "vector"                    # Embedding similarity only
    HYBRID = "hybrid"                    # Blended, never filtered
    HYBRID_FILTERED = "hybrid_filtered"  # Blended + where clause

    @classmethod
    def parse(cls, value: Union["RetrievalMode", str]) -> "RetrievalMode":
        """Coerce a string to a mode; 'bm25' is accepted for lexical."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            if key == "bm25":
                return cls.LEXICAL
            try:
                return cls(key)
            except ValueError:
                pass
        raise InvalidModeError(value)

    @property
    def is_hybrid(self) -> bool:
        return self in (RetrievalMode.HYBRID, RetrievalMode.HYBRID_FILTERED)


class SearchToggle(str, Enum):
    """User-facing switch between raw and parsed search."""
    STANDARD = "standard"  # Raw text, hybrid, no filters
    SMART = "smart"        # Parsed text, hybrid + filters

    @classmethod
    def parse(cls, value: Union["SearchToggle", str]) -> "SearchToggle":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidModeError(value)


# ============================================================================
# Core Value Types
# ============================================================================

@dataclass(frozen=True)
class ExtractedConstraints:
    """Structured constraints pulled out of a free-text query."""
    clean_text: str
    price_ceiling: Optional[int] = None
    color: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.price_ceiling is None and self.color is None


@dataclass(frozen=True)
class SearchPlan:
    """What to search for, how, and with which filters."""
    search_text: str
    mode: RetrievalMode
    filters: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FilterCondition:
    """Leaf predicate: ``path operator value``."""
    path: str
    operator: str        # "LessThan" | "Equal"
    value: Union[int, float, str]


@dataclass(frozen=True)
class FilterAnd:
    """Conjunction of two or more leaf predicates."""
    operands: Tuple[FilterCondition, ...]


FilterPredicate = Union[FilterCondition, FilterAnd]


@dataclass(frozen=True)
class CompiledQuery:
    """A GraphQL Get query ready to send to Weaviate."""
    text: str
    search_clause: str
    where_clause: Optional[str]
    limit: int

    @property
    def has_filter(self) -> bool:
        return self.where_clause is not None

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class RankedRecord:
    """A catalog object plus the backend's relevance annotation.

    ``score`` is a normalized similarity (higher is better) returned for
    hybrid/bm25 queries; ``distance`` (lower is better) for vector queries.
    """
    properties: Dict[str, Any]
    score: Optional[float] = None
    distance: Optional[float] = None

    def get(self, key: str, default: Any = None) -> Any:
        return self.properties.get(key, default)


@dataclass(frozen=True)
class ResultSet:
    """Records split by the relevance threshold."""
    visible: Tuple[RankedRecord, ...] = ()
    hidden: Tuple[RankedRecord, ...] = ()

    @property
    def hidden_count(self) -> int:
        return len(self.hidden)


@dataclass(frozen=True)
class ExecutionResult:
    """Raw executor output: ranked records plus any GraphQL error messages."""
    records: Tuple[RankedRecord, ...] = ()
    raw_errors: Tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.raw_errors


# ============================================================================
# Request Models
# ============================================================================

class SearchRequest(BaseModel):
    """Caller-facing search request (UI toggle)."""
    query: str = Field("", max_length=500, description="Free-text shopping query")
    mode: SearchToggle = Field(SearchToggle.STANDARD, description="standard | smart")
    limit: Optional[int] = Field(None, description="Max results (defaults to settings.default_limit)")


class SearchFilters(BaseModel):
    """Structured filters for hybrid_filtered queries."""
    price: Optional[float] = Field(None, allow_inf_nan=False, description="Price ceiling (strict less-than)")
    color: Optional[str] = Field(None, description="Exact color")
    category: Optional[str] = Field(None, description="Exact category")

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in self.model_dump().items() if v is not None}


class QueryRequest(BaseModel):
    """Low-level request with an explicit retrieval mode."""
    query: str = Field("", max_length=500)
    mode: str = Field(RetrievalMode.HYBRID.value, description="lexical | bm25 | vector | hybrid | hybrid_filtered")
    filters: SearchFilters = Field(default_factory=SearchFilters)
    limit: Optional[int] = None


class CompileRequest(QueryRequest):
    """Compile-only request; an optional vector may be supplied."""
    vector: Optional[List[Annotated[float, Field(allow_inf_nan=False)]]] = None


# ============================================================================
# Response Models
# ============================================================================

class ProductResult(BaseModel):
    """A single product in search results."""
    name: Optional[str] = None
    brand: Optional[str] = None
    color: Optional[str] = None
    category: Optional[str] = None
    price: Optional[float] = None
    description: Optional[str] = None

    # Ranking info
    score: Optional[float] = None
    distance: Optional[float] = None

    @classmethod
    def from_record(cls, record: RankedRecord) -> "ProductResult":
        props = record.properties
        return cls(
            name=props.get("name"),
            brand=props.get("brand"),
            color=props.get("color"),
            category=props.get("category"),
            price=props.get("price"),
            description=props.get("description"),
            score=record.score,
            distance=record.distance,
        )


class ConstraintsInfo(BaseModel):
    """Extracted constraints, echoed for display in both modes."""
    clean_text: str
    price: Optional[int] = None
    color: Optional[str] = None


class SearchResponse(BaseModel):
    """Search results plus the metadata shown in the debugging panel."""
    query: str
    toggle: Optional[str] = None
    mode: str
    search_text: str
    constraints: Optional[ConstraintsInfo] = None
    filters: Dict[str, Any] = Field(default_factory=dict)
    results: List[ProductResult] = Field(default_factory=list)
    hidden: List[ProductResult] = Field(default_factory=list)
    hidden_count: int = 0
    relevance_threshold: Optional[float] = Field(
        None, description="Threshold applied (None when relevance filtering was inactive)"
    )
    graphql: str = ""
    elapsed_ms: int = 0
    errors: List[str] = Field(default_factory=list)


class CompileResponse(BaseModel):
    """Compile-only response."""
    mode: str
    graphql: str
    has_filter: bool
