"""
Storefront Search Module: query understanding + Weaviate hybrid search.

Provides:
- extract: price/color constraint extraction from free text
- plan: standard/smart toggle -> retrieval mode and filters
- compile_query: backend-agnostic request -> Weaviate GraphQL
- apply_relevance_filter: client-side score threshold
- SearchService: end-to-end pipeline over TEI embeddings + Weaviate
"""

from search.constraint_extractor import extract
from search.errors import (
    BackendQueryError,
    BackendUnavailableError,
    EmbeddingUnavailableError,
    InvalidModeError,
    MissingVectorError,
    SearchError,
)
from search.mode_controller import plan
from search.models import (
    CompiledQuery,
    ExtractedConstraints,
    RankedRecord,
    ResultSet,
    RetrievalMode,
    SearchPlan,
    SearchToggle,
)
from search.query_compiler import compile_query, escape_graphql_string
from search.relevance_filter import RELEVANCE_THRESHOLD, apply_relevance_filter
from search.search_service import SearchService, get_search_service
from search.vocabulary import DEFAULT_VOCABULARY, ExtractionVocabulary

__all__ = [
    "extract",
    "plan",
    "compile_query",
    "escape_graphql_string",
    "apply_relevance_filter",
    "RELEVANCE_THRESHOLD",
    "SearchService",
    "get_search_service",
    "ExtractionVocabulary",
    "DEFAULT_VOCABULARY",
    "CompiledQuery",
    "ExtractedConstraints",
    "RankedRecord",
    "ResultSet",
    "RetrievalMode",
    "SearchPlan",
    "SearchToggle",
    "SearchError",
    "InvalidModeError",
    "MissingVectorError",
    "EmbeddingUnavailableError",
    "BackendUnavailableError",
    "BackendQueryError",
]
