"""
Storefront Search Service.

Pipeline:
1. Extract price/color constraints from the query
2. Plan: toggle -> retrieval mode, search text, filters
3. Embed the search text (skipped for lexical mode)
4. Compile the Weaviate GraphQL query
5. Execute it (timed)
6. Apply the relevance threshold (hybrid modes only)
7. Return results plus debugging metadata

Collaborator failures propagate unchanged; nothing is retried here.
"""

import threading
import time
from typing import Any, Dict, Mapping, Optional, Union

from config.settings import Settings, get_settings
from core.logging import get_logger
from search.constraint_extractor import extract
from search.embedding_client import EmbeddingProvider, get_embedding_client
from search.errors import BackendQueryError
from search.mode_controller import plan
from search.models import (
    CompiledQuery,
    ConstraintsInfo,
    ExtractedConstraints,
    ProductResult,
    RetrievalMode,
    SearchPlan,
    SearchRequest,
    SearchResponse,
)
from search.query_compiler import compile_query
from search.relevance_filter import apply_relevance_filter, is_filter_active
from search.weaviate_client import SearchExecutor, get_weaviate_client

logger = get_logger(__name__)


class SearchService:
    """
    Query understanding + compilation + execution for the storefront.
    """

    def __init__(
        self,
        embedder: Optional[EmbeddingProvider] = None,
        executor: Optional[SearchExecutor] = None,
        settings: Optional[Settings] = None,
    ):
        self._embedder = embedder
        self._executor = executor
        self._settings = settings or get_settings()

    @property
    def embedder(self) -> EmbeddingProvider:
        if self._embedder is None:
            self._embedder = get_embedding_client()
        return self._embedder

    @property
    def executor(self) -> SearchExecutor:
        if self._executor is None:
            self._executor = get_weaviate_client()
        return self._executor

    @property
    def threshold(self) -> float:
        return self._settings.relevance_threshold

    # =========================================================================
    # Main Search
    # =========================================================================

    def search(
        self,
        request: SearchRequest,
        raise_on_backend_errors: bool = False,
    ) -> SearchResponse:
        """
        Run a toggle-driven search (standard / smart).

        Args:
            request: Query text, toggle and limit.
            raise_on_backend_errors: Raise BackendQueryError instead of
                returning GraphQL errors in the response.

        Returns:
            SearchResponse with visible/hidden results and metadata.
        """
        constraints = extract(request.query)
        search_plan = plan(request.query, constraints, request.mode)
        return self._execute_plan(
            query=request.query,
            search_plan=search_plan,
            limit=request.limit,
            toggle=request.mode.value,
            constraints=constraints,
            raise_on_backend_errors=raise_on_backend_errors,
        )

    def run(
        self,
        search_text: str,
        mode: Union[RetrievalMode, str],
        filters: Optional[Mapping[str, Any]] = None,
        limit: Optional[int] = None,
        raise_on_backend_errors: bool = False,
    ) -> SearchResponse:
        """Run a search with an explicit retrieval mode and filters."""
        mode = RetrievalMode.parse(mode)
        search_plan = SearchPlan(
            search_text=search_text or "",
            mode=mode,
            filters=dict(filters or {}),
        )
        return self._execute_plan(
            query=search_text or "",
            search_plan=search_plan,
            limit=limit,
            raise_on_backend_errors=raise_on_backend_errors,
        )

    def compile(
        self,
        search_text: str,
        mode: Union[RetrievalMode, str],
        vector=None,
        filters: Optional[Mapping[str, Any]] = None,
        limit: Optional[int] = None,
    ) -> CompiledQuery:
        """Compile without any I/O, using configured class name and alpha."""
        return compile_query(
            search_text,
            mode,
            vector,
            filters,
            self._resolve_limit(limit),
            alpha=self._settings.hybrid_alpha,
            class_name=self._settings.weaviate_class,
        )

    # =========================================================================
    # Internals
    # =========================================================================

    def _resolve_limit(self, limit: Optional[int]) -> int:
        return self._settings.default_limit if limit is None else limit

    def _embed_if_needed(self, search_plan: SearchPlan):
        if search_plan.mode is RetrievalMode.LEXICAL:
            return None
        # Blank text in hybrid modes degrades to keyword-only scoring
        if search_plan.mode.is_hybrid and not search_plan.search_text.strip():
            return None
        return self.embedder.embed(search_plan.search_text)

    def _execute_plan(
        self,
        query: str,
        search_plan: SearchPlan,
        limit: Optional[int],
        toggle: Optional[str] = None,
        constraints: Optional[ExtractedConstraints] = None,
        raise_on_backend_errors: bool = False,
    ) -> SearchResponse:
        timing: Dict[str, int] = {}
        t_start = time.perf_counter()

        t0 = time.perf_counter()
        vector = self._embed_if_needed(search_plan)
        timing["embed_ms"] = int((time.perf_counter() - t0) * 1000)

        compiled = self.compile(
            search_plan.search_text,
            search_plan.mode,
            vector,
            search_plan.filters,
            limit,
        )

        t0 = time.perf_counter()
        result = self.executor.execute(compiled)
        elapsed_ms = int((time.perf_counter() - t0) * 1000)

        if result.raw_errors and raise_on_backend_errors:
            raise BackendQueryError(result.raw_errors)

        result_set = apply_relevance_filter(result.records, search_plan.mode, self.threshold)
        filtering = is_filter_active(list(result.records), search_plan.mode)

        timing["search_ms"] = elapsed_ms
        timing["total_ms"] = int((time.perf_counter() - t_start) * 1000)
        logger.info(
            "Search completed",
            query=query,
            mode=search_plan.mode.value,
            filters=search_plan.filters,
            returned=len(result.records),
            hidden=result_set.hidden_count,
            errors=len(result.raw_errors),
            **timing,
        )

        return SearchResponse(
            query=query,
            toggle=toggle,
            mode=search_plan.mode.value,
            search_text=search_plan.search_text,
            constraints=(
                ConstraintsInfo(
                    clean_text=constraints.clean_text,
                    price=constraints.price_ceiling,
                    color=constraints.color,
                )
                if constraints is not None
                else None
            ),
            filters=dict(search_plan.filters) if search_plan.mode is RetrievalMode.HYBRID_FILTERED else {},
            results=[ProductResult.from_record(r) for r in result_set.visible],
            hidden=[ProductResult.from_record(r) for r in result_set.hidden],
            hidden_count=result_set.hidden_count,
            relevance_threshold=self.threshold if filtering else None,
            graphql=compiled.text,
            elapsed_ms=elapsed_ms,
            errors=list(result.raw_errors),
        )


# =============================================================================
# Singleton
# =============================================================================

_service: Optional[SearchService] = None
_service_lock = threading.Lock()


def get_search_service() -> SearchService:
    """Get or create the SearchService singleton (thread-safe)."""
    global _service
    if _service is None:
        with _service_lock:
            if _service is None:
                _service = SearchService()
    return _service
