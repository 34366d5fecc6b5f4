"""
Search API Routes.

- POST /api/search          toggle-driven search (standard / smart)
- POST /api/search/query    explicit retrieval mode + filters
- POST /api/search/compile  GraphQL only, no embedding or backend call
- GET  /api/meta            Weaviate metadata for the debugging panel

NOTE: Routes use `def` (not `async def`) because the embedding and Weaviate
clients are synchronous (requests). FastAPI runs sync handlers in a thread
pool, so they do not block the event loop.
"""

from typing import Any, Dict, NoReturn

from fastapi import APIRouter, HTTPException

from core.logging import get_logger
from search.errors import (
    BackendQueryError,
    BackendUnavailableError,
    EmbeddingUnavailableError,
    InvalidModeError,
    MissingVectorError,
    SearchError,
)
from search.models import (
    CompileRequest,
    CompileResponse,
    QueryRequest,
    RetrievalMode,
    SearchRequest,
    SearchResponse,
)
from search.search_service import get_search_service
from search.weaviate_client import get_weaviate_client

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["Search"])


def _raise_http(e: SearchError) -> NoReturn:
    """Map search errors to HTTP status codes."""
    if isinstance(e, (InvalidModeError, MissingVectorError)):
        raise HTTPException(status_code=400, detail=str(e)) from e
    if isinstance(e, BackendQueryError):
        raise HTTPException(status_code=502, detail={"message": str(e), "errors": e.errors}) from e
    if isinstance(e, (EmbeddingUnavailableError, BackendUnavailableError)):
        logger.error("Search collaborator failed", error=str(e), error_type=type(e).__name__)
        raise HTTPException(status_code=502, detail=str(e)) from e
    raise HTTPException(status_code=500, detail=str(e)) from e


# =============================================================================
# Search
# =============================================================================

@router.post(
    "/search",
    response_model=SearchResponse,
    summary="Storefront search (standard / smart)",
)
def search(request: SearchRequest) -> SearchResponse:
    """
    Search products with the standard/smart toggle.

    - **standard**: raw query, hybrid scoring, no filters
    - **smart**: price/color pulled out as filters, clean text searched,
      low-relevance results moved to `hidden`

    GraphQL errors reported by Weaviate are returned in `errors` with a 200.
    """
    try:
        return get_search_service().search(request)
    except SearchError as e:
        _raise_http(e)


@router.post(
    "/search/query",
    response_model=SearchResponse,
    summary="Search with an explicit retrieval mode",
)
def search_query(request: QueryRequest) -> SearchResponse:
    """Run lexical / vector / hybrid / hybrid_filtered directly."""
    try:
        return get_search_service().run(
            search_text=request.query,
            mode=request.mode,
            filters=request.filters.to_dict(),
            limit=request.limit,
        )
    except SearchError as e:
        _raise_http(e)


@router.post(
    "/search/compile",
    response_model=CompileResponse,
    summary="Compile a query to GraphQL without executing it",
)
def compile_search(request: CompileRequest) -> CompileResponse:
    try:
        service = get_search_service()
        compiled = service.compile(
            request.query,
            request.mode,
            request.vector,
            request.filters.to_dict(),
            request.limit,
        )
        return CompileResponse(
            mode=RetrievalMode.parse(request.mode).value,
            graphql=compiled.text,
            has_filter=compiled.has_filter,
        )
    except SearchError as e:
        _raise_http(e)


# =============================================================================
# Backend Metadata
# =============================================================================

@router.get("/meta", summary="Weaviate metadata")
def meta() -> Dict[str, Any]:
    try:
        return get_weaviate_client().meta()
    except SearchError as e:
        _raise_http(e)
