"""
Weaviate client: executes compiled GraphQL and reads backend metadata.

GraphQL responses look like:

    {"data": {"Get": {"Product": [
        {"name": ..., "price": 479, "_additional": {"score": "0.83", "distance": null}}
    ]}}, "errors": [{"message": "..."}]}

Weaviate reports hybrid/bm25 scores as strings; they are parsed to floats.
A 200 response carrying ``errors`` is not raised here: the messages are
returned as ``raw_errors`` for the caller to surface.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional, Protocol, Union

import requests

from config.settings import get_settings
from core.logging import get_logger
from search.errors import BackendUnavailableError
from search.models import CompiledQuery, ExecutionResult, RankedRecord

logger = get_logger(__name__)


class SearchExecutor(Protocol):
    """Anything that can run a compiled query."""

    def execute(self, compiled: CompiledQuery) -> ExecutionResult:
        ...


class WeaviateClient:
    """Thin ``requests`` wrapper around Weaviate's GraphQL and meta endpoints."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        class_name: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        settings = get_settings()
        self.base_url = (base_url or settings.weaviate_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.weaviate_api_key
        self.class_name = class_name or settings.weaviate_class
        self.timeout = timeout if timeout is not None else settings.request_timeout_seconds
        self._session = session or requests.Session()

    def close(self) -> None:
        self._session.close()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    # =========================================================================
    # GraphQL
    # =========================================================================

    def graphql(self, query: str) -> Dict[str, Any]:
        """POST a raw GraphQL document and return the decoded body."""
        url = f"{self.base_url}/v1/graphql"
        try:
            resp = self._session.post(
                url,
                json={"query": query},
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("Weaviate request failed", url=url, error=str(e))
            raise BackendUnavailableError(f"Weaviate unreachable: {e}") from e

        if resp.status_code >= 400:
            raise BackendUnavailableError(
                f"Weaviate error: {resp.status_code}",
                status_code=resp.status_code,
            )
        try:
            return resp.json()
        except ValueError as e:
            raise BackendUnavailableError("Weaviate returned a non-JSON body") from e

    def execute(self, compiled: Union[CompiledQuery, str]) -> ExecutionResult:
        """
        Run a compiled query.

        Returns:
            ExecutionResult with records in backend order and any GraphQL
            error messages.

        Raises:
            BackendUnavailableError: Transport failure or non-2xx status.
        """
        body = self.graphql(str(compiled))
        raw_errors = tuple(_error_messages(body.get("errors")))
        if raw_errors:
            logger.warning("Weaviate reported query errors", errors=list(raw_errors))

        data = body.get("data") or {}
        objects = (data.get("Get") or {}).get(self.class_name) or []
        records = tuple(parse_record(obj) for obj in objects)
        return ExecutionResult(records=records, raw_errors=raw_errors)

    # =========================================================================
    # Meta
    # =========================================================================

    def meta(self) -> Dict[str, Any]:
        """GET /v1/meta (version, hostname, enabled modules)."""
        url = f"{self.base_url}/v1/meta"
        try:
            resp = self._session.get(url, headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as e:
            raise BackendUnavailableError(f"Weaviate unreachable: {e}") from e
        if resp.status_code >= 400:
            raise BackendUnavailableError(
                f"Weaviate error: {resp.status_code}",
                status_code=resp.status_code,
            )
        try:
            return resp.json()
        except ValueError as e:
            raise BackendUnavailableError("Weaviate returned a non-JSON body") from e


# =============================================================================
# Parsing
# =============================================================================

def _to_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_record(obj: Dict[str, Any]) -> RankedRecord:
    """Convert one GraphQL object into a RankedRecord."""
    additional = obj.get("_additional") or {}
    properties = {k: v for k, v in obj.items() if k != "_additional"}
    return RankedRecord(
        properties=properties,
        score=_to_float(additional.get("score")),
        distance=_to_float(additional.get("distance")),
    )


def _error_messages(errors: Any) -> List[str]:
    if not errors:
        return []
    messages = []
    for err in errors:
        if isinstance(err, dict):
            messages.append(str(err.get("message", err)))
        else:
            messages.append(str(err))
    return messages


# =============================================================================
# Singleton
# =============================================================================

_weaviate_client: Optional[WeaviateClient] = None
_weaviate_lock = threading.Lock()


def get_weaviate_client() -> WeaviateClient:
    """Get or create the WeaviateClient singleton (thread-safe)."""
    global _weaviate_client
    if _weaviate_client is None:
        with _weaviate_lock:
            if _weaviate_client is None:
                _weaviate_client = WeaviateClient()
    return _weaviate_client
