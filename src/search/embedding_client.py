"""Text Embeddings Inference (TEI) client for query vectors."""

from __future__ import annotations

import threading
from typing import Any, List, Optional, Protocol

import requests

from config.settings import get_settings
from core.logging import get_logger
from search.errors import EmbeddingUnavailableError

logger = get_logger(__name__)


class EmbeddingProvider(Protocol):
    """Anything that turns text into a fixed-length vector."""

    def embed(self, text: str) -> List[float]:
        ...


class TEIEmbeddingClient:
    """Calls a TEI server's ``/embed`` endpoint."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        settings = get_settings()
        self.base_url = (base_url or settings.tei_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.request_timeout_seconds
        self._session = session or requests.Session()

    def close(self) -> None:
        self._session.close()

    def embed(self, text: str) -> List[float]:
        """
        Embed a single text.

        Raises:
            EmbeddingUnavailableError: Transport failure, non-2xx status, or
                a response body that is not a vector.
        """
        url = f"{self.base_url}/embed"
        try:
            resp = self._session.post(url, json={"inputs": text}, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("Embedding request failed", url=url, error=str(e))
            raise EmbeddingUnavailableError(f"Embedding service unreachable: {e}") from e

        if resp.status_code >= 400:
            raise EmbeddingUnavailableError(
                f"Embedding request failed ({resp.status_code}): {resp.text}",
                status_code=resp.status_code,
            )

        try:
            payload = resp.json()
        except ValueError as e:
            raise EmbeddingUnavailableError("Embedding response is not JSON") from e

        return _parse_vector(payload)


def _parse_vector(payload: Any) -> List[float]:
    # TEI returns one vector per input: [[...]]
    if isinstance(payload, list) and payload and isinstance(payload[0], list):
        payload = payload[0]
    if not isinstance(payload, list) or not payload:
        raise EmbeddingUnavailableError("Embedding response did not contain a vector")
    try:
        return [float(v) for v in payload]
    except (TypeError, ValueError) as e:
        raise EmbeddingUnavailableError("Embedding response contained non-numeric values") from e


# =============================================================================
# Singleton
# =============================================================================

_embedding_client: Optional[TEIEmbeddingClient] = None
_embedding_lock = threading.Lock()


def get_embedding_client() -> TEIEmbeddingClient:
    """Get or create the TEIEmbeddingClient singleton (thread-safe)."""
    global _embedding_client
    if _embedding_client is None:
        with _embedding_lock:
            if _embedding_client is None:
                _embedding_client = TEIEmbeddingClient()
    return _embedding_client
