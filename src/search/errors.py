"""Error taxonomy for query compilation and search collaborators."""

from typing import List, Optional, Sequence


class SearchError(RuntimeError):
    """Base class for all search pipeline failures."""


class InvalidModeError(SearchError, ValueError):
    """Raised when a retrieval mode or search toggle is not recognised."""

    def __init__(self, mode: object) -> None:
        super().__init__(f"Invalid search mode: {mode!r}")
        self.mode = mode


class MissingVectorError(SearchError, ValueError):
    """Raised when vector mode is compiled without a query vector."""

    def __init__(self, message: str = "Vector mode requires a non-empty query vector") -> None:
        super().__init__(message)


class EmbeddingUnavailableError(SearchError):
    """Raised when the embedding service cannot produce a vector."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BackendUnavailableError(SearchError):
    """Raised for transport failures or non-success responses from Weaviate."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BackendQueryError(SearchError):
    """Raised when Weaviate accepted a query but reported GraphQL errors."""

    def __init__(self, errors: Sequence[str]) -> None:
        self.errors: List[str] = list(errors)
        super().__init__("Weaviate query error: " + "; ".join(self.errors))
