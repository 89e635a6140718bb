"""
Error taxonomy shared by the catalog and the embedding/similarity features.

Every error carries a machine-readable ``kind`` and the HTTP status it maps
to; ``bookstore.main`` renders them as ``{"error": kind, "message": ...}``.
"""
from __future__ import annotations
from typing import Any, Dict, Optional


class BookstoreError(Exception):
    kind = "error"
    status_code = 500
    hint: Optional[str] = None

    def __init__(self, message: str, *, hint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if hint is not None:
            self.hint = hint

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.kind, "message": self.message}
        if self.hint:
            body["hint"] = self.hint
        return body


class ConfigurationError(BookstoreError):
    """No API credential for the selected embedding provider."""
    kind = "configuration_error"
    status_code = 500


class ProviderError(BookstoreError):
    """Upstream embedding service failed (non-2xx after retries, or transport error)."""
    kind = "provider_error"
    status_code = 502
    hint = "Check the embedding provider status or your API key validity"

    def __init__(self, message: str, *, status: Optional[int] = None, hint: Optional[str] = None):
        super().__init__(message, hint=hint)
        self.status = status


class ModelLoadingError(ProviderError):
    """HTTP 503 while the hosted model warms up. The only retried failure."""


class MalformedResponseError(BookstoreError):
    kind = "malformed_response"
    status_code = 502


class NotFoundError(BookstoreError):
    kind = "not_found"
    status_code = 404


class MissingEmbeddingError(BookstoreError):
    """The query book exists but has no stored vector yet."""
    kind = "embedding_missing"
    status_code = 400
    hint = "Compute embeddings first via POST /api/ai/embeddings/recompute"


class DuplicateError(BookstoreError):
    kind = "duplicate"
    status_code = 409


class InvalidRequestError(BookstoreError):
    kind = "invalid_request"
    status_code = 400


class RecomputeError(BookstoreError):
    """Bulk recompute aborted on its first provider failure."""

    def __init__(self, cause: BookstoreError, *, attempted: int, updated: int, total: int):
        super().__init__(
            f"Embedding recompute aborted after {attempted} of {total} books "
            f"({updated} updated): {cause.message}"
        )
        self.cause = cause
        self.attempted = attempted
        self.updated = updated
        self.total = total
        self.kind = cause.kind
        self.status_code = cause.status_code
        self.hint = cause.hint

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body.update({"attempted": self.attempted, "updated": self.updated, "total": self.total})
        return body
