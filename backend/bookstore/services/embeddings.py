from __future__ import annotations
import logging
import time
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional

import httpx
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from bookstore import config
from bookstore.errors import (
    ConfigurationError,
    MalformedResponseError,
    ModelLoadingError,
    ProviderError,
)

log = logging.getLogger(__name__)


class EmbeddingProvider:
    """
    One capability: turn text into a fixed-length vector.

    Implementations raise ConfigurationError (no credential), ProviderError
    (upstream failure) or MalformedResponseError (unparseable payload).
    """

    name = "base"

    def embed(self, text: str) -> List[float]:
        raise NotImplementedError


def _parse_vector(payload: Any, provider: str) -> List[float]:
    # Feature-extraction endpoints sometimes wrap a single input as [[...]]
    if isinstance(payload, list) and len(payload) == 1 and isinstance(payload[0], list):
        payload = payload[0]
    if not isinstance(payload, list) or not payload:
        raise MalformedResponseError(
            f"Unexpected {provider} response format (expected non-empty numeric array): {str(payload)[:200]}"
        )
    vec: List[float] = []
    for v in payload:
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise MalformedResponseError(f"Non-numeric value in {provider} embedding: {v!r}")
        vec.append(float(v))
    return vec


class HttpEmbeddingProvider(EmbeddingProvider):
    """
    Shared HTTP plumbing: bearer auth, fixed timeouts and the 503 backoff.

    Only HTTP 503 ("model loading") is retried, up to ``max_attempts`` total,
    waiting ``backoff_seconds`` and doubling each time (3s, 6s by default).
    Any 2xx ends the loop; any other status is terminal on the spot.
    """

    url: str = ""

    def __init__(
        self,
        api_key: Optional[str],
        *,
        max_attempts: Optional[int] = None,
        backoff_seconds: Optional[float] = None,
        client: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.api_key = (api_key or "").strip()
        if max_attempts is None:
            max_attempts = config.EMBED_MAX_ATTEMPTS
        self.max_attempts = max(1, max_attempts)
        self.backoff_seconds = config.EMBED_BACKOFF_SECONDS if backoff_seconds is None else backoff_seconds
        self._sleep = sleep
        self._client = client or httpx.Client(
            timeout=httpx.Timeout(config.EMBED_REQUEST_TIMEOUT, connect=config.EMBED_CONNECT_TIMEOUT)
        )

    # Provider-specific hooks
    def _missing_key_error(self) -> ConfigurationError:
        raise NotImplementedError

    def _payload(self, text: str) -> Dict[str, Any]:
        raise NotImplementedError

    def _extract(self, body: Any) -> Any:
        return body

    # Internal helpers
    def _post(self, text: str, attempt: int) -> httpx.Response:
        try:
            r = self._client.post(
                self.url,
                json=self._payload(text),
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
        except httpx.HTTPError as e:
            log.error("%s request failed: %s", self.name, e)
            raise ProviderError(f"{self.name} request failed: {e}") from e

        log.debug("%s attempt %d/%d: HTTP %d", self.name, attempt, self.max_attempts, r.status_code)
        if r.is_success:
            return r

        detail = (
            f"{self.name} API failed (attempt {attempt}/{self.max_attempts}): "
            f"HTTP {r.status_code} - {r.text[:500]}"
        )
        if r.status_code == 503:
            raise ModelLoadingError(detail, status=503)
        log.error(detail)
        raise ProviderError(detail, status=r.status_code)

    def _before_sleep(self, retry_state) -> None:
        log.warning(
            "%s model loading, waiting %.1fs before attempt %d",
            self.name, retry_state.next_action.sleep, retry_state.attempt_number + 1,
        )

    # Public API
    def embed(self, text: str) -> List[float]:
        if not self.api_key:
            raise self._missing_key_error()

        retryer = Retrying(
            retry=retry_if_exception_type(ModelLoadingError),
            wait=wait_exponential(multiplier=self.backoff_seconds),
            stop=stop_after_attempt(self.max_attempts),
            sleep=self._sleep,
            before_sleep=self._before_sleep,
            reraise=True,
        )
        try:
            for attempt in retryer:
                with attempt:
                    resp = self._post(text, attempt.retry_state.attempt_number)
        except ModelLoadingError as e:
            log.error("%s still loading after %d attempts: %s", self.name, self.max_attempts, e.message)
            raise

        try:
            body = resp.json()
        except ValueError as e:
            raise MalformedResponseError(f"{self.name} returned non-JSON body: {resp.text[:200]}") from e

        vec = _parse_vector(self._extract(body), self.name)
        log.debug("%s returned embedding with %d dimensions", self.name, len(vec))
        return vec

    def close(self) -> None:
        self._client.close()


class HuggingFaceEmbedder(HttpEmbeddingProvider):
    """Hugging Face Inference API, feature extraction (bge-small: 384 dims)."""

    name = "huggingface"

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, **kwargs):
        super().__init__(api_key if api_key is not None else config.HUGGINGFACE_API_KEY, **kwargs)
        self.model = model or config.HF_EMBED_MODEL
        self.url = f"{config.HF_API_BASE.rstrip('/')}/{self.model}"

    def _missing_key_error(self) -> ConfigurationError:
        return ConfigurationError(
            "Hugging Face API key not configured (HUGGINGFACE_API_KEY)",
            hint="Set HUGGINGFACE_API_KEY in the environment or .env file",
        )

    def _payload(self, text: str) -> Dict[str, Any]:
        return {"inputs": text}


class OpenAIEmbedder(HttpEmbeddingProvider):
    """OpenAI /v1/embeddings. Single attempt unless max_attempts is raised."""

    name = "openai"

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, **kwargs):
        kwargs.setdefault("max_attempts", 1)
        super().__init__(api_key if api_key is not None else config.OPENAI_API_KEY, **kwargs)
        self.model = model or config.OPENAI_EMBED_MODEL
        self.url = config.OPENAI_API_URL

    def _missing_key_error(self) -> ConfigurationError:
        return ConfigurationError(
            "OpenAI API key not configured (OPENAI_API_KEY)",
            hint="Set OPENAI_API_KEY in the environment or .env file",
        )

    def _payload(self, text: str) -> Dict[str, Any]:
        return {"model": self.model, "input": text}

    def _extract(self, body: Any) -> Any:
        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, list) or not data or not isinstance(data[0], dict):
            raise MalformedResponseError("No embedding returned from openai")
        return data[0].get("embedding")


class FastEmbedEmbedder(EmbeddingProvider):
    """Local model via FastEmbed (small, no torch, no API key)."""

    name = "fastembed"

    def __init__(self, model_name: Optional[str] = None):
        self.model_name = model_name or config.EMBED_MODEL
        try:
            # Lazy import so API-only deployments don't pull the model runtime
            from fastembed import TextEmbedding  # type: ignore
        except ImportError as e:
            raise ConfigurationError(
                "EMBED_PROVIDER=fastembed but fastembed is not installed",
                hint="pip install 'bookstore-api[local]'",
            ) from e
        self._model = TextEmbedding(self.model_name)

    def embed(self, text: str) -> List[float]:
        vecs = list(self._model.embed([text or ""]))
        if not vecs:
            raise MalformedResponseError("fastembed returned no embedding")
        return _parse_vector(vecs[0].tolist(), self.name)


PROVIDERS = {
    "huggingface": HuggingFaceEmbedder,
    "openai": OpenAIEmbedder,
    "fastembed": FastEmbedEmbedder,
}


def get_embedding_provider(name: Optional[str] = None) -> EmbeddingProvider:
    """Build the provider selected by EMBED_PROVIDER."""
    key = (name or config.EMBED_PROVIDER).lower()
    cls = PROVIDERS.get(key)
    if cls is None:
        raise ConfigurationError(
            f"Unknown embedding provider '{key}'",
            hint=f"EMBED_PROVIDER must be one of: {', '.join(sorted(PROVIDERS))}",
        )
    log.info("Using %s embedding provider", key)
    return cls()


@lru_cache(maxsize=1)
def get_provider() -> EmbeddingProvider:
    # FastAPI dependency; one provider (and one HTTP client) per process
    return get_embedding_provider()
