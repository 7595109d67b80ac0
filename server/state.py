"""Application state: engine config, worker, and embedding provider."""

import logging
from typing import Optional

from reco.models.config import RecoConfig
from reco.providers import EmbeddingProvider, HttpEmbeddingProvider, JsonEmbeddingProvider
from reco.worker import RecoWorker

from .config import ServerConfig, get_config

logger = logging.getLogger(__name__)


class AppState:
    """Global application state."""

    def __init__(self, config: ServerConfig, reco_config: Optional[RecoConfig] = None):
        self.config = config
        self.reco_config = reco_config or config.load_reco_config()
        self.embedding_provider: Optional[EmbeddingProvider] = self._create_embedding_provider(config)
        self.worker = RecoWorker(self.reco_config)
        self.requests_served = 0
        self.requests_failed = 0

    def _create_embedding_provider(self, config: ServerConfig) -> Optional[EmbeddingProvider]:
        """HTTP service when configured, else JSON file, else none."""
        if config.embeddings_api_url:
            logger.info("[startup] Embedding provider: HTTP (%s)", config.embeddings_api_url)
            return HttpEmbeddingProvider(config.embeddings_api_url, timeout=config.embeddings_api_timeout)
        if config.embeddings_json_path:
            logger.info("[startup] Embedding provider: JSON (%s)", config.embeddings_json_path)
            return JsonEmbeddingProvider(config.embeddings_json_path)
        logger.info("[startup] Embedding provider: none (request embeddings only)")
        return None

    @property
    def embedding_source(self) -> str:
        if isinstance(self.embedding_provider, HttpEmbeddingProvider):
            return "http"
        if isinstance(self.embedding_provider, JsonEmbeddingProvider):
            return "json"
        return "request"

    def record_result(self, failed: bool) -> None:
        self.requests_served += 1
        if failed:
            self.requests_failed += 1

    def shutdown(self) -> None:
        self.worker.shutdown(wait=False)


_state: Optional[AppState] = None


def get_state() -> AppState:
    global _state
    if _state is None:
        _state = AppState(get_config())
    return _state


def reset_state(state: Optional[AppState] = None) -> None:
    """Replace the global state (None = rebuild lazily from config)."""
    global _state
    if _state is not None and _state is not state:
        _state.shutdown()
    _state = state
