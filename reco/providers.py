"""
Embedding providers: best-effort dense vectors for game ids.

A missing vector is an expected answer, not an error. Provider failures (missing file,
HTTP errors) are logged and treated as "no embeddings" so the pipeline degrades to its
tag-based signals.

Usage:
    provider = JsonEmbeddingProvider("cache/embeddings.json")
    request = attach_embeddings(request, provider)
"""

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol

import requests

from .models.messages import RecoRequest

logger = logging.getLogger(__name__)

Embeddings = Dict[str, List[float]]


class EmbeddingProvider(Protocol):
    def get_embeddings(self, ids: Iterable[str]) -> Embeddings:
        """Vectors for whichever of ids are known; unknown ids are simply absent."""
        ...


def _clean(raw: Dict, wanted: Optional[set] = None) -> Embeddings:
    out: Embeddings = {}
    for game_id, vector in raw.items():
        if wanted is not None and game_id not in wanted:
            continue
        if isinstance(vector, list) and vector:
            out[str(game_id)] = [float(v) for v in vector]
    return out


class JsonEmbeddingProvider:
    """
    Embeddings from a JSON file, loaded once on first use.

    Accepts either {"embeddings": {id: vector}} or a flat {id: vector} mapping.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._embeddings: Optional[Embeddings] = None

    def _load(self) -> Embeddings:
        if self._embeddings is None:
            try:
                with open(self.path) as f:
                    data = json.load(f)
                if isinstance(data, dict) and isinstance(data.get("embeddings"), dict):
                    data = data["embeddings"]
                self._embeddings = _clean(data) if isinstance(data, dict) else {}
                logger.info("[embeddings] Loaded %d vectors from %s", len(self._embeddings), self.path)
            except (OSError, json.JSONDecodeError) as e:
                logger.warning("[embeddings] Failed to load %s: %s", self.path, e)
                self._embeddings = {}
        return self._embeddings

    def get_embeddings(self, ids: Iterable[str]) -> Embeddings:
        embeddings = self._load()
        return {i: embeddings[i] for i in ids if i in embeddings}


class HttpEmbeddingProvider:
    """
    Embeddings from an HTTP service.

    POST {base_url}/embeddings with {"ids": [...]}; expects {"embeddings": {id: vector}}.
    """

    def __init__(self, base_url: str, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def get_embeddings(self, ids: Iterable[str]) -> Embeddings:
        wanted = {i for i in ids if i}
        if not wanted:
            return {}
        url = f"{self.base_url}/embeddings"
        try:
            response = self.session.post(url, json={"ids": sorted(wanted)}, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.ConnectionError as e:
            logger.warning("[embeddings] Cannot connect to %s: %s", url, e)
            return {}
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.warning("[embeddings] Request to %s failed: %s", url, e)
            return {}
        raw = data.get("embeddings", {}) if isinstance(data, dict) else {}
        return _clean(raw, wanted) if isinstance(raw, dict) else {}


def attach_embeddings(request: RecoRequest, provider: Optional[EmbeddingProvider]) -> RecoRequest:
    """
    Return a copy of request with missing embeddings filled in from provider.

    has_embeddings is recomputed: true only when at least one library game and one
    candidate carry a vector.
    """
    if provider is None:
        return request

    missing = [g.game_id for g in request.user_games if g.game_id and not g.has_embedding]
    missing += [c.game_id for c in request.candidates if c.game_id and not c.embedding]
    found = provider.get_embeddings(list(dict.fromkeys(missing))) if missing else {}

    user_games = [
        g.model_copy(update={"embedding": found[g.game_id]})
        if not g.has_embedding and g.game_id in found
        else g
        for g in request.user_games
    ]
    candidates = [
        c.model_copy(update={"embedding": found[c.game_id]})
        if not c.embedding and c.game_id in found
        else c
        for c in request.candidates
    ]
    has_embeddings = any(g.has_embedding for g in user_games) and any(c.embedding for c in candidates)
    logger.info(
        "[embeddings] requested=%d found=%d has_embeddings=%s", len(missing), len(found), has_embeddings
    )
    return request.model_copy(
        update={"user_games": user_games, "candidates": candidates, "has_embeddings": has_embeddings}
    )
