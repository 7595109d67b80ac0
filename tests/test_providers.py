"""
Embedding Provider Tests

JSON file and HTTP providers are best-effort: failures mean "no embeddings", and
attach_embeddings recomputes the run's embedding flag.
"""

import json

import requests

from reco.models import RecoRequest
from reco.providers import HttpEmbeddingProvider, JsonEmbeddingProvider, attach_embeddings

from .conftest import candidate, request, user_game


class FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.exceptions.HTTPError(f"{self.status} error")

    def json(self):
        return self.payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def post(self, url, json=None, timeout=None):
        self.calls.append((url, json, timeout))
        if self.error is not None:
            raise self.error
        return self.response


class TestJsonProvider:
    def test_wrapped_mapping(self, tmp_path):
        path = tmp_path / "embeddings.json"
        path.write_text(json.dumps({"embeddings": {"a": [1, 2], "b": [3, 4]}}))
        provider = JsonEmbeddingProvider(path)
        assert provider.get_embeddings(["a", "zzz"]) == {"a": [1.0, 2.0]}

    def test_flat_mapping_skips_empty_vectors(self, tmp_path):
        path = tmp_path / "embeddings.json"
        path.write_text(json.dumps({"a": [0.5], "b": []}))
        assert JsonEmbeddingProvider(path).get_embeddings(["a", "b"]) == {"a": [0.5]}

    def test_missing_file_means_no_embeddings(self, tmp_path):
        provider = JsonEmbeddingProvider(tmp_path / "missing.json")
        assert provider.get_embeddings(["a"]) == {}

    def test_malformed_file_means_no_embeddings(self, tmp_path):
        path = tmp_path / "embeddings.json"
        path.write_text("{not json")
        assert JsonEmbeddingProvider(path).get_embeddings(["a"]) == {}


class TestHttpProvider:
    def test_posts_ids(self):
        session = FakeSession(FakeResponse({"embeddings": {"a": [1, 0], "x": [0, 1]}}))
        provider = HttpEmbeddingProvider("http://emb.local/", timeout=3, session=session)
        assert provider.get_embeddings(["b", "a"]) == {"a": [1.0, 0.0]}
        url, body, timeout = session.calls[0]
        assert url == "http://emb.local/embeddings"
        assert body == {"ids": ["a", "b"]}
        assert timeout == 3

    def test_connection_error(self):
        session = FakeSession(error=requests.exceptions.ConnectionError("refused"))
        assert HttpEmbeddingProvider("http://emb.local", session=session).get_embeddings(["a"]) == {}

    def test_http_error(self):
        session = FakeSession(FakeResponse({}, status=503))
        assert HttpEmbeddingProvider("http://emb.local", session=session).get_embeddings(["a"]) == {}

    def test_no_ids_no_request(self):
        session = FakeSession(FakeResponse({}))
        assert HttpEmbeddingProvider("http://emb.local", session=session).get_embeddings([]) == {}
        assert session.calls == []


class StaticProvider:
    def __init__(self, vectors):
        self.vectors = vectors
        self.requested = []

    def get_embeddings(self, ids):
        ids = list(ids)
        self.requested.extend(ids)
        return {i: self.vectors[i] for i in ids if i in self.vectors}


class TestAttachEmbeddings:
    def test_fills_missing_and_sets_flag(self):
        req = RecoRequest.model_validate(
            request([user_game("u1", "U1")], [candidate("c1", "C1"), candidate("c2", "C2")])
        )
        provider = StaticProvider({"u1": [1.0, 0.0], "c1": [0.0, 1.0]})
        out = attach_embeddings(req, provider)
        assert out.has_embeddings
        assert out.user_games[0].embedding == [1.0, 0.0]
        assert out.candidates[0].embedding == [0.0, 1.0]
        assert out.candidates[1].embedding is None
        # Original request untouched
        assert req.user_games[0].embedding is None

    def test_existing_vectors_not_requested(self):
        req = RecoRequest.model_validate(
            request([user_game("u1", "U1", embedding=[1.0])], [candidate("c1", "C1", embedding=[1.0])])
        )
        provider = StaticProvider({})
        out = attach_embeddings(req, provider)
        assert provider.requested == []
        assert out.has_embeddings

    def test_flag_requires_both_sides(self):
        req = RecoRequest.model_validate(
            request([user_game("u1", "U1")], [candidate("c1", "C1")], hasEmbeddings=True)
        )
        out = attach_embeddings(req, StaticProvider({"c1": [1.0]}))
        assert not out.has_embeddings

    def test_no_provider(self):
        req = RecoRequest.model_validate(request([], []))
        assert attach_embeddings(req, None) is req
