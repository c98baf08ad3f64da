"""Tests for the optional retrieval layer."""

import json
from typing import Optional

import httpx
import pytest

from supportchat.retrieval import HttpRetrievalBackend, RetrievalAugmentor, build_augmentor


class _Both:
    def __init__(self):
        self.calls = []

    async def synthesize(self, query: str, tenant: Optional[str] = None):
        self.calls.append(("synthesize", query, tenant))
        return "synthesized answer"

    async def search(self, query: str, tenant: Optional[str] = None):
        self.calls.append(("search", query, tenant))
        return "raw hits"


class _SearchOnly:
    async def search(self, query: str, tenant: Optional[str] = None):
        return "  raw hits  "


class _Failing:
    async def synthesize(self, query: str, tenant: Optional[str] = None):
        raise RuntimeError("index offline")


@pytest.mark.asyncio
async def test_prefers_synthesized_answer_and_passes_tenant():
    backend = _Both()
    aug = RetrievalAugmentor(backend=backend, tenant="acme")
    assert await aug.retrieve(" recordings ") == "synthesized answer"
    assert backend.calls == [("synthesize", "recordings", "acme")]


@pytest.mark.asyncio
async def test_falls_back_to_search_method():
    assert await RetrievalAugmentor(backend=_SearchOnly()).retrieve("x") == "raw hits"


@pytest.mark.asyncio
async def test_failure_is_swallowed():
    assert await RetrievalAugmentor(backend=_Failing()).retrieve("x") is None


@pytest.mark.asyncio
async def test_disabled_or_blank_query_is_absent():
    assert await RetrievalAugmentor().retrieve("x") is None
    assert await RetrievalAugmentor(backend=object()).retrieve("x") is None
    backend = _Both()
    assert await RetrievalAugmentor(backend=backend).retrieve("   ") is None
    assert backend.calls == []


def test_build_augmentor_respects_settings(make_settings):
    assert not build_augmentor(make_settings()).enabled
    aug = build_augmentor(make_settings(RETRIEVAL_URL="https://rag.test", RETRIEVAL_TENANT="acme"))
    assert aug.enabled
    assert aug.tenant == "acme"


@pytest.mark.asyncio
async def test_http_backend_synthesize_and_search(make_settings):
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append((request.url.path, json.loads(request.content), request.headers.get("authorization")))
        if request.url.path.endswith("/ai-search"):
            return httpx.Response(200, json={"result": {"response": "Classes are recorded."}})
        return httpx.Response(200, json={"data": [
            {"filename": "help.md", "content": [{"text": "Recordings"}, {"text": "are kept."}]},
            {"filename": "empty.md", "content": []},
        ]})

    s = make_settings(RETRIEVAL_URL="https://rag.test/v1/", RETRIEVAL_API_KEY="k")
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        backend = HttpRetrievalBackend(s, client=client)
        assert await backend.synthesize("rec", "acme") == "Classes are recorded."
        assert await backend.search("rec") == "(help.md) Recordings are kept."

    assert requests[0][0] == "/v1/ai-search"
    assert requests[0][1] == {"query": "rec", "filters": {"type": "eq", "key": "tenant", "value": "acme"}}
    assert requests[0][2] == "Bearer k"
    assert requests[1][1] == {"query": "rec"}


@pytest.mark.asyncio
async def test_http_backend_error_is_swallowed_by_augmentor(make_settings):
    def handler(request):
        return httpx.Response(503)

    s = make_settings(RETRIEVAL_URL="https://rag.test")
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        aug = build_augmentor(s, client=client)
        assert await aug.retrieve("anything") is None
