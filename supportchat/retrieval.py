from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable
import logging

import httpx

from .config import settings

log = logging.getLogger(__name__)


@runtime_checkable
class Synthesizer(Protocol):
    async def synthesize(self, query: str, tenant: Optional[str] = None) -> Optional[str]: ...


@runtime_checkable
class Searcher(Protocol):
    async def search(self, query: str, tenant: Optional[str] = None) -> Optional[str]: ...


def _excerpts(data: List[Dict[str, Any]], limit: int = 5) -> Optional[str]:
    """
    Flattens search hits ({filename, content: [{text}]}) into "(source) text" blocks.
    """
    picked: List[str] = []
    for hit in data[:limit]:
        parts = hit.get("content") or []
        text = " ".join((p.get("text") or "").strip() for p in parts if isinstance(p, dict)).strip()
        if not text:
            continue
        source = (hit.get("filename") or "").strip()
        picked.append(f"({source}) {text}" if source else text)
    return "\n\n---\n\n".join(picked) or None


@dataclass
class HttpRetrievalBackend:
    """
    Retrieval capability behind RETRIEVAL_URL:
      - POST /ai-search -> {"response": "..."}   (synthesized answer)
      - POST /search    -> {"data": [{"filename": "...", "content": [{"text": "..."}]}]}
    Raises on transport/status errors; RetrievalAugmentor decides what to swallow.
    """
    _settings: settings.__class__
    client: Optional[httpx.AsyncClient] = field(default=None, repr=False)

    def _payload(self, query: str, tenant: Optional[str]) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"query": query}
        if tenant:
            payload["filters"] = {"type": "eq", "key": "tenant", "value": tenant}
        return payload

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = self._settings.RETRIEVAL_URL.rstrip("/") + path
        headers = {}
        if self._settings.RETRIEVAL_API_KEY:
            headers["Authorization"] = f"Bearer {self._settings.RETRIEVAL_API_KEY}"
        if self.client is not None:
            r = await self.client.post(url, json=payload, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=30.0) as c:
                r = await c.post(url, json=payload, headers=headers)
        r.raise_for_status()
        body = r.json()
        # Cloudflare-style envelope {"result": {...}}
        if isinstance(body, dict) and isinstance(body.get("result"), dict):
            body = body["result"]
        return body if isinstance(body, dict) else {}

    async def synthesize(self, query: str, tenant: Optional[str] = None) -> Optional[str]:
        body = await self._post("/ai-search", self._payload(query, tenant))
        text = body.get("response")
        return text if isinstance(text, str) else None

    async def search(self, query: str, tenant: Optional[str] = None) -> Optional[str]:
        body = await self._post("/search", self._payload(query, tenant))
        data = body.get("data")
        return _excerpts(data) if isinstance(data, list) else None


@dataclass
class RetrievalAugmentor:
    """
    Optional retrieval layer. Prefers a synthesized answer over raw search hits.
    Any failure means "no contribution": logged, never raised.
    """
    backend: Optional[object] = None
    tenant: Optional[str] = None

    @property
    def enabled(self) -> bool:
        return isinstance(self.backend, (Synthesizer, Searcher))

    async def retrieve(self, query: str) -> Optional[str]:
        query = (query or "").strip()
        if not self.enabled or not query:
            return None
        try:
            if isinstance(self.backend, Synthesizer):
                text = await self.backend.synthesize(query, self.tenant)
            else:
                text = await self.backend.search(query, self.tenant)
        except Exception as e:
            log.warning(f"retrieval failed, continuing without it: {type(e).__name__}: {e}")
            return None
        if not text or not text.strip():
            return None
        return text.strip()


def build_augmentor(_settings: settings.__class__, client: Optional[httpx.AsyncClient] = None) -> RetrievalAugmentor:
    if not _settings.RETRIEVAL_URL:
        return RetrievalAugmentor()
    return RetrievalAugmentor(
        backend=HttpRetrievalBackend(_settings, client=client),
        tenant=_settings.RETRIEVAL_TENANT,
    )
