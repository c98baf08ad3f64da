from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional
import asyncio
import json
import logging

import httpx
from pydantic import ValidationError

from .config import settings
from .models import Brand, FaqEntry, KnowledgeDocument

log = logging.getLogger(__name__)

RESOURCES = "resources"
DIRECTIVES = "directives"


@dataclass
class KnowledgeStore:
    """
    Reads the two static knowledge documents (FAQ resources, policy directives).

    Source is either ASSETS_BASE_URL (fetched with httpx) or the local ASSETS_DIR.
    Every failure (missing, non-2xx, transport, JSON) ends as None plus a log line;
    callers never see an exception. Nothing is cached, each call reads fresh.
    """
    _settings: settings.__class__
    client: Optional[httpx.AsyncClient] = field(default=None, repr=False)

    # ---------- Public API ----------
    async def load(self, kind: str) -> Optional[Dict[str, Any]]:
        path = self._path_for(kind)
        if self._settings.ASSETS_BASE_URL:
            raw = await self._fetch_remote(path)
        else:
            raw = await asyncio.to_thread(self._read_local, path)
        if raw is None:
            return None

        try:
            doc = json.loads(raw)
        except ValueError as e:
            log.warning(f"{kind}: invalid JSON in {path}: {e}")
            return None
        if not isinstance(doc, dict):
            log.warning(f"{kind}: expected a JSON object in {path}, got {type(doc).__name__}")
            return None
        return doc

    async def load_knowledge(self) -> Optional[KnowledgeDocument]:
        raw = await self.load(RESOURCES)
        if raw is None:
            return None
        return parse_knowledge(raw)

    async def load_directives(self) -> Optional[Dict[str, Any]]:
        return await self.load(DIRECTIVES)

    # ---------- Helpers ----------
    def _path_for(self, kind: str) -> str:
        if kind == RESOURCES:
            return self._settings.RESOURCES_PATH
        if kind == DIRECTIVES:
            return self._settings.DIRECTIVES_PATH
        raise ValueError(f"Unknown document kind: {kind}")

    def _read_local(self, path: str) -> Optional[str]:
        p = Path(self._settings.ASSETS_DIR) / path
        try:
            return p.read_text(encoding="utf-8")
        except FileNotFoundError:
            log.info(f"knowledge document not found: {p}")
            return None
        except OSError as e:
            log.warning(f"knowledge document unreadable: {p}: {e}")
            return None

    async def _fetch_remote(self, path: str) -> Optional[str]:
        url = self._settings.ASSETS_BASE_URL.rstrip("/") + "/" + path.lstrip("/")
        try:
            if self.client is not None:
                r = await self.client.get(url)
            else:
                async with httpx.AsyncClient(timeout=10.0) as c:
                    r = await c.get(url)
        except httpx.HTTPError as e:
            log.warning(f"knowledge source unavailable: {url}: {e}")
            return None
        if r.status_code == 404:
            log.info(f"knowledge document not found: {url}")
            return None
        if not r.is_success:
            log.warning(f"knowledge document fetch failed: {url}: HTTP {r.status_code}")
            return None
        return r.text


def parse_knowledge(raw: Dict[str, Any]) -> KnowledgeDocument:
    """
    Builds a KnowledgeDocument from resources.json content.
    Items without question or answer are skipped (ingestion should have dropped them).
    """
    entries: List[FaqEntry] = []
    faq = raw.get("faq")
    if not isinstance(faq, list):
        faq = []
    for item in faq:
        if not isinstance(item, dict):
            continue
        q, a = item.get("q"), item.get("a")
        if not (isinstance(q, str) and q.strip() and isinstance(a, str) and a.strip()):
            log.debug(f"skipping incomplete FAQ entry: {item!r}")
            continue
        try:
            entries.append(FaqEntry.model_validate(item))
        except ValidationError as e:
            log.debug(f"skipping invalid FAQ entry: {e}")

    brand = None
    if isinstance(raw.get("brand"), dict):
        try:
            brand = Brand.model_validate(raw["brand"])
        except ValidationError:
            brand = None

    extra = {k: v for k, v in raw.items() if k not in ("brand", "faq")}
    return KnowledgeDocument(brand=brand, faq=entries, **extra)
