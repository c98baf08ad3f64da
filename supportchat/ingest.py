from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional
import csv
import json
import re

from .config import settings

MODES = ("append", "replace")

_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]+")
_WS_RE = re.compile(r"\s+")
_PROTO_RE = re.compile(r"^https?://", re.IGNORECASE)

# output key -> accepted CSV column names, first non-empty wins
COLUMNS: Dict[str, tuple] = {
    "q": ("Subject or Question", "Subject", "Question"),
    "a": ("Answer",),
    "category": ("Category",),
    "subcategory": ("Sub-Category", "Subcategory"),
    "url": ("More Info URL", "URL"),
    "extra": ("Extra",),
}


def clean_text(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    s = _CONTROL_RE.sub(" ", value)
    return _WS_RE.sub(" ", s).strip()


def normalize_url(value: Any) -> Optional[str]:
    u = clean_text(value)
    if not u:
        return None
    if _PROTO_RE.match(u):
        return u
    return f"https://{u}"


def _pick(row: Dict[str, Any], names: tuple) -> str:
    for name in names:
        v = row.get(name)
        if v:
            return v
    return ""


@dataclass
class IngestResult:
    rows: int
    unique: int
    total: int


@dataclass
class IngestPipeline:
    """
    CSV -> resources.json merge:
    - Column aliases and whitespace/control-character cleanup
    - Rows without question or answer are dropped
    - Dedupe by lower-cased question (inside the CSV and against existing entries)
    - append keeps existing FAQ entries, replace starts from an empty FAQ
    Other top-level keys of resources.json are kept as they are.
    """
    _settings: settings.__class__

    # --------- Public API ----------
    def default_resources_path(self) -> Path:
        return Path(self._settings.ASSETS_DIR) / self._settings.RESOURCES_PATH

    def ingest_csv(self, csv_path: Path, mode: str = "append", resources_path: Optional[Path] = None) -> IngestResult:
        if mode not in MODES:
            raise ValueError(f"mode must be one of {'|'.join(MODES)}")
        csv_path = Path(csv_path)
        resources_path = Path(resources_path or self.default_resources_path())
        if not csv_path.is_file():
            raise FileNotFoundError(f"CSV not found: {csv_path}")
        if not resources_path.is_file():
            raise FileNotFoundError(f"resources.json not found at {resources_path}")

        with csv_path.open("r", encoding="utf-8-sig", newline="") as fh:
            records = list(csv.DictReader(fh))
        items = self._dedupe(self.rows_to_items(records))

        original = json.loads(resources_path.read_text(encoding="utf-8"))
        if not isinstance(original, dict):
            raise ValueError(f"{resources_path} must contain a JSON object")
        existing = original.get("faq") if isinstance(original.get("faq"), list) else []

        merged = self.merge(existing, items, mode)
        updated = {**original, "faq": merged}
        resources_path.write_text(json.dumps(updated, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
        return IngestResult(rows=len(records), unique=len(items), total=len(merged))

    def rows_to_items(self, records: Iterable[Dict[str, Any]]) -> List[Dict[str, str]]:
        items: List[Dict[str, str]] = []
        for row in records:
            q = clean_text(_pick(row, COLUMNS["q"]))
            a = clean_text(_pick(row, COLUMNS["a"]))
            if not q or not a:
                continue
            item = {"q": q, "a": a}
            url = normalize_url(_pick(row, COLUMNS["url"]))
            if url:
                item["url"] = url
            for key in ("category", "subcategory", "extra"):
                value = clean_text(_pick(row, COLUMNS[key]))
                if value:
                    item[key] = value
            items.append(item)
        return items

    @staticmethod
    def merge(existing: List[Dict[str, Any]], items: List[Dict[str, str]], mode: str) -> List[Dict[str, Any]]:
        base = [] if mode == "replace" else list(existing)
        keys = {f["q"].lower() for f in base if isinstance(f, dict) and isinstance(f.get("q"), str)}
        return base + [it for it in items if it["q"].lower() not in keys]

    # --------- Helpers ----------
    @staticmethod
    def _dedupe(items: List[Dict[str, str]]) -> List[Dict[str, str]]:
        seen = set()
        out = []
        for it in items:
            key = it["q"].lower()
            if key in seen:
                continue
            seen.add(key)
            out.append(it)
        return out
