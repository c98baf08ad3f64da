from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Awaitable, Dict, List, Optional, Sequence, Tuple, TypeVar, Union
import asyncio
import json
import logging
import time

from .config import settings
from .faq import build_compact_context
from .knowledge import KnowledgeStore
from .models import ChatMessage
from .policy import compile_policy
from .retrieval import RetrievalAugmentor

log = logging.getLogger("metrics")

T = TypeVar("T")

RESOURCES_LABEL = "Support resources (JSON): "
RETRIEVAL_LABEL = "Retrieval context:\n"

# Final order of the system layers, highest priority first.
LAYER_ORDER: Tuple[str, ...] = ("retrieval", "policy", "resources", "baseline")


@dataclass
class AssembledContext:
    messages: List[Dict[str, str]]
    layers: List[str] = field(default_factory=list)
    metrics: Dict[str, Any] = field(default_factory=dict)


def _as_dict(m: Union[ChatMessage, Dict[str, Any]]) -> Dict[str, str]:
    if isinstance(m, ChatMessage):
        return m.model_dump()
    return {"role": m.get("role", ""), "content": m.get("content", "")}


def latest_user_message(history: Sequence[Dict[str, str]]) -> str:
    return next((m.get("content") or "" for m in reversed(history) if m.get("role") == "user"), "")


class ContextAssembler:
    """
    Builds the message list for the model:

        [retrieval?, policy?, resources?, baseline?, *history]

    Retrieval comes first and the baseline persona sits right before the conversation.
    The baseline is only added when the history has no system message of its own.
    The history itself is never modified or reordered.
    """

    def __init__(self, store: KnowledgeStore, augmentor: RetrievalAugmentor, _settings: settings.__class__) -> None:
        self.store = store
        self.augmentor = augmentor
        self._settings = _settings

    async def assemble(self, history: Sequence[Union[ChatMessage, Dict[str, Any]]]) -> AssembledContext:
        t0 = time.perf_counter()
        conversation = [_as_dict(m) for m in history]
        query = latest_user_message(conversation)
        needs_baseline = not any(m["role"] == "system" for m in conversation)

        if self._settings.CONCURRENT_LOADS:
            (knowledge, t_k), (directives, t_d), (retrieved, t_r) = await asyncio.gather(
                self._timed(self.store.load_knowledge()),
                self._timed(self.store.load_directives()),
                self._timed(self.augmentor.retrieve(query)),
            )
        else:
            knowledge, t_k = await self._timed(self.store.load_knowledge())
            directives, t_d = await self._timed(self.store.load_directives())
            retrieved, t_r = await self._timed(self.augmentor.retrieve(query))

        resources = build_compact_context(
            knowledge,
            query,
            max_count=self._settings.FAQ_MAX_COUNT,
            max_answer_chars=self._settings.FAQ_MAX_ANSWER_CHARS,
        )

        contents: Dict[str, Optional[str]] = {
            "retrieval": RETRIEVAL_LABEL + retrieved if retrieved else None,
            "policy": compile_policy(directives),
            "resources": RESOURCES_LABEL + json.dumps(resources, ensure_ascii=False) if resources else None,
            "baseline": self._settings.SYSTEM_PROMPT if needs_baseline else None,
        }
        layers = [name for name in LAYER_ORDER if contents[name]]
        messages = [{"role": "system", "content": contents[name]} for name in layers] + conversation

        metrics = {
            "durations_ms": {
                "load_knowledge": t_k,
                "load_directives": t_d,
                "retrieval": t_r,
                "total": self._ms(t0, time.perf_counter()),
            },
            "layers": layers,
            "faq_selected": len(resources["selected_faq"]) if resources else 0,
            "history_len": len(conversation),
            "concurrent": self._settings.CONCURRENT_LOADS,
        }
        log.info(json.dumps(metrics, ensure_ascii=False))
        return AssembledContext(messages=messages, layers=layers, metrics=metrics)

    @staticmethod
    async def _timed(aw: Awaitable[T]) -> Tuple[T, Optional[float]]:
        t = time.perf_counter()
        value = await aw
        return value, ContextAssembler._ms(t, time.perf_counter())

    @staticmethod
    def _ms(a: Optional[float], b: Optional[float]) -> Optional[float]:
        if a is None or b is None:
            return None
        return round((b - a) * 1000.0, 2)
