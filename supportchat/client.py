from __future__ import annotations
from typing import AsyncIterable, Callable, Dict, List, Optional
import codecs
import json
import logging

import httpx

from .linkify import linkify

log = logging.getLogger(__name__)

GREETING = "Hi! I'm Lily, your Learn It Live virtual support assistant. How can I help you today?"
APOLOGY = "Sorry, there was an error processing your request."


class ChatBusyError(RuntimeError):
    """A request is already in flight."""


class ChatRequestError(RuntimeError):
    """The server answered /api/chat with a non-success status."""


class StreamConsumer:
    """
    Incremental reader for the /api/chat body.

    Bytes go through an incremental UTF-8 decoder, so multi-byte characters split
    across reads survive. Text is cut into lines; an unterminated last line is kept
    until the next read completes it. Every complete line is parsed as JSON (an SSE
    "data:" prefix is accepted); lines that are not JSON objects are dropped.
    Each chunk with a "response" string grows the answer, and the whole answer is
    re-rendered through linkify().
    """

    def __init__(
        self,
        render: Optional[Callable[[str], None]] = None,
        on_fragment: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.render = render
        self.on_fragment = on_fragment
        self.text = ""
        self.html = ""
        self.chunks = 0
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending = ""

    # ---------- Public API ----------
    def feed(self, data: bytes) -> None:
        self._pending += self._decoder.decode(data)
        *lines, self._pending = self._pending.split("\n")
        for line in lines:
            self._handle_line(line)

    def finish(self) -> str:
        self._pending += self._decoder.decode(b"", final=True)
        if self._pending:
            self._handle_line(self._pending)
            self._pending = ""
        return self.text

    async def consume(self, stream: AsyncIterable[bytes]) -> str:
        async for block in stream:
            self.feed(block)
        return self.finish()

    # ---------- Helpers ----------
    def _handle_line(self, line: str) -> None:
        line = line.strip()
        if line.startswith("data:"):
            line = line[5:].strip()
        if not line:
            return
        try:
            chunk = json.loads(line)
        except ValueError:
            log.debug(f"dropping unparseable stream line: {line[:80]!r}")
            return
        if not isinstance(chunk, dict):
            return
        fragment = chunk.get("response")
        if not isinstance(fragment, str) or not fragment:
            return

        self.chunks += 1
        self.text += fragment
        self.html = linkify(self.text)
        if self.on_fragment:
            self.on_fragment(fragment)
        if self.render:
            self.render(self.html)


class ChatClient:
    """
    Browser-side behaviour of the chat page: the client owns the history,
    allows one request at a time and always clears the busy flag afterwards.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8787",
        greeting: Optional[str] = GREETING,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 120.0,
    ) -> None:
        self.history: List[Dict[str, str]] = []
        if greeting:
            self.history.append({"role": "assistant", "content": greeting})
        self.is_processing = False
        self.client = httpx.AsyncClient(base_url=base_url.rstrip("/"), transport=transport, timeout=timeout)

    async def __aenter__(self) -> "ChatClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def load_suggestions(self, path: str = "/resources.json") -> List[Dict[str, str]]:
        """
        Suggested prompts from resources.json "intents": [{label, examples: [...]}].
        Each item is {"label", "prompt"}; prompt is the first example, else the label.
        Any failure gives an empty list.
        """
        try:
            r = await self.client.get(path)
            r.raise_for_status()
            data = r.json()
        except (httpx.HTTPError, ValueError) as e:
            log.info(f"no suggestions: {type(e).__name__}: {e}")
            return []

        intents = data.get("intents") if isinstance(data, dict) else None
        if not isinstance(intents, list):
            return []
        out: List[Dict[str, str]] = []
        for intent in intents:
            if not isinstance(intent, dict):
                continue
            label = intent.get("label")
            if not isinstance(label, str) or not label.strip():
                continue
            examples = intent.get("examples")
            example = examples[0] if isinstance(examples, list) and examples else None
            prompt = example if isinstance(example, str) and example.strip() else label
            out.append({"label": label, "prompt": prompt})
        return out

    async def send(
        self,
        message: str,
        render: Optional[Callable[[str], None]] = None,
        on_fragment: Optional[Callable[[str], None]] = None,
    ) -> Optional[str]:
        """
        Sends one user message and streams the answer.
        Returns the answer text, the apology text on failure, or None for blank input.
        """
        message = (message or "").strip()
        if not message:
            return None
        if self.is_processing:
            raise ChatBusyError("a request is already in progress")

        self.is_processing = True
        self.history.append({"role": "user", "content": message})
        try:
            consumer = StreamConsumer(render=render, on_fragment=on_fragment)
            async with self.client.stream("POST", "/api/chat", json={"messages": self.history}) as r:
                if not r.is_success:
                    raise ChatRequestError(f"HTTP {r.status_code}")
                text = await consumer.consume(r.aiter_bytes())
            self.history.append({"role": "assistant", "content": text})
            return text
        except (httpx.HTTPError, ChatRequestError) as e:
            log.warning(f"chat request failed: {type(e).__name__}: {e}")
            if render:
                render(linkify(APOLOGY))
            return APOLOGY
        finally:
            self.is_processing = False
