from __future__ import annotations
from typing import AsyncIterator, Dict, List
import logging

import httpx
from fastapi.responses import JSONResponse, StreamingResponse

from .config import settings
from .llm import LLMAdapter, ModelExecutionError

log = logging.getLogger(__name__)

GENERIC_ERROR = "Failed to process request"


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


async def passthrough(upstream: httpx.Response) -> AsyncIterator[bytes]:
    """
    Yields the upstream body unchanged. The upstream response is closed however the
    iteration ends (completed, client gone, or generator closed).
    """
    try:
        async for block in upstream.aiter_bytes():
            yield block
    finally:
        await upstream.aclose()


class RelayResponse(StreamingResponse):
    """StreamingResponse over an upstream httpx response; always closes the upstream."""

    def __init__(self, upstream: httpx.Response, **kwargs) -> None:
        super().__init__(passthrough(upstream), **kwargs)
        self.upstream = upstream

    async def __call__(self, scope, receive, send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            await self.upstream.aclose()


class StreamRelay:
    """
    Hands the model's byte stream to the client as-is: no parsing, no re-framing.
    Only a failure before the first byte turns into a JSON error; once streaming
    has started, an upstream failure just ends the connection.
    """

    def __init__(self, llm: LLMAdapter, _settings: settings.__class__) -> None:
        self.llm = llm
        self._settings = _settings

    async def relay(self, messages: List[Dict[str, str]]):
        try:
            upstream = await self.llm.open_stream(messages, max_tokens=self._settings.MAX_TOKENS)
        except ModelExecutionError as e:
            log.error(f"model execution failed: {e}")
            return error_response(GENERIC_ERROR, 500)

        media_type = upstream.headers.get("content-type") or "application/x-ndjson"
        return RelayResponse(
            upstream,
            media_type=media_type,
            headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
        )
