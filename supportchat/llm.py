from __future__ import annotations
from typing import Dict, List, Optional
import httpx

from .config import settings


class ModelExecutionError(RuntimeError):
    """The model call failed before any output was streamed."""


class LLMAdapter:
    """
    Model-execution capability: POST {LLM_BASE_URL}/run/{LLM_MODEL} with stream=true.
    The upstream answers with newline-delimited {"response": "..."} chunks, which are
    handed back as an open httpx.Response for the relay to pass through untouched.
    """

    def __init__(self, _settings: settings.__class__, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._settings = _settings
        self._transport = transport
        self.client: Optional[httpx.AsyncClient] = None

    async def startup(self) -> None:
        if self.client is None:
            limits = httpx.Limits(max_keepalive_connections=10, max_connections=20)
            headers = {"Content-Type": "application/json"}
            if self._settings.LLM_API_KEY:
                headers["Authorization"] = f"Bearer {self._settings.LLM_API_KEY}"
            self.client = httpx.AsyncClient(
                base_url=self._settings.LLM_BASE_URL,
                timeout=httpx.Timeout(120.0),
                limits=limits,
                headers=headers,
                transport=self._transport,
            )

    async def shutdown(self) -> None:
        if self.client:
            await self.client.aclose()
            self.client = None

    def _run_path(self) -> str:
        return f"/run/{self._settings.LLM_MODEL}"

    async def open_stream(self, messages: List[Dict], max_tokens: Optional[int] = None) -> httpx.Response:
        """
        Starts generation and returns the live response (body not read yet).
        The caller owns the response and must aclose() it.
        """
        await self.startup()
        assert self.client is not None
        payload = {
            "messages": messages,
            "max_tokens": max_tokens or self._settings.MAX_TOKENS,
            "stream": True,
        }
        request = self.client.build_request("POST", self._run_path(), json=payload)
        try:
            response = await self.client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise ModelExecutionError(f"model request failed: {type(e).__name__}: {e}") from e

        if not response.is_success:
            body = (await response.aread())[:500]
            await response.aclose()
            raise ModelExecutionError(f"model returned HTTP {response.status_code}: {body!r}")
        return response
