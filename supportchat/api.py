from __future__ import annotations
from contextlib import asynccontextmanager
import logging

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError

from .config import settings
from .knowledge import KnowledgeStore
from .retrieval import build_augmentor
from .assembler import ContextAssembler
from .llm import LLMAdapter
from .models import ChatRequest
from .relay import GENERIC_ERROR, StreamRelay, error_response

log = logging.getLogger(__name__)


# ---------- App & DI ----------
http = httpx.AsyncClient(timeout=httpx.Timeout(30.0))
llm = LLMAdapter(settings)
store = KnowledgeStore(settings, client=http)
augmentor = build_augmentor(settings, client=http)
assembler = ContextAssembler(store, augmentor, settings)
relay = StreamRelay(llm, settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await llm.startup()
    yield

    # Shutdown
    await llm.shutdown()
    await http.aclose()


app = FastAPI(title="Support Chat", version="0.1.0", lifespan=lifespan)


# ---------- Endpoints ----------
@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/api/chat")
async def chat(request: Request):
    """
    POST /api/chat
    Body:
      {"messages": [{"role": "user", "content": "How do I cancel my membership?"}]}
    Response: the model stream, one {"response": "..."} JSON object per line.
    Errors: {"error": "..."} with 400 (bad body) or 500 (model failure).
    """
    try:
        body = await request.json()
        payload = ChatRequest.model_validate(body if body is not None else {})
    except (ValueError, ValidationError) as e:
        log.info(f"rejected chat request: {type(e).__name__}")
        return error_response("Invalid request body", 400)

    try:
        context = await assembler.assemble(payload.messages)
        return await relay.relay(context.messages)
    except Exception:
        log.exception("Error processing chat request")
        return error_response(GENERIC_ERROR, 500)


@app.api_route("/api/chat", methods=["GET", "HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"])
def chat_method_not_allowed():
    return PlainTextResponse("Method not allowed", status_code=405, headers={"Allow": "POST"})


@app.api_route("/api/{path:path}", methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"])
def api_not_found(path: str):
    return PlainTextResponse("Not found", status_code=404)


# Everything else is a static asset (404 when missing)
app.mount("/", StaticFiles(directory=settings.ASSETS_DIR, html=True, check_dir=False), name="assets")
