"""
Support chat front end.
Structure:
- config.py      : Settings via Pydantic Settings
- models.py      : ChatMessage / FAQ / knowledge document models
- knowledge.py   : KnowledgeStore (resources.json + directives.json, None on failure)
- faq.py         : FAQ selection + compact resources blob
- policy.py      : directives -> strict policy text
- retrieval.py   : RetrievalAugmentor (optional, failures swallowed)
- assembler.py   : ContextAssembler (layered system messages + history)
- llm.py         : LLMAdapter (streaming model call)
- relay.py       : StreamRelay (model stream -> HTTP, untouched)
- linkify.py     : HTML escaping + link detection
- client.py      : StreamConsumer / ChatClient (incremental client side)
- ingest.py      : IngestPipeline (CSV -> resources.json)
- api.py         : FastAPI endpoints (/health, /api/chat, static assets)
"""
