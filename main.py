# main.py
"""
Entry point for the support chat server (uvicorn main:app).
Serves POST /api/chat and the static assets; logs go to stdout.
"""
import logging, sys
from supportchat.api import app  # noqa

root = logging.getLogger()
if not root.handlers:
    h = logging.StreamHandler(sys.stdout)
    h.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(h)
    root.setLevel(logging.INFO)
