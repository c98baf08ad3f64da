"""Pytest configuration and fixtures."""

import json
import os
from pathlib import Path

import pytest

# Settings() runs at import time of supportchat.config
os.environ.setdefault("LLM_BASE_URL", "https://llm.test/ai")
os.environ.setdefault("ASSETS_DIR", str(Path(__file__).resolve().parent.parent / "public"))
os.environ.pop("RETRIEVAL_URL", None)
os.environ.pop("ASSETS_BASE_URL", None)

from supportchat.config import Settings  # noqa: E402


@pytest.fixture
def make_settings(tmp_path):
    """Settings factory pointing ASSETS_DIR at a per-test directory."""

    def _make(**overrides):
        values = {
            "LLM_BASE_URL": "https://llm.test/ai",
            "ASSETS_DIR": str(tmp_path),
            "RETRIEVAL_URL": None,
            "ASSETS_BASE_URL": None,
        }
        values.update(overrides)
        return Settings(**values)

    return _make


@pytest.fixture
def write_asset(tmp_path):
    """Write a JSON (or raw text) document into the per-test assets dir."""

    def _write(name, content):
        path = tmp_path / name
        if isinstance(content, str):
            path.write_text(content, encoding="utf-8")
        else:
            path.write_text(json.dumps(content), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def faq_doc():
    return {
        "brand": {"name": "Learn It Live"},
        "faq": [
            {"q": "How do I watch a recording?", "a": "Open My Classes and pick Watch Recording.",
             "url": "https://www.learnitlive.com/help"},
            {"q": "How do I cancel my membership?", "a": "Account Settings > Membership > Cancel."},
            {"q": "What does a membership include?", "a": "Unlimited live classes and recordings."},
        ],
    }
