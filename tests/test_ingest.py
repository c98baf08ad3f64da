"""Tests for CSV -> resources.json ingestion."""

import json

import pytest

from supportchat.ingest import IngestPipeline, clean_text, normalize_url

CSV = (
    "﻿Subject or Question,Answer,Category,Sub-Category,More Info URL,Extra\n"
    "How do I cancel?,\"Go to   Settings\n> Membership.\",Account,Membership,learnitlive.com/help,\n"
    "HOW DO I CANCEL?,Duplicate row,Account,,,\n"
    ",Answer without question,,,,\n"
    "Question without answer,,,,,\n"
    "Where are recordings?,My Classes,Classes,,https://x.test/rec,Members only\n"
)


@pytest.fixture
def files(tmp_path):
    csv_path = tmp_path / "support.csv"
    csv_path.write_text(CSV, encoding="utf-8")
    resources = tmp_path / "resources.json"
    resources.write_text(json.dumps({
        "brand": {"name": "Learn It Live"},
        "intents": [{"label": "Pricing"}],
        "faq": [
            {"q": "Where are recordings?", "a": "Old answer"},
            {"q": "Existing", "a": "Kept"},
        ],
    }), encoding="utf-8")
    return csv_path, resources


def test_clean_text_and_normalize_url():
    assert clean_text("  a\tb\n\x00c  ") == "a b c"
    assert clean_text(None) == ""
    assert normalize_url("www.x.test") == "https://www.x.test"
    assert normalize_url("HTTP://x.test") == "HTTP://x.test"
    assert normalize_url("  ") is None


def test_append_keeps_existing_and_adds_new_unique(make_settings, files):
    csv_path, resources = files
    result = IngestPipeline(make_settings()).ingest_csv(csv_path, "append", resources)

    doc = json.loads(resources.read_text(encoding="utf-8"))
    assert result.rows == 5
    assert result.unique == 2
    assert result.total == 3
    assert doc["brand"] == {"name": "Learn It Live"}
    assert doc["intents"] == [{"label": "Pricing"}]
    assert doc["faq"] == [
        {"q": "Where are recordings?", "a": "Old answer"},
        {"q": "Existing", "a": "Kept"},
        {"q": "How do I cancel?", "a": "Go to Settings > Membership.",
         "url": "https://learnitlive.com/help", "category": "Account", "subcategory": "Membership"},
    ]
    assert resources.read_text(encoding="utf-8").endswith("}\n")


def test_replace_discards_existing(make_settings, files):
    csv_path, resources = files
    result = IngestPipeline(make_settings()).ingest_csv(csv_path, "replace", resources)
    doc = json.loads(resources.read_text(encoding="utf-8"))
    assert result.total == 2
    assert [f["q"] for f in doc["faq"]] == ["How do I cancel?", "Where are recordings?"]
    assert doc["faq"][1]["extra"] == "Members only"


def test_default_path_comes_from_settings(make_settings, files, tmp_path):
    csv_path, _ = files
    result = IngestPipeline(make_settings(ASSETS_DIR=str(tmp_path))).ingest_csv(csv_path)
    assert result.total == 3


def test_errors(make_settings, files, tmp_path):
    csv_path, resources = files
    pipeline = IngestPipeline(make_settings())
    with pytest.raises(ValueError):
        pipeline.ingest_csv(csv_path, "merge", resources)
    with pytest.raises(FileNotFoundError):
        pipeline.ingest_csv(tmp_path / "missing.csv", "append", resources)
    with pytest.raises(FileNotFoundError):
        pipeline.ingest_csv(csv_path, "append", tmp_path / "nope.json")
