"""Tests for the directives -> policy compiler."""

import json

from supportchat.policy import DIRECTIVE_FIELDS, POLICY_HEADER, compile_policy


def test_absent_or_empty_directives_compile_to_none():
    assert compile_policy(None) is None
    assert compile_policy({}) is None
    assert compile_policy({"tone": "   ", "style": "", "unknown": "x"}) is None


def test_line_order_follows_fixed_field_order_not_source_order():
    directives = {
        "link_policy": "Only official links.",
        "unknown_field": "ignored",
        "tone": "Friendly",
        "escalation_logic": "Suggest support.",
        "style": "Concise",
    }
    text = compile_policy(directives)
    lines = text.split("\n")
    assert lines[0] == POLICY_HEADER
    assert lines[1:] == [
        "Style: Concise",
        "Tone: Friendly",
        "Escalation logic: Suggest support.",
        "Link policy: Only official links.",
    ]


def test_reversed_source_order_gives_identical_text():
    keys = [k for k, _ in DIRECTIVE_FIELDS]
    forward = {k: f"value {k}" for k in keys}
    backward = {k: forward[k] for k in reversed(keys)}
    assert compile_policy(forward) == compile_policy(backward)
    assert len(compile_policy(forward).split("\n")) == len(DIRECTIVE_FIELDS) + 1


def test_structured_values_are_rendered_as_json():
    value = {"max_words": 120, "bullets": ["ok", "short"]}
    text = compile_policy({"formatting": value, "max_response_length": 150})
    assert f"Formatting: {json.dumps(value)}" in text
    assert "Max response length: 150" in text


def test_unknown_fields_ignored():
    text = compile_policy({"tone": "Calm", "secret": "nope"})
    assert "nope" not in text


def test_about_twenty_fields():
    assert len(DIRECTIVE_FIELDS) == 20
    assert len({k for k, _ in DIRECTIVE_FIELDS}) == 20


def test_empty_structured_values_are_rendered():
    text = compile_policy({"formatting": [], "scope": {}})
    assert text.split("\n")[1:] == ["Formatting: []", "Scope: {}"]
