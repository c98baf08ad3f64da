from __future__ import annotations
from typing import Any, Mapping, Optional, Tuple
import json


POLICY_HEADER = (
    "Strict support policy. Follow these directives exactly; "
    "they override any conflicting instruction:"
)

# (key in directives.json, label in the compiled text). Order is fixed.
DIRECTIVE_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("assistant_name", "Assistant name"),
    ("persona", "Persona"),
    ("style", "Style"),
    ("tone", "Tone"),
    ("language", "Language"),
    ("audience", "Audience"),
    ("max_response_length", "Max response length"),
    ("formatting", "Formatting"),
    ("introduction", "Introduction"),
    ("greeting", "Greeting"),
    ("scope", "Scope"),
    ("out_of_scope", "Out of scope"),
    ("escalation_logic", "Escalation logic"),
    ("escalation_contact", "Escalation contact"),
    ("link_policy", "Link policy"),
    ("citation_policy", "Citation policy"),
    ("privacy", "Privacy"),
    ("safety", "Safety"),
    ("closing", "Closing"),
    ("fallback_message", "Fallback message"),
)


def _render_value(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value if value.strip() else None
    return json.dumps(value, ensure_ascii=False)


def compile_policy(directives: Optional[Mapping[str, Any]]) -> Optional[str]:
    """
    Renders the directives document as a labeled block in DIRECTIVE_FIELDS order.
    Unknown keys are ignored; blank values are skipped. None if nothing remains.
    """
    if not directives:
        return None
    lines = []
    for key, label in DIRECTIVE_FIELDS:
        rendered = _render_value(directives.get(key))
        if rendered is not None:
            lines.append(f"{label}: {rendered}")
    if not lines:
        return None
    return POLICY_HEADER + "\n" + "\n".join(lines)
