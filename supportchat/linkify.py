from __future__ import annotations
import re


_HTML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#39;"),
)

# URL body over already-escaped text: stops at whitespace, ")" and escaped <, >, ", '
_URL_BODY = r"(?:(?!&(?:lt|gt|quot|#39);)[^\s<)])+"

# One left-to-right scan, alternatives in priority order. A span consumed by one
# alternative is never revisited, so anchors cannot nest or double-wrap.
_LINK_RE = re.compile(
    r"@?(?P<url>https?://" + _URL_BODY + r")"
    r"|(?<![\w@])(?P<www>www\." + _URL_BODY + r")"
    r"|(?P<email>[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})"
)


def escape_html(text: str) -> str:
    for raw, entity in _HTML_ESCAPES:
        text = text.replace(raw, entity)
    return text


def _anchor(m: re.Match) -> str:
    if m.group("url"):
        url = m.group("url")
        return f'<a href="{url}" target="_blank" rel="noopener noreferrer">{url}</a>'
    if m.group("www"):
        host = m.group("www")
        return f'<a href="https://{host}" target="_blank" rel="noopener noreferrer">{host}</a>'
    email = m.group("email")
    return f'<a href="mailto:{email}">{email}</a>'


def linkify(text: str) -> str:
    """
    Escapes the five HTML-significant characters over the whole text, then wraps
    protocol URLs (optionally "@"-prefixed), bare www. hosts (as https) and
    email addresses in anchors.
    """
    return _LINK_RE.sub(_anchor, escape_html(text or ""))
