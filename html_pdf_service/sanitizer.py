"""
Lexical HTML sanitizer applied before any markup reaches the browser.

Strips <script> and <iframe> spans and inline event-handler attributes
using regular expressions. This is pattern removal, not DOM parsing:
malformed markup passes through untouched apart from literal matches.
Handler names must start a word, so attributes that merely contain "on"
after a word character (``content="..."``, ``_onclick="..."``) are kept.
"""

import re

# Applied in order on every pass.
_SANITIZE_RULES = (
    re.compile(r"<script[\s\S]*?>[\s\S]*?</script>", re.IGNORECASE),
    re.compile(r"<iframe[\s\S]*?>[\s\S]*?</iframe>", re.IGNORECASE),
    re.compile(r'\bon\w+="[^"]*"', re.IGNORECASE),
    re.compile(r"\bon\w+='[^']*'", re.IGNORECASE),
)


def _apply_rules(html: str) -> str:
    for pattern in _SANITIZE_RULES:
        html = pattern.sub("", html)
    return html


def sanitize_html(html: str) -> str:
    """
    Remove scripts, iframes and inline event handlers from HTML text.

    Rules are re-applied until the text stops changing, so removing one span
    can never leave behind a freshly assembled match. Every removal shortens
    the text, which bounds the loop.

    Args:
        html: Untrusted HTML text

    Returns:
        HTML text with all matching spans and attributes removed

    Example:
        >>> sanitize_html('<p onclick="go()">Hi</p><script>x()</script>')
        '<p >Hi</p>'
    """
    cleaned = _apply_rules(html)
    while cleaned != html:
        html = cleaned
        cleaned = _apply_rules(html)
    return cleaned
