"""Public parsing entry points."""

from .parser import HTMLParser, parse, parse_html

__all__ = [
    "HTMLParser",
    "parse",
    "parse_html",
]
