"""Forgiving HTML Parser.

Turns markup text into a node tree the way a lenient browser would: unclosed
and mismatched tags are repaired, ``html``/``head``/``body`` are implied when
missing, and ``script``/``style``/``title``/``textarea`` content is captured
as literal text.

Progressive API Disclosure:
- Level 1: parse_html() returns the root element
- Level 2: parse() returns a ParseResult with diagnostics and metrics
- Level 3: HTMLParser with a ParserConfig for repeated parses
"""

__version__ = "0.1.0"
__author__ = "Forgiving HTML Parser Team"

from .api import HTMLParser, parse, parse_html

# Configuration classes for advanced usage
from .shared.config import ParserConfig

# Lower layers for callers that work with tokens directly
from .tokenization import Token, TokenType, tokenize
from .tree import Element, Node, ParseResult, TextNode, build

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1 and 2: parsing functions
    "parse_html",
    "parse",

    # Level 3: configured parser
    "HTMLParser",
    "ParserConfig",

    # Result objects and data structures
    "ParseResult",
    "Element",
    "TextNode",
    "Node",

    # Pipeline stages
    "Token",
    "TokenType",
    "tokenize",
    "build",
]
