"""Fixed element categories consulted by the tokenizer and tree builder.

All tables are immutable and shared read-only by every parse.
"""

from typing import FrozenSet

# Characters treated as whitespace everywhere in the parser. Narrower than
# str.isspace(), which also accepts vertical tab and Unicode spaces.
WHITESPACE = " \t\n\r\f"

# Prefix of synthetic node names. Conforming tag names start with an ASCII
# letter, so these names never collide with elements from valid markup.
RESERVED_NAME_PREFIX = "#"

# Tag name of the synthetic element every parse returns as its root.
ROOT_TAG_NAME = RESERVED_NAME_PREFIX + "root"

VOID_ELEMENTS: FrozenSet[str] = frozenset({
    "area",
    "base",
    "br",
    "col",
    "embed",
    "hr",
    "img",
    "input",
    "keygen",
    "link",
    "meta",
    "param",
    "source",
    "track",
    "wbr",
})

RAW_TEXT_ELEMENTS: FrozenSet[str] = frozenset({"script", "style"})

# Conceptually these allow character references; no decoding is done, so
# they are captured exactly like raw text.
ESCAPABLE_RAW_TEXT_ELEMENTS: FrozenSet[str] = frozenset({"title", "textarea"})

LITERAL_TEXT_ELEMENTS: FrozenSet[str] = RAW_TEXT_ELEMENTS | ESCAPABLE_RAW_TEXT_ELEMENTS

# Elements the in-head insertion mode attaches without pushing.
HEAD_VOID_ELEMENTS: FrozenSet[str] = frozenset({"meta", "link", "base"})

# Elements the in-head insertion mode pushes to receive literal text.
HEAD_TEXT_ELEMENTS: FrozenSet[str] = frozenset({"title", "style", "script"})


def is_whitespace(text: str) -> bool:
    """Return True if ``text`` consists only of parser whitespace (or is empty)."""
    return not text.strip(WHITESPACE)


def is_void_element(tag_name: str) -> bool:
    """Return True if ``tag_name`` can never have children."""
    return tag_name in VOID_ELEMENTS
