"""Tree construction and querying for forgiving HTML parsing.

Key Components:
    HTMLTreeBuilder: Insertion-mode state machine turning tokens into a tree
    ParseResult: Tree plus diagnostics and performance metrics
    Element, TextNode: Node types of the produced tree
    query: Document-order lookups by tag, id, class, name and attribute
    serialize: Conversion to dictionaries, JSON and a debug outline
"""

from .nodes import Element, Node, TextNode
from .builder import (
    HTMLTreeBuilder,
    InsertionMode,
    ParseResult,
    build,
)
from .query import (
    find_all,
    find_first,
    get_element_by_id,
    get_elements_by_attribute,
    get_elements_by_class_name,
    get_elements_by_name,
    get_elements_by_tag_name,
    iter_elements,
)
from .serialize import format_tree, from_dict, to_dict, to_json

__all__ = [
    "Element",
    "Node",
    "TextNode",
    "HTMLTreeBuilder",
    "InsertionMode",
    "ParseResult",
    "build",
    "find_all",
    "find_first",
    "get_element_by_id",
    "get_elements_by_attribute",
    "get_elements_by_class_name",
    "get_elements_by_name",
    "get_elements_by_tag_name",
    "iter_elements",
    "format_tree",
    "from_dict",
    "to_dict",
    "to_json",
]
