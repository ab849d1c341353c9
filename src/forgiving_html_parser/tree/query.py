"""Read-only lookups over a parsed tree.

All functions walk the tree depth-first in pre-order, starting with (and
including) the node passed in, so results come back in document order. The
walk uses an explicit work list rather than recursion.
"""

from typing import Callable, Iterator, List, Optional

from .nodes import Element, Node


def iter_elements(node: Node) -> Iterator[Element]:
    """Yield ``node`` (if an element) and every descendant element in document order."""
    stack: List[Node] = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, Element):
            yield current
            stack.extend(reversed(current.children))


def find_all(node: Node, predicate: Callable[[Element], bool]) -> List[Element]:
    """Return every element satisfying ``predicate`` in document order."""
    return [element for element in iter_elements(node) if predicate(element)]


def find_first(node: Node, predicate: Callable[[Element], bool]) -> Optional[Element]:
    """Return the first element satisfying ``predicate``, or None."""
    for element in iter_elements(node):
        if predicate(element):
            return element
    return None


def get_elements_by_tag_name(node: Node, tag_name: str) -> List[Element]:
    """Find all elements with ``tag_name`` (case-insensitive; ``*`` matches any)."""
    wanted = tag_name.lower()
    if wanted == "*":
        return list(iter_elements(node))
    return find_all(node, lambda element: element.tag_name == wanted)


def get_element_by_id(node: Node, element_id: str) -> Optional[Element]:
    """Find the first element whose ``id`` attribute equals ``element_id``.

    Ids are not required to be unique; later duplicates are never returned.
    """
    return find_first(node, lambda element: element.attributes.get("id") == element_id)


def get_elements_by_class_name(node: Node, class_names: str) -> List[Element]:
    """Find all elements whose ``class`` attribute has every class in ``class_names``.

    ``class_names`` is split on whitespace, so ``"a b"`` matches elements
    carrying both ``a`` and ``b`` in any order. An empty query matches nothing.
    """
    wanted = set(class_names.split())
    if not wanted:
        return []
    return find_all(node, lambda element: wanted.issubset(element.class_list))


def get_elements_by_name(node: Node, name: str) -> List[Element]:
    """Find all elements whose ``name`` attribute equals ``name``."""
    return get_elements_by_attribute(node, "name", name)


def get_elements_by_attribute(node: Node, name: str, value: str) -> List[Element]:
    """Find all elements whose attribute ``name`` (case-insensitive) equals ``value``."""
    attr_name = name.lower()
    return find_all(node, lambda element: element.attributes.get(attr_name) == value)
