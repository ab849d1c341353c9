"""Node types of the parsed document tree.

A tree is a single-rooted hierarchy of :class:`Element` and :class:`TextNode`
values. Parents own their children outright; nodes keep no back-reference to
their parent, so a tree has no cycles and compares structurally with ``==``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from forgiving_html_parser.shared.elements import is_void_element


@dataclass
class TextNode:
    """Literal character data."""

    value: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert the node to a JSON-ready dictionary."""
        from .serialize import to_dict
        return to_dict(self)


@dataclass(eq=False, repr=False)
class Element:
    """An element with lowercase tag name, attributes and ordered children.

    Equality is structural over the whole subtree and is computed without
    recursion.
    """

    tag_name: str
    attributes: Dict[str, str] = field(default_factory=dict)
    children: List["Node"] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate element values."""
        if not self.tag_name:
            raise ValueError("Element tag name cannot be empty")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Element):
            return NotImplemented
        pending: List[Tuple[Element, Element]] = [(self, other)]
        while pending:
            left, right = pending.pop()
            if (
                left.tag_name != right.tag_name
                or left.attributes != right.attributes
                or len(left.children) != len(right.children)
            ):
                return False
            for left_child, right_child in zip(left.children, right.children):
                if isinstance(left_child, Element) and isinstance(right_child, Element):
                    pending.append((left_child, right_child))
                elif left_child != right_child:
                    return False
        return True

    def __repr__(self) -> str:
        # Children are summarized so deep trees never recurse here.
        return (
            f"Element(tag_name={self.tag_name!r}, attributes={self.attributes!r}, "
            f"children=<{len(self.children)} nodes>)"
        )

    @property
    def is_void(self) -> bool:
        """Check if this element's tag can never have children."""
        return is_void_element(self.tag_name)

    @property
    def id(self) -> Optional[str]:
        """Value of the ``id`` attribute, if any."""
        return self.attributes.get("id")

    @property
    def class_list(self) -> List[str]:
        """Whitespace-separated classes of the ``class`` attribute."""
        return self.attributes.get("class", "").split()

    @property
    def text_content(self) -> str:
        """Concatenate all descendant text in document order."""
        parts: List[str] = []
        stack: List[Node] = [self]
        while stack:
            node = stack.pop()
            if isinstance(node, TextNode):
                parts.append(node.value)
            else:
                stack.extend(reversed(node.children))
        return "".join(parts)

    @property
    def element_children(self) -> List["Element"]:
        """Direct children that are elements."""
        return [child for child in self.children if isinstance(child, Element)]

    def get_attribute(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get attribute value (name is case-insensitive) with optional default."""
        return self.attributes.get(name.lower(), default)

    def has_attribute(self, name: str) -> bool:
        """Check if element has specific attribute."""
        return name.lower() in self.attributes

    def iter(self) -> Iterator["Element"]:
        """Iterate over this element and its descendants in document order."""
        from .query import iter_elements
        return iter_elements(self)

    def get_elements_by_tag_name(self, tag_name: str) -> List["Element"]:
        """Find all elements with the given tag name in document order."""
        from .query import get_elements_by_tag_name
        return get_elements_by_tag_name(self, tag_name)

    def get_element_by_id(self, element_id: str) -> Optional["Element"]:
        """Find the first element whose ``id`` equals ``element_id``."""
        from .query import get_element_by_id
        return get_element_by_id(self, element_id)

    def get_elements_by_class_name(self, class_names: str) -> List["Element"]:
        """Find all elements carrying every class in ``class_names``."""
        from .query import get_elements_by_class_name
        return get_elements_by_class_name(self, class_names)

    def get_elements_by_name(self, name: str) -> List["Element"]:
        """Find all elements whose ``name`` attribute equals ``name``."""
        from .query import get_elements_by_name
        return get_elements_by_name(self, name)

    def get_elements_by_attribute(self, name: str, value: str) -> List["Element"]:
        """Find all elements whose attribute ``name`` equals ``value``."""
        from .query import get_elements_by_attribute
        return get_elements_by_attribute(self, name, value)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the subtree to JSON-ready nested dictionaries."""
        from .serialize import to_dict
        return to_dict(self)


Node = Union[Element, TextNode]
