"""Serialization of parsed trees to plain data, JSON and a debug outline."""

import json
from typing import Any, Dict, List, Optional, Tuple

from .nodes import Element, Node, TextNode

# Longest text shown per line by format_tree before truncation.
OUTLINE_TEXT_LIMIT = 60


def _shallow_dict(node: Node) -> Dict[str, Any]:
    if isinstance(node, TextNode):
        return {"type": "text", "value": node.value}
    return {
        "type": "element",
        "tag_name": node.tag_name,
        "attributes": dict(node.attributes),
        "children": [],
    }


def _shallow_node(data: Dict[str, Any]) -> Node:
    node_type = data.get("type")
    if node_type == "text":
        return TextNode(str(data.get("value", "")))
    if node_type == "element":
        return Element(
            tag_name=data["tag_name"],
            attributes=dict(data.get("attributes", {})),
        )
    raise ValueError(f"Unknown node type: {node_type!r}")


def to_dict(node: Node) -> Dict[str, Any]:
    """Convert a node and its subtree to JSON-ready nested dictionaries.

    Elements become ``{"type": "element", "tag_name", "attributes",
    "children"}`` and text nodes ``{"type": "text", "value"}``.
    """
    result = _shallow_dict(node)
    stack: List[Tuple[Node, Dict[str, Any]]] = [(node, result)]
    while stack:
        current, data = stack.pop()
        if isinstance(current, TextNode):
            continue
        for child in current.children:
            child_data = _shallow_dict(child)
            data["children"].append(child_data)
            stack.append((child, child_data))
    return result


def from_dict(data: Dict[str, Any]) -> Node:
    """Rebuild a node from the output of :func:`to_dict`.

    Raises:
        ValueError: If ``data`` or any nested child is not a recognized node mapping
    """
    result = _shallow_node(data)
    stack: List[Tuple[Dict[str, Any], Node]] = [(data, result)]
    while stack:
        mapping, node = stack.pop()
        if isinstance(node, TextNode):
            continue
        for child_data in mapping.get("children", []):
            child = _shallow_node(child_data)
            node.children.append(child)
            stack.append((child_data, child))
    return result


def to_json(node: Node, indent: Optional[int] = None) -> str:
    """Serialize a node and its subtree to a JSON string.

    Encoding is done by the json module, whose encoder recurses per nesting
    level; very deep trees raise RecursionError here even though
    :func:`to_dict` handles them.
    """
    return json.dumps(to_dict(node), indent=indent, ensure_ascii=False)


def format_tree(node: Node, indent: str = "  ") -> str:
    """Render an indented outline of the tree for debugging.

    Examples:
        >>> from forgiving_html_parser import parse_html
        >>> print(format_tree(parse_html('<p class="x">hi</p>')))
        <#root>
          <html>
            <head>
            <body>
              <p class="x">
                "hi"
    """
    lines: List[str] = []
    stack: List[Tuple[Node, int]] = [(node, 0)]
    while stack:
        current, depth = stack.pop()
        prefix = indent * depth
        if isinstance(current, TextNode):
            text = current.value
            if len(text) > OUTLINE_TEXT_LIMIT:
                text = text[:OUTLINE_TEXT_LIMIT] + "..."
            lines.append(f"{prefix}{json.dumps(text, ensure_ascii=False)}")
            continue
        attrs = "".join(
            f' {name}="{value}"' for name, value in current.attributes.items()
        )
        lines.append(f"{prefix}<{current.tag_name}{attrs}>")
        stack.extend((child, depth + 1) for child in reversed(current.children))
    return "\n".join(lines)
