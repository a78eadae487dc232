"""HTML serialization utilities for laserhtml nodes."""

# ruff: noqa: PERF401

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .constants import BLOCK_ELEMENTS, RAW_TEXT_ELEMENTS, VOID_ELEMENTS
from .cursor import Cursor
from .node import Comment, Doctype, Document, Element


def _escape_text(text: str | None) -> str:
    if not text:
        return ""
    return str(text).replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _choose_attr_quote(value: str | None) -> str:
    if value is None:
        return '"'
    value = str(value)
    if '"' in value and "'" not in value:
        return "'"
    return '"'


def _escape_attr_value(value: str | None, quote_char: str) -> str:
    if value is None:
        return ""
    value = str(value).replace("&", "&amp;")
    if quote_char == '"':
        return value.replace('"', "&quot;")
    return value.replace("'", "&#39;")


def serialize_start_tag(name: str, attrs: Mapping[str, str] | None) -> str:
    attrs = attrs or {}
    parts: list[str] = ["<", name]
    for key, value in attrs.items():
        if value is None or str(value) == "":
            parts.extend([" ", key, '=""'])
            continue
        value_str = str(value)
        quote = _choose_attr_quote(value_str)
        parts.extend([" ", key, "=", quote, _escape_attr_value(value_str, quote), quote])
    parts.append(">")
    return "".join(parts)


def serialize_end_tag(name: str) -> str:
    return f"</{name}>"


def _serialize_doctype(node: Doctype) -> str:
    if node.public_id is None and node.system_id is None:
        return f"<!DOCTYPE {node.name}>" if node.name else "<!DOCTYPE>"
    parts = [f"<!DOCTYPE {node.name}"]
    if node.public_id is not None:
        parts.append(f' PUBLIC "{node.public_id}"')
        if node.system_id is not None:
            parts.append(f' "{node.system_id}"')
    else:
        parts.append(f' SYSTEM "{node.system_id}"')
    parts.append(">")
    return "".join(parts)


def to_html(value: Any, indent: int = 0, indent_size: int = 2, *, pretty: bool = False) -> str:
    """Convert a node, a cursor, or a list of them (a fragment) to HTML.

    A cursor is zipped up to its root first. Text is escaped, except inside
    raw text elements such as ``<script>`` and ``<style>``.
    """
    if isinstance(value, Cursor):
        value = value.root()
    if isinstance(value, (list, tuple)):
        return fragment_to_html(value, pretty=pretty)
    if isinstance(value, Document):
        parts: list[str] = []
        for child in value.content:
            parts.append(_node_to_html(child, indent, indent_size, pretty, raw=False, in_pre=False))
        return "\n".join(parts) if pretty else "".join(parts)
    return _node_to_html(value, indent, indent_size, pretty, raw=False, in_pre=False)


def fragment_to_html(roots: Any, *, pretty: bool = False) -> str:
    """Serialize every root of a fragment, in order, and join the results."""
    parts = [to_html(root, pretty=pretty) for root in roots]
    return "\n".join(part for part in parts if part) if pretty else "".join(parts)


_PREFORMATTED_ELEMENTS: set[str] = {"pre", "textarea", "listing"}


def _is_whitespace_text(node: Any) -> bool:
    return isinstance(node, str) and node.strip() == ""


def _should_pretty_indent_children(children: tuple[Any, ...]) -> bool:
    for child in children:
        if isinstance(child, Comment):
            return False
        if isinstance(child, str) and child.strip():
            return False

    for child in children:
        if isinstance(child, (str, Comment)):
            continue
        # Only indent children that are known block elements; indenting inline
        # elements would introduce rendering spaces.
        if not isinstance(child, Element) or child.tag not in BLOCK_ELEMENTS:
            return False
    return True


def _node_to_html(node: Any, indent: int, indent_size: int, pretty: bool, *, raw: bool, in_pre: bool) -> str:
    """Helper to convert a node to HTML."""
    prefix = " " * (indent * indent_size) if pretty and not in_pre else ""

    # Text node
    if isinstance(node, str):
        if raw:
            return node
        if pretty and not in_pre:
            stripped = node.strip()
            return f"{prefix}{_escape_text(stripped)}" if stripped else ""
        return _escape_text(node)

    if isinstance(node, Comment):
        return f"{prefix}<!--{node.data}-->"

    if isinstance(node, Doctype):
        return f"{prefix}{_serialize_doctype(node)}"

    if isinstance(node, Document):
        return to_html(node, indent, indent_size, pretty=pretty)

    if not isinstance(node, Element):
        msg = f"Cannot serialize {type(node).__name__}"
        raise TypeError(msg)

    name = node.tag
    open_tag = serialize_start_tag(name, node.attrs)

    if name in VOID_ELEMENTS:
        return f"{prefix}{open_tag}"

    children = node.content
    if not children:
        return f"{prefix}{open_tag}{serialize_end_tag(name)}"

    content_raw = name in RAW_TEXT_ELEMENTS
    content_pre = in_pre or name in _PREFORMATTED_ELEMENTS

    if not pretty or content_raw or content_pre:
        inner = "".join(
            _node_to_html(child, indent + 1, indent_size, pretty, raw=content_raw, in_pre=content_pre or content_raw)
            for child in children
        )
        return f"{prefix}{open_tag}{inner}{serialize_end_tag(name)}"

    if all(isinstance(c, str) for c in children):
        return f"{prefix}{open_tag}{_escape_text(''.join(children))}{serialize_end_tag(name)}"  # type: ignore[arg-type]

    if not _should_pretty_indent_children(children):
        inner = "".join(_node_to_html(child, 0, indent_size, False, raw=False, in_pre=False) for child in children)
        return f"{prefix}{open_tag}{inner}{serialize_end_tag(name)}"

    # Render with child indentation
    parts = [f"{prefix}{open_tag}"]
    for child in children:
        if _is_whitespace_text(child):
            continue
        child_html = _node_to_html(child, indent + 1, indent_size, pretty, raw=False, in_pre=False)
        if child_html:
            parts.append(child_html)
    parts.append(f"{prefix}{serialize_end_tag(name)}")
    return "\n".join(parts)


def to_test_format(value: Any, indent: int = 0) -> str:
    """Convert a node (or fragment) to the html5lib test tree format.

    One line per node, prefixed with ``| `` and indented two spaces per
    level. Handy for asserting on tree shape, since whitespace and empty text
    nodes are shown explicitly.
    """
    if isinstance(value, Cursor):
        value = value.root()
    if isinstance(value, (list, tuple)):
        return "\n".join(_node_to_test_format(child, indent) for child in value)
    if isinstance(value, Document):
        return "\n".join(_node_to_test_format(child, 0) for child in value.content)
    return _node_to_test_format(value, indent)


def _node_to_test_format(node: Any, indent: int) -> str:
    if isinstance(node, str):
        return f'| {" " * indent}"{node}"'

    if isinstance(node, Comment):
        return f"| {' ' * indent}<!-- {node.data} -->"

    if isinstance(node, Doctype):
        return _doctype_to_test_format(node)

    line = f"| {' ' * indent}<{node.tag}>"
    sections = [line]
    padding = " " * (indent + 2)
    for attr_name, attr_value in sorted(node.attrs.items()):
        sections.append(f'| {padding}{attr_name}="{attr_value}"')
    sections.extend(_node_to_test_format(child, indent + 2) for child in node.content)
    return "\n".join(sections)


def _doctype_to_test_format(node: Doctype) -> str:
    parts: list[str] = ["| <!DOCTYPE"]
    parts.append(f" {node.name}" if node.name else " ")
    if node.public_id is not None or node.system_id is not None:
        parts.append(f' "{node.public_id or ""}"')
        parts.append(f' "{node.system_id or ""}"')
    parts.append(">")
    return "".join(parts)
