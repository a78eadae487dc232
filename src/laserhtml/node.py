"""Immutable node model for laserhtml trees.

Elements, documents, comments and doctypes are frozen dataclasses; text is a
plain ``str``. Edits never mutate a node: they build a new one (see
``Element.evolve``) and share every untouched subtree with the original.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Any, TypeAlias, Union

_EMPTY_ATTRS: Mapping[str, str] = MappingProxyType({})


def _normalize_content(content: Any) -> tuple[Node, ...]:
    if content is None:
        return ()
    if isinstance(content, tuple):
        return content
    if isinstance(content, (str, Element, Comment, Doctype, Document)):
        return (content,)
    return tuple(content)


def _normalize_attrs(attrs: Mapping[str, str] | None) -> Mapping[str, str]:
    if not attrs:
        return _EMPTY_ATTRS
    if isinstance(attrs, MappingProxyType):
        return attrs
    return MappingProxyType({str(k): str(v) for k, v in attrs.items()})


@dataclass(frozen=True, slots=True)
class Element:
    """An HTML element: a tag, its attributes and an ordered tuple of children."""

    tag: str
    attrs: Mapping[str, str]
    content: tuple[Node, ...]

    def __init__(self, tag: str, attrs: Mapping[str, str] | None = None, content: Any = None) -> None:
        if not tag:
            raise ValueError("Element requires a non-empty tag")
        object.__setattr__(self, "tag", str(tag))
        object.__setattr__(self, "attrs", _normalize_attrs(attrs))
        object.__setattr__(self, "content", _normalize_content(content))

    def __repr__(self) -> str:
        return f"Element({self.tag!r}, {dict(self.attrs)!r}, {self.content!r})"

    def evolve(self, **changes: Any) -> Element:
        """Return a copy with ``tag``, ``attrs`` or ``content`` replaced."""
        return replace(self, **changes)

    def with_attr(self, name: str, value: str) -> Element:
        attrs = dict(self.attrs)
        attrs[name] = value
        return Element(self.tag, attrs, self.content)

    def without_attr(self, name: str) -> Element:
        if name not in self.attrs:
            return self
        attrs = {k: v for k, v in self.attrs.items() if k != name}
        return Element(self.tag, attrs, self.content)

    def with_content(self, content: Any) -> Element:
        return Element(self.tag, self.attrs, content)

    @property
    def class_list(self) -> list[str]:
        return self.attrs.get("class", "").split()


@dataclass(frozen=True, slots=True)
class Document:
    """Root container of a parsed document (doctype, comments, ``<html>``)."""

    content: tuple[Node, ...] = ()

    def __init__(self, content: Any = None) -> None:
        object.__setattr__(self, "content", _normalize_content(content))

    def with_content(self, content: Any) -> Document:
        return Document(content)


@dataclass(frozen=True, slots=True)
class Comment:
    data: str = ""


@dataclass(frozen=True, slots=True)
class Doctype:
    name: str = "html"
    public_id: str | None = None
    system_id: str | None = None


Node: TypeAlias = Union[Element, Document, Comment, Doctype, str]
Branch: TypeAlias = Union[Element, Document]


def is_branch(value: object) -> bool:
    return isinstance(value, (Element, Document))


def node(tag: str, *, content: Any = None, attrs: Mapping[str, str] | None = None) -> Element:
    """Build an element.

    ``content`` may be omitted, a single node (text included) or an iterable of
    nodes; it is always stored as a tuple.
    """
    return Element(tag, attrs, content)


def nodes(source: Any) -> list[Node]:
    """Normalize ``source`` into a list of nodes.

    A string is parsed as an HTML fragment. A list or tuple is assumed to
    already hold nodes. Anything else (a single node) is wrapped in a list.
    """
    if isinstance(source, str):
        from .parser import parse_fragment_nodes

        return parse_fragment_nodes(source)
    if isinstance(source, (list, tuple)):
        return list(source)
    return [source]


def text(value: Any) -> str:
    """Return the text of a node and all of its descendants."""
    if isinstance(value, str):
        return value
    if isinstance(value, (Element, Document)):
        return "".join(text(child) for child in value.content)
    return ""


