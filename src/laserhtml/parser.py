"""Parse HTML into laserhtml nodes.

Tokenizing and tree construction are delegated to html5lib, which recovers
from malformed markup the way browsers do (and synthesizes ``<html>``,
``<head>`` and ``<body>`` for documents). The resulting DOM is converted into
the immutable node model.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from xml.dom import Node as DomNode

import html5lib
from html5lib.constants import E as ERROR_MESSAGES

from .cursor import Cursor
from .node import Comment, Doctype, Document, Element

if TYPE_CHECKING:
    from .node import Node


class ParseError:
    """Represents a parse error with location information."""

    __slots__ = ("code", "column", "line", "message")

    def __init__(self, code: str, line: int | None = None, column: int | None = None, message: str | None = None) -> None:
        self.code = code
        self.line = line
        self.column = column
        self.message = message or code

    def __repr__(self) -> str:
        if self.line is not None and self.column is not None:
            return f"ParseError({self.code!r}, line={self.line}, column={self.column})"
        return f"ParseError({self.code!r})"

    def __str__(self) -> str:
        if self.line is not None and self.column is not None:
            if self.message != self.code:
                return f"({self.line},{self.column}): {self.code} - {self.message}"
            return f"({self.line},{self.column}): {self.code}"
        if self.message != self.code:
            return f"{self.code} - {self.message}"
        return self.code

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParseError):
            return NotImplemented
        return self.code == other.code and self.line == other.line and self.column == other.column

    __hash__ = None  # type: ignore[assignment]


class StrictModeError(SyntaxError):
    """Raised by strict parsing on the first parse error."""

    def __init__(self, error: ParseError) -> None:
        self.error = error
        super().__init__(str(error))


def _read(markup: Any) -> Any:
    if markup is None:
        return ""
    if isinstance(markup, (str, bytes)):
        return markup
    return markup.read()


def _make_parser() -> html5lib.HTMLParser:
    return html5lib.HTMLParser(
        tree=html5lib.getTreeBuilder("dom"),
        namespaceHTMLElements=False,
    )


def _convert_errors(raw: list[Any]) -> list[ParseError]:
    errors: list[ParseError] = []
    for position, code, datavars in raw:
        line, column = position if position else (None, None)
        template = ERROR_MESSAGES.get(code)
        message = template % datavars if template and datavars else template
        errors.append(ParseError(str(code), line=line, column=column, message=message))
    return errors


def _report(parser: html5lib.HTMLParser, errors: list[ParseError] | None, strict: bool, debug: bool) -> None:
    found = _convert_errors(parser.errors)
    if debug:
        for error in found:
            print(f"  parse error {error}")
    if strict and found:
        raise StrictModeError(found[0])
    if errors is not None:
        errors.extend(found)


def _convert_children(dom_node: Any) -> tuple[Node, ...]:
    out: list[Node] = []
    for child in dom_node.childNodes:
        converted = _convert(child)
        if converted is None:
            continue
        # html5lib's DOM builder does not merge adjacent character tokens.
        if isinstance(converted, str) and out and isinstance(out[-1], str):
            out[-1] = out[-1] + converted
            continue
        out.append(converted)
    return tuple(out)


def _convert(dom_node: Any) -> Node | None:
    kind = dom_node.nodeType
    if kind == DomNode.TEXT_NODE:
        return str(dom_node.data)
    if kind == DomNode.ELEMENT_NODE:
        attrs = {name: value for name, value in dom_node.attributes.items()}
        return Element(dom_node.nodeName, attrs, _convert_children(dom_node))
    if kind == DomNode.COMMENT_NODE:
        return Comment(str(dom_node.data))
    if kind == DomNode.DOCUMENT_TYPE_NODE:
        return Doctype(dom_node.name or "", dom_node.publicId or None, dom_node.systemId or None)
    return None


def parse(
    markup: Any,
    *,
    errors: list[ParseError] | None = None,
    strict: bool = False,
    debug: bool = False,
) -> Document:
    """Parse a full HTML document.

    ``markup`` may be a string, bytes, or anything with a ``read()`` method.
    Missing ``<html>``, ``<head>`` and ``<body>`` elements are added. Parse
    errors are appended to ``errors`` when a list is given; ``strict=True``
    raises ``StrictModeError`` on the first one instead.
    """
    parser = _make_parser()
    dom = parser.parse(_read(markup))
    _report(parser, errors, strict, debug)
    return Document(_convert_children(dom))


def parse_fragment_nodes(
    markup: Any,
    *,
    container: str = "div",
    errors: list[ParseError] | None = None,
    strict: bool = False,
    debug: bool = False,
) -> list[Node]:
    """Parse an HTML fragment into a list of root nodes.

    ``container`` is the element the fragment is parsed as the content of;
    it decides how context-sensitive markup (such as ``<td>``) is handled.
    """
    parser = _make_parser()
    dom = parser.parseFragment(_read(markup), container=container)
    _report(parser, errors, strict, debug)
    return list(_convert_children(dom))


def parse_fragment(markup: Any, **kwargs: Any) -> list[Cursor]:
    """Parse an HTML fragment and return a cursor over each root node."""
    return [Cursor(root) for root in parse_fragment_nodes(markup, **kwargs)]
