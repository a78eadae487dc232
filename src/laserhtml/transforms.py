"""Selector/transformer pairs and the single-pass engine that applies them.

A transform is declared as an ordered list of ``(selector, transformer)``
pairs. ``document()`` and ``fragment()`` walk the tree once, children before
parents, and at every element run each pair in order against the current
state of that position:

- a transformer returning a single node replaces the element in place;
- a transformer returning a list or tuple of nodes splices them in as
  siblings; the walk resumes after the last of them without visiting them,
  and only the pairs after the splicing one still run on each spliced
  element;
- a transformer returning ``None`` (or an empty sequence) leaves an empty
  text node behind. The slot is never deleted, so sibling counts stay the same.

Exceptions raised by selectors or transformers propagate to the caller and
abort the walk; positions visited before the failure are not rolled back.
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, TypeAlias

from .cursor import Cursor
from .node import Document, Element, nodes
from .parser import parse, parse_fragment_nodes
from .serialize import fragment_to_html

if TYPE_CHECKING:
    from .node import Node
    from .selector import Selector

Transformer: TypeAlias = Callable[[Any], Any]
Pair: TypeAlias = "tuple[Selector, Transformer]"


def _debug(enabled: bool, message: str, indent: int = 4) -> None:
    # Only format and print when tracing is on.
    if enabled:
        print(f"{' ' * indent}{message}")


# -----------------
# Transformers
# -----------------


def content(value: str) -> Transformer:
    """Set the element's content to the text ``value`` (escaped when serialized)."""

    def _transform(node: Element) -> Element:
        return node.with_content((value,))

    return _transform


def html_content(source: Any) -> Transformer:
    """Set the element's content to unescaped HTML.

    ``source`` is a string of markup (parsed once, as a fragment) or already
    built nodes.
    """
    new_content = tuple(nodes(source))

    def _transform(node: Element) -> Element:
        return node.with_content(new_content)

    return _transform


def attr(name: str, value: str | None) -> Transformer:
    """Set attribute ``name`` to ``value``; ``None`` removes the attribute."""

    def _transform(node: Element) -> Element:
        if value is None:
            return node.without_attr(name)
        return node.with_attr(name, value)

    return _transform


def update_attr(name: str, func: Callable[..., Any], *args: Any) -> Transformer:
    """Set attribute ``name`` to ``func(current, *args)``.

    ``current`` is ``None`` when the attribute is missing. Returning ``None``
    removes the attribute.
    """

    def _transform(node: Element) -> Element:
        value = func(node.attrs.get(name), *args)
        if value is None:
            return node.without_attr(name)
        return node.with_attr(name, str(value))

    return _transform


def merge_attrs(attributes: Mapping[str, str | None] | None = None, **attrs: str | None) -> Transformer:
    """Set several attributes at once, keeping the others.

    Keyword names ending in ``_`` lose it (``class_="x"`` sets ``class``).
    ``None`` values remove the attribute.
    """
    merged: dict[str, str | None] = dict(attributes) if attributes else {}
    for key, value in attrs.items():
        merged[key[:-1] if key.endswith("_") else key] = value

    def _transform(node: Element) -> Element:
        out = dict(node.attrs)
        for key, value in merged.items():
            if value is None:
                out.pop(key, None)
            else:
                out[key] = value
        return Element(node.tag, out, node.content)

    return _transform


def classes(value: str) -> Transformer:
    """Set the element's class attribute to ``value``."""
    return attr("class", value)


def set_id(value: str) -> Transformer:
    """Set the element's id."""
    return attr("id", value)


def add_class(name: str) -> Transformer:
    """Add one class, leaving existing classes as they are."""

    def _transform(node: Element) -> Element:
        existing = node.attrs.get("class", "")
        if name in existing.split():
            return node
        return node.with_attr("class", f"{existing.rstrip()} {name}" if existing.strip() else name)

    return _transform


def remove_class(name: str) -> Transformer:
    """Remove one class, leaving the other classes alone.

    The attribute is dropped once no class is left.
    """

    def _transform(node: Element) -> Element:
        existing = node.attrs.get("class")
        if existing is None:
            return node
        tokens = existing.split()
        if name not in tokens:
            return node
        remaining = [token for token in tokens if token != name]
        if not remaining:
            return node.without_attr("class")
        return node.with_attr("class", " ".join(remaining))

    return _transform


def wrap(tag: str, attrs: Mapping[str, str] | None = None) -> Transformer:
    """Wrap the element in a new ``tag`` element."""

    def _transform(node: Node) -> Element:
        return Element(tag, attrs, (node,))

    return _transform


def unwrap() -> Transformer:
    """Replace the element with its children."""

    def _transform(node: Element) -> list[Node]:
        return list(node.content)

    return _transform


def empty() -> Transformer:
    """Remove all children but keep the element."""

    def _transform(node: Element) -> Element:
        return node.with_content(())

    return _transform


def remove() -> Transformer:
    """Delete the element (it is replaced by an empty text node)."""
    return lambda node: None


def replace(new: Any) -> Transformer:
    """Replace the element with ``new`` (a node, or a list of nodes to splice)."""
    return lambda node: new


# -----------------
# Engine
# -----------------


def normalize_pairs(args: Any) -> list[Pair]:
    """Turn the pair arguments accepted by the entry points into a list of pairs.

    Accepts ``(selector, transformer)`` tuples, a flat
    ``selector, transformer, selector, transformer, ...`` sequence, or a single
    list holding either form.
    """
    items = list(args)
    if len(items) == 1 and isinstance(items[0], list):
        items = list(items[0])
    if all(isinstance(item, tuple) for item in items):
        pairs = [tuple(item) for item in items]
        for pair in pairs:
            if len(pair) != 2:
                msg = f"Expected a (selector, transformer) pair, got {len(pair)} items"
                raise ValueError(msg)
    else:
        if len(items) % 2:
            msg = "Selectors and transformers must come in pairs"
            raise ValueError(msg)
        pairs = list(zip(items[::2], items[1::2]))
    for selector, transformer in pairs:
        if not callable(selector) or not callable(transformer):
            msg = f"Unsupported pair: ({type(selector).__name__}, {type(transformer).__name__})"
            raise TypeError(msg)
    return pairs  # type: ignore[return-value]


def _edit(node: Node, transformer: Transformer) -> Any:
    result = transformer(node)
    if isinstance(result, (list, tuple)):
        items = ["" if item is None else item for item in result]
        if not items:
            return ""
        if len(items) == 1:
            return items[0]
        return items
    return "" if result is None else result


def _describe(node: Any) -> str:
    if isinstance(node, Element):
        return f"<{node.tag}>"
    return repr(node)


def apply_pairs(loc: Cursor, pairs: list[Pair], *, start: int = 0, debug: bool = False) -> Cursor | list[Node]:
    """Run ``pairs[start:]`` in order on one position.

    Returns the cursor for the (possibly replaced) position. When a root
    position is spliced, there is no parent to hold the new siblings, so the
    resulting roots are returned as a list instead.
    """
    for index in range(start, len(pairs)):
        if not loc.is_element:
            break
        selector, transformer = pairs[index]
        if not selector(loc):
            continue
        before = loc.node
        result = _edit(before, transformer)
        if not isinstance(result, list):
            _debug(debug, f"pair {index}: {_describe(before)} -> {_describe(result)}")
            loc = loc.replace(result)
            continue

        _debug(debug, f"pair {index}: {_describe(before)} spliced into {len(result)} nodes")
        rest = index + 1
        if loc.path is None:
            roots: list[Node] = []
            for item in result:
                applied = apply_pairs(Cursor(item), pairs, start=rest, debug=debug)
                roots.extend(applied if isinstance(applied, list) else [applied.node])
            return roots
        loc = loc.splice(result)
        if rest < len(pairs):
            loc = _apply_to_spliced(loc, len(result), pairs, rest, debug)
        return loc
    return loc


def _apply_to_spliced(loc: Cursor, count: int, pairs: list[Pair], start: int, debug: bool) -> Cursor:
    # loc stands on the last of `count` freshly spliced siblings.
    for _ in range(count - 1):
        loc = loc.left()  # type: ignore[assignment]
    for i in range(count):
        loc = apply_pairs(loc, pairs, start=start, debug=debug)  # type: ignore[assignment]
        if i < count - 1:
            loc = loc.right()  # type: ignore[assignment]
    return Cursor(loc.node, loc.path, spliced=True)


def traverse(loc: Cursor, pairs: list[Pair], *, debug: bool = False) -> list[Node]:
    """Walk from ``loc`` to the end of its tree, applying ``pairs`` everywhere.

    ``loc`` is normally the leftmost descendant of the root. Returns the
    resulting roots: one, unless the root itself was spliced.
    """
    while True:
        _debug(debug, f"visit {_describe(loc.node)} at depth {loc.depth}", indent=2)
        result = apply_pairs(loc, pairs, debug=debug)
        if isinstance(result, list):
            return result
        loc = result.next()
        if loc.at_end:
            return [loc.node]


# -----------------
# Entry points
# -----------------


def _is_markup(source: Any) -> bool:
    return isinstance(source, (str, bytes)) or hasattr(source, "read")


def _root_cursor(source: Any) -> Cursor:
    if isinstance(source, Cursor):
        return Cursor(source.root())
    return Cursor(source)


def document(source: Any, *pairs: Any, debug: bool = False, pretty: bool = False) -> str:
    """Transform a full HTML document and return it serialized.

    ``source`` is a parsed ``Document`` (or any node or cursor), or markup that
    is parsed with ``parse()`` first.
    """
    if _is_markup(source):
        source = parse(source, debug=debug)
    compiled = normalize_pairs(pairs)
    root = _root_cursor(source)
    _debug(debug, f"document: {len(compiled)} pair(s)", indent=0)
    return fragment_to_html(traverse(root.leftmost_descendant(), compiled, debug=debug), pretty=pretty)


def fragment(source: Any, *pairs: Any, debug: bool = False) -> list[Node]:
    """Transform an HTML fragment.

    ``source`` is a sequence of nodes or cursors (or markup, parsed with
    ``parse_fragment_nodes()``). Each root is walked independently and the
    results are concatenated into one list of nodes, which is not serialized:
    pass it to ``to_html()`` or feed it to another ``fragment()`` call.
    """
    if _is_markup(source):
        source = parse_fragment_nodes(source, debug=debug)
    elif isinstance(source, (Cursor, Element, Document)):
        source = [source]
    else:
        source = list(source)
    compiled = normalize_pairs(pairs)
    _debug(debug, f"fragment: {len(source)} root(s), {len(compiled)} pair(s)", indent=0)
    out: list[Node] = []
    for item in source:
        out.extend(traverse(_root_cursor(item).leftmost_descendant(), compiled, debug=debug))
    return out


def at(node: Node, *pairs: Any, debug: bool = False) -> Node:
    """Walk a single node like a one-root fragment and return the new node.

    Useful for sub-walks inside transformers. If the node itself gets spliced,
    only the first resulting node is returned.
    """
    return fragment([node], *pairs, debug=debug)[0]


def defragment(source: Any, **parse_options: Any) -> Callable[[Callable[..., Any]], Callable[..., list[Node]]]:
    """Decorate a function returning pairs into a fragment template.

    ``source`` is parsed once, when the decorator runs. Each call of the
    decorated function builds its pairs from the call arguments and returns
    the transformed fragment::

        @defragment("<li><a></a></li>")
        def link(href, label):
            return [(element("a"), merge_attrs(href=href)), (element("a"), content(label))]
    """
    roots = parse_fragment_nodes(source, **parse_options) if _is_markup(source) else nodes(source)

    def decorator(func: Callable[..., Any]) -> Callable[..., list[Node]]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> list[Node]:
            return fragment(roots, *func(*args, **kwargs))

        return wrapper

    return decorator


def defdocument(source: Any, **parse_options: Any) -> Callable[[Callable[..., Any]], Callable[..., str]]:
    """Like ``defragment``, for full documents; the decorated function returns HTML."""
    root = parse(source, **parse_options) if _is_markup(source) else source

    def decorator(func: Callable[..., Any]) -> Callable[..., str]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> str:
            return document(root, *func(*args, **kwargs))

        return wrapper

    return decorator
