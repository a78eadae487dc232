# Selector functions for laserhtml.
# Selectors are plain callables taking a Cursor and returning a bool; they are
# composed with functions, not parsed from CSS strings.

from __future__ import annotations

import re
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, Any, TypeAlias

from .cursor import Cursor, cursor_of
from .node import Element

if TYPE_CHECKING:
    from .node import Node

Selector: TypeAlias = Callable[[Cursor], bool]


class SelectorError(ValueError):
    """Raised when a selector is built from an invalid chain."""


def _element(loc: Cursor) -> Element | None:
    node = loc.node
    return node if isinstance(node, Element) else None


def _split_classes(node: Element) -> set[str]:
    return set(node.attrs.get("class", "").split())


# -----------------
# Primitives
# -----------------


def element(tag: str) -> Selector:
    """Match an element with this tag name."""

    def _matches(loc: Cursor) -> bool:
        node = _element(loc)
        return node is not None and node.tag == tag

    return _matches


def attr_equals(name: str, value: str) -> Selector:
    """Match an element whose attribute exists and has exactly this value."""

    def _matches(loc: Cursor) -> bool:
        node = _element(loc)
        return node is not None and node.attrs.get(name) == value

    return _matches


def attr_matches(name: str, pattern: str | re.Pattern[str]) -> Selector:
    """Match an element whose attribute value contains a match for ``pattern``.

    A missing attribute is searched as the empty string.
    """
    regex = re.compile(pattern)

    def _matches(loc: Cursor) -> bool:
        node = _element(loc)
        return node is not None and regex.search(node.attrs.get(name, "")) is not None

    return _matches


def has_attr(name: str) -> Selector:
    """Match any element that has the attribute, regardless of value."""

    def _matches(loc: Cursor) -> bool:
        node = _element(loc)
        return node is not None and name in node.attrs

    return _matches


def has_class(*classes: str) -> Selector:
    """Match an element that has every one of these classes."""
    wanted = frozenset(classes)

    def _matches(loc: Cursor) -> bool:
        node = _element(loc)
        return node is not None and wanted <= _split_classes(node)

    return _matches


def class_matches(pattern: str | re.Pattern[str]) -> Selector:
    """Match an element if any one of its classes contains a match for ``pattern``."""
    regex = re.compile(pattern)

    def _matches(loc: Cursor) -> bool:
        node = _element(loc)
        return node is not None and any(regex.search(cls) for cls in _split_classes(node))

    return _matches


def id_equals(value: str) -> Selector:
    """Match the element's id."""
    return attr_equals("id", value)


def any_element() -> Selector:
    """Match every element."""
    return lambda loc: isinstance(loc.node, Element)


# -----------------
# Combinators
# -----------------


def negate(selector: Selector) -> Selector:
    def _matches(loc: Cursor) -> bool:
        return not selector(loc)

    return _matches


def all_of(*selectors: Selector) -> Selector:
    """True iff every selector matches."""

    def _matches(loc: Cursor) -> bool:
        return all(selector(loc) for selector in selectors)

    return _matches


def any_of(*selectors: Selector) -> Selector:
    """True iff at least one selector matches. Like ``foo, bar`` in CSS."""

    def _matches(loc: Cursor) -> bool:
        return any(selector(loc) for selector in selectors)

    return _matches


def select_walk(
    should_continue: Callable[[bool, Cursor], bool],
    move: Callable[[Cursor], Cursor | None],
    selectors: tuple[Selector, ...] | list[Selector],
) -> Selector:
    """Build a selector that walks backwards through a chain of selectors.

    The last selector must match the current position. Then the cursor is moved
    with ``move`` and the selector before it is tried, and so on leftwards.
    After every test ``should_continue(result, loc)`` decides whether to keep
    walking: on a match the walk moves on to the previous selector, on a
    non-match it retries the same selector one step further. The chain matches
    once every selector has matched; running out of moves first is a
    non-match.
    """
    if not selectors:
        raise SelectorError("A selector chain needs at least one selector")
    chain = tuple(reversed(selectors))
    first, rest = chain[0], chain[1:]

    def _matches(loc: Cursor) -> bool:
        if not first(loc):
            return False
        i = 0
        cur = move(loc)
        while i < len(rest):
            if cur is None:
                return False
            result = bool(rest[i](cur))
            if not should_continue(result, cur):
                return False
            if result:
                i += 1
            cur = move(cur)
        return True

    return _matches


def _always(result: bool, loc: Cursor) -> bool:
    return True


def _on_match(result: bool, loc: Cursor) -> bool:
    return result


def descendant_of(*selectors: Selector) -> Selector:
    """Match ``foo bar baz`` in CSS terms.

    The last selector must match the current position; each earlier selector
    must match some ancestor of the position matched by the selector after it.
    """
    return select_walk(_always, Cursor.up, selectors)


def child_of(*selectors: Selector) -> Selector:
    """Match ``foo > bar > baz``: each selector must match the parent of the next."""
    return select_walk(_on_match, Cursor.up, selectors)


def adjacent_to(*selectors: Selector) -> Selector:
    """Match ``foo + bar + baz``: each selector must match the sibling right before the next.

    The sibling is the immediately preceding node, so text or a comment in
    between breaks the chain.
    """
    return select_walk(_on_match, Cursor.left, selectors)


# -----------------
# Read-only selection
# -----------------


def _roots(source: Any) -> list[Cursor]:
    locs = cursor_of(source)
    if isinstance(locs, Cursor):
        return [locs]
    return locs


def select_locs(source: Any, *selectors: Selector) -> Iterator[Cursor]:
    """Yield cursors for every element matched by at least one selector.

    ``source`` is a node, a cursor, or a sequence of them (a fragment). Each
    root is walked on its own, in document order (parents before children).
    """
    matcher = any_of(*selectors)
    for root in _roots(source):
        for loc in root.iter_preorder():
            if loc.is_element and matcher(loc):
                yield loc


def select(source: Any, *selectors: Selector) -> list[Node]:
    """Return the elements matched by at least one selector."""
    return [loc.node for loc in select_locs(source, *selectors)]
