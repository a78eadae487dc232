"""Persistent tree cursor (a zipper) over laserhtml nodes.

A ``Cursor`` is bound to one node of an immutable tree and remembers the path
back to the root. Navigation and edits never mutate anything: they return a
new cursor, and parents are rebuilt lazily (copy on write) when the cursor
moves back up past an edited position.

Traversal order is post-order: ``leftmost_descendant()`` is the first
position, ``next()`` moves to the right sibling's leftmost descendant or to
the parent, and the root is the last position before ``at_end``. The
transform engine walks in this order; read-only selection uses
``iter_preorder()``, which yields positions in document order.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Any

from .node import Branch, Element, Node, is_branch


@dataclass(frozen=True, slots=True)
class _Path:
    siblings: tuple[Node, ...]
    index: int
    parent: Branch
    parent_path: _Path | None
    changed: bool = False


def _changed(path: _Path | None) -> _Path | None:
    if path is None or path.changed:
        return path
    return _Path(path.siblings, path.index, path.parent, path.parent_path, True)


class Cursor:
    """An immutable position inside a tree.

    - node: the node at this position
    - path: how to get back to the root (None at the root)
    - spliced: set by ``splice()``; the cursor stands on the last node of a
      sequence that replaced a single position
    """

    __slots__ = ("_end", "node", "path", "spliced")

    node: Node
    path: _Path | None
    spliced: bool

    def __init__(self, node: Node, path: _Path | None = None, *, spliced: bool = False, end: bool = False) -> None:
        self.node = node
        self.path = path
        self.spliced = spliced
        self._end = end

    def __repr__(self) -> str:
        where = "end" if self._end else f"depth={self.depth}"
        return f"Cursor({self.node!r}, {where})"

    # -----------------
    # Introspection
    # -----------------

    @property
    def at_end(self) -> bool:
        return self._end

    @property
    def is_branch(self) -> bool:
        return is_branch(self.node)

    @property
    def is_element(self) -> bool:
        return isinstance(self.node, Element)

    @property
    def children(self) -> tuple[Node, ...]:
        if is_branch(self.node):
            return self.node.content  # type: ignore[union-attr]
        return ()

    @property
    def depth(self) -> int:
        depth = 0
        path = self.path
        while path is not None:
            depth += 1
            path = path.parent_path
        return depth

    @property
    def lefts(self) -> tuple[Node, ...]:
        if self.path is None:
            return ()
        return self.path.siblings[: self.path.index]

    @property
    def rights(self) -> tuple[Node, ...]:
        if self.path is None:
            return ()
        return self.path.siblings[self.path.index + 1 :]

    def _siblings(self) -> tuple[Node, ...]:
        # The slot at path.index may still hold the pre-edit node.
        path = self.path
        assert path is not None
        if path.siblings[path.index] is self.node:
            return path.siblings
        return (*path.siblings[: path.index], self.node, *path.siblings[path.index + 1 :])

    # -----------------
    # Navigation
    # -----------------

    def down(self) -> Cursor | None:
        children = self.children
        if not children:
            return None
        return Cursor(children[0], _Path(children, 0, self.node, self.path))  # type: ignore[arg-type]

    def up(self) -> Cursor | None:
        path = self.path
        if path is None:
            return None
        if not path.changed:
            return Cursor(path.parent, path.parent_path)
        parent = path.parent.with_content(self._siblings())
        return Cursor(parent, _changed(path.parent_path))

    def _sibling(self, index: int) -> Cursor | None:
        path = self.path
        if path is None or index < 0 or index >= len(path.siblings):
            return None
        siblings = self._siblings()
        return Cursor(siblings[index], _Path(siblings, index, path.parent, path.parent_path, path.changed))

    def left(self) -> Cursor | None:
        if self.path is None:
            return None
        return self._sibling(self.path.index - 1)

    def right(self) -> Cursor | None:
        if self.path is None:
            return None
        return self._sibling(self.path.index + 1)

    def leftmost_descendant(self) -> Cursor:
        loc = self
        child = loc.down()
        while child is not None:
            loc = child
            child = loc.down()
        return loc

    def next(self) -> Cursor:
        """Move to the next position in post-order, or to the end."""
        if self._end:
            return self
        if self.path is None:
            return Cursor(self.node, None, end=True)
        right = self.right()
        if right is not None:
            return right.leftmost_descendant()
        up = self.up()
        assert up is not None
        return up

    def root(self) -> Node:
        """Zip all the way up and return the root node with every edit applied."""
        loc = self
        up = loc.up()
        while up is not None:
            loc = up
            up = loc.up()
        return loc.node

    def iter_preorder(self) -> Iterator[Cursor]:
        """Yield every position of the tree rooted here in document order, parents before children."""
        loc = Cursor(self.node, None)
        while True:
            yield loc
            step = loc.down()
            climb: Cursor | None = loc
            while step is None and climb is not None:
                step = climb.right()
                climb = climb.up()
            if step is None:
                return
            loc = step

    # -----------------
    # Edits
    # -----------------

    def replace(self, node: Node) -> Cursor:
        path = self.path
        if path is None:
            return Cursor(node)
        return Cursor(node, _changed(path))

    def insert_left(self, item: Node) -> Cursor:
        path = self._require_path("insert left of")
        siblings = self._siblings()
        index = path.index
        siblings = (*siblings[:index], item, *siblings[index:])
        return Cursor(self.node, _Path(siblings, index + 1, path.parent, path.parent_path, True))

    def insert_right(self, item: Node) -> Cursor:
        path = self._require_path("insert right of")
        siblings = self._siblings()
        index = path.index
        siblings = (*siblings[: index + 1], item, *siblings[index + 1 :])
        return Cursor(self.node, _Path(siblings, index, path.parent, path.parent_path, True))

    def remove(self) -> Cursor:
        """Delete this position.

        Returns a cursor on the left sibling, or on the parent when the removed
        node was the first child.
        """
        path = self._require_path("remove")
        siblings = self._siblings()
        index = path.index
        remaining = siblings[:index] + siblings[index + 1 :]
        if index > 0:
            return Cursor(remaining[index - 1], _Path(remaining, index - 1, path.parent, path.parent_path, True))
        parent = path.parent.with_content(remaining)
        return Cursor(parent, _changed(path.parent_path))

    def splice(self, items: Sequence[Node]) -> Cursor:
        """Replace this position with ``items`` as consecutive siblings.

        The returned cursor stands on the last inserted item and has
        ``spliced`` set.
        """
        path = self._require_path("splice at")
        if not items:
            raise ValueError("splice() needs at least one node")
        siblings = self._siblings()
        index = path.index
        siblings = (*siblings[:index], *items, *siblings[index + 1 :])
        last = index + len(items) - 1
        return Cursor(items[-1], _Path(siblings, last, path.parent, path.parent_path, True), spliced=True)

    def _require_path(self, action: str) -> _Path:
        if self.path is None:
            msg = f"Cannot {action} the root of a tree"
            raise IndexError(msg)
        return self.path


def cursor_of(value: Any) -> Any:
    """Get a cursor (or a list of cursors, for a sequence) suitable for walking.

    Cursors are returned unchanged.
    """
    if isinstance(value, Cursor):
        return value
    if isinstance(value, (list, tuple)):
        return [cursor_of(item) for item in value]
    return Cursor(value)
