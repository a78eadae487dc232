from .cursor import Cursor, cursor_of
from .node import Comment, Doctype, Document, Element, node, nodes, text
from .parser import ParseError, StrictModeError, parse, parse_fragment, parse_fragment_nodes
from .selector import (
    SelectorError,
    adjacent_to,
    all_of,
    any_element,
    any_of,
    attr_equals,
    attr_matches,
    child_of,
    class_matches,
    descendant_of,
    element,
    has_attr,
    has_class,
    id_equals,
    negate,
    select,
    select_locs,
    select_walk,
)
from .serialize import fragment_to_html, to_html, to_test_format
from .transforms import (
    add_class,
    at,
    attr,
    classes,
    content,
    defdocument,
    defragment,
    document,
    empty,
    fragment,
    html_content,
    merge_attrs,
    remove,
    remove_class,
    replace,
    set_id,
    unwrap,
    update_attr,
    wrap,
)

__all__ = [
    "Comment",
    "Cursor",
    "Doctype",
    "Document",
    "Element",
    "ParseError",
    "SelectorError",
    "StrictModeError",
    "add_class",
    "adjacent_to",
    "all_of",
    "any_element",
    "any_of",
    "at",
    "attr",
    "attr_equals",
    "attr_matches",
    "child_of",
    "class_matches",
    "classes",
    "content",
    "cursor_of",
    "defdocument",
    "defragment",
    "descendant_of",
    "document",
    "element",
    "empty",
    "fragment",
    "fragment_to_html",
    "has_attr",
    "has_class",
    "html_content",
    "id_equals",
    "merge_attrs",
    "negate",
    "node",
    "nodes",
    "parse",
    "parse_fragment",
    "parse_fragment_nodes",
    "remove",
    "remove_class",
    "replace",
    "select",
    "select_locs",
    "select_walk",
    "set_id",
    "text",
    "to_html",
    "to_test_format",
    "unwrap",
    "update_attr",
    "wrap",
]
