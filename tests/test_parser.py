"""Tests for parsing markup into nodes, error collection and strict mode."""

import io
import unittest

from laserhtml import Comment, Doctype, Document, Element, ParseError, StrictModeError, parse, parse_fragment, text
from laserhtml.cursor import Cursor
from laserhtml.parser import parse_fragment_nodes


class TestParse(unittest.TestCase):
    def test_document_structure_is_synthesized(self):
        doc = parse("<p>x</p>")
        assert isinstance(doc, Document)
        (html,) = doc.content
        assert isinstance(html, Element)
        assert html.tag == "html"
        assert [child.tag for child in html.content] == ["head", "body"]
        assert html.content[1] == Element("body", None, [Element("p", None, "x")])

    def test_doctype_and_comments(self):
        doc = parse("<!DOCTYPE html><!-- top --><p>x</p>")
        assert doc.content[0] == Doctype("html")
        assert doc.content[1] == Comment(" top ")

    def test_legacy_doctype_ids(self):
        doc = parse('<!DOCTYPE html PUBLIC "-//W3C//DTD HTML 4.01//EN" "http://www.w3.org/TR/html4/strict.dtd"><p>x')
        assert doc.content[0] == Doctype("html", "-//W3C//DTD HTML 4.01//EN", "http://www.w3.org/TR/html4/strict.dtd")

    def test_attributes_keep_source_order(self):
        doc = parse('<a title="t" href="/" class="c">x</a>')
        (link,) = doc.content[0].content[1].content
        assert list(link.attrs) == ["title", "href", "class"]

    def test_entities_are_decoded(self):
        doc = parse("<p>a &amp; b &lt; c</p>")
        assert text(doc) == "a & b < c"

    def test_bytes_and_file_like_input(self):
        assert text(parse(b"<p>x</p>")) == "x"
        assert text(parse(io.StringIO("<p>y</p>"))) == "y"


class TestParseFragment(unittest.TestCase):
    def test_roots_are_returned_in_order(self):
        assert parse_fragment_nodes("<p>a</p>b") == [Element("p", None, "a"), "b"]

    def test_adjacent_text_is_merged(self):
        assert parse_fragment_nodes("a&amp;b") == ["a&b"]

    def test_empty_markup(self):
        assert parse_fragment_nodes("") == []

    def test_context_container(self):
        assert parse_fragment_nodes("<td>x</td>", container="tr") == [Element("td", None, "x")]
        # Outside a table row the cell tags are dropped.
        assert parse_fragment_nodes("<td>x</td>") == ["x"]

    def test_parse_fragment_returns_root_cursors(self):
        locs = parse_fragment("<p>a</p><p>b</p>")
        assert all(isinstance(loc, Cursor) for loc in locs)
        assert [text(loc.node) for loc in locs] == ["a", "b"]
        assert all(loc.path is None for loc in locs)


class TestErrorCollection(unittest.TestCase):
    """Errors are appended to a caller-supplied list."""

    def test_no_errors_list_by_default(self):
        # Malformed markup still parses without complaint.
        doc = parse("<p><b>x</p>")
        assert text(doc) == "x"

    def test_errors_are_collected(self):
        errors = []
        parse("<p>x</p>", errors=errors)
        assert len(errors) > 0
        assert all(isinstance(e, ParseError) for e in errors)
        assert errors[0].code == "expected-doctype-but-got-start-tag"

    def test_error_has_line_and_column(self):
        errors = []
        parse("<p>x</p>", errors=errors)
        error = errors[0]
        assert isinstance(error.line, int)
        assert isinstance(error.column, int)
        assert error.line == 1

    def test_error_message_is_readable(self):
        errors = []
        parse("<p>x</p>", errors=errors)
        assert errors[0].message != errors[0].code
        assert errors[0].code in str(errors[0])

    def test_valid_html_no_errors(self):
        errors = []
        parse("<!DOCTYPE html><html><head><title>x</title></head><body></body></html>", errors=errors)
        assert errors == []

    def test_fragment_errors(self):
        errors = []
        parse_fragment_nodes("<p>x</div>", errors=errors)
        assert len(errors) > 0


class TestStrictMode(unittest.TestCase):
    """Strict parsing raises on the first error."""

    def test_strict_mode_raises(self):
        with self.assertRaises(StrictModeError) as ctx:
            parse("<p>x</p>", strict=True)
        assert isinstance(ctx.exception.error, ParseError)
        assert ctx.exception.error.code == "expected-doctype-but-got-start-tag"

    def test_strict_mode_is_a_syntax_error(self):
        with self.assertRaises(SyntaxError):
            parse_fragment_nodes("<p>x</div>", strict=True)

    def test_strict_mode_valid_html(self):
        doc = parse("<!DOCTYPE html><html><head></head><body><p>x</p></body></html>", strict=True)
        assert text(doc) == "x"


class TestParseErrorClass(unittest.TestCase):
    def test_str_and_repr(self):
        err = ParseError("unexpected-null-character", line=1, column=5, message="Unexpected null")
        assert str(err) == "(1,5): unexpected-null-character - Unexpected null"
        assert repr(err) == "ParseError('unexpected-null-character', line=1, column=5)"
        assert str(ParseError("eof")) == "eof"
        assert repr(ParseError("eof")) == "ParseError('eof')"

    def test_equality_ignores_message(self):
        assert ParseError("x", 1, 2, "a") == ParseError("x", 1, 2, "b")
        assert ParseError("x", 1, 2) != ParseError("x", 1, 3)
        assert ParseError("x") != "x"
