"""
Tests for the parsing layer.

Tests cover:
1. FilingDocument node identity and document order
2. MarkerLocator tag-priority search
3. NodeSanitizer cleaning rules
"""

import pytest

from section_extract.errors import DocumentProcessingError
from section_extract.parse.document import FilingDocument
from section_extract.parse.locator import MarkerLocator, locate_marker
from section_extract.parse.sanitizer import NodeSanitizer


def page(body: str, head: str = "") -> str:
    return f"<html><head>{head}</head><body>{body}</body></html>"


class TestFilingDocument:
    """Tests for node identity and ordering."""

    def test_identical_tags_are_distinct_nodes(self):
        """Structurally equal tags keep separate identities."""
        doc = FilingDocument(page("<p>same</p><p>same</p>"))
        first, second = doc.soup.find_all("p")

        assert first == second  # BeautifulSoup structural equality
        assert doc.same_node(first, first) is True
        assert doc.same_node(first, second) is False

    def test_node_index_is_document_order(self):
        """Pre-order indices follow document order."""
        doc = FilingDocument(page("<div><p>a</p></div><p>b</p>"))
        div = doc.soup.find("div")
        inner, outer = doc.soup.find_all("p")

        assert doc.precedes(div, inner)
        assert doc.precedes(inner, outer)
        assert not doc.precedes(outer, div)

    def test_same_node_with_none(self):
        """None never matches."""
        doc = FilingDocument(page("<p>a</p>"))
        assert doc.same_node(doc.soup.p, None) is False

    def test_foreign_node_rejected(self):
        """Nodes of another document have no index here."""
        doc = FilingDocument(page("<p>a</p>"))
        other = FilingDocument(page("<p>a</p>"))

        with pytest.raises(DocumentProcessingError):
            doc.node_index(other.soup.p)

    def test_common_ancestor(self):
        """Nearest shared ancestor of two nested nodes."""
        doc = FilingDocument(page(
            '<table id="t"><tr><td id="a">x</td></tr><tr><td id="b">y</td></tr></table>'
        ))
        a = doc.soup.find(id="a")
        b = doc.soup.find(id="b")

        ancestor = doc.common_ancestor(a, b)
        assert ancestor.name == "table"

    def test_common_ancestor_of_nested_pair_is_outer(self):
        """An ancestor-or-self relation yields the outer node."""
        doc = FilingDocument(page('<div id="outer"><p id="inner">x</p></div>'))
        outer = doc.soup.find(id="outer")
        inner = doc.soup.find(id="inner")

        assert doc.same_node(doc.common_ancestor(outer, inner), outer)

    def test_from_file_decode_error(self, tmp_path):
        """Undecodable bytes are a per-document error."""
        path = tmp_path / "1.html"
        path.write_bytes(b"<html><body>\xff\xfe\xfa</body></html>")

        with pytest.raises(DocumentProcessingError) as exc_info:
            FilingDocument.from_file(path)
        assert exc_info.value.path == path

    def test_from_file_missing(self, tmp_path):
        """A vanished file is a per-document error too."""
        with pytest.raises(DocumentProcessingError):
            FilingDocument.from_file(tmp_path / "missing.html")

    def test_unknown_parser(self):
        """An unavailable tree builder is reported as a document error."""
        with pytest.raises(DocumentProcessingError):
            FilingDocument(page("<p>a</p>"), parser="no-such-parser")


class TestMarkerLocator:
    """Tests for MarkerLocator."""

    def test_finds_heading(self):
        """Marker in a heading is found."""
        doc = FilingDocument(page("<p>intro</p><h3>【損益計算書】</h3>"))
        elem = MarkerLocator().locate(doc, "【損益計算書】")

        assert elem is not None
        assert elem.name == "h3"

    def test_not_found(self):
        """Missing marker returns None."""
        doc = FilingDocument(page("<h3>【貸借対照表】</h3>"))
        assert MarkerLocator().locate(doc, "【損益計算書】") is None

    def test_empty_marker(self):
        """An empty marker never matches."""
        doc = FilingDocument(page("<h3>anything</h3>"))
        assert MarkerLocator().locate(doc, "") is None

    def test_higher_priority_tag_wins_over_earlier_text(self):
        """A later <h3> beats an earlier <p> holding the same text."""
        doc = FilingDocument(page(
            '<p id="toc">【損益計算書】 ..... 45</p>'
            '<h3 id="heading">【損益計算書】</h3>'
        ))
        elem = MarkerLocator().locate(doc, "【損益計算書】")

        assert elem.get("id") == "heading"

    def test_first_in_document_order_within_tag(self):
        """Within one tag name the first match in document order wins."""
        doc = FilingDocument(page(
            '<p id="first">【損益計算書】</p><p id="second">【損益計算書】</p>'
        ))
        assert MarkerLocator().locate(doc, "【損益計算書】").get("id") == "first"

    def test_outer_div_precedes_inner_div(self):
        """Nested containers: the outer one comes first in document order."""
        doc = FilingDocument(page(
            '<div id="outer"><div id="inner"><p>【損益計算書】</p></div></div>'
        ))
        assert MarkerLocator().locate(doc, "【損益計算書】").get("id") == "outer"

    def test_marker_split_across_inline_children(self):
        """Flattened text is matched, so split markers are still found."""
        doc = FilingDocument(page("<p>【損益<span>計算書】</span></p>"))
        elem = MarkerLocator().locate(doc, "【損益計算書】")

        assert elem.name == "p"

    def test_custom_candidate_tags(self):
        """Only configured tags are searched."""
        doc = FilingDocument(page("<td>【損益計算書】</td>"))

        assert locate_marker(doc, "【損益計算書】") is None
        assert locate_marker(doc, "【損益計算書】", ["td"]).name == "td"

    def test_after_skips_earlier_matches(self):
        """Only matches following the given node are considered."""
        doc = FilingDocument(page(
            '<h2 id="toc">【資本変動計算書】</h2><h3 id="s">【損益計算書】</h3>'
            '<p id="real">【資本変動計算書】</p>'
        ))
        locator = MarkerLocator()
        start = doc.soup.find(id="s")

        assert locator.locate(doc, "【資本変動計算書】").get("id") == "toc"
        assert locator.locate(doc, "【資本変動計算書】", after=start).get("id") == "real"
        assert locator.locate(doc, "【損益計算書】", after=start) is None

    def test_narrow_to_innermost(self):
        """Narrowing descends to the innermost candidate holding the marker."""
        doc = FilingDocument(page(
            '<div id="page"><div id="inner"><p>x</p><p id="heading">【損益計算書】</p></div></div>'
        ))
        locator = MarkerLocator()
        outer = locator.locate(doc, "【損益計算書】")

        assert outer.get("id") == "page"
        assert locator.narrow(doc, outer, "【損益計算書】").get("id") == "heading"

    def test_narrow_keeps_split_marker_container(self):
        """A marker split across children cannot be narrowed further."""
        doc = FilingDocument(page('<p id="p">【損益<span>計算書】</span></p>'))
        elem = doc.soup.find(id="p")

        assert MarkerLocator().narrow(doc, elem, "【損益計算書】") is elem

    def test_comment_text_ignored(self):
        """Text inside comments is not part of the flattened text."""
        doc = FilingDocument(page("<p><!-- 【損益計算書】 -->body</p>"))
        assert MarkerLocator().locate(doc, "【損益計算書】") is None


class TestNodeSanitizer:
    """Tests for NodeSanitizer."""

    def _clone_one(self, markup: str, selector: str):
        doc = FilingDocument(page(markup))
        copies = NodeSanitizer().clone(doc.soup.select_one(selector))
        assert len(copies) == 1
        return copies[0]

    def test_drops_comments(self):
        """Comment nodes never survive a copy."""
        copy = self._clone_one("<div><!-- page 12 --><p>a</p></div>", "div")
        assert str(copy) == "<div><p>a</p></div>"

    def test_drops_whitespace_only_text(self):
        """Whitespace-only text nodes are removed, other text is kept verbatim."""
        copy = self._clone_one("<div>\n  <p> a b </p>\n\t</div>", "div")
        assert str(copy) == "<div><p> a b </p></div>"

    def test_drops_non_breaking_space_only_text(self):
        """A text node holding only &nbsp; counts as whitespace."""
        copy = self._clone_one("<table><tr><td>&nbsp;</td></tr></table>", "td")
        assert str(copy) == "<td></td>"

    def test_keeps_non_breaking_space_inside_text(self):
        """&nbsp; between words is left alone."""
        copy = self._clone_one("<p>1,000&nbsp;百万円</p>", "p")
        assert copy.get_text() == "1,000\xa0百万円"

    def test_unwraps_inline_xbrl(self):
        """ix: wrappers are removed but their content stays in place."""
        copy = self._clone_one(
            '<td class="num">△<ix:nonFraction name="jppfs_cor:NetSales" '
            'contextRef="CurrentYearDuration" unitRef="JPY">1,234</ix:nonFraction></td>',
            "td",
        )
        assert str(copy) == '<td class="num">△1,234</td>'

    def test_unwraps_nested_wrappers(self):
        """Wrappers inside wrappers are unwrapped recursively."""
        copy = self._clone_one(
            '<div id="x"><ix:nonNumeric name="a"><ix:nonNumeric name="b">'
            "<p>text</p></ix:nonNumeric></ix:nonNumeric></div>",
            "#x",
        )
        assert str(copy) == '<div id="x"><p>text</p></div>'

    def test_top_level_wrapper_expands_to_children(self):
        """Copying a wrapper itself yields its children."""
        doc = FilingDocument(page(
            '<ix:nonNumeric name="a"><p>one</p><p>two</p></ix:nonNumeric>'
        ))
        copies = NodeSanitizer().clone(doc.soup.find("ix:nonnumeric"))

        assert [str(c) for c in copies] == ["<p>one</p>", "<p>two</p>"]

    def test_keeps_attributes(self):
        """Layout and style attributes are copied verbatim."""
        copy = self._clone_one(
            '<td class="a b" style="text-align:right" colspan="2">x</td>', "td"
        )
        assert copy.get("class") == ["a", "b"]
        assert copy.get("style") == "text-align:right"
        assert copy.get("colspan") == "2"

    def test_copy_is_independent(self):
        """Copies share nothing with the source tree."""
        doc = FilingDocument(page('<p class="a"><b>x</b></p>'))
        original = doc.soup.p
        copy = NodeSanitizer().clone(original)[0]

        copy["class"].append("changed")
        copy.b.string = "y"

        assert original.get("class") == ["a"]
        assert original.b.get_text() == "x"
        assert copy.parent is not original.parent

    def test_custom_wrapper_prefixes(self):
        """Other namespaced wrappers can be configured."""
        doc = FilingDocument(page('<p id="x"><xbrl:fact>9</xbrl:fact></p>'))
        node = doc.soup.find(id="x")

        assert str(NodeSanitizer().clone(node)[0]) == '<p id="x"><xbrl:fact>9</xbrl:fact></p>'
        assert str(NodeSanitizer(["xbrl:"]).clone(node)[0]) == '<p id="x">9</p>'

    def test_whitespace_only_top_level_text(self):
        """A whitespace-only node on its own copies to nothing."""
        doc = FilingDocument(page("<p>a</p>\n   \n"))
        trailing = doc.soup.body.contents[-1]
        assert NodeSanitizer().clone(trailing) == []
