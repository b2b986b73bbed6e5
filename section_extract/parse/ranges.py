"""
Range extraction.

Copies the part of a document that belongs to the section. Copies are
structural: an element on the path to a boundary is kept as a shell (same
tag and attributes) holding only the captured content below it, so rows
stay inside their table when a section starts or ends mid-table.

Four operations, chosen by the boundary state machine:
- between(start, end): both boundaries in this document
- from_start(start): start heading to the end of the document
- until_end(end): beginning of the document up to the end heading
- whole_document(): the section runs through the whole page
"""

import logging
from typing import Optional

from bs4.element import PageElement, Tag

from ..errors import DocumentProcessingError
from .document import FilingDocument
from .sanitizer import NodeSanitizer

logger = logging.getLogger(__name__)


class _RangeWalk:
    """
    Pre-order walk that copies the nodes between two boundaries.

    Capturing switches on at the start node and off at the end node; after
    the end node nothing else is visited. A node that contains the end node
    is never copied whole, it is descended into instead.
    """

    def __init__(
        self,
        document: FilingDocument,
        sanitizer: NodeSanitizer,
        start: Optional[Tag],
        end: Optional[Tag],
        capturing: bool,
        include_start: bool = True,
    ):
        self.document = document
        self.sanitizer = sanitizer
        self.start = start
        self.end = end
        self.capturing = capturing
        self.include_start = include_start
        self.finished = False

        self._end_ancestors: set[int] = set()
        if end is not None:
            self._end_ancestors = {document.node_index(p) for p in end.parents}

    def collect(self, root: Tag) -> list[PageElement]:
        """Copy the range found below root, without root itself."""
        nodes = []
        for child in root.children:
            nodes.extend(self.visit(child))
            if self.finished:
                break
        return nodes

    def visit(self, node: PageElement) -> list[PageElement]:
        if self.finished:
            return []

        if self.document.same_node(node, self.end):
            self.capturing = False
            self.finished = True
            return []

        if self.document.same_node(node, self.start):
            self.capturing = True
            if not self._holds_end(node):
                return self.sanitizer.clone(node) if self.include_start else []
            # Start heading encloses the end heading
            if not self.include_start:
                return self.collect(node)
            return self._descend(node)

        if self.capturing and not self._holds_end(node):
            return self.sanitizer.clone(node)

        return self._descend(node)

    def _descend(self, node: PageElement) -> list[PageElement]:
        if not isinstance(node, Tag):
            return []
        nodes = self.collect(node)
        if not nodes:
            return []
        return self.sanitizer.wrap(node, nodes)

    def _holds_end(self, node: PageElement) -> bool:
        return self.document.node_index(node) in self._end_ancestors


class RangeExtractor:
    """Extracts section ranges from one document."""

    def __init__(
        self,
        document: FilingDocument,
        sanitizer: Optional[NodeSanitizer] = None,
        include_start: bool = True,
    ):
        self.document = document
        self.sanitizer = sanitizer or NodeSanitizer()
        self.include_start = include_start

    def content_root(self) -> Tag:
        """The <body> element; every range lives inside it."""
        body = self.document.body
        if body is None:
            raise DocumentProcessingError("Document has no <body>", self.document.source)
        return body

    def between(self, start: Tag, end: Tag) -> list[PageElement]:
        """
        Copy from the start heading up to, not including, the end heading.

        The walk is rooted at the nearest common ancestor of both headings.
        """
        body = self.content_root()
        self._require_inside(start, body, "Start")
        self._require_inside(end, body, "End")

        ancestor = self.document.common_ancestor(start, end)
        if ancestor is None:
            logger.warning(f"No common ancestor for markers in {self.document.name}, using <body>")
            ancestor = body
        elif self.document.same_node(ancestor, end):
            logger.warning(f"End marker encloses start marker in {self.document.name}")

        logger.debug(
            f"Common ancestor <{ancestor.name}> (node {self.document.node_index(ancestor)})"
        )
        walk = self._walk(start=start, end=end, capturing=False)
        return walk.visit(ancestor)

    def from_start(self, start: Tag) -> list[PageElement]:
        """Copy from the start heading to the end of the document."""
        body = self.content_root()
        self._require_inside(start, body, "Start")
        return self._walk(start=start, end=None, capturing=False).collect(body)

    def until_end(self, end: Tag) -> list[PageElement]:
        """Copy everything before the end heading."""
        body = self.content_root()
        self._require_inside(end, body, "End")
        return self._walk(start=None, end=end, capturing=True).collect(body)

    def whole_document(self) -> list[PageElement]:
        """Copy every child of <body>."""
        return self.sanitizer.clone_all(self.content_root().children)

    def _walk(self, start: Optional[Tag], end: Optional[Tag], capturing: bool) -> _RangeWalk:
        return _RangeWalk(
            self.document,
            self.sanitizer,
            start=start,
            end=end,
            capturing=capturing,
            include_start=self.include_start,
        )

    def _require_inside(self, node: Tag, body: Tag, label: str) -> None:
        if not self.document.is_inside(node, body):
            raise DocumentProcessingError(
                f"{label} marker lies outside <body>", self.document.source
            )
