"""
Marker locator.

Finds the element whose text contains a section heading marker.
"""

import logging
from typing import Optional, Sequence

from bs4.element import PageElement, Tag

from .document import FilingDocument

logger = logging.getLogger(__name__)


# Headings first, then generic block/inline containers
DEFAULT_CANDIDATE_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6", "div", "span", "p")


class MarkerLocator:
    """
    Locates section markers by tag priority.

    Tag names are tried in priority order. Within a tag name the first
    element in document order whose flattened text contains the marker
    wins. A match under a higher-priority tag name is returned even when a
    lower-priority tag holds the marker earlier in the document.
    """

    def __init__(self, candidate_tags: Optional[Sequence[str]] = None):
        self.candidate_tags = tuple(candidate_tags or DEFAULT_CANDIDATE_TAGS)

    def locate(
        self,
        document: FilingDocument,
        marker: str,
        after: Optional[PageElement] = None,
    ) -> Optional[Tag]:
        """
        Find the element carrying a marker.

        Args:
            document: Parsed document to search
            marker: Literal text to look for
            after: If given, only elements following this node in document
                order are considered

        Returns:
            The matching element, or None if no candidate tag contains it
        """
        if not marker:
            return None

        for tag_name in self.candidate_tags:
            for elem in document.soup.find_all(tag_name):
                if after is not None and not document.precedes(after, elem):
                    continue
                if marker in elem.get_text():
                    logger.debug(
                        f"Marker {marker!r} found in <{elem.name}> "
                        f"(node {document.node_index(elem)}) of {document.name}"
                    )
                    return elem
        return None

    def narrow(self, document: FilingDocument, elem: Tag, marker: str) -> Tag:
        """
        Innermost candidate element below elem that still carries the marker.

        Used when both markers resolve to the same container, or to nested
        ones, e.g. a page-wide <div> holding both headings.
        """
        current = elem
        while True:
            candidates = current.find_all(list(self.candidate_tags))
            inner = next((d for d in candidates if marker in d.get_text()), None)
            if inner is None:
                break
            current = inner

        if current is not elem:
            logger.debug(
                f"Narrowed marker {marker!r} from <{elem.name}> to <{current.name}> "
                f"(node {document.node_index(current)}) in {document.name}"
            )
        return current


def locate_marker(
    document: FilingDocument,
    marker: str,
    candidate_tags: Optional[Sequence[str]] = None,
) -> Optional[Tag]:
    """Convenience wrapper around MarkerLocator.locate."""
    return MarkerLocator(candidate_tags).locate(document, marker)
