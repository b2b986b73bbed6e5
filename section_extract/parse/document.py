"""
Parsed filing document with stable node identity.

BeautifulSoup compares tags structurally (two identical <p> tags are
equal), so node identity is tracked with a synthetic pre-order index that
is assigned once, when the document is parsed. The same index gives
document order.
"""

import logging
from pathlib import Path
from typing import Optional

from bs4 import BeautifulSoup, FeatureNotFound
from bs4.builder import ParserRejectedMarkup
from bs4.element import PageElement, Tag

from ..errors import DocumentProcessingError

logger = logging.getLogger(__name__)


class FilingDocument:
    """
    One page of a paginated filing.

    Attributes:
        source: Path the markup was read from (None for in-memory markup)
        markup: Raw markup text, kept for header scanning
        soup: Parsed BeautifulSoup tree
    """

    def __init__(
        self,
        markup: str,
        parser: str = "html.parser",
        source: Optional[Path] = None,
    ):
        """
        Parse markup and index every node.

        Args:
            markup: Raw HTML/XHTML text
            parser: BeautifulSoup tree builder ("html.parser" or "lxml")
            source: Optional path, used in log and error messages

        Raises:
            DocumentProcessingError: If the tree builder rejects the markup
        """
        self.source = source
        self.markup = markup
        try:
            self.soup = BeautifulSoup(markup, parser)
        except (FeatureNotFound, ParserRejectedMarkup) as e:
            raise DocumentProcessingError(f"Could not parse document: {e}", source) from e
        except Exception as e:
            # Tree builder failures on malformed markup
            raise DocumentProcessingError(f"Parser failed: {e!r}", source) from e

        self._index: dict[int, int] = {id(self.soup): 0}
        for position, element in enumerate(self.soup.descendants, start=1):
            self._index[id(element)] = position

    @classmethod
    def from_file(
        cls,
        path: Path,
        parser: str = "html.parser",
        encoding: str = "utf-8",
    ) -> "FilingDocument":
        """Read and parse a document from disk."""
        path = Path(path)
        try:
            with open(path, "r", encoding=encoding) as f:
                markup = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentProcessingError(f"Could not read document: {e}", path) from e

        logger.debug(f"Read {len(markup):,} chars from {path.name}")
        return cls(markup, parser=parser, source=path)

    @property
    def name(self) -> str:
        return self.source.name if self.source else "<markup>"

    @property
    def head(self) -> Optional[Tag]:
        return self.soup.find("head")

    @property
    def body(self) -> Optional[Tag]:
        return self.soup.find("body")

    @property
    def node_count(self) -> int:
        return len(self._index)

    def node_index(self, node: PageElement) -> int:
        """Pre-order index of a node of this document."""
        try:
            return self._index[id(node)]
        except KeyError:
            raise DocumentProcessingError(
                "Node does not belong to this document", self.source
            ) from None

    def same_node(self, a: Optional[PageElement], b: Optional[PageElement]) -> bool:
        """Reference identity, by index."""
        if a is None or b is None:
            return False
        return self.node_index(a) == self.node_index(b)

    def precedes(self, a: PageElement, b: PageElement) -> bool:
        """True if a comes before b in document order."""
        return self.node_index(a) < self.node_index(b)

    def is_inside(self, node: PageElement, container: Tag) -> bool:
        """True if node is container or one of its descendants."""
        if self.same_node(node, container):
            return True
        container_index = self.node_index(container)
        return any(self.node_index(parent) == container_index for parent in node.parents)

    def common_ancestor(self, a: PageElement, b: PageElement) -> Optional[PageElement]:
        """
        Nearest node that is an ancestor-or-self of both a and b.

        Walks a's ancestor chain into a set, then b's chain until a member
        of the set is found.
        """
        chain = {self.node_index(a)}
        chain.update(self.node_index(parent) for parent in a.parents)

        for candidate in (b, *b.parents):
            if self.node_index(candidate) in chain:
                return candidate
        return None
