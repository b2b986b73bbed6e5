"""
Node sanitizer.

Every node copied into the output goes through NodeSanitizer, which builds
an independent copy on its own output tree:
- comments are dropped
- whitespace-only text nodes are dropped (any Unicode whitespace,
  including non-breaking spaces)
- inline XBRL wrappers (ix:nonFraction, ix:nonNumeric, ...) are unwrapped,
  keeping their content in place
- everything else (tags, attributes, structure) is copied verbatim
"""

from typing import Iterable, Optional, Sequence

from bs4 import BeautifulSoup
from bs4.element import Comment, NavigableString, PageElement, Tag


DEFAULT_WRAPPER_PREFIXES = ("ix:",)

# Document structure tags that never appear as shells in a fragment
TRANSPARENT_TAGS = frozenset({"html", "body"})


class NodeSanitizer:
    """Deep-copies nodes into a fresh tree, cleaning them on the way."""

    def __init__(self, wrapper_prefixes: Optional[Sequence[str]] = None):
        if wrapper_prefixes is None:
            wrapper_prefixes = DEFAULT_WRAPPER_PREFIXES
        self.wrapper_prefixes = tuple(p.lower() for p in wrapper_prefixes if p)
        self._factory = BeautifulSoup("", "html.parser")

    def is_wrapper(self, tag: Tag) -> bool:
        """True for semantic tagging wrappers that should be unwrapped."""
        name = (tag.name or "").lower()
        return any(name.startswith(prefix) for prefix in self.wrapper_prefixes)

    def clone(self, node: PageElement) -> list[PageElement]:
        """
        Copy a node and its whole subtree.

        Returns a list because a wrapper expands to its children and a
        dropped node expands to nothing.
        """
        if isinstance(node, Comment):
            return []

        if isinstance(node, NavigableString):
            text = str(node)
            if not text.strip():
                return []
            return [type(node)(text)]

        if isinstance(node, Tag):
            children = self.clone_all(node.children)
            return self.wrap(node, children)

        return []

    def clone_all(self, nodes: Iterable[PageElement]) -> list[PageElement]:
        copies = []
        for node in nodes:
            copies.extend(self.clone(node))
        return copies

    def wrap(self, tag: Tag, children: list[PageElement]) -> list[PageElement]:
        """
        Put already-copied children inside a shallow copy of tag.

        Wrappers and document structure tags are transparent and yield the
        children themselves.
        """
        if self.is_wrapper(tag) or tag.name in TRANSPARENT_TAGS:
            return children

        shell = self.shallow_copy(tag)
        for child in children:
            shell.append(child)
        return [shell]

    def shallow_copy(self, tag: Tag) -> Tag:
        """Same tag name and attributes, no children."""
        attrs = {
            key: list(value) if isinstance(value, list) else value
            for key, value in tag.attrs.items()
        }
        return self._factory.new_tag(tag.name, attrs=attrs)
