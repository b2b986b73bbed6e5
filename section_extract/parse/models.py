"""
Data models for cross-document section extraction.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from bs4.element import PageElement, Tag


class ExtractionState(str, Enum):
    """Where the session stands relative to the section boundaries."""
    NOT_STARTED = "not_started"    # Start heading not seen yet
    CAPTURING = "capturing"        # Inside the section, end heading not seen
    COMPLETED = "completed"        # End heading seen, terminal


class RangeOperation(str, Enum):
    """Range of a single document that goes into the output."""
    BETWEEN = "between"                # Start and end in the same document
    FROM_START = "from_start"          # Start heading to end of document
    UNTIL_END = "until_end"            # Start of document up to end heading
    WHOLE_DOCUMENT = "whole_document"  # Entire body (section spans the page)


class StyleKind(str, Enum):
    """Origin of an aggregated style rule."""
    STYLE_BLOCK = "style_block"          # Body of a <style> element
    STYLESHEET_LINK = "stylesheet_link"  # Serialized <link rel="stylesheet">
    LOOSE_RULE = "loose_rule"            # CSS rule outside any <style> tag


@dataclass(frozen=True)
class SectionMarkers:
    """Opening and closing heading text of the section to extract."""

    start: str
    end: str


@dataclass(frozen=True)
class StyleRule:
    """A presentational rule collected from a document header."""

    kind: StyleKind
    text: str


@dataclass(frozen=True)
class BoundaryDecision:
    """Outcome of the state machine for one document."""

    operation: Optional[RangeOperation]
    next_state: ExtractionState
    start: Optional[Tag] = None
    end: Optional[Tag] = None

    @property
    def emits(self) -> bool:
        return self.operation is not None


@dataclass
class Fragment:
    """Sanitized top-level nodes contributed by one document."""

    source: Path
    operation: RangeOperation
    nodes: list[PageElement] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def to_html(self) -> str:
        """Serialize the fragment, one top-level node per line."""
        return "\n".join(str(node) for node in self.nodes)

    @property
    def char_count(self) -> int:
        return len(self.to_html())
