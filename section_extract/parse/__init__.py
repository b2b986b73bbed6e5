"""
Document parsing and range extraction package.

This package provides tools for parsing filing pages, locating section
headings, copying sanitized section ranges and collecting header styles.
"""

from .models import (
    # Enums
    ExtractionState,
    RangeOperation,
    StyleKind,
    # Records
    SectionMarkers,
    StyleRule,
    BoundaryDecision,
    Fragment,
)

from .document import FilingDocument

from .locator import (
    DEFAULT_CANDIDATE_TAGS,
    MarkerLocator,
    locate_marker,
)

from .sanitizer import NodeSanitizer

from .ranges import RangeExtractor

from .styles import (
    BASELINE_CSS,
    StyleAggregator,
)

__all__ = [
    # Enums
    "ExtractionState",
    "RangeOperation",
    "StyleKind",
    # Records
    "SectionMarkers",
    "StyleRule",
    "BoundaryDecision",
    "Fragment",
    # Parsing
    "FilingDocument",
    # Locator
    "DEFAULT_CANDIDATE_TAGS",
    "MarkerLocator",
    "locate_marker",
    # Extraction
    "NodeSanitizer",
    "RangeExtractor",
    # Styles
    "BASELINE_CSS",
    "StyleAggregator",
]
