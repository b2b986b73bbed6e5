"""
Filing Section Extractor.

Pulls one section, bounded by a start heading and an end heading, out of a
filing that has been split into numbered HTML pages (EDINET securities
reports by default) and writes it as a single HTML document:
- Ordering pages by their sequence number
- Tracking the section boundaries across pages
- Copying sanitized, structurally valid ranges
- Merging header styles
"""

from .config import ExtractorConfig, load_config
from .errors import (
    ExtractionError,
    InputNotFoundError,
    NoContentFoundError,
    DocumentProcessingError,
    OutputWriteError,
)
from .session import (
    ExtractionSession,
    SessionResult,
    extract_section,
    extract_and_save,
)

__all__ = [
    "ExtractorConfig",
    "load_config",
    "ExtractionError",
    "InputNotFoundError",
    "NoContentFoundError",
    "DocumentProcessingError",
    "OutputWriteError",
    "ExtractionSession",
    "SessionResult",
    "extract_section",
    "extract_and_save",
]
