"""
Exceptions raised while extracting a section from a filing.

Only InputNotFoundError, NoContentFoundError and OutputWriteError fail a
run. DocumentProcessingError is caught per document by the session.
"""

from pathlib import Path
from typing import Optional


class ExtractionError(Exception):
    """Base class for all extraction errors."""


class InputNotFoundError(ExtractionError, FileNotFoundError):
    """The input path does not exist or holds no documents."""

    def __init__(self, path: Path, reason: str = "Input not found"):
        self.path = Path(path)
        super().__init__(f"{reason}: {self.path}")


class NoContentFoundError(ExtractionError):
    """No document contained the start marker."""

    def __init__(self, start_marker: str, documents_processed: int):
        self.start_marker = start_marker
        self.documents_processed = documents_processed
        super().__init__(
            f"Start marker {start_marker!r} not found in "
            f"{documents_processed} document(s)"
        )


class DocumentProcessingError(ExtractionError):
    """
    A single document could not be parsed or extracted.

    Attributes:
        path: Document that failed (None when extracting from a string)
        reason: Short description of the failure
    """

    def __init__(self, reason: str, path: Optional[Path] = None):
        self.path = path
        self.reason = reason
        location = f" ({path})" if path else ""
        super().__init__(f"{reason}{location}")


class OutputWriteError(ExtractionError):
    """The assembled document could not be written."""

    def __init__(self, path: Path, cause: OSError):
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Failed to write {self.path}: {cause}")
