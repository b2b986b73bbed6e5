"""
Extraction session.

Runs the boundary state machine over the ordered pages of one filing:
1. Parse each page
2. Collect its header styles
3. Locate the start/end headings and decide the range
4. Copy the range as a fragment
5. Assemble fragments and styles into one document

A session is single-use: build a new one for every run.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from bs4.element import Tag

from .config import ExtractorConfig
from .errors import (
    DocumentProcessingError,
    ExtractionError,
    NoContentFoundError,
)
from .extract.assembler import assemble_document, write_document
from .extract.boundary import BoundaryStateMachine
from .extract.inputs import resolve_documents
from .parse.document import FilingDocument
from .parse.locator import MarkerLocator
from .parse.models import (
    BoundaryDecision,
    ExtractionState,
    Fragment,
    RangeOperation,
    StyleRule,
)
from .parse.ranges import RangeExtractor
from .parse.sanitizer import NodeSanitizer
from .parse.styles import StyleAggregator

logger = logging.getLogger(__name__)


@dataclass
class SessionResult:
    """Outcome of one extraction run."""

    success: bool
    state: ExtractionState
    fragments: list[Fragment] = field(default_factory=list)
    style_rules: list[StyleRule] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    documents_total: int = 0
    documents_processed: int = 0
    output_path: Optional[Path] = None
    error: Optional[str] = None
    duration_seconds: float = 0.0

    def summarize(self) -> dict:
        """Summary statistics for reports."""
        return {
            "success": self.success,
            "state": self.state.value,
            "documents_total": self.documents_total,
            "documents_processed": self.documents_processed,
            "fragments": len(self.fragments),
            "empty_fragments": sum(1 for f in self.fragments if f.is_empty),
            "fragment_chars": sum(f.char_count for f in self.fragments),
            "style_rules": len(self.style_rules),
            "warnings": list(self.warnings),
            "output_path": str(self.output_path) if self.output_path else None,
            "error": self.error,
            "duration_seconds": self.duration_seconds,
        }


class ExtractionSession:
    """
    One end-to-end run over a sequence of pages.

    Owns the extraction state, the fragment list and the style set.
    """

    def __init__(self, config: Optional[ExtractorConfig] = None):
        self.config = config or ExtractorConfig()
        self.markers = self.config.section_markers()
        self.locator = MarkerLocator(self.config.locator.candidate_tags)
        self.sanitizer = NodeSanitizer(self.config.sanitizer.wrapper_prefixes)
        self.state_machine = BoundaryStateMachine()
        self.styles = StyleAggregator()
        self.fragments: list[Fragment] = []
        self.warnings: list[str] = []
        self.documents_processed = 0
        self._started = False

    @property
    def state(self) -> ExtractionState:
        return self.state_machine.state

    # -------------------------------------------------------------------------
    # Per-document processing
    # -------------------------------------------------------------------------

    def process_path(self, path: Path) -> Optional[Fragment]:
        """Parse and process one page; a page that cannot be read is skipped."""
        logger.info(f"Processing {path}")
        try:
            document = FilingDocument.from_file(
                path,
                parser=self.config.parsing.parser,
                encoding=self.config.parsing.encoding,
            )
        except DocumentProcessingError as e:
            self.documents_processed += 1
            return self._skip_document(path, f"Skipping unreadable document: {e}")

        return self.process_document(document)

    def process_document(self, document: FilingDocument) -> Optional[Fragment]:
        """
        Run one parsed page through the state machine.

        Returns:
            The fragment appended for this page, or None if the page is
            outside the section
        """
        if self.state_machine.is_completed:
            logger.debug(f"Extraction completed, ignoring {document.name}")
            return None

        self.documents_processed += 1
        try:
            self.styles.collect(document)
            decision = self._decide(document)
        except Exception as e:
            logger.error(f"  Marker search failed for {document.name}: {e!r}")
            return self._skip_document(
                document.source or Path(document.name),
                f"Skipping document {document.name}: {e!r}",
            )

        if not decision.emits:
            logger.info(f"  No section content in {document.name}")
            self.state_machine.advance(decision)
            return None

        logger.info(f"  {document.name}: {decision.operation.value}")
        fragment = Fragment(
            source=document.source or Path(document.name),
            operation=decision.operation,
        )
        try:
            fragment.nodes = self._extract(document, decision)
        except DocumentProcessingError as e:
            logger.error(f"  Extraction failed for {document.name}: {e}")
            self._warn(f"Empty fragment for {document.name}: {e.reason}")

        self.fragments.append(fragment)
        self.state_machine.advance(decision)
        logger.info(
            f"  Extracted {len(fragment.nodes)} node(s), {fragment.char_count:,} chars"
        )
        return fragment

    def _decide(self, document: FilingDocument) -> BoundaryDecision:
        start = None
        if self.state_machine.needs_start:
            start = self.locator.locate(document, self.markers.start)

        end = None
        if self.state_machine.needs_end:
            end = self.locator.locate(document, self.markers.end)

        if start is not None and end is not None:
            start, end = self._pair_markers(document, start, end)

        return self.state_machine.decide(start, end)

    def _pair_markers(self, document: FilingDocument, start: Tag, end: Tag) -> tuple[Tag, Tag]:
        """
        Choose the start/end elements a BETWEEN range is cut from.

        Nested matches (one container holding both headings) are narrowed
        to the innermost elements carrying each marker. An end match above
        the start, e.g. in a table of contents, gives way to the first end
        match after the start when the page has one.
        """
        if document.is_inside(start, end) or document.is_inside(end, start):
            start = self.locator.narrow(document, start, self.markers.start)
            end = self.locator.narrow(document, end, self.markers.end)

        if document.precedes(start, end):
            return start, end

        later = self.locator.locate(document, self.markers.end, after=start)
        if later is not None:
            logger.info(f"  Using end marker after the start marker in {document.name}")
            return start, self.locator.narrow(document, later, self.markers.end)

        self._warn(
            f"End marker does not follow start marker in {document.name}; "
            f"the extracted range is empty"
        )
        return start, end

    def _extract(self, document: FilingDocument, decision: BoundaryDecision) -> list:
        """
        Apply the decided range operation.

        Raises:
            DocumentProcessingError: For any failure while copying, including
                errors raised by the tree itself (e.g. RecursionError on very
                deeply nested markup)
        """
        extractor = RangeExtractor(
            document,
            self.sanitizer,
            include_start=self.config.output.include_start,
        )
        try:
            if decision.operation == RangeOperation.BETWEEN:
                return extractor.between(decision.start, decision.end)
            if decision.operation == RangeOperation.FROM_START:
                return extractor.from_start(decision.start)
            if decision.operation == RangeOperation.UNTIL_END:
                return extractor.until_end(decision.end)
            return extractor.whole_document()
        except DocumentProcessingError:
            raise
        except Exception as e:
            raise DocumentProcessingError(f"Extraction failed: {e!r}", document.source) from e

    def _skip_document(self, source: Path, message: str) -> Optional[Fragment]:
        """Warn about a page that could not be processed."""
        self._warn(message)
        if self.state == ExtractionState.CAPTURING:
            # The page was inside the section; keep its slot
            fragment = Fragment(source=source, operation=RangeOperation.WHOLE_DOCUMENT)
            self.fragments.append(fragment)
            return fragment
        return None

    # -------------------------------------------------------------------------
    # Whole run
    # -------------------------------------------------------------------------

    def process_all(self, paths: list[Path]) -> None:
        """Process pages in order, stopping once the section is complete."""
        for index, path in enumerate(paths):
            if self.state_machine.is_completed:
                skipped = len(paths) - index
                logger.info(f"Section complete, skipping {skipped} remaining document(s)")
                break
            self.process_path(path)

    def finish(self) -> None:
        """
        Check the final state.

        Raises:
            NoContentFoundError: If the start marker was never found
        """
        if self.state == ExtractionState.NOT_STARTED:
            raise NoContentFoundError(self.markers.start, self.documents_processed)

        if self.state == ExtractionState.CAPTURING:
            self._warn(
                f"Start marker {self.markers.start!r} was found but end marker "
                f"{self.markers.end!r} was not; extracted through the last document"
            )

    def render(self) -> str:
        """Assemble the collected fragments and styles."""
        return assemble_document(
            self.fragments,
            styles_html=self.styles.render(self.config.output.baseline_css),
            title=self.config.output.title,
        )

    def run(
        self,
        input_path: Union[str, Path],
        output_path: Union[str, Path],
    ) -> SessionResult:
        """
        Extract the section from a file or directory and write it.

        Raises:
            InputNotFoundError: Missing input or no documents
            NoContentFoundError: Start marker never found
            OutputWriteError: Output could not be written
        """
        if self._started:
            raise RuntimeError("ExtractionSession is single-use; create a new session per run")
        self._started = True

        started_at = datetime.now()
        paths = resolve_documents(input_path, self.config.parsing.file_suffixes)

        self.process_all(paths)
        self.finish()
        written = write_document(self.render(), output_path)

        return SessionResult(
            success=True,
            state=self.state,
            fragments=list(self.fragments),
            style_rules=self.styles.rules,
            warnings=list(self.warnings),
            documents_total=len(paths),
            documents_processed=self.documents_processed,
            output_path=written,
            duration_seconds=(datetime.now() - started_at).total_seconds(),
        )

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)


def extract_section(
    input_path: Union[str, Path],
    output_path: Union[str, Path],
    config: Optional[ExtractorConfig] = None,
) -> SessionResult:
    """
    Run a fresh session; fatal errors are reported in the result.

    Args:
        input_path: A page, or a directory of numbered pages
        output_path: Where to write the assembled document
        config: Extraction settings (defaults if None)

    Returns:
        SessionResult; success is False on a fatal error
    """
    session = ExtractionSession(config)
    try:
        result = session.run(input_path, output_path)
    except ExtractionError as e:
        logger.error(f"Extraction failed: {e}")
        return SessionResult(
            success=False,
            state=session.state,
            fragments=list(session.fragments),
            style_rules=session.styles.rules,
            warnings=list(session.warnings),
            documents_processed=session.documents_processed,
            error=str(e),
        )

    logger.info(f"Section extracted to {result.output_path}")
    return result


def extract_and_save(
    input_path: Union[str, Path],
    output_path: Union[str, Path],
    config: Optional[ExtractorConfig] = None,
) -> bool:
    """Boolean form of extract_section."""
    return extract_section(input_path, output_path, config).success
