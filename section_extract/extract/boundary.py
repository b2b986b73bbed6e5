"""
Boundary state machine.

Decides, for each document of the sequence, which range goes into the
output and what state the session moves to:

    state        start  end   operation        next state
    NOT_STARTED  yes    yes   BETWEEN          COMPLETED
    NOT_STARTED  yes    no    FROM_START       CAPTURING
    NOT_STARTED  no     -     (none)           NOT_STARTED
    CAPTURING    -      yes   UNTIL_END        COMPLETED
    CAPTURING    -      no    WHOLE_DOCUMENT   CAPTURING
    COMPLETED    -      -     (skip)           COMPLETED
"""

import logging
from typing import Optional

from bs4.element import Tag

from ..parse.models import BoundaryDecision, ExtractionState, RangeOperation

logger = logging.getLogger(__name__)


def decide(
    state: ExtractionState,
    start: Optional[Tag],
    end: Optional[Tag],
) -> BoundaryDecision:
    """
    Pure transition function.

    Args:
        state: State left by the previous document
        start: Start heading found in this document (ignored unless NOT_STARTED)
        end: End heading found in this document

    Returns:
        BoundaryDecision with the operation to apply (None for no output)
    """
    if state == ExtractionState.COMPLETED:
        return BoundaryDecision(operation=None, next_state=ExtractionState.COMPLETED)

    if state == ExtractionState.NOT_STARTED:
        if start is None:
            return BoundaryDecision(operation=None, next_state=ExtractionState.NOT_STARTED)
        if end is not None:
            return BoundaryDecision(
                operation=RangeOperation.BETWEEN,
                next_state=ExtractionState.COMPLETED,
                start=start,
                end=end,
            )
        return BoundaryDecision(
            operation=RangeOperation.FROM_START,
            next_state=ExtractionState.CAPTURING,
            start=start,
        )

    # CAPTURING
    if end is not None:
        return BoundaryDecision(
            operation=RangeOperation.UNTIL_END,
            next_state=ExtractionState.COMPLETED,
            end=end,
        )
    return BoundaryDecision(
        operation=RangeOperation.WHOLE_DOCUMENT,
        next_state=ExtractionState.CAPTURING,
    )


class BoundaryStateMachine:
    """Holds the extraction state of one session."""

    def __init__(self):
        self.state = ExtractionState.NOT_STARTED
        self.transitions = 0

    @property
    def needs_start(self) -> bool:
        return self.state == ExtractionState.NOT_STARTED

    @property
    def needs_end(self) -> bool:
        return self.state != ExtractionState.COMPLETED

    @property
    def is_completed(self) -> bool:
        return self.state == ExtractionState.COMPLETED

    def decide(self, start: Optional[Tag], end: Optional[Tag]) -> BoundaryDecision:
        return decide(self.state, start, end)

    def advance(self, decision: BoundaryDecision) -> ExtractionState:
        """Apply a decision made for the current state."""
        if decision.next_state != self.state:
            logger.info(f"State {self.state.value} -> {decision.next_state.value}")
            self.transitions += 1
        self.state = decision.next_state
        return self.state
