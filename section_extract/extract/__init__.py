"""
Session plumbing: boundary state machine, input ordering and output assembly.
"""

from .boundary import BoundaryStateMachine, decide
from .inputs import order_documents, resolve_documents, sort_key
from .assembler import assemble_document, write_document

__all__ = [
    "BoundaryStateMachine",
    "decide",
    "order_documents",
    "resolve_documents",
    "sort_key",
    "assemble_document",
    "write_document",
]
