"""
Input resolution and page ordering.

A filing is given either as one file or as a directory of pages named with
a leading sequence number (e.g. 0101010_honbun_....htm, 1.html, 02.html).
Pages are ordered by that number, numerically.
"""

import logging
import re
from pathlib import Path
from typing import Iterable, Sequence, Union

from ..errors import InputNotFoundError

logger = logging.getLogger(__name__)


DEFAULT_SUFFIXES = (".html", ".htm", ".xhtml")

LEADING_DIGITS = re.compile(r"^(\d+)")


def sort_key(filename: str) -> tuple[int, int]:
    """
    Ordering key for a page filename.

    Numbered files sort by their leading number; files without one sort
    after every numbered file.
    """
    match = LEADING_DIGITS.match(filename)
    if match:
        return (0, int(match.group(1)))
    return (1, 0)


def order_documents(paths: Iterable[Path]) -> list[Path]:
    """Order pages by sort_key; ties keep their incoming order."""
    return sorted(paths, key=lambda p: sort_key(p.name))


def resolve_documents(
    input_path: Union[str, Path],
    suffixes: Sequence[str] = DEFAULT_SUFFIXES,
) -> list[Path]:
    """
    Resolve the input into the ordered list of pages to process.

    Args:
        input_path: A single document, or a directory of pages
        suffixes: File extensions that count as documents in a directory

    Returns:
        Ordered list of document paths

    Raises:
        InputNotFoundError: If the path is missing or the directory has no pages
    """
    path = Path(input_path)

    if path.is_file():
        return [path]

    if not path.is_dir():
        raise InputNotFoundError(path)

    wanted = {s.lower() for s in suffixes}
    listing = sorted(p for p in path.iterdir() if p.is_file() and p.suffix.lower() in wanted)
    if not listing:
        raise InputNotFoundError(path, "No documents found in directory")

    ordered = order_documents(listing)
    logger.info(f"Found {len(ordered)} document(s) in {path}")
    return ordered
