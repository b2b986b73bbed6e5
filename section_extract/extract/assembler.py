"""
Output assembly.

Joins the fragments of a session into one standalone HTML document and
writes it as UTF-8.
"""

import html
import logging
from pathlib import Path
from typing import Sequence, Union

from ..errors import OutputWriteError
from ..parse.models import Fragment

logger = logging.getLogger(__name__)


DEFAULT_TITLE = "抽出された損益計算書"


def assemble_document(
    fragments: Sequence[Fragment],
    styles_html: str = "",
    title: str = DEFAULT_TITLE,
) -> str:
    """
    Build the final document.

    Args:
        fragments: Fragments in processing order
        styles_html: Rendered header styles (see StyleAggregator.render)
        title: Document title

    Returns:
        Complete HTML text
    """
    lines = [
        "<!DOCTYPE html>",
        "<html>",
        "<head>",
        '<meta charset="UTF-8">',
        f"<title>{html.escape(title)}</title>",
    ]
    if styles_html:
        lines.append(styles_html)
    lines.append("</head>")
    lines.append("<body>")

    for fragment in fragments:
        if not fragment.is_empty:
            lines.append(fragment.to_html())

    lines.append("</body>")
    lines.append("</html>")
    return "\n".join(lines) + "\n"


def write_document(content: str, output_path: Union[str, Path]) -> Path:
    """
    Write the assembled document, creating parent directories.

    Raises:
        OutputWriteError: If the directory or file cannot be written
    """
    output_path = Path(output_path)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8", newline="\n") as f:
            f.write(content)
    except OSError as e:
        raise OutputWriteError(output_path, e) from e

    logger.info(f"Wrote {len(content):,} chars to {output_path}")
    return output_path
