"""Document title extraction.

Titles come from a single-line <title> tag near the top of a document,
falling back to the file name without its suffix.
"""

import html
import logging
import re
from pathlib import Path

from wikitree.core.layout import DEFAULT_SUFFIX

logger = logging.getLogger(__name__)

TITLE_PATTERN = re.compile(r"<title>(.*?)</title>", re.IGNORECASE)
MAX_TITLE_LINES = 10


def extract_title(path: Path, suffix: str = DEFAULT_SUFFIX) -> str:
    """Derive a human-readable title for a document.

    Scans at most the first ten lines for a <title> tag. Only the first
    match counts; if it is blank, or there is no match, or the file can't
    be read, the file name without the document suffix is used.

    Args:
        path: Document file path
        suffix: Document suffix to strip from the file name

    Returns:
        Title text, trimmed
    """
    fallback = path.name.removesuffix(suffix)
    if not path.name.endswith(suffix) or not path.is_file():
        return fallback

    try:
        with path.open(encoding="utf-8") as f:
            for line_number, line in enumerate(f, start=1):
                if line_number > MAX_TITLE_LINES:
                    break
                match = TITLE_PATTERN.search(line)
                if match is not None:
                    title = html.unescape(match.group(1)).strip()
                    return title or fallback
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Could not read title from {path}: {e}")

    return fallback


class TitleExtractor:
    """Title extraction bound to one document suffix."""

    def __init__(self, suffix: str = DEFAULT_SUFFIX) -> None:
        self._suffix = suffix

    def __call__(self, path: Path) -> str:
        return extract_title(path, self._suffix)
