"""Shared test fixtures."""

import os
from collections.abc import Callable
from pathlib import Path

import pytest
from wikitree.store import ContentStore


def write_file(root: Path, url_path: str, content: str, mtime: float | None = None) -> Path:
    """Write a file under root, creating directories as needed."""
    path = root / url_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def make_file() -> Callable[..., Path]:
    """Return the file writing helper."""
    return write_file


@pytest.fixture
def content_root(tmp_path: Path) -> Path:
    """Create a content root with a home page and a nested section.

    Layout (titles fall back to file names):

        home.html
        subdir.html
        subdir/subsubdir/grandchild.html    (subsubdir older than child)
        subdir/child.html
    """
    root = tmp_path / "content"
    write_file(root, "home.html", "/home.html\n")
    write_file(root, "subdir.html", "/subdir.html\n")
    write_file(root, "subdir/subsubdir/grandchild.html", "/subdir/subsubdir/grandchild.html\n")
    write_file(root, "subdir/child.html", "/subdir/child.html\n", mtime=2000)
    os.utime(root / "subdir" / "subsubdir", (1000, 1000))
    return root


@pytest.fixture
def store(content_root: Path) -> ContentStore:
    """Content store opened on the nested section fixture."""
    return ContentStore(content_root)


@pytest.fixture
def index_lines() -> Callable[[Path], list[str]]:
    """Return a reader for the index body.

    Yields the stripped, non-blank lines between <body> and </body>, so
    expectations don't depend on indentation.
    """

    def read(index_path: Path) -> list[str]:
        lines = [line.strip() for line in index_path.read_text(encoding="utf-8").splitlines()]
        start = next(i for i, line in enumerate(lines) if line.startswith("<body"))
        end = lines.index("</body>")
        return [line for line in lines[start + 1 : end] if line]

    return read


# Index body for the content_root fixture after a full rebuild
INITIAL_INDEX = [
    '<details open="true">',
    '<summary id="/">',
    '<a href="home.html">home</a>',
    "</summary>",
    "<details>",
    '<summary id="/subdir">',
    '<a href="subdir.html">subdir</a>',
    "</summary>",
    "<details>",
    '<summary id="/subdir/subsubdir">',
    'subsubdir<a class="new-page" href="subdir/subsubdir.html">+</a>',
    "</summary>",
    '<div id="/subdir/subsubdir/grandchild">',
    '<a href="subdir/subsubdir/grandchild.html">grandchild</a>',
    "</div>",
    "</details>",
    '<div id="/subdir/child">',
    '<a href="subdir/child.html">child</a>',
    "</div>",
    "</details>",
    "</details>",
]


@pytest.fixture
def initial_index() -> list[str]:
    """Expected index body for the content_root fixture."""
    return list(INITIAL_INDEX)
