"""Sandboxed path resolution.

Every URL path handed to the content store is joined onto the content root,
normalized, and checked against the read- or write-forbidden prefix lists.
"""

import os
from collections.abc import Iterable
from pathlib import Path

from wikitree.core.errors import ForbiddenPath, PathEscapesRoot


class PathResolver:
    """Canonicalizes URL paths against a content root.

    The write-forbidden prefixes always include the read-forbidden ones, so
    anything that can't be read can't be written either.
    """

    __slots__ = ("_read_forbidden", "_root", "_write_forbidden")

    def __init__(
        self,
        root: Path,
        read_forbidden: Iterable[str] = (),
        write_forbidden: Iterable[str] = (),
    ) -> None:
        """Initialize resolver.

        Args:
            root: Content root directory
            read_forbidden: Root-relative prefixes that can't be read or written
            write_forbidden: Additional root-relative prefixes that can't be written
        """
        self._root = Path(os.path.abspath(root))
        self._read_forbidden = tuple(self._root / prefix.strip("/") for prefix in read_forbidden)
        self._write_forbidden = self._read_forbidden + tuple(
            self._root / prefix.strip("/") for prefix in write_forbidden
        )

    @property
    def root(self) -> Path:
        return self._root

    def resolve(self, url_path: str) -> Path:
        """Resolve a URL path to a canonical path under the root.

        Args:
            url_path: Slash-delimited path, with or without a leading slash

        Returns:
            Normalized absolute path

        Raises:
            PathEscapesRoot: If the normalized path lies outside the root
        """
        relative = url_path.lstrip("/")
        path = Path(os.path.normpath(self._root / relative)) if relative else self._root
        if not path.is_relative_to(self._root):
            raise PathEscapesRoot(f"Cannot access files outside root: {url_path}")
        return path

    def check_readable(self, path: Path) -> None:
        """Raise ForbiddenPath if the path is under a read-forbidden prefix."""
        self._check(path, self._read_forbidden)

    def check_writable(self, path: Path) -> None:
        """Raise ForbiddenPath if the path is under a write-forbidden prefix."""
        self._check(path, self._write_forbidden)

    def _check(self, path: Path, forbidden: tuple[Path, ...]) -> None:
        for prefix in forbidden:
            if path.is_relative_to(prefix):
                raise ForbiddenPath(f"Forbidden path: {self._display(path)}")

    def _display(self, path: Path) -> str:
        return "/" + path.relative_to(self._root).as_posix()
