"""Content store.

Sandboxed create/read/update/delete of documents under a content root,
keeping the index artifact in step with every document change.
"""

import logging
import threading
from collections.abc import Iterable
from pathlib import Path
from typing import BinaryIO

from wikitree.assets import install_standard_files
from wikitree.core.errors import AlreadyExists, IOFailure, MalformedIndex, NotFound
from wikitree.core.layout import ASSETS_DIR, CONFIG_FILENAME, FEED_NAME, ContentLayout
from wikitree.core.paths import PathResolver
from wikitree.core.persistence import IndexPersistence
from wikitree.core.sync import IndexSynchronizer
from wikitree.core.title import TitleExtractor
from wikitree.core.tree import IndexTree
from wikitree.core.types import ROOT_ID, Direction

logger = logging.getLogger(__name__)

DEFAULT_READ_FORBIDDEN = (".git", CONFIG_FILENAME)


class ContentStore:
    """Documents under one content root plus their navigation index.

    Mutations (create, update, delete, move and the index repair they
    trigger) are serialized by a lock. Reads take no lock and may see a
    slightly stale index artifact.

    Document writes never fail because of index bookkeeping: errors while
    repairing the index are logged and the index is fixed by the next
    successful repair or rebuild.
    """

    def __init__(
        self,
        root: Path,
        *,
        document_suffix: str = ".html",
        read_forbidden: Iterable[str] = (),
        write_forbidden: Iterable[str] = (),
    ) -> None:
        """Open a content root, loading or rebuilding its index.

        Args:
            root: Content root directory (created if missing)
            document_suffix: Suffix of files that are indexed as documents
            read_forbidden: Extra root-relative prefixes that can't be read
            write_forbidden: Extra root-relative prefixes that can't be written
        """
        root.mkdir(parents=True, exist_ok=True)
        read_forbidden = (*DEFAULT_READ_FORBIDDEN, *read_forbidden)
        self._resolver = PathResolver(
            root,
            read_forbidden=read_forbidden,
            write_forbidden=(
                ASSETS_DIR,
                f"index{document_suffix}",
                FEED_NAME,
                *write_forbidden,
            ),
        )
        # read-forbidden documents are never indexed
        self._layout = ContentLayout(self._resolver.root, document_suffix, excluded=read_forbidden)
        self._title = TitleExtractor(document_suffix)
        self._synchronizer = IndexSynchronizer(self._layout, self._title)
        self._persistence = IndexPersistence(
            self._layout.index_path,
            stylesheets=(f"{ASSETS_DIR}/wikitree.css", "style.css"),
        )
        self._lock = threading.RLock()

        install_standard_files(self._layout)
        self._tree = self._load_or_rebuild()

    @property
    def root(self) -> Path:
        return self._layout.root

    @property
    def layout(self) -> ContentLayout:
        return self._layout

    @property
    def index_path(self) -> Path:
        """Location of the index artifact."""
        return self._persistence.path

    @property
    def tree(self) -> IndexTree:
        """Snapshot of the current index tree."""
        return self._tree.copy()

    def create(self, url_path: str, content: bytes | BinaryIO) -> Path:
        """Create a new document.

        Args:
            url_path: Slash-delimited path, with or without a leading slash
            content: Document bytes or a binary stream

        Returns:
            Path of the created file

        Raises:
            PathEscapesRoot: If the path resolves outside the root
            ForbiddenPath: If the path is write-forbidden
            AlreadyExists: If the file already exists
            IOFailure: If the file can't be written
        """
        path = self._resolver.resolve(url_path)
        self._resolver.check_writable(path)
        with self._lock:
            if path.exists():
                raise AlreadyExists(f"Already exists: {url_path}")
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise IOFailure(f"Cannot create directory for {url_path}: {e}") from e
            try:
                with path.open("xb") as f:
                    f.write(_read_content(content))
            except FileExistsError as e:
                raise AlreadyExists(f"Already exists: {url_path}") from e
            except OSError as e:
                raise IOFailure(f"Cannot create {url_path}: {e}") from e
            self._after_write(path)
        return path

    def read(self, url_path: str) -> BinaryIO:
        """Open a document for reading.

        Returns:
            Binary stream; the caller closes it

        Raises:
            PathEscapesRoot: If the path resolves outside the root
            ForbiddenPath: If the path is read-forbidden
            NotFound: If there is no such file
        """
        path = self._resolver.resolve(url_path)
        self._resolver.check_readable(path)
        if not path.is_file():
            raise NotFound(f"Not found: {url_path}")
        try:
            return path.open("rb")
        except FileNotFoundError as e:
            raise NotFound(f"Not found: {url_path}") from e
        except OSError as e:
            raise IOFailure(f"Cannot read {url_path}: {e}") from e

    def update(self, url_path: str, content: bytes | BinaryIO) -> Path:
        """Overwrite an existing document.

        Raises:
            PathEscapesRoot: If the path resolves outside the root
            ForbiddenPath: If the path is write-forbidden
            NotFound: If there is no such file
            IOFailure: If the file can't be written
        """
        path = self._resolver.resolve(url_path)
        self._resolver.check_writable(path)
        with self._lock:
            if not path.is_file():
                raise NotFound(f"Not found: {url_path}")
            try:
                path.write_bytes(_read_content(content))
            except OSError as e:
                raise IOFailure(f"Cannot update {url_path}: {e}") from e
            self._after_write(path)
        return path

    def delete(self, url_path: str) -> Path:
        """Delete a document.

        Returns:
            Path of the removed file

        Raises:
            PathEscapesRoot: If the path resolves outside the root
            ForbiddenPath: If the path is write-forbidden
            NotFound: If there is no such file
            IOFailure: If the file can't be removed
        """
        path = self._resolver.resolve(url_path)
        self._resolver.check_writable(path)
        with self._lock:
            if not path.is_file():
                raise NotFound(f"Not found: {url_path}")
            try:
                path.unlink()
            except FileNotFoundError as e:
                raise NotFound(f"Not found: {url_path}") from e
            except OSError as e:
                raise IOFailure(f"Cannot delete {url_path}: {e}") from e
            self._after_write(path)
        return path

    def move(self, id_or_path: str, direction: Direction) -> bool:
        """Swap an index entry with its previous ("up") or next ("down") sibling.

        Groups move together with their whole subtree. Entries never leave
        their group, and the root can't move.

        Args:
            id_or_path: Node id ("/a/b") or document path ("a/b.html")
            direction: "up" or "down"

        Returns:
            True if the entry moved and the index was rewritten

        Raises:
            ValueError: If direction is not "up" or "down"
        """
        if direction not in ("up", "down"):
            raise ValueError(f"direction must be 'up' or 'down', not {direction!r}")

        node_id = self._layout.to_id(id_or_path)
        if node_id == ROOT_ID:
            return False

        with self._lock:
            if node_id not in self._tree:
                return False
            working = self._tree.copy()
            if not working.swap(node_id, direction):
                return False
            self._persistence.write(working)
            self._tree = working
        logger.info(f"Moved {node_id} {direction}")
        return True

    def title(self, url_path: str) -> str:
        """Derive the title of a document.

        Raises:
            PathEscapesRoot: If the path resolves outside the root
            ForbiddenPath: If the path is read-forbidden
        """
        path = self._resolver.resolve(url_path)
        self._resolver.check_readable(path)
        return self._title(path)

    def synchronize(self, url_path: str) -> bool:
        """Repair the index for a document changed outside the store.

        Returns:
            True if the index was changed and rewritten
        """
        path = self._resolver.resolve(url_path)
        with self._lock:
            return self._synchronize(path)

    def rebuild(self) -> IndexTree:
        """Rebuild the index from the filesystem and rewrite the artifact."""
        with self._lock:
            tree = self._synchronizer.scanner.build()
            self._persistence.write(tree)
            self._tree = tree
        return tree.copy()

    def _load_or_rebuild(self) -> IndexTree:
        if self._persistence.exists():
            try:
                tree = self._persistence.load()
            except MalformedIndex as e:
                logger.warning(f"Rebuilding unreadable index: {e}")
            else:
                excluded = [node_id for node_id in tree.ids() if self._layout.is_reserved(node_id)]
                if not excluded:
                    logger.info(f"Loaded index {self._persistence.path}")
                    return tree
                logger.warning(f"Rebuilding index listing excluded entries: {', '.join(excluded)}")
        tree = self._synchronizer.scanner.build()
        self._persistence.write(tree)
        return tree

    def _after_write(self, path: Path) -> None:
        if self._layout.is_document(path.name):
            self._synchronize(path)

    def _synchronize(self, path: Path) -> bool:
        """Run one repair pass on a working copy and persist it if it changed.

        Errors are logged and swallowed; the live tree is only replaced once
        the artifact has been written.
        """
        url_path = self._layout.url_path_for(path)
        try:
            working = self._tree.copy()
            if not self._synchronizer.synchronize(working, url_path):
                return False
            self._persistence.write(working)
        except Exception:
            logger.exception(f"Index update failed for {url_path}")
            return False
        self._tree = working
        return True


def _read_content(content: bytes | BinaryIO) -> bytes:
    if isinstance(content, bytes):
        return content
    return content.read()
