"""Content root layout.

Maps between URL paths, index node ids, hrefs and filesystem locations,
and knows which names are reserved and never indexed.
"""

from collections.abc import Iterable
from pathlib import Path

from wikitree.core.types import ROOT_ID, NodeId, URLPath

DEFAULT_SUFFIX = ".html"
ASSETS_DIR = "wikitree"
CONFIG_FILENAME = "wikitree.toml"
FEED_NAME = "rss.xml"

# Stems of the root documents that are part of the site chrome
HOME = "home"
INDEX = "index"
TEMPLATE = "template"
HEADER = "header"
FOOTER = "footer"


class ContentLayout:
    """Naming rules for one content root.

    Node ids are URL paths with the document suffix removed and a leading
    slash ("/subdir/child"). The home document is the tree root "/".
    Hrefs are root-relative without a leading slash ("subdir/child.html").
    """

    __slots__ = ("_excluded", "_root", "_suffix")

    def __init__(
        self,
        root: Path,
        suffix: str = DEFAULT_SUFFIX,
        excluded: Iterable[str] = (),
    ) -> None:
        """Initialize layout.

        Args:
            root: Content root directory
            suffix: Document file suffix
            excluded: Root-relative prefixes whose contents are never indexed
        """
        self._root = root
        self._suffix = suffix
        self._excluded = tuple(root / prefix.strip("/") for prefix in excluded)

    @property
    def root(self) -> Path:
        """Content root directory."""
        return self._root

    @property
    def suffix(self) -> str:
        """Document file suffix (e.g., ".html")."""
        return self._suffix

    @property
    def home_name(self) -> str:
        return f"{HOME}{self._suffix}"

    @property
    def index_name(self) -> str:
        return f"{INDEX}{self._suffix}"

    @property
    def index_path(self) -> Path:
        """Location of the index artifact."""
        return self._root / self.index_name

    @property
    def assets_dir(self) -> Path:
        return self._root / ASSETS_DIR

    @property
    def reserved_names(self) -> frozenset[str]:
        """Top-level names that are never represented in the index."""
        return frozenset(
            {
                self.home_name,
                self.index_name,
                f"{TEMPLATE}{self._suffix}",
                f"{HEADER}{self._suffix}",
                f"{FOOTER}{self._suffix}",
                ASSETS_DIR,
                CONFIG_FILENAME,
                FEED_NAME,
            }
        )

    def is_document(self, path: str | Path) -> bool:
        """Check whether a path names a document by its suffix."""
        return str(path).endswith(self._suffix)

    def to_id(self, url_path: str) -> NodeId:
        """Convert a URL path or id to a node id.

        Args:
            url_path: Document path ("a/b.html", "/a/b.html") or id ("/a/b")

        Returns:
            Node id with a leading slash; the home document maps to "/"
        """
        stripped = url_path.strip("/")
        if stripped.endswith(self._suffix):
            stripped = stripped[: -len(self._suffix)]
        if stripped in ("", HOME):
            return ROOT_ID
        return NodeId(f"/{stripped}")

    def url_path_for(self, path: Path) -> URLPath:
        """Convert an absolute path under the root to its URL path."""
        return URLPath(path.relative_to(self._root).as_posix())

    def parent_id(self, node_id: NodeId) -> NodeId:
        """Id with its last segment removed; top-level ids have parent "/"."""
        parent = node_id.rsplit("/", 1)[0]
        return NodeId(parent) if parent else ROOT_ID

    def name(self, node_id: NodeId) -> str:
        """Last path segment of an id (the directory or document base name)."""
        return node_id.rsplit("/", 1)[-1]

    def href(self, node_id: NodeId) -> str:
        if node_id == ROOT_ID:
            return self.home_name
        return f"{node_id.lstrip('/')}{self._suffix}"

    def document_path(self, node_id: NodeId) -> Path:
        return self._root / self.href(node_id)

    def directory_path(self, node_id: NodeId) -> Path:
        if node_id == ROOT_ID:
            return self._root
        return self._root / node_id.lstrip("/")

    def is_reserved(self, node_id: NodeId) -> bool:
        """Check whether an id is never indexed.

        Ids under a reserved top-level name, with a hidden segment, or
        whose document lies under an excluded prefix are reserved; the root
        itself is not.
        """
        if node_id == ROOT_ID:
            return False
        segments = node_id.lstrip("/").split("/")
        if any(segment.startswith(".") for segment in segments):
            return True
        if self._is_reserved_name(segments[0]):
            return True
        return self._is_excluded(self.document_path(node_id))

    def is_indexable_entry(self, path: Path) -> bool:
        """Check whether a directory entry may appear in the index at all."""
        if path.name.startswith("."):
            return False
        if self._is_excluded(path):
            return False
        return not (path.parent == self._root and self._is_reserved_name(path.name))

    def has_documents(self, directory: Path) -> bool:
        """Check whether a directory holds at least one document at any depth.

        Hidden entries are ignored.
        """
        if not directory.is_dir():
            return False
        try:
            entries = list(directory.iterdir())
        except OSError:
            return False
        for entry in entries:
            if not self.is_indexable_entry(entry):
                continue
            if entry.is_file() and self.is_document(entry.name):
                return True
        return any(
            self.has_documents(entry)
            for entry in entries
            if entry.is_dir() and self.is_indexable_entry(entry)
        )

    def _is_excluded(self, path: Path) -> bool:
        return any(path.is_relative_to(prefix) for prefix in self._excluded)

    def _is_reserved_name(self, name: str) -> bool:
        """Check a top-level name; directories named after reserved documents count."""
        reserved = self.reserved_names
        return name in reserved or f"{name}{self._suffix}" in reserved
