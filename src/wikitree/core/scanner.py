"""Directory scanning for index construction.

Builds index nodes from the content tree on disk. Used for the full
rebuild at startup and to discover the children of a directory that has
just become a group.
"""

import logging
from pathlib import Path

from wikitree.core.layout import ContentLayout
from wikitree.core.title import TitleExtractor
from wikitree.core.tree import Group, IndexTree, Leaf, Link, Placeholder
from wikitree.core.types import ROOT_ID, NodeId

logger = logging.getLogger(__name__)


class DirectoryScanner:
    """Creates index nodes for documents and qualifying directories.

    Within each directory entries are ordered by modification time, oldest
    first, with the name as a tie-breaker.
    """

    def __init__(self, layout: ContentLayout, title: TitleExtractor) -> None:
        self._layout = layout
        self._title = title

    def build(self) -> IndexTree:
        """Build a complete tree from the content root.

        Returns:
            New IndexTree rooted at the home document
        """
        tree = IndexTree(self.root_header())
        self.scan(tree, ROOT_ID)
        logger.info(f"Indexed {len(tree) - 1} entries under {self._layout.root}")
        return tree

    def root_header(self) -> Link:
        return Link(
            href=self._layout.home_name,
            title=self._title(self._layout.document_path(ROOT_ID)),
        )

    def header(self, node_id: NodeId) -> Link | Placeholder:
        """Header for a group: its document link, or a create placeholder."""
        document = self._layout.document_path(node_id)
        href = self._layout.href(node_id)
        if document.is_file():
            return Link(href=href, title=self._title(document))
        return Placeholder(name=self._layout.name(node_id), href=href)

    def node(self, node_id: NodeId) -> Leaf | Group | None:
        """Create the correctly shaped node for an id, without children.

        Returns:
            Group if the same-named directory holds documents, Leaf if only
            the document exists, None if the id is not indexable
        """
        if self._layout.has_documents(self._layout.directory_path(node_id)):
            return Group(node_id, self.header(node_id))
        document = self._layout.document_path(node_id)
        if document.is_file():
            return Leaf(node_id, Link(href=self._layout.href(node_id), title=self._title(document)))
        return None

    def scan(self, tree: IndexTree, group_id: NodeId) -> list[NodeId]:
        """Append nodes for the contents of a group's directory.

        Entries already present in the tree are left where they are.

        Args:
            tree: Tree to add to
            group_id: Id of an existing Group whose directory is scanned

        Returns:
            Ids added, in document order
        """
        added: list[NodeId] = []
        for entry in self._entries(self._layout.directory_path(group_id)):
            child_id = self._child_id(group_id, entry)
            if child_id in tree:
                continue
            if entry.is_dir():
                tree.append(group_id, Group(child_id, self.header(child_id)))
                added.append(child_id)
                added.extend(self.scan(tree, child_id))
            else:
                tree.append(
                    group_id,
                    Leaf(child_id, Link(href=self._layout.href(child_id), title=self._title(entry))),
                )
                added.append(child_id)
        return added

    def _entries(self, directory: Path) -> list[Path]:
        """Documents and qualifying directories, oldest first.

        A document is skipped when a qualifying directory of the same name
        exists; the directory's group carries it as its header.
        """
        layout = self._layout
        try:
            candidates = [entry for entry in directory.iterdir() if layout.is_indexable_entry(entry)]
        except OSError as e:
            logger.warning(f"Cannot list {directory}: {e}")
            return []

        directories = {
            entry.name for entry in candidates if entry.is_dir() and layout.has_documents(entry)
        }
        entries = [
            entry
            for entry in candidates
            if entry.name in directories
            or (
                entry.is_file()
                and layout.is_document(entry.name)
                and entry.name.removesuffix(layout.suffix) not in directories
            )
        ]
        return sorted(entries, key=lambda entry: (entry.stat().st_mtime, entry.name))

    def _child_id(self, group_id: NodeId, entry: Path) -> NodeId:
        stem = entry.name.removesuffix(self._layout.suffix) if entry.is_file() else entry.name
        prefix = "" if group_id == ROOT_ID else group_id
        return NodeId(f"{prefix}/{stem}")
