"""Incremental index repair.

Given one changed document, brings the node for that document and then
each of its ancestors back in line with the filesystem, stopping at the
first level that needs no change.

For each id the correct shape follows from the filesystem alone:

- Group if the same-named directory holds at least one document
  (header links the document if it exists, otherwise a create placeholder)
- Leaf if only the document exists
- absent otherwise
"""

import logging

from wikitree.core.layout import ContentLayout
from wikitree.core.scanner import DirectoryScanner
from wikitree.core.title import TitleExtractor
from wikitree.core.tree import Group, IndexTree, Leaf, Link, Placeholder
from wikitree.core.types import ROOT_ID, NodeId

logger = logging.getLogger(__name__)


class IndexSynchronizer:
    """Repairs the nodes affected by a single document change."""

    def __init__(self, layout: ContentLayout, title: TitleExtractor) -> None:
        self._layout = layout
        self._scanner = DirectoryScanner(layout, title)

    @property
    def scanner(self) -> DirectoryScanner:
        return self._scanner

    def synchronize(self, tree: IndexTree, url_path: str) -> bool:
        """Repair the tree after a change to one document.

        Walks from the document's id towards the root, one level at a time,
        until a level reports no change or the root has been checked.

        Args:
            tree: Tree to repair in place
            url_path: Root-relative path of the changed document

        Returns:
            True if the tree was modified
        """
        node_id = self._layout.to_id(url_path)
        if self._layout.is_reserved(node_id):
            return False

        changed = False
        pending: NodeId | None = node_id
        while pending is not None:
            if not self._sync_level(tree, pending):
                break
            changed = True
            pending = None if pending == ROOT_ID else self._layout.parent_id(pending)
        return changed

    def _sync_level(self, tree: IndexTree, node_id: NodeId) -> bool:
        if node_id not in tree:
            return self._insert(tree, node_id)
        if node_id == ROOT_ID:
            return self._refresh_root(tree)
        return self._repair(tree, node_id)

    def _insert(self, tree: IndexTree, node_id: NodeId) -> bool:
        """Add an absent node, creating any missing ancestors first."""
        if self._scanner.node(node_id) is None:
            return False

        missing = [node_id]
        ancestor = self._layout.parent_id(node_id)
        while ancestor not in tree:
            missing.append(ancestor)
            ancestor = self._layout.parent_id(ancestor)

        for missing_id in reversed(missing):
            parent_id = self._layout.parent_id(missing_id)
            parent = tree.get(parent_id)
            if isinstance(parent, Leaf):
                tree.replace(Group(parent_id, parent.link))
                added = self._scanner.scan(tree, parent_id)
                logger.debug(f"Promoted {parent_id} to a group with {len(added)} entries")
            if missing_id in tree:
                # discovered while scanning a new group
                continue

            node = self._scanner.node(missing_id)
            if node is None:
                node = Group(missing_id, self._scanner.header(missing_id))
            tree.append(parent_id, node)
            logger.debug(f"Added {missing_id} under {parent_id}")
            if isinstance(node, Group):
                self._scanner.scan(tree, missing_id)
        return True

    def _repair(self, tree: IndexTree, node_id: NodeId) -> bool:
        """Check an existing node's shape and header against the filesystem."""
        current = tree.get(node_id)
        expected = self._scanner.node(node_id)

        match current, expected:
            case _, None:
                removed = tree.remove(node_id)
                logger.debug(f"Removed {', '.join(removed)}")
                return True

            case Leaf(), Group(header=header):
                tree.replace(Group(node_id, header))
                added = self._scanner.scan(tree, node_id)
                logger.debug(f"Promoted {node_id} to a group with {len(added)} entries")
                return True

            case Group(), Leaf(link=link):
                dropped = tree.replace(Leaf(node_id, link))
                if dropped:
                    logger.warning(f"Dropped stale entries under {node_id}: {', '.join(dropped)}")
                logger.debug(f"Demoted {node_id} to a document")
                return True

            case Leaf(link=link), Leaf(link=expected_link):
                if link == expected_link:
                    return False
                tree.replace(Leaf(node_id, expected_link))
                logger.debug(f"Retitled {node_id} to {expected_link.title!r}")
                return True

            case Group(header=current_header), Group(header=header):
                if current_header == header:
                    return False
                return self._update_header(tree, node_id, header)

        return False

    def _update_header(self, tree: IndexTree, node_id: NodeId, header: Link | Placeholder) -> bool:
        """Replace a group header that no longer matches the filesystem.

        A placeholder becomes a title link once its document exists, and a
        title link becomes a placeholder once its document is deleted.
        """
        tree.replace(Group(node_id, header))
        logger.debug(f"Updated header of {node_id}")
        return True

    def _refresh_root(self, tree: IndexTree) -> bool:
        header = self._scanner.root_header()
        if tree.root.header == header:
            return False
        tree.replace(Group(ROOT_ID, header))
        return True
