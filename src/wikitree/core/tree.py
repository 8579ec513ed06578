"""Navigation tree for the content index.

The tree is an arena of nodes keyed by id, with parent and ordered
children references tracked beside the nodes rather than inside them.
Nodes are immutable values; shape changes replace the node under its id.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import cast

from wikitree.core.types import ROOT_ID, Direction, NodeId


@dataclass(frozen=True)
class Link:
    """Link to an existing document."""

    href: str
    title: str


@dataclass(frozen=True)
class Placeholder:
    """Group header for a directory without a document of its own.

    Shows the directory name next to a link that would create the document.
    """

    name: str
    href: str


@dataclass(frozen=True)
class Leaf:
    """Document with no qualifying sibling directory."""

    id: NodeId
    link: Link


@dataclass(frozen=True)
class Group:
    """Document with a qualifying same-named directory, or a bare directory."""

    id: NodeId
    header: Link | Placeholder


Node = Leaf | Group


class IndexTree:
    """Ordered forest of index nodes under a single root group.

    The root group has id "/" and links the home document. Every other
    node has exactly one parent, which is always a Group.
    """

    __slots__ = ("_children", "_nodes", "_parents")

    def __init__(self, root_header: Link) -> None:
        """Initialize tree with only the root group.

        Args:
            root_header: Link to the home document
        """
        self._nodes: dict[NodeId, Node] = {ROOT_ID: Group(ROOT_ID, root_header)}
        self._parents: dict[NodeId, NodeId | None] = {ROOT_ID: None}
        self._children: dict[NodeId, list[NodeId]] = {ROOT_ID: []}

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    @property
    def root(self) -> Group:
        return cast(Group, self._nodes[ROOT_ID])

    def get(self, node_id: NodeId) -> Node | None:
        """Get node by id, None if absent."""
        return self._nodes.get(node_id)

    def parent(self, node_id: NodeId) -> NodeId | None:
        """Get the parent id of a node, None for the root or unknown ids."""
        return self._parents.get(node_id)

    def children(self, node_id: NodeId) -> list[NodeId]:
        """Get ordered child ids of a group; empty for leaves and unknown ids."""
        return list(self._children.get(node_id, ()))

    def ids(self) -> list[NodeId]:
        """All node ids in document order (pre-order traversal)."""
        result: list[NodeId] = []
        stack = [ROOT_ID]
        while stack:
            node_id = stack.pop()
            result.append(node_id)
            stack.extend(reversed(self._children.get(node_id, ())))
        return result

    def copy(self) -> IndexTree:
        """Return an independent copy that can be mutated without affecting this tree."""
        clone = IndexTree.__new__(IndexTree)
        clone._nodes = dict(self._nodes)
        clone._parents = dict(self._parents)
        clone._children = {node_id: list(ids) for node_id, ids in self._children.items()}
        return clone

    def append(self, parent_id: NodeId, node: Node) -> None:
        """Append a node as the last child of a group.

        Raises:
            KeyError: If the parent is unknown
            ValueError: If the parent is not a Group or the id is already used
        """
        parent = self._nodes[parent_id]
        if not isinstance(parent, Group):
            raise ValueError(f"Cannot add {node.id} under leaf {parent_id}")
        if node.id in self._nodes:
            raise ValueError(f"Duplicate index id: {node.id}")
        self._nodes[node.id] = node
        self._parents[node.id] = parent_id
        self._children[parent_id].append(node.id)
        if isinstance(node, Group):
            self._children[node.id] = []

    def replace(self, node: Node) -> list[NodeId]:
        """Replace the node stored under node.id, keeping its position.

        Replacing a Group by a Leaf discards the children container and
        the subtrees under it.

        Returns:
            Ids removed along with the discarded children
        """
        current = self._nodes[node.id]
        removed: list[NodeId] = []
        if isinstance(current, Group) and isinstance(node, Leaf):
            for child_id in list(self._children[node.id]):
                removed.extend(self._discard(child_id))
            del self._children[node.id]
        elif isinstance(current, Leaf) and isinstance(node, Group):
            self._children[node.id] = []
        self._nodes[node.id] = node
        return removed

    def remove(self, node_id: NodeId) -> list[NodeId]:
        """Remove a node and its whole subtree from the tree.

        Returns:
            Removed ids, the node itself first

        Raises:
            ValueError: If asked to remove the root
        """
        if node_id == ROOT_ID:
            raise ValueError("The index root can't be removed")
        parent_id = cast(NodeId, self._parents[node_id])  # only the root has no parent
        self._children[parent_id].remove(node_id)
        return self._discard(node_id)

    def swap(self, node_id: NodeId, direction: Direction) -> bool:
        """Swap a node with its previous or next sibling.

        A group's header is not one of its children, so the first child can't
        move up and the last child can't move down; nodes never change parent.

        Returns:
            True if the node was moved
        """
        parent_id = self._parents.get(node_id)
        if parent_id is None:
            return False
        siblings = self._children[parent_id]
        index = siblings.index(node_id)
        other = index - 1 if direction == "up" else index + 1
        if other < 0 or other >= len(siblings):
            return False
        siblings[index], siblings[other] = siblings[other], siblings[index]
        return True

    def _discard(self, node_id: NodeId) -> list[NodeId]:
        """Forget a detached subtree."""
        removed: list[NodeId] = []
        stack = [node_id]
        while stack:
            current = stack.pop()
            removed.append(current)
            stack.extend(self._children.pop(current, ()))
            del self._nodes[current]
            del self._parents[current]
        return removed
