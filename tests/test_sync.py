"""Tests for incremental index repair."""

from collections.abc import Callable
from pathlib import Path

import pytest
from wikitree.core.layout import ContentLayout
from wikitree.core.sync import IndexSynchronizer
from wikitree.core.title import TitleExtractor
from wikitree.core.tree import Group, IndexTree, Leaf, Link, Placeholder
from wikitree.core.types import NodeId


@pytest.fixture
def synchronizer(content_root: Path) -> IndexSynchronizer:
    return IndexSynchronizer(ContentLayout(content_root), TitleExtractor())


@pytest.fixture
def tree(synchronizer: IndexSynchronizer) -> IndexTree:
    return synchronizer.scanner.build()


class TestIndexSynchronizer:
    """Tests for IndexSynchronizer.synchronize()."""

    def test__unchanged_document__no_change(
        self, synchronizer: IndexSynchronizer, tree: IndexTree
    ) -> None:
        before = tree.ids()

        assert synchronizer.synchronize(tree, "subdir/child.html") is False
        assert tree.ids() == before

    def test__missing_unindexed_document__no_change(
        self, synchronizer: IndexSynchronizer, tree: IndexTree
    ) -> None:
        """A deleted document that was never indexed leaves the tree alone."""
        assert synchronizer.synchronize(tree, "never/existed.html") is False
        assert NodeId("/never") not in tree

    @pytest.mark.parametrize(
        "url_path",
        ["index.html", "wikitree/page.html", ".hidden/page.html", "subdir/.draft.html"],
    )
    def test__reserved__no_change(
        self,
        synchronizer: IndexSynchronizer,
        tree: IndexTree,
        content_root: Path,
        make_file: Callable[..., Path],
        url_path: str,
    ) -> None:
        make_file(content_root, url_path, "<title>Reserved</title>")

        assert synchronizer.synchronize(tree, url_path) is False

    def test__stops_at_first_unchanged_level(
        self,
        synchronizer: IndexSynchronizer,
        tree: IndexTree,
        content_root: Path,
        make_file: Callable[..., Path],
    ) -> None:
        """Leave ancestors alone once a level needs no change."""
        make_file(content_root, "subdir/new.html", "new")
        # stale root title, above the first unchanged level
        tree.replace(Group(NodeId("/"), Link(href="home.html", title="Stale")))

        assert synchronizer.synchronize(tree, "subdir/new.html") is True
        assert NodeId("/subdir/new") in tree
        assert tree.root.header == Link(href="home.html", title="Stale")

    def test__walks_up_while_levels_change(
        self,
        synchronizer: IndexSynchronizer,
        tree: IndexTree,
        content_root: Path,
    ) -> None:
        """Remove every group left without documents."""
        (content_root / "subdir" / "subsubdir" / "grandchild.html").unlink()
        (content_root / "subdir" / "child.html").unlink()
        (content_root / "subdir.html").unlink()

        assert synchronizer.synchronize(tree, "subdir/subsubdir/grandchild.html") is True

        assert tree.ids() == ["/"]

    def test__home__root_header_refreshed(
        self,
        synchronizer: IndexSynchronizer,
        tree: IndexTree,
        content_root: Path,
    ) -> None:
        (content_root / "home.html").write_text("<title>Start</title>")

        assert synchronizer.synchronize(tree, "home.html") is True
        assert tree.root.header == Link(href="home.html", title="Start")

    def test__home_deleted__root_keeps_name(
        self,
        synchronizer: IndexSynchronizer,
        tree: IndexTree,
        content_root: Path,
    ) -> None:
        (content_root / "home.html").write_text("<title>Start</title>")
        synchronizer.synchronize(tree, "home.html")
        (content_root / "home.html").unlink()

        assert synchronizer.synchronize(tree, "/home.html") is True
        assert tree.root.header == Link(href="home.html", title="home")

    def test__directory_document__group_with_existing_children(
        self,
        synchronizer: IndexSynchronizer,
        tree: IndexTree,
        content_root: Path,
        make_file: Callable[..., Path],
    ) -> None:
        """Pick up siblings already on disk when a leaf becomes a group."""
        make_file(content_root, "subdir/child/first.html", "first", mtime=1000)
        make_file(content_root, "subdir/child/second.html", "second", mtime=2000)

        assert synchronizer.synchronize(tree, "subdir/child/second.html") is True

        assert tree.children(NodeId("/subdir/child")) == [
            "/subdir/child/first",
            "/subdir/child/second",
        ]

    def test__group_to_leaf__stale_children_dropped(
        self,
        synchronizer: IndexSynchronizer,
        tree: IndexTree,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Drop children whose files vanished without their own repair."""
        tree.replace(Group(NodeId("/subdir/child"), Link(href="subdir/child.html", title="child")))
        tree.append(
            NodeId("/subdir/child"),
            Leaf(NodeId("/subdir/child/ghost"), Link(href="subdir/child/ghost.html", title="ghost")),
        )

        assert synchronizer.synchronize(tree, "subdir/child.html") is True

        assert tree.get(NodeId("/subdir/child")) == Leaf(
            NodeId("/subdir/child"), Link(href="subdir/child.html", title="child")
        )
        assert NodeId("/subdir/child/ghost") not in tree
        assert "Dropped stale entries under /subdir/child" in caplog.text

    def test__bare_directory_group__placeholder_header(
        self,
        synchronizer: IndexSynchronizer,
        tree: IndexTree,
        content_root: Path,
        make_file: Callable[..., Path],
    ) -> None:
        make_file(content_root, "notes/today.html", "today")

        assert synchronizer.synchronize(tree, "notes/today.html") is True

        assert tree.get(NodeId("/notes")) == Group(
            NodeId("/notes"), Placeholder(name="notes", href="notes.html")
        )
        assert tree.children(NodeId("/notes")) == ["/notes/today"]
