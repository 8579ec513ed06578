"""File watching for documents edited directly on disk."""

from wikitree.live.watcher import IndexWatcher

__all__ = ["IndexWatcher"]
