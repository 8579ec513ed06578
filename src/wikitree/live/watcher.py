"""Index repair for documents edited outside the content store.

Monitors the content root for document changes and runs the store's
synchronization pass for each changed document.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from watchfiles import Change, watch

if TYPE_CHECKING:
    from wikitree.store import ContentStore

logger = logging.getLogger(__name__)


class IndexWatcher:
    """Keeps the index in step with changes made directly on disk.

    Changes written through the store are already indexed; repeating the
    synchronization for them finds nothing to do.
    """

    def __init__(
        self,
        store: ContentStore,
        watch_patterns: list[str] | None = None,
        *,
        debounce: int = 1600,
    ) -> None:
        """Initialize the watcher.

        Args:
            store: Content store whose root is watched
            watch_patterns: Glob patterns to watch (default: all documents)
            debounce: Milliseconds to group changes before handling them
        """
        self._store = store
        self._root = store.root
        self._watch_patterns = watch_patterns or [f"*{store.layout.suffix}"]
        self._debounce = debounce
        self._stop_event = threading.Event()

    def run(self) -> None:
        """Watch until stop() is called or the process is interrupted."""
        logger.info(f"Watching {self._root} for document changes")
        for changes in watch(
            self._root,
            debounce=self._debounce,
            stop_event=self._stop_event,
        ):
            self.handle_changes(changes)

    def stop(self) -> None:
        self._stop_event.set()

    def handle_changes(self, changes: Iterable[tuple[Change, str]]) -> list[str]:
        """Synchronize the index for a batch of filesystem changes.

        Args:
            changes: (change type, absolute path) pairs as reported by watchfiles

        Returns:
            URL paths whose synchronization changed the index
        """
        updated: list[str] = []
        seen: set[str] = set()
        for _change_type, path_str in changes:
            path = Path(path_str)
            if not self._matches_patterns(path):
                continue

            url_path = self._to_url_path(path)
            if url_path in seen:
                continue
            seen.add(url_path)

            if self._store.synchronize(url_path):
                logger.info(f"Index updated for {url_path}")
                updated.append(url_path)
        return updated

    def _matches_patterns(self, path: Path) -> bool:
        """Check if a path is a watched document.

        Args:
            path: Path to check

        Returns:
            True if path matches any pattern and is not the index itself
        """
        try:
            relative = path.relative_to(self._root)
        except ValueError:
            return False

        if relative == Path(self._store.layout.index_name):
            return False

        return any(relative.match(pattern) for pattern in self._watch_patterns)

    def _to_url_path(self, file_path: Path) -> str:
        """Convert a file system path to a root-relative URL path.

        Args:
            file_path: Absolute file path

        Returns:
            URL path (e.g., "guide/setup.html")
        """
        return file_path.relative_to(self._root).as_posix()
