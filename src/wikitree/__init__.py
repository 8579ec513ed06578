"""Wikitree - file-backed wiki content with a self-maintaining index."""

from wikitree.store import ContentStore

__all__ = ["ContentStore"]
