"""Core type definitions."""

from typing import Literal, NewType

# Index node key: URL path without the document suffix (e.g., "/guide", "/a/b")
# The home document is the tree root "/"
NodeId = NewType("NodeId", str)

# Slash-delimited path of a file under the content root (e.g., "a/b.html")
URLPath = NewType("URLPath", str)

Direction = Literal["up", "down"]

ROOT_ID = NodeId("/")
