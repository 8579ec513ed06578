"""Index artifact serialization.

The index is persisted as an HTML document of nested disclosure widgets:

    <details>
      <summary id="/group"><a href="group.html">Title</a></summary>
      <div id="/group/leaf"><a href="group/leaf.html">Title</a></div>
    </details>

Groups without a document show the directory name and a create link:

    <summary id="/dir">
      dir<a class="new-page" href="dir.html">+</a>
    </summary>

The output is well-formed XML so it can be parsed back with ElementTree.
"""

import logging
from pathlib import Path
from xml.etree import ElementTree as ET

from wikitree.core.errors import MalformedIndex
from wikitree.core.tree import Group, IndexTree, Leaf, Link, Placeholder
from wikitree.core.types import ROOT_ID, NodeId

logger = logging.getLogger(__name__)

DOCTYPE = "<!DOCTYPE html>"
NEW_PAGE_CLASS = "new-page"
NEW_PAGE_TEXT = "+"

# Emitted by an older serializer; not well-formed, so dropped before parsing
LEGACY_META_LINE = '<META http-equiv="Content-Type" content="text/html; charset=UTF-8">'


class IndexPersistence:
    """Reads and writes the index artifact for one content root."""

    def __init__(
        self,
        path: Path,
        *,
        stylesheets: tuple[str, ...] = ("wikitree/wikitree.css", "style.css"),
    ) -> None:
        """Initialize persistence.

        Args:
            path: Location of the index artifact
            stylesheets: Stylesheet hrefs linked from the artifact head
        """
        self._path = path
        self._stylesheets = stylesheets

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def write(self, tree: IndexTree) -> None:
        """Replace the artifact with a serialization of the tree.

        The new content is written to a sibling file first and renamed over
        the artifact, so readers never see a partial index.
        """
        content = self.render(tree)
        temporary = self._path.with_name(f".{self._path.name}.tmp")
        temporary.write_text(content, encoding="utf-8")
        temporary.replace(self._path)
        logger.info(f"Wrote index {self._path} ({len(tree)} entries)")

    def render(self, tree: IndexTree) -> str:
        """Serialize the tree to the artifact text."""
        html = ET.Element("html")
        head = ET.SubElement(html, "head")
        ET.SubElement(head, "meta", {"http-equiv": "content-type", "content": "text/html; charset=UTF-8"})
        ET.SubElement(head, "meta", {"name": "viewport", "content": "width=device-width, initial-scale=1"})
        ET.SubElement(head, "base", {"target": "_top"})
        ET.SubElement(head, "title").text = "Index"
        for href in self._stylesheets:
            ET.SubElement(head, "link", {"rel": "stylesheet", "href": href, "type": "text/css"})
        body = ET.SubElement(html, "body", {"class": "resource index"})

        root = self._render_group(body, tree, tree.root)
        root.set("open", "true")

        ET.indent(html, space="  ")
        for summary in body.iter("summary"):
            anchor = summary.find("a")
            if anchor is not None and anchor.get("class") == NEW_PAGE_CLASS:
                # the anchor tail holds the summary's own indentation
                summary.text = f"{anchor.tail}  {summary.text}"
        markup = ET.tostring(html, encoding="unicode", short_empty_elements=False)
        return f"{DOCTYPE}\n{markup}\n"

    def load(self) -> IndexTree:
        """Parse the artifact into a tree.

        Returns:
            Parsed IndexTree

        Raises:
            MalformedIndex: If the artifact is unreadable or doesn't describe a valid tree
        """
        try:
            text = self._path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise MalformedIndex(f"Cannot read index {self._path}: {e}") from e
        return self.parse(text)

    def parse(self, text: str) -> IndexTree:
        """Parse artifact text into a tree.

        Raises:
            MalformedIndex: If the text is not a valid index document
        """
        lines = [line for line in text.splitlines() if line.strip() != LEGACY_META_LINE]
        try:
            html = ET.fromstring("\n".join(lines))
        except ET.ParseError as e:
            raise MalformedIndex(f"Index is not well-formed: {e}") from e

        body = html.find("body")
        details = body.find("details") if body is not None else None
        if details is None:
            raise MalformedIndex("Index has no root <details> element")

        summary, children = self._split_group(details)
        if summary.get("id") != ROOT_ID:
            raise MalformedIndex(f"Index root id must be {ROOT_ID!r}")
        header = self._parse_header(summary)
        if not isinstance(header, Link):
            raise MalformedIndex("Index root must link the home document")

        tree = IndexTree(header)
        self._parse_children(tree, ROOT_ID, children)
        return tree

    def _render_group(self, parent: ET.Element, tree: IndexTree, group: Group) -> ET.Element:
        details = ET.SubElement(parent, "details")
        summary = ET.SubElement(details, "summary", {"id": group.id})
        match group.header:
            case Link(href=href, title=title):
                ET.SubElement(summary, "a", {"href": href}).text = title
            case Placeholder(name=name, href=href):
                summary.text = name
                ET.SubElement(summary, "a", {"class": NEW_PAGE_CLASS, "href": href}).text = NEW_PAGE_TEXT

        for child_id in tree.children(group.id):
            match tree.get(child_id):
                case Group() as child:
                    self._render_group(details, tree, child)
                case Leaf(id=leaf_id, link=link):
                    div = ET.SubElement(details, "div", {"id": leaf_id})
                    ET.SubElement(div, "a", {"href": link.href}).text = link.title
        return details

    def _split_group(self, details: ET.Element) -> tuple[ET.Element, list[ET.Element]]:
        elements = list(details)
        if not elements or elements[0].tag != "summary":
            raise MalformedIndex("<details> element must start with a <summary>")
        return elements[0], elements[1:]

    def _parse_header(self, summary: ET.Element) -> Link | Placeholder:
        anchor = summary.find("a")
        if anchor is None or anchor.get("href") is None:
            raise MalformedIndex(f"Header of {summary.get('id')} has no link")
        href = anchor.get("href", "")
        if anchor.get("class") == NEW_PAGE_CLASS:
            return Placeholder(name=(summary.text or "").strip(), href=href)
        return Link(href=href, title="".join(anchor.itertext()).strip())

    def _parse_children(self, tree: IndexTree, parent_id: NodeId, elements: list[ET.Element]) -> None:
        for element in elements:
            if element.tag == "details":
                summary, children = self._split_group(element)
                node_id = self._node_id(tree, summary)
                tree.append(parent_id, Group(node_id, self._parse_header(summary)))
                self._parse_children(tree, node_id, children)
            elif element.tag == "div":
                node_id = self._node_id(tree, element)
                header = self._parse_header(element)
                if not isinstance(header, Link):
                    raise MalformedIndex(f"Entry {node_id} must link a document")
                tree.append(parent_id, Leaf(node_id, header))
            else:
                logger.warning(f"Ignoring unexpected <{element.tag}> element in index")

    def _node_id(self, tree: IndexTree, element: ET.Element) -> NodeId:
        raw = element.get("id")
        if not raw or not raw.startswith("/"):
            raise MalformedIndex(f"Invalid index id: {raw!r}")
        node_id = NodeId(raw)
        if node_id in tree:
            raise MalformedIndex(f"Duplicate index id: {node_id}")
        return node_id
