"""XML reader: raw bytes to an immutable Element tree.

Uses lxml with entity expansion and network access disabled, and keeps
libxml2's default nesting limit (256 levels). The whole document is parsed
before any Element is built, so a failure never yields a partial tree.
"""

import logging
from collections.abc import Iterator
from pathlib import Path

from lxml import etree

from arxport.analyzers.base import InvalidInputFile, MalformedXml
from arxport.models.element import Element, QName

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".arxml", ".xml")


def _make_parser() -> etree.XMLParser:
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        remove_comments=True,
        remove_pis=True,
    )


def _direct_text(node: etree._Element) -> str | None:
    """Join the element's own text and the tails of its children."""
    chunks = [node.text or ""]
    for child in node:
        chunks.append(child.tail or "")
    text = "".join(chunks).strip()
    return text or None


def _convert(root: etree._Element) -> Element:
    # Explicit stack of (node, remaining children, converted children)
    stack: list[tuple[etree._Element, Iterator[etree._Element], list[Element]]] = [
        (root, iter(root), [])
    ]
    while True:
        node, pending, converted = stack[-1]
        child = next(pending, None)
        if child is not None:
            # Skip entity references and anything else that is not an element
            if isinstance(child.tag, str):
                stack.append((child, iter(child), []))
            continue

        stack.pop()
        element = Element(
            tag=QName.parse(node.tag),
            attributes=tuple((str(key), str(value)) for key, value in node.attrib.items()),
            children=tuple(converted),
            text=_direct_text(node),
            line=node.sourceline,
        )
        if not stack:
            return element
        stack[-1][2].append(element)


def read_xml(data: bytes) -> Element:
    """Parse XML bytes into an Element tree.

    Namespace prefixes are resolved to URIs; document order of children and
    attributes is preserved. UTF-8 and BOM-marked UTF-16 input are accepted.

    Args:
        data: Whole-file content

    Returns:
        Root Element

    Raises:
        MalformedXml: On empty, truncated, badly encoded, ill-formed or
            too deeply nested input
    """
    if not data or not data.strip():
        raise MalformedXml("document is empty")

    try:
        root = etree.fromstring(data, _make_parser())
    except etree.XMLSyntaxError as e:
        raise MalformedXml(e.msg or str(e), line=e.lineno) from e
    except ValueError as e:
        raise MalformedXml(str(e)) from e

    element = _convert(root)
    logger.debug("Parsed XML root %s", element.tag)
    return element


def check_extension(filename: str) -> None:
    """Reject files that are not named *.arxml or *.xml.

    This is only a pre-filter; the content is still validated by read_xml.

    Raises:
        InvalidInputFile: If the extension is not supported
    """
    if not filename.lower().endswith(SUPPORTED_EXTENSIONS):
        raise InvalidInputFile(filename)


def read_input_file(path: Path) -> bytes:
    """Read a whole ARXML file after checking its extension.

    Args:
        path: File to read

    Returns:
        File content

    Raises:
        InvalidInputFile: If the extension is wrong or the file cannot be read
    """
    check_extension(path.name)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise InvalidInputFile(str(path), f"Cannot read {path}: {e.strerror or e}") from e
    logger.debug("Read %d bytes from %s", len(data), path)
    return data
