"""Generic XML element tree produced by the XML reader.

Tags are namespace-qualified so that later stages match AUTOSAR elements by
(namespace, local-name) regardless of the prefix chosen in the source file.
"""

from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(frozen=True)
class QName:
    """Namespace-qualified tag name.

    Attributes:
        namespace: Namespace URI (None for elements in no namespace)
        local: Local name (e.g., "SHORT-NAME")
    """

    namespace: str | None
    local: str

    @classmethod
    def parse(cls, tag: str) -> "QName":
        """Parse Clark notation ("{uri}local") into a QName."""
        if tag.startswith("{"):
            namespace, _, local = tag[1:].partition("}")
            return cls(namespace=namespace, local=local)
        return cls(namespace=None, local=tag)

    def __str__(self) -> str:
        if self.namespace:
            return f"{{{self.namespace}}}{self.local}"
        return self.local


@dataclass(frozen=True)
class Element:
    """Immutable XML element.

    Attributes:
        tag: Namespace-qualified tag
        attributes: (name, value) pairs in document order
        children: Child elements in document order
        text: Direct text content (own text plus children tails), stripped
        line: Source line number if known
    """

    tag: QName
    attributes: tuple[tuple[str, str], ...] = ()
    children: tuple["Element", ...] = ()
    text: str | None = None
    line: int | None = None

    @property
    def local_name(self) -> str:
        """Local part of the tag."""
        return self.tag.local

    @property
    def namespace(self) -> str | None:
        """Namespace URI of the tag."""
        return self.tag.namespace

    def get(self, name: str, default: str | None = None) -> str | None:
        """Return an attribute value by name."""
        for key, value in self.attributes:
            if key == name:
                return value
        return default

    def _matches(self, child: "Element", local: str) -> bool:
        return child.tag.local == local and child.tag.namespace == self.tag.namespace

    def child(self, local: str) -> "Element | None":
        """Return the first child with the given local name in this element's namespace."""
        for child in self.children:
            if self._matches(child, local):
                return child
        return None

    def children_named(self, *locals_: str) -> tuple["Element", ...]:
        """Return all children whose local name is one of the given names."""
        wanted = set(locals_)
        return tuple(
            child
            for child in self.children
            if child.tag.local in wanted and child.tag.namespace == self.tag.namespace
        )

    def child_text(self, local: str) -> str | None:
        """Return the stripped text of the first matching child, or None."""
        child = self.child(local)
        if child is None:
            return None
        return child.text

    def find(self, *path: str) -> "Element | None":
        """Descend through children by local names (first match at each step)."""
        current: Element | None = self
        for local in path:
            if current is None:
                return None
            current = current.child(local)
        return current

    def iter(self) -> Iterator["Element"]:
        """Iterate over this element and all descendants in document order."""
        stack: list[Element] = [self]
        while stack:
            element = stack.pop()
            yield element
            stack.extend(reversed(element.children))

    def iter_descendants(self) -> Iterator["Element"]:
        """Iterate over descendants only (document order)."""
        iterator = self.iter()
        next(iterator)
        yield from iterator

    def text_content(self) -> str:
        """Return all text of this subtree, one non-empty chunk per line."""
        return "\n".join(element.text for element in self.iter() if element.text)
