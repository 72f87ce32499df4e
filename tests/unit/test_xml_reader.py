"""Unit tests for the XML reader."""

from pathlib import Path

import pytest

from arxport.analyzers.base import InvalidInputFile, MalformedXml
from arxport.analyzers.xml_reader import check_extension, read_input_file, read_xml
from arxport.models.element import QName
from tests.fixtures import get_sample_arxml

AUTOSAR_NS = "http://autosar.org/schema/r4.0"


class TestReadXml:
    """Tests for read_xml()."""

    def test_namespaced_tags_are_resolved(self) -> None:
        """Test that prefixes are replaced by the namespace URI."""
        data = (
            f'<ar:AUTOSAR xmlns:ar="{AUTOSAR_NS}">'
            "<ar:AR-PACKAGES/>"
            "</ar:AUTOSAR>"
        ).encode()

        root = read_xml(data)

        assert root.tag == QName(AUTOSAR_NS, "AUTOSAR")
        assert root.children[0].local_name == "AR-PACKAGES"
        assert root.children[0].namespace == AUTOSAR_NS

    def test_children_and_attributes_keep_document_order(self) -> None:
        """Test that order of children and attributes is preserved."""
        data = b'<root b="2" a="1"><z/><y/><x/></root>'

        root = read_xml(data)

        assert [child.local_name for child in root.children] == ["z", "y", "x"]
        assert root.attributes == (("b", "2"), ("a", "1"))
        assert root.get("a") == "1"
        assert root.get("missing") is None

    def test_text_is_stripped(self) -> None:
        """Test that whitespace-only text becomes None."""
        root = read_xml(b"<root>\n  <name>  Engine  </name>\n</root>")

        assert root.text is None
        assert root.child_text("name") == "Engine"

    def test_text_content_joins_nested_text(self) -> None:
        """Test that text_content collects descendants line by line."""
        root = read_xml(b"<DESC><L-2>First</L-2><L-2>Second</L-2></DESC>")

        assert root.text_content() == "First\nSecond"

    def test_deep_nesting_within_limit(self) -> None:
        """Test that a deep tree is converted with every level kept."""
        depth = 200
        root = read_xml(b"<a>" * depth + b"<leaf/>" + b"</a>" * depth)

        assert sum(1 for _ in root.iter()) == depth + 1
        assert list(root.iter())[-1].local_name == "leaf"

    def test_excessive_nesting_rejected(self) -> None:
        with pytest.raises(MalformedXml):
            read_xml(b"<a>" * 1000 + b"</a>" * 1000)

    def test_comments_are_dropped(self) -> None:
        """Test that comments never appear as children."""
        root = read_xml(b"<root><!-- note --><child/></root>")

        assert len(root.children) == 1

    def test_line_numbers_recorded(self) -> None:
        """Test that elements carry their source line."""
        root = read_xml(b"<root>\n<child/>\n</root>")

        assert root.line == 1
        assert root.children[0].line == 2

    def test_utf16_with_bom(self) -> None:
        """Test that BOM-marked UTF-16 input is accepted."""
        data = '<?xml version="1.0" encoding="UTF-16"?><root>Drehzahl</root>'.encode("utf-16")

        root = read_xml(data)

        assert root.text == "Drehzahl"

    def test_empty_input_rejected(self) -> None:
        """Test that empty bytes are malformed."""
        with pytest.raises(MalformedXml, match="empty"):
            read_xml(b"")

    def test_whitespace_input_rejected(self) -> None:
        """Test that whitespace-only input is malformed."""
        with pytest.raises(MalformedXml):
            read_xml(b"   \n  ")

    def test_truncated_document_rejected(self) -> None:
        """Test that a truncated document raises with a line number."""
        with pytest.raises(MalformedXml) as exc_info:
            read_xml(b"<root>\n<child>\n</root>")

        assert exc_info.value.line is not None
        assert exc_info.value.message.startswith("Malformed XML:")

    def test_external_entities_not_expanded(self) -> None:
        """Test that entity declarations cannot pull in local files."""
        data = (
            b'<?xml version="1.0"?>'
            b'<!DOCTYPE root [<!ENTITY secret SYSTEM "file:///etc/passwd">]>'
            b"<root>&secret;</root>"
        )

        root = read_xml(data)

        assert root.text is None
        assert root.children == ()


class TestInputFile:
    """Tests for the extension check and file reading."""

    @pytest.mark.parametrize("name", ["system.arxml", "SYSTEM.ARXML", "model.xml"])
    def test_supported_extensions(self, name: str) -> None:
        """Test that .arxml and .xml pass the pre-filter."""
        check_extension(name)

    @pytest.mark.parametrize("name", ["system.txt", "arxml", "system.arxml.bak"])
    def test_unsupported_extensions(self, name: str) -> None:
        """Test that other names are rejected."""
        with pytest.raises(InvalidInputFile, match="Please upload a valid ARXML file"):
            check_extension(name)

    def test_read_input_file(self, tmp_path: Path) -> None:
        """Test reading a whole file."""
        path = tmp_path / "system.arxml"
        path.write_bytes(b"<AUTOSAR/>")

        assert read_input_file(path) == b"<AUTOSAR/>"

    def test_read_missing_file(self, tmp_path: Path) -> None:
        """Test that an unreadable file is an invalid input."""
        with pytest.raises(InvalidInputFile, match="Cannot read"):
            read_input_file(tmp_path / "missing.arxml")

    def test_extension_checked_before_reading(self, tmp_path: Path) -> None:
        """Test that the extension check does not need the file."""
        with pytest.raises(InvalidInputFile) as exc_info:
            read_input_file(tmp_path / "missing.txt")

        assert exc_info.value.element == "missing.txt"

    def test_sample_text_file_rejected(self, arxml_dir: Path) -> None:
        """Test that a non-ARXML file next to the samples is refused."""
        notes = get_sample_arxml("notes.txt")

        assert notes.parent == arxml_dir
        with pytest.raises(InvalidInputFile):
            read_input_file(notes)

    def test_unknown_sample(self) -> None:
        with pytest.raises(ValueError, match="Sample ARXML not found"):
            get_sample_arxml("absent.arxml")
