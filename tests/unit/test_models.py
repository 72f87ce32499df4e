"""Unit tests for core models."""

from datetime import UTC

import pytest

from arxport.models import (
    Annotation,
    Element,
    ExportError,
    ExportResult,
    ExportStatus,
    Interaction,
    QName,
    RequirementAnnotation,
    SequenceDiagram,
    ShortNamePath,
    StateDiagram,
)
from arxport.models.diagrams import StateNode

NS = "http://autosar.org/schema/r4.0"


def _p(text: str) -> ShortNamePath:
    return ShortNamePath.parse(text)


class TestQName:
    """Tests for QName."""

    def test_parse_clark_notation(self) -> None:
        qname = QName.parse(f"{{{NS}}}SHORT-NAME")

        assert qname.namespace == NS
        assert qname.local == "SHORT-NAME"
        assert str(qname) == f"{{{NS}}}SHORT-NAME"

    def test_parse_without_namespace(self) -> None:
        qname = QName.parse("AUTOSAR")

        assert qname.namespace is None
        assert str(qname) == "AUTOSAR"


class TestElement:
    """Tests for Element navigation."""

    @pytest.fixture
    def element(self) -> Element:
        """Build a small SWC element with a foreign-namespace child."""
        return Element(
            tag=QName(NS, "APPLICATION-SW-COMPONENT-TYPE"),
            attributes=(("UUID", "abc"),),
            children=(
                Element(tag=QName(NS, "SHORT-NAME"), text="Ctrl"),
                Element(tag=QName("urn:vendor", "SHORT-NAME"), text="Other"),
                Element(
                    tag=QName(NS, "PORTS"),
                    children=(
                        Element(
                            tag=QName(NS, "R-PORT-PROTOTYPE"),
                            children=(Element(tag=QName(NS, "SHORT-NAME"), text="In"),),
                        ),
                    ),
                ),
            ),
        )

    def test_attribute_lookup(self, element: Element) -> None:
        assert element.get("UUID") == "abc"
        assert element.get("T", "default") == "default"

    def test_child_matches_own_namespace(self, element: Element) -> None:
        """Test that children in another namespace are not matched."""
        assert element.child_text("SHORT-NAME") == "Ctrl"
        assert len(element.children_named("SHORT-NAME")) == 1

    def test_find_path(self, element: Element) -> None:
        found = element.find("PORTS", "R-PORT-PROTOTYPE", "SHORT-NAME")

        assert found is not None and found.text == "In"
        assert element.find("PORTS", "P-PORT-PROTOTYPE", "SHORT-NAME") is None

    def test_iter_document_order(self, element: Element) -> None:
        names = [e.local_name for e in element.iter_descendants()]

        assert names == [
            "SHORT-NAME",
            "SHORT-NAME",
            "PORTS",
            "R-PORT-PROTOTYPE",
            "SHORT-NAME",
        ]

    def test_text_content(self, element: Element) -> None:
        assert element.text_content() == "Ctrl\nOther\nIn"


class TestAnnotation:
    """Tests for Annotation."""

    def test_value_case_insensitive(self) -> None:
        annotation = Annotation(
            source="SDG",
            label="REQUIREMENT",
            fields=(("ID", "REQ-1"), ("Description", "Text")),
        )

        assert annotation.value("id") == "REQ-1"
        assert annotation.value("DESCRIPTION") == "Text"
        assert annotation.value("missing") is None

    def test_to_dict_omits_empty(self) -> None:
        assert Annotation(source="DESC", text="Plain").to_dict() == {
            "source": "DESC",
            "text": "Plain",
        }


class TestDiagramModels:
    """Tests for derived diagram values."""

    def test_participants_in_first_appearance_order(self) -> None:
        diagram = SequenceDiagram(
            interactions=(
                Interaction(index=0, caller=_p("/P/B"), callee=_p("/P/A"), operation="x"),
                Interaction(index=1, caller=_p("/P/A"), callee=_p("/P/C"), operation="y"),
            )
        )

        assert diagram.participants == (_p("/P/B"), _p("/P/A"), _p("/P/C"))

    def test_interaction_to_dict(self) -> None:
        step = Interaction(
            index=0,
            caller=_p("/P/A"),
            callee=_p("/P/B"),
            operation="Speed",
            runnable=_p("/P/A/Beh/Run"),
            access="send",
        )

        data = step.to_dict()

        assert data["caller"] == "/P/A"
        assert data["runnable"] == "/P/A/Beh/Run"
        assert data["connector"] is None

    def test_state_diagram_properties(self) -> None:
        machine = _p("/P/C/B/M")
        diagram = StateDiagram(
            name="M",
            path=machine,
            component=_p("/P/C"),
            states=(
                StateNode(name="Off", path=machine.child("Off"), initial=True),
                StateNode(name="Lost", path=machine.child("Lost"), unreachable=True),
            ),
        )

        assert diagram.initial is not None and diagram.initial.name == "Off"
        assert [s.name for s in diagram.unreachable_states] == ["Lost"]
        assert diagram.to_dict()["states"][1]["unreachable"] is True

    def test_state_diagram_without_initial(self) -> None:
        diagram = StateDiagram(name="M", path=_p("/P/M"), component=_p("/P"))

        assert diagram.initial is None

    def test_requirement_row(self) -> None:
        requirement = RequirementAnnotation(
            id="REQ-1", description="Shall start", owner=_p("/P/C"), source="text"
        )

        assert requirement.to_row() == ["REQ-1", "Shall start"]
        assert requirement.to_dict() == {
            "id": "REQ-1",
            "description": "Shall start",
            "owner": "/P/C",
            "source": "text",
        }


class TestExportResult:
    """Tests for ExportResult."""

    def test_defaults(self) -> None:
        result = ExportResult(source_name="model.arxml")

        assert result.status == ExportStatus.PENDING
        assert result.timestamp.tzinfo == UTC
        assert result.produced == []
        assert result.has_errors() is False

    def test_produced_counts_empty_artifacts(self) -> None:
        """Test that an empty requirements table still counts as produced."""
        result = ExportResult(source_name="m.arxml", requirements=())

        assert result.produced == ["requirements"]

    def test_errors_by_component(self) -> None:
        result = ExportResult(source_name="m.arxml")
        result.add_error(ExportError(component="state", kind="NoStateMachineFound", message="x"))
        result.add_error(ExportError(component="sequence", kind="NoInteractionsFound", message="y"))

        assert result.has_errors() is True
        assert [e.kind for e in result.get_errors_by_component("state")] == [
            "NoStateMachineFound"
        ]

    def test_to_dict(self) -> None:
        result = ExportResult(
            source_name="m.arxml",
            status=ExportStatus.PARTIAL,
            requested=["sequence", "state"],
            sequence=SequenceDiagram(),
        )
        result.add_error(
            ExportError(component="state", kind="NoStateMachineFound", message="none")
        )

        data = result.to_dict()

        assert data["status"] == "partial"
        assert data["produced"] == ["sequence"]
        assert data["state_diagrams"] is None
        assert data["requirements"] is None
        assert data["errors"] == [
            {
                "component": "state",
                "kind": "NoStateMachineFound",
                "message": "none",
                "path": None,
                "recoverable": True,
            }
        ]
