"""Unit tests for the Mermaid encoder."""

import pytest

from arxport.analyzers.diagrams.mermaid import (
    MermaidGenerator,
    sequence_to_mermaid,
    state_to_mermaid,
)
from arxport.analyzers.diagrams.sequence import generate_sequence
from arxport.analyzers.diagrams.state import generate_state_diagram
from arxport.models.arxml import Model, ShortNamePath
from arxport.models.diagrams import (
    Interaction,
    SequenceDiagram,
    StateDiagram,
    StateNode,
    TransitionEdge,
)


def _path(text: str) -> ShortNamePath:
    return ShortNamePath.parse(text)


class TestSequenceEncoding:
    """Tests for MermaidGenerator.sequence_diagram()."""

    @pytest.fixture
    def generator(self) -> MermaidGenerator:
        """Create a Mermaid generator instance."""
        return MermaidGenerator()

    def test_speed_system(self, speed_model: Model) -> None:
        result = sequence_to_mermaid(generate_sequence(speed_model))

        assert result.mermaid == "\n".join(
            [
                "sequenceDiagram",
                "    %% Component Interactions",
                "    participant SpeedSensor",
                "    participant SpeedController",
                "    SpeedSensor->>SpeedController: VehicleSpeed",
                "    SpeedController->>SpeedSensor: VehicleSpeed",
            ]
        )
        assert result.node_count == 2
        assert result.title == "Component Interactions"

    def test_empty_diagram(self, generator: MermaidGenerator) -> None:
        result = generator.sequence_diagram(SequenceDiagram())

        assert result.mermaid.startswith("sequenceDiagram")
        assert result.node_count == 0

    def test_same_short_name_in_two_packages(self, generator: MermaidGenerator) -> None:
        """Test that participants sharing a name get distinct ids and full labels."""
        diagram = SequenceDiagram(
            interactions=(
                Interaction(
                    index=0,
                    caller=_path("/Front/Ctrl"),
                    callee=_path("/Rear/Ctrl"),
                    operation="Sync",
                ),
            )
        )

        lines = generator.sequence_diagram(diagram).mermaid.splitlines()

        assert "    participant Ctrl as /Front/Ctrl" in lines
        assert "    participant Rear_Ctrl as /Rear/Ctrl" in lines
        assert "    Ctrl->>Rear_Ctrl: Sync" in lines

    def test_label_escaping(self, generator: MermaidGenerator) -> None:
        diagram = SequenceDiagram(
            interactions=(
                Interaction(
                    index=0,
                    caller=_path("/P/A"),
                    callee=_path("/P/B"),
                    operation="Get;Speed #1:\nnow",
                ),
            )
        )

        lines = generator.sequence_diagram(diagram).mermaid.splitlines()

        assert lines[-1] == "    A->>B: Get,Speed 1 now"


class TestStateEncoding:
    """Tests for MermaidGenerator.state_diagram()."""

    @pytest.fixture
    def generator(self) -> MermaidGenerator:
        """Create a Mermaid generator instance."""
        return MermaidGenerator()

    def test_speed_controller(self, speed_model: Model) -> None:
        diagram = generate_state_diagram(speed_model, "/Components/SpeedController")

        result = state_to_mermaid(diagram)

        assert result.mermaid == "\n".join(
            [
                "stateDiagram-v2",
                "    %% SpeedController: ControllerModes",
                "    [*] --> Idle",
                "    Idle --> Running: SpeedReceived",
                "    Running --> Error: Watchdog [speed signal lost]",
                "    Error --> Idle",
                "    note right of Maintenance: unreachable",
            ]
        )
        assert result.node_count == 4

    def test_state_names_needing_ids(self, generator: MermaidGenerator) -> None:
        """Test that names that are not valid node ids get an alias."""
        machine = _path("/P/C/B/M")
        diagram = StateDiagram(
            name="M",
            path=machine,
            component=_path("/P/C"),
            states=(
                StateNode(name="1st-Stage", path=machine.child("1st-Stage"), initial=True),
                StateNode(name="end", path=machine.child("end")),
            ),
            transitions=(TransitionEdge(source="1st-Stage", target="end"),),
        )

        lines = generator.state_diagram(diagram).mermaid.splitlines()

        assert '    state "1st-Stage" as n0_1st_Stage' in lines
        assert '    state "end" as end_1' in lines
        assert "    [*] --> n0_1st_Stage" in lines
        assert "    n0_1st_Stage --> end_1" in lines
