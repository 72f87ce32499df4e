"""Unit tests for the sequence diagram generator."""

from collections.abc import Callable
from pathlib import Path

import pytest

from arxport.analyzers.base import NoInteractionsFound
from arxport.analyzers.diagrams.sequence import (
    ConnectorGraph,
    SequenceDiagramGenerator,
    generate_sequence,
)
from arxport.models.arxml import Model, ShortNamePath
from tests.fixtures.documents import (
    SPEED_INTERFACE,
    arxml,
    delegation_document,
    package,
    sender_component,
    two_component_document,
)

Build = Callable[..., Model]


@pytest.fixture
def generator() -> SequenceDiagramGenerator:
    """Create a sequence generator instance."""
    return SequenceDiagramGenerator()


class TestSequenceDiagramGenerator:
    """Tests for SequenceDiagramGenerator."""

    def test_two_components_single_step(
        self,
        generator: SequenceDiagramGenerator,
        two_component_model: Model,
    ) -> None:
        """Test that one runnable access over one connector is one step."""
        diagram = generator.generate(two_component_model)

        (step,) = diagram.interactions
        assert step.index == 0
        assert str(step.caller) == "/Components/A"
        assert str(step.callee) == "/Components/B"
        assert step.operation == "VehicleSpeed"
        assert step.access == "send"
        assert str(step.connector) == "/Components/System/AtoB"
        assert diagram.title == "Component Interactions"

    def test_steps_follow_runnable_then_component_order(
        self,
        generator: SequenceDiagramGenerator,
        speed_model: Model,
    ) -> None:
        diagram = generator.generate(speed_model)

        assert [(s.index, s.caller.name, s.callee.name) for s in diagram.interactions] == [
            (0, "SpeedSensor", "SpeedController"),
            (1, "SpeedController", "SpeedSensor"),
        ]
        assert [p.name for p in diagram.participants] == ["SpeedSensor", "SpeedController"]

    def test_output_is_deterministic(
        self,
        generator: SequenceDiagramGenerator,
        speed_system_path: Path,
        build: Build,
    ) -> None:
        """Test that building and generating twice gives equal diagrams."""
        first = generator.generate(build(speed_system_path.read_bytes()))
        second = generator.generate(build(speed_system_path.read_bytes()))

        assert first == second

    def test_target_component_filters_and_renumbers(
        self,
        generator: SequenceDiagramGenerator,
        speed_model: Model,
    ) -> None:
        diagram = generator.generate(speed_model, "/Components/SpeedController")

        assert diagram.component == ShortNamePath.parse("/Components/SpeedController")
        assert diagram.title == "Interactions of SpeedController"
        assert [s.index for s in diagram.interactions] == [0, 1]

    def test_target_receiver_only(
        self,
        generator: SequenceDiagramGenerator,
        two_component_model: Model,
    ) -> None:
        """Test that a component appearing only as callee keeps its steps."""
        diagram = generator.generate(two_component_model, ShortNamePath.parse("/Components/B"))

        assert len(diagram.interactions) == 1
        assert diagram.interactions[0].index == 0

    def test_no_connectors(self, generator: SequenceDiagramGenerator, build: Build) -> None:
        model = build(
            arxml(
                package("Interfaces", SPEED_INTERFACE),
                package("Components", sender_component("A")),
            )
        )

        with pytest.raises(NoInteractionsFound, match="declares no connectors"):
            generator.generate(model)

    def test_unknown_target(
        self,
        generator: SequenceDiagramGenerator,
        speed_model: Model,
    ) -> None:
        with pytest.raises(NoInteractionsFound, match="component not found") as exc_info:
            generator.generate(speed_model, "/Components/Missing")

        assert exc_info.value.path == "/Components/Missing"

    def test_target_without_connectors(
        self,
        generator: SequenceDiagramGenerator,
        speed_model: Model,
    ) -> None:
        """Test that a composition no connector touches is rejected."""
        with pytest.raises(NoInteractionsFound, match="no connector touches"):
            generator.generate(speed_model, "/Components/SpeedSystem")

    def test_connectors_without_accesses_warn(
        self,
        generator: SequenceDiagramGenerator,
        build: Build,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test that connectors with no accessing runnable give an empty diagram."""
        model = build(two_component_document(with_runnable=False))

        diagram = generator.generate(model)

        assert diagram.interactions == ()
        assert "no runnable accesses a connected port" in caplog.text

    def test_composition_ports_are_transparent(
        self,
        generator: SequenceDiagramGenerator,
        build: Build,
    ) -> None:
        """Test that delegation plus assembly reaches the component behind them."""
        model = build(delegation_document())

        (step,) = generator.generate(model).interactions

        assert str(step.caller) == "/Components/Sensor"
        assert str(step.callee) == "/Components/Controller"
        assert str(step.connector) == "/Components/Vehicle/ChassisToController"

    def test_convenience_function(self, two_component_model: Model) -> None:
        assert len(generate_sequence(two_component_model).interactions) == 1


class TestConnectorGraph:
    """Tests for ConnectorGraph."""

    def test_peers_in_both_directions(self, speed_model: Model) -> None:
        graph = ConnectorGraph(speed_model, speed_model.connectors())

        (provider_side,) = graph.peers(ShortNamePath.parse("/Components/SpeedSensor/SpeedOut"))
        (requester_side,) = graph.peers(ShortNamePath.parse("/Components/SpeedController/SpeedIn"))

        assert provider_side.port.name == "SpeedIn"
        assert requester_side.port.name == "SpeedOut"

    def test_unconnected_port(self, speed_model: Model) -> None:
        graph = ConnectorGraph(speed_model, speed_model.connectors())

        assert graph.peers(ShortNamePath.parse("/Components/Nowhere/Port")) == []
