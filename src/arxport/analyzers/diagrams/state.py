"""State diagram generation from behavior state machines."""

import logging

from arxport.analyzers.base import (
    ArtifactGenerator,
    InvalidStateMachine,
    NoStateMachineFound,
)
from arxport.models.arxml import Model, ShortNamePath, StateMachine
from arxport.models.diagrams import StateDiagram, StateNode, TransitionEdge

logger = logging.getLogger(__name__)


def diagram_from_machine(machine: StateMachine, component: ShortNamePath) -> StateDiagram:
    """Resolve a state machine into its canonical graph.

    The builder already enforces the invariants on parsed input; they are
    checked again here because a Model can also be constructed by hand.

    Args:
        machine: State machine to convert
        component: Owning component path

    Returns:
        StateDiagram with unreachable states flagged

    Raises:
        InvalidStateMachine: If the machine does not have exactly one initial
            state or a transition leaves the machine
    """
    initial = machine.initial_states
    if len(initial) != 1:
        raise InvalidStateMachine(
            str(machine.path),
            f"expected exactly one initial state, found {len(initial)}",
        )

    names = {state.path: state.name for state in machine.states}
    for transition in machine.transitions:
        for endpoint in (transition.source, transition.target):
            if endpoint not in names:
                raise InvalidStateMachine(
                    str(machine.path),
                    f"transition {transition.name} references {endpoint}, "
                    "which is not a state of this machine",
                )

    incoming = {transition.target for transition in machine.transitions}
    states = tuple(
        StateNode(
            name=state.name,
            path=state.path,
            initial=state.initial,
            unreachable=not state.initial and state.path not in incoming,
        )
        for state in machine.states
    )
    transitions = tuple(
        TransitionEdge(
            source=names[transition.source],
            target=names[transition.target],
            event=transition.event.name if transition.event is not None else None,
            guard=transition.guard,
            name=transition.name,
        )
        for transition in machine.transitions
    )

    diagram = StateDiagram(
        name=machine.name,
        path=machine.path,
        component=component,
        states=states,
        transitions=transitions,
    )
    for state in diagram.unreachable_states:
        logger.warning("State %s of %s is unreachable", state.name, machine.path)
    return diagram


class StateDiagramGenerator(ArtifactGenerator[tuple[StateDiagram, ...]]):
    """Generates state diagrams for one or every component."""

    def __init__(self) -> None:
        super().__init__("state")

    def generate_for(self, model: Model, component: ShortNamePath | str) -> StateDiagram:
        """Generate the state diagram of one component.

        Raises:
            NoStateMachineFound: If the component has no behavior state machine
            InvalidStateMachine: If the machine breaks its invariants
        """
        path = ShortNamePath.parse(component) if isinstance(component, str) else component

        found = model.component(path)
        if found is None:
            raise NoStateMachineFound(str(path), "component not found")
        behavior = found.internal_behavior
        if behavior is None:
            raise NoStateMachineFound(str(path), "component has no internal behavior")
        if behavior.state_machine is None:
            raise NoStateMachineFound(str(path), "internal behavior declares no state machine")

        diagram = diagram_from_machine(behavior.state_machine, found.path)
        logger.info(
            "Generated state diagram %s: %d states, %d transitions",
            diagram.name,
            len(diagram.states),
            len(diagram.transitions),
        )
        return diagram

    def generate(
        self,
        model: Model,
        component: ShortNamePath | str | None = None,
    ) -> tuple[StateDiagram, ...]:
        """Generate state diagrams.

        Args:
            model: Resolved model
            component: Single component to export, or None for every
                component owning a state machine

        Returns:
            Diagrams in package-tree order

        Raises:
            NoStateMachineFound: If no state machine exists in scope
        """
        if component is not None:
            return (self.generate_for(model, component),)

        diagrams = tuple(
            self.generate_for(model, found.path)
            for found in model.components()
            if found.internal_behavior is not None
            and found.internal_behavior.state_machine is not None
        )
        if not diagrams:
            raise NoStateMachineFound(reason="no component declares a state machine")
        return diagrams


def generate_state_diagram(model: Model, component: ShortNamePath | str) -> StateDiagram:
    """Generate the state diagram of one component.

    Convenience function for state diagram generation.
    """
    return StateDiagramGenerator().generate_for(model, component)


def generate_state_diagrams(model: Model) -> tuple[StateDiagram, ...]:
    """Generate state diagrams for every component owning a state machine."""
    return StateDiagramGenerator().generate(model)
