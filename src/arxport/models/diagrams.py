"""Derived artifacts handed to the export serializer.

- Interaction / SequenceDiagram: ordered component interaction steps
- StateNode / TransitionEdge / StateDiagram: resolved state-transition graph
- RequirementAnnotation: one row of the requirements table
- MermaidDiagram: textual encoding of either diagram kind

All are plain immutable values with no behavior beyond serialization.
"""

from dataclasses import dataclass
from typing import Any

from arxport.models.arxml import ShortNamePath


@dataclass(frozen=True)
class Interaction:
    """Single step of a sequence diagram.

    Attributes:
        index: Zero-based step number
        caller: Path of the component owning the runnable
        callee: Path of the connected component
        operation: Operation / data element / event name
        runnable: Path of the runnable issuing the access
        access: Access kind value (send, receive, call, ...)
        caller_port: Port used on the caller side
        callee_port: Port reached on the callee side
        connector: Connector through which the callee was reached
    """

    index: int
    caller: ShortNamePath
    callee: ShortNamePath
    operation: str
    runnable: ShortNamePath | None = None
    access: str | None = None
    caller_port: ShortNamePath | None = None
    callee_port: ShortNamePath | None = None
    connector: ShortNamePath | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "index": self.index,
            "caller": str(self.caller),
            "callee": str(self.callee),
            "operation": self.operation,
            "runnable": str(self.runnable) if self.runnable else None,
            "access": self.access,
            "caller_port": str(self.caller_port) if self.caller_port else None,
            "callee_port": str(self.callee_port) if self.callee_port else None,
            "connector": str(self.connector) if self.connector else None,
        }


@dataclass(frozen=True)
class SequenceDiagram:
    """Ordered interaction steps between components.

    Attributes:
        interactions: Steps ordered by index
        component: Target component, None for the whole model
        title: Diagram title
    """

    interactions: tuple[Interaction, ...] = ()
    component: ShortNamePath | None = None
    title: str = "Component Interactions"

    @property
    def participants(self) -> tuple[ShortNamePath, ...]:
        """Components in order of first appearance."""
        seen: dict[ShortNamePath, None] = {}
        for step in self.interactions:
            seen.setdefault(step.caller)
            seen.setdefault(step.callee)
        return tuple(seen)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "title": self.title,
            "component": str(self.component) if self.component else None,
            "participants": [str(p) for p in self.participants],
            "interactions": [step.to_dict() for step in self.interactions],
        }


@dataclass(frozen=True)
class StateNode:
    """State with every reference resolved.

    Attributes:
        name: State name
        path: State path
        initial: Whether this is the machine's initial state
        unreachable: No incoming transition and not initial
    """

    name: str
    path: ShortNamePath
    initial: bool = False
    unreachable: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "path": str(self.path),
            "initial": self.initial,
            "unreachable": self.unreachable,
        }


@dataclass(frozen=True)
class TransitionEdge:
    """Transition with endpoint and event names resolved."""

    source: str
    target: str
    event: str | None = None
    guard: str | None = None
    name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "source": self.source,
            "target": self.target,
            "event": self.event,
            "guard": self.guard,
        }


@dataclass(frozen=True)
class StateDiagram:
    """Canonical state-transition graph of one component.

    Attributes:
        name: State machine name
        path: State machine path
        component: Owning component path
        states: States in declaration order
        transitions: Transitions in declaration order
    """

    name: str
    path: ShortNamePath
    component: ShortNamePath
    states: tuple[StateNode, ...] = ()
    transitions: tuple[TransitionEdge, ...] = ()

    @property
    def initial(self) -> StateNode | None:
        for state in self.states:
            if state.initial:
                return state
        return None

    @property
    def unreachable_states(self) -> tuple[StateNode, ...]:
        return tuple(state for state in self.states if state.unreachable)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "path": str(self.path),
            "component": str(self.component),
            "states": [state.to_dict() for state in self.states],
            "transitions": [transition.to_dict() for transition in self.transitions],
        }


@dataclass(frozen=True)
class RequirementAnnotation:
    """Requirement extracted from the model.

    Attributes:
        id: Requirement identifier (auto-generated when the source has none)
        description: Requirement text
        owner: Path of the element the requirement is attached to
        source: Where it was found (sdg, element, text)
    """

    id: str
    description: str
    owner: ShortNamePath
    source: str = "sdg"

    def to_row(self) -> list[str]:
        """Row of the baseline requirements sheet."""
        return [self.id, self.description]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "description": self.description,
            "owner": str(self.owner),
            "source": self.source,
        }


@dataclass(frozen=True)
class MermaidDiagram:
    """Textual Mermaid encoding of a diagram.

    Attributes:
        mermaid: Mermaid source text
        node_count: Participants or states in the diagram
        title: Diagram title
    """

    mermaid: str
    node_count: int
    title: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "mermaid": self.mermaid,
            "node_count": self.node_count,
            "title": self.title,
        }
