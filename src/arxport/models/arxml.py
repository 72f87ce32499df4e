"""Typed ARXML domain model.

This module contains the immutable entities produced by the model builder:
- ShortNamePath: hierarchical AUTOSAR identifier
- Package: AR-PACKAGE tree node
- SoftwareComponent, Port, Interface, DataType
- InternalBehavior, Runnable, Event, AccessPoint
- StateMachine, State, Transition
- ComponentPrototype, Connector
- OpaqueElement: unknown element kept verbatim
- Model: package tree plus flat path index

Every reference field holds a ShortNamePath that the builder has already
resolved against the index; use Model.get() to reach the entity.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Union

from arxport.models.element import Element


@dataclass(frozen=True, order=True)
class ShortNamePath:
    """Slash-delimited AUTOSAR short-name path (e.g., /Pkg/Comp/Port).

    Attributes:
        segments: Path segments from the root
    """

    segments: tuple[str, ...] = ()

    @classmethod
    def parse(cls, text: str, base: "ShortNamePath | None" = None) -> "ShortNamePath":
        """Parse a reference string.

        Absolute references start with "/". Relative ones are appended to base.

        Args:
            text: Reference text
            base: Base path for relative references

        Returns:
            Parsed path
        """
        text = text.strip()
        parts = tuple(part for part in text.split("/") if part)
        if text.startswith("/") or base is None:
            return cls(parts)
        return cls(base.segments + parts)

    @property
    def name(self) -> str:
        """Last segment (the element's short name)."""
        return self.segments[-1] if self.segments else ""

    @property
    def parent(self) -> "ShortNamePath":
        """Path of the enclosing element."""
        return ShortNamePath(self.segments[:-1])

    @property
    def is_root(self) -> bool:
        return not self.segments

    def child(self, name: str) -> "ShortNamePath":
        """Return the path of a direct child."""
        return ShortNamePath(self.segments + (name,))

    def is_within(self, other: "ShortNamePath") -> bool:
        """Return True if this path equals or lies below other."""
        return self.segments[: len(other.segments)] == other.segments

    def __str__(self) -> str:
        return "/" + "/".join(self.segments)


def _path_str(path: ShortNamePath | None) -> str | None:
    return str(path) if path is not None else None


@dataclass(frozen=True)
class Annotation:
    """Description or admin data attached to an entity.

    Attributes:
        source: Originating element (DESC, INTRODUCTION, SDG)
        text: Plain text content
        label: SDG group identifier (GID) when source is SDG
        fields: (GID, value) pairs of the SDG's SD children
    """

    source: str
    text: str = ""
    label: str | None = None
    fields: tuple[tuple[str, str], ...] = ()

    def value(self, gid: str) -> str | None:
        """Return an SD value by GID (case-insensitive)."""
        wanted = gid.casefold()
        for key, value in self.fields:
            if key.casefold() == wanted:
                return value
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        result: dict[str, Any] = {"source": self.source, "text": self.text}
        if self.label:
            result["label"] = self.label
        if self.fields:
            result["fields"] = dict(self.fields)
        return result


@dataclass(frozen=True)
class OpaqueElement:
    """Unknown or unsupported element preserved as a pass-through node.

    Attributes:
        tag: Local tag name
        element: The original element subtree
        path: Short-name path if the element is named
        annotations: Descriptions found on the element
        references: Resolved references found anywhere in the subtree
    """

    tag: str
    element: Element
    path: ShortNamePath | None = None
    annotations: tuple[Annotation, ...] = ()
    references: tuple[ShortNamePath, ...] = ()

    @property
    def name(self) -> str | None:
        return self.path.name if self.path else None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "tag": self.tag,
            "path": _path_str(self.path),
            "references": [str(ref) for ref in self.references],
        }


class PortDirection(Enum):
    """Direction of a port prototype."""

    PROVIDED = "provided"
    REQUIRED = "required"


class AccessKind(Enum):
    """How a runnable touches a port."""

    SEND = "send"
    RECEIVE = "receive"
    READ = "read"
    WRITE = "write"
    CALL = "call"
    MODE_SWITCH = "mode_switch"


class ConnectorKind(Enum):
    """Kind of SW connector."""

    ASSEMBLY = "assembly"
    DELEGATION = "delegation"


@dataclass(frozen=True)
class InterfaceMember:
    """Data element, operation or mode group declared by an interface."""

    name: str
    path: ShortNamePath
    kind: str
    annotations: tuple[Annotation, ...] = ()
    extras: tuple[OpaqueElement, ...] = ()


@dataclass(frozen=True)
class Interface:
    """Port interface (sender-receiver, client-server, ...).

    Attributes:
        name: Short name
        path: Short-name path
        kind: Local tag (e.g., "SENDER-RECEIVER-INTERFACE")
        members: Declared data elements / operations in document order
    """

    name: str
    path: ShortNamePath
    kind: str
    members: tuple[InterfaceMember, ...] = ()
    annotations: tuple[Annotation, ...] = ()
    extras: tuple[OpaqueElement, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "path": str(self.path),
            "kind": self.kind,
            "members": [member.name for member in self.members],
        }


@dataclass(frozen=True)
class DataType:
    """Application or implementation data type."""

    name: str
    path: ShortNamePath
    kind: str
    category: str | None = None
    annotations: tuple[Annotation, ...] = ()
    extras: tuple[OpaqueElement, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "path": str(self.path),
            "kind": self.kind,
            "category": self.category,
        }


@dataclass(frozen=True)
class Port:
    """Port prototype on a software component type.

    Attributes:
        name: Short name
        path: Short-name path (child of the owning component)
        direction: Provided or required
        interface: Path of the resolved port interface
        component: Path of the owning component
    """

    name: str
    path: ShortNamePath
    direction: PortDirection
    interface: ShortNamePath
    component: ShortNamePath
    annotations: tuple[Annotation, ...] = ()
    extras: tuple[OpaqueElement, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "path": str(self.path),
            "direction": self.direction.value,
            "interface": str(self.interface),
        }


@dataclass(frozen=True)
class Event:
    """RTE event that triggers a runnable.

    Attributes:
        name: Short name
        path: Short-name path
        kind: Local tag (e.g., "TIMING-EVENT")
        runnable: Path of the runnable this event starts, if any
    """

    name: str
    path: ShortNamePath
    kind: str
    runnable: ShortNamePath | None = None
    annotations: tuple[Annotation, ...] = ()
    extras: tuple[OpaqueElement, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "path": str(self.path),
            "kind": self.kind,
            "runnable": _path_str(self.runnable),
        }


@dataclass(frozen=True)
class AccessPoint:
    """A runnable's access to a port (data send/receive, server call, ...).

    Attributes:
        name: Short name of the access point
        kind: Access kind
        port: Path of the accessed port
        target: Path of the accessed data element / operation, if given
    """

    name: str
    kind: AccessKind
    port: ShortNamePath
    target: ShortNamePath | None = None

    @property
    def operation(self) -> str:
        """Operation or data element name used as the interaction label."""
        return self.target.name if self.target is not None else self.name

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "kind": self.kind.value,
            "port": str(self.port),
            "target": _path_str(self.target),
        }


@dataclass(frozen=True)
class Runnable:
    """Schedulable unit of behavior.

    Attributes:
        name: Short name
        path: Short-name path
        events: Paths of the events that trigger this runnable
        access_points: Port accesses in declaration order
    """

    name: str
    path: ShortNamePath
    events: tuple[ShortNamePath, ...] = ()
    access_points: tuple[AccessPoint, ...] = ()
    annotations: tuple[Annotation, ...] = ()
    extras: tuple[OpaqueElement, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "path": str(self.path),
            "events": [str(event) for event in self.events],
            "access_points": [ap.to_dict() for ap in self.access_points],
        }


@dataclass(frozen=True)
class State:
    """State of a behavior state machine."""

    name: str
    path: ShortNamePath
    initial: bool = False
    annotations: tuple[Annotation, ...] = ()
    extras: tuple[OpaqueElement, ...] = ()


@dataclass(frozen=True)
class Transition:
    """Transition between two states of the same machine.

    Attributes:
        name: Short name (derived from endpoints if the element has none)
        source: Path of the source state
        target: Path of the target state
        event: Path of the triggering event, if any
        guard: Opaque guard expression
        path: Short-name path when the transition is named
    """

    name: str
    source: ShortNamePath
    target: ShortNamePath
    event: ShortNamePath | None = None
    guard: str | None = None
    path: ShortNamePath | None = None
    annotations: tuple[Annotation, ...] = ()
    extras: tuple[OpaqueElement, ...] = ()


@dataclass(frozen=True)
class StateMachine:
    """Behavior state machine of a component."""

    name: str
    path: ShortNamePath
    states: tuple[State, ...] = ()
    transitions: tuple[Transition, ...] = ()
    annotations: tuple[Annotation, ...] = ()
    extras: tuple[OpaqueElement, ...] = ()

    @property
    def initial_states(self) -> tuple[State, ...]:
        return tuple(state for state in self.states if state.initial)

    def state(self, path: ShortNamePath) -> State | None:
        """Look up a state by path."""
        for state in self.states:
            if state.path == path:
                return state
        return None


@dataclass(frozen=True)
class InternalBehavior:
    """Implementation-level description of a component's behavior.

    Attributes:
        name: Short name
        path: Short-name path
        component: Path of the owning component
        events: RTE events in declaration order
        runnables: Runnables in declaration order
        state_machine: Optional behavior state machine
    """

    name: str
    path: ShortNamePath
    component: ShortNamePath
    events: tuple[Event, ...] = ()
    runnables: tuple[Runnable, ...] = ()
    state_machine: StateMachine | None = None
    annotations: tuple[Annotation, ...] = ()
    extras: tuple[OpaqueElement, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "path": str(self.path),
            "events": [event.to_dict() for event in self.events],
            "runnables": [runnable.to_dict() for runnable in self.runnables],
            "state_machine": _path_str(self.state_machine.path) if self.state_machine else None,
        }


@dataclass(frozen=True)
class ComponentPrototype:
    """Instance of a component type inside a composition."""

    name: str
    path: ShortNamePath
    type: ShortNamePath
    annotations: tuple[Annotation, ...] = ()
    extras: tuple[OpaqueElement, ...] = ()


@dataclass(frozen=True)
class Connector:
    """Link between a provided and a required port.

    For delegation connectors one side is the composition's outer port.

    Attributes:
        name: Short name
        path: Short-name path
        kind: Assembly or delegation
        composition: Path of the composition declaring the connector
        provider_component: Component type owning the provided port
        provider_port: Path of the provided port
        requester_component: Component type owning the required port
        requester_port: Path of the required port
    """

    name: str
    path: ShortNamePath
    kind: ConnectorKind
    composition: ShortNamePath
    provider_component: ShortNamePath
    provider_port: ShortNamePath
    requester_component: ShortNamePath
    requester_port: ShortNamePath
    annotations: tuple[Annotation, ...] = ()
    extras: tuple[OpaqueElement, ...] = ()

    def touches(self, component: ShortNamePath) -> bool:
        """Return True if either side belongs to the component."""
        return component in (self.provider_component, self.requester_component)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "path": str(self.path),
            "kind": self.kind.value,
            "provider": str(self.provider_port),
            "requester": str(self.requester_port),
        }


@dataclass(frozen=True)
class SoftwareComponent:
    """Software component type.

    Attributes:
        name: Short name
        path: Short-name path
        kind: Local tag (e.g., "APPLICATION-SW-COMPONENT-TYPE")
        ports: Ports in declaration order
        internal_behavior: Optional internal behavior
        prototypes: Sub-component instances (compositions only)
        connectors: Connectors declared by the composition
    """

    name: str
    path: ShortNamePath
    kind: str
    ports: tuple[Port, ...] = ()
    internal_behavior: InternalBehavior | None = None
    prototypes: tuple[ComponentPrototype, ...] = ()
    connectors: tuple[Connector, ...] = ()
    annotations: tuple[Annotation, ...] = ()
    extras: tuple[OpaqueElement, ...] = ()

    @property
    def is_composition(self) -> bool:
        return self.kind == "COMPOSITION-SW-COMPONENT-TYPE" or bool(self.prototypes)

    def port(self, name: str) -> Port | None:
        """Look up a port by short name."""
        for port in self.ports:
            if port.name == name:
                return port
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "path": str(self.path),
            "kind": self.kind,
            "ports": [port.to_dict() for port in self.ports],
            "internal_behavior": (
                self.internal_behavior.to_dict() if self.internal_behavior else None
            ),
            "prototypes": [str(proto.path) for proto in self.prototypes],
            "connectors": [connector.to_dict() for connector in self.connectors],
        }


PackageElement = Union[SoftwareComponent, Interface, DataType, OpaqueElement]


@dataclass(frozen=True)
class Package:
    """AR-PACKAGE tree node (split packages already merged)."""

    name: str
    path: ShortNamePath
    packages: tuple["Package", ...] = ()
    elements: tuple[PackageElement, ...] = ()
    annotations: tuple[Annotation, ...] = ()
    extras: tuple[OpaqueElement, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "path": str(self.path),
            "packages": [package.to_dict() for package in self.packages],
            "elements": [
                str(element.path) for element in self.elements if element.path is not None
            ],
        }


Entity = Union[
    Package,
    SoftwareComponent,
    Interface,
    InterfaceMember,
    DataType,
    Port,
    InternalBehavior,
    Event,
    Runnable,
    StateMachine,
    State,
    Transition,
    ComponentPrototype,
    Connector,
    OpaqueElement,
]


def _empty_index() -> Mapping[ShortNamePath, Entity]:
    return MappingProxyType({})


@dataclass(frozen=True)
class Model:
    """Resolved ARXML model: package tree plus flat path index.

    Attributes:
        packages: Top-level packages
        index: Read-only mapping of path to entity, in document order
        external_references: References accepted as living in other files
        source_name: Name of the file the model was built from
    """

    packages: tuple[Package, ...] = ()
    index: Mapping[ShortNamePath, Entity] = field(default_factory=_empty_index)
    external_references: tuple[ShortNamePath, ...] = ()
    source_name: str | None = None

    def get(self, path: ShortNamePath | str) -> Entity | None:
        """Look up an entity by path."""
        if isinstance(path, str):
            path = ShortNamePath.parse(path)
        return self.index.get(path)

    def entities(self) -> Iterator[Entity]:
        """Iterate over all indexed entities in document order."""
        return iter(self.index.values())

    def components(self) -> tuple[SoftwareComponent, ...]:
        """Return all component types in package-tree order.

        A package lists its own components before those of its sub-packages.
        The parts of a split package are merged at the position of the first
        part, so this can differ from document order. Only the indexed
        definition of a duplicated path is returned.
        """
        found: list[SoftwareComponent] = []
        stack = list(reversed(self.packages))
        while stack:
            package = stack.pop()
            found.extend(
                element
                for element in package.elements
                if isinstance(element, SoftwareComponent)
                and self.index.get(element.path) is element
            )
            stack.extend(reversed(package.packages))
        return tuple(found)

    def component(self, path: ShortNamePath | str) -> SoftwareComponent | None:
        """Look up a component type by path."""
        entity = self.get(path)
        return entity if isinstance(entity, SoftwareComponent) else None

    def connectors(self) -> tuple[Connector, ...]:
        """Return all connectors in document order."""
        return tuple(
            connector for component in self.components() for connector in component.connectors
        )

    def summary(self) -> dict[str, int]:
        """Count entities by category."""
        counts = {
            "packages": 0,
            "components": 0,
            "interfaces": 0,
            "data_types": 0,
            "ports": 0,
            "connectors": 0,
            "runnables": 0,
            "events": 0,
            "state_machines": 0,
            "opaque_elements": 0,
        }
        keys = {
            Package: "packages",
            SoftwareComponent: "components",
            Interface: "interfaces",
            DataType: "data_types",
            Port: "ports",
            Connector: "connectors",
            Runnable: "runnables",
            Event: "events",
            StateMachine: "state_machines",
            OpaqueElement: "opaque_elements",
        }
        for entity in self.index.values():
            key = keys.get(type(entity))
            if key:
                counts[key] += 1
        counts["external_references"] = len(self.external_references)
        return counts

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "source_name": self.source_name,
            "packages": [package.to_dict() for package in self.packages],
            "summary": self.summary(),
            "external_references": [str(ref) for ref in self.external_references],
        }
