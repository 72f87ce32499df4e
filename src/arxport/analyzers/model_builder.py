"""ARXML model builder: generic Element tree to typed Model.

The builder works in two passes over the same tree:

1. Index: every element carrying a SHORT-NAME gets its short-name path
   recorded. Nothing is resolved yet, so forward references (an element
   referencing a sibling defined later in the document) are legal.
2. Resolve: every *-REF / *-TREF in the document is resolved against the
   completed index, then the typed entities are materialized (ports with
   their interfaces, connectors, event -> runnable links, state machine
   endpoints).

Unknown or unsupported elements become OpaqueElement nodes on their owner,
so data from schema variants the builder does not understand is kept.
"""

import logging
from collections.abc import Iterable, Iterator
from types import MappingProxyType

from arxport.analyzers import schema
from arxport.analyzers.base import StructuralViolation, UnresolvedReference
from arxport.config import ArxportConfig
from arxport.models.arxml import (
    AccessKind,
    AccessPoint,
    Annotation,
    ComponentPrototype,
    Connector,
    ConnectorKind,
    DataType,
    Entity,
    Event,
    Interface,
    InterfaceMember,
    InternalBehavior,
    Model,
    OpaqueElement,
    Package,
    PackageElement,
    Port,
    PortDirection,
    Runnable,
    ShortNamePath,
    SoftwareComponent,
    State,
    StateMachine,
    Transition,
)
from arxport.models.element import Element

logger = logging.getLogger(__name__)

ROOT_PATH = ShortNamePath()

# Port reference tag -> expected port element
_PORT_REF_KINDS = {
    schema.TARGET_P_PORT_REF: frozenset({"P-PORT-PROTOTYPE"}),
    schema.TARGET_R_PORT_REF: frozenset({"R-PORT-PROTOTYPE"}),
}
_ANY_PORT = frozenset(schema.PORT_TAGS)


# =============================================================================
# Annotation helpers
# =============================================================================


def _sdg_annotations(sdg: Element) -> Iterator[Annotation]:
    fields = tuple(
        (sd.get(schema.GID) or "", sd.text or "") for sd in sdg.children_named(schema.SD)
    )
    yield Annotation(
        source=schema.SDG,
        text="\n".join(value for _, value in fields if value),
        label=sdg.get(schema.GID),
        fields=fields,
    )
    for nested in sdg.children_named(schema.SDG):
        yield from _sdg_annotations(nested)


def collect_annotations(element: Element) -> tuple[Annotation, ...]:
    """Collect DESC, INTRODUCTION and ADMIN-DATA special data of an element.

    Args:
        element: Element whose direct documentation children are read

    Returns:
        Annotations in document order
    """
    annotations: list[Annotation] = []
    for child in element.children_named(schema.DESC, schema.INTRODUCTION):
        text = child.text_content()
        if text:
            annotations.append(Annotation(source=child.local_name, text=text))

    admin = element.child(schema.ADMIN_DATA)
    if admin is not None:
        for sdgs in admin.children_named(schema.SDGS):
            for sdg in sdgs.children_named(schema.SDG):
                annotations.extend(_sdg_annotations(sdg))

    return tuple(annotations)


def _first_descendant(element: Element, tags: Iterable[str]) -> Element | None:
    wanted = set(tags)
    for descendant in element.iter_descendants():
        if descendant.local_name in wanted:
            return descendant
    return None


def _path_str(path: ShortNamePath | None) -> str | None:
    return str(path) if path is not None else None


# =============================================================================
# Builder
# =============================================================================


class _ModelBuild:
    """State of a single build. Not reusable."""

    def __init__(
        self,
        root: Element,
        external_prefixes: tuple[ShortNamePath, ...],
        source_name: str | None,
    ) -> None:
        self._root = root
        self._external_prefixes = external_prefixes
        self._source_name = source_name

        # Pass 1 output, insertion order is document order
        self._elements: dict[ShortNamePath, list[Element]] = {}
        self._ambiguous: set[ShortNamePath] = set()

        # Pass 2 output
        self._entities: dict[ShortNamePath, Entity] = {}
        self._external: dict[ShortNamePath, None] = {}

    # -------------------------------------------------------------------------
    # Entry point
    # -------------------------------------------------------------------------

    def run(self) -> Model:
        root = self._root
        if root.local_name != schema.ROOT or not schema.is_autosar(root):
            raise StructuralViolation(
                f"root element is {root.local_name}, expected {schema.ROOT}"
            )

        self._index(root)
        logger.debug("Indexed %d short-name paths", len(self._elements))

        self._check_references(root)

        packages = tuple(
            self._build_package(path)
            for path in self._child_package_paths([root], ROOT_PATH)
        )

        ordered = {
            path: self._entities[path] for path in self._elements if path in self._entities
        }
        model = Model(
            packages=packages,
            index=MappingProxyType(ordered),
            external_references=tuple(self._external),
            source_name=self._source_name,
        )

        summary = model.summary()
        logger.info(
            "Built model: %d packages, %d components, %d connectors, %d runnables",
            summary["packages"],
            summary["components"],
            summary["connectors"],
            summary["runnables"],
        )
        if summary["opaque_elements"]:
            logger.debug("Kept %d unsupported named elements", summary["opaque_elements"])
        return model

    # -------------------------------------------------------------------------
    # Pass 1: index
    # -------------------------------------------------------------------------

    def _index(self, root: Element) -> None:
        stack: list[tuple[Element, ShortNamePath]] = [(root, ROOT_PATH)]
        while stack:
            element, parent_path = stack.pop()
            path = parent_path
            name_element = element.child(schema.SHORT_NAME)
            if name_element is not None and element is not self._root:
                if not name_element.text:
                    raise StructuralViolation(
                        f"{element.local_name} has an empty {schema.SHORT_NAME}",
                        path=str(parent_path),
                    )
                path = parent_path.child(name_element.text)
                existing = self._elements.get(path)
                if existing is None:
                    self._elements[path] = [element]
                else:
                    existing.append(element)
                    # Split packages merge; any other duplicate is ambiguous
                    split_package = all(
                        item.local_name == schema.AR_PACKAGE for item in existing
                    )
                    if not split_package:
                        self._ambiguous.add(path)

            stack.extend((child, path) for child in reversed(element.children))

    # -------------------------------------------------------------------------
    # Pass 2: resolution
    # -------------------------------------------------------------------------

    def _is_external(self, path: ShortNamePath) -> bool:
        return any(path.is_within(prefix) for prefix in self._external_prefixes)

    def _resolve(
        self,
        ref: Element,
        base: ShortNamePath,
        referrer: ShortNamePath | None,
        kinds: frozenset[str] | None = None,
    ) -> ShortNamePath:
        """Resolve a reference element against the index.

        Args:
            ref: The *-REF / *-TREF element
            base: Package path used for relative references
            referrer: Nearest named element containing the reference
            kinds: Accepted local tags of the target (None accepts anything)

        Returns:
            The resolved path

        Raises:
            UnresolvedReference: If the path is unknown or ambiguous
            StructuralViolation: If the target has the wrong kind
        """
        if not ref.text:
            raise StructuralViolation(f"{ref.local_name} is empty", path=_path_str(referrer))

        path = ShortNamePath.parse(ref.text, base)
        found = self._elements.get(path)

        if not found:
            if self._is_external(path):
                self._external.setdefault(path)
                return path
            raise UnresolvedReference(str(path), referrer=_path_str(referrer))

        if path in self._ambiguous:
            raise UnresolvedReference(
                str(path),
                referrer=_path_str(referrer),
                reason=f"{len(found)} elements share this path",
            )

        if kinds is not None and found[0].local_name not in kinds:
            raise StructuralViolation(
                f"{ref.local_name} {path} points to {found[0].local_name}, "
                f"expected {', '.join(sorted(kinds))}",
                path=_path_str(referrer),
            )

        return path

    def _check_references(self, root: Element) -> None:
        """Resolve every reference in the document, in document order."""
        stack: list[tuple[Element, ShortNamePath, ShortNamePath]] = [
            (root, ROOT_PATH, ROOT_PATH)
        ]
        while stack:
            element, path, package = stack.pop()
            name = element.child_text(schema.SHORT_NAME)
            if name and element is not self._root:
                path = path.child(name)
                if element.local_name == schema.AR_PACKAGE:
                    package = path

            if schema.is_reference(element):
                self._resolve(element, package, referrer=path)

            stack.extend((child, path, package) for child in reversed(element.children))

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _require_path(self, element: Element, parent: ShortNamePath) -> ShortNamePath:
        name = element.child_text(schema.SHORT_NAME)
        if not name:
            raise StructuralViolation(
                f"{element.local_name} has no {schema.SHORT_NAME}",
                path=str(parent),
            )
        return parent.child(name)

    def _register(self, path: ShortNamePath, entity: Entity) -> None:
        if path in self._entities:
            logger.warning("Duplicate short-name path %s; keeping first definition", path)
            return
        self._entities[path] = entity

    def _opaque(
        self,
        element: Element,
        parent: ShortNamePath,
        package: ShortNamePath,
    ) -> OpaqueElement:
        name = element.child_text(schema.SHORT_NAME)
        path = parent.child(name) if name else None
        referrer = path or parent
        references = tuple(
            self._resolve(ref, package, referrer)
            for ref in element.iter()
            if schema.is_reference(ref)
        )
        opaque = OpaqueElement(
            tag=element.local_name,
            element=element,
            path=path,
            annotations=collect_annotations(element),
            references=references,
        )
        if path is not None:
            self._register(path, opaque)
        logger.debug("Keeping unsupported element %s under %s", element.local_name, parent)
        return opaque

    def _extras(
        self,
        element: Element,
        known: Iterable[str],
        parent: ShortNamePath,
        package: ShortNamePath,
    ) -> tuple[OpaqueElement, ...]:
        """Wrap every child that is neither known nor documentation."""
        skip = set(known) | schema.DOCUMENTATION_TAGS | {schema.SHORT_NAME}
        return tuple(
            self._opaque(child, parent, package)
            for child in element.children
            if child.local_name not in skip or not schema.is_autosar(child)
        )

    # -------------------------------------------------------------------------
    # Packages
    # -------------------------------------------------------------------------

    def _child_package_paths(
        self,
        parts: list[Element],
        parent: ShortNamePath,
    ) -> list[ShortNamePath]:
        """Paths of sub-packages across all parts of a (split) package."""
        paths: dict[ShortNamePath, None] = {}
        for part in parts:
            for container in part.children_named(schema.AR_PACKAGES):
                for package in container.children_named(schema.AR_PACKAGE):
                    paths.setdefault(self._require_path(package, parent))
        return list(paths)

    def _build_package(self, path: ShortNamePath) -> Package:
        parts = self._elements[path]

        elements: list[PackageElement] = []
        annotations: list[Annotation] = []
        extras: list[OpaqueElement] = []

        for part in parts:
            annotations.extend(collect_annotations(part))
            for container in part.children_named(schema.ELEMENTS):
                for item in container.children:
                    elements.append(self._build_element(item, path))
            for container in part.children_named(schema.AR_PACKAGES):
                for child in container.children:
                    if child.local_name != schema.AR_PACKAGE:
                        extras.append(self._opaque(child, path, path))
            extras.extend(
                self._extras(part, {schema.ELEMENTS, schema.AR_PACKAGES}, path, path)
            )

        packages = tuple(
            self._build_package(sub_path)
            for sub_path in self._child_package_paths(parts, path)
        )

        package = Package(
            name=path.name,
            path=path,
            packages=packages,
            elements=tuple(elements),
            annotations=tuple(annotations),
            extras=tuple(extras),
        )
        self._register(path, package)
        return package

    def _build_element(self, element: Element, package: ShortNamePath) -> PackageElement:
        tag = element.local_name
        if not schema.is_autosar(element):
            return self._opaque(element, package, package)
        if tag in schema.COMPONENT_TAGS:
            return self._build_component(element, package)
        if tag in schema.INTERFACE_TAGS:
            return self._build_interface(element, package)
        if tag in schema.DATA_TYPE_TAGS:
            return self._build_data_type(element, package)
        return self._opaque(element, package, package)

    # -------------------------------------------------------------------------
    # Interfaces and data types
    # -------------------------------------------------------------------------

    def _build_interface(self, element: Element, package: ShortNamePath) -> Interface:
        path = self._require_path(element, package)

        members: list[InterfaceMember] = []
        for container in element.children_named(*schema.INTERFACE_MEMBER_CONTAINERS):
            # MODE-GROUP is the member itself, the others wrap members
            candidates = (
                (container,)
                if container.child(schema.SHORT_NAME) is not None
                else container.children
            )
            for candidate in candidates:
                member_path = self._require_path(candidate, path)
                member = InterfaceMember(
                    name=member_path.name,
                    path=member_path,
                    kind=candidate.local_name,
                    annotations=collect_annotations(candidate),
                    extras=self._extras(candidate, {schema.TYPE_TREF}, member_path, package),
                )
                self._register(member_path, member)
                members.append(member)

        interface = Interface(
            name=path.name,
            path=path,
            kind=element.local_name,
            members=tuple(members),
            annotations=collect_annotations(element),
            extras=self._extras(element, schema.INTERFACE_MEMBER_CONTAINERS, path, package),
        )
        self._register(path, interface)
        return interface

    def _build_data_type(self, element: Element, package: ShortNamePath) -> DataType:
        path = self._require_path(element, package)
        data_type = DataType(
            name=path.name,
            path=path,
            kind=element.local_name,
            category=element.child_text("CATEGORY"),
            annotations=collect_annotations(element),
            extras=self._extras(element, (), path, package),
        )
        self._register(path, data_type)
        return data_type

    # -------------------------------------------------------------------------
    # Components
    # -------------------------------------------------------------------------

    def _build_component(self, element: Element, package: ShortNamePath) -> SoftwareComponent:
        path = self._require_path(element, package)
        extras: list[OpaqueElement] = []

        ports: list[Port] = []
        for container in element.children_named(schema.PORTS):
            for port_element in container.children:
                port_kind = schema.PORT_TAGS.get(port_element.local_name)
                if port_kind is None or not schema.is_autosar(port_element):
                    extras.append(self._opaque(port_element, path, package))
                    continue
                ports.append(self._build_port(port_element, path, package, port_kind))

        behaviors: list[Element] = []
        for container in element.children_named(schema.INTERNAL_BEHAVIORS):
            for behavior_element in container.children:
                if behavior_element.local_name in schema.BEHAVIOR_TAGS:
                    behaviors.append(behavior_element)
                else:
                    extras.append(self._opaque(behavior_element, path, package))
        if len(behaviors) > 1:
            raise StructuralViolation(
                f"component declares {len(behaviors)} internal behaviors, expected at most one",
                path=str(path),
            )
        behavior = (
            self._build_behavior(behaviors[0], path, package) if behaviors else None
        )

        prototypes: list[ComponentPrototype] = []
        for container in element.children_named(schema.COMPONENTS):
            for proto_element in container.children:
                if proto_element.local_name != schema.SW_COMPONENT_PROTOTYPE:
                    extras.append(self._opaque(proto_element, path, package))
                    continue
                prototypes.append(self._build_prototype(proto_element, path, package))

        connectors: list[Connector] = []
        for container in element.children_named(schema.CONNECTORS):
            for connector_element in container.children:
                tag = connector_element.local_name
                if tag == schema.ASSEMBLY_CONNECTOR:
                    connectors.append(self._build_assembly(connector_element, path, package))
                elif tag == schema.DELEGATION_CONNECTOR:
                    connectors.append(self._build_delegation(connector_element, path, package))
                else:
                    extras.append(self._opaque(connector_element, path, package))

        extras.extend(
            self._extras(
                element,
                {schema.PORTS, schema.INTERNAL_BEHAVIORS, schema.COMPONENTS, schema.CONNECTORS},
                path,
                package,
            )
        )

        component = SoftwareComponent(
            name=path.name,
            path=path,
            kind=element.local_name,
            ports=tuple(ports),
            internal_behavior=behavior,
            prototypes=tuple(prototypes),
            connectors=tuple(connectors),
            annotations=collect_annotations(element),
            extras=tuple(extras),
        )
        self._register(path, component)
        logger.debug(
            "Component %s: %d ports, %d connectors, behavior=%s",
            path,
            len(ports),
            len(connectors),
            behavior is not None,
        )
        return component

    def _build_port(
        self,
        element: Element,
        component: ShortNamePath,
        package: ShortNamePath,
        port_kind: tuple[PortDirection, str],
    ) -> Port:
        direction, interface_tag = port_kind
        path = self._require_path(element, component)

        ref = element.child(interface_tag)
        if ref is None or not ref.text:
            raise StructuralViolation(
                f"{element.local_name} has no {interface_tag}", path=str(path)
            )

        port = Port(
            name=path.name,
            path=path,
            direction=direction,
            interface=self._resolve(ref, package, path, schema.INTERFACE_TAGS),
            component=component,
            annotations=collect_annotations(element),
            extras=self._extras(element, {interface_tag}, path, package),
        )
        self._register(path, port)
        return port

    def _build_prototype(
        self,
        element: Element,
        composition: ShortNamePath,
        package: ShortNamePath,
    ) -> ComponentPrototype:
        path = self._require_path(element, composition)
        prototype = ComponentPrototype(
            name=path.name,
            path=path,
            type=self._prototype_type(path, package),
            annotations=collect_annotations(element),
            extras=self._extras(element, {schema.TYPE_TREF}, path, package),
        )
        self._register(path, prototype)
        return prototype

    def _prototype_type(self, prototype: ShortNamePath, package: ShortNamePath) -> ShortNamePath:
        """Component type of a prototype, read from its TYPE-TREF."""
        found = self._elements.get(prototype)
        if not found:
            raise StructuralViolation(
                "component prototype is defined outside this document", path=str(prototype)
            )
        type_ref = found[0].child(schema.TYPE_TREF)
        if type_ref is None or not type_ref.text:
            raise StructuralViolation(
                f"{schema.SW_COMPONENT_PROTOTYPE} has no {schema.TYPE_TREF}",
                path=str(prototype),
            )
        return self._resolve(type_ref, package, prototype, schema.COMPONENT_TAGS)

    # -------------------------------------------------------------------------
    # Connectors
    # -------------------------------------------------------------------------

    def _instance_port(
        self,
        iref: Element,
        port_tag: str,
        connector: ShortNamePath,
        package: ShortNamePath,
    ) -> tuple[ShortNamePath, ShortNamePath]:
        """Resolve a (context component, target port) instance reference.

        Returns:
            Tuple of (component type path, port path)
        """
        context = _first_descendant(iref, {schema.CONTEXT_COMPONENT_REF})
        port_ref = _first_descendant(iref, {port_tag})
        if context is None or port_ref is None:
            raise StructuralViolation(
                f"{iref.local_name} needs {schema.CONTEXT_COMPONENT_REF} and {port_tag}",
                path=str(connector),
            )

        prototype = self._resolve(
            context, package, connector, frozenset({schema.SW_COMPONENT_PROTOTYPE})
        )
        port = self._resolve(port_ref, package, connector, _PORT_REF_KINDS[port_tag])
        component = self._prototype_type(prototype, package)
        if port.parent != component:
            raise StructuralViolation(
                f"port {port} does not belong to {component}, the type of {prototype}",
                path=str(connector),
            )
        return component, port

    def _build_assembly(
        self,
        element: Element,
        composition: ShortNamePath,
        package: ShortNamePath,
    ) -> Connector:
        path = self._require_path(element, composition)
        provider = element.child(schema.PROVIDER_IREF)
        requester = element.child(schema.REQUESTER_IREF)
        if provider is None or requester is None:
            raise StructuralViolation(
                f"{element.local_name} needs {schema.PROVIDER_IREF} and {schema.REQUESTER_IREF}",
                path=str(path),
            )

        provider_component, provider_port = self._instance_port(
            provider, schema.TARGET_P_PORT_REF, path, package
        )
        requester_component, requester_port = self._instance_port(
            requester, schema.TARGET_R_PORT_REF, path, package
        )

        connector = Connector(
            name=path.name,
            path=path,
            kind=ConnectorKind.ASSEMBLY,
            composition=composition,
            provider_component=provider_component,
            provider_port=provider_port,
            requester_component=requester_component,
            requester_port=requester_port,
            annotations=collect_annotations(element),
            extras=self._extras(
                element, {schema.PROVIDER_IREF, schema.REQUESTER_IREF}, path, package
            ),
        )
        self._register(path, connector)
        return connector

    def _build_delegation(
        self,
        element: Element,
        composition: ShortNamePath,
        package: ShortNamePath,
    ) -> Connector:
        path = self._require_path(element, composition)
        inner = element.child(schema.INNER_PORT_IREF)
        outer = element.child(schema.OUTER_PORT_REF)
        if inner is None or outer is None:
            raise StructuralViolation(
                f"{element.local_name} needs {schema.INNER_PORT_IREF} and {schema.OUTER_PORT_REF}",
                path=str(path),
            )

        port_ref = _first_descendant(inner, _PORT_REF_KINDS)
        if port_ref is None:
            raise StructuralViolation(
                f"{schema.INNER_PORT_IREF} has no target port reference", path=str(path)
            )
        inner_component, inner_port = self._instance_port(
            inner, port_ref.local_name, path, package
        )

        outer_port = self._resolve(outer, package, path, _ANY_PORT)
        if outer_port.parent != composition:
            raise StructuralViolation(
                f"outer port {outer_port} does not belong to composition {composition}",
                path=str(path),
            )

        if port_ref.local_name == schema.TARGET_P_PORT_REF:
            provider = (inner_component, inner_port)
            requester = (composition, outer_port)
        else:
            provider = (composition, outer_port)
            requester = (inner_component, inner_port)

        connector = Connector(
            name=path.name,
            path=path,
            kind=ConnectorKind.DELEGATION,
            composition=composition,
            provider_component=provider[0],
            provider_port=provider[1],
            requester_component=requester[0],
            requester_port=requester[1],
            annotations=collect_annotations(element),
            extras=self._extras(
                element, {schema.INNER_PORT_IREF, schema.OUTER_PORT_REF}, path, package
            ),
        )
        self._register(path, connector)
        return connector

    # -------------------------------------------------------------------------
    # Internal behavior
    # -------------------------------------------------------------------------

    def _build_behavior(
        self,
        element: Element,
        component: ShortNamePath,
        package: ShortNamePath,
    ) -> InternalBehavior:
        path = self._require_path(element, component)
        extras: list[OpaqueElement] = []

        events: list[Event] = []
        for container in element.children_named(schema.EVENTS):
            for event_element in container.children:
                if event_element.local_name in schema.EVENT_TAGS:
                    events.append(self._build_event(event_element, path, package))
                else:
                    extras.append(self._opaque(event_element, path, package))

        runnables: list[Runnable] = []
        for container in element.children_named(schema.RUNNABLES):
            for runnable_element in container.children:
                if runnable_element.local_name == schema.RUNNABLE_ENTITY:
                    runnables.append(
                        self._build_runnable(runnable_element, path, package, events)
                    )
                else:
                    extras.append(self._opaque(runnable_element, path, package))

        machines = element.children_named(schema.STATE_MACHINE)
        if len(machines) > 1:
            raise StructuralViolation(
                f"internal behavior declares {len(machines)} state machines, expected at most one",
                path=str(path),
            )
        state_machine = (
            self._build_state_machine(machines[0], path, package) if machines else None
        )

        extras.extend(
            self._extras(
                element,
                {schema.EVENTS, schema.RUNNABLES, schema.STATE_MACHINE},
                path,
                package,
            )
        )

        behavior = InternalBehavior(
            name=path.name,
            path=path,
            component=component,
            events=tuple(events),
            runnables=tuple(runnables),
            state_machine=state_machine,
            annotations=collect_annotations(element),
            extras=tuple(extras),
        )
        self._register(path, behavior)
        return behavior

    def _build_event(
        self,
        element: Element,
        behavior: ShortNamePath,
        package: ShortNamePath,
    ) -> Event:
        path = self._require_path(element, behavior)
        start_ref = element.child(schema.START_ON_EVENT_REF)
        runnable = (
            self._resolve(start_ref, package, path, frozenset({schema.RUNNABLE_ENTITY}))
            if start_ref is not None
            else None
        )
        event = Event(
            name=path.name,
            path=path,
            kind=element.local_name,
            runnable=runnable,
            annotations=collect_annotations(element),
            extras=self._extras(element, {schema.START_ON_EVENT_REF}, path, package),
        )
        self._register(path, event)
        return event

    def _build_runnable(
        self,
        element: Element,
        behavior: ShortNamePath,
        package: ShortNamePath,
        events: list[Event],
    ) -> Runnable:
        path = self._require_path(element, behavior)

        access_points: list[AccessPoint] = []
        for container in element.children:
            kind = schema.ACCESS_CONTAINERS.get(container.local_name)
            if kind is None:
                continue
            for point_element in container.children:
                point = self._build_access_point(point_element, kind, path, package)
                if point is not None:
                    access_points.append(point)

        runnable = Runnable(
            name=path.name,
            path=path,
            events=tuple(event.path for event in events if event.runnable == path),
            access_points=tuple(access_points),
            annotations=collect_annotations(element),
            extras=self._extras(element, schema.ACCESS_CONTAINERS, path, package),
        )
        self._register(path, runnable)
        return runnable

    def _build_access_point(
        self,
        element: Element,
        kind: AccessKind,
        runnable: ShortNamePath,
        package: ShortNamePath,
    ) -> AccessPoint | None:
        name = element.child_text(schema.SHORT_NAME) or element.local_name
        referrer = runnable.child(name)

        port_ref = _first_descendant(element, schema.ACCESS_PORT_REFS)
        if port_ref is None:
            # Inter-runnable variables and local accesses do not touch a port
            logger.debug("Access point %s does not reference a port", referrer)
            return None

        target_ref = _first_descendant(element, schema.ACCESS_TARGET_REFS)
        return AccessPoint(
            name=name,
            kind=kind,
            port=self._resolve(port_ref, package, referrer, _ANY_PORT),
            target=(
                self._resolve(target_ref, package, referrer) if target_ref is not None else None
            ),
        )

    # -------------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------------

    def _build_state_machine(
        self,
        element: Element,
        behavior: ShortNamePath,
        package: ShortNamePath,
    ) -> StateMachine:
        path = self._require_path(element, behavior)
        extras: list[OpaqueElement] = []

        states: list[State] = []
        for container in element.children_named(schema.STATES):
            for state_element in container.children:
                if state_element.local_name != schema.STATE or not schema.is_autosar(
                    state_element
                ):
                    extras.append(self._opaque(state_element, path, package))
                    continue
                state_path = self._require_path(state_element, path)
                initial = (state_element.child_text(schema.IS_INITIAL) or "").lower()
                state = State(
                    name=state_path.name,
                    path=state_path,
                    initial=initial in schema.TRUE_VALUES,
                    annotations=collect_annotations(state_element),
                    extras=self._extras(state_element, {schema.IS_INITIAL}, state_path, package),
                )
                self._register(state_path, state)
                states.append(state)

        if not states:
            raise StructuralViolation("state machine has no states", path=str(path))

        initial_states = [state.name for state in states if state.initial]
        if len(initial_states) != 1:
            raise StructuralViolation(
                f"state machine must have exactly one initial state, found "
                f"{len(initial_states)} ({', '.join(initial_states) or 'none'})",
                path=str(path),
            )

        state_paths = {state.path for state in states}
        transitions: list[Transition] = []
        for container in element.children_named(schema.TRANSITIONS):
            for transition_element in container.children:
                if transition_element.local_name != schema.TRANSITION or not schema.is_autosar(
                    transition_element
                ):
                    extras.append(self._opaque(transition_element, path, package))
                    continue
                transitions.append(
                    self._build_transition(transition_element, path, state_paths, package)
                )

        extras.extend(self._extras(element, {schema.STATES, schema.TRANSITIONS}, path, package))

        machine = StateMachine(
            name=path.name,
            path=path,
            states=tuple(states),
            transitions=tuple(transitions),
            annotations=collect_annotations(element),
            extras=tuple(extras),
        )
        self._register(path, machine)
        return machine

    def _build_transition(
        self,
        element: Element,
        machine: ShortNamePath,
        state_paths: set[ShortNamePath],
        package: ShortNamePath,
    ) -> Transition:
        short_name = element.child_text(schema.SHORT_NAME)
        path = machine.child(short_name) if short_name else None
        referrer = path or machine

        source_ref = element.child(schema.SOURCE_STATE_REF)
        target_ref = element.child(schema.TARGET_STATE_REF)
        if source_ref is None or target_ref is None:
            raise StructuralViolation(
                f"{schema.TRANSITION} needs {schema.SOURCE_STATE_REF} "
                f"and {schema.TARGET_STATE_REF}",
                path=str(referrer),
            )

        state_kind = frozenset({schema.STATE})
        source = self._resolve(source_ref, package, referrer, state_kind)
        target = self._resolve(target_ref, package, referrer, state_kind)
        for endpoint in (source, target):
            if endpoint not in state_paths:
                raise StructuralViolation(
                    f"transition endpoint {endpoint} is not a state of {machine}",
                    path=str(referrer),
                )

        event_ref = element.child(schema.EVENT_REF)
        event = (
            self._resolve(event_ref, package, referrer, schema.EVENT_TAGS)
            if event_ref is not None
            else None
        )

        transition = Transition(
            name=short_name or f"{source.name}->{target.name}",
            source=source,
            target=target,
            event=event,
            guard=element.child_text(schema.GUARD),
            path=path,
            annotations=collect_annotations(element),
            extras=self._extras(
                element,
                {schema.SOURCE_STATE_REF, schema.TARGET_STATE_REF, schema.EVENT_REF, schema.GUARD},
                referrer,
                package,
            ),
        )
        if path is not None:
            self._register(path, transition)
        return transition


class ModelBuilder:
    """Builds the typed Model from a parsed ARXML Element tree.

    Usage:
        builder = ModelBuilder(config)
        model = builder.build(read_xml(data), source_name="system.arxml")
    """

    def __init__(self, config: ArxportConfig | None = None) -> None:
        """Initialize the builder.

        Args:
            config: arxport configuration (uses defaults if None)
        """
        self.config = config or ArxportConfig()
        self._external_prefixes = tuple(
            ShortNamePath.parse(prefix) for prefix in self.config.references.external_prefixes
        )

    def build(self, root: Element, source_name: str | None = None) -> Model:
        """Build the Model.

        Args:
            root: Root element returned by the XML reader
            source_name: Name of the originating file

        Returns:
            Immutable Model

        Raises:
            UnresolvedReference: If a reference cannot be resolved
            StructuralViolation: If a recognized element is malformed
        """
        return _ModelBuild(root, self._external_prefixes, source_name).run()


def build_model(
    root: Element,
    config: ArxportConfig | None = None,
    source_name: str | None = None,
) -> Model:
    """Build a Model from a parsed ARXML tree.

    Convenience function for model building.

    Args:
        root: Root element returned by the XML reader
        config: arxport configuration
        source_name: Name of the originating file

    Returns:
        Immutable Model
    """
    return ModelBuilder(config).build(root, source_name)
