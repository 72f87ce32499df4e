"""Sequence diagram generation from runnable port accesses.

Every access point of every runnable is followed through the connector graph
to the component(s) on the other side. Composition ports are transparent:
a delegation connector leads to the composition's outer port, and traversal
continues from there to whatever the outer port is connected to.
"""

import logging
from collections import defaultdict, deque
from dataclasses import dataclass

from arxport.analyzers.base import ArtifactGenerator, NoInteractionsFound
from arxport.models.arxml import (
    AccessPoint,
    Connector,
    Model,
    Runnable,
    ShortNamePath,
    SoftwareComponent,
)
from arxport.models.diagrams import Interaction, SequenceDiagram

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Peer:
    """Component port reached from an access point."""

    component: ShortNamePath
    port: ShortNamePath
    connector: ShortNamePath


class ConnectorGraph:
    """Port adjacency built from every connector of the model."""

    def __init__(self, model: Model, connectors: tuple[Connector, ...]) -> None:
        self._model = model
        self._edges: dict[ShortNamePath, list[Peer]] = defaultdict(list)
        for connector in connectors:
            self._edges[connector.provider_port].append(
                Peer(connector.requester_component, connector.requester_port, connector.path)
            )
            self._edges[connector.requester_port].append(
                Peer(connector.provider_component, connector.provider_port, connector.path)
            )

    def _is_composition(self, path: ShortNamePath) -> bool:
        component = self._model.component(path)
        return component is not None and component.is_composition

    def peers(self, port: ShortNamePath) -> list[Peer]:
        """Find every non-composition port connected to the given port.

        Args:
            port: Starting port path

        Returns:
            Peers sorted by (component, port), one per peer port
        """
        found: dict[tuple[ShortNamePath, ShortNamePath], Peer] = {}
        visited = {port}
        queue = deque(self._edges.get(port, ()))

        while queue:
            peer = queue.popleft()
            if peer.port in visited:
                continue
            visited.add(peer.port)

            onward = [n for n in self._edges.get(peer.port, ()) if n.port not in visited]
            if onward and self._is_composition(peer.component):
                queue.extend(onward)
                continue

            found.setdefault((peer.component, peer.port), peer)

        return sorted(found.values(), key=lambda p: (p.component, p.port))


class SequenceDiagramGenerator(ArtifactGenerator[SequenceDiagram]):
    """Generates the ordered interaction steps of a model.

    Steps are ordered by runnable declaration index, then component position
    in the package tree, then access point order, then peer path. The same
    model always yields the same steps.
    """

    def __init__(self) -> None:
        super().__init__("sequence")

    def generate(
        self,
        model: Model,
        component: ShortNamePath | str | None = None,
    ) -> SequenceDiagram:
        """Generate the sequence diagram.

        Args:
            model: Resolved model
            component: Restrict to steps where this component is caller or callee

        Returns:
            SequenceDiagram with steps numbered from 0

        Raises:
            NoInteractionsFound: If there are no connectors to follow
        """
        target = ShortNamePath.parse(component) if isinstance(component, str) else component
        target_name = str(target) if target is not None else None

        connectors = model.connectors()
        if not connectors:
            raise NoInteractionsFound(target_name, "the model declares no connectors")

        if target is not None:
            if model.component(target) is None:
                raise NoInteractionsFound(target_name, "component not found")
            if not any(connector.touches(target) for connector in connectors):
                raise NoInteractionsFound(target_name, "no connector touches this component")

        graph = ConnectorGraph(model, connectors)

        candidates: list[
            tuple[tuple, SoftwareComponent, Runnable, AccessPoint, Peer]
        ] = []
        for position, owner in enumerate(model.components()):
            behavior = owner.internal_behavior
            if behavior is None:
                continue
            for runnable_index, runnable in enumerate(behavior.runnables):
                for access_index, access in enumerate(runnable.access_points):
                    for peer in graph.peers(access.port):
                        key = (runnable_index, position, access_index, peer.component, peer.port)
                        candidates.append((key, owner, runnable, access, peer))

        candidates.sort(key=lambda candidate: candidate[0])

        if target is not None:
            candidates = [
                c for c in candidates if target in (c[1].path, c[4].component)
            ]

        interactions = tuple(
            Interaction(
                index=index,
                caller=owner.path,
                callee=peer.component,
                operation=access.operation,
                runnable=runnable.path,
                access=access.kind.value,
                caller_port=access.port,
                callee_port=peer.port,
                connector=peer.connector,
            )
            for index, (_, owner, runnable, access, peer) in enumerate(candidates)
        )

        diagram = SequenceDiagram(
            interactions=interactions,
            component=target,
            title=f"Interactions of {target.name}" if target else "Component Interactions",
        )

        if not interactions:
            logger.warning("Connectors exist but no runnable accesses a connected port")
        logger.info(
            "Generated %d interaction steps between %d components",
            len(interactions),
            len(diagram.participants),
        )
        return diagram


def generate_sequence(
    model: Model,
    component: ShortNamePath | str | None = None,
) -> SequenceDiagram:
    """Generate the sequence diagram of a model.

    Convenience function for sequence generation.

    Args:
        model: Resolved model
        component: Optional target component

    Returns:
        SequenceDiagram
    """
    return SequenceDiagramGenerator().generate(model, component)
