"""Requirements extraction from ARXML annotations.

Requirements are read from three kinds of sources, all configurable through
the `requirements` section of the configuration:

- ADMIN-DATA special data groups whose GID matches `sdg_gid`
- Elements whose tag is listed in `requirement_tags` (kept as opaque)
- DESC / INTRODUCTION lines matching `free_text_pattern`

Duplicate ids collapse to one entry: the last occurrence provides the
description and owner, the first occurrence keeps its position.
"""

import logging
from collections.abc import Iterable
from itertools import count

from arxport.analyzers import schema
from arxport.analyzers.base import ArtifactGenerator
from arxport.config import RequirementsConfig
from arxport.models.arxml import (
    Annotation,
    Entity,
    Model,
    OpaqueElement,
    ShortNamePath,
    StateMachine,
)
from arxport.models.diagrams import RequirementAnnotation
from arxport.models.element import Element

logger = logging.getLogger(__name__)

# Children holding the text of a requirement element, in priority order
_DESCRIPTION_TAGS = ("DESCRIPTION", "TEXT", schema.DESC)


class _Collector:
    """Ordered, deduplicating requirement accumulator for one extraction."""

    def __init__(self, auto_id_prefix: str) -> None:
        self._prefix = auto_id_prefix
        self._counter = count(1)
        self.found: dict[str, RequirementAnnotation] = {}

    def add(
        self,
        requirement_id: str | None,
        description: str,
        owner: ShortNamePath,
        source: str,
    ) -> None:
        requirement_id = (requirement_id or "").strip()
        if not requirement_id:
            requirement_id = f"{self._prefix}{next(self._counter)}"
        elif requirement_id in self.found:
            logger.debug("Requirement %s redefined at %s", requirement_id, owner)

        # Reassigning an existing key keeps its original position
        self.found[requirement_id] = RequirementAnnotation(
            id=requirement_id,
            description=description.strip(),
            owner=owner,
            source=source,
        )


class RequirementsExtractor(ArtifactGenerator[tuple[RequirementAnnotation, ...]]):
    """Collects RequirementAnnotations from every entity of a Model."""

    def __init__(self, config: RequirementsConfig | None = None) -> None:
        """Initialize the extractor.

        Args:
            config: Requirement source mapping (uses defaults if None)
        """
        super().__init__("requirements")
        self.config = config or RequirementsConfig()
        self._pattern = self.config.compiled_pattern
        self._tags = frozenset(self.config.requirement_tags)
        self._sdg_gid = self.config.sdg_gid.casefold()

    def generate(self, model: Model) -> tuple[RequirementAnnotation, ...]:
        """Extract requirements in document order.

        Args:
            model: Resolved model

        Returns:
            Deduplicated requirements (empty for an empty model)
        """
        collector = _Collector(self.config.auto_id_prefix)

        for entity in model.entities():
            self._visit(entity, collector)

        requirements = tuple(collector.found.values())
        logger.info("Extracted %d requirements", len(requirements))
        return requirements

    def _visit(self, entity: Entity, collector: _Collector) -> None:
        if isinstance(entity, OpaqueElement):
            owner = entity.path if entity.path is not None else ShortNamePath()
            self._visit_opaque(entity, owner, collector)
            return

        owner = entity.path
        self._scan_annotations(entity.annotations, owner, collector)

        # Unnamed children never reach the index, visit them with their owner
        for extra in getattr(entity, "extras", ()):
            if extra.path is None:
                self._visit_opaque(extra, owner, collector)
        if isinstance(entity, StateMachine):
            for transition in entity.transitions:
                if transition.path is None:
                    self._scan_annotations(transition.annotations, owner, collector)
                    for extra in transition.extras:
                        if extra.path is None:
                            self._visit_opaque(extra, owner, collector)

    def _visit_opaque(
        self,
        opaque: OpaqueElement,
        owner: ShortNamePath,
        collector: _Collector,
    ) -> None:
        if opaque.tag in self._tags:
            parent = opaque.path.parent if opaque.path is not None else owner
            self._add_element(opaque.element, parent, collector)
            return

        self._scan_annotations(opaque.annotations, owner, collector)
        for descendant in opaque.element.iter_descendants():
            if descendant.local_name in self._tags:
                self._add_element(descendant, owner, collector)

    def _add_element(
        self,
        element: Element,
        owner: ShortNamePath,
        collector: _Collector,
    ) -> None:
        description = ""
        for child in element.children_named(*_DESCRIPTION_TAGS):
            description = child.text_content()
            if description:
                break
        else:
            description = element.text or ""

        collector.add(
            element.child_text(schema.SHORT_NAME),
            description,
            owner,
            source="element",
        )

    def _scan_annotations(
        self,
        annotations: Iterable[Annotation],
        owner: ShortNamePath,
        collector: _Collector,
    ) -> None:
        for annotation in annotations:
            if annotation.source == schema.SDG:
                if (annotation.label or "").casefold() != self._sdg_gid:
                    continue
                requirement_id = annotation.value(self.config.id_field)
                description = annotation.value(self.config.description_field) or ""
                if requirement_id or description:
                    collector.add(requirement_id, description, owner, source="sdg")
                continue

            for line in annotation.text.splitlines():
                match = self._pattern.match(line)
                if match:
                    collector.add(
                        match.group("id"),
                        match.group("description"),
                        owner,
                        source="text",
                    )


def extract_requirements(
    model: Model,
    config: RequirementsConfig | None = None,
) -> tuple[RequirementAnnotation, ...]:
    """Extract the requirements table of a model.

    Convenience function for requirements extraction.

    Args:
        model: Resolved model
        config: Requirement source mapping

    Returns:
        Deduplicated requirements in document order
    """
    return RequirementsExtractor(config).generate(model)
