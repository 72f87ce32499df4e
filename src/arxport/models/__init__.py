"""arxport data models.

This module exports all core entities used throughout the application:
- Element: generic parsed XML element
- Model: resolved ARXML model and its entities
- SequenceDiagram, StateDiagram, RequirementAnnotation: derived artifacts
- ExportResult / ExportError: outcome of an export run
"""

from arxport.models.arxml import (
    Annotation,
    Model,
    OpaqueElement,
    Package,
    ShortNamePath,
    SoftwareComponent,
)
from arxport.models.diagrams import (
    Interaction,
    MermaidDiagram,
    RequirementAnnotation,
    SequenceDiagram,
    StateDiagram,
)
from arxport.models.element import Element, QName
from arxport.models.export import ExportError, ExportResult, ExportStatus

__all__ = [
    "Annotation",
    "Element",
    "ExportError",
    "ExportResult",
    "ExportStatus",
    "Interaction",
    "MermaidDiagram",
    "Model",
    "OpaqueElement",
    "Package",
    "QName",
    "RequirementAnnotation",
    "SequenceDiagram",
    "ShortNamePath",
    "SoftwareComponent",
    "StateDiagram",
]
