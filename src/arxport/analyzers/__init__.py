"""arxport analyzers - read-only passes over ARXML input.

Analyzers:
- XML Reader: bytes to a generic Element tree (lxml)
- Model Builder: Element tree to the resolved, immutable Model
- Sequence / State Diagram Generators: interaction steps and state graphs
- Requirements Extractor: requirement annotations from descriptions and admin data
"""

from arxport.analyzers.base import (
    ArtifactGenerator,
    ArxmlError,
    InvalidInputFile,
    InvalidStateMachine,
    MalformedXml,
    NoInteractionsFound,
    NoStateMachineFound,
    StructuralViolation,
    UnresolvedReference,
)
from arxport.analyzers.diagrams import (
    SequenceDiagramGenerator,
    StateDiagramGenerator,
    generate_sequence,
    generate_state_diagram,
    generate_state_diagrams,
)
from arxport.analyzers.model_builder import ModelBuilder, build_model
from arxport.analyzers.requirements import RequirementsExtractor, extract_requirements
from arxport.analyzers.xml_reader import read_xml

__all__ = [
    "ArtifactGenerator",
    "ArxmlError",
    "InvalidInputFile",
    "InvalidStateMachine",
    "MalformedXml",
    "ModelBuilder",
    "NoInteractionsFound",
    "NoStateMachineFound",
    "RequirementsExtractor",
    "SequenceDiagramGenerator",
    "StateDiagramGenerator",
    "StructuralViolation",
    "UnresolvedReference",
    "build_model",
    "extract_requirements",
    "generate_sequence",
    "generate_state_diagram",
    "generate_state_diagrams",
    "read_xml",
]
