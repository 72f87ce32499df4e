"""Diagram generators and their Mermaid encoding."""

from arxport.analyzers.diagrams.mermaid import (
    MermaidGenerator,
    sequence_to_mermaid,
    state_to_mermaid,
)
from arxport.analyzers.diagrams.sequence import SequenceDiagramGenerator, generate_sequence
from arxport.analyzers.diagrams.state import (
    StateDiagramGenerator,
    generate_state_diagram,
    generate_state_diagrams,
)

__all__ = [
    "MermaidGenerator",
    "SequenceDiagramGenerator",
    "StateDiagramGenerator",
    "generate_sequence",
    "generate_state_diagram",
    "generate_state_diagrams",
    "sequence_to_mermaid",
    "state_to_mermaid",
]
