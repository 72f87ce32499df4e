"""Export result entities.

This module contains entities related to one export run:
- ExportStatus: lifecycle of the run
- ExportError: failure of one export option (or of the whole run)
- ExportResult: model summary plus the artifacts that were produced
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from arxport.models.diagrams import RequirementAnnotation, SequenceDiagram, StateDiagram


class ExportStatus(Enum):
    """Status of an export run."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    PARTIAL = "partial"  # Some requested artifacts failed
    FAILED = "failed"


@dataclass
class ExportError:
    """Failure recorded during an export run.

    Attributes:
        component: Stage that failed (input, model, sequence, state, requirements)
        kind: Error kind (MalformedXml, UnresolvedReference, ...)
        message: Human-readable description
        path: Short-name path or file the failure relates to
        recoverable: Whether the run continued after this error
    """

    component: str
    kind: str
    message: str
    path: str | None = None
    recoverable: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "component": self.component,
            "kind": self.kind,
            "message": self.message,
            "path": self.path,
            "recoverable": self.recoverable,
        }


@dataclass
class ExportResult:
    """Outcome of exporting one ARXML file.

    Attributes:
        source_name: Name of the input file
        timestamp: Export execution timestamp (UTC)
        status: Current export status
        requested: Export options that were selected
        errors: Failures encountered during the run
        summary: Model entity counts (empty when the model failed to build)
        sequence: Sequence diagram, if requested and produced
        state_diagrams: State diagrams, if requested and produced
        requirements: Requirements table, if requested and produced
    """

    source_name: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    status: ExportStatus = ExportStatus.PENDING
    requested: list[str] = field(default_factory=list)
    errors: list[ExportError] = field(default_factory=list)
    summary: dict[str, int] = field(default_factory=dict)

    sequence: SequenceDiagram | None = None
    state_diagrams: tuple[StateDiagram, ...] | None = None
    requirements: tuple[RequirementAnnotation, ...] | None = None

    @property
    def produced(self) -> list[str]:
        """Names of the artifacts that were produced."""
        artifacts = {
            "sequence": self.sequence,
            "state": self.state_diagrams,
            "requirements": self.requirements,
        }
        return [name for name, value in artifacts.items() if value is not None]

    def add_error(self, error: ExportError) -> None:
        """Add an export error."""
        self.errors.append(error)

    def has_errors(self) -> bool:
        """Check if any errors were recorded."""
        return len(self.errors) > 0

    def get_errors_by_component(self, component: str) -> list[ExportError]:
        """Get errors for a specific stage."""
        return [e for e in self.errors if e.component == component]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "source_name": self.source_name,
            "timestamp": self.timestamp.isoformat(),
            "status": self.status.value,
            "requested": list(self.requested),
            "produced": self.produced,
            "summary": dict(self.summary),
            "errors": [e.to_dict() for e in self.errors],
            "sequence": self.sequence.to_dict() if self.sequence else None,
            "state_diagrams": (
                [diagram.to_dict() for diagram in self.state_diagrams]
                if self.state_diagrams is not None
                else None
            ),
            "requirements": (
                [requirement.to_dict() for requirement in self.requirements]
                if self.requirements is not None
                else None
            ),
        }
