"""Abstract base class for artifact generators and the ARXML error taxonomy.

Every generator consumes the immutable Model and produces one plain-data
artifact. Generators never write back into the Model, so several of them may
run over the same Model in any order.

All failures raised by the core are subclasses of ArxmlError. Each carries
enough context (short-name path, element name) for a user-facing message.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from arxport.models.arxml import Model

# Generic type for the artifact a generator produces
T = TypeVar("T")


class ArtifactGenerator(ABC, Generic[T]):
    """Abstract interface for read-only generators over a Model.

    Type Parameters:
        T: The artifact type (SequenceDiagram, StateDiagram, ...)

    Attributes:
        name: Generator identifier (e.g., "sequence", "state", "requirements")
    """

    def __init__(self, name: str) -> None:
        """Initialize the generator.

        Args:
            name: Generator identifier, matches the export option it serves
        """
        self.name = name

    @abstractmethod
    def generate(self, model: Model) -> T:
        """Derive the artifact from the model.

        Args:
            model: Fully resolved domain model

        Returns:
            The derived artifact

        Raises:
            ArxmlError: If the artifact cannot be derived
        """
        pass


class ArxmlError(Exception):
    """Base class for every failure surfaced by the core."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        element: str | None = None,
    ) -> None:
        self.message = message
        self.path = path
        self.element = element
        super().__init__(message)

    @property
    def kind(self) -> str:
        """Failure kind name shown to the user."""
        return type(self).__name__

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "kind": self.kind,
            "message": self.message,
            "path": self.path,
            "element": self.element,
        }


class InvalidInputFile(ArxmlError):
    """Raised when the input file has the wrong extension or cannot be read."""

    def __init__(self, filename: str, message: str | None = None) -> None:
        super().__init__(
            message or f"Please upload a valid ARXML file: {filename}",
            element=filename,
        )


class MalformedXml(ArxmlError):
    """Raised when the input bytes are not well-formed XML."""

    def __init__(self, message: str, line: int | None = None) -> None:
        self.line = line
        full_message = f"Malformed XML: {message}"
        if line is not None:
            full_message += f" (line {line})"
        super().__init__(full_message)


class UnresolvedReference(ArxmlError):
    """Raised when a short-name path reference cannot be resolved."""

    def __init__(
        self,
        path: str,
        referrer: str | None = None,
        reason: str | None = None,
    ) -> None:
        self.referrer = referrer
        full_message = f"Unresolved reference: {path}"
        if reason:
            full_message += f" ({reason})"
        if referrer:
            full_message += f" referenced from {referrer}"
        super().__init__(full_message, path=path, element=referrer)


class StructuralViolation(ArxmlError):
    """Raised when a recognized element is missing a required part."""

    def __init__(self, description: str, path: str | None = None) -> None:
        self.description = description
        full_message = f"Structural violation: {description}"
        if path:
            full_message += f" at {path}"
        super().__init__(full_message, path=path)


class InvalidStateMachine(ArxmlError):
    """Raised when a state machine breaks the single-initial-state or endpoint invariant."""

    def __init__(self, path: str, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid state machine {path}: {reason}", path=path)


class NoInteractionsFound(ArxmlError):
    """Raised when there are no resolvable connectors to derive a sequence from."""

    def __init__(self, target: str | None = None, reason: str | None = None) -> None:
        scope = f"component {target}" if target else "model"
        full_message = f"No interactions found for {scope}"
        if reason:
            full_message += f": {reason}"
        super().__init__(full_message, path=target)


class NoStateMachineFound(ArxmlError):
    """Raised when the requested component has no behavior state machine."""

    def __init__(self, component: str | None = None, reason: str | None = None) -> None:
        scope = f"component {component}" if component else "model"
        full_message = f"No state machine found for {scope}"
        if reason:
            full_message += f": {reason}"
        super().__init__(full_message, path=component)
