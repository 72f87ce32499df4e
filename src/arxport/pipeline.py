"""Export pipeline orchestrator.

Coordinates reading, model building and the three artifact generators for
one ARXML file. The model is built once; every requested export option then
runs over the same immutable Model, and a failure in one option does not
prevent the others.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from arxport.analyzers import (
    ArxmlError,
    ModelBuilder,
    RequirementsExtractor,
    SequenceDiagramGenerator,
    StateDiagramGenerator,
    read_xml,
)
from arxport.analyzers.base import InvalidInputFile, MalformedXml
from arxport.analyzers.xml_reader import check_extension, read_input_file
from arxport.config import ArxportConfig
from arxport.models.arxml import Model
from arxport.models.export import ExportError, ExportResult, ExportStatus

logger = logging.getLogger(__name__)

# Error type -> stage name recorded on ExportError
_LOAD_STAGES: dict[type[ArxmlError], str] = {
    InvalidInputFile: "input",
    MalformedXml: "xml",
}


@dataclass
class ExportOptions:
    """Which artifacts to export (the upload form's checkboxes).

    Attributes:
        sequence: Export the component interaction diagram
        state: Export the behavioral state diagram(s)
        requirements: Export the requirements table
        component: Target component path (None for the whole model)
        fail_fast: Stop after the first failed option
    """

    sequence: bool = False
    state: bool = False
    requirements: bool = False
    component: str | None = None
    fail_fast: bool = False

    @property
    def selected(self) -> list[str]:
        """Names of the selected options, in execution order."""
        flags = {
            "sequence": self.sequence,
            "state": self.state,
            "requirements": self.requirements,
        }
        return [name for name, enabled in flags.items() if enabled]


def _to_export_error(component: str, error: ArxmlError, recoverable: bool) -> ExportError:
    return ExportError(
        component=component,
        kind=error.kind,
        message=error.message,
        path=error.path,
        recoverable=recoverable,
    )


class ExportPipeline:
    """Runs the requested exports for one ARXML file.

    The pipeline sequence:
    1. Input check and read (extension pre-filter, whole-file read)
    2. XML parsing
    3. Model building (index, then resolve)
    4. Sequence diagram, state diagram(s), requirements table

    Stages 1-3 are shared: a failure there fails every requested option.
    """

    def __init__(self, config: ArxportConfig | None = None) -> None:
        """Initialize the export pipeline.

        Args:
            config: arxport configuration (uses defaults if None)
        """
        self.config = config or ArxportConfig()
        self._builder = ModelBuilder(self.config)
        self._sequence = SequenceDiagramGenerator()
        self._state = StateDiagramGenerator()
        self._requirements = RequirementsExtractor(self.config.requirements)

    def run(self, path: Path, options: ExportOptions | None = None) -> ExportResult:
        """Export a file from disk.

        Args:
            path: ARXML file
            options: Selected export options

        Returns:
            ExportResult with produced artifacts and recorded errors
        """
        path = Path(path)
        return self._execute(path.name, lambda: read_input_file(path), options)

    def run_bytes(
        self,
        name: str,
        data: bytes,
        options: ExportOptions | None = None,
    ) -> ExportResult:
        """Export content already held in memory.

        Args:
            name: Original file name (used for the extension check)
            data: File content
            options: Selected export options

        Returns:
            ExportResult with produced artifacts and recorded errors
        """

        def load() -> bytes:
            check_extension(name)
            return data

        return self._execute(name, load, options)

    def build(self, name: str, data: bytes) -> Model:
        """Parse and build the model without exporting anything.

        Raises:
            ArxmlError: If the content cannot be parsed or resolved
        """
        logger.info("Stage 2: Parsing XML")
        root = read_xml(data)
        logger.info("Stage 3: Building model")
        return self._builder.build(root, source_name=name)

    def _execute(
        self,
        name: str,
        load: Callable[[], bytes],
        options: ExportOptions | None,
    ) -> ExportResult:
        options = options or ExportOptions()
        result = ExportResult(
            source_name=name,
            status=ExportStatus.RUNNING,
            requested=options.selected,
        )

        if not result.requested:
            result.add_error(
                ExportError(
                    component="options",
                    kind="NoOptionSelected",
                    message="Select at least one export option (sequence, state, requirements)",
                    recoverable=True,
                )
            )
            result.status = ExportStatus.FAILED
            logger.warning("Nothing to export for %s", name)
            return result

        logger.info("Starting export of %s (%s)", name, ", ".join(result.requested))

        try:
            logger.info("Stage 1: Reading input")
            model = self.build(name, load())
        except ArxmlError as e:
            stage = _LOAD_STAGES.get(type(e), "model")
            result.add_error(_to_export_error(stage, e, recoverable=False))
            result.status = ExportStatus.FAILED
            logger.error("%s", e.message)
            return result

        result.summary = model.summary()

        stages: list[tuple[str, Callable[[Model, ExportResult, ExportOptions], bool]]] = [
            ("sequence", self._run_sequence),
            ("state", self._run_state),
            ("requirements", self._run_requirements),
        ]

        try:
            for stage_name, stage in stages:
                if stage_name not in result.requested:
                    continue
                if not stage(model, result, options) and options.fail_fast:
                    logger.warning("Stopping after failed %s export (fail-fast)", stage_name)
                    break

        except Exception as e:
            logger.error("Export failed: %s", e)
            result.add_error(
                ExportError(
                    component="pipeline",
                    kind=type(e).__name__,
                    message=str(e),
                    recoverable=False,
                )
            )

        result.status = self._final_status(result)
        logger.info(
            "Export complete: %s (%d errors)",
            result.status.value,
            len(result.errors),
        )
        return result

    def _final_status(self, result: ExportResult) -> ExportStatus:
        if not result.has_errors():
            return ExportStatus.COMPLETED
        if result.produced:
            return ExportStatus.PARTIAL
        return ExportStatus.FAILED

    def _run_sequence(
        self,
        model: Model,
        result: ExportResult,
        options: ExportOptions,
    ) -> bool:
        """Generate the sequence diagram.

        Args:
            model: Resolved model
            result: Result object to update
            options: Export options

        Returns:
            True if the diagram was produced
        """
        logger.info("Stage 4a: Generating sequence diagram")

        try:
            result.sequence = self._sequence.generate(model, options.component)
            return True

        except ArxmlError as e:
            result.add_error(_to_export_error("sequence", e, recoverable=True))
            logger.warning("Sequence diagram failed: %s", e.message)
            return False

    def _run_state(
        self,
        model: Model,
        result: ExportResult,
        options: ExportOptions,
    ) -> bool:
        """Generate the state diagram(s).

        Returns:
            True if at least one diagram was produced
        """
        logger.info("Stage 4b: Generating state diagram")

        try:
            result.state_diagrams = self._state.generate(model, options.component)
            return True

        except ArxmlError as e:
            result.add_error(_to_export_error("state", e, recoverable=True))
            logger.warning("State diagram failed: %s", e.message)
            return False

    def _run_requirements(
        self,
        model: Model,
        result: ExportResult,
        options: ExportOptions,
    ) -> bool:
        logger.info("Stage 4c: Extracting requirements")

        try:
            result.requirements = self._requirements.generate(model)
            return True

        except ArxmlError as e:
            result.add_error(_to_export_error("requirements", e, recoverable=True))
            logger.warning("Requirements extraction failed: %s", e.message)
            return False
