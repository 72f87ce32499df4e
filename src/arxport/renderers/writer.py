"""Export file writer.

Writes the artifacts of an ExportResult to a directory. Nothing is written
until the pipeline has finished, so a cancelled or failed run leaves no
partial files behind.

Files per format:
- csv: requirements.csv
- xlsx: Requirements.xlsx
- mermaid: sequence.mmd, state-<Component>.mmd
- json: export.json
- markdown: REPORT.md
"""

import json
import logging
import re
from collections.abc import Callable, Iterable
from functools import partial
from pathlib import Path

from arxport.analyzers.diagrams.mermaid import MermaidGenerator
from arxport.config import VALID_FORMATS, ArxportConfig
from arxport.models.diagrams import SequenceDiagram, StateDiagram
from arxport.models.export import ExportResult
from arxport.renderers.tabular import requirements_csv, requirements_xlsx
from arxport.templates.renderer import DocumentRenderer

logger = logging.getLogger(__name__)

REQUIREMENTS_FILE = "requirements.csv"
REQUIREMENTS_WORKBOOK = "Requirements.xlsx"
SEQUENCE_FILE = "sequence.mmd"
JSON_FILE = "export.json"
REPORT_FILE = "REPORT.md"

_UNSAFE_FILENAME = re.compile(r"[^\w.\-]+")


def _state_filename(name: str, used: set[str]) -> str:
    base = f"state-{_UNSAFE_FILENAME.sub('_', name) or 'machine'}"
    filename = f"{base}.mmd"
    counter = 2
    while filename in used:
        filename = f"{base}-{counter}.mmd"
        counter += 1
    used.add(filename)
    return filename


class ExportWriter:
    """Serializes export results to files.

    Usage:
        writer = ExportWriter(config)
        paths = writer.write(result, Path("export"), ["csv", "mermaid"])
    """

    def __init__(self, config: ArxportConfig | None = None) -> None:
        self.config = config or ArxportConfig()
        self._mermaid = MermaidGenerator()
        self._renderer = DocumentRenderer(self.config)

    def _artifacts(
        self,
        result: ExportResult,
        formats: Iterable[str],
    ) -> list[tuple[str, Callable[[], str | bytes]]]:
        """List (filename, content factory) pairs in write order."""
        selected = set(formats)
        invalid = selected - set(VALID_FORMATS)
        if invalid:
            raise ValueError(
                f"Invalid output format(s): {sorted(invalid)}. Valid: {list(VALID_FORMATS)}"
            )

        artifacts: list[tuple[str, Callable[[], str | bytes]]] = []

        if "csv" in selected and result.requirements is not None:
            requirements = result.requirements
            artifacts.append((REQUIREMENTS_FILE, lambda: requirements_csv(requirements)))

        if "xlsx" in selected and result.requirements is not None:
            artifacts.append(
                (REQUIREMENTS_WORKBOOK, partial(requirements_xlsx, result.requirements))
            )

        if "mermaid" in selected:
            if result.sequence is not None:
                artifacts.append((SEQUENCE_FILE, partial(self._mermaid_text, result.sequence)))
            used: set[str] = set()
            for diagram in result.state_diagrams or ():
                filename = _state_filename(diagram.component.name, used)
                artifacts.append((filename, partial(self._mermaid_text, diagram)))

        if "json" in selected:
            artifacts.append((JSON_FILE, lambda: self._json(result)))

        if "markdown" in selected:
            artifacts.append((REPORT_FILE, lambda: self._renderer.render(result)))

        return artifacts

    def _mermaid_text(self, diagram: SequenceDiagram | StateDiagram) -> str:
        if isinstance(diagram, SequenceDiagram):
            return self._mermaid.sequence_diagram(diagram).mermaid + "\n"
        return self._mermaid.state_diagram(diagram).mermaid + "\n"

    def _json(self, result: ExportResult) -> str:
        return json.dumps(result.to_dict(), indent=2, ensure_ascii=False) + "\n"

    def plan(self, result: ExportResult, formats: Iterable[str]) -> list[str]:
        """Return the file names write() would produce."""
        return [filename for filename, _ in self._artifacts(result, formats)]

    def write(
        self,
        result: ExportResult,
        directory: Path,
        formats: Iterable[str] | None = None,
    ) -> list[Path]:
        """Write every produced artifact in the requested formats.

        Args:
            result: Export result from the pipeline
            directory: Output directory (created if missing)
            formats: Formats to write (defaults to config.output.formats)

        Returns:
            Paths of the written files, in write order
        """
        formats = list(formats) if formats is not None else self.config.output.formats
        artifacts = self._artifacts(result, formats)

        # Render everything before touching the filesystem
        contents = [(filename, factory()) for filename, factory in artifacts]

        directory.mkdir(parents=True, exist_ok=True)
        written: list[Path] = []
        for filename, content in contents:
            path = directory / filename
            if isinstance(content, bytes):
                path.write_bytes(content)
                logger.debug("Wrote %s (%d bytes)", path, len(content))
            else:
                path.write_text(content, encoding="utf-8", newline="")
                logger.debug("Wrote %s (%d characters)", path, len(content))
            written.append(path)

        logger.info("Wrote %d files to %s", len(written), directory)
        return written
