"""Unit tests for template renderer."""

from datetime import UTC, datetime
from pathlib import Path

import pytest

from arxport.models.arxml import ShortNamePath
from arxport.models.diagrams import RequirementAnnotation
from arxport.models.export import ExportError, ExportResult, ExportStatus
from arxport.pipeline import ExportOptions, ExportPipeline
from arxport.templates import DocumentRenderer
from arxport.templates.renderer import format_datetime
from tests.fixtures import SPEED_SYSTEM_PATH


class TestFormatDatetime:
    """Tests for the format_datetime filter."""

    def test_none(self) -> None:
        assert format_datetime(None) == "N/A"

    def test_aware_datetime(self) -> None:
        dt = datetime(2026, 3, 1, 8, 30, 5, tzinfo=UTC)

        assert format_datetime(dt) == "2026-03-01 08:30:05 UTC"

    def test_naive_datetime_treated_as_utc(self) -> None:
        assert format_datetime(datetime(2026, 3, 1, 8, 30)) == "2026-03-01 08:30:00 UTC"

    def test_iso_string(self) -> None:
        assert format_datetime("2026-03-01T08:30:05+00:00") == "2026-03-01 08:30:05 UTC"

    def test_unparseable_string_passthrough(self) -> None:
        assert format_datetime("yesterday") == "yesterday"


class TestDocumentRenderer:
    """Tests for DocumentRenderer."""

    @pytest.fixture
    def renderer(self) -> DocumentRenderer:
        """Create a renderer instance."""
        return DocumentRenderer()

    @pytest.fixture
    def full_result(self) -> ExportResult:
        """Export every artifact of the speed system."""
        options = ExportOptions(sequence=True, state=True, requirements=True)
        return ExportPipeline().run(SPEED_SYSTEM_PATH, options)

    def test_render_full_report(
        self, renderer: DocumentRenderer, full_result: ExportResult
    ) -> None:
        markdown = renderer.render(full_result)

        assert markdown.startswith("# ARXML Export: speed_system.arxml")
        assert "| Status | completed |" in markdown
        assert "## Model Summary" in markdown
        assert "## Sequence Diagram" in markdown
        assert "## State Diagrams" in markdown
        assert "### SpeedController: ControllerModes" in markdown
        assert "Unreachable states: `Maintenance`" in markdown
        assert "## Requirements" in markdown
        assert "| REQ-CTRL-1 |" in markdown
        assert "## Errors" not in markdown

    def test_mermaid_blocks_embedded(
        self, renderer: DocumentRenderer, full_result: ExportResult
    ) -> None:
        markdown = renderer.render(full_result)

        assert markdown.count("```mermaid") == 2
        assert "sequenceDiagram" in markdown
        assert "stateDiagram-v2" in markdown

    def test_render_errors(self, renderer: DocumentRenderer) -> None:
        """Test that recorded errors are listed and unrequested sections omitted."""
        result = ExportResult(
            source_name="broken.arxml",
            status=ExportStatus.FAILED,
            requested=["state"],
        )
        result.add_error(
            ExportError(
                component="model",
                kind="UnresolvedReference",
                message="Unresolved reference: /A | B",
                path="/A",
                recoverable=False,
            )
        )

        markdown = renderer.render(result)

        assert "## Errors" in markdown
        assert "| model | UnresolvedReference | Unresolved reference: /A / B | /A |" in markdown
        assert "## State Diagrams" not in markdown
        assert "## Model Summary" not in markdown

    def test_empty_requirements(self, renderer: DocumentRenderer) -> None:
        result = ExportResult(
            source_name="empty.arxml",
            status=ExportStatus.COMPLETED,
            requested=["requirements"],
            requirements=(),
        )

        assert "No requirements found." in renderer.render(result)

    def test_requirement_cells_escaped(self, renderer: DocumentRenderer) -> None:
        result = ExportResult(
            source_name="r.arxml",
            requirements=(
                RequirementAnnotation(
                    id="R-1",
                    description="Open | close\nvalve",
                    owner=ShortNamePath.parse("/P/Valve"),
                ),
            ),
        )

        assert "| R-1 | Open / close valve | `/P/Valve` |" in renderer.render(result)

    def test_missing_template(self, renderer: DocumentRenderer, full_result: ExportResult) -> None:
        with pytest.raises(ValueError, match="Template not found"):
            renderer.render(full_result, "missing.md.j2")

    def test_render_to_file(
        self, renderer: DocumentRenderer, full_result: ExportResult, tmp_path: Path
    ) -> None:
        output = tmp_path / "docs" / "REPORT.md"

        path = renderer.render_to_file(full_result, output)

        assert path == output
        assert output.read_text(encoding="utf-8").startswith("# ARXML Export")
