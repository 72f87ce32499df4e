"""Markdown report renderer.

Renders an ExportResult to Markdown using the packaged Jinja2 template.
Diagrams are embedded as Mermaid code blocks.
"""

import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from jinja2 import Environment, PackageLoader, TemplateError, select_autoescape

from arxport import __version__
from arxport.analyzers.diagrams.mermaid import MermaidGenerator
from arxport.config import ArxportConfig
from arxport.models.export import ExportResult
from arxport.renderers.filters import md_cell, md_code

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = "REPORT.md.j2"


def format_datetime(dt: datetime | str | None) -> str:
    """Format datetime for display in the report.

    Args:
        dt: Datetime object or ISO string

    Returns:
        Formatted date string
    """
    if dt is None:
        return "N/A"

    if isinstance(dt, str):
        try:
            dt = datetime.fromisoformat(dt)
        except ValueError:
            return dt

    # Ensure UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)

    return dt.strftime("%Y-%m-%d %H:%M:%S UTC")


class DocumentRenderer:
    """Renders export results to a Markdown report.

    Usage:
        renderer = DocumentRenderer(config)
        markdown = renderer.render(export_result)
    """

    def __init__(self, config: ArxportConfig | None = None) -> None:
        """Initialize the document renderer.

        Args:
            config: arxport configuration
        """
        self.config = config
        self._mermaid = MermaidGenerator()

        # Set up Jinja2 environment with package templates
        self._env = Environment(
            loader=PackageLoader("arxport", "templates"),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

        # Register custom filters
        self._env.filters["format_datetime"] = format_datetime
        self._env.filters["md_cell"] = md_cell
        self._env.filters["md_code"] = md_code

    def render(self, result: ExportResult, template_name: str = DEFAULT_TEMPLATE) -> str:
        """Render an export result to Markdown.

        Args:
            result: Export result from the pipeline
            template_name: Template file to use

        Returns:
            Rendered Markdown string

        Raises:
            ValueError: If the template is missing or fails to render
        """
        try:
            template = self._env.get_template(template_name)
        except TemplateError as e:
            logger.error("Failed to load template %s: %s", template_name, e)
            raise ValueError(f"Template not found: {template_name}") from e

        context = self._build_context(result)

        try:
            rendered = template.render(**context)
        except TemplateError as e:
            logger.error("Template rendering failed: %s", e)
            raise ValueError(f"Template rendering failed: {e}") from e

        logger.info("Rendered report (%d characters)", len(rendered))
        return rendered

    def _build_context(self, result: ExportResult) -> dict[str, Any]:
        """Build the template rendering context.

        Args:
            result: Export result

        Returns:
            Template context dictionary
        """
        context: dict[str, Any] = {
            "source_name": result.source_name,
            "timestamp": result.timestamp,
            "status": result.status.value,
            "requested": result.requested,
            "version": __version__,
            "summary": result.summary,
            "errors": [e.to_dict() for e in result.errors],
            "sequence": result.sequence,
            "sequence_mermaid": None,
            "state_diagrams": None,
            "requirements": result.requirements,
        }

        if result.sequence is not None:
            context["sequence_mermaid"] = self._mermaid.sequence_diagram(result.sequence).mermaid

        if result.state_diagrams is not None:
            context["state_diagrams"] = [
                (diagram, self._mermaid.state_diagram(diagram).mermaid)
                for diagram in result.state_diagrams
            ]

        return context

    def render_to_file(
        self,
        result: ExportResult,
        output_path: Path,
        template_name: str = DEFAULT_TEMPLATE,
    ) -> Path:
        """Render an export result and write it to a file.

        Args:
            result: Export result from the pipeline
            output_path: Path to write output file
            template_name: Template file to use

        Returns:
            Path to written file
        """
        content = self.render(result, template_name)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content, encoding="utf-8")
        logger.info("Wrote report to %s", output_path)

        return output_path
