"""arxport CLI interface.

Commands:
- export: Derive sequence / state diagrams and the requirements table
- validate: Check that an ARXML file parses and all references resolve
- inspect: Show what the model builder found in an ARXML file
- init: Initialize arxport configuration

Global options:
- --config: Path to configuration file
- --verbose: Enable verbose output with timestamps
- --quiet: Suppress info messages
- --ci: JSON log lines for CI/CD
- --version: Show version and exit
"""

import json
import logging
from pathlib import Path
from typing import Annotated

import typer

from arxport import __version__
from arxport.config import VALID_FORMATS, ArxportConfig, create_default_config, load_config
from arxport.models.arxml import Model
from arxport.utils.logging import configure_from_cli, get_logger

# Create Typer app
app = typer.Typer(
    name="arxport",
    help="Derive sequence diagrams, state diagrams and requirement tables from AUTOSAR ARXML",
    add_completion=False,
    no_args_is_help=True,
)

# Global state
_config: ArxportConfig | None = None
_ci_mode = False
_logger = get_logger()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"arxport {__version__}")
        raise typer.Exit()


def _get_config() -> ArxportConfig:
    return _config if _config is not None else ArxportConfig()


@app.callback()
def main(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output with timestamps",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress info messages (warnings and errors only)",
        ),
    ] = False,
    ci: Annotated[
        bool,
        typer.Option(
            "--ci",
            help="Enable CI mode with JSON output",
        ),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """arxport - AUTOSAR ARXML export tool.

    Reads an ARXML file and exports a component interaction diagram, the
    behavioral state diagrams and the requirements table.
    """
    global _config, _ci_mode

    configure_from_cli(verbose=verbose, quiet=quiet, ci=ci)
    _ci_mode = ci

    try:
        _config = load_config(config_path=config)
        if _config.config_path:
            _logger.debug(f"Loaded config from: {_config.config_path}")
    except FileNotFoundError as e:
        _logger.error(str(e))
        raise typer.Exit(1)
    except (ValueError, OSError) as e:
        _logger.error(f"Failed to load config: {e}")
        raise typer.Exit(1)


# =============================================================================
# export command
# =============================================================================


@app.command()
def export(
    file: Annotated[
        Path,
        typer.Argument(
            help="ARXML file to export (*.arxml or *.xml)",
            dir_okay=False,
        ),
    ],
    sequence: Annotated[
        bool,
        typer.Option(
            "--sequence",
            help="Export the component interaction (sequence) diagram",
        ),
    ] = False,
    state: Annotated[
        bool,
        typer.Option(
            "--state",
            help="Export the behavioral state diagram(s)",
        ),
    ] = False,
    requirements: Annotated[
        bool,
        typer.Option(
            "--requirements",
            help="Export the requirements table",
        ),
    ] = False,
    component: Annotated[
        str | None,
        typer.Option(
            "--component",
            help="Restrict diagrams to one component (short-name path)",
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output directory (overrides config)",
            file_okay=False,
        ),
    ] = None,
    formats: Annotated[
        list[str] | None,
        typer.Option(
            "--format",
            "-f",
            help="Output format, repeatable: csv, mermaid, json, markdown, xlsx",
        ),
    ] = None,
    fail_fast: Annotated[
        bool,
        typer.Option(
            "--fail-fast",
            help="Stop after the first failed export option",
        ),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            help="Run the export but only list the files that would be written",
        ),
    ] = False,
) -> None:
    """Export diagrams and requirements from an ARXML file.

    Without --sequence/--state/--requirements the selection from the config
    file's export section is used.

    Exit codes:
        0: Every requested artifact exported
        1: Nothing could be exported
        2: Some artifacts exported, some failed
    """
    from arxport.models.export import ExportStatus
    from arxport.pipeline import ExportOptions, ExportPipeline
    from arxport.renderers.writer import ExportWriter

    config = _get_config()

    # CLI flags replace the configured selection entirely
    if sequence or state or requirements:
        options = ExportOptions(sequence=sequence, state=state, requirements=requirements)
    else:
        options = ExportOptions(
            sequence=config.export.sequence,
            state=config.export.state,
            requirements=config.export.requirements,
        )
    options.component = component or config.export.component
    options.fail_fast = fail_fast

    output_dir = output or Path(config.output.directory)
    output_formats = list(formats) if formats else list(config.output.formats)
    invalid = [fmt for fmt in output_formats if fmt not in VALID_FORMATS]
    if invalid:
        _logger.error(f"Invalid output format(s): {invalid}. Valid: {list(VALID_FORMATS)}")
        raise typer.Exit(1)

    _logger.info(f"Exporting {file} (formats: {', '.join(output_formats)})")

    pipeline = ExportPipeline(config=config)
    result = pipeline.run(file, options)

    for error in result.errors:
        _logger.warning(f"  [{error.component}] {error.message}")

    writer = ExportWriter(config=config)
    written: list[Path] = []
    try:
        if dry_run:
            planned = writer.plan(result, output_formats)
            typer.echo(f"\nWould write {len(planned)} file(s) to {output_dir}:")
            for filename in planned:
                typer.echo(f"   • {filename}")
            _logger.info("Dry run complete - no files written")
        elif result.produced:
            written = writer.write(result, output_dir, output_formats)
    except (OSError, ValueError) as e:
        _logger.error(f"Writing export failed: {e}")
        raise typer.Exit(1)

    if _ci_mode or config.ci.json_output:
        _logger.structured(
            logging.WARNING if result.errors else logging.INFO,
            f"Export {result.status.value}",
            status=result.status.value,
            produced=result.produced,
            errors=[error.to_dict() for error in result.errors],
            files=[str(path) for path in written],
        )
    else:
        status_emoji = "✅" if result.status == ExportStatus.COMPLETED else "⚠️"
        typer.echo(f"\n{status_emoji} Export {result.status.value}")
        for path in written:
            typer.echo(f"   • {path}")

    if result.status == ExportStatus.FAILED:
        raise typer.Exit(1)
    if result.status == ExportStatus.PARTIAL:
        raise typer.Exit(1 if config.ci.fail_on_warning else 2)
    raise typer.Exit(0)


# =============================================================================
# validate command
# =============================================================================


def _load_model(file: Path) -> Model:
    """Read and build the model of a file, exiting with 1 on failure."""
    from arxport.analyzers import ArxmlError
    from arxport.analyzers.xml_reader import read_input_file
    from arxport.pipeline import ExportPipeline

    try:
        data = read_input_file(file)
        return ExportPipeline(config=_get_config()).build(file.name, data)
    except ArxmlError as e:
        _logger.error(f"{e.kind}: {e.message}")
        typer.echo(f"❌ {e.message}")
        raise typer.Exit(1)


@app.command()
def validate(
    file: Annotated[
        Path,
        typer.Argument(
            help="ARXML file to validate",
            dir_okay=False,
        ),
    ],
) -> None:
    """Validate an ARXML file.

    Parses the file and resolves every reference without exporting anything.
    """
    _logger.info(f"Validating: {file}")

    model = _load_model(file)
    summary = model.summary()

    typer.echo(
        f"✅ {file.name} is valid: {summary['components']} components, "
        f"{summary['connectors']} connectors, {summary['state_machines']} state machines"
    )
    if model.external_references:
        typer.echo(f"   {len(model.external_references)} external reference(s) accepted")
    raise typer.Exit(0)


# =============================================================================
# inspect command
# =============================================================================


@app.command()
def inspect(
    file: Annotated[
        Path,
        typer.Argument(
            help="ARXML file to inspect",
            dir_okay=False,
        ),
    ],
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output results as JSON",
        ),
    ] = False,
) -> None:
    """Show the packages, components and entity counts of an ARXML file."""
    model = _load_model(file)

    if json_output:
        data = model.to_dict()
        data["components"] = [component.to_dict() for component in model.components()]
        typer.echo(json.dumps(data, indent=2))
        raise typer.Exit(0)

    typer.echo(f"\n📦 {file.name}\n")
    for key, value in model.summary().items():
        typer.echo(f"  {key.replace('_', ' '):<20} {value}")

    components = model.components()
    if components:
        typer.echo("\nComponents:")
        for component in components:
            behavior = component.internal_behavior
            details = [f"{len(component.ports)} ports"]
            if behavior is not None:
                details.append(f"{len(behavior.runnables)} runnables")
                if behavior.state_machine is not None:
                    details.append("state machine")
            if component.connectors:
                details.append(f"{len(component.connectors)} connectors")
            typer.echo(f"  {component.path} ({', '.join(details)})")
    raise typer.Exit(0)


# =============================================================================
# init command
# =============================================================================


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            help="Overwrite existing config",
        ),
    ] = False,
) -> None:
    """Initialize arxport configuration.

    Creates .arxport/config.yaml with the default settings.
    """
    config_dir = Path(".arxport")
    config_file = config_dir / "config.yaml"

    if config_file.exists() and not force:
        _logger.error(f"Config already exists: {config_file}")
        _logger.info("Use --force to overwrite")
        raise typer.Exit(1)

    config_dir.mkdir(exist_ok=True)
    config_file.write_text(create_default_config(), encoding="utf-8")
    _logger.info(f"Created config: {config_file}")

    typer.echo("\n✅ arxport configuration initialized")
    typer.echo(f"   Config: {config_file}")
    raise typer.Exit(0)


if __name__ == "__main__":
    app()
