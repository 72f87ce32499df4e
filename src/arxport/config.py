"""arxport configuration system.

Configuration is primarily YAML-based with minimal CLI overrides
(--output, --format, --component and the export option flags).
Supports environment variable substitution (${VAR}) in config files.

Configuration file discovery (in priority order):
1. CLI --config argument
2. ./.arxport/config.yaml
3. ./arxport.yaml
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

# =============================================================================
# Configuration Dataclasses
# =============================================================================

DEFAULT_FORMATS = ("csv", "mermaid", "json", "markdown")
VALID_FORMATS = (*DEFAULT_FORMATS, "xlsx")

DEFAULT_FREE_TEXT_PATTERN = r"^\s*\[(?P<id>[A-Za-z][\w.\-]*)\]\s*(?P<description>.+)$"


@dataclass
class OutputConfig:
    """Output configuration.

    Attributes:
        directory: Directory the export files are written to
        formats: Serializers to run (csv, mermaid, json, markdown, xlsx)
    """

    directory: str = "export"
    formats: list[str] = field(default_factory=lambda: list(DEFAULT_FORMATS))

    def __post_init__(self) -> None:
        """Validate output formats."""
        invalid = [fmt for fmt in self.formats if fmt not in VALID_FORMATS]
        if invalid:
            raise ValueError(f"Invalid output format(s): {invalid}. Valid: {list(VALID_FORMATS)}")


@dataclass
class RequirementsConfig:
    """Where requirement text lives in the target ARXML dialect.

    Attributes:
        sdg_gid: GID of ADMIN-DATA special data groups carrying requirements
        id_field: GID of the SD holding the requirement id
        description_field: GID of the SD holding the requirement text
        requirement_tags: Element tags that are requirements themselves
        free_text_pattern: Regex applied to DESC / INTRODUCTION lines;
            must define the named groups "id" and "description"
        auto_id_prefix: Prefix for generated ids when a requirement has none
    """

    sdg_gid: str = "REQUIREMENT"
    id_field: str = "ID"
    description_field: str = "DESCRIPTION"
    requirement_tags: list[str] = field(
        default_factory=lambda: ["STRUCTURED-REQ", "TRACEABLE-TEXT"]
    )
    free_text_pattern: str = DEFAULT_FREE_TEXT_PATTERN
    auto_id_prefix: str = "REQ-AUTO-"

    def __post_init__(self) -> None:
        """Validate the free-text pattern."""
        try:
            compiled = re.compile(self.free_text_pattern)
        except re.error as e:
            raise ValueError(f"Invalid free_text_pattern: {e}") from e

        missing = {"id", "description"} - set(compiled.groupindex)
        if missing:
            raise ValueError(
                f"free_text_pattern must define named groups: {sorted(missing)}"
            )

    @property
    def compiled_pattern(self) -> re.Pattern[str]:
        return re.compile(self.free_text_pattern)


@dataclass
class ReferencesConfig:
    """Reference resolution settings.

    Attributes:
        external_prefixes: Path prefixes whose targets may be defined in other
            files (e.g., "/AUTOSAR_Platform"). Unresolvable references under
            these prefixes are recorded instead of failing.
    """

    external_prefixes: list[str] = field(default_factory=list)


@dataclass
class ExportConfig:
    """Default export selection (the upload form's checkboxes).

    Attributes:
        sequence: Export the sequence diagram
        state: Export the state diagram(s)
        requirements: Export the requirements table
        component: Target component path (None for the whole model)
    """

    sequence: bool = False
    state: bool = False
    requirements: bool = False
    component: str | None = None


@dataclass
class CIConfig:
    """CI/CD-specific configuration.

    Attributes:
        fail_on_warning: Exit with error if any export option failed
        json_output: Use JSON output format
    """

    fail_on_warning: bool = False
    json_output: bool = False


@dataclass
class ArxportConfig:
    """Top-level arxport configuration.

    Attributes:
        output: Output directory and formats
        requirements: Requirement source mapping
        references: Reference resolution settings
        export: Default export selection
        ci: CI/CD settings
    """

    output: OutputConfig = field(default_factory=OutputConfig)
    requirements: RequirementsConfig = field(default_factory=RequirementsConfig)
    references: ReferencesConfig = field(default_factory=ReferencesConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    ci: CIConfig = field(default_factory=CIConfig)

    # Runtime overrides (set by CLI)
    _config_path: Path | None = field(default=None, repr=False)

    @property
    def config_path(self) -> Path | None:
        """Get the path to the config file that was loaded."""
        return self._config_path


# =============================================================================
# Environment Variable Substitution
# =============================================================================


def substitute_env_vars(value: Any) -> Any:
    """Substitute environment variables in config values.

    Supports ${VAR} syntax for environment variable substitution.
    Example: ${ARXPORT_OUTPUT} -> value of ARXPORT_OUTPUT

    Args:
        value: Config value (string, dict, list, or other)

    Returns:
        Value with environment variables substituted
    """
    if isinstance(value, str):
        # Pattern: ${VAR_NAME}
        pattern = re.compile(r"\$\{([^}]+)\}")

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                raise ValueError(f"Environment variable not set: {var_name}")
            return env_value

        return pattern.sub(replace_var, value)

    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [substitute_env_vars(v) for v in value]

    return value


# =============================================================================
# Config File Discovery
# =============================================================================


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find configuration file in standard locations.

    Search order:
    1. ./.arxport/config.yaml
    2. ./arxport.yaml

    Args:
        start_path: Starting directory for search (defaults to cwd)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_path is None:
        start_path = Path.cwd()

    start_path = start_path.resolve()

    candidates = [
        start_path / ".arxport" / "config.yaml",
        start_path / "arxport.yaml",
    ]

    for candidate in candidates:
        if candidate.exists():
            return candidate

    return None


# =============================================================================
# Config Loading
# =============================================================================


def load_config_from_dict(data: dict[str, Any]) -> ArxportConfig:
    """Load configuration from a dictionary.

    Args:
        data: Configuration dictionary

    Returns:
        ArxportConfig instance
    """
    # Regex patterns may contain "${" so they bypass substitution
    raw_pattern = None
    if isinstance(data.get("requirements"), dict):
        req_raw = dict(data["requirements"])
        raw_pattern = req_raw.pop("free_text_pattern", None)
        data = {**data, "requirements": req_raw}

    data = substitute_env_vars(data)

    config = ArxportConfig()

    if "output" in data:
        output_data = data["output"] or {}
        config.output = OutputConfig(
            directory=output_data.get("directory", config.output.directory),
            formats=list(output_data.get("formats", config.output.formats)),
        )

    if "requirements" in data:
        req_data = data["requirements"] or {}
        defaults = config.requirements
        config.requirements = RequirementsConfig(
            sdg_gid=req_data.get("sdg_gid", defaults.sdg_gid),
            id_field=req_data.get("id_field", defaults.id_field),
            description_field=req_data.get("description_field", defaults.description_field),
            requirement_tags=list(req_data.get("requirement_tags", defaults.requirement_tags)),
            free_text_pattern=raw_pattern or defaults.free_text_pattern,
            auto_id_prefix=req_data.get("auto_id_prefix", defaults.auto_id_prefix),
        )

    if "references" in data:
        ref_data = data["references"] or {}
        config.references = ReferencesConfig(
            external_prefixes=list(ref_data.get("external_prefixes", [])),
        )

    if "export" in data:
        export_data = data["export"] or {}
        config.export = ExportConfig(
            sequence=export_data.get("sequence", False),
            state=export_data.get("state", False),
            requirements=export_data.get("requirements", False),
            component=export_data.get("component"),
        )

    if "ci" in data:
        ci_data = data["ci"] or {}
        config.ci = CIConfig(
            fail_on_warning=ci_data.get("fail_on_warning", False),
            json_output=ci_data.get("json_output", False),
        )

    return config


def load_config(
    config_path: Path | None = None,
    auto_discover: bool = True,
) -> ArxportConfig:
    """Load configuration from file.

    Args:
        config_path: Explicit path to config file
        auto_discover: Whether to search for config file if not specified

    Returns:
        ArxportConfig instance

    Raises:
        FileNotFoundError: If config_path specified but doesn't exist
    """
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        found_path = config_path
    elif auto_discover:
        found_path = find_config_file()
    else:
        found_path = None

    if found_path is not None:
        with open(found_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        config = load_config_from_dict(data)
        config._config_path = found_path
    else:
        config = ArxportConfig()

    return config


def create_default_config() -> str:
    """Create default configuration YAML content.

    Returns:
        YAML string with default configuration and comments
    """
    return '''# arxport Configuration

# Output settings
output:
  directory: "export"
  # Available: csv, mermaid, json, markdown, xlsx
  formats: ["csv", "mermaid", "json", "markdown"]

# Default export selection (overridden by --sequence/--state/--requirements)
export:
  sequence: true
  state: true
  requirements: true
  # component: "/Components/Controller"

# Where requirement text lives in your ARXML files
requirements:
  sdg_gid: "REQUIREMENT"           # ADMIN-DATA/SDGS/SDG[@GID]
  id_field: "ID"                   # SD[@GID] holding the requirement id
  description_field: "DESCRIPTION" # SD[@GID] holding the requirement text
  requirement_tags: ["STRUCTURED-REQ", "TRACEABLE-TEXT"]
  auto_id_prefix: "REQ-AUTO-"
  # free_text_pattern: '^\\s*\\[(?P<id>[A-Za-z][\\w.\\-]*)\\]\\s*(?P<description>.+)$'

# Reference resolution
references:
  # Prefixes whose targets live in other files (platform types, ...)
  external_prefixes: []
  # external_prefixes: ["/AUTOSAR_Platform"]

# CI/CD settings
ci:
  fail_on_warning: false
  json_output: false
'''
