"""Integration tests for the full export pipeline.

Tests reproducibility of the written artifacts and end-to-end handling of
encodings and configuration.
"""

from pathlib import Path

import pytest

from arxport.config import ArxportConfig, OutputConfig, load_config_from_dict
from arxport.models.export import ExportStatus
from arxport.pipeline import ExportOptions, ExportPipeline
from arxport.renderers.writer import ExportWriter
from tests.fixtures import SPEED_SYSTEM_PATH

ALL = ExportOptions(sequence=True, state=True, requirements=True)


def _export(source: Path, target: Path, config: ArxportConfig | None = None) -> list[Path]:
    config = config or ArxportConfig(output=OutputConfig(formats=["csv", "mermaid"]))
    result = ExportPipeline(config).run(source, ALL)
    assert result.status == ExportStatus.COMPLETED
    return ExportWriter(config).write(result, target)


class TestReproducibility:
    """Tests that the same input always yields the same artifacts."""

    def test_identical_output_across_runs(self, tmp_path: Path) -> None:
        first = _export(SPEED_SYSTEM_PATH, tmp_path / "first")
        second = _export(SPEED_SYSTEM_PATH, tmp_path / "second")

        assert [p.name for p in first] == [p.name for p in second]
        for a, b in zip(first, second, strict=True):
            assert a.read_bytes() == b.read_bytes()

    def test_utf16_input_matches_utf8(self, tmp_path: Path) -> None:
        """Test that re-encoding the document does not change the export."""
        text = SPEED_SYSTEM_PATH.read_text(encoding="utf-8").replace(
            'encoding="UTF-8"', 'encoding="UTF-16"'
        )
        utf16 = tmp_path / "speed_utf16.arxml"
        utf16.write_bytes(text.encode("utf-16"))

        original = _export(SPEED_SYSTEM_PATH, tmp_path / "utf8")
        reencoded = _export(utf16, tmp_path / "utf16")

        for a, b in zip(original, reencoded, strict=True):
            assert a.read_bytes() == b.read_bytes()


class TestConfiguredExport:
    """End-to-end runs driven by configuration."""

    @pytest.fixture
    def config(self, full_config: dict) -> ArxportConfig:
        """Load the full sample configuration."""
        return load_config_from_dict(full_config)

    def test_custom_requirement_mapping_finds_nothing(
        self, config: ArxportConfig, tmp_path: Path
    ) -> None:
        """Test that a mapping not used by the document yields an empty sheet."""
        result = ExportPipeline(config).run(SPEED_SYSTEM_PATH, ExportOptions(requirements=True))

        assert result.status == ExportStatus.COMPLETED
        assert result.requirements == ()

        (path,) = ExportWriter(config).write(result, tmp_path, ["csv"])
        assert path.read_text(encoding="utf-8", newline="") == "Requirement,Description\r\n"

    def test_markdown_report(self, tmp_path: Path) -> None:
        config = ArxportConfig(output=OutputConfig(formats=["markdown"]))
        result = ExportPipeline(config).run(SPEED_SYSTEM_PATH, ALL)

        (report,) = ExportWriter(config).write(result, tmp_path)

        content = report.read_text(encoding="utf-8")
        assert "SpeedSensor->>SpeedController: VehicleSpeed" in content
        assert "[*] --> Idle" in content
        assert "REQ-SYS-1" in content
