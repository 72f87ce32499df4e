"""Shared pytest fixtures for arxport tests.

This module provides common fixtures used across unit and integration tests.
Fixtures are organized by category:
- Path fixtures: sample ARXML documents on disk
- Logging isolation: reset the arxport logger after CLI tests
- Model fixtures: pre-built models for generator and renderer tests
"""

import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest

from arxport.analyzers.model_builder import build_model
from arxport.analyzers.xml_reader import read_xml
from arxport.config import ArxportConfig
from arxport.models.arxml import Model
from tests.fixtures import SPEED_SYSTEM_PATH
from tests.fixtures.documents import two_component_document

# =============================================================================
# Logging isolation
# =============================================================================


@pytest.fixture(autouse=True)
def reset_arxport_logger() -> Iterator[None]:
    """Undo CLI logging setup so caplog sees arxport records in every test."""
    yield
    logger = logging.getLogger("arxport")
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def arxml_dir(fixtures_dir: Path) -> Path:
    """Return the path to the sample ARXML documents."""
    return fixtures_dir / "arxml"


@pytest.fixture
def speed_system_path() -> Path:
    """Return the path to the sensor/controller sample."""
    return SPEED_SYSTEM_PATH


# =============================================================================
# Model Fixtures
# =============================================================================


@pytest.fixture
def build() -> Callable[..., Model]:
    """Return a function that builds a Model from ARXML bytes."""

    def _build(data: bytes, config: ArxportConfig | None = None) -> Model:
        return build_model(read_xml(data), config=config, source_name="test.arxml")

    return _build


@pytest.fixture
def speed_model(speed_system_path: Path, build: Callable[..., Model]) -> Model:
    """Model of the sensor/controller sample."""
    return build(speed_system_path.read_bytes())


@pytest.fixture
def two_component_model(build: Callable[..., Model]) -> Model:
    """Model with one sender runnable connected to one receiver."""
    return build(two_component_document())


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def minimal_config() -> dict[str, Any]:
    """Return a minimal valid arxport configuration."""
    return {
        "output": {
            "directory": "out",
            "formats": ["mermaid"],
        }
    }


@pytest.fixture
def full_config() -> dict[str, Any]:
    """Return a full arxport configuration with all options."""
    return {
        "output": {
            "directory": "export",
            "formats": ["csv", "mermaid", "json", "markdown"],
        },
        "export": {
            "sequence": True,
            "state": True,
            "requirements": False,
            "component": "/Components/SpeedController",
        },
        "requirements": {
            "sdg_gid": "REQ",
            "id_field": "Key",
            "description_field": "Text",
            "requirement_tags": ["TRACEABLE-TEXT"],
            "free_text_pattern": r"^REQ:(?P<id>\S+)\s+(?P<description>.+)$",
            "auto_id_prefix": "R-",
        },
        "references": {
            "external_prefixes": ["/AUTOSAR_Platform"],
        },
        "ci": {
            "fail_on_warning": True,
            "json_output": True,
        },
    }
