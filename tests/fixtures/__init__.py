"""Test fixtures for arxport.

This package provides sample ARXML documents for integration and end-to-end
testing.

Sample Documents:
- arxml/speed_system.arxml: sensor and controller wired by an assembly
  connector, a controller state machine with one unreachable state, and
  requirements in DESC text, ADMIN-DATA and a STRUCTURED-REQ element
- arxml/empty.arxml: AUTOSAR root without packages
- arxml/malformed.arxml: ill-formed XML
- arxml/unresolved.arxml: port referencing an interface that does not exist
"""

from pathlib import Path

# Path to fixtures directory
FIXTURES_DIR = Path(__file__).parent

# Path to ARXML samples
ARXML_DIR = FIXTURES_DIR / "arxml"

# Specific sample paths
SPEED_SYSTEM_PATH = ARXML_DIR / "speed_system.arxml"
EMPTY_PATH = ARXML_DIR / "empty.arxml"
MALFORMED_PATH = ARXML_DIR / "malformed.arxml"
UNRESOLVED_PATH = ARXML_DIR / "unresolved.arxml"


def get_sample_arxml(name: str) -> Path:
    """Get path to a sample ARXML document.

    Args:
        name: File name of the sample (e.g., "speed_system.arxml")

    Returns:
        Path to the sample

    Raises:
        ValueError: If the sample doesn't exist
    """
    path = ARXML_DIR / name
    if not path.exists():
        raise ValueError(f"Sample ARXML not found: {name}")
    return path
