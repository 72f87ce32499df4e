"""Entry point for running arxport as a module.

Usage:
    python -m arxport [command] [options]

Example:
    python -m arxport export model.arxml --sequence --requirements
    python -m arxport validate model.arxml
"""

from arxport.cli import app

if __name__ == "__main__":
    app()
