"""arxport report rendering.

This module provides Jinja2-based rendering of export results to Markdown.
"""

from arxport.templates.renderer import DocumentRenderer

__all__ = ["DocumentRenderer"]
