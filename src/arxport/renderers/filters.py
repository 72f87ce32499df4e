"""Jinja2 filters for the Markdown report.

These keep table cells and inline code intact when ARXML text contains
characters that are significant in Markdown.
"""

import re

# Characters that would break a Markdown table row
_TABLE_BREAKERS = re.compile(r"\s*[|\r\n][|\r\n\s]*")


def md_cell(value: object) -> str:
    """Render a value as a single Markdown table cell.

    Pipes and line breaks are replaced so the row stays on one line.

    Examples:
        >>> md_cell("Shall start | stop")
        'Shall start / stop'
        >>> md_cell(None)
        ''
    """
    if value is None:
        return ""
    text = str(value).strip()
    return _TABLE_BREAKERS.sub(lambda m: " / " if "|" in m.group() else " ", text)


def md_code(value: object) -> str:
    """Wrap a value in inline code, using a fence longer than any backtick run."""
    text = "" if value is None else str(value)
    longest = max((len(run) for run in re.findall(r"`+", text)), default=0)
    fence = "`" * (longest + 1)
    padding = " " if text.startswith("`") or text.endswith("`") else ""
    return f"{fence}{padding}{text}{padding}{fence}"
