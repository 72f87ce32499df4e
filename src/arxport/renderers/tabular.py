"""Requirements sheet serialization.

The sheet is a header row ["Requirement", "Description"] followed by one
row per requirement, written either as CSV text or as an Excel workbook
with a single "Requirements" worksheet.
"""

import csv
import io
from collections.abc import Iterable

from openpyxl import Workbook

from arxport.models.diagrams import RequirementAnnotation

REQUIREMENTS_HEADER = ["Requirement", "Description"]
REQUIREMENTS_SHEET = "Requirements"


def requirements_rows(annotations: Iterable[RequirementAnnotation]) -> list[list[str]]:
    """Build the rows of the requirements sheet, header first."""
    return [list(REQUIREMENTS_HEADER)] + [annotation.to_row() for annotation in annotations]


def requirements_csv(annotations: Iterable[RequirementAnnotation]) -> str:
    """Serialize the requirements sheet as CSV text.

    Args:
        annotations: Requirements in table order

    Returns:
        CSV with "\\r\\n" line endings (RFC 4180)
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerows(requirements_rows(annotations))
    return buffer.getvalue()


def requirements_xlsx(annotations: Iterable[RequirementAnnotation]) -> bytes:
    """Serialize the requirements sheet as an Excel workbook.

    Args:
        annotations: Requirements in table order

    Returns:
        XLSX file content
    """
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = REQUIREMENTS_SHEET
    for row in requirements_rows(annotations):
        sheet.append(row)

    # Requirement text is data; a leading "=" must not become a formula
    for cells in sheet.iter_rows():
        for cell in cells:
            if cell.data_type == "f":
                cell.data_type = "s"

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
