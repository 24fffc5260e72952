"""
BOM workbooks (openpyxl).

Reads and writes the single-sheet BOM workbook described in `rows`.
"""

from __future__ import annotations
import logging
import re
import zipfile
from datetime import date
from io import BytesIO
from typing import Any, BinaryIO, Iterable, List, Optional, Sequence, Union

import openpyxl
from openpyxl.styles import Font
from openpyxl.utils.exceptions import InvalidFileException

from domain.bom.entities import BOMNode
from domain.bom.tree import Tree
from domain.shared.exceptions import ValidationException

from .rows import HEADERS, rows_to_tree, tree_to_rows

logger = logging.getLogger(__name__)

SHEET_TITLE = "BOM"

# Sample rows of the blank import template
TEMPLATE_ROWS = [
    ["L1", "Product", "", "", None, "", None, "", "", "", ""],
    ["L2", "Module", "", "", None, "", None, "", "", "", ""],
    ["L3", "Sub-module", "", "", None, "", None, "", "", "", ""],
    ["L4", "Family", "", "", None, "", None, "", "", "", ""],
    ["L5", "Group", "", "", None, "", None, "", "", "", ""],
    ["L6", "CPU processor", "CPU-001", "U1.A", 1, "piece", 1200, "Intel", "MassProduction", "Active", "Primary"],
    ["L7", "CPU processor", "CPU-002", "U1.A.1", 1, "piece", 1100, "AMD", "MassProduction", "Inactive", "Substitute"],
    ["L6", "Memory module", "MEM-001", "M1.A", 2, "piece", 400, "Kingston", "MassProduction", "Active", "Primary"],
    ["L7", "Memory module", "MEM-002", "M1.A.1", 2, "piece", 380, "Crucial", "MassProduction", "Inactive", "Substitute"],
    ["L6", "Solid state drive", "SSD-001", "S1.A", 1, "piece", 500, "Samsung", "MassProduction", "Active", "Primary"],
]


def _build_workbook(rows: Iterable[Sequence[Any]], title: str = "") -> bytes:
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE
    if title:
        wb.properties.title = title

    header_font = Font(bold=True)
    for col, header in enumerate(HEADERS, 1):
        cell = ws.cell(row=1, column=col, value=header)
        cell.font = header_font

    for row in rows:
        ws.append(list(row))

    # Auto-width columns
    for column in ws.columns:
        max_length = max(len(str(cell.value)) for cell in column if cell.value is not None)
        ws.column_dimensions[column[0].column_letter].width = max_length + 2

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def export_workbook(tree: Sequence[BOMNode], product_name: str = "") -> bytes:
    """Write a tree as an .xlsx document."""
    rows = tree_to_rows(tree)
    content = _build_workbook(rows, title=product_name)
    logger.info(f"Exported {len(rows)} BOM rows for '{product_name}'")
    return content


def template_workbook() -> bytes:
    """Blank import template: header plus sample rows."""
    return _build_workbook(TEMPLATE_ROWS, title="BOM import template")


def import_workbook(stream: Union[BinaryIO, bytes]) -> Tree:
    """
    Read a tree from an .xlsx document.

    The first row of the active sheet must be the BOM header, otherwise
    ValidationException is raised. Data rows are tolerated.
    """
    if isinstance(stream, (bytes, bytearray)):
        stream = BytesIO(stream)

    try:
        wb = openpyxl.load_workbook(stream, read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
        raise ValidationException(f"Not a readable Excel workbook: {e}", field="file")

    try:
        rows: List[Sequence[Any]] = list(wb.active.iter_rows(values_only=True))
    finally:
        wb.close()

    header = _header(rows[0] if rows else None)
    if header != list(HEADERS):
        raise ValidationException(
            "Workbook header does not match the BOM row layout",
            field="header",
            value=header,
        )

    tree = rows_to_tree(rows[1:])
    if not tree:
        raise ValidationException("Workbook contains no BOM rows", field="file")

    logger.info(f"Imported BOM workbook: {len(rows) - 1} data rows, {len(tree)} root node(s)")
    return tree


def _header(row: Optional[Sequence[Any]]) -> List[str]:
    if not row:
        return []
    cells = [str(value).strip() if value is not None else "" for value in row[:len(HEADERS)]]
    return cells


def export_filename(product_name: str, on: Optional[date] = None) -> str:
    """Download name of an exported BOM, e.g. `X1_Carbon_BOM_2024-01-15.xlsx`."""
    safe_name = re.sub(r"[^\w.-]+", "_", product_name).strip("_") or "BOM"
    return f"{safe_name}_BOM_{(on or date.today()).isoformat()}.xlsx"
