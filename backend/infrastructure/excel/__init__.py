"""
Excel infrastructure - BOM row codec and openpyxl workbooks.
"""

from .rows import HEADERS, rows_to_tree, tree_to_rows
from .workbook import export_filename, export_workbook, import_workbook, template_workbook

__all__ = [
    "HEADERS",
    "rows_to_tree",
    "tree_to_rows",
    "export_filename",
    "export_workbook",
    "import_workbook",
    "template_workbook",
]
