"""
Tests for reading and writing BOM workbooks.
"""

from datetime import date
from decimal import Decimal
from io import BytesIO

import openpyxl
import pytest

from domain.bom.costing import total_cost
from domain.bom.tree import primary_parts
from domain.shared.exceptions import ValidationException
from infrastructure.excel import (
    HEADERS,
    export_filename,
    export_workbook,
    import_workbook,
    template_workbook,
    tree_to_rows,
)


def _workbook_bytes(rows):
    wb = openpyxl.Workbook()
    ws = wb.active
    for row in rows:
        ws.append(list(row))
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


class TestExportWorkbook:

    def test_sheet_layout(self, same_category_tree):
        content = export_workbook(same_category_tree, 'Test Laptop')

        wb = openpyxl.load_workbook(BytesIO(content))
        ws = wb.active
        assert ws.title == 'BOM'
        assert [cell.value for cell in ws[1]] == list(HEADERS)
        assert ws['A1'].font.bold
        assert ws.max_row == 9
        assert wb.properties.title == 'Test Laptop'

    def test_import_reads_export_back(self, same_category_tree):
        tree = import_workbook(export_workbook(same_category_tree))

        assert tree_to_rows(tree) == tree_to_rows(same_category_tree)
        assert total_cost(tree) == total_cost(same_category_tree)

    def test_filename(self):
        assert export_filename('ThinkPad X1 Carbon', date(2024, 1, 15)) == (
            'ThinkPad_X1_Carbon_BOM_2024-01-15.xlsx'
        )
        assert export_filename('', date(2024, 1, 15)) == 'BOM_BOM_2024-01-15.xlsx'


class TestImportWorkbook:

    def test_accepts_file_objects(self, scenario_a_tree):
        tree = import_workbook(BytesIO(export_workbook(scenario_a_tree)))

        assert total_cost(tree) == Decimal('200')

    def test_rejects_wrong_header(self):
        content = _workbook_bytes([['Name', 'Qty'], ['CPU', 1]])

        with pytest.raises(ValidationException) as exc_info:
            import_workbook(content)

        assert exc_info.value.details['field'] == 'header'

    def test_rejects_non_workbook(self):
        with pytest.raises(ValidationException) as exc_info:
            import_workbook(b'not a workbook')

        assert exc_info.value.details['field'] == 'file'

    def test_rejects_header_only(self):
        with pytest.raises(ValidationException):
            import_workbook(_workbook_bytes([HEADERS]))

    def test_template_is_importable(self):
        tree = import_workbook(template_workbook())

        assert len(tree) == 1
        assert [part.part_id for part in primary_parts(tree)] == ['CPU-001', 'MEM-001', 'SSD-001']
        assert total_cost(tree) == Decimal('2500')
