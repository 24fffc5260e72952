"""
Tests for the BOM Celery tasks (run inline).
"""

import os
from decimal import Decimal

from application.tasks.bom_tasks import (
    export_bom_to_excel,
    import_bom_from_excel,
    validate_bom_structure,
)
from presentation.api.v1.serializers.bom import tree_to_data


class TestBOMTasks:

    def test_validate_structure(self, same_category_tree):
        result = validate_bom_structure.apply(args=[tree_to_data(same_category_tree)]).get()

        assert result['valid'] is True
        assert result['node_count'] == 8
        assert Decimal(result['total_cost']) == Decimal('300')

    def test_validate_reports_bad_snapshot(self):
        result = validate_bom_structure.apply(args=[['not a node']]).get()

        assert 'error' in result

    def test_export_then_import(self, settings, tmp_path, scenario_a_tree):
        settings.BOM_EXPORT_DIR = str(tmp_path)

        exported = export_bom_to_excel.apply(
            args=[tree_to_data(scenario_a_tree), 'Test Laptop'],
        ).get()

        assert exported['filename'].startswith('Test_Laptop_BOM_')
        assert os.path.exists(exported['filepath'])

        imported = import_bom_from_excel.apply(args=[exported['filepath']]).get()

        assert Decimal(imported['total_cost']) == Decimal('200')
        assert imported['tree'][0]['title'] == 'Unit'

    def test_import_missing_file(self, tmp_path):
        result = import_bom_from_excel.apply(args=[str(tmp_path / 'missing.xlsx')]).get()

        assert 'error' in result
