from decimal import Decimal

from domain.bom.costing import total_cost
from domain.bom.tree import primary_parts, validate_structure
from domain.shared.value_objects import BOMLevel, Lifecycle
from infrastructure.catalog import TemplateCatalog, default_catalog


class TestTemplateCatalog:
    """Tests for the template-backed part catalog."""

    def test_lookup(self, catalog):
        info = catalog.lookup('CPU-200')

        assert info.title == 'Catalog CPU 200'
        assert info.cost == Decimal('250')
        assert info.level is BOMLevel.L7
        assert info.product == 'Test Laptop'
        assert catalog.lookup('CPU-999') is None

    def test_parts_in_category(self, catalog):
        assert [info.part_id for info in catalog.parts_in_category('MEM')] == ['MEM-100']

    def test_templates(self, catalog):
        [template] = catalog.list_templates()

        assert template.name == 'Test Laptop'
        assert catalog.get_template('Test Laptop') is template
        assert catalog.get_template('Other') is None

    def test_first_occurrence_wins(self):
        def definition(name, cost):
            return {'name': name, 'structure': [{
                'key': name,
                'children': [{'children': [{'children': [{'children': [{'children': [
                    {'partId': 'CPU-100', 'title': name, 'cost': cost},
                ]}]}]}]}],
            }]}

        catalog = TemplateCatalog([definition('A', 1), definition('B', 2)])

        assert catalog.lookup('CPU-100').cost == Decimal('1')
        assert catalog.lookup('CPU-100').product == 'A'


class TestBuiltInTemplates:

    def test_default_catalog_is_cached(self):
        assert default_catalog() is default_catalog()

    def test_templates_are_valid(self):
        for template in default_catalog().list_templates():
            assert validate_structure(template.structure).is_valid, template.name

    def test_flagship_template(self):
        template = default_catalog().get_template('ThinkPad X1 Carbon Gen12')

        primaries = primary_parts(template.structure)
        assert len(primaries) == 7
        assert sum(1 for primary in primaries if primary.substitute) == 3
        assert total_cost(template.structure) == Decimal('8393')

    def test_rnd_part(self):
        info = default_catalog().lookup('GPU-RTX4070')

        assert info.lifecycle is Lifecycle.RND
        assert info.product == 'Legion Slim 7 Gen8'
