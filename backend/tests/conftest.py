"""
Shared fixtures for BOM Studio tests.
"""

import pytest

from domain.bom.tree import normalize
from infrastructure.catalog import TemplateCatalog


def _part(key, part_id, cost, quantity=1, status=None, **extra):
    node = {
        'key': key,
        'title': extra.pop('title', part_id),
        'partId': part_id,
        'cost': cost,
        'quantity': quantity,
        'unit': 'piece',
        'supplier': extra.pop('supplier', 'Intel'),
        'lifecycle': 'MassProduction',
        'children': [],
    }
    if status is not None:
        node['status'] = status
    node.update(extra)
    return node


def _assembly(primaries, key='unit'):
    """Wrap primary part mappings in an L1..L5 chain."""
    group = {'key': f'{key}-m-s-f-g', 'title': 'Group', 'children': list(primaries)}
    family = {'key': f'{key}-m-s-f', 'title': 'Family', 'children': [group]}
    sub_module = {'key': f'{key}-m-s', 'title': 'Sub-module', 'children': [family]}
    module = {'key': f'{key}-m', 'title': 'Module', 'children': [sub_module]}
    return [{'key': key, 'title': 'Unit', 'children': [module]}]


GROUP_KEY = 'unit-m-s-f-g'


@pytest.fixture
def part():
    """Factory for raw L6/L7 node mappings."""
    return _part


@pytest.fixture
def build_tree():
    """Factory: normalized tree with the given primaries under one L5 group."""
    def build(*primaries):
        return normalize(_assembly(primaries))
    return build


@pytest.fixture
def primary_key():
    return f'{GROUP_KEY}-cpu'


@pytest.fixture
def substitute_key(primary_key):
    return f'{primary_key}-alt'


@pytest.fixture
def scenario_a_tree(build_tree):
    """L6 (cost 100 x 2, Active) with an L7 (cost 80 x 2, Inactive)."""
    return build_tree(_part(
        f'{GROUP_KEY}-cpu', 'CPU-001', 100, quantity=2, status='Active',
        children=[_part(
            f'{GROUP_KEY}-cpu-alt', 'CPU-002', 80, quantity=2,
            status='Inactive', parentStatus='Active',
        )],
    ))


@pytest.fixture
def mismatch_tree(build_tree):
    """L6 CPU part whose substitute is a RAM part."""
    return build_tree(_part(
        f'{GROUP_KEY}-cpu', 'CPU-001', 200,
        children=[_part(f'{GROUP_KEY}-cpu-alt', 'RAM-002', 150, status='Inactive')],
    ))


@pytest.fixture
def same_category_tree(build_tree):
    """L6 CPU-001 (cost 200) with substitute CPU-002 (cost 150)."""
    return build_tree(
        _part(
            f'{GROUP_KEY}-cpu', 'CPU-001', 200, title='Core i7',
            children=[_part(
                f'{GROUP_KEY}-cpu-alt', 'CPU-002', 150, title='Core i5',
                status='Inactive', supplier='AMD', position='U1.A.1',
            )],
            position='U1.A',
        ),
        _part(f'{GROUP_KEY}-mem', 'MEM-001', 50, quantity=2, supplier='Samsung'),
    )


@pytest.fixture
def catalog():
    return TemplateCatalog([{
        'name': 'Test Laptop',
        'description': 'Fixture product',
        'version': 'v1',
        'structure': _assembly([
            _part('t-cpu', 'CPU-100', 300, title='Catalog CPU 100', children=[
                _part('t-cpu-alt', 'CPU-200', 250, title='Catalog CPU 200'),
            ]),
            _part('t-mem', 'MEM-100', 40, title='Catalog MEM 100'),
        ], key='t'),
    }])
