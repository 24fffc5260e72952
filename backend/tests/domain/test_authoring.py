"""
Tests for manual BOM authoring: adding, deleting and editing nodes.
"""

from decimal import Decimal

import pytest

from domain.bom.authoring import NodeDraft, add_node, delete_part, edit_node
from domain.bom.entities import PrimaryPart, SubstitutePart
from domain.bom.tree import count_nodes, find_node, validate_structure
from domain.shared.exceptions import (
    BusinessRuleViolationException,
    EntityNotFoundException,
    ValidationException,
)
from domain.shared.value_objects import ItemStatus, Lifecycle

GROUP_KEY = 'unit-m-s-f-g'


class TestAddNode:

    def test_primary_under_group(self, same_category_tree, primary_key):
        result = add_node(
            same_category_tree, GROUP_KEY,
            NodeDraft(title='Fan', part_id='FAN-001', cost=Decimal('20')),
        )

        fan = find_node(result.tree, result.key)
        assert result.key == f'{GROUP_KEY}-l6-3'
        assert isinstance(fan, PrimaryPart)
        assert fan.level == 5
        assert fan.status is ItemStatus.ACTIVE
        assert fan.quantity == Decimal('1')
        assert fan.unit == 'piece'
        assert fan.lifecycle is Lifecycle.MASS_PRODUCTION
        assert fan.position == 'U3.A'
        assert result.total_cost == Decimal('320')
        assert validate_structure(result.tree).is_valid
        assert find_node(result.tree, primary_key) is find_node(same_category_tree, primary_key)

    def test_substitute_follows_primary_status(self, same_category_tree):
        memory_key = f'{GROUP_KEY}-mem'

        result = add_node(
            same_category_tree, memory_key,
            NodeDraft(title='DDR5 8GB', part_id='MEM-002', cost=Decimal('45')),
        )

        substitute = find_node(result.tree, result.key)
        assert isinstance(substitute, SubstitutePart)
        assert substitute.status is ItemStatus.INACTIVE
        assert substitute.parent_status is ItemStatus.ACTIVE
        assert result.total_cost == Decimal('300')
        assert validate_structure(result.tree).parent_status_mismatches == []

    def test_second_substitute_is_rejected(self, same_category_tree, primary_key):
        with pytest.raises(BusinessRuleViolationException) as exc_info:
            add_node(same_category_tree, primary_key, NodeDraft(title='Core i3', part_id='CPU-003'))

        assert exc_info.value.details['rule'] == 'SUBSTITUTE_EXISTS'

    def test_nothing_below_substitute(self, same_category_tree, substitute_key):
        with pytest.raises(BusinessRuleViolationException) as exc_info:
            add_node(same_category_tree, substitute_key, NodeDraft(title='Too deep'))

        assert exc_info.value.details['rule'] == 'MAX_DEPTH'

    def test_new_unit_without_parent(self, same_category_tree):
        result = add_node(same_category_tree, None, NodeDraft(title='Docking station'))

        unit = result.tree[-1]
        assert unit.key == 'l1-2'
        assert unit.level == 0
        assert unit.quantity is None
        assert unit.position is None
        assert result.tree[0] is same_category_tree[0]

    def test_start_from_empty_tree(self):
        result = add_node((), None, NodeDraft(title='Laptop', key='laptop'))

        assert [node.key for node in result.tree] == ['laptop']

    def test_key_collision_gets_suffix(self, same_category_tree):
        result = add_node(same_category_tree, GROUP_KEY, NodeDraft(title='Other CPU', key='cpu'))

        assert result.key == f'{GROUP_KEY}-cpu-2'

    def test_negative_cost_is_rejected(self, same_category_tree):
        with pytest.raises(ValidationException):
            add_node(same_category_tree, GROUP_KEY, NodeDraft(title='Fan', cost=Decimal('-1')))

    def test_unknown_parent_is_noop(self, same_category_tree):
        result = add_node(same_category_tree, 'missing', NodeDraft(title='Fan'))

        assert result.tree is same_category_tree
        assert not result.changed

    def test_unknown_parent_in_strict_mode(self, same_category_tree):
        with pytest.raises(EntityNotFoundException):
            add_node(same_category_tree, 'missing', NodeDraft(title='Fan'), strict=True)


class TestDeletePart:

    def test_primary_goes_with_its_substitute(self, same_category_tree, primary_key, substitute_key):
        result = delete_part(same_category_tree, primary_key)

        assert find_node(result.tree, primary_key) is None
        assert find_node(result.tree, substitute_key) is None
        assert count_nodes(result.tree) == 6
        assert result.total_cost == Decimal('100')

    def test_substitute(self, same_category_tree, primary_key, substitute_key):
        result = delete_part(same_category_tree, substitute_key)

        assert find_node(result.tree, primary_key).children == ()
        assert result.total_cost == Decimal('300')

    @pytest.mark.parametrize('key', ['unit', 'unit-m', GROUP_KEY])
    def test_assemblies_cannot_be_deleted(self, same_category_tree, key):
        with pytest.raises(BusinessRuleViolationException) as exc_info:
            delete_part(same_category_tree, key)

        assert exc_info.value.details['rule'] == 'ASSEMBLY_NOT_DELETABLE'

    def test_unknown_key(self, same_category_tree):
        assert delete_part(same_category_tree, 'missing').tree is same_category_tree
        with pytest.raises(EntityNotFoundException):
            delete_part(same_category_tree, 'missing', strict=True)


class TestEditNode:

    def test_part_cost_updates_total(self, same_category_tree):
        result = edit_node(same_category_tree, f'{GROUP_KEY}-mem', {'cost': '60', 'supplier': 'Micron'})

        memory = find_node(result.tree, f'{GROUP_KEY}-mem')
        assert memory.cost == Decimal('60')
        assert memory.supplier == 'Micron'
        assert result.total_cost == Decimal('320')

    def test_assembly_title(self, same_category_tree):
        result = edit_node(same_category_tree, 'unit-m', {'title': 'Main board'})

        assert find_node(result.tree, 'unit-m').title == 'Main board'
        assert result.total_cost == Decimal('300')

    def test_lifecycle_is_parsed(self, same_category_tree, primary_key):
        result = edit_node(same_category_tree, primary_key, {'lifecycle': 'PhaseOut'})

        assert find_node(result.tree, primary_key).lifecycle is Lifecycle.PHASE_OUT

    def test_equal_values_change_nothing(self, same_category_tree, primary_key):
        result = edit_node(same_category_tree, primary_key, {'title': 'Core i7', 'cost': 200})

        assert not result.changed
        assert result.tree is same_category_tree

    @pytest.mark.parametrize('changes', [
        {'status': 'Inactive'},
        {'key': 'other'},
        {'cost': 'abc'},
        {'quantity': 'NaN'},
        {'quantity': -2},
    ])
    def test_rejected_changes(self, same_category_tree, primary_key, changes):
        with pytest.raises(ValidationException):
            edit_node(same_category_tree, primary_key, changes)

    def test_unknown_key(self, same_category_tree):
        assert not edit_node(same_category_tree, 'missing', {'title': 'x'}).changed
        with pytest.raises(EntityNotFoundException):
            edit_node(same_category_tree, 'missing', {'title': 'x'}, strict=True)
