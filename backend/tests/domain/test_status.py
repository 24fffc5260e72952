"""
Tests for primary part status toggling.
"""

from decimal import Decimal

import pytest

from domain.bom.costing import total_cost
from domain.bom.status import toggle_l6_status
from domain.bom.tree import find_node, validate_structure
from domain.shared.exceptions import EntityNotFoundException
from domain.shared.value_objects import ItemStatus


class TestToggleL6Status:

    def test_retiring_primary_puts_substitute_in_effect(
        self, scenario_a_tree, primary_key, substitute_key
    ):
        toggled = toggle_l6_status(scenario_a_tree, primary_key)

        primary = find_node(toggled, primary_key)
        substitute = find_node(toggled, substitute_key)
        assert primary.status is ItemStatus.INACTIVE
        assert substitute.status is ItemStatus.ACTIVE
        assert substitute.parent_status is ItemStatus.INACTIVE
        assert not primary.in_use
        assert substitute.effective
        assert substitute.interactable
        assert total_cost(scenario_a_tree) == Decimal('200')
        assert total_cost(toggled) == Decimal('160')

    def test_toggle_twice_restores_tree(self, scenario_a_tree, primary_key):
        twice = toggle_l6_status(toggle_l6_status(scenario_a_tree, primary_key), primary_key)

        assert twice == scenario_a_tree
        assert total_cost(twice) == Decimal('200')

    def test_keeps_status_invariants(self, same_category_tree, primary_key):
        toggled = toggle_l6_status(same_category_tree, primary_key)

        assert validate_structure(toggled).parent_status_mismatches == []

    def test_input_tree_is_untouched(self, scenario_a_tree, primary_key, substitute_key):
        toggle_l6_status(scenario_a_tree, primary_key)

        assert find_node(scenario_a_tree, primary_key).status is ItemStatus.ACTIVE
        assert find_node(scenario_a_tree, substitute_key).status is ItemStatus.INACTIVE

    def test_primary_without_substitute(self, build_tree, part, primary_key):
        tree = build_tree(part(primary_key, 'CPU-001', 10))

        toggled = toggle_l6_status(tree, primary_key)

        assert find_node(toggled, primary_key).status is ItemStatus.INACTIVE
        assert total_cost(toggled) == Decimal('0')

    def test_other_primaries_are_shared(self, same_category_tree, primary_key):
        toggled = toggle_l6_status(same_category_tree, primary_key)
        memory_key = primary_key.replace('-cpu', '-mem')

        assert find_node(toggled, memory_key) is find_node(same_category_tree, memory_key)

    @pytest.mark.parametrize('key', ['missing', 'unit-m-s-f-g', 'unit-m-s-f-g-cpu-alt'])
    def test_non_primary_key_is_noop(self, scenario_a_tree, key):
        assert toggle_l6_status(scenario_a_tree, key) is scenario_a_tree

    def test_strict_mode_raises_for_unknown_key(self, scenario_a_tree):
        with pytest.raises(EntityNotFoundException) as exc_info:
            toggle_l6_status(scenario_a_tree, 'missing', strict=True)

        assert exc_info.value.code == 'ENTITY_NOT_FOUND'
        assert exc_info.value.details['entity_id'] == 'missing'
