from decimal import Decimal

import pytest

from domain.bom.entities import BOMNode, PrimaryPart, SubstitutePart
from domain.bom.tree import (
    find_node,
    find_parent,
    flatten,
    normalize,
    primary_parts,
    remove_node,
    update_node,
    validate_structure,
    walk,
)
from domain.shared.value_objects import ItemStatus, Lifecycle


def _assert_levels(nodes, expected=0):
    for node in nodes:
        assert node.level == expected
        _assert_levels(node.children, expected + 1)


class TestNormalize:
    """Tests for building well-formed trees from raw mappings."""

    def test_levels_follow_depth(self, scenario_a_tree):
        _assert_levels(scenario_a_tree)

    def test_declared_levels_are_ignored(self):
        tree = normalize([{'key': 'a', 'level': 4, 'children': [{'key': 'b', 'level': 0}]}])

        assert tree[0].level == 0
        assert tree[0].children[0].level == 1

    def test_node_types_follow_level(self, scenario_a_tree, primary_key, substitute_key):
        assert type(find_node(scenario_a_tree, 'unit')) is BOMNode
        assert isinstance(find_node(scenario_a_tree, primary_key), PrimaryPart)
        assert isinstance(find_node(scenario_a_tree, substitute_key), SubstitutePart)

    def test_child_keys_are_qualified(self):
        tree = normalize([{'key': 'root', 'children': [{'key': 'a'}, {}]}])

        assert [child.key for child in tree[0].children] == ['root-a', 'root-1']

    def test_camel_case_fields(self, scenario_a_tree, primary_key):
        primary = find_node(scenario_a_tree, primary_key)

        assert primary.part_id == 'CPU-001'
        assert primary.cost == Decimal('100')
        assert primary.quantity == Decimal('2')
        assert primary.lifecycle is Lifecycle.MASS_PRODUCTION

    def test_default_statuses(self, build_tree, part, primary_key, substitute_key):
        tree = build_tree(part(primary_key, 'CPU-001', 10, children=[
            part(substitute_key, 'CPU-002', 5),
        ]))

        assert find_node(tree, primary_key).status is ItemStatus.ACTIVE
        assert find_node(tree, substitute_key).status is ItemStatus.INACTIVE

    def test_parent_status_is_derived(self, build_tree, part, primary_key, substitute_key):
        tree = build_tree(part(primary_key, 'CPU-001', 10, status='Inactive', children=[
            part(substitute_key, 'CPU-002', 5, parentStatus='Active'),
        ]))

        assert find_node(tree, substitute_key).parent_status is ItemStatus.INACTIVE

    def test_keeps_first_substitute_only(self, build_tree, part, primary_key):
        tree = build_tree(part(primary_key, 'CPU-001', 10, children=[
            part(f'{primary_key}-a', 'CPU-002', 5),
            part(f'{primary_key}-b', 'CPU-003', 6),
        ]))

        for primary in primary_parts(tree):
            assert len(primary.children) <= 1
        assert find_node(tree, f'{primary_key}-a') is not None
        assert find_node(tree, f'{primary_key}-b') is None

    def test_drops_nodes_below_substitute_level(self, build_tree, part, primary_key, substitute_key):
        tree = build_tree(part(primary_key, 'CPU-001', 10, children=[
            part(substitute_key, 'CPU-002', 5, children=[{'key': 'deep'}]),
        ]))

        assert find_node(tree, substitute_key).children == ()
        assert find_node(tree, f'{substitute_key}-deep') is None

    def test_is_idempotent(self, same_category_tree):
        assert normalize(same_category_tree) == same_category_tree

    def test_rejects_unknown_items(self):
        with pytest.raises(TypeError):
            normalize(['not a node'])

    def test_unreadable_numbers_become_none(self, build_tree, part, primary_key):
        tree = build_tree(part(primary_key, 'CPU-001', 'n/a'))

        assert find_node(tree, primary_key).cost is None


class TestFlatten:
    """Tests for display-ordered rows."""

    def test_pre_order(self, same_category_tree, primary_key, substitute_key):
        keys = [row.key for row in flatten(same_category_tree)]

        assert keys == [node.key for node in walk(same_category_tree)]
        assert keys.index(primary_key) + 1 == keys.index(substitute_key)
        assert keys[-1].endswith('-mem')

    def test_rows_carry_level_and_children_flag(self, scenario_a_tree, primary_key):
        rows = {row.key: row for row in flatten(scenario_a_tree)}

        assert rows['unit'].level == 0
        assert rows['unit'].has_children is True
        assert rows[primary_key].level == 5
        assert rows[primary_key].level_name == 'Primary'
        assert rows[primary_key].level_color == 'purple'

    def test_substitute_rows_get_parent_status(self, scenario_a_tree, substitute_key, primary_key):
        rows = {row.key: row for row in flatten(scenario_a_tree)}

        assert rows[substitute_key].parent_status is ItemStatus.ACTIVE
        assert rows[primary_key].parent_status is None

    def test_standby_substitute_under_active_primary_is_not_interactable(
        self, scenario_a_tree, substitute_key, primary_key
    ):
        rows = {row.key: row for row in flatten(scenario_a_tree)}

        assert rows[substitute_key].interactable is False
        assert rows[primary_key].interactable is True

    def test_path_joins_titles(self, scenario_a_tree, primary_key):
        rows = {row.key: row for row in flatten(scenario_a_tree)}

        assert rows[primary_key].path == 'Unit > Module > Sub-module > Family > Group > CPU-001'

    def test_is_restartable(self, same_category_tree):
        view = flatten(same_category_tree)

        assert list(view) == list(view)
        assert view.to_list() == flatten(same_category_tree).to_list()

    def test_empty_tree(self):
        assert flatten(()).to_list() == []


class TestPersistentUpdates:
    """Tests for path-copying updates."""

    def test_update_shares_untouched_subtrees(self, same_category_tree, primary_key):
        updated = update_node(same_category_tree, primary_key, lambda n: n.evolve(cost=Decimal('1')))

        old_group = find_parent(same_category_tree, primary_key)
        new_group = find_parent(updated, primary_key)
        assert new_group is not old_group
        assert new_group.children[1] is old_group.children[1]
        assert find_node(updated, primary_key).children[0] is find_node(same_category_tree, primary_key).children[0]
        assert find_node(same_category_tree, primary_key).cost == Decimal('200')

    def test_update_missing_key_returns_input(self, same_category_tree):
        assert update_node(same_category_tree, 'missing', lambda n: n) is same_category_tree

    def test_remove_node(self, scenario_a_tree, primary_key, substitute_key):
        updated = remove_node(scenario_a_tree, substitute_key)

        assert find_node(updated, substitute_key) is None
        assert find_node(updated, primary_key).children == ()
        assert find_node(scenario_a_tree, substitute_key) is not None

    def test_remove_missing_key_returns_input(self, scenario_a_tree):
        assert remove_node(scenario_a_tree, 'missing') is scenario_a_tree

    def test_find_parent(self, scenario_a_tree, primary_key, substitute_key):
        assert find_parent(scenario_a_tree, substitute_key).key == primary_key
        assert find_parent(scenario_a_tree, 'unit') is None


class TestValidateStructure:
    """Tests for the structure report."""

    def test_valid_tree(self, same_category_tree):
        report = validate_structure(same_category_tree)

        assert report.is_valid
        assert report.node_count == 8

    def test_requires_active_primary(self, build_tree, part, primary_key):
        report = validate_structure(build_tree(part(primary_key, 'CPU-001', 1, status='Inactive')))

        assert not report.has_active_primary
        assert not report.is_valid

    def test_detects_hand_built_violations(self):
        substitute = SubstitutePart(key='s', level=6, status=ItemStatus.INACTIVE)
        primary = PrimaryPart(
            key='p', level=5, status=ItemStatus.ACTIVE, children=(substitute, substitute),
        )
        report = validate_structure((primary,))

        assert 'p' in report.level_violations
        assert report.excess_substitutes == ['p']
        assert report.parent_status_mismatches == ['s', 's']
        assert report.duplicate_keys == ['s']

    def test_position_conflicts(self, build_tree, part, primary_key):
        tree = build_tree(
            part(primary_key, 'CPU-001', 1, position='U1'),
            part(f'{primary_key}-2', 'CPU-002', 1, position='U1'),
        )

        assert validate_structure(tree).position_conflicts == [{'title': 'CPU-002', 'position': 'U1'}]
