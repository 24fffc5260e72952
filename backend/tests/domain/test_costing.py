"""
Tests for cost roll-up, breakdown, warnings and health scoring.
"""

from decimal import Decimal

import pytest

from domain.bom.costing import (
    CostDirection,
    CostThresholds,
    WarningLevel,
    cost_breakdown,
    cost_difference,
    cost_share,
    generate_cost_report,
    missing_parts,
    row_shares,
    simulate_cost_change,
    total_cost,
    variance_warnings,
)
from domain.bom.status import toggle_l6_status
from domain.bom.tree import find_node
from domain.shared.exceptions import EntityNotFoundException
from domain.shared.value_objects import BOMLevel


class TestTotalCost:

    def test_only_active_parts_count(self, scenario_a_tree):
        assert total_cost(scenario_a_tree) == Decimal('200')

    def test_equals_sum_of_active_lines(self, same_category_tree, primary_key):
        toggled = toggle_l6_status(same_category_tree, primary_key)

        # Core i5 x1 plus memory 50 x2
        assert total_cost(toggled) == Decimal('250')

    def test_missing_cost_and_quantity(self, build_tree, part, primary_key):
        tree = build_tree(
            part(primary_key, 'CPU-001', None),
            part(f'{primary_key}-2', 'CPU-002', 40, quantity=None),
        )

        assert total_cost(tree) == Decimal('40')

    def test_empty_tree(self):
        assert total_cost(()) == Decimal('0')

    def test_cost_share_of_zero_total(self):
        assert cost_share(Decimal('10'), Decimal('0')) == Decimal('0')


class TestCostBreakdown:

    def test_counts(self, same_category_tree):
        breakdown = cost_breakdown(same_category_tree)

        assert breakdown.total_cost == Decimal('300')
        assert breakdown.total_parts == 3
        assert breakdown.active_parts == 2
        assert breakdown.inactive_parts == 1
        assert breakdown.substitute_parts == 1
        assert breakdown.active_substitutes == 0
        assert breakdown.average_cost_per_part == Decimal('150.00')

    def test_by_level(self, same_category_tree):
        by_level = {stats.level: stats for stats in cost_breakdown(same_category_tree).by_level}

        assert list(by_level) == list(BOMLevel)
        assert by_level[BOMLevel.L6].count == 2
        assert by_level[BOMLevel.L6].percentage == Decimal('100.00')
        assert by_level[BOMLevel.L7].active_count == 0
        assert by_level[BOMLevel.L1].cost == Decimal('0')

    def test_by_supplier_sorted_by_cost(self, same_category_tree):
        suppliers = cost_breakdown(same_category_tree).by_supplier

        assert [s.name for s in suppliers] == ['Intel', 'Samsung']
        assert suppliers[0].total_cost == Decimal('200')
        assert suppliers[1].parts == ['MEM-001']


class TestCostReport:

    def test_default_thresholds(self, same_category_tree):
        report = generate_cost_report(same_category_tree)

        assert report.total_cost == Decimal('300')
        assert report.warnings == []
        # one substitute in three parts, two suppliers
        assert report.health.score == 85
        assert report.health.grade == 'B'
        assert not report.has_errors

    def test_threshold_warnings(self, same_category_tree):
        thresholds = CostThresholds(
            max_total_cost=Decimal('250'),
            max_cost_per_part=Decimal('150'),
            max_substitute_count=0,
        )

        report = generate_cost_report(same_category_tree, thresholds)

        assert [(w.type, w.level) for w in report.warnings] == [
            ('total_cost', WarningLevel.ERROR),
            ('expensive_part', WarningLevel.WARNING),
            ('too_many_substitutes', WarningLevel.INFO),
        ]
        assert report.warnings[1].details == ['Core i7: 200']
        assert report.health.score == 50
        assert report.health.grade == 'F'
        assert report.has_errors and report.has_warnings

    def test_retired_position_without_substitute(self, build_tree, part, primary_key):
        tree = build_tree(part(primary_key, 'CPU-001', 10, status='Inactive', position='U1'))

        report = generate_cost_report(tree)

        assert [part.key for part in report.missing_parts] == [primary_key]
        assert report.warnings[-1].type == 'missing_part'
        assert report.warnings[-1].details == ['U1: CPU-001']

    def test_effective_substitute_covers_position(self, scenario_a_tree, primary_key):
        assert missing_parts(toggle_l6_status(scenario_a_tree, primary_key)) == []

    def test_thresholds_from_mapping(self):
        thresholds = CostThresholds.from_mapping({'max_total_cost': '500'})

        assert thresholds.max_total_cost == Decimal('500')
        assert thresholds.max_cost_per_part == Decimal('10000')
        assert CostThresholds.from_mapping(None) == CostThresholds()


class TestSimulateCostChange:

    def test_active_line(self, same_category_tree, primary_key):
        simulation = simulate_cost_change(
            same_category_tree, primary_key, Decimal('250'), Decimal('2')
        )

        assert simulation.original_line_cost == Decimal('200')
        assert simulation.updated_line_cost == Decimal('500')
        assert simulation.new_total_cost == Decimal('600')
        assert simulation.impact == Decimal('300')
        assert find_node(simulation.tree, primary_key).cost == Decimal('250')
        assert find_node(same_category_tree, primary_key).cost == Decimal('200')

    def test_standby_substitute_has_no_impact(self, same_category_tree, substitute_key):
        simulation = simulate_cost_change(
            same_category_tree, substitute_key, Decimal('999'), Decimal('1')
        )

        assert simulation.impact == Decimal('0')

    def test_assembly_node_is_unchanged(self, same_category_tree):
        simulation = simulate_cost_change(same_category_tree, 'unit', Decimal('1'), Decimal('1'))

        assert simulation.tree == same_category_tree
        assert simulation.impact == Decimal('0')

    def test_variance(self, same_category_tree, primary_key):
        simulation = simulate_cost_change(
            same_category_tree, primary_key, Decimal('230'), Decimal('1')
        )

        assert simulation.variance.percentage == Decimal('15.00')
        assert simulation.variance.direction is CostDirection.INCREASE
        assert simulation.total_difference.difference == Decimal('30')
        assert variance_warnings(simulation) == []

    def test_high_variance_warning(self, same_category_tree, primary_key):
        simulation = simulate_cost_change(
            same_category_tree, primary_key, Decimal('100'), Decimal('1')
        )

        [warning] = variance_warnings(simulation)
        assert warning.type == 'high_variance'
        assert warning.level is WarningLevel.WARNING
        assert warning.details == ['Core i7: -50.00%']
        assert variance_warnings(simulation, CostThresholds(max_variance_percentage=Decimal('60'))) == []

    def test_unknown_key(self, same_category_tree):
        with pytest.raises(EntityNotFoundException):
            simulate_cost_change(same_category_tree, 'missing', Decimal('1'), Decimal('1'))


@pytest.mark.parametrize('original, new, direction, percentage', [
    (Decimal('100'), Decimal('150'), CostDirection.INCREASE, Decimal('50.00')),
    (Decimal('100'), Decimal('80'), CostDirection.DECREASE, Decimal('-20.00')),
    (Decimal('100'), Decimal('100'), CostDirection.EQUAL, Decimal('0.00')),
    (Decimal('0'), Decimal('10'), CostDirection.INCREASE, Decimal('0')),
])
def test_cost_difference(original, new, direction, percentage):
    difference = cost_difference(original, new)

    assert difference.direction is direction
    assert difference.percentage == percentage
    assert difference.difference == new - original


class TestRowShares:

    def test_shares_of_active_lines(self, same_category_tree, primary_key, substitute_key):
        shares = row_shares(same_category_tree)

        assert shares[primary_key] == Decimal('66.67')
        assert shares['unit-m-s-f-g-mem'] == Decimal('33.33')
        assert shares[substitute_key] == Decimal('0.00')
        assert shares['unit'] == Decimal('0.00')

    def test_zero_total(self, build_tree, part, primary_key):
        shares = row_shares(build_tree(part(primary_key, 'CPU-001', 0)))

        assert shares[primary_key] == Decimal('0.00')
