"""
BOM Domain - Cost roll-up.

Only active part lines (L6/L7) carry cost: cost x quantity. Assembly levels
have no cost of their own and roll up the sum of their children. The total
is recomputed with a full walk after every change; trees are small.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence

from domain.shared.exceptions import EntityNotFoundException
from domain.shared.value_objects import (
    BOMLevel,
    ItemStatus,
    PRIMARY_LEVEL,
    SUBSTITUTE_LEVEL,
)

from .entities import BOMNode, PrimaryPart
from .tree import Tree, find_node, update_node, walk

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")


# =============================================================================
# ROLL-UP
# =============================================================================

def node_cost(node: BOMNode) -> Decimal:
    """Own contribution of a node: its line cost when it is an active part."""
    if node.level >= PRIMARY_LEVEL and node.status is ItemStatus.ACTIVE:
        return node.line_cost
    return ZERO


def total_cost(tree: Sequence[BOMNode]) -> Decimal:
    """Sum of cost x quantity over active L6/L7 nodes."""
    total = ZERO
    for node in tree:
        total += node_cost(node) + total_cost(node.children)
    return total


def cost_share(part_cost: Decimal, total: Decimal) -> Decimal:
    """Share of the total as a fraction; 0 when the total is 0."""
    if not total:
        return ZERO
    return part_cost / total


def _percent(part: Decimal, whole: Decimal) -> Decimal:
    return (cost_share(part, whole) * HUNDRED).quantize(CENT, rounding=ROUND_HALF_UP)


def row_shares(tree: Sequence[BOMNode]) -> Dict[str, Decimal]:
    """Percentage of the total carried by each node's own line, keyed by node key."""
    total = total_cost(tree)
    return {node.key: _percent(node_cost(node), total) for node in walk(tree)}


# =============================================================================
# BREAKDOWN
# =============================================================================

@dataclass
class LevelCost:
    level: BOMLevel
    count: int = 0
    active_count: int = 0
    cost: Decimal = ZERO
    percentage: Decimal = ZERO


@dataclass
class SupplierCost:
    name: str
    total_cost: Decimal = ZERO
    parts: List[str] = field(default_factory=list)


@dataclass
class CostBreakdown:
    """Cost statistics of a tree, by level and by supplier."""

    total_cost: Decimal = ZERO
    total_parts: int = 0
    active_parts: int = 0
    inactive_parts: int = 0
    substitute_parts: int = 0
    active_substitutes: int = 0
    supplier_count: int = 0
    by_level: List[LevelCost] = field(default_factory=list)
    by_supplier: List[SupplierCost] = field(default_factory=list)

    @property
    def average_cost_per_part(self) -> Decimal:
        if not self.active_parts:
            return ZERO
        return (self.total_cost / self.active_parts).quantize(CENT, rounding=ROUND_HALF_UP)


def cost_breakdown(tree: Sequence[BOMNode]) -> CostBreakdown:
    levels = {level.index: LevelCost(level=level) for level in BOMLevel}
    suppliers: Dict[str, SupplierCost] = {}
    breakdown = CostBreakdown()

    for node in walk(tree):
        stats = levels[node.level]
        stats.count += 1
        if node.level < PRIMARY_LEVEL:
            continue

        breakdown.total_parts += 1
        if node.level == SUBSTITUTE_LEVEL:
            breakdown.substitute_parts += 1

        if node.status is not ItemStatus.ACTIVE:
            breakdown.inactive_parts += 1
            continue

        line = node.line_cost
        breakdown.active_parts += 1
        breakdown.total_cost += line
        stats.active_count += 1
        stats.cost += line
        if node.level == SUBSTITUTE_LEVEL:
            breakdown.active_substitutes += 1
        if node.supplier:
            supplier = suppliers.setdefault(node.supplier, SupplierCost(name=node.supplier))
            supplier.total_cost += line
            supplier.parts.append(node.title)

    for stats in levels.values():
        stats.percentage = _percent(stats.cost, breakdown.total_cost)

    breakdown.by_level = [levels[level.index] for level in BOMLevel]
    breakdown.by_supplier = sorted(suppliers.values(), key=lambda s: s.total_cost, reverse=True)
    breakdown.supplier_count = len(suppliers)
    return breakdown


# =============================================================================
# WHAT-IF
# =============================================================================

class CostDirection(str, Enum):
    INCREASE = "increase"
    DECREASE = "decrease"
    EQUAL = "equal"


@dataclass(frozen=True)
class CostDifference:
    original: Decimal
    new: Decimal
    difference: Decimal
    percentage: Decimal
    direction: CostDirection


def cost_difference(original: Decimal, new: Decimal) -> CostDifference:
    difference = new - original
    if difference > 0:
        direction = CostDirection.INCREASE
    elif difference < 0:
        direction = CostDirection.DECREASE
    else:
        direction = CostDirection.EQUAL
    return CostDifference(
        original=original,
        new=new,
        difference=difference,
        percentage=_percent(difference, original) if original > 0 else ZERO,
        direction=direction,
    )


@dataclass
class CostSimulation:
    """Outcome of changing one line's cost and quantity."""

    key: str
    title: str
    original_line_cost: Decimal
    updated_line_cost: Decimal
    original_total_cost: Decimal
    new_total_cost: Decimal
    tree: Tree
    original_unit_cost: Decimal = ZERO
    updated_unit_cost: Decimal = ZERO

    @property
    def impact(self) -> Decimal:
        """Change of the BOM total (zero for lines that are not active)."""
        return self.new_total_cost - self.original_total_cost

    @property
    def variance(self) -> CostDifference:
        """Unit cost change of the line."""
        return cost_difference(self.original_unit_cost, self.updated_unit_cost)

    @property
    def total_difference(self) -> CostDifference:
        return cost_difference(self.original_total_cost, self.new_total_cost)

    @property
    def message(self) -> str:
        return (
            f"Line {self.title}: {self.original_line_cost} -> {self.updated_line_cost}, "
            f"total impact {self.impact}"
        )


def simulate_cost_change(
    tree: Sequence[BOMNode],
    key: str,
    new_cost: Optional[Decimal],
    new_quantity: Optional[Decimal],
) -> CostSimulation:
    """
    Apply a cost/quantity change to one line and report its effect.

    Only L6/L7 lines carry cost; for other levels the tree is returned
    unchanged with zero impact.
    """
    nodes = tuple(tree)
    target = find_node(nodes, key)
    if target is None:
        raise EntityNotFoundException("BOMNode", key)

    current_total = total_cost(nodes)
    if target.level < PRIMARY_LEVEL:
        return CostSimulation(
            key=key,
            title=target.title,
            original_line_cost=ZERO,
            updated_line_cost=ZERO,
            original_total_cost=current_total,
            new_total_cost=current_total,
            tree=nodes,
        )

    updated_tree = update_node(
        nodes, key, lambda node: node.evolve(cost=new_cost, quantity=new_quantity)
    )
    updated = find_node(updated_tree, key)
    return CostSimulation(
        key=key,
        title=target.title,
        original_line_cost=target.line_cost,
        updated_line_cost=updated.line_cost,
        original_total_cost=current_total,
        new_total_cost=total_cost(updated_tree),
        tree=updated_tree,
        original_unit_cost=target.cost or ZERO,
        updated_unit_cost=updated.cost or ZERO,
    )


# =============================================================================
# WARNINGS AND HEALTH
# =============================================================================

@dataclass(frozen=True)
class MissingPart:
    key: str
    title: str
    position: Optional[str]
    status: Optional[ItemStatus]


def missing_parts(tree: Sequence[BOMNode]) -> List[MissingPart]:
    """Positions whose primary is retired and no substitute is in effect."""
    missing = []
    for node in walk(tree):
        if not isinstance(node, PrimaryPart) or node.is_active:
            continue
        if any(child.is_active for child in node.children):
            continue
        missing.append(MissingPart(
            key=node.key,
            title=node.title,
            position=node.position,
            status=node.status,
        ))
    return missing


class WarningLevel(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class CostWarning:
    type: str
    level: WarningLevel
    message: str
    details: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class CostThresholds:
    max_total_cost: Decimal = Decimal("100000")
    max_cost_per_part: Decimal = Decimal("10000")
    max_substitute_count: int = 5
    max_variance_percentage: Decimal = Decimal("20")

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, Any]]) -> CostThresholds:
        """Build thresholds from settings or request data; missing keys keep defaults."""
        if not values:
            return cls()
        defaults = cls()
        return cls(
            max_total_cost=Decimal(str(values.get("max_total_cost", defaults.max_total_cost))),
            max_cost_per_part=Decimal(str(values.get("max_cost_per_part", defaults.max_cost_per_part))),
            max_substitute_count=int(values.get("max_substitute_count", defaults.max_substitute_count)),
            max_variance_percentage=Decimal(str(values.get(
                "max_variance_percentage", defaults.max_variance_percentage
            ))),
        )


def check_cost_warnings(
    tree: Sequence[BOMNode],
    thresholds: Optional[CostThresholds] = None,
    breakdown: Optional[CostBreakdown] = None,
) -> List[CostWarning]:
    thresholds = thresholds or CostThresholds()
    breakdown = breakdown or cost_breakdown(tree)
    warnings = []

    if breakdown.total_cost > thresholds.max_total_cost:
        warnings.append(CostWarning(
            type="total_cost",
            level=WarningLevel.ERROR,
            message=(
                f"Total cost {breakdown.total_cost:.2f} exceeds the limit "
                f"of {thresholds.max_total_cost}"
            ),
        ))

    expensive = [
        node for node in walk(tree)
        if isinstance(node, PrimaryPart)
        and node.is_active
        and node.line_cost > thresholds.max_cost_per_part
    ]
    if expensive:
        warnings.append(CostWarning(
            type="expensive_part",
            level=WarningLevel.WARNING,
            message=(
                f"{len(expensive)} part line(s) cost more than "
                f"{thresholds.max_cost_per_part}"
            ),
            details=[f"{node.title}: {node.line_cost}" for node in expensive],
        ))

    if breakdown.substitute_parts > thresholds.max_substitute_count:
        warnings.append(CostWarning(
            type="too_many_substitutes",
            level=WarningLevel.INFO,
            message=(
                f"{breakdown.substitute_parts} substitute parts, more than the "
                f"suggested {thresholds.max_substitute_count}"
            ),
        ))

    missing = missing_parts(tree)
    if missing:
        warnings.append(CostWarning(
            type="missing_part",
            level=WarningLevel.ERROR,
            message=f"{len(missing)} position(s) have no part in use",
            details=[f"{part.position or part.key}: {part.title}" for part in missing],
        ))

    return warnings


def variance_warnings(
    simulation: CostSimulation,
    thresholds: Optional[CostThresholds] = None,
) -> List[CostWarning]:
    """High variance warning when the simulated unit cost moves past the threshold."""
    thresholds = thresholds or CostThresholds()
    variance = simulation.variance
    if abs(variance.percentage) <= thresholds.max_variance_percentage:
        return []
    return [CostWarning(
        type="high_variance",
        level=WarningLevel.WARNING,
        message=(
            f"Cost variance of {simulation.title} exceeds "
            f"{thresholds.max_variance_percentage}%"
        ),
        details=[f"{simulation.title}: {variance.percentage}%"],
    )]


@dataclass(frozen=True)
class HealthScore:
    score: int
    grade: str
    warnings_deduction: int
    substitute_ratio_deduction: int
    supplier_diversity_deduction: int


def health_score(breakdown: CostBreakdown, warnings: Sequence[CostWarning]) -> HealthScore:
    """
    Score a BOM from 0 to 100.

    Deductions: 20 per error, 10 per warning, 5 per info, 10 when more than
    30% of parts are substitutes, 5 when fewer than 3 suppliers are used.
    """
    counts = {level: 0 for level in WarningLevel}
    for warning in warnings:
        counts[warning.level] += 1
    warnings_deduction = (
        counts[WarningLevel.ERROR] * 20
        + counts[WarningLevel.WARNING] * 10
        + counts[WarningLevel.INFO] * 5
    )

    ratio = breakdown.substitute_parts / breakdown.total_parts if breakdown.total_parts else 0
    substitute_deduction = 10 if ratio > 0.3 else 0
    supplier_deduction = 5 if breakdown.supplier_count < 3 else 0

    score = 100 - warnings_deduction - substitute_deduction - supplier_deduction
    score = max(0, min(100, score))
    return HealthScore(
        score=score,
        grade=_grade(score),
        warnings_deduction=warnings_deduction,
        substitute_ratio_deduction=substitute_deduction,
        supplier_diversity_deduction=supplier_deduction,
    )


def _grade(score: int) -> str:
    if score >= 90:
        return "A"
    if score >= 80:
        return "B"
    if score >= 70:
        return "C"
    if score >= 60:
        return "D"
    return "F"


@dataclass
class CostReport:
    breakdown: CostBreakdown
    warnings: List[CostWarning]
    health: HealthScore
    missing_parts: List[MissingPart]

    @property
    def total_cost(self) -> Decimal:
        return self.breakdown.total_cost

    @property
    def has_errors(self) -> bool:
        return any(w.level is WarningLevel.ERROR for w in self.warnings)

    @property
    def has_warnings(self) -> bool:
        return any(w.level is WarningLevel.WARNING for w in self.warnings)


def generate_cost_report(
    tree: Sequence[BOMNode],
    thresholds: Optional[CostThresholds] = None,
) -> CostReport:
    breakdown = cost_breakdown(tree)
    warnings = check_cost_warnings(tree, thresholds, breakdown)
    report = CostReport(
        breakdown=breakdown,
        warnings=warnings,
        health=health_score(breakdown, warnings),
        missing_parts=missing_parts(tree),
    )
    logger.debug(
        f"Cost report: total={breakdown.total_cost} parts={breakdown.total_parts} "
        f"warnings={len(warnings)} score={report.health.score}"
    )
    return report
