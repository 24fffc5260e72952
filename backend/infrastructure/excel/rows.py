"""
BOM row codec.

A BOM file is a pre-order listing of the tree, one node per row, with an
explicit level marker and no parent column:

    Level, LevelName, PartId, Position, Quantity, Unit, Cost, Supplier,
    Lifecycle, Status, Type

Parent linkage is rebuilt in one linear pass: a row at level N hangs under
the most recent row seen at level N-1.
"""

from __future__ import annotations
import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence

from domain.bom.entities import BOMNode
from domain.bom.tree import Tree, normalize, to_decimal, walk
from domain.shared.value_objects import (
    BOMLevel,
    PRIMARY_LEVEL,
    SUBSTITUTE_LEVEL,
)

logger = logging.getLogger(__name__)

HEADERS = (
    "Level",
    "LevelName",
    "PartId",
    "Position",
    "Quantity",
    "Unit",
    "Cost",
    "Supplier",
    "Lifecycle",
    "Status",
    "Type",
)

DEFAULT_QUANTITY = Decimal("1")
DEFAULT_UNIT = "piece"
DEFAULT_COST = Decimal("0")

LEVEL_COUNT = len(BOMLevel)


def _row_type(level: int) -> str:
    if level == PRIMARY_LEVEL:
        return "Primary"
    if level == SUBSTITUTE_LEVEL:
        return "Substitute"
    return ""


def _cell_number(value: Optional[Decimal]) -> Any:
    if value is None:
        return None
    if value == value.to_integral_value():
        return int(value)
    return float(value)


# =============================================================================
# TREE -> ROWS
# =============================================================================

def tree_to_rows(tree: Sequence[BOMNode]) -> List[List[Any]]:
    """Encode a tree as data rows (without the header row)."""
    rows = []
    for node in walk(tree):
        quantity, unit, cost = node.quantity, node.unit, node.cost
        if node.is_part:
            quantity = DEFAULT_QUANTITY if quantity is None else quantity
            unit = unit or DEFAULT_UNIT
            cost = DEFAULT_COST if cost is None else cost
        rows.append([
            node.bom_level.value,
            node.title,
            node.part_id or "",
            node.position or "",
            _cell_number(quantity),
            unit or "",
            _cell_number(cost),
            node.supplier or "",
            node.lifecycle.value if node.lifecycle else "",
            node.status.value if node.status else "",
            _row_type(node.level),
        ])
    return rows


# =============================================================================
# ROWS -> TREE
# =============================================================================

def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _is_blank(row: Sequence[Any]) -> bool:
    return all(_text(value) == "" for value in row)


def _number(value: Any, default: Decimal, row_number: int, column: str) -> Decimal:
    number = to_decimal(value)
    if number is None:
        if _text(value):
            logger.warning(f"Row {row_number}: unreadable {column} {value!r}, using {default}")
        return default
    return number


def _row_mapping(row: Sequence[Any], row_number: int, level: int) -> Dict[str, Any]:
    cells = list(row) + [None] * (len(HEADERS) - len(row))
    (_, title, part_id, position, quantity, unit, cost,
     supplier, lifecycle, status, _) = cells[:len(HEADERS)]

    mapping: Dict[str, Any] = {
        "title": _text(title),
        "part_id": _text(part_id) or None,
        "position": _text(position) or None,
        "supplier": _text(supplier) or None,
        "lifecycle": _text(lifecycle) or None,
        "status": _text(status) or None,
        "children": [],
    }
    if level >= PRIMARY_LEVEL:
        mapping["quantity"] = _number(quantity, DEFAULT_QUANTITY, row_number, "Quantity")
        mapping["unit"] = _text(unit) or DEFAULT_UNIT
        mapping["cost"] = _number(cost, DEFAULT_COST, row_number, "Cost")
    else:
        mapping["quantity"] = to_decimal(quantity)
        mapping["unit"] = _text(unit) or None
        mapping["cost"] = to_decimal(cost)
    return mapping


def rows_to_tree(rows: Iterable[Sequence[Any]], first_row_number: int = 2) -> Tree:
    """
    Rebuild a tree from data rows.

    Rows are tolerated rather than rejected: a missing or unknown level
    marker reads as L1, unreadable numbers take their defaults, and a row
    whose level-1 slot is empty hangs under the nearest shallower row seen.
    """
    roots: List[Dict[str, Any]] = []
    last_seen_at_level: List[Optional[Dict[str, Any]]] = [None] * LEVEL_COUNT

    for row_number, row in enumerate(rows, start=first_row_number):
        if _is_blank(row):
            continue

        marker = BOMLevel.parse(row[0] if row else None)
        if marker is None:
            logger.warning(f"Row {row_number}: no level marker in {row[0]!r}, reading as L1")
            marker = BOMLevel.L1
        level = marker.index

        parent_level = level - 1
        while parent_level >= 0 and last_seen_at_level[parent_level] is None:
            parent_level -= 1
        if parent_level != level - 1 and level > 0:
            logger.warning(
                f"Row {row_number}: no {BOMLevel.from_index(level - 1).value} row before this "
                f"{marker.value} row, attaching it one level below the nearest shallower row"
            )

        node = _row_mapping(row, row_number, level)
        if parent_level < 0:
            node["key"] = str(row_number)
            roots.append(node)
            level = 0
        else:
            parent = last_seen_at_level[parent_level]
            node["key"] = f"{parent['key']}-{row_number}"
            parent["children"].append(node)
            level = parent_level + 1

        last_seen_at_level[level] = node
        for deeper in range(level + 1, LEVEL_COUNT):
            last_seen_at_level[deeper] = None

    logger.debug(f"Decoded {len(roots)} root node(s) from rows")
    return normalize(roots)
