"""
BOM Domain - Manual authoring.

Adding, deleting and editing nodes while a BOM is built by hand. A new node
always sits one level below its parent; assemblies (L1..L5) are structural
and only part lines (L6/L7) can be deleted.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Sequence

from domain.shared.exceptions import (
    BusinessRuleViolationException,
    EntityNotFoundException,
    ValidationException,
)
from domain.shared.value_objects import (
    BOMLevel,
    ItemStatus,
    Lifecycle,
    PRIMARY_LEVEL,
    SUBSTITUTE_LEVEL,
)

from .costing import total_cost
from .entities import BOMNode, PrimaryPart, build_node
from .tree import (
    KEY_SEPARATOR,
    Tree,
    find_node,
    primary_parts,
    remove_node,
    to_decimal,
    update_node,
    walk,
)

logger = logging.getLogger(__name__)

# Fields the edit form may change; status goes through the toggle command
EDITABLE_FIELDS = ("title", "part_id", "position", "quantity", "unit", "cost", "supplier", "lifecycle")

DEFAULT_QUANTITY = Decimal("1")
DEFAULT_UNIT = "piece"
DEFAULT_COST = Decimal("0")


@dataclass(frozen=True)
class AuthoringResult:
    """New tree, its total cost and the key of the node acted on."""

    tree: Tree
    total_cost: Decimal
    key: Optional[str] = None
    changed: bool = True


@dataclass(frozen=True)
class NodeDraft:
    """Values of a node being added. Part lines get quantity/unit/cost defaults."""

    title: str
    key: Optional[str] = None
    part_id: Optional[str] = None
    position: Optional[str] = None
    quantity: Optional[Decimal] = None
    unit: Optional[str] = None
    cost: Optional[Decimal] = None
    supplier: Optional[str] = None
    lifecycle: Optional[Lifecycle] = None


def _unchanged(nodes: Tree, key: str, strict: bool) -> AuthoringResult:
    if strict:
        raise EntityNotFoundException("BOMNode", key)
    logger.debug(f"No node '{key}', tree unchanged")
    return AuthoringResult(tree=nodes, total_cost=total_cost(nodes), changed=False)


def _check_amount(name: str, value: Optional[Decimal]) -> None:
    if value is not None and (not value.is_finite() or value < 0):
        raise ValidationException(f"{name} must be a non-negative number", field=name, value=value)


def _new_key(nodes: Tree, parent_key: str, local: str) -> str:
    """Qualified key that no node of the tree uses yet."""
    prefix = f"{parent_key}{KEY_SEPARATOR}" if parent_key else ""
    existing = {node.key for node in walk(nodes)}
    key = local if local.startswith(prefix) else f"{prefix}{local}"
    candidate, suffix = key, 2
    while candidate in existing:
        candidate = f"{key}{KEY_SEPARATOR}{suffix}"
        suffix += 1
    return candidate


def generate_position(nodes: Tree, level: int, parent: Optional[BOMNode]) -> Optional[str]:
    """
    Default position of a new part line.

    Primaries are numbered U1.A, U2.A, ... across the tree; a substitute
    takes its primary's position with a ".A" suffix. Assemblies get none.
    """
    if level == PRIMARY_LEVEL:
        taken = {node.position for node in primary_parts(nodes)}
        number = len(taken) + 1
        while f"U{number}.A" in taken:
            number += 1
        return f"U{number}.A"
    if level == SUBSTITUTE_LEVEL and parent is not None and parent.position:
        return f"{parent.position}.A"
    return None


# =============================================================================
# COMMANDS
# =============================================================================

def add_node(
    tree: Sequence[BOMNode],
    parent_key: Optional[str],
    draft: NodeDraft,
    strict: bool = False,
) -> AuthoringResult:
    """
    Add a node one level below `parent_key`, or a new L1 unit when no
    parent key is given.

    Raises BusinessRuleViolationException for a child under an L7 node, or a
    second substitute under a primary.
    """
    nodes = tuple(tree)
    parent = find_node(nodes, parent_key) if parent_key else None
    if parent_key and parent is None:
        return _unchanged(nodes, parent_key, strict)

    level = parent.level + 1 if parent is not None else 0
    if level > SUBSTITUTE_LEVEL:
        raise BusinessRuleViolationException(
            "MAX_DEPTH",
            f"Cannot add a node under {BOMLevel.L7.value} substitute '{parent.key}'"
        )
    if isinstance(parent, PrimaryPart) and parent.substitute is not None:
        raise BusinessRuleViolationException(
            "SUBSTITUTE_EXISTS",
            f"Primary part '{parent.key}' already has a substitute"
        )
    _check_amount("quantity", draft.quantity)
    _check_amount("cost", draft.cost)

    position_in_parent = len(parent.children) if parent is not None else len(nodes)
    key = _new_key(
        nodes,
        parent.key if parent is not None else "",
        draft.key or f"{BOMLevel.from_index(level).value.lower()}{KEY_SEPARATOR}{position_in_parent + 1}",
    )

    values: Dict[str, Any] = {
        "title": draft.title,
        "part_id": draft.part_id or None,
        "position": draft.position or generate_position(nodes, level, parent),
        "quantity": draft.quantity,
        "unit": draft.unit or None,
        "cost": draft.cost,
        "supplier": draft.supplier or None,
        "lifecycle": draft.lifecycle,
    }
    if level >= PRIMARY_LEVEL:
        values["quantity"] = draft.quantity if draft.quantity is not None else DEFAULT_QUANTITY
        values["unit"] = draft.unit or DEFAULT_UNIT
        values["cost"] = draft.cost if draft.cost is not None else DEFAULT_COST
        values["lifecycle"] = draft.lifecycle or Lifecycle.MASS_PRODUCTION
    if level == PRIMARY_LEVEL:
        values["status"] = ItemStatus.ACTIVE
    elif level == SUBSTITUTE_LEVEL:
        values["status"] = ItemStatus.INACTIVE
        values["parent_status"] = parent.status

    child = build_node(level, key, **values)
    if parent is None:
        updated = nodes + (child,)
    else:
        updated = update_node(
            nodes, parent.key, lambda node: node.with_children(node.children + (child,))
        )

    total = total_cost(updated)
    logger.info(f"Added {BOMLevel.from_index(level).value} node '{key}', total cost {total}")
    return AuthoringResult(tree=updated, total_cost=total, key=key)


def delete_part(tree: Sequence[BOMNode], key: str, strict: bool = False) -> AuthoringResult:
    """
    Delete a part line. Deleting a primary also removes its substitute.

    Assembly nodes cannot be deleted.
    """
    nodes = tuple(tree)
    node = find_node(nodes, key)
    if node is None:
        return _unchanged(nodes, key, strict)
    if node.level < PRIMARY_LEVEL:
        raise BusinessRuleViolationException(
            "ASSEMBLY_NOT_DELETABLE",
            f"Cannot delete {node.bom_level.value} assembly '{node.title}'; "
            f"only {BOMLevel.L6.value}/{BOMLevel.L7.value} parts can be deleted"
        )

    updated = remove_node(nodes, key)
    total = total_cost(updated)
    logger.info(f"Deleted {node.bom_level.value} part '{key}', total cost {total}")
    return AuthoringResult(tree=updated, total_cost=total, key=key)


def node_changes(node: BOMNode, changes: Mapping[str, Any]) -> Dict[str, Any]:
    """Validated field values of `changes` that differ from the node's."""
    unknown = sorted(set(changes) - set(EDITABLE_FIELDS))
    if unknown:
        raise ValidationException(
            f"Fields cannot be edited: {', '.join(unknown)}", field=unknown[0]
        )

    values: Dict[str, Any] = {}
    for name, value in changes.items():
        if name in ("quantity", "cost"):
            number = to_decimal(value)
            if value not in (None, "") and number is None:
                raise ValidationException(f"{name} must be a number", field=name, value=value)
            _check_amount(name, number)
            value = number
        elif name == "lifecycle":
            value = Lifecycle.parse(value)
        elif name == "title":
            value = str(value or "")
        else:
            value = value or None
        if getattr(node, name) != value:
            values[name] = value
    return values


def edit_node(
    tree: Sequence[BOMNode],
    key: str,
    changes: Mapping[str, Any],
    strict: bool = False,
) -> AuthoringResult:
    """Apply general field edits to any node; equal values change nothing."""
    nodes = tuple(tree)
    node = find_node(nodes, key)
    if node is None:
        return _unchanged(nodes, key, strict)

    values = node_changes(node, changes)
    if not values:
        return AuthoringResult(tree=nodes, total_cost=total_cost(nodes), key=key, changed=False)

    updated = update_node(nodes, key, lambda current: current.evolve(**values))
    total = total_cost(updated)
    logger.info(f"Edited node '{key}' ({', '.join(values)}), total cost {total}")
    return AuthoringResult(tree=updated, total_cost=total, key=key)

