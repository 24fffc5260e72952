"""
BOM Domain - Substitution.

Operations that swap part data between a primary (L6) and its substitute
(L7), delete substitutes, and edit primary attributes. Part swaps are gated
by category: the part code prefix before the first '-' must match.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from domain.catalog.entities import PartInfo
from domain.catalog.repositories import PartCatalog
from domain.shared.exceptions import CategoryMismatchException, EntityNotFoundException
from domain.shared.value_objects import Lifecycle, part_category

from .costing import total_cost
from .entities import BOMNode, PrimaryPart, SubstitutePart
from .tree import Tree, find_node, find_parent, remove_node, update_node

logger = logging.getLogger(__name__)

# Fields a substitute hands over to its primary on replacement
REPLACED_FIELDS = ("part_id", "title", "cost", "quantity", "unit", "supplier", "lifecycle")


@dataclass(frozen=True)
class SubstitutionResult:
    """New tree and its recomputed total cost."""

    tree: Tree
    total_cost: Decimal
    changed: bool = True


@dataclass(frozen=True)
class PrimaryEdit:
    """
    Values submitted from the primary part edit dialog.

    `None` leaves the current value in place.
    """

    part_id: str
    quantity: Optional[Decimal] = None
    unit: Optional[str] = None
    lifecycle: Optional[Lifecycle] = None


def _unchanged(nodes: Tree, kind: str, key: str, strict: bool) -> SubstitutionResult:
    if strict:
        raise EntityNotFoundException(kind, key)
    logger.debug(f"No {kind} '{key}', tree unchanged")
    return SubstitutionResult(tree=nodes, total_cost=total_cost(nodes), changed=False)


def _check_category(primary_part_id: Optional[str], new_part_id: Optional[str]) -> None:
    primary_category = part_category(primary_part_id)
    new_category = part_category(new_part_id)
    if primary_category != new_category:
        raise CategoryMismatchException(primary_category, new_category)


# =============================================================================
# COMMANDS
# =============================================================================

def replace(tree: Sequence[BOMNode], l7_key: str, strict: bool = False) -> SubstitutionResult:
    """
    Overwrite a primary's part data with its substitute's.

    The primary keeps its key, level, status, position and children; only
    the REPLACED_FIELDS change. Raises CategoryMismatchException, leaving the
    tree untouched, when the two part categories differ.
    """
    nodes = tuple(tree)
    substitute = find_node(nodes, l7_key)
    primary = find_parent(nodes, l7_key)
    if not isinstance(substitute, SubstitutePart) or not isinstance(primary, PrimaryPart):
        return _unchanged(nodes, "SubstitutePart", l7_key, strict)

    _check_category(primary.part_id, substitute.part_id)

    values = {name: getattr(substitute, name) for name in REPLACED_FIELDS}
    updated = update_node(nodes, primary.key, lambda node: node.evolve(**values))
    total = total_cost(updated)
    logger.info(
        f"Replaced primary '{primary.key}' part {primary.part_id} with "
        f"{substitute.part_id}, total cost {total}"
    )
    return SubstitutionResult(tree=updated, total_cost=total)


def delete_substitute(tree: Sequence[BOMNode], l7_key: str, strict: bool = False) -> SubstitutionResult:
    """Remove a substitute from its primary."""
    nodes = tuple(tree)
    substitute = find_node(nodes, l7_key)
    parent = find_parent(nodes, l7_key)
    if not isinstance(substitute, SubstitutePart) or parent is None:
        return _unchanged(nodes, "SubstitutePart", l7_key, strict)

    updated = remove_node(nodes, l7_key)
    total = total_cost(updated)
    logger.info(f"Deleted substitute '{l7_key}' from '{parent.key}', total cost {total}")
    return SubstitutionResult(tree=updated, total_cost=total)


def edit_l6(
    tree: Sequence[BOMNode],
    l6_key: str,
    fields: PrimaryEdit,
    catalog: PartCatalog,
    strict: bool = False,
) -> SubstitutionResult:
    """
    Apply the edit dialog values to a primary part.

    The new part code must be of the primary's current category. When the
    catalog knows the new code, its title and cost are adopted; otherwise
    the primary keeps its own.
    """
    nodes = tuple(tree)
    primary = find_node(nodes, l6_key)
    if not isinstance(primary, PrimaryPart):
        return _unchanged(nodes, "PrimaryPart", l6_key, strict)

    _check_category(primary.part_id, fields.part_id)

    changes = edit_changes(fields, catalog.lookup(fields.part_id))
    updated = update_node(nodes, l6_key, lambda node: node.evolve(**changes))
    total = total_cost(updated)
    logger.info(f"Edited primary '{l6_key}' ({', '.join(changes)}), total cost {total}")
    return SubstitutionResult(tree=updated, total_cost=total)


def edit_changes(fields: PrimaryEdit, info: Optional[PartInfo]) -> Dict[str, object]:
    """Field values an edit sets on the primary."""
    changes: Dict[str, object] = {"part_id": fields.part_id}
    if info is not None:
        changes["title"] = info.title
        changes["cost"] = info.cost
    if fields.quantity is not None:
        changes["quantity"] = fields.quantity
    if fields.unit is not None:
        changes["unit"] = fields.unit
    if fields.lifecycle is not None:
        changes["lifecycle"] = fields.lifecycle
    return changes


# =============================================================================
# QUERIES
# =============================================================================

def substitute_candidates(catalog: PartCatalog, part_id: Optional[str]) -> List[PartInfo]:
    """Parts of the same category as `part_id`, one entry per part code."""
    candidates: Dict[str, PartInfo] = {}
    for info in catalog.parts_in_category(part_category(part_id)):
        candidates.setdefault(info.part_id, info)
    return list(candidates.values())
