"""
BOM Domain - Status propagation.

Retiring a primary part puts its substitute into effect, and putting the
primary back in use returns the substitute to standby. The substitute's
`parent_status` always follows the primary.
"""

from __future__ import annotations
import logging
from typing import Sequence

from domain.shared.exceptions import EntityNotFoundException
from domain.shared.value_objects import ItemStatus, PRIMARY_LEVEL

from .entities import BOMNode, SubstitutePart
from .tree import Tree, find_node, update_node

logger = logging.getLogger(__name__)


def toggle_l6_status(tree: Sequence[BOMNode], target_key: str, strict: bool = False) -> Tree:
    """
    Toggle the status of the L6 node keyed `target_key`.

    The node's direct children take the new status as `parent_status` and
    the inverse of it as their own status. Anything but an L6 key is a no-op
    unless `strict` is set, in which case EntityNotFoundException is raised.
    """
    nodes = tuple(tree)
    target = find_node(nodes, target_key)
    if target is None or target.level != PRIMARY_LEVEL:
        if strict:
            raise EntityNotFoundException("PrimaryPart", target_key)
        logger.debug(f"toggle_l6_status: no primary part '{target_key}', tree unchanged")
        return nodes

    return update_node(nodes, target_key, _toggle)


def _toggle(node: BOMNode) -> BOMNode:
    new_status = ItemStatus.ACTIVE if node.status is ItemStatus.INACTIVE else ItemStatus.INACTIVE
    children = tuple(_follow_parent(child, new_status) for child in node.children)
    return node.evolve(status=new_status, children=children)


def _follow_parent(child: BOMNode, parent_status: ItemStatus) -> BOMNode:
    if isinstance(child, SubstitutePart):
        return child.evolve(parent_status=parent_status, status=parent_status.inverse)
    return child.evolve(status=parent_status.inverse)
