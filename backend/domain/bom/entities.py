"""
BOM Domain - Entities.

BOMNode represents a single item of the 7-level BOM tree. Nodes are
immutable: every edit produces a new node, and a new tree reachable from new
root nodes, while untouched subtrees are shared between the old and new tree.

The primary (L6) and substitute (L7) levels get their own node types because
their `status` fields mean opposite things:
- PrimaryPart: Active means the part is in use, Inactive means retired.
- SubstitutePart: Active means the substitute is in effect, Inactive means
  it is on standby. Its `parent_status` mirrors the owning primary.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Optional, Tuple

from domain.shared.value_objects import (
    BOMLevel,
    ItemStatus,
    Lifecycle,
    PrimaryUsage,
    SubstituteUsage,
    PRIMARY_LEVEL,
    SUBSTITUTE_LEVEL,
    part_category,
)


@dataclass(frozen=True)
class BOMNode:
    """
    A node of the BOM tree.

    Assembly levels (L1..L5) only use key/level/title/children; the part
    attributes are meaningful on L6/L7 nodes.
    """

    key: str
    level: int
    title: str = ""

    # Part data
    part_id: Optional[str] = None
    position: Optional[str] = None
    quantity: Optional[Decimal] = None
    unit: Optional[str] = None
    cost: Optional[Decimal] = None
    supplier: Optional[str] = None
    lifecycle: Optional[Lifecycle] = None
    status: Optional[ItemStatus] = None

    children: Tuple[BOMNode, ...] = ()

    @property
    def bom_level(self) -> BOMLevel:
        return BOMLevel.from_index(self.level)

    @property
    def level_name(self) -> str:
        return self.bom_level.label

    @property
    def has_children(self) -> bool:
        return len(self.children) > 0

    @property
    def is_part(self) -> bool:
        """Check if this node carries part data (L6/L7)."""
        return self.level >= PRIMARY_LEVEL

    @property
    def is_primary(self) -> bool:
        return False

    @property
    def is_substitute(self) -> bool:
        return False

    @property
    def is_alternative(self) -> bool:
        """Rendering marker; the level is authoritative."""
        return self.is_substitute

    @property
    def is_active(self) -> bool:
        return self.status is ItemStatus.ACTIVE

    @property
    def category(self) -> str:
        """Part category derived from the part code prefix."""
        return part_category(self.part_id)

    @property
    def line_cost(self) -> Decimal:
        """Cost of the line regardless of status: cost x quantity."""
        cost = self.cost if self.cost is not None else Decimal("0")
        quantity = self.quantity if self.quantity is not None else Decimal("1")
        return cost * quantity

    def evolve(self, **changes) -> BOMNode:
        """Return a copy of the node with the given fields replaced."""
        return replace(self, **changes)

    def with_children(self, children: Tuple[BOMNode, ...]) -> BOMNode:
        return replace(self, children=tuple(children))

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} key={self.key!r} level={self.bom_level.value}>"


@dataclass(frozen=True, repr=False)
class PrimaryPart(BOMNode):
    """L6: the part currently specified for production at a position."""

    @property
    def is_primary(self) -> bool:
        return True

    @property
    def usage(self) -> PrimaryUsage:
        if self.status is ItemStatus.INACTIVE:
            return PrimaryUsage.RETIRED
        return PrimaryUsage.IN_USE

    @property
    def in_use(self) -> bool:
        return self.usage is PrimaryUsage.IN_USE

    @property
    def substitute(self) -> Optional[SubstitutePart]:
        """The single substitute of this position, if any."""
        for child in self.children:
            if isinstance(child, SubstitutePart):
                return child
        return None


@dataclass(frozen=True, repr=False)
class SubstitutePart(BOMNode):
    """L7: an approved alternate for an L6 position."""

    # Copy of the owning primary's status, never authored independently
    parent_status: Optional[ItemStatus] = None

    @property
    def is_substitute(self) -> bool:
        return True

    @property
    def usage(self) -> SubstituteUsage:
        if self.status is ItemStatus.ACTIVE:
            return SubstituteUsage.EFFECTIVE
        return SubstituteUsage.STANDBY

    @property
    def effective(self) -> bool:
        return self.usage is SubstituteUsage.EFFECTIVE

    @property
    def interactable(self) -> bool:
        """A standby substitute under an in-use primary is struck through."""
        return not (
            self.status is ItemStatus.INACTIVE
            and self.parent_status is ItemStatus.ACTIVE
        )


def node_class_for_level(level: int) -> type:
    if level == PRIMARY_LEVEL:
        return PrimaryPart
    if level == SUBSTITUTE_LEVEL:
        return SubstitutePart
    return BOMNode


def build_node(level: int, key: str, **fields) -> BOMNode:
    """
    Construct a node of the type matching its level.

    `parent_status` is accepted for every level but only kept on
    substitutes.
    """
    BOMLevel.from_index(level)
    node_class = node_class_for_level(level)
    parent_status = fields.pop("parent_status", None)
    if node_class is SubstitutePart:
        fields["parent_status"] = parent_status
    return node_class(key=key, level=level, **fields)


@dataclass(frozen=True)
class FlatRow:
    """
    One row of the flattened (display-ordered) tree.

    `parent_status` is the status of the owning primary for substitute rows,
    taken from the walk rather than from the node's stored copy.
    """

    node: BOMNode
    level: int
    has_children: bool
    path: str
    parent_status: Optional[ItemStatus] = None

    @property
    def key(self) -> str:
        return self.node.key

    @property
    def level_name(self) -> str:
        return BOMLevel.from_index(self.level).label

    @property
    def level_color(self) -> str:
        return BOMLevel.from_index(self.level).color

    @property
    def interactable(self) -> bool:
        if self.level != SUBSTITUTE_LEVEL:
            return True
        return not (
            self.node.status is ItemStatus.INACTIVE
            and self.parent_status is ItemStatus.ACTIVE
        )
