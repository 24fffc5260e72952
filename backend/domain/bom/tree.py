"""
BOM Domain - Tree operations.

Pure functions over immutable BOM trees. A tree is a tuple of level-0
nodes. Mutating helpers rebuild only the path from the root to the changed
node; every other subtree is shared with the input tree by identity.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field, fields as dataclass_fields
from decimal import Decimal, InvalidOperation
from typing import (
    Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Set, Tuple,
)

from domain.shared.value_objects import (
    ItemStatus,
    Lifecycle,
    PRIMARY_LEVEL,
    SUBSTITUTE_LEVEL,
)

from .entities import BOMNode, FlatRow, PrimaryPart, SubstitutePart, build_node

logger = logging.getLogger(__name__)

Tree = Tuple[BOMNode, ...]

KEY_SEPARATOR = "-"
PATH_SEPARATOR = " > "

# Wire (camelCase) names accepted in raw node mappings
_RAW_ALIASES = {
    "partId": "part_id",
    "parentStatus": "parent_status",
    "isAlternative": "is_alternative",
}


# =============================================================================
# CONSTRUCTION / NORMALIZATION
# =============================================================================

def normalize(raw_tree: Iterable[Any]) -> Tree:
    """
    Build a well-formed tree from raw node mappings or existing nodes.

    - levels are recomputed from position (roots are level 0)
    - keys are qualified with the parent key
    - primaries default to Active, substitutes to Inactive
    - substitute `parent_status` is re-derived from the parent
    - a primary keeps only its first substitute
    - nodes deeper than L7 are dropped

    Normalizing a normalized tree returns an equal tree.
    """
    return tuple(
        _normalize_node(item, level=0, parent_key="", parent_status=None, index=index)
        for index, item in enumerate(raw_tree)
    )


def _normalize_node(
    item: Any,
    level: int,
    parent_key: str,
    parent_status: Optional[ItemStatus],
    index: int,
) -> BOMNode:
    data = _node_data(item)

    key = _qualify_key(parent_key, str(data.get("key") or index))
    status = _parse_status(data.get("status"))
    if level == PRIMARY_LEVEL and status is None:
        status = ItemStatus.ACTIVE
    elif level == SUBSTITUTE_LEVEL and status is None:
        status = ItemStatus.INACTIVE

    raw_children = list(data.get("children") or [])
    if level >= SUBSTITUTE_LEVEL and raw_children:
        logger.warning(f"Dropping {len(raw_children)} node(s) below L7 under '{key}'")
        raw_children = []
    if level == PRIMARY_LEVEL and len(raw_children) > 1:
        logger.debug(f"Primary '{key}' has {len(raw_children)} substitutes, keeping the first")
        raw_children = raw_children[:1]

    children = tuple(
        _normalize_node(child, level + 1, key, status, child_index)
        for child_index, child in enumerate(raw_children)
    )

    return build_node(
        level,
        key,
        title=str(data.get("title") or ""),
        part_id=data.get("part_id") or None,
        position=data.get("position") or None,
        quantity=to_decimal(data.get("quantity")),
        unit=data.get("unit") or None,
        cost=to_decimal(data.get("cost")),
        supplier=data.get("supplier") or None,
        lifecycle=Lifecycle.parse(data.get("lifecycle")),
        status=status,
        parent_status=parent_status if level == SUBSTITUTE_LEVEL else None,
        children=children,
    )


def _node_data(item: Any) -> Dict[str, Any]:
    if isinstance(item, BOMNode):
        return {f.name: getattr(item, f.name) for f in dataclass_fields(item)}
    if isinstance(item, Mapping):
        return {_RAW_ALIASES.get(name, name): value for name, value in item.items()}
    raise TypeError(f"Cannot build a BOM node from {type(item).__name__}")


def _qualify_key(parent_key: str, key: str) -> str:
    if not parent_key or key.startswith(parent_key + KEY_SEPARATOR):
        return key
    return f"{parent_key}{KEY_SEPARATOR}{key}"


def _parse_status(value: Any) -> Optional[ItemStatus]:
    if isinstance(value, ItemStatus):
        return value
    if not value:
        return None
    text = str(value).strip().lower()
    for status in ItemStatus:
        if status.value.lower() == text:
            return status
    return None


def to_decimal(value: Any, default: Optional[Decimal] = None) -> Optional[Decimal]:
    """Convert a raw number to Decimal; unparseable or non-finite values give `default`."""
    if value is None or value == "":
        return default
    if isinstance(value, Decimal):
        number = value
    else:
        try:
            number = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return default
    return number if number.is_finite() else default


# =============================================================================
# NAVIGATION
# =============================================================================

def walk(tree: Iterable[BOMNode]) -> Iterator[BOMNode]:
    """Pre-order depth-first traversal."""
    for node in tree:
        yield node
        yield from walk(node.children)


def find_node(tree: Iterable[BOMNode], key: str) -> Optional[BOMNode]:
    for node in walk(tree):
        if node.key == key:
            return node
    return None


def find_parent(tree: Iterable[BOMNode], key: str) -> Optional[BOMNode]:
    """Return the direct parent of the node keyed `key`, if any."""
    for node in walk(tree):
        if any(child.key == key for child in node.children):
            return node
    return None


def primary_parts(tree: Iterable[BOMNode]) -> List[PrimaryPart]:
    """All L6 nodes in display order."""
    return [node for node in walk(tree) if isinstance(node, PrimaryPart)]


def count_nodes(tree: Iterable[BOMNode]) -> int:
    return sum(1 for _ in walk(tree))


# =============================================================================
# FLATTENING
# =============================================================================

class FlatView:
    """
    Display-ordered view of a tree.

    Iterating performs one full pre-order pass; the view can be iterated any
    number of times and always yields the same rows for the same tree.
    """

    def __init__(self, tree: Sequence[BOMNode]):
        self._tree = tuple(tree)

    def __iter__(self) -> Iterator[FlatRow]:
        return self._rows(self._tree, level=0, titles=(), parent_status=None)

    def _rows(
        self,
        nodes: Tuple[BOMNode, ...],
        level: int,
        titles: Tuple[str, ...],
        parent_status: Optional[ItemStatus],
    ) -> Iterator[FlatRow]:
        for node in nodes:
            path = titles + (node.title,)
            yield FlatRow(
                node=node,
                level=level,
                has_children=node.has_children,
                path=PATH_SEPARATOR.join(path),
                parent_status=parent_status if level == SUBSTITUTE_LEVEL else None,
            )
            if node.children:
                yield from self._rows(node.children, level + 1, path, node.status)

    def to_list(self) -> List[FlatRow]:
        return list(self)


def flatten(tree: Sequence[BOMNode]) -> FlatView:
    """Flatten a tree into display rows (pre-order, sibling order kept)."""
    return FlatView(tree)


# =============================================================================
# PERSISTENT UPDATES
# =============================================================================

def update_node(
    tree: Sequence[BOMNode],
    key: str,
    transform: Callable[[BOMNode], BOMNode],
) -> Tree:
    """
    Replace the node keyed `key` with `transform(node)`.

    Only the ancestors of the node are copied. When the key is absent the
    input tree is returned as is.
    """
    nodes = tuple(tree)
    updated = _update_in(nodes, key, transform)
    return nodes if updated is None else updated


def _update_in(
    nodes: Tuple[BOMNode, ...],
    key: str,
    transform: Callable[[BOMNode], BOMNode],
) -> Optional[Tuple[BOMNode, ...]]:
    for index, node in enumerate(nodes):
        if node.key == key:
            replacement = transform(node)
        elif node.children:
            children = _update_in(node.children, key, transform)
            if children is None:
                continue
            replacement = node.with_children(children)
        else:
            continue
        return nodes[:index] + (replacement,) + nodes[index + 1:]
    return None


def remove_node(tree: Sequence[BOMNode], key: str) -> Tree:
    """Remove the node keyed `key` together with its subtree."""
    nodes = tuple(tree)
    updated = _remove_in(nodes, key)
    return nodes if updated is None else updated


def _remove_in(nodes: Tuple[BOMNode, ...], key: str) -> Optional[Tuple[BOMNode, ...]]:
    for index, node in enumerate(nodes):
        if node.key == key:
            return nodes[:index] + nodes[index + 1:]
        if node.children:
            children = _remove_in(node.children, key)
            if children is not None:
                return nodes[:index] + (node.with_children(children),) + nodes[index + 1:]
    return None


# =============================================================================
# STRUCTURE CHECKS
# =============================================================================

@dataclass
class StructureReport:
    """Result of `validate_structure`."""

    node_count: int = 0
    has_active_primary: bool = False
    level_violations: List[str] = field(default_factory=list)
    excess_substitutes: List[str] = field(default_factory=list)
    parent_status_mismatches: List[str] = field(default_factory=list)
    duplicate_keys: List[str] = field(default_factory=list)
    position_conflicts: List[Dict[str, str]] = field(default_factory=list)

    @property
    def errors(self) -> List[str]:
        errors = []
        if not self.has_active_primary:
            errors.append("The BOM must contain at least one active L6 primary part")
        if self.level_violations:
            errors.append(f"{len(self.level_violations)} node(s) are not one level below their parent")
        if self.excess_substitutes:
            errors.append(f"{len(self.excess_substitutes)} primary part(s) have more than one substitute")
        if self.parent_status_mismatches:
            errors.append(f"{len(self.parent_status_mismatches)} substitute(s) disagree with their primary's status")
        if self.duplicate_keys:
            errors.append(f"{len(self.duplicate_keys)} duplicate node key(s)")
        if self.position_conflicts:
            errors.append(f"{len(self.position_conflicts)} position conflict(s)")
        return errors

    @property
    def is_valid(self) -> bool:
        return not self.errors


def validate_structure(tree: Sequence[BOMNode]) -> StructureReport:
    """Check a tree against the level, substitute and status invariants."""
    report = StructureReport()
    seen_keys: Set[str] = set()
    seen_positions: Set[str] = set()

    def visit(node: BOMNode, expected_level: int, parent: Optional[BOMNode]) -> None:
        report.node_count += 1

        if node.level != expected_level or type(node) is not _expected_type(expected_level):
            report.level_violations.append(node.key)

        if node.key in seen_keys:
            report.duplicate_keys.append(node.key)
        seen_keys.add(node.key)

        if node.position:
            if node.position in seen_positions:
                report.position_conflicts.append({"title": node.title, "position": node.position})
            seen_positions.add(node.position)

        if isinstance(node, PrimaryPart):
            if node.is_active:
                report.has_active_primary = True
            if len(node.children) > 1:
                report.excess_substitutes.append(node.key)

        if isinstance(node, SubstitutePart) and parent is not None:
            if node.parent_status is not parent.status:
                report.parent_status_mismatches.append(node.key)

        for child in node.children:
            visit(child, expected_level + 1, node)

    for root in tree:
        visit(root, 0, None)

    return report


def _expected_type(level: int) -> type:
    if level == PRIMARY_LEVEL:
        return PrimaryPart
    if level == SUBSTITUTE_LEVEL:
        return SubstitutePart
    return BOMNode
