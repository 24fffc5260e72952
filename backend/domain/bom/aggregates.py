"""
BOM Domain - Aggregates.

BOMDocument is the aggregate root that owns the current BOM tree of one
product and applies the tree operations to it.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional

from domain.catalog.repositories import PartCatalog
from domain.shared.base_aggregate import AggregateRoot
from domain.shared.events import (
    BOMImported,
    NodeAdded,
    NodeEdited,
    PartDeleted,
    PrimaryEdited,
    PrimaryReplaced,
    PrimaryStatusToggled,
    SubstituteDeleted,
)
from domain.shared.exceptions import BusinessRuleViolationException

from .authoring import NodeDraft, add_node, delete_part, edit_node
from .costing import total_cost
from .entities import BOMNode
from .status import toggle_l6_status
from .substitution import PrimaryEdit, delete_substitute, edit_changes, edit_l6, replace
from .tree import (
    FlatView,
    StructureReport,
    Tree,
    count_nodes,
    find_node,
    find_parent,
    flatten,
    normalize,
    validate_structure,
)


@dataclass(eq=False)
class BOMDocument(AggregateRoot):
    """
    Aggregate root for the BOM of one product.

    Every mutation swaps in a new immutable tree, refreshes the total cost
    and records a domain event. Calls that change nothing record nothing.

    Key responsibilities:
    - Serialize changes to the tree it owns
    - Reject changes while locked
    - Keep the total cost in step with the tree
    """

    product_name: str = ""
    strict: bool = False
    is_locked: bool = False

    _tree: Tree = field(default=(), repr=False)
    _total_cost: Decimal = field(default=Decimal("0"), repr=False)

    def __post_init__(self):
        self._tree = normalize(self._tree)
        self._total_cost = total_cost(self._tree)

    # =========================================================================
    # FACTORY METHODS
    # =========================================================================

    @classmethod
    def from_tree(
        cls,
        raw_tree: Iterable[Any],
        product_name: str = "",
        source: str = "snapshot",
        strict: bool = False,
    ) -> BOMDocument:
        """Build a document from raw node mappings or nodes."""
        document = cls(product_name=product_name, strict=strict, _tree=tuple(raw_tree))
        document.add_domain_event(BOMImported(
            document_id=document.id,
            source=source,
            node_count=document.node_count,
            total_cost=str(document.total_cost),
        ))
        return document

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def tree(self) -> Tree:
        return self._tree

    @property
    def total_cost(self) -> Decimal:
        return self._total_cost

    @property
    def node_count(self) -> int:
        return count_nodes(self._tree)

    def rows(self) -> FlatView:
        return flatten(self._tree)

    def node(self, key: str) -> Optional[BOMNode]:
        return find_node(self._tree, key)

    def validate(self) -> StructureReport:
        return validate_structure(self._tree)

    # =========================================================================
    # COMMANDS
    # =========================================================================

    def toggle_status(self, key: str) -> None:
        """Retire a primary part or put it back in use."""
        self._ensure_unlocked()
        updated = toggle_l6_status(self._tree, key, strict=self.strict)
        if updated is self._tree:
            return

        self._commit(updated)
        node = self.node(key)
        self.add_domain_event(PrimaryStatusToggled(
            document_id=self.id,
            key=key,
            title=node.title,
            new_status=node.status.value,
        ))

    def replace_primary(self, substitute_key: str) -> None:
        """Copy a substitute's part data onto its primary."""
        self._ensure_unlocked()
        substitute = self.node(substitute_key)
        primary = find_parent(self._tree, substitute_key)
        result = replace(self._tree, substitute_key, strict=self.strict)
        if not result.changed:
            return

        self._commit(result.tree, result.total_cost)
        self.add_domain_event(PrimaryReplaced(
            document_id=self.id,
            key=primary.key,
            substitute_key=substitute_key,
            old_part_id=primary.part_id,
            new_part_id=substitute.part_id,
            title=substitute.title,
        ))

    def delete_substitute(self, substitute_key: str) -> None:
        self._ensure_unlocked()
        substitute = self.node(substitute_key)
        parent = find_parent(self._tree, substitute_key)
        result = delete_substitute(self._tree, substitute_key, strict=self.strict)
        if not result.changed:
            return

        self._commit(result.tree, result.total_cost)
        self.add_domain_event(SubstituteDeleted(
            document_id=self.id,
            key=substitute_key,
            parent_key=parent.key,
            title=substitute.title,
        ))

    def edit_primary(self, key: str, fields: PrimaryEdit, catalog: PartCatalog) -> None:
        """Apply edit dialog values to a primary part."""
        self._ensure_unlocked()
        result = edit_l6(self._tree, key, fields, catalog, strict=self.strict)
        if not result.changed:
            return

        changes = edit_changes(fields, catalog.lookup(fields.part_id))
        self._commit(result.tree, result.total_cost)
        self.add_domain_event(PrimaryEdited(
            document_id=self.id,
            key=key,
            part_id=fields.part_id,
            changes={name: _plain(value) for name, value in changes.items()},
        ))

    def add_node(self, parent_key: Optional[str], draft: NodeDraft) -> Optional[str]:
        """Add a node under `parent_key` (a new unit when None); returns its key."""
        self._ensure_unlocked()
        result = add_node(self._tree, parent_key, draft, strict=self.strict)
        if not result.changed:
            return None

        self._commit(result.tree, result.total_cost)
        node = self.node(result.key)
        self.add_domain_event(NodeAdded(
            document_id=self.id,
            key=node.key,
            parent_key=parent_key or None,
            level=node.bom_level.value,
            title=node.title,
        ))
        return node.key

    def delete_part(self, key: str) -> None:
        """Delete an L6/L7 part line."""
        self._ensure_unlocked()
        node = self.node(key)
        parent = find_parent(self._tree, key)
        result = delete_part(self._tree, key, strict=self.strict)
        if not result.changed:
            return

        self._commit(result.tree, result.total_cost)
        self.add_domain_event(PartDeleted(
            document_id=self.id,
            key=key,
            parent_key=parent.key if parent is not None else None,
            level=node.bom_level.value,
            title=node.title,
        ))

    def edit_node(self, key: str, changes: Dict[str, Any]) -> None:
        self._ensure_unlocked()
        before = self.node(key)
        result = edit_node(self._tree, key, changes, strict=self.strict)
        if not result.changed:
            return

        self._commit(result.tree, result.total_cost)
        after = self.node(key)
        self.add_domain_event(NodeEdited(
            document_id=self.id,
            key=key,
            changes={
                name: _plain(getattr(after, name))
                for name in changes
                if getattr(after, name) != getattr(before, name)
            },
        ))

    def lock(self) -> None:
        """Lock the document to prevent modifications."""
        self.is_locked = True
        self.increment_version()

    def unlock(self) -> None:
        """Unlock the document to allow modifications."""
        self.is_locked = False
        self.increment_version()

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _ensure_unlocked(self) -> None:
        if self.is_locked:
            raise BusinessRuleViolationException(
                "BOM_LOCKED",
                "Cannot modify a locked BOM document"
            )

    def _commit(self, tree: Tree, cost: Optional[Decimal] = None) -> None:
        self._tree = tree
        self._total_cost = total_cost(tree) if cost is None else cost
        self.increment_version()


def _plain(value: Any) -> Any:
    """Event payloads carry strings for enums and decimals."""
    if hasattr(value, "value"):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    return value
