"""
Catalog Domain - Entities.

Read-only records served by the part catalog.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple

from domain.bom.entities import BOMNode
from domain.shared.value_objects import BOMLevel, Lifecycle, part_category


@dataclass(frozen=True)
class PartInfo:
    """
    Canonical data of a part code, as found in a product template.
    """
    
    part_id: str
    title: str
    cost: Optional[Decimal] = None
    unit: Optional[str] = None
    supplier: Optional[str] = None
    lifecycle: Optional[Lifecycle] = None
    level: BOMLevel = BOMLevel.L6
    product: Optional[str] = None  # Template the part was found in
    
    @property
    def category(self) -> str:
        return part_category(self.part_id)
    
    @classmethod
    def from_node(cls, node: BOMNode, product: Optional[str] = None) -> PartInfo:
        return cls(
            part_id=node.part_id or "",
            title=node.title,
            cost=node.cost,
            unit=node.unit,
            supplier=node.supplier,
            lifecycle=node.lifecycle,
            level=node.bom_level,
            product=product,
        )


@dataclass(frozen=True)
class ProductTemplate:
    """
    A product's reference BOM.
    
    `structure` is a normalized tree.
    """
    
    name: str
    structure: Tuple[BOMNode, ...]
    description: str = ""
    version: str = ""
    last_updated: Optional[str] = None
