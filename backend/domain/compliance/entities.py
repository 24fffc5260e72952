"""
Compliance Domain - Entities.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional

from domain.bom.entities import BOMNode
from domain.shared.value_objects import Certification, ComplianceStatus


@dataclass(frozen=True)
class ComplianceCheck:
    """
    Compliance verdict of one BOM line (one primary part).
    
    `missing` lists the certifications the part lacks; it is only
    meaningful when the status is FAIL.
    """
    
    key: str
    status: ComplianceStatus
    part_id: Optional[str] = None
    title: str = ""
    missing: FrozenSet[Certification] = field(default_factory=frozenset)
    
    @property
    def failed(self) -> bool:
        return self.status is ComplianceStatus.FAIL
    
    def cites(self, certification: Certification) -> bool:
        """Check if the part fails because `certification` is missing."""
        return self.failed and certification in self.missing
    
    @classmethod
    def for_node(
        cls,
        node: BOMNode,
        status: ComplianceStatus,
        missing: Iterable[Certification] = (),
    ) -> ComplianceCheck:
        return cls(
            key=node.key,
            status=status,
            part_id=node.part_id,
            title=node.title,
            missing=frozenset(missing) if status is ComplianceStatus.FAIL else frozenset(),
        )
