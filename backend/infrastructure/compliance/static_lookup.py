"""
In-memory compliance lookup.

Verdicts are registered per part code. Unknown part codes pass.
"""

from __future__ import annotations
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

from domain.compliance.repositories import ComplianceLookup
from domain.shared.value_objects import Certification, ComplianceStatus


class StaticComplianceLookup(ComplianceLookup):
    """Lookup backed by a mapping of part code to missing certifications."""

    def __init__(self, missing_by_part: Optional[Mapping[str, Iterable[str]]] = None):
        self._missing: Dict[str, FrozenSet[Certification]] = {}
        for part_id, missing in (missing_by_part or {}).items():
            self.register(part_id, missing)

    def register(self, part_id: str, missing: Iterable[str]) -> None:
        """Record the certifications a part lacks; an empty set marks it failing."""
        self._missing[part_id] = frozenset(Certification(value) for value in missing)

    def verdict(
        self,
        part_id: Optional[str],
    ) -> Tuple[ComplianceStatus, FrozenSet[Certification]]:
        if part_id is None or part_id not in self._missing:
            return ComplianceStatus.PASS, frozenset()
        return ComplianceStatus.FAIL, self._missing[part_id]
