"""
Compliance Domain - Repository Interfaces (Ports).
"""

from abc import ABC, abstractmethod
from typing import FrozenSet, Optional, Tuple

from domain.shared.value_objects import Certification, ComplianceStatus


class ComplianceLookup(ABC):
    """Source of per-part compliance verdicts."""
    
    @abstractmethod
    def verdict(
        self,
        part_id: Optional[str],
    ) -> Tuple[ComplianceStatus, FrozenSet[Certification]]:
        """Get the verdict and missing certifications of a part code."""
        pass
