"""
Shared Value Objects used across multiple domains.

Value Objects are immutable objects that describe characteristics of a thing.
Two value objects are equal if all their properties are equal.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional


# =============================================================================
# ENUMERATIONS
# =============================================================================

class BOMLevel(str, Enum):
    """
    The seven hierarchy levels of a BOM.

    Levels are addressed two ways: by marker ("L1".."L7") in files and
    user-facing text, and by zero-based index (0..6) inside the tree.
    """

    L1 = "L1"    # Finished unit
    L2 = "L2"    # Module
    L3 = "L3"    # Sub-module
    L4 = "L4"    # Family
    L5 = "L5"    # Group
    L6 = "L6"    # Primary part
    L7 = "L7"    # Substitute part

    @property
    def index(self) -> int:
        """Zero-based tree level (L1 -> 0)."""
        return int(self.value[1:]) - 1

    @property
    def label(self) -> str:
        return _LEVEL_LABELS[self]

    @property
    def color(self) -> str:
        """Tag colour used when rendering the level."""
        return _LEVEL_COLORS[self]

    @property
    def is_part(self) -> bool:
        """Check if nodes at this level carry part data (L6/L7)."""
        return self in (BOMLevel.L6, BOMLevel.L7)

    @classmethod
    def from_index(cls, index: int) -> BOMLevel:
        if not 0 <= index <= 6:
            raise ValueError(f"BOM level index out of range: {index}")
        return cls(f"L{index + 1}")

    @classmethod
    def parse(cls, marker: object) -> Optional[BOMLevel]:
        """Parse an "L<n>" marker; returns None when it is not one."""
        if not isinstance(marker, str):
            return None
        text = marker.strip().upper()
        try:
            return cls(text)
        except ValueError:
            return None


_LEVEL_LABELS = {
    BOMLevel.L1: "Unit",
    BOMLevel.L2: "Module",
    BOMLevel.L3: "Sub-module",
    BOMLevel.L4: "Family",
    BOMLevel.L5: "Group",
    BOMLevel.L6: "Primary",
    BOMLevel.L7: "Substitute",
}

_LEVEL_COLORS = {
    BOMLevel.L1: "red",
    BOMLevel.L2: "orange",
    BOMLevel.L3: "gold",
    BOMLevel.L4: "green",
    BOMLevel.L5: "blue",
    BOMLevel.L6: "purple",
    BOMLevel.L7: "cyan",
}

PRIMARY_LEVEL = BOMLevel.L6.index
SUBSTITUTE_LEVEL = BOMLevel.L7.index


class ItemStatus(str, Enum):
    """Status of a part line."""

    ACTIVE = "Active"
    INACTIVE = "Inactive"

    @property
    def inverse(self) -> ItemStatus:
        """Opposite status, used across the primary -> substitute edge."""
        if self is ItemStatus.ACTIVE:
            return ItemStatus.INACTIVE
        return ItemStatus.ACTIVE


class PrimaryUsage(str, Enum):
    """What a primary part's status means."""

    IN_USE = "InUse"
    RETIRED = "Retired"


class SubstituteUsage(str, Enum):
    """What a substitute part's status means."""

    EFFECTIVE = "Effective"
    STANDBY = "Standby"


class Lifecycle(str, Enum):
    """Lifecycle phase of a part."""

    MASS_PRODUCTION = "MassProduction"
    DISCONTINUED = "Discontinued"
    RND = "R&D"
    PHASE_OUT = "PhaseOut"

    @classmethod
    def parse(cls, value: object) -> Optional[Lifecycle]:
        """Tolerant parse; unknown values yield None."""
        if isinstance(value, Lifecycle):
            return value
        if not value:
            return None
        try:
            return cls(str(value).strip())
        except ValueError:
            return None


class ComplianceStatus(str, Enum):
    """Compliance verdict for a part."""

    PASS = "Pass"
    FAIL = "Fail"


class Certification(str, Enum):
    """Certifications a primary part is checked against."""

    ROHS = "RoHS"
    CE = "CE"
    FCC = "FCC"
    ENERGY_STAR = "EnergyStar"

    @property
    def rate_key(self) -> str:
        """Key of this certification in serialized rate maps."""
        return {
            Certification.ROHS: "rohs",
            Certification.CE: "ce",
            Certification.FCC: "fcc",
            Certification.ENERGY_STAR: "energyStar",
        }[self]


class OverallComplianceStatus(str, Enum):
    """Overall verdict of a compliance report."""

    PASS = "Pass"
    WARNING = "Warning"


# =============================================================================
# VALUE OBJECTS
# =============================================================================

@dataclass(frozen=True)
class PartNumber:
    """
    Value object representing a material/part code.

    The segment before the first '-' is the part category; two parts are
    interchangeable only when their categories match.

    Example: CPU-1260P (category CPU)
    """

    value: str = ""

    @property
    def category(self) -> str:
        if not self.value:
            return ""
        return self.value.split("-", 1)[0]

    def __bool__(self) -> bool:
        return bool(self.value)

    def __str__(self) -> str:
        return self.value


def part_category(part_id: Optional[str]) -> str:
    """Category of a raw part code ("" when absent)."""
    return PartNumber(part_id or "").category
