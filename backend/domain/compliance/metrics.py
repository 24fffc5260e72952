"""
Compliance Domain - Metrics.

Tabulates pass/fail verdicts of primary parts into an overall compliance
rate and one rate per certification.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence

from domain.bom.entities import BOMNode
from domain.bom.tree import primary_parts
from domain.shared.value_objects import (
    Certification,
    ComplianceStatus,
    OverallComplianceStatus,
)

from .entities import ComplianceCheck
from .repositories import ComplianceLookup

logger = logging.getLogger(__name__)


class RateBand(str, Enum):
    """Display band of a certification rate."""
    
    SUCCESS = "success"
    WARNING = "warning"
    EXCEPTION = "exception"
    
    @classmethod
    def for_rate(cls, rate: float) -> RateBand:
        if rate >= 90:
            return cls.SUCCESS
        if rate >= 70:
            return cls.WARNING
        return cls.EXCEPTION


@dataclass(frozen=True)
class CertificationRate:
    certification: Certification
    rate: float
    cited_by: int  # Failing parts that lack this certification
    
    @property
    def band(self) -> RateBand:
        return RateBand.for_rate(self.rate)


@dataclass(frozen=True)
class NonCompliantPart:
    key: str
    part_id: Optional[str]
    title: str
    missing: List[Certification] = field(default_factory=list)


@dataclass
class ComplianceReport:
    total_checked: int
    non_compliant_count: int
    compliance_rate: float
    certification_rates: Dict[Certification, float]
    overall_status: OverallComplianceStatus
    non_compliant_parts: List[NonCompliantPart] = field(default_factory=list)
    certifications: List[CertificationRate] = field(default_factory=list)
    
    def rate_for(self, certification: Certification) -> float:
        return self.certification_rates[certification]


def _rate(passing: int, total: int) -> float:
    if total == 0:
        return 0.0
    return passing * 100 / total


def compute_compliance(checks: Sequence[ComplianceCheck]) -> ComplianceReport:
    """
    Aggregate primary part verdicts.
    
    A certification nobody cites as missing falls back to the overall
    compliance rate.
    """
    total = len(checks)
    failing = [check for check in checks if check.failed]
    compliance_rate = _rate(total - len(failing), total)
    
    rates: Dict[Certification, float] = {}
    details: List[CertificationRate] = []
    for certification in Certification:
        cited_by = sum(1 for check in failing if check.cites(certification))
        rate = _rate(total - cited_by, total) if cited_by else compliance_rate
        rates[certification] = rate
        details.append(CertificationRate(certification, rate, cited_by))
    
    report = ComplianceReport(
        total_checked=total,
        non_compliant_count=len(failing),
        compliance_rate=compliance_rate,
        certification_rates=rates,
        overall_status=(
            OverallComplianceStatus.WARNING if failing else OverallComplianceStatus.PASS
        ),
        non_compliant_parts=[
            NonCompliantPart(
                key=check.key,
                part_id=check.part_id,
                title=check.title,
                missing=[c for c in Certification if c in check.missing],
            )
            for check in failing
        ],
        certifications=details,
    )
    logger.debug(
        f"Compliance: {total} checked, {len(failing)} failing, rate {compliance_rate:.1f}%"
    )
    return report


def checks_from_tree(tree: Sequence[BOMNode], lookup: ComplianceLookup) -> List[ComplianceCheck]:
    """One check per primary part of the tree, verdicts from `lookup`."""
    checks = []
    for node in primary_parts(tree):
        status, missing = lookup.verdict(node.part_id)
        checks.append(ComplianceCheck.for_node(node, status, missing))
    return checks
