"""
Domain Events.

Domain events are records of significant business occurrences.
They are returned to callers so the UI can report what changed.
"""

from __future__ import annotations
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID, uuid4


@dataclass(frozen=True, kw_only=True)
class DomainEvent:
    """
    Base class for all domain events.
    
    Domain events are immutable records of something that happened in the domain.
    They are used for:
    - Reporting the effect of a user action back to the client
    - Triggering side effects (recalculations, exports)
    - Audit trail
    """
    
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    
    @property
    def event_type(self) -> str:
        """Get the event type name."""
        return self.__class__.__name__

    @property
    def summary(self) -> str:
        """Human readable one-line description."""
        return self.event_type

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["event_id"] = str(self.event_id)
        data["occurred_at"] = self.occurred_at.isoformat()
        data["document_id"] = str(data["document_id"])
        data["event_type"] = self.event_type
        data["summary"] = self.summary
        return data


# =============================================================================
# BOM EVENTS
# =============================================================================

@dataclass(frozen=True)
class BOMImported(DomainEvent):
    """Event raised when a tree is loaded into a document."""
    
    document_id: UUID
    source: str
    node_count: int
    total_cost: str

    @property
    def summary(self) -> str:
        return f"Loaded {self.node_count} BOM nodes from {self.source}"


@dataclass(frozen=True)
class PrimaryStatusToggled(DomainEvent):
    """Event raised when a primary part is retired or put back in use."""
    
    document_id: UUID
    key: str
    title: str
    new_status: str

    @property
    def summary(self) -> str:
        verb = "Enabled" if self.new_status == "Active" else "Deprecated"
        return f"{verb} part {self.title}"


@dataclass(frozen=True)
class PrimaryReplaced(DomainEvent):
    """Event raised when a substitute's data replaces its primary part."""
    
    document_id: UUID
    key: str
    substitute_key: str
    old_part_id: Optional[str]
    new_part_id: Optional[str]
    title: str

    @property
    def summary(self) -> str:
        return f"Replaced primary part with {self.title}, cost updated"


@dataclass(frozen=True)
class SubstituteDeleted(DomainEvent):
    """Event raised when a substitute part is removed."""
    
    document_id: UUID
    key: str
    parent_key: str
    title: str

    @property
    def summary(self) -> str:
        return f"Deleted substitute {self.title}"


@dataclass(frozen=True)
class PrimaryEdited(DomainEvent):
    """Event raised when primary part attributes are edited."""
    
    document_id: UUID
    key: str
    part_id: Optional[str]
    changes: Dict[str, Any] = field(default_factory=dict)

    @property
    def summary(self) -> str:
        return "Part updated, cost synchronised"


@dataclass(frozen=True)
class NodeAdded(DomainEvent):
    """Event raised when a node is added while building a BOM by hand."""
    
    document_id: UUID
    key: str
    parent_key: Optional[str]
    level: str
    title: str

    @property
    def summary(self) -> str:
        return f"Added {self.level} {self.title}"


@dataclass(frozen=True)
class PartDeleted(DomainEvent):
    """Event raised when a primary or substitute part line is deleted."""
    
    document_id: UUID
    key: str
    parent_key: Optional[str]
    level: str
    title: str

    @property
    def summary(self) -> str:
        return f"Deleted {self.level} part {self.title}"


@dataclass(frozen=True)
class NodeEdited(DomainEvent):
    """Event raised when general node fields are edited."""
    
    document_id: UUID
    key: str
    changes: Dict[str, Any] = field(default_factory=dict)

    @property
    def summary(self) -> str:
        return "Node information updated"
